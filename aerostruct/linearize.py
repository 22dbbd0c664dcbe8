"""
Linearization and modal analysis of models in mass-matrix form.

Provides tools for:
- Linearizing dynamics around operating points
- Modal analysis of the generalized eigenproblem ``A v = lambda M v``
- Parameter sweeps of the eigenvalues (e.g. flutter boundaries over ``U``)

Works with any primitive or coupled model.
"""

import numpy as np
from scipy import linalg

__all__ = ["linearize", "analyze_modes", "parameter_sweep"]


def linearize(model, x, y, p, t=0.0):
    """
    Linearize a model around an operating point.

    Parameters
    ----------
    model : Model
        Primitive or coupled model.
    x, y, p : array_like
        State, input and parameter vectors at the operating point.
    t : float
        Time.

    Returns
    -------
    M : np.ndarray
        Mass matrix (n_x × n_x).
    A : np.ndarray
        State matrix (n_x × n_x), jacobian of the rate with respect to x.
    B : np.ndarray
        Input matrix (n_x × n_u), jacobian of the rate with respect to y.

    Notes
    -----
    Computes the linearization:
        M·δẋ = A·δx + B·δy
    """
    x = np.array(x, dtype=float).flatten()
    y = np.array(y, dtype=float).flatten()
    p = np.array(p, dtype=float).flatten()

    M = np.asarray(model.mass_matrix(x, y, p, t), dtype=float)
    A = np.asarray(model.state_jacobian(x, y, p, t), dtype=float)
    B = np.asarray(model.input_jacobian(x, y, p, t), dtype=float)
    return M, A, B


def _eig(A, M=None):
    if M is None:
        eigvals, eigvecs = linalg.eig(A)
    else:
        eigvals, eigvecs = linalg.eig(A, M)
    # a singular mass matrix gives infinite eigenvalues for its algebraic rows
    finite = np.isfinite(eigvals)
    return eigvals[finite], eigvecs[:, finite]


def _sorted_eig(A, M=None):
    eigvals, eigvecs = _eig(A, M)
    order = np.lexsort((eigvals.real, eigvals.imag))
    return eigvals[order], eigvecs[:, order]


def _mode(lam, vec, state_names=None):
    sigma = lam.real if abs(lam.real) > 1e-9 else 0.0
    omega_d = abs(lam.imag) if abs(lam.imag) > 1e-6 else 0.0
    omega_n = abs(lam)
    mode = {
        "eigenvalue": lam,
        "real": lam.real,
        "imag": lam.imag,
        "eigenvector": vec,
        "natural_frequency": omega_n,
        "damping_ratio": -sigma / omega_n if sigma else 0.0,
        "time_constant": 1.0 / abs(sigma) if sigma else np.inf,
        "frequency_hz": omega_d / (2 * np.pi),
        "period": 2 * np.pi / omega_d if omega_d else np.inf,
        "is_oscillatory": omega_d > 0.0,
        "stable": lam.real < 0,
    }
    if state_names is not None:
        magnitude = np.abs(vec)
        dominant = np.argsort(magnitude)[::-1][:3]
        mode["dominant_states"] = [(state_names[i], magnitude[i]) for i in dominant]
    return mode


def analyze_modes(A, M=None, state_names=None):
    """
    Modes of the linearized system ``M·δẋ = A·δx``.

    Parameters
    ----------
    A : np.ndarray
        State matrix.
    M : np.ndarray, optional
        Mass matrix. If provided, the generalized eigenproblem is solved and
        infinite eigenvalues (from singular rows of M) are discarded.
    state_names : list of str, optional
        Names of state variables for identifying dominant states in each mode.

    Returns
    -------
    modes : list of dict
        One dict per real eigenvalue or conjugate pair, ordered like the
        eigenvalues of :func:`parameter_sweep`, with keys:
        - eigenvalue, real, imag, eigenvector
        - natural_frequency: ``|lambda|`` in rad/s
        - damping_ratio: ``-sigma / |lambda|``
        - time_constant: ``1/|sigma|`` (inf without decay)
        - frequency_hz, period: damped oscillation (0 and inf for real modes)
        - is_oscillatory, stable
        - dominant_states: three largest (state_name, magnitude) pairs, if
          state_names is provided
    """
    eigvals, eigvecs = _sorted_eig(A, M)
    # one mode per conjugate pair: the member with positive imaginary part
    keep = eigvals.imag >= -1e-6
    return [_mode(lam, vec, state_names) for lam, vec in zip(eigvals[keep], eigvecs.T[keep])]


def parameter_sweep(model, x, y, p, name, values, t=0.0):
    """
    Eigenvalues of the linearized model for each value of one parameter.

    Parameters
    ----------
    model : Model
        Primitive or coupled model.
    x, y, p : array_like
        Operating point; ``p[name]`` is replaced by each entry of ``values``.
    name : str
        Parameter name, e.g. ``"U"`` for a flutter sweep.
    values : array_like
        Parameter values.

    Returns
    -------
    list of np.ndarray
        Finite eigenvalues for each value, sorted by imaginary then real part.

    Raises
    ------
    ValueError
        If ``name`` is not a parameter of the model or is not unique.
    """
    names = list(model.parameter_names)
    if names.count(name) != 1:
        raise ValueError(f"Parameter '{name}' must appear exactly once in {names}")
    index = names.index(name)

    p = np.array(p, dtype=float).flatten()
    sweep = []
    for value in values:
        p_i = p.copy()
        p_i[index] = value
        M, A, _ = linearize(model, x, y, p_i, t)
        sweep.append(_sorted_eig(A, M)[0])
    return sweep
