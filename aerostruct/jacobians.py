"""Numerical differentiation used when a model or coupling has no analytic jacobian."""

import numpy as np

__all__ = ["finite_difference"]

DEFAULT_STEP = 1e-6


def finite_difference(fn, x, step: float = DEFAULT_STEP) -> np.ndarray:
    """Central-difference jacobian of ``fn`` at ``x``.

    Parameters
    ----------
    fn : callable
        Vector function of a single flat vector argument.
    x : array_like
        Point of evaluation.
    step : float
        Relative perturbation; each column uses ``step * max(1, |x_j|)``.

    Returns
    -------
    np.ndarray
        Jacobian with shape (len(fn(x)), len(x)).
    """
    x = np.array(x, dtype=float).reshape(-1)
    f0 = np.asarray(fn(x), dtype=float).reshape(-1)
    jac = np.zeros((f0.size, x.size))
    for j in range(x.size):
        h = step * max(1.0, abs(x[j]))
        xp = x.copy()
        xm = x.copy()
        xp[j] += h
        xm[j] -= h
        fp = np.asarray(fn(xp), dtype=float).reshape(-1)
        fm = np.asarray(fn(xm), dtype=float).reshape(-1)
        jac[:, j] = (fp - fm) / (2.0 * h)
    return jac
