"""Base classes for primitive models.

A model describes first-order dynamics in mass-matrix form

    M(x, y, p, t) · dx/dt = f(x, y, p, t)

with states ``x``, inputs ``y``, parameters ``p`` and time ``t``. The model
never stores state: every vector is supplied per call, so one instance can
take part in any number of coupled models at once.

A model implements either ``rate`` (returns a new vector) or ``rate_into``
(writes into a caller-supplied buffer); the other one is derived. Which one
is the fast path is recorded in the model's traits.

Example:
    class Oscillator(Model):
        kind = "oscillator"
        state_vars = (state("x"), state("v"))
        input_vars = (input_var("F"),)
        parameter_vars = (param("m", 1.0), param("k", 1.0))

        def rate(self, x, y, p, t):
            return np.array([x[1], y[0] - p[1] * x[0]])

        def mass_matrix(self, x, y, p, t):
            return np.diag([1.0, p[0]])
"""

from abc import ABC

from beartype.typing import Hashable, Optional
import numpy as np

from .fields import names_of, vector_of
from .jacobians import finite_difference

__all__ = [
    "Model",
    "NoStateModel",
]


class Model(ABC):
    """Abstract model with rate, mass matrix and jacobian functions."""

    # key into the trait and coupling registries; None means unregistered
    kind: Optional[Hashable] = None

    state_vars: tuple = ()
    input_vars: tuple = ()
    parameter_vars: tuple = ()

    def __repr__(self):
        return f"{type(self).__name__}(kind={self.kind!r})"

    # --- shape ---

    @property
    def state_count(self) -> int:
        return len(self.state_vars)

    @property
    def input_count(self) -> int:
        return len(self.input_vars)

    @property
    def parameter_count(self) -> int:
        return len(self.parameter_vars)

    @property
    def state_names(self) -> tuple:
        return names_of(self.state_vars)

    @property
    def input_names(self) -> tuple:
        return names_of(self.input_vars)

    @property
    def parameter_names(self) -> tuple:
        return names_of(self.parameter_vars)

    @property
    def derived_traits(self):
        """Traits derived at construction time (coupled models only)."""
        return None

    # --- rate function ---

    def rate(self, x, y, p, t) -> np.ndarray:
        """Right-hand side ``f(x, y, p, t)``."""
        if type(self).rate_into is Model.rate_into:
            raise NotImplementedError(f"{type(self).__name__} implements neither rate nor rate_into")
        out = np.zeros(self.state_count)
        self.rate_into(out, x, y, p, t)
        return out

    def rate_into(self, out, x, y, p, t) -> None:
        """Write ``f(x, y, p, t)`` into ``out``."""
        if type(self).rate is Model.rate:
            raise NotImplementedError(f"{type(self).__name__} implements neither rate nor rate_into")
        out[:] = self.rate(x, y, p, t)

    # --- mass matrix ---

    def mass_matrix(self, x, y, p, t) -> np.ndarray:
        """Mass matrix; identity by default, 0x0 for models without states."""
        if type(self).mass_matrix_into is not Model.mass_matrix_into:
            out = np.zeros((self.state_count, self.state_count))
            self.mass_matrix_into(out, x, y, p, t)
            return out
        return np.eye(self.state_count)

    def mass_matrix_into(self, out, x, y, p, t) -> None:
        """Write the mass matrix into ``out``."""
        out[:, :] = self.mass_matrix(x, y, p, t)

    # --- jacobians ---

    def state_jacobian(self, x, y, p, t) -> np.ndarray:
        """Jacobian of the rate with respect to the states.

        Falls back to central finite differences; models with analytic
        jacobians override this.
        """
        y = np.asarray(y, dtype=float)
        return finite_difference(lambda xi: self.rate(xi, y, p, t), x).reshape(
            self.state_count, self.state_count
        )

    def input_jacobian(self, x, y, p, t) -> np.ndarray:
        """Jacobian of the rate with respect to the inputs."""
        x = np.asarray(x, dtype=float)
        return finite_difference(lambda yi: self.rate(x, yi, p, t), y).reshape(
            self.state_count, self.input_count
        )

    def parameter_jacobian(self, x, y, p, t) -> np.ndarray:
        """Jacobian of the rate with respect to the parameters."""
        x, y = np.asarray(x, dtype=float), np.asarray(y, dtype=float)
        return finite_difference(lambda pi: self.rate(x, y, pi, t), p).reshape(
            self.state_count, self.parameter_count
        )

    # --- configuration ---

    def default_states(self, **overrides) -> np.ndarray:
        """State vector from declared defaults, with keyword overrides."""
        return vector_of(self.state_vars, overrides)

    def default_inputs(self, **overrides) -> np.ndarray:
        """Input vector from declared defaults, with keyword overrides."""
        return vector_of(self.input_vars, overrides)

    def default_parameters(self, **overrides) -> np.ndarray:
        """Parameter vector from declared defaults, with keyword overrides.

        Example:
            >>> TypicalSection().default_parameters(kh=2.0)  # doctest: +SKIP
        """
        return vector_of(self.parameter_vars, overrides)

    # --- named views ---

    def separate_states(self, x) -> dict:
        """Map state names to values."""
        return dict(zip(self.state_names, np.asarray(x).reshape(-1)))

    def separate_inputs(self, y) -> dict:
        """Map input names to values."""
        return dict(zip(self.input_names, np.asarray(y).reshape(-1)))

    def separate_parameters(self, p) -> dict:
        """Map parameter names to values."""
        return dict(zip(self.parameter_names, np.asarray(p).reshape(-1)))


class NoStateModel(Model):
    """Model without states.

    It contributes algebraic relations only: a coupling reads its parameters
    to compute the inputs of the models it is combined with.
    """

    state_vars = ()
    input_vars = ()

    def rate(self, x, y, p, t) -> np.ndarray:
        return np.zeros(0)

    def mass_matrix(self, x, y, p, t) -> np.ndarray:
        return np.zeros((0, 0))

    def state_jacobian(self, x, y, p, t) -> np.ndarray:
        return np.zeros((0, 0))

    def input_jacobian(self, x, y, p, t) -> np.ndarray:
        return np.zeros((0, self.input_count))

    def parameter_jacobian(self, x, y, p, t) -> np.ndarray:
        return np.zeros((0, self.parameter_count))
