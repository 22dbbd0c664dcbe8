"""Coupling functions: the physical interface between component models.

A coupling is defined for an ordered tuple of model kinds. Given the
composite state rate ``dx``, the composite state ``x``, the composite
external inputs ``y``, the composite parameters ``p`` and time ``t`` it
returns the inputs of every component, concatenated in component order.
The composite parameter vector ends with the coupling's extra parameters
(quantities such as freestream velocity or air density that only make sense
once the models are joined).

A coupling whose inputs depend on ``dx`` is rate dependent. The dependence
must be affine in ``dx``; the combiner moves it into the composite mass
matrix.
"""

from abc import ABC
from dataclasses import replace
from types import MappingProxyType

from beartype.typing import Mapping, Optional
import numpy as np

from .errors import UnsupportedCoupling
from .jacobians import finite_difference
from .traits import CouplingTraits, InputDependence, MatrixType

__all__ = [
    "Coupling",
    "IdentityCoupling",
    "CouplingRegistry",
]


class Coupling(ABC):
    """Abstract coupling between an ordered tuple of models.

    Subclasses declare:
        kinds: ordered tuple of the model kinds they couple
        state_counts, input_counts, parameter_counts: expected arity of each
            component (``None`` entries are not checked)
        extra_parameter_vars: parameters appended to the composite vector
        external_input_vars: inputs of the composite model
        rate_dependent_components: indices of the components whose inputs
            depend on the state rate (defaults to every component with inputs)
        traits: CouplingTraits (every matrix class VARYING when omitted)

    and implement ``inputs`` or ``inputs_into``; the other one is derived.
    """

    kinds: tuple = ()
    state_counts: Optional[tuple] = None
    input_counts: Optional[tuple] = None
    parameter_counts: Optional[tuple] = None
    extra_parameter_vars: tuple = ()
    external_input_vars: tuple = ()
    rate_dependent_components: Optional[tuple] = None
    traits: CouplingTraits = CouplingTraits()

    def __init__(self, *models):
        self.models = tuple(models)
        # no external inputs: the input jacobian has zero columns
        if self.external_input_count == 0 and not self.traits.input_jacobian.is_empty:
            self.traits = replace(self.traits, input_jacobian=MatrixType.EMPTY)

    def __repr__(self):
        return f"{type(self).__name__}{self.kinds!r}"

    @property
    def extra_parameter_count(self) -> int:
        return len(self.extra_parameter_vars)

    @property
    def external_input_count(self) -> int:
        return len(self.external_input_vars)

    @property
    def rate_dependent(self) -> bool:
        return self.traits.rate_dependent

    @property
    def rate_receivers(self) -> tuple:
        """Indices of the components whose inputs depend on the state rate."""
        if not self.rate_dependent:
            return ()
        if self.rate_dependent_components is not None:
            return tuple(self.rate_dependent_components)
        return tuple(i for i, m in enumerate(self.models) if m.input_count > 0)

    @property
    def _output_count(self) -> int:
        return sum(m.input_count for m in self.models)

    # --- coupling function ---

    def inputs(self, dx, x, y, p, t) -> np.ndarray:
        """Concatenated inputs of every component."""
        if type(self).inputs_into is Coupling.inputs_into:
            raise NotImplementedError(
                f"{type(self).__name__} implements neither inputs nor inputs_into"
            )
        out = np.zeros(self._output_count)
        self.inputs_into(out, dx, x, y, p, t)
        return out

    def inputs_into(self, out, dx, x, y, p, t) -> None:
        """Write the concatenated component inputs into ``out``."""
        if type(self).inputs is Coupling.inputs:
            raise NotImplementedError(
                f"{type(self).__name__} implements neither inputs nor inputs_into"
            )
        out[:] = self.inputs(dx, x, y, p, t)

    # --- jacobians of the coupling output ---

    def rate_jacobian(self, x, y, p, t) -> np.ndarray:
        """Jacobian of the inputs with respect to the composite state rate."""
        n = np.asarray(x).size
        if not self.rate_dependent:
            return np.zeros((self._output_count, n))
        return finite_difference(lambda dxi: self.inputs(dxi, x, y, p, t), np.zeros(n)).reshape(
            self._output_count, n
        )

    def state_jacobian(self, x, y, p, t) -> np.ndarray:
        """Jacobian of the rate-independent inputs with respect to the composite state."""
        n = np.asarray(x).size
        dx = np.zeros(n)
        return finite_difference(lambda xi: self.inputs(dx, xi, y, p, t), x).reshape(
            self._output_count, n
        )

    def input_jacobian(self, x, y, p, t) -> np.ndarray:
        """Jacobian of the inputs with respect to the composite external inputs."""
        dx = np.zeros(np.asarray(x).size)
        return finite_difference(lambda yi: self.inputs(dx, x, yi, p, t), y).reshape(
            self._output_count, self.external_input_count
        )

    def parameter_jacobian(self, x, y, p, t) -> np.ndarray:
        """Jacobian of the rate-independent inputs with respect to the composite parameters."""
        n = np.asarray(p).size
        if self.traits.parameter_jacobian.vanishes:
            return np.zeros((self._output_count, n))
        dx = np.zeros(np.asarray(x).size)
        return finite_difference(lambda pi: self.inputs(dx, x, y, pi, t), p).reshape(
            self._output_count, n
        )


class IdentityCoupling(Coupling):
    """Coupling of a single model with itself: external inputs pass through.

    The composite of one model under this coupling evaluates exactly like
    the model.
    """

    traits = CouplingTraits(
        rate_jacobian=MatrixType.ZEROS,
        state_jacobian=MatrixType.ZEROS,
        input_jacobian=MatrixType.IDENTITY,
        parameter_jacobian=MatrixType.ZEROS,
        input_dependence=InputDependence.LINEAR,
    )

    def __init__(self, model):
        super().__init__(model)
        self.kinds = (model.kind,)
        self.state_counts = (model.state_count,)
        self.input_counts = (model.input_count,)
        self.parameter_counts = (model.parameter_count,)
        self.external_input_vars = tuple(model.input_vars)
        self.traits = replace(
            type(self).traits,
            input_jacobian=MatrixType.IDENTITY if model.input_count else MatrixType.EMPTY,
        )

    def inputs(self, dx, x, y, p, t) -> np.ndarray:
        return np.array(y, dtype=float).reshape(-1)

    def state_jacobian(self, x, y, p, t) -> np.ndarray:
        return np.zeros((self.external_input_count, np.asarray(x).size))

    def input_jacobian(self, x, y, p, t) -> np.ndarray:
        return np.eye(self.external_input_count)


class CouplingRegistry:
    """Immutable table of coupling classes keyed by ordered model kinds.

    A single model without a registered coupling is composed with
    :class:`IdentityCoupling`; any other unregistered combination raises
    :class:`UnsupportedCoupling`.
    """

    def __init__(self, entries: Optional[Mapping[tuple, type]] = None):
        self._entries = MappingProxyType(dict(entries or {}))

    @classmethod
    def from_couplings(cls, couplings) -> "CouplingRegistry":
        """Build a registry from coupling classes, keyed by their ``kinds``."""
        return cls().extend({c.kinds: c for c in couplings})

    def __contains__(self, kinds) -> bool:
        return tuple(kinds) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self):
        return f"CouplingRegistry({len(self._entries)} couplings)"

    @property
    def entries(self) -> Mapping[tuple, type]:
        return self._entries

    def extend(self, entries: Mapping[tuple, type]) -> "CouplingRegistry":
        """Return a new registry with additional couplings.

        Raises:
            ValueError: if a kinds tuple is already registered
        """
        duplicate = [kinds for kinds in entries if kinds in self._entries]
        if duplicate:
            raise ValueError(f"Coupling already registered for {duplicate!r}")
        merged = dict(self._entries)
        merged.update(entries)
        return CouplingRegistry(merged)

    def lookup(self, models) -> Coupling:
        """Instantiate the coupling registered for ``models``.

        Raises:
            UnsupportedCoupling: if no coupling is registered for the kinds
        """
        models = tuple(models)
        kinds = tuple(m.kind for m in models)
        coupling_cls = self._entries.get(kinds)
        if coupling_cls is not None:
            return coupling_cls(*models)
        if len(models) == 1:
            return IdentityCoupling(models[0])
        raise UnsupportedCoupling(kinds)
