"""Static trait classification of models and couplings.

Traits describe the structure of a model's functions, never their values:
whether the rate function writes in place, how its mass matrix and jacobians
vary, and whether the rates depend linearly on the inputs. They are used to
pick cheaper evaluation paths and to classify coupled models without
evaluating anything.

Matrix classes form a partial order by generality:

    EMPTY ⊑ ZEROS, IDENTITY ⊑ CONSTANT ⊑ VARYING

Unknown model kinds always receive the most conservative classification.
"""

from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType

from beartype.typing import Hashable, Mapping, Optional

__all__ = [
    "InPlaceness",
    "MatrixType",
    "InputDependence",
    "ModelTraits",
    "CouplingTraits",
    "CONSERVATIVE",
    "STATELESS",
    "precedes",
    "matrix_join",
    "TraitRegistry",
]


class InPlaceness(Enum):
    """Whether a function writes its result into a caller-supplied buffer."""

    IN_PLACE = auto()
    OUT_OF_PLACE = auto()

    @property
    def is_inplace(self) -> bool:
        return self is InPlaceness.IN_PLACE


class MatrixType(Enum):
    """Structural class of a matrix-valued model function."""

    EMPTY = auto()  # no rows or no columns
    ZEROS = auto()  # filled with zeros
    IDENTITY = auto()  # identity matrix
    CONSTANT = auto()  # constant with respect to time (may depend on parameters)
    VARYING = auto()  # may vary with state, input or time

    @property
    def is_empty(self) -> bool:
        return self is MatrixType.EMPTY

    @property
    def is_zero(self) -> bool:
        return self is MatrixType.ZEROS

    @property
    def is_identity(self) -> bool:
        return self is MatrixType.IDENTITY

    @property
    def is_constant(self) -> bool:
        return self is not MatrixType.VARYING

    @property
    def vanishes(self) -> bool:
        """True if the matrix contributes nothing to a sum."""
        return self in (MatrixType.EMPTY, MatrixType.ZEROS)


class InputDependence(Enum):
    """Whether the rate function is linear in its inputs."""

    LINEAR = auto()
    NONLINEAR = auto()

    @property
    def is_linear(self) -> bool:
        return self is InputDependence.LINEAR


_RANK = {
    MatrixType.EMPTY: 0,
    MatrixType.ZEROS: 1,
    MatrixType.IDENTITY: 1,
    MatrixType.CONSTANT: 2,
    MatrixType.VARYING: 3,
}


def precedes(a: MatrixType, b: MatrixType) -> bool:
    """Partial order on matrix classes: True if ``a ⊑ b``.

    ZEROS and IDENTITY are incomparable.
    """
    if a is b:
        return True
    return _RANK[a] < _RANK[b]


def matrix_join(*types: MatrixType) -> MatrixType:
    """Least upper bound of matrix classes.

    EMPTY is the neutral element, so ``matrix_join()`` is EMPTY. Mixing ZEROS
    and IDENTITY widens to CONSTANT.

    Example:
        >>> matrix_join(MatrixType.IDENTITY, MatrixType.EMPTY)
        <MatrixType.IDENTITY: 3>
        >>> matrix_join(MatrixType.ZEROS, MatrixType.IDENTITY)
        <MatrixType.CONSTANT: 4>
    """
    present = {t for t in types if t is not MatrixType.EMPTY}
    if not present:
        return MatrixType.EMPTY
    if MatrixType.VARYING in present:
        return MatrixType.VARYING
    if len(present) == 1:
        return present.pop()
    return MatrixType.CONSTANT


@dataclass(frozen=True)
class ModelTraits:
    """Trait set of a model kind."""

    inplaceness: InPlaceness = InPlaceness.OUT_OF_PLACE
    mass_matrix: MatrixType = MatrixType.VARYING
    state_jacobian: MatrixType = MatrixType.VARYING
    input_jacobian: MatrixType = MatrixType.VARYING
    input_dependence: InputDependence = InputDependence.NONLINEAR

    @property
    def is_inplace(self) -> bool:
        return self.inplaceness.is_inplace


@dataclass(frozen=True)
class CouplingTraits:
    """Trait set of a coupling function.

    The jacobians are those of the coupling output (the concatenated
    component inputs) with respect to the composite state rate, the composite
    state, the external inputs and the parameters.

    Undeclared classes default to VARYING: a coupling that states nothing
    is treated as rate dependent.
    """

    inplaceness: InPlaceness = InPlaceness.OUT_OF_PLACE
    rate_jacobian: MatrixType = MatrixType.VARYING
    state_jacobian: MatrixType = MatrixType.VARYING
    input_jacobian: MatrixType = MatrixType.VARYING
    parameter_jacobian: MatrixType = MatrixType.VARYING
    input_dependence: InputDependence = InputDependence.NONLINEAR

    @property
    def is_inplace(self) -> bool:
        return self.inplaceness.is_inplace

    @property
    def rate_dependent(self) -> bool:
        return not self.rate_jacobian.vanishes


CONSERVATIVE = ModelTraits()

STATELESS = ModelTraits(
    inplaceness=InPlaceness.OUT_OF_PLACE,
    mass_matrix=MatrixType.EMPTY,
    state_jacobian=MatrixType.EMPTY,
    input_jacobian=MatrixType.EMPTY,
    input_dependence=InputDependence.LINEAR,
)


class TraitRegistry:
    """Immutable table of model traits keyed by model kind.

    Registries are built once, explicitly, and handed to the combiner.
    Extending a registry returns a new one; a kind can be registered only
    once.
    """

    def __init__(self, entries: Optional[Mapping[Hashable, ModelTraits]] = None):
        self._entries = MappingProxyType(dict(entries or {}))

    def __contains__(self, kind) -> bool:
        return kind in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self):
        return f"TraitRegistry({len(self._entries)} kinds)"

    @property
    def entries(self) -> Mapping[Hashable, ModelTraits]:
        """Read-only view of the registered traits."""
        return self._entries

    def extend(self, entries: Mapping[Hashable, ModelTraits]) -> "TraitRegistry":
        """Return a new registry with additional kinds.

        Raises:
            ValueError: if a kind is already registered
        """
        duplicate = [kind for kind in entries if kind in self._entries]
        if duplicate:
            raise ValueError(f"Traits already registered for kind(s) {duplicate!r}")
        merged = dict(self._entries)
        merged.update(entries)
        return TraitRegistry(merged)

    def lookup(self, kind) -> ModelTraits:
        """Traits registered for ``kind``, or CONSERVATIVE if unknown."""
        return self._entries.get(kind, CONSERVATIVE)

    def traits_of(self, model) -> ModelTraits:
        """Traits of a model instance.

        Coupled models carry traits derived at construction time. Primitive
        models use their registered kind. Unregistered models without states
        have empty matrices by shape; everything else is CONSERVATIVE.
        """
        derived = model.derived_traits
        if derived is not None:
            return derived
        if model.kind is not None and model.kind in self:
            return self.lookup(model.kind)
        if model.state_count == 0:
            return ModelTraits(
                mass_matrix=MatrixType.EMPTY,
                state_jacobian=MatrixType.EMPTY,
                input_jacobian=MatrixType.EMPTY,
            )
        return CONSERVATIVE
