"""Derivation of coupled-model traits from component and coupling traits.

Every rule is monotone: a composite is never classified narrower than any
of its contributions. No numeric evaluation takes place.
"""

from beartype.typing import Sequence

from .traits import (
    CouplingTraits,
    InPlaceness,
    InputDependence,
    MatrixType,
    ModelTraits,
    matrix_join,
)

__all__ = ["combine_traits"]


def _coupled_block(coupling_class: MatrixType, receivers: Sequence[ModelTraits]) -> MatrixType:
    # B_i · G products never stay zero, identity or empty once G is non-trivial
    return matrix_join(
        MatrixType.CONSTANT, coupling_class, *(r.input_jacobian for r in receivers)
    )


def combine_traits(
    components: Sequence[ModelTraits],
    coupling: CouplingTraits,
    rate_receivers: Sequence[int] = (),
) -> ModelTraits:
    """Traits of the model obtained by coupling ``components``.

    Args:
        components: traits of each component, in composition order
        coupling: traits of the coupling function
        rate_receivers: indices of the components whose inputs depend on
            the state rate

    Returns:
        ModelTraits of the composite

    Rules:
        - in-place if any component or the coupling is in-place
        - mass matrix: join of the component classes; a rate-dependent
          coupling adds a constant-or-wider block
        - state jacobian: join of the component classes; a non-vanishing
          coupling state jacobian adds a constant-or-wider block
        - input jacobian: follows the coupling's external-input jacobian
        - linear in the inputs only if the coupling and every component are
    """
    components = tuple(components)

    if coupling.is_inplace or any(c.is_inplace for c in components):
        inplaceness = InPlaceness.IN_PLACE
    else:
        inplaceness = InPlaceness.OUT_OF_PLACE

    mass_matrix = matrix_join(*(c.mass_matrix for c in components))
    if coupling.rate_dependent:
        receivers = [components[i] for i in rate_receivers]
        mass_matrix = matrix_join(mass_matrix, _coupled_block(coupling.rate_jacobian, receivers))

    state_jacobian = matrix_join(*(c.state_jacobian for c in components))
    if not coupling.state_jacobian.vanishes:
        state_jacobian = matrix_join(
            state_jacobian, _coupled_block(coupling.state_jacobian, components)
        )

    if coupling.input_jacobian.vanishes:
        input_jacobian = coupling.input_jacobian
    elif coupling.input_jacobian.is_identity:
        input_jacobian = matrix_join(*(c.input_jacobian for c in components))
    else:
        input_jacobian = _coupled_block(coupling.input_jacobian, components)

    # no component has states: every matrix has zero rows, so EMPTY wins
    # even over a rate-dependent coupling
    if all(c.mass_matrix.is_empty for c in components):
        mass_matrix = state_jacobian = input_jacobian = MatrixType.EMPTY

    linear = coupling.input_dependence.is_linear and all(
        c.input_dependence.is_linear for c in components
    )

    return ModelTraits(
        inplaceness=inplaceness,
        mass_matrix=mass_matrix,
        state_jacobian=state_jacobian,
        input_jacobian=input_jacobian,
        input_dependence=InputDependence.LINEAR if linear else InputDependence.NONLINEAR,
    )
