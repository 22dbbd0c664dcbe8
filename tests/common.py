"""Toy models and couplings shared by the test modules."""

import numpy as np

from aerostruct import (
    Coupling,
    CouplingTraits,
    InPlaceness,
    InputDependence,
    MatrixType,
    Model,
    ModelCombiner,
    ModelTraits,
    default_coupling_registry,
    default_trait_registry,
    input_var,
    param,
    state,
)


class Integrator(Model):
    """dx/dt = u"""

    kind = "toy_integrator"
    state_vars = (state("x"),)
    input_vars = (input_var("u"),)

    def rate(self, x, y, p, t):
        return np.array([y[0]])

    def state_jacobian(self, x, y, p, t):
        return np.zeros((1, 1))

    def input_jacobian(self, x, y, p, t):
        return np.eye(1)


class InPlaceIntegrator(Integrator):
    """Integrator that writes its rate in place."""

    kind = "toy_inplace_integrator"

    def rate_into(self, out, x, y, p, t):
        out[0] = y[0]


class Drag(Model):
    """dv/dt = -c v |v| + u^2, nonlinear in its input."""

    kind = "toy_drag"
    state_vars = (state("v"),)
    input_vars = (input_var("u"),)
    parameter_vars = (param("c", 0.5),)

    def rate(self, x, y, p, t):
        return np.array([-p[0] * x[0] * abs(x[0]) + y[0] ** 2])


class Unregistered(Model):
    """Model with states whose kind has no registered traits."""

    kind = "toy_unregistered"
    state_vars = (state("z"), state("zdot"))

    def rate(self, x, y, p, t):
        return np.array([x[1], -x[0]])


class RateFeedback(Coupling):
    """u0 = x1 + c * dx1 and u1 = x0 for two integrators."""

    kinds = ("toy_integrator", "toy_integrator")
    state_counts = (1, 1)
    input_counts = (1, 1)
    parameter_counts = (0, 0)
    extra_parameter_vars = (param("c", 0.25),)
    rate_dependent_components = (0,)
    traits = CouplingTraits(
        rate_jacobian=MatrixType.CONSTANT,
        state_jacobian=MatrixType.CONSTANT,
        input_jacobian=MatrixType.EMPTY,
        parameter_jacobian=MatrixType.VARYING,
        input_dependence=InputDependence.LINEAR,
    )

    def inputs(self, dx, x, y, p, t):
        return np.array([x[1] + p[0] * dx[1], x[0]])

    def rate_jacobian(self, x, y, p, t):
        return np.array([[0.0, p[0]], [0.0, 0.0]])


class InPlaceFeedback(Coupling):
    """u0 = -x1 and u1 = x0, written in place only."""

    kinds = ("toy_inplace_integrator", "toy_integrator")
    traits = CouplingTraits(
        inplaceness=InPlaceness.IN_PLACE,
        rate_jacobian=MatrixType.ZEROS,
        state_jacobian=MatrixType.CONSTANT,
        input_jacobian=MatrixType.EMPTY,
        parameter_jacobian=MatrixType.ZEROS,
        input_dependence=InputDependence.LINEAR,
    )

    def inputs_into(self, out, dx, x, y, p, t):
        out[0] = -x[1]
        out[1] = x[0]


class DragFeedback(Coupling):
    """u = x_integrator + dx_integrator feeding a model nonlinear in its input."""

    kinds = ("toy_drag", "toy_integrator")
    rate_dependent_components = (0,)
    traits = CouplingTraits(
        rate_jacobian=MatrixType.CONSTANT,
        state_jacobian=MatrixType.CONSTANT,
        parameter_jacobian=MatrixType.ZEROS,
    )

    def inputs(self, dx, x, y, p, t):
        return np.array([x[1] + dx[1], -x[0]])


class UndeclaredForcing(Coupling):
    """u0 = x1 + f and u1 = x0 + dx0, with no declared traits."""

    kinds = ("toy_integrator", "toy_inplace_integrator")
    external_input_vars = (input_var("f"),)

    def inputs(self, dx, x, y, p, t):
        return np.array([x[1] + y[0], x[0] + dx[0]])


class BadArity(Coupling):
    """Declares four states for a model that has two."""

    kinds = (("quasisteady", 0), "toy_unregistered")
    state_counts = (0, 4)

    def inputs(self, dx, x, y, p, t):
        return np.zeros(0)


TOY_TRAITS = {
    "toy_integrator": ModelTraits(
        inplaceness=InPlaceness.OUT_OF_PLACE,
        mass_matrix=MatrixType.IDENTITY,
        state_jacobian=MatrixType.ZEROS,
        input_jacobian=MatrixType.IDENTITY,
        input_dependence=InputDependence.LINEAR,
    ),
    "toy_inplace_integrator": ModelTraits(
        inplaceness=InPlaceness.IN_PLACE,
        mass_matrix=MatrixType.IDENTITY,
        state_jacobian=MatrixType.ZEROS,
        input_jacobian=MatrixType.IDENTITY,
        input_dependence=InputDependence.LINEAR,
    ),
    "toy_drag": ModelTraits(
        inplaceness=InPlaceness.OUT_OF_PLACE,
        mass_matrix=MatrixType.IDENTITY,
        state_jacobian=MatrixType.VARYING,
        input_jacobian=MatrixType.VARYING,
        input_dependence=InputDependence.NONLINEAR,
    ),
}


def toy_combiner() -> ModelCombiner:
    """Combiner over the default registries plus the toy models."""
    traits = default_trait_registry().extend(TOY_TRAITS)
    couplings = default_coupling_registry().extend(
        {
            c.kinds: c
            for c in (RateFeedback, InPlaceFeedback, DragFeedback, UndeclaredForcing, BadArity)
        }
    )
    return ModelCombiner(traits, couplings)
