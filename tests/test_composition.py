"""Tests for the model combiner and coupled models."""

import warnings

import numpy as np
import pytest

from aerostruct import (
    ConstructionError,
    Coupling,
    CoupledModel,
    InputDependence,
    MatrixType,
    ModelCombiner,
    NoStateModel,
    QuasiSteady,
    RigidBody,
    ShapeMismatch,
    SimpleFlap,
    Steady,
    TraitRegistry,
    TypicalSection,
    UnsupportedCoupling,
    Wagner,
    couple_models,
    default_coupling_registry,
)
from aerostruct.couplings import SteadySection
from aerostruct.jacobians import finite_difference

from .common import (
    BadArity,
    Drag,
    InPlaceIntegrator,
    Integrator,
    Unregistered,
    toy_combiner,
)


def steady_section():
    aero, stru = Steady(), TypicalSection()
    model = couple_models(aero, stru)
    p = model.pack_parameters(
        aero.default_parameters(a0=2 * np.pi, alpha0=0.0),
        stru.default_parameters(a=-0.5, b=0.5, kh=1.0, ktheta=1.0, m=1.0, S_theta=0.0, I_theta=1.0),
        U=10.0,
        rho=1.2,
    )
    return model, p


def test_steady_section_lift():
    """Steady lift on a typical section enters the plunge equation exactly."""
    model, p = steady_section()
    assert model.state_count == 4
    assert model.input_count == 0
    assert model.parameter_count == 11

    x = np.array([0.0, 0.1, 0.0, 0.0])
    rate = model.rate(x, np.zeros(0), p, 0.0)

    a0, rho, b, U, theta = 2 * np.pi, 1.2, 0.5, 10.0, 0.1
    L = a0 * rho * b * U * (U * theta)
    M = (b / 2 + -0.5 * b) * L
    assert rate[0] == 0.0
    assert rate[1] == 0.0
    assert rate[2] == -1.0 * 0.0 - L
    assert rate[3] == -1.0 * theta + M

    inputs = model.coupling_inputs(np.zeros(4), x, np.zeros(0), p, 0.0)
    assert inputs[0] == L


def test_steady_section_traits():
    model, _ = steady_section()
    assert model.traits.mass_matrix is MatrixType.CONSTANT
    assert model.traits.state_jacobian is MatrixType.CONSTANT
    assert model.traits.input_jacobian is MatrixType.EMPTY
    assert model.traits.input_dependence is InputDependence.LINEAR
    assert not model.traits.is_inplace
    assert model.kind == (("quasisteady", 0), "typical_section")


def test_composite_layout():
    model, p = steady_section()
    aero_p, stru_p, extra = model.split_parameters(p)
    assert aero_p.shape == (2,)
    assert stru_p.shape == (7,)
    np.testing.assert_allclose(extra, [10.0, 1.2])

    named = model.separate_parameters(p)
    assert named[0]["a0"] == pytest.approx(2 * np.pi)
    assert named[1]["b"] == 0.5
    assert named[2] == {"U": 10.0, "rho": 1.2}
    assert model.parameter_names[-2:] == ("U", "rho")
    assert model.state_names == ("h", "theta", "hdot", "thetadot")

    x = model.pack_states(np.zeros(0), [1.0, 2.0, 3.0, 4.0])
    aero_x, stru_x = model.split_states(x)
    assert aero_x.size == 0
    assert model.separate_states(x)[1]["thetadot"] == 4.0


def test_default_parameters_by_name():
    model, _ = steady_section()
    p = model.default_parameters(U=25.0)
    assert p[model.parameter_names.index("U")] == 25.0
    assert p[model.parameter_names.index("rho")] == 1.225
    with pytest.raises(ValueError):
        model.default_parameters(unknown=1.0)
    with pytest.raises(ValueError):
        model.pack_parameters(np.zeros(2), np.zeros(7), mach=0.3)


def test_stateless_composite():
    class Coefficients(NoStateModel):
        kind = "coefficients"

    class CoefficientCoupling(SteadySection):
        kinds = (("quasisteady", 0), "coefficients")
        state_counts = None
        input_counts = None
        parameter_counts = None

        def inputs(self, dx, x, y, p, t):
            return np.zeros(0)

    combiner = ModelCombiner(
        TraitRegistry(),
        default_coupling_registry().extend({CoefficientCoupling.kinds: CoefficientCoupling}),
    )
    model = combiner.couple(Steady(), Coefficients())
    assert model.state_count == 0
    assert model.traits.mass_matrix is MatrixType.EMPTY
    assert model.traits.state_jacobian is MatrixType.EMPTY
    assert model.mass_matrix([], [], model.default_parameters(), 0.0).shape == (0, 0)
    assert model.rate([], [], model.default_parameters(), 0.0).shape == (0,)


def test_identity_composition_is_bitwise_equal():
    stru = TypicalSection()
    model = couple_models(stru)
    assert isinstance(model, CoupledModel)
    x = np.array([0.1, -0.2, 0.3, 0.4])
    y = np.array([1.5, -0.25])
    p = stru.default_parameters(kh=3.0, m=2.0, S_theta=0.1)
    assert np.array_equal(model.rate(x, y, p, 0.0), stru.rate(x, y, p, 0.0))
    assert np.array_equal(model.mass_matrix(x, y, p, 0.0), stru.mass_matrix(x, y, p, 0.0))
    assert np.array_equal(model.state_jacobian(x, y, p, 0.0), stru.state_jacobian(x, y, p, 0.0))
    assert np.array_equal(model.input_jacobian(x, y, p, 0.0), stru.input_jacobian(x, y, p, 0.0))
    assert model.traits.input_jacobian is MatrixType.CONSTANT


def test_identity_composition_of_inplace_model():
    body = RigidBody()
    model = couple_models(body)
    assert model.traits.is_inplace
    x = body.default_states(u=10.0, q=0.1)
    y = body.default_inputs(Fx=1.0, Mz=0.5, Ixz=0.1)
    assert np.array_equal(model.rate(x, y, [], 0.0), body.rate(x, y, [], 0.0))


def test_unsupported_coupling():
    with pytest.raises(UnsupportedCoupling) as info:
        couple_models(TypicalSection(), Steady())
    assert info.value.kinds == ("typical_section", ("quasisteady", 0))
    assert isinstance(info.value, ConstructionError)


def test_no_models():
    with pytest.raises(ConstructionError):
        couple_models()


def test_shape_mismatch():
    with pytest.raises(ShapeMismatch) as info:
        toy_combiner().couple(Steady(), Unregistered())
    assert info.value.what == "states"
    assert info.value.index == 1
    assert info.value.expected == 4
    assert info.value.actual == 2


def test_rate_coupling_block_is_negative_rate_jacobian():
    """With identity input jacobians the off-diagonal block is exactly -G_r."""
    model = toy_combiner().couple(Integrator(), Integrator())
    p = model.default_parameters(c=0.75)
    x = np.array([0.3, -0.1])
    M = model.mass_matrix(x, [], p, 0.0)
    G_r = model.coupling.rate_jacobian(x, [], p, 0.0)
    np.testing.assert_array_equal(M, np.eye(2) - G_r)
    assert M[0, 1] == -0.75
    assert model.traits.mass_matrix not in (MatrixType.IDENTITY, MatrixType.EMPTY, MatrixType.ZEROS)


def test_rate_dependent_section_mass_matrix():
    model = couple_models(QuasiSteady(2), TypicalSection())
    assert model.coupling.rate_dependent
    assert model.traits.mass_matrix is MatrixType.CONSTANT
    p = model.default_parameters(U=5.0)
    x = np.zeros(4)
    M = model.mass_matrix(x, [], p, 0.0)
    stru_M = TypicalSection().mass_matrix(x[0:4], [], p[2:9], 0.0)
    assert not np.allclose(M, stru_M)
    # apparent mass adds to the structural mass matrix
    assert M[2, 2] > stru_M[2, 2]


def test_residual_matches_mass_matrix_form():
    model = couple_models(QuasiSteady(2), TypicalSection())
    p = model.default_parameters(U=12.0, rho=1.1)
    x = np.array([0.01, 0.05, -0.2, 0.3])
    dx = np.array([0.4, -0.3, 1.2, -0.7])
    expected = model.mass_matrix(x, [], p, 0.0) @ dx - model.rate(x, [], p, 0.0)
    np.testing.assert_allclose(model.residual(dx, x, [], p, 0.0), expected, rtol=1e-12, atol=1e-12)


def test_residual_vanishes_at_solution():
    model = couple_models(Wagner(), TypicalSection())
    p = model.default_parameters(U=8.0)
    x = np.array([0.01, -0.02, 0.05, 0.1, 0.2, -0.1])
    M = model.mass_matrix(x, [], p, 0.0)
    dx = np.linalg.solve(M, model.rate(x, [], p, 0.0))
    np.testing.assert_allclose(model.residual(dx, x, [], p, 0.0), 0.0, atol=1e-10)


def test_nonlinear_receiver_warns():
    combiner = toy_combiner()
    with pytest.warns(RuntimeWarning, match="nonlinear"):
        combiner.couple(Drag(), Integrator())


def test_linear_receiver_does_not_warn():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        couple_models(QuasiSteady(2), TypicalSection())
        couple_models(Wagner(), TypicalSection())


def test_inplace_components_and_coupling():
    model = toy_combiner().couple(InPlaceIntegrator(), Integrator())
    assert model.traits.is_inplace
    x = np.array([2.0, 3.0])
    np.testing.assert_array_equal(model.rate(x, [], [], 0.0), [-3.0, 2.0])
    out = np.full(2, np.nan)
    model.rate_into(out, x, [], [], 0.0)
    np.testing.assert_array_equal(out, [-3.0, 2.0])
    # the out-of-place form is derived from inputs_into
    np.testing.assert_array_equal(model.coupling.inputs(None, x, [], [], 0.0), [-3.0, 2.0])


def test_jacobian_sparsity_matches_finite_differences():
    """Entries the analytic jacobian declares zero are zero numerically too."""
    for aero in (Steady(), QuasiSteady(1), QuasiSteady(2), Wagner()):
        model = couple_models(aero, TypicalSection())
        p = model.default_parameters(U=15.0)
        x = np.linspace(0.05, 0.3, model.state_count)
        J = model.state_jacobian(x, [], p, 0.0)
        J_fd = finite_difference(lambda xi: model.rate(xi, [], p, 0.0), x)
        np.testing.assert_allclose(J, J_fd, rtol=1e-6, atol=1e-6)
        assert np.all(np.abs(J_fd[J == 0.0]) < 1e-6)


def test_flap_input_jacobian():
    model = couple_models(Steady(), SimpleFlap(), TypicalSection())
    assert model.input_names == ("delta",)
    assert model.traits.input_jacobian is MatrixType.CONSTANT
    p = model.default_parameters(U=20.0, cld=np.pi, cmd=-0.5)
    x = np.zeros(4)
    B = model.input_jacobian(x, [0.0], p, 0.0)
    B_fd = finite_difference(lambda yi: model.rate(x, yi, p, 0.0), [0.0])
    np.testing.assert_allclose(B, B_fd, rtol=1e-6, atol=1e-8)
    assert B.shape == (4, 1)


def test_nested_composites():
    inner = couple_models(Steady(), TypicalSection())
    outer = couple_models(inner)
    assert outer.kind == (inner.kind,)
    assert outer.traits == inner.traits
    p = inner.default_parameters(U=10.0)
    x = np.array([0.0, 0.1, 0.0, 0.0])
    np.testing.assert_array_equal(outer.rate(x, [], p, 0.0), inner.rate(x, [], p, 0.0))


def test_shared_instances():
    stru = TypicalSection()
    first = couple_models(Steady(), stru)
    second = couple_models(QuasiSteady(1), stru)
    p1 = first.default_parameters(U=10.0)
    p2 = second.default_parameters(U=30.0)
    x = np.array([0.0, 0.1, 0.0, 0.0])
    r1 = first.rate(x, [], p1, 0.0)
    second.rate(x, [], p2, 0.0)
    np.testing.assert_array_equal(first.rate(x, [], p1, 0.0), r1)


def test_reordered_times_are_reproducible():
    model = couple_models(Wagner(), TypicalSection())
    p = model.default_parameters(U=10.0)
    x = np.array([0.01, 0.02, 0.0, 0.1, 0.0, 0.0])
    times = [0.0, 1.0, 0.5, 2.0]
    forward = [model.rate(x, [], p, t) for t in times]
    backward = [model.rate(x, [], p, t) for t in reversed(times)]
    for a, b in zip(forward, reversed(backward)):
        np.testing.assert_array_equal(a, b)


def test_nan_propagates():
    model, p = steady_section()
    x = np.array([0.0, np.nan, 0.0, 0.0])
    rate = model.rate(x, [], p, 0.0)
    assert np.isnan(rate[2])
    assert np.isnan(rate[3])
    assert rate[0] == 0.0


def test_undeclared_coupling_traits_are_conservative():
    """A coupling without declared traits is treated as rate dependent and varying."""
    model = toy_combiner().couple(Integrator(), InPlaceIntegrator())
    assert model.coupling.rate_dependent
    assert model.coupling.rate_receivers == (0, 1)
    assert model.traits.mass_matrix is MatrixType.VARYING
    assert model.traits.state_jacobian is MatrixType.VARYING
    assert model.traits.input_jacobian is MatrixType.VARYING

    x = np.array([0.5, -1.0])
    y = np.array([2.0])
    p = model.default_parameters()
    M = model.mass_matrix(x, y, p, 0.0)
    dx = np.linalg.solve(M, model.rate(x, y, p, 0.0))
    # dx0 = x1 + f, dx1 = x0 + dx0
    np.testing.assert_allclose(dx, [1.0, 1.5], atol=1e-8)
    np.testing.assert_allclose(model.residual(dx, x, y, p, 0.0), 0.0, atol=1e-8)
    np.testing.assert_allclose(model.input_jacobian(x, y, p, 0.0), [[1.0], [0.0]], atol=1e-8)


def test_undeclared_input_jacobian_is_empty_without_external_inputs():
    coupling = BadArity(Steady(), Unregistered())
    assert coupling.traits.input_jacobian is MatrixType.EMPTY
    assert coupling.traits.rate_jacobian is MatrixType.VARYING
    assert coupling.traits.state_jacobian is MatrixType.VARYING


def test_coupling_without_inputs_raises():
    class Silent(Coupling):
        kinds = ("toy_integrator",)

    coupling = Silent(Integrator())
    with pytest.raises(NotImplementedError):
        coupling.inputs(None, np.zeros(1), [], [], 0.0)
    with pytest.raises(NotImplementedError):
        coupling.inputs_into(np.zeros(1), None, np.zeros(1), [], [], 0.0)


@pytest.mark.parametrize(
    "models",
    [
        (Steady(), TypicalSection()),
        (QuasiSteady(1), TypicalSection()),
        (QuasiSteady(2), TypicalSection()),
        (Wagner(), TypicalSection()),
        (QuasiSteady(1), SimpleFlap(), TypicalSection()),
    ],
    ids=repr,
)
def test_parameter_jacobian_matches_finite_differences(models):
    model = couple_models(*models)
    rng = np.random.default_rng(7)
    x = rng.normal(scale=0.1, size=model.state_count)
    y = np.full(model.input_count, 0.05)
    p = model.default_parameters(U=12.0, rho=1.1, kh=2.0, ktheta=3.0)
    J = model.parameter_jacobian(x, y, p, 0.0)
    J_fd = finite_difference(lambda pi: model.rate(x, y, pi, 0.0), p)
    assert J.shape == (model.state_count, model.parameter_count)
    np.testing.assert_allclose(J, J_fd, rtol=1e-6, atol=1e-6)
