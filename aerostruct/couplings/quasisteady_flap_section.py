"""Quasi-steady aerodynamics and a trailing-edge flap on a typical section.

Composite vectors:

    x = [h, theta, hdot, thetadot]
    y = [delta]
    p = [a0, alpha0, cld, cdd, cmd, a, b, kh, ktheta, m, S_theta, I_theta, U, rho]

The flap deflection ``delta`` is the external input of the coupled model.
Its loads are linear in ``delta`` and add to the airfoil loads.
"""

import numpy as np

from ..coupling import Coupling
from ..fields import input_var
from ..traits import CouplingTraits, InputDependence, MatrixType
from .quasisteady_section import (
    FREESTREAM_PARAMETERS,
    section_loads,
    section_parameter_jacobian,
    section_rate_jacobian,
    section_state_jacobian,
)

__all__ = [
    "SteadyFlapSection",
    "QuasiSteady1FlapSection",
    "QuasiSteady2FlapSection",
    "simpleflap_loads",
    "simpleflap_parameter_jacobian",
]


def simpleflap_loads(a, b, U, rho, cld, cmd, delta):
    """Flap lift and moment about the reference point."""
    qinf = rho * U**2
    L = qinf * b * cld * delta
    M = 2 * qinf * b**2 * cmd * delta + (b / 2 + a * b) * L
    return L, M


def simpleflap_parameter_jacobian(a, b, U, rho, cld, cmd, delta):
    """Derivatives of the flap loads with respect to ``(cld, cmd, a, b, U, rho)``."""
    d2 = b / 2 + a * b
    L = rho * U**2 * b * cld * delta
    L_cld = rho * U**2 * b * delta
    L_b = rho * U**2 * cld * delta
    L_U = 2 * rho * U * b * cld * delta
    L_rho = U**2 * b * cld * delta
    return np.array(
        [
            [L_cld, 0.0, 0.0, L_b, L_U, L_rho],
            [
                d2 * L_cld,
                2 * rho * U**2 * b**2 * delta,
                b * L,
                4 * rho * U**2 * b * cmd * delta + (0.5 + a) * L + d2 * L_b,
                4 * rho * U * b**2 * cmd * delta + d2 * L_U,
                2 * U**2 * b**2 * cmd * delta + d2 * L_rho,
            ],
        ]
    )


class _QuasiSteadyFlapSection(Coupling):
    order = 0

    state_counts = (0, 0, 4)
    input_counts = (0, 0, 2)
    parameter_counts = (2, 3, 7)
    extra_parameter_vars = FREESTREAM_PARAMETERS
    external_input_vars = (input_var("delta", desc="flap deflection (rad)"),)

    traits = CouplingTraits(
        rate_jacobian=MatrixType.ZEROS,
        state_jacobian=MatrixType.CONSTANT,
        input_jacobian=MatrixType.CONSTANT,
        parameter_jacobian=MatrixType.VARYING,
        input_dependence=InputDependence.LINEAR,
    )

    @staticmethod
    def _parameters(p):
        a0, alpha0 = p[0], p[1]
        cld, cmd = p[2], p[4]
        a, b = p[5], p[6]
        U, rho = p[12], p[13]
        return a0, alpha0, cld, cmd, a, b, U, rho

    def inputs(self, dx, x, y, p, t):
        a0, alpha0, cld, cmd, a, b, U, rho = self._parameters(p)
        La, Ma = section_loads(self.order, a0, alpha0, a, b, U, rho, x, dx)
        Lf, Mf = simpleflap_loads(a, b, U, rho, cld, cmd, y[0])
        return np.array([La + Lf, Ma + Mf])

    def state_jacobian(self, x, y, p, t):
        a0, alpha0, cld, cmd, a, b, U, rho = self._parameters(p)
        return section_state_jacobian(self.order, a0, a, b, U, rho)

    def rate_jacobian(self, x, y, p, t):
        a0, alpha0, cld, cmd, a, b, U, rho = self._parameters(p)
        return section_rate_jacobian(self.order, a, b, rho)

    def parameter_jacobian(self, x, y, p, t):
        a0, alpha0, cld, cmd, a, b, U, rho = self._parameters(p)
        jac = np.zeros((2, np.asarray(p).size))
        jac[:, [0, 1, 5, 6, 12, 13]] = section_parameter_jacobian(
            self.order, a0, alpha0, a, b, U, rho, x
        )
        jac[:, [2, 4, 5, 6, 12, 13]] += simpleflap_parameter_jacobian(a, b, U, rho, cld, cmd, y[0])
        return jac

    def input_jacobian(self, x, y, p, t):
        a0, alpha0, cld, cmd, a, b, U, rho = self._parameters(p)
        L_delta, M_delta = simpleflap_loads(a, b, U, rho, cld, cmd, 1.0)
        return np.array([[L_delta], [M_delta]])


class SteadyFlapSection(_QuasiSteadyFlapSection):
    """Steady aerodynamics with a flap on a typical section."""

    kinds = (("quasisteady", 0), "simple_flap", "typical_section")
    order = 0


class QuasiSteady1FlapSection(_QuasiSteadyFlapSection):
    """First order quasi-steady aerodynamics with a flap on a typical section."""

    kinds = (("quasisteady", 1), "simple_flap", "typical_section")
    order = 1


class QuasiSteady2FlapSection(_QuasiSteadyFlapSection):
    """Second order quasi-steady aerodynamics with a flap on a typical section."""

    kinds = (("quasisteady", 2), "simple_flap", "typical_section")
    order = 2
    rate_dependent_components = (2,)

    traits = CouplingTraits(
        rate_jacobian=MatrixType.CONSTANT,
        state_jacobian=MatrixType.CONSTANT,
        input_jacobian=MatrixType.CONSTANT,
        parameter_jacobian=MatrixType.VARYING,
        input_dependence=InputDependence.LINEAR,
    )
