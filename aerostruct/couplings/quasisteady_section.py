"""Quasi-steady aerodynamics coupled to a typical section.

Composite vectors:

    x = [h, theta, hdot, thetadot]
    p = [a0, alpha0, a, b, kh, ktheta, m, S_theta, I_theta, U, rho]

The coupling introduces the freestream velocity ``U`` and the air density
``rho``. The order 2 model depends on the section accelerations and is
therefore rate dependent.
"""

import numpy as np

from ..coupling import Coupling
from ..fields import param
from ..models.aerodynamics.quasisteady import (
    quasisteady0_loads,
    quasisteady1_loads,
    quasisteady2_rate_jacobian,
    quasisteady2_rate_loads,
)
from ..traits import CouplingTraits, InputDependence, MatrixType

__all__ = [
    "SteadySection",
    "QuasiSteady1Section",
    "QuasiSteady2Section",
    "FREESTREAM_PARAMETERS",
    "section_velocities",
    "section_loads",
    "section_state_jacobian",
    "section_rate_jacobian",
    "section_parameter_jacobian",
]

FREESTREAM_PARAMETERS = (
    param("U", 0.0, "freestream velocity (m/s)"),
    param("rho", 1.225, "air density (kg/m^3)"),
)


def section_velocities(U, theta, hdot, thetadot):
    """Section-frame velocities ``(u, v, omega)`` of a pitching, plunging airfoil."""
    return U, U * theta + hdot, thetadot


def section_loads(order, a0, alpha0, a, b, U, rho, x, dx):
    """Aerodynamic lift and moment on a section with states ``[h, theta, hdot, thetadot]``."""
    theta, hdot, thetadot = x[1], x[2], x[3]
    if order == 0:
        u, v = U, U * theta
        L, M = quasisteady0_loads(a, b, rho, a0, alpha0, u, v)
    else:
        u, v, omega = section_velocities(U, theta, hdot, thetadot)
        L, M = quasisteady1_loads(a, b, rho, a0, alpha0, u, v, omega)
    if order == 2:
        Lr, Mr = quasisteady2_rate_loads(a, b, rho, dx[2], dx[3])
        L, M = L + Lr, M + Mr
    return L, M


def section_state_jacobian(order, a0, a, b, U, rho):
    """Derivatives of the section loads with respect to the section states."""
    d2 = b / 2 + a * b
    if order == 0:
        L_theta = a0 * rho * U**2 * b
        return np.array([[0.0, L_theta, 0.0, 0.0], [0.0, d2 * L_theta, 0.0, 0.0]])
    tmp1 = a0 * rho * U * b
    tmp2 = np.pi * rho * b**3
    d1 = b / 2 - a * b
    L_theta = tmp1 * U
    L_hdot = tmp1
    L_thetadot = tmp1 * d1 + tmp2 * U / b
    M_thetadot = -tmp2 * U + d2 * L_thetadot
    return np.array(
        [
            [0.0, L_theta, L_hdot, L_thetadot],
            [0.0, d2 * L_theta, d2 * L_hdot, M_thetadot],
        ]
    )


def section_rate_jacobian(order, a, b, rho):
    """Derivatives of the section loads with respect to the section state rates."""
    jac = np.zeros((2, 4))
    if order == 2:
        jac[:, 2:4] = quasisteady2_rate_jacobian(a, b, rho)
    return jac


def section_parameter_jacobian(order, a0, alpha0, a, b, U, rho, x):
    """Derivatives of the rate-independent section loads with respect to the parameters.

    Returns:
        2x6 array with columns ``(a0, alpha0, a, b, U, rho)``
    """
    theta = x[1]
    if order == 0:
        v, omega = U * theta, 0.0
    else:
        v, omega = U * theta + x[2], x[3]
    d1 = b / 2 - a * b
    d2 = b / 2 + a * b
    circulation = v + d1 * omega - U * alpha0
    L = a0 * rho * U * b * circulation + np.pi * rho * b**2 * U * omega

    L_a0 = rho * U * b * circulation
    L_alpha0 = -a0 * rho * U**2 * b
    L_a = -a0 * rho * U * b**2 * omega
    L_b = a0 * rho * U * (circulation + b * (0.5 - a) * omega) + 2 * np.pi * rho * b * U * omega
    L_U = a0 * rho * b * (v + U * theta + d1 * omega - 2 * U * alpha0) + np.pi * rho * b**2 * omega
    L_rho = a0 * U * b * circulation + np.pi * b**2 * U * omega

    M_a0 = d2 * L_a0
    M_alpha0 = d2 * L_alpha0
    M_a = b * L + d2 * L_a
    M_b = -3 * np.pi * rho * b**2 * U * omega + (0.5 + a) * L + d2 * L_b
    M_U = -np.pi * rho * b**3 * omega + d2 * L_U
    M_rho = -np.pi * b**3 * U * omega + d2 * L_rho
    return np.array(
        [
            [L_a0, L_alpha0, L_a, L_b, L_U, L_rho],
            [M_a0, M_alpha0, M_a, M_b, M_U, M_rho],
        ]
    )


class _QuasiSteadySection(Coupling):
    order = 0

    state_counts = (0, 4)
    input_counts = (0, 2)
    parameter_counts = (2, 7)
    extra_parameter_vars = FREESTREAM_PARAMETERS

    traits = CouplingTraits(
        rate_jacobian=MatrixType.ZEROS,
        state_jacobian=MatrixType.CONSTANT,
        input_jacobian=MatrixType.EMPTY,
        parameter_jacobian=MatrixType.VARYING,
        input_dependence=InputDependence.LINEAR,
    )

    @staticmethod
    def _parameters(p):
        a0, alpha0, a, b = p[0], p[1], p[2], p[3]
        U, rho = p[9], p[10]
        return a0, alpha0, a, b, U, rho

    def inputs(self, dx, x, y, p, t):
        a0, alpha0, a, b, U, rho = self._parameters(p)
        return np.array(section_loads(self.order, a0, alpha0, a, b, U, rho, x, dx))

    def state_jacobian(self, x, y, p, t):
        a0, alpha0, a, b, U, rho = self._parameters(p)
        return section_state_jacobian(self.order, a0, a, b, U, rho)

    def rate_jacobian(self, x, y, p, t):
        a0, alpha0, a, b, U, rho = self._parameters(p)
        return section_rate_jacobian(self.order, a, b, rho)

    def parameter_jacobian(self, x, y, p, t):
        a0, alpha0, a, b, U, rho = self._parameters(p)
        jac = np.zeros((2, np.asarray(p).size))
        jac[:, [0, 1, 2, 3, 9, 10]] = section_parameter_jacobian(
            self.order, a0, alpha0, a, b, U, rho, x
        )
        return jac

    def input_jacobian(self, x, y, p, t):
        return np.zeros((2, 0))


class SteadySection(_QuasiSteadySection):
    """Steady aerodynamics on a typical section."""

    kinds = (("quasisteady", 0), "typical_section")
    order = 0


class QuasiSteady1Section(_QuasiSteadySection):
    """First order quasi-steady aerodynamics on a typical section."""

    kinds = (("quasisteady", 1), "typical_section")
    order = 1


class QuasiSteady2Section(_QuasiSteadySection):
    """Second order quasi-steady aerodynamics on a typical section."""

    kinds = (("quasisteady", 2), "typical_section")
    order = 2
    rate_dependent_components = (1,)

    traits = CouplingTraits(
        rate_jacobian=MatrixType.CONSTANT,
        state_jacobian=MatrixType.CONSTANT,
        input_jacobian=MatrixType.EMPTY,
        parameter_jacobian=MatrixType.VARYING,
        input_dependence=InputDependence.LINEAR,
    )
