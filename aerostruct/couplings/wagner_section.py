"""Wagner unsteady aerodynamics coupled to a typical section.

Composite vectors:

    x = [lambda1, lambda2, h, theta, hdot, thetadot]
    p = [a0, alpha0, a, b, kh, ktheta, m, S_theta, I_theta, U, rho]

The coupling supplies ``[u/b, w, L, M]``: the reduced-time rate and the
three-quarter chord downwash drive the aerodynamic lag states, the loads drive
the section. The apparent-mass loads depend on the section accelerations.
"""

import numpy as np

from ..coupling import Coupling
from ..models.aerodynamics.quasisteady import quasisteady2_rate_jacobian, quasisteady2_rate_loads
from ..models.aerodynamics.wagner import wagner_state_loads
from ..traits import CouplingTraits, InputDependence, MatrixType
from .quasisteady_section import FREESTREAM_PARAMETERS, section_velocities

__all__ = ["WagnerSection"]


class WagnerSection(Coupling):
    """Wagner function aerodynamics on a typical section."""

    kinds = ("wagner", "typical_section")
    state_counts = (2, 4)
    input_counts = (2, 2)
    parameter_counts = (2, 7)
    extra_parameter_vars = FREESTREAM_PARAMETERS
    rate_dependent_components = (1,)

    traits = CouplingTraits(
        rate_jacobian=MatrixType.CONSTANT,
        state_jacobian=MatrixType.CONSTANT,
        input_jacobian=MatrixType.EMPTY,
        parameter_jacobian=MatrixType.VARYING,
        input_dependence=InputDependence.LINEAR,
    )

    def inputs(self, dx, x, y, p, t):
        C1, C2 = self.models[0].C1, self.models[0].C2
        lambda1, lambda2 = x[0], x[1]
        theta, hdot, thetadot = x[3], x[4], x[5]
        a0, alpha0, a, b = p[0], p[1], p[2], p[3]
        U, rho = p[9], p[10]

        u, v, omega = section_velocities(U, theta, hdot, thetadot)
        w = v + (b / 2 - a * b) * omega - u * alpha0
        L, M = wagner_state_loads(a, b, rho, a0, C1, C2, u, w, omega, lambda1, lambda2)
        Lr, Mr = quasisteady2_rate_loads(a, b, rho, dx[4], dx[5])
        return np.array([u / b, w, L + Lr, M + Mr])

    def state_jacobian(self, x, y, p, t):
        C1, C2 = self.models[0].C1, self.models[0].C2
        a0, a, b = p[0], p[2], p[3]
        U, rho = p[9], p[10]

        tmp1 = a0 * rho * U * b
        tmp2 = np.pi * rho * b**3
        phi0 = 1 - C1 - C2
        d1 = b / 2 - a * b
        d2 = b / 2 + a * b

        L_theta = tmp1 * phi0 * U
        L_hdot = tmp1 * phi0
        L_thetadot = tmp1 * phi0 * d1 + tmp2 * U / b
        M_thetadot = -tmp2 * U + d2 * L_thetadot
        return np.array(
            [
                [0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
                [0.0, 0.0, 0.0, U, 1.0, d1],
                [tmp1, tmp1, 0.0, L_theta, L_hdot, L_thetadot],
                [d2 * tmp1, d2 * tmp1, 0.0, d2 * L_theta, d2 * L_hdot, M_thetadot],
            ]
        )

    def rate_jacobian(self, x, y, p, t):
        a, b, rho = p[2], p[3], p[10]
        jac = np.zeros((4, 6))
        jac[2:4, 4:6] = quasisteady2_rate_jacobian(a, b, rho)
        return jac

    def input_jacobian(self, x, y, p, t):
        return np.zeros((4, 0))
