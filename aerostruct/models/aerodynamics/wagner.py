"""Unsteady thin-airfoil aerodynamics from Wagner's function.

Wagner's indicial lift response is approximated by two exponentials,

    phi(s) = 1 - C1 exp(-eps1 s) - C2 exp(-eps2 s)

with reduced time ``s = U t / b``. Each exponential gives one aerodynamic
lag state ``lambda_i`` driven by the downwash at the three-quarter chord.
"""

import numpy as np

from ...fields import input_var, param, state
from ...model import Model
from ...traits import InPlaceness, InputDependence, MatrixType, ModelTraits

__all__ = ["Wagner", "wagner_state_loads", "TRAITS"]


class Wagner(Model):
    """Two-state Wagner function aerodynamics.

    Inputs are supplied by the coupling: the freestream-to-semichord ratio
    ``u_over_b`` and the three-quarter chord downwash ``w``.
    """

    kind = "wagner"

    state_vars = (
        state("lambda1", desc="first aerodynamic lag state"),
        state("lambda2", desc="second aerodynamic lag state"),
    )
    input_vars = (
        input_var("u_over_b", desc="freestream velocity over semichord (1/s)"),
        input_var("w", desc="three-quarter chord downwash (m/s)"),
    )
    parameter_vars = (
        param("a0", 2 * np.pi, "lift curve slope (1/rad)"),
        param("alpha0", 0.0, "zero lift angle of attack (rad)"),
    )

    def __init__(
        self,
        C1: float = 0.165,
        C2: float = 0.335,
        eps1: float = 0.0455,
        eps2: float = 0.3,
    ):
        self.C1 = C1
        self.C2 = C2
        self.eps1 = eps1
        self.eps2 = eps2

    def __repr__(self):
        return f"Wagner(C1={self.C1}, C2={self.C2}, eps1={self.eps1}, eps2={self.eps2})"

    def rate(self, x, y, p, t):
        lambda1, lambda2 = x[0], x[1]
        s, w = y[0], y[1]
        return np.array(
            [
                -self.eps1 * s * lambda1 + self.C1 * self.eps1 * s * w,
                -self.eps2 * s * lambda2 + self.C2 * self.eps2 * s * w,
            ]
        )

    def mass_matrix(self, x, y, p, t):
        return np.eye(2)

    def state_jacobian(self, x, y, p, t):
        s = y[0]
        return np.array([[-self.eps1 * s, 0.0], [0.0, -self.eps2 * s]])

    def input_jacobian(self, x, y, p, t):
        lambda1, lambda2 = x[0], x[1]
        s, w = y[0], y[1]
        return np.array(
            [
                [-self.eps1 * lambda1 + self.C1 * self.eps1 * w, self.C1 * self.eps1 * s],
                [-self.eps2 * lambda2 + self.C2 * self.eps2 * w, self.C2 * self.eps2 * s],
            ]
        )


def wagner_state_loads(a, b, rho, a0, C1, C2, u, w, omega, lambda1, lambda2):
    """Circulatory and apparent-mass loads, neglecting accelerations.

    Args:
        w: three-quarter chord downwash ``v + (b/2 - a*b)*omega - u*alpha0``
    """
    tmp1 = a0 * rho * u * b
    tmp2 = np.pi * rho * b**3
    phi0 = 1 - C1 - C2
    L = tmp1 * (w * phi0 + lambda1 + lambda2) + tmp2 * u / b * omega
    M = -tmp2 * u * omega + (b / 2 + a * b) * L
    return L, M


TRAITS = {
    "wagner": ModelTraits(
        inplaceness=InPlaceness.OUT_OF_PLACE,
        mass_matrix=MatrixType.IDENTITY,
        state_jacobian=MatrixType.VARYING,
        input_jacobian=MatrixType.VARYING,
        input_dependence=InputDependence.NONLINEAR,
    ),
}
