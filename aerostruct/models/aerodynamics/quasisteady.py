"""Two-dimensional steady and quasi-steady thin-airfoil aerodynamics.

The aerodynamic models carry no states. Their loads are evaluated by the
couplings that join them to a structural model, using the helper functions in
this module. Velocities are expressed in the section frame:

    u: chordwise freestream velocity
    v: normal velocity at the reference point
    omega: pitch rate

and loads act at the reference point located ``a*b`` aft of mid-chord.
"""

import numpy as np

from ...fields import param
from ...model import NoStateModel
from ...traits import STATELESS

__all__ = [
    "QuasiSteady",
    "Steady",
    "quasisteady0_loads",
    "quasisteady1_loads",
    "quasisteady2_rate_loads",
    "quasisteady2_rate_jacobian",
    "TRAITS",
]

ORDERS = (0, 1, 2)


class QuasiSteady(NoStateModel):
    """Quasi-steady aerodynamics of a given order.

    Order 0 is steady thin-airfoil theory, order 1 adds circulatory and
    apparent-mass terms proportional to the pitch rate, and order 2 adds the
    apparent-mass terms proportional to the section accelerations.
    """

    parameter_vars = (
        param("a0", 2 * np.pi, "lift curve slope (1/rad)"),
        param("alpha0", 0.0, "zero lift angle of attack (rad)"),
    )

    def __init__(self, order: int = 2):
        if order not in ORDERS:
            raise ValueError(f"Quasi-steady order must be one of {ORDERS}, got {order}")
        self.order = order
        self.kind = ("quasisteady", order)

    def __repr__(self):
        return f"{type(self).__name__}(order={self.order})"


class Steady(QuasiSteady):
    """Steady thin-airfoil aerodynamics (quasi-steady order 0)."""

    def __init__(self):
        super().__init__(order=0)

    def __repr__(self):
        return "Steady()"


# ---------------------------------------------------------------------------
# Load functions
# ---------------------------------------------------------------------------
def quasisteady0_loads(a, b, rho, a0, alpha0, u, v):
    """Steady lift and moment per unit span."""
    L = a0 * rho * b * u * (v - u * alpha0)
    M = (b / 2 + a * b) * L
    return L, M


def quasisteady1_loads(a, b, rho, a0, alpha0, u, v, omega):
    """Circulatory and apparent-mass loads, neglecting accelerations."""
    # circulatory load factor
    tmp1 = a0 * rho * u * b
    # non-circulatory load factor
    tmp2 = np.pi * rho * b**3
    d = b / 2 - a * b
    L = tmp1 * (v + d * omega - u * alpha0) + tmp2 * u / b * omega
    M = -tmp2 * u * omega + (b / 2 + a * b) * L
    return L, M


def quasisteady2_rate_loads(a, b, rho, vdot, omegadot):
    """Apparent-mass loads from the section accelerations."""
    tmp = np.pi * rho * b**3
    L = tmp * (vdot / b - a * omegadot)
    M = -tmp * (vdot / 2 + b * (1 / 8 - a / 2) * omegadot) + (b / 2 + a * b) * L
    return L, M


def quasisteady2_rate_jacobian(a, b, rho):
    """Derivatives of the acceleration loads with respect to ``(vdot, omegadot)``.

    Returns:
        2x2 array ``[[L_vdot, L_omegadot], [M_vdot, M_omegadot]]``
    """
    tmp = np.pi * rho * b**3
    d2 = b / 2 + a * b
    L_vdot = tmp / b
    L_omegadot = -tmp * a
    M_vdot = -tmp / 2 + d2 * L_vdot
    M_omegadot = -tmp * b * (1 / 8 - a / 2) + d2 * L_omegadot
    return np.array([[L_vdot, L_omegadot], [M_vdot, M_omegadot]])


TRAITS = {("quasisteady", order): STATELESS for order in ORDERS}
