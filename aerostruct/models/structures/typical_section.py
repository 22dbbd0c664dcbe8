"""Two degree of freedom typical section.

A rigid airfoil on a plunge spring ``kh`` and a torsion spring ``ktheta``
attached at the elastic axis, ``a*b`` aft of mid-chord. Plunge ``h`` is
positive down and pitch ``theta`` positive nose up. The equations of motion

    m hddot + S_theta thetaddot + kh h = -L
    S_theta hddot + I_theta thetaddot + ktheta theta = M

are written in first-order mass-matrix form.
"""

import numpy as np

from ...fields import input_var, param, state
from ...model import Model
from ...traits import InPlaceness, InputDependence, MatrixType, ModelTraits

__all__ = ["TypicalSection", "TRAITS"]


class TypicalSection(Model):
    """Typical section structural model."""

    kind = "typical_section"

    state_vars = (
        state("h", desc="plunge (m)"),
        state("theta", desc="pitch (rad)"),
        state("hdot", desc="plunge rate (m/s)"),
        state("thetadot", desc="pitch rate (rad/s)"),
    )
    input_vars = (
        input_var("L", desc="lift per unit span (N/m)"),
        input_var("M", desc="moment per unit span about the elastic axis (N)"),
    )
    parameter_vars = (
        param("a", -0.5, "elastic axis offset aft of mid-chord (semichords)"),
        param("b", 0.5, "semichord (m)"),
        param("kh", 1.0, "plunge stiffness per unit span (N/m^2)"),
        param("ktheta", 1.0, "torsional stiffness per unit span (N)"),
        param("m", 1.0, "mass per unit span (kg/m)"),
        param("S_theta", 0.0, "structural imbalance per unit span (kg)"),
        param("I_theta", 1.0, "moment of inertia about the elastic axis (kg m)"),
    )

    def rate(self, x, y, p, t):
        h, theta, hdot, thetadot = x[0], x[1], x[2], x[3]
        L, M = y[0], y[1]
        kh, ktheta = p[2], p[3]
        return np.array([hdot, thetadot, -kh * h - L, -ktheta * theta + M])

    def mass_matrix(self, x, y, p, t):
        m, S_theta, I_theta = p[4], p[5], p[6]
        return np.array(
            [
                [1.0, 0.0, 0.0, 0.0],
                [0.0, 1.0, 0.0, 0.0],
                [0.0, 0.0, m, S_theta],
                [0.0, 0.0, S_theta, I_theta],
            ]
        )

    def state_jacobian(self, x, y, p, t):
        kh, ktheta = p[2], p[3]
        return np.array(
            [
                [0.0, 0.0, 1.0, 0.0],
                [0.0, 0.0, 0.0, 1.0],
                [-kh, 0.0, 0.0, 0.0],
                [0.0, -ktheta, 0.0, 0.0],
            ]
        )

    def input_jacobian(self, x, y, p, t):
        return np.array([[0.0, 0.0], [0.0, 0.0], [-1.0, 0.0], [0.0, 1.0]])

    def parameter_jacobian(self, x, y, p, t):
        # only the stiffnesses enter the right-hand side
        jac = np.zeros((4, 7))
        jac[2, 2] = -x[0]
        jac[3, 3] = -x[1]
        return jac


TRAITS = {
    "typical_section": ModelTraits(
        inplaceness=InPlaceness.OUT_OF_PLACE,
        mass_matrix=MatrixType.CONSTANT,
        state_jacobian=MatrixType.CONSTANT,
        input_jacobian=MatrixType.CONSTANT,
        input_dependence=InputDependence.LINEAR,
    ),
}
