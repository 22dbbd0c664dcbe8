"""Six degree of freedom rigid body.

States are the inertial position, the 3-2-1 Euler angles, and the body-frame
linear and angular velocities. Mass properties and body-frame loads are
inputs, so a coupling can supply them from any other model.

Selected state rates may be constrained: the row of each constrained state is
replaced by ``dx[rate_index] = value``, which pins the rate of another state
(e.g. holding a velocity component fixed in a wind tunnel setup).
"""

from beartype.typing import Optional
import numpy as np

from ...fields import input_var, state
from ...model import Model
from ...traits import InPlaceness, InputDependence, MatrixType, ModelTraits

__all__ = ["RigidBody", "TRAITS"]


class RigidBody(Model):
    """Rigid body with optional state-rate constraints."""

    state_vars = (
        state("x", desc="inertial x position (m)"),
        state("y", desc="inertial y position (m)"),
        state("z", desc="inertial z position (m)"),
        state("phi", desc="roll angle (rad)"),
        state("theta", desc="pitch angle (rad)"),
        state("psi", desc="yaw angle (rad)"),
        state("u", desc="body x velocity (m/s)"),
        state("v", desc="body y velocity (m/s)"),
        state("w", desc="body z velocity (m/s)"),
        state("p", desc="roll rate (rad/s)"),
        state("q", desc="pitch rate (rad/s)"),
        state("r", desc="yaw rate (rad/s)"),
    )
    input_vars = (
        input_var("m", 1.0, "mass (kg)"),
        input_var("Ixx", 1.0, "moment of inertia (kg m^2)"),
        input_var("Iyy", 1.0, "moment of inertia (kg m^2)"),
        input_var("Izz", 1.0, "moment of inertia (kg m^2)"),
        input_var("Ixz", desc="product of inertia (kg m^2)"),
        input_var("Ixy", desc="product of inertia (kg m^2)"),
        input_var("Iyz", desc="product of inertia (kg m^2)"),
        input_var("Fx", desc="body x force (N)"),
        input_var("Fy", desc="body y force (N)"),
        input_var("Fz", desc="body z force (N)"),
        input_var("Mx", desc="body x moment (N m)"),
        input_var("My", desc="body y moment (N m)"),
        input_var("Mz", desc="body z moment (N m)"),
    )
    parameter_vars = ()

    def __init__(
        self,
        state_indices: tuple = (),
        rate_indices: tuple = (),
        rate_values: Optional[tuple] = None,
    ):
        if rate_values is None:
            rate_values = (0.0,) * len(state_indices)
        if not len(state_indices) == len(rate_indices) == len(rate_values):
            raise ValueError("state_indices, rate_indices and rate_values must have equal length")
        for index in tuple(state_indices) + tuple(rate_indices):
            if not 0 <= index < 12:
                raise ValueError(f"Rigid body state index {index} out of range")
        self.state_indices = tuple(state_indices)
        self.rate_indices = tuple(rate_indices)
        self.rate_values = tuple(float(v) for v in rate_values)
        self.kind = "rigid_body_constrained" if self.state_indices else "rigid_body"

    def __repr__(self):
        if not self.state_indices:
            return "RigidBody()"
        return f"RigidBody({self.state_indices}, {self.rate_indices}, {self.rate_values})"

    def _constraints(self):
        return zip(self.state_indices, self.rate_indices, self.rate_values)

    def rate_into(self, out, x, y, p, t):
        out[0:6] = rigid_body_kinematics(*x[0:12])
        out[6:12] = rigid_body_dynamics(x[6:12], y)
        for istate, _, value in self._constraints():
            out[istate] = value

    def mass_matrix_into(self, out, x, y, p, t):
        out[:, :] = np.eye(12)
        for istate, irate, _ in self._constraints():
            out[istate, :] = 0.0
            out[istate, irate] = 1.0


def rigid_body_kinematics(x, y, z, phi, theta, psi, u, v, w, p, q, r):
    """Inertial position rates and Euler angle rates."""
    sphi, cphi = np.sin(phi), np.cos(phi)
    stheta, ctheta = np.sin(theta), np.cos(theta)
    spsi, cpsi = np.sin(psi), np.cos(psi)

    # inertial to body rotation
    Rib = np.array(
        [
            [ctheta * cpsi, ctheta * spsi, -stheta],
            [sphi * stheta * cpsi - cphi * spsi, sphi * stheta * spsi + cphi * cpsi, sphi * ctheta],
            [cphi * stheta * cpsi + sphi * spsi, cphi * stheta * spsi - sphi * cpsi, cphi * ctheta],
        ]
    )
    rdot = Rib.T @ np.array([u, v, w])

    phidot = p + (q * sphi + r * cphi) * stheta / ctheta
    thetadot = q * cphi - r * sphi
    psidot = (q * sphi + r * cphi) / ctheta
    return np.concatenate([rdot, [phidot, thetadot, psidot]])


def rigid_body_dynamics(velocities, inputs):
    """Body-frame linear and angular accelerations."""
    m, Ixx, Iyy, Izz, Ixz, Ixy, Iyz = inputs[0:7]
    F = np.asarray(inputs[7:10], dtype=float)
    M = np.asarray(inputs[10:13], dtype=float)
    Vb = np.asarray(velocities[0:3], dtype=float)
    Wb = np.asarray(velocities[3:6], dtype=float)

    vdot = F / m - np.cross(Wb, Vb)

    inertia = np.array(
        [
            [Ixx, -Ixy, -Ixz],
            [-Ixy, Iyy, -Iyz],
            [-Ixz, -Iyz, Izz],
        ]
    )
    wdot = np.linalg.solve(inertia, M - np.cross(Wb, inertia @ Wb))
    return np.concatenate([vdot, wdot])


TRAITS = {
    "rigid_body": ModelTraits(
        inplaceness=InPlaceness.IN_PLACE,
        mass_matrix=MatrixType.IDENTITY,
        state_jacobian=MatrixType.VARYING,
        input_jacobian=MatrixType.VARYING,
        input_dependence=InputDependence.NONLINEAR,
    ),
    "rigid_body_constrained": ModelTraits(
        inplaceness=InPlaceness.IN_PLACE,
        mass_matrix=MatrixType.CONSTANT,
        state_jacobian=MatrixType.VARYING,
        input_jacobian=MatrixType.VARYING,
        input_dependence=InputDependence.NONLINEAR,
    ),
}
