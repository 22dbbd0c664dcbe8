"""
Example: flutter of a typical section with Wagner unsteady aerodynamics.

Sweeps the freestream velocity, reports the first speed at which a mode goes
unstable, then simulates the coupled model just above that speed.
"""

import numpy as np
from scipy.integrate import solve_ivp

from aerostruct import TypicalSection, Wagner, couple_models, parameter_sweep


def section_parameters(model):
    """Typical section of Hodges & Pierce (a = -1/5, e = -1/10, mu = 20)."""
    b = 0.5
    rho = 1.0
    m = 20 * rho * np.pi * b**2
    wh, wtheta = 1.0, 1.0 / 0.4
    r2 = 6 / 25
    xtheta = 1 / 10
    return model.default_parameters(
        a=-1 / 5,
        b=b,
        kh=m * wh**2,
        ktheta=m * r2 * b**2 * wtheta**2,
        m=m,
        S_theta=m * xtheta * b,
        I_theta=m * r2 * b**2,
        rho=rho,
    )


def find_flutter_speed(model, p, velocities):
    x = np.zeros(model.state_count)
    sweep = parameter_sweep(model, x, [], p, "U", velocities)
    for U, eigvals in zip(velocities, sweep):
        if np.any(eigvals.real > 1e-8):
            return U
    return None


def simulate(model, p, t_final=20.0):
    """Integrate M dx = f with a dense solve of the mass matrix."""

    def rhs(t, x):
        M = model.mass_matrix(x, [], p, t)
        return np.linalg.solve(M, model.rate(x, [], p, t))

    x0 = model.pack_states(np.zeros(2), [0.0, 0.01, 0.0, 0.0])
    return solve_ivp(rhs, (0.0, t_final), x0, max_step=0.01)


if __name__ == "__main__":
    model = couple_models(Wagner(), TypicalSection())
    p = section_parameters(model)
    print(model)
    print("traits:", model.traits)

    velocities = np.linspace(0.1, 3.0, 300)
    U_f = find_flutter_speed(model, p, velocities)
    if U_f is None:
        print("no flutter below U =", velocities[-1])
    else:
        print(f"flutter onset near U = {U_f:.3f} m/s")
        p[model.parameter_names.index("U")] = 1.05 * U_f
        sol = simulate(model, p)
        theta = sol.y[model.state_names.index("theta")]
        print(f"pitch amplitude grows from {abs(theta[0]):.4f} to {np.max(np.abs(theta[-200:])):.4f} rad")
