"""Linear steady two-dimensional control surface."""

from ...fields import param
from ...model import NoStateModel
from ...traits import STATELESS

__all__ = ["SimpleFlap", "TRAITS"]


class SimpleFlap(NoStateModel):
    """Trailing-edge flap with constant load derivatives.

    The flap deflection is an external input of the coupled model; the
    coupling adds ``rho U^2 b cld delta`` to the lift and the corresponding
    moment to the structure it is attached to.
    """

    kind = "simple_flap"

    parameter_vars = (
        param("cld", 0.0, "lift coefficient derivative (1/rad)"),
        param("cdd", 0.0, "drag coefficient derivative (1/rad)"),
        param("cmd", 0.0, "moment coefficient derivative (1/rad)"),
    )


TRAITS = {"simple_flap": STATELESS}
