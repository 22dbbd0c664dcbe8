"""Two-dimensional aerodynamic models."""

from .quasisteady import QuasiSteady, Steady
from .wagner import Wagner

__all__ = ["QuasiSteady", "Steady", "Wagner"]
