"""Control surface models."""

from .simple_flap import SimpleFlap

__all__ = ["SimpleFlap"]
