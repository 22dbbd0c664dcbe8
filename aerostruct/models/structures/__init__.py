"""Structural and rigid-body dynamics models."""

from .rigid_body import RigidBody
from .typical_section import TypicalSection

__all__ = ["RigidBody", "TypicalSection"]
