"""Primitive models shipped with aerostruct."""

from .aerodynamics import QuasiSteady, Steady, Wagner
from .control_surfaces import SimpleFlap
from .structures import RigidBody, TypicalSection

__all__ = [
    "QuasiSteady",
    "Steady",
    "Wagner",
    "SimpleFlap",
    "RigidBody",
    "TypicalSection",
]
