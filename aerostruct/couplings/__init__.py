"""Coupling functions shipped with aerostruct."""

from .quasisteady_flap_section import (
    QuasiSteady1FlapSection,
    QuasiSteady2FlapSection,
    SteadyFlapSection,
)
from .quasisteady_section import QuasiSteady1Section, QuasiSteady2Section, SteadySection
from .wagner_section import WagnerSection

COUPLINGS = (
    SteadySection,
    QuasiSteady1Section,
    QuasiSteady2Section,
    WagnerSection,
    SteadyFlapSection,
    QuasiSteady1FlapSection,
    QuasiSteady2FlapSection,
)

__all__ = [
    "SteadySection",
    "QuasiSteady1Section",
    "QuasiSteady2Section",
    "WagnerSection",
    "SteadyFlapSection",
    "QuasiSteady1FlapSection",
    "QuasiSteady2FlapSection",
    "COUPLINGS",
]
