"""Variable descriptors for model states, inputs and parameters.

Models declare their variables as ordered tuples of descriptors. The order of
a tuple is the order of the corresponding flat vector.

Example:
    class Oscillator(Model):
        state_vars = (state("x", desc="position (m)"), state("v", desc="velocity (m/s)"))
        input_vars = (input_var("F", desc="force (N)"),)
        parameter_vars = (param("k", 1.0, "stiffness (N/m)"),)
"""

from beartype.typing import Any
import numpy as np

__all__ = [
    "VarDescriptor",
    "state",
    "input_var",
    "param",
    "names_of",
    "vector_of",
]


class VarDescriptor:
    """Descriptor for a single scalar model variable."""

    def __init__(self, name: str, var_type: str, default: Any = None, desc: str = ""):
        """Initialize variable descriptor.

        Args:
            name: Variable name, unique within its tuple
            var_type: One of 'state', 'input', 'param'
            default: Default numeric value
            desc: Human-readable description
        """
        self.name = name
        self.var_type = var_type
        self.default = 0.0 if default is None else float(default)
        self.desc = desc

    def __repr__(self):
        return f"VarDescriptor('{self.name}', type='{self.var_type}', default={self.default})"


def state(name: str, default: Any = None, desc: str = "") -> VarDescriptor:
    """Declare a state variable (has a time derivative).

    Args:
        name: State name
        default: Default initial value
        desc: Human-readable description
    """
    return VarDescriptor(name, "state", default=default, desc=desc)


def input_var(name: str, default: Any = None, desc: str = "") -> VarDescriptor:
    """Declare an input variable (supplied by a coupling or by the caller)."""
    return VarDescriptor(name, "input", default=default, desc=desc)


def param(name: str, default: Any = None, desc: str = "") -> VarDescriptor:
    """Declare a parameter (time-independent constant)."""
    return VarDescriptor(name, "param", default=default, desc=desc)


def names_of(descriptors) -> tuple:
    """Names of a descriptor tuple, in vector order."""
    return tuple(d.name for d in descriptors)


def vector_of(descriptors, overrides: dict) -> np.ndarray:
    """Build a flat vector from descriptor defaults and keyword overrides.

    Raises:
        ValueError: if an override names no declared variable
    """
    names = names_of(descriptors)
    unknown = set(overrides) - set(names)
    if unknown:
        raise ValueError(f"Unknown variable(s) {sorted(unknown)}; expected one of {list(names)}")
    return np.array(
        [float(overrides.get(d.name, d.default)) for d in descriptors], dtype=float
    )
