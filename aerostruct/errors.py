"""Construction-time errors raised while assembling coupled models.

Evaluation never raises for numeric problems: NaN/Inf values and singular
mass matrices propagate to the caller's solver unchanged.
"""

__all__ = [
    "ConstructionError",
    "UnsupportedCoupling",
    "ShapeMismatch",
]


class ConstructionError(ValueError):
    """Base class for errors detected while building a coupled model."""


class UnsupportedCoupling(ConstructionError):
    """No coupling function is registered for an ordered tuple of model kinds."""

    def __init__(self, kinds):
        self.kinds = tuple(kinds)
        super().__init__(f"No coupling registered for model kinds {self.kinds!r}")


class ShapeMismatch(ConstructionError):
    """A coupling's declared arity disagrees with a component model."""

    def __init__(self, what: str, index: int, expected: int, actual: int):
        self.what = what
        self.index = index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Coupling expects {expected} {what} for component {index}, model has {actual}"
        )
