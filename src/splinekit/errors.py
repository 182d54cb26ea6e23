"""Exceptions raised by the splinekit evaluation engine.

Every error is raised eagerly, either while geometry is being constructed
or on entry to an evaluation call.  Evaluation routines never clamp a bad
parameter or hand back a NaN result; the caller is expected to handle the
exception.

The concrete classes also derive from the matching builtin exception so
code that only knows about ``ValueError`` or ``ZeroDivisionError`` keeps
working.
"""

from __future__ import annotations

from typing import Any, Optional


class SplineError(Exception):
    """Base exception class for all splinekit errors."""

    def __init__(self, message: str, *, expected: Optional[Any] = None,
                 actual: Optional[Any] = None):
        self.message = message
        self.expected = expected
        self.actual = actual

        full_message = message
        if expected is not None and actual is not None:
            full_message += f" (expected: {expected}, actual: {actual})"
        elif expected is not None:
            full_message += f" (expected: {expected})"
        elif actual is not None:
            full_message += f" (actual: {actual})"

        super().__init__(full_message)


class OutOfRangeError(SplineError, ValueError):
    """Raised when a parameter lies outside ``[min_u, max_u]``."""

    def __init__(self, message: str, *, value: Any = None,
                 param_range: Optional[Any] = None):
        self.value = value
        self.param_range = param_range
        expected = None
        if param_range is not None:
            expected = f"{param_range[0]} <= u <= {param_range[1]}"
        super().__init__(message, expected=expected, actual=value)


class InvalidConfigurationError(SplineError, ValueError):
    """Raised when knots, control points or settings have the wrong shape."""
    pass


class DegenerateWeightError(SplineError, ZeroDivisionError):
    """Raised when a rational weight is not strictly positive."""

    def __init__(self, message: str, *, weight: Any = None):
        self.weight = weight
        super().__init__(message, expected="weight > 0", actual=weight)


__all__ = [
    'SplineError',
    'OutOfRangeError',
    'InvalidConfigurationError',
    'DegenerateWeightError',
]
