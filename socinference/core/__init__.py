"""
Core infrastructure for socinference.

Shared abstractions used by the measurement, permutation and field
submodules.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    random: Seed / Generator coercion
    timing: Section timer
"""

from socinference.core.result import Result
from socinference.core.exceptions import (
    SOCInferenceError,
    ValidationError,
    DimensionError,
    InvalidParameterError,
    NoConvergenceError,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "SOCInferenceError",
    "ValidationError",
    "DimensionError",
    "InvalidParameterError",
    "NoConvergenceError",
]
