"""
Exception hierarchy for socinference.

All exceptions inherit from SOCInferenceError to allow catching any
library-specific error.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class SOCInferenceError(Exception):
    """Base exception for all socinference errors."""
    pass


class ValidationError(SOCInferenceError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.
    """
    pass


class InvalidParameterError(ValidationError):
    """
    Error-model parameters are physically inconsistent.

    Raised when a requested error distribution cannot exist, e.g. a
    standard deviation too large for the bounded support, or non-positive
    beta shape parameters.

    Attributes:
        parameter: Name of the offending parameter
        value: The value supplied
        limit: The bound it violated, if one applies
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        value: float | None = None,
        limit: float | None = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.value = value
        self.limit = limit


class NoConvergenceError(SOCInferenceError):
    """
    Sequential duplicate selection exhausted its replicates.

    Raised when no adjacent pair of assays within the available
    replicates agrees to within the threshold. The caller decides how to
    proceed (e.g. a larger replicate budget, or on_exhausted="average").

    Attributes:
        columns: Indices of the trials that never met the threshold
        replicates: Number of replicates available per trial
        threshold: Percent-difference threshold that was not met
    """

    def __init__(
        self,
        message: str,
        columns: tuple[int, ...],
        replicates: int,
        threshold: float,
    ):
        super().__init__(message)
        self.columns = columns
        self.replicates = replicates
        self.threshold = threshold
