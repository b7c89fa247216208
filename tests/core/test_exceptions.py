"""
Tests for the socinference exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via SOCInferenceError)
    - Diagnostic attributes on InvalidParameterError and NoConvergenceError
    - Default attribute values (None for optional attributes)
"""

import pytest

from socinference.core.exceptions import (
    DimensionError,
    InvalidParameterError,
    NoConvergenceError,
    SOCInferenceError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via SOCInferenceError."""

    def test_validation_error_is_base_error(self):
        with pytest.raises(SOCInferenceError):
            raise ValidationError("bad input")

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DimensionError("wrong shape")

    def test_invalid_parameter_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise InvalidParameterError("sd too large", parameter="sd")

    def test_no_convergence_is_not_validation_error(self):
        """Running out of replicates is a data outcome, not bad input."""
        err = NoConvergenceError("exhausted", columns=(0,), replicates=5, threshold=0.1)
        assert isinstance(err, SOCInferenceError)
        assert not isinstance(err, ValidationError)


# ═══════════════════════════════════════════════════════════════════════
# InvalidParameterError
# ═══════════════════════════════════════════════════════════════════════


class TestInvalidParameterError:

    def test_all_attributes(self):
        err = InvalidParameterError(
            "sd^2 must be < 0.25", parameter="sd", value=1.0, limit=0.5,
        )
        assert str(err) == "sd^2 must be < 0.25"
        assert err.parameter == "sd"
        assert err.value == 1.0
        assert err.limit == 0.5

    def test_defaults_are_none(self):
        err = InvalidParameterError("bad")
        assert err.parameter is None
        assert err.value is None
        assert err.limit is None


# ═══════════════════════════════════════════════════════════════════════
# NoConvergenceError
# ═══════════════════════════════════════════════════════════════════════


class TestNoConvergenceError:

    def test_attributes(self):
        err = NoConvergenceError(
            "2 of 10 trials exhausted", columns=(3, 7), replicates=6, threshold=0.05,
        )
        assert err.columns == (3, 7)
        assert err.replicates == 6
        assert err.threshold == 0.05
        assert "exhausted" in str(err)

    def test_catchable_with_attributes(self):
        with pytest.raises(NoConvergenceError) as exc_info:
            raise NoConvergenceError("none", columns=(0,), replicates=2, threshold=0.01)
        assert exc_info.value.columns == (0,)
