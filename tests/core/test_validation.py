"""
Tests for input validation utilities.
"""

import numpy as np
import pytest

from socinference.core.exceptions import DimensionError, ValidationError
from socinference.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_choice,
    check_consistent_length,
    check_finite,
    check_min_samples,
    check_positive_int,
)


# ═══════════════════════════════════════════════════════════════════════
# check_array
# ═══════════════════════════════════════════════════════════════════════


class TestCheckArray:
    """check_array converts to ndarray and rejects non-numeric data."""

    def test_list_to_float_array(self):
        result = check_array([1, 2, 3], "x")
        assert np.issubdtype(result.dtype, np.floating)
        np.testing.assert_array_equal(result, [1.0, 2.0, 3.0])

    def test_rejects_strings(self):
        with pytest.raises(ValidationError, match="non-numeric"):
            check_array(["a", "b"], "x")

    def test_rejects_mixed_types(self):
        with pytest.raises(ValidationError, match="object dtype"):
            check_array([1.0, "b", None], "x")


# ═══════════════════════════════════════════════════════════════════════
# Shape and content checks
# ═══════════════════════════════════════════════════════════════════════


class TestShapeChecks:

    def test_check_finite_rejects_nan(self):
        with pytest.raises(ValidationError):
            check_finite(np.array([1.0, np.nan]), "x")

    def test_check_finite_rejects_inf(self):
        with pytest.raises(ValidationError):
            check_finite(np.array([1.0, np.inf]), "x")

    def test_check_1d(self):
        check_1d(np.zeros(3), "x")
        with pytest.raises(DimensionError):
            check_1d(np.zeros((3, 2)), "x")

    def test_check_2d(self):
        check_2d(np.zeros((3, 2)), "x")
        with pytest.raises(DimensionError):
            check_2d(np.zeros(3), "x")

    def test_consistent_length(self):
        check_consistent_length(np.zeros(4), np.zeros((4, 2)), names=("y", "x"))
        with pytest.raises(DimensionError, match="y=4, group=3"):
            check_consistent_length(np.zeros(4), np.zeros(3), names=("y", "group"))

    def test_min_samples(self):
        with pytest.raises(ValidationError, match="at least 2"):
            check_min_samples(np.zeros((1, 5)), 2, "replicates")


# ═══════════════════════════════════════════════════════════════════════
# Scalar parameter checks
# ═══════════════════════════════════════════════════════════════════════


class TestScalarChecks:

    def test_positive_int_accepts_numpy_int(self):
        assert check_positive_int(np.int64(5), "reps") == 5

    @pytest.mark.parametrize("bad", [0, -3])
    def test_positive_int_rejects_non_positive(self, bad):
        with pytest.raises(ValidationError, match="reps must be >= 1"):
            check_positive_int(bad, "reps")

    @pytest.mark.parametrize("bad", [2.0, True, "10"])
    def test_positive_int_rejects_non_int(self, bad):
        with pytest.raises(ValidationError):
            check_positive_int(bad, "reps")

    def test_check_choice(self):
        assert check_choice("f", ("ss_between", "f"), "statistic") == "f"
        with pytest.raises(ValidationError, match="statistic must be one of"):
            check_choice("t", ("ss_between", "f"), "statistic")
