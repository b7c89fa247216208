"""
Tests for the k-sample label permutation test.
"""

import numpy as np
import pytest
from scipy import stats as sp_stats

from socinference.core.exceptions import DimensionError, ValidationError
from socinference.permutation import KSampleDesign, k_sample_test


class TestKSampleTest:

    def test_group_sizes_preserved(self):
        """
        With y = 1 the statistic sum_g n'_g^2 / n_g equals n exactly when
        every relabeling keeps the group sizes, and exceeds n otherwise.
        """
        group = ["a"] * 3 + ["b"] * 5 + ["c"] * 7
        result = k_sample_test(np.ones(15), group, reps=500, seed=0)
        np.testing.assert_allclose(result.perm_stats, 15.0, rtol=1e-12)
        assert result.info["group_sizes"] == (3, 5, 7)

    def test_perfect_separation_gives_minimum_p(self):
        y = np.concatenate([np.zeros(10), np.full(10, 10.0), np.full(10, 20.0)])
        y = y + np.tile(np.linspace(0.0, 0.1, 10), 3)
        group = np.repeat(["low", "mid", "high"], 10)
        result = k_sample_test(y, group, reps=999, seed=1)
        assert result.p_value == 1.0 / 1000.0

    def test_f_statistic_matches_anova(self, rng):
        y = rng.normal(0.0, 1.0, 24)
        group = np.repeat([1, 2, 3], 8)
        result = k_sample_test(y, group, reps=10, statistic="f", seed=0)
        expected = sp_stats.f_oneway(y[:8], y[8:16], y[16:]).statistic
        assert result.observed_stat == pytest.approx(expected, rel=1e-10)

    def test_ss_between_and_f_agree(self, rng):
        """Both statistics are monotone in the same quantity."""
        y = rng.normal(0.0, 1.0, 30)
        y[:10] += 0.8
        group = np.repeat(["x", "y", "z"], 10)
        ssb = k_sample_test(y, group, reps=999, statistic="ss_between", seed=5)
        f = k_sample_test(y, group, reps=999, statistic="f", seed=5)
        assert ssb.p_value == f.p_value
        assert ssb.statistic == "ss_between"
        assert f.statistic == "f"

    def test_null_p_not_small(self, rng):
        y = rng.normal(0.0, 1.0, 30)
        group = np.repeat(["x", "y", "z"], 10)
        result = k_sample_test(y, group, reps=999, seed=2)
        assert 0.0 < result.p_value <= 1.0

    def test_detects_effect(self, rng):
        y = rng.normal(0.0, 1.0, 30)
        y[20:] += 2.0
        group = np.repeat(["x", "y", "z"], 10)
        assert k_sample_test(y, group, reps=999, seed=2).p_value < 0.01

    def test_levels(self):
        result = k_sample_test([1.0, 2.0, 3.0, 4.0], ["b", "a", "b", "a"], reps=5, seed=0)
        assert result.info["levels"] == ("a", "b")
        assert result.backend_name == "cpu_k_sample"


class TestKSampleDesign:

    def test_codes_and_sizes(self):
        design = KSampleDesign.for_k_sample(
            [1.0, 2.0, 3.0, 4.0, 5.0], ["t2", "t1", "t2", "t2", "t1"], reps=10,
        )
        assert design.levels == ("t1", "t2")
        np.testing.assert_array_equal(design.codes, [1, 0, 1, 1, 0])
        np.testing.assert_array_equal(design.group_sizes, [2, 3])

    def test_needs_two_groups(self):
        with pytest.raises(ValidationError, match="at least 2 groups"):
            k_sample_test([1.0, 2.0, 3.0], ["a", "a", "a"], reps=10)

    def test_length_mismatch(self):
        with pytest.raises(DimensionError):
            k_sample_test([1.0, 2.0, 3.0], ["a", "b"], reps=10)

    def test_f_needs_residual_df(self):
        with pytest.raises(ValidationError):
            k_sample_test([1.0, 2.0], ["a", "b"], reps=10, statistic="f")

    def test_unknown_statistic(self):
        with pytest.raises(ValidationError):
            k_sample_test([1.0, 2.0, 3.0], ["a", "b", "a"], reps=10, statistic="t")
