"""
Tests for t2p(), pvalue_distribution() and p_adjust().

p_adjust() expected values match R's p.adjust() on the same inputs.
"""

import numpy as np
import pytest

from socinference.core.exceptions import DimensionError, ValidationError
from socinference.permutation import (
    one_sample_test,
    p_adjust,
    pvalue_distribution,
    t2p,
)


# ═══════════════════════════════════════════════════════════════════════
# t2p
# ═══════════════════════════════════════════════════════════════════════


class TestT2P:

    def test_greater(self):
        """2 of 4 draws >= 3: (2 + 1) / (4 + 1)."""
        assert t2p(3.0, [1.0, 2.0, 3.0, 4.0], "greater") == pytest.approx(0.6)

    def test_less(self):
        assert t2p(3.0, [1.0, 2.0, 3.0, 4.0], "less") == pytest.approx(0.8)

    def test_two_sided(self):
        assert t2p(3.0, [-4.0, -1.0, 2.0, 3.0], "two.sided") == pytest.approx(0.6)

    def test_minimum_is_one_over_b_plus_one(self):
        assert t2p(100.0, np.arange(99.0), "greater") == pytest.approx(0.01)

    def test_near_ties_count(self):
        """Draws differing only by summation rounding count as ties."""
        obs = 0.1 + 0.2
        assert t2p(obs, [0.3, 0.0], "greater") == pytest.approx(2.0 / 3.0)

    def test_returns_float_for_scalar(self):
        assert isinstance(t2p(1.0, [0.0, 2.0]), float)

    def test_vector(self):
        distr = np.array([[1.0, 10.0], [2.0, 20.0], [3.0, 30.0]])
        p = t2p([2.5, 5.0], distr, ["greater", "less"])
        np.testing.assert_allclose(p, [0.5, 0.25])

    def test_shape_mismatch(self):
        with pytest.raises(DimensionError):
            t2p([1.0, 2.0], np.zeros((5, 3)))

    def test_bad_alternative(self):
        with pytest.raises(ValidationError):
            t2p(1.0, [0.0, 2.0], "both")


# ═══════════════════════════════════════════════════════════════════════
# pvalue_distribution
# ═══════════════════════════════════════════════════════════════════════


class TestPvalueDistribution:

    def test_greater(self):
        np.testing.assert_allclose(
            pvalue_distribution([1.0, 2.0, 3.0, 4.0], "greater"),
            [1.0, 0.75, 0.5, 0.25],
        )

    def test_less(self):
        np.testing.assert_allclose(
            pvalue_distribution([1.0, 2.0, 3.0, 4.0], "less"),
            [0.25, 0.5, 0.75, 1.0],
        )

    def test_ties(self):
        np.testing.assert_allclose(
            pvalue_distribution([1.0, 1.0, 2.0], "greater"),
            [1.0, 1.0, 1.0 / 3.0],
        )

    def test_matches_brute_force(self, rng):
        distr = rng.normal(0.0, 1.0, (50, 2))
        out = pvalue_distribution(distr, "two.sided")
        score = np.abs(distr)
        for b in range(50):
            expected = np.sum(score >= score[b], axis=0) / 50.0
            np.testing.assert_allclose(out[b], expected)

    @pytest.mark.parametrize("alternative", ["greater", "less", "two.sided"])
    def test_rounded_data_uses_t2p_tie_rule(self, alternative):
        """
        Sign-flip means of one-decimal data tie in exact arithmetic but
        not always in floating point; each row must match t2p() against
        the remaining rows.
        """
        x = np.array([0.1, 0.2, 0.3, 0.7, 1.1, 0.4])
        distr = one_sample_test(x, reps=400, seed=0).perm_stats
        out = pvalue_distribution(distr, alternative)
        for b in range(len(distr)):
            expected = t2p(distr[b], np.delete(distr, b), alternative)
            assert out[b] == pytest.approx(expected, rel=1e-12)

    def test_needs_two_rows(self):
        with pytest.raises(ValidationError):
            pvalue_distribution([1.0])


# ═══════════════════════════════════════════════════════════════════════
# p_adjust
# ═══════════════════════════════════════════════════════════════════════


P = np.array([0.01, 0.02, 0.03, 0.04, 0.05])


class TestPAdjust:

    def test_bonferroni(self):
        np.testing.assert_allclose(p_adjust(P, "bonferroni"), [0.05, 0.10, 0.15, 0.20, 0.25])

    def test_holm(self):
        np.testing.assert_allclose(p_adjust(P, "holm"), [0.05, 0.08, 0.09, 0.09, 0.09])

    def test_hochberg(self):
        np.testing.assert_allclose(p_adjust(P, "hochberg"), [0.05] * 5)

    def test_bh(self):
        np.testing.assert_allclose(p_adjust(P, "BH"), [0.05] * 5)
        np.testing.assert_allclose(p_adjust(P, "fdr"), p_adjust(P, "BH"))

    def test_by(self):
        cm = 1.0 + 1.0 / 2 + 1.0 / 3 + 1.0 / 4 + 1.0 / 5
        np.testing.assert_allclose(p_adjust(P, "BY"), [0.05 * cm] * 5)

    def test_bh_unsorted(self):
        """R: p.adjust(c(0.04, 0.001, 0.5, 0.02), 'BH') = 0.0533, 0.004, 0.5, 0.04."""
        np.testing.assert_allclose(
            p_adjust([0.04, 0.001, 0.5, 0.02], "BH"),
            [0.04 * 4 / 3, 0.004, 0.5, 0.04],
        )

    def test_clipped_to_one(self):
        assert p_adjust([0.5, 0.9], "bonferroni").max() == 1.0

    def test_nan_kept_and_not_counted(self):
        out = p_adjust([0.01, np.nan, 0.04], "bonferroni")
        assert np.isnan(out[1])
        np.testing.assert_allclose(out[[0, 2]], [0.02, 0.08])

    def test_none(self):
        np.testing.assert_array_equal(p_adjust(P, "none"), P)

    def test_explicit_n(self):
        np.testing.assert_allclose(p_adjust([0.01], "bonferroni", n=10), [0.1])

    def test_n_too_small(self):
        with pytest.raises(ValidationError):
            p_adjust(P, "holm", n=2)

    def test_unknown_method(self):
        with pytest.raises(ValidationError):
            p_adjust(P, "sidak")

    def test_empty(self):
        assert p_adjust([], "BH").shape == (0,)
