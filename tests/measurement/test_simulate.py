"""
Tests for simulate_measurements().

Unbiasedness of both error models, MeasurementVector layout, and
generator threading.
"""

import numpy as np
import pytest

from socinference.core.exceptions import ValidationError
from socinference.measurement import (
    ErrorModel,
    SimulationDesign,
    simulate_measurements,
)


# ═══════════════════════════════════════════════════════════════════════
# Unbiasedness
# ═══════════════════════════════════════════════════════════════════════


class TestUnbiased:
    """Large-sample mean of the measurements matches the true value."""

    @pytest.mark.parametrize("true_value", [0.5, 2.5, 40.0])
    def test_symmetric(self, true_value):
        model = ErrorModel.symmetric(bounds=(0.5, 1.5), sd=0.1)
        sim = simulate_measurements(true_value, model, replicates=100000, seed=1)
        assert abs(np.mean(sim.measurements) / true_value - 1.0) < 0.01

    @pytest.mark.parametrize("true_value", [0.5, 2.5, 40.0])
    def test_skewed(self, true_value):
        model = ErrorModel.skewed(2.0, 8.0)
        sim = simulate_measurements(true_value, model, replicates=100000, seed=2)
        assert abs(np.mean(sim.measurements) / true_value - 1.0) < 0.01

    def test_uncentred_model_flags_result(self):
        with pytest.warns(UserWarning):
            model = ErrorModel.symmetric(bounds=(0.6, 1.6), sd=0.1)
        sim = simulate_measurements(1.0, model, replicates=10, seed=0)
        assert sim._result.has_warning("biased")


# ═══════════════════════════════════════════════════════════════════════
# Layout
# ═══════════════════════════════════════════════════════════════════════


class TestLayout:

    def test_flat_vector_is_true_value_major(self):
        model = ErrorModel.symmetric()
        sim = simulate_measurements([1.0, 10.0, 100.0], model, replicates=4, seed=3)
        assert sim.measurements.shape == (12,)
        np.testing.assert_allclose(sim.measurements[:4], 1.0 * sim.errors[0])
        np.testing.assert_allclose(sim.measurements[4:8], 10.0 * sim.errors[1])
        np.testing.assert_allclose(sim.measurements[8:], 100.0 * sim.errors[2])

    def test_as_matrix(self):
        model = ErrorModel.symmetric()
        sim = simulate_measurements([1.0, 10.0], model, replicates=5, seed=3)
        mat = sim.as_matrix()
        assert mat.shape == (5, 2)
        np.testing.assert_array_equal(mat[:, 1], sim.measurements[5:])

    def test_info(self):
        sim = simulate_measurements([1.0, 2.0], ErrorModel.skewed(2, 8), 3, seed=0)
        assert sim.info["m"] == 2
        assert sim.info["replicates"] == 3
        assert sim.info["kind"] == "skewed"
        assert "rng_state" in sim.info
        assert sim.backend_name == "cpu_beta_error"

    def test_design_input(self):
        design = SimulationDesign.for_simulation([1.0, 2.0], ErrorModel.symmetric(), 3)
        sim = simulate_measurements(design, seed=0)
        assert sim.measurements.shape == (6,)

    def test_model_required(self):
        with pytest.raises(ValidationError, match="model"):
            simulate_measurements([1.0])

    @pytest.mark.parametrize("replicates", [0, -1, 2.5])
    def test_invalid_replicates(self, replicates):
        with pytest.raises(ValidationError):
            simulate_measurements([1.0], ErrorModel.symmetric(), replicates)

    def test_non_finite_true_values(self):
        with pytest.raises(ValidationError):
            simulate_measurements([1.0, np.nan], ErrorModel.symmetric(), 2)

    def test_summary_and_repr(self):
        sim = simulate_measurements([1.0, 2.0], ErrorModel.symmetric(), 3, seed=0)
        assert "SIMULATED MEASUREMENTS" in sim.summary()
        assert repr(sim).startswith("MeasurementSolution(m=2")


# ═══════════════════════════════════════════════════════════════════════
# Randomness
# ═══════════════════════════════════════════════════════════════════════


class TestRandomness:

    def test_same_seed_same_draws(self):
        model = ErrorModel.skewed(2.0, 8.0)
        a = simulate_measurements([1.0, 2.0], model, 10, seed=99)
        b = simulate_measurements([1.0, 2.0], model, 10, seed=99)
        np.testing.assert_array_equal(a.measurements, b.measurements)

    def test_generator_is_advanced(self):
        model = ErrorModel.symmetric()
        gen = np.random.default_rng(5)
        a = simulate_measurements(1.0, model, 10, seed=gen)
        b = simulate_measurements(1.0, model, 10, seed=gen)
        assert not np.array_equal(a.measurements, b.measurements)

    def test_threaded_calls_match_single_call(self):
        """Draws are taken in MeasurementVector order from one stream."""
        model = ErrorModel.symmetric()
        joint = simulate_measurements([1.0, 2.0], model, 6, seed=11)

        gen = np.random.default_rng(11)
        first = simulate_measurements(1.0, model, 6, seed=gen)
        second = simulate_measurements(2.0, model, 6, seed=gen)
        np.testing.assert_allclose(
            joint.measurements,
            np.concatenate([first.measurements, second.measurements]),
        )
