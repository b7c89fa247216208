"""
Multiplicative measurement error for SOC assays.

Usage:
    from socinference.measurement import (
        ErrorModel, simulate_measurements, select_duplicates,
        estimate_error_variance, thresholding_bias_study,
    )

    model = ErrorModel.symmetric(bounds=(0.5, 1.5), sd=0.1)
    sim = simulate_measurements([1.0, 2.5], model, replicates=10, seed=1)
    dup = select_duplicates(sim, threshold=0.1, on_exhausted="average")
    est = estimate_error_variance(sim)
"""

from socinference.measurement.model import ErrorModel
from socinference.measurement.design import SimulationDesign
from socinference.measurement._selection import (
    first_accepted_pair,
    percent_difference,
)
from socinference.measurement.solvers import (
    estimate_error_variance,
    select_duplicates,
    simulate_measurements,
    thresholding_bias_study,
)
from socinference.measurement.solution import (
    BiasStudySolution,
    DuplicateSolution,
    MeasurementSolution,
    VarianceSolution,
)

__all__ = [
    "ErrorModel",
    "SimulationDesign",
    "simulate_measurements",
    "select_duplicates",
    "estimate_error_variance",
    "thresholding_bias_study",
    "first_accepted_pair",
    "percent_difference",
    "MeasurementSolution",
    "DuplicateSolution",
    "VarianceSolution",
    "BiasStudySolution",
]
