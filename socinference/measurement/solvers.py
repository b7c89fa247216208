"""
Measurement-error solver dispatch.

Public API:
    simulate_measurements(true_values, model, replicates, ...) -> MeasurementSolution
    select_duplicates(measurements, threshold, ...) -> DuplicateSolution
    estimate_error_variance(replicates) -> VarianceSolution
    thresholding_bias_study(true_values, model, threshold, ...) -> BiasStudySolution
"""

from __future__ import annotations

import warnings
from typing import Any, Literal

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray

from socinference.core.exceptions import NoConvergenceError, ValidationError
from socinference.core.random import SeedLike, as_generator, generator_state
from socinference.core.result import Result
from socinference.core.timing import Timer
from socinference.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_choice,
    check_finite,
    check_min_samples,
    check_positive_int,
)
from socinference.measurement._common import (
    DuplicateParams,
    MeasurementParams,
    VarianceParams,
)
from socinference.measurement._moments import error_variance_moments
from socinference.measurement._selection import first_accepted_pairs
from socinference.measurement.design import SimulationDesign
from socinference.measurement.model import ErrorModel
from socinference.measurement.solution import (
    BiasStudySolution,
    DuplicateSolution,
    MeasurementSolution,
    VarianceSolution,
)

OnExhausted = Literal["raise", "average"]


def simulate_measurements(
    true_values: ArrayLike | SimulationDesign,
    model: ErrorModel | None = None,
    replicates: int = 1,
    *,
    seed: SeedLike = None,
) -> MeasurementSolution:
    """
    Apply multiplicative error to true values.

    Every true value is assayed `replicates` times with independent
    error draws. All len(true_values) * replicates draws are taken in a
    single call, in MeasurementVector order.

    Args:
        true_values: Scalar, 1D array, or a prebuilt SimulationDesign.
        model: ErrorModel. Required unless a design is passed.
        replicates: Assays per true value.
        seed: int, None, or a numpy Generator (advanced in place).

    Returns:
        MeasurementSolution

    Examples:
        >>> model = ErrorModel.symmetric(bounds=(0.5, 1.5), sd=0.1)
        >>> sim = simulate_measurements([1.0, 2.0], model, replicates=5, seed=1)
        >>> sim.measurements.shape
        (10,)
    """
    if isinstance(true_values, SimulationDesign):
        design = true_values
    else:
        if model is None:
            raise ValidationError("model is required when true_values is not a SimulationDesign")
        design = SimulationDesign.for_simulation(true_values, model, replicates)

    rng = as_generator(seed)
    timer = Timer()
    timer.start()

    with timer.section('error_draws'):
        errors = design.model.draw((design.n_values, design.replicates), rng)

    with timer.section('apply_error'):
        measurements = design.true_values[:, None] * errors

    timer.stop()

    warnings_list: list[str] = []
    if not design.model.is_centred:
        warnings_list.append(
            f"error model mean is {design.model.mean:g}, not 1: "
            f"measurements are biased"
        )

    params = MeasurementParams(
        true_values=design.true_values,
        errors=errors,
        measurements=measurements,
        replicates=design.replicates,
    )
    result = Result(
        params=params,
        info={
            'kind': design.model.kind,
            'm': design.n_values,
            'replicates': design.replicates,
            'rng_state': generator_state(rng),
        },
        timing=timer.result(),
        backend_name='cpu_beta_error',
        warnings=tuple(warnings_list),
    )
    return MeasurementSolution(_result=result, _design=design)


def select_duplicates(
    measurements: ArrayLike | MeasurementSolution,
    threshold: float,
    *,
    on_exhausted: OnExhausted = "raise",
) -> DuplicateSolution:
    """
    Sequential accept-on-threshold duplicate selection.

    For each column, scan adjacent pairs (S_i, S_{i+1}) in order and
    accept the first whose percent difference |S_i - S_{i+1}| / mean is
    strictly below `threshold`; the pair mean is the estimate.

    Args:
        measurements: (replicates, trials) array, a 1D sequence for a
            single trial, or a MeasurementSolution.
        threshold: Percent-difference threshold as a fraction (0.1 = 10%).
        on_exhausted: What to do for a trial where no pair qualifies.
            "raise" raises NoConvergenceError; "average" reports the mean
            of all its assays and marks accepted_index = -1.

    Returns:
        DuplicateSolution

    Raises:
        ValidationError: If any measurement is negative.
        NoConvergenceError: If on_exhausted="raise" and any trial runs
            out of replicates.
    """
    if isinstance(measurements, MeasurementSolution):
        mat = measurements.as_matrix()
    else:
        mat = check_array(measurements, "measurements")
        if mat.ndim == 1:
            mat = mat[:, None]
        check_2d(mat, "measurements")
    check_finite(mat, "measurements")
    check_min_samples(mat, 2, "measurements")
    if np.any(mat < 0):
        raise ValidationError("measurements: concentrations must be non-negative")

    threshold = float(threshold)
    if not np.isfinite(threshold) or threshold <= 0:
        raise ValidationError(f"threshold must be > 0, got {threshold}")
    check_choice(on_exhausted, ("raise", "average"), "on_exhausted")

    r, m = mat.shape
    timer = Timer()
    timer.start()

    with timer.section('scan'):
        index, found = first_accepted_pairs(mat, threshold)

    missing = np.flatnonzero(~found)
    if missing.size and on_exhausted == "raise":
        raise NoConvergenceError(
            f"{missing.size} of {m} trials had no adjacent pair within "
            f"threshold {threshold:g} after {r} replicates",
            columns=tuple(int(c) for c in missing),
            replicates=r,
            threshold=threshold,
        )

    cols = np.arange(m)
    estimates = (mat[index, cols] + mat[index + 1, cols]) / 2.0
    n_assays = index + 2
    accepted_index = index.astype(np.intp)

    warnings_list: list[str] = []
    if missing.size:
        estimates[missing] = np.mean(mat[:, missing], axis=0)
        n_assays[missing] = r
        accepted_index[missing] = -1
        warnings_list.append(
            f"{missing.size} of {m} trials never met the threshold; "
            f"used the mean of all {r} assays"
        )

    timer.stop()

    params = DuplicateParams(
        estimates=estimates,
        accepted_index=accepted_index,
        n_assays=n_assays,
        threshold=threshold,
        n_fallback=int(missing.size),
    )
    result = Result(
        params=params,
        info={'replicates': r, 'trials': m, 'on_exhausted': on_exhausted},
        timing=timer.result(),
        backend_name='cpu_sequential',
        warnings=tuple(warnings_list),
    )
    return DuplicateSolution(_result=result)


def estimate_error_variance(
    replicates: ArrayLike | MeasurementSolution,
) -> VarianceSolution:
    """
    Moment estimator of the multiplicative error variance sigma_delta^2.

    Args:
        replicates: r >= 2 assays of one sample (1D), an (r, m) matrix
            of assays of m samples, or a MeasurementSolution.

    Returns:
        VarianceSolution. sigma_delta_squared is NaN (and valid is False)
        wherever s-hat^2 <= 0; check before further use.
    """
    if isinstance(replicates, MeasurementSolution):
        mat = replicates.as_matrix()
        single = False
    else:
        mat = check_array(replicates, "replicates")
        single = mat.ndim == 1
        if single:
            mat = mat[:, None]
        check_2d(mat, "replicates")
    check_finite(mat, "replicates")
    check_min_samples(mat, 2, "replicates")

    r = mat.shape[0]
    timer = Timer()
    timer.start()
    with timer.section('moments'):
        mean, sample_variance, s_squared, sigma2 = error_variance_moments(mat)
    timer.stop()

    warnings_list: list[str] = []
    n_bad = int(np.sum(~(s_squared > 0)))
    if n_bad:
        msg = (
            f"s-hat^2 <= 0 for {n_bad} of {len(mean)} samples "
            f"(r={r}); sigma_delta^2 is NaN there"
        )
        warnings_list.append(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=2)

    params = VarianceParams(
        mean=mean,
        sample_variance=sample_variance,
        s_squared=s_squared,
        sigma_delta_squared=sigma2,
        r=r,
    )
    result = Result(
        params=params,
        info={'r': r, 'm': len(mean), 'single': single, 'n_invalid': n_bad},
        timing=timer.result(),
        backend_name='cpu_moments',
        warnings=tuple(warnings_list),
    )
    return VarianceSolution(_result=result)


def thresholding_bias_study(
    true_values: ArrayLike,
    model: ErrorModel,
    threshold: float,
    *,
    max_replicates: int = 20,
    n_trials: int = 1000,
    seed: SeedLike = None,
    on_exhausted: OnExhausted = "average",
) -> BiasStudySolution:
    """
    Monte Carlo bias of sequential duplicate selection.

    For each true value, runs n_trials independent assay sequences of
    length max_replicates, then compares the naive estimate (mean of
    the first two assays) with the thresholded duplicate estimate.

    Args:
        true_values: 1D array of true concentrations.
        model: Error distribution.
        threshold: Percent-difference acceptance threshold.
        max_replicates: Assay budget per sequence (>= 2).
        n_trials: Sequences per true value.
        seed: int, None, or a numpy Generator (advanced in place).
        on_exhausted: Passed to select_duplicates().

    Returns:
        BiasStudySolution whose table has one row per true value.
    """
    values = np.atleast_1d(check_array(true_values, "true_values")).astype(np.float64)
    check_1d(values, "true_values")
    if values.size == 0:
        raise ValidationError("true_values: need at least one value")
    check_finite(values, "true_values")
    max_replicates = check_positive_int(max_replicates, "max_replicates")
    if max_replicates < 2:
        raise ValidationError(f"max_replicates must be >= 2, got {max_replicates}")
    n_trials = check_positive_int(n_trials, "n_trials")

    rng = as_generator(seed)
    timer = Timer()
    timer.start()

    with timer.section('simulate'):
        sim = simulate_measurements(
            np.repeat(values, n_trials), model, max_replicates, seed=rng,
        )
        mat = sim.as_matrix()

    with timer.section('select'):
        dup = select_duplicates(mat, threshold, on_exhausted=on_exhausted)

    with timer.section('aggregate'):
        m = len(values)
        naive = (mat[0] + mat[1]) / 2.0
        naive_mean = naive.reshape(m, n_trials).mean(axis=1)
        selected_mean = dup.estimates.reshape(m, n_trials).mean(axis=1)
        table = pd.DataFrame({
            'true_value': values,
            'naive_mean': naive_mean,
            'selected_mean': selected_mean,
            'naive_bias': naive_mean - values,
            'bias': selected_mean - values,
            'relative_bias': _relative(selected_mean - values, values),
            'mean_assays': dup.n_assays.reshape(m, n_trials).mean(axis=1),
            'n_fallback': (dup.accepted_index.reshape(m, n_trials) < 0).sum(axis=1),
        })

    timer.stop()

    result = Result(
        params=table,
        info={
            'model': repr(model),
            'threshold': dup.threshold,
            'n_trials': n_trials,
            'max_replicates': max_replicates,
            'rng_state': generator_state(rng),
        },
        timing=timer.result(),
        backend_name='cpu_monte_carlo',
        warnings=sim.warnings + dup.warnings,
    )
    return BiasStudySolution(_result=result)


def _relative(diff: NDArray[Any], values: NDArray[Any]) -> NDArray[Any]:
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.where(values != 0, diff / values, np.nan)
