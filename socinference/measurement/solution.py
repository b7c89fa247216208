"""
Solution wrappers for measurement-error results.

Each Solution wraps a Result[P] and provides convenient accessors and a
text summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from socinference.core.result import Result
from socinference.measurement._common import (
    DuplicateParams,
    MeasurementParams,
    VarianceParams,
)

if TYPE_CHECKING:
    from socinference.measurement.design import SimulationDesign
    from socinference.measurement.model import ErrorModel


class _ResultAccessors:
    """Metadata accessors shared by all measurement solutions."""

    _result: Result[Any]

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings


@dataclass
class MeasurementSolution(_ResultAccessors):
    """
    Simulated assays of a set of true values.

    measurements is the flat MeasurementVector, ordered true-value-major:
    the r assays of true_values[0], then the r assays of true_values[1],
    and so on. as_matrix() gives the (replicates, m) layout used by
    select_duplicates() and estimate_error_variance().
    """
    _result: Result[MeasurementParams]
    _design: 'SimulationDesign'

    @property
    def true_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.true_values

    @property
    def errors(self) -> NDArray[np.floating[Any]]:
        """Multiplicative error draws, shape (m, replicates)."""
        return self._result.params.errors

    @property
    def measurements(self) -> NDArray[np.floating[Any]]:
        """Flat MeasurementVector, length m * replicates."""
        return self._result.params.measurements.ravel()

    @property
    def replicates(self) -> int:
        return self._result.params.replicates

    @property
    def model(self) -> 'ErrorModel':
        return self._design.model

    def as_matrix(self) -> NDArray[np.floating[Any]]:
        """Assays as (replicates, m): row = sequence index, column = true value."""
        return self._result.params.measurements.T.copy()

    def summary(self) -> str:
        m = len(self.true_values)
        rel = self._result.params.measurements / self.true_values[:, None]
        lines = [
            "\nSIMULATED MEASUREMENTS",
            "",
            f"Error model: {self.model!r}",
            f"True values: {m}, replicates: {self.replicates}",
            f"E[delta] = {self.model.mean:.6g}, "
            f"Var(delta) = {self.model.variance:.6g}, "
            f"skewness = {self.model.skewness:.4g}",
            f"Observed mean(S / s) = {float(np.mean(rel)):.6g}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"MeasurementSolution(m={len(self.true_values)}, "
            f"replicates={self.replicates}, model={self.model!r})"
        )


@dataclass
class DuplicateSolution(_ResultAccessors):
    """Accepted duplicate estimates, one per trial column."""
    _result: Result[DuplicateParams]

    @property
    def estimates(self) -> NDArray[np.floating[Any]]:
        return self._result.params.estimates

    @property
    def accepted_index(self) -> NDArray[np.integer[Any]]:
        """Row of the accepted pair, -1 where the column average was used."""
        return self._result.params.accepted_index

    @property
    def n_assays(self) -> NDArray[np.integer[Any]]:
        """Assays consumed per trial."""
        return self._result.params.n_assays

    @property
    def threshold(self) -> float:
        return self._result.params.threshold

    @property
    def n_fallback(self) -> int:
        return self._result.params.n_fallback

    def summary(self) -> str:
        lines = [
            "\nSEQUENTIAL DUPLICATE SELECTION",
            "",
            f"Threshold (percent difference): {self.threshold:.4g}",
            f"Trials: {len(self.estimates)}, "
            f"mean assays used: {float(np.mean(self.n_assays)):.3f}",
            f"Trials averaged without an accepted pair: {self.n_fallback}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"DuplicateSolution(n={len(self.estimates)}, "
            f"threshold={self.threshold:.4g}, n_fallback={self.n_fallback})"
        )


@dataclass
class VarianceSolution(_ResultAccessors):
    """
    Moment estimates of sigma_delta^2.

    For a 1D input (one true value) every accessor returns a float;
    for an (r, m) input each returns an array of length m.
    """
    _result: Result[VarianceParams]

    def _value(self, arr: NDArray) -> Any:
        if self._result.info.get('single'):
            return float(arr[0])
        return arr

    @property
    def mean(self) -> Any:
        return self._value(self._result.params.mean)

    @property
    def sample_variance(self) -> Any:
        return self._value(self._result.params.sample_variance)

    @property
    def s_squared(self) -> Any:
        return self._value(self._result.params.s_squared)

    @property
    def sigma_delta_squared(self) -> Any:
        """Error variance estimate; NaN where s_squared <= 0."""
        return self._value(self._result.params.sigma_delta_squared)

    @property
    def valid(self) -> Any:
        ok = self._result.params.s_squared > 0
        if self._result.info.get('single'):
            return bool(ok[0])
        return ok

    @property
    def r(self) -> int:
        return self._result.params.r

    def summary(self) -> str:
        p = self._result.params
        n_valid = int(np.sum(p.s_squared > 0))
        lines = [
            "\nMULTIPLICATIVE ERROR VARIANCE (moment estimator)",
            "",
            f"Replicates per sample: {p.r}, samples: {len(p.mean)} "
            f"({n_valid} with s-hat^2 > 0)",
        ]
        if n_valid:
            est = p.sigma_delta_squared[p.s_squared > 0]
            lines.append(
                f"sigma-hat_delta^2: mean {float(np.mean(est)):.6g}, "
                f"median {float(np.median(est)):.6g}"
            )
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"VarianceSolution(r={self.r}, "
            f"m={len(self._result.params.mean)})"
        )


@dataclass
class BiasStudySolution(_ResultAccessors):
    """
    Monte Carlo comparison of the naive duplicate mean against the
    thresholded duplicate estimate, per true value.
    """
    _result: Result[pd.DataFrame]

    @property
    def table(self) -> pd.DataFrame:
        """
        One row per true value with columns true_value, naive_mean,
        selected_mean, naive_bias, bias, relative_bias, mean_assays,
        n_fallback.
        """
        return self._result.params.copy()

    @property
    def bias(self) -> NDArray[np.floating[Any]]:
        return self._result.params['bias'].to_numpy()

    @property
    def relative_bias(self) -> NDArray[np.floating[Any]]:
        return self._result.params['relative_bias'].to_numpy()

    def summary(self) -> str:
        lines = [
            "\nSEQUENTIAL THRESHOLDING BIAS",
            "",
            f"Error model: {self.info['model']}",
            f"Threshold: {self.info['threshold']:.4g}, "
            f"trials per value: {self.info['n_trials']}, "
            f"max replicates: {self.info['max_replicates']}",
            "",
            self._result.params.to_string(index=False, float_format=lambda v: f"{v:.5g}"),
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BiasStudySolution(values={len(self._result.params)}, "
            f"n_trials={self.info['n_trials']})"
        )
