"""
Solution wrappers for permutation results.

PermutationSolution wraps a single-outcome Result[PermutationParams];
NPCSolution wraps Result[NPCParams].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from socinference.core.result import Result
from socinference.permutation._common import NPCParams, PermutationParams


@dataclass
class PermutationSolution:
    """
    User-facing permutation test results for one outcome.

    Provides observed statistic, permutation distribution, and p-value.
    """
    _result: Result[PermutationParams]

    # --- Core fields ---

    @property
    def observed_stat(self) -> float:
        """Test statistic on original (unpermuted) data."""
        return float(self._result.params.observed[0])

    @property
    def perm_stats(self) -> NDArray[np.floating[Any]]:
        """Permutation distribution, shape (reps,)."""
        return self._result.params.distr[:, 0]

    @property
    def p_value(self) -> float:
        """(count + 1) / (reps + 1)."""
        return float(self._result.params.p_values[0])

    @property
    def reps(self) -> int:
        return self._result.params.reps

    @property
    def alternative(self) -> str:
        return self._result.params.alternatives[0]

    @property
    def statistic(self) -> str:
        """Name of the test statistic ('mean', 'ss_between' or 'f')."""
        return self._result.params.statistic

    # --- Metadata ---

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

    # --- Display ---

    def summary(self) -> str:
        """Permutation test summary."""
        title = {
            'cpu_sign_flip': "ONE-SAMPLE SIGN-FLIP PERMUTATION TEST",
            'cpu_k_sample': "K-SAMPLE PERMUTATION TEST",
        }.get(self.backend_name, "PERMUTATION TEST")
        lines = [
            f"\n{title}",
            "",
            f"Number of permutations: {self.reps}",
            f"Statistic: {self.statistic}",
            f"Observed statistic: {self.observed_stat:.6g}",
            f"p-value ({self.alternative}): {self.p_value:.4g}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"PermutationSolution(reps={self.reps}, "
            f"observed={self.observed_stat:.4g}, "
            f"p_value={self.p_value:.4g})"
        )


@dataclass
class NPCSolution:
    """
    Nonparametric combination of K permutation tests.

    partial_p_values are the per-outcome p-values; p_value is the omnibus
    p-value of the combined statistic against its permutation
    distribution.
    """
    _result: Result[NPCParams]

    @property
    def p_value(self) -> float:
        return self._result.params.p_value

    @property
    def partial_p_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.partial_p_values

    @property
    def statistics(self) -> NDArray[np.floating[Any]]:
        return self._result.params.statistics

    @property
    def distr(self) -> NDArray[np.floating[Any]]:
        """Joint permutation distribution, shape (reps, K)."""
        return self._result.params.distr

    @property
    def combined_observed(self) -> float:
        return self._result.params.combined_observed

    @property
    def combined_null(self) -> NDArray[np.floating[Any]]:
        return self._result.params.combined_null

    @property
    def combine(self) -> str:
        return self._result.params.combine

    @property
    def names(self) -> tuple[str, ...]:
        return self._result.params.names

    @property
    def alternatives(self) -> tuple[str, ...]:
        return self._result.params.alternatives

    @property
    def reps(self) -> int:
        return self._result.params.distr.shape[0]

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

    def partial_table(self) -> pd.DataFrame:
        """Per-outcome statistic, alternative and p-value."""
        p = self._result.params
        return pd.DataFrame(
            {
                'statistic': p.statistics,
                'alternative': list(p.alternatives),
                'p_value': p.partial_p_values,
            },
            index=pd.Index(list(p.names), name='outcome'),
        )

    def summary(self) -> str:
        lines = [
            "\nNONPARAMETRIC COMBINATION OF TESTS",
            "",
            f"Combining function: {self.combine}",
            f"Number of permutations: {self.reps}",
            "",
            "Partial tests:",
            self.partial_table().to_string(float_format=lambda v: f"{v:.5g}"),
            "",
            f"Combined statistic: {self.combined_observed:.6g}",
            f"Omnibus p-value: {self.p_value:.4g}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"NPCSolution(K={len(self.names)}, reps={self.reps}, "
            f"combine={self.combine!r}, p_value={self.p_value:.4g})"
        )
