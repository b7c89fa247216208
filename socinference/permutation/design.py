"""
Design classes for permutation tests.

OneSampleDesign and KSampleDesign hold validated inputs for the
backends. Both accept K outcome columns so that a single set of
relabelings is shared across outcomes. Immutable, validated at
construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from socinference.core.exceptions import ValidationError
from socinference.core.random import SeedLike
from socinference.core.validation import (
    check_2d,
    check_array,
    check_choice,
    check_consistent_length,
    check_finite,
    check_min_samples,
    check_positive_int,
)
from socinference.permutation._pvalues import resolve_alternatives

K_SAMPLE_STATISTICS = ("ss_between", "f")


def _outcome_matrix(x: Any, name: str) -> tuple[NDArray[np.floating[Any]], tuple[str, ...]]:
    """Coerce 1D/2D array-like (or DataFrame) to (n, K) and column names."""
    columns = getattr(x, 'columns', None)
    arr = check_array(x, name)
    if arr.ndim == 1:
        arr = arr[:, None]
    check_2d(arr, name)
    check_finite(arr, name)
    if columns is not None:
        names = tuple(str(c) for c in columns)
    elif arr.shape[1] == 1:
        names = (name,)
    else:
        names = tuple(f"{name}{j + 1}" for j in range(arr.shape[1]))
    return arr.astype(np.float64, copy=True), names


@dataclass(frozen=True)
class OneSampleDesign:
    """
    Frozen design for the paired (sign-flip) permutation test.

    Attributes:
        x: Per-unit differences, shape (n, K).
        names: Outcome names, length K.
        reps: Number of random sign flips B.
        alternatives: One alternative per outcome.
        seed: int, None or Generator.
    """
    x: NDArray[np.floating[Any]]
    names: tuple[str, ...]
    reps: int
    alternatives: tuple[str, ...]
    seed: SeedLike

    @property
    def n(self) -> int:
        return self.x.shape[0]

    @property
    def k(self) -> int:
        return self.x.shape[1]

    @classmethod
    def for_one_sample(
        cls,
        x: ArrayLike,
        reps: int = 10000,
        *,
        alternative: str | Sequence[str] = "two.sided",
        seed: SeedLike = None,
    ) -> OneSampleDesign:
        """
        Create a sign-flip design with validation.

        Args:
            x: Differences, 1D (one outcome) or (n, K).
            reps: Number of sign-flip replicates. Must be >= 1.
            alternative: "two.sided" (default), "greater" or "less", or
                one per outcome column.
            seed: Random seed or Generator.
        """
        arr, names = _outcome_matrix(x, "x")
        check_min_samples(arr, 1, "x")
        reps = check_positive_int(reps, "reps")
        alternatives = resolve_alternatives(alternative, arr.shape[1])
        return cls(x=arr, names=names, reps=reps, alternatives=alternatives, seed=seed)


@dataclass(frozen=True)
class KSampleDesign:
    """
    Frozen design for the k-sample (one-way) label permutation test.

    Attributes:
        y: Outcomes, shape (n, K).
        names: Outcome names, length K.
        codes: Integer group code per unit, shape (n,).
        levels: Group labels in code order.
        reps: Number of random relabelings B.
        statistic: "ss_between" or "f".
        alternatives: One alternative per outcome.
        seed: int, None or Generator.
    """
    y: NDArray[np.floating[Any]]
    names: tuple[str, ...]
    codes: NDArray[np.intp]
    levels: tuple[str, ...]
    reps: int
    statistic: str
    alternatives: tuple[str, ...]
    seed: SeedLike

    @property
    def n(self) -> int:
        return self.y.shape[0]

    @property
    def k(self) -> int:
        return self.y.shape[1]

    @property
    def group_sizes(self) -> NDArray[np.intp]:
        return np.bincount(self.codes, minlength=len(self.levels))

    @classmethod
    def for_k_sample(
        cls,
        y: ArrayLike,
        group: ArrayLike,
        reps: int = 10000,
        *,
        statistic: str = "ss_between",
        alternative: str | Sequence[str] = "greater",
        seed: SeedLike = None,
    ) -> KSampleDesign:
        """
        Create a k-sample design with validation.

        Args:
            y: Outcomes, 1D or (n, K).
            group: Group label per unit (any hashable labels).
            reps: Number of relabelings. Must be >= 1.
            statistic: "ss_between" (sum_g n_g * mean_g^2) or "f".
            alternative: Defaults to "greater"; both statistics are
                non-negative so "two.sided" gives the same p-value.
            seed: Random seed or Generator.
        """
        arr, names = _outcome_matrix(y, "y")
        group_arr = np.asarray(group)
        if group_arr.ndim != 1:
            raise ValidationError(f"group: expected 1D, got {group_arr.ndim}D")
        check_consistent_length(arr, group_arr, names=("y", "group"))

        labels = np.array([str(v) for v in group_arr])
        levels, codes = np.unique(labels, return_inverse=True)
        if len(levels) < 2:
            raise ValidationError(
                f"group: need at least 2 groups, got {len(levels)}"
            )

        check_choice(statistic, K_SAMPLE_STATISTICS, "statistic")
        if statistic == "f" and arr.shape[0] <= len(levels):
            raise ValidationError(
                f"statistic='f' needs more units ({arr.shape[0]}) than "
                f"groups ({len(levels)})"
            )
        reps = check_positive_int(reps, "reps")
        alternatives = resolve_alternatives(alternative, arr.shape[1])

        return cls(
            y=arr,
            names=names,
            codes=codes.astype(np.intp),
            levels=tuple(str(v) for v in levels),
            reps=reps,
            statistic=statistic,
            alternatives=alternatives,
            seed=seed,
        )
