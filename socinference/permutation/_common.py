"""
Common data structures for permutation tests.

PermutationParams and NPCParams are the payloads wrapped by Result[P].
Statistics are stored column-wise so that one set of permutations can
serve K outcomes at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

VALID_ALTERNATIVES = ("two.sided", "less", "greater")


@dataclass(frozen=True)
class PermutationParams:
    """
    Parameter payload for permutation tests over K outcomes.

    - observed: test statistic on the unpermuted data, shape (K,)
    - distr: permutation distribution, shape (B, K); row b holds all K
      statistics under the same relabeling
    - p_values: (count + 1) / (B + 1) per outcome, shape (K,)
    """
    observed: NDArray[np.floating[Any]]     # shape (K,)
    distr: NDArray[np.floating[Any]]        # shape (B, K)
    p_values: NDArray[np.floating[Any]]     # shape (K,)
    reps: int
    alternatives: tuple[str, ...]
    statistic: str


@dataclass(frozen=True)
class NPCParams:
    """
    Parameter payload for nonparametric combination of tests.

    - partial_p_values: per-outcome p-values, shape (K,)
    - combined_observed: combining function applied to partial_p_values
    - combined_null: combining function applied to each permutation row's
      leave-one-out p-values, shape (B,)
    - p_value: omnibus p-value
    """
    statistics: NDArray[np.floating[Any]]        # shape (K,)
    distr: NDArray[np.floating[Any]]             # shape (B, K)
    partial_p_values: NDArray[np.floating[Any]]  # shape (K,)
    combined_observed: float
    combined_null: NDArray[np.floating[Any]]     # shape (B,)
    p_value: float
    combine: str
    alternatives: tuple[str, ...]
    names: tuple[str, ...]
