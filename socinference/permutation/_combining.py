"""
Combining functions for nonparametric combination (NPC).

Each maps a vector of K partial p-values (last axis) to one statistic,
oriented so that larger values are stronger evidence against the joint
null:

    fisher:  -2 * sum(log p_k)
    liptak:  sum(Phi^{-1}(1 - p_k))
    tippett: max(1 - p_k)
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats as sp_stats

from socinference.core.exceptions import ValidationError

CombiningFunction = Callable[[NDArray[np.floating[Any]]], Any]


def fisher(p: ArrayLike) -> Any:
    """Fisher's combining function."""
    return -2.0 * np.sum(np.log(np.asarray(p, dtype=np.float64)), axis=-1)


def liptak(p: ArrayLike) -> Any:
    """Liptak (Stouffer) combining function."""
    return np.sum(sp_stats.norm.isf(np.asarray(p, dtype=np.float64)), axis=-1)


def tippett(p: ArrayLike) -> Any:
    """Tippett's combining function."""
    return np.max(1.0 - np.asarray(p, dtype=np.float64), axis=-1)


COMBINING_FUNCTIONS: dict[str, CombiningFunction] = {
    "fisher": fisher,
    "liptak": liptak,
    "tippett": tippett,
}


def get_combining_function(
    combine: str | CombiningFunction,
) -> tuple[str, CombiningFunction]:
    """Resolve a combining function by name, or accept a callable."""
    if callable(combine):
        return getattr(combine, '__name__', 'custom'), combine
    if combine not in COMBINING_FUNCTIONS:
        raise ValidationError(
            f"combine must be one of {tuple(COMBINING_FUNCTIONS)} or a "
            f"callable, got {combine!r}"
        )
    return combine, COMBINING_FUNCTIONS[combine]
