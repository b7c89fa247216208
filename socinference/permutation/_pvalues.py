"""
Permutation p-values.

t2p() turns an observed statistic and its permutation distribution into
a p-value with the +1 correction of Phipson and Smyth (2010):

    p = (#{T_b at least as extreme as T_obs} + 1) / (B + 1)

so p is never 0 and equals 1/(B+1) when no permutation reaches the
observed value.

pvalue_distribution() gives every permutation row its own p-value
against the remaining B - 1 rows, which is what NPC combines.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from socinference.core.exceptions import DimensionError, ValidationError
from socinference.permutation._common import VALID_ALTERNATIVES

# Permuted statistics within this relative distance of the observed one
# count as ties (they differ only by floating point summation order).
_TIE_RTOL = 1e-12
_TIE_ATOL = 1e-15


def resolve_alternatives(
    alternatives: str | Sequence[str],
    k: int,
) -> tuple[str, ...]:
    """Broadcast a single alternative to k outcomes and validate each."""
    if isinstance(alternatives, str):
        alternatives = (alternatives,) * k
    alternatives = tuple(alternatives)
    if len(alternatives) != k:
        raise DimensionError(
            f"alternatives: expected 1 or {k} entries, got {len(alternatives)}"
        )
    for alt in alternatives:
        if alt not in VALID_ALTERNATIVES:
            raise ValidationError(
                f"alternative must be one of {VALID_ALTERNATIVES}, got {alt!r}"
            )
    return alternatives


def _extremeness(values: NDArray, alternative: str) -> NDArray:
    """Map statistics so that larger always means more extreme."""
    if alternative == "greater":
        return values
    if alternative == "less":
        return -values
    return np.abs(values)


def t2p(
    observed: float | ArrayLike,
    distr: ArrayLike,
    alternative: str | Sequence[str] = "greater",
) -> Any:
    """
    Permutation p-value(s).

    Args:
        observed: Observed statistic, scalar or shape (K,).
        distr: Permutation distribution, shape (B,) or (B, K).
        alternative: "greater", "less" or "two.sided", or one per column.

    Returns:
        float for scalar input, otherwise an array of shape (K,).
    """
    obs = np.asarray(observed, dtype=np.float64)
    dist = np.asarray(distr, dtype=np.float64)
    scalar = obs.ndim == 0
    if scalar:
        obs = obs.reshape(1)
        dist = dist.reshape(-1, 1)
    if dist.ndim != 2 or dist.shape[1] != obs.shape[0]:
        raise DimensionError(
            f"distr: expected shape (B, {obs.shape[0]}), got {dist.shape}"
        )
    alternatives = resolve_alternatives(alternative, obs.shape[0])

    B = dist.shape[0]
    p = np.empty(obs.shape[0], dtype=np.float64)
    for j, alt in enumerate(alternatives):
        t_obs = _extremeness(obs[j:j + 1], alt)[0]
        t_null = _extremeness(dist[:, j], alt)
        at_least = (t_null >= t_obs) | np.isclose(
            t_null, t_obs, rtol=_TIE_RTOL, atol=_TIE_ATOL,
        )
        p[j] = (np.count_nonzero(at_least) + 1.0) / (B + 1.0)

    if scalar:
        return float(p[0])
    return p


def pvalue_distribution(
    distr: ArrayLike,
    alternative: str | Sequence[str] = "greater",
) -> NDArray[np.floating[Any]]:
    """
    Leave-one-out p-value of every permutation row.

    Row b is treated as if it were the observed statistic and ranked
    against the other B - 1 rows:

        p_b = (#{j != b : T_j at least as extreme as T_b} + 1) / B

    "At least as extreme" includes near-ties exactly as in t2p(), so p_b
    equals t2p(T_b, distr without row b).

    Args:
        distr: Permutation distribution, shape (B,) or (B, K).
        alternative: One alternative, or one per column.

    Returns:
        Array with the same shape as distr.
    """
    dist = np.asarray(distr, dtype=np.float64)
    vector = dist.ndim == 1
    if vector:
        dist = dist[:, None]
    if dist.ndim != 2:
        raise DimensionError(f"distr: expected 1D or 2D, got {dist.ndim}D")
    B, K = dist.shape
    if B < 2:
        raise ValidationError(f"distr: need at least 2 permutations, got {B}")
    alternatives = resolve_alternatives(alternative, K)

    out = np.empty_like(dist)
    for j, alt in enumerate(alternatives):
        score = _extremeness(dist[:, j], alt)
        ordered = np.sort(score)
        # same tie rule as t2p: T_j counts if T_j >= T_b - (atol + rtol * |T_b|)
        cutoff = score - (_TIE_ATOL + _TIE_RTOL * np.abs(score))
        # includes row b itself, which supplies the +1
        n_at_least = B - np.searchsorted(ordered, cutoff, side='left')
        out[:, j] = n_at_least / B

    if vector:
        return out[:, 0]
    return out
