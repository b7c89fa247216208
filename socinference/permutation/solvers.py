"""
Solver dispatch for permutation tests.

Public API:
    one_sample_test(x, ...) -> PermutationSolution
    k_sample_test(y, group, ...) -> PermutationSolution
    npc(statistics, distr, ...) -> NPCSolution
    npc_test(x, group=None, ...) -> NPCSolution
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from numpy.typing import ArrayLike

from socinference.core.exceptions import DimensionError, ValidationError
from socinference.core.random import SeedLike
from socinference.core.result import Result
from socinference.core.timing import Timer
from socinference.core.validation import (
    check_1d,
    check_array,
    check_finite,
    check_positive_int,
)
from socinference.permutation._combining import (
    CombiningFunction,
    get_combining_function,
)
from socinference.permutation._common import NPCParams
from socinference.permutation._pvalues import (
    pvalue_distribution,
    resolve_alternatives,
    t2p,
)
from socinference.permutation.backends.cpu import (
    CPUKSampleBackend,
    CPUSignFlipBackend,
)
from socinference.permutation.design import KSampleDesign, OneSampleDesign
from socinference.permutation.solution import NPCSolution, PermutationSolution


def one_sample_test(
    x: ArrayLike,
    *,
    reps: int = 10000,
    alternative: str = "two.sided",
    seed: SeedLike = None,
) -> PermutationSolution:
    """
    Paired permutation test of mean zero by random sign flips.

    Parameters
    ----------
    x : array-like
        1D per-unit differences (e.g. after - before).
    reps : int
        Number of sign-flip replicates B.
    alternative : str
        "two.sided" (default), "greater" or "less".
    seed : int, Generator or None
        A Generator is advanced in place.

    Returns
    -------
    PermutationSolution
        observed_stat = mean(x), perm_stats of length reps, and
        p_value = (#{null at least as extreme} + 1) / (reps + 1).
    """
    x_arr = check_array(x, "x")
    check_1d(x_arr, "x")
    design = OneSampleDesign.for_one_sample(
        x_arr, reps, alternative=alternative, seed=seed,
    )
    return PermutationSolution(_result=CPUSignFlipBackend().solve(design))


def k_sample_test(
    y: ArrayLike,
    group: ArrayLike,
    *,
    reps: int = 10000,
    statistic: str = "ss_between",
    alternative: str = "greater",
    seed: SeedLike = None,
) -> PermutationSolution:
    """
    One-way permutation test that all groups share a distribution.

    Parameters
    ----------
    y : array-like
        1D outcome per unit.
    group : array-like
        Group label per unit; at least 2 distinct labels.
    reps : int
        Number of relabelings B. Each keeps the group sizes fixed.
    statistic : str
        "ss_between" (default): sum_g n_g * mean_g^2.
        "f": the one-way ANOVA F statistic. Same p-value for the same seed.
    alternative : str
        "greater" (default). Both statistics are non-negative.
    seed : int, Generator or None
        A Generator is advanced in place.

    Returns
    -------
    PermutationSolution
    """
    y_arr = check_array(y, "y")
    check_1d(y_arr, "y")
    design = KSampleDesign.for_k_sample(
        y_arr, group, reps,
        statistic=statistic, alternative=alternative, seed=seed,
    )
    return PermutationSolution(_result=CPUKSampleBackend().solve(design))


def npc(
    statistics: ArrayLike,
    distr: ArrayLike,
    *,
    combine: str | CombiningFunction = "fisher",
    alternatives: str | Sequence[str] = "greater",
    names: Sequence[str] | None = None,
) -> NPCSolution:
    """
    Nonparametric combination of K permutation tests.

    The rows of `distr` must come from one shared set of relabelings,
    applied jointly to all K outcomes; that is what carries the
    dependence between outcomes into the combined null.

    Steps:
        1. partial p-value of each outcome against its own column;
        2. leave-one-out p-values for every permutation row;
        3. combining function on the observed partial p-values and on
           each row's p-values;
        4. omnibus p = (#{combined null >= combined observed} + 1) / (B + 1).

    Parameters
    ----------
    statistics : array-like
        Observed statistics, shape (K,).
    distr : array-like
        Joint permutation distribution, shape (B, K), B >= 2.
    combine : str or callable
        "fisher" (default), "liptak", "tippett", or a function mapping a
        (..., K) array of p-values to (...) with larger = more extreme.
    alternatives : str or sequence of str
        One alternative for all outcomes, or one per outcome.
    names : sequence of str, optional
        Outcome names, used in summaries.

    Returns
    -------
    NPCSolution
    """
    stats_arr = np.atleast_1d(check_array(statistics, "statistics")).astype(np.float64)
    check_1d(stats_arr, "statistics")
    check_finite(stats_arr, "statistics")
    distr_arr = check_array(distr, "distr").astype(np.float64)
    if distr_arr.ndim == 1 and stats_arr.shape[0] == 1:
        distr_arr = distr_arr[:, None]
    if distr_arr.ndim != 2 or distr_arr.shape[1] != stats_arr.shape[0]:
        raise DimensionError(
            f"distr: expected shape (B, {stats_arr.shape[0]}), got {distr_arr.shape}"
        )
    if names is None:
        names = tuple(f"outcome{j + 1}" for j in range(stats_arr.shape[0]))
    names = tuple(str(n) for n in names)
    if len(names) != stats_arr.shape[0]:
        raise DimensionError(
            f"names: expected {stats_arr.shape[0]} entries, got {len(names)}"
        )
    alts = resolve_alternatives(alternatives, stats_arr.shape[0])

    result = _combine(stats_arr, distr_arr, combine, alts, names)
    return NPCSolution(_result=result)


def npc_test(
    x: ArrayLike,
    group: ArrayLike | None = None,
    *,
    reps: int = 10000,
    combine: str | CombiningFunction = "fisher",
    alternatives: str | Sequence[str] | None = None,
    statistic: str = "ss_between",
    seed: SeedLike = None,
) -> NPCSolution:
    """
    Joint permutation test across K outcomes, combined with NPC.

    Parameters
    ----------
    x : array-like or DataFrame
        Outcome matrix, rows = units, columns = outcomes. Column names of
        a DataFrame become outcome names.
    group : array-like, optional
        If None, a paired test: each replicate flips the sign of whole
        rows (all outcomes of a unit together). Otherwise a k-sample test:
        each replicate permutes the group labels once and applies the
        relabeling to every outcome.
    reps : int
        Number of joint relabelings B (>= 2).
    combine : str or callable
        Combining function, see npc().
    alternatives : str or sequence, optional
        Default "two.sided" for the paired test, "greater" for k-sample.
    statistic : str
        k-sample statistic, "ss_between" or "f".
    seed : int, Generator or None
        A Generator is advanced in place.

    Returns
    -------
    NPCSolution
    """
    reps = check_positive_int(reps, "reps")
    if reps < 2:
        raise ValidationError(f"reps must be >= 2 for NPC, got {reps}")

    if group is None:
        design = OneSampleDesign.for_one_sample(
            x, reps,
            alternative="two.sided" if alternatives is None else alternatives,
            seed=seed,
        )
        perm = CPUSignFlipBackend().solve(design)
    else:
        design = KSampleDesign.for_k_sample(
            x, group, reps,
            statistic=statistic,
            alternative="greater" if alternatives is None else alternatives,
            seed=seed,
        )
        perm = CPUKSampleBackend().solve(design)

    params = perm.params
    result = _combine(
        params.observed, params.distr, combine, params.alternatives, design.names,
    )
    info = dict(result.info)
    info.update({
        'test': perm.backend_name,
        'n': perm.info['n'],
        'rng_state': perm.info['rng_state'],
    })
    timing = dict(perm.timing or {})
    for key, value in (result.timing or {}).items():
        timing[key] = timing.get(key, 0.0) + value

    return NPCSolution(_result=Result(
        params=result.params,
        info=info,
        timing=timing,
        backend_name=f"{perm.backend_name}+npc",
        warnings=perm.warnings + result.warnings,
    ))


def _combine(
    statistics: np.ndarray,
    distr: np.ndarray,
    combine: str | CombiningFunction,
    alternatives: tuple[str, ...],
    names: tuple[str, ...],
) -> Result[NPCParams]:
    """Steps 1-4 of NPC on precomputed statistics."""
    combine_name, combine_fn = get_combining_function(combine)
    B = distr.shape[0]
    if B < 2:
        raise ValidationError(f"distr: need at least 2 permutations, got {B}")

    timer = Timer()
    timer.start()

    with timer.section('partial_p_values'):
        partial = t2p(statistics, distr, alternatives)
        null_p = pvalue_distribution(distr, alternatives)

    with timer.section('combination'):
        combined_obs = float(combine_fn(partial))
        combined_null = np.asarray(combine_fn(null_p), dtype=np.float64)
        if combined_null.shape != (B,):
            raise DimensionError(
                f"combining function returned shape {combined_null.shape}, "
                f"expected ({B},)"
            )
        p_value = t2p(combined_obs, combined_null, "greater")

    timer.stop()

    params = NPCParams(
        statistics=statistics,
        distr=distr,
        partial_p_values=partial,
        combined_observed=combined_obs,
        combined_null=combined_null,
        p_value=p_value,
        combine=combine_name,
        alternatives=alternatives,
        names=names,
    )
    info: dict[str, Any] = {'k': len(statistics), 'reps': B}
    return Result(
        params=params,
        info=info,
        timing=timer.result(),
        backend_name='cpu_npc',
        warnings=(),
    )
