"""
Permutation tests and nonparametric combination (NPC).

Usage:
    from socinference.permutation import (
        one_sample_test, k_sample_test, npc, npc_test, p_adjust,
    )

    # Paired before/after differences
    result = one_sample_test(diff, reps=10000, seed=42)

    # Treatment effect on one outcome
    result = k_sample_test(y, treatment, reps=10000, seed=42)

    # Joint test over several outcomes
    result = npc_test(diffs, treatment, reps=10000, combine="fisher", seed=42)
"""

from socinference.permutation.solvers import (
    k_sample_test,
    npc,
    npc_test,
    one_sample_test,
)
from socinference.permutation._pvalues import pvalue_distribution, t2p
from socinference.permutation._combining import (
    COMBINING_FUNCTIONS,
    fisher,
    liptak,
    tippett,
)
from socinference.permutation._p_adjust import p_adjust
from socinference.permutation.design import KSampleDesign, OneSampleDesign
from socinference.permutation.solution import NPCSolution, PermutationSolution

__all__ = [
    "one_sample_test",
    "k_sample_test",
    "npc",
    "npc_test",
    "t2p",
    "pvalue_distribution",
    "fisher",
    "liptak",
    "tippett",
    "COMBINING_FUNCTIONS",
    "p_adjust",
    "OneSampleDesign",
    "KSampleDesign",
    "PermutationSolution",
    "NPCSolution",
]
