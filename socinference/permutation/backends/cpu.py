"""
CPU backends for permutation tests.

CPUSignFlipBackend: paired test, mean difference under random sign flips.
CPUKSampleBackend: one-way test, group statistic under random relabeling.

Both apply each random relabeling to all K outcome columns at once, so
row b of the permutation distribution is one joint draw. P-values use
the (count + 1) / (B + 1) correction.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from socinference.core.random import as_generator, generator_state
from socinference.core.result import Result
from socinference.core.timing import Timer
from socinference.permutation._common import PermutationParams
from socinference.permutation._pvalues import t2p
from socinference.permutation.design import KSampleDesign, OneSampleDesign


class CPUSignFlipBackend:
    """
    CPU backend for the one-sample sign-flip test.

    Under the null each difference is symmetric about 0, so flipping the
    sign of every unit independently with probability 1/2 leaves the
    distribution unchanged. The statistic is the mean.
    """

    @property
    def name(self) -> str:
        return 'cpu_sign_flip'

    def solve(self, design: OneSampleDesign) -> Result[PermutationParams]:
        """Run the sign-flip test and return Result[PermutationParams]."""
        timer = Timer()
        timer.start()

        rng = as_generator(design.seed)
        x = design.x
        n = design.n

        with timer.section('observed_stat'):
            observed = np.ones(n) @ x / n

        with timer.section('permutation_replicates'):
            signs = rng.integers(0, 2, size=(design.reps, n)) * 2.0 - 1.0
            distr = signs @ x / n

        with timer.section('p_value'):
            p_values = t2p(observed, distr, design.alternatives)

        timer.stop()

        params = PermutationParams(
            observed=observed,
            distr=distr,
            p_values=p_values,
            reps=design.reps,
            alternatives=design.alternatives,
            statistic='mean',
        )
        return Result(
            params=params,
            info={
                'n': n,
                'k': design.k,
                'names': design.names,
                'rng_state': generator_state(rng),
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )


class CPUKSampleBackend:
    """
    CPU backend for the k-sample test.

    Group labels are permuted among units without replacement, so every
    relabeling keeps the group sizes n_g. Statistics:

        ss_between: sum_g n_g * mean_g^2
        f:          (SSB / (G - 1)) / ((SST - SSB) / (n - G))

    SST and n * grand_mean^2 do not change under relabeling, so both are
    increasing functions of the same quantity and give identical p-values.
    """

    @property
    def name(self) -> str:
        return 'cpu_k_sample'

    def solve(self, design: KSampleDesign) -> Result[PermutationParams]:
        """Run the k-sample test and return Result[PermutationParams]."""
        timer = Timer()
        timer.start()

        rng = as_generator(design.seed)
        y = design.y
        codes = design.codes
        sizes = design.group_sizes.astype(np.float64)

        with timer.section('observed_stat'):
            observed = self._statistic(y, codes[None, :], sizes, design.statistic)[0]

        with timer.section('permutation_replicates'):
            labels = rng.permuted(np.tile(codes, (design.reps, 1)), axis=1)
            distr = self._statistic(y, labels, sizes, design.statistic)

        with timer.section('p_value'):
            p_values = t2p(observed, distr, design.alternatives)

        timer.stop()

        params = PermutationParams(
            observed=observed,
            distr=distr,
            p_values=p_values,
            reps=design.reps,
            alternatives=design.alternatives,
            statistic=design.statistic,
        )
        return Result(
            params=params,
            info={
                'n': design.n,
                'k': design.k,
                'names': design.names,
                'levels': design.levels,
                'group_sizes': tuple(int(s) for s in sizes),
                'rng_state': generator_state(rng),
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )

    @staticmethod
    def _statistic(
        y: NDArray[np.floating[Any]],
        labels: NDArray[np.intp],
        sizes: NDArray[np.floating[Any]],
        statistic: str,
    ) -> NDArray[np.floating[Any]]:
        """
        Statistic for each labeling.

        Args:
            y: (n, K) outcomes.
            labels: (B, n) group codes, one labeling per row.
            sizes: (G,) group sizes, shared by every labeling.

        Returns:
            (B, K)
        """
        n_groups = sizes.shape[0]
        onehot = labels[:, :, None] == np.arange(n_groups)[None, None, :]
        sums = np.einsum('bng,nk->bgk', onehot.astype(np.float64), y)
        weighted = np.sum(sums ** 2 / sizes[None, :, None], axis=1)
        if statistic == "ss_between":
            return weighted

        n = y.shape[0]
        correction = np.sum(y, axis=0) ** 2 / n
        ssb = weighted - correction
        sst = np.sum(y ** 2, axis=0) - correction
        with np.errstate(divide='ignore', invalid='ignore'):
            return (ssb / (n_groups - 1)) / ((sst - ssb) / (n - n_groups))
