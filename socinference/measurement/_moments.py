"""
Moment-based estimator of multiplicative error variance.

For r assays S_1..S_r of a single sample with true value s and
S_i = s * delta_i, E[delta] = 1, Var(delta) = sigma_delta^2:

    S-bar             = mean(S_i)
    V-hat(S_i)        = sum (S_i - S-bar)^2 / (r - 1)      unbiased for s^2 sigma_delta^2
    s-hat^2           = S-bar^2 - V-hat(S_i) / r           unbiased for s^2
    sigma-hat_delta^2 = V-hat(S_i) / s-hat^2

The ratio is not itself unbiased but is consistent as r grows. When
s-hat^2 <= 0 the ratio is undefined and NaN is returned.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray


def error_variance_moments(
    replicates: NDArray[np.floating[Any]],
) -> tuple[NDArray, NDArray, NDArray, NDArray]:
    """
    Column-wise estimator over an (r, m) matrix of assays.

    Returns:
        (mean, sample_variance, s_squared, sigma_delta_squared), each (m,)
    """
    r = replicates.shape[0]
    mean = np.mean(replicates, axis=0)
    sample_variance = np.var(replicates, axis=0, ddof=1)
    s_squared = mean ** 2 - sample_variance / r

    sigma_delta_squared = np.full_like(mean, np.nan)
    valid = s_squared > 0
    sigma_delta_squared[valid] = sample_variance[valid] / s_squared[valid]

    return mean, sample_variance, s_squared, sigma_delta_squared
