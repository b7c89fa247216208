"""
Multiple testing correction with the method names of R's p.adjust().

Methods: holm, hochberg, bonferroni, BH (alias fdr), BY, none.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from socinference.core.exceptions import ValidationError

VALID_METHODS = ("holm", "hochberg", "bonferroni", "BH", "BY", "fdr", "none")


def p_adjust(
    p: ArrayLike,
    method: str = "BH",
    n: int | None = None,
) -> NDArray[np.floating]:
    """
    Adjust p-values for multiple comparisons.

    Parameters
    ----------
    p : array-like
        p-values. NaN entries are left as NaN and not counted.
    method : str
        "BH" (default), "fdr" (alias for BH), "BY", "holm", "hochberg",
        "bonferroni" or "none".
    n : int or None
        Number of comparisons. Default: number of non-NaN p-values.

    Returns
    -------
    ndarray
        Adjusted p-values, same shape as input, clipped to [0, 1].
    """
    if method not in VALID_METHODS:
        raise ValidationError(
            f"method must be one of {VALID_METHODS}, got {method!r}"
        )

    p_arr = np.asarray(p, dtype=np.float64)
    out = p_arr.copy()
    flat = out.reshape(-1)
    keep = ~np.isnan(flat)
    pv = flat[keep]
    lp = pv.size

    if n is None:
        n = lp
    elif n < lp:
        raise ValidationError(f"n ({n}) must be >= number of p-values ({lp})")

    if lp == 0 or method == "none":
        return out

    if method == "bonferroni":
        adjusted = pv * n
    elif method == "holm":
        adjusted = _step(pv, lambda rank: n - rank + 1, step_down=True)
    elif method == "hochberg":
        adjusted = _step(pv, lambda rank: n - rank + 1, step_down=False)
    elif method in ("BH", "fdr"):
        adjusted = _step(pv, lambda rank: n / rank, step_down=False)
    else:
        cm = np.sum(1.0 / np.arange(1, n + 1))
        adjusted = _step(pv, lambda rank: cm * n / rank, step_down=False)

    flat[keep] = np.clip(adjusted, 0.0, 1.0)
    return out


def _step(pv: NDArray, multiplier, step_down: bool) -> NDArray:
    """
    Sorted-multiplier adjustment with a monotone envelope.

    Step-down (Holm) takes a running max from the smallest p-value up;
    step-up (Hochberg, BH, BY) takes a running min from the largest down.
    """
    order = np.argsort(pv, kind='stable')
    ranks = np.arange(1, pv.size + 1, dtype=np.float64)
    scaled = pv[order] * multiplier(ranks)
    if step_down:
        scaled = np.maximum.accumulate(scaled)
    else:
        scaled = np.minimum.accumulate(scaled[::-1])[::-1]
    result = np.empty_like(scaled)
    result[order] = scaled
    return result
