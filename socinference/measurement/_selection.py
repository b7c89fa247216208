"""
Sequential duplicate selection.

Assays of one sample are run in sequence. The first adjacent pair
(S_i, S_{i+1}) whose percent difference is below the threshold is
accepted, and its mean becomes the reported value.

For symmetric error this is unbiased. For skewed error, close pairs
cluster near the mode of the error distribution rather than its mean,
so the accepted value is biased in proportion to the true value.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray


def percent_difference(a: ArrayLike, b: ArrayLike) -> NDArray[np.floating[Any]]:
    """|a - b| / |mean(a, b)|, elementwise. NaN where both are zero."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.abs(a - b) / np.abs((a + b) / 2.0)


def first_accepted_pair(column: ArrayLike, threshold: float) -> int | None:
    """
    Index i of the first adjacent pair (i, i+1) within threshold.

    Returns None if no pair qualifies.
    """
    column = np.asarray(column, dtype=np.float64)
    if column.shape[0] < 2:
        return None
    ok = percent_difference(column[:-1], column[1:]) < threshold
    hits = np.flatnonzero(ok)
    if hits.size == 0:
        return None
    return int(hits[0])


def first_accepted_pairs(
    measurements: NDArray[np.floating[Any]],
    threshold: float,
) -> tuple[NDArray[np.intp], NDArray[np.bool_]]:
    """
    Column-wise first_accepted_pair over an (r, m) matrix.

    Returns:
        (index, found): index is only meaningful where found is True.
    """
    ok = percent_difference(measurements[:-1], measurements[1:]) < threshold
    found = ok.any(axis=0)
    index = np.argmax(ok, axis=0)
    return index, found
