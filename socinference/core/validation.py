"""
Input validators.

Each check raises on the first problem it finds, naming the argument and
the offending value so the caller can fix the input directly. Checks
that convert (check_array, check_positive_int, check_choice) return the
cleaned value; the others return None.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from socinference.core.exceptions import DimensionError, ValidationError


def check_array(array: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    """
    Convert assays, outcomes or statistics to a float ndarray.

    Integer input is promoted to float64; float32 is kept. Strings,
    mixed-type lists and other non-numeric input raise ValidationError.
    """
    try:
        arr = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if arr.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types "
            f"or non-numeric data"
        )
    if not np.issubdtype(arr.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {arr.dtype}, expected numeric data"
        )
    if np.issubdtype(arr.dtype, np.floating):
        return arr
    return arr.astype(np.float64)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """Reject NaN and +/-Inf, reporting how many of each were found."""
    finite = np.isfinite(array)
    if finite.all():
        return
    n_nan = int(np.isnan(array).sum())
    n_inf = int(finite.size - finite.sum()) - n_nan
    raise ValidationError(
        f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
    )


def check_ndim(array: NDArray[Any], ndim: int, name: str) -> None:
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D "
            f"with shape {array.shape}"
        )


def check_1d(array: NDArray[Any], name: str) -> None:
    check_ndim(array, 1, name)


def check_2d(array: NDArray[Any], name: str) -> None:
    check_ndim(array, 2, name)


def check_consistent_length(*arrays: NDArray[Any], names: tuple[str, ...]) -> None:
    """
    Require every array to have the same number of rows (units).

    Raises:
        ValueError: If names and arrays differ in number (caller bug)
        DimensionError: If the row counts differ
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"got {len(arrays)} arrays but {len(names)} names"
        )
    lengths = [a.shape[0] for a in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{n}={k}" for n, k in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_min_samples(array: NDArray[Any], min_samples: int, name: str) -> None:
    """Require at least min_samples rows (replicates or units)."""
    if array.shape[0] < min_samples:
        raise ValidationError(
            f"{name}: requires at least {min_samples} samples, "
            f"got {array.shape[0]}"
        )


def check_positive_int(value: Any, name: str) -> int:
    """
    Accept a Python or numpy integer >= 1 (replicate and permutation
    counts). Bools and floats are rejected even when integral.
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise ValidationError(
            f"{name}: expected a positive integer, got {type(value).__name__}"
        )
    if value < 1:
        raise ValidationError(f"{name} must be >= 1, got {value}")
    return int(value)


def check_choice(value: str, choices: tuple[str, ...], name: str) -> str:
    if value not in choices:
        raise ValidationError(
            f"{name} must be one of {choices}, got {value!r}"
        )
    return value
