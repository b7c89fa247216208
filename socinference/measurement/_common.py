"""
Common data structures for the measurement-error domain.

These are the parameter payloads wrapped by Result[P] and exposed
through the Solution classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class MeasurementParams:
    """
    Payload for simulated measurements.

    - true_values: the unobserved concentrations, shape (m,)
    - errors: multiplicative error draws, shape (m, r)
    - measurements: true value times error, shape (m, r)
    """
    true_values: NDArray[np.floating[Any]]     # shape (m,)
    errors: NDArray[np.floating[Any]]          # shape (m, r)
    measurements: NDArray[np.floating[Any]]    # shape (m, r)
    replicates: int


@dataclass(frozen=True)
class DuplicateParams:
    """
    Payload for sequential duplicate selection.

    accepted_index is the 0-based row i of the accepted pair (i, i+1),
    or -1 where no pair met the threshold and the full-column average
    was used instead.
    """
    estimates: NDArray[np.floating[Any]]       # shape (m,)
    accepted_index: NDArray[np.integer[Any]]   # shape (m,)
    n_assays: NDArray[np.integer[Any]]         # shape (m,)
    threshold: float
    n_fallback: int


@dataclass(frozen=True)
class VarianceParams:
    """
    Payload for the moment-based error-variance estimator.

    sigma_delta_squared is NaN wherever s_squared <= 0.
    """
    mean: NDArray[np.floating[Any]]                 # S-bar, shape (m,)
    sample_variance: NDArray[np.floating[Any]]      # V-hat(S_i), shape (m,)
    s_squared: NDArray[np.floating[Any]]            # s-hat^2, shape (m,)
    sigma_delta_squared: NDArray[np.floating[Any]]  # shape (m,)
    r: int
