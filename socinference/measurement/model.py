"""
Multiplicative assay error models.

An assay of a sample with true concentration s returns s * delta, where
delta is drawn from a rescaled beta distribution with E[delta] = 1.

Two parameterizations:

Symmetric:
    delta* ~ Beta(a, a) with a = (high - low)^2 / (8 sd^2) - 1/2,
    delta = (delta* - 1/2)(high - low) + (low + high)/2.
    Support is [low, high], Var(delta) = sd^2. Unbiased only when the
    bounds are centred on 1.

Skewed:
    delta* ~ Beta(alpha, beta),
    delta = delta* - alpha / (alpha + beta) + 1.
    Mean 1 for any shapes; spread and skew follow the beta distribution.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from socinference.core.exceptions import InvalidParameterError

ErrorKind = Literal["symmetric", "skewed"]

# Tolerance for "bounds centred on 1"
_CENTRE_TOL = 1e-12


@dataclass(frozen=True)
class ErrorModel:
    """
    Frozen error-distribution parameters.

    Construct via ErrorModel.symmetric() or ErrorModel.skewed().

    Attributes:
        kind: "symmetric" or "skewed"
        alpha: First beta shape parameter
        beta: Second beta shape parameter (equal to alpha when symmetric)
        low: Lower bound of delta's support
        high: Upper bound of delta's support
        sd: Requested standard deviation (symmetric only)
    """
    kind: ErrorKind
    alpha: float
    beta: float
    low: float
    high: float
    sd: float | None = None

    @classmethod
    def symmetric(
        cls,
        bounds: tuple[float, float] = (0.5, 1.5),
        sd: float = 0.1,
    ) -> ErrorModel:
        """
        Symmetric beta error on [low, high] with standard deviation sd.

        Raises:
            InvalidParameterError: If low <= 0, low >= high, sd <= 0, or
                sd^2 >= (high - low)^2 / 4 (no beta shape exists).
        """
        low, high = (float(b) for b in bounds)
        if not (math.isfinite(low) and math.isfinite(high)) or low >= high:
            raise InvalidParameterError(
                f"bounds: expected finite low < high, got ({low}, {high})",
                parameter="bounds",
            )
        if low <= 0:
            raise InvalidParameterError(
                f"bounds: multiplicative error must be positive, got low = {low}",
                parameter="bounds", value=low, limit=0.0,
            )
        sd = float(sd)
        if not math.isfinite(sd) or sd <= 0:
            raise InvalidParameterError(
                f"sd must be > 0, got {sd}", parameter="sd", value=sd,
            )

        width = high - low
        limit = width ** 2 / 4.0
        if sd ** 2 >= limit:
            raise InvalidParameterError(
                f"sd^2 = {sd ** 2:.6g} must be < (high - low)^2 / 4 = "
                f"{limit:.6g} for bounds ({low}, {high})",
                parameter="sd", value=sd, limit=math.sqrt(limit),
            )

        shape = width ** 2 / (8.0 * sd ** 2) - 0.5

        centre = (low + high) / 2.0
        if abs(centre - 1.0) > _CENTRE_TOL:
            warnings.warn(
                f"bounds ({low}, {high}) are centred on {centre:g}, not 1; "
                f"measurements will be biased by a factor of {centre:g}",
                UserWarning,
                stacklevel=2,
            )

        return cls(
            kind="symmetric", alpha=shape, beta=shape,
            low=low, high=high, sd=sd,
        )

    @classmethod
    def skewed(cls, alpha: float, beta: float) -> ErrorModel:
        """
        Beta(alpha, beta) error recentred to mean 1.

        Raises:
            InvalidParameterError: If either shape is not > 0.
        """
        for name, value in (("alpha", alpha), ("beta", beta)):
            value = float(value)
            if not math.isfinite(value) or value <= 0:
                raise InvalidParameterError(
                    f"{name} must be > 0, got {value}",
                    parameter=name, value=value, limit=0.0,
                )
        alpha = float(alpha)
        beta = float(beta)
        shift = 1.0 - alpha / (alpha + beta)
        return cls(
            kind="skewed", alpha=alpha, beta=beta,
            low=shift, high=1.0 + shift,
        )

    # --- Derived quantities ---

    @property
    def scale(self) -> float:
        """Width of the support of delta."""
        return self.high - self.low

    @property
    def is_centred(self) -> bool:
        """True if E[delta] == 1."""
        return abs(self.mean - 1.0) <= _CENTRE_TOL

    @property
    def mean(self) -> float:
        if self.kind == "symmetric":
            return (self.low + self.high) / 2.0
        return 1.0

    @property
    def variance(self) -> float:
        """Var(delta), i.e. sigma_delta^2."""
        var = sp_stats.beta.var(self.alpha, self.beta)
        return float(var * self.scale ** 2)

    @property
    def skewness(self) -> float:
        return float(sp_stats.beta.stats(self.alpha, self.beta, moments='s'))

    def draw(
        self,
        size: int | tuple[int, ...],
        rng: np.random.Generator,
    ) -> NDArray[np.floating[Any]]:
        """Draw multiplicative errors."""
        raw = rng.beta(self.alpha, self.beta, size=size)
        if self.kind == "symmetric":
            return (raw - 0.5) * self.scale + self.mean
        return raw - self.alpha / (self.alpha + self.beta) + 1.0

    def __repr__(self) -> str:
        if self.kind == "symmetric":
            return (
                f"ErrorModel.symmetric(bounds=({self.low:g}, {self.high:g}), "
                f"sd={self.sd:g})"
            )
        return f"ErrorModel.skewed(alpha={self.alpha:g}, beta={self.beta:g})"
