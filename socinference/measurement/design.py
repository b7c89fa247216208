"""
Design object for measurement simulation.

SimulationDesign bundles validated true values, an error model and the
replicate count. Immutable, validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from socinference.core.exceptions import ValidationError
from socinference.core.validation import (
    check_array,
    check_finite,
    check_positive_int,
)
from socinference.measurement.model import ErrorModel


@dataclass(frozen=True)
class SimulationDesign:
    """
    Frozen design for simulating multiplicative assay error.

    Attributes:
        true_values: True concentrations, shape (m,).
        model: Error distribution.
        replicates: Assays per true value.
    """
    true_values: NDArray[np.floating[Any]]
    model: ErrorModel
    replicates: int

    @property
    def n_values(self) -> int:
        return len(self.true_values)

    @classmethod
    def for_simulation(
        cls,
        true_values: ArrayLike,
        model: ErrorModel,
        replicates: int = 1,
    ) -> SimulationDesign:
        """
        Create a simulation design with validation.

        Args:
            true_values: Scalar or 1D array of true concentrations.
            model: ErrorModel from ErrorModel.symmetric() / .skewed().
            replicates: Number of assays per true value. Must be >= 1.

        Returns:
            Validated SimulationDesign.
        """
        values = np.atleast_1d(check_array(true_values, "true_values")).astype(np.float64)
        if values.ndim != 1:
            raise ValidationError(
                f"true_values: expected scalar or 1D, got {values.ndim}D"
            )
        if len(values) < 1:
            raise ValidationError("true_values must contain at least 1 value")
        check_finite(values, "true_values")

        if not isinstance(model, ErrorModel):
            raise ValidationError(
                f"model: expected ErrorModel, got {type(model).__name__}"
            )

        replicates = check_positive_int(replicates, "replicates")

        return cls(
            true_values=values.copy(),
            model=model,
            replicates=replicates,
        )
