"""
Field-trial data configuration.

FieldDataConfig names the columns of the trial CSV, the rows to drop and
the outcome columns in their declared order. Immutable; pass a modified
copy via dataclasses.replace() to adapt to another layout.
"""

from __future__ import annotations

from dataclasses import dataclass

from socinference.core.exceptions import ValidationError


@dataclass(frozen=True)
class FieldDataConfig:
    """
    Column layout and filters for a before/after field trial.

    Attributes:
        year: Sampling year column.
        plot: Plot identifier column (the experimental unit).
        treatment: Treatment label column.
        block: Block column.
        depth: Depth code column.
        outcomes: Soil-property columns, in declared order.
        sentinel_depths: Depth codes to drop (e.g. whole-profile totals).
        excluded_treatments: Treatment levels to drop.
        baseline_year: Year of the "before" samples. None = earliest year.
        followup_year: Year of the "after" samples. None = latest year.
    """
    year: str = "year"
    plot: str = "plot"
    treatment: str = "treatment"
    block: str = "block"
    depth: str = "depth"
    outcomes: tuple[str, ...] = ("TC", "pct_C", "pct_N", "pct_clay")
    sentinel_depths: tuple[str, ...] = ("Total",)
    excluded_treatments: tuple[str, ...] = ()
    baseline_year: int | None = None
    followup_year: int | None = None

    @property
    def id_columns(self) -> tuple[str, ...]:
        return (self.year, self.plot, self.treatment, self.block, self.depth)

    @property
    def required_columns(self) -> tuple[str, ...]:
        return self.id_columns + tuple(self.outcomes)

    def validate(self) -> FieldDataConfig:
        """Check internal consistency; returns self for chaining."""
        if not self.outcomes:
            raise ValidationError("outcomes: at least one outcome column is required")
        cols = self.required_columns
        duplicated = sorted({c for c in cols if cols.count(c) > 1})
        if duplicated:
            raise ValidationError(f"columns used for more than one role: {duplicated}")
        if (
            self.baseline_year is not None
            and self.followup_year is not None
            and self.baseline_year == self.followup_year
        ):
            raise ValidationError(
                f"baseline_year and followup_year are both {self.baseline_year}"
            )
        return self
