"""
Loading the field-trial table and building the outcome matrix.

load_field_data() reads the CSV and drops sentinel depths and excluded
treatments. plot_differences() averages depth rows within each plot and
year and returns follow-up minus baseline per plot: the OutcomeMatrix
used by the permutation tests.
"""

from __future__ import annotations

import warnings
from pathlib import Path

import pandas as pd

from socinference.core.exceptions import ValidationError
from socinference.field.config import FieldDataConfig


def load_field_data(
    path: str | Path,
    config: FieldDataConfig | None = None,
) -> pd.DataFrame:
    """
    Read and filter the field-trial CSV.

    Args:
        path: CSV file with one row per plot x year x depth.
        config: Column layout; defaults to FieldDataConfig().

    Returns:
        Filtered DataFrame with a fresh RangeIndex.

    Raises:
        ValidationError: If the file is not CSV/TSV or columns are missing.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in ('.csv', '.tsv'):
        raise ValidationError(f"Unknown file format: {suffix}")
    frame = pd.read_csv(path, sep='\t' if suffix == '.tsv' else ',')
    return filter_field_data(frame, config)


def filter_field_data(
    frame: pd.DataFrame,
    config: FieldDataConfig | None = None,
) -> pd.DataFrame:
    """Validate columns, coerce outcomes to float, and drop filtered rows."""
    config = (config or FieldDataConfig()).validate()

    missing = [c for c in config.required_columns if c not in frame.columns]
    if missing:
        raise ValidationError(
            f"field data is missing columns {missing}; "
            f"available: {list(frame.columns)}"
        )

    frame = frame.copy()
    for col in config.outcomes:
        try:
            frame[col] = pd.to_numeric(frame[col]).astype(float)
        except (ValueError, TypeError) as e:
            raise ValidationError(f"{col}: non-numeric values: {e}") from e

    keep = ~frame[config.depth].astype(str).isin(config.sentinel_depths)
    keep &= ~frame[config.treatment].astype(str).isin(config.excluded_treatments)
    return frame.loc[keep].reset_index(drop=True)


def plot_differences(
    frame: pd.DataFrame,
    config: FieldDataConfig | None = None,
) -> pd.DataFrame:
    """
    Per-plot follow-up minus baseline for every outcome.

    Depth rows are averaged within plot x year first. Plots without both
    years (or with a missing outcome after averaging) are dropped with a
    warning so that every outcome column covers the same plots.

    Returns:
        DataFrame indexed by plot with columns treatment, block and the
        outcomes in declared order.

    Raises:
        ValidationError: If a plot carries more than one treatment or
            block, or if fewer than two years are present.
    """
    config = (config or FieldDataConfig()).validate()
    outcomes = list(config.outcomes)

    years = sorted(frame[config.year].unique())
    baseline = config.baseline_year if config.baseline_year is not None else (years[0] if years else None)
    followup = config.followup_year if config.followup_year is not None else (years[-1] if years else None)
    if baseline is None or baseline == followup:
        raise ValidationError(
            f"need two distinct years for before/after differences, found {years}"
        )
    for label, year in (("baseline_year", baseline), ("followup_year", followup)):
        if year not in years:
            raise ValidationError(f"{label} {year} not present; years are {years}")

    labels = frame.groupby(config.plot)[[config.treatment, config.block]].nunique()
    inconsistent = labels.index[(labels > 1).any(axis=1)].tolist()
    if inconsistent:
        raise ValidationError(
            f"plots with more than one treatment or block: {inconsistent}"
        )
    plot_labels = frame.groupby(config.plot)[[config.treatment, config.block]].first()

    means = frame.groupby([config.plot, config.year])[outcomes].mean()
    wide = means.unstack(config.year)
    diffs = pd.DataFrame(
        {col: wide[(col, followup)] - wide[(col, baseline)] for col in outcomes}
    )

    incomplete = diffs.index[diffs.isna().any(axis=1)].tolist()
    if incomplete:
        warnings.warn(
            f"dropping {len(incomplete)} plots without complete "
            f"{baseline}/{followup} data: {incomplete}",
            UserWarning,
            stacklevel=2,
        )
        diffs = diffs.drop(index=incomplete)

    out = plot_labels.loc[diffs.index].join(diffs)
    out.index.name = config.plot
    return out[[config.treatment, config.block] + outcomes]
