"""
Field experiment reanalysis.

Usage:
    from socinference.field import (
        FieldDataConfig, load_field_data, plot_differences,
        analyze_field_experiment,
    )

    config = FieldDataConfig(excluded_treatments=("control_b",))
    frame = load_field_data("soil.csv", config)
    diffs = plot_differences(frame, config)
    result = analyze_field_experiment(diffs, config, reps=10000, seed=42)
    print(result.summary())
"""

from socinference.field.config import FieldDataConfig
from socinference.field.loading import (
    filter_field_data,
    load_field_data,
    plot_differences,
)
from socinference.field.analysis import (
    FieldAnalysisSolution,
    analyze_field_experiment,
)

__all__ = [
    "FieldDataConfig",
    "load_field_data",
    "filter_field_data",
    "plot_differences",
    "analyze_field_experiment",
    "FieldAnalysisSolution",
]
