"""
pytest configuration and shared fixtures.
"""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def field_frame():
    """
    Synthetic before/after field trial in long format.

    12 plots in 3 blocks, 4 treatments (one of them excluded by some
    tests), 2 depths plus a "Total" sentinel row per plot-year. Treatment
    "compost" raises every outcome between 2015 and 2020; the others are
    noise around zero change.
    """
    gen = np.random.default_rng(2020)
    treatments = ["control", "compost", "manure", "fallow"]
    rows = []
    plot_id = 0
    for block in (1, 2, 3):
        for treatment in treatments:
            plot_id += 1
            base = gen.normal([30.0, 1.5, 0.15, 20.0], [2.0, 0.1, 0.01, 1.0])
            for year in (2015, 2020):
                shift = 0.0
                if year == 2020 and treatment == "compost":
                    shift = 1.0
                for depth in ("0-10", "10-30"):
                    noise = gen.normal(0.0, [0.5, 0.02, 0.002, 0.2])
                    values = base * (1.0 + 0.1 * shift) + noise
                    rows.append({
                        "year": year,
                        "plot": f"P{plot_id:02d}",
                        "treatment": treatment,
                        "block": block,
                        "depth": depth,
                        "TC": values[0],
                        "pct_C": values[1],
                        "pct_N": values[2],
                        "pct_clay": values[3],
                    })
                rows.append({
                    "year": year,
                    "plot": f"P{plot_id:02d}",
                    "treatment": treatment,
                    "block": block,
                    "depth": "Total",
                    "TC": 999.0,
                    "pct_C": 999.0,
                    "pct_N": 999.0,
                    "pct_clay": 999.0,
                })
    return pd.DataFrame(rows)
