"""
Permutation reanalysis of a before/after field experiment.

Given the per-plot OutcomeMatrix from plot_differences(), runs in this
fixed order with one random stream:

    1. paired sign-flip test of zero mean change, per treatment x outcome;
    2. k-sample test of equal change across treatments, per outcome;
    3. NPC of the paired tests across outcomes, per treatment;
    4. NPC of the k-sample tests across outcomes.

Families 1 and 2 are also reported with multiplicity-adjusted p-values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from socinference.core.exceptions import ValidationError
from socinference.core.random import SeedLike, as_generator, generator_state
from socinference.core.result import Result
from socinference.core.timing import Timer
from socinference.field.config import FieldDataConfig
from socinference.permutation import (
    NPCSolution,
    k_sample_test,
    npc_test,
    one_sample_test,
    p_adjust,
)
from socinference.permutation._combining import CombiningFunction


@dataclass(frozen=True)
class FieldAnalysisParams:
    """
    Tables produced by analyze_field_experiment().

    - change_tests: one row per treatment x outcome
    - treatment_tests: one row per outcome
    - change_npc: one row per treatment
    - treatment_npc: omnibus NPC across outcomes, or None with one treatment
    """
    change_tests: pd.DataFrame
    treatment_tests: pd.DataFrame
    change_npc: pd.DataFrame
    treatment_npc: NPCSolution | None


@dataclass
class FieldAnalysisSolution:
    """User-facing results of the field reanalysis."""
    _result: Result[FieldAnalysisParams]

    @property
    def change_tests(self) -> pd.DataFrame:
        """
        Columns: treatment, outcome, n, mean_change, p_value, p_adjusted.
        """
        return self._result.params.change_tests

    @property
    def treatment_tests(self) -> pd.DataFrame:
        """Columns: outcome, statistic, p_value, p_adjusted."""
        return self._result.params.treatment_tests

    @property
    def change_npc(self) -> pd.DataFrame:
        """Columns: treatment, n, p_value."""
        return self._result.params.change_npc

    @property
    def treatment_npc(self) -> NPCSolution | None:
        return self._result.params.treatment_npc

    @property
    def omnibus_p_value(self) -> float:
        """NPC p-value for any treatment effect on any outcome (NaN if untestable)."""
        npc_sol = self._result.params.treatment_npc
        return float('nan') if npc_sol is None else npc_sol.p_value

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        lines = [
            "\nFIELD EXPERIMENT PERMUTATION REANALYSIS",
            "",
            f"Plots: {self.info['n_plots']}, treatments: "
            f"{', '.join(self.info['treatments'])}",
            f"Outcomes: {', '.join(self.info['outcomes'])}",
            f"Permutations per test: {self.info['reps']}, "
            f"combining function: {self.info['combine']}, "
            f"adjustment: {self.info['fdr_method']}",
            "",
            "Change from baseline (sign-flip tests):",
            self.change_tests.to_string(index=False, float_format=_fmt),
            "",
            "Change across outcomes (NPC):",
            self.change_npc.to_string(index=False, float_format=_fmt),
            "",
        ]
        if len(self.treatment_tests):
            lines += [
                "Treatment differences (k-sample tests):",
                self.treatment_tests.to_string(index=False, float_format=_fmt),
                "",
                f"Treatment effect across outcomes (NPC): p = {self.omnibus_p_value:.4g}",
                "",
            ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"FieldAnalysisSolution(plots={self.info['n_plots']}, "
            f"outcomes={len(self.info['outcomes'])}, "
            f"omnibus_p={self.omnibus_p_value:.4g})"
        )


def analyze_field_experiment(
    diffs: pd.DataFrame,
    config: FieldDataConfig | None = None,
    *,
    reps: int = 10000,
    seed: SeedLike = None,
    combine: str | CombiningFunction = "fisher",
    fdr_method: str = "BH",
) -> FieldAnalysisSolution:
    """
    Permutation tests of change and treatment effects on a field trial.

    Args:
        diffs: Output of plot_differences(): one row per plot with the
            treatment column and the outcome columns.
        config: Column layout; defaults to FieldDataConfig().
        reps: Permutations per test.
        seed: int, None, or a numpy Generator; one stream is threaded
            through every test in a fixed order.
        combine: NPC combining function.
        fdr_method: p_adjust() method applied within each test family.

    Returns:
        FieldAnalysisSolution
    """
    config = (config or FieldDataConfig()).validate()
    outcomes = list(config.outcomes)
    missing = [c for c in [config.treatment] + outcomes if c not in diffs.columns]
    if missing:
        raise ValidationError(f"diffs is missing columns {missing}")
    if len(diffs) == 0:
        raise ValidationError("diffs has no plots")

    rng = as_generator(seed)
    labels = diffs[config.treatment].astype(str)
    treatments = sorted(labels.unique())
    warnings_list: list[str] = []

    timer = Timer()
    timer.start()

    with timer.section('change_tests'):
        rows = []
        for treatment in treatments:
            sub = diffs.loc[labels == treatment]
            for outcome in outcomes:
                res = one_sample_test(sub[outcome].to_numpy(), reps=reps, seed=rng)
                rows.append({
                    'treatment': treatment,
                    'outcome': outcome,
                    'n': len(sub),
                    'mean_change': res.observed_stat,
                    'p_value': res.p_value,
                })
        change_tests = pd.DataFrame(rows)
        change_tests['p_adjusted'] = p_adjust(change_tests['p_value'], method=fdr_method)

    with timer.section('treatment_tests'):
        rows = []
        if len(treatments) >= 2:
            for outcome in outcomes:
                res = k_sample_test(
                    diffs[outcome].to_numpy(), labels.to_numpy(), reps=reps, seed=rng,
                )
                rows.append({
                    'outcome': outcome,
                    'statistic': res.observed_stat,
                    'p_value': res.p_value,
                })
        else:
            warnings_list.append(
                f"only one treatment ({treatments[0]}); skipped treatment comparisons"
            )
        treatment_tests = pd.DataFrame(rows, columns=['outcome', 'statistic', 'p_value'])
        treatment_tests['p_adjusted'] = p_adjust(treatment_tests['p_value'], method=fdr_method)

    with timer.section('change_npc'):
        rows = []
        for treatment in treatments:
            sub = diffs.loc[labels == treatment, outcomes]
            if reps >= 2:
                res = npc_test(sub, reps=reps, combine=combine, seed=rng)
                p_value = res.p_value
            else:
                p_value = np.nan
            rows.append({'treatment': treatment, 'n': len(sub), 'p_value': p_value})
        change_npc = pd.DataFrame(rows)

    with timer.section('treatment_npc'):
        treatment_npc = None
        if len(treatments) >= 2 and reps >= 2:
            treatment_npc = npc_test(
                diffs[outcomes], labels.to_numpy(),
                reps=reps, combine=combine, seed=rng,
            )

    timer.stop()

    params = FieldAnalysisParams(
        change_tests=change_tests,
        treatment_tests=treatment_tests,
        change_npc=change_npc,
        treatment_npc=treatment_npc,
    )
    result = Result(
        params=params,
        info={
            'n_plots': len(diffs),
            'treatments': tuple(treatments),
            'outcomes': tuple(outcomes),
            'reps': reps,
            'combine': combine if isinstance(combine, str) else getattr(combine, '__name__', 'custom'),
            'fdr_method': fdr_method,
            'rng_state': generator_state(rng),
        },
        timing=timer.result(),
        backend_name='cpu',
        warnings=tuple(warnings_list),
    )
    return FieldAnalysisSolution(_result=result)


def _fmt(value: float) -> str:
    return f"{value:.4g}"
