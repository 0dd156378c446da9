"""Formatted ASCII tables for proximity permutation test results.

The layout follows the statsmodels summary style: a header panel with
run metadata, a block with the observed travel-cost summary, and a
block comparing the observed mean against the permutation null for
distance and time, with the one-sided p-value and its Clopper-Pearson
interval.

A ``[!]`` marker flags a p-value whose interval straddles one of the
significance thresholds; the footer then recommends how many
iterations would settle it.
"""

from __future__ import annotations

import math
import textwrap
from typing import TYPE_CHECKING

import numpy as np
from scipy import stats as _sp_stats

if TYPE_CHECKING:
    from ._results import ProximityTestResult

_THRESHOLDS = (0.05, 0.01, 0.001)


def _straddled_threshold(ci_lo: float, ci_hi: float) -> float | None:
    """First conventional threshold strictly inside ``(ci_lo, ci_hi)``."""
    return next((t for t in _THRESHOLDS if ci_lo < t < ci_hi), None)


def _significance_stars(p: float) -> str:
    if p < 0.001:
        return "(***)"
    if p < 0.01:
        return "(**)"
    if p < 0.05:
        return "(*)"
    return "(ns)"


def _recommend_n_permutations(
    p_hat: float,
    threshold: float,
    confidence_level: float = 0.95,
) -> int:
    """Iterations needed before the interval around *p_hat* clears *threshold*.

    Solves ``z * sqrt(p(1-p)/K) = |p - threshold|`` for K using the
    normal approximation, clamped to ``[100, 10_000_000]``.
    """
    gap = abs(p_hat - threshold)
    if gap < 1e-12:
        return 10_000_000
    z = _sp_stats.norm.ppf(0.5 + confidence_level / 2)
    needed = (z / gap) ** 2 * p_hat * (1 - p_hat)
    return int(min(max(math.ceil(needed), 100), 10_000_000))


def print_results_table(
    result: ProximityTestResult,
    *,
    title: str = "Community Proximity Permutation Test",
) -> None:
    """Print the observed summary and one-sided p-values as an ASCII table.

    Args:
        result: Result returned by
            :func:`~proximity_tests.proximity_permutation_test`.
        title: Title for the output table.
    """
    diag = result.diagnostics
    obs = result.observed
    join = diag.get("join", {})
    coverage = diag.get("permutation_coverage", {})

    print("=" * 80)
    for line in textwrap.wrap(title, width=78):
        print(f"{line:^80}")
    print("=" * 80)

    col1, col2 = 40, 38
    print(
        f"{'Communities:':<16}{result.n_communities:<{col1 - 16}}"
        f"{'Observed rows:':>{col2 - 11}} {result.n_pairs:>10}"
    )
    print(
        f"{'Iterations:':<16}{result.n_permutations:<{col1 - 16},}"
        f"{'Missing pairs:':>{col2 - 11}} {result.missing_pairs:>10}"
    )
    seed = "None" if result.random_state is None else str(result.random_state)
    print(
        f"{'Seed:':<16}{seed:<{col1 - 16}}"
        f"{'Dropped rows:':>{col2 - 11}} {join.get('dropped_rows', 0):>10}"
    )
    if coverage:
        print(f"{'Coverage:':<16}{coverage.get('coverage_str', 'N/A')}")
    print("-" * 80)

    # Observed summary block: metric | mean | min | max
    print(f"{'Observed':<22}{'Mean':>14}{'Min':>14}{'Max':>14}")
    print(
        f"{'Distance (km)':<22}{obs.mean_distance_km:>14.3f}"
        f"{obs.min_distance_km:>14.3f}{obs.max_distance_km:>14.3f}"
    )
    print(
        f"{'Time (h)':<22}{obs.mean_time_h:>14.3f}"
        f"{obs.min_time_h:>14.3f}{obs.max_time_h:>14.3f}"
    )
    print("-" * 80)

    # Null comparison block: metric | obs mean | null mean | b | p
    print(
        f"{'Permutation null':<22}{'Obs. mean':>12}{'Null mean':>12}"
        f"{'# < obs':>10}{'P(T* < T)':>19}"
    )
    ci = diag.get("pvalue_ci", {})
    level = diag.get("confidence_level", 0.95)
    recommendations: list[str] = []
    rows = (
        ("Distance (km)", "distance", obs.mean_distance_km,
         result.permuted_mean_distance, result.count_less_distance,
         result.p_value_distance),
        ("Time (h)", "time", obs.mean_time_h,
         result.permuted_mean_time, result.count_less_time,
         result.p_value_time),
    )
    for label, key, obs_mean, null, count, p in rows:
        null_mean = float(np.nanmean(null)) if np.isfinite(null).any() else float("nan")
        p_str = f"{p:.4f} {_significance_stars(p)}"
        print(
            f"{label:<22}{obs_mean:>12.3f}{null_mean:>12.3f}"
            f"{count:>10}{p_str:>19}"
        )
        bounds = ci.get(key)
        if bounds is not None:
            lo, hi = bounds
            threshold = _straddled_threshold(lo, hi)
            marker = "" if threshold is None else "  [!]"
            print(f"{'':<34}{'CI':>10} [{lo:.4f}, {hi:.4f}]{marker}")
            if threshold is not None:
                k = _recommend_n_permutations(p, threshold, level)
                recommendations.append(
                    f"{label}: CI straddles {threshold}; use at least "
                    f"{k:,} iterations to resolve it."
                )
    print("=" * 80)
    if ci:
        print(
            f"  P-Val CI: Clopper-Pearson exact {level:.0%} CI for the "
            f"empirical p-value."
        )
    print("  One-sided: fraction of iterations with mean strictly below observed.")
    print("  Signif. codes: 0 '***' 0.001 '**' 0.01 '*' 0.05 'ns' 1")
    for rec in recommendations:
        print(textwrap.fill(f"  [!] {rec}", width=80, subsequent_indent="      "))
    print()


__all__ = ["print_results_table"]
