"""Diagnostics for judging how far to trust an empirical p-value.

* **Monte Carlo standard error** - the empirical p-value is a binomial
  proportion estimated from K independent draws, so its sampling error
  is SE = sqrt[p(1 - p) / K].  With K = 10,000 and p = 0.05 the SE is
  about 0.002.

* **Clopper-Pearson interval** - the exact binomial confidence interval
  for the true (infinite-K) p-value given b successes out of K, via
  ``statsmodels.stats.proportion.proportion_confint(method="beta")``.
  When the interval straddles a significance threshold the conclusion
  at that threshold is not yet settled and K should be increased.

* **Permutation coverage** - K / N!, the fraction of all relabellings
  of the N communities that were sampled.  Only informative for very
  small N; for 30 communities it is effectively zero.

* **Join diagnostics** - under the lenient ``"drop"`` policy, how many
  iterations lost rows and how many rows were lost in total.  A large
  share means the per-iteration sample size varies materially and the
  lookup table should be completed instead.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np
from statsmodels.stats.proportion import proportion_confint

logger = logging.getLogger(__name__)


def compute_monte_carlo_se(p_value: float, n_permutations: int) -> float:
    """Standard error of an empirical p-value from K draws."""
    return math.sqrt(p_value * (1.0 - p_value) / n_permutations)


def compute_clopper_pearson(
    count: int,
    n_permutations: int,
    confidence_level: float = 0.95,
) -> tuple[float, float]:
    """Exact binomial confidence interval for ``count / n_permutations``.

    Args:
        count: Iterations strictly below the observed mean (b).
        n_permutations: Number of iterations K.
        confidence_level: Coverage of the interval, in ``(0, 1)``.

    Returns:
        ``(lower, upper)`` bounds in ``[0, 1]``.

    Raises:
        ValueError: If *confidence_level* is outside ``(0, 1)``.
    """
    if not 0.0 < confidence_level < 1.0:
        raise ValueError(
            f"confidence_level must be in (0, 1), got {confidence_level}."
        )
    lo, hi = proportion_confint(
        count, n_permutations, alpha=1.0 - confidence_level, method="beta"
    )
    # statsmodels returns NaN for the degenerate bound at 0 or K.
    lo = 0.0 if np.isnan(lo) else float(lo)
    hi = 1.0 if np.isnan(hi) else float(hi)
    return lo, hi


def compute_permutation_coverage(n_communities: int, n_permutations: int) -> dict:
    """Fraction of the N! relabellings sampled by K draws.

    Draws are with replacement across iterations, so this is an upper
    bound on the fraction of *distinct* relabellings seen.  The ratio
    is formed in log space; N! is only materialised for N <= 20.

    Returns:
        Dictionary with ``coverage`` (float), ``n_factorial`` (int, or
        ``None`` above 20 communities) and ``coverage_str``.
    """
    log10_total = math.lgamma(n_communities + 1) / math.log(10)
    coverage = 10.0 ** min(0.0, math.log10(n_permutations) - log10_total)

    n_factorial: int | None = None
    if n_communities <= 20:
        n_factorial = math.factorial(n_communities)
        total_str = f"{n_factorial:,}"
    else:
        total_str = f"~1e{log10_total:.0f}"

    share = f"{coverage:.1%}" if coverage >= 0.001 else "< 0.1%"
    return {
        "coverage": coverage,
        "n_factorial": n_factorial,
        "coverage_str": f"{share} of {total_str} relabellings",
    }


def compute_join_diagnostics(
    n_resolved: np.ndarray,
    n_pairs: int,
    policy: str,
) -> dict:
    """Summarise dropped rows per iteration under the missing-pair policy.

    Args:
        n_resolved: Resolved rows per iteration, shape ``(K,)``.
        n_pairs: Observed rows M.
        policy: ``"raise"`` or ``"drop"``.

    Returns:
        Dictionary with the policy, ``affected_iterations``,
        ``dropped_rows``, ``empty_iterations`` (no row resolved) and
        ``min_resolved_pairs``.
    """
    n_resolved = np.asarray(n_resolved)
    dropped = n_pairs - n_resolved
    return {
        "policy": policy,
        "affected_iterations": int(np.count_nonzero(dropped)),
        "dropped_rows": int(dropped.sum()),
        "empty_iterations": int(np.count_nonzero(n_resolved == 0)),
        "min_resolved_pairs": int(n_resolved.min()) if n_resolved.size else n_pairs,
    }


def compute_all_diagnostics(
    *,
    p_value_distance: float,
    p_value_time: float,
    count_distance: int,
    count_time: int,
    n_permutations: int,
    n_communities: int,
    n_pairs: int,
    n_resolved: np.ndarray,
    policy: str,
    confidence_level: float = 0.95,
) -> dict[str, Any]:
    """Assemble every diagnostic into one dictionary for the result."""
    diagnostics: dict[str, Any] = {
        "monte_carlo_se": {
            "distance": compute_monte_carlo_se(p_value_distance, n_permutations),
            "time": compute_monte_carlo_se(p_value_time, n_permutations),
        },
        "pvalue_ci": {
            "distance": list(
                compute_clopper_pearson(count_distance, n_permutations, confidence_level)
            ),
            "time": list(
                compute_clopper_pearson(count_time, n_permutations, confidence_level)
            ),
        },
        "confidence_level": confidence_level,
        "permutation_coverage": compute_permutation_coverage(
            n_communities, n_permutations
        ),
        "join": compute_join_diagnostics(n_resolved, n_pairs, policy),
    }
    logger.debug(
        "Diagnostics: MC SE distance=%.4g time=%.4g; %d iteration(s) lost rows",
        diagnostics["monte_carlo_se"]["distance"],
        diagnostics["monte_carlo_se"]["time"],
        diagnostics["join"]["affected_iterations"],
    )
    return diagnostics


__all__ = [
    "compute_all_diagnostics",
    "compute_clopper_pearson",
    "compute_join_diagnostics",
    "compute_monte_carlo_se",
    "compute_permutation_coverage",
]
