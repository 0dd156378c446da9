"""One-sided empirical p-values for the proximity permutation test.

The alternative hypothesis is directional: linked communities are
*closer* than randomly paired ones.  For each metric (distance, time)
the p-value is the fraction of permutation iterations whose mean is
strictly smaller than the observed mean:

    p = #{ mean*_k < mean_obs } / K

Ties count as "not less".  An iteration whose mean is ``NaN`` (every
row dropped under the lenient missing-pair policy) also counts as not
less, because ``NaN < x`` is ``False``.  The denominator is always K,
so dropping rows never changes the number of iterations.

Phipson & Smyth (2010) correction
---------------------------------
With ``phipson_smyth=True`` the observed labelling is treated as one
member of the reference set:

    p = (b + 1) / (K + 1)

which is never exactly zero.  This is off by default so that results
match the plain count-over-K definition.

Reference:
    Phipson, B. & Smyth, G. K. (2010). Permutation p-values should
    never be zero: calculating exact p-values when permutations are
    randomly drawn. *Statistical Applications in Genetics and Molecular
    Biology*, 9(1), Article 39.
"""

from __future__ import annotations

import numpy as np


def count_less_than(permuted_means: np.ndarray, observed_mean: float) -> int:
    """Number of iterations whose mean is strictly below *observed_mean*."""
    permuted_means = np.asarray(permuted_means, dtype=float)
    with np.errstate(invalid="ignore"):
        return int(np.sum(permuted_means < observed_mean))


def empirical_p_value(
    permuted_means: np.ndarray,
    observed_mean: float,
    *,
    phipson_smyth: bool = False,
) -> float:
    """One-sided (lower-tail) empirical p-value for one metric.

    Args:
        permuted_means: Per-iteration means, length K >= 1.
        observed_mean: Observed mean for the same metric.
        phipson_smyth: Use ``(b + 1) / (K + 1)`` instead of ``b / K``.

    Returns:
        p-value in ``[0, 1]``.

    Raises:
        ValueError: If *permuted_means* is empty.
    """
    n_permutations = np.asarray(permuted_means).size
    if n_permutations == 0:
        raise ValueError("At least one permutation iteration is required.")
    count = count_less_than(permuted_means, observed_mean)
    if phipson_smyth:
        return (count + 1) / (n_permutations + 1)
    return count / n_permutations


def calculate_p_values(
    permuted_mean_distance: np.ndarray,
    permuted_mean_time: np.ndarray,
    observed_mean_distance: float,
    observed_mean_time: float,
    *,
    phipson_smyth: bool = False,
) -> tuple[float, float, int, int]:
    """Distance and time p-values from the permutation null.

    Args:
        permuted_mean_distance: Per-iteration mean distance, length K.
        permuted_mean_time: Per-iteration mean time, length K.
        observed_mean_distance: Observed mean distance.
        observed_mean_time: Observed mean time.
        phipson_smyth: Apply the ``(b + 1) / (K + 1)`` correction.

    Returns:
        ``(p_distance, p_time, count_distance, count_time)``, where the
        counts are the numbers of iterations strictly below observed.
    """
    if len(permuted_mean_distance) != len(permuted_mean_time):
        raise ValueError(
            "Distance and time null distributions must have the same "
            f"length, got {len(permuted_mean_distance)} and "
            f"{len(permuted_mean_time)}."
        )
    p_distance = empirical_p_value(
        permuted_mean_distance, observed_mean_distance, phipson_smyth=phipson_smyth
    )
    p_time = empirical_p_value(
        permuted_mean_time, observed_mean_time, phipson_smyth=phipson_smyth
    )
    return (
        p_distance,
        p_time,
        count_less_than(permuted_mean_distance, observed_mean_distance),
        count_less_than(permuted_mean_time, observed_mean_time),
    )


__all__ = ["calculate_p_values", "count_less_than", "empirical_p_value"]
