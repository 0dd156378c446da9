"""Full-size smoke tests for regression detection.

These run the test at the scale of the published study (about thirty
communities, K = 10,000) and catch accidental quadratic behaviour or
regressions in the vectorised join.

All tests are marked ``@pytest.mark.slow`` and excluded from the
default ``pytest`` run.  Run them explicitly::

    pytest -m slow
"""

from __future__ import annotations

import itertools
import time

import numpy as np
import pandas as pd
import pytest

from proximity_tests import proximity_permutation_test

from _builders import COLUMNS

# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #

N_COMMUNITIES = 30
N_PAIRS = 60
K = 10_000
SEED = 42


def _make_plane(
    n: int = N_COMMUNITIES, seed: int = SEED
) -> tuple[pd.DataFrame, np.ndarray, list[str]]:
    rng = np.random.default_rng(seed)
    xy = rng.uniform(0, 300, size=(n, 2))
    names = [f"community_{i:02d}" for i in range(n)]
    rows = []
    for i, j in itertools.permutations(range(n), 2):
        d = float(np.hypot(*(xy[i] - xy[j])))
        rows.append((names[i], names[j], d, d / 60.0))
    return pd.DataFrame(rows, columns=COLUMNS), xy, names


def _nearest_neighbour_pairs(xy: np.ndarray, names: list[str], m: int) -> pd.DataFrame:
    rng = np.random.default_rng(SEED + 1)
    rows = []
    for _ in range(m):
        i = int(rng.integers(len(names)))
        gaps = np.hypot(*(xy - xy[i]).T)
        gaps[i] = np.inf
        j = int(np.argmin(gaps))
        rows.append((names[i], names[j], float(gaps[j]), float(gaps[j]) / 60.0))
    return pd.DataFrame(rows, columns=COLUMNS)


# ------------------------------------------------------------------ #
# Smoke tests
# ------------------------------------------------------------------ #


@pytest.mark.slow
def test_full_size_run_completes():
    lookup, xy, names = _make_plane()
    observed = _nearest_neighbour_pairs(xy, names, N_PAIRS)

    start = time.perf_counter()
    result = proximity_permutation_test(lookup, observed, K, SEED)
    elapsed = time.perf_counter() - start

    assert elapsed < 60, f"Took {elapsed:.1f}s (limit 60s)"
    assert result.permuted_mean_distance.shape == (K,)
    assert np.isfinite(result.permuted_mean_distance).all()
    assert result.p_value_distance < 0.01
    assert result.p_value_time < 0.01


@pytest.mark.slow
def test_threaded_run_matches_serial():
    lookup, xy, names = _make_plane()
    observed = _nearest_neighbour_pairs(xy, names, N_PAIRS)

    serial = proximity_permutation_test(lookup, observed, K, SEED)
    threaded = proximity_permutation_test(
        lookup, observed, K, SEED, n_jobs=-1, chunk_size=500
    )
    np.testing.assert_array_equal(
        serial.permuted_mean_distance, threaded.permuted_mean_distance
    )
    assert serial.p_value_distance == threaded.p_value_distance
