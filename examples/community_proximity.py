"""
Test Case: Community Proximity of Linked Transmission Pairs
Synthetic road network of twelve communities

Demonstrates:
- ``proximity_permutation_test`` on a complete lookup table
- ``missing_pairs="drop"`` on a lookup table with a gap
- Join and p-value diagnostics via ``print_results_table``
- JSON-ready results via ``ProximityTestResult.to_dict``
"""

import itertools
import json
import warnings

import numpy as np
import pandas as pd

from proximity_tests import (
    JoinError,
    print_results_table,
    proximity_permutation_test,
)

COLUMNS = ["origin", "destination", "curr_travel_dist_km", "curr_travel_time_h"]

# ============================================================================
# Build a synthetic region
# ============================================================================

rng = np.random.default_rng(2024)
names = [
    "Bokaa", "Digawana", "Gumare", "Gweta", "Lerala", "Masunga",
    "Nata", "Oodi", "Ramotswa", "Sefophe", "Shakawe", "Tsetsebjwe",
]
xy = pd.DataFrame(rng.uniform(0, 400, size=(len(names), 2)), index=names, columns=["x", "y"])


def road_cost(a, b):
    # Roads wind: driving distance is 1.3x the straight line.
    km = 1.3 * float(np.hypot(*(xy.loc[a] - xy.loc[b])))
    return km, km / 70.0


# Linked pairs: each community is linked to its nearest neighbour,
# with a few pairs sampled more than once.
observed_rows = []
for a in names:
    b = min((n for n in names if n != a), key=lambda n: road_cost(a, n)[0])
    for _ in range(1 + int(rng.integers(0, 2))):
        observed_rows.append((a, b, *road_cost(a, b)))
observed = pd.DataFrame(observed_rows, columns=COLUMNS)
observed_pairs = set(zip(observed["origin"], observed["destination"]))

lookup = pd.DataFrame(
    [
        (a, b, *road_cost(a, b))
        for a, b in itertools.permutations(names, 2)
        if (a, b) not in observed_pairs
    ],
    columns=COLUMNS,
)
print(f"{len(observed)} observed rows, {len(lookup)} lookup entries")

# ============================================================================
# Strict join: permuted pairs that land on an observed pair are missing
# ============================================================================

try:
    proximity_permutation_test(lookup, observed, n_permutations=10_000, random_state=1)
except JoinError as exc:
    print(f"JoinError: {len(exc.pairs)} pair(s) in {len(exc.iterations)} iteration(s)")

# ============================================================================
# Complete lookup table
# ============================================================================

full_lookup = pd.concat([lookup, observed.drop_duplicates(["origin", "destination"])])
results = proximity_permutation_test(
    full_lookup, observed, n_permutations=10_000, random_state=1
)
print_results_table(results)
assert results.p_value_distance < 0.05

# ============================================================================
# Lenient join on the incomplete table
# ============================================================================

with warnings.catch_warnings():
    warnings.simplefilter("ignore", UserWarning)
    results_drop = proximity_permutation_test(
        lookup, observed, n_permutations=10_000, random_state=1, missing_pairs="drop"
    )
print_results_table(results_drop, title="Community Proximity (missing_pairs='drop')")
print(json.dumps(results_drop.to_dict()["diagnostics"]["join"], indent=2))
