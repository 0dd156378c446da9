"""Small synthetic community tables shared by the test modules."""

from __future__ import annotations

import itertools

import pandas as pd

COLUMNS = ["origin", "destination", "curr_travel_dist_km", "curr_travel_time_h"]

# Eight communities strung along a road; distance is the gap in km.
LINE_POSITIONS = {
    "Bokaa": 0.0,
    "Digawana": 10.0,
    "Gumare": 25.0,
    "Gweta": 40.0,
    "Lerala": 60.0,
    "Masunga": 85.0,
    "Nata": 110.0,
    "Shakawe": 150.0,
}
LINE_NAMES = list(LINE_POSITIONS)


def line_lookup(exclude: tuple[tuple[str, str], ...] = ()) -> pd.DataFrame:
    """Every directed off-diagonal pair of the line communities."""
    rows = []
    for a, b in itertools.permutations(LINE_NAMES, 2):
        if (a, b) in exclude:
            continue
        dist = abs(LINE_POSITIONS[a] - LINE_POSITIONS[b])
        rows.append((a, b, dist, dist / 50.0))
    return pd.DataFrame(rows, columns=COLUMNS)


def observed_frame(pairs: list[tuple[str, str]]) -> pd.DataFrame:
    """Observed rows whose travel costs come from the line geometry."""
    rows = []
    for a, b in pairs:
        dist = abs(LINE_POSITIONS[a] - LINE_POSITIONS[b])
        rows.append((a, b, dist, dist / 50.0))
    return pd.DataFrame(rows, columns=COLUMNS)


# Neighbouring communities, with one replicate of the first pair.
NEAR_PAIRS = [
    ("Bokaa", "Digawana"),
    ("Digawana", "Gumare"),
    ("Gumare", "Gweta"),
    ("Gweta", "Lerala"),
    ("Bokaa", "Digawana"),
]

# Communities at opposite ends of the road.
FAR_PAIRS = [("Bokaa", "Shakawe"), ("Digawana", "Nata")]


def abc_lookup() -> pd.DataFrame:
    """Three communities; (A, B) is excluded as an observed pair."""
    return pd.DataFrame(
        [
            ("A", "C", 1.0, 0.1),
            ("B", "A", 2.0, 0.2),
            ("B", "C", 3.0, 0.3),
            ("C", "A", 4.0, 0.4),
            ("C", "B", 5.0, 0.5),
        ],
        columns=COLUMNS,
    )


def abc_observed(distance: float = 2.5, time: float = 0.25) -> pd.DataFrame:
    return pd.DataFrame([("A", "B", distance, time)], columns=COLUMNS)
