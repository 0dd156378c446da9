"""Schema validation for the two input tables.

Both tables share one schema:

================================  ======================================
``origin``                        origin community name
``destination``                   destination community name
``curr_travel_dist_km``           driving distance in kilometres
``curr_travel_time_h``            driving time in hours
================================  ======================================

The *lookup* table has one row per directed community pair (excluding
self-pairs and the observed linked pairs); the *observed* table has one
row per observed linkage replicate, so community pairs may repeat.

Polars frames are accepted wherever a pandas frame is: they are
converted at the boundary so downstream code only ever sees
``pandas.DataFrame``.  Polars is optional.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

import numpy as np
import pandas as pd

from .exceptions import SchemaError

if TYPE_CHECKING:
    import polars as pl

    DataFrameLike: TypeAlias = pd.DataFrame | pl.DataFrame | pl.LazyFrame
else:
    DataFrameLike: TypeAlias = pd.DataFrame

try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False

ORIGIN = "origin"
DESTINATION = "destination"
DISTANCE = "curr_travel_dist_km"
TIME = "curr_travel_time_h"

REQUIRED_COLUMNS: tuple[str, ...] = (ORIGIN, DESTINATION, DISTANCE, TIME)


def _as_pandas(obj: DataFrameLike, *, name: str) -> pd.DataFrame:
    """Return *obj* as a pandas DataFrame; Polars input is collected."""
    if isinstance(obj, pd.DataFrame):
        return obj
    if _HAS_POLARS and isinstance(obj, (pl.DataFrame, pl.LazyFrame)):
        frame = obj.collect() if isinstance(obj, pl.LazyFrame) else obj
        return frame.to_pandas()
    accepted = "a pandas or Polars DataFrame" if _HAS_POLARS else "a pandas DataFrame"
    raise TypeError(
        f"The {name} table must be {accepted}, not {type(obj).__name__}."
    )


def validate_travel_table(obj: DataFrameLike, *, name: str) -> pd.DataFrame:
    """Check the shared schema and return a clean copy of the table.

    The returned frame holds exactly the four required columns, with
    community names as ``str`` and distance/time as ``float64``, and a
    fresh ``RangeIndex`` so row positions match the input row order.

    Args:
        obj: Lookup or observed-pairs table (pandas or Polars).
        name: Table label used in error messages.

    Returns:
        Validated ``pandas.DataFrame``.

    Raises:
        TypeError: If *obj* is not a DataFrame.
        SchemaError: If a column is missing, the table is empty, a name
            is missing, or a distance/time value is non-numeric,
            non-finite or negative.
    """
    df = _as_pandas(obj, name=name)

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise SchemaError(
            f"'{name}' is missing required column(s) {missing}; "
            f"expected at least {list(REQUIRED_COLUMNS)}."
        )
    if len(df) == 0:
        raise SchemaError(f"'{name}' must contain at least one row.")

    out = pd.DataFrame(index=pd.RangeIndex(len(df)))

    for col in (ORIGIN, DESTINATION):
        values = df[col].reset_index(drop=True)
        if values.isna().any():
            rows = np.flatnonzero(values.isna().to_numpy())
            raise SchemaError(
                f"'{name}' column '{col}' has missing names at row(s) "
                f"{rows[:10].tolist()}."
            )
        out[col] = values.astype(str).to_numpy()

    for col in (DISTANCE, TIME):
        raw = df[col].reset_index(drop=True)
        numeric = pd.to_numeric(raw, errors="coerce").astype(float)
        bad = ~np.isfinite(numeric.to_numpy())
        if bad.any():
            rows = np.flatnonzero(bad)
            raise SchemaError(
                f"'{name}' column '{col}' must be finite numbers; found "
                f"{raw.iloc[rows[:5]].tolist()} at row(s) {rows[:10].tolist()}."
            )
        if (numeric < 0).any():
            rows = np.flatnonzero((numeric < 0).to_numpy())
            raise SchemaError(
                f"'{name}' column '{col}' must be non-negative; negative "
                f"values at row(s) {rows[:10].tolist()}."
            )
        out[col] = numeric.to_numpy()

    return out


__all__ = [
    "DESTINATION",
    "DISTANCE",
    "DataFrameLike",
    "ORIGIN",
    "REQUIRED_COLUMNS",
    "TIME",
    "validate_travel_table",
]
