"""CSV loaders for the lookup and observed-pairs tables.

Both loaders read with :func:`pandas.read_csv`, keep any extra columns
out of the way, and validate the shared schema before returning, so a
malformed file fails here rather than mid-run.
"""

from __future__ import annotations

import logging
import os

import pandas as pd

from .exceptions import SchemaError
from .tables import DESTINATION, ORIGIN, validate_travel_table

logger = logging.getLogger(__name__)

PathLike = str | os.PathLike


def _read(path: PathLike, name: str, **read_csv_kwargs) -> pd.DataFrame:
    # Names stay strings even when a community is called e.g. "NA".
    kwargs = {
        "dtype": {ORIGIN: str, DESTINATION: str},
        "keep_default_na": False,
        "na_values": [""],
    }
    kwargs.update(read_csv_kwargs)
    try:
        raw = pd.read_csv(path, **kwargs)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise SchemaError(f"'{name}' file {path} could not be parsed: {exc}") from exc
    logger.debug("Read %d row(s) from %s (%s)", len(raw), path, name)
    return validate_travel_table(raw, name=name)


def read_lookup_table(path: PathLike, **read_csv_kwargs) -> pd.DataFrame:
    """Read the all-pairs travel lookup table.

    Args:
        path: CSV with ``origin``, ``destination``,
            ``curr_travel_dist_km`` and ``curr_travel_time_h``.
        **read_csv_kwargs: Forwarded to :func:`pandas.read_csv`.

    Returns:
        Validated DataFrame.

    Raises:
        SchemaError: If the file does not match the schema.  Also raised when
            the file is empty or is not parseable CSV.
    """
    return _read(path, "lookup", **read_csv_kwargs)


def read_observed_pairs(path: PathLike, **read_csv_kwargs) -> pd.DataFrame:
    """Read the observed linked pairs (one row per replicate).

    Args:
        path: CSV with the same columns as the lookup table.
        **read_csv_kwargs: Forwarded to :func:`pandas.read_csv`.

    Returns:
        Validated DataFrame, row order preserved.

    Raises:
        SchemaError: If the file does not match the schema.  Also raised when
            the file is empty or is not parseable CSV.
    """
    return _read(path, "observed", **read_csv_kwargs)


__all__ = ["read_lookup_table", "read_observed_pairs"]
