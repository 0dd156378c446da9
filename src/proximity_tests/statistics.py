"""Reductions over observed and permuted travel costs."""

from __future__ import annotations

import numpy as np
import pandas as pd

from ._results import ObservedSummary
from .tables import DISTANCE, TIME


def summarize_observed(observed: pd.DataFrame) -> ObservedSummary:
    """Mean, min and max of distance and time over every replicate row.

    Replicates of the same community pair are deliberately *not*
    deduplicated: each one is a separate observed linkage event.

    Args:
        observed: Validated observed-pairs table.

    Returns:
        An :class:`~proximity_tests._results.ObservedSummary`.
    """
    dist = observed[DISTANCE].to_numpy(dtype=float)
    time = observed[TIME].to_numpy(dtype=float)
    return ObservedSummary(
        n_pairs=len(dist),
        mean_distance_km=float(dist.mean()),
        min_distance_km=float(dist.min()),
        max_distance_km=float(dist.max()),
        mean_time_h=float(time.mean()),
        min_time_h=float(time.min()),
        max_time_h=float(time.max()),
    )


def iteration_means(
    distance: np.ndarray,
    time: np.ndarray,
    missing: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Per-iteration mean distance and time over the joined rows.

    Args:
        distance: ``(B, M)`` permuted distances (``NaN`` where
            unresolved).
        time: ``(B, M)`` permuted times.
        missing: Optional ``(B, M)`` mask of unresolved cells.  When
            given, masked cells are left out of the mean.

    Returns:
        ``(mean_distance, mean_time, n_resolved)`` arrays of length B.
        An iteration with no resolved row has ``NaN`` means.
    """
    distance = np.atleast_2d(distance)
    time = np.atleast_2d(time)

    if missing is None or not missing.any():
        n = distance.shape[1]
        return (
            distance.mean(axis=1),
            time.mean(axis=1),
            np.full(distance.shape[0], n, dtype=np.intp),
        )

    missing = np.atleast_2d(missing)
    keep = ~missing
    n_resolved = keep.sum(axis=1)
    # Sum with zeros in place of NaN, then divide by the kept count;
    # rows with nothing kept divide 0 by 0 and stay NaN.
    with np.errstate(invalid="ignore", divide="ignore"):
        mean_distance = np.where(keep, distance, 0.0).sum(axis=1) / n_resolved
        mean_time = np.where(keep, time, 0.0).sum(axis=1) / n_resolved
    return mean_distance, mean_time, n_resolved.astype(np.intp)


__all__ = ["iteration_means", "summarize_observed"]
