"""Directed travel distance/time lookup keyed by community pair.

The lookup table answers "how far is it to drive from community *A* to
community *B*?" for every directed pair a permutation can produce.  It
is held twice, built once:

* a ``dict`` from ``(origin, destination)`` to :class:`TravelCost`,
  used by :meth:`LookupTable.join` when pairs arrive as names; and
* two dense ``(N, N)`` matrices in canonical position space, with
  ``NaN`` where no entry exists, used by
  :meth:`LookupTable.join_positions` to resolve a whole chunk of
  permutations with a single NumPy gather.

Keys are directional: ``(A, B)`` and ``(B, A)`` are different entries
unless the table lists both.

Missing pairs
-------------
A permuted pair with no entry is a data-precondition violation.  Both
join methods report the unresolved cells through a boolean mask, and
raise :class:`~proximity_tests.exceptions.JoinError` unless the caller
asks to keep going (``strict=False``), in which case the distance and
time at those cells are ``NaN`` and the caller decides what to drop.
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping, Sequence
from typing import NamedTuple

import numpy as np
import pandas as pd

from .communities import CommunityRegistry
from .exceptions import JoinError, NameResolutionError, SchemaError
from .tables import DESTINATION, DISTANCE, ORIGIN, TIME, DataFrameLike, validate_travel_table


class TravelCost(NamedTuple):
    """Driving distance (km) and time (h) for one directed pair."""

    distance_km: float
    time_h: float


class LookupTable(Mapping):
    """Read-only mapping ``(origin, destination) -> TravelCost``.

    Args:
        entries: Mapping of directed pairs to travel costs.
        registry: Canonical community ordering.  Every community named
            in *entries* must be registered.

    Raises:
        NameResolutionError: If an entry names an unregistered
            community.
    """

    def __init__(
        self,
        entries: Mapping[tuple[str, str], TravelCost],
        registry: CommunityRegistry,
    ) -> None:
        self._entries: dict[tuple[str, str], TravelCost] = dict(entries)
        self.registry = registry

        n = len(registry)
        distance = np.full((n, n), np.nan)
        time = np.full((n, n), np.nan)
        unknown: list[str] = []
        for (origin, destination), cost in self._entries.items():
            if origin not in registry or destination not in registry:
                unknown.extend(
                    c for c in (origin, destination) if c not in registry
                )
                continue
            i = registry.position(origin)
            j = registry.position(destination)
            distance[i, j] = cost.distance_km
            time[i, j] = cost.time_h
        if unknown:
            raise NameResolutionError(list(dict.fromkeys(unknown)))

        distance.setflags(write=False)
        time.setflags(write=False)
        self._distance = distance
        self._time = time

    # ---- Construction ---------------------------------------------

    @classmethod
    def from_frame(
        cls,
        frame: DataFrameLike,
        registry: CommunityRegistry | None = None,
    ) -> LookupTable:
        """Build a lookup table from a validated-schema DataFrame.

        Self-pairs (origin equal to destination) are dropped with a
        ``UserWarning``.  Duplicate directed keys are an error.

        Args:
            frame: Lookup table with ``origin``, ``destination``,
                ``curr_travel_dist_km`` and ``curr_travel_time_h``.
            registry: Canonical ordering; derived from *frame* when
                ``None``.

        Raises:
            SchemaError: On schema problems or duplicate keys.
        """
        df = validate_travel_table(frame, name="lookup")

        self_pair = df[ORIGIN].to_numpy() == df[DESTINATION].to_numpy()
        if self_pair.any():
            warnings.warn(
                f"Dropping {int(self_pair.sum())} self-pair row(s) from the "
                f"lookup table; a community is never paired with itself.",
                UserWarning,
                stacklevel=2,
            )
            df = df.loc[~self_pair].reset_index(drop=True)
            if len(df) == 0:
                raise SchemaError("'lookup' contains only self-pairs.")

        dup = df.duplicated(subset=[ORIGIN, DESTINATION], keep=False)
        if dup.any():
            pairs = (
                df.loc[dup, [ORIGIN, DESTINATION]]
                .drop_duplicates()
                .itertuples(index=False, name=None)
            )
            raise SchemaError(
                f"'lookup' has duplicate (origin, destination) rows: "
                f"{list(pairs)[:5]}."
            )

        if registry is None:
            registry = CommunityRegistry.from_lookup_frame(df, ORIGIN, DESTINATION)

        entries = {
            (o, d): TravelCost(float(dist), float(t))
            for o, d, dist, t in zip(
                df[ORIGIN], df[DESTINATION], df[DISTANCE], df[TIME], strict=True
            )
        }
        return cls(entries, registry)

    # ---- Mapping protocol -----------------------------------------

    def __getitem__(self, key: tuple[str, str]) -> TravelCost:
        return self._entries[key]

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"LookupTable(n_pairs={len(self._entries)}, "
            f"n_communities={len(self.registry)})"
        )

    # ---- Dense views ----------------------------------------------

    @property
    def distance_matrix(self) -> np.ndarray:
        """Read-only ``(N, N)`` distance matrix, ``NaN`` where absent."""
        return self._distance

    @property
    def time_matrix(self) -> np.ndarray:
        """Read-only ``(N, N)`` time matrix, ``NaN`` where absent."""
        return self._time

    def scaled(self, factor: float) -> LookupTable:
        """Return a copy with every distance and time multiplied by *factor*."""
        return LookupTable(
            {
                k: TravelCost(v.distance_km * factor, v.time_h * factor)
                for k, v in self._entries.items()
            },
            self.registry,
        )

    # ---- Joins ----------------------------------------------------

    def join(
        self,
        origins: Sequence[str] | np.ndarray,
        destinations: Sequence[str] | np.ndarray,
        *,
        strict: bool = True,
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Resolve name pairs row by row, preserving order.

        Args:
            origins: Origin names, length M.
            destinations: Destination names, length M.
            strict: Raise on any unresolved pair when ``True``.

        Returns:
            ``(distance_km, time_h, missing)`` arrays of length M;
            ``missing`` flags rows with no entry (their values are
            ``NaN``).

        Raises:
            JoinError: If *strict* and any pair is unresolved.
        """
        if len(origins) != len(destinations):
            raise ValueError(
                f"origins and destinations must have equal length, got "
                f"{len(origins)} and {len(destinations)}."
            )
        m = len(origins)
        distance = np.full(m, np.nan)
        time = np.full(m, np.nan)
        missing = np.zeros(m, dtype=bool)
        for i, key in enumerate(zip(origins, destinations, strict=True)):
            cost = self._entries.get(key)
            if cost is None:
                missing[i] = True
                continue
            distance[i], time[i] = cost

        if strict and missing.any():
            pairs = [
                (origins[i], destinations[i]) for i in np.flatnonzero(missing)
            ]
            raise JoinError(list(dict.fromkeys(pairs)))
        return distance, time, missing

    def join_positions(
        self,
        origin_positions: np.ndarray,
        destination_positions: np.ndarray,
        *,
        strict: bool = True,
        iteration_offset: int = 0,
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Resolve pairs given as canonical positions (any shape).

        Args:
            origin_positions: Integer positions, e.g. ``(B, M)``.
            destination_positions: Same shape as *origin_positions*.
            strict: Raise on any unresolved pair when ``True``.
            iteration_offset: Number of iterations preceding row 0 of a
                2-D input, used to report 1-based iteration ids.

        Returns:
            ``(distance_km, time_h, missing)`` with the input shape.

        Raises:
            JoinError: If *strict* and any pair is unresolved.  When
                the input is 2-D, the error lists the affected 1-based
                iteration ids.
        """
        distance = self._distance[origin_positions, destination_positions]
        time = self._time[origin_positions, destination_positions]
        missing = np.isnan(distance)

        if strict and missing.any():
            names = self.registry.as_array()
            cells = np.argwhere(missing)
            pairs = list(
                dict.fromkeys(
                    (
                        str(names[origin_positions[tuple(c)]]),
                        str(names[destination_positions[tuple(c)]]),
                    )
                    for c in cells[:1000]
                )
            )
            iterations: list[int] = []
            if missing.ndim == 2:
                iterations = (
                    np.flatnonzero(missing.any(axis=1)) + 1 + iteration_offset
                ).tolist()
            raise JoinError(pairs, iterations)
        return distance, time, missing

    def to_frame(self) -> pd.DataFrame:
        """Return the entries as a DataFrame in the input schema."""
        rows = [
            (o, d, c.distance_km, c.time_h) for (o, d), c in self._entries.items()
        ]
        return pd.DataFrame(rows, columns=[ORIGIN, DESTINATION, DISTANCE, TIME])


__all__ = ["LookupTable", "TravelCost"]
