"""Canonical community ordering and observed-pair position indices.

The permutation test shuffles *which community sits at which position*
while holding fixed *which positions are linked*.  Two pieces make
that possible:

1. A :class:`CommunityRegistry` that fixes one canonical ordering of
   the distinct communities for the whole run.  The ordering follows
   first appearance in the lookup table's ``origin`` column, then any
   community that only ever appears as a ``destination``.

2. :func:`map_pair_positions`, which converts the observed-pairs
   origin/destination columns into two parallel arrays of 0-based
   positions in that ordering.  These arrays are the pair topology and
   never change across iterations.

Example::

    canonical:  ["Bokaa", "Gumare", "Shakawe"]
    observed:   (Gumare -> Shakawe), (Bokaa -> Gumare)
    origin positions:       [1, 0]
    destination positions:  [2, 1]
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np
import pandas as pd

from .exceptions import NameResolutionError, SchemaError


class CommunityRegistry:
    """Immutable canonical ordering of distinct community names.

    Args:
        names: Community names in canonical order.  Must be distinct.

    Raises:
        SchemaError: If *names* is empty or contains duplicates.
    """

    __slots__ = ("_names", "_positions")

    def __init__(self, names: Iterable[str]) -> None:
        ordered = tuple(str(n) for n in names)
        if not ordered:
            raise SchemaError("The community ordering must not be empty.")
        positions: dict[str, int] = {}
        for i, name in enumerate(ordered):
            if name in positions:
                raise SchemaError(
                    f"Community {name!r} appears more than once in the "
                    f"canonical ordering."
                )
            positions[name] = i
        self._names = ordered
        self._positions = positions

    @classmethod
    def from_lookup_frame(
        cls,
        frame: pd.DataFrame,
        origin: str = "origin",
        destination: str = "destination",
    ) -> CommunityRegistry:
        """Derive the ordering from a lookup table's name columns."""
        seen = pd.unique(
            np.concatenate(
                [frame[origin].to_numpy(dtype=object), frame[destination].to_numpy(dtype=object)]
            )
        )
        return cls(seen)

    @property
    def names(self) -> tuple[str, ...]:
        """Community names in canonical order."""
        return self._names

    def position(self, name: str) -> int:
        """Return the 0-based canonical position of *name*.

        Raises:
            NameResolutionError: If *name* is not registered.
        """
        try:
            return self._positions[name]
        except KeyError:
            raise NameResolutionError([name]) from None

    def as_array(self) -> np.ndarray:
        """Names as a NumPy object array (for fancy indexing)."""
        return np.asarray(self._names, dtype=object)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._positions

    def __iter__(self):
        return iter(self._names)

    def __repr__(self) -> str:
        return f"CommunityRegistry(n={len(self._names)})"


def map_pair_positions(
    registry: CommunityRegistry,
    origins: Sequence[str] | np.ndarray | pd.Series,
    destinations: Sequence[str] | np.ndarray | pd.Series,
) -> tuple[np.ndarray, np.ndarray]:
    """Map observed origin/destination names to canonical positions.

    Every unknown name is collected before raising, so a single error
    reports all inconsistencies at once.

    Args:
        registry: The canonical community ordering.
        origins: Observed origin names, one per replicate row.
        destinations: Observed destination names, same length.

    Returns:
        ``(origin_positions, destination_positions)`` as ``intp``
        arrays of length M, in the observed row order.

    Raises:
        ValueError: If the two columns differ in length.
        NameResolutionError: If any name is absent from *registry*.
    """
    origins = [str(o) for o in origins]
    destinations = [str(d) for d in destinations]
    if len(origins) != len(destinations):
        raise ValueError(
            f"origins and destinations must have equal length, got "
            f"{len(origins)} and {len(destinations)}."
        )

    unknown = [n for n in dict.fromkeys(origins + destinations) if n not in registry]
    if unknown:
        raise NameResolutionError(unknown)

    origin_positions = np.fromiter(
        (registry.position(n) for n in origins), dtype=np.intp, count=len(origins)
    )
    destination_positions = np.fromiter(
        (registry.position(n) for n in destinations),
        dtype=np.intp,
        count=len(destinations),
    )
    return origin_positions, destination_positions


__all__ = ["CommunityRegistry", "map_pair_positions"]
