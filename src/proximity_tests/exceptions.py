"""Exception types raised by the proximity permutation test.

All errors derive from :class:`ProximityTestError` so callers can catch
the whole family at once.  Each concrete type also inherits from the
built-in exception it refines (``LookupError`` or ``ValueError``), so
code written against the built-ins keeps working.

Every error is structural: it signals inconsistent input tables rather
than a transient condition, and none of them is retried.
"""

from __future__ import annotations

from collections.abc import Sequence


class ProximityTestError(Exception):
    """Base class for all proximity-test errors."""


class SchemaError(ProximityTestError, ValueError):
    """A required column is missing, empty, non-numeric or duplicated."""


class NameResolutionError(ProximityTestError, LookupError):
    """An observed-pair community is absent from the canonical ordering.

    Attributes:
        names: The unresolved community names, in first-seen order.
    """

    def __init__(self, names: Sequence[str]) -> None:
        self.names = list(names)
        preview = ", ".join(repr(n) for n in self.names[:10])
        more = f" (+{len(self.names) - 10} more)" if len(self.names) > 10 else ""
        super().__init__(
            f"{len(self.names)} observed-pair communit"
            f"{'y is' if len(self.names) == 1 else 'ies are'} not present "
            f"in the lookup table: {preview}{more}."
        )


class JoinError(ProximityTestError, LookupError):
    """A permuted (origin, destination) pair has no lookup-table entry.

    Attributes:
        pairs: Distinct unresolved ``(origin, destination)`` pairs.
        iterations: 1-based iteration ids in which they occurred
            (empty when the join was not part of a permutation run).
    """

    def __init__(
        self,
        pairs: Sequence[tuple[str, str]],
        iterations: Sequence[int] = (),
    ) -> None:
        self.pairs = list(pairs)
        self.iterations = list(iterations)
        preview = ", ".join(f"({o!r}, {d!r})" for o, d in self.pairs[:5])
        more = f" (+{len(self.pairs) - 5} more)" if len(self.pairs) > 5 else ""
        where = ""
        if self.iterations:
            first = ", ".join(str(i) for i in self.iterations[:5])
            where = f" in iteration(s) {first}" + (
                " ..." if len(self.iterations) > 5 else ""
            )
        super().__init__(
            f"No travel distance/time for {len(self.pairs)} permuted "
            f"pair(s){where}: {preview}{more}.  Complete the lookup table "
            f"or rerun with missing_pairs='drop'."
        )


__all__ = [
    "JoinError",
    "NameResolutionError",
    "ProximityTestError",
    "SchemaError",
]
