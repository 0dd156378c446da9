"""Immutable run context shared by every permutation iteration.

A :class:`PermutationContext` bundles everything that is derived once
from the two input tables and then only read:

    ┌──────────────────────────────────────────────────────┐
    │  PermutationContext.build(lookup_df, observed_df)    │
    │  ├─ observed   = validate_travel_table(observed_df)  │
    │  ├─ lookup     = LookupTable.from_frame(lookup_df)   │
    │  ├─ registry   = lookup.registry                     │
    │  ├─ origin_positions, destination_positions          │
    │  │             = map_pair_positions(registry, …)     │
    │  └─ summary    = summarize_observed(observed)        │
    └──────────────────────────────────────────────────────┘

    # Per iteration (any worker, no locking):
    perm -> reconstruct_pairs(perm, ctx.origin_positions, …)
         -> ctx.lookup.join_positions(…)
         -> iteration_means(…)

The position arrays are made read-only so a worker cannot alter the
pair topology seen by another.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from ._results import ObservedSummary
from .communities import CommunityRegistry, map_pair_positions
from .lookup import LookupTable
from .statistics import summarize_observed
from .tables import DESTINATION, ORIGIN, DataFrameLike, validate_travel_table


@dataclass(frozen=True)
class PermutationContext:
    """Read-only inputs for the permutation loop."""

    registry: CommunityRegistry
    """Canonical community ordering (length N)."""

    lookup: LookupTable
    """Directed travel-cost lookup keyed by community pair."""

    observed: pd.DataFrame
    """Validated observed-pairs table (M replicate rows)."""

    origin_positions: np.ndarray
    """Canonical positions of the observed origins, shape ``(M,)``."""

    destination_positions: np.ndarray
    """Canonical positions of the observed destinations, shape ``(M,)``."""

    summary: ObservedSummary
    """Observed mean/min/max of distance and time."""

    @classmethod
    def build(
        cls,
        lookup: DataFrameLike | LookupTable,
        observed: DataFrameLike,
    ) -> PermutationContext:
        """Validate both tables and derive the fixed pair topology.

        Raises:
            SchemaError: If either table violates the schema.
            NameResolutionError: If an observed community is missing
                from the lookup table's community set.
        """
        observed_df = validate_travel_table(observed, name="observed")
        table = lookup if isinstance(lookup, LookupTable) else LookupTable.from_frame(lookup)

        origin_positions, destination_positions = map_pair_positions(
            table.registry, observed_df[ORIGIN], observed_df[DESTINATION]
        )
        origin_positions.setflags(write=False)
        destination_positions.setflags(write=False)

        return cls(
            registry=table.registry,
            lookup=table,
            observed=observed_df,
            origin_positions=origin_positions,
            destination_positions=destination_positions,
            summary=summarize_observed(observed_df),
        )

    @property
    def n_communities(self) -> int:
        return len(self.registry)

    @property
    def n_pairs(self) -> int:
        return len(self.origin_positions)


__all__ = ["PermutationContext"]
