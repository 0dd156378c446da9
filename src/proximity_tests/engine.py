"""Permutation engine: shared state, permutation generation, batch loop.

The :class:`PermutationEngine` centralises everything that happens
*before* and *around* the per-iteration computation:

1. **Context construction** - validate both tables, derive the
   canonical ordering, map observed pairs to positions and summarise
   the observed travel costs (once, immutable).
2. **Policy resolution** - per-call ``missing_pairs`` argument, then
   the package-level setting in :mod:`._config`.
3. **Permutation generation** - a single ``(K, N)`` matrix drawn from
   one seeded generator, so results are identical for every
   ``n_jobs`` / ``chunk_size`` combination.
4. **Batch evaluation** - iterations are split into chunks; each chunk
   reconstructs its permuted pairs, resolves them against the dense
   lookup matrices, and reduces them to per-iteration means in a few
   vectorised NumPy calls.

Parallelism
~~~~~~~~~~~
When ``n_jobs != 1`` chunks are dispatched with
``joblib.Parallel(prefer="threads")``.  The per-chunk work is NumPy
fancy indexing and reductions over read-only arrays, so no locking is
needed and no data is copied to workers.  A :class:`JoinError` raised
in any chunk propagates out of ``Parallel`` and aborts the run.
"""

from __future__ import annotations

import logging
import warnings

import numpy as np
from joblib import Parallel, delayed

from ._config import resolve_missing_pair_policy
from ._context import PermutationContext
from .lookup import LookupTable
from .permutations import generate_label_permutations, reconstruct_pairs
from .statistics import iteration_means
from .tables import DataFrameLike

logger = logging.getLogger(__name__)

_DEFAULT_CHUNK_SIZE = 1_000


class PermutationEngine:
    """Builder that resolves shared state and runs the permutation loop.

    Construct an engine, then call :meth:`run`.  The engine captures an
    immutable :class:`PermutationContext` and the pre-generated
    permutation matrix at construction time.

    Attributes:
        ctx: Immutable run context.
        missing_pairs: Resolved missing-pair policy.
        perm_indices: Permutation matrix of shape ``(K, N)``.
    """

    def __init__(
        self,
        lookup: DataFrameLike | LookupTable,
        observed: DataFrameLike,
        *,
        n_permutations: int = 10_000,
        random_state: int | np.random.Generator | None = None,
        missing_pairs: str | None = None,
        n_jobs: int = 1,
        chunk_size: int = _DEFAULT_CHUNK_SIZE,
        ctx: PermutationContext | None = None,
    ) -> None:
        if n_permutations < 1:
            raise ValueError(
                f"n_permutations must be at least 1, got {n_permutations}."
            )
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}.")
        if n_jobs == 0:
            raise ValueError("n_jobs must be non-zero (-1 = all cores).")

        self.ctx: PermutationContext = (
            ctx if ctx is not None else PermutationContext.build(lookup, observed)
        )
        self.missing_pairs: str = resolve_missing_pair_policy(missing_pairs)
        self.n_permutations = n_permutations
        self.n_jobs = n_jobs
        self.chunk_size = chunk_size

        logger.debug(
            "Context: %d communities, %d observed pair rows, %d lookup entries",
            self.ctx.n_communities,
            self.ctx.n_pairs,
            len(self.ctx.lookup),
        )

        self.perm_indices: np.ndarray = generate_label_permutations(
            self.ctx.n_communities, n_permutations, random_state
        )

    # ---- Per-chunk primitive --------------------------------------

    def evaluate_chunk(
        self,
        perm_chunk: np.ndarray,
        iteration_offset: int = 0,
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Mean permuted distance/time for a block of iterations.

        Args:
            perm_chunk: ``(B, N)`` rows of the permutation matrix.
            iteration_offset: Iterations preceding this chunk, used for
                1-based ids in error messages.

        Returns:
            ``(mean_distance, mean_time, n_resolved)``, each ``(B,)``.

        Raises:
            JoinError: Under the ``"raise"`` policy, if any permuted
                pair in the chunk has no lookup entry.
        """
        origins, destinations = reconstruct_pairs(
            perm_chunk, self.ctx.origin_positions, self.ctx.destination_positions
        )
        distance, time, missing = self.ctx.lookup.join_positions(
            origins,
            destinations,
            strict=self.missing_pairs == "raise",
            iteration_offset=iteration_offset,
        )
        return iteration_means(distance, time, missing)

    # ---- Full loop ------------------------------------------------

    def run(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Evaluate every iteration.

        Returns:
            ``(mean_distance, mean_time, n_resolved)``, each of shape
            ``(K,)`` in iteration order.
        """
        starts = range(0, self.n_permutations, self.chunk_size)
        chunks = [
            (self.perm_indices[s : s + self.chunk_size], s) for s in starts
        ]
        logger.debug(
            "Evaluating %d iteration(s) in %d chunk(s) with n_jobs=%d",
            self.n_permutations,
            len(chunks),
            self.n_jobs,
        )

        if self.n_jobs == 1 or len(chunks) == 1:
            parts = [self.evaluate_chunk(c, s) for c, s in chunks]
        else:
            parts = Parallel(n_jobs=self.n_jobs, prefer="threads")(
                delayed(self.evaluate_chunk)(c, s) for c, s in chunks
            )

        mean_distance = np.concatenate([p[0] for p in parts])
        mean_time = np.concatenate([p[1] for p in parts])
        n_resolved = np.concatenate([p[2] for p in parts])

        dropped = self.ctx.n_pairs - n_resolved
        if dropped.any():
            affected = int(np.count_nonzero(dropped))
            warnings.warn(
                f"{affected} of {self.n_permutations} iteration(s) contained "
                f"permuted pairs absent from the lookup table; "
                f"{int(dropped.sum())} row(s) were dropped from their "
                f"iteration means (missing_pairs='drop').",
                UserWarning,
                stacklevel=3,
            )
            logger.debug(
                "Dropped rows per affected iteration: min=%d max=%d",
                int(dropped[dropped > 0].min()),
                int(dropped.max()),
            )

        return mean_distance, mean_time, n_resolved


__all__ = ["PermutationEngine"]
