"""Random relabelling of communities and reconstruction of permuted pairs.

Why relabel positions rather than shuffle pairs
-----------------------------------------------
The observed pairs form a fixed topology: row *i* links canonical
position ``o_i`` to position ``d_i``.  Under the null hypothesis that
genetic linkage is unrelated to geography, any assignment of community
names to positions is equally likely.  Each iteration therefore draws
one uniform permutation ``pi`` of the N canonical positions and reads
off the permuted pairs as

    (pi[o_i], pi[d_i])    for i = 0 .. M-1

The structure of who-links-to-whom (including replicate rows and
communities shared between pairs) is preserved exactly; only the
geographic identity behind each position changes.

Sampling scheme
---------------
Permutations are drawn *with replacement across iterations and without
replacement within an iteration*: every row is a bijection of
``range(N)``, rows are independent, and neither duplicates nor the
identity are removed.  With the usual N of a few dozen communities
(30! is about 2.7e32) repeats are vanishingly rare, and the
p-value is defined over independent draws anyway.

All K rows are produced in a single vectorised call,
``rng.permuted(batch, axis=1)``, which shuffles each row independently
at the C level.
"""

from __future__ import annotations

import numpy as np


def generate_label_permutations(
    n_communities: int,
    n_permutations: int,
    random_state: int | np.random.Generator | None = None,
) -> np.ndarray:
    """Draw independent uniform permutations of the canonical positions.

    Args:
        n_communities: Number of communities N.
        n_permutations: Number of permutations K.
        random_state: Seed, ``Generator``, or ``None`` for fresh OS
            entropy.

    Returns:
        ``intp`` array of shape ``(K, N)``; row *k* maps canonical
        position *j* to the position whose community now occupies it.

    Raises:
        ValueError: If ``n_permutations < 1`` or ``n_communities < 2``.
    """
    if n_permutations < 1:
        raise ValueError(
            f"n_permutations must be at least 1, got {n_permutations}."
        )
    if n_communities < 2:
        raise ValueError(
            f"At least two communities are required to permute, got "
            f"{n_communities}."
        )

    rng = np.random.default_rng(random_state)
    batch = np.tile(np.arange(n_communities, dtype=np.intp), (n_permutations, 1))
    rng.permuted(batch, axis=1, out=batch)
    return batch


def reconstruct_pairs(
    permutation: np.ndarray,
    origin_positions: np.ndarray,
    destination_positions: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Re-apply the fixed pair topology to one or many permutations.

    ``permutation`` may hold names (the permuted community list) or
    canonical positions; the output has the same element type.

    Args:
        permutation: Shape ``(N,)`` for one iteration or ``(B, N)`` for
            a batch.
        origin_positions: Observed origin positions, shape ``(M,)``.
        destination_positions: Observed destination positions,
            shape ``(M,)``.

    Returns:
        ``(permuted_origins, permuted_destinations)``, each of shape
        ``(M,)`` or ``(B, M)``, in observed row order.
    """
    permutation = np.asarray(permutation)
    origin_positions = np.asarray(origin_positions, dtype=np.intp)
    destination_positions = np.asarray(destination_positions, dtype=np.intp)

    # Gather along the last axis so 1-D and 2-D inputs share one path.
    return (
        np.take(permutation, origin_positions, axis=-1),
        np.take(permutation, destination_positions, axis=-1),
    )


__all__ = ["generate_label_permutations", "reconstruct_pairs"]
