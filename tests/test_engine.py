"""Unit tests for PermutationEngine and PermutationContext."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from proximity_tests._context import PermutationContext
from proximity_tests.engine import PermutationEngine
from proximity_tests.exceptions import JoinError, NameResolutionError

from _builders import COLUMNS, NEAR_PAIRS, abc_lookup, abc_observed, line_lookup, observed_frame

_SEED = 42


def _naive_means(lookup: pd.DataFrame, observed: pd.DataFrame, perms: np.ndarray):
    """Row-by-row reference implementation over community names."""
    names = list(pd.unique(pd.concat([lookup["origin"], lookup["destination"]])))
    table = {
        (o, d): (dist, t)
        for o, d, dist, t in lookup.itertuples(index=False, name=None)
    }
    pos = {n: i for i, n in enumerate(names)}
    o_idx = [pos[o] for o in observed["origin"]]
    d_idx = [pos[d] for d in observed["destination"]]
    dists, times = [], []
    for perm in perms:
        permuted = [names[j] for j in perm]
        costs = [table[(permuted[o], permuted[d])] for o, d in zip(o_idx, d_idx)]
        dists.append(np.mean([c[0] for c in costs]))
        times.append(np.mean([c[1] for c in costs]))
    return np.array(dists), np.array(times)


@pytest.fixture()
def near_engine():
    return PermutationEngine(
        line_lookup(), observed_frame(NEAR_PAIRS), n_permutations=200, random_state=_SEED
    )


class TestPermutationContext:
    def test_build(self):
        ctx = PermutationContext.build(line_lookup(), observed_frame(NEAR_PAIRS))
        assert ctx.n_communities == 8
        assert ctx.n_pairs == 5
        np.testing.assert_array_equal(ctx.origin_positions, [0, 1, 2, 3, 0])
        assert ctx.summary.mean_distance_km == pytest.approx(14.0)

    def test_positions_read_only(self):
        ctx = PermutationContext.build(line_lookup(), observed_frame(NEAR_PAIRS))
        with pytest.raises(ValueError):
            ctx.origin_positions[0] = 3

    def test_frozen(self):
        ctx = PermutationContext.build(abc_lookup(), abc_observed())
        with pytest.raises(AttributeError):
            ctx.summary = None

    def test_unknown_observed_community(self):
        observed = pd.DataFrame([("A", "Z", 1.0, 0.1)], columns=COLUMNS)
        with pytest.raises(NameResolutionError, match="'Z'"):
            PermutationContext.build(abc_lookup(), observed)


class TestPermutationEngine:
    def test_perm_indices_shape(self, near_engine):
        assert near_engine.perm_indices.shape == (200, 8)
        assert near_engine.missing_pairs == "raise"

    def test_matches_naive_reference(self, near_engine):
        md, mt, n = near_engine.run()
        ref_d, ref_t = _naive_means(
            line_lookup(), observed_frame(NEAR_PAIRS), near_engine.perm_indices
        )
        np.testing.assert_allclose(md, ref_d)
        np.testing.assert_allclose(mt, ref_t)
        np.testing.assert_array_equal(n, np.full(200, 5))

    def test_identity_row_gives_observed_mean(self, near_engine):
        md, mt, _ = near_engine.evaluate_chunk(np.arange(8)[np.newaxis, :])
        assert md[0] == pytest.approx(14.0)
        assert mt[0] == pytest.approx(14.0 / 50.0)

    @pytest.mark.parametrize("n_jobs,chunk_size", [(1, 7), (2, 13), (-1, 50)])
    def test_chunking_and_threads_do_not_change_results(self, n_jobs, chunk_size):
        base = PermutationEngine(
            line_lookup(), observed_frame(NEAR_PAIRS), n_permutations=120, random_state=3
        ).run()
        other = PermutationEngine(
            line_lookup(),
            observed_frame(NEAR_PAIRS),
            n_permutations=120,
            random_state=3,
            n_jobs=n_jobs,
            chunk_size=chunk_size,
        ).run()
        for a, b in zip(base, other):
            np.testing.assert_array_equal(a, b)

    def test_join_error_reports_iteration_ids(self):
        # An observed self-pair can never resolve, so every iteration fails.
        observed = pd.DataFrame([("A", "A", 0.0, 0.0)], columns=COLUMNS)
        engine = PermutationEngine(abc_lookup(), observed, n_permutations=10, random_state=0)
        with pytest.raises(JoinError) as excinfo:
            engine.evaluate_chunk(engine.perm_indices[5:8], iteration_offset=5)
        assert excinfo.value.iterations == [6, 7, 8]

    def test_join_error_aborts_parallel_run(self):
        observed = pd.DataFrame([("A", "A", 0.0, 0.0)], columns=COLUMNS)
        engine = PermutationEngine(
            abc_lookup(), observed, n_permutations=40, random_state=0, n_jobs=2, chunk_size=10
        )
        with pytest.raises(JoinError):
            engine.run()

    def test_drop_policy_counts_resolved_rows(self):
        observed = pd.DataFrame(
            [("A", "A", 0.0, 0.0), ("B", "C", 3.0, 0.3)], columns=COLUMNS
        )
        lookup = abc_lookup()
        complete = pd.concat(
            [lookup, pd.DataFrame([("A", "B", 9.0, 0.9)], columns=COLUMNS)],
            ignore_index=True,
        )
        engine = PermutationEngine(
            complete, observed, n_permutations=30, random_state=1, missing_pairs="drop"
        )
        with pytest.warns(UserWarning, match="30 of 30 iteration"):
            md, _, n = engine.run()
        np.testing.assert_array_equal(n, np.full(30, 1))
        assert np.all(np.isfinite(md))

    def test_invalid_arguments(self):
        with pytest.raises(ValueError, match="n_permutations"):
            PermutationEngine(abc_lookup(), abc_observed(), n_permutations=0)
        with pytest.raises(ValueError, match="chunk_size"):
            PermutationEngine(abc_lookup(), abc_observed(), chunk_size=0)
        with pytest.raises(ValueError, match="n_jobs"):
            PermutationEngine(abc_lookup(), abc_observed(), n_jobs=0)
        with pytest.raises(ValueError, match="missing_pairs"):
            PermutationEngine(abc_lookup(), abc_observed(), missing_pairs="ignore")
