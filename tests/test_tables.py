"""Tests for schema validation and Polars input support."""

import numpy as np
import pandas as pd
import pytest

from proximity_tests.exceptions import SchemaError
from proximity_tests.tables import REQUIRED_COLUMNS, validate_travel_table

from _builders import abc_lookup, abc_observed


class TestValidateTravelTable:
    def test_returns_required_columns_only(self):
        df = abc_lookup()
        df["notes"] = "x"
        out = validate_travel_table(df, name="lookup")
        assert list(out.columns) == list(REQUIRED_COLUMNS)
        assert out["curr_travel_dist_km"].dtype == np.float64

    def test_does_not_mutate_input(self):
        df = abc_lookup()
        before = df.copy()
        validate_travel_table(df, name="lookup")
        pd.testing.assert_frame_equal(df, before)

    def test_resets_index(self):
        df = abc_lookup().iloc[[4, 2, 0]]
        out = validate_travel_table(df, name="lookup")
        assert list(out.index) == [0, 1, 2]
        assert list(out["origin"]) == ["C", "B", "A"]

    def test_numeric_strings_are_coerced(self):
        df = abc_observed()
        df["curr_travel_dist_km"] = ["2.5"]
        out = validate_travel_table(df, name="observed")
        assert out["curr_travel_dist_km"].iloc[0] == 2.5

    def test_missing_column(self):
        df = abc_lookup().drop(columns=["curr_travel_time_h"])
        with pytest.raises(SchemaError, match="curr_travel_time_h"):
            validate_travel_table(df, name="lookup")

    def test_empty_table(self):
        df = abc_lookup().iloc[0:0]
        with pytest.raises(SchemaError, match="at least one row"):
            validate_travel_table(df, name="lookup")

    def test_non_numeric_distance(self):
        df = abc_lookup()
        df["curr_travel_dist_km"] = df["curr_travel_dist_km"].astype(object)
        df.loc[1, "curr_travel_dist_km"] = "far"
        with pytest.raises(SchemaError, match="finite numbers"):
            validate_travel_table(df, name="lookup")

    def test_nan_time(self):
        df = abc_lookup()
        df.loc[2, "curr_travel_time_h"] = np.nan
        with pytest.raises(SchemaError, match="row"):
            validate_travel_table(df, name="lookup")

    def test_negative_distance(self):
        df = abc_lookup()
        df.loc[0, "curr_travel_dist_km"] = -1.0
        with pytest.raises(SchemaError, match="non-negative"):
            validate_travel_table(df, name="lookup")

    def test_missing_name(self):
        df = abc_lookup()
        df.loc[3, "origin"] = None
        with pytest.raises(SchemaError, match="missing names"):
            validate_travel_table(df, name="lookup")

    def test_schema_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_travel_table(abc_lookup().iloc[0:0], name="lookup")

    def test_rejects_non_dataframe(self):
        with pytest.raises(TypeError, match="lookup table must be a pandas"):
            validate_travel_table({"origin": ["A"]}, name="lookup")


class TestPolarsInput:
    def test_polars_dataframe_accepted(self):
        pl = pytest.importorskip("polars")
        out = validate_travel_table(pl.from_pandas(abc_lookup()), name="lookup")
        assert isinstance(out, pd.DataFrame)
        assert len(out) == 5

    def test_polars_lazyframe_accepted(self):
        pl = pytest.importorskip("polars")
        lazy = pl.from_pandas(abc_observed()).lazy()
        out = validate_travel_table(lazy, name="observed")
        assert list(out["origin"]) == ["A"]
