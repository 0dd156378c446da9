"""Tests for the missing-pair policy configuration."""

import os

import pytest

from proximity_tests._config import (
    get_missing_pair_policy,
    resolve_missing_pair_policy,
    set_missing_pair_policy,
)


class TestGetMissingPairPolicy:
    """Tests for get_missing_pair_policy() resolution order."""

    def setup_method(self):
        """Reset state before each test."""
        import proximity_tests._config as _cfg
        _cfg._policy_override = None
        os.environ.pop("PROXIMITY_TESTS_MISSING_PAIRS", None)

    def teardown_method(self):
        """Reset state after each test."""
        import proximity_tests._config as _cfg
        _cfg._policy_override = None
        os.environ.pop("PROXIMITY_TESTS_MISSING_PAIRS", None)

    def test_default_is_raise(self):
        assert get_missing_pair_policy() == "raise"

    def test_env_var_overrides_default(self):
        os.environ["PROXIMITY_TESTS_MISSING_PAIRS"] = "drop"
        assert get_missing_pair_policy() == "drop"

    def test_env_var_case_insensitive(self):
        os.environ["PROXIMITY_TESTS_MISSING_PAIRS"] = " Drop "
        assert get_missing_pair_policy() == "drop"

    def test_unknown_env_var_falls_back(self):
        os.environ["PROXIMITY_TESTS_MISSING_PAIRS"] = "ignore"
        assert get_missing_pair_policy() == "raise"

    def test_set_overrides_env_var(self):
        os.environ["PROXIMITY_TESTS_MISSING_PAIRS"] = "drop"
        set_missing_pair_policy("raise")
        assert get_missing_pair_policy() == "raise"

    def test_set_auto_restores_resolution_order(self):
        set_missing_pair_policy("drop")
        assert get_missing_pair_policy() == "drop"
        set_missing_pair_policy("auto")
        assert get_missing_pair_policy() == "raise"

    def test_set_invalid_raises(self):
        with pytest.raises(ValueError, match="Unknown missing-pair policy"):
            set_missing_pair_policy("skip")


class TestResolveMissingPairPolicy:
    def setup_method(self):
        import proximity_tests._config as _cfg
        _cfg._policy_override = None
        os.environ.pop("PROXIMITY_TESTS_MISSING_PAIRS", None)

    def teardown_method(self):
        import proximity_tests._config as _cfg
        _cfg._policy_override = None

    def test_explicit_argument_wins(self):
        set_missing_pair_policy("raise")
        assert resolve_missing_pair_policy("drop") == "drop"

    def test_none_uses_package_setting(self):
        set_missing_pair_policy("drop")
        assert resolve_missing_pair_policy(None) == "drop"

    def test_normalises_case(self):
        assert resolve_missing_pair_policy("RAISE") == "raise"

    @pytest.mark.parametrize("bad", ["auto", "skip", ""])
    def test_rejects_other_values(self, bad):
        with pytest.raises(ValueError, match="missing_pairs must be"):
            resolve_missing_pair_policy(bad)
