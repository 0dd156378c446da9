"""Missing-pair policy configuration for the proximity_tests package.

Controls what happens when a permuted (origin, destination) pair has
no entry in the travel lookup table.

Resolution order (first match wins):
    1. Per-call ``missing_pairs=`` argument (handled by the caller).
    2. Programmatic override via :func:`set_missing_pair_policy`.
    3. The ``PROXIMITY_TESTS_MISSING_PAIRS`` environment variable.
    4. The default, ``"raise"``.

Valid policy names are ``"raise"`` and ``"drop"`` (case-insensitive).

Examples:
    Tolerate incomplete lookup tables from the shell::

        export PROXIMITY_TESTS_MISSING_PAIRS=drop

    Or programmatically::

        import proximity_tests
        proximity_tests.set_missing_pair_policy("drop")

    Restore the default resolution order::

        proximity_tests.set_missing_pair_policy("auto")
"""

from __future__ import annotations

import os

_VALID_POLICIES = {"raise", "drop", "auto"}
_DEFAULT_POLICY = "raise"
_ENV_VAR = "PROXIMITY_TESTS_MISSING_PAIRS"

# Sentinel indicating "no programmatic override has been set".
_policy_override: str | None = None


def get_missing_pair_policy() -> str:
    """Return the active missing-pair policy (``"raise"`` or ``"drop"``).

    Returns:
        ``"raise"`` or ``"drop"``.
    """
    if _policy_override is not None and _policy_override != "auto":
        return _policy_override

    env = os.environ.get(_ENV_VAR, "").strip().lower()
    if env in ("raise", "drop"):
        return env

    return _DEFAULT_POLICY


def set_missing_pair_policy(name: str) -> None:
    """Override the default missing-pair policy.

    Args:
        name: One of ``"raise"``, ``"drop"``, or ``"auto"``
            (case-insensitive).  ``"auto"`` restores the default
            resolution order.

    Raises:
        ValueError: If *name* is not a recognised policy.
    """
    global _policy_override
    normalised = name.strip().lower()
    if normalised not in _VALID_POLICIES:
        raise ValueError(
            f"Unknown missing-pair policy '{name}'. "
            f"Choose from: {sorted(_VALID_POLICIES)}"
        )
    _policy_override = normalised


def resolve_missing_pair_policy(name: str | None) -> str:
    """Return *name* normalised, or the configured default when ``None``."""
    if name is None:
        return get_missing_pair_policy()
    normalised = name.strip().lower()
    if normalised not in ("raise", "drop"):
        raise ValueError(
            f"missing_pairs must be 'raise' or 'drop', got '{name}'."
        )
    return normalised
