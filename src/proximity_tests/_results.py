"""Typed result objects for the proximity permutation test.

Frozen dataclasses that support attribute access
(``result.p_value_distance``), read-only mapping access over their
fields (``result["p_value_time"]``, ``result.get(...)``, ``"observed" in
result``) and ``.to_dict()``, which returns plain Python values that
``json.dumps(..., allow_nan=False)`` accepts.  Non-finite floats, such
as the ``NaN`` mean of an iteration whose rows were all dropped, become
``None``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from ._context import PermutationContext


def _to_builtin(obj: Any) -> Any:
    """Convert NumPy values and nested containers to JSON-safe builtins."""
    if isinstance(obj, _FieldAccess):
        return obj.to_dict()
    if isinstance(obj, np.ndarray):
        return [_to_builtin(v) for v in obj.tolist()]
    if isinstance(obj, np.generic):
        obj = obj.item()
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, Mapping):
        return {k: _to_builtin(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_builtin(v) for v in obj]
    return obj


class _FieldAccess:
    """Mapping-style access restricted to dataclass fields."""

    # Run-time state that is not part of the serialised result.
    _PRIVATE_FIELDS: frozenset[str] = frozenset({"context"})

    def _field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in fields(self))  # type: ignore[arg-type]

    def __getitem__(self, key: str) -> Any:
        if key not in self._field_names():
            raise KeyError(key)
        return getattr(self, key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key in self._field_names()

    def get(self, key: str, default: Any = None) -> Any:
        return self[key] if key in self else default

    def to_dict(self) -> dict[str, Any]:
        """Public fields as JSON-safe builtins."""
        return {
            name: _to_builtin(getattr(self, name))
            for name in self._field_names()
            if name not in self._PRIVATE_FIELDS
        }


@dataclass(frozen=True)
class ObservedSummary(_FieldAccess):
    """Mean, min and max travel cost over all observed replicate rows."""

    n_pairs: int
    mean_distance_km: float
    min_distance_km: float
    max_distance_km: float
    mean_time_h: float
    min_time_h: float
    max_time_h: float


@dataclass(frozen=True)
class ProximityTestResult(_FieldAccess):
    """Result of :func:`~proximity_tests.proximity_permutation_test`.

    All fields are accessible both as attributes and via dict syntax.
    """

    # ---- P-values --------------------------------------------------
    p_value_distance: float
    """One-sided p-value for mean travel distance."""

    p_value_time: float
    """One-sided p-value for mean travel time."""

    count_less_distance: int
    """Iterations whose mean distance was strictly below observed."""

    count_less_time: int
    """Iterations whose mean time was strictly below observed."""

    # ---- Null distribution ----------------------------------------
    permuted_mean_distance: np.ndarray
    """Per-iteration mean distance, shape ``(K,)``, iteration order."""

    permuted_mean_time: np.ndarray
    """Per-iteration mean time, shape ``(K,)``."""

    # ---- Observed --------------------------------------------------
    observed: ObservedSummary
    """Observed mean/min/max of distance and time."""

    # ---- Metadata --------------------------------------------------
    n_permutations: int
    """Number of permutation iterations K."""

    n_communities: int
    """Size N of the canonical community ordering."""

    n_pairs: int
    """Number of observed replicate rows M."""

    random_state: int | None
    """Seed passed by the caller, if an integer was given."""

    missing_pairs: str
    """Missing-pair policy in effect (``"raise"`` or ``"drop"``)."""

    phipson_smyth: bool
    """Whether the ``(b + 1) / (K + 1)`` correction was applied."""

    # ---- Diagnostics -----------------------------------------------
    diagnostics: dict[str, Any] = field(default_factory=dict)
    """Monte Carlo SE, Clopper-Pearson CIs, coverage, join counts."""

    context: PermutationContext | None = field(default=None, repr=False)
    """Immutable run context (not serialised by ``to_dict``)."""


__all__ = ["ObservedSummary", "ProximityTestResult"]
