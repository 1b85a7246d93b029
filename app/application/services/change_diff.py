"""Change diff engine: minimal before/after deltas for audit entries.

Compares two flat snapshots of the same record and keeps only the fields
whose values differ. Comparison is structural: nested dicts and lists are
compared by canonical JSON content, and timestamps compare by instant, so a
``datetime`` and an ISO string for the same moment are equal.

A field that exists on only one side is reported against the ``MISSING``
sentinel, which is distinct from an explicit ``None``. Stored diffs keep that
distinction with the reserved ``{"$missing": true}`` marker.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Final
from uuid import UUID

from app.shared.utils.datetime import ensure_utc, parse_iso_datetime


class _Missing:
    """Type of the MISSING sentinel (field absent from a snapshot)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict) -> _Missing:
        return self


MISSING: Final = _Missing()

MISSING_MARKER_KEY: Final = "$missing"


def encode_missing(value: Any) -> Any:
    """JSON form of one diff value; MISSING becomes the reserved marker."""
    if value is MISSING:
        return {MISSING_MARKER_KEY: True}
    return to_jsonable(value)


def decode_missing(value: Any) -> Any:
    """Inverse of encode_missing for one stored diff value."""
    if isinstance(value, dict) and value == {MISSING_MARKER_KEY: True}:
        return MISSING
    return value


def to_jsonable(value: Any) -> Any:
    """Convert a snapshot value to plain JSON types.

    datetimes become UTC ISO strings, enums their value, Decimal/UUID
    strings, and MISSING becomes None. Containers are converted recursively.
    """
    if value is MISSING or value is None:
        return None
    if isinstance(value, Enum):
        return to_jsonable(value.value)
    if isinstance(value, datetime):
        return ensure_utc(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def _normalize(value: Any) -> Any:
    """JSON value with whole floats as ints and ISO timestamps in one UTC form."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        instant = parse_iso_datetime(value)
        return instant.isoformat() if instant is not None else value
    if isinstance(value, dict):
        return {k: _normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    return value


def canonical_json(value: Any) -> str:
    """Canonical JSON (sorted keys, no spaces) used for structural equality.

    ``1`` and ``1.0`` serialize alike, and nested timestamps compare by instant
    whether they arrive as datetimes, ``Z`` strings, or offset strings.
    """
    return json.dumps(_normalize(to_jsonable(value)), sort_keys=True, separators=(",", ":"))


def _as_instant(value: Any) -> datetime | None:
    """Return value as a UTC datetime if it is timestamp-like, else None."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        return parse_iso_datetime(value)
    return None


@dataclass(frozen=True)
class FieldDiff:
    """Changed fields between two snapshots. Both maps share the same key set."""

    before: dict[str, Any] = field(default_factory=dict)
    after: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.before

    @property
    def fields(self) -> list[str]:
        return list(self.before)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """JSON-ready ``{"before": ..., "after": ...}`` (MISSING stored as the marker)."""
        return {
            "before": {k: encode_missing(v) for k, v in self.before.items()},
            "after": {k: encode_missing(v) for k, v in self.after.items()},
        }

    @classmethod
    def from_dict(cls, changes: dict[str, Any] | None) -> FieldDiff:
        """Rebuild a diff from its stored form; null changes give an empty diff."""
        if not changes:
            return cls()
        before = changes.get("before") or {}
        after = changes.get("after") or {}
        keys = list(before) + [k for k in after if k not in before]
        return cls(
            before={k: decode_missing(before.get(k, MISSING)) for k in keys},
            after={k: decode_missing(after.get(k, MISSING)) for k in keys},
        )


class ChangeDiffEngine:
    """Computes the symmetric set of changed fields between two snapshots."""

    @staticmethod
    def values_equal(old: Any, new: Any) -> bool:
        """Value-semantic equality used by diff()."""
        if old is MISSING or new is MISSING:
            return old is new
        if isinstance(old, datetime) or isinstance(new, datetime):
            old_instant, new_instant = _as_instant(old), _as_instant(new)
            if old_instant is not None and new_instant is not None:
                return old_instant == new_instant
        return canonical_json(old) == canonical_json(new)

    def diff(self, before: dict[str, Any], after: dict[str, Any]) -> FieldDiff:
        """Return the fields whose values differ between before and after.

        Keys are visited in before-order, then keys new in after. A key
        absent on one side is reported as MISSING on that side.
        """
        changed_before: dict[str, Any] = {}
        changed_after: dict[str, Any] = {}
        keys = list(before) + [k for k in after if k not in before]
        for key in keys:
            old = before.get(key, MISSING)
            new = after.get(key, MISSING)
            if self.values_equal(old, new):
                continue
            changed_before[key] = old
            changed_after[key] = new
        return FieldDiff(before=changed_before, after=changed_after)
