"""
Field access for arbitrary record shapes.

Records are usually mappings (``{"id": 1, "name": "Ada"}``), but any
object exposing its fields as attributes works too (dataclasses,
namedtuples, slotted classes, plain objects). Every query in the
collection goes through ``get_field`` so all shapes behave identically.

Absent fields resolve to the ``MISSING`` sentinel, never to ``None``:
a record that stores ``None`` and a record that lacks the field are
different things for distinct and join grouping.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Hashable, Mapping
from typing import Any, Iterable


class _Missing:
    """Singleton marker for a field that a record does not have."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


# =============================================================================
# FIELD ACCESS
# =============================================================================

def get_field(record: Any, field: str) -> Any:
    """
    Read ``field`` from a record.

    Mappings are indexed; everything else is read as an attribute.
    Returns ``MISSING`` when the record has no such field.
    """
    if isinstance(record, Mapping):
        return record.get(field, MISSING)
    return getattr(record, field, MISSING)


def get_value(record: Any, field: str) -> Any:
    """Read ``field`` with absent fields collapsed to ``None``."""
    value = get_field(record, field)
    return None if value is MISSING else value


def record_to_dict(record: Any) -> dict:
    """
    Shallow dict copy of a record.

    Field values are shared with the source record, not copied.
    """
    if isinstance(record, Mapping):
        return dict(record)
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return {f.name: getattr(record, f.name) for f in dataclasses.fields(record)}
    if hasattr(record, "_asdict"):
        # namedtuples
        return dict(record._asdict())

    row = {}
    for name in _slot_names(type(record)):
        value = getattr(record, name, MISSING)
        if value is not MISSING:
            row[name] = value
    row.update(getattr(record, "__dict__", {}))
    return row


def _slot_names(cls: type) -> list[str]:
    names = []
    for klass in reversed(cls.__mro__):
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in ("__dict__", "__weakref__") and name not in names:
                names.append(name)
    return names


def pick_fields(record: Any, fields: Iterable[str]) -> dict:
    """New dict with only ``fields``, in the given order."""
    return {name: get_value(record, name) for name in fields}


# =============================================================================
# KEY POLICY
# =============================================================================

def is_sortable(value: Any) -> bool:
    """Absent and ``None`` values are excluded from ordering comparisons."""
    return value is not MISSING and value is not None


def strict_key(value: Any) -> tuple:
    """
    Grouping key that keeps booleans apart from numbers.

    ``True == 1`` and ``hash(True) == hash(1)`` in Python; tagging the
    key with the bool-ness makes ``True`` and ``1`` distinct keys while
    ``1`` and ``1.0`` stay equal.
    """
    return (isinstance(value, bool), value)


def strict_equals(left: Any, right: Any) -> bool:
    return isinstance(left, bool) == isinstance(right, bool) and left == right


def is_hashable(value: Any) -> bool:
    if not isinstance(value, Hashable):
        return False
    try:
        hash(value)
    except TypeError:
        # tuples holding unhashable members
        return False
    return True


class SeenValues:
    """
    Membership set for distinct field values.

    Hashable values go through a set of ``strict_key`` keys; unhashable
    ones (lists, dicts) fall back to a linear ``strict_equals`` scan.
    """

    def __init__(self):
        self._hashed: set = set()
        self._unhashable: list = []

    def add(self, value: Any) -> bool:
        """Record ``value``. Returns False if it had already been seen."""
        if is_hashable(value):
            key = strict_key(value)
            if key in self._hashed:
                return False
            self._hashed.add(key)
            return True

        if any(strict_equals(value, seen) for seen in self._unhashable):
            return False
        self._unhashable.append(value)
        return True
