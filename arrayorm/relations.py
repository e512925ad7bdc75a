"""
One-to-many relation specs and grouping.

A Relation describes how to attach related records to each record of a
collection: every related record whose ``foreign_key`` equals the
record's ``local_key`` ends up in a list stored under ``alias``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, NamedTuple, Sequence

from .errors import RelationError
from .fields import MISSING, get_field, is_hashable, strict_equals, strict_key


DEFAULT_ALIAS = "items"


class Relation(NamedTuple):
    """A single join spec, usable wherever a plain tuple is accepted."""
    related: Sequence[Any]
    local_key: str
    foreign_key: str
    alias: str = DEFAULT_ALIAS


def coerce_relation(spec: Any) -> Relation:
    """
    Normalize a relation spec.

    Accepts a Relation or a 3/4-tuple
    ``(related, local_key, foreign_key[, alias])``.

    Raises:
        RelationError: If the spec has the wrong shape.
    """
    if isinstance(spec, Relation):
        return spec

    if not isinstance(spec, (tuple, list)) or len(spec) not in (3, 4):
        raise RelationError(
            f"relation must be (related, local_key, foreign_key[, alias]), got {spec!r}"
        )

    related = spec[0]
    if isinstance(related, (str, bytes)) or not isinstance(related, Iterable):
        raise RelationError(
            f"related records must be a sequence, got {type(related).__name__}"
        )

    return Relation(*spec)


@dataclass
class RelationIndex:
    """
    Related records grouped by foreign key value, built in one pass.

    Hashable keys live in a dict under their ``strict_key``; unhashable keys
    are kept in a list of (key, group) pairs and matched by ``strict_equals``.
    Either way ``True`` never matches ``1``.
    """
    hashed: dict
    unhashable: list

    def matches(self, key: Any) -> list:
        """Related records for ``key``; a new empty list when none match."""
        if key is MISSING:
            return []
        if is_hashable(key):
            return list(self.hashed.get(strict_key(key), ()))
        for candidate, group in self.unhashable:
            if strict_equals(candidate, key):
                return list(group)
        return []


def group_by_key(related: Iterable[Any], foreign_key: str) -> RelationIndex:
    """
    Group related records by their ``foreign_key`` value.

    Records lacking the field are not grouped and never match.
    """
    hashed: dict = {}
    unhashable: list = []

    for record in related:
        key = get_field(record, foreign_key)
        if key is MISSING:
            continue

        if is_hashable(key):
            hashed.setdefault(strict_key(key), []).append(record)
            continue

        for candidate, group in unhashable:
            if strict_equals(candidate, key):
                group.append(record)
                break
        else:
            unhashable.append((key, [record]))

    return RelationIndex(hashed=hashed, unhashable=unhashable)
