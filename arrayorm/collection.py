"""
Observable in-memory collection.

An ObservableCollection owns a list of records and a list of subscribers.

Mutations (replace, transform, append, remove_where) change the owned list
and synchronously notify every subscriber with the new list, inside the
caller's own call stack. Nothing is batched or deferred.

Queries (filter, project, sort_by, distinct_by, join_many, eager_join_many)
never touch the owned list. Each returns a NEW collection over a freshly
built list with no subscribers. Derived collections are snapshots: they do
not follow later mutations of their source.

Reentrancy:
    A subscriber may mutate the collection it listens to. That starts a
    nested notification pass before the outer pass finishes; the rest of
    the outer pass then delivers the list as it stands after the nested
    mutation, so every subscriber ends on ``read()``. Nothing
    guards against a subscriber that mutates unconditionally and recurses
    forever; that is the caller's responsibility.

Threading:
    Instances are not synchronized. Share one across threads only behind
    an external lock.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Optional, Sequence

from loguru import logger

from .errors import InvalidDirectionError
from .fields import (
    MISSING,
    SeenValues,
    get_field,
    get_value,
    is_sortable,
    pick_fields,
    record_to_dict,
    strict_equals,
)
from .relations import DEFAULT_ALIAS, coerce_relation, group_by_key
from .subscription import Callback, SubscriberList, Subscription


ASCENDING = "asc"
DESCENDING = "desc"


class ObservableCollection:
    """
    A list of records with change notification and snapshot queries.

    The initial list is stored by reference, not copied. ``read()`` hands
    back that same list object; mutating it from outside bypasses
    notification.
    """

    def __init__(self, records: Optional[list] = None):
        self._records: list = [] if records is None else records
        self._subscribers = SubscriberList()

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def read(self) -> list:
        """Current list of records (the live reference, not a copy)."""
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._records)

    def __repr__(self) -> str:
        return (
            f"<ObservableCollection records={len(self._records)} "
            f"subscribers={len(self._subscribers)}>"
        )

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def subscribe(self, callback: Callback) -> Subscription:
        """
        Register ``callback`` and call it once with the current records.

        The initial call happens before this method returns. The returned
        Subscription cancels this registration when called; calling it
        again does nothing.
        """
        subscription = self._subscribers.add(callback)
        logger.debug("Subscribed {} ({} active)", subscription, len(self._subscribers))
        callback(self._records)
        return subscription

    def _emit(self, operation: str) -> None:
        logger.debug(
            "{}: {} record(s), notifying {} subscriber(s)",
            operation, len(self._records), len(self._subscribers),
        )
        self._subscribers.notify(self.read)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def replace(self, records: list) -> None:
        """Replace the whole record list."""
        self._records = records
        self._emit("replace")

    def transform(self, fn: Callable[[list], list]) -> None:
        """Replace the record list with ``fn(current_records)``."""
        self._records = fn(self._records)
        self._emit("transform")

    def append(self, item: Any) -> None:
        """Append ``item`` to the end of the current list, in place."""
        self._records.append(item)
        self._emit("append")

    def remove_where(self, predicate: Callable[[Any], bool]) -> None:
        """Drop every record for which ``predicate(record)`` is true."""
        self._records = [item for item in self._records if not predicate(item)]
        self._emit("remove_where")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _derive(self, operation: str, records: list) -> ObservableCollection:
        logger.debug("{}: {} -> {} record(s)", operation, len(self._records), len(records))
        return ObservableCollection(records)

    def filter(self, field: str, condition: Any) -> ObservableCollection:
        """
        Keep records whose ``field`` satisfies ``condition``.

        A callable condition is called with the field value (``None`` when
        the record lacks the field). Any other condition is compared with
        ``==``, except that booleans never equal numbers (``True`` does not
        match ``1``); records lacking the field never match.
        """
        if callable(condition):
            matched = [
                item for item in self._records
                if condition(get_value(item, field))
            ]
        else:
            matched = [
                item for item in self._records
                if field_equals(item, field, condition)
            ]
        return self._derive("filter", matched)

    def project(self, *fields: str) -> ObservableCollection:
        """
        New records holding only ``fields``, in that order.

        Accepts the names as separate arguments or a single list/tuple.
        Absent fields come out as ``None``.
        """
        if len(fields) == 1 and isinstance(fields[0], (list, tuple)):
            fields = tuple(fields[0])
        projected = [pick_fields(item, fields) for item in self._records]
        return self._derive("project", projected)

    def sort_by(self, field: str, direction: str = ASCENDING) -> ObservableCollection:
        """
        Records ordered by ``field``; ties keep their input order.

        Records whose field is absent or ``None`` go last in either
        direction, in input order. Field values of types that cannot be
        compared with each other raise ``TypeError``.

        Raises:
            InvalidDirectionError: If direction is not "asc" or "desc".
        """
        if direction not in (ASCENDING, DESCENDING):
            raise InvalidDirectionError(direction)

        present = []
        absent = []
        for item in self._records:
            if is_sortable(get_field(item, field)):
                present.append(item)
            else:
                absent.append(item)

        # list.sort is stable, and stays stable with reverse=True
        present.sort(
            key=lambda item: get_field(item, field),
            reverse=(direction == DESCENDING),
        )
        return self._derive("sort_by", present + absent)

    def distinct_by(self, field: str) -> ObservableCollection:
        """
        First record for each distinct ``field`` value, in input order.

        Records lacking the field share one "absent" key of their own,
        distinct from every present value including ``None``.
        """
        seen = SeenValues()
        kept = [item for item in self._records if seen.add(get_field(item, field))]
        return self._derive("distinct_by", kept)

    def join_many(
        self,
        related: Iterable[Any],
        local_key: str,
        foreign_key: str,
        alias: str = DEFAULT_ALIAS,
    ) -> ObservableCollection:
        """
        Attach related records to each record (one-to-many).

        Every record becomes a shallow dict copy with ``alias`` set to the
        list of related records whose ``foreign_key`` equals the record's
        ``local_key`` (an empty list when none do). ``related`` is read
        once, now; later changes to it are not reflected.
        """
        index = group_by_key(related, foreign_key)

        joined = []
        for item in self._records:
            row = record_to_dict(item)
            row[alias] = index.matches(get_field(item, local_key))
            joined.append(row)

        return self._derive(f"join_many[{alias}]", joined)

    def eager_join_many(self, relations: Sequence[Any]) -> ObservableCollection:
        """
        Apply several ``join_many`` calls in sequence.

        Each relation is a Relation or a
        ``(related, local_key, foreign_key[, alias])`` tuple, and is joined
        onto the result of the previous one.

        Raises:
            RelationError: If a relation spec is malformed.
        """
        specs = [coerce_relation(spec) for spec in relations]

        result = self._derive("eager_join_many", list(self._records))
        for spec in specs:
            result = result.join_many(
                spec.related, spec.local_key, spec.foreign_key, spec.alias,
            )
        return result


def field_equals(record: Any, field: str, expected: Any) -> bool:
    value = get_field(record, field)
    return value is not MISSING and strict_equals(value, expected)
