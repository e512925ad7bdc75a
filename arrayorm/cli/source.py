"""
Record loading and expression parsing for the CLI.

Records come from JSON files holding a top-level array. Filter and
ordering expressions are small strings:

    --where "role=developer"     equality (value parsed as JSON if possible)
    --where "age<30"             comparison: = != < <= > >=
    --order-by "price:desc"      field with optional :asc / :desc
"""

from __future__ import annotations

import json
import operator
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Union

from ..collection import ASCENDING, DESCENDING, ObservableCollection
from ..errors import QueryExpressionError, RecordSourceError
from ..fields import strict_equals


# =============================================================================
# RECORD FILES
# =============================================================================

def load_records(path: Union[str, Path]) -> list:
    """
    Load a JSON array of record objects from ``path``.

    Raises:
        RecordSourceError: If the file is missing, unreadable, not valid
            JSON, or does not hold an array of objects.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise RecordSourceError(str(path), "file not found")
    except OSError as e:
        raise RecordSourceError(str(path), f"cannot read file ({e.strerror})")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RecordSourceError(str(path), f"invalid JSON at line {e.lineno}: {e.msg}")

    if not isinstance(data, list):
        raise RecordSourceError(
            str(path), f"expected a JSON array, got {type(data).__name__}"
        )

    for position, record in enumerate(data):
        if not isinstance(record, dict):
            raise RecordSourceError(
                str(path),
                f"element {position} is {type(record).__name__}, expected a JSON object",
            )
    return data


def load_collection(path: Union[str, Path]) -> ObservableCollection:
    return ObservableCollection(load_records(path))


def dump_records(records: list) -> str:
    return json.dumps(records, indent=2, ensure_ascii=False, default=str)


# =============================================================================
# EXPRESSIONS
# =============================================================================

_WHERE_PATTERN = re.compile(r"^(?P<field>[^=!<>]+?)\s*(?P<op><=|>=|!=|=|<|>)\s*(?P<value>.*)$")

_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def parse_literal(text: str) -> Any:
    """JSON literal if ``text`` parses as one, else the raw string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


@dataclass(frozen=True)
class WhereClause:
    """A parsed ``--where`` expression."""
    field: str
    op: str
    value: Any

    def condition(self) -> Any:
        """
        Condition suitable for ``ObservableCollection.filter``.

        Equality returns the literal itself; everything else returns a
        predicate. Ordering comparisons never match absent/None values.
        """
        if self.op == "=":
            return self.value

        target = self.value
        if self.op == "!=":
            return lambda value: not strict_equals(value, target)

        compare = _COMPARISONS[self.op]
        return lambda value: value is not None and compare(value, target)

    def apply(self, collection: ObservableCollection) -> ObservableCollection:
        return collection.filter(self.field, self.condition())


def parse_where(expression: str) -> WhereClause:
    """
    Parse ``FIELD<op>VALUE``.

    Raises:
        QueryExpressionError: If no operator or field name is present.
    """
    match = _WHERE_PATTERN.match(expression.strip())
    if not match:
        raise QueryExpressionError(
            f"invalid filter {expression!r}; expected FIELD<op>VALUE with op in = != < <= > >="
        )
    field = match.group("field").strip()
    if not field:
        raise QueryExpressionError(f"filter {expression!r} has no field name")
    return WhereClause(field=field, op=match.group("op"), value=parse_literal(match.group("value")))


def parse_order(expression: str) -> tuple[str, str]:
    """
    Parse ``FIELD`` or ``FIELD:asc`` / ``FIELD:desc``.

    Raises:
        QueryExpressionError: If the direction suffix is unknown.
    """
    field, sep, direction = expression.rpartition(":")
    if not sep:
        field, direction = expression, ASCENDING

    field = field.strip()
    direction = direction.strip().lower()
    if not field:
        raise QueryExpressionError(f"ordering {expression!r} has no field name")
    if direction not in (ASCENDING, DESCENDING):
        raise QueryExpressionError(
            f"ordering {expression!r} must end in ':asc' or ':desc'"
        )
    return field, direction


def parse_fields(expression: str) -> list[str]:
    """Comma-separated field list; blank entries are dropped."""
    fields = [name.strip() for name in expression.split(",") if name.strip()]
    if not fields:
        raise QueryExpressionError(f"field list {expression!r} is empty")
    return fields
