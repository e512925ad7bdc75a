"""
Error taxonomy for arrayorm.

The collection operations themselves are total: they never raise on
malformed records. These errors cover the few inputs that are checked
(sort direction, relation specs) and the CLI's record loading.
"""


class ArrayOrmError(Exception):
    """Base class for all arrayorm errors."""
    pass


class InvalidDirectionError(ArrayOrmError, ValueError):
    """Raised when a sort direction is neither "asc" nor "desc"."""

    def __init__(self, direction: object):
        self.direction = direction
        super().__init__(
            f"direction must be 'asc' or 'desc', got {direction!r}"
        )


class RelationError(ArrayOrmError, ValueError):
    """Raised when a relation spec for eager joins is malformed."""
    pass


class RecordSourceError(ArrayOrmError):
    """Raised when a record file cannot be loaded as a JSON array."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class QueryExpressionError(ArrayOrmError, ValueError):
    """Raised when a CLI filter or ordering expression cannot be parsed."""
    pass
