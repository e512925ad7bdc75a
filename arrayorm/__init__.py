# arrayorm
# Observable in-memory collections with snapshot queries and joins

"""
Core invariant: queries never change the collection they are run on.
Every query returns a new, independent collection; only the mutation
methods change state, and each one notifies subscribers synchronously.
"""

from loguru import logger

from .collection import ASCENDING, DESCENDING, ObservableCollection
from .errors import (
    ArrayOrmError,
    InvalidDirectionError,
    QueryExpressionError,
    RecordSourceError,
    RelationError,
)
from .fields import MISSING
from .logging_config import LogConfig, configure_logging, disable_logging
from .relations import DEFAULT_ALIAS, Relation
from .subscription import Subscription

__version__ = "0.1.0"

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "DEFAULT_ALIAS",
    "MISSING",
    "ArrayOrmError",
    "InvalidDirectionError",
    "LogConfig",
    "ObservableCollection",
    "QueryExpressionError",
    "RecordSourceError",
    "Relation",
    "RelationError",
    "Subscription",
    "configure_logging",
    "disable_logging",
]

logger.disable(__name__)
