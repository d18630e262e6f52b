"""
KeelORM public package initialization.

Entities are declared with :class:`Entity`, registered on a
:class:`Configuration`, and used through sessions opened from the resulting
:class:`SessionFactory`.
"""

from .config import Configuration, DatabaseSettings  # noqa: F401
from .core import Column, Entity, Id  # noqa: F401
from .dialects import Dialect, get_dialect  # noqa: F401
from .errors import (  # noqa: F401
    ConfigurationError,
    DatabaseError,
    EntityNotManagedError,
    MappingError,
    OrmError,
    PoolExhaustedError,
    QueryError,
    SessionClosedError,
    TransactionStateError,
    UnsupportedDialectFeature,
    ValidationFailure,
)
from .mapping import (  # noqa: F401
    EntityDescription,
    FieldDescription,
    GenerationType,
    InheritanceType,
)
from .persistence import Session, SessionFactory, Transaction  # noqa: F401
from .pool import ConnectionPool  # noqa: F401
from .query import Order, Query  # noqa: F401
from .utils import configure_logging  # noqa: F401

__all__ = [
    "Entity",
    "Column",
    "Id",
    "EntityDescription",
    "FieldDescription",
    "GenerationType",
    "InheritanceType",
    "Configuration",
    "DatabaseSettings",
    "ConnectionPool",
    "Dialect",
    "get_dialect",
    "Session",
    "SessionFactory",
    "Transaction",
    "Query",
    "Order",
    "configure_logging",
    "OrmError",
    "ConfigurationError",
    "MappingError",
    "EntityNotManagedError",
    "PoolExhaustedError",
    "ValidationFailure",
    "QueryError",
    "TransactionStateError",
    "UnsupportedDialectFeature",
    "SessionClosedError",
    "DatabaseError",
]
