"""
Storage Services Package

Provides abstract interfaces and an in-memory implementation for
subscription and audit storage. Hosted backends implement the same
interfaces using the row transformers.
"""

from subtracker.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    StorageConnectionError,
    StorageError,
    SubscriptionStorageInterface,
)
from subtracker.services.storage.memory import (
    InMemoryAuditStorage,
    InMemorySubscriptionStorage,
)
from subtracker.services.storage.transformers import (
    SUBSCRIPTION_COLUMNS,
    from_row,
    to_row,
    to_update_row,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SubscriptionStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemorySubscriptionStorage",
    # Row transformers
    "SUBSCRIPTION_COLUMNS",
    "from_row",
    "to_row",
    "to_update_row",
]
