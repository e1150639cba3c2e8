"""Services package."""

from subtracker.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemorySubscriptionStorage,
    NotFoundError,
    StorageConnectionError,
    StorageError,
    SubscriptionStorageInterface,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemorySubscriptionStorage",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    "SubscriptionStorageInterface",
]
