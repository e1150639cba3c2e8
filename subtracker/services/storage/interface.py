"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the hosted backend out of the business logic
2. Use in-memory storage for testing and local development
3. Put the subscription cache in front of any backend

The interface mirrors what the app actually does with its backend:
list, fetch one, insert, partial update, delete.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from subtracker.models.audit import AuditEvent
from subtracker.models.subscription import Subscription, SubscriptionUpdate


class SubscriptionStorageInterface(ABC):
    """
    Abstract interface for subscription storage operations.

    Any backend implementation must implement these methods.
    """

    @abstractmethod
    async def list_subscriptions(
        self,
        active_only: bool = False,
        category: Optional[str] = None,
    ) -> list[Subscription]:
        """
        List subscriptions ordered by next payment date.

        Args:
            active_only: Only return subscriptions that are not cancelled
            category: Filter by category (exact match)

        Returns:
            List of matching subscriptions
        """
        pass

    @abstractmethod
    async def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        """
        Retrieve a subscription by its ID.

        Returns:
            The subscription if found, None otherwise
        """
        pass

    @abstractmethod
    async def create_subscription(self, subscription: Subscription) -> Subscription:
        """
        Insert a new subscription.

        Returns:
            The stored subscription, with backend-assigned timestamps

        Raises:
            DuplicateError: If a subscription with this ID exists
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def update_subscription(
        self,
        subscription_id: str,
        updates: SubscriptionUpdate,
    ) -> Subscription:
        """
        Apply a partial update.

        Returns:
            The subscription as stored after the update

        Raises:
            NotFoundError: If the subscription doesn't exist
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def delete_subscription(self, subscription_id: str) -> None:
        """
        Delete a subscription by ID.

        Raises:
            NotFoundError: If the subscription doesn't exist
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for a correlation ID in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Get all events for a specific entity in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageConnectionError(StorageError):
    """Could not reach the storage backend. Safe to retry."""
    pass
