"""
In-Memory Storage Implementation

Backs the storage interfaces with plain dicts. Used for tests and local
development, and as the reference behaviour for real backends:
rows go through the same transformers a hosted backend would use, so
what comes back out is exactly what a round trip through the backend
would produce.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from subtracker.models.audit import AuditEvent
from subtracker.models.subscription import Subscription, SubscriptionUpdate
from subtracker.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    StorageError,
    SubscriptionStorageInterface,
)
from subtracker.services.storage.transformers import (
    from_row,
    to_row,
    to_update_row,
)


class InMemorySubscriptionStorage(SubscriptionStorageInterface):
    """
    Subscription storage held in a dict of backend rows keyed by id.
    """

    def __init__(self, subscriptions: Optional[list[Subscription]] = None):
        self._rows: dict[str, dict] = {}
        for subscription in subscriptions or []:
            self._insert(subscription)

    def _insert(self, subscription: Subscription) -> dict:
        now = datetime.utcnow().isoformat()
        row = to_row(subscription)
        row.update(id=subscription.id, created_at=now, updated_at=now)
        self._rows[subscription.id] = row
        return row

    async def list_subscriptions(
        self,
        active_only: bool = False,
        category: Optional[str] = None,
    ) -> list[Subscription]:
        subscriptions = [from_row(row) for row in self._rows.values()]
        if active_only:
            subscriptions = [s for s in subscriptions if s.is_active]
        if category is not None:
            subscriptions = [s for s in subscriptions if s.category == category]
        return sorted(subscriptions, key=lambda s: s.next_payment_date)

    async def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        row = self._rows.get(subscription_id)
        return from_row(row) if row else None

    async def create_subscription(self, subscription: Subscription) -> Subscription:
        if subscription.id in self._rows:
            raise DuplicateError(f"Subscription already exists: {subscription.id}")
        return from_row(self._insert(subscription))

    async def update_subscription(
        self,
        subscription_id: str,
        updates: SubscriptionUpdate,
    ) -> Subscription:
        row = self._rows.get(subscription_id)
        if row is None:
            raise NotFoundError(f"Subscription not found: {subscription_id}")

        updated = {**row, **to_update_row(updates)}
        updated["updated_at"] = datetime.utcnow().isoformat()
        # Validate before committing so a bad update leaves the row untouched
        try:
            subscription = from_row(updated)
        except ValidationError as e:
            raise StorageError(f"Invalid update for {subscription_id}: {e}") from e
        self._rows[subscription_id] = updated
        return subscription

    async def delete_subscription(self, subscription_id: str) -> None:
        if subscription_id not in self._rows:
            raise NotFoundError(f"Subscription not found: {subscription_id}")
        del self._rows[subscription_id]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
