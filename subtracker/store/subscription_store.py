"""
Subscription Store

A client-side cache of the user's subscriptions, keyed by id, in front of
a SubscriptionStorageInterface.

DESIGN DECISION: Write-through, never optimistic.
- Reads go through to storage when the cache cannot answer (read-through).
- Mutations call storage first. The cache changes only after storage
  confirms, using the record storage returned. A failed call leaves the
  cache exactly as it was.

Transient connection failures are retried with tenacity; every other
storage error is recorded in `last_error` and re-raised to the caller.
"""

from datetime import date
from typing import Awaitable, Callable, Optional, TypeVar
from uuid import UUID

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from subtracker.audit import AuditLogger
from subtracker.config import StoreSettings, get_settings
from subtracker.models.subscription import (
    PriceRecord,
    Subscription,
    SubscriptionUpdate,
)
from subtracker.services.storage import (
    StorageConnectionError,
    StorageError,
    SubscriptionStorageInterface,
)
from subtracker.store.mock_data import mock_subscriptions


T = TypeVar("T")

logger = structlog.get_logger(__name__)


class SubscriptionStore:
    """
    Cache of subscription records owned by the backend.

    State mirrors what the UI needs: the records, whether a call is in
    flight, whether the first load happened, and the last error message.
    """

    def __init__(
        self,
        storage: SubscriptionStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[StoreSettings] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().store
        self._cache: dict[str, Subscription] = {}

        self.is_loading = False
        self.is_initialized = False
        self.last_error: Optional[str] = None

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def subscriptions(self) -> list[Subscription]:
        """Cached subscriptions ordered by next payment date."""
        return sorted(self._cache.values(), key=lambda s: (s.next_payment_date, s.name))

    @property
    def active_subscriptions(self) -> list[Subscription]:
        return [s for s in self.subscriptions if s.is_active]

    def cached(self, subscription_id: str) -> Optional[Subscription]:
        """Cache lookup only, no storage call."""
        return self._cache.get(subscription_id)

    def clear_error(self) -> None:
        self.last_error = None

    # =========================================================================
    # STORAGE CALLS
    # =========================================================================

    async def _call(
        self,
        operation: str,
        func: Callable[[], Awaitable[T]],
        subscription_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> T:
        """
        Run one storage call with retries and error bookkeeping.

        Only StorageConnectionError is retried.
        """
        self.is_loading = True
        self.last_error = None
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._settings.retry_attempts),
                wait=wait_exponential(
                    multiplier=self._settings.retry_min_wait,
                    max=self._settings.retry_max_wait,
                ),
                retry=retry_if_exception_type(StorageConnectionError),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            "storage_call_retry",
                            operation=operation,
                            attempt=attempt.retry_state.attempt_number,
                        )
                    return await func()
        except StorageError as e:
            self.last_error = f"Failed to {operation}: {e}"
            await self._audit_logger.log_storage_error(
                operation=operation,
                error_message=str(e),
                subscription_id=subscription_id,
                correlation_id=correlation_id,
            )
            raise
        finally:
            self.is_loading = False

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def load(self, correlation_id: Optional[UUID] = None) -> list[Subscription]:
        """
        Replace the cache with everything storage holds.

        The store counts as initialized even when the load fails, so the
        UI can show the error instead of a spinner.
        """
        try:
            records = await self._call(
                "fetch subscriptions",
                self._storage.list_subscriptions,
                correlation_id=correlation_id,
            )
        finally:
            self.is_initialized = True

        self._cache = {record.id: record for record in records}
        await self._audit_logger.log_subscriptions_loaded(len(records), correlation_id)
        return self.subscriptions

    async def get(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Subscription]:
        """Cached record, or read through to storage on a miss."""
        if subscription_id in self._cache:
            return self._cache[subscription_id]

        record = await self._call(
            "fetch subscription",
            lambda: self._storage.get_subscription(subscription_id),
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        )
        if record is not None:
            self._cache[record.id] = record
        return record

    async def add(
        self,
        subscription: Subscription,
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        """Create in storage, then cache what storage returned."""
        created = await self._call(
            "add subscription",
            lambda: self._storage.create_subscription(subscription),
            subscription_id=subscription.id,
            correlation_id=correlation_id,
        )
        self._cache[created.id] = created
        await self._audit_logger.log_subscription_created(
            created.id, created.name, correlation_id
        )
        return created

    async def update(
        self,
        subscription_id: str,
        updates: SubscriptionUpdate,
        correlation_id: Optional[UUID] = None,
        today: Optional[date] = None,
    ) -> Subscription:
        """
        Apply a partial update in storage, then refresh the cached record.

        A price change appends a PriceRecord dated `today` to the price
        history.
        """
        current = await self.get(subscription_id, correlation_id)
        changes = updates.model_dump(exclude_unset=True)

        price_changed = (
            current is not None
            and updates.price is not None
            and updates.price != current.price
        )
        if price_changed:
            history = (
                updates.price_history
                if updates.price_history is not None
                else current.price_history
            )
            changes["price_history"] = [
                *history,
                PriceRecord(date=today or date.today(), price=updates.price),
            ]
            updates = SubscriptionUpdate(**changes)

        updated = await self._call(
            "update subscription",
            lambda: self._storage.update_subscription(subscription_id, updates),
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        )
        self._cache[updated.id] = updated

        await self._audit_logger.log_subscription_updated(
            subscription_id, list(changes), correlation_id
        )
        if price_changed:
            await self._audit_logger.log_price_changed(
                subscription_id, str(current.price), str(updated.price), correlation_id
            )
        return updated

    async def delete(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Delete in storage, then drop from the cache."""
        await self._call(
            "delete subscription",
            lambda: self._storage.delete_subscription(subscription_id),
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        )
        self._cache.pop(subscription_id, None)
        await self._audit_logger.log_subscription_deleted(subscription_id, correlation_id)

    async def mark_cancelled(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        """Set is_active to False."""
        updated = await self._call(
            "cancel subscription",
            lambda: self._storage.update_subscription(
                subscription_id, SubscriptionUpdate(is_active=False)
            ),
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        )
        self._cache[updated.id] = updated
        await self._audit_logger.log_subscription_cancelled(subscription_id, correlation_id)
        return updated

    async def seed_mock_data(
        self,
        today: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[Subscription]:
        """Insert the sample subscriptions, then reload from storage."""
        samples = mock_subscriptions(today or date.today())
        for sample in samples:
            await self._call(
                "seed mock data",
                lambda sample=sample: self._storage.create_subscription(sample),
                subscription_id=sample.id,
                correlation_id=correlation_id,
            )
        await self._audit_logger.log_mock_data_seeded(len(samples), correlation_id)
        return await self.load(correlation_id)
