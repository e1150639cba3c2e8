"""
Tests for the write-through subscription store.

Storage failures are simulated with small subclasses of the in-memory
backend; retry waits are configured to zero so tests stay fast.
"""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from subtracker.audit import AuditLogger
from subtracker.config import StoreSettings
from subtracker.models.audit import AuditEventType
from subtracker.models.subscription import PriceRecord, Subscription, SubscriptionUpdate
from subtracker.services.storage import (
    InMemoryAuditStorage,
    InMemorySubscriptionStorage,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from subtracker.store import SubscriptionStore


TODAY = date(2025, 3, 15)


class FailingStorage(InMemorySubscriptionStorage):
    """Backend that rejects every write."""

    async def create_subscription(self, subscription):
        raise StorageError("backend rejected the row")

    async def update_subscription(self, subscription_id, updates):
        raise StorageError("backend rejected the update")

    async def delete_subscription(self, subscription_id):
        raise StorageError("backend rejected the delete")


class FlakyStorage(InMemorySubscriptionStorage):
    """Backend whose list call fails to connect a number of times first."""

    def __init__(self, failures, subscriptions=None):
        super().__init__(subscriptions)
        self.failures = failures
        self.calls = 0

    async def list_subscriptions(self, active_only=False, category=None):
        self.calls += 1
        if self.calls <= self.failures:
            raise StorageConnectionError("connection reset")
        return await super().list_subscriptions(active_only, category)


class CountingStorage(InMemorySubscriptionStorage):
    """Counts delete calls."""

    def __init__(self, subscriptions=None):
        super().__init__(subscriptions)
        self.delete_calls = 0

    async def delete_subscription(self, subscription_id):
        self.delete_calls += 1
        await super().delete_subscription(subscription_id)


def make_subscription(**overrides):
    values = {
        "id": "sub-netflix",
        "name": "Netflix",
        "price": Decimal("649"),
        "billing_cycle": "monthly",
        "next_payment_date": date(2025, 3, 18),
        "category": "Entertainment",
        "subscribed_date": date(2024, 3, 18),
    }
    values.update(overrides)
    return Subscription(**values)


def make_store(storage):
    audit_storage = InMemoryAuditStorage()
    settings = StoreSettings(retry_attempts=3, retry_min_wait=0, retry_max_wait=0.01)
    store = SubscriptionStore(storage, audit_logger=AuditLogger(audit_storage), settings=settings)
    return store, audit_storage


def event_types(audit_storage):
    events = asyncio.run(audit_storage.get_recent_events())
    return [event.event_type for event in reversed(events)]


class TestLoad:
    """Loading the cache from storage."""

    def test_load_populates_cache_in_payment_order(self):
        storage = InMemorySubscriptionStorage([
            make_subscription(id="b", name="Spotify", next_payment_date=date(2025, 3, 27)),
            make_subscription(id="a", name="Netflix", next_payment_date=date(2025, 3, 18)),
        ])
        store, audit_storage = make_store(storage)

        loaded = asyncio.run(store.load())

        assert [s.id for s in loaded] == ["a", "b"]
        assert store.is_initialized is True
        assert store.is_loading is False
        assert store.last_error is None
        assert event_types(audit_storage) == [AuditEventType.SUBSCRIPTIONS_LOADED]

    def test_failed_load_still_initializes(self):
        """Test the store is initialized even when the first load fails."""
        store, audit_storage = make_store(FlakyStorage(failures=10))

        with pytest.raises(StorageConnectionError):
            asyncio.run(store.load())

        assert store.is_initialized is True
        assert store.subscriptions == []
        assert store.last_error.startswith("Failed to fetch subscriptions")
        assert event_types(audit_storage) == [AuditEventType.STORAGE_ERROR]


class TestRetries:
    """Only connection failures are retried."""

    def test_connection_errors_are_retried(self):
        storage = FlakyStorage(failures=2, subscriptions=[make_subscription()])
        store, _ = make_store(storage)

        loaded = asyncio.run(store.load())

        assert storage.calls == 3
        assert [s.id for s in loaded] == ["sub-netflix"]
        assert store.last_error is None

    def test_retries_stop_after_configured_attempts(self):
        storage = FlakyStorage(failures=10)
        store, _ = make_store(storage)

        with pytest.raises(StorageConnectionError):
            asyncio.run(store.load())

        assert storage.calls == 3

    def test_other_storage_errors_are_not_retried(self):
        storage = CountingStorage()
        store, _ = make_store(storage)

        with pytest.raises(NotFoundError):
            asyncio.run(store.delete("missing"))

        assert storage.delete_calls == 1


class TestWriteThrough:
    """Cache changes only after storage confirms."""

    def test_add_writes_storage_then_cache(self):
        storage = InMemorySubscriptionStorage()
        store, audit_storage = make_store(storage)

        created = asyncio.run(store.add(make_subscription()))

        assert created.created_at is not None
        assert store.cached("sub-netflix") == created
        assert asyncio.run(storage.get_subscription("sub-netflix")) is not None
        assert event_types(audit_storage) == [AuditEventType.SUBSCRIPTION_CREATED]

    def test_failed_add_leaves_cache_untouched(self):
        store, audit_storage = make_store(FailingStorage())

        with pytest.raises(StorageError):
            asyncio.run(store.add(make_subscription()))

        assert store.cached("sub-netflix") is None
        assert store.subscriptions == []
        assert "Failed to add subscription" in store.last_error
        assert event_types(audit_storage) == [AuditEventType.STORAGE_ERROR]

    def test_failed_update_keeps_cached_record(self):
        original = make_subscription()
        storage = FailingStorage([original])
        store, _ = make_store(storage)
        asyncio.run(store.load())

        with pytest.raises(StorageError):
            asyncio.run(store.update("sub-netflix", SubscriptionUpdate(name="Netflix Premium")))

        assert store.cached("sub-netflix").name == "Netflix"

    def test_failed_delete_keeps_cached_record(self):
        store, _ = make_store(FailingStorage([make_subscription()]))
        asyncio.run(store.load())

        with pytest.raises(StorageError):
            asyncio.run(store.delete("sub-netflix"))

        assert store.cached("sub-netflix") is not None

    def test_clear_error(self):
        store, _ = make_store(FailingStorage())
        with pytest.raises(StorageError):
            asyncio.run(store.add(make_subscription()))

        store.clear_error()
        assert store.last_error is None


class TestOperations:
    """Reads and mutations against a working backend."""

    def test_get_reads_through_on_cache_miss(self):
        storage = InMemorySubscriptionStorage([make_subscription()])
        store, _ = make_store(storage)

        assert store.cached("sub-netflix") is None
        record = asyncio.run(store.get("sub-netflix"))

        assert record.name == "Netflix"
        assert store.cached("sub-netflix") == record
        assert asyncio.run(store.get("missing")) is None

    def test_update_price_appends_price_history(self):
        storage = InMemorySubscriptionStorage([make_subscription()])
        store, audit_storage = make_store(storage)
        asyncio.run(store.load())

        updated = asyncio.run(store.update(
            "sub-netflix",
            SubscriptionUpdate(price=Decimal("799")),
            today=TODAY,
        ))

        assert updated.price == Decimal("799")
        assert updated.price_history == [PriceRecord(date=TODAY, price=Decimal("799"))]
        assert store.cached("sub-netflix").price == Decimal("799")
        assert event_types(audit_storage)[-2:] == [
            AuditEventType.SUBSCRIPTION_UPDATED,
            AuditEventType.PRICE_CHANGED,
        ]

    def test_update_without_price_change_keeps_history(self):
        storage = InMemorySubscriptionStorage([make_subscription()])
        store, audit_storage = make_store(storage)
        asyncio.run(store.load())

        updated = asyncio.run(store.update(
            "sub-netflix",
            SubscriptionUpdate(price=Decimal("649"), category="Streaming"),
            today=TODAY,
        ))

        assert updated.category == "Streaming"
        assert updated.price_history == []
        assert AuditEventType.PRICE_CHANGED not in event_types(audit_storage)

    def test_update_missing_subscription(self):
        store, _ = make_store(InMemorySubscriptionStorage())

        with pytest.raises(NotFoundError):
            asyncio.run(store.update("missing", SubscriptionUpdate(name="x")))
        assert "Failed to update subscription" in store.last_error

    def test_update_never_clears_required_fields(self):
        """Test a None is_active in an update does not reactivate a cancelled record."""
        storage = InMemorySubscriptionStorage([make_subscription(is_active=False)])
        store, _ = make_store(storage)
        asyncio.run(store.load())

        updates = SubscriptionUpdate.model_construct(is_active=None, name="Netflix Basic")
        updated = asyncio.run(store.update("sub-netflix", updates, today=TODAY))

        assert updated.name == "Netflix Basic"
        assert updated.is_active is False
        assert store.active_subscriptions == []

    def test_invalid_update_is_a_storage_error(self):
        """Test a row the backend cannot accept is recorded in last_error."""
        storage = InMemorySubscriptionStorage([make_subscription()])
        store, audit_storage = make_store(storage)
        asyncio.run(store.load())

        updates = SubscriptionUpdate.model_construct(billing_cycle_quantity=0)
        with pytest.raises(StorageError):
            asyncio.run(store.update("sub-netflix", updates, today=TODAY))

        assert "Failed to update subscription" in store.last_error
        assert store.cached("sub-netflix").billing_cycle_quantity == 1
        stored = asyncio.run(storage.get_subscription("sub-netflix"))
        assert stored.billing_cycle_quantity == 1
        assert event_types(audit_storage)[-1] == AuditEventType.STORAGE_ERROR

    def test_delete_removes_from_cache(self):
        storage = InMemorySubscriptionStorage([make_subscription()])
        store, audit_storage = make_store(storage)
        asyncio.run(store.load())

        asyncio.run(store.delete("sub-netflix"))

        assert store.cached("sub-netflix") is None
        assert asyncio.run(storage.get_subscription("sub-netflix")) is None
        assert event_types(audit_storage)[-1] == AuditEventType.SUBSCRIPTION_DELETED

    def test_mark_cancelled(self):
        storage = InMemorySubscriptionStorage([
            make_subscription(),
            make_subscription(id="sub-spotify", name="Spotify"),
        ])
        store, _ = make_store(storage)
        asyncio.run(store.load())

        cancelled = asyncio.run(store.mark_cancelled("sub-netflix"))

        assert cancelled.is_active is False
        assert [s.id for s in store.active_subscriptions] == ["sub-spotify"]
        assert len(store.subscriptions) == 2

    def test_seed_mock_data(self):
        store, audit_storage = make_store(InMemorySubscriptionStorage())

        seeded = asyncio.run(store.seed_mock_data(today=TODAY))

        assert len(seeded) == 6
        assert store.cached("mock-gym").billing_cycle_quantity == 3
        assert all(s.next_payment_date > TODAY for s in seeded)
        assert event_types(audit_storage)[-2:] == [
            AuditEventType.MOCK_DATA_SEEDED,
            AuditEventType.SUBSCRIPTIONS_LOADED,
        ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
