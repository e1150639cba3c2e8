"""Subscription store package."""

from subtracker.store.mock_data import mock_subscriptions
from subtracker.store.subscription_store import SubscriptionStore

__all__ = ["SubscriptionStore", "mock_subscriptions"]
