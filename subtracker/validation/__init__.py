"""Validation package."""

from subtracker.validation.validator import SubscriptionValidator

__all__ = ["SubscriptionValidator"]
