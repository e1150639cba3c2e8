"""
Main Orchestrator for Subscription Tracker

Ties the components together and defines the save flow of the
add/edit subscription form:
    form values -> validate -> build record -> write-through store

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches storage unless validation found no errors
- Edits are sent as partial updates, never as full overwrites
- Every rejected save is audited
"""

from datetime import date
from typing import Any, Optional
from uuid import UUID

from subtracker.audit import AuditLogger, create_correlation_id
from subtracker.config import get_settings
from subtracker.models.subscription import Subscription, SubscriptionUpdate
from subtracker.models.validation import ValidationResult
from subtracker.services.storage import (
    InMemoryAuditStorage,
    InMemorySubscriptionStorage,
    SubscriptionStorageInterface,
)
from subtracker.store import SubscriptionStore
from subtracker.summaries import SpendingSummarizer
from subtracker.validation import SubscriptionValidator


class SubscriptionFormFlow:
    """
    Orchestrates saving the subscription form.

    Flow:
    1. Validate → two-stage validation of the raw form values
    2. Build → Subscription (add) or SubscriptionUpdate (edit)
    3. Save → write-through store (storage first, then cache)
    """

    def __init__(
        self,
        store: SubscriptionStore,
        validator: Optional[SubscriptionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or SubscriptionValidator()
        self._audit_logger = audit_logger or AuditLogger()

    async def save(
        self,
        data: dict[str, Any],
        subscription_id: Optional[str] = None,
        today: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[Subscription], ValidationResult]:
        """
        Validate and save form values.

        Args:
            data: Form values keyed by Subscription field name
            subscription_id: Set when editing an existing subscription

        Returns:
            (saved_subscription, validation_result)
            saved_subscription is None when validation found errors.
        """
        correlation_id = correlation_id or create_correlation_id()
        today = today or date.today()

        result = await self._validator.validate(
            {**data, "id": subscription_id} if subscription_id else data,
            today=today,
            partial=bool(subscription_id),
        )
        if result.has_errors:
            await self._audit_logger.log_validation_failed(
                issues=[issue.model_dump() for issue in result.issues],
                correlation_id=correlation_id,
            )
            return None, result

        if subscription_id:
            updates = SubscriptionUpdate(**data)
            saved = await self._store.update(
                subscription_id, updates, correlation_id=correlation_id, today=today
            )
        else:
            values = {
                "currency": get_settings().store.default_currency,
                "subscribed_date": today,
                **data,
            }
            saved = await self._store.add(Subscription(**values), correlation_id=correlation_id)

        return saved, result


def create_app_components(
    storage: Optional[SubscriptionStorageInterface] = None,
) -> tuple[SubscriptionStore, SubscriptionFormFlow, SpendingSummarizer]:
    """
    Factory function to create all application components.

    Args:
        storage: Backend for subscriptions. Defaults to in-memory storage,
                 which is what tests and local development use.

    Returns:
        (store, form_flow, summarizer)
    """
    storage = storage or InMemorySubscriptionStorage()
    audit_logger = AuditLogger(InMemoryAuditStorage())

    store = SubscriptionStore(storage, audit_logger=audit_logger)
    form_flow = SubscriptionFormFlow(
        store,
        validator=SubscriptionValidator(storage),
        audit_logger=audit_logger,
    )
    return store, form_flow, SpendingSummarizer()
