"""
Audit Logger

DESIGN DECISION: Every change to the user's subscriptions is logged.
This provides:
1. Traceability of what reached the backend
2. Debugging capability when a backend call fails

The audit logger:
- Is async so it can sit next to async storage calls
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from subtracker.models.audit import AuditEvent, AuditEventBuilder
from subtracker.services.storage import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_subscriptions_loaded(
        self,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.subscriptions_loaded(count, correlation_id))

    async def log_subscription_created(
        self,
        subscription_id: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new subscription reaching the backend."""
        await self.log(AuditEventBuilder.subscription_created(
            subscription_id=subscription_id,
            name=name,
            correlation_id=correlation_id,
        ))

    async def log_subscription_updated(
        self,
        subscription_id: str,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.subscription_updated(
            subscription_id=subscription_id,
            fields=fields,
            correlation_id=correlation_id,
        ))

    async def log_price_changed(
        self,
        subscription_id: str,
        old_price: str,
        new_price: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.price_changed(
            subscription_id=subscription_id,
            old_price=old_price,
            new_price=new_price,
            correlation_id=correlation_id,
        ))

    async def log_subscription_deleted(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.subscription_deleted(subscription_id, correlation_id))

    async def log_subscription_cancelled(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.subscription_cancelled(subscription_id, correlation_id))

    async def log_mock_data_seeded(
        self,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.mock_data_seeded(count, correlation_id))

    async def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected subscription form."""
        await self.log(AuditEventBuilder.validation_failed(issues, correlation_id))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        subscription_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed backend call."""
        await self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., saving the form)
    and pass it through all subsequent operations.
    """
    return uuid4()
