"""
Data Models Package

This package contains all Pydantic models used by the subscription tracker.
"""

from subtracker.models.cadence import (
    BillingCadence,
    BillingCycle,
    InvalidCadence,
    InvalidWindow,
    ProjectionError,
    ProjectionWindow,
)
from subtracker.models.subscription import (
    BillingRecord,
    NotificationOption,
    PriceRecord,
    Subscription,
    SubscriptionList,
    SubscriptionUpdate,
)
from subtracker.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from subtracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Cadence models
    "BillingCadence",
    "BillingCycle",
    "InvalidCadence",
    "InvalidWindow",
    "ProjectionError",
    "ProjectionWindow",
    # Subscription models
    "BillingRecord",
    "NotificationOption",
    "PriceRecord",
    "Subscription",
    "SubscriptionList",
    "SubscriptionUpdate",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
