"""
Row Transformers

Convert between Subscription models and the backend's snake_case rows.

The backend schema stores history lists as JSON arrays, dates as ISO
strings and optional text columns as NULL rather than empty strings.
"""

from decimal import Decimal
from typing import Any

from subtracker.models.subscription import (
    REQUIRED_FIELDS,
    Subscription,
    SubscriptionUpdate,
)


# Columns written on insert (id and timestamps are backend-assigned)
SUBSCRIPTION_COLUMNS = [
    "name",
    "logo",
    "price",
    "currency",
    "billing_cycle",
    "billing_cycle_quantity",
    "next_payment_date",
    "category",
    "subscribed_date",
    "is_active",
    "billing_history",
    "price_history",
    "notification",
    "payment_method",
    "free_trial",
    "list",
    "url",
]

# Optional text columns: empty values are stored as NULL
_NULLABLE_TEXT = ("logo", "notification", "payment_method", "list", "url")

# Model field -> row column where the names differ
_FIELD_TO_COLUMN = {"subscription_list": "list"}
_COLUMN_TO_FIELD = {column: field for field, column in _FIELD_TO_COLUMN.items()}


def _history_to_json(records: list, value_key: str) -> list[dict]:
    return [
        {"date": record.date.isoformat(), value_key: float(getattr(record, value_key))}
        for record in records
    ]


def _to_column_value(field: str, value: Any) -> Any:
    if field == "billing_history":
        return _history_to_json(value, "amount")
    if field == "price_history":
        return _history_to_json(value, "price")
    if hasattr(value, "value"):  # enums
        value = value.value
    if hasattr(value, "isoformat"):
        value = value.isoformat()
    if isinstance(value, Decimal):
        value = float(value)
    return value


def to_row(subscription: Subscription) -> dict[str, Any]:
    """Insert row for a subscription (no id or timestamps)."""
    row = {}
    for field in Subscription.model_fields:
        column = _FIELD_TO_COLUMN.get(field, field)
        if column not in SUBSCRIPTION_COLUMNS:
            continue
        row[column] = _to_column_value(field, getattr(subscription, field))

    for column in _NULLABLE_TEXT:
        row[column] = row[column] or None
    return row


def to_update_row(updates: SubscriptionUpdate) -> dict[str, Any]:
    """Update row containing only the fields that were explicitly set."""
    row = {}
    for field in updates.model_fields_set:
        column = _FIELD_TO_COLUMN.get(field, field)
        value = getattr(updates, field)
        if value is None:
            # Required columns are never cleared
            if field not in REQUIRED_FIELDS:
                row[column] = None
            continue
        row[column] = _to_column_value(field, value)
        if column in _NULLABLE_TEXT:
            row[column] = row[column] or None
    return row


def from_row(row: dict[str, Any]) -> Subscription:
    """
    Build a Subscription from a backend row.

    Unknown columns (e.g. user_id) are ignored. NULL history columns
    become empty lists.
    """
    data = {}
    for column, value in row.items():
        field = _COLUMN_TO_FIELD.get(column, column)
        if field not in Subscription.model_fields:
            continue
        if value is None and field in ("billing_history", "price_history"):
            value = []
        if value is None and field in ("is_active",):
            continue
        data[field] = value
    return Subscription.model_validate(data)
