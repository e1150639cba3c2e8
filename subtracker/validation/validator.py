"""
Two-Stage Validation of Subscription Input

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (name, price, next payment date)
- Ranges (price >= 0, quantity >= 1)
- Known billing cycle

STAGE 2 - SEMANTIC VALIDATION:
- Absurd price detection
- Next payment date before the subscription started
- Next payment date long in the past (stale anchor)
- Free trial that still charges
- Duplicate name detection (needs storage)

Stage 2 only runs if stage 1 passes.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the form can show them.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import ValidationError

from subtracker.config import get_settings
from subtracker.models.cadence import BillingCycle, InvalidCadence
from subtracker.models.subscription import Subscription, SubscriptionUpdate
from subtracker.models.validation import ValidationIssue, ValidationResult
from subtracker.services.storage import StorageError, SubscriptionStorageInterface


class SubscriptionValidator:
    """
    Validates raw subscription form data through a two-stage pipeline.

    Input is a plain dict of form values using the Subscription field names.
    """

    def __init__(
        self,
        storage: Optional[SubscriptionStorageInterface] = None,
    ):
        """
        Initialize validator.

        Args:
            storage: Storage interface for duplicate checking.
                     If None, duplicate checking is skipped.
        """
        self._storage = storage
        self._settings = get_settings().app

    def _validate_schema(
        self,
        data: dict[str, Any],
        partial: bool = False,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Once the required fields check out, the values are also run through
        the record model (SubscriptionUpdate when `partial`) so every limit
        it enforces is reported here instead of failing on save.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        name = str(data.get("name") or "").strip()
        if not name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Subscription name is required",
                severity="error",
            ))

        price = _as_decimal(data.get("price"))
        if price is None:
            issues.append(ValidationIssue(
                field="price",
                issue_type="missing",
                message="Price is required and must be a number",
                severity="error",
            ))
        elif price < 0:
            issues.append(ValidationIssue(
                field="price",
                issue_type="invalid_value",
                message="Price cannot be negative",
                severity="error",
            ))

        if not isinstance(data.get("next_payment_date"), date):
            issues.append(ValidationIssue(
                field="next_payment_date",
                issue_type="missing",
                message="Next payment date is required",
                severity="error",
            ))

        try:
            BillingCycle.parse(data.get("billing_cycle", BillingCycle.MONTHLY))
        except InvalidCadence as e:
            issues.append(ValidationIssue(
                field="billing_cycle",
                issue_type="invalid_value",
                message=str(e),
                severity="error",
            ))

        quantity = data.get("billing_cycle_quantity", 1)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            issues.append(ValidationIssue(
                field="billing_cycle_quantity",
                issue_type="invalid_value",
                message="Billing cycle quantity must be a whole number of at least 1",
                severity="error",
                suggested_fix="Use 1 for every month, 2 for every other month, ...",
            ))

        if not issues:
            issues.extend(_model_issues(data, partial))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        data: dict[str, Any],
        today: date,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        price = _as_decimal(data.get("price"))
        next_payment = data["next_payment_date"]
        subscribed = data.get("subscribed_date")

        if price is not None and price > self._settings.max_reasonable_price:
            issues.append(ValidationIssue(
                field="price",
                issue_type="suspicious_value",
                message=f"Price {price} is unusually high",
                severity="warning",
                suggested_fix="Please check the amount was entered correctly",
            ))

        if isinstance(subscribed, date) and next_payment < subscribed:
            issues.append(ValidationIssue(
                field="next_payment_date",
                issue_type="inconsistent",
                message="Next payment date is before the subscription started",
                severity="error",
            ))

        stale_limit = today - timedelta(days=self._settings.stale_payment_tolerance_days)
        if next_payment < stale_limit:
            issues.append(ValidationIssue(
                field="next_payment_date",
                issue_type="suspicious_date",
                message=f"Next payment date ({next_payment}) is long in the past",
                severity="warning",
                suggested_fix="Renewals are still projected from it; update it if it is wrong",
            ))

        if data.get("free_trial") and price is not None and price > 0:
            issues.append(ValidationIssue(
                field="free_trial",
                issue_type="inconsistent",
                message="Marked as a free trial but has a price",
                severity="info",
                suggested_fix="The price will be charged once the trial ends",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    async def _check_duplicates(
        self,
        data: dict[str, Any],
    ) -> list[ValidationIssue]:
        """
        Flag an active subscription with the same name.

        This requires storage access.
        """
        issues = []
        if self._storage is None:
            return issues

        name = str(data.get("name") or "").strip().casefold()
        try:
            existing = await self._storage.list_subscriptions(active_only=True)
        except StorageError:
            # Don't fail validation due to storage errors
            return issues

        for subscription in existing:
            if subscription.id == data.get("id"):
                continue
            if subscription.name.casefold() == name:
                issues.append(ValidationIssue(
                    field="name",
                    issue_type="potential_duplicate",
                    message=f"You already track an active subscription named {subscription.name}",
                    severity="warning",
                    suggested_fix="Please verify this isn't a duplicate entry",
                ))
                break

        return issues

    async def validate(
        self,
        data: dict[str, Any],
        today: Optional[date] = None,
        check_duplicates: bool = True,
        partial: bool = False,
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            data: Form values keyed by Subscription field name
            today: Reference date (defaults to date.today())
            check_duplicates: Whether to check for duplicates (requires storage)
            partial: Values are an edit of an existing subscription
        """
        today = today or date.today()
        data = {
            key: value.date() if isinstance(value, datetime) else value
            for key, value in data.items()
        }
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(data, partial)
        all_issues.extend(schema_issues)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(data, today)
            all_issues.extend(semantic_issues)

            if check_duplicates:
                all_issues.extend(await self._check_duplicates(data))

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )


def _as_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


def _model_issues(data: dict[str, Any], partial: bool) -> list[ValidationIssue]:
    """Model validation errors as schema issues."""
    model = SubscriptionUpdate if partial else Subscription
    values = {key: value for key, value in data.items() if key != "id"}
    try:
        model.model_validate(values)
    except ValidationError as e:
        return [
            ValidationIssue(
                field=".".join(str(part) for part in error["loc"]) or "subscription",
                issue_type="invalid_value",
                message=error["msg"],
                severity="error",
            )
            for error in e.errors()
        ]
    return []
