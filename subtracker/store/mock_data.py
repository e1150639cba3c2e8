"""Sample subscriptions for development and demos."""

from datetime import date, timedelta
from decimal import Decimal

from subtracker.models.cadence import BillingCycle
from subtracker.models.subscription import (
    BillingRecord,
    NotificationOption,
    PriceRecord,
    Subscription,
    SubscriptionList,
)


def mock_subscriptions(today: date) -> list[Subscription]:
    """A handful of typical subscriptions with renewals around `today`."""
    return [
        Subscription(
            id="mock-netflix",
            name="Netflix",
            price=Decimal("649.00"),
            billing_cycle=BillingCycle.MONTHLY,
            next_payment_date=today + timedelta(days=3),
            category="Entertainment",
            subscribed_date=today - timedelta(days=400),
            billing_history=[
                BillingRecord(date=today - timedelta(days=28), amount=Decimal("649.00")),
                BillingRecord(date=today - timedelta(days=59), amount=Decimal("499.00")),
            ],
            price_history=[
                PriceRecord(date=today - timedelta(days=40), price=Decimal("649.00")),
            ],
            notification=NotificationOption.ONE_DAY,
            subscription_list=SubscriptionList.PERSONAL,
            url="https://www.netflix.com",
        ),
        Subscription(
            id="mock-spotify",
            name="Spotify",
            price=Decimal("119.00"),
            billing_cycle=BillingCycle.MONTHLY,
            next_payment_date=today + timedelta(days=12),
            category="Music",
            subscribed_date=today - timedelta(days=900),
            payment_method="UPI",
            subscription_list=SubscriptionList.PERSONAL,
        ),
        Subscription(
            id="mock-icloud",
            name="iCloud+",
            price=Decimal("75.00"),
            billing_cycle=BillingCycle.MONTHLY,
            next_payment_date=today + timedelta(days=20),
            category="Cloud Storage",
            subscribed_date=today - timedelta(days=200),
        ),
        Subscription(
            id="mock-prime",
            name="Amazon Prime",
            price=Decimal("1499.00"),
            billing_cycle=BillingCycle.YEARLY,
            next_payment_date=today + timedelta(days=140),
            category="Shopping",
            subscribed_date=today - timedelta(days=600),
            notification=NotificationOption.ONE_WEEK,
        ),
        Subscription(
            id="mock-github",
            name="GitHub Copilot",
            price=Decimal("830.00"),
            billing_cycle=BillingCycle.MONTHLY,
            billing_cycle_quantity=1,
            next_payment_date=today + timedelta(days=7),
            category="Software",
            subscribed_date=today - timedelta(days=90),
            subscription_list=SubscriptionList.BUSINESS,
        ),
        Subscription(
            id="mock-gym",
            name="Gym Membership",
            price=Decimal("4500.00"),
            billing_cycle=BillingCycle.MONTHLY,
            billing_cycle_quantity=3,
            next_payment_date=today + timedelta(days=45),
            category="Health",
            subscribed_date=today - timedelta(days=45),
            free_trial=False,
        ),
    ]
