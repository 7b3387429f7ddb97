"""Enums for model fields."""

from enum import Enum


class Currency(str, Enum):
    """Supported billing currencies."""

    KES = "KES"
    USD = "USD"


class Frequency(str, Enum):
    """How often a subscription renews."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def days(self) -> int:
        """Fixed number of days between renewals."""
        return RENEWAL_PERIOD_DAYS[self]

    @property
    def monthly_factor(self) -> float:
        """Multiplier turning one charge into a 30-day equivalent."""
        return 30 / self.days


RENEWAL_PERIOD_DAYS = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
    Frequency.MONTHLY: 30,
    Frequency.YEARLY: 365,
}


class Category(str, Enum):
    """Spending category of a subscription."""

    SPORTS = "sports"
    ENTERTAINMENT = "entertainment"
    TRANSPORT = "transport"
    EDUCATION = "education"
    HEALTH = "health"
    OTHER = "other"


class PaymentMethod(str, Enum):
    """How a subscription is paid."""

    CARD = "card"
    BANK = "bank"
    CASH = "cash"
    MNO = "mno"  # mobile network operator (mobile money)


class SubscriptionStatus(str, Enum):
    """Lifecycle status of a subscription."""

    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
