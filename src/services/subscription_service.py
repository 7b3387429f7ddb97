"""Subscription lifecycle: renewal/status derivation and owner-checked CRUD."""

import logging
from datetime import UTC, date, datetime, timedelta

from sqlalchemy.orm import Session

from src.dates import ensure_utc
from src.exceptions import ConflictError, NotFoundError, ValidationError
from src.models.enums import Frequency, SubscriptionStatus
from src.models.subscription import Subscription
from src.models.user import User
from src.schemas.subscription import SubscriptionCreate, SubscriptionUpdate
from src.services.authorization import authorize_owner

logger = logging.getLogger(__name__)


def derive_renewal(start_date: datetime, frequency: Frequency) -> datetime:
    """Next renewal: start date plus the frequency's fixed day count."""
    return start_date + timedelta(days=Frequency(frequency).days)


def derive_status(
    explicit_status: SubscriptionStatus | None,
    renewal_date: datetime | None,
    now: datetime,
) -> SubscriptionStatus:
    """Resolve the status to store.

    An explicit status always wins. Without one, a renewal date that is not
    after ``now`` means the subscription has expired.
    """
    if explicit_status is not None:
        return SubscriptionStatus(explicit_status)
    if renewal_date is not None and ensure_utc(renewal_date) <= ensure_utc(now):
        return SubscriptionStatus.EXPIRED
    return SubscriptionStatus.ACTIVE


def monthly_equivalent(subscription: Subscription) -> float:
    """Cost of a subscription over a 30-day month."""
    return subscription.price * Frequency(subscription.frequency).monthly_factor


class SubscriptionService:
    """Service for subscription lifecycle operations."""

    def __init__(self, db: Session):
        self.db = db

    def _now(self) -> datetime:
        return datetime.now(UTC)

    def _check_start_date(self, start_date: datetime) -> None:
        if ensure_utc(start_date) > self._now():
            raise ValidationError("Start date must be in the past")

    def _apply_derived_fields(self, subscription: Subscription) -> None:
        """Recompute renewal date and status before a write."""
        start_date = ensure_utc(subscription.start_date)
        subscription.start_date = start_date
        subscription.renewal_date = derive_renewal(start_date, subscription.frequency)
        subscription.status = derive_status(
            subscription.status, subscription.renewal_date, self._now()
        )

    def _get_owned(self, subscription_id: int, caller_id: int) -> Subscription:
        subscription = self.get(subscription_id)
        authorize_owner(subscription.user_id, caller_id)
        return subscription

    def create(self, owner_id: int, data: SubscriptionCreate) -> Subscription:
        """Create a subscription owned by ``owner_id``."""
        self._check_start_date(data.start_date)
        existing = (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == owner_id,
                Subscription.name == data.name,
                Subscription.status == SubscriptionStatus.ACTIVE,
            )
            .first()
        )
        if existing:
            raise ConflictError("Subscription with this name already exists")

        subscription = Subscription(
            name=data.name,
            price=data.price,
            currency=data.currency,
            frequency=data.frequency,
            category=data.category,
            payment_method=data.payment_method,
            status=SubscriptionStatus.ACTIVE,
            start_date=data.start_date,
            user_id=owner_id,
        )
        self._apply_derived_fields(subscription)

        self.db.add(subscription)
        self.db.commit()
        self.db.refresh(subscription)
        logger.info(f"Created subscription {subscription.id} for user {owner_id}")
        return subscription

    def get(self, subscription_id: int) -> Subscription:
        """Get a subscription by id."""
        subscription = (
            self.db.query(Subscription).filter(Subscription.id == subscription_id).first()
        )
        if not subscription:
            raise NotFoundError("Subscription not found")
        return subscription

    def list_all(self) -> list[Subscription]:
        """Every subscription, regardless of owner."""
        return self.db.query(Subscription).order_by(Subscription.id).all()

    def list_by_user(self, owner_id: int, caller_id: int) -> list[Subscription]:
        """All subscriptions of ``owner_id``; the caller must be that owner."""
        authorize_owner(owner_id, caller_id)
        return (
            self.db.query(Subscription)
            .filter(Subscription.user_id == owner_id)
            .order_by(Subscription.id)
            .all()
        )

    def update(
        self, subscription_id: int, caller_id: int, data: SubscriptionUpdate
    ) -> Subscription:
        """Overwrite the owner-controlled fields and re-derive the renewal date."""
        subscription = self._get_owned(subscription_id, caller_id)
        self._check_start_date(data.start_date)

        subscription.name = data.name
        subscription.price = data.price
        subscription.frequency = data.frequency
        subscription.category = data.category
        subscription.payment_method = data.payment_method
        subscription.start_date = data.start_date
        self._apply_derived_fields(subscription)

        self.db.commit()
        self.db.refresh(subscription)
        logger.info(f"Updated subscription {subscription.id}")
        return subscription

    def cancel(self, subscription_id: int, caller_id: int) -> Subscription:
        """Move a subscription to the terminal cancelled status."""
        subscription = self._get_owned(subscription_id, caller_id)

        subscription.status = SubscriptionStatus.CANCELLED
        self.db.commit()
        self.db.refresh(subscription)
        logger.info(f"Cancelled subscription {subscription.id}")
        return subscription

    def delete(self, subscription_id: int, caller_id: int) -> None:
        """Permanently remove a subscription."""
        subscription = self._get_owned(subscription_id, caller_id)

        self.db.delete(subscription)
        self.db.commit()
        logger.info(f"Deleted subscription {subscription_id}")

    def upcoming_renewals(self, owner_id: int, caller_id: int) -> list[Subscription]:
        """Active subscriptions of the owner whose renewal date is still ahead."""
        authorize_owner(owner_id, caller_id)
        now = self._now()
        active = (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == owner_id,
                Subscription.status == SubscriptionStatus.ACTIVE,
            )
            .order_by(Subscription.renewal_date)
            .all()
        )
        return [s for s in active if s.renewal_date and ensure_utc(s.renewal_date) > now]

    def due_for_reminder(
        self, today: date, days_before: list[int]
    ) -> list[tuple[Subscription, int]]:
        """Active subscriptions renewing exactly N days after ``today`` for N in ``days_before``.

        Returns ``(subscription, days_left)`` pairs.
        """
        wanted = set(days_before)
        due = []
        active = (
            self.db.query(Subscription)
            .filter(Subscription.status == SubscriptionStatus.ACTIVE)
            .all()
        )
        for subscription in active:
            if not subscription.renewal_date:
                continue
            days_left = (ensure_utc(subscription.renewal_date).date() - today).days
            if days_left in wanted:
                due.append((subscription, days_left))
        return due

    def monthly_report(self, user: User, year: int, month: int) -> dict:
        """Summarize a user's subscriptions for one calendar month.

        Only subscriptions created before the month ended count towards the
        active list and ``total_spent``.

        Returns:
            {
                "month": int,
                "year": int,
                "total_spent": float,
                "savings": float,
                "new_subscriptions": int,
                "cancelled_subscriptions": int,
                "subscriptions": [{"name", "amount", "currency", "category"}],
            }
        """
        month_start = datetime(year, month, 1, tzinfo=UTC)
        next_month = datetime(year + month // 12, month % 12 + 1, 1, tzinfo=UTC)

        def in_month(value: datetime | None) -> bool:
            return value is not None and month_start <= ensure_utc(value) < next_month

        subscriptions = (
            self.db.query(Subscription)
            .filter(Subscription.user_id == user.id)
            .order_by(Subscription.id)
            .all()
        )
        active = [
            s
            for s in subscriptions
            if s.status == SubscriptionStatus.ACTIVE and ensure_utc(s.created_at) < next_month
        ]
        cancelled = [
            s
            for s in subscriptions
            if s.status == SubscriptionStatus.CANCELLED and in_month(s.updated_at)
        ]

        return {
            "month": month,
            "year": year,
            "total_spent": round(sum(monthly_equivalent(s) for s in active), 2),
            "savings": round(sum(monthly_equivalent(s) for s in cancelled), 2),
            "new_subscriptions": sum(1 for s in subscriptions if in_month(s.created_at)),
            "cancelled_subscriptions": len(cancelled),
            "subscriptions": [
                {
                    "name": s.name,
                    "amount": s.price,
                    "currency": s.currency.value,
                    "category": s.category.value,
                }
                for s in active
            ],
        }
