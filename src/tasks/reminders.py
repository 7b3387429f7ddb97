"""Celery tasks for renewal reminders and monthly reports."""

import logging
from datetime import UTC, date, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.celery_app import app as celery_app
from src.config import get_settings
from src.database import SessionLocal
from src.models import Subscription, User
from src.services.email_service import EmailService, get_email_service
from src.services.email_templates import NotificationEvent
from src.services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)


def send_due_reminders(
    db: Session,
    mailer: EmailService,
    today: date,
    days_before: list[int],
) -> dict:
    """Email the owner of every active subscription renewing in one of ``days_before`` days."""
    stats = {"due": 0, "sent": 0, "failed": 0}

    for subscription, days_left in SubscriptionService(db).due_for_reminder(today, days_before):
        stats["due"] += 1
        user = subscription.user
        sent = mailer.dispatch_quietly(
            NotificationEvent.REMINDER,
            user.email,
            user_name=user.name,
            subscription={
                "name": subscription.name,
                "amount": subscription.price,
                "currency": subscription.currency.value,
                "category": subscription.category.value,
                "renewal_date": subscription.renewal_date,
                "days_left": days_left,
            },
        )
        stats["sent" if sent else "failed"] += 1

    logger.info(f"Renewal reminders for {today}: {stats}")
    return stats


def previous_month(today: date) -> tuple[int, int]:
    """(year, month) of the calendar month before ``today``."""
    if today.month == 1:
        return today.year - 1, 12
    return today.year, today.month - 1


def send_reports_for_month(db: Session, mailer: EmailService, year: int, month: int) -> dict:
    """Email a monthly report to every user who has subscriptions."""
    stats = {"users": 0, "sent": 0, "failed": 0}
    service = SubscriptionService(db)

    users = (
        db.query(User)
        .filter(User.id.in_(select(Subscription.user_id).distinct()))
        .order_by(User.id)
        .all()
    )
    for user in users:
        stats["users"] += 1
        report = service.monthly_report(user, year, month)
        sent = mailer.dispatch_quietly(
            NotificationEvent.MONTHLY_REPORT,
            user.email,
            user_name=user.name,
            report=report,
        )
        stats["sent" if sent else "failed"] += 1

    logger.info(f"Monthly reports for {year}-{month:02d}: {stats}")
    return stats


@celery_app.task
def send_renewal_reminders() -> dict:
    """Send reminder emails for upcoming renewals.

    This task runs daily via celery-beat.

    Returns:
        dict with processing statistics
    """
    db: Session = SessionLocal()

    try:
        return send_due_reminders(
            db,
            get_email_service(),
            datetime.now(UTC).date(),
            get_settings().reminder_days,
        )
    except Exception as e:
        logger.error(f"Error sending renewal reminders: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}
    finally:
        db.close()


@celery_app.task
def send_monthly_reports() -> dict:
    """Send last month's spending report to every user with subscriptions.

    This task runs on the first day of each month via celery-beat.
    """
    db: Session = SessionLocal()
    year, month = previous_month(datetime.now(UTC).date())

    try:
        return send_reports_for_month(db, get_email_service(), year, month)
    except Exception as e:
        logger.error(f"Error sending monthly reports: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}
    finally:
        db.close()
