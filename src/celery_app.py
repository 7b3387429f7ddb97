"""Celery application configuration."""

from celery import Celery
from celery.schedules import crontab

from src.config import get_settings

settings = get_settings()

app = Celery(
    "subscription_tracker",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["src.tasks.reminders"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,  # 4 minutes soft limit
    beat_schedule={
        "send-renewal-reminders": {
            "task": "src.tasks.reminders.send_renewal_reminders",
            "schedule": crontab(hour=8, minute=0),
        },
        "send-monthly-reports": {
            "task": "src.tasks.reminders.send_monthly_reports",
            "schedule": crontab(day_of_month=1, hour=9, minute=0),
        },
    },
)
