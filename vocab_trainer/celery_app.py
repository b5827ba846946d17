"""Celery application instance and configuration."""
from __future__ import annotations

from celery import Celery
from celery.schedules import crontab

from vocab_trainer.config import settings

DEFAULT_BROKER_URL = "redis://localhost:6379/0"


def _resolve_broker_url() -> str:
    if settings.CELERY_BROKER_URL is not None:
        return str(settings.CELERY_BROKER_URL)
    if settings.REDIS_URL is not None:
        return str(settings.REDIS_URL)
    return DEFAULT_BROKER_URL


def _resolve_result_backend() -> str:
    if settings.CELERY_RESULT_BACKEND is not None:
        return str(settings.CELERY_RESULT_BACKEND)
    return _resolve_broker_url()


celery_app = Celery(
    "vocab_trainer",
    broker=_resolve_broker_url(),
    backend=_resolve_result_backend(),
    include=["vocab_trainer.tasks.reminders"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=10 * 60,
    task_soft_time_limit=5 * 60,
    worker_prefetch_multiplier=1,
)

celery_app.conf.beat_schedule = {
    "send-daily-reminder": {
        "task": "vocab_trainer.tasks.reminders.send_daily_reminder",
        "schedule": crontab(hour=8, minute=0),
    },
}

__all__ = ["celery_app"]
