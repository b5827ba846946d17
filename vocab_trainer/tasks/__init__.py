"""Celery tasks package."""

from vocab_trainer.tasks import reminders

__all__ = ["reminders"]
