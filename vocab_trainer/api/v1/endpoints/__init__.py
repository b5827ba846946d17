"""API endpoint modules for v1."""

from vocab_trainer.api.v1.endpoints import (
    daily_task,
    learner_settings,
    progress,
    reminders,
    tutor,
)

__all__ = [
    "daily_task",
    "learner_settings",
    "progress",
    "reminders",
    "tutor",
]
