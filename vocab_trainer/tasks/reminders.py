"""Celery task emailing the learner's daily reminder."""
from __future__ import annotations

from typing import Any

from loguru import logger

from vocab_trainer.celery_app import celery_app
from vocab_trainer.config import settings
from vocab_trainer.db.store import get_store
from vocab_trainer.services.reminder import build_reminder_service
from vocab_trainer.services.word_source import build_word_source


@celery_app.task(name="vocab_trainer.tasks.reminders.send_daily_reminder")
def send_daily_reminder(learner_id: str | None = None) -> dict[str, Any]:
    """Assemble today's task for the learner and email the digest."""

    learner_id = learner_id or settings.LEARNER_ID
    service = build_reminder_service(
        get_store(), learner_id=learner_id, word_source=build_word_source()
    )
    result = service.send_daily_reminder()
    logger.info("Daily reminder task finished", learner_id=learner_id, new_words=result.new_words)
    return result.model_dump(mode="json", by_alias=True)
