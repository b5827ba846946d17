"""Shared API dependencies."""
from __future__ import annotations

import secrets

from fastapi import Depends, Header

from vocab_trainer.config import settings
from vocab_trainer.db.store import KeyValueStore, get_store
from vocab_trainer.services.daily_task import TaskAssembler
from vocab_trainer.services.learner_settings import LearnerSettingsService
from vocab_trainer.services.ledger import DailyLedgerService
from vocab_trainer.services.progress import ProgressService
from vocab_trainer.services.reminder import ReminderService, build_reminder_service
from vocab_trainer.services.word_source import WordSource, build_word_source
from vocab_trainer.utils.exceptions import (
    NotConfigured,
    Unauthorized,
    handle_not_configured,
    handle_unauthorized,
)

_word_source_singleton: WordSource | None = None


def get_kv_store() -> KeyValueStore:
    """Return the process-wide progress store."""

    return get_store()


def get_learner_id() -> str:
    """Return the learner whose records the request operates on."""

    return settings.LEARNER_ID


def get_word_source() -> WordSource:
    """Return a cached word source bound to the configured LLM providers."""

    global _word_source_singleton
    if _word_source_singleton is None:
        _word_source_singleton = build_word_source()
    return _word_source_singleton


def get_ledger_service(
    store: KeyValueStore = Depends(get_kv_store),
    learner_id: str = Depends(get_learner_id),
) -> DailyLedgerService:
    return DailyLedgerService(store, learner_id=learner_id)


def get_progress_service(
    store: KeyValueStore = Depends(get_kv_store),
    learner_id: str = Depends(get_learner_id),
    ledger: DailyLedgerService = Depends(get_ledger_service),
) -> ProgressService:
    return ProgressService(store, learner_id=learner_id, ledger=ledger)


def get_learner_settings_service(
    store: KeyValueStore = Depends(get_kv_store),
    learner_id: str = Depends(get_learner_id),
) -> LearnerSettingsService:
    return LearnerSettingsService(store, learner_id=learner_id)


def get_task_assembler(
    progress: ProgressService = Depends(get_progress_service),
    ledger: DailyLedgerService = Depends(get_ledger_service),
    learner_settings: LearnerSettingsService = Depends(get_learner_settings_service),
    word_source: WordSource = Depends(get_word_source),
) -> TaskAssembler:
    """Assemble the task builder with request-scoped dependencies."""

    return TaskAssembler(
        progress=progress,
        ledger=ledger,
        learner_settings=learner_settings,
        word_source=word_source,
    )


def verify_cron_secret(authorization: str | None = Header(None)) -> None:
    """Require ``Authorization: Bearer <CRON_SECRET>`` on scheduled triggers."""

    try:
        if not settings.CRON_SECRET:
            raise NotConfigured("CRON_SECRET is not configured")
        expected = f"Bearer {settings.CRON_SECRET}"
        if not authorization or not secrets.compare_digest(authorization, expected):
            raise Unauthorized("Invalid scheduled trigger token")
    except NotConfigured as exc:
        raise handle_not_configured(exc) from exc
    except Unauthorized as exc:
        raise handle_unauthorized(exc) from exc


def get_reminder_service(
    store: KeyValueStore = Depends(get_kv_store),
    learner_id: str = Depends(get_learner_id),
    word_source: WordSource = Depends(get_word_source),
) -> ReminderService:
    try:
        return build_reminder_service(store, learner_id=learner_id, word_source=word_source)
    except NotConfigured as exc:
        raise handle_not_configured(exc) from exc


__all__ = [
    "get_kv_store",
    "get_learner_id",
    "get_learner_settings_service",
    "get_ledger_service",
    "get_progress_service",
    "get_reminder_service",
    "get_task_assembler",
    "get_word_source",
    "verify_cron_secret",
]
