"""Service layer package."""

from vocab_trainer.services.daily_task import TaskAssembler
from vocab_trainer.services.learner_settings import LearnerSettingsService
from vocab_trainer.services.ledger import DailyLedgerService
from vocab_trainer.services.llm_service import LLMService
from vocab_trainer.services.progress import ProgressService
from vocab_trainer.services.reminder import ReminderService
from vocab_trainer.services.word_source import WordSource

__all__ = [
    "DailyLedgerService",
    "LLMService",
    "LearnerSettingsService",
    "ProgressService",
    "ReminderService",
    "TaskAssembler",
    "WordSource",
]
