"""Pydantic schemas package."""

from vocab_trainer.schemas.learner_settings import (
    LearnerSettings,
    SettingsUpdateRequest,
    SettingsUpdateResponse,
)
from vocab_trainer.schemas.ledger import DailyLedger, LedgerEntry
from vocab_trainer.schemas.progress import ProgressRecord, ReviewRequest, ReviewResponse
from vocab_trainer.schemas.reminder import ReminderResult
from vocab_trainer.schemas.task import DailyTask, TaskItem
from vocab_trainer.schemas.tutor import TutorAnswer, TutorQuestion
from vocab_trainer.schemas.word import Explanation, NewWord

__all__ = [
    "DailyLedger",
    "DailyTask",
    "Explanation",
    "LearnerSettings",
    "LedgerEntry",
    "NewWord",
    "ProgressRecord",
    "ReminderResult",
    "ReviewRequest",
    "ReviewResponse",
    "SettingsUpdateRequest",
    "SettingsUpdateResponse",
    "TaskItem",
    "TutorAnswer",
    "TutorQuestion",
]
