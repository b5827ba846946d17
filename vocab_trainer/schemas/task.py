"""Pydantic models for the assembled daily task."""
from __future__ import annotations

from typing import Literal

from pydantic import Field

from vocab_trainer.schemas.base import CamelModel
from vocab_trainer.schemas.learner_settings import LearnerSettings
from vocab_trainer.schemas.ledger import LedgerEntry
from vocab_trainer.schemas.progress import ProgressRecord
from vocab_trainer.schemas.word import Explanation


class TaskItem(CamelModel):
    """A single card in the daily queue."""

    kind: Literal["new", "review"]
    item_key: str
    translation: str
    example_sentence: str | None = None
    explanation: Explanation | None = None


class DailyTask(CamelModel):
    """Everything the client needs to run today's session."""

    review_queue: list[TaskItem] = Field(default_factory=list)
    new_item_tasks: list[TaskItem] = Field(default_factory=list)
    queue: list[TaskItem] = Field(default_factory=list)
    all_learned_words: list[ProgressRecord] = Field(default_factory=list)
    settings: LearnerSettings
    words_learned_today: list[LedgerEntry] = Field(default_factory=list)
