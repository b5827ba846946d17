"""Pydantic models for the daily reminder trigger."""
from __future__ import annotations

from vocab_trainer.schemas.base import CamelModel


class ReminderResult(CamelModel):
    success: bool = True
    message: str
    new_words: list[str]
    review_count: int
