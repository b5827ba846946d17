"""Pydantic models for learner progress."""
from __future__ import annotations

from datetime import date

from pydantic import Field, field_validator

from vocab_trainer.core.srs.sm2 import MIN_EASE_FACTOR, SchedulingState
from vocab_trainer.schemas.base import CamelModel


class ProgressRecord(CamelModel):
    """Scheduling record for one vocabulary item."""

    item_key: str = Field(..., min_length=1)
    translation: str
    example_sentence: str | None = None
    repetitions: int = Field(0, ge=0)
    interval_days: int = Field(1, ge=1)
    ease_factor: float = Field(2.5, ge=MIN_EASE_FACTOR)
    next_review_date: date

    def scheduling_state(self) -> SchedulingState:
        return SchedulingState(
            repetitions=self.repetitions,
            interval_days=self.interval_days,
            ease_factor=self.ease_factor,
            next_review_date=self.next_review_date,
        )

    def is_due(self, today: date) -> bool:
        return self.next_review_date <= today


class ReviewRequest(CamelModel):
    """Payload for submitting a review outcome."""

    item_key: str = Field(..., min_length=1)
    quality: int = Field(..., ge=0, le=5, description="3 = forgot, 4 = hard, 5 = easy")
    translation: str | None = None
    example_sentence: str | None = None

    @field_validator("item_key")
    @classmethod
    def strip_item_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("itemKey must not be blank")
        return value

    @field_validator("translation", "example_sentence")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class ReviewResponse(CamelModel):
    """Response after scheduling a review."""

    success: bool = True
    new_progress: ProgressRecord
