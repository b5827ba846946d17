"""Payloads produced by the word source."""
from __future__ import annotations

from pydantic import Field

from vocab_trainer.schemas.base import CamelModel


class NewWord(CamelModel):
    """A candidate vocabulary item and its translation."""

    term: str = Field(..., min_length=1)
    translation: str = Field(..., min_length=1)


class Explanation(CamelModel):
    """Tutor explanation shown alongside a new word."""

    explanation: str
    example_sentence: str = ""
    example_translation: str = ""
    tip: str = ""
