"""Pydantic models for free-form tutor questions."""
from __future__ import annotations

from pydantic import BaseModel, Field


class TutorQuestion(BaseModel):
    question: str = Field(..., min_length=1, max_length=2000)


class TutorAnswer(BaseModel):
    answer: str
