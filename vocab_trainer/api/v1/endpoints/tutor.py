"""Endpoint for free-form questions to the AI tutor."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from vocab_trainer.api.deps import get_word_source
from vocab_trainer.schemas import TutorAnswer, TutorQuestion
from vocab_trainer.services.word_source import WordSource
from vocab_trainer.utils.exceptions import (
    UpstreamUnavailable,
    ValidationError,
    handle_upstream_error,
    handle_validation_error,
)


router = APIRouter(tags=["tutor"])


@router.post("/askTutor", response_model=TutorAnswer)
def ask_tutor(
    *,
    payload: TutorQuestion,
    word_source: WordSource = Depends(get_word_source),
) -> TutorAnswer:
    try:
        if not payload.question.strip():
            raise ValidationError("Question is required.")
        answer = word_source.answer_question(payload.question)
    except ValidationError as exc:
        raise handle_validation_error(exc) from exc
    except UpstreamUnavailable as exc:
        raise handle_upstream_error(exc, "Failed to get an answer from the AI tutor.") from exc
    return TutorAnswer(answer=answer)
