"""Endpoint recording review outcomes."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from vocab_trainer.api.deps import get_progress_service
from vocab_trainer.schemas import ReviewRequest, ReviewResponse
from vocab_trainer.services.progress import ProgressService
from vocab_trainer.utils.exceptions import (
    UpstreamUnavailable,
    ValidationError,
    handle_upstream_error,
    handle_validation_error,
)


router = APIRouter(tags=["progress"])


@router.post("/updateProgress", response_model=ReviewResponse)
def update_progress(
    *,
    payload: ReviewRequest,
    service: ProgressService = Depends(get_progress_service),
) -> ReviewResponse:
    """Grade a review and return the rescheduled progress record."""

    try:
        record = service.submit_review(
            item_key=payload.item_key,
            quality=payload.quality,
            translation=payload.translation,
            example_sentence=payload.example_sentence,
        )
    except ValidationError as exc:
        raise handle_validation_error(exc) from exc
    except UpstreamUnavailable as exc:
        raise handle_upstream_error(exc, "Failed to update progress") from exc
    return ReviewResponse(new_progress=record)
