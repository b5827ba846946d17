"""Endpoint for learner preferences."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from vocab_trainer.api.deps import get_learner_settings_service
from vocab_trainer.schemas import SettingsUpdateRequest, SettingsUpdateResponse
from vocab_trainer.services.learner_settings import LearnerSettingsService
from vocab_trainer.utils.exceptions import (
    UpstreamUnavailable,
    ValidationError,
    handle_upstream_error,
    handle_validation_error,
)


router = APIRouter(tags=["settings"])


@router.post("/updateSettings", response_model=SettingsUpdateResponse)
def update_settings(
    *,
    payload: SettingsUpdateRequest,
    service: LearnerSettingsService = Depends(get_learner_settings_service),
) -> SettingsUpdateResponse:
    """Change the number of new words introduced per day."""

    try:
        updated = service.update(payload.daily_goal)
    except ValidationError as exc:
        raise handle_validation_error(exc) from exc
    except UpstreamUnavailable as exc:
        raise handle_upstream_error(exc, "Failed to update settings") from exc
    return SettingsUpdateResponse(settings=updated)
