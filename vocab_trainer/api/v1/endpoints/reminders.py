"""Scheduled trigger sending the daily reminder email."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from vocab_trainer.api.deps import get_reminder_service, verify_cron_secret
from vocab_trainer.schemas import ReminderResult
from vocab_trainer.services.reminder import ReminderService
from vocab_trainer.utils.exceptions import UpstreamUnavailable, handle_upstream_error


router = APIRouter(tags=["reminders"])


@router.get(
    "/dailyReminder",
    response_model=ReminderResult,
    dependencies=[Depends(verify_cron_secret)],
)
def send_daily_reminder(
    *,
    service: ReminderService = Depends(get_reminder_service),
) -> ReminderResult:
    """Email today's new words and reviews; called by the scheduler."""

    try:
        return service.send_daily_reminder()
    except UpstreamUnavailable as exc:
        raise handle_upstream_error(exc, "Failed to send reminder") from exc
