"""Endpoint serving the learner's daily task."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from vocab_trainer.api.deps import get_task_assembler
from vocab_trainer.schemas import DailyTask
from vocab_trainer.services.daily_task import TaskAssembler
from vocab_trainer.utils.exceptions import UpstreamUnavailable, handle_upstream_error


router = APIRouter(tags=["daily-task"])


@router.get("/dailyTask", response_model=DailyTask)
def get_daily_task(
    *,
    assembler: TaskAssembler = Depends(get_task_assembler),
) -> DailyTask:
    """Return owed new words followed by every review due today."""

    try:
        return assembler.get_daily_task()
    except UpstreamUnavailable as exc:
        raise handle_upstream_error(exc, "Failed to load daily task") from exc
