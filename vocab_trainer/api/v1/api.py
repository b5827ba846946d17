"""API router for version 1."""
from fastapi import APIRouter

from vocab_trainer.api.v1.endpoints import (
    daily_task,
    learner_settings,
    progress,
    reminders,
    tutor,
)


api_router = APIRouter()
api_router.include_router(daily_task.router)
api_router.include_router(progress.router)
api_router.include_router(learner_settings.router)
api_router.include_router(tutor.router)
api_router.include_router(reminders.router)
