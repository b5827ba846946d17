"""Pydantic models for learner settings."""
from __future__ import annotations

from pydantic import ConfigDict, StrictInt

from vocab_trainer.schemas.base import CamelModel


class LearnerSettings(CamelModel):
    """Per-learner preferences.

    Keys other than ``dailyGoal`` found in the stored mapping are kept and
    returned as-is.
    """

    model_config = ConfigDict(extra="allow")

    daily_goal: int = 1


class SettingsUpdateRequest(CamelModel):
    """Payload for changing the daily new-word goal."""

    daily_goal: StrictInt


class SettingsUpdateResponse(CamelModel):
    success: bool = True
    settings: LearnerSettings
