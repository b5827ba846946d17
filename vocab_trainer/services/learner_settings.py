"""Learner settings persistence."""
from __future__ import annotations

from typing import Sequence

from loguru import logger

from vocab_trainer.config import settings
from vocab_trainer.db.store import KeyValueStore, settings_key
from vocab_trainer.schemas.learner_settings import LearnerSettings
from vocab_trainer.utils.exceptions import ValidationError


class LearnerSettingsService:
    """Read and update the settings singleton of a learner."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        learner_id: str,
        goal_choices: Sequence[int] | None = None,
        default_goal: int | None = None,
    ) -> None:
        self.store = store
        self.learner_id = learner_id
        self.goal_choices = tuple(goal_choices or settings.DAILY_GOAL_CHOICES)
        self.default_goal = default_goal or settings.DEFAULT_DAILY_GOAL

    def get(self) -> LearnerSettings:
        raw = self.store.get(settings_key(self.learner_id)) or {}
        daily_goal = raw.get("dailyGoal")
        if not self._is_allowed(daily_goal):
            daily_goal = self.default_goal
        return LearnerSettings.model_validate({**raw, "dailyGoal": daily_goal})

    def _is_allowed(self, daily_goal: object) -> bool:
        return (
            isinstance(daily_goal, int)
            and not isinstance(daily_goal, bool)
            and daily_goal in self.goal_choices
        )

    def update(self, daily_goal: int) -> LearnerSettings:
        """Persist a new daily goal, keeping any other stored keys."""

        if not self._is_allowed(daily_goal):
            raise ValidationError(
                "Invalid daily goal value.",
                {"daily_goal": daily_goal, "allowed": list(self.goal_choices)},
            )

        current = self.store.get(settings_key(self.learner_id)) or {}
        merged = {**current, "dailyGoal": daily_goal}
        self.store.set(settings_key(self.learner_id), merged)
        logger.info("Learner settings updated", learner_id=self.learner_id, daily_goal=daily_goal)
        return LearnerSettings.model_validate(merged)
