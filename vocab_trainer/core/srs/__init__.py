"""Spaced repetition schedulers."""

from vocab_trainer.core.srs.sm2 import SchedulingState, review

__all__ = ["SchedulingState", "review"]
