"""SM-2 spaced repetition scheduler.

Grades run from 0 to 5. Anything below ``PASSING_QUALITY`` counts as a lapse:
the repetition streak and the interval reset while the ease factor is kept.
A pass grows the interval 1 -> 6 -> ``ceil(previous * ease)`` and then nudges
the ease factor with the classic SM-2 delta, never below ``MIN_EASE_FACTOR``.
Clients currently emit only 3 (forgot), 4 (hard) and 5 (easy).
"""
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 4

MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
DEFAULT_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6

# Float products are rounded before ceil so representation error never adds a day.
_PRODUCT_PRECISION = 9
_EASE_PRECISION = 6


@dataclass(slots=True, frozen=True)
class SchedulingState:
    """Scheduling fields of a progress record."""

    repetitions: int = 0
    interval_days: int = DEFAULT_INTERVAL_DAYS
    ease_factor: float = DEFAULT_EASE_FACTOR
    next_review_date: dt.date | None = None


def update_ease_factor(ease_factor: float, quality: int) -> float:
    """Return the SM-2 adjusted ease factor, floored at ``MIN_EASE_FACTOR``.

    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
    """
    penalty = MAX_QUALITY - quality
    new_ef = ease_factor + (0.1 - penalty * (0.08 + penalty * 0.02))
    return round(max(MIN_EASE_FACTOR, new_ef), _EASE_PRECISION)


def next_interval(repetitions: int, previous_interval: int, ease_factor: float) -> int:
    """Interval in days for the ``repetitions``-th consecutive pass."""

    if repetitions <= 1:
        return DEFAULT_INTERVAL_DAYS
    if repetitions == 2:
        return SECOND_INTERVAL_DAYS
    return max(1, math.ceil(round(previous_interval * ease_factor, _PRODUCT_PRECISION)))


def review(prior: SchedulingState | None, quality: int, today: dt.date) -> SchedulingState:
    """Grade a review and return the next scheduling state.

    Args:
        prior: Current state, or ``None`` for an item never reviewed before.
        quality: Grade between 0 and 5 inclusive.
        today: Calendar day the review happens on.

    Returns:
        The new state with ``next_review_date = today + interval_days``.
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise TypeError("Quality must be an integer")
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise ValueError("Quality must be between 0 and 5 inclusive")

    prior = prior or SchedulingState()
    ease_factor = max(MIN_EASE_FACTOR, prior.ease_factor or DEFAULT_EASE_FACTOR)
    previous_interval = max(1, prior.interval_days or DEFAULT_INTERVAL_DAYS)

    if quality < PASSING_QUALITY:
        repetitions = 0
        interval_days = DEFAULT_INTERVAL_DAYS
    else:
        repetitions = max(0, prior.repetitions) + 1
        interval_days = next_interval(repetitions, previous_interval, ease_factor)
        ease_factor = update_ease_factor(ease_factor, quality)

    return SchedulingState(
        repetitions=repetitions,
        interval_days=interval_days,
        ease_factor=ease_factor,
        next_review_date=today + dt.timedelta(days=interval_days),
    )


__all__ = [
    "DEFAULT_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "PASSING_QUALITY",
    "SchedulingState",
    "next_interval",
    "review",
    "update_ease_factor",
]
