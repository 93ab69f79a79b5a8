"""
Scoring tables for daily boards and events.

Pure lookups: every function is total over its inputs and has no side effects.
"""

from datetime import date
from typing import Iterable, Optional

from src.config import (
    DAILY_POINTS,
    BONUS_WEEKDAY,
    BONUS_DAY_MULTIPLIER,
    EVENT_POINTS_BASE,
    EVENT_POINTS_STEP,
    EVENT_MAX_SCORING_RANK,
)


def daily_points(rank: Optional[int], is_bonus_day: bool = False) -> int:
    """Points for a daily finish; doubled on the weekly bonus day."""
    base = DAILY_POINTS.get(rank, 0)
    if not base:
        return 0
    return base * BONUS_DAY_MULTIPLIER if is_bonus_day else base


def event_points(rank: Optional[int]) -> int:
    """
    Points for an event finish.

    Linear from 60 (rank 1) down to 4 (rank 15). Rank 0 is the "All arenas"
    aggregate row and scores nothing, like every rank outside 1-15.
    """
    if rank is None or rank < 1 or rank > EVENT_MAX_SCORING_RANK:
        return 0
    return EVENT_POINTS_BASE - rank * EVENT_POINTS_STEP


def is_bonus_day(date_str: str) -> bool:
    """True if the ISO date falls on the bonus weekday (Saturday)."""
    return date.fromisoformat(date_str).weekday() == BONUS_WEEKDAY


def to_day_index(date_str: str) -> int:
    return date.fromisoformat(date_str).toordinal()


def compute_streak_length(dates: Iterable[str]) -> int:
    """
    Longest run of consecutive calendar days in a collection of ISO dates.

    Duplicates collapse; an empty collection has a streak of 0.
    """
    day_indexes = sorted({to_day_index(d) for d in dates})
    if not day_indexes:
        return 0

    longest = 1
    current = 1
    for prev_idx, curr_idx in zip(day_indexes, day_indexes[1:]):
        if curr_idx - prev_idx == 1:
            current += 1
        else:
            current = 1
        longest = max(longest, current)
    return longest
