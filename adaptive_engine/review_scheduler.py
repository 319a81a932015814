"""
Review Scheduler - Spaced repetition by mastery level.

Intervals (mastery bin -> days until next review):
    [0.00, 0.30) -> 1
    [0.30, 0.50) -> 3
    [0.50, 0.70) -> 7
    [0.70, 0.85) -> 14
    [0.85, 1.00] -> 30
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .clock import days_between, resolve_now
from .config import EngineConfig

log = logging.getLogger(__name__)


class ReviewScheduler:
    """Maps mastery to the next review date."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def interval_days(self, mastery: float) -> int:
        """Base interval for a mastery value (bins are lower-inclusive)."""
        intervals = self.config.review_intervals
        for upper, days in intervals[:-1]:
            if mastery < upper:
                return days
        return intervals[-1][1]

    def schedule_review(self, mastery: float, last_review_date: Optional[datetime] = None,
                        now: Optional[datetime] = None) -> datetime:
        """
        Next review date for a skill.

        Args:
            mastery: Current mastery, 0.0 to 1.0
            last_review_date: When the skill was last reviewed, if ever
            now: Reference time, defaults to the current UTC time

        Returns:
            now + interval days
        """
        now = resolve_now(now)
        days = self.interval_days(mastery)

        if last_review_date is not None:
            elapsed = days_between(last_review_date, now)
            if elapsed < days:
                # Never sooner than one day past the last review
                days = max(days, elapsed + 1)

        log.debug("review in %d days (mastery %.2f)", days, mastery)
        return now + timedelta(days=days)
