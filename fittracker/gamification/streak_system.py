"""
Daily Streak Tracking System

Tracks consecutive-day streaks for each activity type:
- workout
- nutrition
- hydration
- overall (all three active at once, the minimum of the three)

Rules:
- Success on the day after the last success continues the streak
- Success on the same day as the last success changes nothing
- Success after a longer gap restarts the streak at 1
- A reported failure resets the streak to 0 immediately
- Milestones (7, 30, 100) fire only on the transition that reaches them
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Union
import logging

from fittracker.exceptions import ValidationError
from fittracker.gamification.points_system import STREAK_MILESTONES
from fittracker.models.gamification import StreakRecord, utcnow

logger = logging.getLogger(__name__)


@dataclass
class StreakTransition:
    """Result of applying one report to a streak record"""
    old_streak: int
    new_streak: int
    milestones: List[int] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.old_streak != self.new_streak


def parse_activity_date(value: Union[date, datetime, str]) -> date:
    """
    Normalize a caller-supplied logical date

    Accepts date, datetime or a 'YYYY-MM-DD' string (an ISO timestamp is cut
    to its date part).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise ValidationError(
            message="Activity date must be in YYYY-MM-DD format",
            field="date",
            value=value,
            cause=e,
        )


def crossed_milestones(old_streak: int, new_streak: int) -> List[int]:
    """Milestones reached by moving from old_streak to new_streak"""
    return [m for m in sorted(STREAK_MILESTONES) if old_streak < m <= new_streak]


def apply_streak_update(record: StreakRecord, activity_date: date, success: bool) -> StreakTransition:
    """
    Apply one success/failure report to a streak record in place

    Args:
        record: Streak record to update
        activity_date: Logical calendar date of the report
        success: Whether the activity goal was met

    Returns:
        StreakTransition with old/new values and milestones crossed
    """
    old_streak = record.current_streak
    last_date = record.last_activity_date

    if not success:
        record.current_streak = 0
        record.is_active = False
        record.updated_at = utcnow()
        return StreakTransition(old_streak, 0)

    # First activity, or restarting after a reported failure
    if last_date is None or old_streak == 0:
        record.current_streak = 1
        record.last_activity_date = activity_date

    # Already counted for this day
    elif last_date == activity_date:
        pass

    # Report for a day before the last counted one
    elif activity_date < last_date:
        logger.warning(
            f"Ignoring out-of-order {record.type.value} streak report for {activity_date} "
            f"(last counted {last_date})"
        )

    # Next calendar day
    elif (activity_date - last_date).days == 1:
        record.current_streak += 1
        record.last_activity_date = activity_date

    # Gap of more than one day
    else:
        gap_days = (activity_date - last_date).days
        logger.debug(f"{record.type.value} streak restarted after {gap_days} days (was {old_streak})")
        record.current_streak = 1
        record.last_activity_date = activity_date

    record.is_active = True
    record.updated_at = utcnow()

    if record.current_streak > record.longest_streak:
        record.longest_streak = record.current_streak

    return StreakTransition(old_streak, record.current_streak, crossed_milestones(old_streak, record.current_streak))
