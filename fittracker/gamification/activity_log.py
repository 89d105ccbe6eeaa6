"""Activity log entry builders"""

from typing import Any, Optional

from fittracker.gamification.points_system import badge_reason
from fittracker.models.gamification import (
    ActivityLogEntry,
    ActivityLogType,
    ActivityType,
    EarnedBadge,
)


def points_earned_entry(
    user_id: str,
    reason: str,
    points: int,
    metadata: Optional[dict[str, Any]] = None,
) -> ActivityLogEntry:
    return ActivityLogEntry(
        user_id=user_id,
        type=ActivityLogType.POINTS_EARNED,
        description=f"Earned {points} points for {reason.replace('_', ' ')}",
        reason=reason,
        points=points,
        metadata=metadata,
    )


def level_up_entry(user_id: str, old_level: int, new_level: int) -> ActivityLogEntry:
    return ActivityLogEntry(
        user_id=user_id,
        type=ActivityLogType.LEVEL_UP,
        description=f"Reached level {new_level}",
        metadata={"old_level": old_level, "new_level": new_level},
    )


def badge_earned_entry(user_id: str, badge: EarnedBadge) -> ActivityLogEntry:
    return ActivityLogEntry(
        user_id=user_id,
        type=ActivityLogType.BADGE_EARNED,
        description=f"Unlocked badge {badge.name}",
        reason=badge_reason(badge.badge_id),
        points=badge.points,
        badge=badge,
    )


def streak_milestone_entry(
    user_id: str,
    activity: ActivityType,
    milestone: int,
    points: int,
) -> ActivityLogEntry:
    return ActivityLogEntry(
        user_id=user_id,
        type=ActivityLogType.STREAK_MILESTONE,
        description=f"{milestone}-day {activity.value} streak",
        reason=f"streak_{milestone}_days",
        points=points,
        metadata={"activity": activity.value, "milestone": milestone},
    )
