"""
Points System

Point award table and the in-place ledger update applied to a profile.

Point Award Rules:
- Workout exercise completed: 50 (+25 when the whole session ran over 45 minutes)
- Hydration goal met: 20 (+10 when the goal is exceeded by 50%)
- Meal logged: 15
- Daily nutrition goal (3+ meals): 30
- Streak milestones: 100 / 500 / 2000 at 7 / 30 / 100 days
- Badge unlocks: the badge's own bonus
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fittracker.gamification.level_system import calculate_level
from fittracker.models.gamification import ActivityType, GamificationProfile, utcnow

logger = logging.getLogger(__name__)

# Values are shared with stored totals; do not change without a migration
POINT_STRUCTURE = {
    "workout_completed": 50,
    "workout_completed_bonus": 25,  # Extra points for longer workouts
    "hydration_goal_met": 20,
    "hydration_bonus": 10,  # Extra points for exceeding goal
    "meal_logged": 15,
    "daily_nutrition_goal": 30,
    "streak_bonus_7": 100,
    "streak_bonus_30": 500,
    "streak_bonus_100": 2000,
    "profile_completed": 100,
    "first_workout": 200,
    "first_meal_log": 150,
    "first_hydration_log": 100,
}

# Streak length -> (award reason, bonus points)
STREAK_MILESTONES = {
    7: ("streak_7_days", POINT_STRUCTURE["streak_bonus_7"]),
    30: ("streak_30_days", POINT_STRUCTURE["streak_bonus_30"]),
    100: ("streak_100_days", POINT_STRUCTURE["streak_bonus_100"]),
}


@dataclass(frozen=True)
class PointsApplied:
    """Outcome of one ledger update"""
    points: int
    old_total: int
    new_total: int
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


def get_points_for_reason(reason: str) -> int:
    """Point value for a named reason (0 when the reason is unknown)"""
    return POINT_STRUCTURE.get(reason, 0)


def badge_reason(badge_id: str) -> str:
    return f"badge_{badge_id}"


def apply_points(
    profile: GamificationProfile,
    points: int,
    activity: Optional[ActivityType] = None,
) -> PointsApplied:
    """
    Add points to a profile and resolve the level fields

    The amount is trusted as given. When an activity tag is passed the
    matching activity counter is incremented as well.
    """
    old_total = profile.total_points
    old_level = profile.level

    profile.total_points = old_total + points
    level_info = calculate_level(profile.total_points)
    profile.level = level_info.level
    profile.current_level_points = level_info.current_level_points
    profile.next_level_points = level_info.next_level_points
    profile.points_to_next_level = level_info.points_to_next_level

    if activity is not None:
        profile.activity_counts[activity] = profile.activity_counts.get(activity, 0) + 1

    now = utcnow()
    profile.last_active = now
    profile.updated_at = now

    return PointsApplied(
        points=points,
        old_total=old_total,
        new_total=profile.total_points,
        old_level=old_level,
        new_level=profile.level,
    )
