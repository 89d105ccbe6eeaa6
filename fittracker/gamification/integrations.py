"""
Gamification Integration Hooks

Connect the gamification engine with activity tracking. Call these functions
after a tracking action has been saved (hydration update, exercise checked
off, meal logged) to award points, update streaks and unlock badges.

Usage:
    from fittracker.gamification.integrations import handle_meal_logged

    # After saving the food entry
    result = await handle_meal_logged(service, user_id, entry_date, meals_logged_today)
"""

import logging
from datetime import date, datetime
from typing import List, TypedDict, Union

from fittracker.gamification.badge_system import format_badge_unlock_message
from fittracker.gamification.points_system import POINT_STRUCTURE
from fittracker.models.gamification import ActivityType, EarnedBadge, GamificationProfile
from fittracker.services.gamification_service import GamificationService

logger = logging.getLogger(__name__)

DEFAULT_HYDRATION_GOAL_ML = 2500
HYDRATION_BONUS_RATIO = 1.5
LONG_WORKOUT_MINUTES = 45
DAILY_MEALS_GOAL = 3

ActivityDate = Union[date, datetime, str]


class GamificationResult(TypedDict):
    """Result of gamification processing"""
    points_awarded: int
    level_up: bool
    new_level: int
    streak_updated: bool
    current_streak: int
    badges_unlocked: List[EarnedBadge]
    message: str


def _build_result(
    before: GamificationProfile,
    after: GamificationProfile,
    activity: ActivityType,
    streak_updated: bool,
) -> GamificationResult:
    """Summarize what changed between two snapshots of a profile"""
    earned_before = {badge.badge_id for badge in before.badges}
    unlocked = [badge for badge in after.badges if badge.badge_id not in earned_before]
    points_awarded = after.total_points - before.total_points
    current_streak = after.get_streak(activity).current_streak

    message_parts = []
    if points_awarded:
        message_parts.append(f"⭐ +{points_awarded} points")
    if after.level > before.level:
        message_parts.append(f"🎉 Level up! You reached level {after.level}")
    if streak_updated and current_streak:
        message_parts.append(f"🔥 {activity.value.capitalize()} streak: {current_streak} days")
    for badge in unlocked:
        message_parts.append(format_badge_unlock_message(badge))

    return {
        "points_awarded": points_awarded,
        "level_up": after.level > before.level,
        "new_level": after.level,
        "streak_updated": streak_updated,
        "current_streak": current_streak,
        "badges_unlocked": unlocked,
        "message": "\n\n".join(message_parts),
    }


async def handle_hydration_update(
    service: GamificationService,
    user_id: str,
    activity_date: ActivityDate,
    total_ml: float,
    goal_ml: float = DEFAULT_HYDRATION_GOAL_ML,
) -> GamificationResult:
    """
    Handle gamification after a hydration entry was added

    Meeting the daily goal awards points and counts toward the hydration
    streak; exceeding it by 50% adds a bonus.

    Args:
        service: Gamification service
        user_id: User ID
        activity_date: Day the hydration entry belongs to
        total_ml: Total intake for that day including the new entry
        goal_ml: Daily goal
    """
    before = await service.get_gamification_profile(user_id)
    after = before
    streak_updated = False

    if total_ml >= goal_ml:
        await service.award_points(
            user_id,
            "hydration_goal_met",
            POINT_STRUCTURE["hydration_goal_met"],
            activity=ActivityType.HYDRATION,
        )
        await service.update_streak(user_id, ActivityType.HYDRATION, activity_date, True)
        streak_updated = True

        if total_ml >= goal_ml * HYDRATION_BONUS_RATIO:
            await service.award_points(user_id, "hydration_bonus", POINT_STRUCTURE["hydration_bonus"])

        after = await service.get_gamification_profile(user_id)

    logger.info(
        f"Gamification processed for hydration: user={user_id}, "
        f"total={total_ml}ml, goal={goal_ml}ml"
    )

    return _build_result(before, after, ActivityType.HYDRATION, streak_updated)


async def handle_exercise_completed(
    service: GamificationService,
    user_id: str,
    activity_date: ActivityDate,
    completed_exercises: int,
    total_exercises: int,
    total_duration_min: float,
) -> GamificationResult:
    """
    Handle gamification after an exercise of a workout session was checked off

    Each exercise awards points. Finishing the whole session counts toward
    the workout streak, with a bonus for sessions longer than 45 minutes.

    Args:
        service: Gamification service
        user_id: User ID
        activity_date: Date of the workout session
        completed_exercises: Exercises completed in the session, including this one
        total_exercises: Exercises in the session
        total_duration_min: Planned session duration in minutes
    """
    before = await service.get_gamification_profile(user_id)

    await service.award_points(
        user_id,
        "workout_completed",
        POINT_STRUCTURE["workout_completed"],
        activity=ActivityType.WORKOUT,
    )

    streak_updated = False
    if completed_exercises >= total_exercises:
        if total_duration_min > LONG_WORKOUT_MINUTES:
            await service.award_points(
                user_id,
                "workout_completed_bonus",
                POINT_STRUCTURE["workout_completed_bonus"],
            )
        await service.update_streak(user_id, ActivityType.WORKOUT, activity_date, True)
        streak_updated = True

    after = await service.get_gamification_profile(user_id)

    logger.info(
        f"Gamification processed for exercise: user={user_id}, "
        f"completed={completed_exercises}/{total_exercises}"
    )

    return _build_result(before, after, ActivityType.WORKOUT, streak_updated)


async def handle_exercise_uncompleted(
    service: GamificationService,
    user_id: str,
    activity_date: ActivityDate,
    completed_exercises: int,
) -> GamificationResult:
    """
    Handle gamification after an exercise was unchecked

    When no exercise of the session remains completed the workout streak
    is broken. Points already awarded are kept.
    """
    before = await service.get_gamification_profile(user_id)

    streak_updated = False
    if completed_exercises == 0:
        await service.update_streak(user_id, ActivityType.WORKOUT, activity_date, False)
        streak_updated = True

    after = await service.get_gamification_profile(user_id)
    return _build_result(before, after, ActivityType.WORKOUT, streak_updated)


async def handle_meal_logged(
    service: GamificationService,
    user_id: str,
    activity_date: ActivityDate,
    meals_logged_today: int,
) -> GamificationResult:
    """
    Handle gamification after a food entry was saved

    Every meal awards points; from the third meal of the day on, the day
    counts toward the nutrition streak and the daily goal bonus is awarded.

    Args:
        service: Gamification service
        user_id: User ID
        activity_date: Day of the food entry
        meals_logged_today: Entries for that day, including the new one
    """
    before = await service.get_gamification_profile(user_id)

    await service.award_points(
        user_id,
        "meal_logged",
        POINT_STRUCTURE["meal_logged"],
        activity=ActivityType.NUTRITION,
    )

    streak_updated = False
    if meals_logged_today >= DAILY_MEALS_GOAL:
        await service.update_streak(user_id, ActivityType.NUTRITION, activity_date, True)
        await service.award_points(
            user_id,
            "daily_nutrition_goal",
            POINT_STRUCTURE["daily_nutrition_goal"],
        )
        streak_updated = True

    after = await service.get_gamification_profile(user_id)

    logger.info(
        f"Gamification processed for meal: user={user_id}, meals_today={meals_logged_today}"
    )

    return _build_result(before, after, ActivityType.NUTRITION, streak_updated)
