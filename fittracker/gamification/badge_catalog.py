"""Badge definitions, evaluated in the order listed"""

from fittracker.models.gamification import (
    ActivityType,
    Badge,
    BadgeCategory,
    BadgeRequirement,
    BadgeTier,
    RequirementType,
)


def _badge(id, name, description, icon, tier, category, requirement_type, value, points, activity=None) -> Badge:
    return Badge(
        id=id,
        name=name,
        description=description,
        icon=icon,
        tier=tier,
        category=category,
        requirement=BadgeRequirement(type=requirement_type, value=value, activity=activity),
        points=points,
    )


BADGE_DEFINITIONS: tuple[Badge, ...] = (
    # Workout Badges
    _badge("first-workout", "First Steps", "Complete your first workout", "🏃",
           BadgeTier.BRONZE, BadgeCategory.WORKOUT, RequirementType.COUNT, 1, 50, ActivityType.WORKOUT),
    _badge("workout-warrior-bronze", "Workout Warrior", "Complete 10 workouts", "💪",
           BadgeTier.BRONZE, BadgeCategory.WORKOUT, RequirementType.COUNT, 10, 100, ActivityType.WORKOUT),
    _badge("workout-warrior-silver", "Workout Champion", "Complete 50 workouts", "🏆",
           BadgeTier.SILVER, BadgeCategory.WORKOUT, RequirementType.COUNT, 50, 300, ActivityType.WORKOUT),
    _badge("workout-warrior-gold", "Fitness Legend", "Complete 100 workouts", "👑",
           BadgeTier.GOLD, BadgeCategory.WORKOUT, RequirementType.COUNT, 100, 750, ActivityType.WORKOUT),

    # Hydration Badges
    _badge("hydration-hero-bronze", "Hydration Hero", "Meet hydration goal for 7 days", "💧",
           BadgeTier.BRONZE, BadgeCategory.HYDRATION, RequirementType.STREAK, 7, 150, ActivityType.HYDRATION),
    _badge("hydration-hero-silver", "Water Warrior", "Meet hydration goal for 30 days", "🌊",
           BadgeTier.SILVER, BadgeCategory.HYDRATION, RequirementType.STREAK, 30, 500, ActivityType.HYDRATION),
    _badge("hydration-hero-gold", "Aqua Master", "Meet hydration goal for 100 days", "🏺",
           BadgeTier.GOLD, BadgeCategory.HYDRATION, RequirementType.STREAK, 100, 1500, ActivityType.HYDRATION),

    # Nutrition Badges
    _badge("meal-master-bronze", "Meal Master", "Log meals for 7 consecutive days", "🍽️",
           BadgeTier.BRONZE, BadgeCategory.NUTRITION, RequirementType.STREAK, 7, 200, ActivityType.NUTRITION),
    _badge("meal-master-silver", "Nutrition Ninja", "Log meals for 30 consecutive days", "🥗",
           BadgeTier.SILVER, BadgeCategory.NUTRITION, RequirementType.STREAK, 30, 600, ActivityType.NUTRITION),
    _badge("meal-master-gold", "Diet Deity", "Log meals for 100 consecutive days", "🌟",
           BadgeTier.GOLD, BadgeCategory.NUTRITION, RequirementType.STREAK, 100, 2000, ActivityType.NUTRITION),

    # Streak Badges (any activity)
    _badge("streak-starter", "Streak Starter", "Maintain any 7-day streak", "🔥",
           BadgeTier.BRONZE, BadgeCategory.STREAK, RequirementType.STREAK, 7, 100),
    _badge("consistency-king", "Consistency King", "Maintain any 30-day streak", "⚡",
           BadgeTier.SILVER, BadgeCategory.STREAK, RequirementType.STREAK, 30, 400),
    _badge("dedication-master", "Dedication Master", "Maintain any 100-day streak", "💎",
           BadgeTier.GOLD, BadgeCategory.STREAK, RequirementType.STREAK, 100, 1200),

    # Point Milestones
    _badge("point-collector-bronze", "Point Collector", "Earn 1,000 total points", "🎯",
           BadgeTier.BRONZE, BadgeCategory.ACHIEVEMENT, RequirementType.POINTS, 1000, 100),
    _badge("point-collector-silver", "Point Master", "Earn 5,000 total points", "🎖️",
           BadgeTier.SILVER, BadgeCategory.ACHIEVEMENT, RequirementType.POINTS, 5000, 300),
    _badge("point-collector-gold", "Point Legend", "Earn 25,000 total points", "🏅",
           BadgeTier.GOLD, BadgeCategory.ACHIEVEMENT, RequirementType.POINTS, 25000, 1000),
)

BADGES_BY_ID: dict[str, Badge] = {badge.id: badge for badge in BADGE_DEFINITIONS}


def get_badge(badge_id: str) -> Badge:
    """Look up a catalog badge (KeyError when unknown)"""
    return BADGES_BY_ID[badge_id]
