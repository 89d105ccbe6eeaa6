"""Gamification models: profiles, badges, streaks and the activity log"""
from enum import Enum
from datetime import date, datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityType(str, Enum):
    """Activities that carry their own streak and counter"""
    WORKOUT = "workout"
    NUTRITION = "nutrition"
    HYDRATION = "hydration"


class BadgeCategory(str, Enum):
    """Badge categories"""
    WORKOUT = "workout"
    NUTRITION = "nutrition"
    HYDRATION = "hydration"
    STREAK = "streak"
    ACHIEVEMENT = "achievement"


class BadgeTier(str, Enum):
    """Badge tiers/difficulty levels"""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class RequirementType(str, Enum):
    """What a badge requirement is measured against"""
    POINTS = "points"
    COUNT = "count"
    STREAK = "streak"


class ActivityLogType(str, Enum):
    """Activity log entry types"""
    POINTS_EARNED = "points_earned"
    BADGE_EARNED = "badge_earned"
    LEVEL_UP = "level_up"
    STREAK_MILESTONE = "streak_milestone"


class BadgeRequirement(BaseModel):
    """Badge unlock predicate"""
    model_config = ConfigDict(frozen=True)

    type: RequirementType
    value: int = Field(gt=0)
    activity: Optional[ActivityType] = None  # None = any activity (streak) or required (count)


class Badge(BaseModel):
    """Badge catalog definition"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    icon: str
    tier: BadgeTier
    category: BadgeCategory
    requirement: BadgeRequirement
    points: int = 0


class EarnedBadge(BaseModel):
    """Badge snapshot stored on a user's profile"""
    badge_id: str
    name: str
    description: str
    icon: str
    tier: BadgeTier
    category: BadgeCategory
    points: int
    earned_at: datetime = Field(default_factory=utcnow)
    is_new: bool = True  # Unread until the user has seen the unlock

    @classmethod
    def from_badge(cls, badge: Badge, earned_at: Optional[datetime] = None) -> "EarnedBadge":
        return cls(
            badge_id=badge.id,
            name=badge.name,
            description=badge.description,
            icon=badge.icon,
            tier=badge.tier,
            category=badge.category,
            points=badge.points,
            earned_at=earned_at or utcnow(),
        )


class StreakRecord(BaseModel):
    """Consecutive-day counter for one activity type"""
    type: ActivityType
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_activity_date: Optional[date] = None
    is_active: bool = False
    updated_at: datetime = Field(default_factory=utcnow)


def _default_streaks() -> dict[ActivityType, StreakRecord]:
    return {activity: StreakRecord(type=activity) for activity in ActivityType}


def _default_counts() -> dict[ActivityType, int]:
    return {activity: 0 for activity in ActivityType}


class GamificationProfile(BaseModel):
    """Aggregate gamification state for one user"""
    user_id: str
    total_points: int = 0
    level: int = Field(default=1, ge=1)
    current_level_points: int = 0
    next_level_points: int = 100
    points_to_next_level: int = 100
    badges: list[EarnedBadge] = Field(default_factory=list)
    streaks: dict[ActivityType, StreakRecord] = Field(default_factory=_default_streaks)
    activity_counts: dict[ActivityType, int] = Field(default_factory=_default_counts)
    version: int = 0
    last_active: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @computed_field
    @property
    def total_badges(self) -> int:
        return len(self.badges)

    @computed_field
    @property
    def overall_streak(self) -> int:
        """Days on which every activity type has been active together"""
        return min(self.get_streak(activity).current_streak for activity in ActivityType)

    def get_streak(self, activity: ActivityType) -> StreakRecord:
        if activity not in self.streaks:
            self.streaks[activity] = StreakRecord(type=activity)
        return self.streaks[activity]

    def has_badge(self, badge_id: str) -> bool:
        return any(earned.badge_id == badge_id for earned in self.badges)

    def get_badge(self, badge_id: str) -> Optional[EarnedBadge]:
        for earned in self.badges:
            if earned.badge_id == badge_id:
                return earned
        return None


class ActivityLogEntry(BaseModel):
    """Append-only record of a point, badge, level or streak event"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    type: ActivityLogType
    description: str
    reason: Optional[str] = None
    points: Optional[int] = None
    badge: Optional[EarnedBadge] = None
    metadata: Optional[dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=utcnow)


class LevelProgress(BaseModel):
    """Level position derived from a point total"""
    model_config = ConfigDict(frozen=True)

    level: int
    current_level_points: int
    next_level_points: int

    @computed_field
    @property
    def points_to_next_level(self) -> int:
        return self.next_level_points - self.current_level_points


class StreakSummary(BaseModel):
    """Current streaks per activity plus the all-activities streak"""
    workout: int = 0
    nutrition: int = 0
    hydration: int = 0
    overall: int = 0


class BadgeProgress(BaseModel):
    """Progress toward an unearned badge"""
    badge: Badge
    progress: int
    total: int
    percentage: float


class LeaderboardEntry(BaseModel):
    """Leaderboard row"""
    rank: int
    user_id: str
    total_points: int
    level: int
    total_badges: int
