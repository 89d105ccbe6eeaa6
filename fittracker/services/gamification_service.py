"""
GamificationService - Gamification Business Logic

Handles points, levels, streaks, badges and the activity log for one
storage backend. Domain code calls this service after recording an event;
all profile writes for a user are serialized through a per-user lock.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from fittracker.config import ACTIVITY_LOG_LIMIT, RECENT_BADGES_LIMIT
from fittracker.db.repository import GamificationRepository
from fittracker.gamification.activity_log import (
    badge_earned_entry,
    level_up_entry,
    points_earned_entry,
    streak_milestone_entry,
)
from fittracker.gamification.badge_catalog import BADGE_DEFINITIONS
from fittracker.gamification.badge_system import (
    BadgeAward,
    evaluate_badges,
    find_next_badge,
    grant_badge,
    mark_badges_seen,
    sort_newest_first,
)
from fittracker.gamification.locks import UserLockRegistry
from fittracker.gamification.points_system import STREAK_MILESTONES, apply_points, badge_reason
from fittracker.gamification.streak_system import apply_streak_update, parse_activity_date
from fittracker.models.gamification import (
    ActivityLogEntry,
    ActivityType,
    Badge,
    BadgeProgress,
    EarnedBadge,
    GamificationProfile,
    LeaderboardEntry,
    StreakRecord,
    StreakSummary,
    utcnow,
)

logger = logging.getLogger(__name__)


class GamificationService:
    """
    Service for gamification features.

    Responsibilities:
    - Point awards and level calculation
    - Daily streak tracking and milestone bonuses
    - Badge evaluation and unlocking
    - Activity log and leaderboard reads
    """

    def __init__(
        self,
        repository: GamificationRepository,
        catalog: Sequence[Badge] = BADGE_DEFINITIONS,
        locks: Optional[UserLockRegistry] = None,
    ):
        """
        Initialize GamificationService.

        Args:
            repository: Profile and activity log storage
            catalog: Badge definitions, evaluated in order
            locks: Per-user lock registry (a new one by default)
        """
        self.repository = repository
        self.catalog = tuple(catalog)
        self._badges_by_id = {badge.id: badge for badge in self.catalog}
        self.locks = locks or UserLockRegistry()
        logger.debug("GamificationService initialized")

    # ==========================================
    # Profile lifecycle
    # ==========================================

    async def initialize_user_gamification(self, user_id: str) -> GamificationProfile:
        """Create the user's profile if missing; returns the existing one otherwise"""
        async with self.locks.hold(user_id):
            return await self._load_or_create(user_id)

    async def get_gamification_profile(self, user_id: str) -> GamificationProfile:
        """Read the user's profile, creating it on first access"""
        return await self.initialize_user_gamification(user_id)

    # ==========================================
    # Points
    # ==========================================

    async def award_points(
        self,
        user_id: str,
        reason: str,
        points: int,
        activity: Optional[Union[ActivityType, str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> GamificationProfile:
        """
        Award points and evaluate badges

        Args:
            user_id: User ID
            reason: Award reason (see POINT_STRUCTURE)
            points: Amount to add; trusted as given
            activity: Activity whose counter this award records, if any
            metadata: Extra data stored on the log entry

        Returns:
            Updated profile
        """
        activity = ActivityType(activity) if activity is not None else None

        async with self.locks.hold(user_id):
            profile = await self._load_or_create(user_id)
            entries: List[ActivityLogEntry] = []

            self._apply_award(profile, reason, points, entries, activity=activity, metadata=metadata)
            self._evaluate_badges(profile, entries)

            await self._commit(profile, entries)
            return profile

    # ==========================================
    # Streaks
    # ==========================================

    async def update_streak(
        self,
        user_id: str,
        activity: Union[ActivityType, str],
        activity_date: Union[date, datetime, str],
        success: bool,
    ) -> StreakRecord:
        """
        Record a daily success or failure for an activity

        Args:
            user_id: User ID
            activity: workout, nutrition or hydration
            activity_date: Logical calendar date the report is for
            success: Whether the day's goal was met

        Returns:
            Updated streak record
        """
        activity = ActivityType(activity)
        day = parse_activity_date(activity_date)

        async with self.locks.hold(user_id):
            profile = await self._load_or_create(user_id)
            entries: List[ActivityLogEntry] = []

            record = profile.get_streak(activity)
            transition = apply_streak_update(record, day, success)

            logger.info(
                f"Updated {activity.value} streak for user {user_id}: "
                f"{transition.old_streak} → {transition.new_streak} days"
            )

            for milestone in transition.milestones:
                reason, bonus = STREAK_MILESTONES[milestone]
                entries.append(streak_milestone_entry(user_id, activity, milestone, bonus))
                self._apply_award(
                    profile,
                    reason,
                    bonus,
                    entries,
                    metadata={"activity": activity.value, "milestone": milestone},
                )
                logger.info(f"User {user_id} reached {milestone}-day {activity.value} streak milestone")

            self._evaluate_badges(profile, entries)
            profile.last_active = profile.updated_at = utcnow()

            await self._commit(profile, entries)
            return record.model_copy()

    async def get_streaks(self, user_id: str) -> StreakSummary:
        """Current streaks per activity plus the overall streak"""
        profile = await self.get_gamification_profile(user_id)
        return StreakSummary(
            workout=profile.get_streak(ActivityType.WORKOUT).current_streak,
            nutrition=profile.get_streak(ActivityType.NUTRITION).current_streak,
            hydration=profile.get_streak(ActivityType.HYDRATION).current_streak,
            overall=profile.overall_streak,
        )

    # ==========================================
    # Badges
    # ==========================================

    async def check_and_award_badges(self, user_id: str) -> List[EarnedBadge]:
        """
        Award every badge the user now qualifies for

        Returns:
            Newly awarded badges (empty when nothing changed)
        """
        async with self.locks.hold(user_id):
            profile = await self._load_or_create(user_id)
            entries: List[ActivityLogEntry] = []

            awards = self._evaluate_badges(profile, entries)
            if awards:
                await self._commit(profile, entries)

            return [award.badge for award in awards]

    async def award_badge(self, user_id: str, badge: Union[Badge, str]) -> EarnedBadge:
        """
        Award a specific badge; idempotent per badge id

        Args:
            badge: Badge definition or catalog badge id (KeyError when unknown)

        Returns:
            The earned badge (the existing one if it was already earned)
        """
        if isinstance(badge, str):
            badge = self._badges_by_id[badge]

        async with self.locks.hold(user_id):
            profile = await self._load_or_create(user_id)

            existing = profile.get_badge(badge.id)
            if existing:
                logger.debug(f"User {user_id} already holds badge {badge.id}")
                return existing

            entries: List[ActivityLogEntry] = []
            award = grant_badge(profile, badge)
            self._record_badge_award(profile, award, entries)
            self._evaluate_badges(profile, entries)

            await self._commit(profile, entries)
            return award.badge

    async def get_user_badges(self, user_id: str) -> List[EarnedBadge]:
        """All earned badges, newest first"""
        profile = await self.get_gamification_profile(user_id)
        return sort_newest_first(profile.badges)

    async def get_recent_badges(self, user_id: str, limit: int = RECENT_BADGES_LIMIT) -> List[EarnedBadge]:
        """Most recently earned badges, newest first"""
        badges = await self.get_user_badges(user_id)
        return badges[:limit]

    async def mark_badges_as_seen(self, user_id: str, badge_ids: Sequence[str]) -> None:
        """Clear the unread flag; unknown or already-seen ids are ignored"""
        async with self.locks.hold(user_id):
            profile = await self.repository.get_profile(user_id)
            if profile is None:
                return

            changed = mark_badges_seen(profile, badge_ids)
            if changed:
                profile.updated_at = utcnow()
                await self.repository.save_profile(profile)
                logger.debug(f"Marked {changed} badges as seen for user {user_id}")

    async def get_next_badge_progress(self, user_id: str) -> Optional[BadgeProgress]:
        """The unearned badge closest to completion, or None"""
        profile = await self.get_gamification_profile(user_id)
        return find_next_badge(profile, self.catalog)

    # ==========================================
    # Activity log & leaderboard
    # ==========================================

    async def get_activity_logs(self, user_id: str, limit: int = ACTIVITY_LOG_LIMIT) -> List[ActivityLogEntry]:
        """Latest activity log entries, newest first"""
        return await self.repository.get_activity_logs(user_id, limit)

    async def get_leaderboard(self, limit: int = 10) -> List[LeaderboardEntry]:
        """Top users by total points"""
        profiles = await self.repository.get_top_profiles(limit)
        return [
            LeaderboardEntry(
                rank=rank,
                user_id=profile.user_id,
                total_points=profile.total_points,
                level=profile.level,
                total_badges=profile.total_badges,
            )
            for rank, profile in enumerate(profiles, start=1)
        ]

    async def get_profile_summary(self, user_id: str) -> Dict[str, Any]:
        """
        Everything a profile screen needs in one call

        Returns:
            {
                'profile': GamificationProfile,
                'streaks': StreakSummary,
                'recent_badges': list[EarnedBadge],
                'next_badge': BadgeProgress | None,
                'activity_logs': list[ActivityLogEntry]
            }
        """
        profile = await self.get_gamification_profile(user_id)
        return {
            "profile": profile,
            "streaks": await self.get_streaks(user_id),
            "recent_badges": await self.get_recent_badges(user_id),
            "next_badge": find_next_badge(profile, self.catalog),
            "activity_logs": await self.get_activity_logs(user_id, limit=5),
        }

    # ==========================================
    # Internals (caller holds the user's lock)
    # ==========================================

    async def _load_or_create(self, user_id: str) -> GamificationProfile:
        profile = await self.repository.get_profile(user_id)
        if profile is None:
            profile = await self.repository.insert_profile(GamificationProfile(user_id=user_id))
        return profile

    def _apply_award(
        self,
        profile: GamificationProfile,
        reason: str,
        points: int,
        entries: List[ActivityLogEntry],
        activity: Optional[ActivityType] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        applied = apply_points(profile, points, activity)
        entries.append(points_earned_entry(profile.user_id, reason, points, metadata))

        logger.info(
            f"Awarded {points} points to user {profile.user_id} for {reason}. "
            f"Total: {applied.new_total} points, Level: {applied.new_level}"
        )

        if applied.leveled_up:
            entries.append(level_up_entry(profile.user_id, applied.old_level, applied.new_level))
            logger.info(f"User {profile.user_id} leveled up from {applied.old_level} to {applied.new_level}!")

    def _record_badge_award(
        self,
        profile: GamificationProfile,
        award: BadgeAward,
        entries: List[ActivityLogEntry],
    ) -> None:
        entries.append(points_earned_entry(profile.user_id, badge_reason(award.badge.badge_id), award.badge.points))
        entries.append(badge_earned_entry(profile.user_id, award.badge))
        if award.points.leveled_up:
            entries.append(level_up_entry(profile.user_id, award.points.old_level, award.points.new_level))
            logger.info(
                f"User {profile.user_id} leveled up from {award.points.old_level} "
                f"to {award.points.new_level}!"
            )

    def _evaluate_badges(
        self,
        profile: GamificationProfile,
        entries: List[ActivityLogEntry],
    ) -> List[BadgeAward]:
        awards = evaluate_badges(profile, self.catalog)
        for award in awards:
            self._record_badge_award(profile, award, entries)
        return awards

    async def _commit(self, profile: GamificationProfile, entries: List[ActivityLogEntry]) -> None:
        """Save the profile, then append its log entries"""
        await self.repository.save_profile(profile)
        await self.repository.append_activity_logs(entries)
