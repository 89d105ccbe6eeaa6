"""
Badge System

Evaluates the badge catalog against a profile and awards unlocked badges.

Requirement types:
- points: total points reached
- count: number of recorded activities of one type
- streak: current streak of one activity type, or the best current streak
  across all types when the requirement is not scoped

Badges are awarded at most once per user and never revoked. Each unlocked
badge adds its bonus points to the profile; those bonus points may unlock
further badges, so evaluation repeats until a pass unlocks nothing.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
import logging

from fittracker.gamification.badge_catalog import BADGE_DEFINITIONS
from fittracker.gamification.points_system import PointsApplied, apply_points
from fittracker.models.gamification import (
    ActivityType,
    Badge,
    BadgeProgress,
    EarnedBadge,
    GamificationProfile,
    RequirementType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeAward:
    """A badge unlocked during evaluation together with its bonus points"""
    badge: EarnedBadge
    points: PointsApplied


def get_requirement_progress(profile: GamificationProfile, badge: Badge) -> int:
    """Current value of the metric a badge requirement is measured against"""
    requirement = badge.requirement

    if requirement.type == RequirementType.POINTS:
        return profile.total_points

    if requirement.type == RequirementType.COUNT:
        if requirement.activity is None:
            return sum(profile.activity_counts.values())
        return profile.activity_counts.get(requirement.activity, 0)

    if requirement.type == RequirementType.STREAK:
        if requirement.activity is not None:
            return profile.get_streak(requirement.activity).current_streak
        return max(profile.get_streak(activity).current_streak for activity in ActivityType)

    return 0


def is_badge_eligible(profile: GamificationProfile, badge: Badge) -> bool:
    return get_requirement_progress(profile, badge) >= badge.requirement.value


def calculate_badge_progress(profile: GamificationProfile, badge: Badge) -> BadgeProgress:
    """
    Calculate progress toward a badge

    Returns:
        BadgeProgress(badge, progress, total, percentage) with percentage
        capped at 100
    """
    progress = get_requirement_progress(profile, badge)
    total = badge.requirement.value
    percentage = min(progress / total * 100, 100.0) if total > 0 else 0.0

    return BadgeProgress(badge=badge, progress=progress, total=total, percentage=percentage)


def grant_badge(profile: GamificationProfile, badge: Badge) -> Optional[BadgeAward]:
    """
    Add a badge to the profile and apply its bonus points

    Returns None when the profile already holds the badge.
    """
    if profile.has_badge(badge.id):
        return None

    earned = EarnedBadge.from_badge(badge)
    profile.badges.append(earned)
    points = apply_points(profile, badge.points)

    logger.info(
        f"User {profile.user_id} unlocked badge: {badge.id} "
        f"({badge.name}) +{badge.points} points"
    )

    return BadgeAward(badge=earned, points=points)


def evaluate_badges(
    profile: GamificationProfile,
    catalog: Sequence[Badge] = BADGE_DEFINITIONS,
) -> List[BadgeAward]:
    """
    Award every catalog badge the profile now qualifies for

    Badges are checked in catalog order. Passes repeat while bonus points
    keep unlocking badges, bounded by the catalog size since every repeated
    pass must unlock at least one badge.

    Returns:
        Newly awarded badges in award order
    """
    awards: List[BadgeAward] = []

    for _ in range(len(catalog)):
        pass_awards = []
        for badge in catalog:
            if profile.has_badge(badge.id):
                continue
            if is_badge_eligible(profile, badge):
                award = grant_badge(profile, badge)
                if award:
                    pass_awards.append(award)

        awards.extend(pass_awards)
        if not pass_awards:
            break

    return awards


def mark_badges_seen(profile: GamificationProfile, badge_ids: Iterable[str]) -> int:
    """
    Clear the unread flag on the given badges

    Unknown and already-seen ids are ignored.

    Returns:
        Number of badges whose flag changed
    """
    wanted = set(badge_ids)
    changed = 0
    for earned in profile.badges:
        if earned.badge_id in wanted and earned.is_new:
            earned.is_new = False
            changed += 1
    return changed


def find_next_badge(
    profile: GamificationProfile,
    catalog: Sequence[Badge] = BADGE_DEFINITIONS,
) -> Optional[BadgeProgress]:
    """
    Find the unearned badge closest to completion

    Only badges with some progress and not yet complete are considered;
    on equal percentage the earlier catalog entry wins.
    """
    best: Optional[BadgeProgress] = None

    for badge in catalog:
        if profile.has_badge(badge.id):
            continue

        progress = calculate_badge_progress(profile, badge)
        if progress.percentage <= 0 or progress.percentage >= 100:
            continue
        if best is None or progress.percentage > best.percentage:
            best = progress

    return best


def sort_newest_first(badges: Iterable[EarnedBadge]) -> List[EarnedBadge]:
    """Badges ordered by earn time, most recent first (earn order breaks ties)"""
    indexed = list(enumerate(badges))
    indexed.sort(key=lambda item: (item[1].earned_at, item[0]), reverse=True)
    return [badge for _, badge in indexed]


def format_badge_unlock_message(badge: EarnedBadge) -> str:
    """
    Format a badge unlock message for celebration

    Args:
        badge: Badge returned by an award
    """
    tier_emoji = {
        'platinum': '💫',
        'gold': '🥇',
        'silver': '🥈',
        'bronze': '🥉'
    }

    tier_symbol = tier_emoji.get(badge.tier.value, '🏆')

    return f"""🎉 BADGE UNLOCKED! 🎉

{tier_symbol} {badge.icon} {badge.name} {tier_symbol}

{badge.description}

⭐ +{badge.points} points bonus!"""
