"""Unit tests for Badge System (fittracker/gamification/badge_system.py)"""
from datetime import datetime, timedelta, timezone

from fittracker.gamification.badge_catalog import BADGE_DEFINITIONS, BADGES_BY_ID, get_badge
from fittracker.gamification.badge_system import (
    calculate_badge_progress,
    evaluate_badges,
    find_next_badge,
    format_badge_unlock_message,
    grant_badge,
    is_badge_eligible,
    mark_badges_seen,
    sort_newest_first,
)
from fittracker.models.gamification import (
    ActivityType,
    Badge,
    BadgeCategory,
    BadgeRequirement,
    BadgeTier,
    EarnedBadge,
    RequirementType,
)


def make_badge(badge_id, requirement_type, value, points=0, activity=None):
    return Badge(
        id=badge_id,
        name=badge_id.title(),
        description=f"Test badge {badge_id}",
        icon="🏅",
        tier=BadgeTier.BRONZE,
        category=BadgeCategory.ACHIEVEMENT,
        requirement=BadgeRequirement(type=requirement_type, value=value, activity=activity),
        points=points,
    )


# ============================================================================
# Catalog Tests
# ============================================================================

def test_catalog_ids_unique():
    ids = [badge.id for badge in BADGE_DEFINITIONS]
    assert len(ids) == len(set(ids)) == 16
    assert set(BADGES_BY_ID) == set(ids)


def test_catalog_first_workout():
    badge = get_badge("first-workout")
    assert badge.points == 50
    assert badge.requirement.type == RequirementType.COUNT
    assert badge.requirement.activity == ActivityType.WORKOUT
    assert badge.requirement.value == 1


# ============================================================================
# Eligibility & Progress Tests
# ============================================================================

def test_count_requirement(fresh_profile):
    badge = get_badge("first-workout")
    assert not is_badge_eligible(fresh_profile, badge)

    fresh_profile.activity_counts[ActivityType.WORKOUT] = 1
    assert is_badge_eligible(fresh_profile, badge)


def test_points_requirement(fresh_profile):
    badge = get_badge("point-collector-bronze")
    fresh_profile.total_points = 999
    assert not is_badge_eligible(fresh_profile, badge)

    fresh_profile.total_points = 1000
    assert is_badge_eligible(fresh_profile, badge)


def test_scoped_streak_requirement_uses_current_streak(fresh_profile):
    badge = get_badge("hydration-hero-bronze")
    streak = fresh_profile.get_streak(ActivityType.HYDRATION)
    streak.longest_streak = 10
    streak.current_streak = 2
    assert not is_badge_eligible(fresh_profile, badge)

    streak.current_streak = 7
    assert is_badge_eligible(fresh_profile, badge)


def test_any_streak_requirement_uses_best_activity(fresh_profile):
    badge = get_badge("streak-starter")
    fresh_profile.get_streak(ActivityType.WORKOUT).current_streak = 3
    fresh_profile.get_streak(ActivityType.NUTRITION).current_streak = 7

    assert is_badge_eligible(fresh_profile, badge)


def test_calculate_badge_progress(fresh_profile):
    fresh_profile.activity_counts[ActivityType.WORKOUT] = 5
    progress = calculate_badge_progress(fresh_profile, get_badge("workout-warrior-bronze"))

    assert progress.progress == 5
    assert progress.total == 10
    assert progress.percentage == 50.0


def test_calculate_badge_progress_capped(fresh_profile):
    fresh_profile.total_points = 3000
    progress = calculate_badge_progress(fresh_profile, get_badge("point-collector-bronze"))

    assert progress.percentage == 100.0


# ============================================================================
# Award Tests
# ============================================================================

def test_grant_badge_applies_bonus(fresh_profile):
    award = grant_badge(fresh_profile, get_badge("first-workout"))

    assert award.badge.badge_id == "first-workout"
    assert award.badge.is_new
    assert award.points.new_total == 50
    assert fresh_profile.total_points == 50
    assert fresh_profile.has_badge("first-workout")


def test_grant_badge_is_idempotent(fresh_profile):
    grant_badge(fresh_profile, get_badge("first-workout"))
    assert grant_badge(fresh_profile, get_badge("first-workout")) is None

    assert fresh_profile.total_badges == 1
    assert fresh_profile.total_points == 50


def test_evaluate_badges_nothing_to_award(fresh_profile):
    assert evaluate_badges(fresh_profile) == []
    assert fresh_profile.badges == []


def test_evaluate_badges_awards_in_catalog_order(fresh_profile):
    fresh_profile.activity_counts[ActivityType.WORKOUT] = 1
    fresh_profile.get_streak(ActivityType.HYDRATION).current_streak = 7

    awards = evaluate_badges(fresh_profile)

    assert [a.badge.badge_id for a in awards] == [
        "first-workout",
        "hydration-hero-bronze",
        "streak-starter",
    ]
    assert fresh_profile.total_points == 50 + 150 + 100


def test_evaluate_badges_repeats_until_stable(fresh_profile):
    """Bonus points from a later badge can unlock an earlier one"""
    catalog = (
        make_badge("big-points", RequirementType.POINTS, 100, points=5),
        make_badge("first-step", RequirementType.COUNT, 1, points=100, activity=ActivityType.WORKOUT),
    )
    fresh_profile.activity_counts[ActivityType.WORKOUT] = 1

    awards = evaluate_badges(fresh_profile, catalog)

    assert [a.badge.badge_id for a in awards] == ["first-step", "big-points"]
    assert fresh_profile.total_points == 105


def test_evaluate_badges_never_awards_twice(fresh_profile):
    fresh_profile.activity_counts[ActivityType.WORKOUT] = 1
    evaluate_badges(fresh_profile)

    assert evaluate_badges(fresh_profile) == []
    assert fresh_profile.total_badges == 1


def test_badges_not_revoked_when_metric_drops(fresh_profile):
    fresh_profile.get_streak(ActivityType.HYDRATION).current_streak = 7
    evaluate_badges(fresh_profile)

    fresh_profile.get_streak(ActivityType.HYDRATION).current_streak = 0
    evaluate_badges(fresh_profile)

    assert fresh_profile.has_badge("hydration-hero-bronze")


# ============================================================================
# Seen / Next / Ordering Tests
# ============================================================================

def test_mark_badges_seen(fresh_profile):
    grant_badge(fresh_profile, get_badge("first-workout"))
    grant_badge(fresh_profile, get_badge("streak-starter"))

    assert mark_badges_seen(fresh_profile, ["first-workout", "unknown-badge"]) == 1
    assert not fresh_profile.get_badge("first-workout").is_new
    assert fresh_profile.get_badge("streak-starter").is_new

    # Already seen
    assert mark_badges_seen(fresh_profile, ["first-workout"]) == 0


def test_find_next_badge_picks_highest_percentage(fresh_profile):
    fresh_profile.total_points = 500
    fresh_profile.activity_counts[ActivityType.WORKOUT] = 1

    next_badge = find_next_badge(fresh_profile)

    # first-workout is complete (100%) and is skipped
    assert next_badge.badge.id == "point-collector-bronze"
    assert next_badge.percentage == 50.0


def test_find_next_badge_none_without_progress(fresh_profile):
    assert find_next_badge(fresh_profile) is None


def test_find_next_badge_tie_keeps_catalog_order(fresh_profile):
    catalog = (
        make_badge("alpha", RequirementType.POINTS, 100),
        make_badge("beta", RequirementType.POINTS, 100),
    )
    fresh_profile.total_points = 40

    assert find_next_badge(fresh_profile, catalog).badge.id == "alpha"


def test_sort_newest_first():
    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    older = EarnedBadge.from_badge(get_badge("first-workout"), earned_at=now - timedelta(days=1))
    newer = EarnedBadge.from_badge(get_badge("streak-starter"), earned_at=now)
    same_time = EarnedBadge.from_badge(get_badge("hydration-hero-bronze"), earned_at=now)

    result = sort_newest_first([older, newer, same_time])

    assert [b.badge_id for b in result] == ["hydration-hero-bronze", "streak-starter", "first-workout"]


def test_format_badge_unlock_message():
    badge = EarnedBadge.from_badge(get_badge("workout-warrior-silver"))
    message = format_badge_unlock_message(badge)

    assert "BADGE UNLOCKED" in message
    assert "🥈" in message
    assert "Workout Champion" in message
    assert "+300 points" in message
