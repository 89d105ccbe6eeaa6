"""
Gamification system for FitTracker

This package implements the motivation layer on top of activity tracking:
- Points and leveling
- Daily streaks per activity (workout, nutrition, hydration)
- Badge catalog and evaluation
- Activity log entries

The stateful operations live in fittracker.services.gamification_service;
domain hooks live in fittracker.gamification.integrations.
"""

from fittracker.gamification.level_system import LEVEL_THRESHOLDS, calculate_level, calculate_level_from_points
from fittracker.gamification.points_system import POINT_STRUCTURE, STREAK_MILESTONES, get_points_for_reason
from fittracker.gamification.streak_system import apply_streak_update, parse_activity_date
from fittracker.gamification.badge_catalog import BADGE_DEFINITIONS, get_badge
from fittracker.gamification.badge_system import evaluate_badges, find_next_badge

__all__ = [
    "LEVEL_THRESHOLDS",
    "calculate_level",
    "calculate_level_from_points",
    "POINT_STRUCTURE",
    "STREAK_MILESTONES",
    "get_points_for_reason",
    "apply_streak_update",
    "parse_activity_date",
    "BADGE_DEFINITIONS",
    "get_badge",
    "evaluate_badges",
    "find_next_badge",
]
