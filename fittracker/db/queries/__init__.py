"""
Database queries

Module organization:
- gamification.py: gamification profiles and activity log (JSONB documents)
"""

from fittracker.db.queries.gamification import (
    SCHEMA_STATEMENTS,
    PostgresGamificationRepository,
)

__all__ = [
    "SCHEMA_STATEMENTS",
    "PostgresGamificationRepository",
]
