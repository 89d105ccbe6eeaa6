"""Gamification database queries (PostgreSQL, JSONB documents)"""
import logging
from typing import Optional, Sequence

import psycopg
from psycopg.types.json import Jsonb

from fittracker.db.connection import Database
from fittracker.db.repository import GamificationRepository
from fittracker.exceptions import ConcurrentUpdateError, wrap_database_exception
from fittracker.models.gamification import ActivityLogEntry, GamificationProfile

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS gamification_profiles (
        user_id TEXT PRIMARY KEY,
        total_points INTEGER NOT NULL DEFAULT 0,
        level INTEGER NOT NULL DEFAULT 1,
        document JSONB NOT NULL,
        version INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_gamification_profiles_points ON gamification_profiles (total_points DESC)",
    "CREATE INDEX IF NOT EXISTS idx_gamification_profiles_level ON gamification_profiles (level DESC)",
    """
    CREATE TABLE IF NOT EXISTS gamification_activity_logs (
        id UUID PRIMARY KEY,
        seq BIGSERIAL NOT NULL,
        user_id TEXT NOT NULL,
        type TEXT NOT NULL,
        entry JSONB NOT NULL,
        logged_at TIMESTAMPTZ NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_gamification_logs_user_time ON gamification_activity_logs (user_id, logged_at DESC, seq DESC)",
    "CREATE INDEX IF NOT EXISTS idx_gamification_logs_type ON gamification_activity_logs (type)",
]


def _profile_document(profile: GamificationProfile) -> Jsonb:
    return Jsonb(profile.model_dump(mode="json", exclude={"version", "total_badges", "overall_streak"}))


def _row_to_profile(row: dict) -> GamificationProfile:
    return GamificationProfile.model_validate({**row["document"], "version": row["version"]})


class PostgresGamificationRepository(GamificationRepository):
    """GamificationRepository backed by the shared connection pool"""

    def __init__(self, database: Database):
        self.db = database

    async def create_schema(self) -> None:
        """Create tables and indexes (idempotent)"""
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    for statement in SCHEMA_STATEMENTS:
                        await cur.execute(statement)
                await conn.commit()
        except psycopg.Error as e:
            raise wrap_database_exception(e, operation="create_schema")
        logger.info("Gamification schema is ready")

    async def get_profile(self, user_id: str) -> Optional[GamificationProfile]:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT document, version
                        FROM gamification_profiles
                        WHERE user_id = %s
                        """,
                        (user_id,)
                    )
                    row = await cur.fetchone()
        except psycopg.Error as e:
            raise wrap_database_exception(e, operation="get_profile", user_id=user_id)

        return _row_to_profile(row) if row else None

    async def insert_profile(self, profile: GamificationProfile) -> GamificationProfile:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        INSERT INTO gamification_profiles (user_id, total_points, level, document, version)
                        VALUES (%s, %s, %s, %s, %s)
                        ON CONFLICT (user_id) DO NOTHING
                        RETURNING document, version
                        """,
                        (
                            profile.user_id,
                            profile.total_points,
                            profile.level,
                            _profile_document(profile),
                            profile.version,
                        )
                    )
                    row = await cur.fetchone()

                    if not row:
                        # Another writer created it first
                        await cur.execute(
                            "SELECT document, version FROM gamification_profiles WHERE user_id = %s",
                            (profile.user_id,)
                        )
                        row = await cur.fetchone()
                    else:
                        logger.info(f"Created gamification profile for user {profile.user_id}")
                await conn.commit()
        except psycopg.Error as e:
            raise wrap_database_exception(e, operation="insert_profile", user_id=profile.user_id)

        return _row_to_profile(row)

    async def save_profile(self, profile: GamificationProfile) -> GamificationProfile:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        UPDATE gamification_profiles
                        SET total_points = %s,
                            level = %s,
                            document = %s,
                            version = version + 1,
                            updated_at = CURRENT_TIMESTAMP
                        WHERE user_id = %s AND version = %s
                        """,
                        (
                            profile.total_points,
                            profile.level,
                            _profile_document(profile),
                            profile.user_id,
                            profile.version,
                        )
                    )
                    updated = cur.rowcount
                await conn.commit()
        except psycopg.Error as e:
            raise wrap_database_exception(e, operation="save_profile", user_id=profile.user_id)

        if updated == 0:
            raise ConcurrentUpdateError(
                f"Profile for user {profile.user_id} changed since it was read",
                expected_version=profile.version,
                user_id=profile.user_id,
                operation="save_profile",
            )

        profile.version += 1
        return profile

    async def append_activity_logs(self, entries: Sequence[ActivityLogEntry]) -> None:
        if not entries:
            return

        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.executemany(
                        """
                        INSERT INTO gamification_activity_logs (id, user_id, type, entry, logged_at)
                        VALUES (%s, %s, %s, %s, %s)
                        """,
                        [
                            (
                                entry.id,
                                entry.user_id,
                                entry.type.value,
                                Jsonb(entry.model_dump(mode="json")),
                                entry.timestamp,
                            )
                            for entry in entries
                        ]
                    )
                await conn.commit()
        except psycopg.Error as e:
            raise wrap_database_exception(e, operation="append_activity_logs", user_id=entries[0].user_id)

    async def get_activity_logs(self, user_id: str, limit: int) -> list[ActivityLogEntry]:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT entry
                        FROM gamification_activity_logs
                        WHERE user_id = %s
                        ORDER BY logged_at DESC, seq DESC
                        LIMIT %s
                        """,
                        (user_id, limit)
                    )
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            raise wrap_database_exception(e, operation="get_activity_logs", user_id=user_id)

        return [ActivityLogEntry.model_validate(row["entry"]) for row in rows]

    async def get_top_profiles(self, limit: int) -> list[GamificationProfile]:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT document, version
                        FROM gamification_profiles
                        ORDER BY total_points DESC
                        LIMIT %s
                        """,
                        (limit,)
                    )
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            raise wrap_database_exception(e, operation="get_top_profiles")

        return [_row_to_profile(row) for row in rows]
