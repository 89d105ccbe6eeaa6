"""Unit tests for PostgresGamificationRepository (fittracker/db/queries/gamification.py)"""
import pytest
import psycopg
from unittest.mock import AsyncMock

from fittracker.db.queries.gamification import SCHEMA_STATEMENTS, PostgresGamificationRepository
from fittracker.exceptions import ConcurrentUpdateError, ConnectionError, QueryError
from fittracker.gamification.activity_log import points_earned_entry
from fittracker.models.gamification import ActivityType, GamificationProfile


@pytest.fixture
def pg_repository(mock_db):
    return PostgresGamificationRepository(mock_db)


def profile_row(profile: GamificationProfile, version: int = 0) -> dict:
    return {
        "document": profile.model_dump(mode="json", exclude={"version", "total_badges", "overall_streak"}),
        "version": version,
    }


# ============================================================================
# Schema
# ============================================================================

@pytest.mark.asyncio
async def test_create_schema_runs_all_statements(pg_repository, mock_db, mock_db_cursor):
    await pg_repository.create_schema()

    assert mock_db_cursor.execute.await_count == len(SCHEMA_STATEMENTS)
    mock_db.conn.commit.assert_awaited_once()


def test_activity_log_table_has_insertion_sequence():
    """Entries sharing a timestamp are ordered by insertion sequence"""
    log_table = next(s for s in SCHEMA_STATEMENTS if "CREATE TABLE IF NOT EXISTS gamification_activity_logs" in s)
    log_index = next(s for s in SCHEMA_STATEMENTS if "idx_gamification_logs_user_time" in s)

    assert "seq BIGSERIAL" in log_table
    assert "(user_id, logged_at DESC, seq DESC)" in log_index


# ============================================================================
# Profiles
# ============================================================================

@pytest.mark.asyncio
async def test_get_profile_missing(pg_repository, mock_db_cursor):
    assert await pg_repository.get_profile("nobody") is None

    query, params = mock_db_cursor.execute.call_args[0]
    assert "FROM gamification_profiles" in query
    assert params == ("nobody",)


@pytest.mark.asyncio
async def test_get_profile_parses_document(pg_repository, mock_db_cursor, fresh_profile):
    fresh_profile.total_points = 250
    fresh_profile.get_streak(ActivityType.WORKOUT).current_streak = 4
    mock_db_cursor.fetchone = AsyncMock(return_value=profile_row(fresh_profile, version=3))

    profile = await pg_repository.get_profile(fresh_profile.user_id)

    assert profile.total_points == 250
    assert profile.version == 3
    assert profile.get_streak(ActivityType.WORKOUT).current_streak == 4


@pytest.mark.asyncio
async def test_insert_profile(pg_repository, mock_db, mock_db_cursor, fresh_profile):
    mock_db_cursor.fetchone = AsyncMock(return_value=profile_row(fresh_profile))

    profile = await pg_repository.insert_profile(fresh_profile)

    assert profile.user_id == fresh_profile.user_id
    assert mock_db_cursor.execute.await_count == 1
    query = mock_db_cursor.execute.call_args[0][0]
    assert "ON CONFLICT (user_id) DO NOTHING" in query
    mock_db.conn.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_insert_profile_conflict_reads_existing(pg_repository, mock_db_cursor, test_user_id):
    existing = GamificationProfile(user_id=test_user_id, total_points=75)
    mock_db_cursor.fetchone = AsyncMock(side_effect=[None, profile_row(existing, version=2)])

    profile = await pg_repository.insert_profile(GamificationProfile(user_id=test_user_id))

    assert profile.total_points == 75
    assert profile.version == 2
    assert mock_db_cursor.execute.await_count == 2


@pytest.mark.asyncio
async def test_save_profile_bumps_version(pg_repository, mock_db_cursor, fresh_profile):
    fresh_profile.version = 4

    saved = await pg_repository.save_profile(fresh_profile)

    assert saved.version == 5
    query, params = mock_db_cursor.execute.call_args[0]
    assert "WHERE user_id = %s AND version = %s" in query
    assert params[-2:] == (fresh_profile.user_id, 4)


@pytest.mark.asyncio
async def test_save_profile_stale_version(pg_repository, mock_db_cursor, fresh_profile):
    mock_db_cursor.rowcount = 0

    with pytest.raises(ConcurrentUpdateError):
        await pg_repository.save_profile(fresh_profile)

    assert fresh_profile.version == 0


# ============================================================================
# Activity log & leaderboard
# ============================================================================

@pytest.mark.asyncio
async def test_append_activity_logs(pg_repository, mock_db_cursor, test_user_id):
    entries = [
        points_earned_entry(test_user_id, "meal_logged", 15),
        points_earned_entry(test_user_id, "daily_nutrition_goal", 30),
    ]

    await pg_repository.append_activity_logs(entries)

    mock_db_cursor.executemany.assert_awaited_once()
    _, rows = mock_db_cursor.executemany.call_args[0]
    assert [row[0] for row in rows] == [entry.id for entry in entries]
    assert rows[0][2] == "points_earned"


@pytest.mark.asyncio
async def test_append_no_entries_skips_database(pg_repository, mock_db_cursor):
    await pg_repository.append_activity_logs([])
    mock_db_cursor.executemany.assert_not_called()


@pytest.mark.asyncio
async def test_get_activity_logs(pg_repository, mock_db_cursor, test_user_id):
    entry = points_earned_entry(test_user_id, "meal_logged", 15)
    mock_db_cursor.fetchall = AsyncMock(return_value=[{"entry": entry.model_dump(mode="json")}])

    logs = await pg_repository.get_activity_logs(test_user_id, 10)

    assert logs == [entry]
    query, params = mock_db_cursor.execute.call_args[0]
    assert "ORDER BY logged_at DESC, seq DESC" in query
    assert params == (test_user_id, 10)


@pytest.mark.asyncio
async def test_get_top_profiles(pg_repository, mock_db_cursor):
    rows = [
        profile_row(GamificationProfile(user_id="b", total_points=30), version=1),
        profile_row(GamificationProfile(user_id="a", total_points=10), version=1),
    ]
    mock_db_cursor.fetchall = AsyncMock(return_value=rows)

    profiles = await pg_repository.get_top_profiles(2)

    assert [p.user_id for p in profiles] == ["b", "a"]


# ============================================================================
# Error wrapping
# ============================================================================

@pytest.mark.asyncio
async def test_operational_error_becomes_connection_error(pg_repository, mock_db_cursor, test_user_id):
    mock_db_cursor.execute = AsyncMock(side_effect=psycopg.OperationalError("server closed the connection"))

    with pytest.raises(ConnectionError) as exc_info:
        await pg_repository.get_profile(test_user_id)

    assert exc_info.value.operation == "get_profile"
    assert exc_info.value.user_id == test_user_id


@pytest.mark.asyncio
async def test_query_error_wrapped(pg_repository, mock_db_cursor, fresh_profile):
    mock_db_cursor.execute = AsyncMock(side_effect=psycopg.Error("syntax error"))

    with pytest.raises(QueryError) as exc_info:
        await pg_repository.save_profile(fresh_profile)

    assert exc_info.value.operation == "save_profile"
    assert isinstance(exc_info.value.cause, psycopg.Error)
