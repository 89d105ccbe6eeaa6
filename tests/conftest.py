"""Global test fixtures and utilities for fittracker tests"""
import pytest
from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock
from contextlib import asynccontextmanager

from fittracker.db.repository import InMemoryGamificationRepository
from fittracker.models.gamification import GamificationProfile
from fittracker.services.gamification_service import GamificationService


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def start_date():
    """First day of multi-day streak scenarios"""
    return date(2024, 3, 1)


@pytest.fixture
def fresh_profile(test_user_id):
    """Profile as created on first access"""
    return GamificationProfile(user_id=test_user_id)


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def repository():
    """Empty in-memory repository"""
    return InMemoryGamificationRepository()


@pytest.fixture
def gamification_service(repository):
    """GamificationService over the in-memory repository"""
    return GamificationService(repository)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def mock_db_cursor():
    """Mock psycopg cursor with standard query results"""
    cursor = MagicMock()
    cursor.execute = AsyncMock()
    cursor.executemany = AsyncMock()
    cursor.fetchone = AsyncMock(return_value=None)
    cursor.fetchall = AsyncMock(return_value=[])
    cursor.rowcount = 1
    return cursor


@pytest.fixture
def mock_db(mock_db_cursor):
    """Mock Database whose connection() yields a connection with mock_db_cursor"""
    conn = MagicMock()
    conn.commit = AsyncMock()

    @asynccontextmanager
    async def cursor():
        yield mock_db_cursor

    conn.cursor = cursor

    @asynccontextmanager
    async def connection():
        yield conn

    db = MagicMock()
    db.connection = connection
    db.conn = conn
    return db


# ============================================================================
# Helpers
# ============================================================================

async def report_days(service, user_id, activity, first_day, days, success=True):
    """Report `days` consecutive days for an activity starting at first_day"""
    record = None
    for offset in range(days):
        record = await service.update_streak(user_id, activity, first_day + timedelta(days=offset), success)
    return record


@pytest.fixture
def streak_days():
    """Expose report_days to tests"""
    return report_days
