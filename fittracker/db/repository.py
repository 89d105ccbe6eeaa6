"""
Gamification persistence port

The engine talks to storage only through GamificationRepository. Profiles
are whole documents guarded by a version number: save_profile succeeds only
if the stored version still matches the one that was read, then bumps it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from fittracker.exceptions import ConcurrentUpdateError
from fittracker.models.gamification import ActivityLogEntry, GamificationProfile

logger = logging.getLogger(__name__)


class GamificationRepository(ABC):
    """Storage for gamification profiles and the activity log"""

    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[GamificationProfile]:
        """Return the stored profile or None"""

    @abstractmethod
    async def insert_profile(self, profile: GamificationProfile) -> GamificationProfile:
        """Store a new profile; returns the existing one if the user already has a profile"""

    @abstractmethod
    async def save_profile(self, profile: GamificationProfile) -> GamificationProfile:
        """
        Persist an updated profile

        Raises:
            ConcurrentUpdateError: the stored version differs from profile.version
        """

    @abstractmethod
    async def append_activity_logs(self, entries: Sequence[ActivityLogEntry]) -> None:
        """Append log entries"""

    @abstractmethod
    async def get_activity_logs(self, user_id: str, limit: int) -> list[ActivityLogEntry]:
        """Latest log entries for a user, newest first"""

    @abstractmethod
    async def get_top_profiles(self, limit: int) -> list[GamificationProfile]:
        """Profiles with the most points, highest first"""


class InMemoryGamificationRepository(GamificationRepository):
    """Process-local repository; state lives on the instance"""

    def __init__(self):
        self._profiles: dict[str, GamificationProfile] = {}
        self._logs: list[ActivityLogEntry] = []

    async def get_profile(self, user_id: str) -> Optional[GamificationProfile]:
        stored = self._profiles.get(user_id)
        # Stored state changes only through save_profile
        return stored.model_copy(deep=True) if stored else None

    async def insert_profile(self, profile: GamificationProfile) -> GamificationProfile:
        existing = self._profiles.get(profile.user_id)
        if existing:
            return existing.model_copy(deep=True)

        self._profiles[profile.user_id] = profile.model_copy(deep=True)
        logger.info(f"Created gamification profile for user {profile.user_id}")
        return profile

    async def save_profile(self, profile: GamificationProfile) -> GamificationProfile:
        stored = self._profiles.get(profile.user_id)
        stored_version = stored.version if stored else None

        if stored_version != profile.version:
            raise ConcurrentUpdateError(
                f"Profile for user {profile.user_id} changed since it was read",
                expected_version=profile.version,
                user_id=profile.user_id,
                operation="save_profile",
            )

        profile.version += 1
        self._profiles[profile.user_id] = profile.model_copy(deep=True)
        return profile

    async def append_activity_logs(self, entries: Sequence[ActivityLogEntry]) -> None:
        self._logs.extend(entries)

    async def get_activity_logs(self, user_id: str, limit: int) -> list[ActivityLogEntry]:
        indexed = [(i, e) for i, e in enumerate(self._logs) if e.user_id == user_id]
        indexed.sort(key=lambda item: (item[1].timestamp, item[0]), reverse=True)
        return [entry for _, entry in indexed[:limit]]

    async def get_top_profiles(self, limit: int) -> list[GamificationProfile]:
        profiles = sorted(self._profiles.values(), key=lambda p: p.total_points, reverse=True)
        return [p.model_copy(deep=True) for p in profiles[:limit]]
