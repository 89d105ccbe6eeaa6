"""
Service Layer Package

Business logic services that sit between domain collaborators (hydration,
nutrition and workout tracking) and the storage layer.

Core Services:
- GamificationService: points, levels, streaks, badges, activity log
"""

from fittracker.services.container import ServiceContainer, get_container, init_container, reset_container
from fittracker.services.gamification_service import GamificationService

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "reset_container",
    "GamificationService",
]
