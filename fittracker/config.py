"""Configuration management"""
import os
from dotenv import load_dotenv

from fittracker.exceptions import ConfigurationError

load_dotenv()

# Database
DATABASE_URL: str = os.getenv("DATABASE_URL", "")
DB_POOL_MIN_SIZE: int = int(os.getenv("DB_POOL_MIN_SIZE", "2"))
DB_POOL_MAX_SIZE: int = int(os.getenv("DB_POOL_MAX_SIZE", "10"))

# Gamification storage backend
# - 'memory' (default): process-local store, used by tests and local runs
# - 'postgres': JSONB documents in PostgreSQL (requires DATABASE_URL)
GAMIFICATION_BACKEND: str = os.getenv("GAMIFICATION_BACKEND", "memory").lower()

# Read defaults
RECENT_BADGES_LIMIT: int = int(os.getenv("RECENT_BADGES_LIMIT", "5"))
ACTIVITY_LOG_LIMIT: int = int(os.getenv("ACTIVITY_LOG_LIMIT", "10"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

SUPPORTED_BACKENDS = ("memory", "postgres")


# Validation
def validate_config() -> None:
    """Validate required configuration"""
    if GAMIFICATION_BACKEND not in SUPPORTED_BACKENDS:
        raise ConfigurationError(
            f"Unsupported GAMIFICATION_BACKEND '{GAMIFICATION_BACKEND}'",
            config_key="GAMIFICATION_BACKEND",
        )
    if GAMIFICATION_BACKEND == "postgres" and not DATABASE_URL:
        raise ConfigurationError(
            "DATABASE_URL is required for the postgres backend",
            config_key="DATABASE_URL",
        )
    if DB_POOL_MIN_SIZE > DB_POOL_MAX_SIZE:
        raise ConfigurationError(
            "DB_POOL_MIN_SIZE cannot exceed DB_POOL_MAX_SIZE",
            config_key="DB_POOL_MIN_SIZE",
        )
