"""Create the gamification tables and indexes in PostgreSQL"""
import asyncio
import logging
import sys

from fittracker.config import DATABASE_URL, LOG_LEVEL, validate_config
from fittracker.db.connection import db
from fittracker.db.queries.gamification import PostgresGamificationRepository
from fittracker.exceptions import ConfigurationError, FitTrackerError

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL)
)
logger = logging.getLogger(__name__)


async def main() -> int:
    """Run schema setup"""
    try:
        validate_config()
        if not DATABASE_URL:
            raise ConfigurationError("DATABASE_URL is required to set up the schema", config_key="DATABASE_URL")

        logger.info("Initializing database connection...")
        await db.init_pool()

        logger.info("🔧 Setting up gamification tables and indexes...")
        await PostgresGamificationRepository(db).create_schema()
        logger.info("✅ Schema setup complete")
        return 0

    except FitTrackerError as e:
        logger.error(f"❌ Schema setup failed: {e.message}")
        return 1

    finally:
        await db.close_pool()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
