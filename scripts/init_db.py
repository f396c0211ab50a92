import asyncio
import sys
from pathlib import Path

from loguru import logger

sys.path.insert(0, str(Path(__file__).parent.parent))

from vidtube.core.config import DatabaseSettings
from vidtube.db.database import dispose_engine, init_models


async def main():
    db_settings = DatabaseSettings()
    logger.info(f"Creating tables on {db_settings.postgres_host}:{db_settings.postgres_port}/{db_settings.postgres_db}")

    try:
        await init_models()
        logger.success("Database schema is up to date")
    except Exception as e:
        logger.exception(f"Error creating tables: {e}")
        sys.exit(1)
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
