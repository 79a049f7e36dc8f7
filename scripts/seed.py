"""Seed the "basics" demo course into PostgreSQL.

Run with:
    DATABASE_URL=postgresql+asyncpg://... python scripts/seed.py
"""

from __future__ import annotations

import asyncio
import logging
import sys

from coursehub.core.config import SETTINGS
from coursehub.core.logging import setup_logging
from coursehub.db.engine import engine, session_scope
from coursehub.repos.stores import pg_stores
from coursehub.services.seed_service import seed_basics

logger = logging.getLogger("seed")


async def main() -> int:
    if engine is None:
        logger.error("DATABASE_URL is not set; nothing to seed")
        return 1
    try:
        async with session_scope() as session:
            course = await seed_basics(pg_stores(session))
    finally:
        await engine.dispose()
    logger.info("Seed complete course_id=%s", course.id)
    return 0


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    sys.exit(asyncio.run(main()))
