#!/usr/bin/env python3
"""
Create the schema without migrations and seed the VIP catalog (development).

Usage:
    python scripts/init_database.py            # tables + VIP tiers
    python scripts/init_database.py --no-seed  # tables only
"""

import argparse
import asyncio
import sys

from loguru import logger

from app.config.database import async_engine, async_session_maker
from app.models import Base
from app.services.vip import VipService

logger.remove()
logger.add(sys.stderr, level="INFO")


async def init_database(seed: bool) -> None:
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    logger.info(f"Schema ready: {len(Base.metadata.tables)} tables")

    if seed:
        async with async_session_maker() as session:
            counts = await VipService(session).seed_levels()
        logger.info(
            f"VIP levels seeded: {counts['created']} created, "
            f"{counts['updated']} updated"
        )

    await async_engine.dispose()
    logger.success("Database initialized")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--no-seed", action="store_true", help="skip the VIP catalog"
    )
    args = parser.parse_args()
    asyncio.run(init_database(seed=not args.no_seed))
