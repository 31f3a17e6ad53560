"""
Async PostgreSQL connection pool lifecycle for the profiles quota store.

The pool is created once by the FastAPI lifespan, stored on `app.state`, and
passed explicitly to the QuotaLedger; there is no module-level pool. Tests
substitute a mock pool (see tests/conftest.py) without patching this module.

Connection Pool Configuration (from Settings):
- db_pool_min_size: minimum idle connections kept in pool (default 2)
- db_pool_max_size: maximum connections in pool (default 10)
- db_command_timeout: per-statement timeout in seconds (default 60)

Usage:
    # At application startup (in FastAPI lifespan)
    pool = await create_db_pool(settings)

    # In the quota ledger
    async with pool.acquire() as conn:
        row = await conn.fetchrow("SELECT ... FROM profiles WHERE id = $1", user_id)

    # At application shutdown
    await close_db_pool(pool)
"""

import logging
from typing import Optional

import asyncpg
from asyncpg import Pool

from leadintel.core.config import Settings


logger = logging.getLogger(__name__)


async def create_db_pool(settings: Settings) -> Pool:
    """
    Create the asyncpg connection pool.

    Args:
        settings: Application settings carrying DATABASE_URL and pool sizing.

    Returns:
        Pool: The asyncpg connection pool instance.

    Raises:
        asyncpg.PostgresError: If connection to the database fails.
        OSError: If the database host is unreachable.
    """
    pool = await asyncpg.create_pool(
        dsn=settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        command_timeout=settings.db_command_timeout,
    )
    logger.info(
        f"Database pool created (min_size={settings.db_pool_min_size}, "
        f"max_size={settings.db_pool_max_size})"
    )
    return pool


async def close_db_pool(pool: Optional[Pool]) -> None:
    """
    Close the pool gracefully, waiting for acquired connections to be released.

    Idempotent: passing None is a no-op.
    """
    if pool is None:
        return
    await pool.close()
    logger.info("Database pool closed")
