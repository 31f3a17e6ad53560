"""
Quota ledger accessor for the `profiles` table.

This is the only stateful, concurrency-sensitive piece of the analysis path.
Each principal has one row holding usage_count and usage_limit; the invoker
reads it for admission and charges it through `increment`, which is a single
conditional UPDATE:

    UPDATE profiles SET usage_count = usage_count + 1
    WHERE id = $1 AND usage_count < usage_limit

Postgres serializes concurrent UPDATEs of the same row, so when N requests race
for the last unit exactly one of them gets a row back. The ledger never does a
read-modify-write in Python.

Every statement runs under `quota_timeout_seconds`; a timeout surfaces as
BackendTimeoutError.

Operations:
- get_quota(user_id): QuotaRecord, or ProfileNotFoundError
- admit(record): pure admission check
- increment(user_id): atomic conditional charge, returns whether it applied
- release(user_id): refund of one unit whose analysis failed
- reset_quota / set_limit / grant_vip / list_profiles: administrative only
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from asyncpg import Connection, Pool
from pydantic import ValidationError

from leadintel.core.exceptions import BackendTimeoutError, ProfileNotFoundError
from leadintel.models.schemas import QuotaRecord
from leadintel.sql import (
    INCREMENT_USAGE_IF_ADMITTED,
    LIST_PROFILES,
    RELEASE_USAGE,
    RESET_USAGE,
    SELECT_PROFILE,
    SET_USAGE_LIMIT,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default and maximum page size for the admin listing
DEFAULT_LIST_LIMIT: int = 200


def admit(record: QuotaRecord) -> bool:
    """Return True iff the principal has at least one unit of allowance left."""
    return record.usageCount < record.usageLimit


class QuotaLedger:
    """
    asyncpg-backed accessor for per-principal usage quotas.

    Args:
        pool: Connection pool created by the application lifespan.
        timeout_seconds: Upper bound for each individual statement.
    """

    def __init__(self, pool: Pool, timeout_seconds: float = 5.0):
        self._pool = pool
        self._timeout = timeout_seconds

    async def _run(self, operation: str, fn: Callable[[Connection], Awaitable[T]]) -> T:
        async def _with_connection() -> T:
            async with self._pool.acquire() as conn:
                return await fn(conn)

        try:
            return await asyncio.wait_for(_with_connection(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error(f"Quota ledger {operation} timed out after {self._timeout}s")
            raise BackendTimeoutError(f"Quota ledger {operation} timed out")

    @staticmethod
    def _to_record(row: Any) -> QuotaRecord:
        try:
            return QuotaRecord.from_record(row)
        except ValidationError as e:
            logger.error(f"Invalid profile row for user {row['id']}: {e}")
            raise ProfileNotFoundError(f"Invalid profile row for user {row['id']}")

    # -------------------------------------------------------------------------
    # Hot path
    # -------------------------------------------------------------------------

    async def get_quota(self, user_id: str) -> QuotaRecord:
        """
        Load the principal's quota record.

        Raises:
            ProfileNotFoundError: No profiles row exists for an authenticated
                principal. This is a provisioning defect, not a user error.
        """
        row = await self._run("read", lambda conn: conn.fetchrow(SELECT_PROFILE, user_id))
        if row is None:
            logger.error(f"Profile not found for authenticated user {user_id}")
            raise ProfileNotFoundError(f"No profile row for user {user_id}")
        return self._to_record(row)

    async def increment(self, user_id: str) -> bool:
        """
        Charge one unit if and only if the principal is still under its limit.

        Returns:
            True if the charge was applied, False if the limit had already been
            reached (or the row vanished) by the time the statement ran.
        """
        new_count = await self._run(
            "increment",
            lambda conn: conn.fetchval(INCREMENT_USAGE_IF_ADMITTED, user_id),
        )
        if new_count is None:
            logger.info(f"Quota increment refused for user {user_id}: limit reached")
            return False
        logger.debug(f"Quota incremented for user {user_id}: usage_count={new_count}")
        return True

    async def release(self, user_id: str) -> bool:
        """Refund one previously charged unit. Never drives usage_count below zero."""
        new_count = await self._run(
            "release",
            lambda conn: conn.fetchval(RELEASE_USAGE, user_id),
        )
        if new_count is None:
            logger.warning(f"Quota release for user {user_id} found nothing to refund")
            return False
        logger.debug(f"Quota released for user {user_id}: usage_count={new_count}")
        return True

    # -------------------------------------------------------------------------
    # Administrative operations
    # -------------------------------------------------------------------------

    async def reset_quota(self, user_id: str) -> QuotaRecord:
        row = await self._run("reset", lambda conn: conn.fetchrow(RESET_USAGE, user_id))
        if row is None:
            raise ProfileNotFoundError(f"No profile row for user {user_id}")
        logger.info(f"Quota reset for user {user_id}")
        return self._to_record(row)

    async def set_limit(self, user_id: str, usage_limit: int) -> QuotaRecord:
        if usage_limit <= 0:
            raise ValueError("usage_limit must be positive")
        row = await self._run(
            "set_limit",
            lambda conn: conn.fetchrow(SET_USAGE_LIMIT, user_id, usage_limit),
        )
        if row is None:
            raise ProfileNotFoundError(f"No profile row for user {user_id}")
        logger.info(f"Quota limit for user {user_id} set to {usage_limit}")
        return self._to_record(row)

    async def grant_vip(self, user_id: str, vip_limit: int) -> QuotaRecord:
        """Raise the principal's limit to the configured VIP allowance."""
        return await self.set_limit(user_id, vip_limit)

    async def list_profiles(self, limit: Optional[int] = None) -> List[QuotaRecord]:
        """List profiles ordered by usage, heaviest first."""
        page_size = min(limit or DEFAULT_LIST_LIMIT, DEFAULT_LIST_LIMIT)
        rows: List[Any] = await self._run(
            "list",
            lambda conn: conn.fetch(LIST_PROFILES, page_size),
        )
        return [self._to_record(row) for row in rows]
