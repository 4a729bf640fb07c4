import asyncio
from typing import List, Optional

import asyncpg

from ..config import database
from ..errors import StoreError
from ..logger import get_logger
from ..models.data import PlayerRecord, UpsertResult
from .base import PlayerStore
from .connection import DatabaseConnection

logger = get_logger('database.postgres')

PLAYER_COLUMNS = 'username, level, profile_picture, games_played, last_updated, created_at'

INSERT_NEW_PLAYER = f'''
    INSERT INTO players (username, level, profile_picture, games_played, last_updated, created_at)
    VALUES ($1, $2, $3, 1, now(), now())
    ON CONFLICT (username) DO NOTHING
    RETURNING {PLAYER_COLUMNS}
'''

LOCK_PLAYER = f'''
    SELECT {PLAYER_COLUMNS}
    FROM players
    WHERE username = $1
    FOR UPDATE
'''

UPDATE_PLAYER = f'''
    UPDATE players SET
        level = GREATEST(level, $2),
        profile_picture = COALESCE($3, profile_picture),
        games_played = games_played + 1,
        last_updated = now()
    WHERE username = $1
    RETURNING {PLAYER_COLUMNS}
'''

# Raised before commit, so the whole transaction is known to have rolled back
ROLLED_BACK_ERRORS = (
    asyncpg.exceptions.DeadlockDetectedError,
    asyncpg.exceptions.SerializationError,
    asyncpg.exceptions.LockNotAvailableError,
)

CONNECTION_ERRORS = ROLLED_BACK_ERRORS + (
    asyncpg.exceptions.ConnectionDoesNotExistError,
    asyncpg.exceptions.CannotConnectNowError,
    asyncpg.exceptions.TooManyConnectionsError,
    OSError,
    asyncio.TimeoutError,
)

DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class PostgresPlayerStore(PlayerStore):
    def __init__(self, dsn: str, max_retries: int = None, retry_delay: float = None,
                 connection: DatabaseConnection = None):
        self.db = connection or DatabaseConnection(dsn)
        self.max_retries = max_retries if max_retries is not None else database.MAX_RETRIES
        self.retry_delay = retry_delay if retry_delay is not None else database.RETRY_DELAY

    async def initialize(self):
        try:
            await self.db.initialize()
        except DRIVER_ERRORS as e:
            raise StoreError(f"Database unavailable: {e}", operation='initialize', original_error=e) from e

    async def close(self):
        await self.db.close()
        logger.info("Postgres player store closed")

    async def ping(self) -> bool:
        # acquire() creates the pool when startup could not, so health recovers on its own
        try:
            async with self.db.acquire() as conn:
                return await conn.fetchval('SELECT 1') == 1
        except DRIVER_ERRORS as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    async def _run(self, operation: str, fn, retry_on=CONNECTION_ERRORS):
        """Run fn(conn) on a pooled connection, retrying transient failures with linear backoff"""
        retry_count = 0
        while True:
            try:
                async with self.db.acquire() as conn:
                    return await fn(conn)
            except retry_on as e:
                retry_count += 1
                logger.error(f"Database error in {operation} (attempt {retry_count}/{self.max_retries}): {e}")
                if retry_count >= self.max_retries:
                    raise StoreError(
                        f"{operation} failed after {retry_count} attempts: {e}",
                        operation=operation,
                        original_error=e
                    ) from e
                await asyncio.sleep(self.retry_delay * retry_count)
            except DRIVER_ERRORS as e:
                logger.error(f"Database error in {operation}: {e}")
                raise StoreError(str(e), operation=operation, original_error=e) from e

    async def upsert(self, identity: str, level: int, display_image: Optional[str] = None) -> UpsertResult:
        self.check_submission(identity, level)
        display_image = display_image or None

        async def apply(conn):
            async with conn.transaction():
                row = await conn.fetchrow(INSERT_NEW_PLAYER, identity, level, display_image)
                if row is not None:
                    return UpsertResult(PlayerRecord.from_row(row), None)
                # A concurrent insert for this identity has committed; lock the row before changing it
                prior = await conn.fetchrow(LOCK_PLAYER, identity)
                if prior is None:
                    raise StoreError(f"Player {identity} vanished during update", operation='upsert')
                row = await conn.fetchrow(UPDATE_PLAYER, identity, level, display_image)
                return UpsertResult(PlayerRecord.from_row(row), PlayerRecord.from_row(prior))

        # Only retry errors that guarantee rollback; a dropped connection may have committed
        return await self._run('upsert', apply, retry_on=ROLLED_BACK_ERRORS)

    async def find_by_identity(self, identity: str) -> Optional[PlayerRecord]:
        async def fetch(conn):
            row = await conn.fetchrow(f'SELECT {PLAYER_COLUMNS} FROM players WHERE username = $1', identity)
            return PlayerRecord.from_row(row) if row else None
        return await self._run('find_by_identity', fetch)

    async def count_with_level_greater_than(self, level: int) -> int:
        async def fetch(conn):
            return await conn.fetchval('SELECT COUNT(*) FROM players WHERE level > $1', level)
        return await self._run('count_with_level_greater_than', fetch)

    async def top_by_level_descending(self, limit: int) -> List[PlayerRecord]:
        if limit <= 0:
            return []

        async def fetch(conn):
            rows = await conn.fetch(f'''
                SELECT {PLAYER_COLUMNS}
                FROM players
                ORDER BY level DESC, last_updated ASC, username ASC
                LIMIT $1
            ''', limit)
            return [PlayerRecord.from_row(row) for row in rows]
        return await self._run('top_by_level_descending', fetch)

    async def count_all(self) -> int:
        async def fetch(conn):
            return await conn.fetchval('SELECT COUNT(*) FROM players')
        return await self._run('count_all', fetch)

    async def average_level(self) -> Optional[float]:
        async def fetch(conn):
            return await conn.fetchval('SELECT AVG(level)::float8 FROM players')
        return await self._run('average_level', fetch)
