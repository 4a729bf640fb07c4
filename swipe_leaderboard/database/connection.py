import asyncpg
import asyncio
from contextlib import asynccontextmanager
from ..config import database
from ..logger import get_logger

logger = get_logger('database.connection')

CREATE_PLAYERS_TABLE = '''
    CREATE TABLE IF NOT EXISTS players (
        username VARCHAR(50) PRIMARY KEY,
        level INTEGER NOT NULL CHECK (level BETWEEN 1 AND 1000),
        profile_picture TEXT,
        games_played INTEGER NOT NULL DEFAULT 1 CHECK (games_played >= 1),
        last_updated TIMESTAMPTZ NOT NULL DEFAULT now(),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
'''

CREATE_RANKING_INDEX = '''
    CREATE INDEX IF NOT EXISTS idx_players_level_last_updated
    ON players(level DESC, last_updated ASC)
'''


class DatabaseConnection:
    def __init__(self, dsn: str):
        self.dsn = dsn
        self.pool = None
        self._connection_semaphore = None
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self):
        """Create the connection pool and the players schema"""
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:  # Double check after acquiring lock
                return

            try:
                self.pool = await asyncpg.create_pool(
                    dsn=self.dsn,
                    min_size=database.POOL_MIN_SIZE,
                    max_size=database.POOL_MAX_SIZE,
                    command_timeout=database.COMMAND_TIMEOUT,
                    max_inactive_connection_lifetime=300.0,
                    setup=self._setup_connection
                )

                self._connection_semaphore = asyncio.Semaphore(database.MAX_CONCURRENT_OPERATIONS)

                async with self.pool.acquire() as conn:
                    await conn.execute(CREATE_PLAYERS_TABLE)
                    await conn.execute(CREATE_RANKING_INDEX)

                self._initialized = True
                logger.info("Database connection initialized successfully")
            except Exception as e:
                logger.error(f"Failed to initialize database connection: {e}")
                await self.close()
                raise

    async def _setup_connection(self, connection):
        """Setup connection with proper settings"""
        await connection.execute('SET statement_timeout = 30000')
        await connection.execute('SET idle_in_transaction_session_timeout = 30000')
        await connection.execute('SET lock_timeout = 10000')

    async def close(self):
        """Close database connections"""
        if self.pool:
            await self.pool.close()
            self.pool = None
        self._initialized = False

    @asynccontextmanager
    async def acquire(self):
        """Acquire a pooled connection, bounded by the operation semaphore"""
        if not self._initialized:
            await self.initialize()
        async with self._connection_semaphore:
            async with self.pool.acquire() as conn:
                yield conn
