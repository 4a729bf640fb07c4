from contextlib import asynccontextmanager
from fastapi import FastAPI
from ..errors import StoreError
from ..logger import get_logger
import asyncio

logger = get_logger('core.events')

ENDPOINT_SUMMARY = [
    ('GET ', '/', 'API info'),
    ('GET ', '/health', 'Health check'),
    ('GET ', '/api/leaderboard', 'Get top players'),
    ('POST', '/api/leaderboard/update', 'Update score'),
    ('GET ', '/api/player/:username', 'Get player stats'),
    ('GET ', '/api/stats', 'Get leaderboard stats'),
]

async def startup_event(app: FastAPI):
    """Open the player store; the API keeps serving with a disconnected store"""
    store = app.state.store
    try:
        await store.initialize()
        logger.info(f"Player store initialized ({type(store).__name__})")
    except StoreError as e:
        logger.error(f"Failed to initialize player store: {e}")
    logger.info("Leaderboard API endpoints available:")
    for method, path, description in ENDPOINT_SUMMARY:
        logger.info(f"   {method} {path} - {description}")

async def shutdown_event(app: FastAPI):
    """Close the player store"""
    try:
        # Set a timeout for the shutdown process
        async with asyncio.timeout(5.0):
            await app.state.store.close()
            logger.info("Player store closed")
    except asyncio.TimeoutError:
        logger.warning("Shutdown timed out, abandoning open store connections")
    except asyncio.CancelledError:
        logger.warning("Shutdown was cancelled before the store closed")
        raise

@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup_event(app)
    try:
        yield
    finally:
        await shutdown_event(app)
