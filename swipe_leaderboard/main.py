from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import database, server
from .core.events import lifespan
from .core.middleware import BodySizeLimitMiddleware
from .database import PlayerStore, create_store
from .logger import get_logger
from .models.response import ErrorResponse, NotFoundResponse
from .routes import health, leaderboard, player, score, stats
from .services.ranking import RankingService

logger = get_logger('main')

AVAILABLE_ENDPOINTS = [
    'GET /',
    'GET /health',
    'GET /api/leaderboard',
    'POST /api/leaderboard/update',
    'GET /api/player/:username',
    'GET /api/stats'
]


def error_response(status_code: int, error: str, message: str = None) -> ORJSONResponse:
    body = ErrorResponse(error=error, message=message)
    return ORJSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods on known paths both read as missing endpoints
    if exc.status_code in (404, 405):
        body = NotFoundResponse(availableEndpoints=AVAILABLE_ENDPOINTS)
        return ORJSONResponse(status_code=404, content=body.model_dump())
    if isinstance(exc.detail, dict):
        return error_response(exc.status_code, exc.detail.get('error', 'Internal server error'),
                              exc.detail.get('message'))
    return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Malformed request to {request.url.path}: {exc.errors()}")
    return error_response(400, 'Invalid request body')


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, 'Internal server error')


def create_app(store: PlayerStore = None) -> FastAPI:
    """Build the API around a player store (from DATABASE_URL when none is given)"""
    store = store or create_store(database.DATABASE_URL)

    app = FastAPI(
        default_response_class=ORJSONResponse,
        title="Swipe Leaderboard",
        description="Ranked players by best level reached",
        version=__version__,
        lifespan=lifespan
    )
    app.state.store = store
    app.state.ranking_service = RankingService(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=server.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=server.MAX_BODY_BYTES)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health.router)
    app.include_router(leaderboard.router)
    app.include_router(score.router)
    app.include_router(player.router)
    app.include_router(stats.router)
    return app


app = create_app()


def main():
    import uvicorn

    uvicorn.run(
        "swipe_leaderboard.main:app",
        host=server.HOST,
        port=server.PORT,
        limit_concurrency=1000,
        backlog=1024,
        log_level=server.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
