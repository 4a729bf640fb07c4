from fastapi import APIRouter, Depends
from ..core.dependencies import get_ranking_service
from ..models.response import HealthResponse, ServiceInfoResponse, iso_now
from ..services.ranking import RankingService
from ..logger import get_logger

logger = get_logger('routes.health')
router = APIRouter()

ENDPOINT_MAP = {
    'leaderboard': '/api/leaderboard',
    'updateScore': '/api/leaderboard/update',
    'playerStats': '/api/player/:username',
    'stats': '/api/stats'
}

@router.get("/", response_model=ServiceInfoResponse)
async def service_info():
    """Service banner with the endpoint map"""
    return ServiceInfoResponse(
        message="Swipe Leaderboard API is running!",
        timestamp=iso_now(),
        endpoints=ENDPOINT_MAP
    )

@router.get("/health", response_model=HealthResponse)
@router.head("/health")
async def health_check(service: RankingService = Depends(get_ranking_service)):
    """Health check endpoint"""
    connected = await service.store.ping()
    if not connected:
        logger.warning("Health check: player store disconnected")
    return HealthResponse(
        database="connected" if connected else "disconnected",
        timestamp=iso_now()
    )
