from fastapi import APIRouter, Depends, HTTPException
from ..core.dependencies import get_ranking_service
from ..errors import StoreError
from ..models.response import StatsData, StatsResponse
from ..services.ranking import RankingService
from ..logger import get_logger

logger = get_logger('routes.stats')
router = APIRouter()

@router.get("/api/stats", response_model=StatsResponse)
async def get_stats(service: RankingService = Depends(get_ranking_service)):
    """Player count, best level, mean level and top 20 occupancy"""
    try:
        stats = await service.get_stats()
    except StoreError as e:
        logger.error(f"Error fetching stats: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch statistics")

    return StatsResponse(
        data=StatsData(
            totalPlayers=stats.total_players,
            highestLevel=stats.highest_level,
            topPlayer=stats.top_player,
            averageLevel=stats.average_level,
            competitorsInTop20=stats.competitors_in_top_tier
        )
    )
