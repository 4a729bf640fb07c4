from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from ..config import ranking
from ..core.dependencies import get_ranking_service
from ..errors import StoreError
from ..models.response import LeaderboardEntry, LeaderboardResponse, iso_now
from ..services.ranking import RankingService
from ..logger import get_logger

logger = get_logger('routes.leaderboard')
router = APIRouter()

@router.get("/api/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: Optional[str] = Query(None, description="Number of players to return (default 20, max 50)"),
    service: RankingService = Depends(get_ranking_service)
):
    """
    Get the top players, best level first.

    - **limit**: Window size; invalid values fall back to 20 and values above 50 are capped
    """
    try:
        window = await service.get_leaderboard(limit)
        entries = [
            LeaderboardEntry(
                rank=entry.rank,
                username=entry.record.identity,
                level=entry.record.level,
                gamesPlayed=entry.record.play_count,
                lastUpdated=entry.record.last_updated,
                avatar=entry.record.display_image or ranking.DEFAULT_AVATAR
            )
            for entry in window.entries
        ]
        return LeaderboardResponse(data=entries, total=window.total, timestamp=iso_now())
    except StoreError as e:
        logger.error(f"Error fetching leaderboard: {e}")
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to fetch leaderboard", "message": e.message}
        )
