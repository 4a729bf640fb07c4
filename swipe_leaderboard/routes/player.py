from fastapi import APIRouter, Depends, HTTPException
from ..core.dependencies import get_ranking_service
from ..errors import StoreError
from ..models.response import MissingPlayerData, PlayerData, PlayerResponse
from ..services.ranking import RankingService
from ..logger import get_logger

logger = get_logger('routes.player')
router = APIRouter()

@router.get("/api/player/{username}", response_model=PlayerResponse)
async def get_player(
    username: str,
    service: RankingService = Depends(get_ranking_service)
):
    """
    Get a single player's level and rank.

    Unknown players are reported with level 0 and no rank, not as an error.
    """
    try:
        standing = await service.get_player(username)
    except StoreError as e:
        logger.error(f"Error fetching player: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch player data")

    if not standing.found:
        return PlayerResponse(data=MissingPlayerData(username=standing.identity))

    record = standing.record
    return PlayerResponse(
        data=PlayerData(
            username=record.identity,
            level=record.level,
            rank=standing.rank,
            isInTop20=standing.is_top_tier,
            profilePicture=record.display_image,
            gamesPlayed=record.play_count,
            joinedAt=record.created_at,
            lastPlayed=record.last_updated
        )
    )
