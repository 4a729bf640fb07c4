from fastapi import APIRouter, Depends, HTTPException
from ..core.dependencies import get_ranking_service
from ..errors import StoreError, ValidationError
from ..models.data import ScoreSubmission
from ..models.response import NewBestData, NewPlayerData, NotImprovedData, ScoreUpdateResponse
from ..models.score import ScoreUpdateRequest
from ..services.ranking import RankingService
from ..logger import get_logger

logger = get_logger('routes.score')
router = APIRouter()


def build_response(outcome: ScoreSubmission) -> ScoreUpdateResponse:
    if outcome.kind == ScoreSubmission.NEW_PLAYER:
        message = 'Welcome to top 20!' if outcome.is_top_tier else 'Welcome to the leaderboard!'
        data = NewPlayerData(
            username=outcome.identity,
            level=outcome.level,
            rank=outcome.rank,
            isInTop20=outcome.is_top_tier,
            gamesPlayed=outcome.play_count
        )
    elif outcome.kind == ScoreSubmission.NEW_BEST:
        message = 'New record in top 20!' if outcome.is_top_tier else 'New personal best!'
        data = NewBestData(
            username=outcome.identity,
            level=outcome.level,
            previousBest=outcome.previous_best,
            newRank=outcome.rank,
            isInTop20=outcome.is_top_tier,
            gamesPlayed=outcome.play_count
        )
    else:
        message = 'Score not high enough for new record'
        data = NotImprovedData(
            username=outcome.identity,
            currentBest=outcome.level,
            submittedLevel=outcome.submitted_level,
            currentRank=outcome.rank,
            isInTop20=outcome.is_top_tier,
            gamesPlayed=outcome.play_count
        )
    return ScoreUpdateResponse(newRecord=outcome.new_record, message=message, data=data)


@router.post("/api/leaderboard/update", response_model=ScoreUpdateResponse)
async def update_score(
    data: ScoreUpdateRequest,
    service: RankingService = Depends(get_ranking_service)
):
    """
    Submit a finished game for a player.

    - **username**: Player name, trimmed and cut to 50 characters
    - **level**: Level reached, an integer between 1 and 1000
    - **profilePicture**: Optional avatar reference; kept when omitted
    """
    try:
        outcome = await service.submit_score(data.username, data.level, data.profilePicture)
        return build_response(outcome)
    except ValidationError as e:
        logger.warning(f"Rejected score submission: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except StoreError as e:
        logger.error(f"Error updating leaderboard: {e}")
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to update score", "message": e.message}
        )
