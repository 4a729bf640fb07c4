from fastapi import Request
from ..services.ranking import RankingService


def get_ranking_service(request: Request) -> RankingService:
    return request.app.state.ranking_service
