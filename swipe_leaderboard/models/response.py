from datetime import datetime, timezone
from pydantic import BaseModel
from typing import Dict, List, Literal, Optional, Union


def iso_now() -> str:
    """UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class ServiceInfoResponse(BaseModel):
    message: str
    status: Literal["OK"] = "OK"
    timestamp: str
    endpoints: Dict[str, str]

class HealthResponse(BaseModel):
    status: Literal["OK"] = "OK"
    database: Literal["connected", "disconnected"]
    timestamp: str

class LeaderboardEntry(BaseModel):
    rank: int
    username: str
    level: int
    gamesPlayed: int
    lastUpdated: datetime
    avatar: str

class LeaderboardResponse(BaseModel):
    success: bool = True
    data: List[LeaderboardEntry]
    total: int
    timestamp: str

class NewPlayerData(BaseModel):
    username: str
    level: int
    rank: int
    isInTop20: bool
    gamesPlayed: int

class NewBestData(BaseModel):
    username: str
    level: int
    previousBest: int
    newRank: int
    isInTop20: bool
    gamesPlayed: int

class NotImprovedData(BaseModel):
    username: str
    currentBest: int
    submittedLevel: int
    currentRank: int
    isInTop20: bool
    gamesPlayed: int

class ScoreUpdateResponse(BaseModel):
    success: bool = True
    newRecord: bool
    message: str
    data: Union[NewBestData, NewPlayerData, NotImprovedData]

class PlayerData(BaseModel):
    username: str
    level: int
    rank: int
    isInTop20: bool
    profilePicture: Optional[str] = None
    gamesPlayed: int
    joinedAt: datetime
    lastPlayed: datetime

class MissingPlayerData(BaseModel):
    username: str
    level: Literal[0] = 0
    rank: None = None
    isInTop20: Literal[False] = False
    profilePicture: None = None
    gamesPlayed: Literal[0] = 0
    message: str = "Player not found"

class PlayerResponse(BaseModel):
    success: bool = True
    data: Union[PlayerData, MissingPlayerData]

class StatsData(BaseModel):
    totalPlayers: int
    highestLevel: int
    topPlayer: Optional[str] = None
    averageLevel: float
    competitorsInTop20: int

class StatsResponse(BaseModel):
    success: bool = True
    data: StatsData

class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str
    message: Optional[str] = None

class NotFoundResponse(BaseModel):
    success: Literal[False] = False
    error: str = "Endpoint not found"
    availableEndpoints: List[str]
