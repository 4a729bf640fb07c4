from abc import ABC, abstractmethod
from typing import List, Optional
from ..config import ranking
from ..models.data import PlayerRecord, UpsertResult


class PlayerStore(ABC):
    """
    Persistence boundary for player records.

    Implementations hold one record per identity and must apply ``upsert``
    atomically per identity: concurrent submissions for the same player never
    lose a play count increment and never lower the stored level. Writes for
    different identities must not wait on each other.
    """

    async def initialize(self):
        """Open connections and create schema objects"""

    async def close(self):
        """Release connections"""

    async def ping(self) -> bool:
        return True

    @abstractmethod
    async def upsert(self, identity: str, level: int, display_image: Optional[str] = None) -> UpsertResult:
        """Create or update a record, keeping the best level and counting the play"""

    @abstractmethod
    async def find_by_identity(self, identity: str) -> Optional[PlayerRecord]:
        ...

    @abstractmethod
    async def count_with_level_greater_than(self, level: int) -> int:
        ...

    @abstractmethod
    async def top_by_level_descending(self, limit: int) -> List[PlayerRecord]:
        """Records ordered by level descending, ties by earliest last_updated"""

    @abstractmethod
    async def count_all(self) -> int:
        ...

    @abstractmethod
    async def average_level(self) -> Optional[float]:
        """Mean level, or None when the store is empty"""

    async def top_level(self) -> Optional[PlayerRecord]:
        top = await self.top_by_level_descending(1)
        return top[0] if top else None

    @staticmethod
    def check_submission(identity: str, level: int):
        """Schema preconditions every stored record satisfies"""
        if not identity or len(identity) > ranking.MAX_USERNAME_LENGTH:
            raise ValueError(f"identity must be 1-{ranking.MAX_USERNAME_LENGTH} characters")
        if isinstance(level, bool) or not isinstance(level, int):
            raise ValueError("level must be an integer")
        if not ranking.MIN_LEVEL <= level <= ranking.MAX_LEVEL:
            raise ValueError(f"level must be between {ranking.MIN_LEVEL} and {ranking.MAX_LEVEL}")
