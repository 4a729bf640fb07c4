"""In-process player store.

Records live in a dict keyed by identity, with a SortedList of leaderboard
keys kept alongside so top-N reads and "how many players are above level L"
are O(log n). Each identity has its own asyncio.Lock, so submissions for one
player serialize while different players proceed independently.
"""

import asyncio
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sortedcontainers import SortedList

from ..logger import get_logger
from ..models.data import PlayerRecord, UpsertResult
from .base import PlayerStore

logger = get_logger('database.memory')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPlayerStore(PlayerStore):
    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._records = {}
        self._index = SortedList()
        self._locks = defaultdict(asyncio.Lock)
        self._level_total = 0

    async def initialize(self):
        logger.info("In-memory player store ready")

    async def close(self):
        logger.info(f"In-memory player store closed with {len(self._records)} players")

    async def upsert(self, identity: str, level: int, display_image: Optional[str] = None) -> UpsertResult:
        self.check_submission(identity, level)
        async with self._locks[identity]:
            now = self._clock()
            current = self._records.get(identity)
            if current is None:
                record = PlayerRecord(
                    identity=identity,
                    level=level,
                    display_image=display_image or None,
                    play_count=1,
                    last_updated=now,
                    created_at=now
                )
                self._records[identity] = record
                self._index.add(record.sort_key())
                self._level_total += level
                return UpsertResult(record.copy(), None)

            previous = current.copy()
            self._index.remove(current.sort_key())
            if level > current.level:
                self._level_total += level - current.level
                current.level = level
            if display_image:
                current.display_image = display_image
            current.play_count += 1
            current.last_updated = now
            self._index.add(current.sort_key())
            return UpsertResult(current.copy(), previous)

    async def find_by_identity(self, identity: str) -> Optional[PlayerRecord]:
        record = self._records.get(identity)
        return record.copy() if record else None

    async def count_with_level_greater_than(self, level: int) -> int:
        # (-level,) sorts before every key at that level, so this counts strictly higher levels
        return self._index.bisect_left((-level,))

    async def top_by_level_descending(self, limit: int) -> List[PlayerRecord]:
        if limit <= 0:
            return []
        return [self._records[key[2]].copy() for key in self._index.islice(0, limit)]

    async def count_all(self) -> int:
        return len(self._records)

    async def average_level(self) -> Optional[float]:
        if not self._records:
            return None
        return self._level_total / len(self._records)
