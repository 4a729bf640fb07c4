"""
Ranking service.

Applies the score update policy on top of a PlayerStore and derives ranks.
A player's rank is one more than the number of players with a strictly
higher level, so players on the same level share a rank. Leaderboard windows
use positional ranks instead, which is only valid because the store returns
them already ordered by level and then by earliest achievement.

The service keeps no state between calls. Every write is a single atomic
``PlayerStore.upsert``; the service never reads a record and then writes it.
"""

import asyncio
import math
import re
from typing import Any, Optional

from ..config import ranking
from ..database.base import PlayerStore
from ..errors import ValidationError
from ..logger import get_logger
from ..models.data import (
    LeaderboardStats,
    LeaderboardWindow,
    PlayerStanding,
    RankedPlayer,
    ScoreSubmission,
)

logger = get_logger('services.ranking')

LEADING_INTEGER = re.compile(r'\s*([+-]?\d+)')


def parse_limit(raw: Any, default: int = None, cap: int = None) -> int:
    """
    Turn a client supplied window size into a usable limit.

    Strings are read up to the first non-digit, so "12.5" and "5abc" give 12
    and 5. Non-numeric, zero and negative values fall back to the default;
    anything above the cap is clamped to it.
    """
    default = default or ranking.DEFAULT_LIMIT
    cap = cap or ranking.MAX_LIMIT
    if isinstance(raw, int) and not isinstance(raw, bool):
        value = raw
    else:
        match = LEADING_INTEGER.match(raw) if isinstance(raw, str) else None
        if not match:
            return default
        value = int(match.group(1))
    if value < 1:
        return default
    return min(value, cap)


def clean_identity(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValidationError("Username and level are required", operation='submit_score')
    identity = raw.strip()[:ranking.MAX_USERNAME_LENGTH]
    if not identity:
        raise ValidationError("Username and level are required", operation='submit_score')
    return identity


def clean_level(raw: Any) -> int:
    if raw is None:
        raise ValidationError("Username and level are required", operation='submit_score')
    range_message = f"Level must be a number between {ranking.MIN_LEVEL} and {ranking.MAX_LEVEL}"
    # bool is an int subclass; true/false are not levels
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValidationError(range_message, operation='submit_score')
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValidationError(range_message, operation='submit_score')
        raw = int(raw)
    if not ranking.MIN_LEVEL <= raw <= ranking.MAX_LEVEL:
        raise ValidationError(range_message, operation='submit_score')
    return raw


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


class RankingService:
    def __init__(self, store: PlayerStore, top_tier_size: int = None):
        self.store = store
        self.top_tier_size = top_tier_size or ranking.TOP_TIER_SIZE

    def is_top_tier(self, rank: Optional[int]) -> bool:
        return rank is not None and rank <= self.top_tier_size

    async def rank_for_level(self, level: int) -> int:
        return await self.store.count_with_level_greater_than(level) + 1

    async def get_leaderboard(self, limit: Any = None) -> LeaderboardWindow:
        limit = parse_limit(limit)
        records, total = await asyncio.gather(
            self.store.top_by_level_descending(limit),
            self.store.count_all()
        )
        entries = [RankedPlayer(rank=idx + 1, record=record) for idx, record in enumerate(records)]
        logger.info(f"Leaderboard requested - returning {len(entries)} of {total} players")
        return LeaderboardWindow(entries=entries, total=total)

    async def submit_score(self, identity: Any, level: Any, display_image: Optional[str] = None) -> ScoreSubmission:
        identity = clean_identity(identity)
        level = clean_level(level)

        result = await self.store.upsert(identity, level, display_image or None)
        record = result.record
        rank = await self.rank_for_level(record.level)
        top_tier = self.is_top_tier(rank)

        if result.created:
            kind = ScoreSubmission.NEW_PLAYER
            previous_best = None
            logger.info(f"New player: {identity} joined at level {level} (rank #{rank})"
                        f"{' - in top tier' if top_tier else ''}")
        elif level > result.previous.level:
            kind = ScoreSubmission.NEW_BEST
            previous_best = result.previous.level
            logger.info(f"Record update: {identity} reached level {level} (rank #{rank})"
                        f"{' - in top tier' if top_tier else ''}")
        else:
            kind = ScoreSubmission.NOT_IMPROVED
            previous_best = result.previous.level
            logger.debug(f"Play recorded for {identity}: level {level} did not beat {record.level}")

        return ScoreSubmission(
            kind=kind,
            identity=identity,
            level=record.level,
            submitted_level=level,
            previous_best=previous_best,
            rank=rank,
            is_top_tier=top_tier,
            play_count=record.play_count
        )

    async def get_player(self, identity: str) -> PlayerStanding:
        identity = (identity or '').strip()
        record = await self.store.find_by_identity(identity) if identity else None
        if record is None:
            return PlayerStanding(identity=identity, record=None, rank=None, is_top_tier=False)
        rank = await self.rank_for_level(record.level)
        return PlayerStanding(identity=record.identity, record=record, rank=rank,
                              is_top_tier=self.is_top_tier(rank))

    async def get_stats(self) -> LeaderboardStats:
        total, top, average = await asyncio.gather(
            self.store.count_all(),
            self.store.top_level(),
            self.store.average_level()
        )
        return LeaderboardStats(
            total_players=total,
            highest_level=top.level if top else 0,
            top_player=top.identity if top else None,
            average_level=round_half_up(average) if average is not None else 0,
            competitors_in_top_tier=min(total, self.top_tier_size)
        )
