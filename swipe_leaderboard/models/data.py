from datetime import datetime
from typing import List, Optional


class PlayerRecord:
    __slots__ = ('identity', 'level', 'display_image', 'play_count', 'last_updated', 'created_at')
    def __init__(self, identity: str, level: int, display_image: Optional[str],
                 play_count: int, last_updated: datetime, created_at: datetime):
        self.identity = identity
        self.level = level
        self.display_image = display_image
        self.play_count = play_count
        self.last_updated = last_updated
        self.created_at = created_at

    @classmethod
    def from_row(cls, row) -> 'PlayerRecord':
        return cls(
            identity=row['username'],
            level=row['level'],
            display_image=row['profile_picture'],
            play_count=row['games_played'],
            last_updated=row['last_updated'],
            created_at=row['created_at']
        )

    def copy(self) -> 'PlayerRecord':
        return PlayerRecord(self.identity, self.level, self.display_image,
                            self.play_count, self.last_updated, self.created_at)

    def sort_key(self):
        """Leaderboard order: level descending, earlier achievers first"""
        return (-self.level, self.last_updated, self.identity)

    def __eq__(self, other):
        if not isinstance(other, PlayerRecord):
            return NotImplemented
        return all(getattr(self, s) == getattr(other, s) for s in self.__slots__)

    def __repr__(self):
        return (f"PlayerRecord(identity={self.identity!r}, level={self.level}, "
                f"play_count={self.play_count})")


class UpsertResult:
    """Record state after a write, and before it (None when the write created it)"""
    __slots__ = ('record', 'previous')
    def __init__(self, record: PlayerRecord, previous: Optional[PlayerRecord]):
        self.record = record
        self.previous = previous

    @property
    def created(self) -> bool:
        return self.previous is None


class RankedPlayer:
    __slots__ = ('rank', 'record')
    def __init__(self, rank: int, record: PlayerRecord):
        self.rank = rank
        self.record = record


class LeaderboardWindow:
    __slots__ = ('entries', 'total')
    def __init__(self, entries: List[RankedPlayer], total: int):
        self.entries = entries
        self.total = total


class ScoreSubmission:
    """Outcome of a single score submission"""
    NEW_PLAYER = 'new_player'
    NEW_BEST = 'new_best'
    NOT_IMPROVED = 'not_improved'

    __slots__ = ('kind', 'identity', 'level', 'submitted_level', 'previous_best',
                 'rank', 'is_top_tier', 'play_count')
    def __init__(self, kind: str, identity: str, level: int, submitted_level: int,
                 previous_best: Optional[int], rank: int, is_top_tier: bool, play_count: int):
        self.kind = kind
        self.identity = identity
        self.level = level
        self.submitted_level = submitted_level
        self.previous_best = previous_best
        self.rank = rank
        self.is_top_tier = is_top_tier
        self.play_count = play_count

    @property
    def new_record(self) -> bool:
        return self.kind != self.NOT_IMPROVED


class PlayerStanding:
    __slots__ = ('identity', 'record', 'rank', 'is_top_tier')
    def __init__(self, identity: str, record: Optional[PlayerRecord],
                 rank: Optional[int], is_top_tier: bool):
        self.identity = identity
        self.record = record
        self.rank = rank
        self.is_top_tier = is_top_tier

    @property
    def found(self) -> bool:
        return self.record is not None


class LeaderboardStats:
    __slots__ = ('total_players', 'highest_level', 'top_player', 'average_level', 'competitors_in_top_tier')
    def __init__(self, total_players: int, highest_level: int, top_player: Optional[str],
                 average_level: float, competitors_in_top_tier: int):
        self.total_players = total_players
        self.highest_level = highest_level
        self.top_player = top_player
        self.average_level = average_level
        self.competitors_in_top_tier = competitors_in_top_tier
