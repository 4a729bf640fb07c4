"""
Leaderboard exceptions.

ValidationError is a client fault and maps to a 400 response. StoreError is a
persistence fault and maps to a 500 response. An unknown player is not an error.
"""

from typing import Optional


class LeaderboardError(Exception):
    """Base exception for ranking and store failures."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.original_error = original_error

    def __str__(self) -> str:
        if self.operation:
            return f"[{self.operation}] {self.message}"
        return self.message


class ValidationError(LeaderboardError):
    """Raised when a submitted username or level is rejected."""


class StoreError(LeaderboardError):
    """Raised when the player store is unavailable or a write cannot be applied."""
