"""Swipe leaderboard: ranked players by best level, served over HTTP."""

__version__ = "1.0.0"
