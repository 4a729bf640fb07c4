from .base import PlayerStore
from .memory import InMemoryPlayerStore
from .postgres import PostgresPlayerStore


def create_store(url: str) -> PlayerStore:
    """Build the player store named by a connection URL"""
    scheme = url.split('://', 1)[0].lower() if '://' in url else ''
    if scheme == 'memory':
        return InMemoryPlayerStore()
    if scheme in ('postgres', 'postgresql'):
        return PostgresPlayerStore(url)
    raise ValueError(f"Unsupported store URL scheme: {scheme or url!r}")


__all__ = ['PlayerStore', 'InMemoryPlayerStore', 'PostgresPlayerStore', 'create_store']
