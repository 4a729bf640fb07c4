from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from swipe_leaderboard.database.memory import InMemoryPlayerStore
from swipe_leaderboard.main import create_app
from swipe_leaderboard.services.ranking import RankingService


class TickingClock:
    """Each reading is one second after the previous one"""

    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(clock):
    return InMemoryPlayerStore(clock=clock)


@pytest.fixture
def service(store):
    return RankingService(store)


@pytest.fixture
def client(store):
    with TestClient(create_app(store)) as client:
        yield client
