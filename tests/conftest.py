from datetime import datetime, timedelta, timezone

import fakeredis
import pytest

from codekeep.store import SnippetStore


class TickingClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer())


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(redis_client, clock):
    return SnippetStore(redis_client, clock=clock)
