"""
Shared fixtures for the sync client tests
"""

import pytest
import pytest_asyncio

from ecowatch.api import ApiClient
from ecowatch.storage import MemoryKeyValueStore, SessionStore
from tests.utils.fake_backend import BASE_URL, FakeBackend


class StepClock:
    """Millisecond clock that advances by one step per call"""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def backend():
    return FakeBackend()


@pytest_asyncio.fixture
async def client(backend):
    async with ApiClient(BASE_URL, timeout=5.0, transport=backend.transport) as api_client:
        yield api_client


@pytest.fixture
def kv_store():
    return MemoryKeyValueStore()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def session_store(kv_store, clock):
    return SessionStore(kv_store, now_ms=clock)
