"""
Test configuration and fixtures for the link store.
This centralizes all test setup, making individual tests clean.
"""

import uuid
from datetime import datetime, timedelta

import pytest

from shortlinks_app.config import Settings
from shortlinks_app.lifecycle.monitor import LifecycleMonitor
from shortlinks_app.services.link_store import LinkStore
from shortlinks_app.storage.strategies import FileLinkStorage, InMemoryLinkStorage


class FakeClock:
    """Manually advanced clock, callable like datetime.now"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def settings():
    """Settings isolated from the environment's .env file"""
    return Settings(
        _env_file=None,
        default_ttl_hours=1,
        default_max_clicks=2,
        cleanup_interval_minutes=1,
        short_code_length=8,
        url_max_length=100,
        storage_backend="memory",
        short_link_domain="https://sho.rt",
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 15, 12, 0, 0))


@pytest.fixture
def memory_storage():
    return InMemoryLinkStorage()


@pytest.fixture
def file_storage(tmp_path):
    return FileLinkStorage(path=str(tmp_path / "links.txt"))


@pytest.fixture
def store(settings, memory_storage, clock):
    """Fresh store over in-memory storage with a controllable clock"""
    return LinkStore(settings=settings, storage=memory_storage, clock=clock)


@pytest.fixture
def monitor(store, settings, clock):
    m = LifecycleMonitor(store=store, settings=settings, clock=clock)
    yield m
    m.stop()


@pytest.fixture
def owner():
    return uuid.uuid4()


@pytest.fixture
def other_owner():
    return uuid.uuid4()
