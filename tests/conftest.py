import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure project root on sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from noteshare import Marketplace
from noteshare.core import FileDescriptor, Settings
from noteshare.db import EntityStore


class TickingClock:
    """Clock advancing one second per reading, or frozen when asked."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.frozen = False

    def __call__(self) -> datetime:
        current = self.now
        if not self.frozen:
            self.now += timedelta(seconds=1)
        return current


@pytest.fixture()
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture()
def store(clock) -> EntityStore:
    return EntityStore(clock=clock)


@pytest.fixture()
def market(store, settings):
    marketplace = Marketplace(store=store, settings=settings)
    yield marketplace
    marketplace.reset()


@pytest.fixture()
def pdf() -> FileDescriptor:
    return FileDescriptor(
        name="lecture.pdf", url="/api/files/abc-lecture.pdf", size=1024, type="pdf"
    )


@pytest.fixture()
def make_user(market):
    """Async factory registering a user and optionally seeding coins."""

    async def _make(name: str, coins: int = 0):
        user = await market.register(name, f"{name}@example.com", "secret")
        if coins:
            user = await market.repos.users.update(user, coins=coins)
        return user

    return _make


@pytest.fixture()
def make_note(market, pdf):
    """Async factory uploading a note for an existing user."""

    async def _make(owner_id: int, title: str = "Linear Algebra", **kwargs):
        kwargs.setdefault("description", f"Notes on {title}")
        kwargs.setdefault("category", "Academic")
        return await market.upload_note(owner_id, title, file=pdf, **kwargs)

    return _make
