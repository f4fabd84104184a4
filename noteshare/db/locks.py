"""Per-key asyncio locks serializing read-then-write sections."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Dict, Hashable


class KeyedLock:
    """Registry of ``asyncio.Lock`` objects created on demand per key.

    ``hold(*keys)`` acquires every key in sorted order so two sections that
    share keys cannot deadlock. A lock is dropped from the registry once no
    task holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._users: Dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, *keys: Hashable) -> AsyncIterator[None]:
        ordered = sorted(set(keys))
        acquired: list[Hashable] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                try:
                    await lock.acquire()
                except BaseException:
                    self._checkin(key)
                    raise
                acquired.append(key)
            yield
        finally:
            for key in reversed(acquired):
                self._locks[key].release()
                self._checkin(key)

    def locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)

    # ------------------------------------------------------------------
    def _checkout(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        return lock

    def _checkin(self, key: Hashable) -> None:
        remaining = self._users[key] - 1
        if remaining:
            self._users[key] = remaining
        else:
            del self._users[key]
            del self._locks[key]


def user_key(user_id: int) -> tuple:
    return ("user", user_id)


def like_key(note_id: int, user_id: int) -> tuple:
    return ("like", note_id, user_id)


def follow_key(follower_id: int, followed_id: int) -> tuple:
    return ("follow", follower_id, followed_id)


def record_key(kind: type, record_id: int) -> tuple:
    return (kind.__name__.lower(), record_id)


__all__ = ["KeyedLock", "user_key", "like_key", "follow_key", "record_key"]
