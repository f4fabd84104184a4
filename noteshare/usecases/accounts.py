"""User registration, lookups and per-user dashboards."""

from __future__ import annotations

import logging
from typing import List, Optional

from noteshare.core.exceptions import ValidationError
from noteshare.core.models import Download, Like, User, UserStats
from noteshare.db import KeyedLock, Repositories

logger = logging.getLogger(__name__)


class Accounts:
    def __init__(self, repos: Repositories, locks: KeyedLock) -> None:
        self.repos = repos
        self.locks = locks

    async def register(self, username: str, email: str, password: str) -> User:
        """Create a user with an empty balance.

        Username and email are unique ignoring case. The password is stored as
        given: hashing belongs to the auth layer.
        """

        keys = (("username", username.strip().casefold()), ("email", email.strip().casefold()))
        async with self.locks.hold(*keys):
            if await self.repos.users.get_by_username(username.strip()):
                raise ValidationError("Username already exists")
            if await self.repos.users.get_by_email(email.strip()):
                raise ValidationError("Email already exists")
            user = await self.repos.users.create(
                username=username, email=email, password=password, coins=0
            )
        logger.info("User registered", extra={"user_id": user.id})
        return user

    async def get_user(self, user_id: int) -> User:
        return await self.repos.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self.repos.users.get_by_username(username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self.repos.users.get_by_email(email)

    async def stats(self, user_id: int) -> UserStats:
        user = await self.repos.users.get(user_id)
        notes = list(self.repos.notes.by_user(user_id))
        downloaded = {d.note_id for d in self.repos.downloads.by_user(user_id)}
        return UserStats(
            uploads=len(notes),
            downloads=len(downloaded),
            coins=user.coins,
            likes=sum(note.likes for note in notes),
        )

    async def downloads_by_user(self, user_id: int) -> List[Download]:
        return self.repos.downloads.by_user(user_id).sorted(
            key=lambda d: (d.created_at, d.id), reverse=True
        )

    async def likes_by_user(self, user_id: int) -> List[Like]:
        return self.repos.likes.by_user(user_id).sorted(
            key=lambda l: (l.created_at, l.id), reverse=True
        )


__all__ = ["Accounts"]
