"""Follow relationships between users."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List

from noteshare.core.exceptions import InvalidOperationError
from noteshare.core.models import User
from noteshare.db import KeyedLock, Query, Repositories
from noteshare.db.locks import follow_key

logger = logging.getLogger(__name__)


class SocialGraph:
    def __init__(self, repos: Repositories, locks: KeyedLock) -> None:
        self.repos = repos
        self.locks = locks

    async def toggle_follow(self, follower_id: int, followed_id: int) -> bool:
        """Follow ``followed_id`` or undo an existing follow.

        Returns ``True`` when the follower is following afterwards.
        """

        if follower_id == followed_id:
            raise InvalidOperationError("Cannot follow yourself")
        await self.repos.users.get(follower_id)
        await self.repos.users.get(followed_id)
        async with self.locks.hold(follow_key(follower_id, followed_id)):
            existing = await self.repos.follows.get_by_ids(follower_id, followed_id)
            if existing is not None:
                await self.repos.follows.delete(existing)
                following = False
            else:
                await self.repos.follows.create(
                    follower_id=follower_id, followed_id=followed_id
                )
                following = True
        logger.info(
            "Follow toggled",
            extra={
                "follower_id": follower_id,
                "followed_id": followed_id,
                "following": following,
            },
        )
        return following

    # A single toggle is the whole API; ``follow`` on an existing edge unfollows.
    follow = toggle_follow

    async def is_following(self, follower_id: int, followed_id: int) -> bool:
        return await self.repos.follows.get_by_ids(follower_id, followed_id) is not None

    def followers(self, user_id: int) -> Query[User]:
        return self._users_from(lambda: (
            f.follower_id for f in self.repos.follows.query(lambda f: f.followed_id == user_id)
        ))

    def following(self, user_id: int) -> Query[User]:
        return self._users_from(lambda: (
            f.followed_id for f in self.repos.follows.query(lambda f: f.follower_id == user_id)
        ))

    def _users_from(self, ids: Callable[[], Iterable[int]]) -> Query[User]:
        # Re-resolved on every iteration, ordered by user id.
        def source() -> List[User]:
            wanted = set(ids())
            return self.repos.users.query(lambda u: u.id in wanted).sorted(
                key=lambda u: u.id
            )

        return Query(source)


__all__ = ["SocialGraph"]
