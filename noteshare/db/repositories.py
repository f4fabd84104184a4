"""Repository classes for CRUD operations on stored entities."""

from __future__ import annotations

from typing import Any, Generic, List, Optional, Type, TypeVar

from noteshare.core import models
from noteshare.core.exceptions import InvalidOperationError

from .store import EntityStore, Predicate, Query

R = TypeVar("R", bound=models.Record)


class Repo(Generic[R]):
    """Shared CRUD surface over one entity kind."""

    model: Type[R]

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def create(self, **fields: Any) -> R:
        return self.store.create(self.model, fields)

    async def get(self, record_id: int) -> R:
        return self.store.get(self.model, record_id)

    async def exists(self, record_id: int) -> bool:
        return self.store.exists(self.model, record_id)

    def query(self, predicate: Optional[Predicate] = None) -> Query[R]:
        return self.store.list(self.model, predicate)

    async def list(self) -> List[R]:
        return list(self.query())

    async def update(self, record: R, **fields: Any) -> R:
        return self.store.update(self.model, record.id, **fields)

    async def delete(self, record: R) -> None:
        self.store.delete(self.model, record.id)


class UserRepo(Repo[models.User]):
    """CRUD operations for :class:`models.User`."""

    model = models.User

    async def get_by_username(self, username: str) -> Optional[models.User]:
        wanted = username.casefold()
        return self.store.find(self.model, lambda u: u.username.casefold() == wanted)

    async def get_by_email(self, email: str) -> Optional[models.User]:
        wanted = email.casefold()
        return self.store.find(self.model, lambda u: u.email.casefold() == wanted)

    async def adjust_coins(self, user_id: int, delta: int) -> models.User:
        """Apply ``delta`` to the balance; a negative result is refused."""

        user = await self.get(user_id)
        coins = user.coins + delta
        if coins < 0:
            raise InvalidOperationError(
                f"balance of user {user_id} cannot drop below zero"
            )
        return await self.update(user, coins=coins)

    def transfer(self, buyer: models.User, seller: models.User, amount: int) -> None:
        """Move ``amount`` coins from ``buyer`` to ``seller`` in one step.

        Both records are written without yielding to the event loop, so no
        other task can see the debit without the matching credit.
        """

        if buyer.coins < amount:
            raise InvalidOperationError(
                f"balance of user {buyer.id} cannot drop below zero"
            )
        self.store.update(self.model, buyer.id, coins=buyer.coins - amount)
        if seller.id != buyer.id:
            self.store.update(self.model, seller.id, coins=seller.coins + amount)


class NoteRepo(Repo[models.Note]):
    """CRUD operations for :class:`models.Note`."""

    model = models.Note

    def by_user(self, user_id: int) -> Query[models.Note]:
        return self.query(lambda n: n.user_id == user_id)


class CommentRepo(Repo[models.Comment]):
    model = models.Comment

    def by_note(self, note_id: int) -> Query[models.Comment]:
        return self.query(lambda c: c.note_id == note_id)


class DownloadRepo(Repo[models.Download]):
    model = models.Download

    def by_user(self, user_id: int) -> Query[models.Download]:
        return self.query(lambda d: d.user_id == user_id)


class LikeRepo(Repo[models.Like]):
    model = models.Like

    async def get_by_user_and_note(
        self, user_id: int, note_id: int
    ) -> Optional[models.Like]:
        return self.store.find(
            self.model, lambda l: l.user_id == user_id and l.note_id == note_id
        )

    def by_user(self, user_id: int) -> Query[models.Like]:
        return self.query(lambda l: l.user_id == user_id)


class DiscussionRepo(Repo[models.Discussion]):
    model = models.Discussion

    async def increment(self, discussion_id: int, field: str) -> models.Discussion:
        discussion = await self.get(discussion_id)
        return await self.update(discussion, **{field: getattr(discussion, field) + 1})


class ReplyRepo(Repo[models.DiscussionReply]):
    model = models.DiscussionReply

    def by_discussion(self, discussion_id: int) -> Query[models.DiscussionReply]:
        return self.query(lambda r: r.discussion_id == discussion_id)

    async def increment_likes(self, reply_id: int) -> models.DiscussionReply:
        reply = await self.get(reply_id)
        return await self.update(reply, likes=reply.likes + 1)


class FollowRepo(Repo[models.Follow]):
    model = models.Follow

    async def get_by_ids(
        self, follower_id: int, followed_id: int
    ) -> Optional[models.Follow]:
        return self.store.find(
            self.model,
            lambda f: f.follower_id == follower_id and f.followed_id == followed_id,
        )


class Repositories:
    """All repositories bound to one store."""

    def __init__(self, store: EntityStore) -> None:
        self.store = store
        self.users = UserRepo(store)
        self.notes = NoteRepo(store)
        self.comments = CommentRepo(store)
        self.downloads = DownloadRepo(store)
        self.likes = LikeRepo(store)
        self.discussions = DiscussionRepo(store)
        self.replies = ReplyRepo(store)
        self.follows = FollowRepo(store)


__all__ = [
    "Repo",
    "UserRepo",
    "NoteRepo",
    "CommentRepo",
    "DownloadRepo",
    "LikeRepo",
    "DiscussionRepo",
    "ReplyRepo",
    "FollowRepo",
    "Repositories",
]
