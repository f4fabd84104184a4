"""Marketplace facade wiring every component around one entity store.

The request layer builds a single :class:`Marketplace` at startup and passes
it to its handlers. ``user_id`` arguments named ``actor_id`` come from the
auth layer and may be ``None`` for anonymous requests; operations that need
an identity reject those with :class:`UnauthorizedError`.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from noteshare.core.exceptions import UnauthorizedError
from noteshare.core.models import (
    Attachment,
    CategoryCount,
    Comment,
    Discussion,
    DiscussionReply,
    Download,
    DownloadReceipt,
    FileDescriptor,
    Like,
    Note,
    User,
    UserStats,
)
from noteshare.core.settings import Settings, get_settings
from noteshare.db import EntityStore, KeyedLock, Query, Repositories
from noteshare.db.store import Clock, utcnow
from noteshare.usecases import (
    Accounts,
    CoinEconomy,
    DiscussionThreads,
    EngagementAggregator,
    NoteCatalog,
    Ranking,
    SocialGraph,
)

logger = logging.getLogger(__name__)


def _require(actor_id: Optional[int]) -> int:
    if actor_id is None:
        raise UnauthorizedError("Unauthorized")
    return actor_id


class Marketplace:
    def __init__(
        self,
        store: Optional[EntityStore] = None,
        settings: Optional[Settings] = None,
        clock: Clock = utcnow,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store or EntityStore(clock=clock)
        self.locks = KeyedLock()
        self.repos = Repositories(self.store)
        self.accounts = Accounts(self.repos, self.locks)
        self.economy = CoinEconomy(self.repos, self.locks, self.settings)
        self.engagement = EngagementAggregator(self.repos, self.locks)
        self.ranking = Ranking(self.repos, self.settings)
        self.social = SocialGraph(self.repos, self.locks)
        self.discussions = DiscussionThreads(self.repos, self.locks, self.settings)
        self.notes = NoteCatalog(self.repos, self.economy, self.engagement)

    def reset(self) -> None:
        self.store.reset()

    def close(self) -> None:
        self.store.close()
        logger.info("Marketplace closed")

    # ------------------------------------------------------------------
    # accounts
    async def register(self, username: str, email: str, password: str) -> User:
        return await self.accounts.register(username, email, password)

    async def get_user(self, user_id: int) -> User:
        return await self.accounts.get_user(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self.accounts.get_user_by_username(username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self.accounts.get_user_by_email(email)

    async def user_stats(self, actor_id: Optional[int]) -> UserStats:
        return await self.accounts.stats(_require(actor_id))

    async def user_downloads(self, actor_id: Optional[int]) -> List[Download]:
        return await self.accounts.downloads_by_user(_require(actor_id))

    async def user_likes(self, actor_id: Optional[int]) -> List[Like]:
        return await self.accounts.likes_by_user(_require(actor_id))

    # ------------------------------------------------------------------
    # notes
    async def upload_note(
        self,
        actor_id: Optional[int],
        title: str,
        description: str,
        category: str,
        file: FileDescriptor,
        is_premium: bool = False,
        coin_price: int = 0,
        tags: Iterable[str] = (),
        preview_pages: int = 0,
    ) -> Note:
        return await self.notes.upload(
            _require(actor_id),
            title,
            description,
            category,
            file,
            is_premium=is_premium,
            coin_price=coin_price,
            tags=tags,
            preview_pages=preview_pages,
        )

    async def get_note(self, note_id: int) -> Note:
        return await self.notes.get_note(note_id)

    async def download_note(self, actor_id: Optional[int], note_id: int) -> DownloadReceipt:
        return await self.notes.download(note_id, _require(actor_id))

    async def toggle_like(self, actor_id: Optional[int], note_id: int) -> bool:
        return await self.engagement.toggle_like(note_id, _require(actor_id))

    async def add_comment(
        self, actor_id: Optional[int], note_id: int, content: str
    ) -> Comment:
        return await self.notes.comment(note_id, _require(actor_id), content)

    async def comments_for(self, note_id: int) -> List[Comment]:
        return await self.notes.comments_for(note_id)

    # ------------------------------------------------------------------
    # browsing
    async def all_notes(self, page: int = 1, limit: Optional[int] = None) -> List[Note]:
        return await self.ranking.all_notes(page, limit)

    async def trending(self, limit: Optional[int] = None) -> List[Note]:
        return await self.ranking.trending(limit)

    async def recent(self, limit: Optional[int] = None) -> List[Note]:
        return await self.ranking.recent(limit)

    async def by_category(self, category: str) -> List[Note]:
        return await self.ranking.by_category(category)

    async def search(self, query: str) -> List[Note]:
        return await self.ranking.search(query)

    async def categories(self) -> List[CategoryCount]:
        return await self.ranking.categories()

    async def top_contributors(self, limit: Optional[int] = None) -> List[User]:
        return await self.ranking.top_contributors(limit)

    async def notes_by_user(self, user_id: int) -> List[Note]:
        return await self.ranking.notes_by_user(user_id)

    # ------------------------------------------------------------------
    # social
    async def toggle_follow(self, actor_id: Optional[int], followed_id: int) -> bool:
        return await self.social.toggle_follow(_require(actor_id), followed_id)

    async def is_following(self, actor_id: Optional[int], followed_id: int) -> bool:
        return await self.social.is_following(_require(actor_id), followed_id)

    def followers(self, user_id: int) -> Query[User]:
        return self.social.followers(user_id)

    def following(self, user_id: int) -> Query[User]:
        return self.social.following(user_id)

    # ------------------------------------------------------------------
    # discussions
    async def create_discussion(
        self, actor_id: Optional[int], title: str, content: str, category: str
    ) -> Discussion:
        return await self.discussions.create_discussion(
            _require(actor_id), title, content, category
        )

    async def view_discussion(self, discussion_id: int) -> Discussion:
        return await self.discussions.view_discussion(discussion_id)

    async def list_discussions(
        self, page: int = 1, limit: Optional[int] = None
    ) -> List[Discussion]:
        return await self.discussions.discussions(page, limit)

    async def discussions_by_category(self, category: str) -> List[Discussion]:
        return await self.discussions.discussions_by_category(category)

    async def discussions_by_user(self, user_id: int) -> List[Discussion]:
        return await self.discussions.discussions_by_user(user_id)

    async def like_discussion(
        self, actor_id: Optional[int], discussion_id: int
    ) -> Discussion:
        _require(actor_id)
        return await self.engagement.like_discussion(discussion_id)

    async def like_reply(self, actor_id: Optional[int], reply_id: int) -> DiscussionReply:
        _require(actor_id)
        return await self.engagement.like_reply(reply_id)

    async def reply(
        self,
        actor_id: Optional[int],
        discussion_id: int,
        content: str,
        parent_reply_id: Optional[int] = None,
        attachment: Optional[Attachment] = None,
    ) -> DiscussionReply:
        return await self.discussions.reply(
            discussion_id,
            _require(actor_id),
            content,
            parent_reply_id=parent_reply_id,
            attachment=attachment,
        )

    async def replies_for(self, discussion_id: int) -> List[DiscussionReply]:
        return await self.discussions.replies_for(discussion_id)


__all__ = ["Marketplace"]
