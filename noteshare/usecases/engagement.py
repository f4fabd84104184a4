"""Engagement events and the counters derived from them."""

from __future__ import annotations

import logging

from noteshare.core.models import Discussion, DiscussionReply, Download
from noteshare.db import KeyedLock, Repositories
from noteshare.db.locks import like_key, record_key

logger = logging.getLogger(__name__)


class EngagementAggregator:
    """Records downloads and likes.

    Note ``downloads``/``likes`` are not stored counters: the entity store
    derives them from the Download and Like records on every read, so the
    only thing to get right here is the set of event records itself.
    """

    def __init__(self, repos: Repositories, locks: KeyedLock) -> None:
        self.repos = repos
        self.locks = locks

    async def record_download(self, note_id: int, user_id: int) -> Download:
        # Payment for premium notes is settled by the caller beforehand.
        await self.repos.notes.get(note_id)
        download = await self.repos.downloads.create(note_id=note_id, user_id=user_id)
        logger.info(
            "Download recorded", extra={"note_id": note_id, "user_id": user_id}
        )
        return download

    async def toggle_like(self, note_id: int, user_id: int) -> bool:
        """Like or unlike ``note_id`` for ``user_id``; returns the new state."""

        await self.repos.notes.get(note_id)
        async with self.locks.hold(like_key(note_id, user_id)):
            existing = await self.repos.likes.get_by_user_and_note(user_id, note_id)
            if existing is not None:
                await self.repos.likes.delete(existing)
                liked = False
            else:
                await self.repos.likes.create(note_id=note_id, user_id=user_id)
                liked = True
        logger.info(
            "Like toggled",
            extra={"note_id": note_id, "user_id": user_id, "liked": liked},
        )
        return liked

    async def is_liked(self, note_id: int, user_id: int) -> bool:
        return await self.repos.likes.get_by_user_and_note(user_id, note_id) is not None

    async def like_discussion(self, discussion_id: int) -> Discussion:
        async with self.locks.hold(record_key(Discussion, discussion_id)):
            return await self.repos.discussions.increment(discussion_id, "likes")

    async def like_reply(self, reply_id: int) -> DiscussionReply:
        async with self.locks.hold(record_key(DiscussionReply, reply_id)):
            return await self.repos.replies.increment_likes(reply_id)


__all__ = ["EngagementAggregator"]
