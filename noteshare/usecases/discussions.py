"""Community discussions and their replies.

Replies are kept flat: each one stores an optional ``parent_reply_id`` and
consumers rebuild the thread from those pointers. Nothing structural stops a
parent from pointing into another discussion, so :meth:`reply` checks it.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from noteshare.core.exceptions import InvalidReferenceError, ValidationError
from noteshare.core.models import Attachment, Discussion, DiscussionReply
from noteshare.core.settings import Settings
from noteshare.db import KeyedLock, Repositories
from noteshare.db.locks import record_key

logger = logging.getLogger(__name__)


class DiscussionThreads:
    def __init__(self, repos: Repositories, locks: KeyedLock, settings: Settings) -> None:
        self.repos = repos
        self.locks = locks
        self.settings = settings

    async def create_discussion(
        self, user_id: int, title: str, content: str, category: str
    ) -> Discussion:
        await self.repos.users.get(user_id)
        discussion = await self.repos.discussions.create(
            user_id=user_id,
            title=title,
            content=content,
            category=category,
            likes=0,
            views=0,
            is_pinned=False,
        )
        logger.info(
            "Discussion created",
            extra={"discussion_id": discussion.id, "user_id": user_id},
        )
        return discussion

    async def get_discussion(self, discussion_id: int) -> Discussion:
        return await self.repos.discussions.get(discussion_id)

    async def view_discussion(self, discussion_id: int) -> Discussion:
        """Fetch a discussion, counting the fetch as one view."""

        async with self.locks.hold(record_key(Discussion, discussion_id)):
            return await self.repos.discussions.increment(discussion_id, "views")

    async def reply(
        self,
        discussion_id: int,
        user_id: int,
        content: str,
        parent_reply_id: Optional[int] = None,
        attachment: Optional[Attachment] = None,
    ) -> DiscussionReply:
        await self.repos.discussions.get(discussion_id)
        if parent_reply_id is not None:
            parent = None
            if await self.repos.replies.exists(parent_reply_id):
                parent = await self.repos.replies.get(parent_reply_id)
            if parent is None or parent.discussion_id != discussion_id:
                raise InvalidReferenceError(
                    f"reply {parent_reply_id} does not belong to discussion {discussion_id}"
                )
        reply = await self.repos.replies.create(
            discussion_id=discussion_id,
            user_id=user_id,
            content=content,
            parent_reply_id=parent_reply_id,
            attachment=attachment,
        )
        logger.info(
            "Reply posted",
            extra={
                "discussion_id": discussion_id,
                "reply_id": reply.id,
                "parent_reply_id": parent_reply_id,
            },
        )
        return reply

    async def replies_for(self, discussion_id: int) -> List[DiscussionReply]:
        """Replies of one discussion, oldest first."""
        return self.repos.replies.by_discussion(discussion_id).sorted(
            key=lambda r: (r.created_at, r.id)
        )

    async def discussions(
        self, page: int = 1, limit: Optional[int] = None
    ) -> List[Discussion]:
        limit = self.settings.page_size if limit is None else limit
        if page < 1 or limit < 0:
            raise ValidationError("page must be 1 or greater and limit not negative")
        items = self.repos.discussions.query().sorted(
            key=lambda d: (d.created_at, d.id), reverse=True
        )
        start = (page - 1) * limit
        return items[start : start + limit]

    async def discussions_by_category(self, category: str) -> List[Discussion]:
        wanted = category.casefold()
        return list(
            self.repos.discussions.query(lambda d: d.category.casefold() == wanted)
        )

    async def discussions_by_user(self, user_id: int) -> List[Discussion]:
        return list(self.repos.discussions.query(lambda d: d.user_id == user_id))


__all__ = ["DiscussionThreads"]
