"""Note upload, premium-aware download and comments."""

from __future__ import annotations

import logging
from typing import Iterable, List

from noteshare.core.models import Comment, DownloadReceipt, FileDescriptor, Note
from noteshare.db import Repositories

from .economy import CoinEconomy
from .engagement import EngagementAggregator

logger = logging.getLogger(__name__)


class NoteCatalog:
    """Entry points that combine the store, the economy and engagement."""

    def __init__(
        self,
        repos: Repositories,
        economy: CoinEconomy,
        engagement: EngagementAggregator,
    ) -> None:
        self.repos = repos
        self.economy = economy
        self.engagement = engagement

    # ------------------------------------------------------------------
    async def upload(
        self,
        user_id: int,
        title: str,
        description: str,
        category: str,
        file: FileDescriptor,
        is_premium: bool = False,
        coin_price: int = 0,
        tags: Iterable[str] = (),
        preview_pages: int = 0,
    ) -> Note:
        """Store a new note and credit the uploader's bonus.

        ``file`` comes from the upload layer, which has already checked the
        extension and size.
        """

        async with self.economy.transaction(user_id):
            await self.repos.users.get(user_id)
            note = await self.repos.notes.create(
                user_id=user_id,
                title=title,
                description=description,
                category=category,
                file=file,
                is_premium=is_premium,
                coin_price=coin_price,
                preview_pages=preview_pages,
                tags=frozenset(tags),
            )
            await self.economy.credit_upload_bonus(user_id, note.is_premium)
        logger.info(
            "Note uploaded",
            extra={"note_id": note.id, "user_id": user_id, "premium": note.is_premium},
        )
        return note

    async def get_note(self, note_id: int) -> Note:
        return await self.repos.notes.get(note_id)

    async def download(self, note_id: int, user_id: int) -> DownloadReceipt:
        """Charge for premium notes, then record the download.

        Every call is a fresh download: fetching a premium note again charges
        again.
        """

        note = await self.repos.notes.get(note_id)
        await self.repos.users.get(user_id)
        async with self.economy.transaction(user_id, note.user_id):
            if note.is_premium:
                await self.economy.settle(user_id, note.user_id, note.coin_price)
            download = await self.engagement.record_download(note_id, user_id)
        return DownloadReceipt(download=download, file=note.file)

    async def comment(self, note_id: int, user_id: int, content: str) -> Comment:
        await self.repos.notes.get(note_id)
        comment = await self.repos.comments.create(
            note_id=note_id, user_id=user_id, content=content
        )
        logger.info(
            "Comment added", extra={"note_id": note_id, "comment_id": comment.id}
        )
        return comment

    async def comments_for(self, note_id: int) -> List[Comment]:
        """Comments on a note, newest first."""
        return self.repos.comments.by_note(note_id).sorted(
            key=lambda c: (c.created_at, c.id), reverse=True
        )


__all__ = ["NoteCatalog"]
