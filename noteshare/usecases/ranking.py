"""Read-only views over notes: trending, recent, categories and search."""

from __future__ import annotations

from collections import Counter
from typing import List, Optional

from noteshare.core.exceptions import ValidationError
from noteshare.core.models import CategoryCount, Note, User
from noteshare.core.settings import Settings
from noteshare.db import Repositories


def _check_limit(limit: int) -> int:
    if limit < 0:
        raise ValidationError("limit must not be negative")
    return limit


class Ranking:
    """Derives ordered views of notes without mutating them.

    Nothing here takes a lock: each call works on a snapshot of the tables
    and may run while a write is pending.
    """

    def __init__(self, repos: Repositories, settings: Settings) -> None:
        self.repos = repos
        self.settings = settings

    async def trending(self, limit: Optional[int] = None) -> List[Note]:
        limit = _check_limit(self.settings.trending_limit if limit is None else limit)
        notes = self.repos.notes.query().sorted(
            key=lambda n: (-(n.downloads + n.likes), n.id)
        )
        return notes[:limit]

    async def recent(self, limit: Optional[int] = None) -> List[Note]:
        limit = _check_limit(self.settings.recent_limit if limit is None else limit)
        notes = self.repos.notes.query().sorted(
            key=lambda n: (n.created_at, n.id), reverse=True
        )
        return notes[:limit]

    async def all_notes(self, page: int = 1, limit: Optional[int] = None) -> List[Note]:
        """Newest-first listing split into 1-based pages."""

        limit = _check_limit(self.settings.page_size if limit is None else limit)
        if page < 1:
            raise ValidationError("page must be 1 or greater")
        notes = self.repos.notes.query().sorted(
            key=lambda n: (n.created_at, n.id), reverse=True
        )
        start = (page - 1) * limit
        return notes[start : start + limit]

    async def by_category(self, category: str) -> List[Note]:
        wanted = category.casefold()
        return list(self.repos.notes.query(lambda n: n.category.casefold() == wanted))

    async def notes_by_user(self, user_id: int) -> List[Note]:
        return list(self.repos.notes.by_user(user_id))

    async def search(self, query: str) -> List[Note]:
        needle = query.casefold()

        def matches(note: Note) -> bool:
            return (
                needle in note.title.casefold()
                or needle in note.description.casefold()
                or any(needle in tag.casefold() for tag in note.tags)
            )

        return list(self.repos.notes.query(matches))

    async def categories(self) -> List[CategoryCount]:
        counts = Counter(note.category for note in self.repos.notes.query())
        return [
            CategoryCount(name=name, count=count)
            for name, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        ]

    async def top_contributors(self, limit: Optional[int] = None) -> List[User]:
        limit = _check_limit(
            self.settings.contributors_limit if limit is None else limit
        )
        uploads = Counter(note.user_id for note in self.repos.notes.query())
        users = self.repos.users.query().sorted(key=lambda u: (-uploads[u.id], u.id))
        return users[:limit]


__all__ = ["Ranking"]
