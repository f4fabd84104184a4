"""In-memory storage layer for NoteShare."""

from .locks import KeyedLock
from .repositories import (
    CommentRepo,
    DiscussionRepo,
    DownloadRepo,
    FollowRepo,
    LikeRepo,
    NoteRepo,
    ReplyRepo,
    Repositories,
    UserRepo,
)
from .store import EntityStore, IdAllocator, Query

__all__ = [
    "EntityStore",
    "IdAllocator",
    "Query",
    "KeyedLock",
    "Repositories",
    "UserRepo",
    "NoteRepo",
    "CommentRepo",
    "DownloadRepo",
    "LikeRepo",
    "DiscussionRepo",
    "ReplyRepo",
    "FollowRepo",
]
