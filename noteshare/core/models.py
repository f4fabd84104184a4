"""Pydantic models representing core domain entities.

Every record is frozen: the store replaces a record with an updated copy
instead of mutating it in place.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, FrozenSet, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationInfo,
    field_validator,
    model_validator,
)

# Required free-text field: surrounding whitespace dropped, must not be empty.
Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class Record(BaseModel):
    """Common shape of every stored entity."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    created_at: datetime


class User(Record):
    """Marketplace member holding a coin balance."""

    username: Text
    email: Text
    # Credential is opaque to the core; the auth layer owns hashing.
    password: str = Field(..., repr=False)
    coins: int = Field(default=0, ge=0)
    avatar_url: Optional[str] = None


class FileDescriptor(BaseModel):
    """Uploaded file as reported by the upload collaborator."""

    model_config = ConfigDict(frozen=True)

    name: Text
    url: Text
    size: int = Field(default=0, ge=0)
    type: Text


class Note(Record):
    """A shared document and its engagement counters."""

    user_id: int
    title: Text
    description: Text
    category: Text
    file: FileDescriptor
    is_premium: bool = False
    coin_price: int = Field(default=0, ge=0)
    preview_pages: int = Field(default=0, ge=0)
    downloads: int = Field(default=0, ge=0)
    likes: int = Field(default=0, ge=0)
    tags: FrozenSet[str] = Field(default_factory=frozenset)

    @field_validator("coin_price")
    @classmethod
    def _free_notes_cost_nothing(cls, value: int, info: ValidationInfo) -> int:
        # is_premium is declared first, so it is already a bool here
        return value if info.data.get("is_premium") else 0


class Comment(Record):
    note_id: int
    user_id: int
    content: Text


class Download(Record):
    note_id: int
    user_id: int


class Like(Record):
    note_id: int
    user_id: int


class Discussion(Record):
    """Top-level community thread."""

    user_id: int
    title: Text
    content: Text
    category: Text
    likes: int = Field(default=0, ge=0)
    views: int = Field(default=0, ge=0)
    is_pinned: bool = False
    updated_at: datetime


class Attachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: Text
    type: Text


class DiscussionReply(Record):
    """Reply in a discussion; threads are rebuilt from ``parent_reply_id``."""

    discussion_id: int
    user_id: int
    content: Text
    parent_reply_id: Optional[int] = None
    attachment: Optional[Attachment] = None
    likes: int = Field(default=0, ge=0)
    updated_at: datetime


class Follow(Record):
    follower_id: int
    followed_id: int

    @model_validator(mode="after")
    def _no_self_follow(self) -> "Follow":
        if self.follower_id == self.followed_id:
            raise ValueError("a user cannot follow themselves")
        return self


class CategoryCount(BaseModel):
    """Category name with the number of notes filed under it."""

    name: str
    count: int


class UserStats(BaseModel):
    """Dashboard numbers for a single user."""

    uploads: int
    downloads: int
    coins: int
    likes: int


class DownloadReceipt(BaseModel):
    """Result of a completed download: the event plus what to fetch."""

    download: Download
    file: FileDescriptor


__all__ = [
    "Record",
    "User",
    "FileDescriptor",
    "Note",
    "Comment",
    "Download",
    "Like",
    "Discussion",
    "Attachment",
    "DiscussionReply",
    "Follow",
    "CategoryCount",
    "UserStats",
    "DownloadReceipt",
]
