"""Core library exposing domain models, settings and exceptions."""

from .settings import Settings, get_settings
from .exceptions import (
    DomainError,
    Error,
    InsufficientFundsError,
    InvalidOperationError,
    InvalidReferenceError,
    NotFoundError,
    StoreClosedError,
    UnauthorizedError,
    ValidationError,
)
from .models import (
    Attachment,
    CategoryCount,
    Comment,
    Discussion,
    DiscussionReply,
    Download,
    DownloadReceipt,
    FileDescriptor,
    Follow,
    Like,
    Note,
    Record,
    User,
    UserStats,
)

__all__ = [
    "Settings",
    "get_settings",
    "DomainError",
    "Error",
    "InsufficientFundsError",
    "InvalidOperationError",
    "InvalidReferenceError",
    "NotFoundError",
    "StoreClosedError",
    "UnauthorizedError",
    "ValidationError",
    "Attachment",
    "CategoryCount",
    "Comment",
    "Discussion",
    "DiscussionReply",
    "Download",
    "DownloadReceipt",
    "FileDescriptor",
    "Follow",
    "Like",
    "Note",
    "Record",
    "User",
    "UserStats",
]
