"""NoteShare marketplace core: entity store and business rules."""

from .marketplace import Marketplace

__all__ = ["Marketplace"]
