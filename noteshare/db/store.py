"""In-memory entity store with per-kind identifier allocation.

Records are keyed by their model class (``User``, ``Note`` ...) and by an
integer id unique within that class. The store knows nothing about business
rules; the only cross-entity logic it carries is the per-note index of
Download and Like records, which is what note counters are derived from.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
    Type,
    TypeVar,
)

import pydantic

from noteshare.core.exceptions import (
    InvalidOperationError,
    NotFoundError,
    StoreClosedError,
    ValidationError,
)
from noteshare.core.models import Download, Like, Note, Record

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)
Clock = Callable[[], datetime]
Predicate = Callable[[R], bool]

# Event kinds whose records are counted per note.
_COUNTED = {Download: "downloads", Like: "likes"}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IdAllocator:
    """Issues 1, 2, 3 ... independently for every entity kind."""

    def __init__(self) -> None:
        self._last: Dict[type, int] = defaultdict(int)

    def peek(self, kind: type) -> int:
        return self._last[kind] + 1

    def next(self, kind: type) -> int:
        self._last[kind] += 1
        return self._last[kind]

    def reset(self) -> None:
        self._last.clear()


class Query(Generic[R]):
    """Lazy, restartable view over one table.

    Each iteration takes a fresh snapshot of the table, so a query object can
    be iterated any number of times and always reflects the current state.
    """

    def __init__(
        self,
        source: Callable[[], Iterable[R]],
        predicate: Optional[Predicate] = None,
    ) -> None:
        self._source = source
        self._predicate = predicate

    def __iter__(self) -> Iterator[R]:
        for record in self._source():
            if self._predicate is None or self._predicate(record):
                yield record

    def filter(self, predicate: Predicate) -> "Query[R]":
        return Query(lambda: iter(self), predicate)

    def first(self) -> Optional[R]:
        return next(iter(self), None)

    def count(self) -> int:
        return sum(1 for _ in self)

    def sorted(self, key: Callable[[R], Any], reverse: bool = False) -> List[R]:
        return sorted(self, key=key, reverse=reverse)


class EntityStore:
    """Keyed collections for every entity kind, held in process memory."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self.clock = clock
        self.ids = IdAllocator()
        self._tables: Dict[type, Dict[int, Record]] = defaultdict(dict)
        # kind -> note_id -> ids of event records pointing at that note
        self._events: Dict[type, Dict[int, Set[int]]] = {
            kind: defaultdict(set) for kind in _COUNTED
        }
        self._closed = False

    # ------------------------------------------------------------------
    # public API
    def create(self, kind: Type[R], payload: Mapping[str, Any]) -> R:
        """Validate ``payload``, assign the next id and timestamps, store it."""

        self._ensure_open()
        now = self.clock()
        data = dict(payload)
        data["id"] = self.ids.peek(kind)
        data["created_at"] = now
        if "updated_at" in kind.model_fields:
            data["updated_at"] = now
        if kind is Note:
            # Counters are derived from event records, never supplied.
            data.pop("downloads", None)
            data.pop("likes", None)
        record = self._validate(kind, data)
        self.ids.next(kind)
        self._tables[kind][record.id] = record
        if kind in _COUNTED:
            self._events[kind][record.note_id].add(record.id)
        logger.debug("Stored %s %d", kind.__name__, record.id)
        return self._hydrate(record)

    def get(self, kind: Type[R], record_id: int) -> R:
        self._ensure_open()
        record = self._tables[kind].get(record_id)
        if record is None:
            raise NotFoundError(kind.__name__, record_id)
        return self._hydrate(record)

    def exists(self, kind: type, record_id: int) -> bool:
        self._ensure_open()
        return record_id in self._tables[kind]

    def list(self, kind: Type[R], predicate: Optional[Predicate] = None) -> Query[R]:
        """Return a lazy view of ``kind`` filtered by ``predicate``.

        No ordering is implied; callers sort what they need.
        """

        self._ensure_open()
        return Query(lambda: self._snapshot(kind), predicate)

    def find(self, kind: Type[R], predicate: Predicate) -> Optional[R]:
        return self.list(kind, predicate).first()

    def count(self, kind: type, predicate: Optional[Predicate] = None) -> int:
        if predicate is None:
            self._ensure_open()
            return len(self._tables[kind])
        return self.list(kind, predicate).count()

    def update(self, kind: Type[R], record_id: int, **fields: Any) -> R:
        """Replace a record with a validated copy carrying ``fields``.

        Download and Like records are immutable once written.
        """

        current = self.get(kind, record_id)
        if kind in _COUNTED:
            raise InvalidOperationError(f"{kind.__name__} records cannot be updated")
        data = current.model_dump()
        data.update(fields)
        data["id"] = current.id
        data["created_at"] = current.created_at
        record = self._validate(kind, data)
        self._tables[kind][record_id] = record
        return self._hydrate(record)

    def delete(self, kind: type, record_id: int) -> None:
        self._ensure_open()
        record = self._tables[kind].pop(record_id, None)
        if record is None:
            raise NotFoundError(kind.__name__, record_id)
        if kind in _COUNTED:
            self._events[kind][record.note_id].discard(record_id)

    def event_count(self, kind: type, note_id: int) -> int:
        """Number of Download or Like records referencing ``note_id``."""
        return len(self._events[kind].get(note_id, ()))

    def reset(self) -> None:
        """Drop every record and restart identifiers."""

        self._tables.clear()
        for index in self._events.values():
            index.clear()
        self.ids.reset()
        logger.info("Entity store reset")

    def close(self) -> None:
        self.reset()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # helpers
    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosedError("entity store is closed")

    def _snapshot(self, kind: type) -> Iterator[Record]:
        self._ensure_open()
        for record in list(self._tables[kind].values()):
            yield self._hydrate(record)

    def _hydrate(self, record: R) -> R:
        if not isinstance(record, Note):
            return record
        return record.model_copy(
            update={
                field: self.event_count(kind, record.id)
                for kind, field in _COUNTED.items()
            }
        )

    @staticmethod
    def _validate(kind: Type[R], data: Dict[str, Any]) -> R:
        try:
            return kind.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                f"Invalid {kind.__name__} data: {exc.error_count()} error(s): "
                + "; ".join(
                    f"{'.'.join(str(p) for p in err['loc']) or kind.__name__}: {err['msg']}"
                    for err in exc.errors()
                )
            ) from exc


__all__ = ["EntityStore", "IdAllocator", "Query", "Clock", "utcnow"]
