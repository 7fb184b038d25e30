from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from flowpad.domain.errors import NotFoundError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def serialized_size(document: Dict[str, Any]) -> int:
    """Byte length of the compact JSON form of a document."""
    return len(json.dumps(document, separators=(",", ":"), ensure_ascii=False, default=str).encode("utf-8"))


@dataclass
class CacheEntry:
    graph_id: int
    title: str
    document: Dict[str, Any]
    dirty: bool = False
    last_modified: datetime = field(default_factory=utc_now)
    # monotonic clock, only used to order entries for eviction
    last_accessed: float = field(default_factory=time.monotonic)

    def data_size(self) -> int:
        return serialized_size(self.document)

    def touch(self) -> None:
        self.last_accessed = time.monotonic()


class GraphCache:
    """In-process map of graph id to cached document and its dirty state.

    The map itself is guarded by a registry lock. Each graph id additionally
    owns a re-entrant lock (see :meth:`lock_for`) that callers hold across a
    whole fill, apply or flush so the entry's content changes as one step.
    No I/O happens here.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._entries: Dict[int, CacheEntry] = {}
        self._locks: Dict[int, threading.RLock] = {}
        self._registry_lock = threading.Lock()
        self._clock = clock
        self._epoch = 0

    @property
    def epoch(self) -> int:
        """Bumped by every :meth:`clear`; a fill started in an older epoch is stale."""
        with self._registry_lock:
            return self._epoch

    def lock_for(self, graph_id: int) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(graph_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[graph_id] = lock
            return lock

    def get(self, graph_id: int) -> CacheEntry | None:
        with self._registry_lock:
            return self._entries.get(graph_id)

    def put(self, graph_id: int, title: str, document: Dict[str, Any]) -> CacheEntry:
        """Insert or replace an entry as clean."""
        entry = CacheEntry(graph_id=graph_id, title=title, document=document, last_modified=self._clock())
        with self._registry_lock:
            self._entries[graph_id] = entry
        return entry

    def fill(self, graph_id: int, title: str, document: Dict[str, Any], epoch: int) -> CacheEntry | None:
        """Insert a clean entry loaded in ``epoch``; None if the cache was cleared since."""
        entry = CacheEntry(graph_id=graph_id, title=title, document=document, last_modified=self._clock())
        with self._registry_lock:
            if epoch != self._epoch:
                return None
            self._entries[graph_id] = entry
        return entry

    def set_document(self, graph_id: int, document: Dict[str, Any]) -> CacheEntry:
        entry = self._require(graph_id)
        entry.document = document
        entry.touch()
        return entry

    def mark_dirty(self, graph_id: int) -> CacheEntry:
        entry = self._require(graph_id)
        entry.dirty = True
        entry.last_modified = self._clock()
        return entry

    def mark_clean(self, graph_id: int) -> CacheEntry:
        entry = self._require(graph_id)
        entry.dirty = False
        entry.last_modified = self._clock()
        return entry

    def discard(self, graph_id: int) -> CacheEntry | None:
        with self._registry_lock:
            return self._entries.pop(graph_id, None)

    def clear(self) -> int:
        """Drop every entry, dirty or not. Returns how many were dropped."""
        with self._registry_lock:
            count = len(self._entries)
            self._entries.clear()
            self._epoch += 1
        return count

    def entries(self) -> List[CacheEntry]:
        with self._registry_lock:
            return list(self._entries.values())

    def dirty_ids(self) -> List[int]:
        return [entry.graph_id for entry in self.entries() if entry.dirty]

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._entries)

    def __contains__(self, graph_id: int) -> bool:
        with self._registry_lock:
            return graph_id in self._entries

    def _require(self, graph_id: int) -> CacheEntry:
        entry = self.get(graph_id)
        if entry is None:
            raise NotFoundError(f"Graph {graph_id} is not cached")
        return entry
