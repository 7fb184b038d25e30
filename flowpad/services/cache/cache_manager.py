from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Sequence

from flowpad.domain.entities import ApplyResult, CacheStatus, GraphRecord
from flowpad.domain.errors import NotFoundError
from flowpad.domain.events import (
    CacheCleared,
    DomainEventPublisher,
    GraphFlushed,
    RealtimeUpdatesApplied,
    event_publisher,
)
from flowpad.domain.ports import GraphStorePort

from .cache_policy import CachePolicy
from .flush import FlushProtocol
from .graph_cache import CacheEntry, GraphCache, serialized_size
from .realtime import RealtimeUpdateApplier

logger = logging.getLogger(__name__)


class GraphCacheManager:
    """Orchestrates the graph cache, realtime merges and write-back.

    One instance is built at process start and owned by the application;
    routes receive it through a dependency. Every operation touching an
    entry holds that graph's lock from the cache for its whole duration, so
    concurrent batches on the same graph apply one after the other.
    """

    def __init__(
        self,
        cache: GraphCache,
        store: GraphStorePort,
        policy: CachePolicy,
        applier: RealtimeUpdateApplier | None = None,
        publisher: DomainEventPublisher = event_publisher,
    ) -> None:
        self._cache = cache
        self._store = store
        self._policy = policy
        self._applier = applier or RealtimeUpdateApplier()
        self._flusher = FlushProtocol(cache, store)
        self._events = publisher

    @property
    def cache(self) -> GraphCache:
        return self._cache

    # --------------- Internal helpers ---------------
    def _load_entry(self, graph_id: int) -> CacheEntry:
        """Return the cached entry, filling it from the store on a miss.

        Caller must hold the graph's lock.
        """
        entry = self._cache.get(graph_id)
        if entry is not None:
            entry.touch()
            return entry

        epoch = self._cache.epoch
        record = self._store.load_graph(graph_id)
        if record is None:
            raise NotFoundError(f"Graph not found: {graph_id}")
        entry = self._cache.fill(graph_id, record["title"], record["data"] or {}, epoch)
        if entry is None:
            # the store may have been wiped while this row was being read
            logger.warning(f"Cache cleared while loading graph {graph_id}; dropping stale row")
            raise NotFoundError(f"Graph not found: {graph_id}")
        logger.debug(f"Cache miss for graph {graph_id}, filled from store")
        return entry

    def _enforce_capacity(self, protect: int | None = None) -> None:
        for graph_id in self._policy.eviction_candidates(self._cache.entries(), protect=protect):
            lock = self._cache.lock_for(graph_id)
            # never wait on another graph's lock here; skip busy entries
            if not lock.acquire(blocking=False):
                continue
            try:
                entry = self._cache.get(graph_id)
                if entry is not None and not entry.dirty:
                    self._cache.discard(graph_id)
                    logger.debug(f"Evicted clean graph {graph_id} from cache")
            finally:
                lock.release()

        overflow = self._policy.overflow(len(self._cache))
        if overflow:
            logger.warning(f"Graph cache is {overflow} entries over capacity; remaining entries are dirty or busy")

    # --------------- Public API ---------------
    def apply_realtime_updates(self, graph_id: int, updates: Sequence[Mapping[str, Any]]) -> ApplyResult:
        """Merge a batch of ops into the cached graph and mark it dirty.

        Never writes to the store. The batch is applied in full or, when any
        op is malformed, not at all.
        """
        with self._cache.lock_for(graph_id):
            entry = self._load_entry(graph_id)
            result = self._applier.apply(entry.document, updates)
            self._cache.set_document(graph_id, result.document)
            entry = self._cache.mark_dirty(graph_id)
            last_modified = entry.last_modified.isoformat()

        self._enforce_capacity(protect=graph_id)
        self._events.publish(RealtimeUpdatesApplied.now(
            graph_id, applied=result.applied, skipped=result.skipped,
        ))
        return ApplyResult(applied=result.applied, skipped=result.skipped, lastModified=last_modified)

    def force_save(self, graph_id: int) -> bool:
        """Flush one graph. False when it was not cached or already clean."""
        saved = self._flusher.flush(graph_id)
        if saved:
            entry = self._cache.get(graph_id)
            size = entry.data_size() if entry is not None else 0
            self._events.publish(GraphFlushed.now(graph_id, data_size=size))
        return saved

    def get_cache_status(self, graph_id: int) -> CacheStatus:
        with self._cache.lock_for(graph_id):
            entry = self._cache.get(graph_id)
            if entry is None:
                return CacheStatus(cached=False)
            return CacheStatus(
                cached=True,
                lastModified=entry.last_modified.isoformat(),
                dirty=entry.dirty,
                dataSize=entry.data_size(),
            )

    def read_through(self, graph_id: int, record: GraphRecord) -> Dict[str, Any]:
        """Overlay the cached title/document, if any, onto a store record."""
        with self._cache.lock_for(graph_id):
            entry = self._cache.get(graph_id)
            if entry is None:
                return {**record, "dirty": False}
            entry.touch()
            return {**record, "title": entry.title, "data": entry.document, "dirty": entry.dirty}

    def write_through(
        self,
        graph_id: int,
        title: str | None = None,
        data: Dict[str, Any] | None = None,
    ) -> GraphRecord:
        """Overwrite a graph in the store and leave any cached copy clean.

        Fields left as None keep their current value, taken from the cache
        when the graph is cached so unsaved realtime edits are not lost.
        """
        with self._cache.lock_for(graph_id):
            epoch = self._cache.epoch
            entry = self._cache.get(graph_id)
            if entry is not None:
                current_title, current_data = entry.title, entry.document
            else:
                record = self._store.load_graph(graph_id)
                if record is None:
                    raise NotFoundError(f"Graph not found: {graph_id}")
                current_title, current_data = record["title"], record["data"]

            new_title = title if title is not None else current_title
            new_data = data if data is not None else current_data
            if not self._store.save_graph(graph_id, new_title, new_data):
                self._cache.discard(graph_id)
                raise NotFoundError(f"Graph not found: {graph_id}")
            if entry is not None:
                self._cache.fill(graph_id, new_title, new_data, epoch)

            saved = self._store.load_graph(graph_id)
            if saved is None:
                raise NotFoundError(f"Graph not found: {graph_id}")
            return saved

    def drop(self, graph_id: int) -> bool:
        """Forget a graph regardless of its dirty state (graph was deleted)."""
        with self._cache.lock_for(graph_id):
            return self._cache.discard(graph_id) is not None

    def clear(self) -> int:
        count = self._cache.clear()
        self._events.publish(CacheCleared.now("graph-cache", entries=count))
        return count

    def get_cache_stats(self) -> Dict[str, Any]:
        entries = self._cache.entries()
        return {
            "entries": len(entries),
            "dirty_entries": sum(1 for entry in entries if entry.dirty),
            "total_size_bytes": sum(serialized_size(entry.document) for entry in entries),
            "max_entries": self._policy.max_entries,
        }

    def shutdown(self, flush: bool = True) -> Dict[str, Any]:
        """Flush dirty entries (unless told not to) and empty the cache."""
        summary: Dict[str, Any] = {"flushed": [], "failed": []}
        if flush:
            summary = self._flusher.flush_all()
            if summary["failed"]:
                logger.error(f"Graphs left unsaved at shutdown: {summary['failed']}")
        else:
            dirty = self._cache.dirty_ids()
            if dirty:
                logger.warning(f"Discarding unsaved graphs at shutdown: {dirty}")
        self._cache.clear()
        logger.info(f"Graph cache shut down, flushed {len(summary['flushed'])} graph(s)")
        return summary
