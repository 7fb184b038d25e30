from __future__ import annotations

import logging
from typing import Any, Dict, List

from flowpad.domain.errors import DomainError, NotFoundError
from flowpad.domain.ports import GraphStorePort

from .graph_cache import GraphCache

logger = logging.getLogger(__name__)


class FlushProtocol:
    """Writes dirty cache entries back to the store.

    Last writer wins: the whole title and document are overwritten with no
    concurrency token. A failed write leaves the entry dirty and re-raises;
    retrying is up to the caller.
    """

    def __init__(self, cache: GraphCache, store: GraphStorePort) -> None:
        self._cache = cache
        self._store = store

    def flush(self, graph_id: int) -> bool:
        """Persist one entry. Returns False when there was nothing to write."""
        with self._cache.lock_for(graph_id):
            entry = self._cache.get(graph_id)
            if entry is None or not entry.dirty:
                return False

            if not self._store.save_graph(graph_id, entry.title, entry.document):
                # row deleted underneath us; the cached copy has nowhere to go
                self._cache.discard(graph_id)
                raise NotFoundError(f"Graph not found: {graph_id}")

            self._cache.mark_clean(graph_id)
            logger.debug(f"Flushed graph {graph_id}")
            return True

    def flush_all(self) -> Dict[str, Any]:
        """Flush every dirty entry, continuing past individual failures."""
        flushed: List[int] = []
        failed: List[int] = []
        for graph_id in self._cache.dirty_ids():
            try:
                if self.flush(graph_id):
                    flushed.append(graph_id)
            except DomainError as exc:
                logger.error(f"Could not flush graph {graph_id}: {exc}")
                failed.append(graph_id)
        return {"flushed": flushed, "failed": failed}
