from __future__ import annotations

from typing import Iterable, List

from .graph_cache import CacheEntry


class CachePolicy:
    """Encapsulate caching heuristics such as capacity eviction.

    Only clean entries are ever proposed for eviction; dirty ones stay until
    flushed even when that leaves the cache above capacity.
    """

    def __init__(self, max_entries: int = 0) -> None:
        self.max_entries = max(0, max_entries)

    def is_bounded(self) -> bool:
        return self.max_entries > 0

    def overflow(self, entry_count: int) -> int:
        if not self.is_bounded():
            return 0
        return max(0, entry_count - self.max_entries)

    def eviction_candidates(self, entries: Iterable[CacheEntry], protect: int | None = None) -> List[int]:
        """Least recently touched clean entries that bring the cache back to capacity."""
        entries = list(entries)
        excess = self.overflow(len(entries))
        if not excess:
            return []
        clean = sorted(
            (entry for entry in entries if not entry.dirty and entry.graph_id != protect),
            key=lambda entry: entry.last_accessed,
        )
        return [entry.graph_id for entry in clean[:excess]]
