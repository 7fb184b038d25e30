"""Ports the cache layer needs from the persistent store."""
from __future__ import annotations

from typing import Any, Dict, Protocol

from flowpad.domain.entities import GraphRecord


class GraphStorePort(Protocol):
    """Load and save whole graph rows by id.

    Implementations raise ``StoreUnavailableError`` when the backing store
    cannot be reached.
    """

    def load_graph(self, graph_id: int) -> GraphRecord | None:
        ...

    def save_graph(self, graph_id: int, title: str, data: Dict[str, Any]) -> bool:
        """Overwrite title and data; return False if the row no longer exists."""
        ...
