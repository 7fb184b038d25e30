"""Internal domain entities as TypedDicts for type safety at boundaries."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, TypedDict

SharePermission = Literal["viewer", "editor"]
SHARE_PERMISSIONS: tuple[str, ...] = ("viewer", "editor")


class GraphData(TypedDict):
    """The JSON blob stored in ``graphs.data``.

    Tiles and connections are free-form dicts; only ``id`` on both and
    ``fromTile``/``toTile`` on connections are interpreted by the server.
    """
    tiles: List[Dict[str, Any]]
    connections: List[Dict[str, Any]]


class GraphRecord(TypedDict):
    id: int
    user_id: int
    title: str
    data: Dict[str, Any]
    created_at: datetime | None
    updated_at: datetime | None


class CacheStatus(TypedDict, total=False):
    cached: bool
    lastModified: str
    dirty: bool
    dataSize: int


class ApplyResult(TypedDict):
    applied: int
    skipped: int
    lastModified: str


def empty_graph_data() -> Dict[str, Any]:
    return {"tiles": [], "connections": []}
