"""Merge realtime update ops into a graph document.

An update is ``{"type": <op>, "data": {...}}``. Ops are applied strictly in
list order to a working copy of the document; the copy is returned only after
the whole batch went through, so a rejected batch leaves the caller's
document untouched.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Sequence

from flowpad.domain.errors import MalformedUpdateError

# Required payload keys per op type
REQUIRED_FIELDS: Dict[str, tuple[str, ...]] = {
    "tile_create": ("id",),
    "tile_update": ("tileId",),
    "tile_move": ("tileId", "x", "y"),
    "tile_delete": ("tileId",),
    "connection_create": ("id", "fromTile", "toTile"),
    "connection_delete": ("connectionId",),
}
UPDATE_TYPES = frozenset(REQUIRED_FIELDS)


@dataclass
class BatchResult:
    document: Dict[str, Any]
    applied: int
    skipped: int


def validate_updates(updates: Sequence[Mapping[str, Any]]) -> None:
    """Reject the whole batch if any op cannot be interpreted."""
    for index, update in enumerate(updates):
        if not isinstance(update, Mapping):
            raise MalformedUpdateError(f"Update #{index} is not an object", index=index)
        op_type = update.get("type")
        if not isinstance(op_type, str) or op_type not in UPDATE_TYPES:
            raise MalformedUpdateError(f"Update #{index} has unknown type {op_type!r}", index=index)
        data = update.get("data")
        if not isinstance(data, Mapping):
            raise MalformedUpdateError(f"Update #{index} ({op_type}) has no data object", index=index)
        missing = [name for name in REQUIRED_FIELDS[op_type] if data.get(name) is None]
        if missing:
            raise MalformedUpdateError(
                f"Update #{index} ({op_type}) is missing {', '.join(missing)}", index=index
            )


def normalize_document(document: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Deep copy with ``tiles`` and ``connections`` guaranteed to be lists."""
    working = copy.deepcopy(dict(document or {}))
    for key in ("tiles", "connections"):
        if not isinstance(working.get(key), list):
            working[key] = []
    return working


def _find(items: List[Any], item_id: Any) -> Dict[str, Any] | None:
    for item in items:
        if isinstance(item, dict) and item.get("id") == item_id:
            return item
    return None


class RealtimeUpdateApplier:
    """Applies ordered realtime ops to a graph document."""

    def __init__(self) -> None:
        self._handlers: Dict[str, Callable[[Dict[str, Any], Mapping[str, Any]], bool]] = {
            "tile_create": self._tile_create,
            "tile_update": self._tile_update,
            "tile_move": self._tile_move,
            "tile_delete": self._tile_delete,
            "connection_create": self._connection_create,
            "connection_delete": self._connection_delete,
        }

    def apply(self, document: Mapping[str, Any] | None, updates: Sequence[Mapping[str, Any]]) -> BatchResult:
        """Return the document after every op, plus applied/skipped counts.

        Ops that reference a tile or connection the document does not hold
        are skipped rather than treated as errors.
        """
        validate_updates(updates)
        working = normalize_document(document)
        applied = skipped = 0
        for update in updates:
            if self._handlers[update["type"]](working, update["data"]):
                applied += 1
            else:
                skipped += 1
        return BatchResult(document=working, applied=applied, skipped=skipped)

    # --------------- Tiles ---------------
    @staticmethod
    def _tile_create(document: Dict[str, Any], data: Mapping[str, Any]) -> bool:
        if _find(document["tiles"], data["id"]) is not None:
            return False
        document["tiles"].append(copy.deepcopy(dict(data)))
        return True

    @staticmethod
    def _tile_update(document: Dict[str, Any], data: Mapping[str, Any]) -> bool:
        tile = _find(document["tiles"], data["tileId"])
        if tile is None:
            return False
        for key, value in data.items():
            if key in ("tileId", "id"):
                continue
            tile[key] = copy.deepcopy(value)
        return True

    @staticmethod
    def _tile_move(document: Dict[str, Any], data: Mapping[str, Any]) -> bool:
        tile = _find(document["tiles"], data["tileId"])
        if tile is None:
            return False
        tile["x"] = data["x"]
        tile["y"] = data["y"]
        return True

    @staticmethod
    def _tile_delete(document: Dict[str, Any], data: Mapping[str, Any]) -> bool:
        tile_id = data["tileId"]
        if _find(document["tiles"], tile_id) is None:
            return False
        document["tiles"] = [
            tile for tile in document["tiles"]
            if not (isinstance(tile, dict) and tile.get("id") == tile_id)
        ]
        # no connection may point at a tile that is gone
        document["connections"] = [
            conn for conn in document["connections"]
            if not (isinstance(conn, dict) and tile_id in (conn.get("fromTile"), conn.get("toTile")))
        ]
        return True

    # --------------- Connections ---------------
    @staticmethod
    def _connection_create(document: Dict[str, Any], data: Mapping[str, Any]) -> bool:
        if _find(document["connections"], data["id"]) is not None:
            return False
        tiles = document["tiles"]
        if _find(tiles, data["fromTile"]) is None or _find(tiles, data["toTile"]) is None:
            return False
        document["connections"].append(copy.deepcopy(dict(data)))
        return True

    @staticmethod
    def _connection_delete(document: Dict[str, Any], data: Mapping[str, Any]) -> bool:
        connection_id = data["connectionId"]
        if _find(document["connections"], connection_id) is None:
            return False
        document["connections"] = [
            conn for conn in document["connections"]
            if not (isinstance(conn, dict) and conn.get("id") == connection_id)
        ]
        return True
