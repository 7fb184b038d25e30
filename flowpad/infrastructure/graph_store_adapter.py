"""SQLAlchemy-backed implementation of the graph store port."""
from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flowpad.db.repositories.graphs import GraphRepository
from flowpad.domain.entities import GraphRecord
from flowpad.domain.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class SqlGraphStore:
    """Loads and saves graph rows with a short-lived session per call.

    The cache outlives any single request, so it cannot borrow the request's
    session; each call opens its own from ``session_factory``.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def load_graph(self, graph_id: int) -> GraphRecord | None:
        db = self._session_factory()
        try:
            graph = GraphRepository(db).get_graph(graph_id)
            if graph is None:
                return None
            return GraphRecord(
                id=graph.id,
                user_id=graph.user_id,
                title=graph.title,
                data=copy.deepcopy(graph.data) if graph.data is not None else {},
                created_at=graph.created_at,
                updated_at=graph.updated_at,
            )
        except SQLAlchemyError as exc:
            logger.error(f"Failed to load graph {graph_id}: {exc}")
            raise StoreUnavailableError(f"Could not load graph {graph_id}") from exc
        finally:
            db.close()

    def save_graph(self, graph_id: int, title: str, data: Dict[str, Any]) -> bool:
        db = self._session_factory()
        try:
            updated = GraphRepository(db).update_graph(graph_id, title, copy.deepcopy(data))
            return updated is not None
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Failed to save graph {graph_id}: {exc}")
            raise StoreUnavailableError(f"Could not save graph {graph_id}") from exc
        finally:
            db.close()
