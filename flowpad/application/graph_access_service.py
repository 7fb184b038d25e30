"""Service for graph access validation and ownership checks."""
from __future__ import annotations

from flowpad.db.models import Graph, User
from flowpad.db.repositories.graphs import GraphRepository
from flowpad.db.repositories.shares import ShareRepository
from flowpad.domain.errors import AccessDeniedError, NotFoundError


class GraphAccessService:
    """Centralizes ownership/share checks to avoid controller duplication.

    Callers without any grant get NotFoundError rather than AccessDeniedError
    so graph ids cannot be discovered by guessing.
    """

    def __init__(self, graphs: GraphRepository, shares: ShareRepository) -> None:
        self._graphs = graphs
        self._shares = shares

    def _require_graph(self, graph_id: int) -> Graph:
        graph = self._graphs.get_graph(graph_id)
        if not graph:
            raise NotFoundError(f"Graph not found: {graph_id}")
        return graph

    def permission_for(self, graph: Graph, user: User) -> str | None:
        """Return "owner", "editor", "viewer" or None."""
        if graph.user_id == user.id:
            return "owner"
        share = self._shares.get_share(graph.id, user.email)
        return share.permission if share else None

    def require_read(self, graph_id: int, user: User) -> Graph:
        """Raise NotFoundError unless the user owns the graph or holds any share."""
        graph = self._require_graph(graph_id)
        if self.permission_for(graph, user) is None:
            raise NotFoundError(f"Graph not found: {graph_id}")
        return graph

    def require_write(self, graph_id: int, user: User) -> Graph:
        """Owner or editor share; viewers get AccessDeniedError."""
        graph = self._require_graph(graph_id)
        permission = self.permission_for(graph, user)
        if permission is None:
            raise NotFoundError(f"Graph not found: {graph_id}")
        if permission not in ("owner", "editor"):
            raise AccessDeniedError("Editor access required")
        return graph

    def require_owner(self, graph_id: int, user: User) -> Graph:
        graph = self._require_graph(graph_id)
        permission = self.permission_for(graph, user)
        if permission is None:
            raise NotFoundError(f"Graph not found: {graph_id}")
        if permission != "owner":
            raise AccessDeniedError("Only the owner can do this")
        return graph
