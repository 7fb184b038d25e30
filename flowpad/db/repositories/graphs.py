from sqlalchemy.orm import Session
from flowpad.db.models import Graph, GraphShare, User, utcnow
from typing import Any, Dict, List, Optional, Tuple

class GraphRepository:
    """Repository for graph operations."""

    def __init__(self, db: Session):
        self.db = db

    def create_graph(self, user_id: int, title: str, data: Dict[str, Any]) -> Graph:
        """
        Create a new graph owned by a user.

        Args:
            user_id: Owner user ID
            title: Graph title
            data: Initial graph document

        Returns:
            Created graph
        """
        graph = Graph(user_id=user_id, title=title, data=data)
        self.db.add(graph)
        self.db.commit()
        self.db.refresh(graph)
        return graph

    def get_graph(self, graph_id: int) -> Optional[Graph]:
        """
        Get a graph by ID.

        Args:
            graph_id: Graph ID

        Returns:
            Graph if found, None otherwise
        """
        return self.db.get(Graph, graph_id)

    def get_user_graphs(self, user_id: int) -> List[Graph]:
        """
        Get all graphs owned by a user, most recently updated first.
        """
        return (
            self.db.query(Graph)
            .filter(Graph.user_id == user_id)
            .order_by(Graph.updated_at.desc())
            .all()
        )

    def get_shared_graphs(self, email: str) -> List[Tuple[Graph, str, str]]:
        """
        Get graphs shared with an email address.

        Returns:
            (graph, owner name, permission) tuples, most recently updated first
        """
        rows = (
            self.db.query(Graph, User.name, GraphShare.permission)
            .join(User, Graph.user_id == User.id)
            .join(GraphShare, GraphShare.graph_id == Graph.id)
            .filter(GraphShare.shared_with_email == email.lower())
            .order_by(Graph.updated_at.desc())
            .all()
        )
        return [(graph, owner_name, permission) for graph, owner_name, permission in rows]

    def update_graph(self, graph_id: int, title: str, data: Dict[str, Any]) -> Optional[Graph]:
        """
        Overwrite a graph's title and document.

        Returns:
            Updated graph or None if not found
        """
        graph = self.get_graph(graph_id)
        if not graph:
            return None

        graph.title = title
        graph.data = data
        graph.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(graph)
        return graph

    def delete_graph(self, graph_id: int) -> bool:
        """
        Delete a graph by ID.

        Args:
            graph_id: Graph ID

        Returns:
            True if graph was deleted, False otherwise
        """
        graph = self.get_graph(graph_id)
        if not graph:
            return False

        self.db.delete(graph)
        self.db.commit()
        return True
