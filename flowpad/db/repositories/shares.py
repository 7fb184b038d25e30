from sqlalchemy.orm import Session
from flowpad.db.models import GraphShare
from typing import List, Optional

class ShareRepository:
    """Repository for graph share grants."""

    def __init__(self, db: Session):
        self.db = db

    def get_share(self, graph_id: int, email: str) -> Optional[GraphShare]:
        return (
            self.db.query(GraphShare)
            .filter(GraphShare.graph_id == graph_id, GraphShare.shared_with_email == email.lower())
            .first()
        )

    def list_shares(self, graph_id: int) -> List[GraphShare]:
        return (
            self.db.query(GraphShare)
            .filter(GraphShare.graph_id == graph_id)
            .order_by(GraphShare.created_at)
            .all()
        )

    def create_share(self, graph_id: int, email: str, shared_by_user_id: int, permission: str) -> GraphShare:
        """
        Grant an email address access to a graph.

        The caller is expected to have checked for an existing grant first.
        """
        share = GraphShare(
            graph_id=graph_id,
            shared_with_email=email.lower(),
            shared_by_user_id=shared_by_user_id,
            permission=permission,
        )
        self.db.add(share)
        self.db.commit()
        self.db.refresh(share)
        return share

    def update_permission(self, graph_id: int, email: str, permission: str) -> Optional[GraphShare]:
        share = self.get_share(graph_id, email)
        if not share:
            return None
        share.permission = permission
        self.db.commit()
        self.db.refresh(share)
        return share

    def delete_share(self, graph_id: int, email: str) -> bool:
        share = self.get_share(graph_id, email)
        if not share:
            return False
        self.db.delete(share)
        self.db.commit()
        return True
