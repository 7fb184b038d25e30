from fastapi import APIRouter, Depends
from typing import List

from flowpad.schemas.api_schemas import MessageResponse, ShareCreate, ShareResponse, ShareUpdate
from flowpad.dependencies import (
    get_current_user,
    get_graph_access_service,
    get_graph_validation_service,
    get_share_repository,
)
from flowpad.db.models import GraphShare, User
from flowpad.db.repositories.shares import ShareRepository
from flowpad.application.graph_access_service import GraphAccessService
from flowpad.application.graph_validation_service import GraphValidationService
from flowpad.domain.errors import NotFoundError
from flowpad.domain.events import GraphShared, event_publisher

router = APIRouter(prefix="/api")


def _share_payload(share: GraphShare) -> dict:
    return {
        "graph_id": share.graph_id,
        "email": share.shared_with_email,
        "permission": share.permission,
        "created_at": share.created_at,
        "updated_at": share.updated_at,
    }


@router.post("/graphs/{graph_id}/share", response_model=ShareResponse, status_code=201)
def share_graph(
    graph_id: int,
    share_data: ShareCreate,
    user: User = Depends(get_current_user),
    access_svc: GraphAccessService = Depends(get_graph_access_service),
    validator: GraphValidationService = Depends(get_graph_validation_service),
    shares: ShareRepository = Depends(get_share_repository),
):
    """
    Share a graph with an email address. Owner only.
    """
    graph = access_svc.require_owner(graph_id, user)

    email = validator.validate_email(share_data.email)
    permission = validator.validate_permission(share_data.permission)
    validator.check_can_share(graph, user, email)

    share = shares.create_share(graph.id, email, user.id, permission)
    event_publisher.publish(GraphShared.now(graph.id, email=email, permission=permission))
    return _share_payload(share)


@router.get("/graphs/{graph_id}/shares", response_model=List[ShareResponse])
def list_shares(
    graph_id: int,
    user: User = Depends(get_current_user),
    access_svc: GraphAccessService = Depends(get_graph_access_service),
    shares: ShareRepository = Depends(get_share_repository),
):
    """
    List everyone a graph is shared with. Owner only.
    """
    access_svc.require_owner(graph_id, user)
    return [_share_payload(share) for share in shares.list_shares(graph_id)]


@router.patch("/graphs/{graph_id}/shares/{email}", response_model=ShareResponse)
def update_share(
    graph_id: int,
    email: str,
    share_data: ShareUpdate,
    user: User = Depends(get_current_user),
    access_svc: GraphAccessService = Depends(get_graph_access_service),
    validator: GraphValidationService = Depends(get_graph_validation_service),
    shares: ShareRepository = Depends(get_share_repository),
):
    """
    Upgrade or downgrade a share grant. Owner only.
    """
    access_svc.require_owner(graph_id, user)
    permission = validator.validate_permission(share_data.permission)

    share = shares.update_permission(graph_id, email, permission)
    if not share:
        raise NotFoundError(f"Graph {graph_id} is not shared with {email}")
    event_publisher.publish(GraphShared.now(graph_id, email=share.shared_with_email, permission=permission))
    return _share_payload(share)


@router.delete("/graphs/{graph_id}/shares/{email}", response_model=MessageResponse)
def revoke_share(
    graph_id: int,
    email: str,
    user: User = Depends(get_current_user),
    access_svc: GraphAccessService = Depends(get_graph_access_service),
    shares: ShareRepository = Depends(get_share_repository),
):
    """
    Revoke a share grant. Owner only.
    """
    access_svc.require_owner(graph_id, user)
    if not shares.delete_share(graph_id, email):
        raise NotFoundError(f"Graph {graph_id} is not shared with {email}")
    return {"message": "Share revoked"}
