from fastapi import APIRouter, Depends
from typing import Any, Dict

from flowpad.schemas.api_schemas import (
    GraphCreate,
    GraphListResponse,
    GraphResponse,
    GraphUpdate,
    MessageResponse,
    SharedGraphResponse,
)
from flowpad.dependencies import (
    get_cache_manager,
    get_current_user,
    get_graph_access_service,
    get_graph_repository,
    get_graph_validation_service,
)
from flowpad.db.models import Graph, User
from flowpad.db.repositories.graphs import GraphRepository
from flowpad.application.graph_access_service import GraphAccessService
from flowpad.application.graph_validation_service import GraphValidationService
from flowpad.domain.entities import GraphRecord
from flowpad.domain.events import GraphCreated, GraphDeleted, event_publisher
from flowpad.services.cache import GraphCacheManager

router = APIRouter(prefix="/api")


def graph_record(graph: Graph) -> GraphRecord:
    return GraphRecord(
        id=graph.id,
        user_id=graph.user_id,
        title=graph.title,
        data=graph.data or {},
        created_at=graph.created_at,
        updated_at=graph.updated_at,
    )


def _shared_payload(cache: GraphCacheManager, graph: Graph, owner_name: str, permission: str) -> Dict[str, Any]:
    return {
        **cache.read_through(graph.id, graph_record(graph)),
        "owner_name": owner_name,
        "permission": permission,
    }


@router.get("/graphs", response_model=GraphListResponse)
def list_graphs(
    user: User = Depends(get_current_user),
    graphs: GraphRepository = Depends(get_graph_repository),
    cache: GraphCacheManager = Depends(get_cache_manager),
):
    """
    List the caller's own graphs and the graphs shared with them.
    """
    own = [cache.read_through(graph.id, graph_record(graph)) for graph in graphs.get_user_graphs(user.id)]
    shared = [
        _shared_payload(cache, graph, owner_name, permission)
        for graph, owner_name, permission in graphs.get_shared_graphs(user.email)
    ]
    return {"own": own, "shared": shared}


@router.get("/graphs/inbox", response_model=list[SharedGraphResponse])
def shared_inbox(
    user: User = Depends(get_current_user),
    graphs: GraphRepository = Depends(get_graph_repository),
    cache: GraphCacheManager = Depends(get_cache_manager),
):
    """
    Graphs other users have shared with the caller.
    """
    return [
        _shared_payload(cache, graph, owner_name, permission)
        for graph, owner_name, permission in graphs.get_shared_graphs(user.email)
    ]


@router.post("/graphs", response_model=GraphResponse, status_code=201)
def create_graph(
    graph_data: GraphCreate,
    user: User = Depends(get_current_user),
    graphs: GraphRepository = Depends(get_graph_repository),
    validator: GraphValidationService = Depends(get_graph_validation_service),
):
    """
    Create a new graph owned by the caller.
    """
    title = validator.normalize_title(graph_data.title)
    data = validator.normalize_data(graph_data.data)

    graph = graphs.create_graph(user_id=user.id, title=title, data=data)
    event_publisher.publish(GraphCreated.now(graph.id, owner_id=user.id, title=title))

    return {**graph_record(graph), "dirty": False}


@router.get("/graphs/{graph_id}", response_model=GraphResponse)
def get_graph(
    graph_id: int,
    user: User = Depends(get_current_user),
    access_svc: GraphAccessService = Depends(get_graph_access_service),
    cache: GraphCacheManager = Depends(get_cache_manager),
):
    """
    Get a graph the caller owns or has been shared.

    Unsaved realtime changes held in the cache are included.
    """
    graph = access_svc.require_read(graph_id, user)
    return cache.read_through(graph.id, graph_record(graph))


@router.put("/graphs/{graph_id}", response_model=GraphResponse)
def update_graph(
    graph_id: int,
    graph_data: GraphUpdate,
    user: User = Depends(get_current_user),
    access_svc: GraphAccessService = Depends(get_graph_access_service),
    validator: GraphValidationService = Depends(get_graph_validation_service),
    cache: GraphCacheManager = Depends(get_cache_manager),
):
    """
    Overwrite a graph's title and/or document, writing straight to the database.
    """
    access_svc.require_write(graph_id, user)

    title = validator.normalize_title(graph_data.title) if graph_data.title is not None else None
    data = validator.normalize_data(graph_data.data) if graph_data.data is not None else None

    record = cache.write_through(graph_id, title=title, data=data)
    return {**record, "dirty": False}


@router.delete("/graphs/{graph_id}", response_model=MessageResponse)
def delete_graph(
    graph_id: int,
    user: User = Depends(get_current_user),
    access_svc: GraphAccessService = Depends(get_graph_access_service),
    graphs: GraphRepository = Depends(get_graph_repository),
    cache: GraphCacheManager = Depends(get_cache_manager),
):
    """
    Delete a graph and its share grants. Owner only.
    """
    access_svc.require_owner(graph_id, user)

    graphs.delete_graph(graph_id)
    cache.drop(graph_id)
    event_publisher.publish(GraphDeleted.now(graph_id, owner_id=user.id))

    return {"message": "Graph deleted"}
