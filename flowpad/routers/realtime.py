"""
Realtime editing endpoints backed by the in-process graph cache.

Edits land in the cache only; nothing reaches the database until the client
calls ``/save`` (or the process shuts down and flushes).
"""
from fastapi import APIRouter, Depends
from typing import Any, Dict

from flowpad.schemas.api_schemas import RealtimeBatch, RealtimeResponse, SaveResponse
from flowpad.dependencies import get_cache_manager, get_current_user, get_graph_access_service
from flowpad.db.models import User
from flowpad.application.graph_access_service import GraphAccessService
from flowpad.services.cache import GraphCacheManager

router = APIRouter(prefix="/api")


@router.post("/graphs/{graph_id}/realtime", response_model=RealtimeResponse)
def apply_realtime_updates(
    graph_id: int,
    batch: RealtimeBatch,
    user: User = Depends(get_current_user),
    access_svc: GraphAccessService = Depends(get_graph_access_service),
    cache: GraphCacheManager = Depends(get_cache_manager),
):
    """
    Apply an ordered batch of tile/connection ops to the cached graph.
    """
    access_svc.require_write(graph_id, user)
    updates = [update.model_dump() for update in batch.updates]
    result = cache.apply_realtime_updates(graph_id, updates)
    return {"success": True, **result}


@router.post("/graphs/{graph_id}/save", response_model=SaveResponse)
def force_save(
    graph_id: int,
    user: User = Depends(get_current_user),
    access_svc: GraphAccessService = Depends(get_graph_access_service),
    cache: GraphCacheManager = Depends(get_cache_manager),
):
    """
    Write the cached graph back to the database if it has unsaved changes.
    """
    access_svc.require_write(graph_id, user)
    saved = cache.force_save(graph_id)
    status = cache.get_cache_status(graph_id)
    return {"success": True, "saved": saved, "lastModified": status.get("lastModified")}


@router.get("/graphs/{graph_id}/cache-status")
def cache_status(
    graph_id: int,
    user: User = Depends(get_current_user),
    access_svc: GraphAccessService = Depends(get_graph_access_service),
    cache: GraphCacheManager = Depends(get_cache_manager),
) -> Dict[str, Any]:
    """
    Report whether the graph is cached, dirty, and how large it is.
    """
    access_svc.require_read(graph_id, user)
    return dict(cache.get_cache_status(graph_id))
