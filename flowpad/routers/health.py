"""
Health check endpoints for the API.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, Any
from datetime import datetime, timezone

from flowpad.config import settings
from flowpad.db.init_db import check_connection
from flowpad.dependencies import get_cache_manager, get_engine
from flowpad.services.cache import GraphCacheManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _database_ok(engine: Engine) -> bool:
    try:
        return check_connection(engine)
    except SQLAlchemyError as exc:
        logger.warning(f"Database health check failed: {exc}")
        return False


@router.get("/health")
def health_check(engine: Engine = Depends(get_engine)) -> Dict[str, Any]:
    """
    Basic health check endpoint.
    The API reports "ok" even when the database is down; ``database`` says which.
    """
    return {
        "status": "ok",
        "database": "connected" if _database_ok(engine) else "error",
        "ts": datetime.now(timezone.utc).isoformat(),
        "version": settings.VERSION,
    }


@router.get("/health/cache")
def cache_health(
    cache: GraphCacheManager = Depends(get_cache_manager)
) -> Dict[str, Any]:
    """
    Graph cache statistics.
    """
    return {
        "status": "healthy",
        "ts": datetime.now(timezone.utc).isoformat(),
        "cache_stats": cache.get_cache_stats(),
    }


@router.get("/checklist")
def checklist(engine: Engine = Depends(get_engine)) -> Dict[str, Any]:
    """
    Which required settings are present and whether the database answers.
    Values themselves are never echoed.
    """
    return {
        "env": {
            "DATABASE_URL_present": bool(settings.DATABASE_URL),
            "GOOGLE_CLIENT_ID_present": bool(settings.GOOGLE_CLIENT_ID),
            "JWT_SECRET_present": bool(settings.JWT_SECRET) and settings.JWT_SECRET != "change-me",
        },
        "database": {"connection_ok": _database_ok(engine)},
        "environment": settings.ENVIRONMENT,
    }
