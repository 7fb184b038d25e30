import logging
from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from flowpad.config import settings
from flowpad.db.init_db import reset_database
from flowpad.db.models import User
from flowpad.dependencies import get_cache_manager, get_current_user, get_engine
from flowpad.domain.errors import AccessDeniedError
from flowpad.services.cache import GraphCacheManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin")


@router.post("/wipe")
def wipe_everything(
    user: User = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
    cache: GraphCacheManager = Depends(get_cache_manager),
):
    """
    Drop and recreate every table and empty the graph cache.

    Unsaved cached edits are discarded along with the data they belong to.
    Disabled unless ADMIN_WIPE_ENABLED is set.
    """
    if not settings.ADMIN_WIPE_ENABLED:
        raise AccessDeniedError("Database wipe is disabled")

    logger.warning(f"Database wipe requested by user {user.id}")
    # empty the cache first so no flush can resurrect rows into the new tables
    cleared = cache.clear()
    reset_database(engine)
    # anything filled from the old tables while they were being reset
    cleared += cache.clear()
    return {"success": True, "cache_entries_cleared": cleared}
