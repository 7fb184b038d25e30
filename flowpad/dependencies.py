from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from flowpad.config import settings
from flowpad.db.database import SessionLocal, engine, get_db
from flowpad.db.models import User
from flowpad.db.repositories import GraphRepository, ShareRepository, UserRepository
from flowpad.application.auth_service import AuthService
from flowpad.application.graph_access_service import GraphAccessService
from flowpad.application.graph_validation_service import GraphValidationService
from flowpad.domain.errors import AuthenticationError
from flowpad.infrastructure.graph_store_adapter import SqlGraphStore
from flowpad.services.cache import CachePolicy, GraphCache, GraphCacheManager

bearer_scheme = HTTPBearer(auto_error=False)


def build_cache_manager(session_factory: Callable[[], Session] = SessionLocal) -> GraphCacheManager:
    """Construct the process-wide graph cache; called once at application start."""
    return GraphCacheManager(
        cache=GraphCache(),
        store=SqlGraphStore(session_factory),
        policy=CachePolicy(max_entries=settings.CACHE_MAX_ENTRIES),
    )


def get_cache_manager(request: Request) -> GraphCacheManager:
    return request.app.state.cache_manager


def get_engine() -> Engine:
    return engine


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_graph_repository(db: Session = Depends(get_db)) -> GraphRepository:
    return GraphRepository(db)


def get_share_repository(db: Session = Depends(get_db)) -> ShareRepository:
    return ShareRepository(db)


def get_graph_access_service(
    graphs: GraphRepository = Depends(get_graph_repository),
    shares: ShareRepository = Depends(get_share_repository),
) -> GraphAccessService:
    return GraphAccessService(graphs=graphs, shares=shares)


def get_graph_validation_service(
    shares: ShareRepository = Depends(get_share_repository),
) -> GraphValidationService:
    return GraphValidationService(shares=shares)


def get_auth_service() -> AuthService:
    return AuthService(
        secret=settings.JWT_SECRET,
        google_client_id=settings.GOOGLE_CLIENT_ID,
        expires_in_days=settings.JWT_EXPIRES_DAYS,
    )


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """Resolve the caller from a Bearer header, falling back to the session cookie."""
    token = credentials.credentials if credentials else request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        raise AuthenticationError("Access token required")

    user = users.get_user(auth.decode_token(token))
    if not user:
        raise AuthenticationError("Invalid token")
    return user
