"""
Test configuration and fixtures for flowpad tests.
"""
import copy
import os

# Keep the app from touching a real Postgres at import/startup
os.environ.setdefault("INIT_DB_ON_STARTUP", "false")
os.environ.setdefault("FLUSH_ON_SHUTDOWN", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from flowpad.main import app
from flowpad.db.models import Base
from flowpad.db.database import get_db
from flowpad.db.repositories import GraphRepository, UserRepository
from flowpad.dependencies import build_cache_manager, get_auth_service, get_engine
from flowpad.application.auth_service import AuthService
from flowpad.domain.errors import StoreUnavailableError
from flowpad.services.cache import CachePolicy, GraphCache, GraphCacheManager

TEST_CLIENT_ID = "test-client-id"


def fake_google_verifier(token: str, client_id: str):
    """Accepts tokens shaped ``good:<sub>:<email>``, rejects everything else."""
    parts = token.split(":")
    if len(parts) != 3 or parts[0] != "good":
        raise ValueError("Wrong number of segments in token")
    return {
        "aud": client_id,
        "sub": parts[1],
        "email": parts[2],
        "name": parts[2].split("@")[0].title(),
    }


class InMemoryGraphStore:
    """Dict-backed stand-in for the SQL store that records every call."""

    def __init__(self):
        self.graphs = {}
        self.loads = []
        self.saves = []
        self.fail_saves = False
        self.fail_loads = False

    def add(self, graph_id, title="Graph", data=None, user_id=1):
        self.graphs[graph_id] = {
            "id": graph_id,
            "user_id": user_id,
            "title": title,
            "data": copy.deepcopy(data if data is not None else {"tiles": [], "connections": []}),
            "created_at": None,
            "updated_at": None,
        }

    def load_graph(self, graph_id):
        self.loads.append(graph_id)
        if self.fail_loads:
            raise StoreUnavailableError("store down")
        record = self.graphs.get(graph_id)
        return copy.deepcopy(record) if record else None

    def save_graph(self, graph_id, title, data):
        if self.fail_saves:
            raise StoreUnavailableError("store down")
        if graph_id not in self.graphs:
            return False
        self.saves.append((graph_id, title, copy.deepcopy(data)))
        self.graphs[graph_id]["title"] = title
        self.graphs[graph_id]["data"] = copy.deepcopy(data)
        return True


@pytest.fixture
def memory_store():
    return InMemoryGraphStore()


@pytest.fixture
def manager(memory_store):
    """Cache manager over the in-memory store, unbounded."""
    return GraphCacheManager(cache=GraphCache(), store=memory_store, policy=CachePolicy(max_entries=0))


@pytest.fixture
def engine():
    """Shared in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def auth_service():
    return AuthService(
        secret="test-secret",
        google_client_id=TEST_CLIENT_ID,
        verifier=fake_google_verifier,
    )


@pytest.fixture
def cache_manager(session_factory):
    return build_cache_manager(session_factory)


@pytest.fixture
def client(engine, session_factory, cache_manager, auth_service):
    """Create test client bound to the SQLite database and a fresh cache."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    previous_manager = app.state.cache_manager
    app.state.cache_manager = cache_manager

    yield TestClient(app)

    app.dependency_overrides.clear()
    app.state.cache_manager = previous_manager


@pytest.fixture
def make_user(db):
    """Factory for users stored in the test database."""
    def _make(email="owner@example.com", name="Owner"):
        return UserRepository(db).get_or_create(f"google-{email}", email, name)
    return _make


@pytest.fixture
def owner(make_user):
    return make_user("owner@example.com", "Owner")


@pytest.fixture
def headers_for(auth_service):
    def _headers(user):
        return {"Authorization": f"Bearer {auth_service.create_token(user.id)}"}
    return _headers


@pytest.fixture
def sample_graph(db, owner):
    """A graph with two connected tiles owned by ``owner``."""
    data = {
        "tiles": [
            {"id": "t1", "x": 0, "y": 0, "text": "first"},
            {"id": "t2", "x": 100, "y": 50, "text": "second"},
        ],
        "connections": [{"id": "c1", "fromTile": "t1", "toTile": "t2"}],
    }
    return GraphRepository(db).create_graph(owner.id, "Sample", data)
