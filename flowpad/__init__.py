"""
Flowpad API Application Package

Directory Structure:
├── routers/           # FastAPI route handlers
├── schemas/           # Pydantic models for API requests/responses
├── application/       # Auth, access and validation services, event handlers
├── domain/            # Errors, entities, events, store port
├── services/cache/    # In-process graph cache, realtime merge, flush protocol
├── infrastructure/    # SQLAlchemy adapter behind the store port
├── db/                # SQLAlchemy models, session and repositories
└── config.py          # Application configuration

Graph documents live in Postgres (``graphs.data``). Realtime edits are merged
into a per-process cache and written back only on an explicit save or at
shutdown; whole-document PUTs write straight through.
"""
