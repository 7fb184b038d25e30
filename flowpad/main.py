import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flowpad.config import settings
from flowpad.routers import admin, auth, graphs, health, realtime, shares
from flowpad.dependencies import build_cache_manager
from flowpad.domain.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    DomainError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from flowpad.application.event_handlers import register_event_handlers

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Flowpad API",
    description="Graph notes backend with realtime editing",
    version=settings.VERSION,
)

# One graph cache per process, owned by the application
app.state.cache_manager = build_cache_manager()


@app.on_event("startup")
async def startup_event():
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    register_event_handlers()
    if settings.INIT_DB_ON_STARTUP:
        from flowpad.db.database import engine
        from flowpad.db.init_db import create_tables
        try:
            create_tables(engine)
        except Exception:
            # keep serving; /api/health reports the database state
            logger.exception("Failed to initialize database tables")


@app.on_event("shutdown")
def shutdown_event():
    app.state.cache_manager.shutdown(flush=settings.FLUSH_ON_SHUTDOWN)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain error handlers
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request: Request, exc: AccessDeniedError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.error(f"Unhandled domain error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

# Include routers
app.include_router(health.router, tags=["Health"])  # Health check endpoints first
app.include_router(auth.router, tags=["Auth"])
app.include_router(graphs.router, tags=["Graphs"])
app.include_router(shares.router, tags=["Sharing"])
app.include_router(realtime.router, tags=["Realtime"])
app.include_router(admin.router, tags=["Admin"])

@app.get("/")
async def root():
    return {"message": "Welcome to Flowpad API. See /docs for API documentation"}
