"""Book API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map BookApiError -> {"message": ...} JSON responses
    - CORS configured from settings (not hardcoded)
    - Every response carries X-Request-ID; request id and path are bound for logging
    - Connection pool created on startup, stored on app.state, disposed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Users router mounted at /users and at the versioned alias /api/v1/users
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from book_api.api.error_handlers import register_error_handlers
from book_api.api.request_context import RequestContextMiddleware
from book_api.api.routes import health, users
from book_api.config import get_settings
from book_api.infrastructure.database import ConnectionPool
from book_api.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    pool = ConnectionPool.from_url(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_create_tables:
        await pool.create_tables()
    app.state.pool = pool
    logger.info("Book API started")
    yield
    logger.info("Book API shutting down")
    await pool.dispose()


app = FastAPI(title="Book API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(RequestContextMiddleware)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(users.router, prefix="/api/v1")

register_error_handlers(app)


@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root():
    return "API is running"
