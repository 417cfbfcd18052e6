"""LedgerDesk API: main entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ledgerdesk.config import settings
from ledgerdesk.core.backend import BackendClient
from ledgerdesk.core.middleware import RequestLoggingMiddleware
from ledgerdesk.services.session import SessionStore

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: open and close the backend client."""
    # Startup
    app.state.backend = BackendClient.from_settings(settings)
    logger.info("Starting LedgerDesk API", env=settings.app_env, backend=settings.api_base_url)
    yield
    # Shutdown
    logger.info("Shutting down LedgerDesk API")
    await app.state.backend.aclose()


app = FastAPI(
    title="LedgerDesk API",
    description="Bookkeeping back office: transaction review, vendor rules and QuickBooks export",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    redirect_slashes=False,
)
app.state.sessions = SessionStore(
    idle_timeout=settings.review_session_idle_minutes * 60,
    max_sessions=settings.max_review_sessions,
)

# ── Middleware ─────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health Check ──────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check():
    """Liveness probe: always healthy while the process is running."""
    return {"status": "healthy", "version": "0.1.0"}


# ── API Routes ────────────────────────────────────
from ledgerdesk.api.v1 import categories, clients, export, logs, quickbooks, review, rules, uploads  # noqa: E402

app.include_router(clients.router, prefix="/api/v1/clients", tags=["clients"])
app.include_router(review.router, prefix="/api/v1/review", tags=["review"])
app.include_router(rules.router, prefix="/api/v1/rules", tags=["rules"])
app.include_router(categories.router, prefix="/api/v1/categories", tags=["categories"])
app.include_router(export.router, prefix="/api/v1/export", tags=["export"])
app.include_router(uploads.router, prefix="/api/v1/uploads", tags=["uploads"])
app.include_router(quickbooks.router, prefix="/api/v1/quickbooks", tags=["quickbooks"])
app.include_router(logs.router, prefix="/api/v1/logs", tags=["logs"])


def run() -> None:  # pragma: no cover - manual entrypoint
    """Run the development server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "ledgerdesk.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.app_debug,
    )
