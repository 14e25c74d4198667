import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import get_settings
from src.app_shell.config import validate_ops_rules
from src.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception:
        logger.critical("Rules load failed", exc_info=True)
        raise

    applied = SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    if applied:
        logger.info("Applied migrations: %s", ", ".join(applied))

    yield
    # Shutdown cleanup if needed


app = FastAPI(
    title="TIPA Members API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import (  # noqa: E402
    admin_payments,
    admin_settings,
    cron,
    membership,
    threads,
)

app.include_router(threads.router, prefix="/api/threads", tags=["Forum"])
app.include_router(membership.router, prefix="/api/membership", tags=["Membership"])
app.include_router(admin_settings.router, prefix="/api/admin/settings", tags=["Admin Settings"])
app.include_router(admin_payments.router, prefix="/api/admin", tags=["Admin Payments"])
app.include_router(cron.router, prefix="/api/cron", tags=["Cron"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
