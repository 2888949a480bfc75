"""
FastAPI application for the ShopEasy account service.

Builds the app, wires the v1 router and owns the connection pool for the
lifetime of the process.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.api.v1 import router as v1_router
from src.config.settings import DEFAULT_JWT_SECRET, Settings, get_settings

logger = logging.getLogger(__name__)

tags_metadata = [
    {
        "name": "v1",
        "description": "ShopEasy account API v1 - OTP-verified signup and login",
    },
]


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def warn_on_insecure_settings(settings: Settings) -> None:
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning(
            "JWT_SECRET is the built-in development default; session tokens can be forged. "
            "Set JWT_SECRET before serving real traffic."
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the pool and apply migrations on startup; close the pool on shutdown."""
    settings = app.state.settings
    warn_on_insecure_settings(settings)
    logger.info(
        "Starting shopeasy-accounts (pending store: %s, email backend: %s)",
        settings.pending_store,
        settings.email_backend,
    )

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )
    run_migrations(pool)
    app.state.pool = pool

    yield

    pool.close()
    logger.info("Connection pool closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    application = FastAPI(
        title="shopeasy-accounts",
        description="ShopEasy account API - OTP-verified signup and credential login",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.include_router(v1_router, prefix="/v1")
    application.add_api_route("/health", health_check, methods=["GET"])
    return application


async def health_check(request: Request) -> dict[str, str]:
    """
    Report liveness once the database answers a trivial query.

    A database failure propagates and surfaces as a 500.
    """
    with request.app.state.pool.connection() as conn:
        conn.execute("SELECT 1")
    return {"status": "healthy", "pending_store": request.app.state.settings.pending_store}


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run("src.api.main:app", host=settings.host, port=settings.port)
