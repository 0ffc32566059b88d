"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routers and lifespan events.
"""

import logging
import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from psycopg_pool import ConnectionPool

from namereg.adapters.rpc import JsonRpcClient, NamecoinRpc
from namereg.adapters.storage import (
    FileCheckpointStore,
    PostgresCheckpointStore,
    run_migrations,
)
from namereg.api.v1 import router as v1_router
from namereg.config.settings import Settings, get_settings
from namereg.domain.exceptions import RpcError
from namereg.domain.ports import CheckpointStore

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Name registration API v1 - Reserve names and finalize them after confirmation",
    },
]


def _open_store(settings: Settings) -> tuple[CheckpointStore, ConnectionPool | None]:
    """Build the configured checkpoint store; returns it with the pool to close, if any."""
    if settings.checkpoint_backend == "file":
        logger.info("Using state file %s", settings.state_file)
        return FileCheckpointStore(settings.state_file), None

    logger.info("Connecting to database...")
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=True,
    )
    logger.info("Running database migrations...")
    run_migrations(pool)
    return PostgresCheckpointStore(pool, settings.checkpoint_key), pool


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the daemon RPC client on startup
    - Opens the checkpoint store (and runs migrations for postgres)
    - Closes the client and any connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    client = JsonRpcClient(
        settings.rpc_url,
        username=settings.rpc_user,
        password=settings.rpc_password,
        timeout_s=settings.rpc_timeout,
    )
    store, pool = _open_store(settings)

    # Store adapters in app state for dependency injection
    app.state.rpc = NamecoinRpc(client)
    app.state.store = store
    app.state.batch_lock = threading.Lock()

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    client.close()
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="namereg",
    description="Name registration API - Two-phase name_new / name_firstupdate with durable checkpoints",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with daemon validation.

    Returns 200 OK with the daemon version if the daemon answers,
    503 otherwise.
    """
    try:
        daemon = request.app.state.rpc.test_connection()
    except RpcError as e:
        logger.warning("Health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e
    return {"status": "healthy", "daemon": daemon}
