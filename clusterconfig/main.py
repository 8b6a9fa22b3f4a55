#!/usr/bin/env python3
"""
clusterconfig - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Starts the home context and wires the table to the shared metadata view
3. Serves the table over HTTP

All table logic is in the modules, following black box principles.
"""

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from typing import Any, Optional

import redis.asyncio as redis
import uvicorn
from fastapi import APIRouter, Body, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from clusterconfig.config.provider import ConfigProvider, EnvConfigProvider
from clusterconfig.logging_config import configure_logging, get_logging_config
from clusterconfig.modules.access import AccessModule
from clusterconfig.modules.api import AuditEvents, ClusterConfigRows, ErrorResponse, WriteResponse
from clusterconfig.modules.errors import OperationInterrupted
from clusterconfig.modules.metadata import HomeContext, InMemoryMetadataView
from clusterconfig.modules.storage import AuditLog, StorageModule
from clusterconfig.modules.table import PRIMARY_KEY, TABLE_NAME, ConfigTable

logger = logging.getLogger(__name__)

router = APIRouter()


# Dependency injection helpers


async def verify_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(None, description="API key for authentication"),
) -> Optional[str]:
    """Verify API key and return service identity."""
    if not request.app.state.require_auth:
        return None

    is_valid, service_identity = request.app.state.access.verify_api_key(x_api_key)
    if not is_valid:
        raise HTTPException(401, "Invalid API key")
    return service_identity


def get_table(request: Request) -> ConfigTable:
    table = getattr(request.app.state, "table", None)
    if table is None:
        raise HTTPException(503, "Service not initialized")
    return table


def get_interruptor(request: Request) -> threading.Event:
    return request.app.state.shutdown


# Table endpoints


@router.get("/tables/cluster_config", response_model=ClusterConfigRows)
async def read_all_rows(
    request: Request,
    table: ConfigTable = Depends(get_table),
    identity: Optional[str] = Depends(verify_api_key),
):
    """
    Read every row of the table.

    Returns:
        200: Table name, primary key and rows
        401: Unauthorized
    """
    rows = await table.read_all_rows(get_interruptor(request))
    return ClusterConfigRows(table=TABLE_NAME, primary_key=table.get_primary_key_name(), rows=rows)


@router.get("/tables/cluster_config/{key}", responses={404: {"model": ErrorResponse}})
async def read_row(
    key: str,
    request: Request,
    table: ConfigTable = Depends(get_table),
    identity: Optional[str] = Depends(verify_api_key),
):
    """
    Read one row by primary key.

    Returns:
        200: The row
        404: No such row
    """
    row = await table.read_row(key, get_interruptor(request))
    if row is None:
        return JSONResponse(status_code=404, content={"error": f"No row `{key}` in `{TABLE_NAME}`."})
    return row


@router.put(
    "/tables/cluster_config/{key}",
    response_model=WriteResponse,
    responses={400: {"model": ErrorResponse}},
)
async def write_row(
    key: str,
    request: Request,
    row: Any = Body(..., description="Complete row object"),
    table: ConfigTable = Depends(get_table),
    identity: Optional[str] = Depends(verify_api_key),
):
    """
    Replace one row.

    The body must be an object. Its primary key may be omitted; when given it
    must match the key in the path.

    Returns:
        200: Row written
        400: Row rejected by the table
        422: Body is not an object
    """
    if not isinstance(row, dict):
        raise HTTPException(422, "Row must be a JSON object")
    if PRIMARY_KEY in row and row[PRIMARY_KEY] != key:
        return JSONResponse(
            status_code=400,
            content={"error": f"Primary key `{PRIMARY_KEY}` of the row does not match `{key}`."},
        )

    ok, error = await table.write_row(key, {**row, PRIMARY_KEY: key}, get_interruptor(request))
    if not ok:
        return JSONResponse(status_code=400, content={"error": error})

    logger.info(f"Row `{key}` of {TABLE_NAME} written by {identity or 'anonymous'}")
    return WriteResponse(id=key)


@router.delete("/tables/cluster_config/{key}", responses={400: {"model": ErrorResponse}})
async def delete_row(
    key: str,
    request: Request,
    table: ConfigTable = Depends(get_table),
    identity: Optional[str] = Depends(verify_api_key),
):
    """
    Delete one row. The table has a fixed set of rows, so this always fails.

    Returns:
        400: Deletion rejected
    """
    _, error = await table.write_row(key, None, get_interruptor(request))
    return JSONResponse(status_code=400, content={"error": error})


@router.get("/audit/cluster_config", response_model=AuditEvents)
async def read_audit_events(
    request: Request,
    limit: int = Query(100, ge=1, le=1000),
    identity: Optional[str] = Depends(verify_api_key),
):
    """
    Recent configuration changes.

    Returns:
        200: Events, newest first
        503: Audit log not configured
    """
    audit_log: Optional[AuditLog] = getattr(request.app.state, "audit_log", None)
    if audit_log is None:
        raise HTTPException(503, "Audit log not configured")
    return AuditEvents(events=await audit_log.recent(limit))


# Health endpoints


@router.get("/healthz")
async def healthz():
    """
    Minimal health check endpoint for readiness and liveness checks.

    Returns:
        200: Service is running
    """
    return {"status": "ok"}


@router.get("/health")
async def health_check(request: Request):
    """
    Health check with home context and audit storage status.

    Returns:
        200: Service healthy
        503: Service unhealthy
    """
    state = request.app.state
    home: Optional[HomeContext] = getattr(state, "home", None)
    home_status = "shared" if home is None else ("running" if home.running else "stopped")

    storage: Optional[StorageModule] = getattr(state, "storage", None)
    if storage is None or not storage.enabled:
        audit_status = "disabled"
    else:
        audit_status = "connected" if await storage.ping() else "disconnected"

    healthy = getattr(state, "table", None) is not None and home_status != "stopped"
    content = {
        "status": "healthy" if healthy else "unhealthy",
        "home_context": home_status,
        "audit": audit_status,
    }
    return JSONResponse(status_code=200 if healthy else 503, content=content)


def create_app(config_provider: Optional[ConfigProvider] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config_provider: Configuration source (environment when omitted)

    Returns:
        FastAPI app; the table is wired up when its lifespan starts
    """
    provider = config_provider or EnvConfigProvider()
    access_config = provider.get_access_config()
    storage_config = provider.get_storage_config()
    metadata_config = provider.get_metadata_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting cluster_config API...")
        app.state.shutdown.clear()

        home: Optional[HomeContext] = None
        if metadata_config.dedicated_thread:
            home = HomeContext()
            home_loop = home.start()
        else:
            home_loop = asyncio.get_running_loop()

        storage = StorageModule(storage_config.redis_url)
        audit_log = None
        if storage_config.audit_enabled:
            audit_log = AuditLog(await storage.connect(), max_events=storage_config.audit_max_events)
        else:
            logger.info("REDIS_URL not set, audit log disabled")

        app.state.home = home
        app.state.storage = storage
        app.state.audit_log = audit_log
        app.state.view = InMemoryMetadataView(home_loop)
        app.state.table = ConfigTable.build(app.state.view, audit_log=audit_log)
        logger.info(f"{TABLE_NAME} ready with rows {await app.state.table.read_all_primary_keys()}")

        yield

        logger.info("Shutting down cluster_config API...")
        app.state.shutdown.set()
        app.state.table = None
        await storage.disconnect()
        if home is not None:
            home.stop()
        logger.info("cluster_config API shutdown complete")

    app = FastAPI(
        title="Cluster Config API",
        description="Cluster-wide security configuration as a table",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.access = AccessModule(access_config.api_keys)
    app.state.require_auth = access_config.require_auth
    app.state.shutdown = threading.Event()
    app.include_router(router)

    @app.exception_handler(OperationInterrupted)
    async def interrupted_handler(request, exc):
        """Handle operations cut short by shutdown."""
        logger.warning(f"Operation interrupted: {exc}")
        return JSONResponse(status_code=503, content={"error": "Operation interrupted"})

    @app.exception_handler(redis.ConnectionError)
    async def redis_error_handler(request, exc):
        """Handle Redis connection errors."""
        logger.error(f"Redis connection error: {exc}")
        return JSONResponse(status_code=503, content={"error": "Audit storage unavailable"})

    return app


def main() -> None:
    api_config = EnvConfigProvider().get_api_config()
    configure_logging(api_config.log_level)
    uvicorn.run(
        "clusterconfig.main:create_app",
        factory=True,
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        reload=api_config.debug,
        log_config=get_logging_config(api_config.log_level),
    )


if __name__ == "__main__":
    main()
