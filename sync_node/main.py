"""Entry point and composition root for a sync node."""

import asyncio
import time
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.exceptions import (
    PortalSyncException,
    PayloadDecodeError,
    RoleViolationError,
    SettingTypeError,
    TransportError,
    UnknownSettingError
)
from common.logging_config import set_correlation_id, setup_logging
from common.types import Role
from sync_node import config
from sync_node.replication.http_transport import HttpBroadcastTransport, register_with_authority
from sync_node.replication.replicator import ConfigReplicator
from sync_node.replication.transport import Transport
from sync_node.routes import config_router, internal_router
from sync_node.settings_store import ConfigFile, ConfigFileWatcher, SettingsStore

logger = setup_logging('sync_node')
common_logger = setup_logging('common')


def _error_response(request: Request, exc: Exception, status_code: int, code: str) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    log = logger.error if status_code >= 500 else logger.warning
    log(f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code}
    )


def create_app(
    replicator: ConfigReplicator,
    config_file: ConfigFile,
    transport: Optional[Transport] = None,
    watcher: Optional[ConfigFileWatcher] = None,
    authority_url: Optional[str] = None,
    advertise_addr: Optional[str] = None,
    register_interval: float = 0
) -> FastAPI:
    """
    Build the HTTP application around already wired node components.

    Args:
        replicator: Initialized config replicator
        config_file: Backing store the replicator's settings store is loaded from
        transport: Outgoing transport (authority only)
        watcher: Optional file watcher started and stopped with the app
        authority_url: Authority base URL a participant registers with on startup
        advertise_addr: Base URL announced to the authority
        register_interval: Seconds between re-registrations, 0 registers once

    Returns:
        FastAPI application
    """
    app = FastAPI(
        title="Portal Config Sync Node",
        description="Replicates the authority's portal settings to participants",
        version="1.0.0"
    )
    app.state.replicator = replicator
    app.state.config_file = config_file
    app.state.transport = transport
    app.state.watcher = watcher

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        logger.debug(
            f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
        )

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
        )

        response.headers["X-Request-ID"] = request_id
        return response

    async def _register_with_authority():
        while True:
            try:
                await asyncio.to_thread(
                    register_with_authority,
                    authority_url,
                    advertise_addr,
                    config.HTTP_TIMEOUT,
                    config.MAX_RETRIES,
                    config.RETRY_BACKOFF
                )
            except TransportError as e:
                logger.error(f"Failed to register with authority: {e}")
                logger.info("Continuing with the last server config until the authority pushes one")

            if register_interval <= 0:
                return
            await asyncio.sleep(register_interval)

    @app.on_event("startup")
    async def startup_event():
        """
        Start the file watcher and, on a participant, announce this node to the authority.
        """
        logger.info(f"Sync node starting up [role={replicator.role.value}]")

        if watcher is not None:
            watcher.start()

        if not replicator.is_authority and authority_url and advertise_addr:
            # The authority answers by posting back to us, so this must not block startup.
            app.state.registration_task = asyncio.create_task(_register_with_authority())

    @app.on_event("shutdown")
    async def shutdown_event():
        """
        Stop background work and release HTTP connections.
        """
        logger.info("Sync node shutting down...")

        if watcher is not None:
            watcher.stop()

        registration_task = getattr(app.state, "registration_task", None)
        if registration_task is not None:
            registration_task.cancel()

        if isinstance(transport, HttpBroadcastTransport):
            transport.close()

    @app.exception_handler(PayloadDecodeError)
    async def payload_decode_handler(request: Request, exc: PayloadDecodeError):
        return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "MALFORMED_PAYLOAD")

    @app.exception_handler(RoleViolationError)
    async def role_violation_handler(request: Request, exc: RoleViolationError):
        return _error_response(request, exc, status.HTTP_409_CONFLICT, "ROLE_VIOLATION")

    @app.exception_handler(UnknownSettingError)
    async def unknown_setting_handler(request: Request, exc: UnknownSettingError):
        return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "UNKNOWN_SETTING")

    @app.exception_handler(SettingTypeError)
    async def setting_type_handler(request: Request, exc: SettingTypeError):
        return _error_response(request, exc, 422, "SETTING_TYPE_MISMATCH")

    @app.exception_handler(TransportError)
    async def transport_error_handler(request: Request, exc: TransportError):
        return _error_response(request, exc, status.HTTP_502_BAD_GATEWAY, "PARTICIPANT_UNREACHABLE")

    @app.exception_handler(PortalSyncException)
    async def portal_sync_exception_handler(request: Request, exc: PortalSyncException):
        return _error_response(
            request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR"
        )

    app.include_router(config_router)
    app.include_router(internal_router)

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint for Docker healthcheck.
        """
        return {"status": "healthy", "service": "sync_node", "role": replicator.role.value}

    return app


def build_node() -> FastAPI:
    """
    Wire a node from environment configuration.

    Returns:
        FastAPI application ready to be served
    """
    role: Role = config.NODE_ROLE
    for component_logger in (logger, common_logger):
        set_correlation_id(component_logger, f"role={role.value}")
    logger.info(f"Building sync node [role={role.value}, config_path={config.CONFIG_PATH}]")

    config_file = ConfigFile(config.CONFIG_PATH)
    store = SettingsStore()
    store.load(config_file)

    transport = None
    if role is Role.AUTHORITY:
        transport = HttpBroadcastTransport(
            participants=config.PARTICIPANT_URLS,
            timeout=config.HTTP_TIMEOUT,
            max_retries=config.MAX_RETRIES,
            backoff=config.RETRY_BACKOFF
        )

    replicator = ConfigReplicator(role, transport)
    replicator.initialize(store)

    return create_app(
        replicator,
        config_file,
        transport=transport,
        watcher=ConfigFileWatcher(config_file, config.WATCH_INTERVAL),
        authority_url=config.AUTHORITY_URL,
        advertise_addr=config.get_advertise_addr() if config.AUTHORITY_URL else None,
        register_interval=config.REGISTER_INTERVAL
    )


def main() -> None:
    """
    Start the node with uvicorn.
    """
    uvicorn.run(
        "sync_node.main:build_node",
        factory=True,
        host=config.NODE_HOST,
        port=config.NODE_PORT
    )


if __name__ == "__main__":
    main()
