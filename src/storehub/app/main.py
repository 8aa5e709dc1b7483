"""FastAPI application entry point."""

import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from storehub import __version__
from storehub.adapters.proofs import HttpProofSource
from storehub.adapters.storage import create_driver
from storehub.app.api.v1 import hub_info_router, store_router
from storehub.app.config import Settings, get_settings
from storehub.app.logging import setup_logging
from storehub.app.metrics import get_metrics_response
from storehub.app.middleware import LoggingMiddleware
from storehub.core.authentication import Authenticator
from storehub.core.errors import ServerError, StoreHubError
from storehub.core.hub import HubServer
from storehub.core.interfaces import StorageDriver
from storehub.core.logging_schema import Component, LogEvent
from storehub.core.proofs import ProofChecker, ProofSource, build_policy

logger = logging.getLogger(__name__)


def build_hub(
    settings: Settings,
    driver: StorageDriver | None = None,
    proof_source: ProofSource | None = None,
    clock: Callable[[], float] = time.time,
) -> HubServer:
    """Wire a HubServer from settings; explicit collaborators win over config."""
    policy = build_policy(settings.proofs.required, settings.proofs.trusted_services)
    if policy.enabled and proof_source is None:
        proof_source = HttpProofSource(
            settings.proofs.service_url,  # type: ignore[arg-type]
            timeout=settings.proofs.timeout,
        )

    authenticator = Authenticator(
        server_name=settings.server.server_name,
        hub_urls=settings.server.hub_urls,
        whitelist=settings.auth.whitelist,
        clock=clock,
    )
    return HubServer(
        driver=driver or create_driver(settings.driver),
        authenticator=authenticator,
        proof_checker=ProofChecker(policy, proof_source),
        max_upload_bytes=settings.limits.max_upload_bytes,
    )


def create_app(
    settings: Settings | None = None,
    driver: StorageDriver | None = None,
    proof_source: ProofSource | None = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Build the storehub application."""
    settings = settings or get_settings()
    hub = build_hub(settings, driver=driver, proof_source=proof_source, clock=clock)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Configuration loaded",
            extra={
                "event": LogEvent.APP_STARTED,
                "component": Component.API,
                "server_bind": settings.server.bind,
                "server_name": settings.server.server_name,
                "backend": hub.driver.backend_name,
                "read_url_prefix": hub.get_read_url_prefix(),
                "proofs_required": settings.proofs.required,
            },
        )
        await hub.driver.start()

        yield

        await hub.proof_checker.close()
        await hub.driver.close()
        logger.info(
            "Shutdown complete",
            extra={"event": LogEvent.APP_STOPPED, "component": Component.API},
        )

    app = FastAPI(
        title="storehub",
        description="Authenticated namespaced object storage hub",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.hub = hub

    # first added = innermost
    app.add_middleware(
        LoggingMiddleware, slow_threshold_ms=settings.logging.slow_threshold_ms
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(store_router)
    app.include_router(hub_info_router)

    @app.exception_handler(StoreHubError)
    async def storehub_error_handler(
        request: Request, exc: StoreHubError
    ) -> JSONResponse:
        """Map typed failures to their status code and a message body."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "Request rejected",
            extra={
                "event": LogEvent.REQUEST_REJECTED,
                "component": Component.API,
                "error_code": exc.code.value,
                "status": exc.status_code,
                "path": request.url.path,
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response().model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions without leaking details."""
        logger.exception("Unexpected error: %s", exc)
        error = ServerError()
        return JSONResponse(
            status_code=error.status_code,
            content=error.to_response().model_dump(),
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint for container orchestration."""
        return {"status": "ok"}

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return get_metrics_response()

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    setup_logging(settings.logging)
    host, port = settings.server.host_port()
    uvicorn.run(
        "storehub.app.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
