from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from ..core.errors import GatewayError
from ..discovery.dispatcher import ProbeDispatcher
from ..discovery.gateway import GatewayService
from ..logging import configure_logging, load_logging_settings
from ..protocol.models import (
    ErrorResponse,
    HealthResponse,
    PingAllResponse,
    PingServiceResponse,
    ServicesResponse,
    error_content,
)
from ..service_registry.consul_registry import ConsulRegistry
from ..service_registry.errors import ServiceRegistryError
from ..settings import Settings, load_settings

_LOGGER = logging.getLogger(__name__)

_CORE_ERRORS = (GatewayError, ServiceRegistryError)


def build_gateway_service(settings: Settings) -> GatewayService:
    """Wire the Consul client, dispatcher and selector from settings."""
    dispatcher = ProbeDispatcher(
        probe_path=settings.gateway.probe_path,
        timeout_s=settings.gateway.probe_timeout_seconds,
    )
    return GatewayService(
        ConsulRegistry(settings.consul),
        dispatcher,
        max_workers=settings.gateway.max_workers,
        reserved_service=settings.gateway.reserved_service,
    )


def _missing_name_response() -> JSONResponse:
    error = ErrorResponse(
        error="service name is required",
        usage="GET /api/ping/{service-name}",
        examples=["GET /api/ping/service-a", "GET /api/ping/service-b"],
    )
    return JSONResponse(status_code=400, content=error_content(error))


def create_gateway_app(
    gateway: GatewayService | None = None,
    *,
    settings: Settings | None = None,
) -> FastAPI:
    """Create the gateway FastAPI application.

    When ``gateway`` is omitted one is built from ``settings`` and closed on
    shutdown.
    """
    cfg = settings or Settings()
    owns_gateway = gateway is None
    service = gateway or build_gateway_service(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.gateway = service
        _LOGGER.info("Starting %s service ...", cfg.app.name)
        try:
            yield
        finally:
            if owns_gateway:
                service.close()

    app = FastAPI(title="API Gateway", lifespan=lifespan)

    @app.get("/health")
    def health():
        """Liveness of the gateway itself plus registry reachability."""
        registry = "reachable" if service.registry_healthy() else "unreachable"
        return HealthResponse(service=cfg.app.name, registry=registry)

    @app.get("/discovery/services")
    def get_all_services():
        """List every service in the registry."""
        try:
            catalog = service.list_all_services()
        except _CORE_ERRORS as exc:
            error = ErrorResponse(error="failed to get services",
                                  details=str(exc))
            return JSONResponse(status_code=500, content=error_content(error))
        return ServicesResponse.from_catalog(catalog)

    @app.get("/discovery/ping-all")
    def ping_all_services():
        """Ping every discovered service."""
        try:
            results = service.ping_all_services()
        except _CORE_ERRORS as exc:
            error = ErrorResponse(error="failed to ping all services",
                                  details=str(exc))
            return JSONResponse(status_code=500, content=error_content(error))
        return PingAllResponse.from_results(results)

    @app.get("/api/ping")
    @app.get("/api/ping/")
    def ping_without_name():
        return _missing_name_response()

    @app.get("/api/ping/{service_name}")
    def ping_service(service_name: str):
        """Discover ``service_name`` and route a ping to it."""
        name = service_name.strip()
        if not name:
            return _missing_name_response()
        try:
            result = service.ping_service(name)
        except _CORE_ERRORS as exc:
            error = ErrorResponse(
                error="failed to ping service",
                service=name,
                details=str(exc),
            )
            return JSONResponse(status_code=500, content=error_content(error))
        return PingServiceResponse.from_result(result)

    return app


def run_gateway() -> None:
    """Start the gateway with configuration from config.json / environment."""
    load_dotenv()
    settings = load_settings(".")
    configure_logging(load_logging_settings(settings.app.name))
    app = create_gateway_app(settings=settings)
    uvicorn.run(app, host=settings.app.host, port=settings.app.port)


if __name__ == "__main__":
    run_gateway()
