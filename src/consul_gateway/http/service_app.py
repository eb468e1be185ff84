from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from ..logging import configure_logging, load_logging_settings
from ..protocol.models import PongResponse
from ..service_registry.consul_registry import ConsulRegistry
from ..service_registry.protocol import ServiceRegistryProtocol
from ..service_registry.registration import RegistrationPublisher
from ..settings import Settings, load_settings

_LOGGER = logging.getLogger(__name__)


def create_service_app(
    settings: Settings | None = None,
    *,
    registry: ServiceRegistryProtocol | None = None,
    register: bool = True,
) -> FastAPI:
    """Create a participating service that answers ``GET /ping``.

    On startup the instance publishes itself to the registry so the gateway
    can discover it; on shutdown it removes itself.
    """
    cfg = settings or Settings()
    publisher = RegistrationPublisher(
        registry or ConsulRegistry(cfg.consul),
        cfg.registration_settings(),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.publisher = publisher
        _LOGGER.info("Starting %s service ...", cfg.app.name)
        if register:
            publisher.register()
        try:
            yield
        finally:
            if publisher.registered:
                publisher.deregister()

    app = FastAPI(title=cfg.app.name, lifespan=lifespan)

    @app.get(cfg.gateway.probe_path)
    def ping():
        """Liveness probe."""
        return PongResponse(service=cfg.app.name)

    return app


def run_service() -> None:
    """Start a ping service with configuration from config.json / env."""
    load_dotenv()
    settings = load_settings(".")
    configure_logging(load_logging_settings(settings.app.name))
    app = create_service_app(settings)
    uvicorn.run(app, host=settings.app.host, port=settings.app.port)


if __name__ == "__main__":
    run_service()
