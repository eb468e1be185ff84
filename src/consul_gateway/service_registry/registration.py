"""Publishing this instance into the service registry."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from .protocol import (
    HealthCheck,
    ServiceRegistration,
    ServiceRegistryProtocol,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_TAGS: tuple[str, ...] = ("api", "rest", "microservice")


def _default_meta() -> dict[str, str]:
    return {
        "version": "1.0.0",
        "environment": "development",
        "protocol": "http",
    }


@dataclass(frozen=True, slots=True)
class RegistrationSettings:
    """Inputs for building a registration descriptor.

    ``bind_address`` is where the service listens (often ``0.0.0.0``),
    ``register_address`` is where other services reach it, and
    ``health_check_address`` is where the registry probes it. Missing or
    empty addresses fall back along that chain.
    """

    name: str
    bind_address: str
    port: int
    register_address: str | None = None
    health_check_address: str | None = None
    tags: tuple[str, ...] = DEFAULT_TAGS
    meta: dict[str, str] = field(default_factory=_default_meta)
    probe_path: str = "/ping"
    interval_seconds: int = 10
    timeout_seconds: int = 3
    deregister_after_seconds: int = 30

    @property
    def resolved_register_address(self) -> str:
        return self.register_address or self.bind_address

    @property
    def resolved_health_check_address(self) -> str:
        return self.health_check_address or self.resolved_register_address


def build_service_id(settings: RegistrationSettings) -> str:
    """One registry entry per physical instance: name-address-port."""
    return (
        f"{settings.name}-{settings.resolved_register_address}-{settings.port}"
    )


def build_registration(settings: RegistrationSettings) -> ServiceRegistration:
    """Build the descriptor published for this instance."""
    if not settings.name:
        raise ValueError("service name must be non-empty")
    register_address = settings.resolved_register_address
    health_check_address = settings.resolved_health_check_address
    health_check = HealthCheck(
        http_endpoint=(
            f"http://{health_check_address}:{settings.port}"
            f"{settings.probe_path}"
        ),
        interval_seconds=settings.interval_seconds,
        timeout_seconds=settings.timeout_seconds,
        deregister_after_seconds=settings.deregister_after_seconds,
    )
    return ServiceRegistration(
        service_name=settings.name,
        service_id=build_service_id(settings),
        host=register_address,
        port=settings.port,
        tags=tuple(settings.tags),
        meta=dict(settings.meta),
        health_check=health_check,
    )


class RegistrationPublisher:
    """Registers this instance at startup and removes it at shutdown.

    The registry is the only state shared with the gateway that later
    discovers the instance.
    """

    def __init__(
        self,
        registry: ServiceRegistryProtocol,
        settings: RegistrationSettings,
    ) -> None:
        self._registry = registry
        self._settings = settings
        self._registration = build_registration(settings)
        self._registered = False
        self._lock = threading.Lock()

    @property
    def registration(self) -> ServiceRegistration:
        return self._registration

    @property
    def registered(self) -> bool:
        return self._registered

    def register(self) -> ServiceRegistration:
        """Submit the descriptor; repeated calls are no-ops.

        Raises:
            ServiceRegistrationError: If the registry rejects the write
        """
        with self._lock:
            if self._registered:
                return self._registration
            self._registry.register(self._registration)
            self._registered = True

        reg = self._registration
        _LOGGER.info(
            "Service '%s' registered (id=%s, bind=%s:%d, address=%s:%d, "
            "check=%s, tags=%s)",
            reg.service_name,
            reg.service_id,
            self._settings.bind_address,
            self._settings.port,
            reg.host,
            reg.port,
            reg.health_check.http_endpoint if reg.health_check else None,
            list(reg.tags),
        )
        return reg

    def deregister(self) -> None:
        """Remove the descriptor if this publisher registered it.

        Raises:
            ServiceDeregistrationError: If the registry rejects the removal
        """
        with self._lock:
            if not self._registered:
                return
            self._registry.deregister(self._registration.service_id)
            self._registered = False
        _LOGGER.info(
            "Service '%s' deregistered (id=%s)",
            self._registration.service_name,
            self._registration.service_id,
        )
