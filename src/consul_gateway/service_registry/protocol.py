"""Service registry protocol definitions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Protocol, runtime_checkable

# Service name -> tags, as reported by the registry catalog.
RegistryCatalog = dict[str, list[str]]


class ServiceStatus(Enum):
    """Service health status."""

    PASSING = "passing"
    WARNING = "warning"
    CRITICAL = "critical"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ServiceInstance:
    """A registered service instance as returned by one registry query.

    ``meta`` is copied into a read-only mapping; it takes part in equality
    but not in the hash.
    """

    service_id: str
    service_name: str
    host: str
    port: int
    tags: tuple[str, ...] = field(default_factory=tuple)
    meta: Mapping[str, str] = field(default_factory=dict, hash=False)
    status: ServiceStatus = ServiceStatus.UNKNOWN

    def __post_init__(self) -> None:
        object.__setattr__(self, "meta", MappingProxyType(dict(self.meta)))


@dataclass(frozen=True, slots=True)
class HealthCheck:
    """Health check configuration."""

    # HTTP health check endpoint, absolute URL or path on the service
    http_endpoint: str | None = None

    # Check interval in seconds
    interval_seconds: int = 10

    # Timeout in seconds
    timeout_seconds: int = 3

    # Deregister critical service after this duration (seconds)
    deregister_after_seconds: int | None = 30


@dataclass(frozen=True, slots=True)
class ServiceRegistration:
    """Service registration request."""

    service_name: str
    service_id: str
    host: str
    port: int
    tags: tuple[str, ...] = field(default_factory=tuple)
    meta: dict[str, str] = field(default_factory=dict)
    health_check: HealthCheck | None = None


@runtime_checkable
class ServiceRegistryProtocol(Protocol):
    """Protocol for service registry implementations.

    Implementations can use Consul or an in-process store. Every call queries
    the backend's current state; nothing is cached between calls.
    """

    def register(self, registration: ServiceRegistration) -> None:
        """Register a service instance.

        Raises:
            ServiceRegistrationError: If registration fails
        """
        ...

    def deregister(self, service_id: str) -> None:
        """Deregister a service instance.

        Raises:
            ServiceDeregistrationError: If deregistration fails
        """
        ...

    def get_healthy_service(self, service_name: str) -> list[ServiceInstance]:
        """Get the healthy instances of a service.

        Returns:
            A non-empty list of instances passing their health checks

        Raises:
            ServiceDiscoveryError: If the query fails or no instance is healthy
        """
        ...

    def list_services(self) -> RegistryCatalog:
        """List every known service with its tags.

        Raises:
            ServiceDiscoveryError: If the query fails
        """
        ...

    def is_healthy(self) -> bool:
        """Check if the registry connection is healthy."""
        ...


class BaseServiceRegistry(ABC):
    """Abstract base shared by the concrete registries."""

    @abstractmethod
    def register(self, registration: ServiceRegistration) -> None:
        ...

    @abstractmethod
    def deregister(self, service_id: str) -> None:
        ...

    @abstractmethod
    def get_healthy_service(self, service_name: str) -> list[ServiceInstance]:
        ...

    @abstractmethod
    def list_services(self) -> RegistryCatalog:
        ...

    @abstractmethod
    def is_healthy(self) -> bool:
        ...
