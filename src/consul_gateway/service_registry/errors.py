"""Service registry error definitions."""

from __future__ import annotations


class ServiceRegistryError(Exception):
    """Base exception for service registry errors."""


class ServiceRegistrationError(ServiceRegistryError):
    """Error during service registration."""


class ServiceDeregistrationError(ServiceRegistryError):
    """Error during service deregistration."""


class ServiceDiscoveryError(ServiceRegistryError):
    """Error during service discovery.

    Raised when the registry cannot be queried, or when a service has no
    healthy instances. ``service_name`` is ``None`` for catalog queries.
    """

    def __init__(self, message: str, *, service_name: str | None = None) -> None:
        super().__init__(message)
        self.service_name = service_name


class ServiceRegistryConnectionError(ServiceRegistryError):
    """Error connecting to service registry."""
