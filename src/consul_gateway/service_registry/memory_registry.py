"""In-memory service registry implementation for testing."""

from __future__ import annotations

import dataclasses
import threading
from collections import defaultdict

from typing_extensions import override

from .errors import (
    ServiceDeregistrationError,
    ServiceDiscoveryError,
    ServiceRegistrationError,
)
from .protocol import (
    BaseServiceRegistry,
    RegistryCatalog,
    ServiceInstance,
    ServiceRegistration,
    ServiceStatus,
)


class MemoryRegistry(BaseServiceRegistry):
    """A simple in-memory registry useful for unit tests.

    Mirrors the observable behavior of a Consul agent: the catalog always
    carries the agent's own ``consul`` entry, re-registering an ID replaces
    the previous record, and healthy lookups fail when nothing is passing.
    """

    SELF_SERVICE_NAME = "consul"

    _services: dict[str, dict[str, ServiceInstance]]
    _registrations: dict[str, ServiceRegistration]
    _healthy: bool
    _include_self: bool
    _lock: threading.RLock

    def __init__(
        self,
        *,
        healthy: bool = True,
        include_self: bool = True,
    ) -> None:
        self._services = defaultdict(dict)
        self._registrations = {}
        self._healthy = healthy
        self._include_self = include_self
        self._lock = threading.RLock()

    @override
    def register(self, registration: ServiceRegistration) -> None:
        """Register (or replace) a service instance in memory."""
        if not registration.service_name or not registration.service_id:
            raise ServiceRegistrationError(
                "service_name and service_id are required")
        instance = ServiceInstance(
            service_id=registration.service_id,
            service_name=registration.service_name,
            host=registration.host,
            port=registration.port,
            tags=registration.tags,
            meta=dict(registration.meta),
            status=ServiceStatus.PASSING,
        )
        with self._lock:
            self._check_reachable_for_write(ServiceRegistrationError)
            self._remove_locked(registration.service_id)
            self._services[registration.service_name][
                registration.service_id] = instance
            self._registrations[registration.service_id] = registration

    @override
    def deregister(self, service_id: str) -> None:
        """Deregister a service instance by ID."""
        with self._lock:
            self._check_reachable_for_write(ServiceDeregistrationError)
            if not self._remove_locked(service_id):
                raise ServiceDeregistrationError(
                    f"Service not found: {service_id}")

    def all_instances(self, service_name: str) -> list[ServiceInstance]:
        """Return every instance of a service name, whatever its status."""
        with self._lock:
            self._check_reachable(service_name)
            service_map = self._services.get(service_name, {})
            return [service_map[key] for key in sorted(service_map)]

    @override
    def get_healthy_service(self, service_name: str) -> list[ServiceInstance]:
        """Return instances with status PASSING; fail when there are none."""
        instances = [
            instance for instance in self.all_instances(service_name)
            if instance.status == ServiceStatus.PASSING
        ]
        if not instances:
            raise ServiceDiscoveryError(
                f"no healthy instances of service {service_name} found",
                service_name=service_name,
            )
        return instances

    @override
    def list_services(self) -> RegistryCatalog:
        """Return every known service name with the union of its tags."""
        with self._lock:
            self._check_reachable(None)
            catalog: RegistryCatalog = {}
            if self._include_self:
                catalog[self.SELF_SERVICE_NAME] = []
            for name, service_map in self._services.items():
                tags: list[str] = []
                for key in sorted(service_map):
                    for tag in service_map[key].tags:
                        if tag not in tags:
                            tags.append(tag)
                catalog[name] = tags
            return catalog

    @override
    def is_healthy(self) -> bool:
        """Return the configured health status."""
        return self._healthy

    def set_health(self, healthy: bool) -> None:
        """Toggle registry reachability for testing."""
        with self._lock:
            self._healthy = healthy

    def set_instance_status(
        self,
        service_id: str,
        status: ServiceStatus,
    ) -> None:
        """Simulate a health check result for one instance."""
        with self._lock:
            for service_map in self._services.values():
                if service_id in service_map:
                    service_map[service_id] = dataclasses.replace(
                        service_map[service_id], status=status)
                    return
        raise KeyError(service_id)

    def get_registration(self, service_id: str) -> ServiceRegistration | None:
        """Return the descriptor an instance was registered with."""
        with self._lock:
            return self._registrations.get(service_id)

    def _remove_locked(self, service_id: str) -> bool:
        for name, service_map in list(self._services.items()):
            if service_id in service_map:
                del service_map[service_id]
                if not service_map:
                    del self._services[name]
                self._registrations.pop(service_id, None)
                return True
        return False

    def _check_reachable(self, service_name: str | None) -> None:
        if not self._healthy:
            raise ServiceDiscoveryError(
                "registry unreachable", service_name=service_name)

    def _check_reachable_for_write(
        self,
        error_type: type[Exception],
    ) -> None:
        if not self._healthy:
            raise error_type("registry unreachable")
