"""Discovery-and-dispatch: turn a service name into a live probe."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from ..service_registry.protocol import (
    RegistryCatalog,
    ServiceInstance,
    ServiceRegistryProtocol,
)
from .dispatcher import JsonObject, ProbeDispatcher
from .selector import InstanceSelectorProtocol, RandomInstanceSelector

_LOGGER = logging.getLogger(__name__)

FAILURE_STATUS_CODE = 500
DEFAULT_RESERVED_SERVICE = "consul"
DEFAULT_MAX_WORKERS = 8


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of probing one service.

    ``instance`` is ``None`` when discovery failed before any probe;
    ``status_code`` is the transport status, or the failure sentinel on
    entries recorded by ``ping_all_services``.
    """

    service: str
    message: str
    instance: ServiceInstance | None = None
    status_code: int | None = None
    raw_response: JsonObject | None = None


AggregateResult = dict[str, ProbeResult]


class GatewayService:
    """Registry client, selector and dispatcher composed into ping calls.

    Every call re-queries the registry. Errors from a single ``ping_service``
    propagate unchanged; ``ping_all_services`` records them per service.
    """

    def __init__(
        self,
        registry: ServiceRegistryProtocol,
        dispatcher: ProbeDispatcher | None = None,
        *,
        selector: InstanceSelectorProtocol | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        reserved_service: str = DEFAULT_RESERVED_SERVICE,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._registry = registry
        self._dispatcher = dispatcher or ProbeDispatcher()
        self._selector = selector or RandomInstanceSelector()
        self._max_workers = max_workers
        self._reserved_service = reserved_service

    def close(self) -> None:
        self._dispatcher.close()

    def registry_healthy(self) -> bool:
        """Whether the registry currently answers requests."""
        return self._registry.is_healthy()

    def list_all_services(self) -> RegistryCatalog:
        """Return the registry catalog.

        Raises:
            ServiceDiscoveryError: If the registry cannot be queried
        """
        _LOGGER.info("Discovering all available services")
        services = self._registry.list_services()
        _LOGGER.info("Found %d services in registry", len(services))
        return services

    def ping_service(self, service_name: str) -> ProbeResult:
        """Discover one healthy instance of ``service_name`` and probe it.

        Raises:
            ServiceDiscoveryError: No healthy instance, or registry unreachable
            TransportError: The chosen instance could not be reached
        """
        _LOGGER.info("Discovering service: %s", service_name)
        instances = self._registry.get_healthy_service(service_name)
        instance = self._selector.select(instances)
        _LOGGER.info(
            "Found service instance: %s at %s:%d",
            instance.service_name,
            instance.host,
            instance.port,
        )

        response = self._dispatcher.probe(instance)
        return ProbeResult(
            service=service_name,
            message=f"Successfully pinged {service_name}",
            instance=instance,
            status_code=response.status_code,
            raw_response=response.body,
        )

    def ping_all_services(self) -> AggregateResult:
        """Ping every service in the catalog except the registry itself.

        A failing service gets a failure entry with status 500; it never
        stops the others. Only a failed catalog query aborts the call.

        Raises:
            ServiceDiscoveryError: If the catalog query fails
        """
        _LOGGER.info("Discovering and pinging all services")
        catalog = self.list_all_services()
        names = [name for name in catalog if name != self._reserved_service]
        if not names:
            return {}

        results: AggregateResult = {}
        workers = min(self._max_workers, len(names))
        with ThreadPoolExecutor(
                max_workers=workers,
                thread_name_prefix="ping-all",
        ) as pool:
            futures: dict[Future[ProbeResult], str] = {
                pool.submit(self.ping_service, name): name
                for name in names
            }
            # Only this thread writes to ``results``.
            for future in as_completed(futures):
                name = futures[future]
                results[name] = self._collect(name, future)
        return results

    def _collect(self, name: str, future: Future[ProbeResult]) -> ProbeResult:
        try:
            return future.result()
        except Exception as exc:
            _LOGGER.warning("Failed to ping %s: %s", name, exc)
            return ProbeResult(
                service=name,
                message=f"Failed to ping {name}: {exc}",
                instance=None,
                status_code=FAILURE_STATUS_CODE,
                raw_response=None,
            )
