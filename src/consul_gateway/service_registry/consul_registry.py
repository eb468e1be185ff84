"""Consul service registry implementation."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Iterable, Mapping
from http.client import HTTPResponse
from typing import ClassVar, cast

from typing_extensions import override

from .config import ConsulConfig
from .errors import (
    ServiceDeregistrationError,
    ServiceDiscoveryError,
    ServiceRegistrationError,
    ServiceRegistryConnectionError,
)
from .protocol import (
    BaseServiceRegistry,
    HealthCheck,
    RegistryCatalog,
    ServiceInstance,
    ServiceRegistration,
    ServiceStatus,
)

logger = logging.getLogger(__name__)


def _to_str(value: object) -> str:
    """Convert value to string safely."""
    if value is None:
        return ""
    return str(value)


def _to_int(value: object, default: int = 0) -> int:
    """Convert value to int safely."""
    if value is None:
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value))
    except (ValueError, TypeError):
        return default


def _to_str_tuple(value: object) -> tuple[str, ...]:
    """Convert value to tuple of strings."""
    if isinstance(value, (str, bytes)):
        return ()
    if isinstance(value, Iterable):
        return tuple(_to_str(v) for v in cast(Iterable[object], value))
    return ()


def _to_str_dict(value: object) -> dict[str, str]:
    """Convert value to dict of strings."""
    if isinstance(value, Mapping):
        mapping = cast(Mapping[object, object], value)
        return {_to_str(k): _to_str(v) for k, v in mapping.items()}
    return {}


def _as_object_dict(value: object) -> dict[str, object]:
    """Ensure the value is a dict[str, object] or return empty."""
    if isinstance(value, Mapping):
        mapping = cast(Mapping[object, object], value)
        return {str(k): v for k, v in mapping.items()}
    return {}


def _coerce_dict_list(result: object) -> list[dict[str, object]]:
    """Convert JSON result to a list of object dictionaries."""
    if isinstance(result, list):
        dicts: list[dict[str, object]] = []
        for item in cast(list[object], result):
            mapped = _as_object_dict(item)
            if mapped:
                dicts.append(mapped)
        return dicts
    if isinstance(result, Mapping):
        mapped = _as_object_dict(cast(Mapping[object, object], result))
        return [mapped] if mapped else []
    return []


def _format_duration(seconds: int) -> str:
    return f"{seconds}s"


class ConsulRegistry(BaseServiceRegistry):
    """Consul-based service registry implementation.

    Talks to the Consul agent HTTP API. Healthy-instance lookups are filtered
    server side (``passing=true``), so callers only ever see instances that
    pass their health checks at query time.

    Example:
        >>> config = ConsulConfig(host="localhost", port=8500)
        >>> registry = ConsulRegistry(config)
        >>> registry.list_services()
        {'consul': [], 'service-a': ['api', 'rest']}
    """

    DEFAULT_TIMEOUT: ClassVar[float] = 10.0

    _config: ConsulConfig
    _base_url: str
    _timeout: float

    def __init__(self, config: ConsulConfig | None = None) -> None:
        """Initialize Consul registry.

        Args:
            config: Connection settings. Defaults to a local agent.
        """
        self._config = config or ConsulConfig()
        self._base_url = self._config.base_url
        self._timeout = self._config.timeout_seconds or self.DEFAULT_TIMEOUT

    @property
    def config(self) -> ConsulConfig:
        """Get the registry configuration."""
        return self._config

    @override
    def register(self, registration: ServiceRegistration) -> None:
        """Register a service instance with the local Consul agent.

        Raises:
            ServiceRegistrationError: If registration fails
        """
        url = f"{self._base_url}/v1/agent/service/register"
        payload = self._build_registration_payload(registration)

        try:
            self._http_put(url, payload)
            logger.info(
                "Registered service: %s (id=%s)",
                registration.service_name,
                registration.service_id,
            )
        except Exception as e:
            msg = f"Failed to register service: {registration.service_id}"
            logger.exception(msg)
            raise ServiceRegistrationError(msg) from e

    @override
    def deregister(self, service_id: str) -> None:
        """Deregister a service instance from Consul.

        Raises:
            ServiceDeregistrationError: If deregistration fails
        """
        quoted = urllib.parse.quote(service_id, safe="")
        url = f"{self._base_url}/v1/agent/service/deregister/{quoted}"

        try:
            self._http_put(url, None)
            logger.info("Deregistered service: %s", service_id)
        except Exception as e:
            msg = f"Failed to deregister service: {service_id}"
            logger.exception(msg)
            raise ServiceDeregistrationError(msg) from e

    @override
    def get_healthy_service(self, service_name: str) -> list[ServiceInstance]:
        """Get all healthy instances of a service.

        Returns:
            A non-empty list of healthy service instances

        Raises:
            ServiceDiscoveryError: If the query fails or nothing is healthy
        """
        quoted = urllib.parse.quote(service_name, safe="")
        url = f"{self._base_url}/v1/health/service/{quoted}?passing=true"

        try:
            data = _coerce_dict_list(self._http_get(url))
            instances = self._parse_health_service_instances(data)
        except Exception as e:
            msg = f"Failed to discover service {service_name}: {e}"
            logger.exception(msg)
            raise ServiceDiscoveryError(msg, service_name=service_name) from e

        if not instances:
            raise ServiceDiscoveryError(
                f"no healthy instances of service {service_name} found",
                service_name=service_name,
            )
        return instances

    @override
    def list_services(self) -> RegistryCatalog:
        """List every service in the Consul catalog with its tags.

        Raises:
            ServiceDiscoveryError: If query fails
        """
        url = f"{self._base_url}/v1/catalog/services"

        try:
            data = self._http_get(url)
        except Exception as e:
            msg = f"Failed to get all services: {e}"
            logger.exception(msg)
            raise ServiceDiscoveryError(msg) from e
        return self._parse_catalog(data)

    @override
    def is_healthy(self) -> bool:
        """Check if the Consul connection is healthy.

        Returns:
            True if a cluster leader is known, False otherwise
        """
        url = f"{self._base_url}/v1/status/leader"

        try:
            leader = self._http_get(url)
            return bool(leader)
        except Exception:
            logger.warning("Consul health check failed")
            return False

    def _build_registration_payload(
        self,
        registration: ServiceRegistration,
    ) -> dict[str, object]:
        """Build Consul registration payload."""
        payload: dict[str, object] = {
            "ID": registration.service_id,
            "Name": registration.service_name,
            "Address": registration.host,
            "Port": registration.port,
        }

        if registration.tags:
            payload["Tags"] = list(registration.tags)

        if registration.meta:
            payload["Meta"] = dict(registration.meta)

        if registration.health_check:
            payload["Check"] = self._build_check_payload(
                registration.health_check,
                registration.host,
                registration.port,
            )

        return payload

    def _build_check_payload(
        self,
        health_check: HealthCheck,
        host: str,
        port: int,
    ) -> dict[str, object]:
        """Build Consul health check payload."""
        check: dict[str, object] = {
            "Interval": _format_duration(health_check.interval_seconds),
            "Timeout": _format_duration(health_check.timeout_seconds),
        }

        if health_check.http_endpoint:
            endpoint = health_check.http_endpoint
            if not endpoint.startswith("http"):
                endpoint = f"http://{host}:{port}{endpoint}"
            check["HTTP"] = endpoint

        if health_check.deregister_after_seconds:
            check["DeregisterCriticalServiceAfter"] = _format_duration(
                health_check.deregister_after_seconds)

        return check

    def _parse_catalog(self, data: object) -> RegistryCatalog:
        """Parse Consul ``/v1/catalog/services`` response."""
        catalog: RegistryCatalog = {}
        for name, tags in _as_object_dict(data).items():
            catalog[name] = list(_to_str_tuple(tags))
        return catalog

    def _parse_health_service_instances(
        self,
        data: list[dict[str, object]],
    ) -> list[ServiceInstance]:
        """Parse Consul health service response."""
        instances: list[ServiceInstance] = []
        for item in data:
            service = _as_object_dict(item.get("Service", {}))
            if not service:
                continue
            # An empty service address means "use the node address".
            host = _to_str(service.get("Address", ""))
            if not host:
                node = _as_object_dict(item.get("Node", {}))
                host = _to_str(node.get("Address", ""))
            instance = ServiceInstance(
                service_id=_to_str(service.get("ID", "")),
                service_name=_to_str(service.get("Service", "")),
                host=host,
                port=_to_int(service.get("Port", 0)),
                tags=_to_str_tuple(service.get("Tags")),
                meta=_to_str_dict(service.get("Meta")),
                status=ServiceStatus.PASSING,
            )
            instances.append(instance)
        return instances

    def _http_get(self, url: str) -> object:
        """Perform HTTP GET request and decode the JSON body."""
        request = urllib.request.Request(url, method="GET")
        request.add_header("Accept", "application/json")

        try:
            with cast(
                    HTTPResponse,
                    urllib.request.urlopen(request, timeout=self._timeout),
            ) as response:
                content_bytes = response.read()
                if not content_bytes:
                    return None
                return cast(object, json.loads(content_bytes.decode("utf-8")))
        except urllib.error.URLError as e:
            raise ServiceRegistryConnectionError(
                f"Failed to connect to Consul: {e}") from e

    def _http_put(
        self,
        url: str,
        data: dict[str, object] | None,
    ) -> None:
        """Perform HTTP PUT request."""
        body = None if data is None else json.dumps(data).encode("utf-8")

        request = urllib.request.Request(url, data=body, method="PUT")
        request.add_header("Content-Type", "application/json")

        try:
            with cast(
                    HTTPResponse,
                    urllib.request.urlopen(request, timeout=self._timeout),
            ) as response:
                _ = response.read()  # Consume response
        except urllib.error.URLError as e:
            raise ServiceRegistryConnectionError(
                f"Failed to connect to Consul: {e}") from e
