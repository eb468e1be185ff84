"""Tests for the Consul registry client."""

from __future__ import annotations

import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from consul_gateway import (
    ConsulConfig,
    ConsulRegistry,
    HealthCheck,
    ServiceDeregistrationError,
    ServiceDiscoveryError,
    ServiceRegistration,
    ServiceRegistrationError,
    ServiceRegistryProtocol,
    ServiceStatus,
)


def _registry() -> ConsulRegistry:
    return ConsulRegistry(ConsulConfig(host="localhost", port=8500))


def _health_entry(
    service_id: str,
    name: str = "service-a",
    address: str = "10.0.0.5",
    port: int = 8081,
) -> dict[str, object]:
    return {
        "Node": {"Node": "node-1", "Address": "10.0.0.1"},
        "Service": {
            "ID": service_id,
            "Service": name,
            "Address": address,
            "Port": port,
            "Tags": ["api", "rest"],
            "Meta": {"version": "1.0.0"},
        },
        "Checks": [],
    }


class TestConsulConfig:
    """Tests for ConsulConfig."""

    def test_default_base_url(self) -> None:
        assert ConsulConfig().base_url == "http://127.0.0.1:8500"

    def test_base_url_from_parts(self) -> None:
        config = ConsulConfig(host="consul", port=8501, scheme="https")
        assert config.base_url == "https://consul:8501"

    def test_base_url_accepts_full_url_host(self) -> None:
        config = ConsulConfig(host="http://consul.example.com:8500/")
        assert config.base_url == "http://consul.example.com:8500"


class TestConsulRegistry:
    """Tests for ConsulRegistry."""

    def test_implements_protocol(self) -> None:
        assert isinstance(_registry(), ServiceRegistryProtocol)

    def test_initialization(self) -> None:
        registry = _registry()
        assert registry.config.host == "localhost"
        assert registry.config.port == 8500

    @patch.object(ConsulRegistry, "_http_get")
    def test_get_healthy_service_queries_passing_only(
        self, mock_get: MagicMock
    ) -> None:
        mock_get.return_value = [_health_entry("service-a-1")]

        instances = _registry().get_healthy_service("service-a")

        mock_get.assert_called_once_with(
            "http://localhost:8500/v1/health/service/service-a?passing=true")
        assert len(instances) == 1
        instance = instances[0]
        assert instance.service_id == "service-a-1"
        assert instance.service_name == "service-a"
        assert instance.host == "10.0.0.5"
        assert instance.port == 8081
        assert instance.tags == ("api", "rest")
        assert instance.meta == {"version": "1.0.0"}
        assert instance.status == ServiceStatus.PASSING

    @patch.object(ConsulRegistry, "_http_get")
    def test_get_healthy_service_falls_back_to_node_address(
        self, mock_get: MagicMock
    ) -> None:
        mock_get.return_value = [_health_entry("service-a-1", address="")]

        instances = _registry().get_healthy_service("service-a")

        assert instances[0].host == "10.0.0.1"

    @patch.object(ConsulRegistry, "_http_get")
    def test_get_healthy_service_quotes_name(
        self, mock_get: MagicMock
    ) -> None:
        mock_get.return_value = [_health_entry("x-1", name="a b")]

        _registry().get_healthy_service("a b")

        mock_get.assert_called_once_with(
            "http://localhost:8500/v1/health/service/a%20b?passing=true")

    @patch.object(ConsulRegistry, "_http_get")
    def test_no_healthy_instances_is_an_error(
        self, mock_get: MagicMock
    ) -> None:
        mock_get.return_value = []

        with pytest.raises(ServiceDiscoveryError) as exc_info:
            _registry().get_healthy_service("service-b")

        assert exc_info.value.service_name == "service-b"
        assert "no healthy instances" in str(exc_info.value)

    @patch.object(ConsulRegistry, "_http_get")
    def test_empty_body_is_an_error(self, mock_get: MagicMock) -> None:
        mock_get.return_value = None

        with pytest.raises(ServiceDiscoveryError):
            _registry().get_healthy_service("service-b")

    def test_unreachable_registry_raises_discovery_error(self) -> None:
        with patch(
                "urllib.request.urlopen",
                side_effect=urllib.error.URLError("Connection refused"),
        ):
            with pytest.raises(ServiceDiscoveryError) as exc_info:
                _registry().get_healthy_service("service-a")

        assert exc_info.value.service_name == "service-a"

    @patch.object(ConsulRegistry, "_http_get")
    def test_list_services(self, mock_get: MagicMock) -> None:
        mock_get.return_value = {
            "consul": [],
            "service-a": ["api", "rest"],
            "service-b": ["api"],
        }

        catalog = _registry().list_services()

        mock_get.assert_called_once_with(
            "http://localhost:8500/v1/catalog/services")
        assert catalog == {
            "consul": [],
            "service-a": ["api", "rest"],
            "service-b": ["api"],
        }

    @patch.object(ConsulRegistry, "_http_get")
    def test_list_services_empty_is_valid(self, mock_get: MagicMock) -> None:
        mock_get.return_value = {}
        assert _registry().list_services() == {}

    @patch.object(ConsulRegistry, "_http_get")
    def test_list_services_failure(self, mock_get: MagicMock) -> None:
        mock_get.side_effect = Exception("Connection refused")

        with pytest.raises(ServiceDiscoveryError) as exc_info:
            _registry().list_services()

        assert exc_info.value.service_name is None

    @patch.object(ConsulRegistry, "_http_get")
    def test_list_services_queries_each_time(
        self, mock_get: MagicMock
    ) -> None:
        mock_get.side_effect = [{"service-a": []}, {"service-b": []}]
        registry = _registry()

        assert registry.list_services() == {"service-a": []}
        assert registry.list_services() == {"service-b": []}

    @patch.object(ConsulRegistry, "_http_put")
    def test_register_puts_payload(self, mock_put: MagicMock) -> None:
        reg = ServiceRegistration(
            service_name="service-a",
            service_id="service-a-10.0.0.5-8081",
            host="10.0.0.5",
            port=8081,
            tags=("api",),
            health_check=HealthCheck(
                http_endpoint="http://10.0.0.5:8081/ping"),
        )

        _registry().register(reg)

        url, payload = mock_put.call_args.args
        assert url == "http://localhost:8500/v1/agent/service/register"
        assert payload["ID"] == "service-a-10.0.0.5-8081"
        assert payload["Check"]["HTTP"] == "http://10.0.0.5:8081/ping"

    @patch.object(ConsulRegistry, "_http_put")
    def test_register_failure(self, mock_put: MagicMock) -> None:
        mock_put.side_effect = Exception("boom")
        reg = ServiceRegistration(
            service_name="service-a",
            service_id="service-a-1",
            host="10.0.0.5",
            port=8081,
        )

        with pytest.raises(ServiceRegistrationError):
            _registry().register(reg)

    @patch.object(ConsulRegistry, "_http_put")
    def test_deregister(self, mock_put: MagicMock) -> None:
        _registry().deregister("service-a-1")

        mock_put.assert_called_once_with(
            "http://localhost:8500/v1/agent/service/deregister/service-a-1",
            None,
        )

    @patch.object(ConsulRegistry, "_http_put")
    def test_deregister_failure(self, mock_put: MagicMock) -> None:
        mock_put.side_effect = Exception("boom")

        with pytest.raises(ServiceDeregistrationError):
            _registry().deregister("service-a-1")

    def test_build_registration_payload(self) -> None:
        reg = ServiceRegistration(
            service_name="test-service",
            service_id="test-service-1",
            host="127.0.0.1",
            port=8000,
            tags=("v1", "test"),
            meta={"version": "1.0.0"},
        )

        payload = _registry()._build_registration_payload(reg)

        assert payload == {
            "ID": "test-service-1",
            "Name": "test-service",
            "Address": "127.0.0.1",
            "Port": 8000,
            "Tags": ["v1", "test"],
            "Meta": {"version": "1.0.0"},
        }

    def test_build_check_payload(self) -> None:
        check = HealthCheck(
            http_endpoint="/ping",
            interval_seconds=10,
            timeout_seconds=3,
            deregister_after_seconds=30,
        )

        payload = _registry()._build_check_payload(check, "127.0.0.1", 8000)

        assert payload == {
            "HTTP": "http://127.0.0.1:8000/ping",
            "Interval": "10s",
            "Timeout": "3s",
            "DeregisterCriticalServiceAfter": "30s",
        }

    @patch.object(ConsulRegistry, "_http_get")
    def test_is_healthy_success(self, mock_get: MagicMock) -> None:
        mock_get.return_value = "127.0.0.1:8300"
        assert _registry().is_healthy() is True

    @patch.object(ConsulRegistry, "_http_get")
    def test_is_healthy_failure(self, mock_get: MagicMock) -> None:
        mock_get.side_effect = Exception("Connection refused")
        assert _registry().is_healthy() is False

    def test_parse_health_entries_coerces_fields(self) -> None:
        data: list[dict[str, object]] = [{
            "Node": {"Address": "192.168.1.10"},
            "Service": {
                "ID": "service-1",
                "Service": "my-service",
                "Address": "",
                "Port": "8080",
                "Tags": ["v1"],
                "Meta": {"env": "prod"},
            },
        }]

        instances = _registry()._parse_health_service_instances(data)

        assert instances[0].host == "192.168.1.10"
        assert instances[0].port == 8080
        assert instances[0].meta == {"env": "prod"}
        assert instances[0].status == ServiceStatus.PASSING
        with pytest.raises(TypeError):
            instances[0].meta["env"] = "dev"  # type: ignore[index]
