"""Tests for building and publishing registration descriptors."""

from __future__ import annotations

import pytest

from consul_gateway import (
    MemoryRegistry,
    RegistrationPublisher,
    RegistrationSettings,
    ServiceRegistrationError,
    build_registration,
)


class TestBuildRegistration:
    """Address fallback rules and descriptor contents."""

    def test_addresses_fall_back_to_bind_address(self) -> None:
        settings = RegistrationSettings(
            name="service-a",
            bind_address="10.0.0.5",
            port=8081,
            register_address="",
            health_check_address="",
        )

        reg = build_registration(settings)

        assert reg.host == "10.0.0.5"
        assert reg.health_check is not None
        assert reg.health_check.http_endpoint == "http://10.0.0.5:8081/ping"
        assert reg.service_id == "service-a-10.0.0.5-8081"

    def test_health_check_falls_back_to_register_address(self) -> None:
        settings = RegistrationSettings(
            name="service-a",
            bind_address="0.0.0.0",
            port=8081,
            register_address="service-a",
        )

        reg = build_registration(settings)

        assert reg.host == "service-a"
        assert reg.health_check is not None
        assert reg.health_check.http_endpoint == "http://service-a:8081/ping"
        assert reg.service_id == "service-a-service-a-8081"

    def test_distinct_addresses_are_preserved(self) -> None:
        settings = RegistrationSettings(
            name="service-a",
            bind_address="0.0.0.0",
            port=8081,
            register_address="service-a.internal",
            health_check_address="host.docker.internal",
        )

        reg = build_registration(settings)

        assert settings.bind_address == "0.0.0.0"
        assert reg.host == "service-a.internal"
        assert reg.health_check is not None
        assert reg.health_check.http_endpoint == (
            "http://host.docker.internal:8081/ping")

    def test_defaults(self) -> None:
        reg = build_registration(
            RegistrationSettings(name="svc", bind_address="h", port=1))

        assert reg.tags == ("api", "rest", "microservice")
        assert reg.meta == {
            "version": "1.0.0",
            "environment": "development",
            "protocol": "http",
        }
        assert reg.health_check is not None
        assert reg.health_check.interval_seconds == 10
        assert reg.health_check.timeout_seconds == 3
        assert reg.health_check.deregister_after_seconds == 30

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_registration(
                RegistrationSettings(name="", bind_address="h", port=1))


class TestRegistrationPublisher:
    """Publishing through a registry."""

    def _settings(self) -> RegistrationSettings:
        return RegistrationSettings(
            name="service-a",
            bind_address="127.0.0.1",
            port=8081,
        )

    def test_register_makes_instance_discoverable(self) -> None:
        registry = MemoryRegistry()
        publisher = RegistrationPublisher(registry, self._settings())

        publisher.register()

        instances = registry.get_healthy_service("service-a")
        assert [i.service_id for i in instances] == [
            "service-a-127.0.0.1-8081"
        ]
        assert publisher.registered is True

    def test_register_is_idempotent(self) -> None:
        registry = MemoryRegistry()
        publisher = RegistrationPublisher(registry, self._settings())

        first = publisher.register()
        second = publisher.register()

        assert first is second
        assert len(registry.all_instances("service-a")) == 1

    def test_deregister(self) -> None:
        registry = MemoryRegistry(include_self=False)
        publisher = RegistrationPublisher(registry, self._settings())
        publisher.register()

        publisher.deregister()
        publisher.deregister()

        assert registry.list_services() == {}
        assert publisher.registered is False

    def test_register_failure_propagates(self) -> None:
        registry = MemoryRegistry(healthy=False)
        publisher = RegistrationPublisher(registry, self._settings())

        with pytest.raises(ServiceRegistrationError):
            publisher.register()
        assert publisher.registered is False
