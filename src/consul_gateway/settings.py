"""Configuration loading: optional ``config.json`` plus environment."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from .discovery.dispatcher import DEFAULT_PROBE_PATH, DEFAULT_PROBE_TIMEOUT_S
from .discovery.gateway import DEFAULT_MAX_WORKERS, DEFAULT_RESERVED_SERVICE
from .service_registry.config import ConsulConfig
from .service_registry.registration import RegistrationSettings

_LOGGER = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"


@dataclass(frozen=True, slots=True)
class AppConfig:
    name: str = "api-gateway"
    # Bind address (0.0.0.0 for listening on all interfaces)
    host: str = "0.0.0.0"
    port: int = 8080
    # Address other services use to reach this one
    register_address: str | None = None
    # Address the registry uses for health checks
    health_check_address: str | None = None


@dataclass(frozen=True, slots=True)
class GatewayConfig:
    probe_path: str = DEFAULT_PROBE_PATH
    probe_timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_S
    max_workers: int = DEFAULT_MAX_WORKERS
    reserved_service: str = DEFAULT_RESERVED_SERVICE


@dataclass(frozen=True, slots=True)
class Settings:
    app: AppConfig = field(default_factory=AppConfig)
    consul: ConsulConfig = field(default_factory=ConsulConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)

    def registration_settings(self) -> RegistrationSettings:
        """Registration inputs for this process."""
        return RegistrationSettings(
            name=self.app.name,
            bind_address=self.app.host,
            port=self.app.port,
            register_address=self.app.register_address,
            health_check_address=self.app.health_check_address,
            probe_path=self.gateway.probe_path,
        )


def _get_env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_env_int(name: str) -> int | None:
    value = _get_env_str(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid int env var {name}={value!r}") from None


def _get_env_float(name: str) -> float | None:
    value = _get_env_str(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Invalid float env var {name}={value!r}") from None


def _section(data: Mapping[str, object], key: str) -> dict[str, object]:
    value = data.get(key, {})
    if not isinstance(value, Mapping):
        raise ValueError(f"config section {key!r} must be an object")
    return {str(k): v for k, v in cast(Mapping[object, object], value).items()}


def _pick(
    section: Mapping[str, object],
    key: str,
    env: object | None,
    default: object,
) -> object:
    if env is not None:
        return env
    value = section.get(key)
    if value is None or value == "":
        return default
    return value


def _as_int(value: object, label: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{label} must be an integer")
    try:
        return int(cast(int | str, value))
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be an integer: {value!r}") from None


def _as_float(value: object, label: str) -> float:
    try:
        return float(cast(float | str, value))
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a number: {value!r}") from None


def _as_optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def read_config_file(path: str | os.PathLike[str]) -> dict[str, object]:
    """Read ``config.json`` from a directory (or a direct file path).

    A missing file yields an empty mapping.
    """
    target = Path(path)
    if target.is_dir():
        target = target / CONFIG_FILE_NAME
    if not target.exists():
        return {}
    with target.open(encoding="utf-8") as fh:
        data = cast(object, json.load(fh))
    if not isinstance(data, dict):
        raise ValueError(f"{target} must contain a JSON object")
    _LOGGER.info("Loaded configuration file %s", target)
    return cast(dict[str, object], data)


def load_settings(path: str | os.PathLike[str] | None = ".") -> Settings:
    """Build ``Settings`` from the config file, overridden by environment."""
    data = read_config_file(path) if path is not None else {}
    app = _section(data, "app")
    consul = _section(data, "consul")
    gateway = _section(data, "gateway")
    app_defaults = AppConfig()
    consul_defaults = ConsulConfig()
    gateway_defaults = GatewayConfig()

    app_config = AppConfig(
        name=str(_pick(app, "name", _get_env_str("APP_NAME"),
                       app_defaults.name)),
        host=str(_pick(app, "host", _get_env_str("APP_HOST"),
                       app_defaults.host)),
        port=_as_int(
            _pick(app, "port", _get_env_int("APP_PORT"), app_defaults.port),
            "app.port",
        ),
        register_address=_as_optional_str(
            _pick(app, "register_address",
                  _get_env_str("APP_REGISTER_ADDRESS"), None)),
        health_check_address=_as_optional_str(
            _pick(app, "health_check_address",
                  _get_env_str("APP_HEALTH_CHECK_ADDRESS"), None)),
    )
    consul_config = ConsulConfig(
        host=str(_pick(consul, "host", _get_env_str("CONSUL_HOST"),
                       consul_defaults.host)),
        port=_as_int(
            _pick(consul, "port", _get_env_int("CONSUL_PORT"),
                  consul_defaults.port),
            "consul.port",
        ),
        scheme=str(_pick(consul, "scheme", _get_env_str("CONSUL_SCHEME"),
                         consul_defaults.scheme)),
        timeout_seconds=_as_float(
            _pick(consul, "timeout_seconds", _get_env_float("CONSUL_TIMEOUT"),
                  consul_defaults.timeout_seconds),
            "consul.timeout_seconds",
        ),
    )
    gateway_config = GatewayConfig(
        probe_path=str(_pick(gateway, "probe_path",
                             _get_env_str("GATEWAY_PROBE_PATH"),
                             gateway_defaults.probe_path)),
        probe_timeout_seconds=_as_float(
            _pick(gateway, "probe_timeout_seconds",
                  _get_env_float("GATEWAY_PROBE_TIMEOUT"),
                  gateway_defaults.probe_timeout_seconds),
            "gateway.probe_timeout_seconds",
        ),
        max_workers=_as_int(
            _pick(gateway, "max_workers", _get_env_int("GATEWAY_MAX_WORKERS"),
                  gateway_defaults.max_workers),
            "gateway.max_workers",
        ),
        reserved_service=str(_pick(gateway, "reserved_service", None,
                                   gateway_defaults.reserved_service)),
    )

    _LOGGER.info(
        "Consul configuration: %s",
        consul_config.base_url,
    )
    return Settings(app=app_config, consul=consul_config,
                    gateway=gateway_config)
