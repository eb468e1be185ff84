"""Public API entry point for consul_gateway.

Use this module for supported imports. Subpackages are internal.
"""

from .core import GatewayError, TransportError
from .discovery import (
    FAILURE_STATUS_CODE,
    RAW_BODY_KEY,
    AggregateResult,
    GatewayService,
    InstanceSelectorProtocol,
    JsonObject,
    JsonValue,
    ProbeDispatcher,
    ProbeResponse,
    ProbeResult,
    RandomInstanceSelector,
    RoundRobinInstanceSelector,
)
from .http import (
    create_gateway_app,
    create_service_app,
    run_gateway,
    run_service,
)
from .logging import LoggingSettings, configure_logging
from .service_registry import (
    ConsulConfig,
    ConsulRegistry,
    HealthCheck,
    MemoryRegistry,
    RegistrationPublisher,
    RegistrationSettings,
    RegistryCatalog,
    ServiceDeregistrationError,
    ServiceDiscoveryError,
    ServiceInstance,
    ServiceRegistration,
    ServiceRegistrationError,
    ServiceRegistryConnectionError,
    ServiceRegistryError,
    ServiceRegistryProtocol,
    ServiceStatus,
    build_registration,
)
from .settings import AppConfig, GatewayConfig, Settings, load_settings

__all__ = [
    # Errors
    "GatewayError",
    "TransportError",
    "ServiceRegistryError",
    "ServiceDiscoveryError",
    "ServiceRegistrationError",
    "ServiceDeregistrationError",
    "ServiceRegistryConnectionError",
    # Registry
    "ConsulConfig",
    "ConsulRegistry",
    "MemoryRegistry",
    "ServiceRegistryProtocol",
    "ServiceInstance",
    "ServiceRegistration",
    "HealthCheck",
    "RegistryCatalog",
    "ServiceStatus",
    "RegistrationPublisher",
    "RegistrationSettings",
    "build_registration",
    # Discovery
    "GatewayService",
    "ProbeDispatcher",
    "ProbeResponse",
    "ProbeResult",
    "AggregateResult",
    "InstanceSelectorProtocol",
    "RandomInstanceSelector",
    "RoundRobinInstanceSelector",
    "JsonValue",
    "JsonObject",
    "FAILURE_STATUS_CODE",
    "RAW_BODY_KEY",
    # HTTP
    "create_gateway_app",
    "create_service_app",
    "run_gateway",
    "run_service",
    # Config / logging
    "AppConfig",
    "GatewayConfig",
    "Settings",
    "load_settings",
    "LoggingSettings",
    "configure_logging",
]
