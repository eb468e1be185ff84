from .config import ConsulConfig
from .consul_registry import ConsulRegistry
from .errors import (
    ServiceDeregistrationError,
    ServiceDiscoveryError,
    ServiceRegistrationError,
    ServiceRegistryConnectionError,
    ServiceRegistryError,
)
from .memory_registry import MemoryRegistry
from .protocol import (
    BaseServiceRegistry,
    HealthCheck,
    RegistryCatalog,
    ServiceInstance,
    ServiceRegistration,
    ServiceRegistryProtocol,
    ServiceStatus,
)
from .registration import (
    RegistrationPublisher,
    RegistrationSettings,
    build_registration,
    build_service_id,
)

__all__ = [
    # Config
    "ConsulConfig",
    # Protocol
    "BaseServiceRegistry",
    "ServiceRegistryProtocol",
    "ServiceInstance",
    "ServiceRegistration",
    "HealthCheck",
    "RegistryCatalog",
    "ServiceStatus",
    # Implementation
    "ConsulRegistry",
    "MemoryRegistry",
    # Registration
    "RegistrationPublisher",
    "RegistrationSettings",
    "build_registration",
    "build_service_id",
    # Errors
    "ServiceRegistryError",
    "ServiceRegistrationError",
    "ServiceDeregistrationError",
    "ServiceDiscoveryError",
    "ServiceRegistryConnectionError",
]
