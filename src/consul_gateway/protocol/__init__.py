from .models import (
    ErrorResponse,
    HealthResponse,
    PingAllResponse,
    PingServiceResponse,
    PongResponse,
    ServiceInstanceModel,
    ServicesResponse,
    error_content,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "PingAllResponse",
    "PingServiceResponse",
    "PongResponse",
    "ServiceInstanceModel",
    "ServicesResponse",
    "error_content",
]
