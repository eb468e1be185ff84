from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..discovery.gateway import AggregateResult, ProbeResult
from ..service_registry.protocol import RegistryCatalog, ServiceInstance


class ServiceInstanceModel(BaseModel):
    """Wire shape of a discovered instance."""

    id: str
    name: str
    address: str
    port: int
    tags: List[str] = Field(default_factory=list)
    meta: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_instance(cls, instance: ServiceInstance) -> "ServiceInstanceModel":
        return cls(
            id=instance.service_id,
            name=instance.service_name,
            address=instance.host,
            port=instance.port,
            tags=list(instance.tags),
            meta=dict(instance.meta),
        )


class PingServiceResponse(BaseModel):
    service: str
    message: str
    instance: Optional[ServiceInstanceModel] = None
    status_code: Optional[int] = None
    raw_response: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_result(cls, result: ProbeResult) -> "PingServiceResponse":
        instance = (
            ServiceInstanceModel.from_instance(result.instance)
            if result.instance is not None
            else None
        )
        return cls(
            service=result.service,
            message=result.message,
            instance=instance,
            status_code=result.status_code,
            raw_response=result.raw_response,
        )


class PingAllResponse(BaseModel):
    results: Dict[str, PingServiceResponse]
    count: int
    message: str = "Ping results for all discovered services"

    @classmethod
    def from_results(cls, results: AggregateResult) -> "PingAllResponse":
        return cls(
            results={
                name: PingServiceResponse.from_result(result)
                for name, result in results.items()
            },
            count=len(results),
        )


class ServicesResponse(BaseModel):
    services: Dict[str, List[str]]
    count: int
    message: str = "Available services in Consul registry"

    @classmethod
    def from_catalog(cls, catalog: RegistryCatalog) -> "ServicesResponse":
        return cls(services=dict(catalog), count=len(catalog))


class ErrorResponse(BaseModel):
    """Error envelope returned by the gateway routes."""

    error: str
    details: Optional[str] = None
    service: Optional[str] = None
    usage: Optional[str] = None
    examples: Optional[List[str]] = None


class HealthResponse(BaseModel):
    service: str
    status: str = "healthy"
    message: str = "API Gateway is running"
    registry: str = "reachable"


class PongResponse(BaseModel):
    service: str
    message: str = "pong"


def error_content(error: ErrorResponse) -> dict[str, Any]:
    return error.model_dump(exclude_none=True)
