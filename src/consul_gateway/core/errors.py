from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..service_registry.protocol import ServiceInstance


class GatewayError(Exception):
    """Base exception for gateway dispatch errors."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class TransportError(GatewayError):
    """Raised when a probe request cannot reach the selected instance.

    Covers refused connections, DNS failures and timeouts. The attempted URL
    and instance are attached so callers can report where the call went.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str,
        instance: ServiceInstance | None = None,
    ) -> None:
        super().__init__(message, code=502)
        self.url = url
        self.instance = instance
