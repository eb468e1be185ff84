from .errors import GatewayError, TransportError

__all__ = [
    "GatewayError",
    "TransportError",
]
