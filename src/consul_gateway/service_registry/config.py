"""Consul connection configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConsulConfig:
    """Where the Consul agent lives and how long to wait for it.

    Values are parsed by ``consul_gateway.settings``; this class never reads
    the environment itself.
    """

    host: str = "127.0.0.1"
    port: int = 8500
    scheme: str = "http"
    timeout_seconds: float = 10.0

    @property
    def base_url(self) -> str:
        host = self.host
        # Accept "http://consul:8500" style hosts from older configs.
        if "://" in host:
            return host.rstrip("/")
        return f"{self.scheme}://{host}:{self.port}"
