"""Liveness probe dispatch to a single service instance."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, cast

import httpx

from ..core.errors import TransportError
from ..service_registry.protocol import ServiceInstance

_LOGGER = logging.getLogger(__name__)

JsonValue = (
    str | int | float | bool | None | list["JsonValue"] | dict[str, "JsonValue"]
)
JsonObject = dict[str, JsonValue]

DEFAULT_PROBE_PATH = "/ping"
DEFAULT_PROBE_TIMEOUT_S = 30.0
RAW_BODY_KEY = "raw"


@dataclass(frozen=True, slots=True)
class ProbeResponse:
    """Status and decoded body of one probe round trip."""

    url: str
    status_code: int
    body: JsonObject | None


def decode_body(content: bytes, *, url: str = "") -> JsonObject | None:
    """Decode a probe body into a JSON object.

    An empty body and a JSON ``null`` both decode to ``None``. Anything else
    that is not a JSON object is kept as text under ``"raw"`` and logged at
    warning level; it never fails the probe.
    """
    if not content:
        return None
    text = content.decode("utf-8", errors="replace")
    try:
        decoded = cast(Any, json.loads(content))
    except ValueError:
        pass
    else:
        if decoded is None:
            return None
        if isinstance(decoded, dict):
            return cast(JsonObject, decoded)

    _LOGGER.warning(
        "probe response from %s is not a JSON object, keeping raw text",
        url or "<unknown>",
    )
    return {RAW_BODY_KEY: text}


class ProbeDispatcher:
    """Send ``GET <probe_path>`` to an instance and normalize the reply.

    Transport failures raise ``TransportError``. Any HTTP status, including
    5xx, is a completed round trip and is returned as-is.
    """

    def __init__(
        self,
        *,
        probe_path: str = DEFAULT_PROBE_PATH,
        timeout_s: float = DEFAULT_PROBE_TIMEOUT_S,
        scheme: str = "http",
        client: httpx.Client | None = None,
    ) -> None:
        if not probe_path.startswith("/"):
            probe_path = f"/{probe_path}"
        self._probe_path = probe_path
        self._timeout_s = timeout_s
        self._scheme = scheme
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_s)

    @property
    def probe_path(self) -> str:
        return self._probe_path

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    def build_url(self, instance: ServiceInstance) -> str:
        host = instance.host
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return f"{self._scheme}://{host}:{instance.port}{self._probe_path}"

    def probe(self, instance: ServiceInstance) -> ProbeResponse:
        url = self.build_url(instance)
        _LOGGER.info("Making request to: %s", url)
        try:
            resp = self._client.get(url, timeout=self._timeout_s)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(
                f"failed to make GET request to {url}: {exc}",
                url=url,
                instance=instance,
            ) from exc

        _LOGGER.info(
            "Received response with status: %d from %s",
            resp.status_code,
            url,
        )
        return ProbeResponse(
            url=url,
            status_code=resp.status_code,
            body=decode_body(resp.content, url=url),
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ProbeDispatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
