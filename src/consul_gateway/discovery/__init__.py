from .dispatcher import (
    DEFAULT_PROBE_PATH,
    DEFAULT_PROBE_TIMEOUT_S,
    RAW_BODY_KEY,
    JsonObject,
    JsonValue,
    ProbeDispatcher,
    ProbeResponse,
    decode_body,
)
from .gateway import (
    FAILURE_STATUS_CODE,
    AggregateResult,
    GatewayService,
    ProbeResult,
)
from .selector import (
    InstanceSelectorProtocol,
    RandomInstanceSelector,
    RoundRobinInstanceSelector,
)

__all__ = [
    "DEFAULT_PROBE_PATH",
    "DEFAULT_PROBE_TIMEOUT_S",
    "RAW_BODY_KEY",
    "FAILURE_STATUS_CODE",
    "JsonObject",
    "JsonValue",
    "ProbeDispatcher",
    "ProbeResponse",
    "decode_body",
    "AggregateResult",
    "GatewayService",
    "ProbeResult",
    "InstanceSelectorProtocol",
    "RandomInstanceSelector",
    "RoundRobinInstanceSelector",
]
