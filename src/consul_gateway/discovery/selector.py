"""Instance selection policies."""

from __future__ import annotations

import random
import threading
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..service_registry.protocol import ServiceInstance


@runtime_checkable
class InstanceSelectorProtocol(Protocol):
    def select(self, instances: Sequence[ServiceInstance]) -> ServiceInstance:
        """Pick exactly one instance from a non-empty sequence."""
        ...


def _require_instances(instances: Sequence[ServiceInstance]) -> None:
    if not instances:
        raise ValueError("cannot select from an empty instance list")


class RandomInstanceSelector(InstanceSelectorProtocol):
    """Uniform random choice.

    One ``random.Random`` lives for the lifetime of the selector. Pass a
    seeded source to make selection deterministic in tests.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

    def select(self, instances: Sequence[ServiceInstance]) -> ServiceInstance:
        _require_instances(instances)
        if len(instances) == 1:
            return instances[0]
        with self._lock:
            return self._rng.choice(instances)


class RoundRobinInstanceSelector(InstanceSelectorProtocol):
    """Cycle through instances, one cursor per service name."""

    def __init__(self) -> None:
        self._cursors: dict[str, int] = {}
        self._lock = threading.Lock()

    def select(self, instances: Sequence[ServiceInstance]) -> ServiceInstance:
        _require_instances(instances)
        # Registry order is not stable; order by id so the cursor means
        # the same thing across queries.
        ordered = sorted(instances, key=lambda item: item.service_id)
        key = ordered[0].service_name
        with self._lock:
            index = self._cursors.get(key, 0) % len(ordered)
            self._cursors[key] = index + 1
        return ordered[index]
