# recordcollector/core/context.py
"""
CollectContext – per-request execution context.

Carries the ambient client configuration (credentials, region, base URL)
and the request deadline through every resolution and fetch. Never mutated
once built; clients receive a deep-merged copy of ``client_config``.
"""
from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class CollectContext:
    """Immutable per-request context.

    Attributes:
        client_config: Ambient configuration merged under every client's
            ``constructor_args``.
        deadline: Absolute event-loop time after which the request fails
            with :class:`DeadlineExceededError`; ``None`` means unbounded.
        request_id: Correlates log lines of one top-level request.
    """

    client_config: Mapping[str, Any] = field(default_factory=dict)
    deadline: float | None = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    def __post_init__(self) -> None:
        object.__setattr__(self, "client_config", MappingProxyType(dict(self.client_config)))

    @classmethod
    def create(
        cls,
        *,
        client_config: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> "CollectContext":
        """Build a context whose deadline is ``timeout`` seconds from now.

        Must be called from inside a running event loop.
        """
        deadline = None
        if timeout is not None:
            deadline = asyncio.get_running_loop().time() + timeout
        return cls(client_config=client_config or {}, deadline=deadline)

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - asyncio.get_running_loop().time()

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0
