# recordcollector/core/clients/registry.py
"""
Clients registry – maps a schema's client namespace to a client factory.

A fresh client is built for every paginated fetch, so the registry stores
factories (usually classes) rather than live instances.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from recordcollector.contracts.remote import RemoteClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., RemoteClient]


class ClientsRegistry:
    """Named registry of remote client factories."""

    def __init__(self) -> None:
        self._factories: dict[str, ClientFactory] = {}
        self._defaults: dict[str, dict[str, Any]] = {}

    def register(
        self,
        name: str,
        factory: ClientFactory,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        """Register ``factory`` under ``name``.

        ``defaults`` are constructor keyword arguments applied beneath the
        per-request configuration (e.g. a base URL from YAML).
        """
        if name in self._factories:
            raise ValueError(f"Client '{name}' already registered")
        if not callable(factory):
            raise TypeError(f"Client '{name}' factory is not callable: {factory!r}")
        self._factories[name] = factory
        self._defaults[name] = dict(defaults or {})
        logger.info("Registered client: %s (%s)", name, getattr(factory, "__name__", factory))

    def create(self, name: str, **kwargs: Any) -> RemoteClient:
        try:
            factory = self._factories[name]
        except KeyError:
            raise KeyError(f"Client '{name}' not found. Available: {self.list()}")
        try:
            return factory(**{**self._defaults[name], **kwargs})
        except TypeError as exc:
            raise TypeError(f"Failed to instantiate client '{name}': {exc}") from exc

    def has(self, name: str) -> bool:
        return name in self._factories

    def list(self) -> list[str]:
        return list(self._factories.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)


async def close_client(client: Any) -> None:
    """Close a client if it exposes ``aclose()``."""
    aclose = getattr(client, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception:
        logger.warning("Failed to close client %s", type(client).__name__, exc_info=True)
