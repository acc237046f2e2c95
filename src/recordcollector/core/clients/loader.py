# recordcollector/core/clients/loader.py
"""
Client loader – turns client specs into registered factories.
"""
from __future__ import annotations

import logging

from recordcollector.core.clients.config import ClientsConfig
from recordcollector.core.clients.registry import ClientsRegistry
from recordcollector.core.loader import import_attr

logger = logging.getLogger(__name__)


def load_and_register_clients(
    *,
    cfg: ClientsConfig,
    registry: ClientsRegistry | None = None,
) -> ClientsRegistry:
    """Register a factory for every client spec.

    Construction is deferred to fetch time, when the request's ambient
    client configuration is known; the spec's ``config`` becomes the
    factory defaults.
    """
    registry = registry if registry is not None else ClientsRegistry()

    for spec in cfg.clients:
        factory = import_attr(spec.class_path)
        registry.register(spec.name, factory, defaults=spec.config)

    logger.info("Registered %d client(s): %s", len(registry), registry.list())
    return registry
