# recordcollector/core/clients/config.py
"""
Configuration models and loading for remote clients.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from recordcollector.core.loader import load_yaml_files, substitute_env_vars

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientSpec:
    """
    Specification for a remote client namespace.

    Attributes:
        name: Namespace referenced by ``Schema.namespace_details.name``
        class_path: Import path in format 'module:ClassName'
        config: Default constructor arguments
    """

    name: str
    class_path: str
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ClientsConfig:
    clients: list[ClientSpec] = field(default_factory=list)


def load_clients_config(patterns: Iterable[str]) -> ClientsConfig:
    """
    Load clients configuration from YAML files.

    Expected YAML structure::

        clients:
          inventory:
            class: recordcollector.core.clients.http_api:HttpApiClient
            config:
              base_url: "${INVENTORY_API_URL:-http://localhost:8080}"
              timeout: 30.0

    Later files override earlier ones per namespace.

    Raises:
        ValueError: If configuration is invalid or env vars missing
    """
    yamls = load_yaml_files(patterns)

    clients_map: dict[str, dict[str, Any]] = {}
    for data in yamls:
        for name, spec in (data.get("clients") or {}).items():
            clients_map[name] = spec or {}

    specs: list[ClientSpec] = []
    for name, raw in clients_map.items():
        if "class" not in raw:
            raise ValueError(f"Client '{name}' missing required 'class' field")

        try:
            config = substitute_env_vars(raw.get("config") or {})
        except ValueError as exc:
            raise ValueError(f"Client '{name}' config error: {exc}") from exc

        specs.append(ClientSpec(name=name, class_path=raw["class"], config=config))

    logger.info("Loaded %d client specification(s): %s", len(specs), [s.name for s in specs])
    return ClientsConfig(clients=specs)
