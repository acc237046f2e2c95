# recordcollector/core/clients/__init__.py
"""Remote client registry and loading infrastructure."""

from recordcollector.core.clients.config import ClientSpec, ClientsConfig, load_clients_config
from recordcollector.core.clients.http_api import HttpApiClient
from recordcollector.core.clients.loader import load_and_register_clients
from recordcollector.core.clients.registry import ClientsRegistry, close_client

__all__ = [
    "ClientSpec",
    "ClientsConfig",
    "ClientsRegistry",
    "HttpApiClient",
    "close_client",
    "load_and_register_clients",
    "load_clients_config",
]
