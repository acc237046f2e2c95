# recordcollector/core/collector.py
"""
RecordCollector – public entry point of the engine.

Wires the clients and schema registries into the resolver/executor/fetcher
chain, bounds every request by a deadline and applies the schema's final
ordering.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from recordcollector.contracts.schema import Records, Schema, SortSpec
from recordcollector.core.clients.config import load_clients_config
from recordcollector.core.clients.loader import load_and_register_clients
from recordcollector.core.clients.registry import ClientsRegistry
from recordcollector.core.config import settings
from recordcollector.core.context import CollectContext
from recordcollector.core.errors import CollectorError, DeadlineExceededError, SortError
from recordcollector.core.executor import ParallelExecutor
from recordcollector.core.fetcher import PaginatingFetcher
from recordcollector.core.paths import get_path
from recordcollector.core.resolver import DependencyResolver
from recordcollector.core.retry import RetryPolicy
from recordcollector.core.schemas.config import load_schemas_config
from recordcollector.core.schemas.registry import SchemaRegistry

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def sort_records(
    records: Records, sort_by: SortSpec | None, *, schema: str | None = None
) -> Records:
    """Stable sort by a field path or key function; ``None`` keys sort last.

    Raises:
        SortError: the keys are not mutually comparable (e.g. ints and strings).
    """
    if sort_by is None:
        return records

    def key(record: Any) -> tuple[bool, Any]:
        value = sort_by(record) if callable(sort_by) else get_path(record, sort_by)
        return (value is None, value)

    try:
        return sorted(records, key=key)
    except TypeError as exc:
        raise SortError(schema, sort_by, exc) from exc


class RecordCollector:
    """Collects the records described by a schema.

    Example::

        collector = RecordCollector(clients, schemas=schemas)
        instances = await collector.lookup_records(
            "Instances",
            {"region": "us-east-1"},
            client_config={"token": "..."},
            timeout=60,
        )
    """

    def __init__(
        self,
        clients: ClientsRegistry,
        *,
        schemas: SchemaRegistry | None = None,
        retry_policy: RetryPolicy | None = None,
        default_timeout: float | None = _UNSET,
    ) -> None:
        self._clients = clients
        self._schemas = schemas if schemas is not None else SchemaRegistry()
        self._default_timeout = (
            settings.request_timeout if default_timeout is _UNSET else default_timeout
        )
        fetcher = PaginatingFetcher(clients, retry_policy=retry_policy)
        self._resolver = DependencyResolver(
            ParallelExecutor(fetcher), schemas=self._schemas, clients=clients
        )

    @classmethod
    def from_settings(cls) -> "RecordCollector":
        """Build a collector from the YAML catalogs named in settings."""
        clients = load_and_register_clients(
            cfg=load_clients_config(settings.clients_config_paths)
        )
        schemas = load_schemas_config(settings.schemas_config_paths)
        return cls(clients, schemas=schemas)

    @property
    def clients(self) -> ClientsRegistry:
        return self._clients

    @property
    def schemas(self) -> SchemaRegistry:
        return self._schemas

    async def lookup_records(
        self,
        schema: Schema | str,
        params: Mapping[str, Any] | None = None,
        *,
        client_config: Mapping[str, Any] | None = None,
        timeout: float | None = _UNSET,
    ) -> Records:
        """Resolve, fetch, merge and sort the records of ``schema``.

        Args:
            schema: Schema, or the name of a registered schema.
            params: Caller-supplied parameters; missing required parameters
                are fetched from their default sources.
            client_config: Ambient configuration (credentials, region, base
                URL) merged under every client's constructor arguments.
            timeout: Wall-clock bound in seconds for the whole request;
                defaults to ``settings.request_timeout``; ``None`` disables it.

        Raises:
            CollectorError: any failure; no partial results are returned.
        """
        if schema is None:
            raise ValueError("schema must be defined")
        schema = self._schemas.resolve(schema)
        if timeout is _UNSET:
            timeout = self._default_timeout

        context = CollectContext.create(client_config=client_config, timeout=timeout)
        logger.info(
            "[%s] Collecting %s (timeout=%s)", context.request_id, schema.name, timeout
        )

        try:
            async with asyncio.timeout_at(context.deadline):
                records = await self._resolver.resolve(schema, params, context)
        except TimeoutError as exc:
            logger.error("[%s] %s: deadline exceeded", context.request_id, schema.name)
            raise DeadlineExceededError(schema.name, params) from exc
        except CollectorError as exc:
            logger.error("[%s] %s failed: %s", context.request_id, schema.name, exc)
            raise

        try:
            return sort_records(records, schema.value.sort_by, schema=schema.name)
        except SortError as exc:
            logger.error("[%s] %s failed: %s", context.request_id, schema.name, exc)
            raise
