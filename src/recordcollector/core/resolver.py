# recordcollector/core/resolver.py
"""
Recursive dependency resolution.

A request whose required parameters are all present is executed directly.
Otherwise every missing parameter is fetched from its default source (which
may itself need resolving), the values are layered over the caller's
parameters and the request is executed. Sibling resolutions run
concurrently; a node reached twice in one request is fetched once.
"""
from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Iterable, Mapping

from recordcollector.contracts.schema import Records, Schema
from recordcollector.core.clients.registry import ClientsRegistry
from recordcollector.core.context import CollectContext
from recordcollector.core.errors import UnknownClientError
from recordcollector.core.executor import ParallelExecutor, gather_all
from recordcollector.core.graph import DependencyGraph
from recordcollector.core.params import sufficient_params
from recordcollector.core.schemas.registry import SchemaRegistry

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Satisfies missing required parameters, then executes the request."""

    def __init__(
        self,
        executor: ParallelExecutor,
        *,
        schemas: SchemaRegistry | None = None,
        clients: ClientsRegistry | None = None,
    ) -> None:
        self._executor = executor
        self._schemas = schemas
        self._clients = clients

    async def resolve(
        self,
        schema: Schema,
        params: Mapping[str, Any] | None,
        context: CollectContext,
    ) -> Records:
        if not schema.required_params or sufficient_params(schema, params):
            self._check_clients([schema])
            return await self._executor.execute(schema, copy.deepcopy(dict(params or {})), context)

        graph = DependencyGraph.build(schema, params, schemas=self._schemas)
        self._check_clients(node.schema for node in graph.nodes.values())
        logger.info(
            "[%s] %s: resolving %d dependent request(s), depth %d",
            context.request_id,
            schema.name,
            len(graph) - 1,
            graph.depth(),
        )
        return await _Resolution(graph, self._executor, context).run()

    def _check_clients(self, schemas: Iterable[Schema]) -> None:
        """Fail before any remote call when a schema names an unregistered client."""
        if self._clients is None:
            return
        for schema in schemas:
            if schema.namespace_details.name not in self._clients:
                raise UnknownClientError(
                    schema.name, schema.namespace_details.name, self._clients.list()
                )


class _Resolution:
    """One top-level resolution over a checked dependency graph."""

    def __init__(
        self,
        graph: DependencyGraph,
        executor: ParallelExecutor,
        context: CollectContext,
    ) -> None:
        self._graph = graph
        self._executor = executor
        self._context = context
        self._tasks: dict[str, asyncio.Task[Records]] = {}

    async def run(self) -> Records:
        try:
            return await self._node(self._graph.root)
        finally:
            for task in self._tasks.values():
                if not task.done():
                    task.cancel()
            if self._tasks:
                await asyncio.gather(*self._tasks.values(), return_exceptions=True)

    def _shared(self, key: str) -> asyncio.Task[Records]:
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(self._node(key))
            self._tasks[key] = task
        return task

    async def _node(self, key: str) -> Records:
        node = self._graph.nodes[key]
        params = copy.deepcopy(node.params)

        # fixed point: one round satisfies every edge of the checked graph
        while not sufficient_params(node.schema, params):
            deps = {
                name: child
                for name, child in node.dependencies.items()
                if name not in params
            }
            if not deps:
                # the executor reports which parameter is still missing
                break
            names = list(deps)
            values = await gather_all(asyncio.shield(self._shared(deps[n])) for n in names)
            for name, value in zip(names, values):
                params[name] = copy.deepcopy(value)
            logger.debug(
                "[%s] %s: resolved %s",
                self._context.request_id,
                node.schema.name,
                names,
            )

        return await self._executor.execute(node.schema, params, self._context)
