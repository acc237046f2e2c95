# recordcollector/core/executor.py
"""
Parallel execution of one request across its param sets.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Iterable, Mapping

from recordcollector.contracts.schema import Records, Schema
from recordcollector.core.context import CollectContext
from recordcollector.core.fetcher import PaginatingFetcher
from recordcollector.core.params import build_param_sets

logger = logging.getLogger(__name__)


async def gather_all(aws: Iterable[Awaitable[Any]]) -> list[Any]:
    """Run awaitables concurrently; results keep input order.

    The first failure wins: every sibling still running is cancelled and
    awaited before the error propagates, so no partial results escape.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class ParallelExecutor:
    """Fans a request out to its param sets and merges the results."""

    def __init__(self, fetcher: PaginatingFetcher) -> None:
        self._fetcher = fetcher

    async def execute(
        self,
        schema: Schema,
        params: Mapping[str, Any],
        context: CollectContext,
    ) -> Records:
        param_sets = build_param_sets(schema, params)
        logger.debug(
            "[%s] %s: executing %d param set(s)",
            context.request_id,
            schema.name,
            len(param_sets),
        )

        results = await gather_all(
            self._fetcher.fetch(schema, param_set, context) for param_set in param_sets
        )
        return schema.merge_results(results)
