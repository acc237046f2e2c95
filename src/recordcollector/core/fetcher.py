# recordcollector/core/fetcher.py
"""
Paginating fetch-and-merge loop for one param set.

Pages are strictly sequential: the parameters of page N+1 are built from
the response of page N. A failure on any page discards the pages already
collected for that param set.
"""
from __future__ import annotations

import copy
import logging
from typing import Any

from recordcollector.contracts.schema import ParamSet, Records, Schema
from recordcollector.core.clients.registry import ClientsRegistry, close_client
from recordcollector.core.context import CollectContext
from recordcollector.core.errors import (
    CollectorError,
    ExtractionError,
    RetryExhaustedError,
    UnknownClientError,
)
from recordcollector.core.paths import deep_merge, get_path
from recordcollector.core.retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)


class PaginatingFetcher:
    """Executes one param set against the remote client until the last page."""

    def __init__(
        self,
        clients: ClientsRegistry,
        *,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._clients = clients
        self._retry = retry_policy or RetryPolicy.from_settings()

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    async def fetch(
        self,
        schema: Schema,
        param_set: ParamSet,
        context: CollectContext,
    ) -> Records:
        """Fetch and merge every page for ``param_set``.

        Args:
            schema: Schema describing the call, extraction and pagination.
            param_set: Fully materialized parameters for the first page.
            context: Ambient client configuration and deadline.

        Returns:
            The records of all pages merged with ``schema.merge_operator``.
        """
        client = self._create_client(schema, context)
        try:
            return await self._fetch_all(client, schema, param_set, context)
        finally:
            await close_client(client)

    def _create_client(self, schema: Schema, context: CollectContext) -> Any:
        namespace = schema.namespace_details
        if namespace.name not in self._clients:
            raise UnknownClientError(schema.name, namespace.name, self._clients.list())
        try:
            return self._clients.create(
                namespace.name,
                **deep_merge(copy.deepcopy(dict(context.client_config)), namespace.constructor_args),
            )
        except TypeError as exc:
            logger.error("%s: failed to create client %s: %s", schema.name, namespace.name, exc)
            raise UnknownClientError(
                schema.name, namespace.name, self._clients.list(), cause=exc
            ) from exc

    async def _fetch_all(
        self,
        client: Any,
        schema: Schema,
        param_set: ParamSet,
        context: CollectContext,
    ) -> Records:
        current = param_set
        accumulated: Records = None
        page = 0

        while True:
            page += 1
            logger.debug(
                "[%s] %s page %d: %s(%s)",
                context.request_id,
                schema.name,
                page,
                schema.api_method,
                current,
            )
            response = await self._call_page(client, schema, current, context)

            records = get_path(response, schema.value.path)
            if records is None:
                logger.error(
                    "[%s] %s: no records at path %r", context.request_id, schema.name, schema.value.path
                )
                raise ExtractionError(schema.name, schema.value.path, response)

            accumulated = records if accumulated is None else schema.merge_pages(accumulated, records)

            if not get_path(response, schema.incomplete_indicator):
                logger.debug(
                    "[%s] %s: done after %d page(s)", context.request_id, schema.name, page
                )
                return accumulated

            if schema.next_batch_param_constructor is None:
                raise CollectorError(
                    f"Schema {schema.name} reports more pages at "
                    f"'{schema.incomplete_indicator}' but has no next_batch_param_constructor",
                    schema=schema.name,
                    params=current,
                )
            current = schema.next_batch_param_constructor(
                copy.deepcopy(current), copy.deepcopy(response)
            )

    async def _call_page(
        self,
        client: Any,
        schema: Schema,
        params: ParamSet,
        context: CollectContext,
    ) -> Any:
        try:
            return await call_with_retry(
                lambda: client.invoke(schema.api_method, params),
                policy=self._retry,
                context=context,
                schema=schema.name,
                method=schema.api_method,
                params=params,
            )
        except RetryExhaustedError as exc:
            if schema.on_error is None:
                raise
            cause = exc.last_error.cause if exc.last_error else exc
            err, response = schema.on_error(cause, None)
            if err is None:
                logger.info(
                    "[%s] %s: on_error recovered from %s", context.request_id, schema.name, cause
                )
                return response
            if isinstance(err, CollectorError):
                raise err from exc
            if err is cause:
                raise
            raise RetryExhaustedError(
                schema.name, schema.api_method, params, exc.attempts, err
            ) from err
