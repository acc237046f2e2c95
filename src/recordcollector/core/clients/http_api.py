# recordcollector/core/clients/http_api.py
"""
Thin async JSON-over-HTTP remote client.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from recordcollector.contracts.remote import RemoteClient

logger = logging.getLogger(__name__)


class HttpApiClient(RemoteClient):
    """HTTP client invoking remote methods as JSON POSTs.

    Contract::

        POST {base_url}/{method}
        body: <params as JSON>
        200: <response document>

    Non-2xx responses raise ``httpx.HTTPStatusError``, which the fetcher
    retries like any other client failure. Unknown keyword arguments (ambient
    configuration meant for other client kinds) are ignored.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 30.0,
        headers: Mapping[str, str] | None = None,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **_: Any,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._headers = dict(headers or {})
        if token:
            self._headers["Authorization"] = (
                token if token.lower().startswith("bearer") else f"Bearer {token}"
            )
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def invoke(self, method: str, params: Mapping[str, Any]) -> Any:
        try:
            resp = await self._client.post(
                f"{self._base}/{method}",
                json=dict(params),
                headers=self._headers,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as ex:
            logger.warning(
                "Request %s failed status=%s reason=%s",
                method,
                ex.response.status_code,
                ex.response.text[:200],
            )
            raise
        except httpx.HTTPError as ex:
            logger.warning("Request %s failed: %s", method, ex)
            raise

        return resp.json()

    async def aclose(self) -> None:
        await self._client.aclose()
