from __future__ import annotations

import json

import httpx
import pytest

from recordcollector.core.clients.http_api import HttpApiClient


def transport(status: int = 200, body=None, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=body if body is not None else {})

    return httpx.MockTransport(handler)


class TestHttpApiClient:
    @pytest.mark.asyncio
    async def test_posts_params_to_method_endpoint(self):
        seen: list[httpx.Request] = []
        client = HttpApiClient(
            base_url="http://api.local/v1/",
            token="abc",
            transport=transport(body={"Items": [1], "NextToken": "t"}, seen=seen),
        )

        response = await client.invoke("listItems", {"MaxResults": 10})
        await client.aclose()

        assert response == {"Items": [1], "NextToken": "t"}
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "http://api.local/v1/listItems"
        assert json.loads(request.content) == {"MaxResults": 10}
        assert request.headers["Authorization"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_bearer_prefix_not_duplicated(self):
        seen: list[httpx.Request] = []
        client = HttpApiClient(
            base_url="http://api.local", token="Bearer xyz", transport=transport(seen=seen)
        )

        await client.invoke("m", {})
        await client.aclose()

        assert seen[0].headers["Authorization"] == "Bearer xyz"

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        client = HttpApiClient(base_url="http://api.local", transport=transport(status=503))

        with pytest.raises(httpx.HTTPStatusError):
            await client.invoke("listItems", {})
        await client.aclose()

    def test_ignores_unrelated_ambient_config(self):
        client = HttpApiClient(base_url="http://api.local", region="us-east-1")
        assert client is not None
