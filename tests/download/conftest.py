"""
Pytest fixtures for download tests.
"""

from __future__ import annotations

import httpx
import pytest

from dxport.api.client import AsyncPlatformClient

PROJECT = "project-" + "A" * 24


class ScriptedStream(httpx.AsyncByteStream):
    """Response body yielding fixed chunks, then optionally failing."""

    def __init__(self, chunks: list[bytes], fail: bool = False) -> None:
        self._chunks = chunks
        self._fail = fail

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk
        if self._fail:
            raise httpx.ReadError("connection reset by peer")


@pytest.fixture
def scripted_client(platform):
    """
    Build a client whose download GETs return a scripted body.

    ``content_length=None`` omits the Content-Length header.
    """

    def make(
        chunks: list[bytes],
        content_length: int | None = None,
        fail: bool = False,
    ) -> AsyncPlatformClient:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "download.test":
                platform.requests.append(request)
                headers = {}
                if content_length is not None:
                    headers["Content-Length"] = str(content_length)
                return httpx.Response(200, headers=headers, stream=ScriptedStream(chunks, fail))
            return platform.handler(request)

        return AsyncPlatformClient(
            auth_token="test-token",
            base_url="https://api.test",
            transport=httpx.MockTransport(handler),
        )

    return make
