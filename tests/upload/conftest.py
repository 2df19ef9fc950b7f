"""
Pytest fixtures for upload tests.
"""

from __future__ import annotations

import httpx
import pytest

from dxport.api.client import AsyncPlatformClient
from dxport.models.location import RemoteLocation

PROJECT = "project-" + "A" * 24


@pytest.fixture
def destination() -> RemoteLocation:
    """Provide an upload destination folder."""
    return RemoteLocation(container_id=PROJECT, path="/incoming")


@pytest.fixture
def flaky_client(platform):
    """
    Build a client whose part uploads fail on selected attempts.

    Usage: ``flaky_client({2})`` fails the 2nd PUT with a connection error.
    """

    def make(fail_on: set[int]) -> AsyncPlatformClient:
        puts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal puts
            if request.method == "PUT":
                puts += 1
                if puts in fail_on:
                    platform.requests.append(request)
                    raise httpx.ConnectError("connection reset", request=request)
            return platform.handler(request)

        return AsyncPlatformClient(
            auth_token="test-token",
            base_url="https://api.test",
            transport=httpx.MockTransport(handler),
        )

    return make


@pytest.fixture
def write_file(tmp_path):
    """Write a local file and return its path."""

    def write(name: str, data: bytes):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return write
