"""
Platform API client.

Usage:
    >>> from dxport.api import AsyncPlatformClient
    >>>
    >>> async with AsyncPlatformClient(auth_token="xxxx") as client:
    ...     page = await client.search_page(FindDataOptions(...))
"""

from __future__ import annotations

from dxport.api.client import AsyncPlatformClient
from dxport.api.config import BASE_URLS, build_base_url, get_base_url

__all__ = [
    "AsyncPlatformClient",
    "get_base_url",
    "build_base_url",
    "BASE_URLS",
]
