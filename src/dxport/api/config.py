"""
Platform API endpoints.

Named environments map to API server coordinates; ``build_base_url``
renders coordinates as a URL, omitting the port when it is the scheme's
default.
"""

from __future__ import annotations

from typing import Literal, NamedTuple

Mode = Literal["prod", "staging", "local"]

DEFAULT_PORTS = {"https": 443, "http": 80}


class ApiServer(NamedTuple):
    protocol: str
    host: str
    port: int


SERVERS: dict[str, ApiServer] = {
    "prod": ApiServer("https", "api.dnanexus.com", 443),
    "staging": ApiServer("https", "stagingapi.dnanexus.com", 443),
    "local": ApiServer("http", "localhost", 8124),
}


def build_base_url(protocol: str, host: str, port: int) -> str:
    """
    Render API server coordinates as a base URL.

    Example:
        >>> build_base_url("https", "api.dnanexus.com", 443)
        'https://api.dnanexus.com'
        >>> build_base_url("http", "localhost", 8124)
        'http://localhost:8124'
    """
    if DEFAULT_PORTS.get(protocol) == port:
        return f"{protocol}://{host}"
    return f"{protocol}://{host}:{port}"


BASE_URLS = {mode: build_base_url(*server) for mode, server in SERVERS.items()}


def get_base_url(mode: Mode = "prod") -> str:
    """Base URL for a named environment; unknown modes fall back to prod."""
    return BASE_URLS.get(mode, BASE_URLS["prod"])


__all__ = ["ApiServer", "SERVERS", "BASE_URLS", "build_base_url", "get_base_url"]
