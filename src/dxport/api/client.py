"""
Platform API client.

Thin async wrapper over the platform's JSON-over-POST API. Every call is a
single request; there is no retry and no caching at this layer.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Iterable, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from dxport.api.config import Mode, get_base_url
from dxport.exceptions import (
    InvalidResponseError,
    NotLoggedInError,
    RemoteRejectedError,
    TransportFailureError,
)
from dxport.logging import get_logger
from dxport.models.data import (
    FileDescribeResult,
    FindDataOptions,
    FindDataResponse,
    ListFolderOptions,
    ListFolderResult,
    PlatformError,
)
from dxport.models.transfer import (
    DownloadDescriptor,
    DownloadOptions,
    PartTarget,
    TransferPart,
)

if TYPE_CHECKING:
    from dxport.config import Settings

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


async def _raise_for_error(response: httpx.Response) -> None:
    """Convert a non-2xx response into a dxport error."""
    if response.is_success:
        return

    await response.aread()
    try:
        payload = PlatformError.model_validate(response.json())
    except ValueError:
        raise TransportFailureError(
            f"{response.status_code}: {response.text or response.reason_phrase}"
        ) from None

    raise RemoteRejectedError(
        payload.error.type,
        payload.error.message,
        status_code=response.status_code,
    )


def _decode(model: type[ModelT], data: Any, route: str) -> ModelT:
    """Validate a response body, reporting schema drift as InvalidResponseError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first["loc"]) or "body"
        raise InvalidResponseError(route, f"{where}: {first['msg']}", cause=e) from e


def _object_id(data: Any, route: str) -> str:
    if not isinstance(data, dict) or not isinstance(data.get("id"), str):
        raise InvalidResponseError(route, "missing object id")
    return data["id"]


class AsyncPlatformClient:
    """
    Async client for the platform API.

    Safe to share between concurrent transfers: it holds no per-transfer
    state, only the connection pool.

    Example:
        >>> async with AsyncPlatformClient(auth_token="xxxx") as client:
        ...     object_id = await client.create_writable_object(
        ...         "project-xxxx", "reads.fq", "/data", parents=True, nonce="n1"
        ...     )
    """

    def __init__(
        self,
        auth_token: str | None = None,
        base_url: str | None = None,
        mode: Mode = "prod",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize platform client.

        Args:
            auth_token: API token (or set DX_AUTH_TOKEN env var)
            base_url: Custom base URL (overrides mode)
            mode: Environment mode - "prod", "staging", or "local"
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests)

        Raises:
            NotLoggedInError: If no token provided
        """
        self._auth_token = auth_token or os.environ.get("DX_AUTH_TOKEN")
        if not self._auth_token:
            raise NotLoggedInError(
                "Auth token required. Pass auth_token or set DX_AUTH_TOKEN environment variable."
            )

        self._base_url = (base_url or get_base_url(mode)).rstrip("/")
        self._timeout = timeout
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> AsyncPlatformClient:
        """Create a client from loaded settings."""
        if not settings.is_logged_in:
            raise NotLoggedInError()
        return cls(
            auth_token=settings.auth_token,
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        """Get current base URL."""
        return self._base_url

    async def __aenter__(self) -> AsyncPlatformClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP connection pool."""
        await self._http.aclose()

    def __repr__(self) -> str:
        return f"<AsyncPlatformClient base_url={self._base_url!r}>"

    # =========================================================================
    # Transport helpers
    # =========================================================================

    async def _post(self, route: str, payload: dict[str, Any]) -> Any:
        url = f"{self._base_url}/{route.lstrip('/')}"
        headers = {"Authorization": f"Bearer {self._auth_token}"}
        try:
            response = await self._http.post(url, json=payload, headers=headers)
        except httpx.TransportError as e:
            raise TransportFailureError(f"Request to {url} failed: {e}", cause=e) from e

        await _raise_for_error(response)
        logger.debug(f"POST /{route.lstrip('/')} -> {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError(route.lstrip("/"), "body is not JSON", cause=e) from e

    # =========================================================================
    # Upload
    # =========================================================================

    async def create_writable_object(
        self,
        container_id: str,
        name: str,
        folder: str,
        parents: bool = True,
        nonce: str | None = None,
    ) -> str:
        """
        Create an empty file object in the open state.

        The platform deduplicates retried calls carrying the same nonce.

        Returns:
            The new object ID.
        """
        payload: dict[str, Any] = {
            "project": container_id,
            "name": name,
            "folder": folder,
            "parents": parents,
            "hidden": False,
        }
        if nonce:
            payload["nonce"] = nonce
        data = await self._post("file/new", payload)
        return _object_id(data, "file/new")

    async def request_part_target(self, object_id: str, part: TransferPart) -> PartTarget:
        """Request a pre-signed endpoint for one part."""
        route = f"{object_id}/upload"
        return _decode(PartTarget, await self._post(route, part.to_payload()), route)

    async def upload_part(self, target: PartTarget, data: bytes) -> None:
        """Transmit part bytes to a pre-signed endpoint."""
        try:
            response = await self._http.put(target.url, content=data, headers=target.headers)
        except httpx.TransportError as e:
            raise TransportFailureError(f"Part upload failed: {e}", cause=e) from e
        await _raise_for_error(response)

    async def close_object(self, object_id: str) -> str:
        """Finalize an object; it becomes immutable and readable."""
        data = await self._post(f"{object_id}/close", {"id": object_id})
        return data.get("id", object_id) if isinstance(data, dict) else object_id

    # =========================================================================
    # Download
    # =========================================================================

    async def request_download_descriptor(
        self,
        object_id: str,
        options: DownloadOptions | None = None,
    ) -> DownloadDescriptor:
        """Request a time-limited URL and headers for fetching an object."""
        options = options or DownloadOptions()
        route = f"{object_id}/download"
        return _decode(DownloadDescriptor, await self._post(route, options.to_payload()), route)

    @asynccontextmanager
    async def open_download(self, descriptor: DownloadDescriptor) -> AsyncIterator[httpx.Response]:
        """
        Open a streamed GET on a download descriptor.

        Transport errors raised while the caller iterates the body are
        reported as TransportFailureError as well.
        """
        try:
            async with self._http.stream(
                "GET", descriptor.endpoint_url, headers=descriptor.auth_headers
            ) as response:
                await _raise_for_error(response)
                yield response
        except httpx.TransportError as e:
            raise TransportFailureError(f"Download failed: {e}", cause=e) from e

    # =========================================================================
    # Search / listing / describe
    # =========================================================================

    async def search_page(self, criteria: FindDataOptions) -> FindDataResponse:
        """Fetch one page of ``system/findDataObjects``."""
        route = "system/findDataObjects"
        return _decode(FindDataResponse, await self._post(route, criteria.to_payload()), route)

    async def list_folder(
        self,
        container_id: str,
        options: ListFolderOptions | None = None,
    ) -> ListFolderResult:
        """List folders and objects in one folder of a container."""
        options = options or ListFolderOptions()
        route = f"{container_id}/listFolder"
        return _decode(ListFolderResult, await self._post(route, options.to_payload()), route)

    async def describe_file(
        self,
        object_id: str,
        container_id: str | None = None,
        fields: Iterable[str] | None = None,
    ) -> FileDescribeResult:
        """
        Describe a file object.

        Args:
            object_id: File to describe.
            container_id: Container to describe it in.
            fields: Only return these fields (e.g. ``name``, ``size``);
                default is every field plus details and properties.
        """
        payload: dict[str, Any]
        if fields is None:
            payload = {"details": True, "properties": True}
        else:
            payload = {"fields": {field: True for field in fields}}
        if container_id:
            payload["project"] = container_id
        route = f"{object_id}/describe"
        return _decode(FileDescribeResult, await self._post(route, payload), route)


__all__ = ["AsyncPlatformClient"]
