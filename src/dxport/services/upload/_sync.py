"""
Synchronous upload service.

Wrapper around AsyncUploadService using asyncio.run(). A fresh platform
client is opened for every call so no connection outlives its event loop.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from dxport.api.client import AsyncPlatformClient
from dxport.services.upload._aio import AsyncUploadService
from dxport.services.upload._models import UploadResult

if TYPE_CHECKING:
    import httpx

    from dxport.config import Settings
    from dxport.models.location import RemoteLocation


class UploadService:
    """
    Synchronous upload service.

    Example:
        >>> uploads = UploadService(get_settings())
        >>> result = uploads.upload_file("reads.fq", destination)
        >>> print(result)
        reads.fq => file-xxxx
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _service(self, client: AsyncPlatformClient) -> AsyncUploadService:
        return AsyncUploadService(
            client,
            max_workers=self._settings.max_workers,
            part_retries=self._settings.part_retries,
        )

    def upload_file(
        self,
        local_path: str | Path,
        destination: RemoteLocation,
        name: str | None = None,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> UploadResult:
        """Upload a single file; errors propagate."""

        async def run() -> UploadResult:
            async with AsyncPlatformClient.from_settings(self._settings, self._transport) as client:
                return await self._service(client).upload_file(
                    local_path, destination, name, on_progress
                )

        return asyncio.run(run())

    def upload_files(
        self,
        paths: list[str | Path],
        destination: RemoteLocation,
        recursive: bool = False,
        on_complete: Callable[[UploadResult], None] | None = None,
    ) -> list[UploadResult]:
        """Upload several files concurrently; per-file failures are returned."""

        async def run() -> list[UploadResult]:
            async with AsyncPlatformClient.from_settings(self._settings, self._transport) as client:
                return await self._service(client).upload_files(
                    paths, destination, recursive, on_complete
                )

        return asyncio.run(run())
