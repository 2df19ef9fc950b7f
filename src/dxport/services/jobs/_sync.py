"""
Synchronous job input/output transfers.

Wrapper around AsyncJobTransferService using asyncio.run().
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Collection

from dxport.api.client import AsyncPlatformClient
from dxport.services.download import DownloadResult
from dxport.services.download._aio import ProgressFactory
from dxport.services.jobs._aio import AsyncJobTransferService
from dxport.services.jobs._models import OutputUploads
from dxport.services.upload import UploadResult

if TYPE_CHECKING:
    import httpx

    from dxport.config import Settings
    from dxport.models.location import RemoteLocation


class JobTransferService:
    """
    Synchronous job input/output transfers.

    Transfers run one file at a time unless ``parallel`` is set; then
    ``threads`` workers are used, defaulting to the ``max_workers`` setting.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def workers(self, parallel: bool, threads: int | None = None) -> int:
        if not parallel:
            return 1
        return threads or self._settings.max_workers

    def _service(self, client: AsyncPlatformClient, workers: int) -> AsyncJobTransferService:
        return AsyncJobTransferService(
            client,
            max_workers=workers,
            part_retries=self._settings.part_retries,
        )

    def download_inputs(
        self,
        input_json: Path,
        out_dir: Path,
        skip: Collection[str] = (),
        parallel: bool = False,
        threads: int | None = None,
        force: bool = False,
        progress_factory: ProgressFactory | None = None,
        on_complete: Callable[[DownloadResult], None] | None = None,
    ) -> list[DownloadResult]:
        """Download every file input; per-file failures are returned."""
        workers = self.workers(parallel, threads)

        async def run() -> list[DownloadResult]:
            async with AsyncPlatformClient.from_settings(self._settings, self._transport) as client:
                return await self._service(client, workers).download_inputs(
                    input_json, out_dir, skip, force, progress_factory, on_complete
                )

        return asyncio.run(run())

    def upload_outputs(
        self,
        app_json: Path,
        out_dir: Path,
        destination: RemoteLocation,
        skip: Collection[str] = (),
        parallel: bool = False,
        threads: int | None = None,
        on_complete: Callable[[UploadResult], None] | None = None,
    ) -> OutputUploads:
        """Upload every file output; per-file failures are returned."""
        workers = self.workers(parallel, threads)

        async def run() -> OutputUploads:
            async with AsyncPlatformClient.from_settings(self._settings, self._transport) as client:
                return await self._service(client, workers).upload_outputs(
                    app_json, out_dir, destination, skip, on_complete
                )

        return asyncio.run(run())
