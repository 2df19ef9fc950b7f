"""
Synchronous download service.

Wrapper around AsyncDownloadService using asyncio.run(). A fresh platform
client is opened for every call so no connection outlives its event loop.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from dxport.api.client import AsyncPlatformClient
from dxport.exceptions import DxError
from dxport.services.download._aio import AsyncDownloadService, ProgressFactory
from dxport.services.download._models import DownloadJob, DownloadResult

if TYPE_CHECKING:
    import httpx

    from dxport.config import Settings


class DownloadService:
    """
    Synchronous download service.

    Example:
        >>> downloads = DownloadService(get_settings())
        >>> results = downloads.download(["reads.fq"], Path("."))
        >>> print(results[0])
        file-xxxx => reads.fq
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _service(self, client: AsyncPlatformClient) -> AsyncDownloadService:
        return AsyncDownloadService(
            client,
            max_workers=self._settings.max_workers,
            search_retries=self._settings.search_retries,
        )

    async def _locate_all(
        self,
        service: AsyncDownloadService,
        values: list[str],
        out_dir: Path,
        output: str | None,
        recursive: bool,
    ) -> list[DownloadJob]:
        jobs: list[DownloadJob] = []
        for value in values:
            jobs.extend(
                await service.locate(
                    value,
                    self._settings.project_context_id,
                    self._settings.cli_wd,
                    out_dir,
                    recursive,
                )
            )
        if output is not None:
            if len(jobs) != 1:
                raise DxError(f"--output needs exactly one file, got {len(jobs)}")
            jobs = [jobs[0].model_copy(update={"output": output})]
        return jobs

    def download(
        self,
        values: list[str],
        out_dir: Path,
        output: str | None = None,
        force: bool = False,
        recursive: bool = False,
        progress_factory: ProgressFactory | None = None,
    ) -> list[DownloadResult]:
        """
        Resolve each input and download every file it names.

        Resolution errors propagate before any transfer starts; transfer
        failures are returned per file.
        """

        async def run() -> list[DownloadResult]:
            async with AsyncPlatformClient.from_settings(self._settings, self._transport) as client:
                service = self._service(client)
                jobs = await self._locate_all(service, values, out_dir, output, recursive)
                return await service.download_files(jobs, force, progress_factory)

        return asyncio.run(run())

