"""
Asynchronous download service.

Resolves user input to file objects, then streams each object to a local
file (or stdout) through its own pipeline. Independent files run
concurrently in a fixed number of worker slots.
"""

from __future__ import annotations

import asyncio
import posixpath
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from dxport.exceptions import AddressingAmbiguousError, DxError
from dxport.logging import get_logger
from dxport.models.location import FileLocation, RemoteLocation
from dxport.paths import ROOT, classify
from dxport.services.base import BaseService
from dxport.services.download._config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_WORKERS,
    DESCRIBE_FIELDS,
    STDOUT,
)
from dxport.services.download._models import DownloadJob, DownloadMetrics, DownloadResult
from dxport.services.download._transfer import StreamedDownloadPipeline
from dxport.services.search import SearchService

if TYPE_CHECKING:
    from dxport.api.client import AsyncPlatformClient

logger = get_logger(__name__)

# Called with a display label; returns a Callback(written, total)
ProgressFactory = Callable[[str], Callable[[int, int], None]]


class AsyncDownloadService(BaseService):
    """
    Asynchronous download service.

    Example:
        >>> async with AsyncPlatformClient(auth_token="xxxx") as client:
        ...     downloads = AsyncDownloadService(client)
        ...     jobs = await downloads.locate(
        ...         "reads.fq", "project-xxxx", "/data", Path(".")
        ...     )
        ...     results = await downloads.download_files(jobs)
        ...     print(results[0])  # file-xxxx => reads.fq
    """

    def __init__(
        self,
        client: AsyncPlatformClient,
        max_workers: int = DEFAULT_MAX_WORKERS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        search_retries: int = 0,
    ) -> None:
        super().__init__(client)
        self._max_workers = max_workers
        self._chunk_size = chunk_size
        self._search = SearchService(client, retries=search_retries)

    def configure(
        self,
        max_workers: int | None = None,
        chunk_size: int | None = None,
    ) -> None:
        """
        Configure download settings.

        Args:
            max_workers: Number of files downloaded concurrently.
            chunk_size: Read size for the response body.
        """
        if max_workers is not None:
            self._max_workers = max_workers
        if chunk_size is not None:
            self._chunk_size = chunk_size

    async def locate(
        self,
        value: str,
        default_container: str,
        working_path: str,
        out_dir: Path,
        recursive: bool = False,
    ) -> list[DownloadJob]:
        """
        Turn user input into download jobs.

        A file identifier is used as is. A path naming a folder expands to
        every file below it (requires ``recursive``); the folder's own name
        is kept under ``out_dir``. Any other path must match exactly one file.

        Raises:
            DxError: A folder was given without ``recursive``.
            AddressingAmbiguousError: The path matches no file or several.
        """
        target = classify(default_container, working_path, value)
        if not target.container_id:
            raise DxError(f'No project selected for "{value}"')
        if isinstance(target, FileLocation):
            return [
                DownloadJob(
                    object_id=target.file_id,
                    out_dir=out_dir,
                    container_id=target.container_id,
                )
            ]

        location = RemoteLocation(container_id=target.container_id, path=target.path)
        if await self._search.is_folder(location):
            if not recursive:
                raise DxError(f'Use recursive flag to download folder "{value}"')
            return await self._folder_jobs(location, out_dir)

        matches = await self._search.find_files_by_path(location)
        if len(matches) != 1:
            raise AddressingAmbiguousError(value, [m.id for m in matches])
        return [
            DownloadJob(
                object_id=matches[0].id,
                out_dir=out_dir,
                container_id=matches[0].project,
            )
        ]

    async def _folder_jobs(self, location: RemoteLocation, out_dir: Path) -> list[DownloadJob]:
        folder = location.path.rstrip(ROOT) or ROOT
        parent = posixpath.dirname(folder) if folder != ROOT else ROOT

        jobs = []
        for result in await self._search.find_folder_files(location.container_id, folder):
            described = result.describe
            remote_folder = (described.folder if described else None) or folder
            relative = posixpath.relpath(remote_folder, parent)
            jobs.append(
                DownloadJob(
                    object_id=result.id,
                    out_dir=out_dir / relative,
                    container_id=result.project,
                    output=described.name if described else None,
                )
            )
        logger.debug(f"{location} expands to {len(jobs)} files")
        return jobs

    async def download_file(
        self,
        object_id: str,
        out_dir: Path,
        output: str | None = None,
        force: bool = False,
        container_id: str | None = None,
        progress_factory: ProgressFactory | None = None,
    ) -> DownloadResult:
        """
        Download one file object; errors propagate.

        Args:
            object_id: File object to fetch.
            out_dir: Directory for the local file, created if missing.
            output: Local name instead of the remote one; ``-`` is stdout.
            force: Overwrite an existing local file.
            container_id: Container to describe the object in.
            progress_factory: Builds a progress callback per file.

        Raises:
            DxError: The local file exists and ``force`` is not set.
        """
        start = time.monotonic()
        metrics = DownloadMetrics()

        described = await self._client.describe_file(object_id, container_id, DESCRIBE_FIELDS)
        name = output or described.name or object_id
        metrics.remote_size = described.size or 0
        on_progress = progress_factory(name) if progress_factory else None
        pipeline = StreamedDownloadPipeline(self._client, self._chunk_size)

        if name == STDOUT:
            transfer_start = time.monotonic()
            stats = await pipeline.download(object_id, sys.stdout.buffer, on_progress)
            sys.stdout.buffer.flush()
            local_path = None
        else:
            local_path = out_dir / name
            if local_path.exists() and not force:
                raise DxError(f'Use force to overwrite "{local_path}"')
            local_path.parent.mkdir(parents=True, exist_ok=True)

            transfer_start = time.monotonic()
            with open(local_path, "wb") as sink:
                stats = await pipeline.download(object_id, sink, on_progress)

        metrics.transfer_time = time.monotonic() - transfer_start
        metrics.transferred_size = stats.bytes_transferred
        metrics.chunks_count = stats.chunks_count
        metrics.total_time = time.monotonic() - start
        logger.debug(f"Downloaded {object_id} to {local_path or STDOUT}")

        return DownloadResult(
            success=True,
            object_id=object_id,
            local_path=local_path,
            size=stats.bytes_transferred,
            metrics=metrics,
        )

    async def download_files(
        self,
        jobs: list[DownloadJob],
        force: bool = False,
        progress_factory: ProgressFactory | None = None,
        on_complete: Callable[[DownloadResult], None] | None = None,
    ) -> list[DownloadResult]:
        """
        Download several files concurrently.

        A failure is recorded in that file's result and does not stop the
        others. Jobs whose local target is already claimed by an earlier job
        fail without a transfer. Results keep the order of ``jobs``.
        """
        semaphore = asyncio.Semaphore(self._max_workers)
        duplicates = _duplicate_targets(jobs)
        logger.debug(f"Downloading {len(jobs)} files with {self._max_workers} workers")

        async def run(index: int, job: DownloadJob) -> DownloadResult:
            if index in duplicates:
                logger.warning(f"Skipping {job.object_id}: {duplicates[index]}")
                result = DownloadResult(
                    success=False, object_id=job.object_id, error=duplicates[index]
                )
            else:
                async with semaphore:
                    try:
                        result = await self.download_file(
                            job.object_id,
                            job.out_dir,
                            output=job.output,
                            force=force,
                            container_id=job.container_id,
                            progress_factory=progress_factory,
                        )
                    except (DxError, OSError) as e:
                        logger.warning(f"Download of {job.object_id} failed: {e}")
                        result = DownloadResult(
                            success=False, object_id=job.object_id, error=str(e)
                        )
            if on_complete:
                on_complete(result)
            return result

        return list(await asyncio.gather(*(run(i, job) for i, job in enumerate(jobs))))


def _duplicate_targets(jobs: list[DownloadJob]) -> dict[int, str]:
    """Map the index of each job writing to an already claimed local path to a reason."""
    claimed: dict[Path, str] = {}
    duplicates: dict[int, str] = {}
    for index, job in enumerate(jobs):
        if not job.output or job.output == STDOUT:
            continue
        target = job.out_dir / job.output
        if target in claimed:
            duplicates[index] = f'"{target}" is also the target of {claimed[target]}'
        else:
            claimed[target] = job.object_id
    return duplicates
