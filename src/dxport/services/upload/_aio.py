"""
Asynchronous upload service.

Uploads independent local files concurrently, one pipeline per file, with
a fixed number of worker slots.
"""

from __future__ import annotations

import asyncio
import os
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from dxport.exceptions import DxError
from dxport.logging import get_logger
from dxport.models.location import RemoteLocation
from dxport.services.base import BaseService
from dxport.services.upload._config import DEFAULT_MAX_WORKERS, PART_SIZE
from dxport.services.upload._models import UploadResult
from dxport.services.upload._transfer import ChunkedUploadPipeline

if TYPE_CHECKING:
    from dxport.api.client import AsyncPlatformClient

logger = get_logger(__name__)


class AsyncUploadService(BaseService):
    """
    Asynchronous upload service.

    Example:
        >>> async with AsyncPlatformClient(auth_token="xxxx") as client:
        ...     uploads = AsyncUploadService(client)
        ...     results = await uploads.upload_files(
        ...         ["reads.fq", "ref/"],
        ...         RemoteLocation(container_id="project-xxxx", path="/data"),
        ...         recursive=True,
        ...     )
    """

    def __init__(
        self,
        client: AsyncPlatformClient,
        max_workers: int = DEFAULT_MAX_WORKERS,
        part_retries: int = 0,
    ) -> None:
        super().__init__(client)
        self._max_workers = max_workers
        self._part_retries = part_retries
        self._part_size = PART_SIZE

    def configure(
        self,
        max_workers: int | None = None,
        part_retries: int | None = None,
    ) -> None:
        """
        Configure upload settings.

        Args:
            max_workers: Number of files uploaded concurrently.
            part_retries: Extra attempts per part on transport failure.
        """
        if max_workers is not None:
            self._max_workers = max_workers
        if part_retries is not None:
            self._part_retries = part_retries

    def _pipeline(self) -> ChunkedUploadPipeline:
        return ChunkedUploadPipeline(
            self._client,
            part_size=self._part_size,
            part_retries=self._part_retries,
        )

    async def upload_file(
        self,
        local_path: str | Path,
        destination: RemoteLocation,
        name: str | None = None,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> UploadResult:
        """
        Upload a single file; errors propagate.

        Args:
            local_path: File to upload.
            destination: Container and folder for the new object.
            name: Remote name (default: local basename).
            on_progress: Callback(transferred, total).
        """
        return await self._pipeline().upload(local_path, destination, name, on_progress)

    def plan(
        self,
        paths: list[str | Path],
        destination: RemoteLocation,
        recursive: bool = False,
    ) -> list[tuple[Path, RemoteLocation]]:
        """
        Expand local paths into (file, remote folder) pairs.

        Directories are mirrored below the destination folder, keeping the
        directory's own name, and require ``recursive``.

        Raises:
            DxError: A directory was given without ``recursive``, or a path
                does not exist.
        """
        jobs: list[tuple[Path, RemoteLocation]] = []
        for item in paths:
            path = Path(item)
            if path.is_dir():
                if not recursive:
                    raise DxError(f'Use recursive flag to upload directory "{path}"')
                base = path.resolve().name
                for dirpath, dirnames, filenames in os.walk(path):
                    dirnames.sort()
                    relative = Path(dirpath).relative_to(path).as_posix()
                    folder = posixpath.normpath(
                        posixpath.join(destination.path, base, relative)
                    )
                    for filename in sorted(filenames):
                        jobs.append(
                            (
                                Path(dirpath) / filename,
                                destination.model_copy(update={"path": folder}),
                            )
                        )
            elif path.exists():
                jobs.append((path, destination))
            else:
                raise DxError(f'No such file or directory "{path}"')
        return jobs

    async def upload_files(
        self,
        paths: list[str | Path],
        destination: RemoteLocation,
        recursive: bool = False,
        on_complete: Callable[[UploadResult], None] | None = None,
    ) -> list[UploadResult]:
        """
        Upload several files concurrently.

        Each file is an independent session; a failure is recorded in that
        file's result and does not stop the others.

        Returns:
            Results in the order of the planned files.
        """
        return await self.upload_jobs(self.plan(paths, destination, recursive), on_complete)

    async def upload_jobs(
        self,
        jobs: list[tuple[Path, RemoteLocation]],
        on_complete: Callable[[UploadResult], None] | None = None,
    ) -> list[UploadResult]:
        """Upload planned (file, remote folder) pairs; results keep their order."""
        semaphore = asyncio.Semaphore(self._max_workers)
        logger.debug(f"Uploading {len(jobs)} files with {self._max_workers} workers")

        async def run(local_path: Path, folder: RemoteLocation) -> UploadResult:
            async with semaphore:
                try:
                    result = await self.upload_file(local_path, folder)
                except (DxError, OSError) as e:
                    logger.warning(f"Upload of {local_path} failed: {e}")
                    result = UploadResult(success=False, source=str(local_path), error=str(e))
            if on_complete:
                on_complete(result)
            return result

        return list(await asyncio.gather(*(run(p, f) for p, f in jobs)))
