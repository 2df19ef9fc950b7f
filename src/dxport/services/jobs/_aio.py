"""
Asynchronous job input/output transfers.

Downloads every file input of a job and uploads every file output declared
by an app, delegating the transfers to the download and upload services.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable, Collection

from dxport.logging import get_logger
from dxport.models.location import RemoteLocation
from dxport.services.base import BaseService
from dxport.services.download import AsyncDownloadService, DownloadResult
from dxport.services.download._aio import ProgressFactory
from dxport.services.jobs._models import OutputUploads
from dxport.services.jobs._plan import (
    collect_outputs,
    input_download_jobs,
    load_job_input,
    load_output_spec,
    plan_output_uploads,
)
from dxport.services.upload import AsyncUploadService, UploadResult
from dxport.services.upload._config import DEFAULT_MAX_WORKERS

if TYPE_CHECKING:
    from dxport.api.client import AsyncPlatformClient

logger = get_logger(__name__)


class AsyncJobTransferService(BaseService):
    """
    Asynchronous job input/output transfers.

    Example:
        >>> async with AsyncPlatformClient(auth_token="xxxx") as client:
        ...     jobs = AsyncJobTransferService(client, max_workers=4)
        ...     await jobs.download_inputs(Path("job_input.json"), Path("in"))
        ...     uploaded = await jobs.upload_outputs(
        ...         Path("dxapp.json"),
        ...         Path("out"),
        ...         RemoteLocation(container_id="container-xxxx", path="/"),
        ...     )
        ...     uploaded.outputs
        {'reads': {'$dnanexus_link': 'file-xxxx'}}
    """

    def __init__(
        self,
        client: AsyncPlatformClient,
        max_workers: int = DEFAULT_MAX_WORKERS,
        part_retries: int = 0,
    ) -> None:
        super().__init__(client)
        self._downloads = AsyncDownloadService(client, max_workers=max_workers)
        self._uploads = AsyncUploadService(
            client, max_workers=max_workers, part_retries=part_retries
        )

    async def download_inputs(
        self,
        input_json: Path,
        out_dir: Path,
        skip: Collection[str] = (),
        force: bool = False,
        progress_factory: ProgressFactory | None = None,
        on_complete: Callable[[DownloadResult], None] | None = None,
    ) -> list[DownloadResult]:
        """
        Download every file linked from a job input document.

        Raises:
            DxError: The input document cannot be read.
        """
        jobs = input_download_jobs(load_job_input(input_json), out_dir, skip)
        logger.info(f"Downloading {len(jobs)} input files to {out_dir}")
        return await self._downloads.download_files(jobs, force, progress_factory, on_complete)

    async def upload_outputs(
        self,
        app_json: Path,
        out_dir: Path,
        destination: RemoteLocation,
        skip: Collection[str] = (),
        on_complete: Callable[[UploadResult], None] | None = None,
    ) -> OutputUploads:
        """
        Upload the files under ``<out_dir>/<output>/`` for each file output.

        Every file lands directly in ``destination``. Nothing is uploaded
        when an output's file count does not match its declaration.

        Raises:
            DxError: The app document cannot be read, or an output is
                missing or has too many files.
        """
        planned = plan_output_uploads(load_output_spec(app_json), out_dir, skip)
        logger.info(f"Uploading {len(planned)} output files from {out_dir}")
        results = await self._uploads.upload_jobs(
            [(path, destination) for _, path in planned], on_complete
        )
        return collect_outputs(planned, results)
