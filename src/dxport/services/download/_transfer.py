"""
Streamed download of one remote file object into a local sink.
"""

from __future__ import annotations

from typing import IO, TYPE_CHECKING, Callable

import httpx

from dxport.exceptions import TransportFailureError
from dxport.logging import get_logger
from dxport.models.transfer import TransferStats
from dxport.services.download._config import DEFAULT_CHUNK_SIZE

if TYPE_CHECKING:
    from dxport.api.client import AsyncPlatformClient
    from dxport.models.transfer import DownloadOptions

logger = get_logger(__name__)


def _content_length(response: httpx.Response) -> int | None:
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class StreamedDownloadPipeline:
    """
    Fetch an object through a time-limited download descriptor.

    The body is written to the sink chunk by chunk as it arrives; the whole
    object is never held in memory. On failure the sink keeps every byte
    written so far and the caller decides what to do with it.
    """

    def __init__(
        self,
        client: AsyncPlatformClient,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._client = client
        self._chunk_size = chunk_size

    async def download(
        self,
        object_id: str,
        sink: IO[bytes],
        on_progress: Callable[[int, int], None] | None = None,
        options: DownloadOptions | None = None,
    ) -> TransferStats:
        """
        Download an object into a writable binary sink.

        Args:
            object_id: File object to fetch.
            sink: Destination, written sequentially.
            on_progress: Callback(written, total) after each chunk.
            options: Descriptor request options.

        Raises:
            TransportFailureError: No content length, network failure, or a
                body shorter than announced.
            RemoteRejectedError: The platform refused the request.
        """
        descriptor = await self._client.request_download_descriptor(object_id, options)
        stats = TransferStats()

        async with self._client.open_download(descriptor) as response:
            total = _content_length(response)
            if total is None:
                raise TransportFailureError(
                    f"Failed to get content length from '{descriptor.endpoint_url}'"
                )
            descriptor.content_length = total
            logger.debug(f"Downloading {object_id}: {total} bytes")

            try:
                # Raw bytes: no content-decoding, the file is stored as-is
                async for chunk in response.aiter_raw(self._chunk_size):
                    sink.write(chunk)
                    stats.bytes_transferred += len(chunk)
                    stats.chunks_count += 1
                    if on_progress:
                        on_progress(min(stats.bytes_transferred, total), total)
            except httpx.TransportError as e:
                message = (
                    f"Download of {object_id} interrupted after "
                    f"{stats.bytes_transferred} of {total} bytes: {e}"
                )
                logger.warning(message)
                raise TransportFailureError(message, cause=e) from e

        if stats.bytes_transferred != total:
            raise TransportFailureError(
                f"Incomplete download of {object_id}: "
                f"got {stats.bytes_transferred} of {total} bytes"
            )
        return stats
