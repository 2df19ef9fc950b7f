"""
Chunked upload of one local source into one remote file object.
"""

from __future__ import annotations

import os
import time
import uuid
from pathlib import Path
from typing import IO, TYPE_CHECKING, Callable

from dxport.exceptions import DxError, EmptySourceError, IncompleteSessionError
from dxport.logging import get_logger
from dxport.models.transfer import TransferPart, TransferStats, UploadSession
from dxport.services.base import with_retries
from dxport.services.upload._config import PART_SIZE
from dxport.services.upload._models import UploadResult

if TYPE_CHECKING:
    from dxport.api.client import AsyncPlatformClient
    from dxport.models.location import RemoteLocation

logger = get_logger(__name__)


def _source_size(stream: IO[bytes]) -> int | None:
    try:
        return os.fstat(stream.fileno()).st_size
    except (OSError, ValueError):
        return None


class ChunkedUploadPipeline:
    """
    Upload a byte source as a sequence of checksummed parts.

    Lifecycle of the remote object:
        create (open) -> part 1 .. part N -> close (immutable, readable)

    Parts are strictly sequential: part N+1 is read only after part N has
    been transmitted. One pipeline drives one upload session at a time.
    """

    def __init__(
        self,
        client: AsyncPlatformClient,
        part_size: int = PART_SIZE,
        part_retries: int = 0,
    ) -> None:
        self._client = client
        self._part_size = part_size
        self._part_retries = part_retries

    async def upload(
        self,
        source: str | Path | IO[bytes],
        destination: RemoteLocation,
        name: str | None = None,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> UploadResult:
        """
        Upload a local file or binary stream.

        Args:
            source: Local path or readable binary stream.
            destination: Container and folder for the new object.
            name: Remote object name (default: basename of the source).
            on_progress: Callback(transferred, total); total is 0 when the
                source size is unknown.

        Returns:
            UploadResult for the closed object.

        Raises:
            EmptySourceError: Source is zero-length (no remote calls made).
            IncompleteSessionError: A part failed; the object is left open.
        """
        if isinstance(source, (str, Path)):
            with open(source, "rb") as stream:
                return await self._upload_stream(
                    stream, str(source), destination, name or Path(source).name, on_progress
                )

        label = str(getattr(source, "name", "<stream>"))
        if name is None:
            name = Path(label).name
        return await self._upload_stream(source, label, destination, name, on_progress)

    async def _upload_stream(
        self,
        stream: IO[bytes],
        label: str,
        destination: RemoteLocation,
        name: str,
        on_progress: Callable[[int, int], None] | None,
    ) -> UploadResult:
        start = time.monotonic()
        total = _source_size(stream) or 0

        chunk = stream.read(self._part_size)
        if not chunk:
            raise EmptySourceError(label)

        object_id = await self._client.create_writable_object(
            destination.container_id,
            name,
            destination.path,
            parents=True,
            nonce=uuid.uuid4().hex,
        )
        logger.debug(f"Created {object_id} for {label} in {destination}")

        session = UploadSession(remote_object_id=object_id)
        stats = TransferStats()

        try:
            while chunk:
                await self._send_part(session, chunk, stats)
                if on_progress:
                    on_progress(stats.bytes_transferred, total)
                chunk = stream.read(self._part_size)
        except (DxError, OSError) as e:
            logger.warning(
                f"Upload of {label} stopped after {session.parts_sent} parts: {e}"
            )
            raise IncompleteSessionError(object_id, cause=e) from e

        await self._client.close_object(object_id)
        logger.debug(f"Closed {object_id} ({session.parts_sent} parts)")

        return UploadResult(
            success=True,
            source=label,
            object_id=object_id,
            size=stats.bytes_transferred,
            parts_count=session.parts_sent,
            elapsed=time.monotonic() - start,
        )

    async def _send_part(
        self,
        session: UploadSession,
        chunk: bytes,
        stats: TransferStats,
    ) -> None:
        part = TransferPart.from_bytes(session.next_part_index, chunk)

        async def send() -> None:
            # A fresh target is requested on every attempt
            target = await self._client.request_part_target(session.remote_object_id, part)
            await self._client.upload_part(target, chunk)

        def count_retry(attempt: int, error: Exception) -> None:
            stats.retries_count += 1

        await with_retries(send, self._part_retries, f"part {part.index}", count_retry)

        logger.debug(f"Part {part.index}: {part.byte_length} bytes md5={part.content_digest}")
        session.advance()
        stats.bytes_transferred += part.byte_length
        stats.chunks_count += 1
