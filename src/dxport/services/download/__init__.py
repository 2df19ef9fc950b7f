"""
Download service for dxport.

Fetches file objects through time-limited download descriptors and streams
the body to disk in 1MB chunks, verifying the announced content length.

Features:
- File identifiers, paths with globs, and whole folders (recursive)
- Concurrent downloads of independent files with fixed worker slots
- Transfer metrics per file
"""

from dxport.services.download._aio import AsyncDownloadService
from dxport.services.download._config import DEFAULT_CHUNK_SIZE, STDOUT
from dxport.services.download._models import DownloadJob, DownloadMetrics, DownloadResult
from dxport.services.download._sync import DownloadService
from dxport.services.download._transfer import StreamedDownloadPipeline

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "STDOUT",
    "DownloadJob",
    "DownloadMetrics",
    "DownloadResult",
    "StreamedDownloadPipeline",
    "DownloadService",
    "AsyncDownloadService",
]
