"""
Upload service for dxport.

Moves local files to the platform as 4MB parts, each with its own MD5
digest and pre-signed write target, then closes the remote object.

Features:
- Strictly sequential parts within one file (1-indexed)
- Concurrent uploads of independent files with fixed worker slots
- Optional bounded retry of part transmission
"""

from dxport.services.upload._aio import AsyncUploadService
from dxport.services.upload._config import PART_SIZE
from dxport.services.upload._models import UploadResult
from dxport.services.upload._sync import UploadService
from dxport.services.upload._transfer import ChunkedUploadPipeline

__all__ = [
    "PART_SIZE",
    "UploadResult",
    "ChunkedUploadPipeline",
    "UploadService",
    "AsyncUploadService",
]
