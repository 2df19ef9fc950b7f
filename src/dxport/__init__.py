"""
dxport - command-line client for a remote object-storage platform.

Moves files between local disk and platform containers: chunked uploads
with per-part MD5 digests, streamed downloads, and path resolution against
the current project and working folder.

Quick start:
    >>> from dxport import AsyncPlatformClient, AsyncUploadService, RemoteLocation
    >>> async with AsyncPlatformClient(auth_token="xxxx") as client:
    ...     uploads = AsyncUploadService(client)
    ...     result = await uploads.upload_file(
    ...         "reads.fq", RemoteLocation(container_id="project-xxxx", path="/data")
    ...     )
"""

from dxport.api.client import AsyncPlatformClient
from dxport.config import Settings, configure_settings, get_settings
from dxport.exceptions import (
    AddressingAmbiguousError,
    DxError,
    EmptySourceError,
    IncompleteSessionError,
    InvalidResponseError,
    NotLoggedInError,
    RemoteRejectedError,
    TransportFailureError,
)
from dxport.models.location import FileLocation, FolderPathLocation, RemoteLocation
from dxport.paths import classify, parse_project_path, resolve_path
from dxport.services.download import AsyncDownloadService, DownloadService
from dxport.services.jobs import AsyncJobTransferService, JobTransferService
from dxport.services.search import SearchService
from dxport.services.upload import AsyncUploadService, UploadService

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Client
    "AsyncPlatformClient",
    # Config
    "Settings",
    "get_settings",
    "configure_settings",
    # Addressing
    "RemoteLocation",
    "FileLocation",
    "FolderPathLocation",
    "resolve_path",
    "parse_project_path",
    "classify",
    # Services
    "SearchService",
    "UploadService",
    "AsyncUploadService",
    "DownloadService",
    "AsyncDownloadService",
    "JobTransferService",
    "AsyncJobTransferService",
    # Errors
    "DxError",
    "AddressingAmbiguousError",
    "EmptySourceError",
    "IncompleteSessionError",
    "RemoteRejectedError",
    "TransportFailureError",
    "InvalidResponseError",
    "NotLoggedInError",
]
