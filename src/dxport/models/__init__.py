"""dxport data models."""

from dxport.models.data import (
    ArchivalState,
    FileDescribeResult,
    FindDataDescribe,
    FindDataOptions,
    FindDataResponse,
    FindDataResult,
    FindDataScope,
    ListFolderOptions,
    ListFolderResult,
    NameFilter,
    ObjectClass,
    ObjectState,
    PlatformError,
)
from dxport.models.location import FileLocation, FolderPathLocation, RemoteLocation
from dxport.models.transfer import (
    DownloadDescriptor,
    DownloadOptions,
    PartTarget,
    TransferPart,
    TransferStats,
    UploadSession,
)
from dxport.models.values import FileLink, KitchenSink

__all__ = [
    # Addressing
    "RemoteLocation",
    "FileLocation",
    "FolderPathLocation",
    # Search / listing
    "ObjectClass",
    "ObjectState",
    "ArchivalState",
    "NameFilter",
    "FindDataScope",
    "FindDataOptions",
    "FindDataDescribe",
    "FindDataResult",
    "FindDataResponse",
    "ListFolderOptions",
    "ListFolderResult",
    "FileDescribeResult",
    "PlatformError",
    # Transfer
    "TransferPart",
    "UploadSession",
    "PartTarget",
    "DownloadOptions",
    "DownloadDescriptor",
    "TransferStats",
    # Values
    "FileLink",
    "KitchenSink",
]
