"""
Models for data-object search, folder listing and describe calls.

Field names follow Python conventions; aliases carry the platform's
camelCase keys. Dump request bodies with ``to_payload()``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dxport.models.values import KitchenSink


class ObjectClass(str, Enum):
    """Data object classes."""

    APPLET = "applet"
    FILE = "file"
    RECORD = "record"
    WORKFLOW = "workflow"
    DATABASE = "database"


class ObjectState(str, Enum):
    """Lifecycle state of a data object."""

    OPENING = "opening"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"
    ANY = "any"


class ArchivalState(str, Enum):
    """File archival states."""

    LIVE = "live"
    ARCHIVAL = "archival"
    ARCHIVED = "archived"
    UNARCHIVING = "unarchiving"
    ANY = "any"


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """JSON request body."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class _Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# Search
# =============================================================================


class NameFilter(_Request):
    """Name match, either a glob or a regular expression."""

    glob: str | None = None
    regexp: str | None = None


class FindDataScope(_Request):
    project: str | None = None
    folder: str | None = None
    recurse: bool | None = None


class FindDataOptions(_Request):
    """Criteria for ``system/findDataObjects``.

    ``starting`` is the continuation cursor returned as ``next`` by the
    previous page; leave it unset for the first page.
    """

    object_class: ObjectClass | None = Field(default=None, alias="class")
    state: ObjectState | None = None
    name: NameFilter | None = None
    id: list[str] | None = None
    tags: list[str] | None = None
    scope: FindDataScope | None = None
    describe: bool | dict[str, bool] | None = None
    starting: Any = None
    limit: int | None = Field(default=None, ge=1)
    archival_state: ArchivalState | None = Field(default=None, alias="archivalState")


class FindDataDescribe(_Response):
    id: str
    name: str | None = None
    folder: str | None = None
    project: str | None = None
    object_class: ObjectClass | None = Field(default=None, alias="class")
    state: ObjectState | None = None
    size: int | None = None
    hidden: bool | None = None
    media: str | None = None
    tags: list[str] = Field(default_factory=list)
    archival_state: ArchivalState | None = Field(default=None, alias="archivalState")
    created: datetime | None = None
    modified: datetime | None = None


class FindDataResult(_Response):
    project: str
    id: str
    describe: FindDataDescribe | None = None


class FindDataResponse(_Response):
    results: list[FindDataResult] = Field(default_factory=list)
    next: Any = None


# =============================================================================
# Folder listing
# =============================================================================


class ListFolderOptions(_Request):
    folder: str = "/"
    describe: bool = True
    only: str | None = None  # "folders", "objects" or "all"
    include_hidden: bool = Field(default=False, alias="includeHidden")
    has_subfolder_flags: bool = Field(default=False, alias="hasSubfolderFlags")


class ListFolderObject(_Response):
    id: str
    describe: FindDataDescribe | None = None


class ListFolderResult(_Response):
    objects: list[ListFolderObject] = Field(default_factory=list)
    # Plain folder names, or (name, has_subfolders) pairs with hasSubfolderFlags
    folders: list[str | tuple[str, bool]] = Field(default_factory=list)

    @property
    def folder_names(self) -> list[str]:
        return [f if isinstance(f, str) else f[0] for f in self.folders]


# =============================================================================
# Describe
# =============================================================================


class FileDescribeResult(_Response):
    id: str
    project: str | None = None
    name: str | None = None
    folder: str | None = None
    state: ObjectState | None = None
    size: int | None = None
    media: str | None = None
    archival_state: ArchivalState | None = Field(default=None, alias="archivalState")
    created: datetime | None = None
    modified: datetime | None = None
    properties: dict[str, str] | None = None
    details: KitchenSink | None = None


# =============================================================================
# Errors
# =============================================================================


class PlatformErrorPayload(_Response):
    type: str
    message: str


class PlatformError(_Response):
    """Structured error body: ``{"error": {"type": ..., "message": ...}}``."""

    error: PlatformErrorPayload
