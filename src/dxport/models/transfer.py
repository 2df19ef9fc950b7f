"""
Models for chunked upload and streamed download.
"""

from __future__ import annotations

import hashlib
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TransferPart(BaseModel):
    """One chunk of an upload, validated by the platform on receipt."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1)
    byte_length: int = Field(ge=1)
    content_digest: str

    @classmethod
    def from_bytes(cls, index: int, data: bytes) -> TransferPart:
        """Describe ``data`` as part ``index``; the digest covers exactly these bytes."""
        return cls(
            index=index,
            byte_length=len(data),
            content_digest=hashlib.md5(data).hexdigest(),
        )

    def to_payload(self) -> dict[str, Any]:
        return {"size": self.byte_length, "md5": self.content_digest, "index": self.index}


class UploadSession(BaseModel):
    """An open remote object receiving parts.

    Owned by a single pipeline; parts are strictly sequential.
    """

    remote_object_id: str
    next_part_index: int = Field(default=1, ge=1)

    def advance(self) -> None:
        """Mark the current part as transmitted."""
        self.next_part_index += 1

    @property
    def parts_sent(self) -> int:
        return self.next_part_index - 1


class PartTarget(BaseModel):
    """Pre-signed write endpoint for one part."""

    model_config = ConfigDict(extra="ignore")

    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    expires: int | None = None


class DownloadOptions(BaseModel):
    """Options for requesting a download descriptor."""

    model_config = ConfigDict(populate_by_name=True)

    duration: int | None = None
    filename: str | None = None
    project: str | None = None
    preauthenticated: bool | None = None
    sticky_ip: bool | None = Field(default=None, alias="stickyIP")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DownloadDescriptor(BaseModel):
    """Time-limited fetch descriptor, single use per download attempt.

    ``content_length`` is filled in from the transport response once the
    stream is opened.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    endpoint_url: str = Field(alias="url")
    auth_headers: dict[str, str] = Field(default_factory=dict, alias="headers")
    content_length: int | None = None


class TransferStats(BaseModel):
    """Statistics from a transfer operation."""

    bytes_transferred: int = 0
    chunks_count: int = 0
    retries_count: int = 0
