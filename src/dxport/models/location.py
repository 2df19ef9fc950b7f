"""
Addressing models.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RemoteLocation(BaseModel):
    """A resolved (container, path) pair.

    ``path`` is either an absolute folder/file path inside the container or
    a bare object identifier such as ``file-xxxx``. It is never empty.
    """

    model_config = ConfigDict(frozen=True)

    container_id: str
    path: str

    def __str__(self) -> str:
        return f"{self.container_id}:{self.path}"


class FileLocation(BaseModel):
    """Classification result: the input names an object by identifier."""

    model_config = ConfigDict(frozen=True)

    file_id: str
    container_id: str


class FolderPathLocation(BaseModel):
    """Classification result: the input is a hierarchical path."""

    model_config = ConfigDict(frozen=True)

    path: str
    container_id: str
