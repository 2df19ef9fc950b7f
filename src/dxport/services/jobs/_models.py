"""
Models for job input/output transfers.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dxport.services.jobs._config import ARRAY_FILE, FILE
from dxport.services.upload import UploadResult


class OutputSpec(BaseModel):
    """One entry of an app's ``outputSpec``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    io_class: str = Field(alias="class")
    optional: bool = True

    @property
    def carries_files(self) -> bool:
        return self.io_class in (FILE, ARRAY_FILE)

    @property
    def is_array(self) -> bool:
        return self.io_class == ARRAY_FILE


class AppSpec(BaseModel):
    """The parts of ``dxapp.json`` needed to upload outputs."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str | None = None
    output_spec: list[OutputSpec] = Field(default_factory=list, alias="outputSpec")


class OutputUploads(BaseModel):
    """Uploaded outputs as job-output JSON, plus the result of every file."""

    outputs: dict[str, Any] = Field(default_factory=dict)
    results: list[UploadResult] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def failed(self) -> list[UploadResult]:
        return [r for r in self.results if not r.success]
