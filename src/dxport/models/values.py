"""
Loosely-typed platform values.

Describe results carry free-form ``details`` documents whose leaves may be
strings, integers, booleans or file references (``{"$dnanexus_link": ...}``),
nested in lists and mappings. KitchenSink models them as a closed union so
that values survive a parse/dump cycle unchanged.
"""

from __future__ import annotations

import json
from typing import Annotated, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    StrictBool,
    StrictInt,
    StrictStr,
)


class ProjectFileRef(BaseModel):
    model_config = ConfigDict(extra="forbid")

    project: str
    id: str

    def __str__(self) -> str:
        return f"{self.project}:{self.id}"


class AnalysisOutputRef(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    analysis: str
    stage: str | None = None
    field: str | None = None
    was_internal: bool | None = Field(default=None, alias="wasInternal")

    def __str__(self) -> str:
        return self.analysis


class FileLink(BaseModel):
    """A ``$dnanexus_link`` reference to a file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    link: Annotated[
        Union[StrictStr, ProjectFileRef, AnalysisOutputRef],
        Field(union_mode="left_to_right"),
    ] = Field(alias="$dnanexus_link")

    def __str__(self) -> str:
        return str(self.link)


class KitchenSink(RootModel):
    """Tagged union of string, integer, boolean, file link, list and mapping."""

    root: Annotated[
        Union[
            StrictBool,
            StrictInt,
            FileLink,
            StrictStr,
            list["KitchenSink"],
            dict[str, "KitchenSink"],
        ],
        Field(union_mode="left_to_right"),
    ]

    def to_json(self) -> object:
        """Plain JSON-compatible value with original key names."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        value = self.root
        if isinstance(value, bool):
            return json.dumps(value)
        if isinstance(value, str):
            return f'"{value}"'
        if isinstance(value, list):
            return "[" + ", ".join(str(v) for v in value) + "]"
        if isinstance(value, dict):
            return "{" + ", ".join(f'"{k}": {v}' for k, v in value.items()) + "}"
        return str(value)


KitchenSink.model_rebuild()
