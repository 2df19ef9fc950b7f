"""
Planning of job input downloads and job output uploads.

Pure functions over local files: no network calls.

Job inputs (``job_input.json``) map names to values; a file link goes to
``<out_dir>/<name>/`` and a list of file links to ``<out_dir>/<name>/<i>/``
with ``i`` zero-padded to the width of the list length. Other values are
not files and are skipped.

Job outputs are read from ``<out_dir>/<name>/`` for every file-class entry
of the app's ``outputSpec``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Collection

from pydantic import TypeAdapter, ValidationError

from dxport.exceptions import DxError
from dxport.models.values import FileLink, ProjectFileRef
from dxport.paths import is_file_id
from dxport.services.download import DownloadJob
from dxport.services.jobs._models import AppSpec, OutputSpec, OutputUploads
from dxport.services.upload import UploadResult

_JSON_OBJECT = TypeAdapter(dict[str, Any])


def _read(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise DxError(f"{path}: {e.strerror or e}", cause=e) from e


def _invalid(path: Path, error: ValidationError) -> DxError:
    first = error.errors()[0]
    return DxError(f"{path}: {first['msg']}", cause=error)


def load_job_input(path: Path) -> dict[str, Any]:
    """Read a ``job_input.json`` document."""
    try:
        return _JSON_OBJECT.validate_json(_read(path))
    except ValidationError as e:
        raise _invalid(path, e) from e


def load_output_spec(path: Path) -> list[OutputSpec]:
    """Read the file-class outputs declared in a ``dxapp.json``."""
    try:
        app = AppSpec.model_validate_json(_read(path))
    except ValidationError as e:
        raise _invalid(path, e) from e
    return [spec for spec in app.output_spec if spec.carries_files]


def _file_target(value: Any) -> tuple[str, str | None] | None:
    """(file id, container) of a file link, or None for any other value."""
    try:
        link = FileLink.model_validate(value).link
    except ValidationError:
        return None
    if isinstance(link, str) and is_file_id(link):
        return link, None
    if isinstance(link, ProjectFileRef) and is_file_id(link.id):
        return link.id, link.project
    return None


def input_download_jobs(
    inputs: dict[str, Any],
    out_dir: Path,
    skip: Collection[str] = (),
) -> list[DownloadJob]:
    """Turn job inputs into download jobs, in input-name order."""
    jobs: list[DownloadJob] = []
    for name in sorted(inputs):
        if name in skip:
            continue
        value = inputs[name]

        if isinstance(value, list):
            targets = [_file_target(v) for v in value]
            if any(t is None for t in targets):
                continue
            width = len(str(len(targets)))
            for index, (file_id, container) in enumerate(targets):
                jobs.append(
                    DownloadJob(
                        object_id=file_id,
                        out_dir=out_dir / name / f"{index:0{width}d}",
                        container_id=container,
                    )
                )
            continue

        target = _file_target(value)
        if target is not None:
            file_id, container = target
            jobs.append(
                DownloadJob(object_id=file_id, out_dir=out_dir / name, container_id=container)
            )
    return jobs


def plan_output_uploads(
    specs: list[OutputSpec],
    out_dir: Path,
    skip: Collection[str] = (),
) -> list[tuple[OutputSpec, Path]]:
    """
    Pair each declared output with the local files found for it.

    Raises:
        DxError: A required output has no files, or a single-file output
            has several.
    """
    planned: list[tuple[OutputSpec, Path]] = []
    for spec in specs:
        if spec.name in skip:
            continue
        folder = out_dir / spec.name
        files = sorted(p for p in folder.rglob("*") if p.is_file()) if folder.is_dir() else []

        if not files and not spec.optional:
            raise DxError(f'Required output "{spec.name}" has no files')
        if not spec.is_array and len(files) > 1:
            raise DxError(f'Output "{spec.name}" should have one file but has {len(files)}')
        planned.extend((spec, path) for path in files)
    return planned


def collect_outputs(
    planned: list[tuple[OutputSpec, Path]],
    results: list[UploadResult],
) -> OutputUploads:
    """Build job-output JSON from uploads; failed files are left out."""
    outputs: dict[str, Any] = {}
    for (spec, _), result in zip(planned, results):
        if not result.success or result.object_id is None:
            continue
        link = FileLink(link=result.object_id).model_dump(by_alias=True)
        if spec.is_array:
            outputs.setdefault(spec.name, []).append(link)
        else:
            outputs[spec.name] = link
    return OutputUploads(outputs=outputs, results=results)
