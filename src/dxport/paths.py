"""
Remote location parsing.

Turns user input such as ``project-xxxx:/data/reads.fq``, ``:reads.fq``,
``reads.fq`` or ``file-xxxx`` into a RemoteLocation, given the current
project and working folder. Pure functions: no network calls, no errors.

Two parsers exist because two commands read destinations differently:

    resolve_path        Locations of existing objects (download, ls, cd).
                        Empty remainder -> working folder; relative paths are
                        joined under the working folder.

    parse_project_path  Upload destinations. No destination -> working
                        folder; an explicit but empty remainder (``""``,
                        ``project-xxxx:``) -> ``/``; relative paths are
                        rooted at ``/``, not at the working folder.
"""

from __future__ import annotations

import posixpath
import re
from enum import Enum

from dxport.models.location import FileLocation, FolderPathLocation, RemoteLocation

ROOT = "/"

# Container prefix counts only when followed by ":" or end of input
CONTAINER_PREFIX_RE = re.compile(
    r"^((?:project|container)-[A-Za-z0-9]{24})(?::(.*)|$)", re.DOTALL
)
FILE_ID_RE = re.compile(r"^file-[A-Za-z0-9]{24}$")

_ID = "[A-Za-z0-9]{24}"
_PROJECT_SCOPED = r"^(?:project-[A-Za-z0-9]{24}:)?"


class ObjectKind(str, Enum):
    """Kinds of platform identifiers."""

    FILE = "file"
    RECORD = "record"
    APPLET = "applet"
    DATABASE = "database"
    WORKFLOW = "workflow"
    ANALYSIS = "analysis"
    JOB = "job"
    APP = "app"
    PROJECT = "project"
    CONTAINER = "container"


# Data objects may be written as "project-xxxx:file-yyyy"
_SCOPED_KINDS = {
    ObjectKind.FILE,
    ObjectKind.RECORD,
    ObjectKind.APPLET,
    ObjectKind.DATABASE,
    ObjectKind.WORKFLOW,
}

_KIND_PATTERNS = [
    (
        kind,
        re.compile(
            (_PROJECT_SCOPED if kind in _SCOPED_KINDS else "^") + f"{kind.value}-{_ID}$"
        ),
    )
    for kind in ObjectKind
]


def is_file_id(value: str) -> bool:
    return FILE_ID_RE.match(value) is not None


def object_kind(identifier: str) -> ObjectKind | None:
    """
    Recognise a platform identifier.

    Example:
        >>> object_kind("job-GZykQKj0GYJfQj2Q4xqKV5j0")
        <ObjectKind.JOB: 'job'>
        >>> object_kind("/data/reads.fq") is None
        True
    """
    for kind, pattern in _KIND_PATTERNS:
        if pattern.match(identifier):
            return kind
    return None


def _split_container(default_container: str, value: str) -> tuple[str, str]:
    """Separate a leading container identifier from the rest of the input."""
    match = CONTAINER_PREFIX_RE.match(value)
    if match:
        return match.group(1), match.group(2) or ""
    return default_container, value


def _strip_separator(value: str) -> str:
    # Exactly one leading ":" is a separator, not part of the path
    return value[1:] if value.startswith(":") else value


def resolve_path(default_container: str, working_path: str, value: str) -> RemoteLocation:
    """
    Resolve user input into a (container, path) pair.

    Args:
        default_container: Container used when the input names none.
        working_path: Current working folder, used for empty and relative input.
        value: User input.

    Returns:
        RemoteLocation whose path is an absolute path or a file identifier.

    Example:
        >>> resolve_path("project-" + "B" * 24, "/foo/bar", "baz.txt").path
        '/foo/bar/baz.txt'
    """
    working_path = working_path or ROOT
    container, rest = _split_container(default_container, value)
    path = _strip_separator(rest) or working_path

    # Identifiers are absolute regardless of the working folder
    if not is_file_id(path) and not path.startswith(ROOT):
        path = posixpath.join(working_path, path)

    return RemoteLocation(container_id=container, path=path)


def parse_project_path(
    default_container: str,
    working_path: str,
    destination: str | None,
) -> RemoteLocation:
    """
    Parse an upload destination.

    Unlike resolve_path, an explicit empty remainder means the container
    root and relative input is rooted at ``/``.

    Example:
        >>> parse_project_path("project-" + "B" * 24, "/foo", None).path
        '/foo'
        >>> parse_project_path("project-" + "B" * 24, "/foo", "bar").path
        '/bar'
    """
    if destination is None:
        destination = working_path or ROOT

    container, rest = _split_container(default_container, destination)
    path = _strip_separator(rest)
    if not path.startswith(ROOT):
        path = ROOT + path

    return RemoteLocation(container_id=container, path=path)


def classify(
    default_container: str,
    working_path: str,
    value: str,
) -> FileLocation | FolderPathLocation:
    """
    Guess whether input names a file by identifier or a hierarchical path.

    Makes no network calls; a FolderPathLocation may still turn out to be a
    file, a folder or nothing at all.
    """
    location = resolve_path(default_container, working_path, value)
    if is_file_id(location.path):
        return FileLocation(file_id=location.path, container_id=location.container_id)
    return FolderPathLocation(path=location.path, container_id=location.container_id)


def split_path(path: str) -> tuple[str, str]:
    """
    Split a resolved path into (parent folder, basename).

    Identifiers live at no particular folder and are returned as
    ``("/", identifier)``; the root is ``("/", "/")``.
    """
    if is_file_id(path):
        return ROOT, path

    trimmed = path.rstrip(ROOT)
    if not trimmed:
        return ROOT, ROOT

    folder, name = posixpath.split(trimmed)
    return folder or ROOT, name
