"""
Pytest fixtures for job input/output tests.
"""

from __future__ import annotations

import json

import pytest


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON document below tmp_path and return its path."""

    def write(name: str, data):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return write


@pytest.fixture
def app_json(write_json):
    """dxapp.json with a required file, an optional file list and a string output."""
    return write_json(
        "dxapp.json",
        {
            "name": "align",
            "outputSpec": [
                {"name": "bam", "class": "file", "optional": False},
                {"name": "logs", "class": "array:file"},
                {"name": "summary", "class": "string"},
            ],
        },
    )


@pytest.fixture
def write_output(tmp_path):
    """Write a file below tmp_path/out."""

    def write(relative: str, data: bytes):
        path = tmp_path / "out" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return write
