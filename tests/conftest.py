"""
Pytest configuration and fixtures for dxport tests.

The platform is faked in memory behind httpx.MockTransport: API calls,
pre-signed part uploads and download URLs all land in FakePlatform.
"""

from __future__ import annotations

import fnmatch
import hashlib
import json
import posixpath
from typing import Any

import httpx
import pytest
import pytest_asyncio

from dxport.api.client import AsyncPlatformClient
from dxport.config import Settings, reset_settings

API_URL = "https://api.test"
UPLOAD_HOST = "upload.test"
DOWNLOAD_HOST = "download.test"
TOKEN = "test-token"

PROJECT = "project-" + "A" * 24
OTHER_PROJECT = "project-" + "B" * 24


class _BodyStream(httpx.AsyncByteStream):
    """Streamed response body, so the client can read it with aiter_raw."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    async def __aiter__(self):
        yield self._data


def platform_error(status: int, error_type: str, message: str) -> httpx.Response:
    return httpx.Response(status, json={"error": {"type": error_type, "message": message}})


class FakePlatform:
    """In-memory object store speaking the platform's wire protocol."""

    def __init__(self, page_size: int = 1000) -> None:
        self.page_size = page_size
        self.objects: dict[str, dict[str, Any]] = {}
        self.folders: dict[str, set[str]] = {}
        self.requests: list[httpx.Request] = []
        self._counter = 0

    # -------------------------------------------------------------------------
    # Setup helpers
    # -------------------------------------------------------------------------

    def _new_id(self) -> str:
        self._counter += 1
        return f"file-{self._counter:024d}"

    def add_folder(self, project: str, folder: str) -> None:
        folders = self.folders.setdefault(project, {"/"})
        while folder not in folders:
            folders.add(folder)
            folder = posixpath.dirname(folder)

    def add_file(
        self,
        name: str,
        data: bytes,
        folder: str = "/",
        project: str = PROJECT,
        details: Any = None,
    ) -> str:
        object_id = self._new_id()
        self.add_folder(project, folder)
        self.objects[object_id] = {
            "project": project,
            "name": name,
            "folder": folder,
            "state": "closed",
            "parts": {},
            "data": data,
            "details": details,
        }
        return object_id

    def api_calls(self, suffix: str) -> list[httpx.Request]:
        return [
            r for r in self.requests if r.url.host == "api.test" and r.url.path.endswith(suffix)
        ]

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == UPLOAD_HOST:
            return self._put_part(request)
        if host == DOWNLOAD_HOST:
            return self._get_data(request)

        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return platform_error(401, "InvalidAuthentication", "Bad token")

        body = json.loads(request.content or b"{}")
        route = request.url.path.lstrip("/")
        if route == "file/new":
            return self._file_new(body)
        if route == "system/findDataObjects":
            return self._find(body)

        object_id, _, method = route.partition("/")
        if method == "listFolder":
            return self._list_folder(object_id, body)
        if object_id not in self.objects:
            return platform_error(404, "ResourceNotFound", f'"{object_id}" not found')
        obj = self.objects[object_id]
        if method == "upload":
            return self._upload(object_id, body)
        if method == "close":
            obj["state"] = "closed"
            obj["data"] = b"".join(obj["parts"][i] for i in sorted(obj["parts"]))
            return httpx.Response(200, json={"id": object_id})
        if method == "download":
            return httpx.Response(
                200,
                json={
                    "url": f"https://{DOWNLOAD_HOST}/{object_id}",
                    "headers": {"x-download-token": "abc"},
                    "expires": 0,
                },
            )
        if method == "describe":
            return httpx.Response(200, json=self._describe(object_id, body.get("fields")))
        return platform_error(400, "InvalidInput", f"Unknown route {route}")

    def _file_new(self, body: dict[str, Any]) -> httpx.Response:
        object_id = self._new_id()
        self.add_folder(body["project"], body["folder"])
        self.objects[object_id] = {
            "project": body["project"],
            "name": body["name"],
            "folder": body["folder"],
            "state": "open",
            "parts": {},
            "data": b"",
        }
        return httpx.Response(200, json={"id": object_id})

    def _upload(self, object_id: str, body: dict[str, Any]) -> httpx.Response:
        index = body["index"]
        return httpx.Response(
            200,
            json={
                "url": f"https://{UPLOAD_HOST}/{object_id}/{index}",
                "headers": {"content-md5": body["md5"]},
                "expires": 0,
            },
        )

    def _put_part(self, request: httpx.Request) -> httpx.Response:
        _, object_id, index = request.url.path.split("/")
        data = request.content
        if hashlib.md5(data).hexdigest() != request.headers["content-md5"]:
            return httpx.Response(400, text="digest mismatch")
        self.objects[object_id]["parts"][int(index)] = data
        return httpx.Response(200)

    def _get_data(self, request: httpx.Request) -> httpx.Response:
        object_id = request.url.path.strip("/")
        data = self.objects[object_id]["data"]
        return httpx.Response(
            200, headers={"Content-Length": str(len(data))}, stream=_BodyStream(data)
        )

    def _describe(self, object_id: str, fields: dict[str, bool] | None = None) -> dict[str, Any]:
        obj = self.objects[object_id]
        described = {
            "id": object_id,
            "project": obj["project"],
            "name": obj["name"],
            "folder": obj["folder"],
            "class": "file",
            "state": obj["state"],
            "size": len(obj["data"]),
        }
        if obj.get("details") is not None:
            described["details"] = obj["details"]
        if fields is not None:
            described = {k: v for k, v in described.items() if k == "id" or fields.get(k)}
        return described

    def _find(self, body: dict[str, Any]) -> httpx.Response:
        scope = body.get("scope", {})
        folder = scope.get("folder")
        recurse = scope.get("recurse", True)
        glob = (body.get("name") or {}).get("glob")
        ids = body.get("id")

        matches = []
        for object_id, obj in self.objects.items():
            if scope.get("project") and obj["project"] != scope["project"]:
                continue
            if ids is not None and object_id not in ids:
                continue
            if folder is not None:
                inside = obj["folder"] == folder or (
                    recurse and obj["folder"].startswith(folder.rstrip("/") + "/")
                )
                if not inside:
                    continue
            if glob is not None and not fnmatch.fnmatchcase(obj["name"], glob):
                continue
            matches.append(
                {"project": obj["project"], "id": object_id, "describe": self._describe(object_id)}
            )

        start = body.get("starting") or 0
        page = matches[start : start + self.page_size]
        end = start + self.page_size
        return httpx.Response(
            200, json={"results": page, "next": end if end < len(matches) else None}
        )

    def _list_folder(self, project: str, body: dict[str, Any]) -> httpx.Response:
        folder = body.get("folder", "/")
        folders = self.folders.get(project, {"/"})
        children = sorted(f for f in folders if f != folder and posixpath.dirname(f) == folder)
        objects = [
            {"id": object_id, "describe": self._describe(object_id)}
            for object_id, obj in self.objects.items()
            if obj["project"] == project and obj["folder"] == folder
        ]
        if body.get("only") == "folders":
            objects = []
        return httpx.Response(200, json={"objects": objects, "folders": children})


@pytest.fixture
def platform() -> FakePlatform:
    """Provide an empty fake platform."""
    return FakePlatform()


@pytest.fixture
def transport(platform: FakePlatform) -> httpx.MockTransport:
    """Provide an httpx transport routed to the fake platform."""
    return httpx.MockTransport(platform.handler)


@pytest_asyncio.fixture
async def client(transport: httpx.MockTransport):
    """Provide a platform client bound to the fake platform."""
    async with AsyncPlatformClient(auth_token=TOKEN, base_url=API_URL, transport=transport) as c:
        yield c


@pytest.fixture
def conf_dir(tmp_path, monkeypatch):
    """Point the settings file at a temporary directory."""
    path = tmp_path / "dxconf"
    monkeypatch.setenv("DX_USER_CONF_DIR", str(path))
    for var in ("DX_AUTH_TOKEN", "DX_PROJECT_CONTEXT_ID", "DX_CLI_WD", "DX_APISERVER_HOST"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield path
    reset_settings()


@pytest.fixture
def settings(conf_dir) -> Settings:
    """Provide logged-in settings pointing at the fake platform."""
    return Settings(
        auth_token=TOKEN,
        apiserver_protocol="https",
        apiserver_host="api.test",
        apiserver_port=443,
        project_context_id=PROJECT,
        project_context_name="demo",
        cli_wd="/",
    )
