"""Shared fixtures: an in-memory OCI registry and a stacks directory."""

from __future__ import annotations

import hashlib
import json
import re
import uuid
from pathlib import Path

import httpx
import pytest

from devreg.config import DevregConfig

_UPLOAD_START = re.compile(r"^/v2/(?P<repo>.+)/blobs/uploads/$")
_UPLOAD = re.compile(r"^/v2/(?P<repo>.+)/blobs/uploads/(?P<uid>[^/]+)$")
_BLOB = re.compile(r"^/v2/(?P<repo>.+)/blobs/(?P<digest>sha256:[0-9a-f]+)$")
_MANIFEST = re.compile(r"^/v2/(?P<repo>.+)/manifests/(?P<ref>[^/]+)$")


def _digest(data: bytes) -> str:
    return "sha256:" + hashlib.sha256(data).hexdigest()


class FakeRegistry:
    """Just enough of the OCI distribution API to push and pull artifacts."""

    def __init__(self) -> None:
        self.blobs: dict[tuple[str, str], bytes] = {}
        self.manifests: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.uploads: dict[str, str] = {}
        self.ping_statuses: list[int] = []
        self.manifest_put_status: int | None = None
        self.manifest_get_status: int | None = None
        self.log: list[tuple[str, str]] = []
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.log.append((method, path))

        if path == "/":
            status = self.ping_statuses.pop(0) if self.ping_statuses else 200
            return httpx.Response(status)

        m = _UPLOAD_START.match(path)
        if m and method == "POST":
            uid = uuid.uuid4().hex
            self.uploads[uid] = m["repo"]
            return httpx.Response(
                202, headers={"Location": f"/v2/{m['repo']}/blobs/uploads/{uid}"}
            )

        m = _UPLOAD.match(path)
        if m and method == "PUT":
            digest = request.url.params.get("digest", "")
            body = request.content
            if self.uploads.pop(m["uid"], None) != m["repo"] or _digest(body) != digest:
                return httpx.Response(400, json={"errors": [{"code": "DIGEST_INVALID"}]})
            self.blobs[(m["repo"], digest)] = body
            return httpx.Response(201, headers={"Docker-Content-Digest": digest})

        m = _BLOB.match(path)
        if m and method in ("HEAD", "GET"):
            data = self.blobs.get((m["repo"], m["digest"]))
            if data is None:
                return httpx.Response(404)
            return httpx.Response(200, content=data if method == "GET" else b"")

        m = _MANIFEST.match(path)
        if m and method == "PUT":
            if self.manifest_put_status is not None:
                return httpx.Response(self.manifest_put_status)
            body = request.content
            self.put_manifest(m["repo"], m["ref"], body, request.headers["Content-Type"])
            return httpx.Response(201, headers={"Docker-Content-Digest": _digest(body)})
        if m and method == "GET":
            if self.manifest_get_status is not None:
                return httpx.Response(self.manifest_get_status)
            stored = self.manifests.get((m["repo"], m["ref"]))
            if stored is None:
                return httpx.Response(404, json={"errors": [{"code": "MANIFEST_UNKNOWN"}]})
            body, media_type = stored
            return httpx.Response(
                200,
                content=body,
                headers={"Content-Type": media_type, "Docker-Content-Digest": _digest(body)},
            )

        return httpx.Response(405)

    # -- helpers for tests ---------------------------------------------------

    def put_manifest(self, repo: str, ref: str, body: bytes, media_type: str) -> None:
        self.manifests[(repo, ref)] = (body, media_type)
        self.manifests[(repo, _digest(body))] = (body, media_type)

    def put_blob(self, repo: str, data: bytes) -> str:
        digest = _digest(data)
        self.blobs[(repo, digest)] = data
        return digest

    def requests(self, method: str, fragment: str = "") -> list[str]:
        return [p for m, p in self.log if m == method and fragment in p]


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


def write_stack(stacks_dir: Path, name: str, content: bytes) -> Path:
    path = stacks_dir / name / "devfile.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def write_index(path: Path, entries: list[dict]) -> Path:
    path.write_text(json.dumps(entries), encoding="utf-8")
    return path


@pytest.fixture
def config(tmp_path: Path) -> DevregConfig:
    """Config pointing at a temp stacks dir holding a single ``go`` stack."""
    stacks_dir = tmp_path / "stacks"
    write_stack(stacks_dir, "go", b"schemaVersion: 2.0.0")
    index_path = write_index(
        tmp_path / "index.json",
        [{"name": "go", "displayName": "Go Runtime", "links": {"self": "go"}}],
    )
    return DevregConfig(
        registry_host="registry.test:5000",
        stacks_dir=stacks_dir,
        index_path=index_path,
        probe_interval=0.0,
        request_timeout=5.0,
    )
