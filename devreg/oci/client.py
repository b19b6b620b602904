"""OCI distribution client built on httpx.

Covers the handful of distribution API calls the index server needs:
monolithic blob upload, manifest push, and manifest/blob fetch. Each
client owns one ``httpx.AsyncClient`` for the duration of an ``async
with`` block; callers open a fresh client per operation.

HTTP errors are raised as ``httpx.HTTPStatusError`` and network failures
as ``httpx.RequestError``; mapping them onto the devreg error taxonomy is
left to the push and pull paths.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from devreg.registry.media_types import DOCKER_MANIFEST_V2, OCI_IMAGE_MANIFEST
from devreg.registry.models import sha256_digest

MANIFEST_ACCEPT = ", ".join([OCI_IMAGE_MANIFEST, DOCKER_MANIFEST_V2])


class OCIClient:
    """Async client for a single registry, addressed by its base URL.

    Parameters
    ----------
    base_url : str
        Registry URL such as ``http://localhost:5000``.
    timeout : float
        Deadline in seconds applied to every request.
    transport : httpx.AsyncBaseTransport | None
        Optional transport, used by tests to serve an in-memory registry.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> OCIClient:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("OCIClient must be used inside 'async with'")
        return self._client

    # -- blobs ---------------------------------------------------------------

    async def blob_exists(self, repository: str, digest: str) -> bool:
        resp = await self.http.head(f"/v2/{repository}/blobs/{digest}")
        if resp.status_code == 404:
            return False
        resp.raise_for_status()
        return True

    async def push_blob(self, repository: str, data: bytes) -> str:
        """Upload *data* unless the registry already has it; return its digest."""
        digest = sha256_digest(data)
        if await self.blob_exists(repository, digest):
            return digest

        start = await self.http.post(f"/v2/{repository}/blobs/uploads/")
        start.raise_for_status()
        location = start.headers.get("Location")
        if not location:
            raise httpx.HTTPStatusError(
                "registry did not return an upload location",
                request=start.request,
                response=start,
            )

        upload_url = self.http.base_url.join(location)
        resp = await self.http.put(
            upload_url.copy_merge_params({"digest": digest}),
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        resp.raise_for_status()
        return digest

    async def fetch_blob(self, repository: str, digest: str) -> bytes:
        resp = await self.http.get(f"/v2/{repository}/blobs/{digest}")
        resp.raise_for_status()
        return resp.content

    # -- manifests -----------------------------------------------------------

    async def push_manifest(
        self,
        repository: str,
        target: str,
        manifest: bytes,
        media_type: str = OCI_IMAGE_MANIFEST,
    ) -> str:
        """PUT *manifest* under *target* and return its digest."""
        resp = await self.http.put(
            f"/v2/{repository}/manifests/{target}",
            content=manifest,
            headers={"Content-Type": media_type},
        )
        resp.raise_for_status()
        return resp.headers.get("Docker-Content-Digest") or sha256_digest(manifest)

    async def fetch_manifest(self, repository: str, target: str) -> tuple[dict[str, Any], str]:
        """GET the manifest for *target*; return it parsed, with its digest.

        Raises ``ValueError`` when the body is not a JSON object.
        """
        resp = await self.http.get(
            f"/v2/{repository}/manifests/{target}",
            headers={"Accept": MANIFEST_ACCEPT},
        )
        resp.raise_for_status()
        digest = resp.headers.get("Docker-Content-Digest") or sha256_digest(resp.content)
        manifest = json.loads(resp.content)
        if not isinstance(manifest, dict):
            raise ValueError(f"expected a JSON object, got {type(manifest).__name__}")
        return manifest, digest
