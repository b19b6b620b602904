"""Push path — publish indexed stacks to the registry as OCI artifacts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import httpx

from devreg.config import DevregConfig
from devreg.oci.client import OCIClient
from devreg.oci.manifest import build_manifest
from devreg.registry.errors import PushError, ReadError
from devreg.registry.media_types import (
    DEVFILE_CONFIG_BYTES,
    DEVFILE_MEDIA_TYPE,
    DEVFILE_NAME,
    OCI_IMAGE_MANIFEST,
)
from devreg.registry.models import ArtifactPayload, BundleDescriptor, PushResult
from devreg.registry.reference import build_reference, parse_reference

logger = logging.getLogger(__name__)


def read_payload(descriptor: BundleDescriptor, stacks_dir: str | Path) -> ArtifactPayload:
    """Load ``{stacks_dir}/{name}/devfile.yaml`` as a devfile payload."""
    path = Path(stacks_dir) / descriptor.source_path
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise ReadError(path, exc) from exc
    return ArtifactPayload(content=content, media_type=DEVFILE_MEDIA_TYPE, title=DEVFILE_NAME)


async def push_bundle(
    descriptor: BundleDescriptor,
    config: DevregConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> PushResult:
    """Push one stack's devfile and return the manifest digest.

    Uploads the ``{}`` config blob and the devfile layer, then the manifest
    referencing both. Raises ``ReadError`` when the devfile is missing and
    ``PushError`` for anything the registry rejects.
    """
    payload = read_payload(descriptor, config.stacks_dir)
    ref = build_reference(descriptor, config.registry_host)
    try:
        parsed = parse_reference(ref)
    except ValueError as exc:
        raise PushError(ref, exc) from exc
    manifest = build_manifest([payload])

    logger.info("Pushing %s to %s...", payload.title, ref)
    try:
        async with OCIClient(
            config.registry_url, timeout=config.request_timeout, transport=transport
        ) as client:
            await client.push_blob(parsed.repository, DEVFILE_CONFIG_BYTES)
            await client.push_blob(parsed.repository, payload.content)
            digest = await client.push_manifest(
                parsed.repository, parsed.target, manifest, OCI_IMAGE_MANIFEST
            )
    except httpx.HTTPStatusError as exc:
        raise PushError(ref, f"registry returned {exc.response.status_code}") from exc
    except httpx.RequestError as exc:
        raise PushError(ref, exc) from exc

    logger.info("Pushed to %s with digest %s", ref, digest)
    return PushResult(name=descriptor.name, reference=ref, digest=digest)

