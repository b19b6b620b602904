"""Pull path — resolve a stack name into devfile bytes from the registry."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from devreg.config import DevregConfig
from devreg.oci.client import OCIClient
from devreg.oci.manifest import allowed_layers, find_layer
from devreg.registry.errors import (
    IntegrityError,
    MediaTypeError,
    NotFoundError,
    PullError,
)
from devreg.registry.index import BundleIndex
from devreg.registry.media_types import (
    ALLOWED_MEDIA_TYPES,
    DEVFILE_CONFIG_MEDIA_TYPE,
    DEVFILE_NAME,
)
from devreg.registry.models import BundleDescriptor, sha256_digest
from devreg.registry.reference import build_reference, parse_reference

logger = logging.getLogger(__name__)

# Leading bytes of binary formats that may turn up in a stack directory
_SIGNATURES: list[tuple[bytes, str]] = [
    (b"%PDF-", "application/pdf"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
]


def sniff_content_type(data: bytes) -> str:
    """Guess a Content-Type for *data* from its leading bytes.

    Follows the subset of WHATWG MIME sniffing that Go's
    ``http.DetectContentType`` applies: a few binary signatures, XML and
    HTML prefixes, then text versus binary. Anything else falls back to
    ``text/plain`` or ``application/octet-stream``.
    """
    head = data[:512]
    for signature, content_type in _SIGNATURES:
        if head.startswith(signature):
            return content_type

    stripped = head.lstrip(b" \t\r\n")
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    if stripped[:14].lower().startswith((b"<!doctype html", b"<html")):
        return "text/html; charset=utf-8"
    if stripped.startswith(b"{") or stripped.startswith(b"["):
        return "text/plain; charset=utf-8"

    if any(b < 0x20 and b not in (0x09, 0x0A, 0x0C, 0x0D, 0x1B) for b in head):
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


async def pull_bundle(
    descriptor: BundleDescriptor,
    config: DevregConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bytes:
    """Fetch the devfile for *descriptor* from the registry.

    Only layers carrying the devfile media type are considered; content
    pushed under any other type is never returned.

    Raises
    ------
    NotFoundError
        Nothing is stored under the stack's reference.
    MediaTypeError
        The manifest config is not a devfile config.
    IntegrityError
        The manifest has no devfile layer, its blob is missing, or the
        blob fails its digest.
    PullError
        Any other registry or network failure.
    """
    ref = build_reference(descriptor, config.registry_host)
    try:
        parsed = parse_reference(ref)
    except ValueError as exc:
        raise NotFoundError(str(exc)) from exc

    logger.info("Pulling %s from %s...", DEVFILE_NAME, ref)
    async with OCIClient(
        config.registry_url, timeout=config.request_timeout, transport=transport
    ) as client:
        try:
            manifest, manifest_digest = await client.fetch_manifest(
                parsed.repository, parsed.target
            )
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise NotFoundError(f"nothing stored at {ref}") from exc
            raise PullError(ref, f"registry returned {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            raise PullError(ref, exc) from exc
        except ValueError as exc:
            raise PullError(ref, f"malformed manifest: {exc}") from exc

        layer = _select_devfile_layer(manifest, ref)

        try:
            content = await client.fetch_blob(parsed.repository, layer["digest"])
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                logger.error(
                    "Manifest at %s lists %s but blob %s is missing",
                    ref,
                    DEVFILE_NAME,
                    layer["digest"],
                )
                raise IntegrityError(
                    f"{DEVFILE_NAME} blob {layer['digest']} missing from {ref}"
                ) from exc
            raise PullError(ref, f"registry returned {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            raise PullError(ref, exc) from exc

    if sha256_digest(content) != layer["digest"]:
        logger.error("Digest mismatch for %s at %s", DEVFILE_NAME, ref)
        raise IntegrityError(f"{DEVFILE_NAME} from {ref} does not match {layer['digest']}")

    logger.info("Pulled from %s with digest %s", ref, manifest_digest)
    return content


def _select_devfile_layer(manifest: dict, ref: str) -> dict:
    config = manifest.get("config")
    config_type = config.get("mediaType") if isinstance(config, dict) else None
    if config_type != DEVFILE_CONFIG_MEDIA_TYPE:
        logger.error("Artifact at %s has config media type %s", ref, config_type)
        raise MediaTypeError(
            f"artifact at {ref} has config media type {config_type!r}, "
            f"expected {DEVFILE_CONFIG_MEDIA_TYPE!r}"
        )

    layer = find_layer(allowed_layers(manifest, ALLOWED_MEDIA_TYPES), DEVFILE_NAME)
    if layer is None or not isinstance(layer.get("digest"), str) or not layer["digest"]:
        logger.error("Manifest at %s has no %s layer", ref, DEVFILE_NAME)
        raise IntegrityError(f"failed to load {DEVFILE_NAME} from {ref}")
    return layer


async def resolve(
    name: str,
    index: BundleIndex,
    config: DevregConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[bytes, str]:
    """Look *name* up in the index and pull its devfile.

    Returns the bytes and a sniffed content type. Unknown names raise
    ``NotFoundError`` without touching the registry.
    """
    descriptor = index.get(name)
    content = await pull_bundle(descriptor, config, transport=transport)
    return content, sniff_content_type(content)
