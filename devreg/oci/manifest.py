"""OCI image manifests for single-file devfile artifacts."""

from __future__ import annotations

import json
from typing import Any

from devreg.registry.media_types import (
    DEVFILE_CONFIG_BYTES,
    DEVFILE_CONFIG_MEDIA_TYPE,
    OCI_IMAGE_MANIFEST,
    TITLE_ANNOTATION,
)
from devreg.registry.models import ArtifactPayload, sha256_digest


def config_descriptor(config: bytes = DEVFILE_CONFIG_BYTES) -> dict[str, Any]:
    return {
        "mediaType": DEVFILE_CONFIG_MEDIA_TYPE,
        "digest": sha256_digest(config),
        "size": len(config),
    }


def layer_descriptor(payload: ArtifactPayload) -> dict[str, Any]:
    return {
        "mediaType": payload.media_type,
        "digest": payload.digest,
        "size": payload.size,
        "annotations": {TITLE_ANNOTATION: payload.title},
    }


def build_manifest(
    payloads: list[ArtifactPayload],
    config: bytes = DEVFILE_CONFIG_BYTES,
) -> bytes:
    """Serialize an image manifest for *payloads*.

    Keys are sorted and separators fixed so the same payloads always yield
    the same bytes, and therefore the same manifest digest.
    """
    manifest = {
        "schemaVersion": 2,
        "mediaType": OCI_IMAGE_MANIFEST,
        "config": config_descriptor(config),
        "layers": [layer_descriptor(p) for p in payloads],
    }
    return json.dumps(manifest, sort_keys=True, separators=(",", ":")).encode("utf-8")


def allowed_layers(manifest: dict[str, Any], allowed_media_types) -> list[dict[str, Any]]:
    """Return the manifest layers whose media type is allow-listed."""
    layers = manifest.get("layers")
    if not isinstance(layers, list):
        return []
    return [
        layer
        for layer in layers
        if isinstance(layer, dict) and layer.get("mediaType") in allowed_media_types
    ]


def find_layer(layers: list[dict[str, Any]], title: str) -> dict[str, Any] | None:
    """Find the layer annotated with *title*."""
    for layer in layers:
        annotations = layer.get("annotations")
        if isinstance(annotations, dict) and annotations.get(TITLE_ANNOTATION) == title:
            return layer
    return None
