"""OCI media types and artifact constants for devfile stacks."""

from __future__ import annotations

# Custom devfile types; every push and pull must agree on both
DEVFILE_CONFIG_MEDIA_TYPE = "application/vnd.devfileio.devfile.config.v2+json"
DEVFILE_MEDIA_TYPE = "application/vnd.devfileio.devfile.layer.v1"

# OCI standard manifest types
OCI_IMAGE_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
DOCKER_MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"

# Config blob pushed alongside every devfile layer
DEVFILE_CONFIG_BYTES = b"{}"

# Layers are looked up by this annotation on pull
TITLE_ANNOTATION = "org.opencontainers.image.title"

DEVFILE_NAME = "devfile.yaml"

ALLOWED_MEDIA_TYPES = (DEVFILE_MEDIA_TYPE,)
