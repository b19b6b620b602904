"""Registry data models — stack descriptors, payloads and results."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from devreg.registry.media_types import DEVFILE_MEDIA_TYPE, DEVFILE_NAME

if TYPE_CHECKING:
    from devreg.registry.index import BundleIndex


def sha256_digest(data: bytes) -> str:
    """Return the OCI digest string (``sha256:<hex>``) for *data*."""
    return "sha256:" + hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class BundleDescriptor:
    """A single stack listed in the registry index."""

    name: str
    reference: str  # links.self, e.g. "devfile-catalog/go:1.0.0"
    display_name: str = ""
    description: str = ""

    @property
    def source_path(self) -> str:
        """Devfile location relative to the stacks directory."""
        return f"{self.name}/{DEVFILE_NAME}"


@dataclass(frozen=True)
class ArtifactPayload:
    """Raw devfile bytes plus the media type and title they are stored under."""

    content: bytes
    media_type: str = DEVFILE_MEDIA_TYPE
    title: str = DEVFILE_NAME

    @property
    def digest(self) -> str:
        return sha256_digest(self.content)

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class PushResult:
    """Outcome of pushing one stack."""

    name: str
    reference: str
    digest: str  # manifest digest reported for the push


@dataclass
class StartupResult:
    """Outcome of the whole startup phase, inspected once by the entry point."""

    index: BundleIndex | None = None
    pushed: list[PushResult] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.index is not None

    def summary(self) -> str:
        if self.ok:
            return f"Pushed {len(self.pushed)} stack(s) to the registry"
        return f"Startup failed after {len(self.pushed)} push(es): {self.error}"
