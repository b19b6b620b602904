"""Artifact references — where each stack lives in the registry."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from devreg.registry.models import BundleDescriptor

DEFAULT_TAG = "latest"


@dataclass(frozen=True)
class ParsedReference:
    """A reference split into its distribution API parts."""

    host: str
    repository: str
    tag: str = DEFAULT_TAG
    digest: str = ""

    @property
    def target(self) -> str:
        """The manifest identifier: the digest when pinned, else the tag."""
        return self.digest or self.tag


def build_reference(descriptor: BundleDescriptor, registry_host: str) -> str:
    """Join the registry host and the descriptor's link path.

    ``build_reference(go, "localhost:5000")`` with ``links.self == "go"``
    gives ``"localhost:5000/go"``. Repeated or trailing slashes are
    collapsed, so the result only changes when the index does.
    """
    return posixpath.normpath(f"{registry_host}/{descriptor.reference}")


def parse_reference(reference: str) -> ParsedReference:
    """Split ``host/repo[:tag][@digest]`` into its parts."""
    host, sep, remainder = reference.partition("/")
    if not sep or not remainder:
        raise ValueError(f"invalid reference {reference!r}: missing repository")

    digest = ""
    if "@" in remainder:
        remainder, digest = remainder.split("@", 1)

    tag = DEFAULT_TAG
    head, _, last = remainder.rpartition("/")
    if ":" in last:
        last, tag = last.split(":", 1)
        remainder = f"{head}/{last}" if head else last

    if not remainder:
        raise ValueError(f"invalid reference {reference!r}: empty repository")
    return ParsedReference(host=host, repository=remainder, tag=tag, digest=digest)
