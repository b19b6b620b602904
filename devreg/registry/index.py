"""Index loading — the immutable stack catalog shared by every request."""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping

from devreg.registry.errors import IndexLoadError, NotFoundError
from devreg.registry.models import BundleDescriptor


class BundleIndex:
    """Read-only snapshot of the index, built once at startup.

    Holds descriptors in index order and a name lookup table. Nothing
    mutates it after construction, so concurrent handlers share it freely.
    """

    def __init__(self, descriptors: list[BundleDescriptor] | tuple[BundleDescriptor, ...]):
        self._descriptors = tuple(descriptors)
        by_name: dict[str, BundleDescriptor] = {}
        for descriptor in self._descriptors:
            if descriptor.name in by_name:
                raise IndexLoadError(f"duplicate stack name {descriptor.name!r} in index")
            by_name[descriptor.name] = descriptor
        self._by_name: Mapping[str, BundleDescriptor] = MappingProxyType(by_name)

    def __iter__(self) -> Iterator[BundleDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._descriptors]

    def get(self, name: str) -> BundleDescriptor:
        """Return the descriptor for *name* or raise ``NotFoundError``."""
        try:
            return self._by_name[name]
        except KeyError:
            raise NotFoundError(f"stack {name!r} is not in the index") from None


def load_index(index_path: str | Path) -> BundleIndex:
    """Read the JSON index file into a ``BundleIndex``."""
    path = Path(index_path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise IndexLoadError(f"failed to read index file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise IndexLoadError(f"failed to unmarshal index file {path}: {exc}") from exc

    if not isinstance(data, list):
        raise IndexLoadError(f"index file {path} must contain a JSON array")

    return BundleIndex([_dict_to_descriptor(item, i) for i, item in enumerate(data)])


def _dict_to_descriptor(data: object, position: int) -> BundleDescriptor:
    if not isinstance(data, dict):
        raise IndexLoadError(f"index entry #{position} is not an object")

    name = data.get("name")
    links = data.get("links") or {}
    link = links.get("self") if isinstance(links, dict) else None
    if not name or not isinstance(name, str):
        raise IndexLoadError(f"index entry #{position} has no name")
    if not link or not isinstance(link, str):
        raise IndexLoadError(f"index entry {name!r} has no links.self")

    return BundleDescriptor(
        name=name,
        reference=link,
        display_name=data.get("displayName", ""),
        description=data.get("description", ""),
    )
