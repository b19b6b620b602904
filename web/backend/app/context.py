"""Shared, read-only state handed to every request handler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from devreg.config import DevregConfig
from devreg.registry.index import BundleIndex
from devreg.registry.models import StartupResult


@dataclass(frozen=True)
class ServerContext:
    """Config plus the index snapshot produced by a successful startup."""

    config: DevregConfig
    index: BundleIndex
    transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def from_startup(
        cls,
        config: DevregConfig,
        startup: StartupResult,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> ServerContext:
        """Build the context, refusing a startup that did not finish cleanly."""
        if not startup.ok or startup.index is None:
            raise ValueError(f"cannot serve an incomplete catalog: {startup.summary()}")
        return cls(config=config, index=startup.index, transport=transport)
