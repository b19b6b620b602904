"""Startup phase — gate on the registry, load the index, push every stack.

Runs strictly in sequence. Any failure ends the phase and is recorded in the
returned ``StartupResult``; the entry point decides what to do with it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from devreg.config import DevregConfig
from devreg.registry.errors import DevregError
from devreg.registry.index import load_index
from devreg.registry.models import StartupResult
from devreg.sync.pusher import push_bundle
from devreg.sync.readiness import await_ready

logger = logging.getLogger(__name__)


async def run_startup(
    config: DevregConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> StartupResult:
    """Run the readiness gate, index load and full sync once."""
    result = StartupResult()
    try:
        await await_ready(
            config.registry_url,
            interval=config.probe_interval,
            timeout=config.request_timeout,
            transport=transport,
            sleep=sleep,
        )
        result.index = load_index(config.index_path)
        logger.info("Loaded %d stack(s) from %s", len(result.index), config.index_path)

        for descriptor in result.index:
            result.pushed.append(await push_bundle(descriptor, config, transport=transport))
    except DevregError as exc:
        logger.error("Startup failed: %s", exc)
        result.error = exc
    return result
