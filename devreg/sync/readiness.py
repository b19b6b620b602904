"""Readiness gate — block until the registry answers a bare GET with 200."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from devreg.registry.errors import TransportError

logger = logging.getLogger(__name__)


async def await_ready(
    endpoint: str,
    interval: float = 1.0,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Probe *endpoint* until it returns HTTP 200.

    Non-200 answers are retried forever, *interval* seconds apart. A
    transport failure (refused connection, unresolvable host, timeout) or a
    malformed endpoint raises ``TransportError`` instead of retrying, since
    a wrong endpoint would otherwise spin forever.

    Returns the number of probes made.
    """
    attempts = 0
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(timeout), transport=transport
    ) as client:
        while True:
            attempts += 1
            try:
                resp = await client.get(endpoint)
            except httpx.TransportError as exc:
                raise TransportError(f"registry at {endpoint} is unreachable: {exc}") from exc
            except httpx.InvalidURL as exc:
                raise TransportError(f"registry endpoint {endpoint!r} is invalid: {exc}") from exc

            if resp.status_code == httpx.codes.OK:
                logger.info("Registry is up and running (%d probe(s))", attempts)
                return attempts

            logger.info(
                "Waiting for registry to start... (attempt %d, status %d)",
                attempts,
                resp.status_code,
            )
            await sleep(interval)
