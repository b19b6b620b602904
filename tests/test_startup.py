"""Tests for the gated startup phase."""

import asyncio

import httpx
import pytest

from devreg.registry.errors import IndexLoadError, PushError, ReadError, TransportError
from devreg.sync.startup import run_startup

from web.backend.app.context import ServerContext

from tests.conftest import write_index, write_stack


async def _no_sleep(seconds: float) -> None:
    return None


def test_startup_pushes_every_stack_in_order(registry, config, tmp_path):
    write_stack(config.stacks_dir, "nodejs", b"schemaVersion: 2.1.0")
    write_index(
        config.index_path,
        [
            {"name": "nodejs", "links": {"self": "devfile-catalog/nodejs:1.0.1"}},
            {"name": "go", "links": {"self": "go"}},
        ],
    )
    registry.ping_statuses = [502, 502]

    result = asyncio.run(run_startup(config, transport=registry.transport, sleep=_no_sleep))

    assert result.ok, result.summary()
    assert [p.name for p in result.pushed] == ["nodejs", "go"]
    assert [p.reference for p in result.pushed] == [
        "registry.test:5000/devfile-catalog/nodejs:1.0.1",
        "registry.test:5000/go",
    ]
    assert registry.requests("PUT", "/manifests/") == [
        "/v2/devfile-catalog/nodejs/manifests/1.0.1",
        "/v2/go/manifests/latest",
    ]
    # Three probes happen before anything is pushed
    assert [m for m, _ in registry.log[:3]] == ["GET", "GET", "GET"]
    assert registry.log[3][1] != "/"


def test_startup_stops_at_first_push_failure(registry, config):
    write_index(
        config.index_path,
        [
            {"name": "go", "links": {"self": "go"}},
            {"name": "python", "links": {"self": "python"}},
            {"name": "java", "links": {"self": "java"}},
        ],
    )
    write_stack(config.stacks_dir, "java", b"schemaVersion: 2.0.0")

    result = asyncio.run(run_startup(config, transport=registry.transport, sleep=_no_sleep))

    assert not result.ok
    assert isinstance(result.error, ReadError)
    assert [p.name for p in result.pushed] == ["go"]
    assert ("java", "latest") not in registry.manifests


def test_startup_registry_rejection(registry, config):
    registry.manifest_put_status = 500
    result = asyncio.run(run_startup(config, transport=registry.transport, sleep=_no_sleep))
    assert isinstance(result.error, PushError)
    assert "failed" in result.summary().lower()


def test_startup_bad_index(registry, config):
    config.index_path.write_text("[{]")
    result = asyncio.run(run_startup(config, transport=registry.transport, sleep=_no_sleep))
    assert isinstance(result.error, IndexLoadError)
    assert result.index is None


def test_startup_unreachable_registry(config):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name or service not known", request=request)

    result = asyncio.run(
        run_startup(config, transport=httpx.MockTransport(refuse), sleep=_no_sleep)
    )
    assert isinstance(result.error, TransportError)
    assert result.pushed == []


def test_server_context_requires_completed_startup(registry, config):
    registry.manifest_put_status = 400
    result = asyncio.run(run_startup(config, transport=registry.transport, sleep=_no_sleep))

    with pytest.raises(ValueError, match="incomplete catalog"):
        ServerContext.from_startup(config, result)


def test_server_context_from_completed_startup(registry, config):
    result = asyncio.run(run_startup(config, transport=registry.transport, sleep=_no_sleep))
    ctx = ServerContext.from_startup(config, result, transport=registry.transport)
    assert ctx.index.names == ["go"]


def test_startup_malformed_registry_host(registry, config):
    bad = config.with_overrides(registry_host="registry.test:not-a-port")

    result = asyncio.run(run_startup(bad, transport=registry.transport, sleep=_no_sleep))

    assert not result.ok
    assert isinstance(result.error, TransportError)
    assert registry.log == []
