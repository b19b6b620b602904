"""devreg CLI — run the index server or drive the sync engine by hand."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from devreg import __version__
from devreg.config import DevregConfig, configure_logging

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--registry-host", default=None, help="Registry host:port (DEVREG_REGISTRY_HOST)")
@click.option(
    "--stacks-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding <stack>/devfile.yaml (DEVREG_STACKS_DIR)",
)
@click.option(
    "--index",
    "index_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Index file (DEVREG_INDEX_PATH)",
)
@click.option("--log-level", default=None, help="Logging level (LOG_LEVEL)")
@click.pass_context
def main(ctx, registry_host, stacks_dir, index_path, log_level):
    """devreg — serve devfile stacks through an OCI registry.

    Settings come from DEVREG_* environment variables; the options above
    override them.
    """
    config = DevregConfig.from_env().with_overrides(
        registry_host=registry_host,
        stacks_dir=stacks_dir,
        index_path=index_path,
        log_level=log_level,
    )
    configure_logging(config.log_level)
    ctx.obj = config


def _startup_or_exit(config: DevregConfig):
    from devreg.sync.startup import run_startup

    result = asyncio.run(run_startup(config))
    if not result.ok:
        console.print(f"[red]{result.summary()}[/]")
        sys.exit(1)
    return result


# ── Serve ────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default=None, help="Bind address (DEVREG_HOST)")
@click.option("--port", default=None, type=int, help="Bind port (DEVREG_PORT)")
@click.pass_obj
def serve(config: DevregConfig, host: str | None, port: int | None):
    """Push every stack, then serve the index over HTTP.

    The server only starts listening once all stacks are in the registry.
    """
    import uvicorn

    from web.backend.app.context import ServerContext
    from web.backend.app.main import create_app

    config = config.with_overrides(host=host, port=port)
    result = _startup_or_exit(config)
    console.print(f"[green]{result.summary()}[/]")

    app = create_app(ServerContext.from_startup(config, result))
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


# ── Sync ─────────────────────────────────────────────────────────────


@main.command()
@click.pass_obj
def sync(config: DevregConfig):
    """Push every stack in the index without starting the server."""
    result = _startup_or_exit(config)

    table = Table(title=f"Pushed stacks ({len(result.pushed)})")
    table.add_column("Name", style="cyan")
    table.add_column("Reference")
    table.add_column("Digest", style="dim")
    for pushed in result.pushed:
        table.add_row(pushed.name, pushed.reference, pushed.digest)
    console.print(table)


# ── Pull ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.option(
    "--output",
    "-o",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the devfile here instead of stdout",
)
@click.pass_obj
def pull(config: DevregConfig, name: str, output: Path | None):
    """Pull one stack's devfile from the registry."""
    from devreg.registry.errors import DevregError
    from devreg.registry.index import load_index
    from devreg.sync.puller import resolve

    try:
        index = load_index(config.index_path)
        content, _ = asyncio.run(resolve(name, index, config))
    except DevregError as e:
        console.print(f"[red]Pull failed:[/] {e}")
        sys.exit(1)

    if output:
        output.write_bytes(content)
        console.print(f"[green]Devfile written to:[/] {output}")
    else:
        click.echo(content.decode("utf-8", errors="replace"), nl=False)


# ── Reference ────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.pass_obj
def reference(config: DevregConfig, name: str):
    """Show the registry reference a stack is stored under."""
    from devreg.registry.errors import DevregError
    from devreg.registry.index import load_index
    from devreg.registry.reference import build_reference

    try:
        descriptor = load_index(config.index_path).get(name)
    except DevregError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    click.echo(build_reference(descriptor, config.registry_host))


if __name__ == "__main__":
    main()
