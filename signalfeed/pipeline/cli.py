"""CLI interface for SignalFeed.

Usage:
    signalfeed feed "react performance"
    signalfeed feed "rust async" --limit 5 --json
    signalfeed sources
    signalfeed serve --port 4000
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from signalfeed.config import DEFAULT_CONFIG_PATH, load_config
from signalfeed.connectors.factory import build_connectors
from signalfeed.errors import InvalidTopicError
from signalfeed.pipeline.service import FeedService, build_guards
from signalfeed.validation import sanitize_topic, validate_topic

console = Console()


def run_async(coro):
    """Run an async function to completion on a fresh event loop."""
    return asyncio.run(coro)


@click.group()
@click.option("--config", default=DEFAULT_CONFIG_PATH, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx, config: str, verbose: bool):
    """SignalFeed: ranked articles for a topic."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config)


@cli.command()
@click.argument("topic")
@click.option("--limit", "-n", default=20, help="Max results")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def feed(ctx, topic: str, limit: int, as_json: bool):
    """Fetch, score and rank articles for TOPIC."""
    try:
        topic = sanitize_topic(validate_topic(topic))
    except InvalidTopicError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    service = FeedService.from_config(ctx.obj["config"])

    async def _run():
        with console.status(f"[bold green]Ranking articles for {topic!r}..."):
            return await service.get_ranked_feed(topic)

    items = run_async(_run())[:limit]

    if as_json:
        click.echo(json.dumps([it.to_dict() for it in items], indent=2))
        return
    if not items:
        console.print(f"[yellow]No results for:[/yellow] {topic}")
        return

    table = Table(title=f"Ranked feed: {topic}")
    table.add_column("#", style="dim", width=4)
    table.add_column("Score", justify="right", style="green")
    table.add_column("Breakdown", style="dim")
    table.add_column("Source", style="cyan")
    table.add_column("Title", max_width=60)
    for i, item in enumerate(items, 1):
        table.add_row(
            str(i),
            f"{item.score:.3f}",
            item.explanation,
            item.source.value,
            f"[link={item.url}]{item.title}[/link]",
        )
    console.print(table)


@cli.command()
@click.pass_context
def sources(ctx):
    """List configured sources in registration order."""
    table = Table(title="Sources")
    table.add_column("#", style="dim", width=4)
    table.add_column("ID", style="cyan")
    table.add_column("Platform")
    table.add_column("URL")
    for i, connector in enumerate(build_connectors(ctx.obj["config"]), 1):
        table.add_row(str(i), connector.source_id, connector.source.value, getattr(connector, "url", ""))
    console.print(table)


@cli.command()
@click.option("--host", default=None, help="Bind address (default from config)")
@click.option("--port", type=int, default=None, help="Port (default from config)")
@click.pass_context
def serve(ctx, host: Optional[str], port: Optional[int]):
    """Serve the ranked feed over HTTP."""
    from aiohttp import web

    from signalfeed.pipeline.server import create_app

    config = ctx.obj["config"]
    server_cfg = config.get("server", {})
    deduplicator, rate_limiter = build_guards(config)
    service = FeedService.from_config(config, deduplicator=deduplicator, rate_limiter=rate_limiter)
    web.run_app(
        create_app(service),
        host=host or server_cfg.get("host", "0.0.0.0"),
        port=port or int(server_cfg.get("port", 4000)),
    )


def main():
    cli()


if __name__ == "__main__":
    main()
