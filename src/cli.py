"""
Command-line interface for signal-network.

Provides the API server and read-only diagnostic commands against the
configured key-value store.

Usage:
    signal-network serve           # Run the API server
    signal-network health          # Check store connectivity
    signal-network beats           # List beats and their claimants
    signal-network brief           # Print the latest brief
    signal-network correspondents  # Print the leaderboard
"""

import asyncio
import json
import sys

import click

from src.config.settings import get_settings
from src.observability.logging import setup_logging
from src.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Signal Network - beats, signals and daily intelligence briefs."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the signal-network API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    # Start metrics server on separate port
    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@main.command()
def health() -> None:
    """Check connectivity to the key-value store."""
    from src.storage.kv import create_store

    async def check() -> bool:
        store = create_store()
        try:
            return await store.health_check()
        finally:
            await store.close()

    settings = get_settings()
    healthy = asyncio.run(check())

    click.echo("\nHealth Check Results:")
    click.echo("-" * 40)
    icon = "✓" if healthy else "✗"
    color = "green" if healthy else "red"
    click.echo(click.style(f"  {icon} store ({settings.store_backend}): {healthy}", fg=color))
    click.echo(f"  brief access: {settings.brief_access_mode}")
    click.echo("-" * 40)

    if healthy:
        click.echo(click.style("Store healthy!", fg="green"))
        sys.exit(0)
    click.echo(click.style("Store unreachable!", fg="red"))
    sys.exit(1)


@main.command()
def beats() -> None:
    """List registered beats with status and claimant."""
    from src.beats.registry import BeatRegistry
    from src.storage.kv import create_store

    async def run():
        store = create_store()
        try:
            return await BeatRegistry(store).list_beats()
        finally:
            await store.close()

    registered = asyncio.run(run())
    if not registered:
        click.echo("No beats registered.")
        return

    click.echo(f"\n{'SLUG':<30} {'STATUS':<10} {'CLAIMED BY':<45} NAME")
    click.echo("-" * 100)
    for beat in registered:
        color = "green" if beat.is_active else "yellow"
        click.echo(
            click.style(f"{beat.slug:<30} {beat.status:<10} ", fg=color)
            + f"{beat.claimed_by:<45} {beat.name}"
        )
    click.echo(f"\n{len(registered)} beats")


@main.command()
@click.option("--date", "day", default=None, help="Brief date (YYYY-MM-DD); latest if omitted")
@click.option("--json", "as_json", is_flag=True, help="Print the structured edition")
def brief(day: str | None, as_json: bool) -> None:
    """Print a compiled brief."""
    from src.briefs.archive import BriefArchive
    from src.common.errors import SignalNetworkError
    from src.storage.kv import create_store

    async def run():
        store = create_store()
        try:
            archive = BriefArchive(store)
            if day:
                return await archive.get(day)
            latest, _ = await archive.latest()
            return latest
        finally:
            await store.close()

    try:
        compiled = asyncio.run(run())
    except SignalNetworkError as e:
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        if e.hint:
            click.echo(e.hint, err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(compiled.report(), indent=2))
    else:
        click.echo(compiled.text)


@main.command()
@click.option("--limit", default=20, help="Maximum rows to show")
def correspondents(limit: int) -> None:
    """Print the correspondent leaderboard."""
    from src.beats.registry import BeatRegistry
    from src.correspondents.service import CorrespondentService
    from src.revenue.settlement import RevenueSettlement
    from src.signals.ledger import SignalLedger
    from src.storage.kv import create_store
    from src.streaks.engine import StreakEngine

    async def run():
        store = create_store()
        try:
            registry = BeatRegistry(store)
            streaks = StreakEngine(store)
            service = CorrespondentService(
                registry,
                SignalLedger(store, registry, streaks),
                streaks,
                RevenueSettlement(store),
            )
            return await service.leaderboard()
        finally:
            await store.close()

    rows = asyncio.run(run())
    if not rows:
        click.echo("No correspondents yet.")
        return

    click.echo(f"\n{'#':<4} {'ADDRESS':<20} {'SCORE':>7} {'SIGNALS':>8} {'STREAK':>7} {'EARNED':>8}")
    click.echo("-" * 60)
    for rank, row in enumerate(rows[:limit], 1):
        click.echo(
            f"{rank:<4} {row['addressShort']:<20} {row['score']:>7} "
            f"{row['signalCount']:>8} {row['streak']:>7} {row['earnings']['total']:>8}"
        )


if __name__ == "__main__":
    main()
