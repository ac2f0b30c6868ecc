"""CLI: moviesearch health, moviesearch ready"""

import click
from rich.console import Console
from rich.table import Table

from moviesearch.errors import MovieSearchError

console = Console()


def _get_client():
    from moviesearch.cli.main import _get_client
    return _get_client()


def _run(coro):
    from moviesearch.cli.main import _run
    return _run(coro)


@click.command("health")
def health_cmd():
    """Check that the search service is up."""

    async def _health() -> int:
        async with _get_client() as client:
            try:
                result = await client.health()
            except MovieSearchError as e:
                console.print(f"[red]Unhealthy: {e}[/red]")
                return 1
        console.print(f"[green]Service status: {result.status}[/green]")
        return 0

    code = _run(_health())
    if code:
        raise SystemExit(code)


@click.command("ready")
def ready_cmd():
    """Check whether the service has loaded its models."""

    async def _ready() -> int:
        async with _get_client() as client:
            try:
                result = await client.ready()
            except MovieSearchError as e:
                console.print(f"[red]Not reachable: {e}[/red]")
                return 1
        color = "green" if result.models_loaded else "yellow"
        console.print(f"[{color}]Status: {result.status} (models loaded: {result.models_loaded})[/{color}]")
        if result.load_times:
            table = Table(title="Model load times")
            table.add_column("Model", style="bold")
            table.add_column("Seconds", justify="right")
            for name, seconds in result.load_times.items():
                table.add_row(name, f"{seconds:.2f}")
            console.print(table)
        return 0 if result.models_loaded else 1

    code = _run(_ready())
    if code:
        raise SystemExit(code)
