"""CLI: moviesearch config show|set"""

import json
from typing import Optional

import click
from rich.console import Console

from moviesearch.config import CONFIG_FILE, load_config, save_config

console = Console()


@click.group()
def config():
    """Client configuration."""


@config.command("show")
def config_show():
    """Print the effective configuration."""
    click.echo(json.dumps(load_config().model_dump(), indent=2))


@config.command("set")
@click.option("--base-url", default=None, help="Search service URL.")
@click.option("--result-count", "-k", default=None, type=click.IntRange(1, 100))
@click.option("--alpha", default=None, type=click.FloatRange(0.0, 1.0), help="Vector vs. keyword blend.")
@click.option("--reveal-interval", default=None, type=click.FloatRange(min=0.0), help="Seconds per revealed character.")
def config_set(base_url: Optional[str], result_count: Optional[int], alpha: Optional[float], reveal_interval: Optional[float]):
    """Update the saved configuration."""
    updates = {
        key: value
        for key, value in {
            "base_url": base_url,
            "result_count": result_count,
            "alpha": alpha,
            "reveal_interval": reveal_interval,
        }.items()
        if value is not None
    }
    if not updates:
        console.print("[yellow]Nothing to update.[/yellow]")
        return
    cfg = load_config(apply_env=False).model_copy(update=updates)
    save_config(cfg)
    console.print(f"[green]Saved {', '.join(sorted(updates))} to {CONFIG_FILE}[/green]")
