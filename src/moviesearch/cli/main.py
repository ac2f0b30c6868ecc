"""
moviesearch CLI — `moviesearch` command.

Commands:
  moviesearch search <query>     Results first, AI overview revealed as it arrives
  moviesearch health             Service liveness
  moviesearch ready              Model readiness
  moviesearch config show|set    Client configuration
"""

import asyncio
import logging

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install moviesearch[cli]")

from moviesearch.client import AsyncMovieSearch
from moviesearch.config import load_config

console = Console()


def _get_client() -> AsyncMovieSearch:
    return AsyncMovieSearch.from_config(load_config())


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
def main(verbose: bool):
    """moviesearch CLI — search movies, with an AI overview of why they match."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommands from separate modules
from moviesearch.cli.search import search_cmd
from moviesearch.cli.service import health_cmd, ready_cmd
from moviesearch.cli.config import config

main.add_command(search_cmd)
main.add_command(health_cmd)
main.add_command(ready_cmd)
main.add_command(config)


if __name__ == "__main__":
    main()
