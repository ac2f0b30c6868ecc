"""CLI: moviesearch search"""

from typing import Optional

import click
from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

from moviesearch.models.overview import DecodeStatus, Overview
from moviesearch.models.query import Query, SessionSnapshot
from moviesearch.models.results import ResultPage
from moviesearch.reveal import RevealFrame

console = Console()

MAX_EXPLANATIONS = 5
CURSOR = "▌"


def _get_client():
    from moviesearch.cli.main import _get_client
    return _get_client()


def _run(coro):
    from moviesearch.cli.main import _run
    return _run(coro)


def _results_table(page: ResultPage) -> Table:
    table = Table(title=f"{page.total_count} results for “{page.query}”")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Year")
    table.add_column("Genres")
    table.add_column("Rating", justify="right")
    for rank, movie in enumerate(page.items, start=1):
        year = (movie.release_date or "")[:4]
        rating = f"{movie.vote_average:.1f}" if movie.vote_average is not None else ""
        table.add_row(str(rank), movie.title, year, movie.genres or "", rating)
    return table


def _print_overview_footer(overview: Overview) -> None:
    for index, exp in enumerate(overview.explanations[:MAX_EXPLANATIONS], start=1):
        console.print(f"  [dim]{index}.[/dim] [bold]{exp.title}[/bold] — {exp.explanation}")
    meta = overview.metadata
    details = [f"decode: {meta.decode_status.value}"]
    if meta.model:
        details.append(meta.model)
    if meta.generation_time_ms:
        details.append(f"{meta.generation_time_ms / 1000:.1f}s")
    console.print(f"[dim]{' · '.join(details)}[/dim]")
    if meta.decode_status == DecodeStatus.REPAIRED:
        console.print("[yellow]The overview was partially recovered from a malformed response.[/yellow]")
    elif meta.decode_status == DecodeStatus.ERROR and meta.error:
        console.print(f"[yellow]Overview generation failed: {meta.error}[/yellow]")


@click.command("search")
@click.argument("query")
@click.option("--overview/--no-overview", default=True, help="Ask for an AI overview of the matches.")
@click.option("-k", "--count", "count", default=None, type=click.IntRange(1, 100), help="Number of results.")
@click.option("--alpha", default=None, type=click.FloatRange(0.0, 1.0), help="Vector vs. keyword blend.")
@click.option("--json-output", "--json", is_flag=True)
def search_cmd(query: str, overview: bool, count: Optional[int], alpha: Optional[float], json_output: bool):
    """Search movies. Results print as soon as they arrive; the overview follows."""
    if not query.strip():
        raise click.UsageError("QUERY must not be empty.")

    async def _search():
        async with _get_client() as client:
            orchestrator = client.orchestrator()
            revealer = client.revealer()
            live: Optional[Live] = None
            shown_results = False

            def on_frame(frame: RevealFrame) -> None:
                if live is not None:
                    live.update(Text(frame.text if frame.done else frame.text + CURSOR))

            def on_change(snap: SessionSnapshot) -> None:
                nonlocal live, shown_results
                if json_output:
                    return
                if snap.results is not None and not shown_results:
                    shown_results = True
                    console.print(_results_table(snap.results))
                    if snap.query is not None and snap.query.wants_overview and snap.error is None:
                        console.print("[dim]Generating overview...[/dim]")
                if snap.overview is not None and snap.overview.summary_text:
                    if live is None:
                        console.rule("AI Overview")
                        live = Live(Text(""), console=console, auto_refresh=True)
                        live.start()
                    revealer.show(snap.overview.summary_text, on_frame)

            remove = orchestrator.add_listener(on_change)
            orchestrator.submit(Query(
                text=query,
                wants_overview=overview,
                result_count=count or client.result_count,
                alpha=alpha if alpha is not None else client.alpha,
            ))
            try:
                snap = await orchestrator.wait()
                await revealer.wait()
            finally:
                remove()
                revealer.stop()
                if live is not None:
                    live.stop()

        if json_output:
            click.echo(snap.model_dump_json(indent=2))
        elif snap.overview is not None and snap.overview.has_content:
            _print_overview_footer(snap.overview)
        elif overview and snap.error is None:
            console.print("[dim]No overview was generated for this search.[/dim]")

        if snap.error is not None:
            console.print(f"[red]{snap.error.message}[/red]")
            return 1
        return 0

    code = _run(_search())
    if code:
        raise SystemExit(code)

