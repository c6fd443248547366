"""Rendering of resolution outcomes and search listings as Rich output."""

from typing import Sequence

from rich.console import Console
from rich.table import Table

from animatch.models.decision import Ambiguous, ConfidentMatch, MatchDecision, NoMatch
from animatch.models.links import AnimeLink, EpisodeLink, ListingReference, ResultItem


def render_decision(decision: MatchDecision, console: Console | None = None) -> None:
    """Print a decision: the match, or the ranked candidates when ambiguous."""
    console = console or Console()

    if isinstance(decision, NoMatch):
        console.print(f"[red]No matching anime found for '{decision.query.title}'.[/red]")
        return

    if isinstance(decision, ConfidentMatch):
        link = decision.candidate
        console.print(
            f"[bold green]Match:[/bold green] {link.title} "
            f"[dim]({decision.score:.4f})[/dim]"
        )
        console.print(f"  {link.link}", style="cyan")
        return

    render_candidates(decision, console)
    console.print(
        "[yellow]No confident match. Pick the right anime from the list above.[/yellow]"
    )


def render_candidates(decision: Ambiguous, console: Console) -> None:
    """Print the ranked candidates of an ambiguous decision."""
    table = Table(title=f"Candidates for '{decision.query.title}'")
    table.add_column("Option", style="cyan")
    table.add_column("Title", style="magenta")
    table.add_column("Score", style="green", justify="right")
    table.add_column("Link", style="yellow")

    for i, scored in enumerate(decision.candidates, 1):
        style = "bold" if scored is decision.best else None
        table.add_row(
            str(i),
            scored.candidate.title,
            f"{scored.score:.4f}",
            scored.candidate.link,
            style=style,
        )
    console.print(table)


def _describe(item: ResultItem) -> tuple[str, str, str]:
    if isinstance(item, AnimeLink):
        return ("anime", item.title, item.link)
    if isinstance(item, EpisodeLink):
        return ("episode", f"{item.anime.title}: {item.name}", item.identifier)
    if isinstance(item, ListingReference):
        return ("listing", item.name, f"{item.service}:{item.identifier}")
    return ("unknown", str(item), "")


def render_results(
    keyword: str,
    page: int,
    items: Sequence[ResultItem],
    more_available: bool,
    console: Console | None = None,
) -> None:
    """Print one page of raw search results."""
    console = console or Console()
    if not items:
        console.print(f"[yellow]No results on page {page} for '{keyword}'.[/yellow]")
        return

    table = Table(title=f"Results for '{keyword}' (page {page})")
    table.add_column("Kind", style="cyan")
    table.add_column("Title", style="magenta")
    table.add_column("Link", style="yellow")
    for item in items:
        table.add_row(*_describe(item))
    console.print(table)
    if more_available:
        console.print(f"More results available: use --page {page + 1}")
