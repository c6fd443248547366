"""CLI commands for animatch.

- ``resolve``: find one anime for a title, or list candidates when unsure.
- ``search``: show one page of raw results from a source (the listing used
  for manual disambiguation).
- ``score``: print the proximity of two titles.
- ``config default-source``: persist the default search source.
- ``version``.

The search source is resolved from CLI options, environment and config file
(see animatch.utils.config) and then passed explicitly to the session.
"""

import asyncio
import json
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Annotated, List, Optional, Union

import typer
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from animatch.cli.console import ConsoleManager, is_interactive
from animatch.cli.renderer import render_decision, render_results
from animatch.core.fetching_agent import FetchingAgent
from animatch.core.fuzzy_matcher import title_proximity
from animatch.core.session import FetchingSession
from animatch.errors import ResolutionError, SearchTransportError, SourceConfigurationError
from animatch.models.decision import Ambiguous, MatchDecision
from animatch.models.links import RESULT_ITEMS_ADAPTER, ResultItem
from animatch.models.query import ListingTitles, MatchQuery
from animatch.search import SOURCE_NAMES, SearchSource, build_search_source
from animatch.utils.config import (
    DEFAULT_SEARCH_SOURCE,
    get_catalog_path,
    resolve_setting,
    set_default_search_source,
)
from animatch.utils.debug import set_debug

app = typer.Typer(
    name="animatch",
    help="Match free-text anime titles against a search source.",
    add_completion=False,
)
config_app = typer.Typer(help="Manage persistent animatch settings.")
app.add_typer(config_app, name="config")


class ExitCode(int, Enum):
    """Exit codes for CLI commands."""

    SUCCESS = 0
    ERROR = 1
    MANUAL_NEEDED = 2
    NO_MATCH = 3


SOURCE = Annotated[
    Optional[str],
    typer.Option(
        "--source",
        "-s",
        help=f"Search source ({', '.join(SOURCE_NAMES)}). Defaults to search.source.",
    ),
]

CATALOG = Annotated[
    Optional[Path],
    typer.Option(
        "--catalog",
        help="Catalogue JSON file for the catalog source.",
    ),
]

ALIAS = Annotated[
    Optional[List[str]],
    typer.Option(
        "--alias",
        "-a",
        help="Alternate title of the anime (repeatable). Enables alias-aware scoring.",
    ),
]

JSON_OUTPUT = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Output results in JSON format",
    ),
]

NO_INPUT = Annotated[
    bool,
    typer.Option(
        "--no-input",
        help="Never prompt; exit with a status code instead.",
    ),
]


@app.callback()
def callback(
    no_rich: bool = typer.Option(
        False,
        "--no-rich",
        help="Disable Rich styling and prompts (or set ANIMATCH_NO_RICH).",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Global options."""
    if no_rich:
        os.environ["ANIMATCH_NO_RICH"] = "1"
    if debug:
        set_debug(True)


def _numeric_setting(key: str, kind: type) -> Optional[Union[int, float]]:
    value = resolve_setting(key, default=None)
    if value is None:
        return None
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise SourceConfigurationError(f"Invalid {key}: {value!r}") from exc


def _build_source(source: Optional[str], catalog: Optional[Path]) -> SearchSource:
    name = resolve_setting("search.source", default=DEFAULT_SEARCH_SOURCE, cli_value=source)
    return build_search_source(
        name,
        catalog_path=get_catalog_path(catalog),
        per_page=_numeric_setting("search.per_page", int),
        timeout=_numeric_setting("search.timeout", float),
    )


def _build_query(title: str, aliases: Optional[List[str]]) -> MatchQuery:
    if not aliases:
        return MatchQuery(title=title)
    return MatchQuery.from_reference(
        ListingTitles(default=title, synonyms=tuple(aliases))
    )


def _run_once(
    session: FetchingSession, query: MatchQuery, *, retry: bool
) -> Union[MatchDecision, ResolutionError]:
    """Run one resolution on a fresh event loop and return its outcome."""
    outcome: list[Union[MatchDecision, ResolutionError]] = []
    session.on_decision = outcome.append
    session.on_failure = outcome.append

    async def drive() -> None:
        task = session.retry() if retry else session.start(query)
        await task

    asyncio.run(drive())
    if not outcome:
        raise RuntimeError("Resolution ended without reporting an outcome")
    return outcome[0]


def _prompt_candidate_selection(decision: Ambiguous, console: Console) -> Optional[int]:
    """Ask the user to pick one of the ranked candidates (0 picks none)."""
    count = len(decision.candidates)
    choice = Prompt.ask(
        f"Enter your choice (1-{count}, 0 for none)",
        choices=[str(i) for i in range(0, count + 1)],
        console=console,
    )
    index = int(choice)
    return index - 1 if index > 0 else None


def _emit_json(payload: dict) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


@app.command()
def resolve(
    title: Annotated[str, typer.Argument(help="Anime title to look for")],
    alias: ALIAS = None,
    source: SOURCE = None,
    catalog: CATALOG = None,
    json_output: JSON_OUTPUT = False,
    no_input: NO_INPUT = False,
) -> None:
    """Resolve a title to one anime, or list candidates when unsure."""
    with ConsoleManager() as console:
        try:
            search_source = _build_source(source, catalog)
        except SourceConfigurationError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(ExitCode.ERROR)

        interactive = not (no_input or json_output) and is_interactive()
        query = _build_query(title, alias)
        session = FetchingSession(
            search_source, on_decision=lambda d: None, on_failure=lambda e: None
        )

        retry = False
        while True:
            try:
                outcome = _run_once(session, query, retry=retry)
            except Exception as e:
                console.print(f"[red]Error: {escape(str(e))}[/red]")
                raise typer.Exit(ExitCode.ERROR)
            if not isinstance(outcome, ResolutionError):
                break
            if json_output:
                _emit_json(
                    {
                        "kind": "error",
                        "fetching_error": outcome.is_fetching_error,
                        "message": str(outcome),
                    }
                )
            else:
                console.print(f"[red]Error: {outcome}[/red]")
            if interactive and Confirm.ask("Retry?", default=False, console=console):
                retry = True
                continue
            if isinstance(outcome, SearchTransportError):
                raise typer.Exit(ExitCode.ERROR)
            raise typer.Exit(ExitCode.NO_MATCH)

        decision = outcome
        if json_output:
            _emit_json(decision.to_dict())
        else:
            render_decision(decision, console)

        if not isinstance(decision, Ambiguous):
            raise typer.Exit(ExitCode.SUCCESS)
        if not interactive:
            raise typer.Exit(ExitCode.MANUAL_NEEDED)

        picked = _prompt_candidate_selection(decision, console)
        if picked is None:
            console.print("[yellow]Nothing selected.[/yellow]")
            raise typer.Exit(ExitCode.MANUAL_NEEDED)
        chosen = decision.candidates[picked].candidate
        console.print(f"[bold green]Selected:[/bold green] {chosen.title}")
        console.print(f"  {chosen.link}", style="cyan")


async def _fetch_listing(
    search_source: SearchSource, keyword: str, page: int
) -> tuple[list[ResultItem], bool]:
    agent = FetchingAgent.search(keyword, search_source)
    try:
        items = await agent.fetch_page(page)
        return items, agent.more_available
    finally:
        agent.cancel()


@app.command()
def search(
    keyword: Annotated[str, typer.Argument(help="Search keyword")],
    page: Annotated[int, typer.Option("--page", "-p", min=0, help="Page to show")] = 0,
    source: SOURCE = None,
    catalog: CATALOG = None,
    json_output: JSON_OUTPUT = False,
) -> None:
    """Show one page of raw search results."""
    with ConsoleManager() as console:
        try:
            search_source = _build_source(source, catalog)
            items, more = asyncio.run(_fetch_listing(search_source, keyword, page))
        except SourceConfigurationError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(ExitCode.ERROR)
        except Exception as e:
            console.print(f"[red]Error: {SearchTransportError.wrap(e)}[/red]")
            raise typer.Exit(ExitCode.ERROR)

        if json_output:
            _emit_json(
                {
                    "keyword": keyword,
                    "page": page,
                    "more_available": more,
                    "items": RESULT_ITEMS_ADAPTER.dump_python(items, mode="json"),
                }
            )
        else:
            render_results(keyword, page, items, more, console)


@app.command()
def score(
    first: Annotated[str, typer.Argument(help="First title")],
    second: Annotated[str, typer.Argument(help="Second title")],
) -> None:
    """Print the proximity of two titles (0.0 to 1.0)."""
    with ConsoleManager() as console:
        console.print(f"{title_proximity(first, second):.4f}")


@config_app.command("default-source")
def default_source(
    name: Annotated[str, typer.Argument(help="Source name to use by default")],
) -> None:
    """Persist the default search source."""
    with ConsoleManager() as console:
        key = name.strip().lower()
        if key not in SOURCE_NAMES:
            console.print(
                f"[red]Error: unknown source '{name}'. "
                f"Choose one of: {', '.join(SOURCE_NAMES)}[/red]"
            )
            raise typer.Exit(ExitCode.ERROR)
        set_default_search_source(key)
        console.print(f"Default search source set to [bold]{key}[/bold]")


@config_app.command("show")
def show_config() -> None:
    """Show the resolved search settings."""
    with ConsoleManager() as console:
        console.print(
            f"search.source = {resolve_setting('search.source', default=DEFAULT_SEARCH_SOURCE)}"
        )
        console.print(f"search.per_page = {resolve_setting('search.per_page', default=None)}")
        console.print(f"search.timeout = {resolve_setting('search.timeout', default=None)}")
        console.print(f"search.catalog_path = {get_catalog_path()}")


@app.command()
def version() -> None:
    """Show the version of animatch."""
    from animatch.__about__ import __version__

    with ConsoleManager() as console:
        console.print(f"AniMatch version: [bold]{__version__}[/bold]")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
