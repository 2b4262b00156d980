# wikiukbot/cli/generic.py
from __future__ import annotations

import json
from dataclasses import asdict

import typer
from dotenv import find_dotenv, load_dotenv
from rich import print
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from wikiukbot import config
from wikiukbot.datatypes import UpstreamError
from wikiukbot.inline import QueryHandler
from wikiukbot.utils import ensure_random_strategy, setup_logging
from wikiukbot.wiki_client import WikiClient

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """
    Search Ukrainian Wikipedia from Telegram inline mode.
    """
    # a missing .env file is fine; the environment may already be set
    load_dotenv(find_dotenv(usecwd=True))
    setup_logging(verbose)


def _fail(exc: UpstreamError) -> None:
    print(Panel.fit(f"[bold red]Wikipedia request failed:[/bold red] {escape(str(exc))}"))
    raise typer.Exit(code=1)


@app.command()
def search(
    query: str = typer.Argument(..., help="Title prefix to search for"),
    k: int = typer.Option(
        config.DEFAULT_SEARCH_LIMIT, "--k", help="Number of results to return (max 50)"
    ),
    json_out: bool = typer.Option(False, "--json", help="Emit JSON instead of table"),
) -> None:
    """
    Prefix-search Wikipedia article titles, in rank order.
    """
    query = query.strip()
    if not query:
        raise typer.BadParameter("must not be blank", param_hint="QUERY")

    client = WikiClient(search_limit=k)
    try:
        results = client.search(query)
    except UpstreamError as exc:
        _fail(exc)
        return

    if json_out:
        print(json.dumps([asdict(r) for r in results], indent=2, ensure_ascii=False))
        return

    if not results:
        print(Panel.fit(f"[bold red]No results for:[/bold red] {query!r}"))
        return

    table = Table(title=f"Search results for: {query!r}")
    table.add_column("#", justify="right", style="bold")
    table.add_column("Page ID", justify="right")
    table.add_column("Title")
    table.add_column("Description")

    for r in results:
        table.add_row(str(r.rank_index), str(r.page_id), r.title, r.description or "")

    print(table)


@app.command()
def random(
    strategy: str = typer.Option(
        config.DEFAULT_RANDOM_STRATEGY, help="'list' (API) or 'redirect' (Special:Random)"
    ),
) -> None:
    """
    Print a random article title and its URL.
    """
    client = WikiClient(random_strategy=ensure_random_strategy(strategy))  # type: ignore[arg-type]
    try:
        ref = client.get_random_article()
    except UpstreamError as exc:
        _fail(exc)
        return

    print(Panel.fit(f"[bold]{ref.title}[/bold]\n{ref.url}"))


@app.command()
def answer(
    query: str = typer.Argument("", help="Raw inline query text (empty = random article)"),
) -> None:
    """
    Show the inline answer the bot would send for a query, as JSON.
    """
    handler = QueryHandler(WikiClient())
    try:
        result = handler.handle(query)
    except UpstreamError as exc:
        _fail(exc)
        return

    print(json.dumps(asdict(result), indent=2, ensure_ascii=False))
