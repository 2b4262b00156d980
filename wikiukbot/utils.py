# wikiukbot/utils.py
from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from wikiukbot.config import Settings


def ensure_telegram_token(settings: Settings) -> str:
    """
    Returns the bot token or exits if TELEGRAM_TOKEN is not set.
    Only bot commands need it; search/random work anonymously.
    """
    if not settings.telegram_token:
        print("Please set the TELEGRAM_TOKEN environment variable.")
        raise typer.Exit(code=3)
    return settings.telegram_token


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # httpx logs every Bot API call at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def ensure_random_strategy(strategy: str) -> str:
    if strategy not in ("list", "redirect"):
        raise typer.BadParameter("must be 'list' or 'redirect'", param_hint="--strategy")
    return strategy
