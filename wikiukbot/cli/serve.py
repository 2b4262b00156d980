# wikiukbot/cli/serve.py
from __future__ import annotations

import asyncio
from urllib.parse import urlparse

import typer
from rich import print
from rich.panel import Panel
from telegram import Bot, Update

from wikiukbot import config
from wikiukbot.bot import InlineBot, register_webhook
from wikiukbot.config import Settings
from wikiukbot.inline import QueryHandler
from wikiukbot.utils import ensure_random_strategy, ensure_telegram_token
from wikiukbot.wiki_client import WikiClient

bot_app = typer.Typer(add_completion=False, no_args_is_help=True)


@bot_app.command("run")
def bot_run(
    strategy: str = typer.Option(
        config.DEFAULT_RANDOM_STRATEGY, help="Random article strategy: 'list' or 'redirect'"
    ),
    cache_time: int = typer.Option(
        config.DEFAULT_SEARCH_CACHE_TIME, help="Cache hint for search answers (seconds)"
    ),
) -> None:
    """
    Serve inline queries: webhook when WEBHOOK_URL is set, long polling otherwise.
    """
    strategy = ensure_random_strategy(strategy)
    settings = Settings.from_env()
    token = ensure_telegram_token(settings)

    client = WikiClient(random_strategy=strategy)  # type: ignore[arg-type]
    inline_bot = InlineBot(QueryHandler(client, search_cache_time=cache_time))
    application = inline_bot.build_application(token)

    if settings.webhook_url:
        # Telegram gets a 200 as soon as the update is queued, whatever the handler does
        application.run_webhook(
            listen=config.DEFAULT_LISTEN,
            port=settings.port,
            url_path=urlparse(settings.webhook_url).path.lstrip("/"),
            webhook_url=settings.webhook_url,
            secret_token=settings.webhook_secret_token,
            drop_pending_updates=settings.drop_pending_updates,
            allowed_updates=Update.ALL_TYPES,
        )
    else:
        application.run_polling(
            drop_pending_updates=settings.drop_pending_updates,
            allowed_updates=Update.ALL_TYPES,
        )


@bot_app.command("set-webhook")
def bot_set_webhook() -> None:
    """
    Register WEBHOOK_URL with Telegram; `bot run` serves it.
    """
    settings = Settings.from_env()
    token = ensure_telegram_token(settings)
    url = settings.webhook_url
    if not url:
        print(Panel.fit("[bold red]Set WEBHOOK_URL in your environment.[/bold red]"))
        raise typer.Exit(code=3)

    async def _register() -> None:
        async with Bot(token) as bot:
            await register_webhook(
                bot,
                url,
                secret_token=settings.webhook_secret_token,
                drop_pending_updates=settings.drop_pending_updates,
            )

    print("[dim]Setting webhook...[/dim]")
    asyncio.run(_register())
    print(Panel.fit(f"[bold green]Webhook was set to[/bold green] {url}"))
