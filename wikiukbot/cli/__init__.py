# wikiukbot/cli/__init__.py
from __future__ import annotations
from wikiukbot.cli.generic import app
from wikiukbot.cli.serve import bot_app

app.add_typer(bot_app, name="bot", help="Run the Telegram bot and manage its webhook")

# Expose the main app only
__all__ = ["app"]
