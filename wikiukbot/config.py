# wikiukbot/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Wikipedia endpoints (uk locale only)
WIKI_HOST = "https://uk.wikipedia.org"
WIKI_API_URL = f"{WIKI_HOST}/w/api.php"
WIKI_ARTICLE_BASE_URL = f"{WIKI_HOST}/wiki/"
WIKI_RANDOM_PAGE_TITLE = "Спеціальна:Випадкова_сторінка"

DEFAULT_UA = "wikiukbot/0.1 (https://github.com/skrwo/wikiukbot)"
DEFAULT_TIMEOUT = 10.0

# Search configuration
DEFAULT_SEARCH_LIMIT = 15
DEFAULT_THUMBNAIL_SIZE = 120
DEFAULT_RANDOM_STRATEGY = "list"  # "list" or "redirect"

# Inline answer configuration
DEFAULT_SEARCH_CACHE_TIME = 60
RANDOM_CACHE_TIME = 0
RANDOM_RESULT_ID = "random"
RANDOM_RESULT_TITLE = "🎲 Випадкова стаття"
RANDOM_RESULT_DESCRIPTION = "Надіслати випадкову статтю української Вікіпедії!"
SEARCH_HINT_TEXT = "🔍 Пошук в Вікіпедії…"
EMPTY_HINT_TEXT = "⛔ Змініть пошуковий запит…"
HINT_START_PARAMETER = "help"

# Bot shell configuration
DEFAULT_PORT = 8443
DEFAULT_LISTEN = "0.0.0.0"
TRY_IT_QUERY = "Ан-225 Мрія"

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Runtime settings of the bot process, read from environment variables.
    Only the bot shell and the CLI use these; the search core takes plain arguments.
    """

    telegram_token: Optional[str] = None
    webhook_url: Optional[str] = None
    webhook_secret_token: Optional[str] = None
    port: int = DEFAULT_PORT
    drop_pending_updates: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        port = env.get("PORT") or ""
        return cls(
            telegram_token=env.get("TELEGRAM_TOKEN") or None,
            webhook_url=env.get("WEBHOOK_URL") or None,
            webhook_secret_token=env.get("WEBHOOK_SECRET_TOKEN") or None,
            port=int(port) if port.strip() else DEFAULT_PORT,
            drop_pending_updates=_flag(env.get("DROP_PENDING_UPDATES")),
        )
