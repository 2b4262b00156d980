# wikiukbot/presentation.py
from __future__ import annotations

from urllib.parse import quote

from wikiukbot import config
from wikiukbot.datatypes import InlineResultItem, RandomArticleRef, SearchResult

# characters MediaWiki leaves unescaped in article paths
_TITLE_SAFE = "/:,;@$!*'()-._~"


def article_url(title: str, *, base_url: str = config.WIKI_ARTICLE_BASE_URL) -> str:
    """
    Canonical article URL, e.g. "Ан-225 Мрія" -> https://uk.wikipedia.org/wiki/%D0%90%D0%BD-225_...
    """
    return base_url + quote(title.replace(" ", "_"), safe=_TITLE_SAFE)


def utf16_length(text: str) -> int:
    """
    Length in UTF-16 code units; Telegram measures entity offsets this way.
    """
    return len(text.encode("utf-16-le")) // 2


def to_inline_item(result: SearchResult) -> InlineResultItem:
    return InlineResultItem(
        id=str(result.page_id),
        title=result.title,
        description=result.description,
        thumbnail=result.thumbnail,
        share_text=result.title,
        share_url=article_url(result.title),
    )


def random_article_item(ref: RandomArticleRef) -> InlineResultItem:
    """
    Placeholder item for an empty query; it shares ref's article under a fixed title.
    """
    return InlineResultItem(
        id=config.RANDOM_RESULT_ID,
        title=config.RANDOM_RESULT_TITLE,
        description=config.RANDOM_RESULT_DESCRIPTION,
        share_text=ref.title,
        share_url=ref.url,
    )
