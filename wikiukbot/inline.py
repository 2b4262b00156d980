# wikiukbot/inline.py
from __future__ import annotations

import logging
from typing import Protocol

from wikiukbot import config
from wikiukbot.datatypes import (
    InlineAnswer,
    RandomArticleRef,
    SearchResult,
    UiHint,
)
from wikiukbot.presentation import random_article_item, to_inline_item

logger = logging.getLogger(__name__)


class ArticleSource(Protocol):
    def search(self, query: str) -> list[SearchResult]: ...

    def get_random_article(self) -> RandomArticleRef: ...


class QueryHandler:
    """
    Turns the raw text of an inline query into an InlineAnswer.

    - empty (after trimming) -> one random article, never cached
    - anything else -> prefix search results in upstream rank order

    UpstreamError from the source is not handled here.
    """

    def __init__(
        self,
        source: ArticleSource,
        *,
        search_cache_time: int = config.DEFAULT_SEARCH_CACHE_TIME,
    ) -> None:
        self.source = source
        self.search_cache_time = search_cache_time

    def handle(self, raw_query: str) -> InlineAnswer:
        query = raw_query.strip()
        if not query:
            return self._random_answer()
        return self._search_answer(query)

    def _random_answer(self) -> InlineAnswer:
        ref = self.source.get_random_article()
        logger.debug("Random article: %s", ref.title)
        return InlineAnswer(
            items=(random_article_item(ref),),
            hint=UiHint(config.SEARCH_HINT_TEXT, config.HINT_START_PARAMETER),
            cache_time=config.RANDOM_CACHE_TIME,
        )

    def _search_answer(self, query: str) -> InlineAnswer:
        items = tuple(to_inline_item(r) for r in self.source.search(query))
        logger.debug("Query %r -> %d results", query, len(items))

        hint = None
        if not items:
            hint = UiHint(config.EMPTY_HINT_TEXT, config.HINT_START_PARAMETER)
        return InlineAnswer(items=items, hint=hint, cache_time=self.search_cache_time)
