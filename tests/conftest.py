from __future__ import annotations

from urllib.parse import quote

import pytest

from wikiukbot import config

RANDOM_PAGE_URL = config.WIKI_ARTICLE_BASE_URL + quote(config.WIKI_RANDOM_PAGE_TITLE)


def make_page(pageid: int, title: str, index: int, **extra) -> dict:
    page = {"pageid": pageid, "ns": 0, "title": title, "index": index}
    page.update(extra)
    return page


def search_body(*pages: dict) -> dict:
    return {"batchcomplete": True, "query": {"pages": list(pages)}}


@pytest.fixture
def wiki_api(requests_mock):
    """
    Register a JSON answer for api.php; returns the requests_mock matcher.
    """

    def register(body: dict | None = None, **kwargs):
        if body is not None:
            kwargs["json"] = body
        return requests_mock.get(config.WIKI_API_URL, **kwargs)

    return register
