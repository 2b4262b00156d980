# wikiukbot/wiki_client.py
from __future__ import annotations

import logging
from typing import Any, Literal, Mapping, Optional
from urllib.parse import quote, unquote

import requests

from wikiukbot import config
from wikiukbot.datatypes import (
    RandomArticleRef,
    SearchResult,
    Thumbnail,
    UpstreamError,
    UpstreamErrorKind,
)
from wikiukbot.presentation import article_url

logger = logging.getLogger(__name__)

RandomStrategy = Literal["list", "redirect"]


def _malformed(what: str) -> UpstreamError:
    logger.warning("Unexpected Wikipedia API response: %s", what)
    return UpstreamError(UpstreamErrorKind.MALFORMED, f"Unexpected response: {what}")


def _parse_thumbnail(raw: Any) -> Optional[Thumbnail]:
    """
    Thumbnail is optional; when present, source/width/height come together.
    """
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise _malformed("'thumbnail' is not an object")

    source, width, height = raw.get("source"), raw.get("width"), raw.get("height")
    if not isinstance(source, str) or not isinstance(width, int) or not isinstance(height, int):
        raise _malformed("'thumbnail' must carry source, width and height")

    # e.g. "//upload.wikimedia.org/wikipedia/commons/thumb/..."
    if source.startswith("//"):
        source = f"https:{source}"
    return Thumbnail(url=source, width=width, height=height)


def _parse_page(raw: Any) -> SearchResult:
    if not isinstance(raw, dict):
        raise _malformed("page entry is not an object")

    page_id, title, index = raw.get("pageid"), raw.get("title"), raw.get("index")
    if not isinstance(page_id, int) or isinstance(page_id, bool):
        raise _malformed("page without integer 'pageid'")
    if not isinstance(title, str) or not title:
        raise _malformed(f"page {page_id} without 'title'")
    if not isinstance(index, int) or isinstance(index, bool):
        raise _malformed(f"page {page_id} without integer 'index'")

    description = raw.get("description")
    if description is not None and not isinstance(description, str):
        raise _malformed(f"page {page_id} has non-string 'description'")

    return SearchResult(
        page_id=page_id,
        title=title,
        rank_index=index,
        description=description,
        thumbnail=_parse_thumbnail(raw.get("thumbnail")),
    )


def _query_section(body: Mapping[str, Any]) -> Mapping[str, Any]:
    """
    The 'query' key is missing altogether when a generator yields nothing.
    """
    section = body.get("query")
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise _malformed("'query' is not an object")
    return section


class WikiClient:
    """
    Typed client for the Ukrainian Wikipedia Action API.
    Every failure surfaces as UpstreamError; nothing is retried.
    The client holds configuration only, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        *,
        api_url: str = config.WIKI_API_URL,
        article_base_url: str = config.WIKI_ARTICLE_BASE_URL,
        search_limit: int = config.DEFAULT_SEARCH_LIMIT,
        thumbnail_size: int = config.DEFAULT_THUMBNAIL_SIZE,
        random_strategy: RandomStrategy = config.DEFAULT_RANDOM_STRATEGY,  # type: ignore[assignment]
        timeout: float = config.DEFAULT_TIMEOUT,
        user_agent: str = config.DEFAULT_UA,
    ) -> None:
        if random_strategy not in ("list", "redirect"):
            raise ValueError(f"Unknown random strategy: {random_strategy!r}")
        self.api_url = api_url
        self.article_base_url = article_base_url
        # clamp to the API maximum for anonymous clients
        self.search_limit = max(1, min(50, search_limit))
        self.thumbnail_size = thumbnail_size
        self.random_strategy = random_strategy
        self.timeout = timeout
        self._headers = {
            "User-Agent": user_agent,
            "Accept": "application/json",
        }

    def _get(self, url: str, **kwargs: Any) -> requests.Response:
        try:
            return requests.get(url, headers=self._headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise UpstreamError(
                UpstreamErrorKind.TRANSPORT, f"Transport error: {exc}"
            ) from exc

    def _call_api(self, params: Mapping[str, str | int]) -> dict[str, Any]:
        """
        Call api.php and return the decoded body.
        The API reports some failures with HTTP 200 and an 'error' object.
        """
        logger.debug("GET %s params=%s", self.api_url, dict(params))
        resp = self._get(self.api_url, params=params)

        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            logger.warning("Wikipedia API answered %s %s", resp.status_code, resp.reason)
            raise UpstreamError(
                UpstreamErrorKind.HTTP_STATUS,
                f"HTTP error: {resp.status_code} {resp.reason}",
            ) from exc

        try:
            body = resp.json()
        except ValueError as exc:
            raise _malformed("body is not JSON") from exc
        if not isinstance(body, dict):
            raise _malformed("body is not a JSON object")

        if "error" in body:
            error = body["error"] if isinstance(body["error"], dict) else {}
            code, info = error.get("code"), error.get("info")
            logger.warning("Wikipedia API error code=%r info=%r", code, info)
            raise UpstreamError(
                UpstreamErrorKind.API_ERROR, f"API error: code='{code}', info='{info}'"
            )

        return body

    def search(self, query: str) -> list[SearchResult]:
        """
        Prefix search over article titles.
        Returns results sorted by upstream rank (lower first); no hits -> empty list.
        """
        body = self._call_api(
            {
                "action": "query",
                "format": "json",
                "formatversion": 2,
                "prop": "pageprops|pageimages|description",
                "generator": "prefixsearch",
                "ppprop": "displaytitle",
                "piprop": "thumbnail",
                "pithumbsize": self.thumbnail_size,
                "redirects": "",
                "gpssearch": query,
                "gpslimit": self.search_limit,
            }
        )

        pages = _query_section(body).get("pages", [])
        if not isinstance(pages, list):
            raise _malformed("'query.pages' is not a list")

        results = [_parse_page(p) for p in pages]
        # sorted() is stable, so equal indexes keep upstream order
        return sorted(results, key=lambda r: r.rank_index)

    def get_random_article(self) -> RandomArticleRef:
        """
        Pick a random article from the main namespace, using the configured strategy.
        """
        if self.random_strategy == "redirect":
            return self._random_from_redirect()
        return self._random_from_list()

    def _random_from_list(self) -> RandomArticleRef:
        body = self._call_api(
            {
                "action": "query",
                "list": "random",
                "format": "json",
                "formatversion": 2,
                "rnnamespace": 0,
            }
        )

        entries = _query_section(body).get("random")
        if not isinstance(entries, list) or not entries:
            raise _malformed("'query.random' is empty")
        first = entries[0]
        title = first.get("title") if isinstance(first, dict) else None
        if not isinstance(title, str) or not title:
            raise _malformed("random entry without 'title'")

        return RandomArticleRef(
            title=title, url=article_url(title, base_url=self.article_base_url)
        )

    def _random_from_redirect(self) -> RandomArticleRef:
        """
        Ask Special:Random for a redirect and read its target without following it.
        Only a 302 pointing under the article path is accepted.
        """
        url = self.article_base_url + quote(config.WIKI_RANDOM_PAGE_TITLE)
        logger.debug("GET %s (redirects disabled)", url)
        resp = self._get(url, allow_redirects=False)

        if resp.status_code != 302:
            logger.warning("Random page answered %s %s", resp.status_code, resp.reason)
            raise UpstreamError(
                UpstreamErrorKind.HTTP_STATUS,
                f"HTTP error: expected 302, got {resp.status_code} {resp.reason}",
            )

        location = resp.headers.get("Location")
        if not location:
            raise UpstreamError(
                UpstreamErrorKind.UNTRUSTED_REDIRECT, "Redirect without Location header"
            )
        if not location.startswith(self.article_base_url):
            raise UpstreamError(
                UpstreamErrorKind.UNTRUSTED_REDIRECT,
                f"Redirect outside of {self.article_base_url}: {location}",
            )

        key = location[len(self.article_base_url):].split("#", 1)[0].split("?", 1)[0]
        title = unquote(key).replace("_", " ")
        if not title:
            raise UpstreamError(
                UpstreamErrorKind.UNTRUSTED_REDIRECT, f"Redirect to no article: {location}"
            )
        return RandomArticleRef(title=title, url=location)
