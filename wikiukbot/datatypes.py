# wikiukbot/datatypes.py
from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Thumbnail:
    url: str
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class SearchResult:
    """
    A single page returned by the prefix search generator.
    rank_index only orders results inside one response.
    """

    page_id: int
    title: str
    rank_index: int
    description: str | None = None
    thumbnail: Thumbnail | None = None


@dataclass(frozen=True, slots=True)
class RandomArticleRef:
    """
    A random article, as a title plus its absolute URL.
    """

    title: str
    url: str


@dataclass(frozen=True, slots=True)
class InlineResultItem:
    """
    A presentation-ready inline result.
    share_text is sent into the chat with a link to share_url over its full length.
    """

    id: str
    title: str
    share_text: str
    share_url: str
    description: str | None = None
    thumbnail: Thumbnail | None = None


@dataclass(frozen=True, slots=True)
class UiHint:
    """
    Button shown above the inline results; opens a private chat with start_parameter.
    """

    label: str
    start_parameter: str


@dataclass(frozen=True, slots=True)
class InlineAnswer:
    items: tuple[InlineResultItem, ...]
    hint: UiHint | None = None
    cache_time: int | None = None


class UpstreamErrorKind(str, enum.Enum):
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    API_ERROR = "api_error"
    MALFORMED = "malformed"
    UNTRUSTED_REDIRECT = "untrusted_redirect"


class UpstreamError(Exception):
    """
    Any failure at the Wikipedia API boundary.
    The message carries the discriminating details (HTTP status, API code/info).
    """

    def __init__(self, kind: UpstreamErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"
