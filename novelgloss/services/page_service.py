"""Page access: work ids from URLs, page text regions, and selection lookup."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ..models import PageKind

_KIND_BY_SEGMENT = {
    "book": PageKind.BOOK,
    "txt": PageKind.CHAPTER,
}


def _segments(url: str) -> list[str]:
    return [s for s in urlparse(url).path.split("/") if s]


def page_kind(url: str) -> PageKind:
    segments = _segments(url)
    if not segments or segments[0] not in _KIND_BY_SEGMENT:
        raise ValueError(f"Unsupported page URL: {url}")
    return _KIND_BY_SEGMENT[segments[0]]


def work_id_from_url(url: str) -> str:
    """``/book/12345.htm`` and ``/txt/12345/678`` both belong to work ``12345``."""
    segments = _segments(url)
    if len(segments) < 2:
        raise ValueError(f"No work id in page URL: {url}")
    return segments[1].split(".", 1)[0]


@dataclass
class Page:
    """Text regions of one page; results are written back through replace_*."""
    url: str
    title: str = ""
    synopsis: str = ""
    body: str = ""
    translated_title: str = ""
    translated_synopsis: str = ""
    body_markup: str = ""

    @property
    def work_id(self) -> str:
        return work_id_from_url(self.url)

    @property
    def kind(self) -> PageKind:
        return page_kind(self.url)

    def replace_title(self, text: str) -> None:
        self.translated_title = text

    def replace_synopsis(self, text: str) -> None:
        self.translated_synopsis = text

    def replace_body(self, markup: str) -> None:
        self.body_markup = markup


def resolve_selection(fragment_html: str) -> Optional[str]:
    """Return the ``data-original`` of the first annotated span in a selection."""
    if not fragment_html:
        return None
    soup = BeautifulSoup(fragment_html, "lxml")
    span = soup.select_one("span[data-original]")
    if span is None:
        return None
    return span.get("data-original") or None
