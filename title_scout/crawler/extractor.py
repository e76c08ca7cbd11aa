# title_scout/crawler/extractor.py
"""
Read the rendered title and same-origin anchor targets from a settled page.
"""
from __future__ import annotations

from typing import Any, List, Sequence
from urllib.parse import urlsplit

from playwright.async_api import Page

from title_scout.crawler.models import PageVisit

__all__: Sequence[str] = ("TITLE_SCRIPT", "LINKS_SCRIPT", "extract_page", "same_origin_links", "origin_of")

TITLE_SCRIPT = "() => document.title.trim()"

LINKS_SCRIPT = """() => ({
    origin: window.location.origin,
    hrefs: Array.from(document.querySelectorAll("a")).map((a) => a.href),
})"""


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` of *url* (lowercased)."""
    parts = urlsplit(url)
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


def same_origin_links(origin: str, hrefs: Sequence[Any]) -> List[str]:
    """
    Keep hrefs that share *origin*. Order and duplicates are preserved,
    the frontier does the dedup.
    """
    if not origin or origin == "null":
        return []
    base = origin.lower()
    return [h for h in hrefs if isinstance(h, str) and h and origin_of(h) == base]


async def extract_page(page: Page, url: str) -> PageVisit:
    title = await page.evaluate(TITLE_SCRIPT)
    data = await page.evaluate(LINKS_SCRIPT) or {}
    links = same_origin_links(data.get("origin", ""), data.get("hrefs") or [])
    return PageVisit(url=url, title=title or "", links=links)
