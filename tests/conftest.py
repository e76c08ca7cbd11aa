# File: tests/conftest.py
"""
Shared fixtures: an in-memory website rendered by a fake browser driver that
exposes the same small surface the crawler uses from Playwright.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urljoin

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from title_scout.config import CrawlConfig
from title_scout.crawler.extractor import LINKS_SCRIPT, TITLE_SCRIPT, origin_of
from title_scout.crawler.settle import NETWORK_IDLE_SCRIPT, SPA_SHELL_SCRIPT
from title_scout.logger import LOGGER_NAME

BASE = "https://example.test/"


@dataclass
class FakeSitePage:
    title: str = ""
    links: List[str] = field(default_factory=list)
    xhr: List[str] = field(default_factory=list)
    hanging_xhr: List[str] = field(default_factory=list)
    load_time: float = 0.0
    goto_error: Optional[Exception] = None
    goto_timeout: bool = False
    spa_stalled: bool = False
    spa_error: Optional[Exception] = None
    #: how many resource-timing waits succeed before the page stalls; None = never stalls
    network_waits_ok: Optional[int] = None
    evaluate_error: Optional[Exception] = None


class FakeSite:
    """Pages keyed by absolute URL; links are resolved against the page URL."""

    def __init__(self, base: str = BASE) -> None:
        self.base = base
        self.pages: Dict[str, FakeSitePage] = {}
        self.visits: List[str] = []

    def url(self, path: str) -> str:
        return urljoin(self.base, path)

    def add(self, path: str, title: str = "", links=(), **kw) -> FakeSitePage:
        url = self.url(path)
        page = FakeSitePage(title=title, links=[urljoin(url, href) for href in links], **kw)
        self.pages[url] = page
        return page


class FakeRequest:
    def __init__(self, url: str, resource_type: str = "xhr") -> None:
        self.url = url
        self.resource_type = resource_type


class FakePage:
    def __init__(self, site: FakeSite) -> None:
        self.site = site
        self.url = "about:blank"
        self.calls: List[tuple] = []
        self.closed = False
        self.navigated_at: Optional[float] = None
        self.extracted_at: Optional[float] = None
        self._listeners = defaultdict(list)
        self._network_waits = 0

    def on(self, event, callback) -> None:
        self._listeners[event].append(callback)

    def emit(self, event: str, request: FakeRequest) -> None:
        for cb in list(self._listeners[event]):
            cb(request)

    @property
    def page_def(self) -> FakeSitePage:
        return self.site.pages[self.url]

    async def goto(self, url, wait_until=None, timeout=None):
        self.calls.append(("goto", url, wait_until, timeout))
        self.site.visits.append(url)
        page_def = self.site.pages.get(url)
        if page_def is None:
            raise PlaywrightError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self.url = url
        for req in page_def.xhr + page_def.hanging_xhr:
            self.emit("request", FakeRequest(req))
        self.emit("request", FakeRequest(urljoin(url, "/site.css"), "stylesheet"))
        if page_def.load_time:
            await asyncio.sleep(page_def.load_time)
        for req in page_def.xhr:
            self.emit("requestfinished", FakeRequest(req))
        self.navigated_at = time.monotonic()
        if page_def.goto_error is not None:
            raise page_def.goto_error
        if page_def.goto_timeout:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def wait_for_function(self, expression, arg=None, timeout=None, polling=None):
        self.calls.append(("wait", expression, arg, timeout))
        page_def = self.page_def
        if expression == SPA_SHELL_SCRIPT and page_def.spa_stalled:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        if expression == SPA_SHELL_SCRIPT and page_def.spa_error is not None:
            raise page_def.spa_error
        if expression == NETWORK_IDLE_SCRIPT:
            self._network_waits += 1
            if page_def.network_waits_ok is not None and self._network_waits > page_def.network_waits_ok:
                raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def evaluate(self, expression, arg=None):
        self.calls.append(("evaluate", expression))
        page_def = self.page_def
        if page_def.evaluate_error is not None:
            raise page_def.evaluate_error
        if expression == TITLE_SCRIPT:
            self.extracted_at = time.monotonic()
            return page_def.title.strip()
        if expression == LINKS_SCRIPT:
            return {"origin": origin_of(self.url), "hrefs": list(page_def.links)}
        raise AssertionError(f"unexpected script: {expression}")


class FakeDriver:
    """Stands in for BrowserDriver; tracks how many pages are open at once."""

    def __init__(self, site: FakeSite, launch_error: Optional[Exception] = None) -> None:
        self.site = site
        self.launch_error = launch_error
        self.launched = False
        self.closed = False
        self.pages: List[FakePage] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __aenter__(self) -> FakeDriver:
        if self.launch_error is not None:
            raise self.launch_error
        self.launched = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    @asynccontextmanager
    async def open_page(self):
        page = FakePage(self.site)
        self.pages.append(page)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            yield page
        finally:
            self.in_flight -= 1
            page.closed = True


@pytest.fixture()
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture()
def driver(site) -> FakeDriver:
    return FakeDriver(site)


@pytest.fixture()
def make_config(tmp_path):
    """
    Build a CrawlConfig with fast settle timings for tests.
    """

    def _make(**overrides) -> CrawlConfig:
        values = dict(
            start_url=BASE,
            target_title="Home",
            settle_delay_ms=0,
            output_dir=tmp_path,
        )
        values.update(overrides)
        return CrawlConfig(**values)

    return _make


@pytest.fixture(autouse=True)
def reset_project_logger():
    """CLI tests attach handlers to CliRunner streams; drop them after each test."""
    yield
    lg = logging.getLogger(LOGGER_NAME)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
    lg.propagate = True
