# title_scout/crawler/driver.py
"""
Headless Chromium driver on top of the Playwright async API.

One browser process is shared by the whole crawl; every page visit gets its
own ``BrowserContext`` so closing one visit never affects another.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Set

from playwright.async_api import Browser, Page, Playwright, Request, async_playwright

from title_scout.config import CrawlConfig
from title_scout.logger import get_logger

__all__ = ("BrowserDriver", "PendingRequests", "TRACKED_RESOURCE_TYPES")

LAUNCH_ARGS = ("--no-sandbox", "--disable-setuid-sandbox")
TRACKED_RESOURCE_TYPES = frozenset({"xhr", "fetch"})


class PendingRequests:
    """
    In-flight fetch/XHR requests of a single page visit.

    Owned by the visit that created it; Playwright event callbacks only add
    and discard request URLs here.
    """

    def __init__(self) -> None:
        self._urls: Set[str] = set()

    def __len__(self) -> int:
        return len(self._urls)

    def __bool__(self) -> bool:
        return bool(self._urls)

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def attach(self, page: Page) -> None:
        page.on("request", self._on_started)
        page.on("requestfinished", self._on_done)
        page.on("requestfailed", self._on_done)

    def _on_started(self, request: Request) -> None:
        if request.resource_type in TRACKED_RESOURCE_TYPES:
            self._urls.add(request.url)

    def _on_done(self, request: Request) -> None:
        self._urls.discard(request.url)


class BrowserDriver:
    """Асинхронный драйвер Chromium: запуск, изолированные страницы, гарантированное закрытие."""

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config
        self.logger = get_logger("driver")
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> BrowserDriver:
        await self.launch()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def launch(self) -> None:
        self.logger.debug("Starting Chromium (headless=%s)", self.config.headless)
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=list(LAUNCH_ARGS),
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        self.logger.debug("Browser closed")

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """Yield a configured page in a fresh browser context; the context is always closed."""
        if self._browser is None:
            raise RuntimeError("Browser not launched")
        cfg = self.config
        context = await self._browser.new_context(
            user_agent=cfg.user_agent,
            viewport={"width": cfg.viewport_width, "height": cfg.viewport_height},
            device_scale_factor=1,
            extra_http_headers=dict(cfg.extra_headers),
            bypass_csp=True,
            ignore_https_errors=cfg.ignore_https_errors,
        )
        try:
            page = await context.new_page()
            yield page
        finally:
            await context.close()
