# === FILE: title_scout/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import time
from typing import Optional, Sequence

from title_scout.config import CrawlConfig
from title_scout.crawler.driver import BrowserDriver, PendingRequests
from title_scout.crawler.extractor import extract_page
from title_scout.crawler.frontier import Frontier
from title_scout.crawler.models import CrawlReport, PageResult, PageVisit
from title_scout.crawler.robots import RobotsTxtRules, load_robots
from title_scout.crawler.settle import SettleError, settle_page
from title_scout.logger import logger

__all__ = ("TitleCrawler",)


class TitleCrawler:
    """
    Обход сайта пачками: рендер в Chromium, поиск страниц с нужным заголовком.

    Пачки идут строго последовательно, страницы внутри пачки обрабатываются
    одновременно. Ошибка одной страницы не останавливает ни пачку, ни обход.
    """

    def __init__(self, config: CrawlConfig, driver=None) -> None:
        self.config = config
        self.driver = driver if driver is not None else BrowserDriver(config)
        self.frontier = Frontier(max_size=config.max_frontier)
        self.report = CrawlReport()
        self.robots_rules: Optional[RobotsTxtRules] = None
        self.logger = logger

    async def __aenter__(self) -> TitleCrawler:
        await self.driver.__aenter__()
        try:
            if self.config.respect_robots:
                self.robots_rules = await load_robots(
                    self.config.seed, self.config.user_agent, self.config.robots_timeout
                )
        except BaseException:
            await self.driver.__aexit__(None, None, None)
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.driver.__aexit__(exc_type, exc, tb)

    async def crawl(self) -> CrawlReport:
        cfg = self.config
        self.logger.info("Старт обхода: %s (ищем заголовок %r)", cfg.seed, cfg.target_title)
        start = time.monotonic()
        self.frontier.offer(cfg.seed)
        try:
            while self.frontier:
                batch = self.frontier.take_batch(cfg.batch_size)
                for url in batch:
                    self.frontier.mark_visited(url)
                visits = await asyncio.gather(*(self._dispatch(url) for url in batch))
                self._merge(visits)
                self.report.batches += 1
                self._sync_counters()
                self.logger.info(
                    "📊 Прогресс: %d обработано, %d в очереди",
                    self.frontier.visited_count,
                    len(self.frontier),
                )
        except Exception as exc:
            self.logger.exception("Обход прерван: %s", exc)
            self.report.abort(f"{type(exc).__name__}: {exc}")
        finally:
            self._sync_counters()
        duration = time.monotonic() - start
        self.logger.info(
            "Завершено: %d страниц, %d совпадений за %.2f с",
            self.report.visited,
            len(self.report.matches),
            duration,
        )
        return self.report

    def _merge(self, visits: Sequence[Optional[PageVisit]]) -> None:
        target = self.config.target_title
        for visit in visits:
            if visit is None:
                continue
            if visit.title == target:
                self.report.matches.append(PageResult(visit.url, visit.title))
                self.logger.info("✅ Найдена страница с заголовком %r: %s", target, visit.url)
            self.frontier.offer_all(visit.links)

    def _sync_counters(self) -> None:
        # robots-blocked URLs are never rendered, so they are not visits
        self.report.visited = self.frontier.visited_count - len(self.report.disallowed)
        self.report.dropped = self.frontier.dropped

    async def _dispatch(self, url: str) -> Optional[PageVisit]:
        if not self._is_allowed(url):
            self.logger.info("Заблокировано robots.txt: %s", url)
            self.report.disallowed.append(url)
            return None
        self.logger.info("🔍 Обработка: %s", url)
        try:
            return await self.visit(url)
        except Exception as exc:
            self.logger.error("❌ Ошибка в %s: %s", url, exc)
            self.report.failed[url] = str(exc)
            return None

    async def visit(self, url: str) -> PageVisit:
        """Render *url* in its own browser context, wait for it to settle and read it."""
        async with self.driver.open_page() as page:
            pending = PendingRequests()
            pending.attach(page)
            settled = await settle_page(page, url, pending, self.config)
            if settled.fatal is not None:
                raise SettleError(url, settled.fatal)
            return await extract_page(page, url)

    def _is_allowed(self, url: str) -> bool:
        if self.robots_rules is None:
            return True
        return self.robots_rules.can_fetch(self.config.user_agent, url)
