# === FILE: title_scout/scanner.py ===
"""
Модуль-обёртка для функции запуска обхода.
"""
import asyncio
from typing import Optional

from title_scout.config import CrawlConfig
from title_scout.crawler.crawler import TitleCrawler
from title_scout.crawler.models import CrawlReport
from title_scout.logger import logger


async def start_scan(
    cfg: CrawlConfig,
    *,
    driver=None,
    scan_timeout: Optional[float] = None,
) -> CrawlReport:
    """
    Запускает краулер в контексте браузера и возвращает CrawlReport.

    Parameters
    ----------
    cfg : CrawlConfig
        Конфигурация обхода.
    driver
        Драйвер рендеринга; по умолчанию Chromium через Playwright.
    scan_timeout : float, optional
        Общий лимит времени (секунд). По истечении обход прерывается,
        а уже найденные страницы остаются в отчёте.

    Returns
    -------
    CrawlReport
        Отчёт обхода. Браузер к этому моменту всегда закрыт.
    """
    async with TitleCrawler(cfg, driver=driver) as crawler:
        try:
            await asyncio.wait_for(crawler.crawl(), timeout=scan_timeout)
        except asyncio.TimeoutError:
            logger.error("Обход не завершён за %s секунд", scan_timeout)
            crawler.report.abort(f"scan did not finish within {scan_timeout} seconds")
    return crawler.report

__all__ = ["start_scan"]
