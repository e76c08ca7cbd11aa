# title_scout/crawler/settle.py
"""
Settle detection: decide when a navigated page is quiet enough to read.

No single browser signal says "dynamic content finished loading", so several
weak signals are layered with increasingly strict timeouts. Each stage
reports a :class:`StageOutcome`; the first stages fail soft, the later ones
fail hard.

A navigation timeout is soft by default: whatever rendered before the deadline
is still read. Set ``navigation_timeout_fatal`` to treat it as a failed page
instead, the way a plain `goto` error is treated.
"""
from __future__ import annotations

import asyncio

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from title_scout.config import CrawlConfig
from title_scout.crawler.driver import PendingRequests
from title_scout.crawler.models import SettleReport, StageOutcome, StageResult
from title_scout.logger import get_logger

__all__ = (
    "SettleError",
    "settle_page",
    "SPA_SHELL_SCRIPT",
    "NETWORK_IDLE_SCRIPT",
)

logger = get_logger("settle")

SPA_SHELL_SCRIPT = "(marker) => !document.documentElement.classList.contains(marker)"

NETWORK_IDLE_SCRIPT = """() => window.performance
    .getEntriesByType("resource")
    .filter((r) => r.initiatorType === "fetch" || r.initiatorType === "xmlhttprequest")
    .every((r) => r.responseEnd > 0)"""


class SettleError(RuntimeError):
    """Raised by the crawler when a hard settle stage timed out."""

    def __init__(self, url: str, result: StageResult) -> None:
        super().__init__(f"page did not settle ({result.stage}): {result.detail}")
        self.url = url
        self.result = result


async def navigate(page: Page, url: str, timeout_ms: int, fatal: bool = False) -> StageResult:
    try:
        await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
    except PlaywrightTimeoutError as exc:
        if fatal:
            return StageResult("navigate", StageOutcome.TIMED_OUT_FATAL, str(exc))
        logger.warning("Navigation timeout for %s, extracting anyway", url)
        return StageResult("navigate", StageOutcome.TIMED_OUT_IGNORABLE, str(exc))
    return StageResult("navigate", StageOutcome.SETTLED)


async def wait_spa_shell(page: Page, marker: str, timeout_ms: int) -> StageResult:
    # best effort: a client-side redirect destroys the execution context mid-wait
    try:
        await page.wait_for_function(SPA_SHELL_SCRIPT, arg=marker, timeout=timeout_ms)
    except PlaywrightError as exc:
        return StageResult("spa_shell", StageOutcome.TIMED_OUT_IGNORABLE, str(exc))
    return StageResult("spa_shell", StageOutcome.SETTLED)


async def wait_network(page: Page, timeout_ms: int, stage: str = "network") -> StageResult:
    try:
        await page.wait_for_function(NETWORK_IDLE_SCRIPT, timeout=timeout_ms)
    except PlaywrightTimeoutError as exc:
        return StageResult(stage, StageOutcome.TIMED_OUT_FATAL, str(exc))
    return StageResult(stage, StageOutcome.SETTLED)


async def settle_page(
    page: Page,
    url: str,
    pending: PendingRequests,
    config: CrawlConfig,
) -> SettleReport:
    """
    Navigate *page* to *url* and wait until it looks settled.

    Stops at the first fatal stage; check ``report.fatal`` before extracting.
    """
    report = SettleReport(url)

    nav = report.add(
        await navigate(page, url, config.navigation_timeout_ms, config.navigation_timeout_fatal)
    )
    if nav.fatal:
        return report

    spa = report.add(await wait_spa_shell(page, config.spa_marker_class, config.spa_timeout_ms))
    if spa.outcome is StageOutcome.TIMED_OUT_IGNORABLE:
        logger.debug("SPA marker %r still present on %s", config.spa_marker_class, url)

    if report.add(await wait_network(page, config.network_timeout_ms)).fatal:
        return report

    await asyncio.sleep(config.settle_delay_ms / 1000)
    report.add(StageResult("delay", StageOutcome.SETTLED))

    if pending:
        logger.info("⏳ Ожидание %d незавершённых запросов: %s", len(pending), url)
        report.add(await wait_network(page, config.pending_timeout_ms, stage="pending"))

    return report
