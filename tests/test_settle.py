# File: tests/test_settle.py
import pytest
from playwright.async_api import Error as PlaywrightError

from title_scout.crawler.driver import PendingRequests
from title_scout.crawler.models import StageOutcome
from title_scout.crawler.settle import NETWORK_IDLE_SCRIPT, SPA_SHELL_SCRIPT, settle_page

from conftest import BASE, FakePage, FakeRequest


async def settle(site, config):
    page = FakePage(site)
    pending = PendingRequests()
    pending.attach(page)
    report = await settle_page(page, BASE, pending, config)
    return page, pending, report


@pytest.mark.asyncio()
async def test_quiet_page_settles(site, make_config):
    site.add("/", title="Home", xhr=["https://example.test/api/data"])

    page, pending, report = await settle(site, make_config())

    assert [s.stage for s in report.stages] == ["navigate", "spa_shell", "network", "delay"]
    assert all(s.outcome is StageOutcome.SETTLED for s in report.stages)
    assert report.fatal is None
    assert not pending


@pytest.mark.asyncio()
async def test_spa_marker_is_passed_to_the_wait(site, make_config):
    site.add("/", title="Home")

    page, _, _ = await settle(site, make_config(spa_marker_class="app-loading", spa_timeout_ms=321))

    assert ("wait", SPA_SHELL_SCRIPT, "app-loading", 321) in page.calls


@pytest.mark.asyncio()
async def test_navigation_timeout_is_soft(site, make_config):
    site.add("/", title="Home", goto_timeout=True)

    _, _, report = await settle(site, make_config())

    assert report.outcome_of("navigate") is StageOutcome.TIMED_OUT_IGNORABLE
    assert report.fatal is None
    assert report.outcome_of("delay") is StageOutcome.SETTLED


@pytest.mark.asyncio()
async def test_navigation_error_propagates(site, make_config):
    site.add("/", goto_error=PlaywrightError("net::ERR_CERT_INVALID"))

    with pytest.raises(PlaywrightError):
        await settle(site, make_config())


@pytest.mark.asyncio()
async def test_spa_shell_timeout_is_soft(site, make_config):
    site.add("/", title="Home", spa_stalled=True)

    _, _, report = await settle(site, make_config())

    assert report.outcome_of("spa_shell") is StageOutcome.TIMED_OUT_IGNORABLE
    assert report.fatal is None


@pytest.mark.asyncio()
async def test_network_timeout_is_fatal_and_stops(site, make_config):
    site.add("/", title="Home", network_waits_ok=0)

    page, _, report = await settle(site, make_config(network_timeout_ms=777))

    assert report.fatal.stage == "network"
    assert report.fatal.outcome is StageOutcome.TIMED_OUT_FATAL
    assert report.outcome_of("delay") is None
    assert ("wait", NETWORK_IDLE_SCRIPT, None, 777) in page.calls


@pytest.mark.asyncio()
async def test_pending_requests_trigger_second_wait(site, make_config):
    site.add("/", title="Home", hanging_xhr=["https://example.test/api/stream"])

    page, pending, report = await settle(site, make_config(pending_timeout_ms=555))

    assert "https://example.test/api/stream" in pending
    assert report.outcome_of("pending") is StageOutcome.SETTLED
    network_waits = [c for c in page.calls if c[0] == "wait" and c[1] == NETWORK_IDLE_SCRIPT]
    assert [c[3] for c in network_waits] == [10_000, 555]


@pytest.mark.asyncio()
async def test_pending_wait_timeout_is_fatal(site, make_config):
    site.add("/", title="Home", hanging_xhr=["https://example.test/api/stream"], network_waits_ok=1)

    _, _, report = await settle(site, make_config())

    assert report.fatal.stage == "pending"


def test_pending_requests_track_only_fetch_and_xhr(site):
    page = FakePage(site)
    pending = PendingRequests()
    pending.attach(page)

    page.emit("request", FakeRequest("https://example.test/api/a", "xhr"))
    page.emit("request", FakeRequest("https://example.test/api/b", "fetch"))
    page.emit("request", FakeRequest("https://example.test/logo.png", "image"))
    assert len(pending) == 2
    assert "https://example.test/logo.png" not in pending

    page.emit("requestfinished", FakeRequest("https://example.test/api/a", "xhr"))
    page.emit("requestfailed", FakeRequest("https://example.test/api/b", "fetch"))
    assert not pending


@pytest.mark.asyncio()
async def test_spa_shell_swallows_any_browser_error(site, make_config):
    site.add(
        "/",
        title="Home",
        spa_error=PlaywrightError("Execution context was destroyed, most likely because of a navigation"),
    )

    _, _, report = await settle(site, make_config())

    spa = next(s for s in report.stages if s.stage == "spa_shell")
    assert spa.outcome is StageOutcome.TIMED_OUT_IGNORABLE
    assert "Execution context was destroyed" in spa.detail
    assert report.fatal is None
    assert report.outcome_of("network") is StageOutcome.SETTLED


@pytest.mark.asyncio()
async def test_navigation_timeout_can_be_made_fatal(site, make_config):
    site.add("/", title="Home", goto_timeout=True)

    page, _, report = await settle(site, make_config(navigation_timeout_fatal=True))

    assert report.fatal.stage == "navigate"
    assert [s.stage for s in report.stages] == ["navigate"]
    assert not [c for c in page.calls if c[0] == "wait"]
