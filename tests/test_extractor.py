"""Tests for the content extractor."""

import random
from pathlib import Path

import pytest

from declutter.exceptions import NavigationError, NavigationTimeout
from declutter.services.extractor import ContentExtractor, HumanBehavior, ScrapeOptions
from declutter.services.stealth import StealthPageController

# Playwright and Patchright both name their timeout class TimeoutError
PlaywrightTimeoutError = type("TimeoutError", (Exception,), {})


def _extractor(session, behavior: HumanBehavior | None = None, seed: int = 42) -> ContentExtractor:
    # A long jitter interval keeps background cursor moves to one
    return ContentExtractor(
        session,
        controller=StealthPageController(jitter_interval=60),
        behavior=behavior or HumanBehavior.instant(),
        rng=random.Random(seed),
    )


class TestScrapePage:
    """Tests for ContentExtractor.scrape_page."""

    @pytest.mark.asyncio
    async def test_returns_rendered_markup(self, session, fake_browser):
        """Test that the rendered HTML is captured and the page released."""
        fake_browser.page.html = "<html><body><p>Rendered</p></body></html>"

        result = await _extractor(session).scrape_page("https://example.com/post")

        assert result.url == "https://example.com/post"
        assert result.html == "<html><body><p>Rendered</p></body></html>"
        assert result.elapsed_ms >= 0
        assert fake_browser.page.closed
        assert fake_browser.context.close_count == 1

    @pytest.mark.asyncio
    async def test_waits_for_network_idle(self, session, fake_browser):
        """Test that navigation waits for network quiescence with the session timeout."""
        await _extractor(session).scrape_page("https://example.com")

        assert fake_browser.page.goto_args == {
            "url": "https://example.com",
            "wait_until": "networkidle",
            "timeout": 5000,
        }

    @pytest.mark.asyncio
    async def test_step_order(self, session, fake_browser):
        """Test navigation, then capture, then close."""
        await _extractor(session).scrape_page(
            "https://example.com",
            ScrapeOptions(wait_for_selector="article"),
        )

        calls = fake_browser.page.calls
        assert calls.index("goto") < calls.index("wait_for_selector:article") < calls.index("content")
        assert calls[-1] == "close"

    @pytest.mark.asyncio
    async def test_navigation_timeout(self, session, fake_browser):
        """Test that a navigation timeout maps to NavigationTimeout and still closes the page."""
        fake_browser.page.goto_error = PlaywrightTimeoutError("Timeout 5000ms exceeded")

        with pytest.raises(NavigationTimeout) as exc_info:
            await _extractor(session).scrape_page("https://slow.example.com")

        assert exc_info.value.context["url"] == "https://slow.example.com"
        assert isinstance(exc_info.value.__cause__, PlaywrightTimeoutError)
        assert fake_browser.page.closed
        assert fake_browser.context.close_count == 1

    @pytest.mark.asyncio
    async def test_navigation_error(self, session, fake_browser):
        """Test that other navigation failures map to NavigationError."""
        fake_browser.page.goto_error = RuntimeError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(NavigationError) as exc_info:
            await _extractor(session).scrape_page("https://nope.invalid")

        assert not isinstance(exc_info.value, NavigationTimeout)
        assert "ERR_NAME_NOT_RESOLVED" in exc_info.value.message
        assert fake_browser.page.closed

    @pytest.mark.asyncio
    async def test_selector_timeout(self, session, fake_browser):
        """Test that a selector that never appears is a NavigationTimeout."""
        fake_browser.page.selector_error = PlaywrightTimeoutError("waiting for locator")

        with pytest.raises(NavigationTimeout) as exc_info:
            await _extractor(session).scrape_page(
                "https://example.com",
                ScrapeOptions(wait_for_selector="#never"),
            )

        assert exc_info.value.context["selector"] == "#never"
        assert "content" not in fake_browser.page.calls
        assert fake_browser.page.closed

    @pytest.mark.asyncio
    async def test_selector_error(self, session, fake_browser):
        """Test that a malformed selector is a NavigationError carrying the address and selector."""
        fake_browser.page.selector_error = RuntimeError("Unexpected token in selector")

        with pytest.raises(NavigationError) as exc_info:
            await _extractor(session).scrape_page(
                "https://example.com",
                ScrapeOptions(wait_for_selector="div["),
            )

        assert not isinstance(exc_info.value, NavigationTimeout)
        assert exc_info.value.context["selector"] == "div["
        assert exc_info.value.context["url"] == "https://example.com"
        assert "Unexpected token" in exc_info.value.message
        assert "content" not in fake_browser.page.calls
        assert fake_browser.page.closed

    @pytest.mark.asyncio
    async def test_screenshot(self, session, fake_browser, tmp_path: Path):
        """Test that a screenshot is written after capture when requested."""
        shot = tmp_path / "shot.png"

        await _extractor(session).scrape_page(
            "https://example.com",
            ScrapeOptions(screenshot=True, screenshot_path=str(shot)),
        )

        assert shot.exists()
        calls = fake_browser.page.calls
        assert calls.index("content") < calls.index("screenshot")


class TestHumanBehavior:
    """Tests for the simulated reading sequence."""

    @pytest.mark.asyncio
    async def test_scrolls_in_ten_steps(self, session, fake_browser):
        """Test that the scroll is 100-600px split across ten wheel steps."""
        await _extractor(session).scrape_page("https://example.com")

        wheels = fake_browser.page.mouse.wheels
        assert len(wheels) == 10
        assert all(dx == 0 for dx, _ in wheels)
        assert 100 <= sum(dy for _, dy in wheels) <= 600 + 1e-6

    @pytest.mark.asyncio
    async def test_cursor_moves_inside_viewport(self, session, fake_browser):
        """Test that the deliberate cursor move lands on a whole-pixel viewport point."""
        await _extractor(session, seed=3).scrape_page("https://example.com")

        # Jitter moves are fractional; the deliberate move uses whole pixels
        deliberate = [
            (x, y) for x, y in fake_browser.page.mouse.moves if isinstance(x, int) and isinstance(y, int)
        ]
        assert len(deliberate) == 1
        x, y = deliberate[0]
        assert 0 <= x < 1920
        assert 0 <= y < 1080

    @pytest.mark.asyncio
    async def test_disabled(self, session, fake_browser):
        """Test that human behaviour can be switched off."""
        await _extractor(session).scrape_page("https://example.com", ScrapeOptions(human_behavior=False))

        assert fake_browser.page.mouse.wheels == []

    def test_default_bounds(self):
        """Test the default delay and distance bounds."""
        behavior = HumanBehavior()
        assert behavior.first_pause_ms == (500, 1500)
        assert behavior.second_pause_ms == (300, 800)
        assert behavior.final_pause_ms == (500, 1000)
        assert behavior.scroll_distance_px == (100, 600)
        assert behavior.scroll_step_delay_ms == (50, 150)
        assert behavior.scroll_steps == 10

    def test_instant_has_no_delays(self):
        """Test that instant() zeroes every pause but keeps the scroll distance."""
        behavior = HumanBehavior.instant()
        assert behavior.first_pause_ms == (0, 0)
        assert behavior.second_pause_ms == (0, 0)
        assert behavior.final_pause_ms == (0, 0)
        assert behavior.scroll_step_delay_ms == (0, 0)
        assert behavior.scroll_distance_px == (100, 600)
