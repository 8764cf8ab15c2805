"""Content extraction: navigate, behave like a person, capture rendered markup."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from declutter.exceptions import NavigationError, NavigationTimeout
from declutter.models import AcquisitionResult
from declutter.services.session import SessionManager
from declutter.services.stealth import StealthPageController

if TYPE_CHECKING:
    from playwright.async_api import Page

LOGGER = logging.getLogger(__name__)

DEFAULT_SCREENSHOT_PATH = "declutter-screenshot.png"

DelayRange: TypeAlias = tuple[int, int]


def _is_timeout(exc: BaseException) -> bool:
    """Match timeouts from Playwright, Patchright and asyncio alike.

    Playwright and Patchright each define their own ``TimeoutError`` class.
    """
    return isinstance(exc, TimeoutError) or type(exc).__name__ == "TimeoutError"


@dataclass(frozen=True)
class HumanBehavior:
    """Bounds (milliseconds / pixels) for the simulated reading pause, cursor move and scroll.

    The defaults add roughly 1.5-4.5s to every acquisition. Use ``instant()``
    where timing does not matter.
    """

    first_pause_ms: DelayRange = (500, 1500)
    second_pause_ms: DelayRange = (300, 800)
    final_pause_ms: DelayRange = (500, 1000)
    scroll_distance_px: DelayRange = (100, 600)
    scroll_step_delay_ms: DelayRange = (50, 150)
    scroll_steps: int = 10

    @classmethod
    def instant(cls) -> HumanBehavior:
        """Zero-length delays, for tests and batch runs."""
        return cls(
            first_pause_ms=(0, 0),
            second_pause_ms=(0, 0),
            final_pause_ms=(0, 0),
            scroll_step_delay_ms=(0, 0),
        )


@dataclass(frozen=True)
class ScrapeOptions:
    """Per-acquisition options.

    Attributes:
        wait_for_selector: CSS selector to wait for after the network settles.
        screenshot: Capture a full-page PNG after extraction.
        screenshot_path: Where the screenshot is written.
        human_behavior: Run the pause / cursor / scroll sequence.
    """

    wait_for_selector: str | None = None
    screenshot: bool = False
    screenshot_path: str = DEFAULT_SCREENSHOT_PATH
    human_behavior: bool = True


class ContentExtractor:
    """Drives one page through navigation and extraction.

    Usage:
        async with SessionManager() as session:
            extractor = ContentExtractor(session)
            result = await extractor.scrape_page("https://example.com")
    """

    def __init__(
        self,
        session: SessionManager,
        controller: StealthPageController | None = None,
        behavior: HumanBehavior | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.session = session
        self.controller = controller or StealthPageController()
        self.behavior = behavior or HumanBehavior()
        self.rng = rng or random.Random()

    async def scrape_page(self, url: str, options: ScrapeOptions | None = None) -> AcquisitionResult:
        """Fetch the fully rendered markup of a page.

        The page context is closed before this returns or raises, whatever
        step fails.

        Args:
            url: Address to load.
            options: Acquisition options (defaults: human behaviour on, no screenshot).

        Returns:
            AcquisitionResult with rendered HTML and elapsed wall-clock time.

        Raises:
            SessionNotReady: If the session is not initialized.
            NavigationTimeout: If the network never settles or the selector never appears.
            NavigationError: If the address cannot be loaded (DNS, connection, etc) or
                the selector wait fails for any reason other than a timeout.
        """
        options = options or ScrapeOptions()
        timeout_ms = self.session.config.timeout_ms

        page_context = await self.controller.create_page(self.session)
        start = time.monotonic()
        LOGGER.info("Starting page fetch: %s", url)

        async with page_context:
            page = page_context.page
            try:
                await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            except Exception as exc:
                if _is_timeout(exc):
                    raise NavigationTimeout(
                        f"Timed out after {timeout_ms}ms waiting for {url} to settle: {exc}",
                        url=url,
                        context={"timeout_ms": timeout_ms},
                    ) from exc
                raise NavigationError(f"Could not load {url}: {exc}", url=url) from exc
            LOGGER.debug("Network idle reached")

            if options.wait_for_selector:
                try:
                    await page.wait_for_selector(options.wait_for_selector, timeout=timeout_ms)
                except Exception as exc:
                    if not _is_timeout(exc):
                        raise NavigationError(
                            f"Could not wait for selector {options.wait_for_selector!r} on {url}: {exc}",
                            url=url,
                            context={"selector": options.wait_for_selector},
                        ) from exc
                    raise NavigationTimeout(
                        f"Selector {options.wait_for_selector!r} did not appear on {url}: {exc}",
                        url=url,
                        context={"selector": options.wait_for_selector, "timeout_ms": timeout_ms},
                    ) from exc

            if options.human_behavior:
                await self._behave_like_human(page, page_context.viewport)

            html = await page.content()
            LOGGER.debug("Captured %d characters of markup", len(html))

            if options.screenshot:
                await page.screenshot(path=options.screenshot_path, full_page=True)
                LOGGER.debug("Screenshot written to %s", options.screenshot_path)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        LOGGER.info("Page data fetched in %d milliseconds", elapsed_ms)
        return AcquisitionResult(url=url, html=html, elapsed_ms=elapsed_ms)

    async def _pause(self, bounds: DelayRange) -> None:
        low, high = bounds
        await asyncio.sleep(self.rng.randint(low, high) / 1000)

    async def _behave_like_human(self, page: Page, viewport: dict[str, int]) -> None:
        """Pause, move the cursor, pause, scroll, pause. Strictly sequential."""
        behavior = self.behavior

        await self._pause(behavior.first_pause_ms)

        x = self.rng.randrange(viewport["width"])
        y = self.rng.randrange(viewport["height"])
        await page.mouse.move(x, y)

        await self._pause(behavior.second_pause_ms)
        await self._scroll(page)
        await self._pause(behavior.final_pause_ms)
        LOGGER.debug("Human behaviour simulation completed")

    async def _scroll(self, page: Page) -> None:
        """Scroll a random distance in small wheel steps."""
        distance = self.rng.randint(*self.behavior.scroll_distance_px)
        steps = max(self.behavior.scroll_steps, 1)
        step = distance / steps
        # One delay for the whole gesture keeps the cadence even
        delay = self.rng.randint(*self.behavior.scroll_step_delay_ms) / 1000
        for _ in range(steps):
            await page.mouse.wheel(0, step)
            await asyncio.sleep(delay)
