"""Stealth page contexts that look like a human-operated Chrome tab.

ANTI-BOT PROTECTION (applied to every page):
    Network level:
    - User agent and Accept-Language overridden through CDP so server-side
      headers match what page scripts see
    - Browser-shaped header set (Accept, Accept-Encoding, Sec-Fetch-*, etc.)
    JavaScript level:
    - navigator.webdriver evaluates to undefined (absent, not false)
    - Non-empty navigator.plugins, navigator.languages = ['en-US', 'en']
    - window.chrome.runtime stub
    - permissions.query('notifications') answers from Notification.permission
    Behavioural level:
    - Background cursor jitter every ~100ms for the lifetime of the page

Spoofing only one of these classes is what usually gets automation flagged,
so all three are applied together.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from declutter.services.session import LOCALE, VIEWPORT, SessionManager

if TYPE_CHECKING:
    from playwright.async_api import BrowserContext, Page

LOGGER = logging.getLogger(__name__)

ACCEPT_LANGUAGE = "en-US,en;q=0.9"
PLATFORM = "Win32"

BROWSER_HEADERS: dict[str, str] = {
    "Accept-Language": ACCEPT_LANGUAGE,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "max-age=0",
}

# Injected with add_init_script so they run before any page script
STEALTH_SCRIPTS = [
    # navigator.webdriver must be absent, not merely false
    """
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined,
    });
    """,
    # Chrome runtime namespace only exists in non-automated Chrome
    """
    if (!window.chrome) {
        window.chrome = {};
    }
    if (!window.chrome.runtime) {
        window.chrome.runtime = {};
    }
    """,
    # Notifications permission query reflects the real permission state
    """
    (function() {
        if (!window.navigator.permissions || !window.navigator.permissions.query) return;
        const originalQuery = window.navigator.permissions.query.bind(window.navigator.permissions);
        window.navigator.permissions.query = (parameters) =>
            parameters && parameters.name === 'notifications'
                ? Promise.resolve({ state: Notification.permission })
                : originalQuery(parameters);
    })();
    """,
    # Plugins array (non-empty, shaped like Chrome's PDF viewer)
    """
    Object.defineProperty(navigator, 'plugins', {
        get: () => [
            {
                0: {
                    type: 'application/x-google-chrome-pdf',
                    suffixes: 'pdf',
                    description: 'Portable Document Format',
                },
                description: 'Portable Document Format',
                filename: 'internal-pdf-viewer',
                length: 1,
                name: 'Chrome PDF Plugin',
            },
        ],
    });
    """,
    # Languages array
    """
    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en'],
    });
    """,
]


@dataclass
class PageContext:
    """One isolated browsing context and its page.

    Closing cancels the cursor-jitter task, then closes the page and its
    context. ``close()`` is idempotent so the context is released exactly
    once whichever exit path reaches it first.
    """

    context: BrowserContext
    page: Page
    user_agent: str
    accept_language: str = ACCEPT_LANGUAGE
    platform: str = PLATFORM
    viewport: dict[str, int] = field(default_factory=lambda: dict(VIEWPORT))
    headers: dict[str, str] = field(default_factory=lambda: dict(BROWSER_HEADERS))
    init_scripts: list[str] = field(default_factory=list)
    jitter_task: asyncio.Task[None] | None = None
    _closed: bool = field(default=False, init=False)

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> PageContext:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Stop background behaviour and release the page and context."""
        if self._closed:
            return
        self._closed = True

        if self.jitter_task is not None:
            self.jitter_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.jitter_task
            self.jitter_task = None

        try:
            await self.page.close()
        except Exception as exc:
            LOGGER.debug("Page close failed: %s", exc)
        try:
            await self.context.close()
        except Exception as exc:
            LOGGER.debug("Context close failed: %s", exc)


async def _jitter_cursor(
    page: Page,
    viewport: dict[str, int],
    interval: float,
    rng: random.Random,
) -> None:
    """Nudge the cursor a few pixels at a fixed interval until cancelled."""
    x = viewport["width"] / 2
    y = viewport["height"] / 2
    while True:
        x = min(max(x + (rng.random() - 0.5) * 10, 0), viewport["width"])
        y = min(max(y + (rng.random() - 0.5) * 10, 0), viewport["height"])
        try:
            await page.mouse.move(x, y)
        except Exception as exc:
            # Page went away underneath us; jitter is best-effort
            LOGGER.debug("Cursor jitter stopped: %s", exc)
            return
        await asyncio.sleep(interval)


class StealthPageController:
    """Creates page contexts with network, script and behavioural evasions.

    Usage:
        controller = StealthPageController()
        async with await controller.create_page(session) as page_context:
            await page_context.page.goto("https://example.com")
    """

    def __init__(
        self,
        jitter_interval: float = 0.1,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize controller.

        Args:
            jitter_interval: Seconds between cursor nudges.
            rng: Random source for cursor jitter (injectable for tests).
        """
        self.jitter_interval = jitter_interval
        self.rng = rng or random.Random()

    async def create_page(self, session: SessionManager) -> PageContext:
        """Open a configured page context from a live session.

        Args:
            session: Initialized session manager.

        Returns:
            PageContext owning the new context, page and jitter task.

        Raises:
            SessionNotReady: If the session has not been initialized.
        """
        browser = session.browser
        config = session.config

        context = await browser.new_context(
            user_agent=config.user_agent,
            locale=LOCALE,
            viewport=dict(VIEWPORT),
            device_scale_factor=1,
        )
        page_context: PageContext | None = None
        try:
            page = await context.new_page()
            page_context = PageContext(context=context, page=page, user_agent=config.user_agent)

            await self._override_user_agent(context, page, config.user_agent)
            await page.set_viewport_size(dict(VIEWPORT))
            await page.set_extra_http_headers(dict(BROWSER_HEADERS))

            for script in STEALTH_SCRIPTS:
                await page.add_init_script(script)
                page_context.init_scripts.append(script)
            LOGGER.debug("Injected %d stealth scripts", len(STEALTH_SCRIPTS))

            page.set_default_navigation_timeout(config.timeout_ms)
            page.set_default_timeout(config.timeout_ms)

            page_context.jitter_task = asyncio.create_task(
                _jitter_cursor(page, page_context.viewport, self.jitter_interval, self.rng),
                name="declutter-cursor-jitter",
            )
            return page_context
        except BaseException:
            if page_context is not None:
                await page_context.close()
            else:
                with contextlib.suppress(Exception):
                    await context.close()
            raise

    async def _override_user_agent(self, context: BrowserContext, page: Page, user_agent: str) -> None:
        """Override UA, Accept-Language and platform at the protocol level."""
        cdp: Any = await context.new_cdp_session(page)
        await cdp.send(
            "Network.setUserAgentOverride",
            {
                "userAgent": user_agent,
                "acceptLanguage": ACCEPT_LANGUAGE,
                "platform": PLATFORM,
            },
        )
