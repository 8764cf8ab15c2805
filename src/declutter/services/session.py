"""Browser session lifecycle for page acquisition and PDF printing.

One ``SessionManager`` owns one Chromium process. The pipeline creates it,
pages are opened from it by the stealth controller, and the output stage
reuses it to print PDFs. Whoever creates the manager closes it.

ENHANCED STEALTH (optional, for heavily protected sites):
    Install: pip install declutter[stealth]
    Usage: SessionConfig(stealth=True) or --stealth flag
    Provides: Patchright-driven Chromium with deeper automation patches
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from declutter.exceptions import LaunchFailure, SessionNotReady

if TYPE_CHECKING:
    from playwright.async_api import Browser

LOGGER = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT_MS = 30000
VIEWPORT: dict[str, int] = {"width": 1920, "height": 1080}
LOCALE = "en-US"

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
    f"--window-size={VIEWPORT['width']},{VIEWPORT['height']}",
    "--disable-web-security",
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--lang=en-US,en;q=0.9",
]


def _env_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    val = os.getenv(key)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key: str, default: int) -> int:
    """Get integer from environment variable, ignoring malformed values."""
    val = os.getenv(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        LOGGER.warning("Ignoring non-integer %s=%r", key, val)
        return default


@dataclass(frozen=True)
class SessionConfig:
    """Launch configuration for one browser session.

    Attributes:
        headless: Run without a visible window (DECLUTTER_HEADLESS, default True).
        timeout_ms: Navigation and operation timeout (DECLUTTER_TIMEOUT, default 30000).
        user_agent: Spoofed user agent (DECLUTTER_USER_AGENT, default Chrome 131 on Windows).
        browser_path: Explicit Chromium executable (DECLUTTER_BROWSER_PATH).
        stealth: Drive the browser through Patchright instead of Playwright.
    """

    headless: bool = field(default_factory=lambda: _env_bool("DECLUTTER_HEADLESS", True))
    timeout_ms: int = field(default_factory=lambda: _env_int("DECLUTTER_TIMEOUT", DEFAULT_TIMEOUT_MS))
    user_agent: str = field(default_factory=lambda: os.getenv("DECLUTTER_USER_AGENT") or DEFAULT_USER_AGENT)
    browser_path: str | None = field(default_factory=lambda: os.getenv("DECLUTTER_BROWSER_PATH") or None)
    stealth: bool = False


class StealthNotAvailableError(ImportError):
    """Raised when stealth mode is requested but patchright is not installed."""

    def __init__(self) -> None:
        super().__init__("Stealth mode requires patchright. Install with: pip install declutter[stealth]")


class SessionManager:
    """Owns the lifecycle of a single Chromium process.

    Usage:
        session = SessionManager(SessionConfig(headless=True))
        if not session.is_initialized():
            await session.initialize()
        try:
            ...
        finally:
            await session.close()

        # Or as an async context manager
        async with SessionManager() as session:
            ...
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        """Initialize session manager.

        Args:
            config: Launch configuration. Defaults are read from the environment.
        """
        self.config = config or SessionConfig()
        self._browser: Browser | None = None
        self._playwright: Any = None

    async def __aenter__(self) -> SessionManager:
        """Launch browser (async context manager entry)."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close browser (async context manager exit)."""
        await self.close()

    def is_initialized(self) -> bool:
        """Return True while a browser process is live."""
        return self._browser is not None

    @property
    def browser(self) -> Browser:
        """The live Playwright browser.

        Raises:
            SessionNotReady: If initialize() has not been called.
        """
        if self._browser is None:
            raise SessionNotReady()
        return self._browser

    def _get_playwright_module(self) -> Any:
        """Get the appropriate playwright module based on stealth setting.

        Returns:
            The async_playwright function from either patchright or playwright.

        Raises:
            StealthNotAvailableError: If stealth is enabled but patchright not installed.
        """
        if self.config.stealth:
            try:
                from patchright.async_api import async_playwright

                LOGGER.debug("Using Patchright for stealth mode")
                return async_playwright
            except ImportError as e:
                raise StealthNotAvailableError() from e
        else:
            from playwright.async_api import async_playwright  # type: ignore[assignment]

            return async_playwright

    def _build_launch_options(self) -> dict[str, Any]:
        """Build chromium.launch() keyword arguments."""
        options: dict[str, Any] = {
            "headless": self.config.headless,
            "args": list(LAUNCH_ARGS),
            "ignore_default_args": ["--enable-automation"],
            "timeout": self.config.timeout_ms,
        }
        if self.config.browser_path:
            options["executable_path"] = self.config.browser_path
        return options

    async def initialize(self) -> None:
        """Launch the browser.

        Raises:
            RuntimeError: If the session is already initialized.
            LaunchFailure: If the browser process cannot be started, including
                stealth mode requested without patchright installed.
        """
        if self._browser is not None:
            raise RuntimeError("Browser session already initialized; check is_initialized() first.")

        launch_options = self._build_launch_options()

        try:
            async_playwright = self._get_playwright_module()
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(**launch_options)
        except Exception as exc:
            LOGGER.error("Browser launch failed: %s", exc)
            await self.close()
            raise LaunchFailure(
                f"Could not launch browser: {exc}",
                context={
                    "headless": self.config.headless,
                    "browser_path": self.config.browser_path,
                },
            ) from exc

        LOGGER.debug(
            "Browser started (headless=%s, stealth=%s, timeout_ms=%s)",
            self.config.headless,
            self.config.stealth,
            self.config.timeout_ms,
        )

    async def close(self) -> None:
        """Stop the browser and cleanup resources.

        Safe to call multiple times. Never raises: failures are logged because
        callers invoke this from cleanup paths.
        """
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as exc:
                LOGGER.warning("Failed to close browser: %s", exc)
            self._browser = None
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as exc:
                LOGGER.warning("Failed to stop playwright driver: %s", exc)
            self._playwright = None
        LOGGER.debug("Browser stopped")
