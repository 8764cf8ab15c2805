"""Tests for browser session lifecycle."""

import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from declutter.exceptions import LaunchFailure, SessionNotReady
from declutter.services.session import (
    DEFAULT_TIMEOUT_MS,
    DEFAULT_USER_AGENT,
    SessionConfig,
    SessionManager,
    StealthNotAvailableError,
)


def _fake_playwright(browser=None, start_error: Exception | None = None) -> tuple[MagicMock, MagicMock]:
    """Build an async_playwright() stand-in and the driver it starts."""
    driver = MagicMock()
    driver.chromium.launch = AsyncMock(return_value=browser or MagicMock(close=AsyncMock()))
    driver.stop = AsyncMock()
    launcher = MagicMock()
    launcher.return_value.start = AsyncMock(return_value=driver, side_effect=start_error)
    return launcher, driver


class TestSessionConfig:
    """Tests for SessionConfig environment defaults."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        """Test defaults with no DECLUTTER_* variables set."""
        for key in ("DECLUTTER_HEADLESS", "DECLUTTER_TIMEOUT", "DECLUTTER_USER_AGENT", "DECLUTTER_BROWSER_PATH"):
            monkeypatch.delenv(key, raising=False)

        config = SessionConfig()

        assert config.headless is True
        assert config.timeout_ms == DEFAULT_TIMEOUT_MS == 30000
        assert config.user_agent == DEFAULT_USER_AGENT
        assert config.browser_path is None
        assert config.stealth is False

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch):
        """Test that DECLUTTER_* variables override defaults."""
        monkeypatch.setenv("DECLUTTER_HEADLESS", "false")
        monkeypatch.setenv("DECLUTTER_TIMEOUT", "1234")
        monkeypatch.setenv("DECLUTTER_USER_AGENT", "TestAgent/1.0")
        monkeypatch.setenv("DECLUTTER_BROWSER_PATH", "/opt/chrome/chrome")

        config = SessionConfig()

        assert config.headless is False
        assert config.timeout_ms == 1234
        assert config.user_agent == "TestAgent/1.0"
        assert config.browser_path == "/opt/chrome/chrome"

    def test_malformed_timeout_ignored(self, monkeypatch: pytest.MonkeyPatch):
        """Test that a non-integer timeout falls back to the default."""
        monkeypatch.setenv("DECLUTTER_TIMEOUT", "soon")
        assert SessionConfig().timeout_ms == DEFAULT_TIMEOUT_MS


class TestSessionManager:
    """Tests for SessionManager."""

    def test_launch_options(self, session_config: SessionConfig):
        """Test that automation tells are disabled at launch."""
        options = SessionManager(session_config)._build_launch_options()

        assert options["headless"] is True
        assert options["ignore_default_args"] == ["--enable-automation"]
        assert "--disable-blink-features=AutomationControlled" in options["args"]
        assert "--disable-web-security" in options["args"]
        assert "--disable-features=IsolateOrigins,site-per-process" in options["args"]
        assert "--window-size=1920,1080" in options["args"]
        assert "--lang=en-US,en;q=0.9" in options["args"]
        assert "executable_path" not in options

    def test_launch_options_with_browser_path(self):
        """Test that an explicit executable is passed through."""
        config = SessionConfig(headless=False, browser_path="/usr/bin/chromium")
        options = SessionManager(config)._build_launch_options()

        assert options["executable_path"] == "/usr/bin/chromium"
        assert options["headless"] is False

    @pytest.mark.asyncio
    async def test_initialize_and_close(self, session_config: SessionConfig):
        """Test the launch/stop round trip."""
        launcher, driver = _fake_playwright()
        manager = SessionManager(session_config)

        with patch.object(manager, "_get_playwright_module", return_value=launcher):
            assert not manager.is_initialized()
            await manager.initialize()

        assert manager.is_initialized()
        driver.chromium.launch.assert_awaited_once()
        assert driver.chromium.launch.call_args.kwargs["ignore_default_args"] == ["--enable-automation"]

        await manager.close()

        assert not manager.is_initialized()
        driver.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_initialize_twice_is_an_error(self, session):
        """Test that re-initializing a live session is rejected."""
        with pytest.raises(RuntimeError, match="already initialized"):
            await session.initialize()

    @pytest.mark.asyncio
    async def test_launch_failure(self, session_config: SessionConfig):
        """Test that launch errors surface as LaunchFailure and leave no half-open session."""
        launcher, _ = _fake_playwright(start_error=RuntimeError("Executable doesn't exist"))
        manager = SessionManager(session_config)

        with patch.object(manager, "_get_playwright_module", return_value=launcher):
            with pytest.raises(LaunchFailure) as exc_info:
                await manager.initialize()

        assert "Executable doesn't exist" in exc_info.value.message
        assert not manager.is_initialized()

    def test_browser_requires_initialize(self, session_config: SessionConfig):
        """Test that the browser handle is guarded."""
        with pytest.raises(SessionNotReady):
            _ = SessionManager(session_config).browser

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, session, fake_browser):
        """Test that close can be called repeatedly."""
        await session.close()
        await session.close()

        assert fake_browser.closed
        assert not session.is_initialized()

    @pytest.mark.asyncio
    async def test_close_never_raises(self, session_config: SessionConfig):
        """Test that browser close failures are swallowed and logged."""
        manager = SessionManager(session_config)
        manager._browser = MagicMock(close=AsyncMock(side_effect=RuntimeError("already gone")))

        await manager.close()

        assert not manager.is_initialized()

    @pytest.mark.asyncio
    async def test_context_manager(self, session_config: SessionConfig):
        """Test async with launches and stops the browser."""
        launcher, driver = _fake_playwright()
        manager = SessionManager(session_config)

        with patch.object(manager, "_get_playwright_module", return_value=launcher):
            async with manager as live:
                assert live.is_initialized()

        assert not manager.is_initialized()
        driver.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stealth_without_patchright_is_launch_failure(self):
        """Test that a missing patchright surfaces through the launch error path."""
        config = SessionConfig(headless=True, timeout_ms=1000, user_agent="UA", browser_path=None, stealth=True)
        manager = SessionManager(config)

        with patch.dict(sys.modules, {"patchright": None, "patchright.async_api": None}):
            with pytest.raises(LaunchFailure) as exc_info:
                await manager.initialize()

        assert "declutter[stealth]" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, StealthNotAvailableError)
        assert not manager.is_initialized()

    def test_stealth_requires_patchright(self):
        """Test that stealth mode without patchright installed is reported clearly."""
        config = SessionConfig(headless=True, timeout_ms=1000, user_agent="UA", browser_path=None, stealth=True)
        with patch.dict(sys.modules, {"patchright": None, "patchright.async_api": None}):
            with pytest.raises(StealthNotAvailableError, match="declutter\\[stealth\\]"):
                SessionManager(config)._get_playwright_module()
