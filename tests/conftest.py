"""Pytest configuration and shared fixtures for declutter tests."""

from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import pytest

from declutter.llm import LLMConfig, TextStream
from declutter.models import TokenUsage
from declutter.services.session import SessionConfig, SessionManager


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Pure logic tests with no I/O, network, or browser")
    config.addinivalue_line("markers", "integration: Filesystem-heavy tests, may use fake browser objects")
    config.addinivalue_line(
        "markers",
        "e2e: End-to-end tests with live network, Playwright, or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """
    Apply default markers to tests without explicit markers.

    Tests should use explicit markers (@pytest.mark.unit, @pytest.mark.e2e).
    Unmarked tests default to unit.
    """
    for item in items:
        marker_names = [m.name for m in item.iter_markers()]
        if any(m in marker_names for m in ("unit", "integration", "e2e")):
            continue
        item.add_marker(pytest.mark.unit)


# Fake Playwright objects


class FakeMouse:
    """Records cursor moves and wheel scrolls."""

    def __init__(self) -> None:
        self.moves: list[tuple[float, float]] = []
        self.wheels: list[tuple[float, float]] = []
        self.fail = False

    async def move(self, x: float, y: float) -> None:
        if self.fail:
            raise RuntimeError("Target page, context or browser has been closed")
        self.moves.append((x, y))

    async def wheel(self, delta_x: float, delta_y: float) -> None:
        self.wheels.append((delta_x, delta_y))


class FakePage:
    """Minimal async Page double that records every call."""

    def __init__(self, html: str = "<html><body><h1>Title</h1><p>Body text</p></body></html>") -> None:
        self.html = html
        self.mouse = FakeMouse()
        self.calls: list[str] = []
        self.init_scripts: list[str] = []
        self.extra_headers: dict[str, str] = {}
        self.viewport: dict[str, int] | None = None
        self.navigation_timeout: int | None = None
        self.default_timeout: int | None = None
        self.goto_args: dict[str, Any] = {}
        self.pdf_args: dict[str, Any] = {}
        self.set_content_args: dict[str, Any] = {}
        self.goto_error: BaseException | None = None
        self.selector_error: BaseException | None = None
        self.headers_error: BaseException | None = None
        self.pdf_error: BaseException | None = None
        self.closed = False

    async def goto(self, url: str, **kwargs: Any) -> None:
        self.calls.append("goto")
        self.goto_args = {"url": url, **kwargs}
        if self.goto_error is not None:
            raise self.goto_error

    async def wait_for_selector(self, selector: str, **kwargs: Any) -> None:
        self.calls.append(f"wait_for_selector:{selector}")
        if self.selector_error is not None:
            raise self.selector_error

    async def content(self) -> str:
        self.calls.append("content")
        return self.html

    async def screenshot(self, path: str, full_page: bool = False) -> bytes:
        self.calls.append("screenshot")
        Path(path).write_bytes(b"\x89PNG fake")
        return b"\x89PNG fake"

    async def set_viewport_size(self, size: dict[str, int]) -> None:
        self.viewport = size

    async def set_extra_http_headers(self, headers: dict[str, str]) -> None:
        if self.headers_error is not None:
            raise self.headers_error
        self.extra_headers = headers

    async def add_init_script(self, script: str) -> None:
        self.init_scripts.append(script)

    def set_default_navigation_timeout(self, timeout: int) -> None:
        self.navigation_timeout = timeout

    def set_default_timeout(self, timeout: int) -> None:
        self.default_timeout = timeout

    async def set_content(self, html: str, **kwargs: Any) -> None:
        self.calls.append("set_content")
        self.set_content_args = {"html": html, **kwargs}

    async def evaluate(self, script: str) -> None:
        self.calls.append("evaluate")

    async def pdf(self, path: str, **kwargs: Any) -> bytes:
        self.calls.append("pdf")
        self.pdf_args = {"path": path, **kwargs}
        if self.pdf_error is not None:
            raise self.pdf_error
        Path(path).write_bytes(b"%PDF-1.4 fake")
        return b"%PDF-1.4 fake"

    async def close(self) -> None:
        self.calls.append("close")
        self.closed = True


class FakeCDPSession:
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict[str, Any]]] = []

    async def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        self.sent.append((method, params or {}))
        return {}


class FakeContext:
    def __init__(self, page: FakePage) -> None:
        self.page = page
        self.cdp = FakeCDPSession()
        self.options: dict[str, Any] = {}
        self.close_count = 0

    async def new_page(self) -> FakePage:
        return self.page

    async def new_cdp_session(self, page: FakePage) -> FakeCDPSession:
        return self.cdp

    async def close(self) -> None:
        self.close_count += 1


class FakeBrowser:
    """Hands out one pre-built context for scraping and one page for PDF printing."""

    def __init__(self) -> None:
        self.page = FakePage()
        self.context = FakeContext(self.page)
        self.pdf_page = FakePage()
        self.closed = False

    async def new_context(self, **kwargs: Any) -> FakeContext:
        self.context.options = kwargs
        return self.context

    async def new_page(self) -> FakePage:
        return self.pdf_page

    async def close(self) -> None:
        self.closed = True


class FakeLLMClient:
    """Stands in for LLMClient; replays canned chunks and records each call."""

    def __init__(
        self,
        chunks: list[str] | None = None,
        usage: TokenUsage | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.config = LLMConfig(provider="ollama", model="test-model", base_url="http://localhost:11434")
        self.chunks = ["# Clean", "\n\nArticle body."] if chunks is None else chunks
        self.usage = usage or TokenUsage(input_tokens=100, output_tokens=20)
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def stream_text(self, system: str, prompt: str, temperature: float = 0.0, max_tokens: int = 4096) -> TextStream:
        self.calls.append(
            {"system": system, "prompt": prompt, "temperature": temperature, "max_tokens": max_tokens}
        )
        return TextStream(self._events())

    async def _events(self) -> AsyncIterator[str | TokenUsage]:
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error
        yield self.usage

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def llm_client() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def session_config() -> SessionConfig:
    """Deterministic session settings, independent of DECLUTTER_* variables."""
    return SessionConfig(
        headless=True,
        timeout_ms=5000,
        user_agent="Mozilla/5.0 (Test) Chrome/131.0.0.0",
        browser_path=None,
    )


@pytest.fixture
def fake_browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def session(session_config: SessionConfig, fake_browser: FakeBrowser) -> SessionManager:
    """A SessionManager that looks initialized and drives the fake browser."""
    manager = SessionManager(session_config)
    manager._browser = fake_browser  # type: ignore[assignment]
    return manager
