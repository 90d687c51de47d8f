"""
Pytest configuration and shared fakes.

The fakes stand in for the slice of Playwright's async page API the server
uses, so tests run without a browser.
"""
import os
import sys
from collections import defaultdict
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class FakeElement:
    def __init__(self, selector: str, text: str = "", value: str = "", visible: bool = True):
        self.selector = selector
        self.text = text
        self.value = value
        self.visible = visible
        self.checked = False
        self.evaluations: List[tuple] = []

    async def is_visible(self) -> bool:
        return self.visible

    async def inner_text(self) -> str:
        return self.text

    async def input_value(self) -> str:
        return self.value

    async def evaluate(self, expression, arg=None):
        self.evaluations.append((expression, arg))

    async def screenshot(self, **kwargs) -> bytes:
        return b"element-png"


class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self.page = page

    async def press(self, key: str):
        self.page.calls.append(("keyboard.press", key))
        self.page._follow_key(None, key)


class FakePage:
    """Records calls and emulates navigation, elements and event handlers."""

    def __init__(self, url: str = "about:blank", title: str = "Blank"):
        self.url = url
        self.page_title = title
        self.handlers = defaultdict(list)
        self.elements: Dict[str, FakeElement] = {}
        self.links: Dict[str, str] = {}
        self.fail_urls: set = set()
        self.calls: List[tuple] = []
        self.history = [url]
        self.position = 0
        self.closed = False
        self.settle_error: Optional[Exception] = None
        self.keyboard = FakeKeyboard(self)

    # Test helpers

    def add_element(self, selector: str, **kwargs) -> FakeElement:
        element = FakeElement(selector, **kwargs)
        self.elements[selector] = element
        return element

    def emit(self, event: str, payload):
        for handler in self.handlers[event]:
            handler(payload)

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    def _visit(self, url: str):
        del self.history[self.position + 1:]
        self.history.append(url)
        self.position += 1
        self.url = url

    def _element(self, selector: str) -> FakeElement:
        if selector not in self.elements:
            raise PlaywrightTimeoutError(f"Timeout 30000ms exceeded waiting for locator('{selector}')")
        return self.elements[selector]

    def _follow_key(self, selector: Optional[str], key: str):
        if key == "Enter" and selector in self.links:
            self._visit(self.links[selector])

    # Page API

    def on(self, event: str, handler):
        self.handlers[event].append(handler)

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None):
        self.calls.append(("goto", url, wait_until))
        if url in self.fail_urls:
            raise PlaywrightTimeoutError(f"Timeout exceeded navigating to {url}")
        self._visit(url)

    async def go_back(self, wait_until: Optional[str] = None):
        self.calls.append(("go_back", wait_until))
        if self.position > 0:
            self.position -= 1
            self.url = self.history[self.position]

    async def go_forward(self, wait_until: Optional[str] = None):
        self.calls.append(("go_forward", wait_until))
        if self.position < len(self.history) - 1:
            self.position += 1
            self.url = self.history[self.position]

    async def title(self) -> str:
        return self.page_title

    async def click(self, selector: str, timeout: Optional[int] = None):
        self.calls.append(("click", selector))
        self._element(selector)
        if selector in self.links:
            self._visit(self.links[selector])

    async def fill(self, selector: str, value: str):
        self.calls.append(("fill", selector, value))
        self._element(selector).value = value

    async def select_option(self, selector: str, value):
        self.calls.append(("select_option", selector, value))
        self._element(selector).value = value

    async def check(self, selector: str):
        self.calls.append(("check", selector))
        self._element(selector).checked = True

    async def uncheck(self, selector: str):
        self.calls.append(("uncheck", selector))
        self._element(selector).checked = False

    async def press(self, selector: str, key: str):
        self.calls.append(("press", selector, key))
        self._element(selector)
        self._follow_key(selector, key)

    async def wait_for_load_state(self, state: str = "load"):
        self.calls.append(("wait_for_load_state", state))
        if self.settle_error is not None:
            raise self.settle_error

    async def evaluate(self, expression, arg=None):
        self.calls.append(("evaluate", arg))
        return None

    async def query_selector(self, selector: str) -> Optional[FakeElement]:
        return self.elements.get(selector)

    async def query_selector_all(self, selector: str) -> List[FakeElement]:
        element = self.elements.get(selector)
        return [element] if element else []

    async def screenshot(self, **kwargs) -> bytes:
        self.calls.append(("screenshot", kwargs))
        return b"page-png"

    async def close(self):
        self.calls.append(("close",))
        self.closed = True


class FakeRequest:
    """Hashable by identity, like Playwright's Request objects."""

    def __init__(self, url: str, method: str = "GET", failure: Optional[str] = None):
        self.url = url
        self.method = method
        self.failure = failure


class FakeResponse:
    def __init__(self, request: FakeRequest, status: int = 200):
        self.request = request
        self.status = status


class FakeConsoleMessage:
    def __init__(self, type: str, text: str, location: Optional[dict] = None):
        self.type = type
        self.text = text
        self.location = location or {"url": "", "lineNumber": 0, "columnNumber": 0}


class FakeEngine:
    """Stands in for ``async_playwright()`` and the chromium browser it launches."""

    def __init__(self):
        self.pages: List[FakePage] = []
        self.fail_urls: set = set()

        self.browser = MagicMock()
        self.browser.new_page = AsyncMock(side_effect=self._new_page)
        self.browser.is_connected = MagicMock(return_value=True)
        self.browser.close = AsyncMock()

        self.playwright = MagicMock()
        self.playwright.chromium.launch = AsyncMock(return_value=self.browser)
        self.playwright.stop = AsyncMock()

        self.factory = MagicMock()
        self.factory.return_value.start = AsyncMock(return_value=self.playwright)

    async def _new_page(self, **kwargs) -> FakePage:
        page = FakePage()
        page.fail_urls = self.fail_urls
        self.pages.append(page)
        return page

    @property
    def launches(self) -> int:
        return self.playwright.chromium.launch.await_count


@pytest.fixture
def page():
    return FakePage(url="https://example.test/", title="Example")


@pytest.fixture
def fake_engine():
    engine = FakeEngine()
    with patch("browser_mcp.registry.async_playwright", engine.factory):
        yield engine


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires a real browser)"
    )
