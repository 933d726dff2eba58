import asyncio
import os
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

# Adjust the python path to import the project modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.logger import setup_logging  # noqa: E402


@pytest.fixture(autouse=True)
def configured_logging():
    """Run every test with structlog routed to stdlib, as main.py does at import."""
    setup_logging()


@dataclass
class MockRetryConfig:
    max_attempts: int = 3
    base_delay_ms: int = 1000
    backoff: str = "fixed"


@dataclass
class MockPerformanceConfig:
    element_timeout_ms: int = 5000
    wait_for_element_timeout_ms: int = 10000
    network_idle_timeout_ms: int = 10000


@dataclass
class MockAppConfig:
    retry: MockRetryConfig = field(default_factory=MockRetryConfig)
    performance: MockPerformanceConfig = field(default_factory=MockPerformanceConfig)


@pytest.fixture
def mock_app_config():
    """Fixture to provide a minimal app config with the default retry policy."""
    return MockAppConfig()


@pytest.fixture
def recorded_sleeps():
    """Fixture to provide a fake sleep that records requested delays instead of waiting."""
    sleeps: List[float] = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    fake_sleep.calls = sleeps
    return fake_sleep


class FakeLocator:
    """
    Stand-in for a Playwright Locator.

    Becomes visible ``visible_after_s`` seconds after the first wait, or
    never when ``visible_after_s`` is None. Clicks and fills are recorded.
    """

    def __init__(
        self,
        visible_after_s: Optional[float] = 0.0,
        value: str = "",
        click_error: Optional[Exception] = None,
        fill_error: Optional[Exception] = None,
        text: Optional[str] = None,
        enabled: bool = True,
        options: Optional[List[str]] = None,
        matches: int = 1,
    ):
        self.visible_after_s = visible_after_s
        self.value = value
        self.click_error = click_error
        self.fill_error = fill_error
        self.text = text
        self.enabled = enabled
        self.options = options or []
        self.matches = matches
        self.checked = False
        self.scrolled = False
        self.clicks = 0
        self.wait_calls: List[tuple] = []

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        self.wait_calls.append((state, timeout))
        timeout_s = (timeout or 30000) / 1000
        if self.visible_after_s is None or self.visible_after_s > timeout_s:
            await asyncio.sleep(min(timeout_s, 0.05))
            raise PlaywrightTimeoutError(
                f"Locator.wait_for: Timeout {timeout}ms exceeded."
            )
        if self.visible_after_s:
            await asyncio.sleep(self.visible_after_s)

    async def click(self) -> None:
        self.clicks += 1
        if self.click_error is not None:
            raise self.click_error

    async def fill(self, value: str) -> None:
        if self.fill_error is not None:
            raise self.fill_error
        self.value = value

    async def text_content(self) -> Optional[str]:
        return self.text

    async def count(self) -> int:
        return self.matches

    async def is_enabled(self) -> bool:
        return self.enabled

    async def scroll_into_view_if_needed(self) -> None:
        self.scrolled = True

    async def select_option(self, value: str) -> List[str]:
        if value not in self.options:
            raise PlaywrightTimeoutError(f"Locator.select_option: option '{value}' not found")
        self.value = value
        return [value]

    async def check(self) -> None:
        self.checked = True

    async def uncheck(self) -> None:
        self.checked = False


class FakeElement:
    """One match of a FakeQueryLocator."""

    def __init__(
        self,
        text: Optional[str] = None,
        attributes: Optional[Dict[str, str]] = None,
        visible: bool = True,
        error: Optional[Exception] = None,
    ):
        self.text = text
        self.attributes = attributes or {}
        self.visible = visible
        self.error = error

    async def text_content(self) -> Optional[str]:
        if self.error is not None:
            raise self.error
        return self.text

    async def get_attribute(self, name: str) -> Optional[str]:
        if self.error is not None:
            raise self.error
        return self.attributes.get(name)

    async def is_visible(self) -> bool:
        if self.error is not None:
            raise self.error
        return self.visible


class FakeQueryLocator:
    """Locator over a fixed list of FakeElements for snapshot probing."""

    def __init__(self, elements: Optional[List[FakeElement]] = None, count_error: Optional[Exception] = None):
        self.elements = elements or []
        self.count_error = count_error

    async def count(self) -> int:
        if self.count_error is not None:
            raise self.count_error
        return len(self.elements)

    @property
    def first(self) -> FakeElement:
        return self.elements[0]

    def nth(self, index: int) -> FakeElement:
        return self.elements[index]


class FakePage:
    """Page whose locator() answers from a selector map; unknown selectors match nothing."""

    def __init__(
        self,
        url: str = "https://webable.pihr.xyz/dashboard",
        title: str = "PiHR",
        locators: Optional[Dict[str, FakeQueryLocator]] = None,
        frame_urls: Optional[List[str]] = None,
    ):
        self.url = url
        self._title = title
        self.locators = locators or {}
        self.frames = [type("Frame", (), {"url": u})() for u in (frame_urls or [url])]

    def locator(self, selector: str) -> FakeQueryLocator:
        return self.locators.get(selector, FakeQueryLocator())

    async def title(self) -> str:
        return self._title
