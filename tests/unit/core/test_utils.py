import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from core.utils import DEFAULT_EVENT_TIMEOUT_MS, wait_for_event, wait_for_network_idle


class FakeEventContext:
    """Mimics the async context manager returned by page.expect_event()."""

    def __init__(self, value):
        self.value = value
        self.entered = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def _resolved(value):
    future = asyncio.get_running_loop().create_future()
    future.set_result(value)
    return future


class TestWaitForEvent:
    """Test suite for wait_for_event function."""

    @pytest.mark.asyncio
    async def test_returns_popup_after_trigger(self):
        """The listener is open before the trigger runs and the event value is returned."""
        popup = MagicMock()
        popup.url = "https://webable.pihr.xyz/reports/job-card.pdf"
        context = FakeEventContext(_resolved(popup))
        mock_page = MagicMock()
        mock_page.expect_event = MagicMock(return_value=context)

        order = []

        async def trigger():
            order.append(("trigger", context.entered))

        result = await wait_for_event(mock_page, "popup", trigger, timeout_ms=7000)

        assert result is popup
        assert order == [("trigger", True)]
        mock_page.expect_event.assert_called_once_with("popup", timeout=7000)

    @pytest.mark.asyncio
    async def test_trigger_error_propagates(self):
        mock_page = MagicMock()
        mock_page.expect_event = MagicMock(return_value=FakeEventContext(_resolved(None)))
        trigger = AsyncMock(side_effect=RuntimeError("button missing"))

        with pytest.raises(RuntimeError, match="button missing"):
            await wait_for_event(mock_page, "download", trigger, timeout_ms=100)

    @pytest.mark.asyncio
    async def test_default_timeout(self):
        mock_page = MagicMock()
        mock_page.expect_event = MagicMock(return_value=FakeEventContext(_resolved("download")))

        await wait_for_event(mock_page, "download", AsyncMock())

        mock_page.expect_event.assert_called_once_with("download", timeout=DEFAULT_EVENT_TIMEOUT_MS)


class TestWaitForNetworkIdle:
    """Test suite for wait_for_network_idle function."""

    @pytest.mark.asyncio
    async def test_returns_true_when_idle(self):
        mock_page = AsyncMock()

        assert await wait_for_network_idle(mock_page, timeout_ms=500) is True
        mock_page.wait_for_load_state.assert_awaited_once_with("networkidle", timeout=500)

    @pytest.mark.asyncio
    async def test_timeout_returns_false(self):
        mock_page = AsyncMock()
        mock_page.wait_for_load_state.side_effect = PlaywrightTimeoutError("Timeout 500ms exceeded.")

        assert await wait_for_network_idle(mock_page, timeout_ms=500) is False
