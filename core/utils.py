import logging
from typing import Any, Awaitable, Callable

from playwright.async_api import Page

logger = logging.getLogger(__name__)

DEFAULT_EVENT_TIMEOUT_MS = 30000
DEFAULT_NETWORK_IDLE_TIMEOUT_MS = 10000


async def wait_for_event(
    page: Page,
    event: str,
    trigger: Callable[[], Awaitable[Any]],
    timeout_ms: int = DEFAULT_EVENT_TIMEOUT_MS,
) -> Any:
    """
    Runs trigger and waits for the browser event it should cause.

    The listener is registered before trigger runs, so an event fired
    immediately by the click is not missed. The call is a plain coroutine
    and can be passed to ResilientActionExecutor.retry_action as is.

    Args:
        page: Playwright page instance.
        event: Event name, e.g. "popup" or "download".
        trigger: Coroutine function that causes the event (usually a click).
        timeout_ms: Maximum time to wait in milliseconds.

    Returns:
        The event value: a Page for "popup", a Download for "download".

    Example:
        >>> popup = await wait_for_event(
        ...     page, "popup", lambda: executor.safe_click(pdf_button, "PDF button")
        ... )
        >>> assert ".pdf" in popup.url
        >>> await popup.close()
    """
    async with page.expect_event(event, timeout=timeout_ms) as event_info:
        await trigger()
    value = await event_info.value
    logger.debug(f"Received '{event}' event")
    return value


async def wait_for_network_idle(page: Page, timeout_ms: int = DEFAULT_NETWORK_IDLE_TIMEOUT_MS) -> bool:
    """
    Waits for the page to reach the networkidle load state.

    Pages that keep polling never go idle, so a timeout is logged and
    reported as False rather than raised.
    """
    try:
        await page.wait_for_load_state("networkidle", timeout=timeout_ms)
        return True
    except Exception as e:
        logger.info(f"Network idle timeout after {timeout_ms}ms, continuing: {e}")
        return False
