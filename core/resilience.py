"""
Resilient execution of flaky UI actions.

This module wraps asynchronous browser interactions with:
- Bounded retries with fixed or exponential backoff (using tenacity)
- Visibility-guarded element helpers that annotate failures
- Structured logging of every failed attempt
"""

import asyncio
import re
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Mapping, Optional, TypeVar

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

from core.exceptions import ElementNotVisibleError, UIActionError
from core.logger import bind_context, get_structured_logger
from core.models import AttemptOutcome, Backoff, ExecutionReport, RetryPolicy, describe_error
from core.utils import wait_for_network_idle

if TYPE_CHECKING:
    from config import AppConfig
    from diagnostics.events import DiagnosticEventLog

T = TypeVar('T')

COMPONENT = "executor"


class ResilientActionExecutor:
    """
    Executes UI actions with retry, backoff and annotated failures.

    The executor holds configuration only. Callers build locators and pass
    closures over them; nothing is retained between calls.
    """

    def __init__(
        self,
        app_config: "AppConfig",
        event_log: Optional["DiagnosticEventLog"] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the executor.

        Args:
            app_config: The application configuration object
            event_log: Optional structured event log to record into
            sleep: Coroutine used for inter-attempt delays, in seconds
        """
        self.app_config = app_config
        self.event_log = event_log
        self.sleep = sleep
        self.logger = get_structured_logger(__name__)

    @property
    def default_policy(self) -> RetryPolicy:
        return RetryPolicy.from_config(self.app_config.retry)

    def _record(self, severity: str, message: str, **fields: Any) -> None:
        if self.event_log is not None:
            self.event_log.record(severity, COMPONENT, message, **fields)

    @staticmethod
    def _wait_strategy(policy: RetryPolicy):
        base_seconds = policy.base_delay_ms / 1000
        if policy.backoff is Backoff.EXPONENTIAL:
            return wait_exponential(multiplier=base_seconds, min=0, exp_base=2)
        return wait_fixed(base_seconds)

    async def execute(
        self,
        action: Callable[[], Awaitable[T]],
        policy: Optional[RetryPolicy] = None,
        action_name: str = "action",
    ) -> ExecutionReport[T]:
        """
        Run an action until it succeeds or the policy is exhausted.

        Args:
            action: No-argument coroutine function to run
            policy: Retry policy. Defaults to the configured one.
            action_name: Name used in logs and in the report

        Returns:
            ExecutionReport with one outcome per attempt made. Exactly one of
            ``value`` (on success) or ``failure`` (the last error) is set.
        """
        policy = policy or self.default_policy
        report: ExecutionReport[T] = ExecutionReport(action_name=action_name)
        op_logger = bind_context(
            self.logger,
            action=action_name,
            max_attempts=policy.max_attempts,
        )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=self._wait_strategy(policy),
            retry=retry_if_exception_type(Exception),
            reraise=True,
            sleep=self.sleep,
        )

        start_time = time.monotonic()
        try:
            async for attempt in retrying:
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    report.value = await self._run_attempt(
                        action, attempt_number, policy, report, op_logger
                    )
        except Exception as e:
            report.failure = e
            total_duration_ms = (time.monotonic() - start_time) * 1000
            op_logger.error(
                "action_failed_all_attempts",
                error=describe_error(e),
                error_type=type(e).__name__,
                attempts=report.attempts,
                total_duration_ms=round(total_duration_ms, 2),
            )
            self._record(
                "error",
                "action_failed_all_attempts",
                action=action_name,
                attempts=report.attempts,
                error=describe_error(e),
            )
            return report

        return report

    async def _run_attempt(
        self,
        action: Callable[[], Awaitable[T]],
        attempt_number: int,
        policy: RetryPolicy,
        report: ExecutionReport[T],
        op_logger,
    ) -> T:
        op_start_time = time.monotonic()
        try:
            result = await action()
        except Exception as e:
            duration_ms = (time.monotonic() - op_start_time) * 1000
            report.outcomes.append(
                AttemptOutcome(
                    attempt_number=attempt_number,
                    succeeded=False,
                    elapsed_ms=duration_ms,
                    error=describe_error(e),
                )
            )
            is_last = attempt_number >= policy.max_attempts
            op_logger.warning(
                "action_attempt_failed",
                attempt=attempt_number,
                error=describe_error(e),
                duration_ms=round(duration_ms, 2),
                next_attempt_in_ms=None if is_last else policy.delay_ms(attempt_number),
            )
            self._record(
                "warning",
                "action_attempt_failed",
                action=report.action_name,
                attempt=attempt_number,
                error=describe_error(e),
            )
            raise

        duration_ms = (time.monotonic() - op_start_time) * 1000
        report.outcomes.append(
            AttemptOutcome(
                attempt_number=attempt_number,
                succeeded=True,
                elapsed_ms=duration_ms,
            )
        )
        op_logger.debug(
            "action_succeeded",
            attempt=attempt_number,
            duration_ms=round(duration_ms, 2),
        )
        self._record(
            "info",
            "action_succeeded",
            action=report.action_name,
            attempt=attempt_number,
        )
        return result

    async def retry_action(
        self,
        action: Callable[[], Awaitable[T]],
        policy: Optional[RetryPolicy] = None,
        action_name: str = "action",
    ) -> T:
        """
        Run an action with retries and return its value.

        Raises:
            Exception: The last attempt's error, unchanged, once the policy
                is exhausted.
        """
        report = await self.execute(action, policy=policy, action_name=action_name)
        return report.unwrap()

    # Visibility-guarded helpers

    def _element_timeout(self, timeout_ms: Optional[int]) -> int:
        if timeout_ms is None:
            return self.app_config.performance.element_timeout_ms
        return timeout_ms

    async def wait_for_element_visible(
        self,
        locator: Locator,
        description: str = "element",
        timeout_ms: Optional[int] = None,
    ) -> None:
        """
        Wait until the locator is visible.

        Raises:
            ElementNotVisibleError: If it is not visible within the timeout
            UIActionError: If the wait fails for another reason
        """
        timeout_ms = self._element_timeout(timeout_ms)
        try:
            await locator.wait_for(state="visible", timeout=timeout_ms)
        except (PlaywrightTimeoutError, asyncio.TimeoutError) as e:
            self.logger.error("element_not_visible", description=description, timeout_ms=timeout_ms)
            self._record("error", "element_not_visible", description=description, timeout_ms=timeout_ms)
            raise ElementNotVisibleError(description, timeout_ms) from e
        except PlaywrightError as e:
            self.logger.error("element_wait_failed", description=description, error=describe_error(e))
            self._record("error", "element_wait_failed", description=description, error=describe_error(e))
            raise UIActionError(
                description, f"Failed waiting for '{description}': {describe_error(e)}"
            ) from e

    async def wait_for_element_exists(
        self,
        locator: Locator,
        timeout_ms: Optional[int] = None,
    ) -> bool:
        """
        Check whether the locator becomes visible within the timeout.

        Returns False instead of raising so callers can pick between
        alternate UI paths.
        """
        if timeout_ms is None:
            timeout_ms = self.app_config.performance.wait_for_element_timeout_ms
        try:
            await locator.wait_for(state="visible", timeout=timeout_ms)
            return True
        except Exception as e:
            self.logger.debug("element_absent", timeout_ms=timeout_ms, error=describe_error(e))
            return False

    async def _interact(
        self,
        locator: Locator,
        description: str,
        timeout_ms: Optional[int],
        event: str,
        verb: str,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        """Wait for visibility, run operation and annotate any failure with the description."""
        await self.wait_for_element_visible(locator, description, timeout_ms)
        try:
            return await operation()
        except Exception as e:
            self.logger.error(f"{event}_failed", description=description, error=describe_error(e))
            self._record("error", f"{event}_failed", description=description, error=describe_error(e))
            raise UIActionError(
                description, f"Failed to {verb} '{description}': {describe_error(e)}"
            ) from e

    async def safe_click(
        self,
        locator: Locator,
        description: str = "element",
        timeout_ms: Optional[int] = None,
    ) -> None:
        """
        Wait for the element to be visible, then click it.

        Wrapping this in retry_action retries the whole wait-and-click. A
        click that already triggered navigation before failing will be
        issued again, so only retry clicks that are safe to repeat.

        Raises:
            ElementNotVisibleError: If the element never became visible
            UIActionError: If the click itself failed
        """
        await self._interact(locator, description, timeout_ms, "click", "click", lambda: locator.click())
        self.logger.info("element_clicked", description=description)

    async def safe_fill(
        self,
        locator: Locator,
        value: str,
        description: str = "input",
        timeout_ms: Optional[int] = None,
    ) -> None:
        """
        Wait for the field to be visible, then replace its content with value.

        Raises:
            ElementNotVisibleError: If the field never became visible
            UIActionError: If filling failed
        """
        # fill() clears the field before typing
        await self._interact(locator, description, timeout_ms, "fill", "fill", lambda: locator.fill(value))
        self.logger.info("field_filled", description=description, value_length=len(value))

    async def click_with_retry(
        self,
        locator: Locator,
        description: str = "element",
        policy: Optional[RetryPolicy] = None,
        timeout_ms: Optional[int] = None,
    ) -> None:
        """safe_click under retry_action."""
        await self.retry_action(
            lambda: self.safe_click(locator, description, timeout_ms),
            policy=policy,
            action_name=f"click:{description}",
        )

    async def fill_with_retry(
        self,
        locator: Locator,
        value: str,
        description: str = "input",
        policy: Optional[RetryPolicy] = None,
        timeout_ms: Optional[int] = None,
    ) -> None:
        """safe_fill under retry_action."""
        await self.retry_action(
            lambda: self.safe_fill(locator, value, description, timeout_ms),
            policy=policy,
            action_name=f"fill:{description}",
        )

    # Element helpers

    async def get_element_text(
        self,
        locator: Locator,
        description: str = "element",
        timeout_ms: Optional[int] = None,
    ) -> str:
        """Text content of a visible element; empty string when it has none."""
        text = await self._interact(
            locator, description, timeout_ms, "get_text", "read text of", lambda: locator.text_content()
        )
        return text or ""

    async def element_exists(self, locator: Locator, description: str = "element") -> bool:
        """
        Whether at least one element matches, without waiting.

        Raises:
            UIActionError: If the match count could not be read
        """
        try:
            return await locator.count() > 0
        except Exception as e:
            self.logger.error("count_failed", description=description, error=describe_error(e))
            raise UIActionError(
                description, f"Failed to count '{description}': {describe_error(e)}"
            ) from e

    async def scroll_to_element(
        self,
        locator: Locator,
        description: str = "element",
        timeout_ms: Optional[int] = None,
    ) -> None:
        await self._interact(
            locator, description, timeout_ms, "scroll", "scroll to", lambda: locator.scroll_into_view_if_needed()
        )

    async def select_option(
        self,
        locator: Locator,
        value: str,
        description: str = "dropdown",
        timeout_ms: Optional[int] = None,
    ) -> List[str]:
        """Select an option by value or label; returns the selected values."""
        selected = await self._interact(
            locator, description, timeout_ms, "select", "select option in", lambda: locator.select_option(value)
        )
        self.logger.info("option_selected", description=description, value=value)
        return selected

    async def check_checkbox(
        self,
        locator: Locator,
        description: str = "checkbox",
        timeout_ms: Optional[int] = None,
    ) -> None:
        await self._interact(locator, description, timeout_ms, "check", "check", lambda: locator.check())

    async def uncheck_checkbox(
        self,
        locator: Locator,
        description: str = "checkbox",
        timeout_ms: Optional[int] = None,
    ) -> None:
        await self._interact(locator, description, timeout_ms, "uncheck", "uncheck", lambda: locator.uncheck())

    async def verify_element_clickable(
        self,
        locator: Locator,
        description: str = "element",
        timeout_ms: Optional[int] = None,
    ) -> None:
        """
        Assert the element is visible and enabled.

        Raises:
            ElementNotVisibleError: If it never became visible
            UIActionError: If it is disabled or its state could not be read
        """
        enabled = await self._interact(
            locator, description, timeout_ms, "enabled_check", "read state of", lambda: locator.is_enabled()
        )
        if not enabled:
            self._record("error", "element_disabled", description=description)
            raise UIActionError(description, f"'{description}' is visible but disabled")

    def verify_url_contains(self, page: Page, pattern: str) -> None:
        """
        Assert the current page URL matches pattern (a regular expression).

        Raises:
            UIActionError: If the URL does not match
        """
        url = page.url
        if re.search(pattern, url) is None:
            self._record("error", "url_mismatch", pattern=pattern, url=url)
            raise UIActionError(pattern, f"URL '{url}' does not match '{pattern}'")

    async def fill_form(self, page: Page, form_data: Mapping[str, str]) -> None:
        """Fill each selector in form_data with its value, in order, via safe_fill."""
        for selector, value in form_data.items():
            await self.safe_fill(page.locator(selector), value, description=selector)

    async def wait_for_page_load(self, page: Page) -> bool:
        """Wait for network idle using the configured timeout; False if it never settles."""
        return await wait_for_network_idle(page, self.app_config.performance.network_idle_timeout_ms)
