"""
Diagnostic snapshot of the current page.

Used right before or after a failed interaction to see which of the
expected elements are on the page and what controls it offers instead.
Nothing in here raises: every probe is guarded on its own and failures are
collected into the snapshot's ``errors`` list.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Iterable, Optional

from playwright.async_api import Page

from core.logger import bind_context, get_structured_logger
from core.models import describe_error
from diagnostics.events import DiagnosticEventLog
from diagnostics.types import CandidateElement, ControlInfo, ElementProbe, PageSnapshot

logger = get_structured_logger(__name__)

COMPONENT = "snapshot"

DEFAULT_MAX_CONTROLS = 10
DEFAULT_CONTROL_SELECTOR = "button"


async def _guarded(
    probe: Callable[[], Awaitable[Any]],
    what: str,
    snapshot: PageSnapshot,
    op_logger,
    default: Any = None,
) -> tuple[bool, Any]:
    try:
        return True, await probe()
    except Exception as e:
        snapshot.errors.append(f"{what}: {describe_error(e)}")
        op_logger.debug("probe_failed", probe=what, error=describe_error(e))
        return False, default


def _current_url(page: Page, snapshot: PageSnapshot) -> Optional[str]:
    try:
        return page.url
    except Exception as e:
        snapshot.errors.append(f"url: {describe_error(e)}")
        return None


async def log_page_info(
    page: Page,
    event_log: Optional[DiagnosticEventLog] = None,
) -> PageSnapshot:
    """Log URL, title and frame URLs of the page."""
    snapshot = PageSnapshot()
    op_logger = bind_context(logger, component=COMPONENT)

    snapshot.url = _current_url(page, snapshot)
    _, snapshot.title = await _guarded(lambda: page.title(), "title", snapshot, op_logger)

    try:
        snapshot.frame_urls = [frame.url for frame in page.frames]
    except Exception as e:
        snapshot.errors.append(f"frames: {describe_error(e)}")

    op_logger.info(
        "page_info",
        url=snapshot.url,
        title=snapshot.title,
        frame_count=len(snapshot.frame_urls),
        frame_urls=snapshot.frame_urls,
    )
    if event_log is not None:
        event_log.record(
            "info",
            COMPONENT,
            "page_info",
            url=snapshot.url,
            title=snapshot.title,
            frame_urls=list(snapshot.frame_urls),
        )
    return snapshot


async def _probe_candidate(
    page: Page,
    candidate: CandidateElement,
    snapshot: PageSnapshot,
    op_logger,
) -> ElementProbe:
    probe = ElementProbe(name=candidate.name, selector=candidate.selector)
    try:
        locator = page.locator(candidate.selector)
    except Exception as e:
        probe.error = describe_error(e)
        snapshot.errors.append(f"{candidate.name}: {probe.error}")
        return probe

    ok, count = await _guarded(lambda: locator.count(), f"{candidate.name}.count", snapshot, op_logger, 0)
    if not ok:
        probe.error = snapshot.errors[-1]
        return probe
    probe.count = count or 0

    if probe.exists:
        ok, visible = await _guarded(
            lambda: locator.first.is_visible(), f"{candidate.name}.is_visible", snapshot, op_logger
        )
        probe.visible = bool(visible) if ok else None
        if not ok:
            probe.error = snapshot.errors[-1]
    return probe


async def _probe_controls(
    page: Page,
    control_selector: str,
    max_controls: int,
    snapshot: PageSnapshot,
    op_logger,
) -> None:
    try:
        controls = page.locator(control_selector)
    except Exception as e:
        snapshot.errors.append(f"controls: {describe_error(e)}")
        return

    _, total = await _guarded(lambda: controls.count(), "controls.count", snapshot, op_logger, 0)
    snapshot.total_controls = total or 0

    for index in range(min(snapshot.total_controls, max_controls)):
        try:
            control = controls.nth(index)
        except Exception as e:
            snapshot.errors.append(f"control[{index}]: {describe_error(e)}")
            continue

        _, text = await _guarded(lambda: control.text_content(), f"control[{index}].text", snapshot, op_logger)
        _, name = await _guarded(
            lambda: control.get_attribute("aria-label"),
            f"control[{index}].aria-label",
            snapshot,
            op_logger,
        )
        if not name:
            _, name = await _guarded(
                lambda: control.get_attribute("name"),
                f"control[{index}].name",
                snapshot,
                op_logger,
            )

        info = ControlInfo(index=index, text=text.strip() if isinstance(text, str) else None, name=name)
        snapshot.controls.append(info)
        op_logger.info("control_probe", index=index, text=info.text, control_name=info.name)


async def debug_navigation(
    page: Page,
    candidates: Iterable[CandidateElement],
    max_controls: Optional[int] = None,
    control_selector: str = DEFAULT_CONTROL_SELECTOR,
    event_log: Optional[DiagnosticEventLog] = None,
) -> PageSnapshot:
    """
    Probe candidate elements and list the first interactive controls.

    Args:
        page: Playwright page instance
        candidates: Named selectors to check for presence and visibility
        max_controls: How many controls to enumerate, DEFAULT_MAX_CONTROLS when None
        control_selector: Selector of controls to enumerate
        event_log: Optional structured event log to record into

    Returns:
        PageSnapshot describing what was found. The snapshot is for humans
        and tests; control flow should not branch on it.
    """
    if max_controls is None:
        max_controls = DEFAULT_MAX_CONTROLS

    snapshot = PageSnapshot()
    op_logger = bind_context(logger, component=COMPONENT)
    snapshot.url = _current_url(page, snapshot)
    op_logger.info("navigation_debug_start", url=snapshot.url)

    for candidate in candidates:
        probe = await _probe_candidate(page, candidate, snapshot, op_logger)
        snapshot.candidates.append(probe)
        op_logger.info(
            "candidate_probe",
            element=probe.name,
            exists=probe.exists,
            visible=probe.visible,
            status=probe.status,
        )
        if event_log is not None:
            event_log.record(
                "info" if probe.exists else "warning",
                COMPONENT,
                "candidate_probe",
                name=probe.name,
                selector=probe.selector,
                status=probe.status,
                count=probe.count,
            )

    await _probe_controls(page, control_selector, max_controls, snapshot, op_logger)

    op_logger.info(
        "navigation_debug_complete",
        total_controls=snapshot.total_controls,
        listed_controls=len(snapshot.controls),
        probe_errors=len(snapshot.errors),
    )
    if event_log is not None:
        event_log.record(
            "info",
            COMPONENT,
            "navigation_debug_complete",
            url=snapshot.url,
            total_controls=snapshot.total_controls,
            controls=[{"text": c.text, "name": c.name} for c in snapshot.controls],
            probe_errors=list(snapshot.errors),
        )
    return snapshot
