import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from playwright.async_api import async_playwright

# It's important to set up logging before other imports that might use it.
from core.logger import setup_logging
from config import config, AppConfig
from diagnostics.types import CandidateElement

setup_logging()
logger = logging.getLogger(__name__)


def parse_candidate(value: str) -> CandidateElement:
    """
    Parses a NAME=SELECTOR command-line value.

    Raises:
        argparse.ArgumentTypeError: If the value has no '=' or an empty side
    """
    name, sep, selector = value.partition("=")
    if not sep or not name.strip() or not selector.strip():
        raise argparse.ArgumentTypeError(
            f"Invalid candidate '{value}'. Expected NAME=SELECTOR"
        )
    return CandidateElement(name.strip(), selector.strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Open a page with retries and print a diagnostic snapshot of it"
    )
    parser.add_argument(
        "--url",
        default=config.browser.base_url,
        help="Page to open (default: BROWSER__BASE_URL)",
    )
    parser.add_argument(
        "--candidate",
        action="append",
        type=parse_candidate,
        default=None,
        metavar="NAME=SELECTOR",
        help="Element to probe; repeatable. Defaults to the PiHR menu entries.",
    )
    parser.add_argument(
        "--max-controls",
        type=int,
        default=None,
        help="How many controls to list (default: DIAGNOSTICS__MAX_CONTROLS)",
    )
    parser.add_argument("--screenshot", action="store_true", help="Save a full-page screenshot")
    parser.add_argument("--events-json", default=None, help="Write the event log to this JSON file")
    return parser


async def run_probe(args: argparse.Namespace, app_config: AppConfig) -> int:
    """Opens args.url, probes it and returns a process exit code."""
    from core.resilience import ResilientActionExecutor
    from core.selectors import DEFAULT_DEBUG_CANDIDATES
    from diagnostics import (
        DiagnosticEventLog,
        DiagnosticOptions,
        capture_on_failure,
        debug_navigation,
        log_page_info,
        take_screenshot,
    )

    event_log = DiagnosticEventLog()
    executor = ResilientActionExecutor(app_config, event_log=event_log)
    candidates = args.candidate or DEFAULT_DEBUG_CANDIDATES
    exit_code = 0

    async with async_playwright() as p:
        browser_type = getattr(p, app_config.browser.browser_type)
        logger.info(f"Launching {app_config.browser.browser_type} (headless={app_config.browser.headless})")
        browser = await browser_type.launch(headless=app_config.browser.headless)
        try:
            page = await browser.new_page(
                viewport={"width": app_config.browser.width, "height": app_config.browser.height}
            )
            try:
                await executor.retry_action(
                    lambda: page.goto(args.url, timeout=app_config.performance.navigation_timeout_ms),
                    action_name="navigate",
                )
            except Exception as e:
                logger.error(f"Could not open {args.url}: {e}")
                snapshot = await log_page_info(page, event_log=event_log)
                await capture_on_failure(
                    page,
                    DiagnosticOptions.from_config(app_config.diagnostics),
                    "navigate",
                    error=e,
                    snapshot=snapshot,
                )
                exit_code = 1
            else:
                await executor.wait_for_page_load(page)
                await log_page_info(page, event_log=event_log)
                await debug_navigation(
                    page,
                    candidates,
                    max_controls=args.max_controls or app_config.diagnostics.max_controls,
                    control_selector=app_config.diagnostics.control_selector,
                    event_log=event_log,
                )
                if args.screenshot:
                    await take_screenshot(page, "probe", app_config.diagnostics.screenshot_dir)
        finally:
            await browser.close()

    if args.events_json:
        event_log.export_to_json(args.events_json)
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(run_probe(args, config))


if __name__ == "__main__":
    sys.exit(main())
