from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from playwright.async_api import Page

from core.logger import get_structured_logger
from core.models import describe_error

from .artifacts import build_artifact_dir, build_screenshot_path, ensure_dir, enforce_limit
from .masking import mask_pii
from .types import DiagnosticOptions, PageSnapshot

logger = get_structured_logger(__name__)

DEFAULT_SCREENSHOT_DIR = Path("./test-screenshots")


async def take_screenshot(page: Page, name: str, out_dir: Path = DEFAULT_SCREENSHOT_DIR) -> Optional[Path]:
    """Save a full-page screenshot; returns None if it could not be taken."""
    out_dir = Path(out_dir)
    path = build_screenshot_path(out_dir, name)
    try:
        ensure_dir(out_dir)
        await page.screenshot(path=str(path), full_page=True)
    except Exception as e:
        logger.warning("screenshot_failed", artifact=name, error=describe_error(e))
        return None
    logger.info("screenshot_saved", path=str(path))
    return path


async def capture_on_failure(
    page: Optional[Page],
    options: DiagnosticOptions,
    name: str,
    error: Optional[BaseException] = None,
    snapshot: Optional[PageSnapshot] = None,
) -> Optional[Path]:
    """
    Write failure artifacts for a failed interaction into a fresh directory.

    Each artifact is best-effort; the primary error is never replaced by a
    capture failure.
    """
    if not options.enable_on_failure:
        return None

    base = Path(options.output_dir)
    out_dir = build_artifact_dir(base, name, error)
    try:
        # Trim before creating so the new directory always survives
        enforce_limit(base, max(options.max_artifacts_per_run - 1, 0))
        ensure_dir(out_dir)
    except Exception as e:
        logger.warning("artifact_dir_failed", path=str(out_dir), error=describe_error(e))
        return None

    if error is not None:
        try:
            (out_dir / "error.txt").write_text(
                f"{type(error).__name__}: {error}\n", encoding="utf-8"
            )
        except Exception as e:
            logger.debug("error_artifact_failed", error=describe_error(e))

    if snapshot is not None:
        try:
            (out_dir / "snapshot.json").write_text(
                json.dumps(snapshot.to_dict(), indent=2, default=str), encoding="utf-8"
            )
        except Exception as e:
            logger.debug("snapshot_artifact_failed", error=describe_error(e))

    if page is not None and options.capture_screenshot:
        screenshot_path = out_dir / "screenshot.png"
        try:
            await page.screenshot(path=str(screenshot_path), full_page=True)
            # Mocked pages do not write the file
            if not screenshot_path.exists():
                screenshot_path.write_bytes(b"")
        except Exception as e:
            logger.debug("screenshot_artifact_failed", error=describe_error(e))

    if page is not None and options.capture_html:
        try:
            html = await page.content()
            (out_dir / "page.html").write_text(
                mask_pii(html, options.pii_mask_patterns), encoding="utf-8"
            )
        except Exception as e:
            logger.debug("html_artifact_failed", error=describe_error(e))

    logger.info("failure_artifacts_saved", path=str(out_dir), artifact=name)
    return out_dir
