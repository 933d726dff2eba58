from __future__ import annotations

import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional


def slugify(name: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9_.-]+", "_", name.strip()).strip("_")
    return slug or "unnamed"


def timestamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S_%f")


def build_artifact_dir(base: Path, name: str, error: Optional[BaseException]) -> Path:
    error_key = type(error).__name__ if error is not None else "NoError"
    return base / f"{timestamp()}_{slugify(name)}_{error_key}"


def build_screenshot_path(out_dir: Path, name: str) -> Path:
    return out_dir / f"{slugify(name)}-{timestamp()}.png"


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def enforce_limit(base_dir: Path, max_items: int) -> None:
    """Delete the oldest artifact directories beyond max_items."""
    if not base_dir.exists():
        return
    # Directory names start with a sortable timestamp
    items = sorted(p for p in base_dir.iterdir() if p.is_dir())
    overflow = len(items) - max_items
    for old in items[: max(0, overflow)]:
        shutil.rmtree(old, ignore_errors=True)
