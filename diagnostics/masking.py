from __future__ import annotations

import re
from typing import Iterable, Optional

# HR pages show employee contact data; mask it before writing HTML to disk.
DEFAULT_PATTERNS = [
    r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}",
    r"(?<!\d)(?:\+?880|0)1[3-9]\d{8}(?!\d)",
]

MASK = "***"


def mask_pii(text: str, patterns: Optional[Iterable[str]] = None) -> str:
    masked = text
    for pattern in DEFAULT_PATTERNS + list(patterns or []):
        try:
            masked = re.sub(pattern, MASK, masked, flags=re.IGNORECASE)
        except re.error:
            # An invalid user pattern must not break failure capture
            continue
    return masked
