from .capture import capture_on_failure, take_screenshot
from .events import DiagnosticEvent, DiagnosticEventLog
from .snapshot import debug_navigation, log_page_info
from .types import (
    CandidateElement,
    ControlInfo,
    DiagnosticOptions,
    ElementProbe,
    PageSnapshot,
)

__all__ = [
    "CandidateElement",
    "ControlInfo",
    "DiagnosticEvent",
    "DiagnosticEventLog",
    "DiagnosticOptions",
    "ElementProbe",
    "PageSnapshot",
    "capture_on_failure",
    "debug_navigation",
    "log_page_info",
    "take_screenshot",
]
