from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class CandidateElement:
    """A named element the snapshot should look for."""

    name: str
    selector: str


@dataclass
class ElementProbe:
    name: str
    selector: str
    count: int = 0
    visible: Optional[bool] = None
    error: Optional[str] = None

    @property
    def exists(self) -> bool:
        return self.count > 0

    @property
    def status(self) -> str:
        if self.error is not None and not self.exists:
            return "error"
        if not self.exists:
            return "absent"
        return "visible" if self.visible else "hidden"


@dataclass
class ControlInfo:
    index: int
    text: Optional[str]
    name: Optional[str]


@dataclass
class PageSnapshot:
    """Best-effort inventory of the page at one moment."""

    url: Optional[str] = None
    title: Optional[str] = None
    frame_urls: List[str] = field(default_factory=list)
    candidates: List[ElementProbe] = field(default_factory=list)
    controls: List[ControlInfo] = field(default_factory=list)
    total_controls: int = 0
    errors: List[str] = field(default_factory=list)

    def candidate(self, name: str) -> Optional[ElementProbe]:
        for probe in self.candidates:
            if probe.name == name:
                return probe
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for probe_data, probe in zip(data["candidates"], self.candidates):
            probe_data["status"] = probe.status
        return data


@dataclass
class DiagnosticOptions:
    enable_on_failure: bool = True
    capture_screenshot: bool = True
    capture_html: bool = True
    output_dir: Path = Path("./logs/diagnostics")
    max_artifacts_per_run: int = 10
    pii_mask_patterns: list[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, diagnostics_config: Any) -> "DiagnosticOptions":
        return cls(
            enable_on_failure=diagnostics_config.enable_on_failure,
            output_dir=Path(diagnostics_config.output_dir),
            max_artifacts_per_run=diagnostics_config.max_artifacts_per_run,
            pii_mask_patterns=list(diagnostics_config.pii_mask_patterns),
        )
