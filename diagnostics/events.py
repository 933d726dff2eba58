"""
Structured diagnostic event log.

Collects events emitted by the action executor and the diagnostic snapshot
so test code can assert on them instead of reading console output.
"""

import json
import os
import threading
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import structlog


SEVERITIES = ("debug", "info", "warning", "error")


@dataclass
class DiagnosticEvent:
    """A single structured event."""

    severity: str
    component: str
    message: str
    timestamp: float = field(default_factory=time.time)
    fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = time.strftime(
            "%Y-%m-%dT%H:%M:%SZ", time.gmtime(self.timestamp)
        )
        return data


class DiagnosticEventLog:
    """
    In-memory, queryable log of diagnostic events.

    One instance is created per test run and passed explicitly to the
    executor and to the snapshot functions.
    """

    def __init__(self, max_events: int = 1000):
        """
        Initialize an empty event log.

        Args:
            max_events: Oldest events are dropped beyond this count
        """
        self.max_events = max_events
        self.logger = structlog.get_logger(__name__)
        self.events: List[DiagnosticEvent] = []
        self.lock = threading.RLock()

    def record(
        self,
        severity: str,
        component: str,
        message: str,
        **fields: Any,
    ) -> DiagnosticEvent:
        """
        Record an event.

        Args:
            severity: One of "debug", "info", "warning", "error"
            component: Emitting component, e.g. "executor" or "snapshot"
            message: Snake-case event name
            **fields: Additional structured data

        Returns:
            The recorded event
        """
        if severity not in SEVERITIES:
            raise ValueError(f"Unknown severity '{severity}'. Must be one of {SEVERITIES}")

        event = DiagnosticEvent(
            severity=severity,
            component=component,
            message=message,
            fields=dict(fields),
        )
        with self.lock:
            self.events.append(event)
            if len(self.events) > self.max_events:
                self.events = self.events[-self.max_events:]
        return event

    def query(
        self,
        component: Optional[str] = None,
        severity: Optional[str] = None,
        message: Optional[str] = None,
    ) -> List[DiagnosticEvent]:
        """Return events matching every given filter, oldest first."""
        with self.lock:
            return [
                event
                for event in self.events
                if (component is None or event.component == component)
                and (severity is None or event.severity == severity)
                and (message is None or event.message == message)
            ]

    def count_by_severity(self) -> Dict[str, int]:
        with self.lock:
            counts = {severity: 0 for severity in SEVERITIES}
            for event in self.events:
                counts[event.severity] += 1
            return counts

    def clear(self) -> None:
        with self.lock:
            self.events.clear()

    def export_to_json(self, file_path: str) -> str:
        """
        Export all events to a JSON file.

        Args:
            file_path: Path to save the JSON file

        Returns:
            Path to the exported file
        """
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with self.lock:
            payload = {
                "summary": self.count_by_severity(),
                "events": [event.to_dict() for event in self.events],
            }

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, default=str)

        self.logger.info("events_exported", file_path=file_path, count=len(payload["events"]))
        return file_path
