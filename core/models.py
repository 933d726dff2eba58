from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")


class Backoff(str, Enum):
    """Delay growth between retry attempts."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to run an action and how long to wait between runs."""

    max_attempts: int = 3
    base_delay_ms: int = 1000
    backoff: Backoff = Backoff.FIXED

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must not be negative, got {self.base_delay_ms}")
        # Accept plain strings such as "exponential" coming from settings.
        object.__setattr__(self, "backoff", Backoff(self.backoff))

    def delay_ms(self, attempt_number: int) -> int:
        """Delay to wait after failed attempt ``attempt_number`` (1-based)."""
        if self.backoff is Backoff.EXPONENTIAL:
            return self.base_delay_ms * 2 ** (attempt_number - 1)
        return self.base_delay_ms

    @classmethod
    def from_config(cls, retry_config: Any) -> "RetryPolicy":
        """Build a policy from the ``retry`` section of the app config."""
        return cls(
            max_attempts=retry_config.max_attempts,
            base_delay_ms=retry_config.base_delay_ms,
            backoff=Backoff(retry_config.backoff),
        )


@dataclass
class AttemptOutcome:
    """Result of a single attempt."""

    attempt_number: int
    succeeded: bool
    elapsed_ms: float
    error: Optional[str] = None


@dataclass
class ExecutionReport(Generic[T]):
    """All attempts of one action plus its final result."""

    action_name: str
    outcomes: List[AttemptOutcome] = field(default_factory=list)
    value: Optional[T] = None
    failure: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @property
    def attempts(self) -> int:
        return len(self.outcomes)

    @property
    def total_elapsed_ms(self) -> float:
        return sum(outcome.elapsed_ms for outcome in self.outcomes)

    def unwrap(self) -> T:
        """Return the success value or raise the final failure unchanged."""
        if self.failure is not None:
            raise self.failure
        return self.value  # type: ignore[return-value]


def describe_error(error: BaseException) -> str:
    """Short one-line summary of an exception for logs and outcomes."""
    message = str(error).strip().splitlines()[0] if str(error).strip() else ""
    return f"{type(error).__name__}: {message}" if message else type(error).__name__
