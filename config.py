from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class LoggingConfig(BaseSettings):
    """Configuration for logging."""

    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    log_file_path: Optional[Path] = None


class RetryConfig(BaseSettings):
    """Default retry policy for UI actions."""

    max_attempts: int = 3
    base_delay_ms: int = 1000
    backoff: str = "fixed"  # fixed, exponential

    @field_validator("max_attempts")
    @classmethod
    def attempts_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_attempts must be at least 1")
        return v

    @field_validator("base_delay_ms")
    @classmethod
    def delay_must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("base_delay_ms must not be negative")
        return v

    @field_validator("backoff")
    @classmethod
    def backoff_must_be_known(cls, v: str) -> str:
        v = v.lower()
        if v not in ("fixed", "exponential"):
            raise ValueError("backoff must be 'fixed' or 'exponential'")
        return v


class PerformanceConfig(BaseSettings):
    """Timeout settings for element and page waits."""

    element_timeout_ms: int = 5000
    wait_for_element_timeout_ms: int = 10000
    network_idle_timeout_ms: int = 10000
    event_timeout_ms: int = 30000
    navigation_timeout_ms: int = 30000


class DiagnosticsConfig(BaseSettings):
    """Diagnostics collection settings for failed interactions."""

    enable_on_failure: bool = True
    max_controls: int = 10
    control_selector: str = "button"
    screenshot_dir: Path = Path("./test-screenshots")
    output_dir: Path = Path("./logs/diagnostics")
    max_artifacts_per_run: int = 10
    pii_mask_patterns: List[str] = []


class BrowserConfig(BaseSettings):
    """Browser launch settings for the probe CLI."""

    browser_type: str = "chromium"  # chromium, firefox, webkit
    headless: bool = True
    width: int = 1920
    height: int = 1080
    base_url: str = "https://webable.pihr.xyz"


class AppConfig(BaseSettings):
    """Root configuration class for the application."""

    logging: LoggingConfig = LoggingConfig()
    retry: RetryConfig = RetryConfig()
    performance: PerformanceConfig = PerformanceConfig()
    diagnostics: DiagnosticsConfig = DiagnosticsConfig()
    browser: BrowserConfig = BrowserConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Instantiate the main config object
config = AppConfig()
