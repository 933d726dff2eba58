import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import structlog

from config import config, LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d] %(message)s"

# structlog event dicts become stdlib LogRecords; every key must avoid LogRecord attributes
SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
    structlog.stdlib.render_to_log_kwargs,
]

_is_configured = False


def _timestamped(path: Path) -> Path:
    """actions.log -> actions_20240101_120000.log, one file per run."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return path.with_name(f"{path.stem}_{stamp}{path.suffix}")


def _build_handlers(log_file_path: Optional[Path]) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file_path:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(_timestamped(log_file_path), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(logging_config: Optional[LoggingConfig] = None):
    """
    Route stdlib logging and structlog to stdout and an optional log file.

    Only the first call has an effect.

    Args:
        logging_config: Logging section to use. Defaults to config.logging.
    """
    global _is_configured
    if _is_configured:
        return

    logging_config = logging_config or config.logging
    level = getattr(logging, logging_config.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        handlers=_build_handlers(logging_config.log_file_path),
        force=True,
    )
    structlog.configure(
        processors=SHARED_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _is_configured = True


def get_structured_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger with the given name.

    Args:
        name: The name of the logger (usually __name__ of the module)

    Returns:
        A structured logger instance with context binding capabilities

    Example:
        >>> logger = get_structured_logger(__name__)
        >>> logger.info("action_succeeded", action="open_reports", attempt=2)
    """
    return structlog.get_logger(name)


def bind_context(logger: structlog.BoundLogger, **context) -> structlog.BoundLogger:
    """
    Bind context data to a logger for all subsequent log entries.

    Args:
        logger: The structured logger to bind context to
        **context: Keyword arguments to bind as context

    Returns:
        A new logger with the bound context

    Example:
        >>> logger = get_structured_logger(__name__)
        >>> click_logger = bind_context(logger, action="click_reports", description="Reports menu")
        >>> click_logger.warning("action_attempt_failed")  # Will include action and description
    """
    return logger.bind(**context)
