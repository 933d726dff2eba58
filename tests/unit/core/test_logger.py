import logging
import time

import pytest

import core.logger
from config import LoggingConfig
from core.logger import bind_context, get_structured_logger, setup_logging


@pytest.fixture(autouse=True)
def configured_logger():
    """
    A pytest fixture that ensures the logging is set up before each test.
    The autouse=True flag makes it automatically used for all tests in the module.
    """
    setup_logging()


# Get a logger instance for the test module
logger = logging.getLogger(__name__)


def test_logging_setup_produces_correct_log_record(caplog):
    """
    Tests if the logger setup produces a LogRecord with the correct attributes.
    """
    with caplog.at_level(logging.INFO):
        test_message = "This is a test message for log record attributes."
        pre_log_time = time.time()
        logger.info(test_message)

    assert len(caplog.records) == 1, f"Should have captured exactly one log record, but captured {len(caplog.records)}."

    record = caplog.records[0]
    assert record.levelname == "INFO"
    assert record.name == __name__
    assert record.getMessage() == test_message
    assert pre_log_time <= record.created <= time.time()


def test_structured_logger_routes_through_stdlib(caplog):
    """Structured events end up as stdlib records carrying the bound context."""
    structured = bind_context(get_structured_logger("tests.structured"), action="click:Reports")

    with caplog.at_level(logging.WARNING):
        structured.warning("action_attempt_failed", attempt=1)

    records = [r for r in caplog.records if r.name == "tests.structured"]
    assert len(records) == 1
    assert "action_attempt_failed" in records[0].getMessage()
    assert records[0].levelname == "WARNING"


def test_setup_logging_is_idempotent():
    handlers_before = list(logging.getLogger().handlers)

    setup_logging()

    assert logging.getLogger().handlers == handlers_before


def test_file_handler_writes_timestamped_log(tmp_path, monkeypatch):
    """A configured log file gets a timestamp suffix and receives records."""
    monkeypatch.setattr(core.logger, "_is_configured", False)
    log_path = tmp_path / "logs" / "actions.log"

    setup_logging(LoggingConfig(log_level="DEBUG", log_file_path=log_path))
    logging.getLogger("tests.file").info("written to file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    files = list((tmp_path / "logs").glob("actions_*.log"))
    assert len(files) == 1
    assert "written to file" in files[0].read_text(encoding="utf-8")

    # Restore the default console-only configuration for other tests
    monkeypatch.setattr(core.logger, "_is_configured", False)
    setup_logging()
