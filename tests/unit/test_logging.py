"""Unit tests for logging infrastructure."""
import logging
from vbo.infrastructure.logging import setup_logging


def _flush(logger):
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_setup_logging_creates_log_file(tmp_path):
    """Test that setup_logging creates the log file and its parents."""
    log_file = tmp_path / "logs" / "nested" / "optimize.log"

    logger = setup_logging(log_file, debug=False)

    assert isinstance(logger, logging.Logger)
    assert log_file.exists()


def test_setup_logging_levels(tmp_path):
    log_file = tmp_path / "optimize.log"

    logger = setup_logging(log_file, debug=False)
    assert logger.getEffectiveLevel() == logging.INFO

    logger = setup_logging(log_file, debug=True)
    assert logger.getEffectiveLevel() == logging.DEBUG


def test_setup_logging_format(tmp_path):
    """Test that log lines carry timestamp separator and level."""
    log_file = tmp_path / "optimize.log"

    logger = setup_logging(log_file, debug=False)
    logger.info("Info message")
    logger.warning("Warning message")
    _flush(logger)

    content = log_file.read_text()
    assert " - INFO - Info message" in content
    assert " - WARNING - Warning message" in content


def test_setup_logging_debug_messages(tmp_path):
    """Test that debug messages only appear in debug mode."""
    log_file = tmp_path / "optimize.log"

    logger_normal = setup_logging(log_file, debug=False)
    logging.getLogger("vbo.pipeline.scheduler").debug("Debug message in normal mode")
    _flush(logger_normal)
    assert "Debug message in normal mode" not in log_file.read_text()

    logger_debug = setup_logging(log_file, debug=True)
    logging.getLogger("vbo.pipeline.scheduler").debug("Debug message in debug mode")
    _flush(logger_debug)
    assert "Debug message in debug mode" in log_file.read_text()
