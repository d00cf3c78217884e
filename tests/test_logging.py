"""Tests for repoprompt logging setup."""

from __future__ import annotations

import logging

from repoprompt.logging import configure_logging, get_logger


def test_get_logger_builds_children_of_the_package_logger() -> None:
    assert get_logger().name == "repoprompt"
    assert get_logger("scanner").name == "repoprompt.scanner"
    assert get_logger("prompting.validator").parent is get_logger("prompting")


def test_configure_logging_resets_handlers_and_stops_propagation(tmp_path) -> None:
    configure_logging()
    logger = configure_logging(verbose=True, log_file=tmp_path / "run.log")

    try:
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert [type(handler) for handler in logger.handlers] == [
            logging.StreamHandler,
            logging.FileHandler,
        ]
    finally:
        configure_logging()

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1


def test_child_records_reach_the_log_file(tmp_path) -> None:
    log_file = tmp_path / "run.log"
    logger = configure_logging(verbose=True, log_file=log_file)

    try:
        get_logger("orchestrator").info("Starting analysis of %s", "/repos/shop")
        for handler in logger.handlers:
            handler.flush()
    finally:
        configure_logging()

    assert "INFO repoprompt.orchestrator: Starting analysis of /repos/shop" in log_file.read_text(encoding="utf-8")
