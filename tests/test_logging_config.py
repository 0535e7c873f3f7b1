"""Tests for logging configuration."""

import logging

import pytest

from corkscrew.logging_config import ROOT_LOGGER, get_logger, log_auth_event, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)


def test_setup_logging_sets_level():
    logger = setup_logging("DEBUG")
    assert logger.name == ROOT_LOGGER
    assert logger.level == logging.DEBUG


def test_setup_logging_unknown_level_falls_back_to_info():
    assert setup_logging("LOUD").level == logging.INFO


def test_setup_logging_adds_one_handler():
    setup_logging()
    setup_logging()
    ours = [h for h in logging.getLogger(ROOT_LOGGER).handlers if getattr(h, "_corkscrew", False)]
    assert len(ours) == 1


def test_get_logger_namespaces():
    assert get_logger("jobs").name == "corkscrew.jobs"
    assert get_logger("corkscrew.jobs").name == "corkscrew.jobs"
    assert get_logger("corkscrew").name == "corkscrew"


def test_auth_success_logged_at_info(caplog):
    with caplog.at_level(logging.INFO, logger="corkscrew.auth.events"):
        log_auth_event("sign_in", "usr_1", True)
    assert caplog.records[-1].levelno == logging.INFO
    assert caplog.records[-1].getMessage() == "sign_in | user=usr_1 | success=True"


def test_auth_failure_logged_with_reason(caplog):
    with caplog.at_level(logging.INFO, logger="corkscrew.auth.events"):
        log_auth_event("sign_in", None, False, "Invalid login credentials")
    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "sign_in | user=- | success=False | reason=Invalid login credentials"
