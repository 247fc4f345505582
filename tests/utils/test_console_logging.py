"""Console logging setup for the scripts."""

import logging

import pytest

from vortex_deploy.utils import setup_console_logging


def test_console_logging_mutes_dependencies(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    logger = setup_console_logging(default_log_level="debug")
    assert logger is logging.getLogger()
    assert logging.getLogger("web3.RequestManager").level == logging.WARNING
    assert logging.getLogger("urllib3.connectionpool").level == logging.WARNING


def test_console_logging_bad_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(AssertionError):
        setup_console_logging()
