from __future__ import annotations

import io
import logging

import pytest

from fc_statements.logging_setup import configure_logging, get_logger


def test_records_use_the_level_prefix_format():
    stream = io.StringIO()
    configure_logging("debug", stream=stream)

    get_logger("fc_statements.aggregate").debug("parsed %d lines", 3)

    assert stream.getvalue() == "DEBUG: parsed 3 lines\n"


def test_only_the_first_configuration_applies():
    first, second = io.StringIO(), io.StringIO()
    configure_logging("error", stream=first)
    configure_logging("debug", stream=second)

    log = get_logger("fc_statements.discovery")
    log.info("hidden")
    log.error("shown")

    assert first.getvalue() == "ERROR: shown\n"
    assert second.getvalue() == ""


def test_level_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FC_STATEMENTS_LOG_LEVEL", "WARNING")
    configure_logging(stream=io.StringIO())

    assert logging.getLogger("fc_statements").level == logging.WARNING


def test_unknown_level_names_default_to_info(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FC_STATEMENTS_LOG_LEVEL", "chatty")
    configure_logging("chatty", stream=io.StringIO())

    assert logging.getLogger("fc_statements").level == logging.INFO
