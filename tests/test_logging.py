"""Tests for logging setup and the CLI entry point."""

from __future__ import annotations

import json

import pytest
import structlog

from restore_hook.cli import main
from restore_hook.logging import get_logger, setup_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


def test_json_logs_have_event_level_and_timestamp(capsys):
    setup_logging("info", "json")
    get_logger("restore_hook.test").info("webhook.received", delivery_id="d1")
    line = capsys.readouterr().err.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "webhook.received"
    assert record["delivery_id"] == "d1"
    assert record["level"] == "info"
    assert "timestamp" in record


def test_level_filters_debug(capsys):
    setup_logging("info", "json")
    get_logger().debug("subprocess.stream.error", tag="stdout")
    assert capsys.readouterr().err == ""


def test_unknown_level_falls_back_to_info(capsys):
    setup_logging("chatty", "json")
    log = get_logger()
    log.debug("hidden")
    log.info("shown")
    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err


def test_main_reports_config_error(monkeypatch, capsys):
    monkeypatch.setenv("RESTORE_HOOK_PORT", "0")
    assert main() == 2
    assert "Invalid receiver settings" in capsys.readouterr().err
