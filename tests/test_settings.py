"""Tests for receiver settings."""

from __future__ import annotations

import pytest

from restore_hook.config import ConfigError
from restore_hook.settings import ReceiverSettings, load_settings


class TestReceiverSettings:
    def test_defaults(self):
        s = ReceiverSettings()
        assert s.host == "::"
        assert s.port == 23614
        assert s.script_path == "/opt/declare-sh/trigger-restore.sh"
        assert s.script_interpreter == "bash"
        assert s.rate_limit_window_ms == 60_000
        assert s.max_triggers_per_window == 3
        assert s.target_ref == "refs/heads/main"
        assert s.webhook_secret is None
        assert s.log_level == "info"

    def test_window_seconds(self):
        s = ReceiverSettings(rate_limit_window_ms=1500)
        assert s.window_seconds == 1.5

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("RESTORE_HOOK_PORT", "8080")
        monkeypatch.setenv("RESTORE_HOOK_TARGET_REF", "refs/heads/release")
        monkeypatch.setenv("RESTORE_HOOK_MAX_TRIGGERS_PER_WINDOW", "5")
        monkeypatch.setenv("RESTORE_HOOK_LOG_LEVEL", "DEBUG")
        s = load_settings()
        assert s.port == 8080
        assert s.target_ref == "refs/heads/release"
        assert s.max_triggers_per_window == 5
        assert s.log_level == "debug"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("RESTORE_HOOK_PORT=9999\n", encoding="utf-8")
        assert ReceiverSettings().port == 9999

    def test_trigger_command_with_interpreter(self):
        s = ReceiverSettings(script_path="/srv/restore.sh")
        assert s.trigger_command() == ["bash", "/srv/restore.sh"]

    def test_blank_interpreter_runs_script_directly(self, monkeypatch):
        monkeypatch.setenv("RESTORE_HOOK_SCRIPT_INTERPRETER", "")
        s = load_settings(script_path="/srv/restore.sh")
        assert s.script_interpreter is None
        assert s.trigger_command() == ["/srv/restore.sh"]

    def test_blank_secret_is_none(self, monkeypatch):
        monkeypatch.setenv("RESTORE_HOOK_WEBHOOK_SECRET", "  ")
        assert load_settings().webhook_secret is None

    def test_port_range_validation(self):
        with pytest.raises(ConfigError):
            load_settings(port=0)
        with pytest.raises(ConfigError):
            load_settings(port=70000)

    def test_max_triggers_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("RESTORE_HOOK_MAX_TRIGGERS_PER_WINDOW", "0")
        with pytest.raises(ConfigError, match="max_triggers_per_window"):
            load_settings()

    def test_empty_target_ref_rejected(self):
        with pytest.raises(ConfigError):
            load_settings(target_ref="  ")

    def test_unknown_log_format_rejected(self):
        with pytest.raises(ConfigError):
            load_settings(log_format="xml")
