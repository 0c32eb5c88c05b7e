"""Environment-driven settings for the webhook receiver."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, StringConstraints, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import ConfigError

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

DEFAULT_PORT = 23614
DEFAULT_SCRIPT_PATH = "/opt/declare-sh/trigger-restore.sh"
DEFAULT_TARGET_REF = "refs/heads/main"


class ReceiverSettings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="RESTORE_HOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        str_strip_whitespace=True,
    )

    host: NonEmptyStr = "::"
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    script_path: NonEmptyStr = DEFAULT_SCRIPT_PATH
    # Empty string means the script is executed directly.
    script_interpreter: NonEmptyStr | None = "bash"

    rate_limit_window_ms: int = Field(default=60_000, ge=1)
    max_triggers_per_window: int = Field(default=3, ge=1)
    target_ref: NonEmptyStr = DEFAULT_TARGET_REF

    webhook_secret: NonEmptyStr | None = None
    max_body_bytes: int = Field(default=1_048_576, ge=1024, le=10_485_760)

    log_level: Literal["debug", "info", "warning", "error"] = "info"
    log_format: Literal["console", "json"] = "console"

    @field_validator("script_interpreter", "webhook_secret", mode="before")
    @classmethod
    def _blank_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def window_seconds(self) -> float:
        return self.rate_limit_window_ms / 1000.0

    def trigger_command(self) -> list[str]:
        """The fixed argv used for every trigger run."""
        if self.script_interpreter:
            return [self.script_interpreter, str(self.script)]
        return [str(self.script)]

    @property
    def script(self) -> Path:
        return Path(self.script_path).expanduser()


def load_settings(**overrides: object) -> ReceiverSettings:
    """Build settings from the environment, with explicit overrides on top."""
    try:
        return ReceiverSettings(**overrides)
    except ValidationError as exc:
        raise ConfigError(f"Invalid receiver settings: {exc}") from exc
