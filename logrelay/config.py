"""Logging configuration - env-driven, consumed by ``LogManager.init``.

All settings can be overridden via ``LOGRELAY_*`` environment variables
or a ``.env`` file, or passed as keyword arguments.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from logrelay.models.levels import DEFAULT_SINK_LEVEL, SinkLevel

DEFAULT_LOGGER_NAME = "LogRelay"
# 256-palette magenta, reserved for this library's own logger.
DEFAULT_LOGGER_COLOR = 5

RecordHandler = Callable[[str, str], object]


class LogSettings(BaseSettings):
    """Configuration surface of the routing core.

    Examples
    --------
    Override via environment::

        export LOGRELAY_LOG_LEVEL=info:debug
        export LOGRELAY_LOG_FILE=/var/log/app.log
        export LOGRELAY_WEBHOOK=collector.internal:9003
        export LOGRELAY_LOG_NO_COLORS=true

    ``log_level`` takes a single level for every sink, or a
    ``console:file`` pair; the file level also applies to the webhook.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LOGRELAY_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "debug"
    log_file: Path | None = None
    webhook: str | None = None
    log_no_colors: bool = False
    log_timestamp: bool = False
    local_timezone: bool = False
    # Route uncaught exceptions (main and worker threads) into the sinks.
    handle_exceptions: bool = True

    # Prefixes that always render in a fixed color.
    reserved_prefix_colors: dict[str, int] = Field(
        default_factory=lambda: {DEFAULT_LOGGER_NAME: DEFAULT_LOGGER_COLOR}
    )

    # Side channel receiving (source_level, formatted_line) for every record.
    log_handler: RecordHandler | None = Field(default=None, exclude=True)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        value = value.strip()
        if not value:
            return DEFAULT_SINK_LEVEL.value
        for part in value.split(":", 1):
            if part:
                SinkLevel.parse(part)
        return value

    @field_validator("webhook")
    @classmethod
    def _blank_webhook_is_absent(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("reserved_prefix_colors")
    @classmethod
    def _validate_colors(cls, value: dict[str, int]) -> dict[str, int]:
        for prefix, color in value.items():
            if not 0 <= color <= 255:
                raise ValueError(f"Color for {prefix!r} must be within 0-255, got {color}")
        return value

    @property
    def console_level(self) -> SinkLevel:
        """Threshold of the terminal sink."""
        return self._level_pair()[0]

    @property
    def file_level(self) -> SinkLevel:
        """Threshold of the file and webhook sinks."""
        return self._level_pair()[1]

    def _level_pair(self) -> tuple[SinkLevel, SinkLevel]:
        if ":" in self.log_level:
            console, file = self.log_level.split(":", 1)
            return (
                SinkLevel.parse(console) if console else DEFAULT_SINK_LEVEL,
                SinkLevel.parse(file) if file else DEFAULT_SINK_LEVEL,
            )
        level = SinkLevel.parse(self.log_level)
        return level, level
