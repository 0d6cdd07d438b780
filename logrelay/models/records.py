"""Per-event and per-scope records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from logrelay.models.levels import SinkLevel


class LogRecord(BaseModel):
    """One emitted event, consumed once by the bridge.

    ``level`` is kept as a plain string: the emitter accepts any level
    name and the bridge maps unknown names to ``info``.
    """

    model_config = ConfigDict(frozen=True)

    level: str
    message: str
    prefix: str | None = None

    @field_validator("prefix")
    @classmethod
    def _empty_prefix_is_absent(cls, value: str | None) -> str | None:
        return value or None


class LogContext(BaseModel):
    """Ambient identity of the unit of work that is logging."""

    model_config = ConfigDict(frozen=True)

    request_id: str | None = None
    session_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.request_id is None and self.session_id is None

    def child(self, **overrides: str | None) -> LogContext:
        """Derive a new context, inheriting values for unspecified fields."""
        return self.model_copy(update=overrides)


EMPTY_CONTEXT = LogContext()


class FormattedRecord(BaseModel):
    """A line travelling through a sink's format pipeline."""

    model_config = ConfigDict(frozen=True)

    level: SinkLevel
    message: str
    timestamp: str | None = None
