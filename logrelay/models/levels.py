"""Severity taxonomies and the source → sink level mapping.

Application code emits with the fine-grained *source* levels (``silly``,
``verbose``, ``debug``, ``info``, ``http``, ``warn``, ``error``).  Sinks
filter and display on the coarse *sink* levels (``debug``, ``info``,
``warn``, ``error``).  The mapping is deliberately lossy.
"""

from __future__ import annotations

from enum import Enum


class SourceLevel(str, Enum):
    """Levels accepted by the emitter."""

    SILLY = "silly"
    VERBOSE = "verbose"
    DEBUG = "debug"
    INFO = "info"
    HTTP = "http"
    WARN = "warn"
    ERROR = "error"


class SinkLevel(str, Enum):
    """Levels used by sinks for admission and display."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def severity(self) -> int:
        """Numeric severity; higher is more severe."""
        return _SEVERITY[self]

    @classmethod
    def parse(cls, value: str | SinkLevel) -> SinkLevel:
        """Parse a sink level name (case-insensitive).

        Raises
        ------
        ValueError
            If *value* does not name a sink level.
        """
        if isinstance(value, SinkLevel):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(level.value for level in cls)
            raise ValueError(
                f"Unknown log level {value!r} (expected one of: {valid})"
            ) from None


_SEVERITY: dict[SinkLevel, int] = {
    SinkLevel.DEBUG: 10,
    SinkLevel.INFO: 20,
    SinkLevel.WARN: 30,
    SinkLevel.ERROR: 40,
}

LEVEL_MAP: dict[str, SinkLevel] = {
    SourceLevel.SILLY.value: SinkLevel.DEBUG,
    SourceLevel.VERBOSE.value: SinkLevel.DEBUG,
    SourceLevel.DEBUG.value: SinkLevel.DEBUG,
    SourceLevel.INFO.value: SinkLevel.INFO,
    SourceLevel.HTTP.value: SinkLevel.INFO,
    SourceLevel.WARN.value: SinkLevel.WARN,
    SourceLevel.ERROR.value: SinkLevel.ERROR,
}

DEFAULT_SINK_LEVEL = SinkLevel.INFO


def map_level(level: str | SourceLevel) -> SinkLevel:
    """Translate a source level into a sink level.

    Unrecognized levels fall back to ``info``.

    >>> map_level("verbose")
    <SinkLevel.DEBUG: 'debug'>
    >>> map_level("timing")
    <SinkLevel.INFO: 'info'>
    """
    key = level.value if isinstance(level, SourceLevel) else level
    return LEVEL_MAP.get(key, DEFAULT_SINK_LEVEL)


def admits(threshold: SinkLevel, level: SinkLevel) -> bool:
    """Whether a sink configured at *threshold* accepts *level*."""
    return level.severity >= threshold.severity
