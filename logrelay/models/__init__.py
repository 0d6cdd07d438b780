"""logrelay data models - pydantic v2, frozen."""

from logrelay.models.levels import (
    DEFAULT_SINK_LEVEL,
    LEVEL_MAP,
    SinkLevel,
    SourceLevel,
    admits,
    map_level,
)
from logrelay.models.records import EMPTY_CONTEXT, FormattedRecord, LogContext, LogRecord

__all__ = [
    # levels
    "SourceLevel",
    "SinkLevel",
    "LEVEL_MAP",
    "DEFAULT_SINK_LEVEL",
    "map_level",
    "admits",
    # records
    "LogRecord",
    "LogContext",
    "EMPTY_CONTEXT",
    "FormattedRecord",
]
