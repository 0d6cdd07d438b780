"""Format pipelines shared by the logrelay sinks.

A pipeline is an ordered list of steps, each taking and returning a
``FormattedRecord``.  Sinks build the pipeline they need (timestamp,
color stripping) and render the final record themselves.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from logrelay.core.colors import strip_colors
from logrelay.models.levels import SinkLevel
from logrelay.models.records import FormattedRecord

FormatStep = Callable[[FormattedRecord], FormattedRecord]
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime | None = None, local_timezone: bool = False) -> str:
    """Render *moment* as ``YYYY-MM-DD HH:mm:ss:SSS``.

    The time is rendered in UTC unless *local_timezone* is set, in which
    case the local wall-clock time is used.  Naive datetimes are taken
    to be UTC.

    >>> format_timestamp(datetime(2012, 11, 4, 14, 51, 6, 157000, tzinfo=timezone.utc))
    '2012-11-04 14:51:06:157'
    """
    moment = moment or _utc_now()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone() if local_timezone else moment.astimezone(timezone.utc)
    return f"{moment:%Y-%m-%d %H:%M:%S}:{moment.microsecond // 1000:03d}"


def add_timestamp(local_timezone: bool = False, clock: Clock = _utc_now) -> FormatStep:
    """Step that stamps the record with the current time."""

    def _step(record: FormattedRecord) -> FormattedRecord:
        stamp = format_timestamp(clock(), local_timezone)
        return record.model_copy(update={"timestamp": stamp})

    return _step


def remove_colors(record: FormattedRecord) -> FormattedRecord:
    """Step that strips ANSI color codes from the message."""
    return record.model_copy(update={"message": strip_colors(record.message)})


class FormatPipeline:
    """An ordered chain of format steps."""

    def __init__(self, *steps: FormatStep) -> None:
        self._steps: tuple[FormatStep, ...] = steps

    def __len__(self) -> int:
        return len(self._steps)

    def apply(self, line: str, level: SinkLevel) -> FormattedRecord:
        record = FormattedRecord(level=level, message=line)
        for step in self._steps:
            record = step(record)
        return record


def terminal_pipeline(
    *, no_colors: bool, timestamp: bool, local_timezone: bool = False
) -> FormatPipeline:
    steps: list[FormatStep] = []
    if timestamp:
        steps.append(add_timestamp(local_timezone))
    if no_colors:
        steps.append(remove_colors)
    return FormatPipeline(*steps)


def file_pipeline(*, local_timezone: bool = False) -> FormatPipeline:
    return FormatPipeline(remove_colors, add_timestamp(local_timezone))


def http_pipeline(*, local_timezone: bool = False) -> FormatPipeline:
    return FormatPipeline(remove_colors, add_timestamp(local_timezone))
