"""Process-wide log emitter - a small publish/subscribe event source.

Application code never talks to sinks.  It emits ``LogRecord`` events on
the ``"log"`` channel, usually through a prefix-bound ``PrefixLogger``:

>>> log = emitter.get_logger("driver")
>>> log.info("Session %s created", "abc")    # doctest: +SKIP

Whatever is subscribed to the channel decides what happens next; with
no subscriber an event is simply dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from logrelay.models.levels import SourceLevel
from logrelay.models.records import LogRecord

logger = logging.getLogger(__name__)

LOG_CHANNEL = "log"

Listener = Callable[[LogRecord], None]


@runtime_checkable
class EventSource(Protocol):
    """What the lifecycle manager needs from an emitter."""

    def on(self, channel: str, listener: Listener) -> None: ...

    def off(self, channel: str, listener: Listener) -> None: ...

    def listener_count(self, channel: str) -> int: ...


class LogEmitter:
    """Synchronous multi-channel event emitter.

    Listeners run in subscription order on the caller's thread and
    execution context, so a listener sees the emitting code's ambient
    context.  A listener exception propagates to the emitting caller.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def on(self, channel: str, listener: Listener) -> None:
        self._listeners.setdefault(channel, []).append(listener)

    def off(self, channel: str, listener: Listener) -> None:
        """Remove one registration of *listener*; unknown listeners are ignored."""
        listeners = self._listeners.get(channel, [])
        try:
            listeners.remove(listener)
        except ValueError:
            pass

    def remove_all_listeners(self, channel: str | None = None) -> None:
        if channel is None:
            self._listeners.clear()
        else:
            self._listeners.pop(channel, None)

    def listener_count(self, channel: str) -> int:
        return len(self._listeners.get(channel, []))

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def emit(self, channel: str, record: LogRecord) -> bool:
        """Deliver *record* to every listener of *channel*.

        Returns ``True`` if anyone was listening.
        """
        # Copy so a listener may unsubscribe while being called.
        listeners = list(self._listeners.get(channel, []))
        for listener in listeners:
            listener(record)
        return bool(listeners)

    def log(
        self, level: str | SourceLevel, prefix: str | None, message: str, *args: Any
    ) -> LogRecord:
        """Build a record and emit it on the ``"log"`` channel.

        ``message`` is %-formatted with *args* when any are given.
        """
        if isinstance(level, SourceLevel):
            level = level.value
        if args:
            message = message % args
        record = LogRecord(level=level, message=str(message), prefix=prefix)
        self.emit(LOG_CHANNEL, record)
        return record

    def silly(self, prefix: str | None, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.SILLY, prefix, message, *args)

    def verbose(self, prefix: str | None, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.VERBOSE, prefix, message, *args)

    def debug(self, prefix: str | None, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.DEBUG, prefix, message, *args)

    def info(self, prefix: str | None, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.INFO, prefix, message, *args)

    def http(self, prefix: str | None, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.HTTP, prefix, message, *args)

    def warn(self, prefix: str | None, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.WARN, prefix, message, *args)

    def error(self, prefix: str | None, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.ERROR, prefix, message, *args)

    def get_logger(self, prefix: str | None = None) -> PrefixLogger:
        """Return a facade that emits every record with *prefix*."""
        return PrefixLogger(self, prefix)


class PrefixLogger:
    """Convenience facade bound to one prefix and one emitter."""

    def __init__(self, emitter: LogEmitter, prefix: str | None) -> None:
        self._emitter = emitter
        self.prefix = prefix

    def log(self, level: str | SourceLevel, message: str, *args: Any) -> LogRecord:
        return self._emitter.log(level, self.prefix, message, *args)

    def silly(self, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.SILLY, message, *args)

    def verbose(self, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.VERBOSE, message, *args)

    def debug(self, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.DEBUG, message, *args)

    def info(self, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.INFO, message, *args)

    def http(self, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.HTTP, message, *args)

    def warn(self, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.WARN, message, *args)

    def error(self, message: str, *args: Any) -> LogRecord:
        return self.log(SourceLevel.ERROR, message, *args)

    def __repr__(self) -> str:
        return f"PrefixLogger(prefix={self.prefix!r})"


# The process-wide emitter.  Exactly one LogManager subscribes to it.
emitter = LogEmitter()
