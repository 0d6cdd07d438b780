"""SinkFanout - delivers each formatted line to every admitting sink.

A failure in one sink never blocks delivery to the others.  Failures are
reported to the operator once per distinct error message for the
lifetime of the fan-out (one generation of the lifecycle manager), so a
permanently broken sink cannot flood stderr.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from rich.console import Console

from logrelay.models.levels import SinkLevel

if TYPE_CHECKING:
    from logrelay.routing.sinks import BaseSink

logger = logging.getLogger(__name__)

DIAGNOSTIC_PREVIEW_LENGTH = 30

Reporter = Callable[[str], None]


def truncate(text: str, length: int = DIAGNOSTIC_PREVIEW_LENGTH) -> str:
    """Shorten *text* to *length* characters, ending in ``...`` if cut.

    >>> truncate("short")
    'short'
    >>> truncate("a" * 40, 10)
    'aaaaaaa...'
    """
    if len(text) <= length:
        return text
    return text[: max(length - 3, 0)] + "..."


def _stderr_reporter() -> Reporter:
    console = Console(stderr=True, markup=False, highlight=False, soft_wrap=True)

    def _report(message: str) -> None:
        console.print(message)

    return _report


class SinkFanout:
    """Routes formatted lines to ALL registered sinks that admit them.

    Parameters
    ----------
    report:
        Callable receiving operator-facing diagnostics.  Defaults to
        printing on stderr through a rich ``Console``.

    Usage
    -----
    >>> fanout = SinkFanout()
    >>> fanout.register_sink(terminal_sink)            # doctest: +SKIP
    >>> fanout.deliver(SinkLevel.INFO, "server ready")  # doctest: +SKIP
    """

    def __init__(self, report: Reporter | None = None) -> None:
        self._sinks: list[BaseSink] = []
        self._reported_errors: set[str] = set()
        self._report = report or _stderr_reporter()

    # ------------------------------------------------------------------
    # Sink management
    # ------------------------------------------------------------------

    def register_sink(self, sink: BaseSink) -> None:
        """Register a sink; sinks are written in registration order.

        Registering the same instance twice is ignored.
        """
        if sink not in self._sinks:
            self._sinks.append(sink)
            logger.debug("Registered sink: %s at %s", sink.sink_name, sink.level.value)

    def unregister_sink(self, sink: BaseSink) -> None:
        """Remove a previously registered sink."""
        try:
            self._sinks.remove(sink)
            logger.debug("Unregistered sink: %s", sink.sink_name)
        except ValueError:
            pass

    def clear(self) -> None:
        """Remove every sink, closing each one, and forget reported errors."""
        sinks, self._sinks = self._sinks, []
        for sink in sinks:
            try:
                sink.close()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Closing sink %s failed: %s", sink.sink_name, exc)
        self._reported_errors.clear()

    @property
    def registered_sinks(self) -> list[BaseSink]:
        """Return a copy of the registered sink list."""
        return list(self._sinks)

    @property
    def sink_kinds(self) -> list[str]:
        """Distinct sink kind names, in registration order."""
        return list(dict.fromkeys(sink.sink_name for sink in self._sinks))

    @property
    def reported_errors(self) -> frozenset[str]:
        return frozenset(self._reported_errors)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def deliver(self, level: SinkLevel, line: str) -> list[str]:
        """Write *line* to every sink whose threshold admits *level*.

        Returns the names of sinks that accepted the line.  Failures,
        including a failing admission check, are contained and reported
        via ``report_failure``.
        """
        succeeded: list[str] = []
        for sink in list(self._sinks):
            try:
                if not sink.supports_level(level):
                    continue
                sink.write(line, level)
                succeeded.append(sink.sink_name)
            except Exception as exc:  # noqa: BLE001
                self.report_failure(line, exc)
        return succeeded

    def report_failure(self, line: str, exc: BaseException) -> bool:
        """Tell the operator that *line* could not be delivered.

        Each distinct error message is reported once per fan-out.
        Returns ``True`` if a diagnostic was emitted.  A reporter that
        itself fails is logged and otherwise ignored.
        """
        key = str(exc)
        if key in self._reported_errors:
            return False
        self._reported_errors.add(key)
        kinds = ", ".join(self.sink_kinds) or "none"
        try:
            self._report(
                f"The log message '{truncate(line)}' cannot be written into "
                f"one or more requested destinations: {kinds}. Original error: {key}"
            )
        except Exception as report_exc:  # noqa: BLE001
            logger.warning("Delivery diagnostic could not be reported: %s", report_exc)
            return False
        return True
