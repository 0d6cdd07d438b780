"""Route uncaught exceptions into the active sinks.

While installed, ``sys.excepthook`` and ``threading.excepthook`` turn an
uncaught exception into an ``error`` record carrying the traceback.  The
previous hook still runs when no sink accepted the record, and always
for ``KeyboardInterrupt``.
"""

from __future__ import annotations

import logging
import sys
import threading
import traceback
from collections.abc import Callable
from types import TracebackType

from logrelay.models.levels import SourceLevel
from logrelay.models.records import LogRecord

logger = logging.getLogger(__name__)

RecordRouter = Callable[[LogRecord], list[str]]


def describe_exception(
    exc_type: type[BaseException],
    exc_value: BaseException | None,
    exc_traceback: TracebackType | None,
    thread_name: str | None = None,
) -> str:
    """Return ``uncaughtException: <message>`` followed by the traceback."""
    details = "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
    where = f" in thread {thread_name}" if thread_name else ""
    return f"uncaughtException{where}: {exc_value}\n{details.rstrip()}"


class ExceptionRouter:
    """Installs process-wide exception hooks that feed *route*.

    Parameters
    ----------
    route:
        Callable taking a ``LogRecord`` and returning the sinks that
        accepted it, usually the active ``EventBridge``.
    """

    def __init__(self, route: RecordRouter) -> None:
        self._route = route
        self._previous_hook = sys.excepthook
        self._previous_thread_hook = threading.excepthook
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        if self._installed:
            return
        self._previous_hook = sys.excepthook
        self._previous_thread_hook = threading.excepthook
        sys.excepthook = self.handle_exception
        threading.excepthook = self.handle_thread_exception
        self._installed = True
        logger.debug("Exception hooks installed")

    def uninstall(self) -> None:
        """Restore the previous hooks unless someone replaced ours since."""
        if not self._installed:
            return
        if sys.excepthook == self.handle_exception:
            sys.excepthook = self._previous_hook
        if threading.excepthook == self.handle_thread_exception:
            threading.excepthook = self._previous_thread_hook
        self._installed = False
        logger.debug("Exception hooks removed")

    def route(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException | None,
        exc_traceback: TracebackType | None,
        thread_name: str | None = None,
    ) -> bool:
        """Send one uncaught exception to the sinks; ``True`` if any took it."""
        if issubclass(exc_type, KeyboardInterrupt):
            return False
        message = describe_exception(exc_type, exc_value, exc_traceback, thread_name)
        record = LogRecord(level=SourceLevel.ERROR.value, message=message)
        return bool(self._route(record))

    def handle_exception(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: TracebackType | None,
    ) -> None:
        if not self.route(exc_type, exc_value, exc_traceback):
            self._previous_hook(exc_type, exc_value, exc_traceback)

    def handle_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if issubclass(args.exc_type, SystemExit):
            self._previous_thread_hook(args)
            return
        thread_name = args.thread.name if args.thread is not None else None
        if not self.route(args.exc_type, args.exc_value, args.exc_traceback, thread_name):
            self._previous_thread_hook(args)
