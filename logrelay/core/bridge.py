"""EventBridge - turns emitted records into routed lines.

For every record on the emitter's ``"log"`` channel the bridge:

1. maps the source level to a sink level,
2. builds a header from the ambient request/session context,
3. appends the (colored) prefix tag,
4. hands ``(sink_level, line)`` to the fan-out,
5. passes ``(source_level, line)`` to the optional record handler.

Nothing raised while handling a record reaches the emitter.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from logrelay.core.colors import ColorAssigner
from logrelay.core.context import ContextStore
from logrelay.models.levels import SinkLevel, map_level
from logrelay.models.records import LogContext, LogRecord
from logrelay.routing.dispatcher import SinkFanout

logger = logging.getLogger(__name__)

REQUEST_TAG_LENGTH = 8


class EventBridge:
    """The single subscriber of one lifecycle generation.

    Parameters
    ----------
    fanout:
        Destination of every formatted line.
    colors:
        Color state, shared across generations by the owning manager.
    context_store:
        Where the ambient request/session context is read from.
    no_colors:
        Render prefix and session tags without escape codes.
    record_handler:
        Optional callable receiving ``(source_level, line)``.
    """

    def __init__(
        self,
        fanout: SinkFanout,
        colors: ColorAssigner,
        context_store: ContextStore,
        *,
        no_colors: bool = False,
        record_handler: Callable[[str, str], object] | None = None,
    ) -> None:
        self._fanout = fanout
        self._colors = colors
        self._context_store = context_store
        self._no_colors = no_colors
        self._record_handler = record_handler
        self._retired = False

    @property
    def retired(self) -> bool:
        return self._retired

    def retire(self) -> None:
        """Stop handling records; later calls are dropped silently."""
        self._retired = True

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def context_header(self, context: LogContext) -> str:
        """Return ``[req][session]``, ``[req]`` or an empty string."""
        if not context.request_id:
            return ""
        header = f"[{context.request_id[:REQUEST_TAG_LENGTH]}]"
        if context.session_id:
            header += self._colors.session_tag(context.session_id, self._no_colors)
        return header

    def prefix_tag(self, prefix: str) -> str:
        tag = f"[{prefix}]"
        if self._no_colors:
            return tag
        return self._colors.colorize_prefix(tag, prefix)

    def format(self, record: LogRecord) -> tuple[SinkLevel, str]:
        """Return the sink level and final line for *record*."""
        level = map_level(record.level)
        header = self.context_header(self._context_store.current())
        if record.prefix:
            header += self.prefix_tag(record.prefix)
        line = f"{header} {record.message}" if header else record.message
        return level, line

    # ------------------------------------------------------------------
    # Emitter listener
    # ------------------------------------------------------------------

    def __call__(self, record: LogRecord) -> list[str]:
        """Route *record*; return the names of sinks that accepted it."""
        if self._retired:
            logger.debug("Dropped record from retired bridge: %s", record.level)
            return []

        try:
            level, line = self.format(record)
        except Exception as exc:  # noqa: BLE001
            self._fanout.report_failure(record.message, exc)
            return []

        delivered = self._fanout.deliver(level, line)

        if self._record_handler is not None:
            try:
                self._record_handler(record.level, line)
            except Exception as exc:  # noqa: BLE001
                self._fanout.report_failure(line, exc)

        return delivered
