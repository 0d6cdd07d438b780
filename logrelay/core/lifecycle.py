"""LogManager - owns the emitter subscription and the active sink set.

The emitter is process-wide state, so everything hanging off it is
(re)built as one unit:

    UNINITIALIZED --init()--> ACTIVE --clear()--> UNINITIALIZED

``init`` on an ACTIVE manager clears first, so calling it repeatedly
never stacks listeners or leaks sinks.  Each init starts a new
*generation*: a fresh sink set, a fresh error-dedup set and a fresh
bridge.  Color state outlives generations.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console

from logrelay.config import LogSettings
from logrelay.core.bridge import EventBridge
from logrelay.core.colors import ColorAssigner
from logrelay.core.context import ContextStore, context_store
from logrelay.core.emitter import LOG_CHANNEL, EventSource, emitter
from logrelay.core.excepthook import ExceptionRouter
from logrelay.routing.dispatcher import Reporter, SinkFanout
from logrelay.routing.sinks import BaseSink
from logrelay.routing.sinks._formatting import (
    file_pipeline,
    http_pipeline,
    terminal_pipeline,
)
from logrelay.routing.sinks.file import FileSink
from logrelay.routing.sinks.http import HttpSink
from logrelay.routing.sinks.terminal import TerminalSink

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


class LifecycleError(RuntimeError):
    """Raised when the manager is driven in an unsupported way."""


class LogManager:
    """Builds, installs and retires logging generations.

    Parameters
    ----------
    source:
        The emitter to subscribe to.  Defaults to the process-wide one;
        tests pass a private ``LogEmitter``.
    store:
        Context store the bridge reads ambient ids from.
    colors:
        Color state; kept for the manager's whole life.
    console:
        Operator console for sink construction warnings.
    report:
        Sink for delivery diagnostics, passed to each ``SinkFanout``.
    """

    def __init__(
        self,
        source: EventSource | None = None,
        store: ContextStore | None = None,
        colors: ColorAssigner | None = None,
        *,
        console: Console | None = None,
        report: Reporter | None = None,
    ) -> None:
        self._source = source if source is not None else emitter
        self._store = store if store is not None else context_store
        self.colors = colors if colors is not None else ColorAssigner()
        self._console = console or Console(markup=False, highlight=False, soft_wrap=True)
        self._report = report

        self._state = LifecycleState.UNINITIALIZED
        self._fanout: SinkFanout | None = None
        self._bridge: EventBridge | None = None
        self._exception_router: ExceptionRouter | None = None
        self._settings: LogSettings | None = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is LifecycleState.ACTIVE

    @property
    def fanout(self) -> SinkFanout | None:
        return self._fanout

    @property
    def settings(self) -> LogSettings | None:
        return self._settings

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def init(
        self, settings: LogSettings | None = None, **overrides: Any
    ) -> SinkFanout | None:
        """Start a new generation from *settings*.

        Keyword *overrides* build a ``LogSettings`` when *settings* is
        omitted, or replace fields of *settings* when given.  Returns the
        generation's fan-out, or the current one (possibly ``None``) if a
        concurrent ``init`` superseded this call.
        """
        if settings is None:
            settings = LogSettings(**overrides)
        elif overrides:
            settings = LogSettings(
                **{**settings.model_dump(), "log_handler": settings.log_handler, **overrides}
            )

        self._retire()
        self._generation += 1
        generation = self._generation

        sinks = await self.create_sinks(settings)

        if generation != self._generation:
            # A later init() or clear() ran while we were building.
            for sink in sinks:
                sink.close()
            logger.debug("Generation %d superseded before install", generation)
            return self._fanout

        self._retire()
        self.colors.set_reserved(settings.reserved_prefix_colors)
        fanout = SinkFanout(report=self._report)
        for sink in sinks:
            fanout.register_sink(sink)

        bridge = EventBridge(
            fanout,
            self.colors,
            self._store,
            no_colors=settings.log_no_colors,
            record_handler=settings.log_handler,
        )
        self._source.on(LOG_CHANNEL, bridge)
        if settings.handle_exceptions:
            self._exception_router = ExceptionRouter(bridge)
            self._exception_router.install()

        self._fanout = fanout
        self._bridge = bridge
        self._settings = settings
        self._state = LifecycleState.ACTIVE
        logger.info(
            "Logging generation %d active with sinks: %s",
            generation,
            ", ".join(fanout.sink_kinds),
        )
        return fanout

    def init_sync(
        self, settings: LogSettings | None = None, **overrides: Any
    ) -> SinkFanout | None:
        """Run ``init`` to completion from synchronous code."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.init(settings, **overrides))
        raise LifecycleError(
            "init_sync() cannot run inside an event loop; await init() instead"
        )

    def clear(self) -> None:
        """Retire the active generation.  No-op when uninitialized.

        An ``init`` still building its sinks is superseded and installs
        nothing.
        """
        self._generation += 1
        self._retire()

    def _retire(self) -> None:
        if self._exception_router is not None:
            self._exception_router.uninstall()
            self._exception_router = None
        if self._bridge is not None:
            self._bridge.retire()
            self._source.off(LOG_CHANNEL, self._bridge)
            self._bridge = None
        if self._fanout is not None:
            self._fanout.clear()
            self._fanout = None
        if self._state is LifecycleState.ACTIVE:
            logger.debug("Logging generation %d cleared", self._generation)
        self._state = LifecycleState.UNINITIALIZED

    # ------------------------------------------------------------------
    # Sink construction
    # ------------------------------------------------------------------

    async def create_sinks(self, settings: LogSettings) -> list[BaseSink]:
        """Build the sink set described by *settings*.

        A file or webhook sink that cannot be built is reported on the
        operator console and left out; the rest are still returned.
        """
        sinks: list[BaseSink] = [
            TerminalSink(
                settings.console_level,
                terminal_pipeline(
                    no_colors=settings.log_no_colors,
                    timestamp=settings.log_timestamp,
                    local_timezone=settings.local_timezone,
                ),
                no_colors=settings.log_no_colors,
            )
        ]

        if settings.log_file is not None:
            try:
                sinks.append(await self._create_file_sink(settings.log_file, settings))
            except Exception as exc:  # noqa: BLE001
                self._console.print(
                    f"Tried to attach logging to file '{settings.log_file}' but an error "
                    f"occurred: {exc}"
                )

        if settings.webhook:
            try:
                sinks.append(
                    HttpSink(
                        settings.webhook,
                        settings.file_level,
                        http_pipeline(local_timezone=settings.local_timezone),
                    )
                )
            except Exception as exc:  # noqa: BLE001
                self._console.print(
                    f"Tried to attach logging to Http at {settings.webhook} but an error "
                    f"occurred: {exc}"
                )

        return sinks

    async def _create_file_sink(self, path: Path, settings: LogSettings) -> FileSink:
        # Each run starts from an empty file.
        if await asyncio.to_thread(path.exists):
            await asyncio.to_thread(path.unlink)
        return FileSink(
            path,
            settings.file_level,
            file_pipeline(local_timezone=settings.local_timezone),
        )


# Process-wide manager bound to the process-wide emitter.
manager = LogManager()


async def init(settings: LogSettings | None = None, **overrides: Any) -> SinkFanout | None:
    """Initialize the process-wide logging pipeline."""
    return await manager.init(settings, **overrides)


def clear() -> None:
    """Tear down the process-wide logging pipeline."""
    manager.clear()
