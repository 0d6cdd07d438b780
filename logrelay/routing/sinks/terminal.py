"""Terminal sink - writes lines to stdout, errors to stderr.

Lines arrive with ANSI color escapes already embedded by the bridge.
They are handed to rich as ``Text.from_ansi`` so rich decides whether the
attached stream can show them; with ``no_colors`` the pipeline strips
the escapes before rich sees the line.
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from logrelay.models.levels import SinkLevel, admits
from logrelay.routing.sinks._formatting import FormatPipeline, terminal_pipeline


def _make_console(*, stderr: bool, no_colors: bool) -> Console:
    return Console(
        stderr=stderr,
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
        no_color=no_colors,
    )


class TerminalSink:
    """Writes formatted lines to the terminal.

    Parameters
    ----------
    level:
        Admission threshold.
    pipeline:
        Format pipeline; defaults to plain colored output.
    console, error_console:
        Rich consoles for regular and ``error`` lines.  Created on
        stdout/stderr when omitted.
    """

    def __init__(
        self,
        level: SinkLevel = SinkLevel.DEBUG,
        pipeline: FormatPipeline | None = None,
        *,
        no_colors: bool = False,
        console: Console | None = None,
        error_console: Console | None = None,
    ) -> None:
        self._level = level
        if pipeline is None:
            pipeline = terminal_pipeline(no_colors=no_colors, timestamp=False)
        self._pipeline = pipeline
        self._console = console or _make_console(stderr=False, no_colors=no_colors)
        self._error_console = error_console or _make_console(stderr=True, no_colors=no_colors)

    @property
    def sink_name(self) -> str:
        return "terminal"

    @property
    def level(self) -> SinkLevel:
        return self._level

    def supports_level(self, level: SinkLevel) -> bool:
        return admits(self._level, level)

    def write(self, line: str, level: SinkLevel) -> None:
        record = self._pipeline.apply(line, level)
        rendered = (
            f"{record.timestamp} - {record.message}" if record.timestamp else record.message
        )
        target = self._error_console if level is SinkLevel.ERROR else self._console
        target.print(Text.from_ansi(rendered))

    def close(self) -> None:
        """Terminal streams stay open; nothing to release."""
