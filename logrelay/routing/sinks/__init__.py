"""Sink protocol for logrelay routing.

Every sink implements the ``BaseSink`` protocol: a ``sink_name``, a
``level`` threshold, ``supports_level(level)``, ``write(line, level)``
and ``close()``.  The fan-out only ever sees this protocol; it never
needs to know which concrete sink it holds.

Concrete sinks form a closed set:

- ``TerminalSink`` - stdout/stderr via a rich ``Console``
- ``FileSink`` - one plain line per record in a local file
- ``HttpSink`` - one JSON POST per record to a webhook
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from logrelay.models.levels import SinkLevel


@runtime_checkable
class BaseSink(Protocol):
    """Protocol that every logrelay sink must implement.

    Attributes
    ----------
    sink_name : str
        Identifier of the sink kind (``"terminal"``, ``"file"``,
        ``"http"``), used in operator diagnostics.
    level : SinkLevel
        The least severe level this sink accepts.
    """

    @property
    def sink_name(self) -> str:
        """Return the sink kind name."""
        ...

    @property
    def level(self) -> SinkLevel:
        """Return the admission threshold."""
        ...

    def supports_level(self, level: SinkLevel) -> bool:
        """Return whether a record at *level* should be written."""
        ...

    def write(self, line: str, level: SinkLevel) -> None:
        """Format and write one line.

        Implementations may raise; the fan-out contains the failure and
        continues with the remaining sinks.
        """
        ...

    def close(self) -> None:
        """Release any resource held by the sink."""
        ...
