"""File sink - appends one plain-text line per record.

Layout of each line: ``<timestamp> <message>`` with color codes removed.

The sink itself only appends.  Whoever builds it is responsible for
starting from a fresh file (the lifecycle manager deletes a stale one)
so the log does not grow across runs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

from logrelay.models.levels import SinkLevel, admits
from logrelay.routing.sinks._formatting import FormatPipeline, file_pipeline

logger = logging.getLogger(__name__)


class FileSink:
    """Writes formatted lines to a local file.

    Parameters
    ----------
    path:
        Target file.  Parent directories are created if missing.
    level:
        Admission threshold.
    pipeline:
        Format pipeline; defaults to color stripping plus a UTC timestamp.
    """

    def __init__(
        self,
        path: Path | str,
        level: SinkLevel = SinkLevel.DEBUG,
        pipeline: FormatPipeline | None = None,
    ) -> None:
        self._path = Path(path)
        self._level = level
        self._pipeline = pipeline if pipeline is not None else file_pipeline()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file: TextIO | None = open(self._path, "a", encoding="utf-8")
        logger.debug("FileSink: opened %s", self._path)

    @property
    def sink_name(self) -> str:
        return "file"

    @property
    def level(self) -> SinkLevel:
        return self._level

    @property
    def path(self) -> Path:
        return self._path

    def supports_level(self, level: SinkLevel) -> bool:
        return admits(self._level, level)

    def write(self, line: str, level: SinkLevel) -> None:
        if self._file is None:
            raise ValueError(f"FileSink for {self._path} is closed")
        record = self._pipeline.apply(line, level)
        stamp = f"{record.timestamp} " if record.timestamp else ""
        self._file.write(f"{stamp}{record.message}\n")
        self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug("FileSink: closed %s", self._path)
