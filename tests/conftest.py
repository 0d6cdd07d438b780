"""Shared test fixtures for logrelay."""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from logrelay.core.colors import ColorAssigner, SessionColorCache
from logrelay.core.context import ContextStore
from logrelay.core.emitter import LogEmitter
from logrelay.core.lifecycle import LogManager
from logrelay.models.levels import SinkLevel, admits
from logrelay.routing.dispatcher import SinkFanout


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSink:
    """A sink that remembers every line written to it."""

    def __init__(self, name: str = "recording", level: SinkLevel = SinkLevel.DEBUG) -> None:
        self._name = name
        self._level = level
        self.lines: list[tuple[SinkLevel, str]] = []
        self.closed = False

    @property
    def sink_name(self) -> str:
        return self._name

    @property
    def level(self) -> SinkLevel:
        return self._level

    def supports_level(self, level: SinkLevel) -> bool:
        return admits(self._level, level)

    def write(self, line: str, level: SinkLevel) -> None:
        self.lines.append((level, line))

    def close(self) -> None:
        self.closed = True


class FailingSink(RecordingSink):
    """A sink whose writes always raise the same error."""

    def __init__(self, name: str = "failing", message: str = "disk full", **kwargs) -> None:
        super().__init__(name, **kwargs)
        self.message = message
        self.attempts = 0

    def write(self, line: str, level: SinkLevel) -> None:
        self.attempts += 1
        raise OSError(self.message)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for log files."""
    return tmp_path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def colors(clock: FakeClock) -> ColorAssigner:
    """A fresh ColorAssigner whose session cache runs on the fake clock."""
    return ColorAssigner(session_cache=SessionColorCache(clock=clock))


@pytest.fixture
def log_emitter() -> LogEmitter:
    """A private emitter, isolated from the process-wide one."""
    return LogEmitter()


@pytest.fixture
def store() -> ContextStore:
    """A private context store."""
    return ContextStore("logrelay_test_context")


@pytest.fixture
def reports() -> list[str]:
    """Collects operator-facing delivery diagnostics."""
    return []


@pytest.fixture
def fanout(reports: list[str]) -> SinkFanout:
    return SinkFanout(report=reports.append)


@pytest.fixture
def operator_output() -> io.StringIO:
    """Captures operator console warnings printed during init."""
    return io.StringIO()


@pytest.fixture
def manager(
    log_emitter: LogEmitter,
    store: ContextStore,
    colors: ColorAssigner,
    reports: list[str],
    operator_output: io.StringIO,
) -> LogManager:
    """A LogManager wired to private state; cleared after the test."""
    mgr = LogManager(
        log_emitter,
        store,
        colors,
        console=Console(file=operator_output, markup=False, highlight=False, width=400),
        report=reports.append,
    )
    yield mgr
    mgr.clear()


@pytest.fixture
def make_sink() -> Callable[..., RecordingSink]:
    """Factory fixture: build a RecordingSink."""

    def _factory(name: str = "recording", level: SinkLevel = SinkLevel.DEBUG) -> RecordingSink:
        return RecordingSink(name, level)

    return _factory


@pytest.fixture
def make_failing_sink() -> Callable[..., FailingSink]:
    """Factory fixture: build a sink whose writes always raise."""

    def _factory(
        name: str = "failing",
        message: str = "disk full",
        level: SinkLevel = SinkLevel.DEBUG,
    ) -> FailingSink:
        return FailingSink(name, message, level=level)

    return _factory
