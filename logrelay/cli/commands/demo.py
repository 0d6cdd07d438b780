"""``logrelay demo`` - route sample traffic through a live pipeline.

Initializes the process-wide pipeline from ``LOGRELAY_*`` settings plus
the given options, then runs a few concurrent "requests", each inside
its own request/session context, so the colored headers and per-sink
thresholds can be inspected by eye.
"""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from logrelay.config import DEFAULT_LOGGER_NAME, LogSettings
from logrelay.core.context import context_store
from logrelay.core.emitter import emitter
from logrelay.core.lifecycle import manager
from logrelay.models.records import LogContext

console = Console()


async def _handle_request(index: int, session_id: str) -> None:
    http = emitter.get_logger("HTTP")
    driver = emitter.get_logger(f"XCUITestDriver@{session_id[:4]} ({session_id[:8]})")
    agent = emitter.get_logger("WebDriverAgent")

    http.http("--> POST /session/%s/element", session_id)
    await asyncio.sleep(0.01 * index)
    driver.verbose("Finding element (attempt %d)", index + 1)
    agent.debug("Accessibility tree fetched")
    if index % 2:
        driver.warn("Element lookup is slow")
    await asyncio.sleep(0.01)
    http.http("<-- POST /session/%s/element 200", session_id)


async def _run_demo(settings: LogSettings, requests: int) -> None:
    await manager.init(settings)
    try:
        emitter.info(DEFAULT_LOGGER_NAME, "Demo pipeline ready")
        tasks = []
        for index in range(requests):
            context = LogContext(
                request_id=str(uuid.uuid4()), session_id=str(uuid.uuid4())
            )
            # The task copies the context current at creation.
            task = context_store.run(
                context, asyncio.ensure_future, _handle_request(index, context.session_id)
            )
            tasks.append(task)
        await asyncio.gather(*tasks)
        emitter.error(None, "A record without prefix or context")
    finally:
        manager.clear()


def demo_cmd(
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Single level, or console:file pair (e.g. info:debug).",
    ),
    log_file: Path = typer.Option(
        None,
        "--log-file",
        "-f",
        help="Also write (stripped) lines to this file; it is truncated first.",
    ),
    webhook: str = typer.Option(
        None,
        "--webhook",
        "-w",
        help="host[:port] of an HTTP collector.",
    ),
    no_colors: bool = typer.Option(
        False,
        "--no-colors",
        help="Render prefix and session tags without color.",
    ),
    timestamp: bool = typer.Option(
        False,
        "--timestamp",
        "-t",
        help="Prefix terminal lines with a timestamp.",
    ),
    local_timezone: bool = typer.Option(
        False,
        "--local-timezone",
        help="Render timestamps in local time instead of UTC.",
    ),
    requests: int = typer.Option(
        3,
        "--requests",
        "-n",
        min=1,
        help="Number of concurrent sample requests.",
    ),
) -> None:
    """Route sample concurrent traffic through a live pipeline."""
    overrides: dict[str, Any] = {
        "log_level": log_level,
        "log_file": log_file,
        "webhook": webhook,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if no_colors:
        overrides["log_no_colors"] = True
    if timestamp:
        overrides["log_timestamp"] = True
    if local_timezone:
        overrides["local_timezone"] = True

    try:
        settings = LogSettings(**overrides)
    except ValueError as exc:
        console.print(f"[bold red]Invalid logging settings:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    asyncio.run(_run_demo(settings, requests))
