"""HTTP webhook sink - POSTs each record as JSON.

The webhook is addressed with a ``host[:port]`` string.  Each record is
sent as ``{"level", "message", "timestamp"}`` to ``http://host:port/``
with color codes removed.  Delivery is one request per record with a
request timeout, made from a worker thread; there is no retry.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any

import requests

from logrelay.models.levels import SinkLevel, admits
from logrelay.routing.sinks._formatting import FormatPipeline, http_pipeline

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_HOST = "127.0.0.1"
DEFAULT_WEBHOOK_PORT = 9003
DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_PENDING = 1000


class SinkConfigurationError(ValueError):
    """Raised when a sink cannot be built from its configuration."""


def parse_webhook(webhook: str) -> tuple[str, int]:
    """Split ``host[:port]`` into a host and a port.

    >>> parse_webhook("logs.internal:9100")
    ('logs.internal', 9100)
    >>> parse_webhook("logs.internal")
    ('logs.internal', 9003)
    >>> parse_webhook(":9100")
    ('127.0.0.1', 9100)
    """
    host, sep, port_text = webhook.strip().partition(":")
    host = host.strip() or DEFAULT_WEBHOOK_HOST
    if not sep:
        return host, DEFAULT_WEBHOOK_PORT
    try:
        port = int(port_text)
    except ValueError:
        raise SinkConfigurationError(f"Invalid webhook port: {port_text!r}") from None
    if not 0 < port < 65536:
        raise SinkConfigurationError(f"Webhook port out of range: {port}")
    return host, port


class HttpSink:
    """Sends formatted lines to an HTTP collector.

    ``write`` only formats and enqueues; a worker thread performs the
    POSTs in order, so a slow collector never stalls the caller or its
    event loop.  A failed POST is raised from the next ``write`` (or
    ``flush``), where the fan-out reports it like any other sink error.
    ``close`` sends whatever is still queued before returning.

    Parameters
    ----------
    webhook:
        ``host[:port]`` of the collector.
    level:
        Admission threshold.
    pipeline:
        Format pipeline; defaults to color stripping plus a UTC timestamp.
    session:
        ``requests.Session`` to send with; a new one is created if omitted.
    timeout:
        Per-request timeout in seconds.
    max_pending:
        Records allowed to wait for the worker; further writes fail.
    """

    def __init__(
        self,
        webhook: str,
        level: SinkLevel = SinkLevel.DEBUG,
        pipeline: FormatPipeline | None = None,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        self.host, self.port = parse_webhook(webhook)
        self._level = level
        self._pipeline = pipeline if pipeline is not None else http_pipeline()
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout
        self._queue: queue.Queue[dict[str, Any] | None] = queue.Queue(maxsize=max_pending)
        self._error_lock = threading.Lock()
        self._error: Exception | None = None
        self._closed = False
        self._worker = threading.Thread(
            target=self._send_loop, name=f"logrelay-http-{self.host}:{self.port}", daemon=True
        )
        self._worker.start()

    @property
    def sink_name(self) -> str:
        return "http"

    @property
    def level(self) -> SinkLevel:
        return self._level

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/"

    def supports_level(self, level: SinkLevel) -> bool:
        return admits(self._level, level)

    def write(self, line: str, level: SinkLevel) -> None:
        self._raise_pending_error()
        if self._closed:
            raise ValueError(f"HttpSink for {self.url} is closed")
        record = self._pipeline.apply(line, level)
        payload = {
            "level": record.level.value,
            "message": record.message,
            "timestamp": record.timestamp,
        }
        try:
            self._queue.put_nowait(payload)
        except queue.Full:
            raise OSError(f"Webhook queue for {self.url} is full") from None

    def flush(self) -> None:
        """Wait until every queued record was sent; raise a pending failure."""
        self._queue.join()
        self._raise_pending_error()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put(None)
        self._worker.join(timeout=self._timeout)
        self._session.close()
        logger.debug("HttpSink: closed session for %s", self.url)

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _send_loop(self) -> None:
        while True:
            payload = self._queue.get()
            try:
                if payload is None:
                    return
                response = self._session.post(self.url, json=payload, timeout=self._timeout)
                response.raise_for_status()
            except Exception as exc:  # noqa: BLE001
                with self._error_lock:
                    if self._error is None:
                        self._error = exc
            finally:
                self._queue.task_done()

    def _raise_pending_error(self) -> None:
        with self._error_lock:
            error, self._error = self._error, None
        if error is not None:
            raise error
