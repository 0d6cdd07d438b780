"""logrelay: contextual log routing.

Records emitted on the process-wide emitter are enriched with the
ambient request/session context, given stable per-prefix and
per-session colors, and fanned out to terminal, file and webhook sinks,
each at its own severity threshold.

Typical use::

    import logrelay

    await logrelay.init(log_level="info:debug", log_file="app.log")
    log = logrelay.get_logger("server")
    with logrelay.context_store.bind(request_id=req_id, session_id=sid):
        log.info("handling %s", path)
"""

__version__ = "0.3.0"
__description__ = "Contextual log routing with colored prefixes and fan-out sinks"

from logrelay.config import LogSettings
from logrelay.core.context import ContextStore, context_store
from logrelay.core.emitter import LogEmitter, emitter
from logrelay.core.lifecycle import LogManager, clear, init, manager

get_logger = emitter.get_logger

__all__ = [
    "LogSettings",
    "ContextStore",
    "context_store",
    "LogEmitter",
    "emitter",
    "get_logger",
    "LogManager",
    "manager",
    "init",
    "clear",
    "__version__",
]
