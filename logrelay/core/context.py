"""Ambient request/session context for the unit of work that is logging.

Code that handles a request wraps its work in a scope; anything it calls,
and any asyncio task it creates, can recover the request and session ids
through ``current()`` without them being passed along explicitly.

The store is a ``contextvars.ContextVar``.  asyncio copies the current
context into every task at creation time, so concurrently running tasks
never observe each other's values regardless of resumption order.
"""

from __future__ import annotations

import contextvars
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from logrelay.models.records import EMPTY_CONTEXT, LogContext

T = TypeVar("T")


class ContextStore:
    """Scoped storage for a ``LogContext``.

    Parameters
    ----------
    name:
        Name of the underlying ``ContextVar``.  Separate stores never
        share state, which lets tests use private instances.
    """

    def __init__(self, name: str = "logrelay_context") -> None:
        self._var: contextvars.ContextVar[LogContext] = contextvars.ContextVar(
            name, default=EMPTY_CONTEXT
        )

    def current(self) -> LogContext:
        """Return the innermost active context, or an empty one."""
        return self._var.get()

    def run(
        self, context: LogContext, fn: Callable[..., T], *args: Any, **kwargs: Any
    ) -> T:
        """Call *fn* in a copy of the current execution context.

        Inside the copy ``current()`` returns *context*.  Tasks created
        by *fn* inherit the copy and keep seeing *context* after *fn*
        itself has returned.  The caller's context is never modified.
        """
        def _enter() -> T:
            self._var.set(context)
            return fn(*args, **kwargs)

        return contextvars.copy_context().run(_enter)

    async def run_async(
        self,
        context: LogContext,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Await ``fn(*args, **kwargs)`` with *context* current."""
        with self.scope(context):
            return await fn(*args, **kwargs)

    @contextmanager
    def scope(self, context: LogContext) -> Iterator[LogContext]:
        """Make *context* current until the block exits.

        Scopes nest; leaving an inner scope restores the outer value.
        """
        token = self._var.set(context)
        try:
            yield context
        finally:
            self._var.reset(token)

    @contextmanager
    def bind(self, **fields: str | None) -> Iterator[LogContext]:
        """Open a scope derived from the current context.

        >>> store = ContextStore("doc")
        >>> with store.bind(request_id="r1"):
        ...     with store.bind(session_id="s1"):
        ...         store.current().request_id, store.current().session_id
        ('r1', 's1')
        """
        with self.scope(self.current().child(**fields)) as context:
            yield context


# Process-wide store read by the default bridge.
context_store = ContextStore()
