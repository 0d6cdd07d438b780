"""Unit tests for the ContextStore - scoping across sync and async work."""

from __future__ import annotations

import asyncio

from logrelay.core.context import ContextStore
from logrelay.models.records import LogContext


class TestSyncScopes:
    def test_current_outside_scope_is_empty(self, store: ContextStore):
        context = store.current()
        assert context.request_id is None
        assert context.session_id is None

    def test_run_sets_context_for_callee(self, store: ContextStore):
        ctx = LogContext(request_id="req-1", session_id="sess-1")
        seen = store.run(ctx, store.current)
        assert seen == ctx

    def test_run_does_not_leak_to_caller(self, store: ContextStore):
        store.run(LogContext(request_id="req-1"), lambda: None)
        assert store.current().is_empty

    def test_run_passes_arguments(self, store: ContextStore):
        result = store.run(LogContext(), lambda a, b=0: a + b, 2, b=3)
        assert result == 5

    def test_nested_scopes_shadow_and_revert(self, store: ContextStore):
        outer = LogContext(request_id="outer")
        inner = LogContext(request_id="inner")
        with store.scope(outer):
            assert store.current().request_id == "outer"
            with store.scope(inner):
                assert store.current().request_id == "inner"
            assert store.current().request_id == "outer"
        assert store.current().is_empty

    def test_bind_derives_from_current(self, store: ContextStore):
        with store.bind(request_id="req-1"):
            with store.bind(session_id="sess-1") as ctx:
                assert ctx.request_id == "req-1"
                assert ctx.session_id == "sess-1"
            assert store.current().session_id is None

    def test_separate_stores_are_independent(self):
        a = ContextStore("a")
        b = ContextStore("b")
        with a.scope(LogContext(request_id="only-a")):
            assert b.current().is_empty


class TestAsyncScopes:
    def test_concurrent_tasks_do_not_see_each_other(self, store: ContextStore):
        """Interleaved tasks each keep their own context across awaits."""
        seen: dict[str, list[str | None]] = {}

        async def unit(name: str, delays: list[float]) -> None:
            for delay in delays:
                await asyncio.sleep(delay)
                seen.setdefault(name, []).append(store.current().request_id)

        async def main() -> None:
            tasks = [
                store.run(LogContext(request_id="a"), asyncio.ensure_future, unit("a", [0.02, 0, 0.01])),
                store.run(LogContext(request_id="b"), asyncio.ensure_future, unit("b", [0, 0.02, 0])),
                store.run(LogContext(request_id="c"), asyncio.ensure_future, unit("c", [0.01, 0.01, 0.01])),
            ]
            await asyncio.gather(*tasks)

        asyncio.run(main())

        assert seen == {"a": ["a"] * 3, "b": ["b"] * 3, "c": ["c"] * 3}

    def test_spawned_work_outlives_scope(self, store: ContextStore):
        """A task created inside run() keeps the context after run() returns."""

        async def later() -> str | None:
            await asyncio.sleep(0.01)
            return store.current().request_id

        async def main() -> tuple[str | None, str | None]:
            task = store.run(LogContext(request_id="spawned"), asyncio.ensure_future, later())
            outside = store.current().request_id
            return outside, await task

        outside, inside = asyncio.run(main())
        assert outside is None
        assert inside == "spawned"

    def test_run_async_restores_previous_context(self, store: ContextStore):
        async def work() -> str | None:
            await asyncio.sleep(0)
            return store.current().session_id

        async def main() -> tuple[str | None, bool]:
            result = await store.run_async(LogContext(session_id="s-1"), work)
            return result, store.current().is_empty

        result, empty_after = asyncio.run(main())
        assert result == "s-1"
        assert empty_after is True

    def test_nested_task_shadows_parent(self, store: ContextStore):
        async def child() -> str | None:
            return store.current().request_id

        async def parent() -> tuple[str | None, str | None]:
            inner = await store.run(
                LogContext(request_id="inner"), asyncio.ensure_future, child()
            )
            return inner, store.current().request_id

        async def main() -> tuple[str | None, str | None]:
            return await store.run_async(LogContext(request_id="outer"), parent)

        assert asyncio.run(main()) == ("inner", "outer")
