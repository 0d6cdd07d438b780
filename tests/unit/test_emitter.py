"""Unit tests for the LogEmitter and PrefixLogger facade."""

from __future__ import annotations

import pytest

from logrelay.core.emitter import LOG_CHANNEL, EventSource, LogEmitter
from logrelay.models.records import LogRecord


class TestSubscription:
    def test_emit_without_listeners_is_dropped(self, log_emitter: LogEmitter):
        record = LogRecord(level="info", message="nobody listens")
        assert log_emitter.emit(LOG_CHANNEL, record) is False

    def test_listeners_called_in_order(self, log_emitter: LogEmitter):
        calls: list[str] = []
        log_emitter.on(LOG_CHANNEL, lambda r: calls.append("first"))
        log_emitter.on(LOG_CHANNEL, lambda r: calls.append("second"))
        log_emitter.info(None, "hello")
        assert calls == ["first", "second"]

    def test_off_removes_listener(self, log_emitter: LogEmitter):
        received: list[LogRecord] = []
        log_emitter.on(LOG_CHANNEL, received.append)
        log_emitter.off(LOG_CHANNEL, received.append)
        log_emitter.info(None, "hello")
        assert received == []
        assert log_emitter.listener_count(LOG_CHANNEL) == 0

    def test_off_unknown_listener_is_ignored(self, log_emitter: LogEmitter):
        log_emitter.off(LOG_CHANNEL, lambda r: None)

    def test_remove_all_listeners(self, log_emitter: LogEmitter):
        log_emitter.on(LOG_CHANNEL, lambda r: None)
        log_emitter.on("other", lambda r: None)
        log_emitter.remove_all_listeners(LOG_CHANNEL)
        assert log_emitter.listener_count(LOG_CHANNEL) == 0
        assert log_emitter.listener_count("other") == 1
        log_emitter.remove_all_listeners()
        assert log_emitter.listener_count("other") == 0

    def test_listener_may_unsubscribe_during_emit(self, log_emitter: LogEmitter):
        calls: list[str] = []

        def once(record: LogRecord) -> None:
            calls.append(record.message)
            log_emitter.off(LOG_CHANNEL, once)

        log_emitter.on(LOG_CHANNEL, once)
        log_emitter.info(None, "a")
        log_emitter.info(None, "b")
        assert calls == ["a"]

    def test_protocol_compliance(self, log_emitter: LogEmitter):
        assert isinstance(log_emitter, EventSource)


class TestEmission:
    @pytest.mark.parametrize("method", ["silly", "verbose", "debug", "info", "http", "warn", "error"])
    def test_level_shortcuts(self, log_emitter: LogEmitter, method: str):
        received: list[LogRecord] = []
        log_emitter.on(LOG_CHANNEL, received.append)
        getattr(log_emitter, method)("mod", "msg")
        assert received == [LogRecord(level=method, message="msg", prefix="mod")]

    def test_message_formatting(self, log_emitter: LogEmitter):
        record = log_emitter.info("mod", "%s took %d ms", "request", 12)
        assert record.message == "request took 12 ms"

    def test_message_without_args_is_not_formatted(self, log_emitter: LogEmitter):
        record = log_emitter.info("mod", "100% done")
        assert record.message == "100% done"

    def test_arbitrary_level_names_pass_through(self, log_emitter: LogEmitter):
        record = log_emitter.log("timing", None, "t")
        assert record.level == "timing"


class TestPrefixLogger:
    def test_logger_binds_prefix(self, log_emitter: LogEmitter):
        received: list[LogRecord] = []
        log_emitter.on(LOG_CHANNEL, received.append)
        log = log_emitter.get_logger("driver (abc)")
        log.verbose("hello %s", "world")
        assert received[0].prefix == "driver (abc)"
        assert received[0].level == "verbose"
        assert received[0].message == "hello world"

    def test_repr(self, log_emitter: LogEmitter):
        assert repr(log_emitter.get_logger("HTTP")) == "PrefixLogger(prefix='HTTP')"
