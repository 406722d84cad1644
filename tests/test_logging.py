"""Tests for the structured logging system (console_kernel/logging_config.py)."""

import json
import logging
from io import StringIO
from uuid import uuid4

import pytest

from console_kernel.domain.approval import ApprovalStatus
from console_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "console_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("record_created", extra={"record_id": "r1", "tenant": "t1"})

        record = _parse_log(stream)
        assert record["record_id"] == "r1"
        assert record["tenant"] == "t1"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(actor_id="alice@x", entity_type="pricing")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["actor_id"] == "alice@x"
        assert record["entity_type"] == "pricing"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_kernel_exception_code_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        from console_kernel.exceptions import SelfApprovalError

        try:
            raise SelfApprovalError("r1", "alice@x")
        except SelfApprovalError:
            get_logger("test").error("guard_violation", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "SELF_APPROVAL"
        assert record["exc_type"] == "SelfApprovalError"
        assert record["exc_record_id"] == "r1"
        assert record["exc_actor_email"] == "alice@x"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "actor_id" not in record
        assert "correlation_id" not in record

    def test_uuid_and_enum_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info(
            "with_values",
            extra={"request_id": uid, "new_status": ApprovalStatus.APPROVED},
        )

        record = _parse_log(stream)
        assert record["request_id"] == str(uid)
        assert record["new_status"] == "Approved"

    def test_sets_are_sorted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("domains", extra={"allowed": frozenset({"fx", "admin"})})

        assert _parse_log(stream)["allowed"] == ["admin", "fx"]

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= set(record)

    def test_configure_is_idempotent(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=handler)
        get_logger("test").info("once")

        assert len(_parse_all_logs(stream)) == 1


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", actor_id="y")
        assert LogContext.get_all() == {"correlation_id": "x", "actor_id": "y"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(entity_id="outer")
        with LogContext.bind(entity_id="inner"):
            assert LogContext.get_all()["entity_id"] == "inner"
        assert LogContext.get_all()["entity_id"] == "outer"

    def test_bind_restores_none(self):
        assert "tenant_id" not in LogContext.get_all()
        with LogContext.bind(tenant_id="t1"):
            assert LogContext.get_all()["tenant_id"] == "t1"
        assert "tenant_id" not in LogContext.get_all()

    def test_bind_skips_none_values(self):
        LogContext.set(entity_id="kept")
        with LogContext.bind(entity_id=None, actor_id="alice@x"):
            assert LogContext.get_all() == {"entity_id": "kept", "actor_id": "alice@x"}

    def test_bind_ignores_unknown_fields(self):
        with LogContext.bind(event_id="e1", actor_id="alice@x"):
            assert LogContext.get_all() == {"actor_id": "alice@x"}

    def test_set_rejects_unknown_fields(self):
        with pytest.raises(TypeError):
            LogContext.set(event_id="e1")

    def test_additive_set(self):
        LogContext.set(correlation_id="a")
        LogContext.set(actor_id="b")
        assert LogContext.get_all() == {"correlation_id": "a", "actor_id": "b"}

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            actor_id="a",
            tenant_id="t",
            entity_type="pricing",
            entity_id="r1",
        )
        assert LogContext.get_all() == {
            "correlation_id": "c",
            "actor_id": "a",
            "tenant_id": "t",
            "entity_type": "pricing",
            "entity_id": "r1",
        }
