"""Tests for structured (JSON) logging output.

The log pipeline filters on top-level keys (request_id, user_id,
course_id); plain text or nested fields would break those queries silently.
"""

from __future__ import annotations

import json
import logging
import sys

import pytest

from coursehub.core.logging import _ContainerFormatter, _JsonFormatter


def _record(level: int = logging.INFO, msg: str = "test message", args=(), exc_info=None):
    return logging.LogRecord(
        name="coursehub.services.course_service",
        level=level,
        pathname="course_service.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


def test_json_formatter_produces_valid_json() -> None:
    output = _JsonFormatter().format(_record(msg="Seeded %s", args=("basics",)))
    parsed = json.loads(output)
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "coursehub.services.course_service"
    assert parsed["message"] == "Seeded basics"
    assert "timestamp" in parsed


def test_json_formatter_includes_context_fields() -> None:
    record = _record(level=logging.WARNING, msg="Course access denied")
    record.request_id = "abc-123"  # type: ignore[attr-defined]
    record.user_id = "u-1"  # type: ignore[attr-defined]
    record.course_id = "c-1"  # type: ignore[attr-defined]
    record.status_code = 403  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["request_id"] == "abc-123"
    assert parsed["user_id"] == "u-1"
    assert parsed["course_id"] == "c-1"
    assert parsed["status_code"] == 403


def test_json_formatter_omits_absent_context_fields() -> None:
    parsed = json.loads(_JsonFormatter().format(_record()))
    assert "course_id" not in parsed
    assert "duration_ms" not in parsed


def test_json_formatter_includes_exception_info() -> None:
    try:
        raise ConnectionError("database unreachable")
    except ConnectionError:
        output = _JsonFormatter().format(
            _record(level=logging.ERROR, msg="Store unavailable", exc_info=sys.exc_info())
        )

    parsed = json.loads(output)
    assert "ConnectionError: database unreachable" in parsed["exception"]


def test_container_formatter_is_plain_text() -> None:
    output = _ContainerFormatter().format(_record(msg="server started"))
    assert "INFO" in output
    assert "coursehub.services.course_service" in output
    assert "server started" in output
    with pytest.raises(json.JSONDecodeError):
        json.loads(output)
