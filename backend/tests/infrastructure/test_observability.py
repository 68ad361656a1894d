"""Structured logging — JSONFormatter surfaces pipeline context keys."""

import json
import logging

from control_plane.infrastructure.observability import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "control_plane.services", logging.WARNING, __file__, 1,
        "Rejected pipeline p-1", None, None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_extra_keys():
    line = JSONFormatter().format(_record(
        pipeline_id="p-1", error_code="TOPOLOGY_INVALID",
        violations=["DUPLICATE_STREAM"],
    ))
    log = json.loads(line)
    assert log["level"] == "WARNING"
    assert log["message"] == "Rejected pipeline p-1"
    assert log["pipeline_id"] == "p-1"
    assert log["violations"] == ["DUPLICATE_STREAM"]


def test_json_formatter_omits_absent_keys():
    log = json.loads(JSONFormatter().format(_record()))
    assert "workspace_id" not in log
