from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest

from elastic_ops.logging.error_log import ErrorLogBuffer

"""Error log JSON Lines contract: fixed key set, one object per line."""

ERROR_RECORD_SCHEMA = {
    "type": "object",
    "required": ["timestamp", "source", "operation", "row", "error_type", "message"],
    "additionalProperties": False,
    "properties": {
        "timestamp": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$"},
        "source": {"type": "string"},
        "operation": {"type": "string"},
        "row": {"type": "integer", "minimum": -1},
        "error_type": {"type": "string", "pattern": "^[A-Z][A-Z0-9_]*$"},
        "message": {"type": "string"},
    },
}


def test_error_log_schema_valid_example():
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "source": "dc-10.json",
        "operation": "save_loading_paper",
        "row": -1,
        "error_type": "GATEWAY_ERROR",
        "message": "insert loading_paper_items: connection reset",
    }
    jsonschema.validate(record, ERROR_RECORD_SCHEMA)


def test_error_log_schema_rejects_extra_key():
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "source": "dc-10.json",
        "operation": "parse",
        "row": -1,
        "error_type": "JSON_SYNTAX_ERROR",
        "message": "invalid JSON",
        "extra": "not allowed",
    }
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, ERROR_RECORD_SCHEMA)


def test_written_lines_follow_schema(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    buf.record(source="a.json", operation="parse", error=ValueError("bad"))
    buf.record(source="b.json", operation="normalize", error=KeyError("Rows"), row=3)
    path = buf.flush()
    assert path is not None
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    for line in lines:
        jsonschema.validate(json.loads(line), ERROR_RECORD_SCHEMA)


def test_cli_failure_is_logged_with_schema(write_config, temp_workdir: Path, monkeypatch):
    from elastic_ops.cli.__main__ import main as cli_main

    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    bad = temp_workdir / "data" / "bad.json"
    bad.write_text("[1, 2", encoding="utf-8")
    assert cli_main(["loading-paper", "render", str(bad)]) == 1
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    rec = json.loads(logs[0].read_text(encoding="utf-8").splitlines()[0])
    jsonschema.validate(rec, ERROR_RECORD_SCHEMA)
    assert rec["source"] == "bad.json"
    assert rec["operation"] == "loading-paper render"
    assert rec["error_type"] == "JSON_SYNTAX_ERROR"
