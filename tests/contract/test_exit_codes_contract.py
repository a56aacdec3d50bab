from __future__ import annotations

import json
from pathlib import Path

import pytest

from elastic_ops.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL
from elastic_ops.cli.__main__ import main as cli_main

"""Exit code contract: 0 success, 1 fatal, 2 batch import with failed files."""


@pytest.fixture(autouse=True)
def _mock_mode(monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")


def test_exit_code_values():
    assert (EXIT_SUCCESS_ALL, EXIT_FATAL, EXIT_PARTIAL_FAILURE) == (0, 1, 2)


def test_exit_code_fatal_startup(temp_workdir: Path, capsys):
    # config/app.yml 無し → exit 1
    code = cli_main(["loading-paper", "list"])
    captured = capsys.readouterr()
    assert code == 1
    assert "ERROR config:" in captured.out


def test_exit_code_all_success(write_config, manifest_file: Path, capsys):
    code = cli_main(["loading-paper", "import-dir", "data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=1 success=1 failed=0 items=3" in out


def test_exit_code_partial_failure(write_config, manifest_file: Path, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "broken.json").write_text("{oops", encoding="utf-8")
    code = cli_main(["loading-paper", "import-dir", "data"])
    out = capsys.readouterr().out
    assert code == 2
    assert "SUMMARY files=2 success=1 failed=1 items=3" in out


def test_exit_code_all_failed_is_partial(write_config, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "empty.json").write_text(json.dumps({"Rows": []}), encoding="utf-8")
    assert cli_main(["loading-paper", "import-dir", "data"]) == 2


def test_exit_code_missing_directory(write_config, capsys):
    code = cli_main(["loading-paper", "import-dir", "nowhere"])
    assert code == 1
    assert "Directory not found" in capsys.readouterr().out


def test_exit_code_empty_directory(write_config, capsys):
    assert cli_main(["loading-paper", "import-dir", "data"]) == 0
    assert "SUMMARY files=0 success=0 failed=0 items=0" in capsys.readouterr().out
