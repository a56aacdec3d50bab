from __future__ import annotations

from pathlib import Path

import elastic_ops.cli.__main__ as cli
from elastic_ops.cli.__main__ import main as cli_main
from elastic_ops.db.gateway import MemoryGateway


class ClosingGateway(MemoryGateway):
    """In-memory stand-in for a live connection that remembers ``close``."""

    def __init__(self):
        super().__init__()
        self.closed = False

    def close(self):
        self.closed = True


def test_cli_debug_mode_mock_disable_db(write_config: Path, capsys, monkeypatch):
    """--debug で DEBUG ログと mock モード経路が動作することを検証。"""
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")

    code = cli_main(["--debug", "product", "list"])

    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode" in out
    assert "INFO mode=mock" in out


def test_cli_live_mode_success(write_config: Path, capsys, monkeypatch):
    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
    for var in ("DATABASE_URL", "PGDSN", "PGHOST"):
        monkeypatch.delenv(var, raising=False)
    gateway = ClosingGateway()
    seen: list[str] = []

    def fake_connect(dsn):
        seen.append(dsn)
        return gateway

    monkeypatch.setattr(cli.PostgresGateway, "connect", staticmethod(fake_connect))

    code = cli_main(["product", "add", "--code", "E-25", "--width", "25MM", "--color", "White"])

    out = capsys.readouterr().out
    assert code == 0
    assert "INFO mode=live" in out
    assert gateway.closed is True
    assert len(gateway.select("products")) == 1
    assert "host=localhost" in seen[0]


def test_cli_live_mode_closes_on_failure(write_config: Path, monkeypatch):
    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
    gateway = ClosingGateway()
    monkeypatch.setattr(cli.PostgresGateway, "connect", staticmethod(lambda dsn: gateway))

    assert cli_main(["report", "show", "missing-id"]) == 1
    assert gateway.closed is True


def test_render_without_save_never_connects(write_config: Path, manifest_file: Path, monkeypatch):
    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)

    def boom(dsn):
        raise AssertionError("render must not open the store")

    monkeypatch.setattr(cli.PostgresGateway, "connect", staticmethod(boom))
    assert cli_main(["loading-paper", "render", str(manifest_file)]) == 0
