# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from elastic_ops.db.gateway import MemoryGateway
from elastic_ops.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    # StreamHandler は生成時の sys.stdout を掴むので capsys ごとに作り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """company:
  name: Adsons Global
  tagline: Pre-Shrink Elastic Experts
  address: 193-VIP Block Canal Park, Faisalabad, Pakistan
  email: info@adsonent.com
output_directory: ./out
page_size: A4
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "app.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_rows() -> list[dict]:
    """Three manifest rows, deliberately out of DC order."""
    return [
        {
            "DetailName": "Black Elastic 45MM",
            "DetailUnit": "MTR",
            "JobNo": "J-100",
            "Pack": 4,
            "Qty": 400,
            "Weight": 10,
            "PoNo": "PO-77",
            "DcNo": "10",
            "Date": "2024-03-05",
            "AccName": "Acme Garments",
            "AccAddress": "Lahore",
            "Remarks": "Truck LES-1234",
        },
        {
            "DetailName": "White Tape 20mm",
            "DetailUnit": "MTR",
            "JobNo": "J-101",
            "Pack": "2",
            "Qty": "150.5",
            "Weight": "3.25",
            "DcNo": "2",
        },
        {
            "DetailName": "Plain Webbing",
            "DetailUnit": "PCS",
            "JobNo": "J-102",
            "Pack": 1,
            "Qty": 50,
            "Weight": "n/a",
            "PoNo": "PO-78",
            "DcNo": "abc",
        },
    ]


@pytest.fixture()
def manifest_file(temp_workdir: Path, sample_rows: list[dict]) -> Path:
    f = temp_workdir / "data" / "dc-10.json"
    f.write_text(json.dumps({"Rows": sample_rows}), encoding="utf-8")
    return f


@pytest.fixture()
def memory_gateway() -> MemoryGateway:
    return MemoryGateway()
