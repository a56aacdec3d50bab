from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Application config loader.

Responsibilities:
- Load YAML (default ``config/app.yml``)
- Validate against the packaged ``config_schema.json``
- Apply defaults (output_directory=./out, page_size=A4)
- Resolve the PostgreSQL DSN (environment first, config section as fallback)
"""

__all__ = [
    "ConfigError",
    "CompanyConfig",
    "DatabaseConfig",
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "resolve_dsn",
]

DEFAULT_CONFIG_PATH = Path("config/app.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class CompanyConfig:
    """Letterhead printed on loading papers and lab reports."""
    name: str
    tagline: str = ""
    address: str = ""
    email: str = ""
    department: str = "Quality Control Department"


@dataclass(frozen=True)
class DatabaseConfig:
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class AppConfig:
    company: CompanyConfig
    output_directory: str = "./out"
    page_size: str = "A4"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or the data violates it
            (missing keys, wrong types, unknown keys)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path)
        raise ConfigError(f"config validation failed{f' at {where}' if where else ''}: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    company_raw = data["company"]
    company = CompanyConfig(
        name=company_raw["name"],
        tagline=company_raw.get("tagline", ""),
        address=company_raw.get("address", ""),
        email=company_raw.get("email", ""),
        department=company_raw.get("department", CompanyConfig.department),
    )
    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return AppConfig(
        company=company,
        output_directory=data.get("output_directory", "./out"),
        page_size=data.get("page_size", "A4"),
        database=db,
    )


def resolve_dsn(db_cfg: DatabaseConfig, environ: Mapping[str, str] | None = None) -> str:
    """Build the libpq connection string.

    優先順位:
        1. DATABASE_URL / PGDSN (DSN 全体)
        2. 個別 PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. config の database セクション (不足分のフォールバック)
    """
    env = os.environ if environ is None else environ
    dsn = env.get("DATABASE_URL") or env.get("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = env.get("PGHOST", db_cfg.host or "localhost")
    port = env.get("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = env.get("PGUSER", db_cfg.user or "postgres")
    password = env.get("PGPASSWORD", db_cfg.password or "")
    database = env.get("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn
