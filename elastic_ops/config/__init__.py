"""YAML configuration with JSON schema validation."""

from .loader import AppConfig, CompanyConfig, ConfigError, DatabaseConfig, load_config, resolve_dsn

__all__ = [
    "AppConfig",
    "CompanyConfig",
    "ConfigError",
    "DatabaseConfig",
    "load_config",
    "resolve_dsn",
]
