from __future__ import annotations

import json

import jsonschema
import pytest
import yaml

from elastic_ops.config.loader import SCHEMA_PATH

"""Config schema contract test (config/app.yml shape)."""


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_valid_example(sample_config_yaml):
    jsonschema.validate(yaml.safe_load(sample_config_yaml), _schema())


def test_config_schema_minimal_example():
    jsonschema.validate({"company": {"name": "Adsons Global"}}, _schema())


def test_config_schema_missing_company():
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate({"output_directory": "./out"}, _schema())


@pytest.mark.parametrize(
    "config",
    [
        {"company": {"name": "A"}, "page_size": "B5"},
        {"company": {"name": "A"}, "database": {"port": 70000}},
        {"company": {"name": "A", "fax": "123"}},
        {"company": {"name": ""}},
    ],
)
def test_config_schema_rejects(config):
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(config, _schema())
