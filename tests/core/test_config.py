# tests/core/test_config.py

import json

import pytest

from powerbudget.core.config import AllocatorConfig
from powerbudget.utils.errors import ConfigError


def test_defaults_match_constants():
    config = AllocatorConfig()
    assert config.max_capacity == 100
    assert config.safe_capacity == 92
    assert config.device_max == 40


@pytest.mark.parametrize("kwargs", [
    {"safe_capacity": 120},                      # above max_capacity
    {"device_max": 95},                          # above safe_capacity
    {"device_max": 0},
    {"safe_capacity": -5},
    {"max_capacity": "lots"},
    {"device_max": True},
])
def test_inconsistent_limits_are_rejected(kwargs):
    with pytest.raises(ConfigError):
        AllocatorConfig(**kwargs)


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ConfigError, match="capacity_kw"):
        AllocatorConfig.from_dict({"capacity_kw": 10})


def test_from_dict_accepts_none():
    assert AllocatorConfig.from_dict(None) == AllocatorConfig()


def test_from_env_reads_prefixed_variables():
    env = {"POWER_SAFE_CAPACITY": "60", "POWER_DEVICE_MAX": "15.5"}
    config = AllocatorConfig.from_env(env)
    assert config.safe_capacity == 60.0
    assert config.device_max == 15.5
    assert config.max_capacity == 100


def test_from_env_rejects_garbage():
    with pytest.raises(ConfigError):
        AllocatorConfig.from_env({"POWER_DEVICE_MAX": "forty"})


def test_from_yaml_file_with_nested_config(tmp_path):
    path = tmp_path / "limits.yaml"
    path.write_text("config:\n  max_capacity: 50\n  safe_capacity: 45\n  device_max: 10\n")

    config = AllocatorConfig.from_file(str(path))

    assert config.to_dict() == {"max_capacity": 50, "safe_capacity": 45, "device_max": 10}


def test_from_json_file(tmp_path):
    path = tmp_path / "limits.json"
    path.write_text(json.dumps({"safe_capacity": 80, "device_max": 20}))

    config = AllocatorConfig.from_file(str(path))

    assert config.safe_capacity == 80
    assert config.device_max == 20


def test_unsupported_extension(tmp_path):
    path = tmp_path / "limits.ini"
    path.write_text("[limits]\n")
    with pytest.raises(ConfigError, match="Unsupported"):
        AllocatorConfig.from_file(str(path))


def test_malformed_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("config: [unterminated\n")
    with pytest.raises(ConfigError, match="Could not parse"):
        AllocatorConfig.from_file(str(path))


@pytest.mark.parametrize("data", [5, "safe_capacity: 10", [1, 2]])
def test_from_dict_rejects_non_mappings(data):
    with pytest.raises(ConfigError, match="mapping"):
        AllocatorConfig.from_dict(data)


def test_from_dict_reports_non_string_keys():
    with pytest.raises(ConfigError, match="Unknown config keys"):
        AllocatorConfig.from_dict({1: 2, "other": 3})
