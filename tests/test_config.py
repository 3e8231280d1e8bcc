"""
Tests for lib/config.py configuration loading.

Covers:
- ${VAR} and ${VAR:-default} substitution
- YAML file loading and errors
- Environment variable config (AWSINV_*)
- Merge priority: CLI over file over environment
- generate_sample_config output is valid YAML
"""
import argparse
import os
import sys

import pytest
import yaml

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib.config import (
    ENV_VAR_MAPPING,
    ConfigError,
    args_to_config,
    generate_sample_config,
    load_config,
    load_config_file,
    load_env_config,
    merge_configs,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """No AWSINV_* variables and no default config file."""
    for env_var in ENV_VAR_MAPPING.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


def make_args(**overrides):
    values = {
        'config': None,
        'output': None,
        'log_level': None,
        'silent': False,
        'profile': None,
        'regions': None,
        'services': None,
        'json_file': None,
        'csv_file': None,
        'stop_on_error': False,
        'report_mode': None,
        'export_format': None,
        'limit_regions': None,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


def write_config(tmp_path, text, name="config.yaml"):
    path = tmp_path / name
    path.write_text(text)
    path.chmod(0o600)
    return str(path)


# =============================================================================
# File Loading Tests
# =============================================================================

class TestLoadConfigFile:
    """Tests for load_config_file function."""

    def test_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("INV_PROFILE", "audit")
        path = write_config(tmp_path, "aws:\n  profile: ${INV_PROFILE}\noutput: ${INV_OUT:-./reports}\n")

        config = load_config_file(path)

        assert config['aws']['profile'] == "audit"
        assert config['output'] == "./reports"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config_file(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = write_config(tmp_path, "aws: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config_file(path)

    def test_non_mapping(self, tmp_path):
        path = write_config(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config_file(path)

    def test_empty_file(self, tmp_path):
        assert load_config_file(write_config(tmp_path, "")) == {}


class TestLoadEnvConfig:
    """Tests for load_env_config function."""

    def test_lists_and_bools(self, monkeypatch):
        monkeypatch.setenv("AWSINV_REGIONS", "us-east-1, eu-west-1")
        monkeypatch.setenv("AWSINV_STOP_ON_ERROR", "yes")
        monkeypatch.setenv("AWSINV_REPORT_MODE", "cost")

        config = load_env_config()

        assert config['aws']['regions'] == ["us-east-1", "eu-west-1"]
        assert config['aws']['stop_on_error'] is True
        assert config['report']['mode'] == "cost"

    def test_nothing_set(self):
        assert load_env_config() == {}


# =============================================================================
# Merge Tests
# =============================================================================

class TestMergeConfigs:
    """Tests for merge_configs function."""

    def test_later_overrides_earlier(self):
        merged = merge_configs(
            {'output': 'a', 'aws': {'profile': 'x', 'services': ['ec2']}},
            {'aws': {'profile': 'y'}},
        )
        assert merged == {'output': 'a', 'aws': {'profile': 'y', 'services': ['ec2']}}

    def test_none_does_not_override(self):
        assert merge_configs({'output': 'a'}, {'output': None}) == {'output': 'a'}


class TestArgsToConfig:
    """Tests for args_to_config function."""

    def test_only_set_values(self):
        config = args_to_config(make_args(profile="prod", regions="us-east-1,us-west-2"))
        assert config == {'aws': {'profile': 'prod', 'regions': ['us-east-1', 'us-west-2']}}

    def test_flags(self):
        config = args_to_config(make_args(silent=True, stop_on_error=True))
        assert config['silent'] is True
        assert config['aws']['stop_on_error'] is True


class TestLoadConfig:
    """Tests for load_config function."""

    def test_file_values_applied(self, tmp_path):
        path = write_config(tmp_path, (
            "output: ./from-file\n"
            "aws:\n"
            "  regions: [us-east-1, us-west-2]\n"
            "  services: ec2,rds\n"
            "report:\n"
            "  mode: security\n"
            "  export_format: both\n"
        ))
        args = make_args(config=path)

        load_config(args)

        assert args.output == "./from-file"
        assert args.regions == "us-east-1,us-west-2"
        assert args.services == "ec2,rds"
        assert args.report_mode == "security"
        assert args.export_format == "both"

    def test_cli_overrides_file(self, tmp_path):
        path = write_config(tmp_path, "output: ./from-file\naws:\n  profile: file-profile\n")
        args = make_args(config=path, output="./from-cli", profile="cli-profile")

        load_config(args)

        assert args.output == "./from-cli"
        assert args.profile == "cli-profile"

    def test_file_overrides_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AWSINV_OUTPUT", "./from-env")
        monkeypatch.setenv("AWSINV_LOG_LEVEL", "DEBUG")
        path = write_config(tmp_path, "output: ./from-file\n")
        args = make_args(config=path)

        load_config(args)

        assert args.output == "./from-file"
        assert args.log_level == "DEBUG"

    def test_default_config_location(self, tmp_path):
        write_config(tmp_path, "log_level: WARNING\n", name="aws-inventory.yaml")
        args = make_args()

        load_config(args)

        assert args.log_level == "WARNING"

    def test_no_sources_leaves_args(self):
        args = make_args()
        load_config(args)
        assert args.output is None
        assert args.report_mode is None


class TestGenerateSampleConfig:
    """Tests for generate_sample_config function."""

    def test_is_valid_yaml(self):
        config = yaml.safe_load(generate_sample_config())
        assert config['output'] == "./inventory-output"
        assert config['aws']['services'] == "all"
        assert config['report']['export_format'] == "csv"
