"""
AWS Inventory - Configuration Management

Options come from three sources, merged lowest to highest priority:
1. Environment variables (AWSINV_*)
2. YAML config file (--config, or the first default location found)
3. Command-line arguments

Config file example:
```yaml
output: "./inventory-output"
log_level: INFO

aws:
  profile: ${AWS_PROFILE:-default}   # env var substitution
  regions:
    - us-east-1
    - us-west-2
  services: all

report:
  mode: security
  export_format: both
  limit_regions:
    - us-east-1
```
"""
import logging
import os
import re
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Invalid configuration, arguments or account file."""


@dataclass(frozen=True)
class Option:
    """One setting: where it lives in YAML, on argparse and in the environment."""
    key: str
    attr: str
    env: Optional[str] = None
    kind: str = 'str'


OPTIONS: List[Option] = [
    Option('output', 'output', 'AWSINV_OUTPUT'),
    Option('log_level', 'log_level', 'AWSINV_LOG_LEVEL'),
    Option('silent', 'silent', 'AWSINV_SILENT', 'bool'),
    Option('aws.profile', 'profile', 'AWSINV_PROFILE'),
    Option('aws.regions', 'regions', 'AWSINV_REGIONS', 'list'),
    Option('aws.services', 'services', 'AWSINV_SERVICES', 'list'),
    Option('aws.json_file', 'json_file'),
    Option('aws.csv_file', 'csv_file'),
    Option('aws.stop_on_error', 'stop_on_error', 'AWSINV_STOP_ON_ERROR', 'bool'),
    Option('report.mode', 'report_mode', 'AWSINV_REPORT_MODE'),
    Option('report.export_format', 'export_format', 'AWSINV_EXPORT_FORMAT'),
    Option('report.limit_regions', 'limit_regions', 'AWSINV_LIMIT_REGIONS', 'list'),
]

ENV_VAR_MAPPING: Dict[str, str] = {opt.key: opt.env for opt in OPTIONS if opt.env}

# Checked in order; the first existing file wins
DEFAULT_CONFIG_PATHS = [
    './aws-inventory.yaml',
    './aws-inventory.yml',
    '~/.aws-inventory/config.yaml',
    '~/.aws-inventory/config.yml',
]

# ${NAME} or ${NAME:-fallback}
ENV_REFERENCE = re.compile(r'\$\{([^}:]+)(?::-([^}]*))?\}')

_MISSING = object()


def expand_env_references(value: Any) -> Any:
    """Replace ${NAME} references in every string of a parsed YAML tree."""
    if isinstance(value, dict):
        return {k: expand_env_references(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_references(v) for v in value]
    if not isinstance(value, str):
        return value
    return ENV_REFERENCE.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ''), value)


def _lookup(config: Dict[str, Any], key: str) -> Any:
    node: Any = config
    for part in key.split('.'):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


def _assign(config: Dict[str, Any], key: str, value: Any) -> None:
    *parents, leaf = key.split('.')
    for part in parents:
        config = config.setdefault(part, {})
    config[leaf] = value


def _as_list(value: Any) -> List[str]:
    items = value if isinstance(value, list) else str(value).split(',')
    return [str(item).strip() for item in items if str(item).strip()]


def _as_arg(opt: Option, value: Any) -> Any:
    """Config value in the shape argparse produces for the option."""
    if opt.kind == 'list':
        return ','.join(_as_list(value))
    if opt.kind == 'bool':
        return bool(value)
    return value


def load_config_file(config_path: str) -> Dict[str, Any]:
    """
    Read a YAML config file and expand ${VAR} references.

    Raises:
        ConfigError: file missing, invalid YAML, or not a mapping
    """
    path = Path(config_path).expanduser()
    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    if path.stat().st_mode & (stat.S_IRWXG | stat.S_IRWXO):
        logger.warning(f"Config file {config_path} is readable by other users; consider chmod 600")

    logger.info(f"Loading config from {path}")
    try:
        with open(path) as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return expand_env_references(config)


def find_default_config() -> Optional[str]:
    for candidate in DEFAULT_CONFIG_PATHS:
        path = Path(candidate).expanduser()
        if path.exists():
            return str(path)
    return None


def load_env_config() -> Dict[str, Any]:
    """Settings from AWSINV_* environment variables."""
    config: Dict[str, Any] = {}
    for opt in OPTIONS:
        raw = os.environ.get(opt.env) if opt.env else None
        if raw is None:
            continue
        if opt.kind == 'list':
            value: Any = _as_list(raw)
        elif opt.kind == 'bool':
            value = raw.strip().lower() in ('true', '1', 'yes')
        else:
            value = raw
        _assign(config, opt.key, value)
    return config


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge config dicts; later values win and None never overrides."""
    merged: Dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if value is None:
                continue
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = merge_configs(merged[key], value)
            else:
                merged[key] = value
    return merged


def args_to_config(args) -> Dict[str, Any]:
    """
    Settings given on the command line, in config-file shape.

    Flags left at False are omitted so they cannot mask a file or env value.
    """
    config: Dict[str, Any] = {}
    for opt in OPTIONS:
        value = getattr(args, opt.attr, None)
        if value is None or (opt.kind == 'bool' and not value):
            continue
        _assign(config, opt.key, _as_list(value) if opt.kind == 'list' else value)
    return config


def config_to_args(config: Dict[str, Any], args) -> None:
    """Copy every merged setting onto the argparse namespace."""
    for opt in OPTIONS:
        value = _lookup(config, opt.key)
        if value is not _MISSING:
            setattr(args, opt.attr, _as_arg(opt, value))


def load_config(args) -> Dict[str, Any]:
    """
    Merge environment, config file and CLI settings into args.

    Returns:
        The merged config dict
    """
    layers = []

    env_config = load_env_config()
    if env_config:
        logger.debug(f"Environment sets: {', '.join(sorted(env_config))}")
        layers.append(env_config)

    config_path = getattr(args, 'config', None) or find_default_config()
    if config_path:
        layers.append(load_config_file(config_path))

    layers.append(args_to_config(args))

    merged = merge_configs(*layers)
    config_to_args(merged, args)
    return merged


def generate_sample_config() -> str:
    """Sample YAML printed by --generate-config."""
    return '''# AWS Inventory configuration
#
# Values may reference environment variables:
#   ${NAME}            - empty when NAME is unset
#   ${NAME:-fallback}  - fallback when NAME is unset

# Output directory for per-service CSVs, consolidated reports and the log file
output: "./inventory-output"

# DEBUG, INFO, WARNING or ERROR
log_level: INFO

# Console shows errors and the output list only; the log file keeps everything
silent: false

aws:
  # Named profile; without one the default credential chain is used
  # profile: ${AWS_PROFILE:-default}

  # Regions for the per-service export (default: us-east-1)
  # regions:
  #   - us-east-1
  #   - us-west-2

  # Services for the per-service export: a list, a comma list or "all"
  services: all

  # Several accounts at once, either
  #   JSON: {"accounts": [{"name": "prod", "region": "us-east-1"}]}
  #   CSV:  header "account,region", one account per row
  # json_file: accounts.json
  # csv_file: accounts.csv

  # Exit with code 1 at the first account that fails
  stop_on_error: false

report:
  # Consolidated report mode: basic, detailed, security or cost
  # mode: basic

  # csv, xlsx or both
  export_format: csv

  # Regions for the consolidated report (default: every enabled region)
  # limit_regions:
  #   - us-east-1
'''
