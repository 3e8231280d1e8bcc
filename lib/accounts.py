"""
Account list files for multi-account runs.

JSON:
    {"accounts": [{"name": "prod", "region": "eu-west-1"}, {"name": "dev"}]}

CSV:
    account,region
    prod,eu-west-1
    dev,
"""
import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from .config import ConfigError

logger = logging.getLogger(__name__)

CSV_FORMAT_HINT = "Expected format:\naccount,region\n<account_name>,<region>"


@dataclass
class AccountConfig:
    """An account (profile name or account ID) with an optional region override."""
    name: str
    region: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _account_from_entry(entry: Any, index: int) -> AccountConfig:
    if not isinstance(entry, dict):
        raise ConfigError(f"Account entry {index} must be an object with a 'name' field")
    name = str(entry.get('name') or '').strip()
    if not name:
        raise ConfigError(f"Account entry {index}: account name cannot be empty")
    region = str(entry.get('region') or '').strip()
    return AccountConfig(name=name, region=region or None)


def parse_json_accounts(path: str) -> List[AccountConfig]:
    """
    Read an accounts JSON file.

    Raises:
        ConfigError: file unreadable, not JSON, or missing the 'accounts' array
    """
    try:
        with open(path) as f:
            config = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    if not isinstance(config, dict) or not isinstance(config.get('accounts'), list):
        raise ConfigError("Config file must contain an 'accounts' array")

    accounts = [_account_from_entry(entry, i) for i, entry in enumerate(config['accounts'], start=1)]
    logger.debug(f"Loaded {len(accounts)} accounts from {path}")
    return accounts


def parse_csv_accounts(text: str) -> List[AccountConfig]:
    """
    Parse accounts CSV text with an "account,region" header.

    Raises:
        ConfigError: missing rows, wrong header, or a row without an account name
    """
    lines = [line for line in text.strip().splitlines() if line.strip()]
    if len(lines) < 2:
        raise ConfigError(f"CSV must have at least a header and one data row. {CSV_FORMAT_HINT}")

    header = [part.strip().lower() for part in lines[0].split(',')]
    if len(header) < 2:
        raise ConfigError(f"CSV header must have at least 2 columns: account,region. {CSV_FORMAT_HINT}")
    if header[0] != 'account' or header[1] != 'region':
        raise ConfigError(f"CSV header must be 'account,region'. {CSV_FORMAT_HINT}")

    accounts = []
    for row_number, line in enumerate(lines[1:], start=2):
        parts = line.split(',')
        if len(parts) < 2:
            raise ConfigError(
                f"Invalid CSV row {row_number}: expected at least 2 columns, got {len(parts)}. {CSV_FORMAT_HINT}"
            )
        name = parts[0].strip()
        if not name:
            raise ConfigError(f"Invalid CSV row {row_number}: account name cannot be empty. {CSV_FORMAT_HINT}")
        accounts.append(AccountConfig(name=name, region=parts[1].strip() or None))

    return accounts


def read_csv_accounts(path: str) -> List[AccountConfig]:
    """Read and parse an accounts CSV file."""
    try:
        with open(path) as f:
            text = f.read()
    except OSError as e:
        raise ConfigError(f"Failed to read CSV config file {path}: {e}") from e
    return parse_csv_accounts(text)
