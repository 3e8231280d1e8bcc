"""
Tests for lib/accounts.py account file parsing.
"""
import json
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib.accounts import AccountConfig, parse_csv_accounts, parse_json_accounts, read_csv_accounts
from lib.config import ConfigError


# =============================================================================
# JSON Tests
# =============================================================================

class TestParseJsonAccounts:
    """Tests for parse_json_accounts function."""

    def _write(self, tmp_path, data):
        path = tmp_path / "accounts.json"
        path.write_text(data if isinstance(data, str) else json.dumps(data))
        return str(path)

    def test_accounts_with_and_without_region(self, tmp_path):
        path = self._write(tmp_path, {"accounts": [
            {"name": "prod", "region": "eu-west-1"},
            {"name": "123456789012"},
            {"name": "dev", "region": ""},
        ]})

        assert parse_json_accounts(path) == [
            AccountConfig("prod", "eu-west-1"),
            AccountConfig("123456789012", None),
            AccountConfig("dev", None),
        ]

    def test_missing_accounts_array(self, tmp_path):
        with pytest.raises(ConfigError, match="'accounts' array"):
            parse_json_accounts(self._write(tmp_path, {"profiles": []}))

    def test_invalid_json(self, tmp_path):
        with pytest.raises(ConfigError, match="Failed to read"):
            parse_json_accounts(self._write(tmp_path, "{not json"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            parse_json_accounts(str(tmp_path / "missing.json"))

    def test_entry_without_name(self, tmp_path):
        with pytest.raises(ConfigError, match="entry 2"):
            parse_json_accounts(self._write(tmp_path, {"accounts": [{"name": "a"}, {"region": "us-east-1"}]}))

    def test_entry_not_an_object(self, tmp_path):
        with pytest.raises(ConfigError):
            parse_json_accounts(self._write(tmp_path, {"accounts": ["prod"]}))


# =============================================================================
# CSV Tests
# =============================================================================

class TestParseCsvAccounts:
    """Tests for parse_csv_accounts function."""

    def test_valid_csv(self):
        text = "account,region\nprod,us-west-2\ndev,\n\n"
        assert parse_csv_accounts(text) == [AccountConfig("prod", "us-west-2"), AccountConfig("dev", None)]

    def test_header_case_and_spaces(self):
        assert parse_csv_accounts(" Account , Region \nprod , eu-west-1\n") == [AccountConfig("prod", "eu-west-1")]

    def test_header_only(self):
        with pytest.raises(ConfigError, match="at least a header and one data row"):
            parse_csv_accounts("account,region\n")

    def test_wrong_header(self):
        with pytest.raises(ConfigError, match="account,region"):
            parse_csv_accounts("name,zone\nprod,us-east-1\n")

    def test_single_column_header(self):
        with pytest.raises(ConfigError, match="2 columns"):
            parse_csv_accounts("account\nprod\n")

    def test_row_missing_column(self):
        with pytest.raises(ConfigError, match="row 3"):
            parse_csv_accounts("account,region\nprod,us-east-1\ndev\n")

    def test_row_with_empty_account(self):
        with pytest.raises(ConfigError, match="cannot be empty"):
            parse_csv_accounts("account,region\n,us-east-1\n")

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Failed to read CSV"):
            read_csv_accounts(str(tmp_path / "missing.csv"))


class TestAccountConfig:
    """Tests for AccountConfig dataclass."""

    def test_to_dict(self):
        assert AccountConfig("prod", "us-east-1").to_dict() == {"name": "prod", "region": "us-east-1"}
