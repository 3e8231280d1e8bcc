"""
Tests for lib/utils.py utility functions.

Covers:
- get_date_stamp and to_iso formatting
- tags_to_dict conversion (upper-case, lower-case and dict formats)
- get_name_from_tags fallback logic
- RegionLogBuffer buffering and flushing
- ProgressTracker counters and plain output
- write_csv and write_report (CSV and XLSX)
- setup_logging levels and log file
"""
import logging
import os
import stat
import sys
import tempfile
from datetime import date, datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from openpyxl import load_workbook

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib.utils import (
    ProgressTracker,
    RegionLogBuffer,
    dicts_to_csv,
    get_date_stamp,
    get_name_from_tags,
    setup_logging,
    tags_to_dict,
    to_iso,
    write_csv,
    write_report,
)

# =============================================================================
# Time Helper Tests
# =============================================================================

class TestGetDateStamp:
    """Tests for get_date_stamp function."""

    def test_fixed_date(self):
        assert get_date_stamp(date(2024, 3, 7)) == "20240307"

    def test_default_is_eight_digits(self):
        stamp = get_date_stamp()
        assert len(stamp) == 8
        assert stamp.isdigit()


class TestToIso:
    """Tests for to_iso function."""

    def test_none_is_na(self):
        assert to_iso(None) == "N/A"
        assert to_iso("") == "N/A"

    def test_aware_datetime_converted_to_utc(self):
        value = datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_iso(value) == "2024-01-01T12:00:00Z"

    def test_naive_datetime(self):
        assert to_iso(datetime(2024, 1, 1, 12, 30)) == "2024-01-01T12:30:00"

    def test_epoch_seconds(self):
        assert to_iso(0) == "1970-01-01T00:00:00Z"

    def test_string_passthrough(self):
        assert to_iso("2024-01-01") == "2024-01-01"


# =============================================================================
# tags_to_dict Tests
# =============================================================================

class TestTagsToDict:
    """Tests for tags_to_dict function."""

    def test_none_tags(self):
        assert tags_to_dict(None) == {}

    def test_empty_list(self):
        assert tags_to_dict([]) == {}

    def test_aws_format(self):
        """Test conversion of EC2-style Key/Value tags."""
        aws_tags = [
            {"Key": "Name", "Value": "my-instance"},
            {"Key": "Environment", "Value": "production"},
        ]
        assert tags_to_dict(aws_tags) == {"Name": "my-instance", "Environment": "production"}

    def test_lowercase_format(self):
        """Test conversion of ECS-style key/value tags."""
        tags = [{"key": "team", "value": "platform"}]
        assert tags_to_dict(tags) == {"team": "platform"}

    def test_dict_format(self):
        """Lambda and API Gateway already return a dict."""
        assert tags_to_dict({"Name": "fn", "cost": 3}) == {"Name": "fn", "cost": "3"}

    def test_missing_key_skipped(self):
        aws_tags = [
            {"Key": "Name", "Value": "my-instance"},
            {"Value": "orphan-value"},
        ]
        assert tags_to_dict(aws_tags) == {"Name": "my-instance"}

    def test_unknown_format(self):
        assert tags_to_dict("not-a-valid-format") == {}


# =============================================================================
# get_name_from_tags Tests
# =============================================================================

class TestGetNameFromTags:
    """Tests for get_name_from_tags function."""

    def test_name_key_uppercase(self):
        assert get_name_from_tags({"Name": "my-resource", "Environment": "prod"}) == "my-resource"

    def test_name_key_lowercase(self):
        assert get_name_from_tags({"name": "my-resource"}) == "my-resource"

    def test_fallback_to_resource_id(self):
        assert get_name_from_tags({"Environment": "prod"}, "i-1234567890") == "i-1234567890"

    def test_empty_everything(self):
        """No name and no ID renders as N/A."""
        assert get_name_from_tags({}) == "N/A"


# =============================================================================
# RegionLogBuffer Tests
# =============================================================================

class TestRegionLogBuffer:
    """Tests for RegionLogBuffer class."""

    def test_lines_held_until_flush(self):
        sink = Mock()
        buffer = RegionLogBuffer(sink=sink)
        buffer.log("Wrote EC2-us-east-1.csv")
        buffer.log("Wrote VPC-us-east-1.csv")

        sink.assert_not_called()
        assert len(buffer) == 2

        buffer.flush("Notes")

        assert [c.args[0] for c in sink.call_args_list] == [
            "\nNotes:",
            "  Wrote EC2-us-east-1.csv",
            "  Wrote VPC-us-east-1.csv",
        ]
        assert len(buffer) == 0

    def test_empty_flush_prints_nothing(self):
        sink = Mock()
        RegionLogBuffer(sink=sink).flush("Notes")
        sink.assert_not_called()

    def test_flush_without_title(self):
        sink = Mock()
        buffer = RegionLogBuffer(sink=sink)
        buffer.log("line")
        buffer.flush()
        sink.assert_called_once_with("  line")


# =============================================================================
# ProgressTracker Tests
# =============================================================================

class TestProgressTracker:
    """Tests for ProgressTracker in plain (non-TTY) mode."""

    def test_counts_regions_and_resources(self, capsys):
        with ProgressTracker("Inventory", total_regions=2) as tracker:
            tracker.start_account("123456789012")
            tracker.start_region("us-east-1")
            tracker.update_task("EC2...")
            tracker.add_resources(3)
            tracker.complete_region()
            tracker.start_region("eu-west-1")
            tracker.add_resources(2)
            tracker.complete_region(failed=True)
            tracker.complete_account()

        assert tracker.completed_regions == 2
        assert tracker.failed_regions == 1
        assert tracker.total_resources == 5
        out = capsys.readouterr().out
        assert "[eu-west-1] finished with errors" in out
        assert "Regions with errors:" in out

    def test_silent_prints_nothing(self, capsys):
        with ProgressTracker("Inventory", total_regions=1, show_progress=False) as tracker:
            tracker.start_region("us-east-1")
            tracker.add_resources(4)
            tracker.complete_region()

        assert tracker.total_resources == 4
        assert capsys.readouterr().out == ""


# =============================================================================
# Writer Tests
# =============================================================================

class TestWriteCsv:
    """Tests for write_csv and dicts_to_csv functions."""

    def test_write_local_file(self, tmp_path):
        filepath = tmp_path / "items.csv"
        data = [
            {"name": "item1", "value": 100},
            {"name": "item2", "value": 200},
        ]

        write_csv(data, str(filepath))

        assert filepath.read_text().splitlines() == ["name,value", "item1,100", "item2,200"]

    def test_owner_only_permissions(self, tmp_path):
        filepath = tmp_path / "items.csv"
        write_csv([{"name": "item1"}], str(filepath))
        assert stat.S_IMODE(os.stat(filepath).st_mode) == 0o600

    def test_write_empty_data(self, tmp_path):
        """Empty data writes no file."""
        filepath = tmp_path / "empty.csv"
        write_csv([], str(filepath))
        assert not filepath.exists()

    def test_custom_fieldnames(self):
        assert dicts_to_csv([{"a": 1, "b": 2}], fieldnames=["b", "a"]).splitlines() == ["b,a", "2,1"]

    def test_nested_values_flattened(self):
        text = dicts_to_csv([{"id": "x", "tags": {"b": "2", "a": "1"}, "ids": ["s1", "s2"], "note": None}])
        lines = text.splitlines()
        assert lines[0] == "id,tags,ids,note"
        assert lines[1] == 'x,"{""a"": ""1"", ""b"": ""2""}",s1;s2,N/A'

    def test_empty_collections_render_na(self):
        assert dicts_to_csv([{"tags": {}, "ids": []}]).splitlines()[1] == "N/A,N/A"


class TestWriteReport:
    """Tests for write_report function."""

    TABLE = [["Type", "Name"], ["S3", "bucket-a"], ["EC2", "i-1"]]
    CSV_TEXT = "Type,Name\nS3,bucket-a\nEC2,i-1\n"

    def test_csv_only(self, tmp_path):
        base = str(tmp_path / "init-123456789012-20240101")

        written = write_report(self.CSV_TEXT, self.TABLE, base, "csv")

        assert written == [f"{base}.csv"]
        with open(written[0]) as f:
            assert f.read() == self.CSV_TEXT

    def test_xlsx_only(self, tmp_path):
        base = str(tmp_path / "report")

        written = write_report(self.CSV_TEXT, self.TABLE, base, "xlsx", sheet_name="Inventory")

        assert written == [f"{base}.xlsx"]
        ws = load_workbook(written[0]).active
        assert ws.title == "Inventory"
        assert [c.value for c in ws[1]] == ["Type", "Name"]
        assert [c.value for c in ws[3]] == ["EC2", "i-1"]

    def test_both(self, tmp_path):
        base = str(tmp_path / "report")
        written = write_report(self.CSV_TEXT, self.TABLE, base, "both")
        assert written == [f"{base}.csv", f"{base}.xlsx"]
        assert all(os.path.exists(p) for p in written)


# =============================================================================
# setup_logging Tests
# =============================================================================

class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_default_level(self):
        setup_logging()
        assert logging.getLogger().level == logging.INFO

    def test_case_insensitive(self):
        setup_logging("debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.INFO

    def test_silent_console_only_shows_errors(self):
        setup_logging("INFO", silent=True)
        console = logging.getLogger().handlers[0]
        assert console.level == logging.ERROR

    def test_log_file_created(self):
        with tempfile.TemporaryDirectory() as output_dir:
            setup_logging("INFO", output_dir=output_dir)
            logging.getLogger("test").info("hello")
            for handler in logging.getLogger().handlers:
                handler.flush()

            logs = [f for f in os.listdir(output_dir) if f.startswith("inventory_log_")]
            assert len(logs) == 1
            with open(os.path.join(output_dir, logs[0])) as f:
                assert "hello" in f.read()

            for handler in logging.getLogger().handlers:
                handler.close()
