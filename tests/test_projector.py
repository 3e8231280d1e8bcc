"""
Tests for lib/projector.py report rendering.

Covers:
- Column lists per report mode
- CSV escaping and the N/A sentinel
- Header/row field counts staying aligned
"""
import csv
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib.models import InventoryRecord
from lib.projector import (
    MODE_COLUMNS,
    ReportMode,
    columns,
    escape_csv,
    header,
    render,
    row,
    to_table,
)


class TestHeaders:
    """Tests for header function."""

    def test_basic(self):
        assert header("basic") == "Type,Name,Region,ARN"

    def test_detailed(self):
        assert header("detailed") == "Type,Name,Region,ARN,State,Tags,CreatedDate,PublicAccess,Size"

    def test_security(self):
        assert header("security") == "Type,Name,Region,ARN,State,Encrypted,PublicAccess,VPC,VersionStatus"

    def test_cost(self):
        assert header("cost") == "Type,Name,Region,ARN,State,Size,CreatedDate,LastActivity"

    def test_enum_members_work_as_modes(self):
        assert header(ReportMode.SECURITY) == header("security")

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown report mode"):
            columns("verbose")


class TestEscapeCsv:
    """Tests for escape_csv function."""

    def test_plain_value_unchanged(self):
        assert escape_csv("i-0abc") == "i-0abc"

    def test_absent_values_become_na(self):
        assert escape_csv(None) == "N/A"
        assert escape_csv("") == "N/A"

    def test_comma_quoted(self):
        assert escape_csv("a,b") == '"a,b"'

    def test_quotes_doubled(self):
        assert escape_csv('say "hi"') == '"say ""hi"""'

    def test_newline_quoted(self):
        assert escape_csv("line1\nline2") == '"line1\nline2"'

    def test_numbers_rendered(self):
        assert escape_csv(20) == "20"


class TestRows:
    """Tests for row and render functions."""

    def test_basic_row(self):
        record = InventoryRecord(
            type="S3", region="global", name="example-bucket", arn="arn:aws:s3:::example-bucket"
        )
        assert row(record, "basic") == "S3,example-bucket,global,arn:aws:s3:::example-bucket"

    def test_missing_fields_render_na(self):
        record = InventoryRecord(type="SQSQueue", region="us-east-1", name="jobs")
        assert row(record, "security") == "SQSQueue,jobs,us-east-1,N/A,N/A,N/A,N/A,N/A,N/A"

    @pytest.mark.parametrize("mode", list(MODE_COLUMNS))
    def test_row_field_count_matches_header(self, mode):
        """Every field holds a comma; the unquoted field count still matches the header."""
        record = InventoryRecord(
            type="EC2", region="us-east-1", name="a,b", arn="arn,x", state="running",
            tags='{"k":"v,w"}', created_date="2024-01-01", public_access="Public",
            size="t3.micro", encrypted="Yes", vpc_id="vpc-1", last_activity="x",
            version_status="Current",
        )
        rendered = row(record, mode)
        fields = next(csv.reader([rendered]))
        assert len(fields) == len(header(mode).split(','))

    def test_render_empty(self):
        assert render([], "basic") == "Type,Name,Region,ARN\n"

    def test_render_lines(self):
        records = [
            InventoryRecord(type="VPC", region="us-east-1", name="main", arn="arn:1"),
            InventoryRecord(type="VPC", region="us-west-2", name="dev", arn="arn:2"),
        ]
        lines = render(records, "basic").splitlines()
        assert lines == [
            "Type,Name,Region,ARN",
            "VPC,main,us-east-1,arn:1",
            "VPC,dev,us-west-2,arn:2",
        ]

    def test_to_table_unescaped(self):
        record = InventoryRecord(type="Lambda", region="us-east-1", name="a,b")
        table = to_table([record], "basic")
        assert table[0] == ["Type", "Name", "Region", "ARN"]
        assert table[1] == ["Lambda", "a,b", "us-east-1", "N/A"]
