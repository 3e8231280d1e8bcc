"""
Tests for lib/consolidate.py inventory generation.

Covers:
- Descriptor to InventoryRecord mapping
- Global service deduplication via GlobalServicesState
- Collector failure isolation
- End-to-end report generation with fake collectors
"""
import csv
import io
import os
import sys
from datetime import date
from unittest.mock import Mock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib import models
from lib.backoff import InventoryCallError
from lib.clients import ClientCache
from lib.consolidate import (
    RECORD_MAPPERS,
    CollectorSpec,
    GlobalCollectorSpec,
    GlobalServicesState,
    build_report_filename,
    collect_global_records,
    collect_region_records,
    generate_inventory,
    to_record,
)
from lib.models import (
    DynamoDbTable,
    Ec2Instance,
    EfsFileSystem,
    IamRole,
    IamUser,
    RdsInstance,
    ResourceDescriptor,
    S3Bucket,
    SqsQueue,
    Vpc,
)

ACCOUNT = "123456789012"


def descriptor_classes():
    return [
        obj for obj in vars(models).values()
        if isinstance(obj, type) and issubclass(obj, ResourceDescriptor) and obj is not ResourceDescriptor
    ]


@pytest.fixture
def clients():
    """Client cache over a session that is never called."""
    return ClientCache(Mock())


# =============================================================================
# Mapping Tests
# =============================================================================

class TestToRecord:
    """Tests for to_record and the mapper registry."""

    def test_every_descriptor_class_is_mapped(self):
        classes = descriptor_classes()
        assert len(classes) == 55
        for cls in classes:
            assert cls in RECORD_MAPPERS, f"{cls.__name__} has no mapper"

    @pytest.mark.parametrize("cls", descriptor_classes(), ids=lambda c: c.__name__)
    def test_minimal_descriptor_maps(self, cls):
        """A descriptor with only its identifying field still maps cleanly."""
        record = to_record(cls("res-1"), "us-east-1", ACCOUNT)
        assert record.type
        assert record.name
        assert record.region in ("us-east-1", "global")

    def test_unknown_descriptor_raises(self):
        class Mystery(ResourceDescriptor):
            pass

        with pytest.raises(TypeError):
            to_record(Mystery(), "us-east-1", ACCOUNT)

    def test_s3_is_always_global(self):
        bucket = S3Bucket(name="example-bucket", location="eu-west-1", public_access=True)
        record = to_record(bucket, "eu-west-1", ACCOUNT)
        assert record.type == "S3"
        assert record.region == "global"
        assert record.arn == "arn:aws:s3:::example-bucket"
        assert record.public_access == "Public"
        assert record.state == "Unversioned"

    def test_ec2_record(self):
        instance = Ec2Instance(
            id="i-0abc", name="web-1", state="running", instance_type="t3.micro",
            public_ip="203.0.113.10", vpc_id="vpc-1", encrypted=True, tags={"Name": "web-1"},
        )
        record = to_record(instance, "us-west-2", ACCOUNT)
        assert record.name == "web-1"
        assert record.arn == f"arn:aws:ec2:us-west-2:{ACCOUNT}:instance/i-0abc"
        assert record.public_access == "Public"
        assert record.encrypted == "Yes"
        assert record.size == "t3.micro"
        assert record.tags == '{"Name":"web-1"}'

    def test_ec2_without_name_uses_id(self):
        record = to_record(Ec2Instance(id="i-0abc"), "us-east-1", ACCOUNT)
        assert record.name == "i-0abc"
        assert record.public_access == "Private"
        assert record.tags is None

    def test_rds_version_status(self):
        db = RdsInstance(id="db-1", engine="postgres", engine_version="11.4", instance_class="db.t3.micro")
        record = to_record(db, "us-east-1", ACCOUNT)
        assert record.version_status.startswith("End of Life")

    def test_dynamodb_encryption(self):
        table = DynamoDbTable(name="orders", encrypted=True)
        assert to_record(table, "us-east-1", ACCOUNT).encrypted == "Yes"

    def test_dynamodb_size_in_mb(self):
        table = DynamoDbTable(name="orders", size_bytes=3 * 1024 ** 2, item_count=10)
        assert to_record(table, "us-east-1", ACCOUNT).size == "3.00MB (10 items)"

    def test_efs_size_in_gb(self):
        fs = EfsFileSystem(id="fs-1", size_bytes=1024 ** 3 // 2)
        assert to_record(fs, "us-east-1", ACCOUNT).size == "0.50GB"

    def test_iam_user_is_global(self):
        record = to_record(IamUser(user_name="alice"), "us-east-1", ACCOUNT)
        assert record.region == "global"
        assert record.type == "IAMUser"


# =============================================================================
# Collection Tests
# =============================================================================

class TestCollectRegionRecords:
    """Tests for collect_region_records function."""

    def test_collects_in_registry_order(self, clients):
        collectors = [
            CollectorSpec("EC2", lambda c, r: [Ec2Instance(id="i-1")]),
            CollectorSpec("VPC", lambda c, r: [Vpc(id="vpc-1")]),
        ]
        records, had_errors = collect_region_records(clients, "us-east-1", ACCOUNT, collectors, silent=True)
        assert [r.type for r in records] == ["EC2", "VPC"]
        assert not had_errors

    def test_failure_is_isolated(self, clients):
        """One failing collector sets had_errors; the others still contribute."""
        def broken(c, r):
            raise InventoryCallError(
                "RDS DescribeDBInstances failed", label="RDS DescribeDBInstances", category="terminal"
            )

        collectors = [
            CollectorSpec("EC2", lambda c, r: [Ec2Instance(id="i-1")]),
            CollectorSpec("RDS", broken),
            CollectorSpec("SQS", lambda c, r: [SqsQueue(name="jobs")]),
        ]
        records, had_errors = collect_region_records(clients, "us-east-1", ACCOUNT, collectors, silent=True)
        assert had_errors
        assert [r.type for r in records] == ["EC2", "SQSQueue"]

    def test_region_passed_to_collectors(self, clients):
        seen = []
        collectors = [CollectorSpec("EC2", lambda c, r: seen.append(r) or [])]
        collect_region_records(clients, "ap-south-1", ACCOUNT, collectors, silent=True)
        assert seen == ["ap-south-1"]


class TestCollectGlobalRecords:
    """Tests for collect_global_records function."""

    def test_iam_users_and_roles_share_one_flag(self, clients):
        collectors = [
            GlobalCollectorSpec("IAMUser", lambda c: [IamUser(user_name="alice")], flag="iam"),
            GlobalCollectorSpec("IAMRole", lambda c: [IamRole(role_name="admin")], flag="iam"),
        ]
        records, state, _ = collect_global_records(clients, ACCOUNT, GlobalServicesState(), collectors, silent=True)
        assert [r.type for r in records] == ["IAMUser", "IAMRole"]
        assert state.iam

    def test_set_flag_skips_collection(self, clients):
        describe = Mock(return_value=[S3Bucket(name="b")])
        collectors = [GlobalCollectorSpec("S3", describe, flag="s3")]

        state = GlobalServicesState()
        collect_global_records(clients, ACCOUNT, state, collectors, silent=True)
        records, state, _ = collect_global_records(clients, ACCOUNT, state, collectors, silent=True)

        assert records == []
        assert describe.call_count == 1

    def test_failed_service_is_not_retried(self, clients):
        describe = Mock(side_effect=RuntimeError("boom"))
        collectors = [GlobalCollectorSpec("CloudFront", describe, flag="cloudfront")]

        records, state, had_errors = collect_global_records(
            clients, ACCOUNT, GlobalServicesState(), collectors, silent=True
        )

        assert records == []
        assert had_errors
        assert state.cloudfront

    def test_entry_region_passed(self, clients):
        describe = Mock(return_value=[])
        collectors = [
            GlobalCollectorSpec("ControlTower", describe, flag="control_tower", entry_region="us-east-1"),
        ]
        collect_global_records(clients, ACCOUNT, GlobalServicesState(), collectors, silent=True)
        describe.assert_called_once_with(clients, "us-east-1")


# =============================================================================
# Report Generation Tests
# =============================================================================

class TestBuildReportFilename:
    """Tests for build_report_filename function."""

    def test_basic_mode_has_no_suffix(self):
        path = build_report_filename("out", "basic", ACCOUNT, date(2024, 1, 1))
        assert path == os.path.join("out", f"init-{ACCOUNT}-20240101")

    def test_other_modes_include_mode(self):
        path = build_report_filename("out", "security", ACCOUNT, date(2024, 1, 1))
        assert path == os.path.join("out", f"init-security-{ACCOUNT}-20240101")


class TestGenerateInventory:
    """End-to-end tests for generate_inventory with fake collectors."""

    def test_basic_report_written(self, clients, tmp_path):
        regional = [CollectorSpec("EC2", lambda c, r: [Ec2Instance(id="i-1", state="running")])]
        global_ = [GlobalCollectorSpec("S3", lambda c: [S3Bucket(name="example-bucket")], flag="s3")]

        result = generate_inventory(
            clients, ACCOUNT, "basic", ["us-east-1"], regional, global_,
            output_dir=str(tmp_path), silent=True, today=date(2024, 1, 1),
        )

        expected = tmp_path / f"init-{ACCOUNT}-20240101.csv"
        assert result.output_files == [str(expected)]
        assert not result.had_errors
        assert result.region_status == {"us-east-1": "done"}

        lines = expected.read_text().splitlines()
        assert lines[0] == "Type,Name,Region,ARN"
        assert "S3,example-bucket,global,arn:aws:s3:::example-bucket" in lines
        assert f"EC2,i-1,us-east-1,arn:aws:ec2:us-east-1:{ACCOUNT}:instance/i-1" in lines

    def test_security_mode_columns(self, clients, tmp_path):
        global_ = [GlobalCollectorSpec("S3", lambda c: [S3Bucket(name="b", encrypted=True)], flag="s3")]

        result = generate_inventory(
            clients, ACCOUNT, "security", ["us-east-1"], [], global_,
            output_dir=str(tmp_path), silent=True, today=date(2024, 1, 1),
        )

        with open(result.output_files[0], newline='') as f:
            rows = list(csv.reader(io.StringIO(f.read())))
        assert rows[0] == ["Type", "Name", "Region", "ARN", "State", "Encrypted", "PublicAccess", "VPC", "VersionStatus"]
        assert rows[1] == ["S3", "b", "global", "arn:aws:s3:::b", "Unversioned", "Yes", "Private", "N/A", "N/A"]

    def test_partial_failure_still_writes_report(self, clients, tmp_path):
        def broken(c, r):
            raise RuntimeError("kaboom")

        regional = [
            CollectorSpec("RDS", broken),
            CollectorSpec("VPC", lambda c, r: [Vpc(id="vpc-1")]),
        ]

        result = generate_inventory(
            clients, ACCOUNT, "basic", ["us-east-1", "eu-west-1"], regional, [],
            output_dir=str(tmp_path), silent=True, today=date(2024, 1, 1),
        )

        assert result.had_errors
        assert result.counts == {"VPC": 2}
        assert os.path.exists(result.output_files[0])

    def test_notes_flushed_as_each_region_completes(self, clients, tmp_path, capsys):
        regional = [CollectorSpec("EC2", lambda c, r: [Ec2Instance(id="i-1")])]

        generate_inventory(
            clients, ACCOUNT, "basic", ["us-east-1", "us-west-2"], regional, [],
            output_dir=str(tmp_path), today=date(2024, 1, 1),
        )

        out = capsys.readouterr().out
        assert out.index("EC2 (us-east-1): 1") < out.index("[us-west-2] Collecting")
        assert out.index("[us-west-2] Collecting") < out.index("EC2 (us-west-2): 1")

    def test_global_collectors_run_once_across_regions(self, clients, tmp_path):
        describe = Mock(return_value=[S3Bucket(name="b")])
        global_ = [GlobalCollectorSpec("S3", describe, flag="s3")]

        result = generate_inventory(
            clients, ACCOUNT, "basic", ["us-east-1", "us-west-2", "eu-west-1"], [], global_,
            output_dir=str(tmp_path), silent=True, today=date(2024, 1, 1),
        )

        assert describe.call_count == 1
        assert result.counts == {"S3": 1}

    def test_both_formats(self, clients, tmp_path):
        result = generate_inventory(
            clients, ACCOUNT, "cost", ["us-east-1"], [], [],
            export_format="both", output_dir=str(tmp_path), silent=True, today=date(2024, 1, 1),
        )

        assert [os.path.splitext(p)[1] for p in result.output_files] == [".csv", ".xlsx"]
        assert all(os.path.exists(p) for p in result.output_files)
