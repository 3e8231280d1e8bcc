"""
Consolidated inventory generation.

Runs every regional collector for each target region, then every global
collector once, maps the resulting descriptors to InventoryRecord rows and
writes a single report per account in the requested mode.

A failing collector never stops the run: its error is logged, the run's
had_errors flag is set and it contributes no records.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Type

from .backoff import execute_with_retry
from .clients import ClientCache
from .constants import (
    BYTES_PER_GB,
    BYTES_PER_MB,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REGION,
    GLOBAL_REGION,
    MODE_BASIC,
    NOT_AVAILABLE,
    TYPE_API_GATEWAY,
    TYPE_ATHENA_WORKGROUP,
    TYPE_AUTO_SCALING_GROUP,
    TYPE_BACKUP_VAULT,
    TYPE_CLOUDFORMATION_STACK,
    TYPE_CLOUDFRONT,
    TYPE_CLOUDTRAIL,
    TYPE_CLOUDWATCH_ALARM,
    TYPE_COGNITO_USER_POOL,
    TYPE_CONFIG_RULE,
    TYPE_CONTROL_TOWER,
    TYPE_DYNAMODB,
    TYPE_EBS_VOLUME,
    TYPE_EC2,
    TYPE_ECR,
    TYPE_ECS,
    TYPE_EFS,
    TYPE_EKS,
    TYPE_ELASTIC_IP,
    TYPE_ELASTICACHE,
    TYPE_EMR_CLUSTER,
    TYPE_EVENTBRIDGE_RULE,
    TYPE_GLUE,
    TYPE_GUARDDUTY_DETECTOR,
    TYPE_IAM_ROLE,
    TYPE_IAM_USER,
    TYPE_INTERNET_GATEWAY,
    TYPE_KINESIS_STREAM,
    TYPE_KMS,
    TYPE_LAMBDA,
    TYPE_LOAD_BALANCER,
    TYPE_NAT_GATEWAY,
    TYPE_NETWORK_ACL,
    TYPE_NETWORK_INTERFACE,
    TYPE_OPENSEARCH,
    TYPE_RDS,
    TYPE_REDSHIFT,
    TYPE_ROUTE53,
    TYPE_ROUTE_TABLE,
    TYPE_S3,
    TYPE_SCP,
    TYPE_SECRET,
    TYPE_SECURITY_GROUP,
    TYPE_SNS_TOPIC,
    TYPE_SQS_QUEUE,
    TYPE_SSM_PARAMETER,
    TYPE_STEP_FUNCTION,
    TYPE_SUBNET,
    TYPE_TRANSIT_GATEWAY,
    TYPE_VPC,
    TYPE_VPC_ENDPOINT,
    TYPE_VPC_PEERING,
    TYPE_VPN_CONNECTION,
    TYPE_VPN_GATEWAY,
    TYPE_WAF_WEB_ACL,
)
from .models import (
    ApiGateway,
    AthenaWorkgroup,
    AutoScalingGroup,
    BackupVault,
    CloudFormationStack,
    CloudFrontDistribution,
    CloudTrailTrail,
    CloudWatchAlarm,
    CognitoUserPool,
    ConfigRule,
    ControlTowerGuardrail,
    DynamoDbTable,
    EbsVolume,
    Ec2Instance,
    EcrRepository,
    EcsCluster,
    EfsFileSystem,
    EksCluster,
    ElastiCacheCluster,
    ElasticIp,
    EmrCluster,
    EventBridgeRule,
    GlueJob,
    GuardDutyDetector,
    IamRole,
    IamUser,
    InternetGateway,
    InventoryRecord,
    KinesisStream,
    KmsKey,
    LambdaFunction,
    LoadBalancer,
    NatGateway,
    NetworkAcl,
    NetworkInterface,
    OpenSearchDomain,
    RdsInstance,
    RedshiftCluster,
    ResourceDescriptor,
    Route53Zone,
    RouteTable,
    S3Bucket,
    Secret,
    SecurityGroup,
    ServiceControlPolicy,
    SnsTopic,
    SqsQueue,
    SsmParameter,
    StepFunction,
    Subnet,
    TransitGateway,
    Vpc,
    VpcEndpoint,
    VpcPeering,
    VpnConnection,
    VpnGateway,
    WafWebAcl,
)
from .projector import render, to_table
from .utils import (
    ProgressTracker,
    RegionLogBuffer,
    get_date_stamp,
    print_summary_table,
    write_report,
)
from .versions import (
    check_eks_version,
    check_elasticache_version,
    check_lambda_runtime,
    check_rds_version,
    format_version_status,
)

logger = logging.getLogger(__name__)

REGION_PENDING = "pending"
REGION_IN_PROGRESS = "in-progress"
REGION_DONE = "done"
REGION_FAILED = "failed"

MODE_DESCRIPTIONS = {
    'basic': 'basic',
    'detailed': 'detailed',
    'security': 'security-focused',
    'cost': 'cost-optimization',
}


# =============================================================================
# Collector Registry Types
# =============================================================================

@dataclass(frozen=True)
class CollectorSpec:
    """A regional collector: describe(clients, region) -> List[descriptor]."""
    name: str
    describe: Callable[..., List[ResourceDescriptor]]


@dataclass(frozen=True)
class GlobalCollectorSpec:
    """
    A global collector, gated by one GlobalServicesState flag.

    entry_region is passed to collectors whose API needs a region even
    though the resources are account-wide (Control Tower, Config).
    """
    name: str
    describe: Callable[..., List[ResourceDescriptor]]
    flag: str
    entry_region: Optional[str] = None


@dataclass
class GlobalServicesState:
    """Which global services have already been collected in this run."""
    s3: bool = False
    cloudfront: bool = False
    route53: bool = False
    iam: bool = False
    control_tower: bool = False
    scp: bool = False
    config_rules: bool = False


@dataclass
class InventoryResult:
    """Outcome of generate_inventory()."""
    account_id: str
    mode: str
    records: List[InventoryRecord] = field(default_factory=list)
    had_errors: bool = False
    region_status: Dict[str, str] = field(default_factory=dict)
    output_files: List[str] = field(default_factory=list)
    global_state: GlobalServicesState = field(default_factory=GlobalServicesState)

    @property
    def counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for record in self.records:
            counts[record.type] = counts.get(record.type, 0) + 1
        return counts


# =============================================================================
# Field Helpers
# =============================================================================

def _present(value) -> bool:
    return value is not None and value != '' and value != NOT_AVAILABLE


def _opt(value) -> Optional[str]:
    """Descriptor value as an optional record field (N/A becomes absent)."""
    return str(value) if _present(value) else None


def _name_or_id(name: str, resource_id: str) -> str:
    return name if _present(name) else resource_id


def _tags(tags: Optional[Dict[str, str]]) -> Optional[str]:
    """Serialize tags as compact JSON; no tags means an absent field."""
    if not tags:
        return None
    return json.dumps(tags, separators=(',', ':'))


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _public_private(flag: bool) -> str:
    return "Public" if flag else "Private"


# =============================================================================
# Compute / Database Mappers
# =============================================================================

def _map_ec2(d: Ec2Instance, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_EC2,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:instance/{d.id}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        created_date=_opt(d.launch_time),
        public_access=_public_private(_present(d.public_ip)),
        size=_opt(d.instance_type),
        encrypted=_yes_no(d.encrypted),
        vpc_id=_opt(d.vpc_id),
    )


def _map_rds(d: RdsInstance, region: str, account_id: str) -> InventoryRecord:
    size = f"{d.instance_class} ({d.storage_gb}GB)" if _present(d.instance_class) else None
    return InventoryRecord(
        type=TYPE_RDS,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:rds:{region}:{account_id}:db:{d.id}",
        state=_opt(d.status),
        tags=_tags(d.tags),
        created_date=_opt(d.create_time),
        public_access=_public_private(d.publicly_accessible),
        size=size,
        encrypted=_yes_no(d.encrypted),
        vpc_id=_opt(d.vpc_id),
        version_status=format_version_status(check_rds_version(d.engine, d.engine_version)),
    )


def _map_lambda(d: LambdaFunction, region: str, account_id: str) -> InventoryRecord:
    size = f"{d.memory_size}MB ({d.timeout}s timeout)" if d.memory_size else None
    arn = d.arn if _present(d.arn) else f"arn:aws:lambda:{region}:{account_id}:function:{d.name}"
    return InventoryRecord(
        type=TYPE_LAMBDA,
        name=d.name,
        region=region,
        arn=arn,
        state=_opt(d.runtime),
        tags=_tags(d.tags),
        created_date=_opt(d.last_modified),
        size=size,
        vpc_id=_opt(d.vpc_id),
        last_activity=_opt(d.last_modified),
        version_status=format_version_status(check_lambda_runtime(_opt(d.runtime))),
    )


def _map_dynamodb(d: DynamoDbTable, region: str, account_id: str) -> InventoryRecord:
    if d.size_bytes:
        size: Optional[str] = f"{d.size_bytes / BYTES_PER_MB:.2f}MB ({d.item_count} items)"
    elif d.item_count:
        size = f"{d.item_count} items"
    else:
        size = None
    arn = d.arn if _present(d.arn) else f"arn:aws:dynamodb:{region}:{account_id}:table/{d.name}"
    return InventoryRecord(
        type=TYPE_DYNAMODB,
        name=d.name,
        region=region,
        arn=arn,
        state=_opt(d.status),
        tags=_tags(d.tags),
        created_date=_opt(d.created_date),
        size=size,
        encrypted=_yes_no(d.encrypted),
    )


def _map_ecs(d: EcsCluster, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_ECS,
        name=d.name,
        region=region,
        arn=f"arn:aws:ecs:{region}:{account_id}:cluster/{d.name}",
        state=_opt(d.status),
        tags=_tags(d.tags),
        size=f"{d.active_services} services, {d.running_tasks} tasks",
    )


def _map_eks(d: EksCluster, region: str, account_id: str) -> InventoryRecord:
    arn = d.arn if _present(d.arn) else f"arn:aws:eks:{region}:{account_id}:cluster/{d.name}"
    return InventoryRecord(
        type=TYPE_EKS,
        name=d.name,
        region=region,
        arn=arn,
        state=f"{d.status} (v{d.version})",
        tags=_tags(d.tags),
        created_date=_opt(d.created_at),
        public_access="Has Endpoint" if _present(d.endpoint) else None,
        size=f"Kubernetes {d.version}",
        vpc_id=_opt(d.vpc_id),
        version_status=format_version_status(check_eks_version(_opt(d.version))),
    )


def _map_redshift(d: RedshiftCluster, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_REDSHIFT,
        name=d.id,
        region=region,
        arn=f"arn:aws:redshift:{region}:{account_id}:cluster:{d.id}",
        state=_opt(d.status),
        tags=_tags(d.tags),
        created_date=_opt(d.create_time),
        public_access=_public_private(d.publicly_accessible),
        size=f"{d.node_type} x{d.number_of_nodes} nodes",
        encrypted=_yes_no(d.encrypted),
        vpc_id=_opt(d.vpc_id),
    )


def _map_glue(d: GlueJob, region: str, account_id: str) -> InventoryRecord:
    if d.number_of_workers and _present(d.worker_type):
        size: Optional[str] = f"{d.number_of_workers} x {d.worker_type}"
    elif d.max_capacity:
        size = f"{d.max_capacity} DPUs"
    else:
        size = None
    return InventoryRecord(
        type=TYPE_GLUE,
        name=d.name,
        region=region,
        arn=f"arn:aws:glue:{region}:{account_id}:job/{d.name}",
        state=f"Glue {d.glue_version}" if _present(d.glue_version) else None,
        created_date=_opt(d.created_on),
        size=size,
        last_activity=_opt(d.last_modified_on),
    )


def _map_opensearch(d: OpenSearchDomain, region: str, account_id: str) -> InventoryRecord:
    in_vpc = _present(d.vpc_id)
    return InventoryRecord(
        type=TYPE_OPENSEARCH,
        name=d.name,
        region=region,
        arn=_opt(d.arn) or f"arn:aws:es:{region}:{account_id}:domain/{d.name}",
        state="Processing" if d.processing else "Active",
        public_access="Private" if in_vpc else "Public",
        size=f"{d.instance_count}x {d.instance_type}",
        encrypted=_yes_no(d.encrypted),
        vpc_id=_opt(d.vpc_id),
    )


def _map_elasticache(d: ElastiCacheCluster, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_ELASTICACHE,
        name=d.id,
        region=region,
        arn=_opt(d.arn) or f"arn:aws:elasticache:{region}:{account_id}:cluster:{d.id}",
        state=_opt(d.status),
        created_date=_opt(d.create_time),
        size=f"{d.node_type} ({d.num_nodes} nodes, {d.engine})",
        encrypted=_yes_no(d.encrypted),
        version_status=format_version_status(check_elasticache_version(d.engine, _opt(d.engine_version))),
    )


def _map_auto_scaling_group(d: AutoScalingGroup, region: str, account_id: str) -> InventoryRecord:
    arn = d.arn if _present(d.arn) else (
        f"arn:aws:autoscaling:{region}:{account_id}:autoScalingGroup:*:autoScalingGroupName/{d.name}"
    )
    return InventoryRecord(
        type=TYPE_AUTO_SCALING_GROUP,
        name=d.name,
        region=region,
        arn=arn,
        state=f"{d.desired_capacity}/{d.max_size} (desired/max)",
        tags=_tags(d.tags),
        created_date=_opt(d.created_time),
        size=f"Min:{d.min_size} Desired:{d.desired_capacity} Max:{d.max_size}",
    )


def _map_emr(d: EmrCluster, region: str, account_id: str) -> InventoryRecord:
    release = d.release_label if _present(d.release_label) else NOT_AVAILABLE
    return InventoryRecord(
        type=TYPE_EMR_CLUSTER,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=_opt(d.arn) or f"arn:aws:elasticmapreduce:{region}:{account_id}:cluster/{d.id}",
        state=_opt(d.status),
        created_date=_opt(d.creation_time),
        size=f"{d.instance_count} instances, {release}",
    )


# =============================================================================
# Storage Mappers
# =============================================================================

def _map_ebs_volume(d: EbsVolume, region: str, account_id: str) -> InventoryRecord:
    attachment = "Attached" if _present(d.attached_instance) else "Available"
    return InventoryRecord(
        type=TYPE_EBS_VOLUME,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:volume/{d.id}",
        state=f"{d.state} ({attachment})",
        tags=_tags(d.tags),
        created_date=_opt(d.create_time),
        size=f"{d.size_gb}GB {d.volume_type}",
        encrypted=_yes_no(d.encrypted),
    )


def _map_efs(d: EfsFileSystem, region: str, account_id: str) -> InventoryRecord:
    size = f"{d.size_bytes / BYTES_PER_GB:.2f}GB" if d.size_bytes else None
    return InventoryRecord(
        type=TYPE_EFS,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=_opt(d.arn) or f"arn:aws:elasticfilesystem:{region}:{account_id}:file-system/{d.id}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        created_date=_opt(d.creation_time),
        size=size,
        encrypted=_yes_no(d.encrypted),
    )


def _map_backup_vault(d: BackupVault, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_BACKUP_VAULT,
        name=d.name,
        region=region,
        arn=_opt(d.arn),
        state="Locked" if d.locked else "Unlocked",
        created_date=_opt(d.creation_date),
        size=f"{d.recovery_points} recovery points",
        encrypted=_yes_no(_present(d.encryption_key_arn)),
    )


def _map_ecr(d: EcrRepository, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_ECR,
        name=d.name,
        region=region,
        arn=_opt(d.arn),
        state=_opt(d.tag_mutability),
        created_date=_opt(d.created_at),
        encrypted="Yes",
    )


def _map_s3(d: S3Bucket, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_S3,
        name=d.name,
        region=GLOBAL_REGION,
        arn=f"arn:aws:s3:::{d.name}",
        state="Versioned" if d.versioning_enabled else "Unversioned",
        tags=_tags(d.tags),
        created_date=_opt(d.creation_date),
        public_access=_public_private(d.public_access),
        encrypted=_yes_no(d.encrypted),
    )


# =============================================================================
# Networking Mappers
# =============================================================================

def _map_vpc(d: Vpc, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_VPC,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:vpc/{d.id}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        size=_opt(d.cidr),
        vpc_id=d.id,
    )


def _map_subnet(d: Subnet, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_SUBNET,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:subnet/{d.id}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        public_access="Auto-Public" if d.map_public_ip_on_launch else "Private",
        size=f"{d.cidr} ({d.available_ips} IPs available)",
        vpc_id=_opt(d.vpc_id),
    )


def _map_security_group(d: SecurityGroup, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_SECURITY_GROUP,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:security-group/{d.id}",
        state=f"{d.ingress_rules} in / {d.egress_rules} out",
        tags=_tags(d.tags),
        size=f"{d.ingress_rules + d.egress_rules} total rules",
        vpc_id=_opt(d.vpc_id),
    )


def _map_load_balancer(d: LoadBalancer, region: str, account_id: str) -> InventoryRecord:
    arn = d.arn if _present(d.arn) else (
        f"arn:aws:elasticloadbalancing:{region}:{account_id}:loadbalancer/{d.name}"
    )
    return InventoryRecord(
        type=TYPE_LOAD_BALANCER,
        name=d.name,
        region=region,
        arn=arn,
        state=f"{d.state} ({d.scheme})",
        tags=_tags(d.tags),
        created_date=_opt(d.created_time),
        public_access="Public" if d.scheme == "internet-facing" else "Internal",
        size=f"{d.lb_type} - {len(d.availability_zones)} AZs",
        vpc_id=_opt(d.vpc_id),
    )


def _map_internet_gateway(d: InternetGateway, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_INTERNET_GATEWAY,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:internet-gateway/{d.id}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        vpc_id=_opt(d.vpc_id),
    )


def _map_nat_gateway(d: NatGateway, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_NAT_GATEWAY,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:natgateway/{d.id}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        created_date=_opt(d.create_time),
        public_access=f"Public IP: {d.public_ip}" if _present(d.public_ip) else "Private",
        vpc_id=_opt(d.vpc_id),
    )


def _map_elastic_ip(d: ElasticIp, region: str, account_id: str) -> InventoryRecord:
    if _present(d.instance_id):
        attachment = f"Instance: {d.instance_id}"
    elif _present(d.network_interface_id):
        attachment = f"ENI: {d.network_interface_id}"
    else:
        attachment = "Unattached"
    associated = _present(d.instance_id) or _present(d.network_interface_id)
    return InventoryRecord(
        type=TYPE_ELASTIC_IP,
        name=d.public_ip,
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:elastic-ip/{d.allocation_id}",
        state="Associated" if associated else "Available",
        tags=_tags(d.tags),
        public_access="Public",
        size=attachment,
    )


def _map_vpn_gateway(d: VpnGateway, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_VPN_GATEWAY,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:vpn-gateway/{d.id}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        size=_opt(d.gateway_type),
        vpc_id=_opt(d.vpc_id),
    )


def _map_vpn_connection(d: VpnConnection, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_VPN_CONNECTION,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:vpn-connection/{d.id}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        size=f"{d.connection_type} ({d.category})",
    )


def _map_transit_gateway(d: TransitGateway, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_TRANSIT_GATEWAY,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=_opt(d.arn) or f"arn:aws:ec2:{region}:{account_id}:transit-gateway/{d.id}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        created_date=_opt(d.creation_time),
    )


def _map_vpc_endpoint(d: VpcEndpoint, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_VPC_ENDPOINT,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:vpc-endpoint/{d.id}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        created_date=_opt(d.creation_time),
        size=f"{d.endpoint_type}: {d.service_name}",
        vpc_id=_opt(d.vpc_id),
    )


def _map_vpc_peering(d: VpcPeering, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_VPC_PEERING,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:vpc-peering-connection/{d.id}",
        state=_opt(d.status),
        tags=_tags(d.tags),
        size=f"{d.requester_vpc_id} ↔ {d.accepter_vpc_id}",
        vpc_id=_opt(d.requester_vpc_id),
    )


def _map_network_acl(d: NetworkAcl, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_NETWORK_ACL,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:network-acl/{d.id}",
        state="Default" if d.is_default else "Custom",
        tags=_tags(d.tags),
        size=f"{d.entry_count} entries",
        vpc_id=_opt(d.vpc_id),
    )


def _map_route_table(d: RouteTable, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_ROUTE_TABLE,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:route-table/{d.id}",
        state="Main" if d.main else "Custom",
        tags=_tags(d.tags),
        size=f"{d.route_count} routes",
        vpc_id=_opt(d.vpc_id),
    )


def _map_network_interface(d: NetworkInterface, region: str, account_id: str) -> InventoryRecord:
    has_public = _present(d.public_ip)
    ip_info = f"Private: {d.private_ip}"
    if has_public:
        ip_info += f", Public: {d.public_ip}"
    return InventoryRecord(
        type=TYPE_NETWORK_INTERFACE,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:ec2:{region}:{account_id}:network-interface/{d.id}",
        state=_opt(d.status),
        tags=_tags(d.tags),
        public_access="Has Public IP" if has_public else "Private only",
        size=ip_info,
        vpc_id=_opt(d.vpc_id),
    )


def _map_api_gateway(d: ApiGateway, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_API_GATEWAY,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=f"arn:aws:apigateway:{region}::/restapis/{d.id}",
        state=_opt(d.protocol_type),
        tags=_tags(d.tags),
        created_date=_opt(d.created_date),
        public_access="Private" if d.endpoint_type == "PRIVATE" else "Public",
        size=_opt(d.endpoint_type),
    )


def _map_cloudfront(d: CloudFrontDistribution, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_CLOUDFRONT,
        name=_name_or_id(d.domain_name, d.id),
        region=GLOBAL_REGION,
        arn=_opt(d.arn) or f"arn:aws:cloudfront::{account_id}:distribution/{d.id}",
        state=_opt(d.status),
        public_access="Public" if d.enabled else None,
        size=_opt(d.price_class),
        last_activity=_opt(d.last_modified),
    )


def _map_route53(d: Route53Zone, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_ROUTE53,
        name=d.name,
        region=GLOBAL_REGION,
        arn=d.id,
        public_access="Private" if d.private_zone else "Public",
        size=f"{d.record_count} records",
    )


# =============================================================================
# Security / Identity Mappers
# =============================================================================

def _map_iam_user(d: IamUser, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_IAM_USER,
        name=d.user_name,
        region=GLOBAL_REGION,
        arn=_opt(d.arn),
        created_date=_opt(d.create_date),
        last_activity=_opt(d.password_last_used),
    )


def _map_iam_role(d: IamRole, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_IAM_ROLE,
        name=d.role_name,
        region=GLOBAL_REGION,
        arn=_opt(d.arn),
        created_date=_opt(d.create_date),
    )


def _map_kms(d: KmsKey, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_KMS,
        name=d.key_id,
        region=region,
        arn=_opt(d.arn),
        state=_opt(d.key_state),
        created_date=_opt(d.creation_date),
        size=_opt(d.key_usage),
    )


def _map_secret(d: Secret, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_SECRET,
        name=d.name,
        region=region,
        arn=_opt(d.arn),
        state="Rotation On" if d.rotation_enabled else "Rotation Off",
        tags=_tags(d.tags),
        created_date=_opt(d.created_date),
        encrypted="Yes",
        last_activity=_opt(d.last_accessed_date),
    )


def _map_cognito(d: CognitoUserPool, region: str, account_id: str) -> InventoryRecord:
    mfa = f"MFA: {d.mfa_configuration}" if _present(d.mfa_configuration) and d.mfa_configuration != "OFF" else None
    return InventoryRecord(
        type=TYPE_COGNITO_USER_POOL,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=_opt(d.arn) or f"arn:aws:cognito-idp:{region}:{account_id}:userpool/{d.id}",
        state=_opt(d.status),
        tags=_tags(d.tags),
        created_date=_opt(d.creation_date),
        size=f"{d.estimated_users} users",
        encrypted=mfa,
        last_activity=_opt(d.last_modified_date),
    )


def _map_waf(d: WafWebAcl, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_WAF_WEB_ACL,
        name=_name_or_id(d.name, d.id),
        region=region,
        arn=_opt(d.arn),
        state=d.scope or "REGIONAL",
        tags=_tags(d.tags),
        size=f"{d.capacity} WCU",
    )


def _map_guardduty(d: GuardDutyDetector, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_GUARDDUTY_DETECTOR,
        name=d.id,
        region=region,
        arn=f"arn:aws:guardduty:{region}:{account_id}:detector/{d.id}",
        state=_opt(d.status),
        tags=_tags(d.tags),
        created_date=_opt(d.created_at),
        last_activity=_opt(d.updated_at),
    )


def _map_cloudtrail(d: CloudTrailTrail, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_CLOUDTRAIL,
        name=d.name,
        region=region,
        arn=_opt(d.arn),
        state="Multi-Region" if d.multi_region else "Single-Region",
        encrypted="Log Validation On" if d.log_file_validation else None,
    )


def _map_control_tower(d: ControlTowerGuardrail, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_CONTROL_TOWER,
        name=d.name,
        region=GLOBAL_REGION,
        arn=d.arn,
        state=_opt(d.state),
    )


def _map_scp(d: ServiceControlPolicy, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_SCP,
        name=_name_or_id(d.name, d.id),
        region=GLOBAL_REGION,
        arn=_opt(d.arn),
    )


def _map_config_rule(d: ConfigRule, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_CONFIG_RULE,
        name=d.name,
        region=GLOBAL_REGION,
        arn=_opt(d.arn),
        state=_opt(d.compliance),
    )


# =============================================================================
# Management / Integration Mappers
# =============================================================================

def _map_cloudwatch_alarm(d: CloudWatchAlarm, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_CLOUDWATCH_ALARM,
        name=d.name,
        region=region,
        arn=_opt(d.arn) or f"arn:aws:cloudwatch:{region}:{account_id}:alarm:{d.name}",
        state=_opt(d.state),
        size=f"{d.namespace}/{d.metric_name}" if _present(d.metric_name) else None,
        last_activity=_opt(d.state_updated),
    )


def _map_cloudformation(d: CloudFormationStack, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_CLOUDFORMATION_STACK,
        name=d.name,
        region=region,
        arn=_opt(d.stack_id),
        state=_opt(d.status),
        tags=_tags(d.tags),
        created_date=_opt(d.creation_time),
        last_activity=_opt(d.last_updated_time),
    )


def _map_ssm_parameter(d: SsmParameter, region: str, account_id: str) -> InventoryRecord:
    name = d.name if d.name.startswith('/') else f"/{d.name}"
    return InventoryRecord(
        type=TYPE_SSM_PARAMETER,
        name=d.name,
        region=region,
        arn=_opt(d.arn) or f"arn:aws:ssm:{region}:{account_id}:parameter{name}",
        state=f"v{d.version}",
        size=_opt(d.parameter_type),
        encrypted=_yes_no(d.parameter_type == "SecureString"),
        last_activity=_opt(d.last_modified_date),
    )


def _map_step_function(d: StepFunction, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_STEP_FUNCTION,
        name=d.name,
        region=region,
        arn=_opt(d.arn),
        state=f"{d.machine_type} ({d.status})",
        created_date=_opt(d.creation_date),
    )


def _map_eventbridge_rule(d: EventBridgeRule, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_EVENTBRIDGE_RULE,
        name=d.name,
        region=region,
        arn=_opt(d.arn),
        state=_opt(d.state),
        size=_opt(d.schedule),
    )


def _map_sqs(d: SqsQueue, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(type=TYPE_SQS_QUEUE, name=d.name, region=region, arn=_opt(d.url))


def _map_sns(d: SnsTopic, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(type=TYPE_SNS_TOPIC, name=d.name, region=region, arn=_opt(d.arn))


def _map_kinesis(d: KinesisStream, region: str, account_id: str) -> InventoryRecord:
    encrypted = _present(d.encryption_type) and d.encryption_type != "NONE"
    return InventoryRecord(
        type=TYPE_KINESIS_STREAM,
        name=d.name,
        region=region,
        arn=_opt(d.arn),
        state=_opt(d.status),
        tags=_tags(d.tags),
        created_date=_opt(d.creation_time),
        size=f"{d.shard_count} shards, {d.retention_hours}h retention",
        encrypted=_yes_no(encrypted),
    )


def _map_athena(d: AthenaWorkgroup, region: str, account_id: str) -> InventoryRecord:
    return InventoryRecord(
        type=TYPE_ATHENA_WORKGROUP,
        name=d.name,
        region=region,
        arn=f"arn:aws:athena:{region}:{account_id}:workgroup/{d.name}",
        state=_opt(d.state),
        tags=_tags(d.tags),
        created_date=_opt(d.creation_time),
    )


RecordMapper = Callable[..., InventoryRecord]

RECORD_MAPPERS: Dict[Type[ResourceDescriptor], RecordMapper] = {
    Ec2Instance: _map_ec2,
    RdsInstance: _map_rds,
    Vpc: _map_vpc,
    Subnet: _map_subnet,
    SecurityGroup: _map_security_group,
    LoadBalancer: _map_load_balancer,
    LambdaFunction: _map_lambda,
    DynamoDbTable: _map_dynamodb,
    EcsCluster: _map_ecs,
    EksCluster: _map_eks,
    RedshiftCluster: _map_redshift,
    GlueJob: _map_glue,
    OpenSearchDomain: _map_opensearch,
    KmsKey: _map_kms,
    CloudWatchAlarm: _map_cloudwatch_alarm,
    Secret: _map_secret,
    EcrRepository: _map_ecr,
    InternetGateway: _map_internet_gateway,
    NatGateway: _map_nat_gateway,
    ElasticIp: _map_elastic_ip,
    VpnGateway: _map_vpn_gateway,
    VpnConnection: _map_vpn_connection,
    TransitGateway: _map_transit_gateway,
    VpcEndpoint: _map_vpc_endpoint,
    VpcPeering: _map_vpc_peering,
    NetworkAcl: _map_network_acl,
    RouteTable: _map_route_table,
    NetworkInterface: _map_network_interface,
    EbsVolume: _map_ebs_volume,
    ElastiCacheCluster: _map_elasticache,
    SqsQueue: _map_sqs,
    SnsTopic: _map_sns,
    AutoScalingGroup: _map_auto_scaling_group,
    CloudFormationStack: _map_cloudformation,
    EfsFileSystem: _map_efs,
    ApiGateway: _map_api_gateway,
    StepFunction: _map_step_function,
    EventBridgeRule: _map_eventbridge_rule,
    CloudTrailTrail: _map_cloudtrail,
    SsmParameter: _map_ssm_parameter,
    BackupVault: _map_backup_vault,
    CognitoUserPool: _map_cognito,
    WafWebAcl: _map_waf,
    GuardDutyDetector: _map_guardduty,
    KinesisStream: _map_kinesis,
    AthenaWorkgroup: _map_athena,
    EmrCluster: _map_emr,
    S3Bucket: _map_s3,
    CloudFrontDistribution: _map_cloudfront,
    Route53Zone: _map_route53,
    IamUser: _map_iam_user,
    IamRole: _map_iam_role,
    ControlTowerGuardrail: _map_control_tower,
    ServiceControlPolicy: _map_scp,
    ConfigRule: _map_config_rule,
}


def to_record(descriptor: ResourceDescriptor, region: str, account_id: str) -> InventoryRecord:
    """
    Map one resource descriptor to an InventoryRecord.

    Global resource kinds always get region "global", whatever region
    is passed in.

    Raises:
        TypeError: no mapper is registered for the descriptor's class
    """
    mapper = RECORD_MAPPERS.get(type(descriptor))
    if mapper is None:
        raise TypeError(f"No inventory mapping for {type(descriptor).__name__}")
    return mapper(descriptor, region, account_id)


# =============================================================================
# Collection
# =============================================================================

def report_failure(message: str, silent: bool) -> None:
    """Log a collector failure; silent runs keep it out of the console but in the log file."""
    logger.log(logging.WARNING if silent else logging.ERROR, message)


def collect_region_records(
    clients: ClientCache,
    region: str,
    account_id: str,
    collectors: Sequence[CollectorSpec],
    silent: bool = False,
    tracker: Optional[ProgressTracker] = None,
    buffer: Optional[RegionLogBuffer] = None
) -> Tuple[List[InventoryRecord], bool]:
    """
    Run every regional collector for one region, in registry order.

    Returns:
        (records, had_errors) - had_errors is True when any collector failed
    """
    records: List[InventoryRecord] = []
    had_errors = False

    for spec in collectors:
        if tracker:
            tracker.update_task(f"{spec.name}...")
        try:
            descriptors = spec.describe(clients, region)
        except Exception as e:
            report_failure(f"[{account_id}/{region}] Failed to describe {spec.name}: {e}", silent)
            had_errors = True
            continue

        for descriptor in descriptors:
            records.append(to_record(descriptor, region, account_id))
        if descriptors and buffer is not None:
            buffer.log(f"{spec.name} ({region}): {len(descriptors)}")
        if tracker:
            tracker.add_resources(len(descriptors))

    return records, had_errors


def collect_global_records(
    clients: ClientCache,
    account_id: str,
    state: GlobalServicesState,
    collectors: Sequence[GlobalCollectorSpec],
    silent: bool = False,
    tracker: Optional[ProgressTracker] = None,
    buffer: Optional[RegionLogBuffer] = None
) -> Tuple[List[InventoryRecord], GlobalServicesState, bool]:
    """
    Run each global collector whose state flag is not yet set.

    A flag is set once every collector sharing it has been attempted, even
    if one failed, so a global service is never queried twice in a run.

    Returns:
        (records, updated state, had_errors)
    """
    records: List[InventoryRecord] = []
    had_errors = False
    attempted = set()

    for spec in collectors:
        if getattr(state, spec.flag):
            continue
        if tracker:
            tracker.update_task(f"{spec.name} (global)...")
        try:
            if spec.entry_region:
                descriptors = spec.describe(clients, spec.entry_region)
            else:
                descriptors = spec.describe(clients)
        except Exception as e:
            report_failure(f"[{account_id}/global] Failed to describe {spec.name}: {e}", silent)
            had_errors = True
            descriptors = []
        finally:
            attempted.add(spec.flag)

        for descriptor in descriptors:
            records.append(to_record(descriptor, GLOBAL_REGION, account_id))
        if descriptors and buffer is not None:
            buffer.log(f"{spec.name} (global): {len(descriptors)}")
        if tracker:
            tracker.add_resources(len(descriptors))

    for flag in attempted:
        setattr(state, flag, True)

    return records, state, had_errors


def get_enabled_regions(clients: ClientCache) -> List[str]:
    """List regions enabled for the account (opted-in or opt-in not required)."""
    ec2 = clients.get_client('ec2', DEFAULT_REGION)
    response = execute_with_retry(
        lambda: ec2.describe_regions(
            Filters=[{'Name': 'opt-in-status', 'Values': ['opt-in-not-required', 'opted-in']}]
        ),
        "EC2 DescribeRegions",
    )
    return sorted(r['RegionName'] for r in response.get('Regions', []))


def build_report_filename(
    output_dir: str,
    mode: str,
    account_id: str,
    today: Optional[date] = None
) -> str:
    """
    Base path (no extension) of the consolidated report.

    Example: inventory-output/init-security-123456789012-20240101
    """
    prefix = "init" if mode == MODE_BASIC else f"init-{mode}"
    return os.path.join(output_dir, f"{prefix}-{account_id}-{get_date_stamp(today)}")


def _print_summary(result: InventoryResult, export_format: str, base_path: str) -> None:
    extensions = ".csv and .xlsx" if export_format == "both" else f".{export_format}"
    print(f"\nComprehensive {MODE_DESCRIPTIONS.get(result.mode, result.mode)} inventory complete!")
    print(f"   Total resources found: {len(result.records)}")
    print(f"   Inventory mode: {result.mode}")
    print(f"   Output format: {export_format}")
    print(f"   Output file(s): {base_path}{extensions}")
    if result.had_errors:
        print("   Note: some collectors failed; the inventory may be incomplete.")
    print()
    print_summary_table(result.counts)


def generate_inventory(
    clients: ClientCache,
    account_id: str,
    mode: str,
    regions: Optional[List[str]],
    regional_collectors: Sequence[CollectorSpec],
    global_collectors: Sequence[GlobalCollectorSpec],
    export_format: str = "csv",
    output_dir: str = DEFAULT_OUTPUT_DIR,
    silent: bool = False,
    global_state: Optional[GlobalServicesState] = None,
    today: Optional[date] = None
) -> InventoryResult:
    """
    Build and write the consolidated inventory for one account.

    Args:
        clients: Client cache for the account's session
        account_id: 12-digit account ID, used in ARNs and the file name
        mode: basic, detailed, security or cost
        regions: Regions to scan; None scans every enabled region
        regional_collectors: Collectors run once per region, in order
        global_collectors: Collectors run once per run
        export_format: csv, xlsx or both
        output_dir: Directory for the report
        silent: Suppress progress and summary output
        global_state: Flags carried over from an earlier call, if any
        today: Date used in the file name (defaults to today, UTC)

    Returns:
        InventoryResult with records, per-region status and written files
    """
    if regions is None:
        regions = get_enabled_regions(clients)
        logger.info(f"Scanning {len(regions)} enabled regions")

    result = InventoryResult(
        account_id=account_id,
        mode=mode,
        region_status={region: REGION_PENDING for region in regions},
        global_state=global_state or GlobalServicesState(),
    )

    with ProgressTracker("Inventory", total_regions=len(regions), show_progress=not silent) as tracker:
        tracker.start_account(account_id)
        for region in regions:
            result.region_status[region] = REGION_IN_PROGRESS
            tracker.start_region(region)
            notes = RegionLogBuffer()
            try:
                records, failed = collect_region_records(
                    clients, region, account_id, regional_collectors,
                    silent=silent, tracker=tracker, buffer=notes,
                )
            except Exception as e:
                report_failure(f"[{account_id}/{region}] Error processing region: {e}", silent)
                result.region_status[region] = REGION_FAILED
                result.had_errors = True
                tracker.complete_region(failed=True)
                if not silent:
                    notes.flush("Notes")
                continue

            result.records.extend(records)
            result.had_errors = result.had_errors or failed
            result.region_status[region] = REGION_DONE
            tracker.complete_region(failed=failed)
            if not silent:
                notes.flush("Notes")

        notes = RegionLogBuffer()
        global_records, result.global_state, failed = collect_global_records(
            clients, account_id, result.global_state, global_collectors,
            silent=silent, tracker=tracker, buffer=notes,
        )
        result.records.extend(global_records)
        result.had_errors = result.had_errors or failed
        if not silent:
            notes.flush("Global services")
        tracker.complete_account()

    base_path = build_report_filename(output_dir, mode, account_id, today)
    os.makedirs(output_dir, exist_ok=True)
    result.output_files = write_report(
        render(result.records, mode),
        to_table(result.records, mode),
        base_path,
        export_format,
        sheet_name="Inventory",
    )

    logger.info(f"Wrote {len(result.records)} resources to {', '.join(result.output_files)}")
    if not silent:
        _print_summary(result, export_format, base_path)

    return result
