"""
Data models for the AWS inventory.

Resource descriptors are the typed, per-service records returned by
collectors. InventoryRecord is the normalized record used by the
consolidated report; only the consolidation engine builds it.
"""
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from .constants import NOT_AVAILABLE

NA = NOT_AVAILABLE


@dataclass(frozen=True)
class ResourceDescriptor:
    """Base class for per-service resource records."""

    def to_dict(self) -> Dict:
        """Convert to dictionary for CSV/JSON serialization."""
        return asdict(self)


# =============================================================================
# Compute
# =============================================================================

@dataclass(frozen=True)
class Ec2Instance(ResourceDescriptor):
    id: str
    name: str = NA
    state: str = NA
    instance_type: str = NA
    private_ip: str = NA
    public_ip: str = NA
    vpc_id: str = NA
    subnet_id: str = NA
    platform: str = NA
    launch_time: str = NA
    encrypted: bool = False
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LambdaFunction(ResourceDescriptor):
    name: str
    arn: str = NA
    runtime: str = NA
    handler: str = NA
    last_modified: str = NA
    memory_size: int = 0
    timeout: int = 0
    code_size: int = 0
    vpc_id: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EcsCluster(ResourceDescriptor):
    name: str
    arn: str = NA
    status: str = NA
    registered_instances: int = 0
    running_tasks: int = 0
    pending_tasks: int = 0
    active_services: int = 0
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EksCluster(ResourceDescriptor):
    name: str
    arn: str = NA
    status: str = NA
    version: str = NA
    endpoint: str = NA
    vpc_id: str = NA
    created_at: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AutoScalingGroup(ResourceDescriptor):
    name: str
    arn: str = NA
    min_size: int = 0
    max_size: int = 0
    desired_capacity: int = 0
    instance_count: int = 0
    availability_zones: List[str] = field(default_factory=list)
    health_check_type: str = NA
    created_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EbsVolume(ResourceDescriptor):
    id: str
    name: str = NA
    size_gb: int = 0
    volume_type: str = NA
    state: str = NA
    encrypted: bool = False
    availability_zone: str = NA
    attached_instance: str = NA
    create_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# Databases
# =============================================================================

@dataclass(frozen=True)
class RdsInstance(ResourceDescriptor):
    id: str
    name: str = NA
    engine: str = NA
    engine_version: str = NA
    status: str = NA
    instance_class: str = NA
    storage_gb: int = 0
    vpc_id: str = NA
    publicly_accessible: bool = False
    encrypted: bool = False
    multi_az: bool = False
    endpoint: str = NA
    create_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DynamoDbTable(ResourceDescriptor):
    name: str
    arn: str = NA
    status: str = NA
    item_count: int = 0
    size_bytes: int = 0
    billing_mode: str = NA
    encrypted: bool = False
    created_date: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ElastiCacheCluster(ResourceDescriptor):
    id: str
    arn: str = NA
    node_type: str = NA
    engine: str = NA
    engine_version: str = NA
    status: str = NA
    num_nodes: int = 0
    availability_zone: str = NA
    encrypted: bool = False
    create_time: str = NA


@dataclass(frozen=True)
class RedshiftCluster(ResourceDescriptor):
    id: str
    node_type: str = NA
    number_of_nodes: int = 0
    status: str = NA
    master_username: str = NA
    db_name: str = NA
    endpoint: str = NA
    port: int = 0
    vpc_id: str = NA
    encrypted: bool = False
    publicly_accessible: bool = False
    create_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class OpenSearchDomain(ResourceDescriptor):
    name: str
    arn: str = NA
    engine_version: str = NA
    instance_type: str = NA
    instance_count: int = 0
    endpoint: str = NA
    vpc_id: str = NA
    encrypted: bool = False
    processing: bool = False


# =============================================================================
# Storage
# =============================================================================

@dataclass(frozen=True)
class S3Bucket(ResourceDescriptor):
    name: str
    creation_date: str = NA
    location: str = NA
    public_access: bool = False
    encrypted: bool = False
    versioning_enabled: bool = False
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EfsFileSystem(ResourceDescriptor):
    id: str
    name: str = NA
    arn: str = NA
    state: str = NA
    size_bytes: int = 0
    performance_mode: str = NA
    throughput_mode: str = NA
    encrypted: bool = False
    creation_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BackupVault(ResourceDescriptor):
    name: str
    arn: str = NA
    creation_date: str = NA
    encryption_key_arn: str = NA
    recovery_points: int = 0
    locked: bool = False


@dataclass(frozen=True)
class EcrRepository(ResourceDescriptor):
    name: str
    arn: str = NA
    uri: str = NA
    registry_id: str = NA
    created_at: str = NA
    tag_mutability: str = NA
    scan_on_push: bool = False
    encryption_type: str = NA


# =============================================================================
# Networking
# =============================================================================

@dataclass(frozen=True)
class Vpc(ResourceDescriptor):
    id: str
    name: str = NA
    state: str = NA
    cidr: str = NA
    is_default: bool = False
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Subnet(ResourceDescriptor):
    id: str
    name: str = NA
    vpc_id: str = NA
    cidr: str = NA
    availability_zone: str = NA
    state: str = NA
    available_ips: int = 0
    map_public_ip_on_launch: bool = False
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SecurityGroup(ResourceDescriptor):
    id: str
    name: str = NA
    description: str = NA
    vpc_id: str = NA
    ingress_rules: int = 0
    egress_rules: int = 0
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LoadBalancer(ResourceDescriptor):
    name: str
    arn: str = NA
    lb_type: str = NA
    state: str = NA
    dns_name: str = NA
    scheme: str = NA
    availability_zones: List[str] = field(default_factory=list)
    vpc_id: str = NA
    created_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class InternetGateway(ResourceDescriptor):
    id: str
    name: str = NA
    vpc_id: str = NA
    state: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NatGateway(ResourceDescriptor):
    id: str
    name: str = NA
    vpc_id: str = NA
    subnet_id: str = NA
    state: str = NA
    public_ip: str = NA
    create_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ElasticIp(ResourceDescriptor):
    allocation_id: str
    public_ip: str = NA
    domain: str = NA
    instance_id: str = NA
    network_interface_id: str = NA
    association_id: str = NA
    name: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class VpnGateway(ResourceDescriptor):
    id: str
    name: str = NA
    gateway_type: str = NA
    state: str = NA
    vpc_id: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class VpnConnection(ResourceDescriptor):
    id: str
    name: str = NA
    state: str = NA
    vpn_gateway_id: str = NA
    customer_gateway_id: str = NA
    transit_gateway_id: str = NA
    connection_type: str = NA
    category: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TransitGateway(ResourceDescriptor):
    id: str
    arn: str = NA
    name: str = NA
    state: str = NA
    owner_id: str = NA
    description: str = NA
    creation_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class VpcEndpoint(ResourceDescriptor):
    id: str
    name: str = NA
    vpc_id: str = NA
    service_name: str = NA
    endpoint_type: str = NA
    state: str = NA
    creation_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class VpcPeering(ResourceDescriptor):
    id: str
    name: str = NA
    status: str = NA
    requester_vpc_id: str = NA
    accepter_vpc_id: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NetworkAcl(ResourceDescriptor):
    id: str
    name: str = NA
    vpc_id: str = NA
    is_default: bool = False
    entry_count: int = 0
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RouteTable(ResourceDescriptor):
    id: str
    name: str = NA
    vpc_id: str = NA
    main: bool = False
    route_count: int = 0
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NetworkInterface(ResourceDescriptor):
    id: str
    name: str = NA
    vpc_id: str = NA
    subnet_id: str = NA
    private_ip: str = NA
    public_ip: str = NA
    status: str = NA
    interface_type: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CloudFrontDistribution(ResourceDescriptor):
    id: str
    arn: str = NA
    domain_name: str = NA
    status: str = NA
    enabled: bool = False
    comment: str = NA
    price_class: str = NA
    last_modified: str = NA


@dataclass(frozen=True)
class Route53Zone(ResourceDescriptor):
    id: str
    name: str = NA
    private_zone: bool = False
    record_count: int = 0
    comment: str = NA


@dataclass(frozen=True)
class ApiGateway(ResourceDescriptor):
    id: str
    name: str = NA
    protocol_type: str = "REST"
    endpoint_type: str = NA
    description: str = NA
    created_date: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# Security & Identity
# =============================================================================

@dataclass(frozen=True)
class IamUser(ResourceDescriptor):
    user_name: str
    user_id: str = NA
    arn: str = NA
    create_date: str = NA
    password_last_used: str = NA


@dataclass(frozen=True)
class IamRole(ResourceDescriptor):
    role_name: str
    role_id: str = NA
    arn: str = NA
    create_date: str = NA
    description: str = NA


@dataclass(frozen=True)
class KmsKey(ResourceDescriptor):
    key_id: str
    arn: str = NA
    description: str = NA
    key_usage: str = NA
    key_state: str = NA
    key_manager: str = NA
    creation_date: str = NA


@dataclass(frozen=True)
class Secret(ResourceDescriptor):
    name: str
    arn: str = NA
    description: str = NA
    kms_key_id: str = NA
    rotation_enabled: bool = False
    created_date: str = NA
    last_changed_date: str = NA
    last_accessed_date: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CognitoUserPool(ResourceDescriptor):
    id: str
    name: str = NA
    arn: str = NA
    status: str = NA
    mfa_configuration: str = NA
    estimated_users: int = 0
    creation_date: str = NA
    last_modified_date: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class WafWebAcl(ResourceDescriptor):
    id: str
    name: str = NA
    arn: str = NA
    description: str = NA
    scope: str = "REGIONAL"
    capacity: int = 0
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GuardDutyDetector(ResourceDescriptor):
    id: str
    status: str = NA
    service_role: str = NA
    finding_frequency: str = NA
    created_at: str = NA
    updated_at: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CloudTrailTrail(ResourceDescriptor):
    name: str
    arn: str = NA
    home_region: str = NA
    multi_region: bool = False
    organization_trail: bool = False
    s3_bucket: str = NA
    log_file_validation: bool = False
    kms_key_id: str = NA


# =============================================================================
# Governance (global)
# =============================================================================

@dataclass(frozen=True)
class ControlTowerGuardrail(ResourceDescriptor):
    arn: str
    name: str = NA
    state: str = NA
    behavior: str = NA
    target_arn: str = NA


@dataclass(frozen=True)
class ServiceControlPolicy(ResourceDescriptor):
    id: str
    arn: str = NA
    name: str = NA
    description: str = NA
    policy_type: str = NA
    aws_managed: bool = False


@dataclass(frozen=True)
class ConfigRule(ResourceDescriptor):
    name: str
    arn: str = NA
    rule_id: str = NA
    description: str = NA
    compliance: str = "NOT_EVALUATED"
    source: str = NA
    state: str = NA


# =============================================================================
# Management & Application Integration
# =============================================================================

@dataclass(frozen=True)
class CloudWatchAlarm(ResourceDescriptor):
    name: str
    arn: str = NA
    description: str = NA
    state: str = NA
    state_reason: str = NA
    metric_name: str = NA
    namespace: str = NA
    state_updated: str = NA


@dataclass(frozen=True)
class CloudFormationStack(ResourceDescriptor):
    name: str
    stack_id: str = NA
    status: str = NA
    creation_time: str = NA
    last_updated_time: str = NA
    description: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SsmParameter(ResourceDescriptor):
    name: str
    arn: str = NA
    parameter_type: str = NA
    version: int = 0
    tier: str = NA
    last_modified_date: str = NA
    description: str = NA


@dataclass(frozen=True)
class StepFunction(ResourceDescriptor):
    name: str
    arn: str = NA
    machine_type: str = "STANDARD"
    status: str = "ACTIVE"
    creation_date: str = NA


@dataclass(frozen=True)
class EventBridgeRule(ResourceDescriptor):
    name: str
    arn: str = NA
    state: str = NA
    description: str = NA
    schedule: str = NA
    event_bus: str = NA
    event_pattern: str = NA


@dataclass(frozen=True)
class SqsQueue(ResourceDescriptor):
    name: str
    url: str = NA


@dataclass(frozen=True)
class SnsTopic(ResourceDescriptor):
    name: str
    arn: str = NA


# =============================================================================
# Analytics
# =============================================================================

@dataclass(frozen=True)
class GlueJob(ResourceDescriptor):
    name: str
    description: str = NA
    role: str = NA
    glue_version: str = NA
    worker_type: str = NA
    number_of_workers: int = 0
    max_capacity: float = 0.0
    created_on: str = NA
    last_modified_on: str = NA


@dataclass(frozen=True)
class KinesisStream(ResourceDescriptor):
    name: str
    arn: str = NA
    status: str = NA
    shard_count: int = 0
    retention_hours: int = 0
    encryption_type: str = NA
    creation_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AthenaWorkgroup(ResourceDescriptor):
    name: str
    state: str = NA
    description: str = NA
    engine_version: str = NA
    creation_time: str = NA
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EmrCluster(ResourceDescriptor):
    id: str
    name: str = NA
    arn: str = NA
    status: str = NA
    release_label: str = NA
    instance_count: int = 0
    creation_time: str = NA


# =============================================================================
# Consolidated Record
# =============================================================================

@dataclass
class InventoryRecord:
    """
    Normalized resource record for the consolidated report.

    type and region are always set; every other field is optional and is
    rendered as "N/A" when absent.
    """
    type: str
    region: str
    name: Optional[str] = None
    arn: Optional[str] = None
    state: Optional[str] = None
    tags: Optional[str] = None
    created_date: Optional[str] = None
    public_access: Optional[str] = None
    size: Optional[str] = None
    encrypted: Optional[str] = None
    vpc_id: Optional[str] = None
    last_activity: Optional[str] = None
    version_status: Optional[str] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
