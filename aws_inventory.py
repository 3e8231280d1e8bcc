#!/usr/bin/env python3
"""
AWS Inventory - Multi-service Resource Collector

Describes resources across ~55 AWS services and writes either one CSV per
service and region, or a single consolidated inventory report.

Usage:
    # Current credentials, us-east-1
    python3 aws_inventory.py

    # Named profile, several regions, selected services
    python3 aws_inventory.py --profile prod --regions us-east-1,eu-west-1 --services ec2,rds,s3

    # Many accounts from a file
    python3 aws_inventory.py --json accounts.json
    python3 aws_inventory.py --csv accounts.csv --stop-on-error

    # Consolidated report across all enabled regions
    python3 aws_inventory.py --init
    python3 aws_inventory.py --init-security --limit-regions us-east-1,us-west-2 --export-format both
"""
import argparse
import logging
import os
import re
import sys
from datetime import date
from typing import Callable, Dict, List, Optional, Set, Tuple

import boto3
from botocore.exceptions import ProfileNotFound

# Add lib to path for imports
sys.path.insert(0, '.')
from lib.accounts import AccountConfig, parse_json_accounts, read_csv_accounts
from lib.backoff import InventoryCallError, execute_with_retry, iter_pages
from lib.clients import ClientCache
from lib.config import ConfigError, generate_sample_config, load_config
from lib.consolidate import (
    CollectorSpec,
    GlobalCollectorSpec,
    GlobalServicesState,
    generate_inventory,
    report_failure,
)
from lib.constants import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REGION,
    EXPORT_FORMATS,
    GLOBAL_ENTRY_REGION,
    GLOBAL_REGION,
    LOCAL_ACCOUNT,
    NOT_AVAILABLE,
    REPORT_MODES,
    SERVICE_ALL,
    VALID_REGIONS,
)
from lib.models import (
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
from lib.utils import (
    ProgressTracker,
    RegionLogBuffer,
    get_date_stamp,
    get_name_from_tags,
    setup_logging,
    tags_to_dict,
    to_iso,
    write_csv,
)

logger = logging.getLogger(__name__)

NA = NOT_AVAILABLE

ACCOUNT_ID_PATTERN = re.compile(r'^\d{12}$')


# =============================================================================
# Session Helpers
# =============================================================================

def get_session(profile: Optional[str] = None, region: Optional[str] = None) -> boto3.Session:
    """Create boto3 session. In CloudShell, credentials are automatic."""
    return boto3.Session(profile_name=profile, region_name=region)


def get_account_id(session: boto3.Session) -> str:
    """Get AWS account ID."""
    sts = session.client('sts', region_name=DEFAULT_REGION)
    return execute_with_retry(lambda: sts.get_caller_identity(), "STS GetCallerIdentity")['Account']


def session_for_account(account: AccountConfig) -> boto3.Session:
    """
    Session for an account entry.

    A 12-digit account ID or "local" means the default credential chain;
    any other name is treated as a named profile.

    Raises:
        ConfigError: the named profile does not exist
    """
    if account.name == LOCAL_ACCOUNT or ACCOUNT_ID_PATTERN.match(account.name):
        return get_session()
    try:
        return get_session(account.name)
    except ProfileNotFound as e:
        raise ConfigError(f"AWS profile '{account.name}' not found: {e}") from e


def _best_effort(operation: Callable, label: str, default=None):
    """Run an enrichment call; failures are logged at DEBUG and replaced by default."""
    try:
        return execute_with_retry(operation, label)
    except InventoryCallError as e:
        logger.debug(f"{label} skipped: {e}")
        return default


# =============================================================================
# Compute
# =============================================================================

def describe_ec2_instances(clients: ClientCache, region: str) -> List[Ec2Instance]:
    """Describe EC2 instances across all reservations."""
    ec2 = clients.get_client('ec2', region)
    instances = []

    for page in iter_pages("EC2 DescribeInstances", ec2.describe_instances, 'NextToken', 'NextToken'):
        for reservation in page.get('Reservations', []):
            for instance in reservation.get('Instances', []):
                tags = tags_to_dict(instance.get('Tags', []))
                encrypted = any(
                    mapping.get('Ebs', {}).get('Encrypted', False)
                    for mapping in instance.get('BlockDeviceMappings', [])
                )
                instances.append(Ec2Instance(
                    id=instance.get('InstanceId', ''),
                    name=get_name_from_tags(tags),
                    state=instance.get('State', {}).get('Name', NA),
                    instance_type=instance.get('InstanceType', NA),
                    private_ip=instance.get('PrivateIpAddress', NA),
                    public_ip=instance.get('PublicIpAddress', NA),
                    vpc_id=instance.get('VpcId', NA),
                    subnet_id=instance.get('SubnetId', NA),
                    platform=instance.get('Platform', 'linux'),
                    launch_time=to_iso(instance.get('LaunchTime')),
                    encrypted=encrypted,
                    tags=tags,
                ))

    logger.info(f"[{region}] Found {len(instances)} EC2 instances")
    return instances


def describe_lambda_functions(clients: ClientCache, region: str) -> List[LambdaFunction]:
    """Describe Lambda functions with their tags."""
    lambda_client = clients.get_client('lambda', region)
    functions = []

    for page in iter_pages("Lambda ListFunctions", lambda_client.list_functions, 'Marker', 'NextMarker'):
        for fn in page.get('Functions', []):
            arn = fn.get('FunctionArn', NA)
            tags = _best_effort(
                lambda: lambda_client.list_tags(Resource=arn).get('Tags', {}),
                f"Lambda ListTags {fn.get('FunctionName')}",
                default={},
            )
            functions.append(LambdaFunction(
                name=fn.get('FunctionName', ''),
                arn=arn,
                runtime=fn.get('Runtime', NA),
                handler=fn.get('Handler', NA),
                last_modified=fn.get('LastModified', NA),
                memory_size=fn.get('MemorySize', 0),
                timeout=fn.get('Timeout', 0),
                code_size=fn.get('CodeSize', 0),
                vpc_id=fn.get('VpcConfig', {}).get('VpcId') or NA,
                tags=tags_to_dict(tags),
            ))

    logger.info(f"[{region}] Found {len(functions)} Lambda functions")
    return functions


def describe_ecs_clusters(clients: ClientCache, region: str) -> List[EcsCluster]:
    """Describe ECS clusters (DescribeClusters takes up to 100 ARNs per call)."""
    ecs = clients.get_client('ecs', region)

    arns = []
    for page in iter_pages("ECS ListClusters", ecs.list_clusters, 'nextToken', 'nextToken'):
        arns.extend(page.get('clusterArns', []))

    clusters = []
    for i in range(0, len(arns), 100):
        chunk = arns[i:i + 100]
        response = execute_with_retry(
            lambda: ecs.describe_clusters(clusters=chunk, include=['TAGS']),
            "ECS DescribeClusters",
        )
        for cluster in response.get('clusters', []):
            clusters.append(EcsCluster(
                name=cluster.get('clusterName', ''),
                arn=cluster.get('clusterArn', NA),
                status=cluster.get('status', NA),
                registered_instances=cluster.get('registeredContainerInstancesCount', 0),
                running_tasks=cluster.get('runningTasksCount', 0),
                pending_tasks=cluster.get('pendingTasksCount', 0),
                active_services=cluster.get('activeServicesCount', 0),
                tags=tags_to_dict(cluster.get('tags', [])),
            ))

    logger.info(f"[{region}] Found {len(clusters)} ECS clusters")
    return clusters


def describe_eks_clusters(clients: ClientCache, region: str) -> List[EksCluster]:
    """Describe EKS clusters, one DescribeCluster call per listed name."""
    eks = clients.get_client('eks', region)

    names = []
    for page in iter_pages("EKS ListClusters", eks.list_clusters, 'nextToken', 'nextToken'):
        names.extend(page.get('clusters', []))

    clusters = []
    for name in names:
        try:
            cluster = execute_with_retry(
                lambda: eks.describe_cluster(name=name), f"EKS DescribeCluster {name}"
            ).get('cluster', {})
        except InventoryCallError as e:
            logger.debug(f"[{region}] Failed to describe EKS cluster {name}: {e}")
            continue

        clusters.append(EksCluster(
            name=cluster.get('name', name),
            arn=cluster.get('arn', NA),
            status=cluster.get('status', NA),
            version=cluster.get('version', NA),
            endpoint=cluster.get('endpoint', NA),
            vpc_id=cluster.get('resourcesVpcConfig', {}).get('vpcId') or NA,
            created_at=to_iso(cluster.get('createdAt')),
            tags=tags_to_dict(cluster.get('tags', {})),
        ))

    logger.info(f"[{region}] Found {len(clusters)} EKS clusters")
    return clusters


def describe_auto_scaling_groups(clients: ClientCache, region: str) -> List[AutoScalingGroup]:
    autoscaling = clients.get_client('autoscaling', region)
    groups = []

    for page in iter_pages(
        "AutoScaling DescribeAutoScalingGroups", autoscaling.describe_auto_scaling_groups,
        'NextToken', 'NextToken'
    ):
        for group in page.get('AutoScalingGroups', []):
            groups.append(AutoScalingGroup(
                name=group.get('AutoScalingGroupName', ''),
                arn=group.get('AutoScalingGroupARN', NA),
                min_size=group.get('MinSize', 0),
                max_size=group.get('MaxSize', 0),
                desired_capacity=group.get('DesiredCapacity', 0),
                instance_count=len(group.get('Instances', [])),
                availability_zones=group.get('AvailabilityZones', []),
                health_check_type=group.get('HealthCheckType', NA),
                created_time=to_iso(group.get('CreatedTime')),
                tags=tags_to_dict(group.get('Tags', [])),
            ))

    logger.info(f"[{region}] Found {len(groups)} Auto Scaling groups")
    return groups


def describe_ebs_volumes(clients: ClientCache, region: str) -> List[EbsVolume]:
    ec2 = clients.get_client('ec2', region)
    volumes = []

    for page in iter_pages("EC2 DescribeVolumes", ec2.describe_volumes, 'NextToken', 'NextToken'):
        for volume in page.get('Volumes', []):
            tags = tags_to_dict(volume.get('Tags', []))
            attachments = volume.get('Attachments', [])
            volumes.append(EbsVolume(
                id=volume.get('VolumeId', ''),
                name=get_name_from_tags(tags),
                size_gb=volume.get('Size', 0),
                volume_type=volume.get('VolumeType', NA),
                state=volume.get('State', NA),
                encrypted=volume.get('Encrypted', False),
                availability_zone=volume.get('AvailabilityZone', NA),
                attached_instance=attachments[0].get('InstanceId', NA) if attachments else NA,
                create_time=to_iso(volume.get('CreateTime')),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(volumes)} EBS volumes")
    return volumes


# =============================================================================
# Databases
# =============================================================================

def describe_rds_instances(clients: ClientCache, region: str) -> List[RdsInstance]:
    """Describe RDS DB instances (Aurora cluster members included)."""
    rds = clients.get_client('rds', region)
    instances = []

    for page in iter_pages("RDS DescribeDBInstances", rds.describe_db_instances, 'Marker', 'Marker'):
        for db in page.get('DBInstances', []):
            instances.append(RdsInstance(
                id=db.get('DBInstanceIdentifier', ''),
                name=db.get('DBName', NA),
                engine=db.get('Engine', NA),
                engine_version=db.get('EngineVersion', NA),
                status=db.get('DBInstanceStatus', NA),
                instance_class=db.get('DBInstanceClass', NA),
                storage_gb=db.get('AllocatedStorage', 0),
                vpc_id=db.get('DBSubnetGroup', {}).get('VpcId') or NA,
                publicly_accessible=db.get('PubliclyAccessible', False),
                encrypted=db.get('StorageEncrypted', False),
                multi_az=db.get('MultiAZ', False),
                endpoint=db.get('Endpoint', {}).get('Address', NA),
                create_time=to_iso(db.get('InstanceCreateTime')),
                tags=tags_to_dict(db.get('TagList', [])),
            ))

    logger.info(f"[{region}] Found {len(instances)} RDS instances")
    return instances


def describe_dynamodb_tables(clients: ClientCache, region: str) -> List[DynamoDbTable]:
    """Describe DynamoDB tables; a table that cannot be described is skipped."""
    dynamodb = clients.get_client('dynamodb', region)

    names = []
    for page in iter_pages(
        "DynamoDB ListTables", dynamodb.list_tables, 'ExclusiveStartTableName', 'LastEvaluatedTableName'
    ):
        names.extend(page.get('TableNames', []))

    tables = []
    for name in names:
        try:
            table = execute_with_retry(
                lambda: dynamodb.describe_table(TableName=name), f"DynamoDB DescribeTable {name}"
            ).get('Table', {})
        except InventoryCallError as e:
            logger.debug(f"[{region}] Failed to describe DynamoDB table {name}: {e}")
            continue

        arn = table.get('TableArn', NA)
        tags = _best_effort(
            lambda: dynamodb.list_tags_of_resource(ResourceArn=arn).get('Tags', []),
            f"DynamoDB ListTagsOfResource {name}",
            default=[],
        )
        tables.append(DynamoDbTable(
            name=table.get('TableName', name),
            arn=arn,
            status=table.get('TableStatus', NA),
            item_count=table.get('ItemCount', 0),
            size_bytes=table.get('TableSizeBytes', 0),
            billing_mode=table.get('BillingModeSummary', {}).get('BillingMode', 'PROVISIONED'),
            encrypted=table.get('SSEDescription', {}).get('Status') == 'ENABLED',
            created_date=to_iso(table.get('CreationDateTime')),
            tags=tags_to_dict(tags),
        ))

    logger.info(f"[{region}] Found {len(tables)} DynamoDB tables")
    return tables


def describe_elasticache_clusters(clients: ClientCache, region: str) -> List[ElastiCacheCluster]:
    elasticache = clients.get_client('elasticache', region)
    clusters = []

    for page in iter_pages(
        "ElastiCache DescribeCacheClusters", elasticache.describe_cache_clusters, 'Marker', 'Marker'
    ):
        for cluster in page.get('CacheClusters', []):
            clusters.append(ElastiCacheCluster(
                id=cluster.get('CacheClusterId', ''),
                arn=cluster.get('ARN', NA),
                node_type=cluster.get('CacheNodeType', NA),
                engine=cluster.get('Engine', NA),
                engine_version=cluster.get('EngineVersion', NA),
                status=cluster.get('CacheClusterStatus', NA),
                num_nodes=cluster.get('NumCacheNodes', 0),
                availability_zone=cluster.get('PreferredAvailabilityZone', NA),
                encrypted=cluster.get('AtRestEncryptionEnabled', False),
                create_time=to_iso(cluster.get('CacheClusterCreateTime')),
            ))

    logger.info(f"[{region}] Found {len(clusters)} ElastiCache clusters")
    return clusters


def describe_redshift_clusters(clients: ClientCache, region: str) -> List[RedshiftCluster]:
    redshift = clients.get_client('redshift', region)
    clusters = []

    for page in iter_pages("Redshift DescribeClusters", redshift.describe_clusters, 'Marker', 'Marker'):
        for cluster in page.get('Clusters', []):
            endpoint = cluster.get('Endpoint', {})
            clusters.append(RedshiftCluster(
                id=cluster.get('ClusterIdentifier', ''),
                node_type=cluster.get('NodeType', NA),
                number_of_nodes=cluster.get('NumberOfNodes', 0),
                status=cluster.get('ClusterStatus', NA),
                master_username=cluster.get('MasterUsername', NA),
                db_name=cluster.get('DBName', NA),
                endpoint=endpoint.get('Address', NA),
                port=endpoint.get('Port', 0),
                vpc_id=cluster.get('VpcId', NA),
                encrypted=cluster.get('Encrypted', False),
                publicly_accessible=cluster.get('PubliclyAccessible', False),
                create_time=to_iso(cluster.get('ClusterCreateTime')),
                tags=tags_to_dict(cluster.get('Tags', [])),
            ))

    logger.info(f"[{region}] Found {len(clusters)} Redshift clusters")
    return clusters


def describe_opensearch_domains(clients: ClientCache, region: str) -> List[OpenSearchDomain]:
    opensearch = clients.get_client('opensearch', region)
    listed = execute_with_retry(lambda: opensearch.list_domain_names(), "OpenSearch ListDomainNames")

    domains = []
    for entry in listed.get('DomainNames', []):
        name = entry.get('DomainName', '')
        try:
            domain = execute_with_retry(
                lambda: opensearch.describe_domain(DomainName=name), f"OpenSearch DescribeDomain {name}"
            ).get('DomainStatus', {})
        except InventoryCallError as e:
            logger.debug(f"[{region}] Failed to describe OpenSearch domain {name}: {e}")
            continue

        cluster_config = domain.get('ClusterConfig', {})
        domains.append(OpenSearchDomain(
            name=domain.get('DomainName', name),
            arn=domain.get('ARN', NA),
            engine_version=domain.get('EngineVersion', NA),
            instance_type=cluster_config.get('InstanceType', NA),
            instance_count=cluster_config.get('InstanceCount', 0),
            endpoint=domain.get('Endpoint') or domain.get('Endpoints', {}).get('vpc') or NA,
            vpc_id=domain.get('VPCOptions', {}).get('VPCId') or NA,
            encrypted=domain.get('EncryptionAtRestOptions', {}).get('Enabled', False),
            processing=domain.get('Processing', False),
        ))

    logger.info(f"[{region}] Found {len(domains)} OpenSearch domains")
    return domains


# =============================================================================
# Storage
# =============================================================================

def _bucket_is_public(s3, name: str) -> bool:
    """A bucket is private only when all four public access block flags are set."""
    response = _best_effort(
        lambda: s3.get_public_access_block(Bucket=name), f"S3 GetPublicAccessBlock {name}"
    )
    if response is None:
        return True
    config = response.get('PublicAccessBlockConfiguration', {})
    return not all(config.get(flag, False) for flag in (
        'BlockPublicAcls', 'IgnorePublicAcls', 'BlockPublicPolicy', 'RestrictPublicBuckets'
    ))


def describe_s3_buckets(clients: ClientCache) -> List[S3Bucket]:
    """
    Describe S3 buckets (global).

    Location, tags, public access, encryption and versioning are each
    fetched best effort; a bucket whose detail calls fail is still listed.
    """
    s3 = clients.get_client('s3', GLOBAL_ENTRY_REGION)
    response = execute_with_retry(lambda: s3.list_buckets(), "S3 ListBuckets")

    buckets = []
    for bucket in response.get('Buckets', []):
        name = bucket.get('Name', '')

        location = _best_effort(
            lambda: s3.get_bucket_location(Bucket=name), f"S3 GetBucketLocation {name}", default={}
        )
        tagging = _best_effort(
            lambda: s3.get_bucket_tagging(Bucket=name), f"S3 GetBucketTagging {name}", default={}
        )
        encryption = _best_effort(
            lambda: s3.get_bucket_encryption(Bucket=name), f"S3 GetBucketEncryption {name}"
        )
        versioning = _best_effort(
            lambda: s3.get_bucket_versioning(Bucket=name), f"S3 GetBucketVersioning {name}", default={}
        )

        buckets.append(S3Bucket(
            name=name,
            creation_date=to_iso(bucket.get('CreationDate')),
            # Buckets in us-east-1 report a null LocationConstraint
            location=location.get('LocationConstraint') or DEFAULT_REGION,
            public_access=_bucket_is_public(s3, name),
            encrypted=encryption is not None,
            versioning_enabled=versioning.get('Status') == 'Enabled',
            tags=tags_to_dict(tagging.get('TagSet', [])),
        ))

    logger.info(f"Found {len(buckets)} S3 buckets")
    return buckets


def describe_efs_file_systems(clients: ClientCache, region: str) -> List[EfsFileSystem]:
    efs = clients.get_client('efs', region)
    file_systems = []

    for page in iter_pages("EFS DescribeFileSystems", efs.describe_file_systems, 'Marker', 'NextMarker'):
        for fs in page.get('FileSystems', []):
            tags = tags_to_dict(fs.get('Tags', []))
            file_systems.append(EfsFileSystem(
                id=fs.get('FileSystemId', ''),
                name=fs.get('Name') or get_name_from_tags(tags),
                arn=fs.get('FileSystemArn', NA),
                state=fs.get('LifeCycleState', NA),
                size_bytes=fs.get('SizeInBytes', {}).get('Value', 0),
                performance_mode=fs.get('PerformanceMode', NA),
                throughput_mode=fs.get('ThroughputMode', NA),
                encrypted=fs.get('Encrypted', False),
                creation_time=to_iso(fs.get('CreationTime')),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(file_systems)} EFS file systems")
    return file_systems


def describe_backup_vaults(clients: ClientCache, region: str) -> List[BackupVault]:
    backup = clients.get_client('backup', region)
    vaults = []

    for page in iter_pages("Backup ListBackupVaults", backup.list_backup_vaults, 'NextToken', 'NextToken'):
        for vault in page.get('BackupVaultList', []):
            vaults.append(BackupVault(
                name=vault.get('BackupVaultName', ''),
                arn=vault.get('BackupVaultArn', NA),
                creation_date=to_iso(vault.get('CreationDate')),
                encryption_key_arn=vault.get('EncryptionKeyArn', NA),
                recovery_points=vault.get('NumberOfRecoveryPoints', 0),
                locked=vault.get('Locked', False),
            ))

    logger.info(f"[{region}] Found {len(vaults)} Backup vaults")
    return vaults


def describe_ecr_repositories(clients: ClientCache, region: str) -> List[EcrRepository]:
    ecr = clients.get_client('ecr', region)
    repositories = []

    for page in iter_pages("ECR DescribeRepositories", ecr.describe_repositories, 'nextToken', 'nextToken'):
        for repo in page.get('repositories', []):
            repositories.append(EcrRepository(
                name=repo.get('repositoryName', ''),
                arn=repo.get('repositoryArn', NA),
                uri=repo.get('repositoryUri', NA),
                registry_id=repo.get('registryId', NA),
                created_at=to_iso(repo.get('createdAt')),
                tag_mutability=repo.get('imageTagMutability', NA),
                scan_on_push=repo.get('imageScanningConfiguration', {}).get('scanOnPush', False),
                encryption_type=repo.get('encryptionConfiguration', {}).get('encryptionType', NA),
            ))

    logger.info(f"[{region}] Found {len(repositories)} ECR repositories")
    return repositories


# =============================================================================
# Networking
# =============================================================================

def describe_vpcs(clients: ClientCache, region: str) -> List[Vpc]:
    ec2 = clients.get_client('ec2', region)
    vpcs = []

    for page in iter_pages("EC2 DescribeVpcs", ec2.describe_vpcs, 'NextToken', 'NextToken'):
        for vpc in page.get('Vpcs', []):
            tags = tags_to_dict(vpc.get('Tags', []))
            vpcs.append(Vpc(
                id=vpc.get('VpcId', ''),
                name=get_name_from_tags(tags),
                state=vpc.get('State', NA),
                cidr=vpc.get('CidrBlock', NA),
                is_default=vpc.get('IsDefault', False),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(vpcs)} VPCs")
    return vpcs


def describe_subnets(clients: ClientCache, region: str) -> List[Subnet]:
    ec2 = clients.get_client('ec2', region)
    subnets = []

    for page in iter_pages("EC2 DescribeSubnets", ec2.describe_subnets, 'NextToken', 'NextToken'):
        for subnet in page.get('Subnets', []):
            tags = tags_to_dict(subnet.get('Tags', []))
            subnets.append(Subnet(
                id=subnet.get('SubnetId', ''),
                name=get_name_from_tags(tags),
                vpc_id=subnet.get('VpcId', NA),
                cidr=subnet.get('CidrBlock', NA),
                availability_zone=subnet.get('AvailabilityZone', NA),
                state=subnet.get('State', NA),
                available_ips=subnet.get('AvailableIpAddressCount', 0),
                map_public_ip_on_launch=subnet.get('MapPublicIpOnLaunch', False),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(subnets)} subnets")
    return subnets


def describe_security_groups(clients: ClientCache, region: str) -> List[SecurityGroup]:
    ec2 = clients.get_client('ec2', region)
    groups = []

    for page in iter_pages("EC2 DescribeSecurityGroups", ec2.describe_security_groups, 'NextToken', 'NextToken'):
        for group in page.get('SecurityGroups', []):
            tags = tags_to_dict(group.get('Tags', []))
            groups.append(SecurityGroup(
                id=group.get('GroupId', ''),
                name=tags.get('Name') or group.get('GroupName') or NA,
                description=group.get('Description', NA),
                vpc_id=group.get('VpcId', NA),
                ingress_rules=len(group.get('IpPermissions', [])),
                egress_rules=len(group.get('IpPermissionsEgress', [])),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(groups)} security groups")
    return groups


def describe_load_balancers(clients: ClientCache, region: str) -> List[LoadBalancer]:
    """Describe ALB/NLB/GWLB load balancers. Tags are fetched 20 ARNs at a time."""
    elbv2 = clients.get_client('elbv2', region)

    raw = []
    for page in iter_pages(
        "ELBv2 DescribeLoadBalancers", elbv2.describe_load_balancers, 'Marker', 'NextMarker'
    ):
        raw.extend(page.get('LoadBalancers', []))

    tags_by_arn: Dict[str, Dict[str, str]] = {}
    arns = [lb['LoadBalancerArn'] for lb in raw if lb.get('LoadBalancerArn')]
    for i in range(0, len(arns), 20):
        chunk = arns[i:i + 20]
        response = _best_effort(
            lambda: elbv2.describe_tags(ResourceArns=chunk), "ELBv2 DescribeTags", default={}
        )
        for description in response.get('TagDescriptions', []):
            tags_by_arn[description.get('ResourceArn', '')] = tags_to_dict(description.get('Tags', []))

    load_balancers = []
    for lb in raw:
        arn = lb.get('LoadBalancerArn', NA)
        load_balancers.append(LoadBalancer(
            name=lb.get('LoadBalancerName', ''),
            arn=arn,
            lb_type=lb.get('Type', NA),
            state=lb.get('State', {}).get('Code', NA),
            dns_name=lb.get('DNSName', NA),
            scheme=lb.get('Scheme', NA),
            availability_zones=[az.get('ZoneName', '') for az in lb.get('AvailabilityZones', [])],
            vpc_id=lb.get('VpcId', NA),
            created_time=to_iso(lb.get('CreatedTime')),
            tags=tags_by_arn.get(arn, {}),
        ))

    logger.info(f"[{region}] Found {len(load_balancers)} load balancers")
    return load_balancers


def describe_internet_gateways(clients: ClientCache, region: str) -> List[InternetGateway]:
    ec2 = clients.get_client('ec2', region)
    gateways = []

    for page in iter_pages(
        "EC2 DescribeInternetGateways", ec2.describe_internet_gateways, 'NextToken', 'NextToken'
    ):
        for igw in page.get('InternetGateways', []):
            tags = tags_to_dict(igw.get('Tags', []))
            attachments = igw.get('Attachments', [])
            gateways.append(InternetGateway(
                id=igw.get('InternetGatewayId', ''),
                name=get_name_from_tags(tags),
                vpc_id=attachments[0].get('VpcId', NA) if attachments else NA,
                state=attachments[0].get('State', NA) if attachments else 'detached',
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(gateways)} internet gateways")
    return gateways


def describe_nat_gateways(clients: ClientCache, region: str) -> List[NatGateway]:
    ec2 = clients.get_client('ec2', region)
    gateways = []

    for page in iter_pages("EC2 DescribeNatGateways", ec2.describe_nat_gateways, 'NextToken', 'NextToken'):
        for nat in page.get('NatGateways', []):
            tags = tags_to_dict(nat.get('Tags', []))
            addresses = nat.get('NatGatewayAddresses', [])
            gateways.append(NatGateway(
                id=nat.get('NatGatewayId', ''),
                name=get_name_from_tags(tags),
                vpc_id=nat.get('VpcId', NA),
                subnet_id=nat.get('SubnetId', NA),
                state=nat.get('State', NA),
                public_ip=addresses[0].get('PublicIp', NA) if addresses else NA,
                create_time=to_iso(nat.get('CreateTime')),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(gateways)} NAT gateways")
    return gateways


def describe_elastic_ips(clients: ClientCache, region: str) -> List[ElasticIp]:
    ec2 = clients.get_client('ec2', region)
    response = execute_with_retry(lambda: ec2.describe_addresses(), "EC2 DescribeAddresses")

    addresses = []
    for address in response.get('Addresses', []):
        tags = tags_to_dict(address.get('Tags', []))
        addresses.append(ElasticIp(
            allocation_id=address.get('AllocationId', ''),
            public_ip=address.get('PublicIp', NA),
            domain=address.get('Domain', NA),
            instance_id=address.get('InstanceId', NA),
            network_interface_id=address.get('NetworkInterfaceId', NA),
            association_id=address.get('AssociationId', NA),
            name=get_name_from_tags(tags),
            tags=tags,
        ))

    logger.info(f"[{region}] Found {len(addresses)} Elastic IPs")
    return addresses


def describe_vpn_gateways(clients: ClientCache, region: str) -> List[VpnGateway]:
    ec2 = clients.get_client('ec2', region)
    response = execute_with_retry(lambda: ec2.describe_vpn_gateways(), "EC2 DescribeVpnGateways")

    gateways = []
    for vgw in response.get('VpnGateways', []):
        tags = tags_to_dict(vgw.get('Tags', []))
        attached = [a for a in vgw.get('VpcAttachments', []) if a.get('State') == 'attached']
        gateways.append(VpnGateway(
            id=vgw.get('VpnGatewayId', ''),
            name=get_name_from_tags(tags),
            gateway_type=vgw.get('Type', NA),
            state=vgw.get('State', NA),
            vpc_id=attached[0].get('VpcId', NA) if attached else NA,
            tags=tags,
        ))

    logger.info(f"[{region}] Found {len(gateways)} VPN gateways")
    return gateways


def describe_vpn_connections(clients: ClientCache, region: str) -> List[VpnConnection]:
    ec2 = clients.get_client('ec2', region)
    response = execute_with_retry(lambda: ec2.describe_vpn_connections(), "EC2 DescribeVpnConnections")

    connections = []
    for vpn in response.get('VpnConnections', []):
        tags = tags_to_dict(vpn.get('Tags', []))
        connections.append(VpnConnection(
            id=vpn.get('VpnConnectionId', ''),
            name=get_name_from_tags(tags),
            state=vpn.get('State', NA),
            vpn_gateway_id=vpn.get('VpnGatewayId', NA),
            customer_gateway_id=vpn.get('CustomerGatewayId', NA),
            transit_gateway_id=vpn.get('TransitGatewayId', NA),
            connection_type=vpn.get('Type', NA),
            category=vpn.get('Category', NA),
            tags=tags,
        ))

    logger.info(f"[{region}] Found {len(connections)} VPN connections")
    return connections


def describe_transit_gateways(clients: ClientCache, region: str) -> List[TransitGateway]:
    ec2 = clients.get_client('ec2', region)
    gateways = []

    for page in iter_pages(
        "EC2 DescribeTransitGateways", ec2.describe_transit_gateways, 'NextToken', 'NextToken'
    ):
        for tgw in page.get('TransitGateways', []):
            tags = tags_to_dict(tgw.get('Tags', []))
            gateways.append(TransitGateway(
                id=tgw.get('TransitGatewayId', ''),
                arn=tgw.get('TransitGatewayArn', NA),
                name=get_name_from_tags(tags),
                state=tgw.get('State', NA),
                owner_id=tgw.get('OwnerId', NA),
                description=tgw.get('Description') or NA,
                creation_time=to_iso(tgw.get('CreationTime')),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(gateways)} transit gateways")
    return gateways


def describe_vpc_endpoints(clients: ClientCache, region: str) -> List[VpcEndpoint]:
    ec2 = clients.get_client('ec2', region)
    endpoints = []

    for page in iter_pages("EC2 DescribeVpcEndpoints", ec2.describe_vpc_endpoints, 'NextToken', 'NextToken'):
        for endpoint in page.get('VpcEndpoints', []):
            tags = tags_to_dict(endpoint.get('Tags', []))
            endpoints.append(VpcEndpoint(
                id=endpoint.get('VpcEndpointId', ''),
                name=get_name_from_tags(tags),
                vpc_id=endpoint.get('VpcId', NA),
                service_name=endpoint.get('ServiceName', NA),
                endpoint_type=endpoint.get('VpcEndpointType', NA),
                state=endpoint.get('State', NA),
                creation_time=to_iso(endpoint.get('CreationTimestamp')),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(endpoints)} VPC endpoints")
    return endpoints


def describe_vpc_peering_connections(clients: ClientCache, region: str) -> List[VpcPeering]:
    ec2 = clients.get_client('ec2', region)
    peerings = []

    for page in iter_pages(
        "EC2 DescribeVpcPeeringConnections", ec2.describe_vpc_peering_connections, 'NextToken', 'NextToken'
    ):
        for peering in page.get('VpcPeeringConnections', []):
            tags = tags_to_dict(peering.get('Tags', []))
            peerings.append(VpcPeering(
                id=peering.get('VpcPeeringConnectionId', ''),
                name=get_name_from_tags(tags),
                status=peering.get('Status', {}).get('Code', NA),
                requester_vpc_id=peering.get('RequesterVpcInfo', {}).get('VpcId', NA),
                accepter_vpc_id=peering.get('AccepterVpcInfo', {}).get('VpcId', NA),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(peerings)} VPC peering connections")
    return peerings


def describe_network_acls(clients: ClientCache, region: str) -> List[NetworkAcl]:
    ec2 = clients.get_client('ec2', region)
    acls = []

    for page in iter_pages("EC2 DescribeNetworkAcls", ec2.describe_network_acls, 'NextToken', 'NextToken'):
        for acl in page.get('NetworkAcls', []):
            tags = tags_to_dict(acl.get('Tags', []))
            acls.append(NetworkAcl(
                id=acl.get('NetworkAclId', ''),
                name=get_name_from_tags(tags),
                vpc_id=acl.get('VpcId', NA),
                is_default=acl.get('IsDefault', False),
                entry_count=len(acl.get('Entries', [])),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(acls)} network ACLs")
    return acls


def describe_route_tables(clients: ClientCache, region: str) -> List[RouteTable]:
    ec2 = clients.get_client('ec2', region)
    tables = []

    for page in iter_pages("EC2 DescribeRouteTables", ec2.describe_route_tables, 'NextToken', 'NextToken'):
        for table in page.get('RouteTables', []):
            tags = tags_to_dict(table.get('Tags', []))
            tables.append(RouteTable(
                id=table.get('RouteTableId', ''),
                name=get_name_from_tags(tags),
                vpc_id=table.get('VpcId', NA),
                main=any(assoc.get('Main', False) for assoc in table.get('Associations', [])),
                route_count=len(table.get('Routes', [])),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(tables)} route tables")
    return tables


def describe_network_interfaces(clients: ClientCache, region: str) -> List[NetworkInterface]:
    ec2 = clients.get_client('ec2', region)
    interfaces = []

    for page in iter_pages(
        "EC2 DescribeNetworkInterfaces", ec2.describe_network_interfaces, 'NextToken', 'NextToken'
    ):
        for eni in page.get('NetworkInterfaces', []):
            tags = tags_to_dict(eni.get('TagSet', []))
            interfaces.append(NetworkInterface(
                id=eni.get('NetworkInterfaceId', ''),
                name=get_name_from_tags(tags),
                vpc_id=eni.get('VpcId', NA),
                subnet_id=eni.get('SubnetId', NA),
                private_ip=eni.get('PrivateIpAddress', NA),
                public_ip=eni.get('Association', {}).get('PublicIp', NA),
                status=eni.get('Status', NA),
                interface_type=eni.get('InterfaceType', NA),
                tags=tags,
            ))

    logger.info(f"[{region}] Found {len(interfaces)} network interfaces")
    return interfaces


def describe_cloudfront_distributions(clients: ClientCache) -> List[CloudFrontDistribution]:
    """Describe CloudFront distributions (global)."""
    cloudfront = clients.get_client('cloudfront')
    distributions = []

    for page in iter_pages(
        "CloudFront ListDistributions", cloudfront.list_distributions, 'Marker',
        lambda p: p.get('DistributionList', {}).get('NextMarker'),
    ):
        for dist in page.get('DistributionList', {}).get('Items', []):
            distributions.append(CloudFrontDistribution(
                id=dist.get('Id', ''),
                arn=dist.get('ARN', NA),
                domain_name=dist.get('DomainName', NA),
                status=dist.get('Status', NA),
                enabled=dist.get('Enabled', False),
                comment=dist.get('Comment') or NA,
                price_class=dist.get('PriceClass', NA),
                last_modified=to_iso(dist.get('LastModifiedTime')),
            ))

    logger.info(f"Found {len(distributions)} CloudFront distributions")
    return distributions


def describe_route53_zones(clients: ClientCache) -> List[Route53Zone]:
    """Describe Route 53 hosted zones (global)."""
    route53 = clients.get_client('route53')
    zones = []

    for page in iter_pages("Route53 ListHostedZones", route53.list_hosted_zones, 'Marker', 'NextMarker'):
        for zone in page.get('HostedZones', []):
            config = zone.get('Config', {})
            zones.append(Route53Zone(
                id=zone.get('Id', '').split('/')[-1],
                name=zone.get('Name', NA),
                private_zone=config.get('PrivateZone', False),
                record_count=zone.get('ResourceRecordSetCount', 0),
                comment=config.get('Comment') or NA,
            ))

    logger.info(f"Found {len(zones)} Route 53 hosted zones")
    return zones


def describe_api_gateways(clients: ClientCache, region: str) -> List[ApiGateway]:
    """Describe API Gateway REST APIs."""
    apigateway = clients.get_client('apigateway', region)
    apis = []

    for page in iter_pages(
        "APIGateway GetRestApis", apigateway.get_rest_apis, 'position', 'position', limit=500
    ):
        for api in page.get('items', []):
            types = api.get('endpointConfiguration', {}).get('types', [])
            apis.append(ApiGateway(
                id=api.get('id', ''),
                name=api.get('name', NA),
                endpoint_type=types[0] if types else NA,
                description=api.get('description') or NA,
                created_date=to_iso(api.get('createdDate')),
                tags=tags_to_dict(api.get('tags', {})),
            ))

    logger.info(f"[{region}] Found {len(apis)} API Gateway REST APIs")
    return apis


# =============================================================================
# Security & Identity
# =============================================================================

def describe_iam_users(clients: ClientCache) -> List[IamUser]:
    """Describe IAM users (global)."""
    iam = clients.get_client('iam')
    users = []

    for page in iter_pages("IAM ListUsers", iam.list_users, 'Marker', 'Marker'):
        for user in page.get('Users', []):
            users.append(IamUser(
                user_name=user.get('UserName', ''),
                user_id=user.get('UserId', NA),
                arn=user.get('Arn', NA),
                create_date=to_iso(user.get('CreateDate')),
                password_last_used=to_iso(user.get('PasswordLastUsed')),
            ))

    logger.info(f"Found {len(users)} IAM users")
    return users


def describe_iam_roles(clients: ClientCache) -> List[IamRole]:
    """Describe IAM roles (global)."""
    iam = clients.get_client('iam')
    roles = []

    for page in iter_pages("IAM ListRoles", iam.list_roles, 'Marker', 'Marker'):
        for role in page.get('Roles', []):
            roles.append(IamRole(
                role_name=role.get('RoleName', ''),
                role_id=role.get('RoleId', NA),
                arn=role.get('Arn', NA),
                create_date=to_iso(role.get('CreateDate')),
                description=role.get('Description') or NA,
            ))

    logger.info(f"Found {len(roles)} IAM roles")
    return roles


def describe_kms_keys(clients: ClientCache, region: str) -> List[KmsKey]:
    """Describe KMS keys, one DescribeKey call per listed key."""
    kms = clients.get_client('kms', region)

    key_ids = []
    for page in iter_pages(
        "KMS ListKeys", kms.list_keys, 'Marker',
        lambda p: p.get('NextMarker') if p.get('Truncated') else None,
    ):
        key_ids.extend(key.get('KeyId', '') for key in page.get('Keys', []))

    keys = []
    for key_id in key_ids:
        try:
            metadata = execute_with_retry(
                lambda: kms.describe_key(KeyId=key_id), f"KMS DescribeKey {key_id}"
            ).get('KeyMetadata', {})
        except InventoryCallError as e:
            logger.debug(f"[{region}] Failed to describe KMS key {key_id}: {e}")
            continue

        keys.append(KmsKey(
            key_id=metadata.get('KeyId', key_id),
            arn=metadata.get('Arn', NA),
            description=metadata.get('Description') or NA,
            key_usage=metadata.get('KeyUsage', NA),
            key_state=metadata.get('KeyState', NA),
            key_manager=metadata.get('KeyManager', NA),
            creation_date=to_iso(metadata.get('CreationDate')),
        ))

    logger.info(f"[{region}] Found {len(keys)} KMS keys")
    return keys


def describe_secrets(clients: ClientCache, region: str) -> List[Secret]:
    """Describe Secrets Manager secrets (metadata only, never values)."""
    secretsmanager = clients.get_client('secretsmanager', region)
    secrets = []

    for page in iter_pages("SecretsManager ListSecrets", secretsmanager.list_secrets, 'NextToken', 'NextToken'):
        for secret in page.get('SecretList', []):
            secrets.append(Secret(
                name=secret.get('Name', ''),
                arn=secret.get('ARN', NA),
                description=secret.get('Description') or NA,
                kms_key_id=secret.get('KmsKeyId', NA),
                rotation_enabled=secret.get('RotationEnabled', False),
                created_date=to_iso(secret.get('CreatedDate')),
                last_changed_date=to_iso(secret.get('LastChangedDate')),
                last_accessed_date=to_iso(secret.get('LastAccessedDate')),
                tags=tags_to_dict(secret.get('Tags', [])),
            ))

    logger.info(f"[{region}] Found {len(secrets)} Secrets Manager secrets")
    return secrets


def describe_cognito_user_pools(clients: ClientCache, region: str) -> List[CognitoUserPool]:
    cognito = clients.get_client('cognito-idp', region)

    summaries = []
    for page in iter_pages(
        "Cognito ListUserPools", cognito.list_user_pools, 'NextToken', 'NextToken', MaxResults=60
    ):
        summaries.extend(page.get('UserPools', []))

    pools = []
    for summary in summaries:
        pool_id = summary.get('Id', '')
        try:
            pool = execute_with_retry(
                lambda: cognito.describe_user_pool(UserPoolId=pool_id), f"Cognito DescribeUserPool {pool_id}"
            ).get('UserPool', {})
        except InventoryCallError as e:
            logger.debug(f"[{region}] Failed to describe Cognito user pool {pool_id}: {e}")
            continue

        pools.append(CognitoUserPool(
            id=pool_id,
            name=pool.get('Name') or summary.get('Name') or NA,
            arn=pool.get('Arn', NA),
            status=pool.get('Status') or summary.get('Status') or NA,
            mfa_configuration=pool.get('MfaConfiguration', NA),
            estimated_users=pool.get('EstimatedNumberOfUsers', 0),
            creation_date=to_iso(pool.get('CreationDate')),
            last_modified_date=to_iso(pool.get('LastModifiedDate')),
            tags=tags_to_dict(pool.get('UserPoolTags', {})),
        ))

    logger.info(f"[{region}] Found {len(pools)} Cognito user pools")
    return pools


def describe_waf_web_acls(clients: ClientCache, region: str) -> List[WafWebAcl]:
    """Describe regional WAFv2 web ACLs. Capacity and tags are best effort."""
    wafv2 = clients.get_client('wafv2', region)

    summaries = []
    for page in iter_pages(
        "WAFv2 ListWebACLs", wafv2.list_web_acls, 'NextMarker', 'NextMarker', Scope='REGIONAL'
    ):
        summaries.extend(page.get('WebACLs', []))

    acls = []
    for summary in summaries:
        name = summary.get('Name', '')
        acl_id = summary.get('Id', '')
        arn = summary.get('ARN', NA)
        detail = _best_effort(
            lambda: wafv2.get_web_acl(Name=name, Scope='REGIONAL', Id=acl_id),
            f"WAFv2 GetWebACL {name}",
            default={},
        )
        tag_info = _best_effort(
            lambda: wafv2.list_tags_for_resource(ResourceARN=arn),
            f"WAFv2 ListTagsForResource {name}",
            default={},
        )
        acls.append(WafWebAcl(
            id=acl_id,
            name=name,
            arn=arn,
            description=summary.get('Description') or NA,
            capacity=detail.get('WebACL', {}).get('Capacity', 0),
            tags=tags_to_dict(tag_info.get('TagInfoForResource', {}).get('TagList', [])),
        ))

    logger.info(f"[{region}] Found {len(acls)} WAF web ACLs")
    return acls


def describe_guardduty_detectors(clients: ClientCache, region: str) -> List[GuardDutyDetector]:
    guardduty = clients.get_client('guardduty', region)

    detector_ids = []
    for page in iter_pages("GuardDuty ListDetectors", guardduty.list_detectors, 'NextToken', 'NextToken'):
        detector_ids.extend(page.get('DetectorIds', []))

    detectors = []
    for detector_id in detector_ids:
        try:
            detector = execute_with_retry(
                lambda: guardduty.get_detector(DetectorId=detector_id), f"GuardDuty GetDetector {detector_id}"
            )
        except InventoryCallError as e:
            logger.debug(f"[{region}] Failed to get GuardDuty detector {detector_id}: {e}")
            continue

        detectors.append(GuardDutyDetector(
            id=detector_id,
            status=detector.get('Status', NA),
            service_role=detector.get('ServiceRole', NA),
            finding_frequency=detector.get('FindingPublishingFrequency', NA),
            created_at=to_iso(detector.get('CreatedAt')),
            updated_at=to_iso(detector.get('UpdatedAt')),
            tags=tags_to_dict(detector.get('Tags', {})),
        ))

    logger.info(f"[{region}] Found {len(detectors)} GuardDuty detectors")
    return detectors


def describe_cloudtrail_trails(clients: ClientCache, region: str) -> List[CloudTrailTrail]:
    """Describe trails whose home is this region (shadow trails excluded)."""
    cloudtrail = clients.get_client('cloudtrail', region)
    response = execute_with_retry(
        lambda: cloudtrail.describe_trails(includeShadowTrails=False), "CloudTrail DescribeTrails"
    )

    trails = []
    for trail in response.get('trailList', []):
        trails.append(CloudTrailTrail(
            name=trail.get('Name', ''),
            arn=trail.get('TrailARN', NA),
            home_region=trail.get('HomeRegion', region),
            multi_region=trail.get('IsMultiRegionTrail', False),
            organization_trail=trail.get('IsOrganizationTrail', False),
            s3_bucket=trail.get('S3BucketName', NA),
            log_file_validation=trail.get('LogFileValidationEnabled', False),
            kms_key_id=trail.get('KmsKeyId', NA),
        ))

    logger.info(f"[{region}] Found {len(trails)} CloudTrail trails")
    return trails


# =============================================================================
# Governance (global)
# =============================================================================

def describe_control_tower_guardrails(clients: ClientCache, region: str) -> List[ControlTowerGuardrail]:
    """
    Describe enabled Control Tower controls.

    Accounts without a landing zone, or where Control Tower is not
    available, have no guardrails; both cases return an empty list.
    Credential errors still propagate.
    """
    controltower = clients.get_client('controltower', region)

    try:
        landing_zones = execute_with_retry(
            lambda: controltower.list_landing_zones(), "ControlTower ListLandingZones"
        ).get('landingZones', [])
        if not landing_zones:
            logger.debug("No Control Tower landing zones found")
            return []

        guardrails = []
        for page in iter_pages(
            "ControlTower ListEnabledControls", controltower.list_enabled_controls, 'nextToken', 'nextToken'
        ):
            for control in page.get('enabledControls', []):
                identifier = control.get('controlIdentifier', '')
                guardrails.append(ControlTowerGuardrail(
                    arn=control.get('arn', ''),
                    name=identifier.split('/')[-1] if identifier else 'Unknown',
                    state=control.get('statusSummary', {}).get('status', 'UNKNOWN'),
                    behavior='DETECTIVE' if 'detective' in identifier else 'PREVENTIVE',
                    target_arn=control.get('targetIdentifier', NA),
                ))
    except InventoryCallError as e:
        if e.category == 'credential':
            raise
        logger.debug(f"Control Tower not available or not configured: {e}")
        return []

    logger.info(f"Found {len(guardrails)} Control Tower guardrails")
    return guardrails


def describe_service_control_policies(clients: ClientCache) -> List[ServiceControlPolicy]:
    """Describe Organizations service control policies (global)."""
    organizations = clients.get_client('organizations')
    policies = []

    for page in iter_pages(
        "Organizations ListPolicies", organizations.list_policies, 'NextToken', 'NextToken',
        Filter='SERVICE_CONTROL_POLICY',
    ):
        for policy in page.get('Policies', []):
            policies.append(ServiceControlPolicy(
                id=policy.get('Id', 'unknown'),
                arn=policy.get('Arn', NA),
                name=policy.get('Name', NA),
                description=policy.get('Description') or NA,
                policy_type=policy.get('Type', NA),
                aws_managed=policy.get('AwsManaged', False),
            ))

    logger.info(f"Found {len(policies)} service control policies")
    return policies


def describe_config_rules(clients: ClientCache, region: str) -> List[ConfigRule]:
    """Describe AWS Config rules joined with their compliance status."""
    config = clients.get_client('config', region)

    raw_rules = []
    for page in iter_pages("Config DescribeConfigRules", config.describe_config_rules, 'NextToken', 'NextToken'):
        raw_rules.extend(page.get('ConfigRules', []))

    compliance_by_rule: Dict[str, str] = {}
    for page in iter_pages(
        "Config DescribeComplianceByConfigRule", config.describe_compliance_by_config_rule,
        'NextToken', 'NextToken'
    ):
        for item in page.get('ComplianceByConfigRules', []):
            compliance_type = item.get('Compliance', {}).get('ComplianceType')
            if item.get('ConfigRuleName') and compliance_type:
                compliance_by_rule[item['ConfigRuleName']] = compliance_type

    rules = []
    for rule in raw_rules:
        name = rule.get('ConfigRuleName', 'unknown')
        rules.append(ConfigRule(
            name=name,
            arn=rule.get('ConfigRuleArn', NA),
            rule_id=rule.get('ConfigRuleId', NA),
            description=rule.get('Description') or NA,
            compliance=compliance_by_rule.get(name, 'NOT_EVALUATED'),
            source='AWS Managed' if rule.get('Source', {}).get('Owner') == 'AWS' else 'Custom',
            state=rule.get('ConfigRuleState', NA),
        ))

    logger.info(f"Found {len(rules)} Config rules")
    return rules


# =============================================================================
# Management & Application Integration
# =============================================================================

def describe_cloudwatch_alarms(clients: ClientCache, region: str) -> List[CloudWatchAlarm]:
    cloudwatch = clients.get_client('cloudwatch', region)
    alarms = []

    for page in iter_pages("CloudWatch DescribeAlarms", cloudwatch.describe_alarms, 'NextToken', 'NextToken'):
        for alarm in page.get('MetricAlarms', []):
            alarms.append(CloudWatchAlarm(
                name=alarm.get('AlarmName', ''),
                arn=alarm.get('AlarmArn', NA),
                description=alarm.get('AlarmDescription') or NA,
                state=alarm.get('StateValue', NA),
                state_reason=alarm.get('StateReason') or NA,
                metric_name=alarm.get('MetricName', NA),
                namespace=alarm.get('Namespace', NA),
                state_updated=to_iso(alarm.get('StateUpdatedTimestamp')),
            ))

    logger.info(f"[{region}] Found {len(alarms)} CloudWatch alarms")
    return alarms


def describe_cloudformation_stacks(clients: ClientCache, region: str) -> List[CloudFormationStack]:
    cloudformation = clients.get_client('cloudformation', region)
    stacks = []

    for page in iter_pages(
        "CloudFormation DescribeStacks", cloudformation.describe_stacks, 'NextToken', 'NextToken'
    ):
        for stack in page.get('Stacks', []):
            stacks.append(CloudFormationStack(
                name=stack.get('StackName', ''),
                stack_id=stack.get('StackId', NA),
                status=stack.get('StackStatus', NA),
                creation_time=to_iso(stack.get('CreationTime')),
                last_updated_time=to_iso(stack.get('LastUpdatedTime')),
                description=stack.get('Description') or NA,
                tags=tags_to_dict(stack.get('Tags', [])),
            ))

    logger.info(f"[{region}] Found {len(stacks)} CloudFormation stacks")
    return stacks


def describe_ssm_parameters(clients: ClientCache, region: str) -> List[SsmParameter]:
    """Describe SSM parameters (metadata only, never values)."""
    ssm = clients.get_client('ssm', region)
    parameters = []

    for page in iter_pages("SSM DescribeParameters", ssm.describe_parameters, 'NextToken', 'NextToken'):
        for param in page.get('Parameters', []):
            parameters.append(SsmParameter(
                name=param.get('Name', ''),
                arn=param.get('ARN', NA),
                parameter_type=param.get('Type', NA),
                version=param.get('Version', 0),
                tier=param.get('Tier', NA),
                last_modified_date=to_iso(param.get('LastModifiedDate')),
                description=param.get('Description') or NA,
            ))

    logger.info(f"[{region}] Found {len(parameters)} SSM parameters")
    return parameters


def describe_step_functions(clients: ClientCache, region: str) -> List[StepFunction]:
    stepfunctions = clients.get_client('stepfunctions', region)
    machines = []

    for page in iter_pages(
        "StepFunctions ListStateMachines", stepfunctions.list_state_machines, 'nextToken', 'nextToken'
    ):
        for machine in page.get('stateMachines', []):
            machines.append(StepFunction(
                name=machine.get('name', ''),
                arn=machine.get('stateMachineArn', NA),
                machine_type=machine.get('type', 'STANDARD'),
                creation_date=to_iso(machine.get('creationDate')),
            ))

    logger.info(f"[{region}] Found {len(machines)} Step Functions state machines")
    return machines


def describe_eventbridge_rules(clients: ClientCache, region: str) -> List[EventBridgeRule]:
    events = clients.get_client('events', region)
    rules = []

    for page in iter_pages("EventBridge ListRules", events.list_rules, 'NextToken', 'NextToken'):
        for rule in page.get('Rules', []):
            rules.append(EventBridgeRule(
                name=rule.get('Name', ''),
                arn=rule.get('Arn', NA),
                state=rule.get('State', NA),
                description=rule.get('Description') or NA,
                schedule=rule.get('ScheduleExpression', NA),
                event_bus=rule.get('EventBusName', NA),
                event_pattern=rule.get('EventPattern', NA),
            ))

    logger.info(f"[{region}] Found {len(rules)} EventBridge rules")
    return rules


def describe_sqs_queues(clients: ClientCache, region: str) -> List[SqsQueue]:
    sqs = clients.get_client('sqs', region)
    queues = []

    for page in iter_pages("SQS ListQueues", sqs.list_queues, 'NextToken', 'NextToken', MaxResults=1000):
        for url in page.get('QueueUrls', []):
            queues.append(SqsQueue(name=url.rstrip('/').split('/')[-1], url=url))

    logger.info(f"[{region}] Found {len(queues)} SQS queues")
    return queues


def describe_sns_topics(clients: ClientCache, region: str) -> List[SnsTopic]:
    sns = clients.get_client('sns', region)
    topics = []

    for page in iter_pages("SNS ListTopics", sns.list_topics, 'NextToken', 'NextToken'):
        for topic in page.get('Topics', []):
            arn = topic.get('TopicArn', '')
            topics.append(SnsTopic(name=arn.split(':')[-1] or NA, arn=arn or NA))

    logger.info(f"[{region}] Found {len(topics)} SNS topics")
    return topics


# =============================================================================
# Analytics
# =============================================================================

def describe_glue_jobs(clients: ClientCache, region: str) -> List[GlueJob]:
    glue = clients.get_client('glue', region)
    jobs = []

    for page in iter_pages("Glue GetJobs", glue.get_jobs, 'NextToken', 'NextToken'):
        for job in page.get('Jobs', []):
            jobs.append(GlueJob(
                name=job.get('Name', ''),
                description=job.get('Description') or NA,
                role=job.get('Role', NA),
                glue_version=job.get('GlueVersion', NA),
                worker_type=job.get('WorkerType', NA),
                number_of_workers=job.get('NumberOfWorkers', 0),
                max_capacity=job.get('MaxCapacity', 0.0),
                created_on=to_iso(job.get('CreatedOn')),
                last_modified_on=to_iso(job.get('LastModifiedOn')),
            ))

    logger.info(f"[{region}] Found {len(jobs)} Glue jobs")
    return jobs


def describe_kinesis_streams(clients: ClientCache, region: str) -> List[KinesisStream]:
    kinesis = clients.get_client('kinesis', region)

    names = []
    for page in iter_pages("Kinesis ListStreams", kinesis.list_streams, 'NextToken', 'NextToken'):
        names.extend(page.get('StreamNames', []))

    streams = []
    for name in names:
        try:
            summary = execute_with_retry(
                lambda: kinesis.describe_stream_summary(StreamName=name),
                f"Kinesis DescribeStreamSummary {name}",
            ).get('StreamDescriptionSummary', {})
        except InventoryCallError as e:
            logger.debug(f"[{region}] Failed to describe Kinesis stream {name}: {e}")
            continue

        tags = _best_effort(
            lambda: kinesis.list_tags_for_stream(StreamName=name).get('Tags', []),
            f"Kinesis ListTagsForStream {name}",
            default=[],
        )
        streams.append(KinesisStream(
            name=summary.get('StreamName', name),
            arn=summary.get('StreamARN', NA),
            status=summary.get('StreamStatus', NA),
            shard_count=summary.get('OpenShardCount', 0),
            retention_hours=summary.get('RetentionPeriodHours', 0),
            encryption_type=summary.get('EncryptionType', NA),
            creation_time=to_iso(summary.get('StreamCreationTimestamp')),
            tags=tags_to_dict(tags),
        ))

    logger.info(f"[{region}] Found {len(streams)} Kinesis streams")
    return streams


def describe_athena_workgroups(clients: ClientCache, region: str) -> List[AthenaWorkgroup]:
    """List Athena workgroups. Tags need the workgroup ARN, so the account ID is looked up once."""
    athena = clients.get_client('athena', region)
    workgroups = []
    account_id = None

    for page in iter_pages("Athena ListWorkGroups", athena.list_work_groups, 'NextToken', 'NextToken'):
        for group in page.get('WorkGroups', []):
            name = group.get('Name', '')
            if account_id is None:
                sts = clients.get_client('sts', region)
                identity = _best_effort(sts.get_caller_identity, "STS GetCallerIdentity", default={})
                account_id = identity.get('Account', '')
            tags = []
            if account_id:
                arn = f"arn:aws:athena:{region}:{account_id}:workgroup/{name}"
                tags = _best_effort(
                    lambda: athena.list_tags_for_resource(ResourceARN=arn).get('Tags', []),
                    f"Athena ListTagsForResource {name}",
                    default=[],
                )
            workgroups.append(AthenaWorkgroup(
                name=name,
                state=group.get('State', NA),
                description=group.get('Description') or NA,
                engine_version=group.get('EngineVersion', {}).get('EffectiveEngineVersion', NA),
                creation_time=to_iso(group.get('CreationTime')),
                tags=tags_to_dict(tags),
            ))

    logger.info(f"[{region}] Found {len(workgroups)} Athena workgroups")
    return workgroups


EMR_ACTIVE_STATES = ['STARTING', 'BOOTSTRAPPING', 'RUNNING', 'WAITING']


def describe_emr_clusters(clients: ClientCache, region: str) -> List[EmrCluster]:
    """Describe active EMR clusters. Running instance counts are best effort."""
    emr = clients.get_client('emr', region)

    summaries = []
    for page in iter_pages(
        "EMR ListClusters", emr.list_clusters, 'Marker', 'Marker', ClusterStates=EMR_ACTIVE_STATES
    ):
        summaries.extend(page.get('Clusters', []))

    clusters = []
    for summary in summaries:
        cluster_id = summary.get('Id', '')
        try:
            cluster = execute_with_retry(
                lambda: emr.describe_cluster(ClusterId=cluster_id), f"EMR DescribeCluster {cluster_id}"
            ).get('Cluster', {})
        except InventoryCallError as e:
            logger.debug(f"[{region}] Failed to describe EMR cluster {cluster_id}: {e}")
            continue

        groups = _best_effort(
            lambda: emr.list_instance_groups(ClusterId=cluster_id).get('InstanceGroups', []),
            f"EMR ListInstanceGroups {cluster_id}",
            default=[],
        )
        clusters.append(EmrCluster(
            id=cluster_id,
            name=cluster.get('Name') or summary.get('Name') or NA,
            arn=cluster.get('ClusterArn') or summary.get('ClusterArn') or NA,
            status=cluster.get('Status', {}).get('State', NA),
            release_label=cluster.get('ReleaseLabel', NA),
            instance_count=sum(group.get('RunningInstanceCount', 0) for group in groups),
            creation_time=to_iso(cluster.get('Status', {}).get('Timeline', {}).get('CreationDateTime')),
        ))

    logger.info(f"[{region}] Found {len(clusters)} EMR clusters")
    return clusters


# =============================================================================
# Collector Registry
# =============================================================================

# Run order within a region
REGIONAL_COLLECTORS: List[CollectorSpec] = [
    CollectorSpec("EC2", describe_ec2_instances),
    CollectorSpec("RDS", describe_rds_instances),
    CollectorSpec("VPC", describe_vpcs),
    CollectorSpec("Subnet", describe_subnets),
    CollectorSpec("SecurityGroup", describe_security_groups),
    CollectorSpec("LoadBalancer", describe_load_balancers),
    CollectorSpec("Lambda", describe_lambda_functions),
    CollectorSpec("DynamoDB", describe_dynamodb_tables),
    CollectorSpec("ECS", describe_ecs_clusters),
    CollectorSpec("EKS", describe_eks_clusters),
    CollectorSpec("Redshift", describe_redshift_clusters),
    CollectorSpec("Glue", describe_glue_jobs),
    CollectorSpec("OpenSearch", describe_opensearch_domains),
    CollectorSpec("KMS", describe_kms_keys),
    CollectorSpec("CloudWatch", describe_cloudwatch_alarms),
    CollectorSpec("SecretsManager", describe_secrets),
    CollectorSpec("ECR", describe_ecr_repositories),
    CollectorSpec("InternetGateway", describe_internet_gateways),
    CollectorSpec("NatGateway", describe_nat_gateways),
    CollectorSpec("ElasticIP", describe_elastic_ips),
    CollectorSpec("VpnGateway", describe_vpn_gateways),
    CollectorSpec("VpnConnection", describe_vpn_connections),
    CollectorSpec("TransitGateway", describe_transit_gateways),
    CollectorSpec("VpcEndpoint", describe_vpc_endpoints),
    CollectorSpec("VpcPeering", describe_vpc_peering_connections),
    CollectorSpec("NetworkAcl", describe_network_acls),
    CollectorSpec("RouteTable", describe_route_tables),
    CollectorSpec("NetworkInterface", describe_network_interfaces),
    CollectorSpec("EBSVolume", describe_ebs_volumes),
    CollectorSpec("ElastiCache", describe_elasticache_clusters),
    CollectorSpec("SQSQueue", describe_sqs_queues),
    CollectorSpec("SNSTopic", describe_sns_topics),
    CollectorSpec("AutoScalingGroup", describe_auto_scaling_groups),
    CollectorSpec("CloudFormationStack", describe_cloudformation_stacks),
    CollectorSpec("EFS", describe_efs_file_systems),
    CollectorSpec("APIGateway", describe_api_gateways),
    CollectorSpec("StepFunction", describe_step_functions),
    CollectorSpec("EventBridgeRule", describe_eventbridge_rules),
    CollectorSpec("CloudTrail", describe_cloudtrail_trails),
    CollectorSpec("SSMParameter", describe_ssm_parameters),
    CollectorSpec("BackupVault", describe_backup_vaults),
    CollectorSpec("CognitoUserPool", describe_cognito_user_pools),
    CollectorSpec("WAFWebACL", describe_waf_web_acls),
    CollectorSpec("GuardDutyDetector", describe_guardduty_detectors),
    CollectorSpec("KinesisStream", describe_kinesis_streams),
    CollectorSpec("AthenaWorkgroup", describe_athena_workgroups),
    CollectorSpec("EMRCluster", describe_emr_clusters),
]

# Collected once per account; IAMUser and IAMRole share the "iam" flag
GLOBAL_COLLECTORS: List[GlobalCollectorSpec] = [
    GlobalCollectorSpec("S3", describe_s3_buckets, 's3'),
    GlobalCollectorSpec("CloudFront", describe_cloudfront_distributions, 'cloudfront'),
    GlobalCollectorSpec("Route53", describe_route53_zones, 'route53'),
    GlobalCollectorSpec("IAMUser", describe_iam_users, 'iam'),
    GlobalCollectorSpec("IAMRole", describe_iam_roles, 'iam'),
    GlobalCollectorSpec("ControlTower", describe_control_tower_guardrails, 'control_tower', GLOBAL_ENTRY_REGION),
    GlobalCollectorSpec("SCP", describe_service_control_policies, 'scp'),
    GlobalCollectorSpec("ConfigRules", describe_config_rules, 'config_rules', GLOBAL_ENTRY_REGION),
]

SERVICE_NAMES = [spec.name for spec in REGIONAL_COLLECTORS] + [spec.name for spec in GLOBAL_COLLECTORS]


# =============================================================================
# Argument Resolution
# =============================================================================

def parse_regions(value: Optional[str], option: str = "--regions") -> Optional[List[str]]:
    """
    Split a comma-separated region list.

    Raises:
        ConfigError: a region is not a known AWS region
    """
    if not value:
        return None
    regions = [r.strip() for r in value.split(',') if r.strip()]
    invalid = [r for r in regions if r not in VALID_REGIONS]
    if invalid:
        raise ConfigError(
            f"Invalid region(s) in {option}: {', '.join(invalid)}. "
            f"Must be a comma-separated list of AWS regions (e.g., us-east-1,us-west-2)"
        )
    return regions or None


def parse_services(value: Optional[str]) -> Optional[Set[str]]:
    """
    Split a comma-separated service list into lower-case names.

    Raises:
        ConfigError: a name matches no collector
    """
    if not value:
        return None
    selected = {s.strip().lower() for s in value.split(',') if s.strip()}
    valid = {name.lower() for name in SERVICE_NAMES} | {SERVICE_ALL}
    invalid = sorted(selected - valid)
    if invalid:
        raise ConfigError(
            f"Invalid service name(s): {', '.join(invalid)}. "
            f"Valid services: {SERVICE_ALL}, {', '.join(name.lower() for name in SERVICE_NAMES)}"
        )
    return selected or None


def should_run(service: str, selected: Optional[Set[str]]) -> bool:
    """True when no filter is given, the filter contains "all", or it names the service."""
    return selected is None or SERVICE_ALL in selected or service.lower() in selected


def validate_args(args) -> None:
    """
    Check option values and combinations after config merging.

    Raises:
        ConfigError: on any invalid value
    """
    sources = [opt for opt, value in (
        ('--profile', args.profile), ('--json', args.json_file), ('--csv', args.csv_file)
    ) if value]
    if len(sources) > 1:
        raise ConfigError(f"Use only one of --profile, --json or --csv (got {', '.join(sources)})")

    if args.report_mode and args.report_mode not in REPORT_MODES:
        raise ConfigError(f"Invalid report mode '{args.report_mode}'. Valid modes: {', '.join(REPORT_MODES)}")
    if args.export_format not in EXPORT_FORMATS:
        raise ConfigError(
            f"Invalid export format '{args.export_format}'. Valid formats: {', '.join(EXPORT_FORMATS)}"
        )

    parse_regions(args.regions, "--regions")
    parse_regions(args.limit_regions, "--limit-regions")
    parse_services(args.services)


def resolve_accounts(args) -> List[AccountConfig]:
    """
    Accounts to inventory: from --json, --csv or --profile, else the default
    credentials named by their account ID.

    Raises:
        ConfigError: unreadable account file, or no credentials at all
    """
    if args.json_file:
        return parse_json_accounts(args.json_file)
    if args.csv_file:
        return read_csv_accounts(args.csv_file)
    if args.profile:
        logger.info(f"Using AWS profile: {args.profile}")
        return [AccountConfig(name=args.profile)]

    try:
        account_id = get_account_id(get_session())
    except InventoryCallError as e:
        if e.category == 'credential':
            raise ConfigError(f"No AWS credentials available: {e}") from e
        logger.warning(f'Could not fetch AWS account ID, using "{LOCAL_ACCOUNT}" as account name: {e}')
        return [AccountConfig(name=LOCAL_ACCOUNT)]

    logger.info(f"Using AWS account ID: {account_id}")
    return [AccountConfig(name=account_id)]


def resolve_regions(account: AccountConfig, cli_regions: Optional[List[str]]) -> List[str]:
    """Account override first, then --regions, then us-east-1."""
    if account.region:
        return [account.region]
    if cli_regions:
        return list(cli_regions)
    return [DEFAULT_REGION]


# =============================================================================
# Per-service Export
# =============================================================================

def export_service_region(
    service: str,
    descriptors: List[ResourceDescriptor],
    out_dir: str,
    region_label: str,
    date_stamp: str,
    account_name: str,
    buffer: RegionLogBuffer
) -> Optional[str]:
    """
    Write one service's descriptors for one region as CSV.

    Nothing is written for an empty result. File name:
    {Service}-{region|global}-{YYYYMMDD}-{account}.csv

    Returns:
        Path written, or None
    """
    if not descriptors:
        return None
    filepath = os.path.join(out_dir, f"{service}-{region_label}-{date_stamp}-{account_name}.csv")
    write_csv([d.to_dict() for d in descriptors], filepath)
    buffer.log(f"Wrote {filepath}")
    return filepath


def export_account(
    clients: ClientCache,
    account: AccountConfig,
    regions: List[str],
    selected: Optional[Set[str]],
    output_dir: str,
    date_stamp: str,
    silent: bool = False
) -> Tuple[List[str], bool]:
    """
    Run the selected collectors for one account and write per-service CSVs.

    Global services are described once, alongside the first region, and
    written to that region's directory.

    Returns:
        (output directories, had_errors)
    """
    out_dirs = []
    had_errors = False
    state = GlobalServicesState()

    with ProgressTracker("Inventory", total_regions=len(regions), show_progress=not silent) as tracker:
        tracker.start_account(account.name)
        for region in regions:
            tracker.start_region(region)
            out_dir = os.path.join(output_dir, f"{account.name}-{region}-{date_stamp}")
            os.makedirs(out_dir, exist_ok=True)
            out_dirs.append(out_dir)
            buffer = RegionLogBuffer()
            region_failed = False

            for spec in REGIONAL_COLLECTORS:
                if not should_run(spec.name, selected):
                    continue
                tracker.update_task(f"{spec.name}...")
                try:
                    descriptors = spec.describe(clients, region)
                except Exception as e:
                    report_failure(f"Failed to describe {spec.name} for {account.name} ({region}): {e}", silent)
                    region_failed = True
                    continue
                export_service_region(spec.name, descriptors, out_dir, region, date_stamp, account.name, buffer)
                tracker.add_resources(len(descriptors))

            attempted = set()
            for spec in GLOBAL_COLLECTORS:
                if getattr(state, spec.flag) or not should_run(spec.name, selected):
                    continue
                attempted.add(spec.flag)
                tracker.update_task(f"{spec.name} (global)...")
                try:
                    if spec.entry_region:
                        descriptors = spec.describe(clients, spec.entry_region)
                    else:
                        descriptors = spec.describe(clients)
                except Exception as e:
                    report_failure(f"Failed to describe {spec.name} for {account.name}: {e}", silent)
                    region_failed = True
                    continue
                export_service_region(
                    spec.name, descriptors, out_dir, GLOBAL_REGION, date_stamp, account.name, buffer
                )
                tracker.add_resources(len(descriptors))
            for flag in attempted:
                setattr(state, flag, True)

            had_errors = had_errors or region_failed
            tracker.complete_region(failed=region_failed)
            if not silent:
                buffer.flush("Notes")
        tracker.complete_account()

    return out_dirs, had_errors


# =============================================================================
# Run
# =============================================================================

def run_inventory(args, today: Optional[date] = None) -> int:
    """
    Inventory every resolved account, per-service export or consolidated report.

    Returns:
        Process exit code. Collector failures never change it; an account
        failure does only with --stop-on-error.

    Raises:
        ConfigError: invalid options, unreadable account file or no credentials
    """
    validate_args(args)
    accounts = resolve_accounts(args)
    cli_regions = parse_regions(args.regions)
    report_regions = parse_regions(args.limit_regions, "--limit-regions")
    selected = parse_services(args.services)
    date_stamp = get_date_stamp(today)

    clients: Optional[ClientCache] = None
    outputs: List[str] = []
    had_errors = False

    for account in accounts:
        if not args.silent:
            print(f"\nProcessing account: {account.name}")
        try:
            session = session_for_account(account)
            if clients is None:
                clients = ClientCache(session)
            else:
                clients.refresh(session)

            if args.report_mode:
                account_id = account.name if ACCOUNT_ID_PATTERN.match(account.name) else get_account_id(session)
                regions = [account.region] if account.region else report_regions
                result = generate_inventory(
                    clients,
                    account_id,
                    args.report_mode,
                    regions,
                    REGIONAL_COLLECTORS,
                    GLOBAL_COLLECTORS,
                    export_format=args.export_format,
                    output_dir=args.output,
                    silent=args.silent,
                    today=today,
                )
                outputs.extend(result.output_files)
                had_errors = had_errors or result.had_errors
            else:
                out_dirs, failed = export_account(
                    clients,
                    account,
                    resolve_regions(account, cli_regions),
                    selected,
                    args.output,
                    date_stamp,
                    silent=args.silent,
                )
                outputs.extend(out_dirs)
                had_errors = had_errors or failed
        except Exception as e:
            if args.stop_on_error:
                logger.error(f"Error: {e}")
                return 1
            logger.error(f"Error processing account {account.name}: {e}")
            had_errors = True

    if args.silent:
        print("\nInventory generated:")
        for path in outputs:
            print(f"  - {path}")
    if had_errors:
        print("Note: Inventory of some services was incomplete due to errors.", file=sys.stderr)
    if not args.silent:
        print("\nAll done!")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description='AWS Inventory - Multi-service Resource Collector',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Current credentials, us-east-1, all services
  python3 aws_inventory.py

  # Named profile and regions
  python3 aws_inventory.py --profile prod --regions us-east-1,us-west-2

  # Selected services only
  python3 aws_inventory.py --services ec2,rds,s3,iamuser

  # Accounts from a file (JSON {"accounts": [...]} or CSV "account,region")
  python3 aws_inventory.py --json accounts.json
  python3 aws_inventory.py --csv accounts.csv --stop-on-error

Consolidated Report Examples:
  # Basic report (Type,Name,Region,ARN) across all enabled regions
  python3 aws_inventory.py --init

  # Security report for two regions, CSV and XLSX
  python3 aws_inventory.py --init-security --limit-regions us-east-1,us-west-2 --export-format both

  # Cost report written to a custom directory
  python3 aws_inventory.py --init-cost -o ./reports/
"""
    )

    # Basic options
    parser.add_argument('--config', '-c', help='Path to YAML config file')
    parser.add_argument('--generate-config', action='store_true',
                        help='Generate a sample config file and exit')
    parser.add_argument('--profile', '--account', dest='profile',
                        help='AWS profile name (default: current credentials)')
    parser.add_argument('--regions', help=f'Comma-separated list of regions (default: {DEFAULT_REGION})')
    parser.add_argument('--services', help='Comma-separated list of services, or "all" (default: all)')
    parser.add_argument('--output', '-o', default=None,
                        help=f'Output directory (default: {DEFAULT_OUTPUT_DIR})')
    parser.add_argument('--log-level', default=None, help='Logging level (default: INFO)')
    parser.add_argument('--silent', action='store_true',
                        help='Only print errors and the list of generated outputs')

    # Multi-account options
    parser.add_argument('--json', dest='json_file', metavar='FILE',
                        help='JSON file with an "accounts" array of {"name", "region"} objects')
    parser.add_argument('--csv', dest='csv_file', metavar='FILE',
                        help='CSV file with an "account,region" header')
    parser.add_argument('--stop-on-error', action='store_true',
                        help='Stop at the first account that fails (exit code 1)')

    # Consolidated report options
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument('--init', dest='report_mode', action='store_const', const='basic',
                            help='Consolidated report: Type, Name, Region, ARN')
    mode_group.add_argument('--init-detailed', dest='report_mode', action='store_const', const='detailed',
                            help='Consolidated report with state, tags, dates, public access and size')
    mode_group.add_argument('--init-security', dest='report_mode', action='store_const', const='security',
                            help='Consolidated report with encryption, public access, VPC and version status')
    mode_group.add_argument('--init-cost', dest='report_mode', action='store_const', const='cost',
                            help='Consolidated report with size, creation date and last activity')
    parser.add_argument('--limit-regions',
                        help='Comma-separated regions for consolidated reports (default: all enabled regions)')
    parser.add_argument('--export-format', default=None, choices=EXPORT_FORMATS,
                        help='Consolidated report format (default: csv)')

    args = parser.parse_args()

    # Handle --generate-config
    if args.generate_config:
        print(generate_sample_config())
        sys.exit(0)

    setup_logging(args.log_level or 'INFO', silent=args.silent)

    try:
        load_config(args)
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    args.output = args.output or DEFAULT_OUTPUT_DIR
    args.log_level = args.log_level or 'INFO'
    args.export_format = args.export_format or 'csv'

    # Reconfigure with the merged level and a log file beside the output
    setup_logging(args.log_level, output_dir=args.output, silent=args.silent)

    try:
        exit_code = run_inventory(args)
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == '__main__':
    main()
