"""
Constants for the AWS inventory tool.

Magic strings and numbers shared across collectors, the consolidation
engine and the CLI.
"""

# =============================================================================
# Byte/Size Conversion Constants
# =============================================================================

BYTES_PER_MB = 1024 ** 2
BYTES_PER_GB = 1024 ** 3

# =============================================================================
# Retry / Client Defaults
# =============================================================================

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_BASE_DELAY_MS = 1000
TRANSPORT_MAX_ATTEMPTS = 3

DEFAULT_REGION = "us-east-1"

# Services whose clients are region-independent and routed through us-east-1
GLOBAL_CLIENT_SERVICES = frozenset({'iam', 'cloudfront', 'route53', 'organizations'})

# API entry point for global resources that still need a region parameter
GLOBAL_ENTRY_REGION = "us-east-1"

GLOBAL_REGION = "global"

# Account name meaning "default credentials"
LOCAL_ACCOUNT = "local"

VALID_REGIONS = (
    "us-east-1", "us-east-2", "us-west-1", "us-west-2",
    "af-south-1",
    "ap-east-1", "ap-south-1", "ap-south-2",
    "ap-northeast-1", "ap-northeast-2", "ap-northeast-3",
    "ap-southeast-1", "ap-southeast-2", "ap-southeast-3", "ap-southeast-4",
    "ca-central-1",
    "eu-central-1", "eu-central-2",
    "eu-west-1", "eu-west-2", "eu-west-3",
    "eu-south-1", "eu-south-2", "eu-north-1",
    "me-south-1", "me-central-1",
    "sa-east-1",
    "us-gov-east-1", "us-gov-west-1",
)

# =============================================================================
# Output
# =============================================================================

NOT_AVAILABLE = "N/A"

DEFAULT_OUTPUT_DIR = "inventory-output"

EXPORT_FORMATS = ('csv', 'xlsx', 'both')

MODE_BASIC = "basic"
MODE_DETAILED = "detailed"
MODE_SECURITY = "security"
MODE_COST = "cost"

REPORT_MODES = (MODE_BASIC, MODE_DETAILED, MODE_SECURITY, MODE_COST)

XLSX_MAX_COLUMN_WIDTH = 50

# =============================================================================
# Resource Types (consolidated report "Type" column)
# =============================================================================

TYPE_EC2 = "EC2"
TYPE_RDS = "RDS"
TYPE_VPC = "VPC"
TYPE_SUBNET = "Subnet"
TYPE_SECURITY_GROUP = "SecurityGroup"
TYPE_LOAD_BALANCER = "LoadBalancer"
TYPE_LAMBDA = "Lambda"
TYPE_DYNAMODB = "DynamoDB"
TYPE_ECS = "ECS"
TYPE_EKS = "EKS"
TYPE_REDSHIFT = "Redshift"
TYPE_GLUE = "Glue"
TYPE_OPENSEARCH = "OpenSearch"
TYPE_KMS = "KMS"
TYPE_CLOUDWATCH_ALARM = "CloudWatch"
TYPE_SECRET = "SecretsManager"
TYPE_ECR = "ECR"
TYPE_INTERNET_GATEWAY = "InternetGateway"
TYPE_NAT_GATEWAY = "NatGateway"
TYPE_ELASTIC_IP = "ElasticIP"
TYPE_VPN_GATEWAY = "VpnGateway"
TYPE_VPN_CONNECTION = "VpnConnection"
TYPE_TRANSIT_GATEWAY = "TransitGateway"
TYPE_VPC_ENDPOINT = "VpcEndpoint"
TYPE_VPC_PEERING = "VpcPeering"
TYPE_NETWORK_ACL = "NetworkAcl"
TYPE_ROUTE_TABLE = "RouteTable"
TYPE_NETWORK_INTERFACE = "NetworkInterface"
TYPE_EBS_VOLUME = "EBSVolume"
TYPE_ELASTICACHE = "ElastiCache"
TYPE_SQS_QUEUE = "SQSQueue"
TYPE_SNS_TOPIC = "SNSTopic"
TYPE_AUTO_SCALING_GROUP = "AutoScalingGroup"
TYPE_CLOUDFORMATION_STACK = "CloudFormationStack"
TYPE_EFS = "EFS"
TYPE_API_GATEWAY = "APIGateway"
TYPE_STEP_FUNCTION = "StepFunction"
TYPE_EVENTBRIDGE_RULE = "EventBridgeRule"
TYPE_CLOUDTRAIL = "CloudTrail"
TYPE_SSM_PARAMETER = "SSMParameter"
TYPE_BACKUP_VAULT = "BackupVault"
TYPE_COGNITO_USER_POOL = "CognitoUserPool"
TYPE_WAF_WEB_ACL = "WAFWebACL"
TYPE_GUARDDUTY_DETECTOR = "GuardDutyDetector"
TYPE_KINESIS_STREAM = "KinesisStream"
TYPE_ATHENA_WORKGROUP = "AthenaWorkgroup"
TYPE_EMR_CLUSTER = "EMRCluster"

# Global
TYPE_S3 = "S3"
TYPE_CLOUDFRONT = "CloudFront"
TYPE_ROUTE53 = "Route53"
TYPE_IAM_USER = "IAMUser"
TYPE_IAM_ROLE = "IAMRole"
TYPE_CONTROL_TOWER = "ControlTowerGuardrail"
TYPE_SCP = "ServiceControlPolicy"
TYPE_CONFIG_RULE = "ConfigRule"

# =============================================================================
# Service Filter Names (--services)
# =============================================================================

SERVICE_ALL = "all"
