"""
AWS Inventory shared library.
"""
# Import constants module for easy access
from . import constants
from .accounts import AccountConfig, parse_csv_accounts, parse_json_accounts, read_csv_accounts
from .backoff import (
    InventoryCallError,
    classify_error,
    execute_with_retry,
    iter_pages,
)
from .clients import ClientCache
from .config import ConfigError, generate_sample_config, load_config
from .constants import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REGION,
    DEFAULT_RETRY_ATTEMPTS,
    GLOBAL_REGION,
    NOT_AVAILABLE,
    REPORT_MODES,
)
from .consolidate import (
    CollectorSpec,
    GlobalCollectorSpec,
    GlobalServicesState,
    InventoryResult,
    generate_inventory,
    to_record,
)
from .models import InventoryRecord, ResourceDescriptor
from .projector import ReportMode, header, render, row
from .utils import (
    ProgressTracker,
    RegionLogBuffer,
    setup_logging,
    tags_to_dict,
    write_csv,
)

__all__ = [
    # Constants
    'constants',
    'DEFAULT_OUTPUT_DIR',
    'DEFAULT_REGION',
    'DEFAULT_RETRY_ATTEMPTS',
    'GLOBAL_REGION',
    'NOT_AVAILABLE',
    'REPORT_MODES',
    # Accounts / config
    'AccountConfig',
    'parse_json_accounts',
    'parse_csv_accounts',
    'read_csv_accounts',
    'ConfigError',
    'load_config',
    'generate_sample_config',
    # Backoff / clients
    'InventoryCallError',
    'classify_error',
    'execute_with_retry',
    'iter_pages',
    'ClientCache',
    # Models
    'InventoryRecord',
    'ResourceDescriptor',
    # Consolidation / projection
    'CollectorSpec',
    'GlobalCollectorSpec',
    'GlobalServicesState',
    'InventoryResult',
    'generate_inventory',
    'to_record',
    'ReportMode',
    'header',
    'row',
    'render',
    # Utils
    'ProgressTracker',
    'RegionLogBuffer',
    'tags_to_dict',
    'write_csv',
    'setup_logging',
]
