"""
Static version-support tables for engines and runtimes.

Used by the security report to flag EKS control planes, Lambda runtimes,
RDS engines and ElastiCache engines that are deprecated, in extended
support, or past end of life. Lookups never guess: a version that has no
table entry is reported as Unknown.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

STATUS_CURRENT = "Current"
STATUS_DEPRECATED = "Deprecated"
STATUS_EXTENDED = "Extended Support"
STATUS_EOL = "End of Life"
STATUS_UNKNOWN = "Unknown"


@dataclass(frozen=True)
class VersionInfo:
    """Support status of one version, with an optional end date (YYYY-MM-DD)."""
    status: str
    eol_date: Optional[str] = None


_CURRENT = VersionInfo(STATUS_CURRENT)
_UNKNOWN = VersionInfo(STATUS_UNKNOWN)


def _deprecated(date: str) -> VersionInfo:
    return VersionInfo(STATUS_DEPRECATED, date)


def _extended(date: str) -> VersionInfo:
    return VersionInfo(STATUS_EXTENDED, date)


def _eol(date: str) -> VersionInfo:
    return VersionInfo(STATUS_EOL, date)


# =============================================================================
# Tables
# =============================================================================

EKS_VERSIONS: Dict[str, VersionInfo] = {
    '1.31': _CURRENT,
    '1.30': _CURRENT,
    '1.29': _CURRENT,
    '1.28': _CURRENT,
    '1.27': _deprecated('2025-06-01'),
    '1.26': _eol('2024-06-11'),
    '1.25': _eol('2024-05-01'),
    '1.24': _eol('2024-01-31'),
    '1.23': _eol('2023-10-11'),
}

LAMBDA_RUNTIMES: Dict[str, VersionInfo] = {
    # Python
    'python3.13': _CURRENT,
    'python3.12': _CURRENT,
    'python3.11': _CURRENT,
    'python3.10': _CURRENT,
    'python3.9': _CURRENT,
    'python3.8': _deprecated('2024-10-14'),
    'python3.7': _eol('2023-11-27'),
    'python2.7': _eol('2021-07-15'),
    # Node.js
    'nodejs22.x': _CURRENT,
    'nodejs20.x': _CURRENT,
    'nodejs18.x': _CURRENT,
    'nodejs16.x': _deprecated('2024-06-12'),
    'nodejs14.x': _eol('2023-11-27'),
    'nodejs12.x': _eol('2023-03-31'),
    # Java
    'java21': _CURRENT,
    'java17': _CURRENT,
    'java11': _CURRENT,
    'java8.al2': _CURRENT,
    'java8': _deprecated('2024-07-31'),
    # .NET
    'dotnet8': _CURRENT,
    'dotnet6': _CURRENT,
    'dotnetcore3.1': _eol('2023-04-03'),
    # Ruby
    'ruby3.3': _CURRENT,
    'ruby3.2': _CURRENT,
    'ruby2.7': _eol('2023-12-07'),
    # Custom runtimes
    'provided': _CURRENT,
    'provided.al2': _CURRENT,
    'provided.al2023': _CURRENT,
}

RDS_ENGINE_VERSIONS: Dict[str, Dict[str, VersionInfo]] = {
    'postgres': {
        '16': _CURRENT,
        '15': _CURRENT,
        '14': _CURRENT,
        '13': _CURRENT,
        '12': _deprecated('2025-11-14'),
        '11': _eol('2024-02-29'),
        '10': _eol('2023-01-31'),
    },
    'mysql': {
        '8.4': _CURRENT,
        '8.0': _CURRENT,
        '5.7': _extended('2024-02-29'),
        '5.6': _eol('2021-08-03'),
    },
    'mariadb': {
        '10.11': _CURRENT,
        '10.6': _CURRENT,
        '10.5': _CURRENT,
        '10.4': _deprecated('2024-06-18'),
        '10.3': _eol('2023-05-25'),
    },
    'aurora-mysql': {
        '8.0': _CURRENT,
        '5.7': _extended('2024-10-31'),
    },
    'aurora-postgresql': {
        '16': _CURRENT,
        '15': _CURRENT,
        '14': _CURRENT,
        '13': _CURRENT,
        '12': _deprecated('2025-02-28'),
        '11': _eol('2024-02-29'),
    },
    'sqlserver': {
        '2022': _CURRENT,
        '2019': _CURRENT,
        '2017': _CURRENT,
        '2016': _extended('2026-07-14'),
        '2014': _eol('2024-07-09'),
    },
    'oracle': {
        '19': _CURRENT,
        '12': _extended('2025-03-31'),
        '11': _eol('2020-12-31'),
    },
}

# SQL Server engine versions are reported as "15.00.4316.3.v1"; map the
# major build number to the product year used in the table.
SQLSERVER_MAJOR_TO_YEAR = {
    '16': '2022',
    '15': '2019',
    '14': '2017',
    '13': '2016',
    '12': '2014',
}

ELASTICACHE_ENGINE_VERSIONS: Dict[str, Dict[str, VersionInfo]] = {
    'redis': {
        '7.1': _CURRENT,
        '7.0': _CURRENT,
        '6.2': _CURRENT,
        '6.0': _deprecated('2025-09-30'),
        '5.0.6': _eol('2022-04-30'),
    },
    'memcached': {
        '1.6': _CURRENT,
        '1.5': _CURRENT,
        '1.4': _deprecated('2024-12-31'),
    },
}


# =============================================================================
# Lookups
# =============================================================================

def _candidate_keys(version: str) -> List[str]:
    """Exact version, then major.minor, then major (no duplicates)."""
    parts = version.split('.')
    candidates = [version, '.'.join(parts[:2]), parts[0]]
    seen: List[str] = []
    for candidate in candidates:
        if candidate and candidate not in seen:
            seen.append(candidate)
    return seen


def _lookup(table: Dict[str, VersionInfo], version: str) -> VersionInfo:
    for key in _candidate_keys(version):
        if key in table:
            return table[key]
    return _UNKNOWN


def _normalize_engine(engine: str) -> str:
    engine = (engine or '').lower()
    if engine.startswith('sqlserver'):
        return 'sqlserver'
    if engine.startswith('oracle'):
        return 'oracle'
    return engine


def check_eks_version(version: Optional[str]) -> VersionInfo:
    """Classify an EKS Kubernetes version such as "1.29"."""
    if not version:
        return _UNKNOWN
    return _lookup(EKS_VERSIONS, version)


def check_lambda_runtime(runtime: Optional[str]) -> VersionInfo:
    """Classify a Lambda runtime identifier such as "python3.12"."""
    if not runtime:
        return _UNKNOWN
    if runtime in LAMBDA_RUNTIMES:
        return LAMBDA_RUNTIMES[runtime]
    if runtime.startswith('provided'):
        return _CURRENT
    return _UNKNOWN


def check_rds_version(engine: Optional[str], version: Optional[str]) -> VersionInfo:
    """
    Classify an RDS engine version.

    Args:
        engine: RDS engine name ("postgres", "mysql", "sqlserver-se", ...)
        version: Engine version string ("11.4", "8.0.35", "15.00.4316.3.v1")

    Returns:
        VersionInfo; status is Unknown when the engine or version has no entry
    """
    family = _normalize_engine(engine or '')
    table = RDS_ENGINE_VERSIONS.get(family)
    if not table or not version:
        return _UNKNOWN

    if family == 'sqlserver':
        year = SQLSERVER_MAJOR_TO_YEAR.get(version.split('.')[0])
        return table.get(year, _UNKNOWN) if year else _UNKNOWN

    return _lookup(table, version)


def check_elasticache_version(engine: Optional[str], version: Optional[str]) -> VersionInfo:
    """Classify an ElastiCache engine version (redis or memcached)."""
    table = ELASTICACHE_ENGINE_VERSIONS.get((engine or '').lower())
    if not table or not version:
        return _UNKNOWN
    return _lookup(table, version)


def format_version_status(info: VersionInfo) -> str:
    """Render a VersionInfo for the VersionStatus report column."""
    if info.status == STATUS_CURRENT:
        return STATUS_CURRENT
    if info.status == STATUS_DEPRECATED and info.eol_date:
        return f"Deprecated (EOL {info.eol_date})"
    if info.status == STATUS_EXTENDED and info.eol_date:
        return f"Extended Support (ends {info.eol_date})"
    if info.status == STATUS_EOL and info.eol_date:
        return f"End of Life ({info.eol_date})"
    return info.status

