"""
Mode projector for the consolidated inventory report.

Each report mode has a fixed column list. header() and row() walk the same
list, so every row has exactly as many fields as the header no matter
which optional fields a record carries.
"""
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple

from .constants import (
    MODE_BASIC,
    MODE_COST,
    MODE_DETAILED,
    MODE_SECURITY,
    NOT_AVAILABLE,
    REPORT_MODES,
)
from .models import InventoryRecord


class ReportMode(str, Enum):
    """Report modes; members compare equal to their plain string values."""
    BASIC = MODE_BASIC
    DETAILED = MODE_DETAILED
    SECURITY = MODE_SECURITY
    COST = MODE_COST


# (column header, InventoryRecord attribute)
Column = Tuple[str, str]

BASE_COLUMNS: List[Column] = [
    ('Type', 'type'),
    ('Name', 'name'),
    ('Region', 'region'),
    ('ARN', 'arn'),
]

MODE_COLUMNS: Dict[str, List[Column]] = {
    MODE_BASIC: BASE_COLUMNS,
    MODE_DETAILED: BASE_COLUMNS + [
        ('State', 'state'),
        ('Tags', 'tags'),
        ('CreatedDate', 'created_date'),
        ('PublicAccess', 'public_access'),
        ('Size', 'size'),
    ],
    MODE_SECURITY: BASE_COLUMNS + [
        ('State', 'state'),
        ('Encrypted', 'encrypted'),
        ('PublicAccess', 'public_access'),
        ('VPC', 'vpc_id'),
        ('VersionStatus', 'version_status'),
    ],
    MODE_COST: BASE_COLUMNS + [
        ('State', 'state'),
        ('Size', 'size'),
        ('CreatedDate', 'created_date'),
        ('LastActivity', 'last_activity'),
    ],
}


def columns(mode: str) -> List[Column]:
    """Return the column list for a report mode."""
    if mode not in MODE_COLUMNS:
        raise ValueError(f"Unknown report mode '{mode}'. Valid modes: {', '.join(REPORT_MODES)}")
    return MODE_COLUMNS[mode]


def escape_csv(value: Any) -> str:
    """
    Render one field.

    Absent or empty values become the N/A sentinel. Values containing a
    comma, quote or line break are quoted with inner quotes doubled.
    """
    if value is None or value == '':
        return NOT_AVAILABLE
    text = str(value)
    if any(ch in text for ch in (',', '"', '\n', '\r')):
        return '"' + text.replace('"', '""') + '"'
    return text


def header(mode: str) -> str:
    """Header line for a report mode, e.g. "Type,Name,Region,ARN"."""
    return ','.join(name for name, _attr in columns(mode))


def row_values(record: InventoryRecord, mode: str) -> List[str]:
    """Unescaped field values for one record, N/A for absent fields."""
    values = []
    for _name, attr in columns(mode):
        value = getattr(record, attr)
        values.append(NOT_AVAILABLE if value is None or value == '' else str(value))
    return values


def row(record: InventoryRecord, mode: str) -> str:
    """Delimited data line for one record."""
    return ','.join(escape_csv(getattr(record, attr)) for _name, attr in columns(mode))


def render(records: Iterable[InventoryRecord], mode: str) -> str:
    """Full CSV text: header plus one line per record."""
    lines = [header(mode)]
    lines.extend(row(record, mode) for record in records)
    return '\n'.join(lines) + '\n'


def to_table(records: Iterable[InventoryRecord], mode: str) -> List[List[str]]:
    """Header and rows as a 2D list, for spreadsheet output."""
    table = [[name for name, _attr in columns(mode)]]
    table.extend(row_values(record, mode) for record in records)
    return table
