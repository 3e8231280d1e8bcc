"""
XLSX output for inventory tables.
"""
import logging
import os
from typing import Any, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .constants import XLSX_MAX_COLUMN_WIDTH

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF")
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin'),
)


def write_header_row(ws, headers: List[str]) -> None:
    """Write a styled header row in row 1."""
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER


def autosize_columns(ws, table: List[List[Any]]) -> None:
    """Size each column to its longest value plus padding, capped at 50."""
    if not table:
        return
    for col_idx in range(1, len(table[0]) + 1):
        longest = max(
            (len(str(row[col_idx - 1])) for row in table if len(row) >= col_idx and row[col_idx - 1] is not None),
            default=0,
        )
        ws.column_dimensions[get_column_letter(col_idx)].width = min(longest + 2, XLSX_MAX_COLUMN_WIDTH)


def table_to_xlsx(table: List[List[Any]], filepath: str, sheet_name: Optional[str] = None) -> None:
    """
    Write a 2D table to an XLSX file.

    The first row is treated as the header. The file is created with
    owner-only permissions, like the CSV output.

    Args:
        table: Header row followed by data rows
        filepath: Destination path ending in .xlsx
        sheet_name: Worksheet title (default "Inventory")
    """
    if not table:
        raise ValueError("Cannot write an empty table to XLSX")

    wb = Workbook()
    ws = wb.active
    ws.title = (sheet_name or "Inventory")[:31]

    write_header_row(ws, [str(h) for h in table[0]])
    for row in table[1:]:
        ws.append(list(row))
    ws.freeze_panes = "A2"
    autosize_columns(ws, table)

    wb.save(filepath)
    os.chmod(filepath, 0o600)
    logger.debug(f"Wrote {len(table) - 1} rows to {filepath}")
