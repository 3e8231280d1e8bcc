"""
Utility functions for the AWS inventory tool.

Logging Level Standards:
------------------------
- ERROR: A collector failed for a whole (service, region) pair
         "[us-east-1] Failed to describe EC2 instances: ..."
- WARNING: Retries and partial failures
           "Retrying EC2 DescribeInstances in 2.0 seconds..."
- INFO: Progress messages, resource counts
        "[us-east-1] Found 42 EC2 instances"
- DEBUG: Per-item failures that don't affect overall collection
         "Failed to describe trail {name}: {e}"
"""
import csv
import io
import json
import logging
import os
import sys
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .constants import NOT_AVAILABLE
from .spreadsheet import table_to_xlsx

logger = logging.getLogger(__name__)


# =============================================================================
# Progress Tracking
# =============================================================================

class RegionLogBuffer:
    """
    Holds informational lines while a region is being collected.

    Lines written during collection would tear the progress bar, so they are
    buffered and flushed once the region completes. Each region gets its own
    buffer.

    Usage:
        buffer = RegionLogBuffer(sink=print)
        buffer.log("Wrote EC2-us-east-1.csv")
        ...
        buffer.flush("Notes")
    """

    def __init__(self, sink: Optional[Callable[[str], None]] = None):
        self.sink = sink or print
        self.lines: List[str] = []

    def log(self, line: str) -> None:
        self.lines.append(line)

    def flush(self, title: Optional[str] = None) -> None:
        """Emit buffered lines through the sink and clear the buffer."""
        if not self.lines:
            return
        if title:
            self.sink(f"\n{title}:")
        for line in self.lines:
            self.sink(f"  {line}")
        self.lines = []

    def __len__(self) -> int:
        return len(self.lines)


class ProgressTracker:
    """
    Region-by-region progress for one account's inventory.

    Draws a rich progress bar on a terminal; prints one line per region
    otherwise. With show_progress=False (--silent) it only counts.

    Usage:
        with ProgressTracker("Inventory", total_regions=len(regions)) as tracker:
            tracker.start_account(account_id)
            for region in regions:
                tracker.start_region(region)
                tracker.update_task("EC2...")
                tracker.add_resources(len(instances))
                tracker.complete_region()
            tracker.complete_account()
    """

    def __init__(self, title: str, total_regions: int = 0, show_progress: bool = True):
        self.title = title
        self.total_regions = total_regions
        self.show_progress = show_progress
        self._use_rich = show_progress and sys.stdout.isatty()

        self.account = ""
        self.region = ""
        self.completed_regions = 0
        self.failed_regions = 0
        self.total_resources = 0

        self._console: Optional[Console] = None
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def __enter__(self):
        if self._use_rich:
            self._console = Console()
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=self._console,
            )
            self._task = self._progress.add_task(self.title, total=self.total_regions or 1)
            self._progress.start()
        elif self.show_progress:
            print(f"\n{self.title}: {self.total_regions} region(s)")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._progress is not None:
            self._progress.stop()
        if self.show_progress:
            self._print_summary()
        return False

    def _describe(self, text: str) -> None:
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, description=text)

    def start_account(self, account: str) -> None:
        self.account = account
        self._describe(f"{self.title} {account}")
        if not self._use_rich and self.show_progress:
            print(f"Account: {account}")

    def start_region(self, region: str) -> None:
        self.region = region
        self._describe(f"{self.title} [{region}]")
        if not self._use_rich and self.show_progress:
            print(f"  [{region}] Collecting...")

    def update_task(self, task_description: str) -> None:
        """Show which collector is running in the current region."""
        self._describe(f"{self.title} [{self.region}] {task_description}")

    def add_resources(self, count: int) -> None:
        self.total_resources += count

    def complete_region(self, failed: bool = False) -> None:
        self.completed_regions += 1
        self.failed_regions += int(failed)
        if self._progress is not None and self._task is not None:
            self._progress.advance(self._task)
        elif self.show_progress:
            outcome = "finished with errors" if failed else "done"
            print(f"  [{self.region}] {outcome}, {self.total_resources:,} resources so far")

    def complete_account(self) -> None:
        self._describe(f"{self.title} {self.account} complete")

    def _print_summary(self) -> None:
        rows = [("Regions", str(self.completed_regions))]
        if self.failed_regions:
            rows.append(("Regions with errors", str(self.failed_regions)))
        rows.append(("Resources", f"{self.total_resources:,}"))

        if self._console is not None:
            table = Table(show_header=False)
            table.add_column("Metric", style="cyan")
            table.add_column("Value", style="green")
            for label, value in rows:
                table.add_row(label, value)
            self._console.print(Panel(table, title=f"{self.title} {self.account}".strip()))
            return

        for label, value in rows:
            print(f"  {label + ':':<21}{value}")


# =============================================================================
# Time Helpers
# =============================================================================

def get_date_stamp(today: Optional[date] = None) -> str:
    """YYYYMMDD stamp used in output file names."""
    return (today or datetime.now(timezone.utc).date()).strftime('%Y%m%d')


def to_iso(value: Any) -> str:
    """Render an API timestamp as ISO-8601 text, N/A when absent."""
    if value is None or value == '':
        return NOT_AVAILABLE
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
            return value.isoformat().replace('+00:00', 'Z')
        return value.isoformat()
    if isinstance(value, (int, float)):
        # Epoch seconds (e.g. SSM/Cognito in some SDK versions)
        return datetime.fromtimestamp(value, tz=timezone.utc).isoformat().replace('+00:00', 'Z')
    return str(value)


# =============================================================================
# Tags / Names
# =============================================================================

def tags_to_dict(tags: Any) -> Dict[str, str]:
    """
    Convert an AWS tag list to a dictionary.

    Supports:
    - EC2/RDS format: [{"Key": "Name", "Value": "my-instance"}]
    - lower-case format (ECS, EKS list_tags): [{"key": "Name", "value": "x"}]
    - Plain dict (Lambda, API Gateway): {"Name": "my-function"}
    """
    if not tags:
        return {}

    if isinstance(tags, dict):
        return {str(k): str(v) for k, v in tags.items()}

    if isinstance(tags, list):
        result = {}
        for tag in tags:
            key = tag.get("Key", tag.get("key", ""))
            if key:
                result[key] = tag.get("Value", tag.get("value", ""))
        return result

    return {}


def get_name_from_tags(tags: Dict[str, str], resource_id: str = "") -> str:
    """Get name from tags, falling back to resource ID, then N/A."""
    return tags.get("Name", tags.get("name", resource_id)) or NOT_AVAILABLE


# =============================================================================
# Logging
# =============================================================================

def setup_logging(level: str = "INFO", output_dir: Optional[str] = None, silent: bool = False) -> logging.Logger:
    """
    Setup logging configuration with console and optional file output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        output_dir: If provided, also write logs to a file in this directory
        silent: Only errors reach the console; the log file keeps full detail

    Returns:
        Logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.ERROR if silent else numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        timestamp = datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')
        log_file = os.path.join(output_dir, f"inventory_log_{timestamp}.log")

        file_handler = logging.FileHandler(log_file, mode='w')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        root_logger.info(f"Logging to: {log_file}")

    # botocore is chatty at DEBUG
    logging.getLogger('botocore').setLevel(max(numeric_level, logging.INFO))

    return logging.getLogger(__name__)


# =============================================================================
# Output Writers
# =============================================================================

def _open_private(filepath: str):
    """Open a file for writing with owner-only permissions."""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fd = os.open(filepath, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    return os.fdopen(fd, 'w', newline='')


def write_text(text: str, filepath: str) -> None:
    """Write pre-rendered text (e.g. a CSV report) to a file."""
    with _open_private(filepath) as f:
        f.write(text)
    logger.debug(f"Wrote {filepath}")


def _csv_cell(value: Any) -> Any:
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True) if value else NOT_AVAILABLE
    if isinstance(value, list):
        return ';'.join(str(v) for v in value) if value else NOT_AVAILABLE
    if value is None or value == '':
        return NOT_AVAILABLE
    return value


def dicts_to_csv(data: List[Dict], fieldnames: Optional[List[str]] = None) -> str:
    """Render a list of dicts as CSV text. Dict/list cells are flattened."""
    if not data:
        return ''
    if not fieldnames:
        fieldnames = list(data[0].keys())

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction='ignore', lineterminator='\n')
    writer.writeheader()
    for item in data:
        writer.writerow({k: _csv_cell(item.get(k)) for k in fieldnames})
    return output.getvalue()


def write_csv(data: List[Dict], filepath: str, fieldnames: Optional[List[str]] = None) -> None:
    """Write data to CSV file."""
    if not data:
        return
    write_text(dicts_to_csv(data, fieldnames), filepath)


def write_report(
    csv_text: str,
    table: List[List[Any]],
    base_path: str,
    export_format: str = "csv",
    sheet_name: Optional[str] = None
) -> List[str]:
    """
    Write a report as CSV, XLSX or both.

    Args:
        csv_text: Pre-rendered CSV text
        table: The same content as a 2D list (header first), for XLSX
        base_path: Output path without extension
        export_format: "csv", "xlsx" or "both"
        sheet_name: Worksheet title for XLSX output

    Returns:
        List of written file paths
    """
    written = []
    if export_format in ('csv', 'both'):
        csv_path = f"{base_path}.csv"
        write_text(csv_text, csv_path)
        written.append(csv_path)
    if export_format in ('xlsx', 'both'):
        xlsx_path = f"{base_path}.xlsx"
        table_to_xlsx(table, xlsx_path, sheet_name)
        written.append(xlsx_path)
    return written


def print_summary_table(counts: Dict[str, int], title: str = "Resources by Type") -> None:
    """Print a per-type resource count table to the console."""
    console = Console()
    if not counts:
        console.print("No resources found.")
        return

    table = Table(title=title)
    table.add_column("Type", style="cyan")
    table.add_column("Count", justify="right", style="green")

    for resource_type, count in sorted(counts.items()):
        table.add_row(resource_type, f"{count:,}")
    table.add_row("TOTAL", f"{sum(counts.values()):,}", style="bold")

    console.print(table)
