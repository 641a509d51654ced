"""
Utility functions for the EC2 cost report.

Logging Level Standards:
------------------------
- ERROR: Fatal conditions that abort the run before any report is written
         "Volume vol-0abc not found"
- WARNING: Degraded-but-continue conditions
           "2 instances found with no name tag(s): ..."
- INFO: Progress messages, resource counts
        "Getting EC2 instance descriptions..."
        "Found 42 EC2 instances in 3 groups"
- DEBUG: Per-instance detail
         "i-0abc: 12.34 GB outbound traffic"
"""
import json
import logging
import os
import sys
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .constants import BYTES_PER_GB

if TYPE_CHECKING:
    from rich.progress import TaskID

logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================

class CostReportError(Exception):
    """Base class for fatal conditions.

    Raised anywhere in the core and propagated unchanged to the entry point,
    which is the only place allowed to abort the run.
    """


class InventoryError(CostReportError):
    """An inventory request failed or returned nothing usable."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)


class PaginationNotSupportedError(InventoryError):
    """The provider returned a continuation token."""


class VolumeNotFoundError(CostReportError):
    """A block-device mapping references a volume that was not fetched."""

    def __init__(self, volume_id: str):
        self.volume_id = volume_id
        super().__init__(f"Volume {volume_id} not found")


class UnsupportedVolumeTypeError(CostReportError):
    """A volume uses a storage class with no known price."""

    def __init__(self, volume_type: str, volume_id: str = ""):
        self.volume_type = volume_type
        self.volume_id = volume_id
        where = f" (volume {volume_id})" if volume_id else ""
        super().__init__(f"Volume type {volume_type!r} is not supported{where}")


class UnknownInstanceTypeError(CostReportError):
    """The instance type is missing from the price table."""

    def __init__(self, instance_type: str):
        self.instance_type = instance_type
        super().__init__(f"Did not find cost for instance type {instance_type}")


class MetricsError(CostReportError):
    """A CloudWatch metrics request failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)


# =============================================================================
# Progress Tracking
# =============================================================================

class ProgressTracker:
    """
    Progress display for per-instance work with rich.

    Draws on stderr so the report stream stays clean. Falls back to log
    lines when stderr is not a TTY (e.g., in cron or CI).

    Usage:
        with ProgressTracker("Traffic metrics", total=len(instance_ids)) as tracker:
            for instance_id in instance_ids:
                query(instance_id)
                tracker.advance()
    """

    def __init__(self, description: str, total: int, show_progress: bool = True):
        self.description = description
        self.total = total
        self.completed = 0
        self.show_progress = show_progress and sys.stderr.isatty()

        self._console: Optional[Console] = None
        self._progress: Optional[Progress] = None
        self._task: Optional["TaskID"] = None

    def __enter__(self):
        if self.show_progress:
            self._console = Console(stderr=True)
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=self._console,
                transient=True,
            )
            self._task = self._progress.add_task(self.description, total=self.total)
            self._progress.start()
        else:
            logger.info(f"{self.description}: {self.total} to process")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._progress is not None:
            self._progress.stop()
        if exc_type is None:
            logger.info(f"{self.description}: {self.completed}/{self.total} complete")
        return False

    def advance(self, count: int = 1):
        """Mark items as complete."""
        self.completed += count
        if self._progress is not None:
            assert self._task is not None
            self._progress.update(self._task, advance=count)


# =============================================================================
# Helpers
# =============================================================================

def generate_run_id() -> str:
    """Generate a unique run ID."""
    return f"{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}-{str(uuid.uuid4())[:8]}"


def get_timestamp() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def bytes_to_gb(bytes_value: float) -> float:
    """Convert bytes to GB (base 1024), unrounded."""
    return bytes_value / BYTES_PER_GB


def tags_to_dict(tags: Any) -> Dict[str, str]:
    """
    Convert an AWS tag list to a dictionary.

    [{"Key": "Name", "Value": "validator1"}] -> {"Name": "validator1"}
    """
    if not tags:
        return {}

    if isinstance(tags, dict):
        return tags

    if isinstance(tags, list):
        return {tag.get("Key", ""): tag.get("Value", "") for tag in tags if tag.get("Key")}

    return {}


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Setup logging on stderr.

    The report itself goes to stdout (or a file), so diagnostics never
    mix with report lines.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

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
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # botocore is chatty at DEBUG
    logging.getLogger('botocore').setLevel(max(numeric_level, logging.INFO))

    return logging.getLogger(__name__)


def write_json(data: Any, filepath: str) -> None:
    """Write data to JSON file with owner-only permissions."""
    fd = os.open(filepath, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, 'w') as f:
        json.dump(data, f, indent=2, default=str)
    logger.info(f"Wrote {filepath}")
