"""
Tests for lib/utils.py utility functions.

Covers:
- generate_run_id format and uniqueness
- get_timestamp format
- bytes_to_gb conversion
- tags_to_dict conversion
- write_json (local files)
- setup_logging handlers
- error hierarchy
- ProgressTracker without a TTY
"""
import json
import logging
import os
import stat
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib.utils import (
    CostReportError,
    InventoryError,
    MetricsError,
    PaginationNotSupportedError,
    ProgressTracker,
    UnknownInstanceTypeError,
    UnsupportedVolumeTypeError,
    VolumeNotFoundError,
    bytes_to_gb,
    generate_run_id,
    get_timestamp,
    setup_logging,
    tags_to_dict,
    write_json,
)

# =============================================================================
# generate_run_id / get_timestamp Tests
# =============================================================================

class TestGenerateRunId:
    """Tests for generate_run_id function."""

    def test_run_id_format(self):
        """Test run ID has correct format: YYYYMMDD-HHMMSS-xxxxxxxx"""
        parts = generate_run_id().split('-')

        assert len(parts) == 3
        assert len(parts[0]) == 8 and parts[0].isdigit()
        assert len(parts[1]) == 6 and parts[1].isdigit()
        assert len(parts[2]) == 8

    def test_run_id_uniqueness(self):
        ids = [generate_run_id() for _ in range(100)]
        assert len(set(ids)) == 100


class TestGetTimestamp:
    def test_utc_iso_format(self):
        ts = get_timestamp()
        assert ts.endswith('Z')
        assert 'T' in ts


# =============================================================================
# Conversion Tests
# =============================================================================

class TestBytesToGB:
    def test_base_1024(self):
        assert bytes_to_gb(1024 ** 3) == 1.0
        assert bytes_to_gb(1024 ** 3 / 2) == 0.5

    def test_zero(self):
        assert bytes_to_gb(0) == 0.0


class TestTagsToDict:
    """Tests for tags_to_dict function."""

    def test_aws_format(self):
        tags = [{'Key': 'Name', 'Value': 'val1'}, {'Key': 'Env', 'Value': 'prod'}]
        assert tags_to_dict(tags) == {'Name': 'val1', 'Env': 'prod'}

    def test_dict_passthrough(self):
        assert tags_to_dict({'Name': 'val1'}) == {'Name': 'val1'}

    def test_empty(self):
        assert tags_to_dict(None) == {}
        assert tags_to_dict([]) == {}

    def test_skips_empty_keys(self):
        assert tags_to_dict([{'Key': '', 'Value': 'x'}, {'Value': 'y'}]) == {}

    def test_unsupported_type(self):
        assert tags_to_dict("Name=val1") == {}


# =============================================================================
# write_json Tests
# =============================================================================

class TestWriteJson:
    def test_writes_with_owner_only_permissions(self, tmp_path):
        path = tmp_path / "report.json"

        write_json({'groups': [], 'total': 1.5}, str(path))

        assert json.loads(path.read_text()) == {'groups': [], 'total': 1.5}
        mode = stat.S_IMODE(os.stat(path).st_mode)
        assert mode & (stat.S_IRWXG | stat.S_IRWXO) == 0


# =============================================================================
# Logging Tests
# =============================================================================

class TestSetupLogging:
    def test_single_stderr_handler(self):
        setup_logging("DEBUG")
        setup_logging("WARNING")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr
        assert root.level == logging.WARNING

    def test_unknown_level_defaults_to_info(self):
        setup_logging("CHATTY")
        assert logging.getLogger().level == logging.INFO


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """All fatal conditions share one base class."""

    @pytest.mark.parametrize("error", [
        InventoryError("boom"),
        PaginationNotSupportedError("too many"),
        VolumeNotFoundError("vol-1"),
        UnsupportedVolumeTypeError("io2", "vol-1"),
        UnknownInstanceTypeError("x99.mega"),
        MetricsError("boom"),
    ])
    def test_fatal_hierarchy(self, error):
        assert isinstance(error, CostReportError)

    def test_pagination_is_inventory_error(self):
        assert issubclass(PaginationNotSupportedError, InventoryError)

    def test_messages(self):
        assert str(VolumeNotFoundError("vol-1")) == "Volume vol-1 not found"
        assert "io2" in str(UnsupportedVolumeTypeError("io2", "vol-1"))
        assert "vol-1" in str(UnsupportedVolumeTypeError("io2", "vol-1"))


# =============================================================================
# ProgressTracker Tests
# =============================================================================

class TestProgressTracker:
    def test_counts_without_tty(self, caplog):
        with caplog.at_level(logging.INFO):
            with ProgressTracker("Traffic metrics", total=3) as tracker:
                tracker.advance()
                tracker.advance(2)

        assert tracker.completed == 3
        assert any("3/3 complete" in r.getMessage() for r in caplog.records)

    def test_disabled(self):
        with ProgressTracker("Traffic metrics", total=1, show_progress=False) as tracker:
            tracker.advance()
        assert tracker.completed == 1
