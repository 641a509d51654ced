"""
EC2 cost report shared library.
"""
# Import constants module for easy access
from . import constants
from .constants import (
    BYTES_PER_GB,
    DEFAULT_PARALLEL_WORKERS,
    INSTANCE_HOURLY_PRICES,
    PRICING_REGION,
    STORAGE_GB_MONTH_PRICES,
    TRAFFIC_PRICE_PER_GB,
)
from .inventory import (
    InventorySnapshot,
    build_instance_groups,
    get_block_device_sizes,
    get_volume_by_id,
    group_key,
    resolve_name,
)
from .models import (
    GroupCostSummary,
    InstanceCost,
    InstanceGroups,
    InstanceRecord,
    ResolvedName,
)
from .pricing import (
    get_instance_cost_for_30_days,
    get_instance_cost_for_hour,
    get_storage_cost_for_month,
)
from .report import (
    build_group_summaries,
    estimate_instance_costs,
    write_report,
)
from .traffic import get_traffic_cost_for_30_days, get_traffic_in_gb
from .utils import (
    CostReportError,
    InventoryError,
    MetricsError,
    PaginationNotSupportedError,
    UnknownInstanceTypeError,
    UnsupportedVolumeTypeError,
    VolumeNotFoundError,
    setup_logging,
    tags_to_dict,
)

__all__ = [
    # Constants
    'constants',
    'BYTES_PER_GB',
    'DEFAULT_PARALLEL_WORKERS',
    'INSTANCE_HOURLY_PRICES',
    'PRICING_REGION',
    'STORAGE_GB_MONTH_PRICES',
    'TRAFFIC_PRICE_PER_GB',
    # Inventory
    'InventorySnapshot',
    'build_instance_groups',
    'get_block_device_sizes',
    'get_volume_by_id',
    'group_key',
    'resolve_name',
    # Models
    'GroupCostSummary',
    'InstanceCost',
    'InstanceGroups',
    'InstanceRecord',
    'ResolvedName',
    # Cost model
    'get_instance_cost_for_30_days',
    'get_instance_cost_for_hour',
    'get_storage_cost_for_month',
    'get_traffic_cost_for_30_days',
    'get_traffic_in_gb',
    # Report
    'build_group_summaries',
    'estimate_instance_costs',
    'write_report',
    # Errors and utils
    'CostReportError',
    'InventoryError',
    'MetricsError',
    'PaginationNotSupportedError',
    'UnknownInstanceTypeError',
    'UnsupportedVolumeTypeError',
    'VolumeNotFoundError',
    'setup_logging',
    'tags_to_dict',
]
