"""
Cost model for EC2 instances.

Fixed on-demand prices for the pricing region only. Nothing here calls AWS.
"""
from .constants import (
    BILLING_DAYS,
    HOURS_PER_DAY,
    INSTANCE_HOURLY_PRICES,
    STORAGE_GB_MONTH_PRICES,
)
from .models import InstanceRecord
from .utils import UnknownInstanceTypeError, UnsupportedVolumeTypeError


def get_instance_cost_for_hour(record: InstanceRecord) -> float:
    """
    Hourly on-demand price for the record's instance type.

    Raises:
        UnknownInstanceTypeError: type is not in the price table
    """
    try:
        return INSTANCE_HOURLY_PRICES[record.instance_type]
    except KeyError:
        raise UnknownInstanceTypeError(record.instance_type) from None


def get_instance_cost_for_30_days(record: InstanceRecord) -> float:
    return get_instance_cost_for_hour(record) * HOURS_PER_DAY * BILLING_DAYS


def get_storage_cost_for_month(record: InstanceRecord) -> float:
    """Monthly price of the record's gp2 and gp3 storage at default provisioning."""
    total = 0.0
    for volume_type, size_gb in record.storage_gb.items():
        if volume_type not in STORAGE_GB_MONTH_PRICES:
            raise UnsupportedVolumeTypeError(volume_type)
        total += size_gb * STORAGE_GB_MONTH_PRICES[volume_type]
    return total
