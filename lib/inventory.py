"""
EC2 inventory for the cost report.

Fetches instance and volume descriptions once per run, resolves each
instance's name and attached storage, and groups instances by name
prefix ("validator12" -> "validator").
"""
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .constants import (
    NAME_TAG_KEY,
    STORAGE_GB_MONTH_PRICES,
    UNNAMED_INSTANCE_PREFIX,
)
from .models import InstanceGroups, InstanceRecord, ResolvedName, empty_storage
from .utils import (
    InventoryError,
    PaginationNotSupportedError,
    UnsupportedVolumeTypeError,
    VolumeNotFoundError,
    tags_to_dict,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Inventory Snapshot
# =============================================================================

class InventorySnapshot:
    """
    Instance and volume descriptions for one run.

    Each collection is requested from EC2 at most once; later calls return
    the cached response. There is no invalidation. Build a new snapshot
    for a new run.
    """

    def __init__(self, ec2_client):
        self.ec2 = ec2_client
        self._reservations: Optional[List[Dict[str, Any]]] = None
        self._volumes: Optional[List[Dict[str, Any]]] = None
        self._instances_lock = threading.Lock()
        self._volumes_lock = threading.Lock()

    @classmethod
    def from_session(cls, session, region: str) -> "InventorySnapshot":
        return cls(session.client('ec2', region_name=region))

    @property
    def instances_fetched(self) -> bool:
        return self._reservations is not None

    @property
    def volumes_fetched(self) -> bool:
        return self._volumes is not None

    def reservations(self) -> List[Dict[str, Any]]:
        """Return all reservations (each holding its Instances list)."""
        if self._reservations is None:
            with self._instances_lock:
                if self._reservations is None:
                    logger.info("Getting EC2 instance descriptions...")
                    response = _describe_single_page(
                        self.ec2.describe_instances, "instances"
                    )
                    self._reservations = response.get('Reservations', [])
        return self._reservations

    def volumes(self) -> List[Dict[str, Any]]:
        """Return all EBS volume descriptions."""
        if self._volumes is None:
            with self._volumes_lock:
                if self._volumes is None:
                    logger.info("Getting volume descriptions...")
                    response = _describe_single_page(
                        self.ec2.describe_volumes, "volumes"
                    )
                    self._volumes = response.get('Volumes', [])
        return self._volumes


def _describe_single_page(describe: Callable[..., Dict[str, Any]], what: str) -> Dict[str, Any]:
    """
    Issue one unfiltered describe call and validate the response.

    Raises:
        InventoryError: if the request fails or returns nothing
        PaginationNotSupportedError: if the response has a NextToken
    """
    try:
        response = describe()
    except (ClientError, BotoCoreError) as e:
        raise InventoryError(
            f"Got an error retrieving information about your Amazon EC2 {what}: {e}",
            original_error=e
        ) from e

    if not response:
        raise InventoryError(f"Empty result querying EC2 {what}")

    if response.get('NextToken'):
        raise PaginationNotSupportedError(
            f"You have too many {what} and paging is not implemented"
        )

    return response


# =============================================================================
# Block Devices
# =============================================================================

def get_volume_by_id(volumes: List[Dict[str, Any]], volume_id: str) -> Dict[str, Any]:
    """Find a volume description by id."""
    for volume in volumes:
        if volume.get('VolumeId') == volume_id:
            return volume
    raise VolumeNotFoundError(volume_id)


def get_block_device_sizes(
    snapshot: InventorySnapshot,
    block_device_mappings: List[Dict[str, Any]]
) -> Dict[str, int]:
    """
    Sum attached EBS capacity (GB) per storage class.

    Returns a dict with every recognized class, zero when none attached.

    Raises:
        VolumeNotFoundError: mapping references a volume that is not in the snapshot
        UnsupportedVolumeTypeError: volume type has no known price
    """
    sizes = empty_storage()
    if not block_device_mappings:
        return sizes

    volumes = snapshot.volumes()
    for mapping in block_device_mappings:
        volume_id = mapping.get('Ebs', {}).get('VolumeId', '')
        volume = get_volume_by_id(volumes, volume_id)

        volume_type = volume.get('VolumeType', '')
        if volume_type not in STORAGE_GB_MONTH_PRICES:
            raise UnsupportedVolumeTypeError(volume_type, volume_id)
        sizes[volume_type] += int(volume.get('Size', 0))

    return sizes


# =============================================================================
# Names and Groups
# =============================================================================

def resolve_name(tags: Any, fallback: str) -> ResolvedName:
    """
    Get the Name tag value, or the positional fallback if there is none.

    An empty Name tag counts as missing.
    """
    value = tags_to_dict(tags).get(NAME_TAG_KEY, '')
    if value:
        return ResolvedName(value=value, tagged=True)
    return ResolvedName(value=fallback, tagged=False)


def fallback_name(position: int) -> str:
    """Synthesized name for the Nth instance of a reservation."""
    return f"{UNNAMED_INSTANCE_PREFIX}{position}"


def group_key(name: str) -> str:
    """
    Strip the trailing run of ASCII digits from a name.

    "validator12" -> "validator", "node1a2" -> "node1a". A name made only
    of digits is its own group key.
    """
    key = name.rstrip('0123456789')
    return key if key else name


def build_instance_record(snapshot: InventorySnapshot, instance: Dict[str, Any], position: int) -> InstanceRecord:
    """Resolve one describe_instances entry into an InstanceRecord."""
    name = resolve_name(instance.get('Tags', []), fallback_name(position))
    cpu = instance.get('CpuOptions', {})

    return InstanceRecord(
        instance_id=instance.get('InstanceId', ''),
        name=name.value,
        name_tagged=name.tagged,
        instance_type=instance.get('InstanceType', ''),
        core_count=int(cpu.get('CoreCount', 0)),
        hyper_threading=int(cpu.get('ThreadsPerCore', 1)) > 1,
        storage_gb=get_block_device_sizes(snapshot, instance.get('BlockDeviceMappings', [])),
    )


def build_instance_groups(snapshot: InventorySnapshot) -> InstanceGroups:
    """
    Organize all instances into groups keyed by name prefix.

    Instances without a Name tag are kept aside in the unnamed bucket and
    reported with a single warning; they never appear in the grouping.
    """
    result = InstanceGroups()

    for reservation in snapshot.reservations():
        for position, instance in enumerate(reservation.get('Instances', [])):
            record = build_instance_record(snapshot, instance, position)
            if record.name_tagged:
                result.add(group_key(record.name), record)
            else:
                result.unnamed.append(record)
            logger.debug(f"{record}: {record.storage_gb}")

    warn_unnamed(result)

    logger.info(
        f"Found {len(result.instances())} EC2 instances in {len(result)} groups"
    )
    return result


def warn_unnamed(result: InstanceGroups) -> None:
    """Log one warning listing instances without a Name tag."""
    if not result.unnamed:
        return
    members = ", ".join(str(record) for record in result.unnamed)
    logger.warning(
        f"{len(result.unnamed)} instances found with no name tag(s): {members}"
    )
