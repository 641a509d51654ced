"""
Data models for the EC2 cost report.
"""
from dataclasses import asdict, dataclass, field
from typing import Dict, List

from .constants import VOLUME_TYPE_GP2, VOLUME_TYPE_GP3


def empty_storage() -> Dict[str, int]:
    """Capacity per recognized storage class, all zero."""
    return {VOLUME_TYPE_GP2: 0, VOLUME_TYPE_GP3: 0}


@dataclass(frozen=True)
class ResolvedName:
    """
    Outcome of name resolution.

    tagged is False when the value was synthesized from the instance's
    position in its reservation because no usable Name tag was present.
    """
    value: str
    tagged: bool


@dataclass(frozen=True)
class InstanceRecord:
    """One EC2 instance after name and storage resolution."""
    instance_id: str
    name: str
    instance_type: str
    core_count: int = 0
    hyper_threading: bool = False
    name_tagged: bool = True

    # GB per storage class, e.g. {"gp2": 100, "gp3": 0}
    storage_gb: Dict[str, int] = field(default_factory=empty_storage)

    @property
    def gp2_gb(self) -> int:
        return self.storage_gb.get(VOLUME_TYPE_GP2, 0)

    @property
    def gp3_gb(self) -> int:
        return self.storage_gb.get(VOLUME_TYPE_GP3, 0)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    def __str__(self) -> str:
        return f"{self.name} ({self.instance_id}, {self.instance_type})"


@dataclass
class InstanceGroups:
    """
    Instances grouped by derived group key.

    groups preserves insertion order, both across keys and within each
    key. Instances without a Name tag never enter groups; they are kept
    in unnamed so the caller can warn about them.
    """
    groups: Dict[str, List[InstanceRecord]] = field(default_factory=dict)
    unnamed: List[InstanceRecord] = field(default_factory=list)

    def add(self, key: str, record: InstanceRecord) -> None:
        self.groups.setdefault(key, []).append(record)

    def instances(self) -> List[InstanceRecord]:
        """All grouped instances in report order."""
        return [record for records in self.groups.values() for record in records]

    def __len__(self) -> int:
        return len(self.groups)


@dataclass
class InstanceCost:
    """Three-part monthly cost for one instance."""
    instance_id: str
    instance_cost: float = 0.0
    storage_cost: float = 0.0
    traffic_cost: float = 0.0
    traffic_gb: float = 0.0

    @property
    def total_cost(self) -> float:
        return self.instance_cost + self.storage_cost + self.traffic_cost

    def to_dict(self) -> Dict:
        d = asdict(self)
        d['total_cost'] = self.total_cost
        return d


@dataclass
class GroupCostSummary:
    """Aggregated cost for one group (or for all groups)."""
    group: str
    instance_count: int = 0
    instance_types: List[str] = field(default_factory=list)
    instance_cost: float = 0.0
    storage_cost: float = 0.0
    traffic_cost: float = 0.0
    traffic_gb: float = 0.0

    @property
    def total_cost(self) -> float:
        return self.instance_cost + self.storage_cost + self.traffic_cost

    def add(self, record: InstanceRecord, cost: InstanceCost) -> None:
        self.instance_count += 1
        self.instance_types.append(record.instance_type)
        self.instance_cost += cost.instance_cost
        self.storage_cost += cost.storage_cost
        self.traffic_cost += cost.traffic_cost
        self.traffic_gb += cost.traffic_gb

    def to_dict(self) -> Dict:
        d = asdict(self)
        d['total_cost'] = self.total_cost
        return d


def summarize_group(
    group: str,
    instances: List[InstanceRecord],
    costs: Dict[str, InstanceCost]
) -> GroupCostSummary:
    """
    Sum the costs of a group's members.

    costs is keyed by instance id and must cover every member.
    """
    summary = GroupCostSummary(group=group)
    for record in instances:
        summary.add(record, costs[record.instance_id])
    return summary


def total_summary(summaries: List[GroupCostSummary], label: str = "total") -> GroupCostSummary:
    """Roll group summaries up into one."""
    total = GroupCostSummary(group=label)
    for s in summaries:
        total.instance_count += s.instance_count
        total.instance_types.extend(s.instance_types)
        total.instance_cost += s.instance_cost
        total.storage_cost += s.storage_cost
        total.traffic_cost += s.traffic_cost
        total.traffic_gb += s.traffic_gb
    return total
