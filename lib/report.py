"""
Per-group cost report.

Combines the grouped inventory with the cost model and traffic metrics,
then writes one CSV line per group, a totals line and the hand-priced
line items.
"""
import csv
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, TextIO, Tuple

from .constants import (
    DEFAULT_PARALLEL_WORKERS,
    PRICING_REGION,
    REPORT_HEADER,
    REPORT_PLACEHOLDER_ITEMS,
    REPORT_TOTAL_LABEL,
    REPORT_UNKNOWN_VALUE,
)
from .models import (
    GroupCostSummary,
    InstanceCost,
    InstanceGroups,
    InstanceRecord,
    summarize_group,
    total_summary,
)
from .pricing import get_instance_cost_for_30_days, get_storage_cost_for_month
from .traffic import get_traffic_cost_for_30_days
from .utils import ProgressTracker, generate_run_id, get_timestamp

logger = logging.getLogger(__name__)


def estimate_instance_costs(
    groups: InstanceGroups,
    cloudwatch_client,
    parallel_workers: int = DEFAULT_PARALLEL_WORKERS,
    show_progress: bool = True
) -> Dict[str, InstanceCost]:
    """
    Compute instance, storage and traffic cost for every grouped instance.

    Instance and storage costs are computed first so an unknown instance
    type fails the run before any CloudWatch query is made. Traffic
    queries run on up to parallel_workers threads.

    Returns:
        InstanceCost per instance id, in group order
    """
    records = groups.instances()
    costs: Dict[str, InstanceCost] = {}
    for record in records:
        costs[record.instance_id] = InstanceCost(
            instance_id=record.instance_id,
            instance_cost=get_instance_cost_for_30_days(record),
            storage_cost=get_storage_cost_for_month(record),
        )

    def query(record: InstanceRecord) -> Tuple[float, float]:
        return get_traffic_cost_for_30_days(cloudwatch_client, record.instance_id)

    workers = max(1, parallel_workers)
    with ProgressTracker("Traffic metrics", total=len(records), show_progress=show_progress) as tracker:
        if workers == 1 or len(records) <= 1:
            results = []
            for record in records:
                results.append(query(record))
                tracker.advance()
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # map() yields in submission order
                results = []
                for result in executor.map(query, records):
                    results.append(result)
                    tracker.advance()

    for record, (traffic_cost, traffic_gb) in zip(records, results):
        cost = costs[record.instance_id]
        cost.traffic_cost = traffic_cost
        cost.traffic_gb = traffic_gb

    return costs


def build_group_summaries(
    groups: InstanceGroups,
    costs: Dict[str, InstanceCost]
) -> Tuple[List[GroupCostSummary], GroupCostSummary]:
    """Per-group summaries in group order, plus the overall total."""
    summaries = [
        summarize_group(key, records, costs)
        for key, records in groups.groups.items()
    ]
    return summaries, total_summary(summaries, label=REPORT_TOTAL_LABEL)


def _money(value: float) -> str:
    return f"{value:.2f}"


def group_row(summary: GroupCostSummary) -> List[str]:
    """CSV fields for one group line."""
    return [
        summary.group,
        str(summary.instance_count),
        ";".join(summary.instance_types),
        _money(summary.instance_cost),
        _money(summary.storage_cost),
        _money(summary.traffic_cost),
        _money(summary.total_cost),
        _money(summary.traffic_gb),
    ]


def total_row(total: GroupCostSummary) -> List[str]:
    """CSV fields for the totals line; count and types are left blank."""
    row = group_row(total)
    row[1] = ""
    row[2] = ""
    return row


def placeholder_rows() -> List[List[str]]:
    """Hand-priced line items, cost left as unknown."""
    return [
        [service, item, "", "", "", "", REPORT_UNKNOWN_VALUE]
        for service, item in REPORT_PLACEHOLDER_ITEMS
    ]


def write_report(summaries: List[GroupCostSummary], total: GroupCostSummary, stream: TextIO) -> None:
    """Write the CSV report to stream."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(REPORT_HEADER)
    for summary in summaries:
        writer.writerow(group_row(summary))
    writer.writerow(total_row(total))
    writer.writerows(placeholder_rows())


def build_report_json(
    groups: InstanceGroups,
    costs: Dict[str, InstanceCost],
    summaries: List[GroupCostSummary],
    total: GroupCostSummary
) -> Dict[str, Any]:
    """Detailed per-instance report document for JSON output."""
    return {
        'run_id': generate_run_id(),
        'timestamp': get_timestamp(),
        'pricing_region': PRICING_REGION,
        'groups': [
            {
                **summary.to_dict(),
                'instances': [
                    {**record.to_dict(), 'cost': costs[record.instance_id].to_dict()}
                    for record in groups.groups[summary.group]
                ],
            }
            for summary in summaries
        ],
        'unnamed_instances': [record.to_dict() for record in groups.unnamed],
        'total': total.to_dict(),
    }
