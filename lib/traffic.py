"""
Outbound traffic metrics for the EC2 cost report.

Reads the NetworkOut metric from CloudWatch. As described in the EC2 docs,
NetworkOut is the number of bytes sent out by the instance on all network
interfaces during the period, so the Sum statistic over consecutive
periods adds up to the total egress for the window.
"""
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from .constants import (
    BILLING_DAYS,
    TRAFFIC_METRIC_DIMENSION,
    TRAFFIC_METRIC_NAME,
    TRAFFIC_METRIC_NAMESPACE,
    TRAFFIC_METRIC_PERIOD,
    TRAFFIC_METRIC_STATISTIC,
    TRAFFIC_PRICE_PER_GB,
)
from .utils import MetricsError, bytes_to_gb

logger = logging.getLogger(__name__)


def get_cloudwatch_client(session, region: str):
    """Get CloudWatch client for a region."""
    return session.client('cloudwatch', region_name=region)


def get_traffic_in_gb(cloudwatch_client, instance_id: str, days: int = BILLING_DAYS) -> Optional[float]:
    """
    Total outbound traffic of an instance over the trailing window, in GB.

    Args:
        cloudwatch_client: boto3 CloudWatch client
        instance_id: EC2 instance id
        days: Number of days to look back

    Returns:
        GB sent, or None if CloudWatch has no datapoints for the instance

    Raises:
        MetricsError: if the request fails
    """
    end_time = datetime.now(timezone.utc)
    start_time = end_time - timedelta(days=days)

    try:
        response = cloudwatch_client.get_metric_statistics(
            Namespace=TRAFFIC_METRIC_NAMESPACE,
            MetricName=TRAFFIC_METRIC_NAME,
            Dimensions=[{'Name': TRAFFIC_METRIC_DIMENSION, 'Value': instance_id}],
            StartTime=start_time,
            EndTime=end_time,
            Period=TRAFFIC_METRIC_PERIOD,
            Statistics=[TRAFFIC_METRIC_STATISTIC]
        )
    except (ClientError, BotoCoreError) as e:
        raise MetricsError(
            f"Got an error retrieving CloudWatch metrics for {instance_id}: {e}",
            original_error=e
        ) from e

    datapoints = (response or {}).get('Datapoints', [])
    if not datapoints:
        return None

    total_bytes = sum(dp.get(TRAFFIC_METRIC_STATISTIC, 0.0) for dp in datapoints)
    return bytes_to_gb(total_bytes)


def get_traffic_cost_for_30_days(cloudwatch_client, instance_id: str) -> Tuple[float, float]:
    """
    Traffic cost and volume for the last 30 days.

    Returns:
        (cost, gb). Both are 0.0 when there is no data for the instance.
    """
    traffic_gb = get_traffic_in_gb(cloudwatch_client, instance_id)
    if traffic_gb is None or math.isnan(traffic_gb):
        logger.debug(f"{instance_id}: no traffic data, counting as 0 GB")
        return 0.0, 0.0

    logger.debug(f"{instance_id}: {traffic_gb:.2f} GB outbound traffic")
    return traffic_gb * TRAFFIC_PRICE_PER_GB, traffic_gb
