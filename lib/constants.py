"""
Constants for the EC2 cost report.

This module defines all magic strings and numbers used across the codebase
to prevent typos, ensure consistency, and make maintenance easier.
"""

# =============================================================================
# Byte/Size Conversion Constants
# =============================================================================

BYTES_PER_KB = 1024
BYTES_PER_MB = 1024 ** 2
BYTES_PER_GB = 1024 ** 3

# =============================================================================
# Time Constants
# =============================================================================

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
HOURS_PER_DAY = 24
BILLING_DAYS = 30

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_PARALLEL_WORKERS = 4

# =============================================================================
# Pricing
# =============================================================================

# The price tables below are only valid for this region.
PRICING_REGION = "ca-central-1"

# On-demand hourly prices (USD), Canada (Central)
INSTANCE_HOURLY_PRICES = {
    "c5a.large": 0.084,
    "db.gp2": 0.253,
    "db.t4g.small": 0.07,
    "m5a.2xlarge": 0.384,
    "m5a.large": 0.096,
    "m5a.xlarge": 0.192,
    "m6i.4xlarge": 0.856,
    "m6i.xlarge": 0.214,
    "r5a.4xlarge": 0.992,
    "r5a.large": 0.124,
    "r5a.xlarge": 0.248,
    "t3.2xlarge": 0.3712,
    "t3a.large": 0.0835,
    "t3a.medium": 0.0418,
    "t3a.nano": 0.0052,
    "t3a.small": 0.0209,
    "t3a.xlarge": 0.167,
    "i4i.2xlarge": 0.757,
    "i4i.xlarge": 0.378,
    "i4i.large": 0.189,
    "m6i.large": 0.107,
    "t2.micro": 0.0128,
}

# EBS storage classes and their default provisioning price per GB-month
VOLUME_TYPE_GP2 = "gp2"
VOLUME_TYPE_GP3 = "gp3"

STORAGE_GB_MONTH_PRICES = {
    VOLUME_TYPE_GP2: 0.088,
    VOLUME_TYPE_GP3: 0.11,
}

# Estimated from previous bills
TRAFFIC_PRICE_PER_GB = 0.07

# =============================================================================
# CloudWatch Traffic Metric
# =============================================================================

TRAFFIC_METRIC_NAMESPACE = "AWS/EC2"
TRAFFIC_METRIC_NAME = "NetworkOut"
TRAFFIC_METRIC_DIMENSION = "InstanceId"
TRAFFIC_METRIC_STATISTIC = "Sum"
TRAFFIC_METRIC_PERIOD = SECONDS_PER_HOUR

# =============================================================================
# Naming
# =============================================================================

NAME_TAG_KEY = "Name"

# Prefix for synthesized names of instances without a Name tag
UNNAMED_INSTANCE_PREFIX = "unknown"

# =============================================================================
# Report Layout
# =============================================================================

REPORT_HEADER = [
    "Group",
    "Instance_Num",
    "Instance_type",
    "Instance_cost",
    "EBS_Cost",
    "Traffic_Cost",
    "TotalCost",
    "Traffic_GB",
]

REPORT_TOTAL_LABEL = "Nodes total"

# Line items that are priced by hand from the bill; cost column is "?"
REPORT_PLACEHOLDER_ITEMS = [
    ("S3", "Backup/Config"),
    ("VPC_cross-traffic", "VPN"),
    ("Route_53", "Resolver"),
    ("RDS", "Zabbix"),
    ("ELB", "Nautilus"),
    ("Tax", ""),
    ("Total", ""),
]

REPORT_UNKNOWN_VALUE = "?"
