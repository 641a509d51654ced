#!/usr/bin/env python3
"""
EC2 Cost Report

Estimates the monthly cost of the EC2 instances in an account, grouped by
name prefix (validator1, validator2 -> validator). Each group's cost has
three parts: instance hours (on-demand), attached gp2/gp3 storage, and
outbound traffic over the last 30 days.

The CSV report goes to stdout (or --output); progress and warnings go to
stderr.

Usage:
    python3 ec2_cost_report.py
    python3 ec2_cost_report.py --profile billing-readonly
    python3 ec2_cost_report.py --output costs.csv --json-output costs.json
    python3 ec2_cost_report.py --workers 8 --log-level DEBUG
"""
import argparse
import io
import logging
import sys
from typing import Optional, TextIO

import boto3
from botocore.exceptions import BotoCoreError

from lib.config import generate_sample_config, load_config
from lib.constants import DEFAULT_PARALLEL_WORKERS, PRICING_REGION
from lib.inventory import InventorySnapshot, build_instance_groups
from lib.report import (
    build_group_summaries,
    build_report_json,
    estimate_instance_costs,
    write_report,
)
from lib.traffic import get_cloudwatch_client
from lib.utils import CostReportError, setup_logging, write_json

logger = logging.getLogger(__name__)


def get_session(profile: Optional[str] = None, region: str = PRICING_REGION) -> boto3.Session:
    """Create boto3 session from the default credential chain."""
    return boto3.Session(profile_name=profile, region_name=region)


def run(
    session: boto3.Session,
    out: TextIO,
    parallel_workers: int = DEFAULT_PARALLEL_WORKERS,
    json_output: Optional[str] = None,
    show_progress: bool = True
) -> None:
    """
    Produce the cost report.

    Everything is computed before the first report line is written, so a
    fatal condition leaves the report stream empty.

    Raises:
        CostReportError: on any fatal condition
    """
    snapshot = InventorySnapshot.from_session(session, PRICING_REGION)
    groups = build_instance_groups(snapshot)

    cloudwatch = get_cloudwatch_client(session, PRICING_REGION)
    costs = estimate_instance_costs(
        groups, cloudwatch,
        parallel_workers=parallel_workers,
        show_progress=show_progress
    )
    summaries, total = build_group_summaries(groups, costs)

    write_report(summaries, total, out)

    if json_output:
        write_json(build_report_json(groups, costs, summaries, total), json_output)


def main():
    parser = argparse.ArgumentParser(
        description='EC2 Cost Report - monthly cost per instance group',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Prices are fixed on-demand prices for {PRICING_REGION}; instances are
always read from that region.

Examples:
  python3 ec2_cost_report.py
  python3 ec2_cost_report.py --profile billing-readonly -o costs.csv
  python3 ec2_cost_report.py --config ec2-cost.yaml
"""
    )
    parser.add_argument('--config', '-c', help='Path to YAML config file')
    parser.add_argument('--generate-config', action='store_true',
                        help='Generate a sample config file and exit')
    parser.add_argument('--profile', help='AWS profile name (default: credential chain)')
    parser.add_argument('--output', '-o', help='Write CSV report to this file (default: stdout)')
    parser.add_argument('--json-output', help='Also write a detailed JSON report to this file')
    parser.add_argument(
        '--workers',
        type=int,
        metavar='N',
        help=f'Parallel CloudWatch traffic queries (default: {DEFAULT_PARALLEL_WORKERS})'
    )
    parser.add_argument('--log-level', help='Logging level (default: INFO)')

    args = parser.parse_args()

    if args.generate_config:
        print(generate_sample_config())
        sys.exit(0)

    setup_logging(args.log_level or 'INFO')

    try:
        load_config(args)
    except (FileNotFoundError, ValueError, OSError) as e:
        logger.error(str(e))
        sys.exit(1)

    if args.log_level:
        setup_logging(args.log_level)
    workers = args.workers or DEFAULT_PARALLEL_WORKERS

    try:
        session = get_session(args.profile)
        if args.output:
            # Compute first so a failure never leaves a truncated report file
            buffer = io.StringIO()
            run(session, buffer, parallel_workers=workers, json_output=args.json_output)
            with open(args.output, 'w', newline='') as f:
                f.write(buffer.getvalue())
            logger.info(f"Wrote {args.output}")
        else:
            run(session, sys.stdout, parallel_workers=workers, json_output=args.json_output)
    except CostReportError as e:
        logger.error(f"Aborting, no report written: {e}")
        sys.exit(1)
    except BotoCoreError as e:
        logger.error(f"AWS configuration error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
