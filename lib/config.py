"""
EC2 Cost Report - Configuration Management

Supports loading configuration from:
1. YAML config file (--config)
2. Environment variables (EC2COST_*)
3. Command-line arguments (highest priority)

Config file example:
```yaml
profile: billing-readonly
log_level: INFO
output: ./ec2-costs.csv
json_output: ${EC2COST_JSON_OUTPUT:-}
workers: 8
```
"""
import logging
import os
import re
import stat
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


# Default config file locations (checked in order)
DEFAULT_CONFIG_PATHS = [
    './ec2-cost.yaml',
    './ec2-cost.yml',
    '~/.ec2-cost/config.yaml',
    '~/.ec2-cost/config.yml',
]

# Mapping from config keys to env vars
ENV_VAR_MAPPING = {
    'profile': 'EC2COST_PROFILE',
    'log_level': 'EC2COST_LOG_LEVEL',
    'output': 'EC2COST_OUTPUT',
    'json_output': 'EC2COST_JSON_OUTPUT',
    'workers': 'EC2COST_WORKERS',
}

INT_KEYS = ('workers',)


def _substitute_env_vars(value: Any) -> Any:
    """Substitute ${ENV_VAR} patterns in string values."""
    if isinstance(value, str):
        # Pattern: ${VAR_NAME} or ${VAR_NAME:-default}
        pattern = r'\$\{([^}:]+)(?::-([^}]*))?\}'

        def replace(match):
            var_name = match.group(1)
            default = match.group(2) or ''
            return os.environ.get(var_name, default)

        return re.sub(pattern, replace, value)
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def _coerce(key: str, value: Any) -> Any:
    if key in INT_KEYS and value not in (None, ''):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Config value for {key!r} must be an integer, got {value!r}") from None
    return value


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Load configuration from a YAML file."""
    path = Path(config_path).expanduser()

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    file_mode = path.stat().st_mode
    if file_mode & (stat.S_IRWXG | stat.S_IRWXO):
        logger.warning(f"Config file {config_path} has loose permissions. "
                       f"Consider: chmod 600 {config_path}")

    logger.info(f"Loading config from {path}")

    with open(path) as f:
        try:
            config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    config = _substitute_env_vars(config)
    return {k: _coerce(k, v) for k, v in config.items()}


def find_default_config() -> Optional[str]:
    """Find a config file in default locations."""
    for path in DEFAULT_CONFIG_PATHS:
        expanded = Path(path).expanduser()
        if expanded.exists():
            return str(expanded)
    return None


def load_env_config() -> Dict[str, Any]:
    """Load configuration from environment variables."""
    config: Dict[str, Any] = {}

    for config_key, env_var in ENV_VAR_MAPPING.items():
        value = os.environ.get(env_var)
        if value is not None:
            config[config_key] = _coerce(config_key, value)

    return config


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """Merge multiple config dicts. Later configs override earlier ones."""
    result: Dict[str, Any] = {}

    for config in configs:
        for key, value in config.items():
            if value is not None and value != '':
                result[key] = value

    return result


def args_to_config(args) -> Dict[str, Any]:
    """Convert argparse args to config dict format."""
    config: Dict[str, Any] = {}
    for key in ENV_VAR_MAPPING:
        value = getattr(args, key, None)
        if value is not None:
            config[key] = value
    return config


def load_config(args) -> Dict[str, Any]:
    """
    Load configuration from all sources and merge them.

    Priority (highest to lowest):
    1. CLI arguments
    2. Config file (--config or default location)
    3. Environment variables

    The merged values are written back onto args.
    """
    configs = []

    env_config = load_env_config()
    if env_config:
        logger.debug("Loaded config from environment variables")
        configs.append(env_config)

    config_path = getattr(args, 'config', None)
    if config_path:
        configs.append(load_config_file(config_path))
    else:
        default_config = find_default_config()
        if default_config:
            logger.info(f"Found default config file: {default_config}")
            configs.append(load_config_file(default_config))

    configs.append(args_to_config(args))

    merged = merge_configs(*configs)

    for key, value in merged.items():
        if key in ENV_VAR_MAPPING:
            setattr(args, key, value)

    return merged


def generate_sample_config() -> str:
    """Generate a sample config file content."""
    return '''# EC2 Cost Report Configuration
#
# Environment variable substitution supported:
#   ${VAR_NAME}           - required env var
#   ${VAR_NAME:-default}  - env var with default value
#
# Prices are fixed for ca-central-1; the report always queries that region.

# AWS CLI profile (optional, uses the default credential chain if not set)
# profile: billing-readonly

# Logging level: DEBUG, INFO, WARNING, ERROR
log_level: INFO

# Write the CSV report to a file instead of stdout
# output: ./ec2-costs.csv

# Also write a detailed per-instance JSON report
# json_output: ./ec2-costs.json

# Number of parallel CloudWatch traffic queries
workers: 4
'''
