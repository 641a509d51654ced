"""
Tests for lib/config.py configuration loading.

Covers:
- YAML file loading with env var substitution
- Environment variable config
- Merge priority (CLI > file > env)
- Sample config generation
"""
import argparse
import os
import sys

import pytest
import yaml

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib.config import (
    _substitute_env_vars,
    generate_sample_config,
    load_config,
    load_config_file,
    load_env_config,
    merge_configs,
)


def make_args(**kwargs):
    defaults = {
        'config': None,
        'profile': None,
        'log_level': None,
        'output': None,
        'json_output': None,
        'workers': None,
    }
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


@pytest.fixture
def clean_env(monkeypatch):
    for var in ('EC2COST_PROFILE', 'EC2COST_LOG_LEVEL', 'EC2COST_OUTPUT',
                'EC2COST_JSON_OUTPUT', 'EC2COST_WORKERS'):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


# =============================================================================
# Env Var Substitution Tests
# =============================================================================

class TestSubstituteEnvVars:
    """Tests for ${VAR} substitution."""

    def test_substitutes_set_var(self, monkeypatch):
        monkeypatch.setenv('BILLING_PROFILE', 'billing')
        assert _substitute_env_vars('${BILLING_PROFILE}') == 'billing'

    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv('NOT_SET_ANYWHERE', raising=False)
        assert _substitute_env_vars('${NOT_SET_ANYWHERE:-fallback}') == 'fallback'

    def test_nested(self, monkeypatch):
        monkeypatch.setenv('OUT', 'costs.csv')
        assert _substitute_env_vars({'a': ['${OUT}']}) == {'a': ['costs.csv']}

    def test_non_string_untouched(self):
        assert _substitute_env_vars(4) == 4


# =============================================================================
# Loading Tests
# =============================================================================

class TestLoadConfigFile:
    """Tests for YAML config file loading."""

    def test_load(self, tmp_path):
        path = tmp_path / "ec2-cost.yaml"
        path.write_text(yaml.safe_dump({'profile': 'billing', 'workers': '8'}))
        path.chmod(0o600)

        config = load_config_file(str(path))

        assert config == {'profile': 'billing', 'workers': 8}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_file(str(tmp_path / "nope.yaml"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        path.chmod(0o600)
        assert load_config_file(str(path)) == {}

    def test_invalid_workers(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("workers: many\n")
        path.chmod(0o600)

        with pytest.raises(ValueError):
            load_config_file(str(path))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        path.chmod(0o600)

        with pytest.raises(ValueError):
            load_config_file(str(path))


class TestLoadEnvConfig:
    """Tests for EC2COST_* environment variables."""

    def test_reads_env(self, clean_env):
        clean_env.setenv('EC2COST_PROFILE', 'billing')
        clean_env.setenv('EC2COST_WORKERS', '2')

        assert load_env_config() == {'profile': 'billing', 'workers': 2}

    def test_empty_env(self, clean_env):
        assert load_env_config() == {}


class TestMergeConfigs:
    """Tests for config merge priority."""

    def test_later_wins(self):
        assert merge_configs({'profile': 'a'}, {'profile': 'b'}) == {'profile': 'b'}

    def test_none_and_empty_do_not_override(self):
        assert merge_configs({'profile': 'a'}, {'profile': None}, {'profile': ''}) == {'profile': 'a'}


class TestLoadConfig:
    """Tests for the full load_config flow."""

    def test_priority(self, clean_env, tmp_path):
        clean_env.setenv('EC2COST_PROFILE', 'from-env')
        clean_env.setenv('EC2COST_LOG_LEVEL', 'DEBUG')
        path = tmp_path / "ec2-cost.yaml"
        path.write_text("profile: from-file\nworkers: 6\n")
        path.chmod(0o600)
        args = make_args(config=str(path), workers=2)

        merged = load_config(args)

        assert merged['profile'] == 'from-file'
        assert merged['log_level'] == 'DEBUG'
        assert args.profile == 'from-file'
        assert args.workers == 2
        assert args.log_level == 'DEBUG'

    def test_no_sources(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        clean_env.setenv('HOME', str(tmp_path))
        args = make_args()

        assert load_config(args) == {}
        assert args.profile is None


class TestSampleConfig:
    def test_sample_is_valid_yaml(self):
        config = yaml.safe_load(generate_sample_config())
        assert config == {'log_level': 'INFO', 'workers': 4}
