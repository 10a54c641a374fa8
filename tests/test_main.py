"""
Tests for the command line entry point.
"""

import json
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from mlsims.__main__ import build_overrides, load_config_file, parse_args


class TestCommandLine:
    """Tests for argument parsing and override building."""

    def test_defaults(self):
        args = parse_args([])

        assert args.log_level == 'INFO'
        assert args.port is None
        assert build_overrides(args) == {'logging': {'level': 'info'}}

    def test_flags(self):
        overrides = build_overrides(parse_args(['--port', '9000', '--host', '0.0.0.0', '--seed', '0']))

        assert overrides['server'] == {'port': 9000, 'host': '0.0.0.0'}
        assert overrides['random-seed'] == 0

    def test_flags_win_over_file(self, tmp_path):
        """Command line flags override values from the config file."""
        path = tmp_path / 'config.json'
        path.write_text(json.dumps({'server': {'port': 1234}, 'knn': {'k': 5}}))

        overrides = build_overrides(parse_args(['--config', str(path), '--port', '9000']))

        assert overrides['server']['port'] == 9000
        assert overrides['knn'] == {'k': 5}

    def test_yaml_file(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("tree:\n  max-depth: 6\n")

        assert load_config_file(str(path)) == {'tree': {'max-depth': 6}}

    def test_unsupported_file(self, tmp_path):
        with pytest.raises(ValueError):
            load_config_file(str(tmp_path / 'config.toml'))
