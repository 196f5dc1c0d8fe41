#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Tests for configuration loading and validation.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy

import pytest
import yaml

from hicweaver.config.parser import ConfigParser, ConfigValidationError
from hicweaver.config.schema import (
    DEFAULT_CONFIG,
    load_config,
    save_config_template,
    validate_config,
)


# ═══════════════════════════════════════════════════════════════════════
#  Schema helpers
# ═══════════════════════════════════════════════════════════════════════

class TestSchema:
    """Defaults, templates and validation."""

    def test_defaults_are_valid(self):
        assert validate_config(load_config()) == []

    def test_load_config_does_not_mutate_defaults(self, temp_output_dir):
        path = temp_output_dir / "cfg.yaml"
        path.write_text(yaml.dump({'partition': {'n_clusters': 4}}))

        config = load_config(path)
        assert config['partition']['n_clusters'] == 4
        assert config['partition']['min_avg_linkage'] == 0.0
        assert DEFAULT_CONFIG['partition']['n_clusters'] == 16

    def test_recover_template(self, temp_output_dir):
        path = temp_output_dir / "cfg.yaml"
        save_config_template(path, template='recover')

        config = load_config(path)
        assert config['partition']['non_informative_ratio'] == 3
        assert validate_config(config) == []

    @pytest.mark.parametrize("value", [0, -3, 2.5, True])
    def test_invalid_n_clusters(self, value):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config['partition']['n_clusters'] = value
        errors = validate_config(config)
        assert any("n_clusters" in e for e in errors)

    @pytest.mark.parametrize("value", [0.5, 1, -1])
    def test_invalid_ratio(self, value):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config['partition']['non_informative_ratio'] = value
        errors = validate_config(config)
        assert any("non_informative_ratio" in e for e in errors)

    def test_invalid_log_level(self):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config['output']['logging']['level'] = 'LOUD'
        assert validate_config(config) == ["Invalid logging level: LOUD"]


# ═══════════════════════════════════════════════════════════════════════
#  ConfigParser
# ═══════════════════════════════════════════════════════════════════════

class TestConfigParser:
    """YAML loading, overrides and env substitution."""

    def test_defaults_without_file(self):
        parser = ConfigParser()
        assert parser.get('partition.n_clusters') == 16
        assert parser.get('partition.missing', 'x') == 'x'
        assert parser.validate()

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(FileNotFoundError):
            ConfigParser(temp_output_dir / "absent.yaml")

    def test_env_substitution(self, temp_output_dir, monkeypatch):
        monkeypatch.setenv("HICWEAVER_PREFIX", "run42")
        path = temp_output_dir / "cfg.yaml"
        path.write_text(
            "output:\n"
            "  prefix: ${HICWEAVER_PREFIX}\n"
            "input:\n"
            "  contigs: ${HICWEAVER_UNSET:-contigs.tsv}\n"
        )

        parser = ConfigParser(path)
        assert parser.get('output.prefix') == "run42"
        assert parser.get_input_config()['contigs'] == "contigs.tsv"

    def test_cli_overrides_skip_none(self):
        parser = ConfigParser()
        parser.merge_cli_overrides({
            'partition.n_clusters': 7,
            'partition.min_avg_linkage': None,
        })
        assert parser.get_partition_config()['n_clusters'] == 7
        assert parser.get_partition_config()['min_avg_linkage'] == 0.0

    def test_validate_raises(self):
        parser = ConfigParser()
        parser.merge_cli_overrides({'partition.non_informative_ratio': 0.5})
        with pytest.raises(ConfigValidationError, match="non_informative_ratio"):
            parser.validate()

    def test_invalid_yaml(self, temp_output_dir):
        path = temp_output_dir / "cfg.yaml"
        path.write_text("partition: [unclosed\n")
        with pytest.raises(ConfigValidationError, match="Invalid YAML"):
            ConfigParser(path)

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
