#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Tests for CLI command interface.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from hicweaver.cli import main


CONTIGS_TSV = "ctg0\t100\nctg1\t100\nctg2\t100\nctg3\t100\n"
MATRIX_TSV = "ctg0\tctg1\t50\nctg2\tctg3\t40\n"
END_LINKS_TSV = "ctg0\tT\tctg1\tH\t10\nctg2\tT\tctg3\tH\t8\n"


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self):
        """Test that --help runs without error."""
        runner = CliRunner()
        result = runner.invoke(main, ['--help'])

        assert result.exit_code == 0
        assert 'HiCWeaver' in result.output

    def test_cli_version(self):
        """Test that --version displays version."""
        runner = CliRunner()
        result = runner.invoke(main, ['--version'])

        assert result.exit_code == 0
        assert '0.1' in result.output

    def test_config_init_and_validate(self):
        """Generated template validates cleanly."""
        runner = CliRunner()

        with runner.isolated_filesystem():
            result = runner.invoke(main, ['config', 'init', '--output', 'test_config.yaml'])
            assert result.exit_code == 0
            assert Path('test_config.yaml').exists()

            result = runner.invoke(main, ['config', 'validate', 'test_config.yaml'])
            assert result.exit_code == 0
            assert 'Configuration is valid' in result.output

    def test_config_validate_rejects_bad_ratio(self):
        runner = CliRunner()

        with runner.isolated_filesystem():
            Path('bad.yaml').write_text("partition:\n  non_informative_ratio: 0.5\n")
            result = runner.invoke(main, ['config', 'validate', 'bad.yaml'])
            assert result.exit_code != 0

    def test_config_show_yaml(self):
        runner = CliRunner()

        with runner.isolated_filesystem():
            runner.invoke(main, ['config', 'init', '--output', 'c.yaml'])
            result = runner.invoke(main, ['config', 'show', 'c.yaml', '--format', 'yaml'])
            assert result.exit_code == 0
            assert 'n_clusters' in result.output

    def test_invalid_command(self):
        """Test that invalid commands are handled gracefully."""
        runner = CliRunner()
        result = runner.invoke(main, ['nonexistent_command'])

        assert result.exit_code != 0


class TestPartitionCLI:
    """Test the partition command end to end."""

    def test_partition_writes_clusters(self):
        runner = CliRunner()

        with runner.isolated_filesystem():
            Path('contigs.tsv').write_text(CONTIGS_TSV)
            Path('links.tsv').write_text(MATRIX_TSV)
            result = runner.invoke(main, [
                'partition',
                '--contigs', 'contigs.tsv',
                '--matrix', 'links.tsv',
                '-k', '2',
                '-o', 'groups.clusters.txt',
                '--print-clusters',
            ])

            assert result.exit_code == 0, result.output
            lines = Path('groups.clusters.txt').read_text().splitlines()
            assert lines[1:] == ["g1\t2\tctg0 ctg1", "g2\t2\tctg2 ctg3"]
            assert "2\tctg0,ctg1" in result.output

    def test_partition_missing_inputs(self):
        runner = CliRunner()
        result = runner.invoke(main, ['partition', '-k', '2'])
        assert result.exit_code != 0

    def test_partition_rejects_bad_target(self):
        runner = CliRunner()

        with runner.isolated_filesystem():
            Path('contigs.tsv').write_text(CONTIGS_TSV)
            Path('links.tsv').write_text(MATRIX_TSV)
            result = runner.invoke(main, [
                'partition', '--contigs', 'contigs.tsv', '--matrix', 'links.tsv', '-k', '0',
            ])
            assert result.exit_code != 0


class TestAnchorCLI:
    """Test the anchor command end to end."""

    def test_anchor_writes_tours_per_group(self):
        runner = CliRunner()

        with runner.isolated_filesystem():
            Path('contigs.tsv').write_text(CONTIGS_TSV)
            Path('links.tsv').write_text(MATRIX_TSV)
            Path('ends.tsv').write_text(END_LINKS_TSV)
            runner.invoke(main, [
                'partition', '--contigs', 'contigs.tsv', '--matrix', 'links.tsv',
                '-k', '2', '-o', 'groups.clusters.txt',
            ])
            result = runner.invoke(main, [
                'anchor',
                '--contigs', 'contigs.tsv',
                '--end-links', 'ends.tsv',
                '--clusters', 'groups.clusters.txt',
                '-o', 'tours',
            ])

            assert result.exit_code == 0, result.output
            tour = Path('tours/hicweaver.g1.tour').read_text().splitlines()
            assert tour[0] == '>INIT'
            assert tour[1] in ("ctg0+ ctg1+", "ctg1- ctg0-")
            assert Path('tours/hicweaver.g2.tour').exists()

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
