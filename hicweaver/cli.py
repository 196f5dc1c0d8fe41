#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for HiCWeaver.

This module provides the main CLI entry point and all subcommands for
Hi-C contig partitioning and anchoring.
"""

import logging
import sys
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.parser import ConfigParser, ConfigValidationError
from .config.schema import load_config, save_config_template, validate_config
from .assembly_core.cluster_module import Partitioner
from .assembly_core.anchor_module import assemble_paths
from .assembly_core.data_structures import HiCContactMatrix
from .io_utils.hic_io import (
    load_contigs_tsv,
    load_contact_matrix,
    load_end_links,
    parse_clusters_file,
    write_clusters_file,
    write_tour_file,
)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    HiCWeaver: Hi-C Contig Partitioning and Scaffolding

    Groups contigs into chromosome-scale clusters by Hi-C link counts and
    orders and orients the contigs of each cluster into linear tours.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet


def _setup_logging(ctx, parser: ConfigParser):
    """Configure root logging from CLI flags, falling back to the config level."""
    obj = ctx.obj or {}
    logging_config = parser.get_output_config().get('logging', {})
    if obj.get('VERBOSE'):
        level = logging.DEBUG
    elif obj.get('QUIET'):
        level = logging.WARNING
    else:
        level = getattr(logging, str(logging_config.get('level', 'INFO')).upper())

    handlers = [logging.StreamHandler()]
    log_file = logging_config.get('log_file')
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def _load_parser(config_file, overrides) -> ConfigParser:
    """Load configuration, apply CLI overrides and validate, exiting on errors."""
    try:
        parser = ConfigParser(config_file)
        parser.merge_cli_overrides(overrides)
        parser.validate()
    except (ConfigValidationError, FileNotFoundError) as e:
        click.echo(f"✗ Invalid configuration: {e}", err=True)
        sys.exit(1)
    return parser


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='hicweaver_config.yaml',
              help='Output configuration file path')
@click.option('--template', '-t', type=click.Choice(['default', 'recover']),
              default='default', help='Configuration template type')
def config_init(output, template):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating {template} configuration template: {output}")

    try:
        save_config_template(Path(output), template=template)
        click.echo(f"✓ Configuration file created: {output}")
    except OSError as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(1)


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = load_config(Path(config_file))
    except yaml.YAMLError as e:
        click.echo(f"✗ Error validating configuration: {e}", err=True)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")
    click.echo("\nKey Settings:")
    click.echo(f"  Target clusters: {config['partition']['n_clusters']}")
    click.echo(f"  Min average linkage: {config['partition']['min_avg_linkage']}")
    ratio = config['partition']['non_informative_ratio']
    click.echo(f"  Skipped contig recovery: {'DISABLED' if ratio == 0 else f'ratio {ratio}'}")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        config = load_config(Path(config_file))
    except yaml.YAMLError as e:
        click.echo(f"✗ Error reading configuration: {e}", err=True)
        sys.exit(1)

    if format == 'yaml':
        click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        return

    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)
    click.echo("\nPartition:")
    for key, value in config['partition'].items():
        click.echo(f"  {key}: {value}")
    click.echo("\nAnchor:")
    for key, value in config['anchor'].items():
        click.echo(f"  {key}: {value}")
    click.echo("\nOutput:")
    click.echo(f"  Prefix: {config['output']['prefix']}")
    click.echo(f"  Log level: {config['output']['logging']['level']}")


# ============================================================================
# Scaffolding Commands
# ============================================================================

@main.command()
@click.option('--contigs', type=click.Path(exists=True),
              help='Contig registry TSV (name, length, [skip])')
@click.option('--matrix', '-m', type=click.Path(exists=True),
              help='Contact matrix (.npy, .npz or pair TSV)')
@click.option('--n-clusters', '-k', type=int, default=None,
              help='Target number of clusters')
@click.option('--min-avg-linkage', type=float, default=None,
              help='Minimum average linkage for a merge candidate')
@click.option('--non-informative-ratio', type=float, default=None,
              help='0 disables recovery of skipped contigs, > 1 enables it')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='YAML configuration file')
@click.option('--output', '-o', type=click.Path(), default=None,
              help='Clusters file to write (default: <prefix>.clusters.txt)')
@click.option('--print-clusters', is_flag=True, help='Print cluster contents')
@click.pass_context
def partition(ctx, contigs, matrix, n_clusters, min_avg_linkage, non_informative_ratio,
              config_file, output, print_clusters):
    """Cluster contigs into chromosome groups by Hi-C linkage."""
    parser = _load_parser(config_file, {
        'input.contigs': contigs,
        'input.matrix': matrix,
        'partition.n_clusters': n_clusters,
        'partition.min_avg_linkage': min_avg_linkage,
        'partition.non_informative_ratio': non_informative_ratio,
    })
    _setup_logging(ctx, parser)

    inputs = parser.get_input_config()
    contigs_path = inputs.get('contigs')
    matrix_path = inputs.get('matrix')
    if not contigs_path or not matrix_path:
        click.echo("✗ Both --contigs and --matrix are required", err=True)
        sys.exit(1)

    registry = load_contigs_tsv(contigs_path)
    contact_matrix: HiCContactMatrix = load_contact_matrix(matrix_path, registry)

    settings = parser.get_partition_config()
    partitioner = Partitioner(
        contact_matrix,
        n_clusters=settings['n_clusters'],
        min_avg_linkage=settings['min_avg_linkage'],
        non_informative_ratio=settings['non_informative_ratio'],
    )
    clusters = partitioner.cluster()

    output = output or f"{parser.get_output_config()['prefix']}.clusters.txt"
    write_clusters_file(clusters, registry, output)

    if print_clusters:
        for size, names in partitioner.describe_clusters():
            click.echo(f"{size}\t{','.join(names)}")

    click.echo(f"✓ {len(clusters)} clusters after {len(partitioner.merges)} merges: {output}")


@main.command()
@click.option('--contigs', type=click.Path(exists=True),
              help='Contig registry TSV (name, length, [skip])')
@click.option('--end-links', '-l', type=click.Path(exists=True),
              help='Contig end link TSV (contig_a, end_a, contig_b, end_b, links)')
@click.option('--clusters', type=click.Path(exists=True),
              help='Clusters file; all contigs form one group if omitted')
@click.option('--min-links', type=float, default=None,
              help='End links below this are ignored')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='YAML configuration file')
@click.option('--output-dir', '-o', type=click.Path(), default='.',
              help='Directory for per-group tour files')
@click.pass_context
def anchor(ctx, contigs, end_links, clusters, min_links, config_file, output_dir):
    """Order and orient the contigs of each cluster into tours."""
    parser = _load_parser(config_file, {
        'input.contigs': contigs,
        'input.end_links': end_links,
        'input.clusters': clusters,
        'anchor.min_links': min_links,
    })
    _setup_logging(ctx, parser)

    inputs = parser.get_input_config()
    contigs_path = inputs.get('contigs')
    end_links_path = inputs.get('end_links')
    if not contigs_path or not end_links_path:
        click.echo("✗ Both --contigs and --end-links are required", err=True)
        sys.exit(1)

    registry = load_contigs_tsv(contigs_path)
    links = load_end_links(end_links_path, registry)

    clusters_path = inputs.get('clusters')
    if clusters_path:
        groups = parse_clusters_file(clusters_path, registry)
    else:
        groups = {0: [c.index for c in registry]}

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    prefix = parser.get_output_config()['prefix']
    settings = parser.get_anchor_config()
    label = settings.get('tour_label', 'INIT')

    for group_id, members in groups.items():
        if not members:
            continue
        tours = assemble_paths(
            [registry[i] for i in members],
            links,
            min_links=settings['min_links'],
        )
        tours.sort(key=lambda t: t.length, reverse=True)
        tour_path = output_dir / f"{prefix}.g{group_id + 1}.tour"
        write_tour_file(tours, tour_path, label=label)
        click.echo(f"✓ Group {group_id + 1}: {len(members)} contigs in {len(tours)} tours -> {tour_path}")


if __name__ == '__main__':
    sys.exit(main())
