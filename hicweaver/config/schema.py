"""
HiCWeaver v0.1.0

Configuration schema for HiCWeaver.

Defines all available configuration parameters with defaults and validation.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Input Files
    # ========================================================================
    'input': {
        'contigs': None,  # TSV: name, length, [skip]
        'matrix': None,  # .npy / .npz / TSV of contig pair link counts
        'end_links': None,  # TSV of contig end pair link counts
        'clusters': None,  # Clusters file from a previous partition run
    },

    # ========================================================================
    # Partitioning (agglomerative clustering)
    # ========================================================================
    'partition': {
        'n_clusters': 16,  # Target number of chromosome groups
        'min_avg_linkage': 0.0,  # Candidates must score above this
        'non_informative_ratio': 0,  # 0 = keep skipped contigs out; > 1 = recover
    },

    # ========================================================================
    # Anchoring (confidence graph + path assembly)
    # ========================================================================
    'anchor': {
        'min_links': 1,  # End links below this are not turned into edges
        'tour_label': 'INIT',
    },

    # ========================================================================
    # Output & Logging
    # ========================================================================
    'output': {
        'prefix': 'hicweaver',
        'logging': {
            'level': 'INFO',
            'log_file': None,
        },
    },
}

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f) or {}

            # Deep merge user config into defaults
            config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path, template: str = 'default'):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
        template: Template type ('default', 'recover')
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    # Reattach skipped contigs when their best cluster clearly dominates
    if template == 'recover':
        config['partition']['non_informative_ratio'] = 3

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []
    partition = config.get('partition', {})

    n_clusters = partition.get('n_clusters')
    if not isinstance(n_clusters, int) or isinstance(n_clusters, bool) or n_clusters <= 0:
        errors.append(f"partition.n_clusters must be a positive integer, got {n_clusters!r}")

    ratio = partition.get('non_informative_ratio', 0)
    if not isinstance(ratio, (int, float)) or not (ratio == 0 or ratio > 1):
        errors.append(f"partition.non_informative_ratio must be 0 or > 1, got {ratio!r}")

    min_avg_linkage = partition.get('min_avg_linkage', 0.0)
    if not isinstance(min_avg_linkage, (int, float)) or min_avg_linkage < 0:
        errors.append(f"partition.min_avg_linkage must be >= 0, got {min_avg_linkage!r}")

    min_links = config.get('anchor', {}).get('min_links', 1)
    if not isinstance(min_links, (int, float)) or min_links < 0:
        errors.append(f"anchor.min_links must be >= 0, got {min_links!r}")

    level = config.get('output', {}).get('logging', {}).get('level', 'INFO')
    if str(level).upper() not in VALID_LOG_LEVELS:
        errors.append(f"Invalid logging level: {level}")

    return errors
