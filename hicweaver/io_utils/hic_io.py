#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Hi-C scaffolding I/O: contig registries, contact matrices, end links,
cluster files and tour files.

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy import sparse

from ..assembly_core.data_structures import Clusters, Contig, HiCContactMatrix, Tour

logger = logging.getLogger(__name__)

_TRUE_VALUES = {'1', 'true', 'yes', 'y', 'skip'}


def _data_lines(path: Path):
    """Yield (line number, tab-split fields) for non-empty, non-comment lines."""
    with open(path, 'r') as f:
        for line_no, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            yield line_no, line.split('\t')


# ============================================================================
#                           CONTIGS & MATRIX
# ============================================================================

def load_contigs_tsv(path: str | Path) -> list[Contig]:
    """
    Load a contig registry.

    Format (tab separated): ``name  length  [skip]``

    Args:
        path: Path to the registry TSV

    Returns:
        Contigs indexed in file order
    """
    path = Path(path)
    contigs = []
    for line_no, fields in _data_lines(path):
        if len(fields) < 2:
            raise ValueError(f"{path}:{line_no}: expected name and length")
        skip = len(fields) > 2 and fields[2].strip().lower() in _TRUE_VALUES
        contigs.append(Contig(
            index=len(contigs),
            name=fields[0],
            length=int(fields[1]),
            skip=skip,
        ))
    logger.info(f"Loaded {len(contigs)} contigs ({sum(c.skip for c in contigs)} skipped) from {path}")
    return contigs


def load_contact_matrix(path: str | Path, contigs: Sequence[Contig]) -> HiCContactMatrix:
    """
    Load contig-contig link counts.

    Supported formats:
        .npy: dense array
        .npz: scipy sparse matrix (``scipy.sparse.save_npz``) or ``np.savez`` array
        otherwise: TSV of ``contig_a  contig_b  links`` by contig name

    Args:
        path: Matrix file
        contigs: Registry defining matrix order

    Returns:
        HiCContactMatrix
    """
    path = Path(path)
    n = len(contigs)

    if path.suffix == '.npy':
        links = np.load(path)
    elif path.suffix == '.npz':
        with np.load(path) as data:
            is_sparse = 'format' in data.files
            if not is_sparse:
                links = data[data.files[0]]
        if is_sparse:
            links = sparse.load_npz(path).toarray()
    else:
        index = {c.name: c.index for c in contigs}
        links = np.zeros((n, n), dtype=np.int64)
        for line_no, fields in _data_lines(path):
            if len(fields) < 3:
                raise ValueError(f"{path}:{line_no}: expected contig_a, contig_b, links")
            a, b = fields[0], fields[1]
            if a not in index or b not in index:
                logger.warning(f"{path}:{line_no}: unknown contig pair {a}, {b}")
                continue
            count = int(float(fields[2]))
            i, j = index[a], index[b]
            links[i, j] += count
            if i != j:
                links[j, i] += count

    logger.info(f"Loaded {n}x{n} contact matrix from {path}")
    return HiCContactMatrix(contigs=list(contigs), links=links)


def load_end_links(path: str | Path, contigs: Sequence[Contig]) -> Dict[Tuple[Tuple[int, int], Tuple[int, int]], float]:
    """
    Load links between contig ends.

    Format (tab separated): ``contig_a  end_a  contig_b  end_b  links`` where
    an end is ``0``/``H`` for the head or ``1``/``T`` for the tail.
    """
    path = Path(path)
    index = {c.name: c.index for c in contigs}
    ends = {'0': 0, 'h': 0, 'head': 0, '1': 1, 't': 1, 'tail': 1}
    end_links: Dict[Tuple[Tuple[int, int], Tuple[int, int]], float] = {}

    for line_no, fields in _data_lines(path):
        if len(fields) < 5:
            raise ValueError(f"{path}:{line_no}: expected 5 columns")
        a, ea, b, eb = fields[0], fields[1].lower(), fields[2], fields[3].lower()
        if ea not in ends or eb not in ends:
            raise ValueError(f"{path}:{line_no}: invalid contig end")
        if a not in index or b not in index:
            logger.warning(f"{path}:{line_no}: unknown contig pair {a}, {b}")
            continue
        key = ((index[a], ends[ea]), (index[b], ends[eb]))
        end_links[key] = end_links.get(key, 0) + float(fields[4])

    logger.info(f"Loaded {len(end_links)} end links from {path}")
    return end_links


# ============================================================================
#                           CLUSTERS
# ============================================================================

def write_clusters_file(clusters: Clusters, contigs: Sequence[Contig], path: str | Path) -> None:
    """
    Write clusters, one group per line.

    Format:
        #Group  nContigs  Contigs
        g1      3         ctg1 ctg4 ctg9
    """
    path = Path(path)
    with open(path, 'w') as f:
        f.write("#Group\tnContigs\tContigs\n")
        for cid, members in clusters.items():
            names = sorted(contigs[i].name for i in members)
            f.write(f"g{cid + 1}\t{len(names)}\t{' '.join(names)}\n")
    logger.info(f"Wrote {len(clusters)} clusters to {path}")


def parse_clusters_file(path: str | Path, contigs: Sequence[Contig]) -> Clusters:
    """Read a clusters file back into cluster id -> contig indices."""
    path = Path(path)
    index = {c.name: c.index for c in contigs}
    clusters: Clusters = {}
    for line_no, fields in _data_lines(path):
        if len(fields) < 3:
            clusters[len(clusters)] = []
            continue
        members = []
        for name in fields[2].split():
            if name not in index:
                logger.error(f"Contig {name} not found!")
                continue
            members.append(index[name])
        clusters[len(clusters)] = sorted(members)
    return clusters


# ============================================================================
#                           TOURS
# ============================================================================

def write_tour_file(tours: Sequence[Tour], path: str | Path, label: str = "INIT") -> None:
    """
    Write tours as a single labelled tour line.

    Tours are concatenated in the given order, e.g. ``>INIT`` followed by
    ``ctg1+ ctg4- ctg9+``.
    """
    path = Path(path)
    tokens: List[str] = []
    for tour in tours:
        tokens.extend(tour.to_tokens())
    with open(path, 'w') as f:
        f.write(f">{label}\n")
        f.write(" ".join(tokens) + "\n")
    logger.info(f"Wrote tour of {len(tokens)} contigs to {path}")


def parse_tour_file(path: str | Path) -> list[tuple[str, str]]:
    """
    Parse a tour file. Only the last tour line is retained.

    Returns:
        (contig name, orientation) pairs
    """
    path = Path(path)
    words: List[str] = []
    with open(path, 'r') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('>'):
                continue
            words = line.split()
    return [(word[:-1], word[-1]) for word in words]

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
