"""
Assembly Core module for HiCWeaver.

This module provides the Hi-C scaffolding algorithms:
- Hierarchical agglomerative clustering of contigs into chromosome groups
- Confidence graph construction over oriented contig ends
- Path assembly with cycle breaking into linear tours
"""

from .data_structures import (
    Clusters,
    Contig,
    Edge,
    Graph,
    GraphIntegrityError,
    HiCContactMatrix,
    Node,
    NodeArena,
    ScaffoldPath,
    Tour,
    make_contigs,
)
from .cluster_module import (
    MergeCandidate,
    MergeRecord,
    Partitioner,
    cluster_contigs,
)
from .anchor_module import (
    Anchorer,
    assemble_paths,
    break_cycle,
    build_node_graph,
    get_second_largest,
    make_confidence_graph,
    path_to_tour,
    reverse_path,
)

__all__ = [
    # Engines
    "Partitioner",
    "Anchorer",
    # Functions
    "cluster_contigs",
    "assemble_paths",
    "build_node_graph",
    "make_confidence_graph",
    "get_second_largest",
    "break_cycle",
    "reverse_path",
    "path_to_tour",
    "make_contigs",
    # Data structures
    "Clusters",
    "Contig",
    "Edge",
    "Graph",
    "GraphIntegrityError",
    "HiCContactMatrix",
    "MergeCandidate",
    "MergeRecord",
    "Node",
    "NodeArena",
    "ScaffoldPath",
    "Tour",
]
