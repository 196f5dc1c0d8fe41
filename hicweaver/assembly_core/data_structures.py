#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Core data structures shared by the partitioning and anchoring engines.

1. Contig registry and Hi-C contact matrix
2. Scaffold paths (ordered, oriented contig runs)
3. Node arena: two oriented endpoints per path, addressed by integer handles
4. Edges, graphs and tours produced by path assembly

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# Cluster id -> ordered contig indices
Clusters = Dict[int, List[int]]

# Node handle -> (neighbor handle -> weight)
Graph = Dict[int, Dict[int, float]]

HEAD = 0
TAIL = 1


class GraphIntegrityError(Exception):
    """Raised when the node arena or graph violates a structural invariant."""
    pass


# ============================================================================
#                     CONTIG REGISTRY & CONTACT MATRIX
# ============================================================================

@dataclass(frozen=True)
class Contig:
    """
    A contig taking part in scaffolding.

    Attributes:
        index: Position of the contig in the contact matrix
        name: Contig name as it appears in the assembly
        length: Contig length in bases
        skip: True for contigs excluded from clustering (short or repetitive)
    """
    index: int
    name: str
    length: int
    skip: bool = False


@dataclass
class HiCContactMatrix:
    """
    Dense contig-contig Hi-C link counts.

    The matrix is kept symmetric with a zero diagonal; asymmetric input is
    symmetrized by taking the larger of the two mirrored counts.
    """
    contigs: List[Contig]
    links: np.ndarray

    def __post_init__(self):
        self.links = np.asarray(self.links)
        n = len(self.contigs)
        if self.links.shape != (n, n):
            raise ValueError(
                f"Contact matrix shape {self.links.shape} does not match {n} contigs"
            )
        if n and self.links.min() < 0:
            raise ValueError("Contact matrix contains negative link counts")
        for i, contig in enumerate(self.contigs):
            if contig.index != i:
                raise ValueError(f"Contig {contig.name} has index {contig.index}, expected {i}")

        if not np.array_equal(self.links, self.links.T):
            logger.warning("Contact matrix is not symmetric, using max of mirrored counts")
            self.links = np.maximum(self.links, self.links.T)

        if n:
            self.links = self.links.copy()
            np.fill_diagonal(self.links, 0)

    @property
    def n_contigs(self) -> int:
        return len(self.contigs)

    @property
    def lengths(self) -> np.ndarray:
        return np.array([c.length for c in self.contigs], dtype=np.int64)

    @property
    def informative(self) -> np.ndarray:
        """Boolean mask of contigs that take part in clustering."""
        return np.array([not c.skip for c in self.contigs], dtype=bool)

    def get_links(self, i: int, j: int) -> float:
        """Link count between contigs i and j."""
        return self.links[i, j]


# ============================================================================
#                        PATHS, NODES & EDGES
# ============================================================================

@dataclass
class ScaffoldPath:
    """An ordered run of oriented contigs treated as one unit during anchoring."""
    entries: List[Tuple[Contig, str]]

    @property
    def length(self) -> int:
        return sum(contig.length for contig, _ in self.entries)

    @classmethod
    def from_contig(cls, contig: Contig) -> "ScaffoldPath":
        return cls(entries=[(contig, '+')])


@dataclass
class Node:
    """
    One oriented end of a scaffold path.

    Attributes:
        handle: Stable index of this node in its arena
        path_index: Index of the containing path in the arena
        end: 0 for the head end, 1 for the tail end
        sister: Handle of the opposite end of the same path
    """
    handle: int
    path_index: int
    end: int
    sister: Optional[int] = None


class NodeArena:
    """
    Owns paths and their endpoint nodes.

    Relationships are stored as integer handles, so graphs built on top of the
    arena are plain dictionaries of ints.
    """

    def __init__(self):
        self.paths: List[ScaffoldPath] = []
        self.nodes: List[Node] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def add_node(self, path_index: int, end: int) -> int:
        handle = len(self.nodes)
        self.nodes.append(Node(handle=handle, path_index=path_index, end=end))
        return handle

    def link_sisters(self, a: int, b: int):
        """Join two nodes as the opposite ends of one unit."""
        node_a, node_b = self.nodes[a], self.nodes[b]
        if node_a.sister is not None or node_b.sister is not None:
            raise GraphIntegrityError(f"Node {a} or {b} already has a sister")
        node_a.sister = b
        node_b.sister = a

    def add_path(self, path: ScaffoldPath) -> Tuple[int, int]:
        """
        Register a path and create its head and tail nodes.

        Returns:
            (head_handle, tail_handle)
        """
        path_index = len(self.paths)
        self.paths.append(path)
        head = self.add_node(path_index, HEAD)
        tail = self.add_node(path_index, TAIL)
        self.link_sisters(head, tail)
        return head, tail

    def node(self, handle: int) -> Node:
        return self.nodes[handle]

    def sister(self, handle: int) -> int:
        sister = self.nodes[handle].sister
        if sister is None:
            raise GraphIntegrityError(f"Node {handle} has no sister edge")
        return sister

    def path_of(self, handle: int) -> ScaffoldPath:
        return self.paths[self.nodes[handle].path_index]

    def path_length(self, handle: int) -> int:
        return self.path_of(handle).length


@dataclass(frozen=True)
class Edge:
    """Directed edge between two node handles. Weight 0 marks a sister edge."""
    a: int
    b: int
    weight: float = 0.0

    @property
    def is_sister(self) -> bool:
        return self.weight == 0

    def reversed(self) -> "Edge":
        return Edge(self.b, self.a, self.weight)


@dataclass
class Tour:
    """
    Linear, oriented contig order produced by path assembly.

    Attributes:
        entries: (contig, orientation) pairs, orientation '+' or '-'
        circular: True if the tour came from breaking a cycle
    """
    entries: List[Tuple[Contig, str]] = field(default_factory=list)
    circular: bool = False

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def length(self) -> int:
        return sum(contig.length for contig, _ in self.entries)

    @property
    def contig_indices(self) -> List[int]:
        return [contig.index for contig, _ in self.entries]

    def to_tokens(self) -> List[str]:
        """Tour file tokens, e.g. ``['ctg1+', 'ctg7-']``."""
        return [f"{contig.name}{orientation}" for contig, orientation in self.entries]


def make_contigs(
    names: Sequence[str],
    lengths: Sequence[int],
    skip: Optional[Sequence[bool]] = None,
) -> List[Contig]:
    """Build an indexed contig registry from parallel name/length/skip lists."""
    if len(names) != len(lengths):
        raise ValueError("names and lengths must have equal size")
    if skip is None:
        skip = [False] * len(names)
    return [
        Contig(index=i, name=name, length=int(length), skip=bool(s))
        for i, (name, length, s) in enumerate(zip(names, lengths, skip))
    ]

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
