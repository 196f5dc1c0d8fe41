#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Anchorer: orders and orients contigs within a cluster.

1. Build a node graph: two oriented ends per contig, joined by a sister edge,
   plus data edges weighted by end-to-end Hi-C link counts
2. Recalibrate data edges into confidences (link density relative to the
   second-best competing density at either end) and prune edges <= 1
3. Walk the confidence graph alternating sister and data edges, breaking
   cycles at their weakest data edge, to produce linear tours

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .data_structures import (
    Contig,
    Edge,
    Graph,
    NodeArena,
    ScaffoldPath,
    Tour,
)

logger = logging.getLogger(__name__)

# ((contig index, end), (contig index, end)) -> links
EndLinks = Mapping[Tuple[Tuple[int, int], Tuple[int, int]], float]


# ============================================================================
#                    NODE GRAPH CONSTRUCTION
# ============================================================================

def build_node_graph(
    contigs: Sequence[Contig],
    end_links: EndLinks,
    min_links: float = 1,
) -> Tuple[NodeArena, Graph]:
    """
    Build the endpoint arena and raw link graph for a set of contigs.

    Args:
        contigs: Contigs to anchor (typically one cluster)
        end_links: Link counts between contig ends, keyed by
            ((contig_index, end), (contig_index, end)); end 0 is the head
        min_links: Data edges with fewer links are ignored

    Returns:
        (arena, graph) with symmetric data edges
    """
    arena = NodeArena()
    handles: Dict[int, Tuple[int, int]] = {}
    for contig in contigs:
        handles[contig.index] = arena.add_path(ScaffoldPath.from_contig(contig))

    graph: Graph = {}
    ignored = 0
    for ((ci, ei), (cj, ej)), links in end_links.items():
        if ci not in handles or cj not in handles:
            continue
        if ci == cj or links < min_links or links <= 0:
            ignored += 1
            continue
        a = handles[ci][ei]
        b = handles[cj][ej]
        graph.setdefault(a, {})
        graph.setdefault(b, {})
        graph[a][b] = graph[a].get(b, 0) + links
        graph[b][a] = graph[b].get(a, 0) + links

    logger.debug(
        f"Node graph: {len(arena)} nodes, {sum(len(nb) for nb in graph.values()) // 2} "
        f"data edges, {ignored} end links ignored"
    )
    return arena, graph


# ============================================================================
#                    CONFIDENCE GRAPH
# ============================================================================

def get_second_largest(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Second largest value among two (largest, second) pairs.

    An edge shared by both endpoints shows up in both pairs; when the two top
    values tie, the next value down is used instead.
    """
    values = sorted(list(a) + list(b))
    largest, second_largest = values[3], values[2]
    if largest == second_largest and values[1] > 0:
        second_largest = values[1]
    return second_largest


def make_confidence_graph(graph: Graph, arena: NodeArena) -> Graph:
    """
    Recalibrate raw link weights into confidences and prune weak edges.

    Density is links / (path length of a * path length of b). Confidence is
    density divided by the second largest density around both endpoints. Edges
    with no competitor at either end are kept with infinite confidence.

    Returns:
        New graph holding only edges with confidence > 1
    """
    density: Graph = {}
    two_largest: Dict[int, Tuple[float, float]] = {}

    for a, neighbors in graph.items():
        first, second = 0.0, 0.0
        density[a] = {}
        for b, links in neighbors.items():
            span = max(arena.path_length(a) * arena.path_length(b), 1)
            score = links / span
            if score > first:
                first, second = score, first
            elif score > second:
                second = score
            density[a][b] = score
        two_largest[a] = (first, second)

    confidence_graph: Graph = {}
    for a, neighbors in density.items():
        for b, score in neighbors.items():
            pair_b = two_largest.get(b, (0.0, 0.0))
            if two_largest[a][1] == 0 and pair_b[1] == 0:
                confidence = math.inf
            else:
                reference = get_second_largest(two_largest[a], pair_b)
                confidence = score / reference if reference > 0 else math.inf
            if confidence > 1:
                confidence_graph.setdefault(a, {})[b] = confidence

    return confidence_graph


# ============================================================================
#                    PATH HELPERS
# ============================================================================

def reverse_path(path: Sequence[Edge]) -> List[Edge]:
    """Reverse an edge path, flipping each edge."""
    return [edge.reversed() for edge in reversed(path)]


def break_cycle(path: Sequence[Edge]) -> List[Edge]:
    """
    Open a cyclic edge path at its weakest data edge.

    The data edge (weight > 1) with the smallest weight is dropped and the
    remaining edges are rotated to start right after it.
    """
    min_index: Optional[int] = None
    min_weight = math.inf
    for i, edge in enumerate(path):
        if edge.weight > 1 and (min_index is None or edge.weight < min_weight):
            min_index, min_weight = i, edge.weight
    if min_index is None:
        min_index = 0
    return list(path[min_index + 1:]) + list(path[:min_index])


def path_to_tour(path: Iterable[Edge], arena: NodeArena, circular: bool = False) -> Tour:
    """
    Convert an edge path into oriented contigs.

    Each sister edge contributes the contigs of its origin node's path; a
    path entered at its tail end is read backwards with flipped orientations.
    """
    tour = Tour(circular=circular)
    for edge in path:
        if not edge.is_sister:
            continue
        node = arena.node(edge.a)
        entries = arena.path_of(edge.a).entries
        if node.end == 1:
            entries = [(contig, _flip(orient)) for contig, orient in reversed(entries)]
        tour.entries.extend(entries)
    return tour


def _flip(orientation: str) -> str:
    return '-' if orientation == '+' else '+'


# ============================================================================
#                    ANCHORER ENGINE
# ============================================================================

class Anchorer:
    """
    Path assembly over one cluster's node graph.

    Each node moves from unvisited to visited once per pass; revisiting a node
    during a walk marks the walk as a cycle.
    """

    def __init__(self, arena: NodeArena, graph: Graph):
        self.arena = arena
        self.graph = graph
        self.confidence_graph: Graph = {}
        self.edge_paths: List[List[Edge]] = []
        self.logger = logging.getLogger(f"{__name__}.Anchorer")

    def make_confidence_graph(self) -> Graph:
        self.confidence_graph = make_confidence_graph(self.graph, self.arena)
        n_raw = sum(len(nb) for nb in self.graph.values())
        n_kept = sum(len(nb) for nb in self.confidence_graph.values())
        self.logger.info(f"Confidence graph retains {n_kept} of {n_raw} directed edges")
        return self.confidence_graph

    def _walk(
        self,
        start: int,
        visited: Set[int],
        visit_sister: bool,
    ) -> Tuple[List[Edge], bool]:
        """
        Follow sister and data edges alternately from start.

        Returns:
            (edge path, True if the walk ran into a visited node)
        """
        path: List[Edge] = []
        node = start
        while True:
            if node in visited:
                return path, True
            visited.add(node)

            if visit_sister:
                sister = self.arena.sister(node)
                path.append(Edge(node, sister, 0.0))
                node = sister
                visit_sister = False
                continue

            neighbors = self.confidence_graph.get(node)
            if not neighbors:
                return path, False
            nxt, weight = next(iter(neighbors.items()))
            path.append(Edge(node, nxt, weight))
            node = nxt
            visit_sister = True

    def generate_paths(self) -> List[Tour]:
        """
        Walk the confidence graph into linear tours covering every node.

        Returns:
            Tours in discovery order
        """
        visited: Set[int] = set()
        tours: List[Tour] = []
        self.edge_paths = []

        starts = list(self.confidence_graph.keys()) + [node.handle for node in self.arena]
        n_cycles = 0
        for a in starts:
            if a in visited:
                continue

            forward, is_cycle = self._walk(a, visited, visit_sister=True)
            if is_cycle:
                path = break_cycle(forward)
                n_cycles += 1
                self.logger.debug(f"Broke cycle of {len(forward)} edges starting at node {a}")
            else:
                visited.discard(a)
                backward, _ = self._walk(a, visited, visit_sister=False)
                path = reverse_path(backward) + forward

            self.edge_paths.append(path)
            tours.append(path_to_tour(path, self.arena, circular=is_cycle))

        self.logger.info(f"Assembled {len(tours)} tours ({n_cycles} from broken cycles)")
        return tours

    def run(self) -> List[Tour]:
        """Recalibrate the graph and assemble tours."""
        self.make_confidence_graph()
        return self.generate_paths()


def assemble_paths(
    contigs: Sequence[Contig],
    end_links: EndLinks,
    min_links: float = 1,
) -> List[Tour]:
    """Convenience wrapper: build the node graph for contigs and anchor it."""
    arena, graph = build_node_graph(contigs, end_links, min_links=min_links)
    return Anchorer(arena, graph).run()

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
