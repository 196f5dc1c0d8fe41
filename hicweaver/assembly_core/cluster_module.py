#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HiCWeaver v0.1.0

Partitioner: hierarchical agglomerative clustering of contigs by Hi-C links.

Contigs are grouped into clusters approximating chromosomes:
1. Every informative contig starts as a singleton cluster
2. Candidate merges are seeded from raw pairwise link counts
3. The best candidate is merged and candidates against the new cluster are
   rescored by average linkage (total links / product of cluster sizes)
4. Merging stops once enough merges happened and the number of live
   multi-contig clusters reaches the target
5. Optionally, skipped contigs are reattached to their best-linked cluster
6. Clusters are ordered by total length and renumbered

Author: HiCWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import heapq
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from .data_structures import Clusters, HiCContactMatrix

logger = logging.getLogger(__name__)


# ============================================================================
#                         DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class MergeCandidate:
    """
    A scored pair of live clusters.

    Attributes:
        a: Smaller cluster id
        b: Larger cluster id
        score: Raw link count (seed) or average linkage (rescored)
    """
    a: int
    b: int
    score: float


@dataclass(frozen=True)
class MergeRecord:
    """One step of the merge history."""
    a: int
    b: int
    new_id: int
    score: float


# ============================================================================
#                         PARTITIONER ENGINE
# ============================================================================

class Partitioner:
    """
    Agglomerative clustering engine over a contig contact matrix.

    Cluster ids live in [0, 2N): ids below N are the initial singletons, and
    the k-th merge creates id N + k. Consumed clusters are flagged as
    non-existent and never reused.
    """

    def __init__(
        self,
        matrix: HiCContactMatrix,
        n_clusters: int,
        min_avg_linkage: float = 0.0,
        non_informative_ratio: float = 0.0,
    ):
        """
        Initialize the partitioner.

        Args:
            matrix: Contig registry and link counts
            n_clusters: Target number of clusters (K)
            min_avg_linkage: Candidates must score above this to be queued
            non_informative_ratio: 0 disables recovery of skipped contigs;
                values > 1 reattach a skipped contig when its best cluster has
                at least this many times the links of the runner-up

        Raises:
            ValueError: On a non-positive target or an invalid ratio
        """
        if n_clusters <= 0:
            raise ValueError(f"n_clusters must be positive, got {n_clusters}")
        if not (non_informative_ratio == 0 or non_informative_ratio > 1):
            raise ValueError(
                f"non_informative_ratio must be 0 or > 1, got {non_informative_ratio}"
            )
        if min_avg_linkage < 0:
            raise ValueError(f"min_avg_linkage must be >= 0, got {min_avg_linkage}")

        self.matrix = matrix
        self.n_clusters = n_clusters
        self.min_avg_linkage = min_avg_linkage
        self.non_informative_ratio = non_informative_ratio

        self.logger = logging.getLogger(f"{__name__}.Partitioner")

        n = matrix.n_contigs
        self.cluster_id = np.full(n, -1, dtype=np.int64)
        self.cluster_size = np.zeros(2 * n, dtype=np.int64)
        self.cluster_exists = np.zeros(2 * n, dtype=bool)
        self.non_singleton_clusters = 0
        self.merges: List[MergeRecord] = []
        self.clusters: Clusters = {}

        self._heap: List[Tuple[float, int, int, int]] = []
        self._sequence = 0

    # ========================================================================
    #                    CANDIDATE QUEUE
    # ========================================================================

    def _push_candidate(self, a: int, b: int, score: float):
        # Ties pop in insertion order via the sequence number
        heapq.heappush(self._heap, (-score, self._sequence, min(a, b), max(a, b)))
        self._sequence += 1

    def _is_live(self, a: int, b: int) -> bool:
        return bool(self.cluster_exists[a] and self.cluster_exists[b])

    def _pop_best(self) -> Optional[MergeCandidate]:
        """Pop the best candidate, discarding entries made stale by earlier merges."""
        while self._heap:
            neg_score, _, a, b = heapq.heappop(self._heap)
            if self._is_live(a, b):
                return MergeCandidate(a, b, -neg_score)
        return None

    @property
    def candidates(self) -> List[MergeCandidate]:
        """Live candidates in selection order."""
        return [
            MergeCandidate(a, b, -neg_score)
            for neg_score, _, a, b in sorted(self._heap)
            if self._is_live(a, b)
        ]

    # ========================================================================
    #                    CLUSTERING
    # ========================================================================

    def _initialize(self) -> int:
        """Create singleton clusters and seed candidates. Returns informative count."""
        n = self.matrix.n_contigs
        self.cluster_id = np.full(n, -1, dtype=np.int64)
        self.cluster_size = np.zeros(2 * n, dtype=np.int64)
        self.cluster_exists = np.zeros(2 * n, dtype=bool)
        self.non_singleton_clusters = 0
        self.merges = []
        self.clusters = {}
        self._heap = []
        self._sequence = 0

        informative = self.matrix.informative
        idx = np.nonzero(informative)[0]
        self.cluster_id[idx] = idx
        self.cluster_size[idx] = 1
        self.cluster_exists[idx] = True

        pair_mask = np.triu(self.matrix.links > self.min_avg_linkage, k=1)
        pair_mask &= informative[:, None] & informative[None, :]
        rows, cols = np.nonzero(pair_mask)
        for i, j in zip(rows.tolist(), cols.tolist()):
            self._push_candidate(i, j, float(self.matrix.links[i, j]))

        self.logger.debug(f"Seeded {len(rows)} merge candidates")
        return len(idx)

    def _merge(self, best: MergeCandidate) -> Tuple[int, np.ndarray]:
        """Merge the two clusters of a candidate. Returns (new id, new members)."""
        n = self.matrix.n_contigs
        new_id = n + len(self.merges)

        self.cluster_exists[best.a] = False
        self.cluster_exists[best.b] = False
        self.cluster_exists[new_id] = True
        self.cluster_size[new_id] = self.cluster_size[best.a] + self.cluster_size[best.b]

        # Singleton sides each add a live group, the merge removes one
        if best.a < n:
            self.non_singleton_clusters += 1
        if best.b < n:
            self.non_singleton_clusters += 1
        self.non_singleton_clusters -= 1

        members = np.nonzero(
            (self.cluster_id == best.a) | (self.cluster_id == best.b)
        )[0]
        self.cluster_id[members] = new_id

        self.merges.append(MergeRecord(best.a, best.b, new_id, best.score))
        return new_id, members

    def _rescore(self, new_id: int, members: np.ndarray):
        """Queue average-linkage candidates between the new cluster and all others."""
        n = self.matrix.n_contigs
        links_to_new = self.matrix.links[:, members].sum(axis=1)

        others = (self.cluster_id != new_id) & (self.cluster_id != -1)
        totals = np.bincount(
            self.cluster_id[others],
            weights=links_to_new[others],
            minlength=2 * n,
        )

        for cid in np.nonzero(totals > 0)[0].tolist():
            if not self.cluster_exists[cid]:
                self.logger.error(f"Cluster {cid} does not exist")
                continue
            avg_linkage = totals[cid] / self.cluster_size[cid] / self.cluster_size[new_id]
            if avg_linkage < self.min_avg_linkage:
                continue
            self._push_candidate(cid, new_id, float(avg_linkage))

    def cluster(self) -> Clusters:
        """
        Run agglomerative clustering.

        Returns:
            Mapping cluster id -> contig indices, ordered by decreasing total
            length with ids renumbered from 0
        """
        n = self.matrix.n_contigs
        n_informative = self._initialize()
        if n_informative == 0:
            self.logger.info(
                "There are no informative contigs for clustering. "
                "Contigs are either short or repetitive."
            )
        self.logger.info(
            f"Clustering starts with {n} ({n_informative} informative) contigs "
            f"with target of {self.n_clusters} clusters"
        )

        while True:
            best = self._pop_best()
            if best is None:
                self.logger.info("No more merges to do since the queue is empty")
                break

            new_id, members = self._merge(best)
            self._rescore(new_id, members)

            n_merges = len(self.merges)
            if n_merges > n // 2 and self.non_singleton_clusters <= self.n_clusters:
                if self.non_singleton_clusters == self.n_clusters:
                    self.logger.info(
                        f"{n_merges} merges made so far; this leaves "
                        f"{self.non_singleton_clusters} clusters, and so we're done"
                    )
                    break
            self.logger.debug(
                f"Merge #{n_merges}: clusters {best.a} + {best.b} -> {new_id}, "
                f"linkage = {best.score:g}"
            )

        self.clusters = self._set_clusters()
        return self.clusters

    # ========================================================================
    #                    RESULT ASSEMBLY
    # ========================================================================

    def _set_clusters(self) -> Clusters:
        clusters: Dict[int, List[int]] = {}
        for i, cid in enumerate(self.cluster_id.tolist()):
            if cid == -1:
                continue
            clusters.setdefault(cid, []).append(i)

        if self.non_informative_ratio > 1:
            self._recover_skipped(clusters)

        return self._sort_clusters(clusters)

    def _recover_skipped(self, clusters: Dict[int, List[int]]):
        """
        Reattach skipped contigs to their best-linked cluster.

        A skipped contig joins the cluster with the largest total linkage if
        that total is at least non_informative_ratio times the runner-up.
        All assignments are decided against the clusters as they stood before
        recovery.
        """
        skipped = np.nonzero(self.cluster_id == -1)[0].tolist()
        if not skipped or not clusters:
            return

        cluster_ids = list(clusters.keys())
        assignments = []
        for i in skipped:
            totals = [
                float(self.matrix.links[i, clusters[cid]].sum()) for cid in cluster_ids
            ]
            order = np.argsort(totals, kind="stable")[::-1]
            best_total = totals[order[0]]
            runner_up = totals[order[1]] if len(order) > 1 else 0.0
            if best_total <= 0:
                continue
            if best_total >= self.non_informative_ratio * runner_up:
                assignments.append((cluster_ids[order[0]], i))

        for cid, i in assignments:
            clusters[cid].append(i)
        for cid in {cid for cid, _ in assignments}:
            clusters[cid].sort()

        self.logger.info(f"Recovered {len(assignments)} of {len(skipped)} skipped contigs")

    def _sort_clusters(self, clusters: Dict[int, List[int]]) -> Clusters:
        """Reorder clusters by decreasing total contig length."""
        lengths = self.matrix.lengths
        ranked = sorted(
            clusters.values(),
            key=lambda members: int(lengths[members].sum()),
            reverse=True,
        )
        return {i: members for i, members in enumerate(ranked)}

    def describe_clusters(self) -> List[Tuple[int, List[str]]]:
        """(size, sorted contig names) for every cluster, in cluster order."""
        rows = []
        for members in self.clusters.values():
            names = sorted(self.matrix.contigs[i].name for i in members)
            rows.append((len(names), names))
        return rows


def cluster_contigs(
    matrix: HiCContactMatrix,
    n_clusters: int,
    min_avg_linkage: float = 0.0,
    non_informative_ratio: float = 0.0,
) -> Clusters:
    """Convenience wrapper: build a Partitioner and run it."""
    partitioner = Partitioner(
        matrix,
        n_clusters=n_clusters,
        min_avg_linkage=min_avg_linkage,
        non_informative_ratio=non_informative_ratio,
    )
    return partitioner.cluster()

# HiCWeaver v0.1.0
# Any usage is subject to this software's license.
