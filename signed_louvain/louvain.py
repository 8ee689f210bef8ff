"""
Louvain - Hierarchical community detection by greedy moves and graph folding.

One instance detects communities once: ``init`` with a graph, an initial
partition and a fold budget, ``run`` (directly or from an executor), then
read ``get_partition``. The local moves and scoring are delegated to a
CommunityObjective, so the same driver serves standard and signed modularity.
"""
from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import LouvainConfig
from .core_utilities import TimingStats, ramp, validate_partition
from .graph import ROW
from .objective import CommunityObjective


@dataclass(frozen=True)
class LevelRecord:
    depth: int
    node_count: int
    improvement: float
    folded_node_count: Optional[int]   # None when the level did not fold
    stop_reason: str                   # 'folded' for levels that recursed


class Louvain:
    """
    Louvain algorithm that partitions the network based on greedy node
    re-assignments and hierarchical partition folding.

    Instances share nothing with each other. The Graph may be shared between
    concurrently running instances because its transforms return new graphs.
    An instance interrupted mid-run holds no meaningful partition.
    """

    def __init__(self, objective: CommunityObjective, config: Optional[LouvainConfig] = None,
                 verbose=False):
        """
        Initialize the driver.

        Parameters:
        -----------
        objective : CommunityObjective
            Supplies greedy (local moves) and evaluate (scoring)
        config : LouvainConfig, optional
            Depth ceiling and shrink threshold, defaults if None
        verbose : bool, default=False
            Whether to print progress messages
        """
        if not isinstance(objective, CommunityObjective):
            raise TypeError(
                f"objective must be a CommunityObjective, got {type(objective).__name__}"
            )
        self.objective = objective
        self.config = config if config is not None else LouvainConfig()
        self.verbose = verbose
        self.timing = TimingStats()

        self.graph = None
        self._partition = None
        self.fold_count = 0     # number of times graph is folded for hierarchical detection
        self._id = 0            # to be identified among other scheduled instances
        self._levels: List[LevelRecord] = []

    def init(self, graph, initial_partition, fold_count):
        """
        Store the inputs of one run.

        A negative ``fold_count`` folds until convergence, bounded only by
        ``config.max_depth``; 0 runs a single, non-hierarchical level.
        """
        self._partition = validate_partition(initial_partition, graph.node_count)
        self.graph = graph
        self.fold_count = int(fold_count)
        return self

    def run(self):
        if self.graph is None:
            raise RuntimeError("Louvain.run called before init")
        self._partition = self.detect(self.graph, self._partition, self.fold_count)

    def __call__(self):
        self.run()

    def detect(self, graph, initial_partition, fold_count):
        """
        Detect communities of ``graph`` starting from ``initial_partition``.

        Returns:
        --------
        numpy.ndarray
            Group id per node of ``graph``; the input is left untouched
        """
        partition = validate_partition(initial_partition, graph.node_count)
        self._levels = []
        self.timing.start("detect")
        partition = self._detect(graph, partition, int(fold_count), 0)
        elapsed = self.timing.end("detect")

        last = self._levels[-1]
        if last.stop_reason == 'max_depth':
            warnings.warn(
                f"Louvain stopped folding at depth {last.depth}: max_depth={self.config.max_depth} "
                f"reached while the objective was still improving ({last.improvement:.3g})",
                RuntimeWarning,
                stacklevel=2,
            )
        if self.verbose:
            n_groups = len(np.unique(partition))
            print(f"[Louvain {self._id}] {graph.node_count} nodes -> {n_groups} communities "
                  f"over {len(self._levels)} levels in {elapsed:.3f}s")
            print(self.timing.get_stats())
        return partition

    def _detect(self, graph, initial_partition, fold_count, depth):
        partition = np.array(initial_partition, dtype=np.int64, copy=True)
        n_nodes = graph.node_count
        if partition.shape[0] <= 1:
            self._record(depth, n_nodes, 0.0, None, 'trivial')
            return partition

        transpose = graph.transpose(retain_self_loops=True)
        self.timing.start("detect.greedy")
        improvement = float(self.greedy(graph, transpose, partition))
        self.timing.end("detect.greedy")

        if improvement <= 0.0:
            # No further improvement was made by coarse-graining
            self._record(depth, n_nodes, improvement, None, 'converged')
            return partition
        if fold_count == 0:
            self._record(depth, n_nodes, improvement, None, 'fold_budget')
            return partition
        if depth + 1 >= self.config.max_depth:
            self._record(depth, n_nodes, improvement, None, 'max_depth')
            return partition

        # Positive and negative sub-graphs are folded separately by the graph
        self.timing.start("detect.fold")
        folded = graph.fold(partition)
        self.timing.end("detect.fold")
        size_ratio = folded.node_count / n_nodes
        if size_ratio > self.config.max_size_ratio:
            self._record(depth, n_nodes, improvement, folded.node_count, 'no_shrink')
            return partition
        if folded.node_count <= 1:
            self._record(depth, n_nodes, improvement, folded.node_count, 'collapsed')
            return partition

        self._record(depth, n_nodes, improvement, folded.node_count, 'folded')
        if self.verbose:
            print(f"[Louvain {self._id}] level {depth}: {n_nodes} -> {folded.node_count} nodes, "
                  f"improvement={improvement:.6f}")

        super_partition = self._detect(folded, ramp(folded.node_count), fold_count - 1, depth + 1)

        # A node in group g at this level moves to the group of the super-node
        # that g became. row_map holds g for every super-node; g may exceed the
        # super-node count, so the lookup table is sized by the largest g.
        self.timing.start("detect.remap")
        row_map = folded.get_list_matrix().get_to_raw()[ROW]
        super_group = np.zeros(int(row_map.max()) + 1, dtype=np.int64)
        super_group[row_map] = super_partition
        partition = super_group[partition]
        self.timing.end("detect.remap")
        return partition

    def _record(self, depth, node_count, improvement, folded_node_count, stop_reason):
        self._levels.append(LevelRecord(depth, node_count, improvement,
                                        folded_node_count, stop_reason))

    def greedy(self, graph, transpose, partition):
        """One level of greedy moves, applied to ``partition`` in place."""
        return self.objective.greedy(graph, transpose, partition)

    def local_change(self, parameters):
        return self.objective.local_change(parameters)

    def evaluate(self, graph=None, partition=None, parameters=None):
        """Score a partition, by default this instance's graph and current partition."""
        graph = graph if graph is not None else self.graph
        partition = partition if partition is not None else self._partition
        if graph is None or partition is None:
            raise RuntimeError("Nothing to evaluate: pass a graph and partition or call init first")
        return self.objective.evaluate(graph, partition, parameters)

    def get_partition(self):
        return None if self._partition is None else self._partition.copy()

    def get_levels(self):
        return list(self._levels)

    def set_id(self, instance_id):
        self._id = instance_id
        return self

    def get_id(self):
        return self._id

    @property
    def id(self):
        return self._id

    def __repr__(self):
        return f"Louvain(id={self._id}, objective={self.objective!r}, fold_count={self.fold_count})"
