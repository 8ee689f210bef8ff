"""Shared graphs and fake objectives for the test suite."""

import numpy as np
import pytest

from signed_louvain.graph import Graph
from signed_louvain.objective import CommunityObjective


def clique_edges(nodes):
    return [(u, v) for u in nodes for v in nodes if u != v]


def build_two_cliques():
    """Two directed 4-cliques (0-3 and 4-7) joined by a 3 <-> 4 bridge."""
    edges = clique_edges(range(4)) + clique_edges(range(4, 8)) + [(3, 4), (4, 3)]
    sources, targets = zip(*edges)
    return Graph.from_edges(sources, targets, n_nodes=8)


def build_triad():
    """Three nodes whose transition probabilities are 1/4-3/4, 1/2-1/2 and 3/4-1/4."""
    return Graph.from_edges(
        [0, 0, 1, 1, 2, 2],
        [1, 2, 0, 2, 0, 1],
        [1.0, 3.0, 1.0, 1.0, 3.0, 1.0],
    )


def build_signed_square():
    """Positive pairs {0,1} and {2,3}, negative edges across them."""
    return Graph.from_edges(
        [0, 1, 2, 3, 0, 2, 1, 3],
        [1, 0, 3, 2, 2, 0, 3, 1],
        [1.0, 1.0, 1.0, 1.0, -1.0, -1.0, -1.0, -1.0],
    )


def build_ring(n_nodes):
    sources = np.arange(n_nodes)
    return Graph.from_edges(sources, (sources + 1) % n_nodes, n_nodes=n_nodes)


def random_signed_graph(n_nodes, density, seed):
    rng = np.random.default_rng(seed)
    mask = rng.random((n_nodes, n_nodes)) < density
    weights = rng.normal(size=(n_nodes, n_nodes)) * mask
    return Graph.from_matrix(weights)


def same_grouping(a, b):
    """True when two partitions group the nodes identically, whatever the labels."""
    a = np.asarray(a)
    b = np.asarray(b)
    return (a[:, None] == a[None, :]).tolist() == (b[:, None] == b[None, :]).tolist()


class StallingObjective(CommunityObjective):
    """Greedy that never moves anything."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def greedy(self, graph, transpose, partition):
        self.calls += 1
        return 0.0

    def evaluate(self, graph, partition, parameters=None):
        return 0.0


class ScriptedObjective(CommunityObjective):
    """Writes a prepared partition for each level, keyed by the level's node count."""

    def __init__(self, script, improvement=1.0):
        super().__init__()
        self.script = script
        self.improvement = improvement
        self.seen = []

    def greedy(self, graph, transpose, partition):
        self.seen.append(graph.node_count)
        target = self.script.get(graph.node_count)
        if target is None:
            return 0.0
        partition[:] = target
        return self.improvement

    def evaluate(self, graph, partition, parameters=None):
        return float(len(np.unique(partition)))


class MergeFirstTwoObjective(CommunityObjective):
    """Always merges node 1 into node 0's group and claims an improvement."""

    def greedy(self, graph, transpose, partition):
        partition[1] = partition[0]
        return 1.0

    def evaluate(self, graph, partition, parameters=None):
        return 0.0


class FailingObjective(CommunityObjective):
    def greedy(self, graph, transpose, partition):
        raise RuntimeError("greedy exploded")

    def evaluate(self, graph, partition, parameters=None):
        return 0.0


@pytest.fixture
def two_cliques():
    return build_two_cliques()


@pytest.fixture
def triad():
    return build_triad()


@pytest.fixture
def signed_square():
    return build_signed_square()
