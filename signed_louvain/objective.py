"""
Community objectives - the capability the Louvain driver plugs into.

An objective knows how to improve a partition greedily at one level of the
hierarchy and how to score a partition. The driver never inspects the
objective's parameters; it only calls ``greedy`` and, for comparisons
between runs, ``evaluate``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

# Gains at or below this are float noise, not improvements
MOVE_TOLERANCE = 1e-12


@dataclass(frozen=True)
class ObjectiveParameters:
    resolution: float = 1.0            # gamma of the positive null model
    negative_resolution: float = 1.0   # gamma of the negative null model
    max_passes: int = -1               # passes over all nodes per greedy call, -1 = until convergence
    epsilon: float = 1e-7              # minimum gain of a pass to run another one
    random_state: Optional[int] = None # shuffle node visit order when set

    def with_seed(self, random_state):
        """Copy of these parameters with another random_state."""
        return replace(self, random_state=random_state)


@dataclass(frozen=True)
class LocalMove:
    """
    Aggregates describing one candidate move of node n into group c.

    Weights toward c exclude n's self-loop; group totals exclude n itself.
    """
    positive_to_group: float = 0.0     # n -> c
    positive_from_group: float = 0.0   # c -> n
    negative_to_group: float = 0.0
    negative_from_group: float = 0.0
    positive_out: float = 0.0          # out-weight of n
    positive_in: float = 0.0
    negative_out: float = 0.0
    negative_in: float = 0.0
    group_positive_out: float = 0.0    # out-weight of c without n
    group_positive_in: float = 0.0
    group_negative_out: float = 0.0
    group_negative_in: float = 0.0
    scale: float = 0.0                 # objective normaliser, 0 when the graph has no weight
    gamma_positive: float = 0.0
    gamma_negative: float = 0.0


class CommunityObjective(ABC):
    """
    Base class of a modularity variant.

    ``greedy`` mutates the partition it is handed in place; callers that need
    to keep the input must pass a copy. The driver always hands over a buffer
    owned by the current recursion level.
    """

    def __init__(self, parameters: Optional[ObjectiveParameters] = None):
        self.parameters = parameters if parameters is not None else ObjectiveParameters()

    @abstractmethod
    def greedy(self, graph, transpose, partition: np.ndarray) -> float:
        """
        Greedily move nodes into their best neighbouring groups until convergence.

        Parameters:
        -----------
        graph : Graph
            Graph of the current level
        transpose : Graph
            Transpose of graph, for fast traversal of incoming edges
        partition : numpy.ndarray
            Initial partition, changes are applied to it in place

        Returns:
        --------
        float
            Improvement of the objective, <= 0 when no move helped
        """

    @abstractmethod
    def evaluate(self, graph, partition, parameters: Optional[ObjectiveParameters] = None) -> float:
        """Quality of a partition, using this objective's parameters unless others are given."""

    def local_change(self, parameters) -> float:
        """Change in the objective caused by one move; 0.0 unless a variant defines it."""
        return 0.0

    def __repr__(self):
        return f"{type(self).__name__}({self.parameters})"
