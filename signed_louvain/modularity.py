"""
Modularity - Directed Newman modularity as a Louvain objective.

    Q = 1/m * sum_ij [A_ij - gamma * kout_i * kin_j / m] * delta(c_i, c_j)

where m is the total edge weight. Only non-negative weights are meaningful
here; use SignedModularity for graphs with negative edges.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from .local_moving import partition_quality, run_local_moving
from .objective import MOVE_TOLERANCE, CommunityObjective, LocalMove, ObjectiveParameters


class Modularity(CommunityObjective):
    """Standard directed modularity with a resolution parameter."""

    def _check_graph(self, graph):
        if graph.has_negative:
            raise ValueError(
                "Modularity is undefined for negative weights, use SignedModularity instead"
            )

    def coefficients(self, graph, parameters: ObjectiveParameters):
        """
        Return (scale, gamma_pos, gamma_neg) of the shared gain formula,
        or None when the graph carries no weight at all.
        """
        total = graph.total_weight('positive')
        if total <= 0:
            return None
        return 1.0 / total, parameters.resolution / total, 0.0

    def greedy(self, graph, transpose, partition: np.ndarray) -> float:
        self._check_graph(graph)
        if graph.node_count == 0:
            return 0.0
        coefficients = self.coefficients(graph, self.parameters)
        if coefficients is None:
            return 0.0
        scale, gamma_pos, gamma_neg = coefficients
        return run_local_moving(
            graph, transpose, partition, scale, gamma_pos, gamma_neg,
            max_passes=self.parameters.max_passes,
            epsilon=self.parameters.epsilon,
            tolerance=MOVE_TOLERANCE,
            random_state=self.parameters.random_state,
        )

    def evaluate(self, graph, partition, parameters: Optional[ObjectiveParameters] = None) -> float:
        self._check_graph(graph)
        parameters = parameters if parameters is not None else self.parameters
        coefficients = self.coefficients(graph, parameters)
        if coefficients is None:
            return 0.0
        return partition_quality(graph, partition, *coefficients)

    def local_change(self, parameters) -> float:
        """
        Objective contribution of placing a node into a group, relative to
        leaving it alone. The gain of moving a node from group a to b is
        ``local_change(move_b) - local_change(move_a)``.

        ``parameters`` is a LocalMove, usually built by ``move_statistics``.
        """
        move = parameters
        gain = ((move.positive_to_group + move.positive_from_group)
                - (move.negative_to_group + move.negative_from_group)
                - move.gamma_positive * (move.positive_out * move.group_positive_in
                                         + move.positive_in * move.group_positive_out)
                + move.gamma_negative * (move.negative_out * move.group_negative_in
                                         + move.negative_in * move.group_negative_out))
        return move.scale * gain

    def move_statistics(self, graph, partition, node, group) -> LocalMove:
        """Collect the LocalMove aggregates for placing ``node`` into ``group``."""
        partition = np.asarray(partition, dtype=np.int64)
        coefficients = self.coefficients(graph, self.parameters) or (0.0, 0.0, 0.0)
        members = (partition == group)
        members[node] = False

        def between(part):
            row = part.getrow(node).toarray().ravel()
            col = part.getcol(node).toarray().ravel()
            row[node] = 0.0
            col[node] = 0.0
            return float(row[members].sum()), float(col[members].sum())

        p_to, p_from = between(graph.positive)
        n_to, n_from = between(graph.negative)
        out_p, in_p = graph.out_weights('positive'), graph.in_weights('positive')
        out_n, in_n = graph.out_weights('negative'), graph.in_weights('negative')
        return LocalMove(
            positive_to_group=p_to,
            positive_from_group=p_from,
            negative_to_group=n_to,
            negative_from_group=n_from,
            positive_out=float(out_p[node]),
            positive_in=float(in_p[node]),
            negative_out=float(out_n[node]),
            negative_in=float(in_n[node]),
            group_positive_out=float(out_p[members].sum()),
            group_positive_in=float(in_p[members].sum()),
            group_negative_out=float(out_n[members].sum()),
            group_negative_in=float(in_n[members].sum()),
            scale=coefficients[0],
            gamma_positive=coefficients[1],
            gamma_negative=coefficients[2],
        )
