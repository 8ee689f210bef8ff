"""
SignedModularity - Modularity for networks with positive and negative edges.

Directed form of the signed modularity of Gomez, Jensen & Arenas (2009):

    Q = 1/(w+ + w-) * sum_ij [ (A+_ij - A-_ij)
                               - (g+ * k+out_i * k+in_j / w+  -  g- * k-out_i * k-in_j / w-) ]
                             * delta(c_i, c_j)

Positive edges reward grouping their endpoints together, negative edges
reward separating them. Each null-model term is dropped when its part of the
graph carries no weight, so on a graph without negative edges this reduces to
standard modularity.
"""
from __future__ import annotations

from .modularity import Modularity
from .objective import ObjectiveParameters


class SignedModularity(Modularity):
    """Signed directed modularity with separate positive and negative resolutions."""

    def _check_graph(self, graph):
        pass

    def coefficients(self, graph, parameters: ObjectiveParameters):
        w_pos = graph.total_weight('positive')
        w_neg = graph.total_weight('negative')
        if w_pos + w_neg <= 0:
            return None
        gamma_pos = parameters.resolution / w_pos if w_pos > 0 else 0.0
        gamma_neg = parameters.negative_resolution / w_neg if w_neg > 0 else 0.0
        return 1.0 / (w_pos + w_neg), gamma_pos, gamma_neg
