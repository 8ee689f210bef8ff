"""Tests for modularity.py and signed_modularity.py — greedy moves and scoring."""

import numpy as np
import pytest

from signed_louvain.core_utilities import ramp
from signed_louvain.graph import Graph
from signed_louvain.modularity import Modularity
from signed_louvain.objective import LocalMove, ObjectiveParameters
from signed_louvain.signed_modularity import SignedModularity

from conftest import random_signed_graph, same_grouping

CLIQUES = [0, 0, 0, 0, 1, 1, 1, 1]


class TestModularityEvaluate:
    def test_two_cliques_value(self, two_cliques):
        # 24 internal of 26 total, each group has out = in = 13
        q = Modularity().evaluate(two_cliques, CLIQUES)
        assert q == pytest.approx((24 - (13 * 13 + 13 * 13) / 26) / 26)

    def test_single_group_is_zero(self, two_cliques):
        assert Modularity().evaluate(two_cliques, [0] * 8) == pytest.approx(0.0)

    def test_labels_do_not_matter(self, two_cliques):
        m = Modularity()
        assert m.evaluate(two_cliques, [7, 7, 7, 7, 2, 2, 2, 2]) == pytest.approx(
            m.evaluate(two_cliques, CLIQUES))

    def test_resolution_lowers_score(self, two_cliques):
        low = Modularity(ObjectiveParameters(resolution=0.5)).evaluate(two_cliques, CLIQUES)
        high = Modularity(ObjectiveParameters(resolution=2.0)).evaluate(two_cliques, CLIQUES)
        assert low > high

    def test_parameters_override(self, two_cliques):
        m = Modularity()
        override = ObjectiveParameters(resolution=2.0)
        assert m.evaluate(two_cliques, CLIQUES, override) == pytest.approx(
            Modularity(override).evaluate(two_cliques, CLIQUES))

    def test_rejects_negative_weights(self, signed_square):
        with pytest.raises(ValueError, match="SignedModularity"):
            Modularity().evaluate(signed_square, [0, 0, 1, 1])

    def test_weightless_graph_scores_zero(self):
        g = Graph.from_edges([], [], n_nodes=3)
        assert Modularity().evaluate(g, [0, 1, 2]) == 0.0

    def test_length_mismatch(self, two_cliques):
        with pytest.raises(ValueError, match="does not match"):
            Modularity().evaluate(two_cliques, [0, 1])


class TestModularityGreedy:
    def test_finds_the_cliques(self, two_cliques):
        partition = ramp(8)
        improvement = Modularity().greedy(two_cliques, two_cliques.transpose(True), partition)
        assert improvement > 0
        assert same_grouping(partition, CLIQUES)

    def test_improvement_matches_evaluate(self, two_cliques):
        m = Modularity()
        partition = ramp(8)
        before = m.evaluate(two_cliques, partition)
        improvement = m.greedy(two_cliques, two_cliques.transpose(True), partition)
        assert improvement == pytest.approx(m.evaluate(two_cliques, partition) - before)

    def test_converged_partition_reports_no_improvement(self, two_cliques):
        partition = np.array(CLIQUES, dtype=np.int64)
        improvement = Modularity().greedy(two_cliques, two_cliques.transpose(True), partition)
        assert improvement == 0.0
        assert partition.tolist() == CLIQUES

    def test_mutates_a_list_in_place(self, two_cliques):
        partition = list(range(8))
        Modularity().greedy(two_cliques, two_cliques.transpose(True), partition)
        assert same_grouping(partition, CLIQUES)

    def test_rejects_negative_group_ids(self, two_cliques):
        partition = np.array([-1, 0, 1, 2, 3, 4, 5, 6])
        with pytest.raises(ValueError, match="non-negative"):
            Modularity().greedy(two_cliques, two_cliques.transpose(True), partition)
        assert partition.tolist() == [-1, 0, 1, 2, 3, 4, 5, 6]

    def test_signed_rejects_negative_group_ids(self, signed_square):
        with pytest.raises(ValueError, match="non-negative"):
            SignedModularity().greedy(signed_square, signed_square.transpose(True), [0, -2, 1, 1])

    def test_rejects_wrong_length(self, two_cliques):
        with pytest.raises(ValueError, match="does not match"):
            Modularity().greedy(two_cliques, two_cliques.transpose(True), ramp(3))

    def test_weightless_graph_does_not_move(self):
        g = Graph.from_edges([], [], n_nodes=3)
        partition = ramp(3)
        assert Modularity().greedy(g, g.transpose(True), partition) == 0.0
        assert partition.tolist() == [0, 1, 2]

    def test_single_pass(self, two_cliques):
        partition = ramp(8)
        params = ObjectiveParameters(max_passes=1)
        assert Modularity(params).greedy(two_cliques, two_cliques.transpose(True), partition) > 0

    def test_seeded_order_is_reproducible(self):
        g = random_signed_graph(40, 0.1, seed=3)
        params = ObjectiveParameters(random_state=11)
        first, second = ramp(40), ramp(40)
        SignedModularity(params).greedy(g, g.transpose(True), first)
        SignedModularity(params).greedy(g, g.transpose(True), second)
        assert first.tolist() == second.tolist()

    def test_triad_transitions_never_split(self, triad):
        transition = triad.transition_probability()
        partition = ramp(3)
        Modularity().greedy(transition, transition.transpose(True), partition)
        assert len(np.unique(partition)) <= 3
        assert set(partition.tolist()) <= {0, 1, 2}


class TestLocalChange:
    def test_move_delta_matches_evaluate(self, two_cliques):
        m = Modularity()
        before = ramp(8)
        after = before.copy()
        after[0] = 1
        to_b = m.local_change(m.move_statistics(two_cliques, before, 0, 1))
        to_a = m.local_change(m.move_statistics(two_cliques, before, 0, 0))
        expected = m.evaluate(two_cliques, after) - m.evaluate(two_cliques, before)
        assert to_b - to_a == pytest.approx(expected)

    def test_signed_move_delta_matches_evaluate(self):
        g = random_signed_graph(12, 0.4, seed=5)
        s = SignedModularity()
        before = np.array([0, 0, 1, 1, 2, 2, 3, 3, 4, 4, 5, 5])
        after = before.copy()
        after[4] = 0
        delta = (s.local_change(s.move_statistics(g, before, 4, 0))
                 - s.local_change(s.move_statistics(g, before, 4, 2)))
        assert delta == pytest.approx(s.evaluate(g, after) - s.evaluate(g, before))

    def test_move_statistics_exclude_node(self, two_cliques):
        move = Modularity().move_statistics(two_cliques, CLIQUES, 3, 0)
        assert move.positive_to_group == pytest.approx(3.0)
        assert move.positive_from_group == pytest.approx(3.0)
        assert move.positive_out == pytest.approx(4.0)
        assert move.group_positive_out == pytest.approx(9.0)

    def test_empty_move_is_zero(self):
        assert Modularity().local_change(LocalMove()) == 0.0


class TestSignedModularity:
    def test_separates_negative_ties(self, signed_square):
        partition = ramp(4)
        improvement = SignedModularity().greedy(signed_square, signed_square.transpose(True), partition)
        assert improvement > 0
        assert same_grouping(partition, [0, 0, 1, 1])

    def test_value_of_balanced_split(self, signed_square):
        assert SignedModularity().evaluate(signed_square, [0, 0, 1, 1]) == pytest.approx(0.5)

    def test_negative_edges_penalise_merging(self, signed_square):
        s = SignedModularity()
        assert s.evaluate(signed_square, [0, 0, 1, 1]) > s.evaluate(signed_square, [0, 0, 0, 0])

    def test_reduces_to_modularity_without_negative_edges(self, two_cliques):
        for partition in (CLIQUES, ramp(8), [0, 1, 0, 1, 0, 1, 0, 1]):
            assert SignedModularity().evaluate(two_cliques, partition) == pytest.approx(
                Modularity().evaluate(two_cliques, partition))

    def test_improvement_matches_evaluate_on_random_graph(self):
        g = random_signed_graph(30, 0.15, seed=7)
        s = SignedModularity()
        partition = ramp(30)
        before = s.evaluate(g, partition)
        improvement = s.greedy(g, g.transpose(True), partition)
        assert improvement == pytest.approx(s.evaluate(g, partition) - before, abs=1e-9)
        assert improvement >= 0
