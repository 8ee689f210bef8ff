"""Tests for analysis.py — community statistics and partition comparison."""

import pytest

from signed_louvain.analysis import community_table, compare_partitions, count_communities
from signed_louvain.graph import Graph


class TestCommunityTable:
    def test_two_cliques(self, two_cliques):
        df = community_table(two_cliques, [0, 0, 0, 0, 1, 1, 1, 1])
        assert df['community'].tolist() == [0, 1]
        assert df['size'].tolist() == [4, 4]
        assert df['internal_positive'].tolist() == [12.0, 12.0]
        assert df['outgoing_positive'].tolist() == [1.0, 1.0]
        assert df['internal_negative'].tolist() == [0.0, 0.0]

    def test_signed_and_sorted_by_size(self, signed_square):
        df = community_table(signed_square, [2, 2, 2, 7])
        assert df['community'].tolist() == [2, 7]
        assert df['size'].tolist() == [3, 1]
        # 0<->1 positive and 0<->2 negative stay inside group 2
        assert df.loc[0, 'internal_positive'] == pytest.approx(2.0)
        assert df.loc[0, 'internal_negative'] == pytest.approx(2.0)
        assert df.loc[1, 'outgoing_positive'] == pytest.approx(1.0)
        assert df.loc[1, 'outgoing_negative'] == pytest.approx(1.0)

    def test_empty(self):
        df = community_table(Graph.from_edges([], []), [])
        assert df.empty
        assert 'internal_negative' in df.columns

    def test_length_mismatch(self, two_cliques):
        with pytest.raises(ValueError, match="does not match"):
            community_table(two_cliques, [0, 1])


class TestComparePartitions:
    def test_relabeled_partitions_are_identical(self):
        result = compare_partitions([0, 0, 1, 1], [5, 5, 3, 3])
        assert result['nmi'] == pytest.approx(1.0)
        assert result['n_communities_a'] == 2
        assert result['n_communities_b'] == 2

    def test_independent_partitions(self):
        result = compare_partitions([0, 0, 1, 1], [0, 1, 0, 1])
        assert result['nmi'] == pytest.approx(0.0)

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="differ in length"):
            compare_partitions([0, 1], [0, 1, 2])

    def test_count_communities(self):
        assert count_communities([4, 4, 9, 0]) == 3
