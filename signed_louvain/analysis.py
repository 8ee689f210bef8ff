"""
Partition analysis - Per-community statistics and comparison of partitions.
"""
import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.metrics import normalized_mutual_info_score


def count_communities(partition):
    """Number of distinct group ids in a partition."""
    return int(np.unique(np.asarray(partition)).shape[0])


def community_table(graph, partition):
    """
    Summarise every community of a partition.

    Parameters:
    -----------
    graph : Graph
        The graph the partition belongs to
    partition : array-like of int
        Group id per node

    Returns:
    --------
    pandas.DataFrame
        One row per community with columns community, size, internal_positive,
        internal_negative, outgoing_positive and outgoing_negative, sorted by
        size (largest first) and then community id
    """
    partition = np.asarray(partition, dtype=np.int64)
    if partition.shape[0] != graph.node_count:
        raise ValueError(
            f"Partition length {partition.shape[0]} does not match node count {graph.node_count}"
        )
    columns = ['community', 'size', 'internal_positive', 'internal_negative',
               'outgoing_positive', 'outgoing_negative']
    if partition.size == 0:
        return pd.DataFrame(columns=columns)

    communities, dense, sizes = np.unique(partition, return_inverse=True, return_counts=True)
    dense = dense.ravel()
    n_groups = communities.shape[0]

    def split(part):
        coo = sparse.coo_matrix(part)
        src, dst = dense[coo.row], dense[coo.col]
        same = src == dst
        internal = np.bincount(src[same], weights=coo.data[same], minlength=n_groups)
        outgoing = np.bincount(src[~same], weights=coo.data[~same], minlength=n_groups)
        return internal, outgoing

    internal_pos, outgoing_pos = split(graph.positive)
    internal_neg, outgoing_neg = split(graph.negative)

    df = pd.DataFrame({
        'community': communities,
        'size': sizes,
        'internal_positive': internal_pos,
        'internal_negative': internal_neg,
        'outgoing_positive': outgoing_pos,
        'outgoing_negative': outgoing_neg,
    }, columns=columns)
    return df.sort_values(['size', 'community'], ascending=[False, True]).reset_index(drop=True)


def compare_partitions(partition_a, partition_b):
    """
    Compare two partitions of the same nodes.

    Returns:
    --------
    dict
        nmi (normalized mutual information), n_communities_a, n_communities_b
    """
    partition_a = np.asarray(partition_a)
    partition_b = np.asarray(partition_b)
    if partition_a.shape != partition_b.shape:
        raise ValueError(
            f"Partitions differ in length: {partition_a.shape[0]} vs {partition_b.shape[0]}"
        )
    return {
        'nmi': float(normalized_mutual_info_score(partition_a, partition_b)),
        'n_communities_a': count_communities(partition_a),
        'n_communities_b': count_communities(partition_b),
    }
