"""
Graph - Sparse storage for weighted, signed, directed networks.

Positive and negative weights are held in two separate non-negative CSR
matrices so that folding can aggregate them independently and signed
objectives can always tell them apart.
"""
import numpy as np
from scipy import sparse

from .core_utilities import reindex_consecutive

ROW = 0
COL = 1

SIGNS = ('positive', 'negative')


class ListMatrix:
    """
    Coordinate-list view of a graph's signed weights.

    Each stored entry is (rows[k], columns[k], values[k]). ``to_raw`` maps
    the dense ids used here back to the raw ids they had before relabeling:
    for a folded graph, ``to_raw[ROW][super_node]`` is the group id of the
    previous level that became ``super_node``.
    """

    def __init__(self, rows, columns, values, shape, to_raw=None):
        self.rows = np.asarray(rows, dtype=np.int64)
        self.columns = np.asarray(columns, dtype=np.int64)
        self.values = np.asarray(values, dtype=np.float64)
        if not (self.rows.shape == self.columns.shape == self.values.shape):
            raise ValueError(
                f"rows, columns and values must have equal lengths, got "
                f"{self.rows.shape[0]}, {self.columns.shape[0]}, {self.values.shape[0]}"
            )
        self.shape = (int(shape[0]), int(shape[1]))

        if to_raw is None:
            to_raw = (np.arange(self.shape[0], dtype=np.int64),
                      np.arange(self.shape[1], dtype=np.int64))
        row_map = np.asarray(to_raw[ROW], dtype=np.int64)
        col_map = np.asarray(to_raw[COL], dtype=np.int64)
        if row_map.shape[0] != self.shape[0] or col_map.shape[0] != self.shape[1]:
            raise ValueError(
                f"to_raw maps of lengths ({row_map.shape[0]}, {col_map.shape[0]}) "
                f"do not match shape {self.shape}"
            )
        self._to_raw = (row_map, col_map)

    @classmethod
    def from_csr(cls, matrix, to_raw=None):
        """Build a list matrix from any scipy sparse matrix."""
        coo = sparse.coo_matrix(matrix)
        return cls(coo.row, coo.col, coo.data, coo.shape, to_raw=to_raw)

    def to_csr(self):
        """Return the entries as a CSR matrix in dense id space."""
        return sparse.csr_matrix(
            (self.values, (self.rows, self.columns)), shape=self.shape
        )

    def get_to_raw(self):
        """Return the (row_map, column_map) pair."""
        return self._to_raw

    def normalize(self):
        """
        Relabel the row ids and the column ids that carry entries densely, in
        ascending order.

        The result has one row per distinct row id and one column per distinct
        column id. Its to_raw maps each dense id through this matrix's own
        to_raw, so raw ids survive repeated normalisation.
        """
        row_ids = np.unique(self.rows)
        col_ids = np.unique(self.columns)
        return ListMatrix(
            reindex_consecutive(self.rows),
            reindex_consecutive(self.columns),
            self.values.copy(),
            (row_ids.shape[0], col_ids.shape[0]),
            to_raw=(self._to_raw[ROW][row_ids], self._to_raw[COL][col_ids]),
        )

    @property
    def row_map(self):
        return self._to_raw[ROW]

    @property
    def nnz(self):
        return int(self.values.shape[0])

    def __repr__(self):
        return f"ListMatrix(shape={self.shape}, nnz={self.nnz})"


def _as_nonnegative_csr(matrix, name):
    """Own a float64 CSR copy and check that it holds no negative entries."""
    csr = sparse.csr_matrix(matrix).astype(np.float64, copy=True)
    csr.sum_duplicates()
    csr.eliminate_zeros()
    csr.sort_indices()
    if csr.nnz and csr.data.min() < 0:
        raise ValueError(f"The {name} part must hold magnitudes (>= 0)")
    return csr


def _drop_diagonal(matrix):
    return (sparse.triu(matrix, k=1) + sparse.tril(matrix, k=-1)).tocsr()


class Graph:
    """
    Weighted directed network with signed edges.

    Every transform (transpose, fold, transition_probability) returns a new,
    independent Graph; instances are never modified after construction, so a
    single Graph can be shared by concurrently running detections.
    """

    def __init__(self, positive, negative=None, raw_ids=None):
        """
        Initialize a Graph.

        Parameters:
        -----------
        positive : scipy.sparse matrix or array-like
            Square matrix of positive weights, entry (i, j) is the edge i -> j
        negative : scipy.sparse matrix or array-like, optional
            Square matrix of negative weight magnitudes, same shape as positive
        raw_ids : array-like, optional
            Raw id of every node before dense relabeling. Identity if None.
        """
        self._positive = _as_nonnegative_csr(positive, 'positive')
        if self._positive.shape[0] != self._positive.shape[1]:
            raise ValueError(f"Adjacency must be square, got shape {self._positive.shape}")

        if negative is None:
            negative = sparse.csr_matrix(self._positive.shape, dtype=np.float64)
        self._negative = _as_nonnegative_csr(negative, 'negative')
        if self._negative.shape != self._positive.shape:
            raise ValueError(
                f"Positive and negative parts differ in shape: "
                f"{self._positive.shape} vs {self._negative.shape}"
            )

        n_nodes = self._positive.shape[0]
        if raw_ids is None:
            raw_ids = np.arange(n_nodes, dtype=np.int64)
        raw_ids = np.array(raw_ids, dtype=np.int64, copy=True)
        if raw_ids.shape != (n_nodes,):
            raise ValueError(f"raw_ids must have length {n_nodes}, got {raw_ids.shape[0]}")
        self._raw_ids = raw_ids

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_matrix(cls, matrix):
        """Split a signed dense or sparse matrix into its positive and negative parts."""
        coo = sparse.coo_matrix(matrix, dtype=np.float64)
        pos = coo.data > 0
        neg = coo.data < 0
        positive = sparse.csr_matrix(
            (coo.data[pos], (coo.row[pos], coo.col[pos])), shape=coo.shape)
        negative = sparse.csr_matrix(
            (-coo.data[neg], (coo.row[neg], coo.col[neg])), shape=coo.shape)
        return cls(positive, negative)

    @classmethod
    def from_edges(cls, sources, targets, weights=None, n_nodes=None):
        """
        Build a graph from parallel edge arrays.

        Parameters:
        -----------
        sources, targets : array-like of int
            Edge endpoints, edge k goes sources[k] -> targets[k]
        weights : array-like of float, optional
            Signed edge weights, 1.0 for every edge if None
        n_nodes : int, optional
            Number of nodes, defaults to the largest endpoint + 1

        Duplicate edges are summed, separately per sign.
        """
        sources = np.asarray(sources, dtype=np.int64).ravel()
        targets = np.asarray(targets, dtype=np.int64).ravel()
        if weights is None:
            weights = np.ones(sources.shape[0], dtype=np.float64)
        weights = np.asarray(weights, dtype=np.float64).ravel()

        if not (sources.shape == targets.shape == weights.shape):
            raise ValueError(
                f"sources, targets and weights must have equal lengths, got "
                f"{sources.shape[0]}, {targets.shape[0]}, {weights.shape[0]}"
            )

        highest = int(max(sources.max(), targets.max())) if sources.size else -1
        if n_nodes is None:
            n_nodes = highest + 1
        if sources.size and (min(sources.min(), targets.min()) < 0 or highest >= n_nodes):
            raise ValueError(f"Edge endpoints must lie in [0, {n_nodes})")

        shape = (int(n_nodes), int(n_nodes))
        pos = weights > 0
        neg = weights < 0
        positive = sparse.csr_matrix(
            (weights[pos], (sources[pos], targets[pos])), shape=shape)
        negative = sparse.csr_matrix(
            (-weights[neg], (sources[neg], targets[neg])), shape=shape)
        return cls(positive, negative)

    @classmethod
    def from_dataframe(cls, df, source_col='source', target_col='target',
                       weight_col='weight', n_nodes=None):
        """Build a graph from an edge-list DataFrame with integer node ids."""
        weights = None if weight_col is None else df[weight_col].to_numpy(dtype=np.float64)
        return cls.from_edges(
            df[source_col].to_numpy(dtype=np.int64),
            df[target_col].to_numpy(dtype=np.int64),
            weights,
            n_nodes=n_nodes,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def node_count(self):
        return self._positive.shape[0]

    @property
    def edge_count(self):
        """Number of ordered node pairs carrying any weight."""
        return int((abs(self._positive) + abs(self._negative)).nnz)

    @property
    def has_negative(self):
        return self._negative.nnz > 0

    @property
    def positive(self):
        return self._positive.copy()

    @property
    def negative(self):
        return self._negative.copy()

    @property
    def weights(self):
        """Signed weights, positive minus negative part."""
        return (self._positive - self._negative).tocsr()

    @property
    def raw_ids(self):
        return self._raw_ids.copy()

    def _part(self, sign):
        if sign == 'positive':
            return self._positive
        if sign == 'negative':
            return self._negative
        raise ValueError(f"Unknown sign: {sign}. Use one of {SIGNS}")

    def csr_arrays(self, sign='positive'):
        """Contiguous (indptr, indices, data) arrays of one part, for numba kernels."""
        part = self._part(sign)
        return (np.ascontiguousarray(part.indptr, dtype=np.int64),
                np.ascontiguousarray(part.indices, dtype=np.int64),
                np.ascontiguousarray(part.data, dtype=np.float64))

    def out_weights(self, sign='positive'):
        return np.asarray(self._part(sign).sum(axis=1), dtype=np.float64).ravel()

    def in_weights(self, sign='positive'):
        return np.asarray(self._part(sign).sum(axis=0), dtype=np.float64).ravel()

    def self_loops(self, sign='positive'):
        return np.asarray(self._part(sign).diagonal(), dtype=np.float64)

    def total_weight(self, sign='positive'):
        return float(self._part(sign).sum())

    def values(self):
        """Signed weights of every row, in ascending column order."""
        weights = self.weights
        weights.sort_indices()
        return [weights.data[weights.indptr[i]:weights.indptr[i + 1]].copy()
                for i in range(self.node_count)]

    def get_list_matrix(self):
        """Coordinate view of the signed weights, carrying the raw id map."""
        return ListMatrix.from_csr(self.weights, to_raw=(self._raw_ids, self._raw_ids))

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def transpose(self, retain_self_loops=True):
        """
        Reverse every edge, keeping its sign and weight.

        Parameters:
        -----------
        retain_self_loops : bool, default=True
            If False, diagonal entries are removed from the result
        """
        positive = self._positive.transpose().tocsr()
        negative = self._negative.transpose().tocsr()
        if not retain_self_loops:
            positive = _drop_diagonal(positive)
            negative = _drop_diagonal(negative)
        return Graph(positive, negative, raw_ids=self._raw_ids)

    def fold(self, partition):
        """
        Aggregate the nodes of every group into one super-node.

        Group ids are relabeled densely in ascending order; super-node k of the
        result stands for the k-th smallest group id, which is recorded in
        ``get_list_matrix().row_map[k]``. Positive and negative weights are
        summed separately, and intra-group weight becomes a self-loop.

        Parameters:
        -----------
        partition : array-like of int
            Non-negative group id per node

        Returns:
        --------
        Graph
            The folded graph with one node per distinct group id
        """
        partition = np.asarray(partition)
        if partition.ndim != 1 or partition.shape[0] != self.node_count:
            raise ValueError(
                f"Partition of shape {partition.shape} cannot fold a graph "
                f"with {self.node_count} nodes"
            )
        partition = partition.astype(np.int64, copy=False)
        if partition.size and partition.min() < 0:
            raise ValueError("Group ids must be non-negative")

        group_ids, dense = np.unique(partition, return_inverse=True)
        dense = dense.ravel()
        n_groups = group_ids.shape[0]
        membership = sparse.csr_matrix(
            (np.ones(self.node_count, dtype=np.float64),
             (np.arange(self.node_count), dense)),
            shape=(self.node_count, n_groups),
        )
        membership_t = membership.transpose().tocsr()
        positive = (membership_t @ self._positive @ membership).tocsr()
        negative = (membership_t @ self._negative @ membership).tocsr()
        return Graph(positive, negative, raw_ids=group_ids)

    def transition_probability(self):
        """
        Normalise every row by the node's total absolute out-weight.

        Rows without outgoing weight stay empty. Signs are kept, so for a
        signed row the magnitudes of both parts sum to one.
        """
        totals = self.out_weights('positive') + self.out_weights('negative')
        inverse = np.zeros_like(totals)
        nonzero = totals > 0
        inverse[nonzero] = 1.0 / totals[nonzero]
        scale = sparse.diags(inverse)
        return Graph(scale @ self._positive, scale @ self._negative, raw_ids=self._raw_ids)

    def __repr__(self):
        return (f"Graph(nodes={self.node_count}, edges={self.edge_count}, "
                f"signed={self.has_negative})")
