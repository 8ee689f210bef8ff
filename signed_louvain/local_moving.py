"""
Numba kernels for the local-moving phase of Louvain on signed directed graphs.

Both objectives reduce to the same per-node gain. For node i placed into
group c (group totals taken without i):

    gain(c) = (P[i->c] + P[c->i]) - (N[i->c] + N[c->i])
              - gamma_pos * (kpo_i * Spi_c + kpi_i * Spo_c)
              + gamma_neg * (kno_i * Sni_c + kni_i * Sno_c)

and the change in the objective of moving i from a to b is
``scale * (gain(b) - gain(a))``. Standard modularity is the special case with
an empty negative part.
"""
import numba as nb
import numpy as np
from scipy import sparse


@nb.njit(cache=True, nogil=True)
def _row_sums(indptr, data, n):
    out = np.zeros(n, dtype=np.float64)
    for i in range(n):
        for k in range(indptr[i], indptr[i + 1]):
            out[i] += data[k]
    return out


@nb.njit(cache=True, nogil=True)
def _accumulate(indptr, indices, data, node, partition, weights, mark, touched, count):
    for k in range(indptr[node], indptr[node + 1]):
        j = indices[k]
        if j == node:
            continue
        c = partition[j]
        if not mark[c]:
            mark[c] = True
            touched[count] = c
            count += 1
        weights[c] += data[k]
    return count


@nb.njit(cache=True, nogil=True)
def local_moving(p_ptr, p_idx, p_val, pt_ptr, pt_idx, pt_val,
                 n_ptr, n_idx, n_val, nt_ptr, nt_idx, nt_val,
                 partition, order, scale, gamma_pos, gamma_neg,
                 max_passes, epsilon, tolerance):
    """
    Run passes of greedy node moves over ``order`` until a pass gains no more
    than ``epsilon`` or ``max_passes`` is reached (unbounded when < 1).

    ``partition`` is modified in place. Returns the total gain in objective units.
    """
    n = partition.shape[0]
    if n == 0:
        return 0.0

    kpo = _row_sums(p_ptr, p_val, n)
    kpi = _row_sums(pt_ptr, pt_val, n)
    kno = _row_sums(n_ptr, n_val, n)
    kni = _row_sums(nt_ptr, nt_val, n)

    n_groups = 0
    for i in range(n):
        if partition[i] + 1 > n_groups:
            n_groups = partition[i] + 1

    s_po = np.zeros(n_groups, dtype=np.float64)
    s_pi = np.zeros(n_groups, dtype=np.float64)
    s_no = np.zeros(n_groups, dtype=np.float64)
    s_ni = np.zeros(n_groups, dtype=np.float64)
    for i in range(n):
        c = partition[i]
        s_po[c] += kpo[i]
        s_pi[c] += kpi[i]
        s_no[c] += kno[i]
        s_ni[c] += kni[i]

    w_pos = np.zeros(n_groups, dtype=np.float64)
    w_neg = np.zeros(n_groups, dtype=np.float64)
    mark = np.zeros(n_groups, dtype=np.bool_)
    touched = np.empty(n_groups, dtype=np.int64)

    total = 0.0
    passes = 0
    while True:
        pass_gain = 0.0
        moves = 0
        for t in range(order.shape[0]):
            i = order[t]
            a = partition[i]

            # Take i out of its group
            s_po[a] -= kpo[i]
            s_pi[a] -= kpi[i]
            s_no[a] -= kno[i]
            s_ni[a] -= kni[i]

            count = 0
            count = _accumulate(p_ptr, p_idx, p_val, i, partition, w_pos, mark, touched, count)
            count = _accumulate(pt_ptr, pt_idx, pt_val, i, partition, w_pos, mark, touched, count)
            count = _accumulate(n_ptr, n_idx, n_val, i, partition, w_neg, mark, touched, count)
            count = _accumulate(nt_ptr, nt_idx, nt_val, i, partition, w_neg, mark, touched, count)

            gain_a = ((w_pos[a] - w_neg[a])
                      - gamma_pos * (kpo[i] * s_pi[a] + kpi[i] * s_po[a])
                      + gamma_neg * (kno[i] * s_ni[a] + kni[i] * s_no[a]))
            best = a
            best_gain = gain_a
            for k in range(count):
                c = touched[k]
                if c == a:
                    continue
                g = ((w_pos[c] - w_neg[c])
                     - gamma_pos * (kpo[i] * s_pi[c] + kpi[i] * s_po[c])
                     + gamma_neg * (kno[i] * s_ni[c] + kni[i] * s_no[c]))
                if g > best_gain + tolerance:
                    best = c
                    best_gain = g

            s_po[best] += kpo[i]
            s_pi[best] += kpi[i]
            s_no[best] += kno[i]
            s_ni[best] += kni[i]
            if best != a:
                partition[i] = best
                pass_gain += scale * (best_gain - gain_a)
                moves += 1

            for k in range(count):
                c = touched[k]
                w_pos[c] = 0.0
                w_neg[c] = 0.0
                mark[c] = False

        total += pass_gain
        passes += 1
        if moves == 0 or pass_gain <= epsilon:
            break
        if max_passes > 0 and passes >= max_passes:
            break
    return total


def visit_order(n_nodes, random_state=None):
    """Ascending node order, or a seeded permutation when random_state is given."""
    if random_state is None:
        return np.arange(n_nodes, dtype=np.int64)
    rng = np.random.default_rng(random_state)
    return rng.permutation(n_nodes).astype(np.int64)


def run_local_moving(graph, transpose, partition, scale, gamma_pos, gamma_neg,
                     max_passes, epsilon, tolerance, random_state=None):
    """
    Unpack both graphs into CSR arrays and run the kernel on ``partition``.

    A partition that is not already a contiguous int64 array is worked on as a
    copy and written back, so the in-place contract holds for any mutable sequence.
    """
    work = np.ascontiguousarray(partition, dtype=np.int64)
    if work.shape[0] != graph.node_count:
        raise ValueError(
            f"Partition length {work.shape[0]} does not match node count {graph.node_count}"
        )
    if work.size and work.min() < 0:
        raise ValueError("Group ids must be non-negative")
    order = visit_order(work.shape[0], random_state)
    improvement = local_moving(
        *graph.csr_arrays('positive'), *transpose.csr_arrays('positive'),
        *graph.csr_arrays('negative'), *transpose.csr_arrays('negative'),
        work, order, float(scale), float(gamma_pos), float(gamma_neg),
        int(max_passes), float(epsilon), float(tolerance),
    )
    if work is not partition:
        partition[:] = work
    return float(improvement)


def partition_quality(graph, partition, scale, gamma_pos, gamma_neg):
    """
    Evaluate ``scale * sum_c [P_cc - N_cc - gamma_pos*Spo_c*Spi_c + gamma_neg*Sno_c*Sni_c]``.

    P_cc and N_cc are the weights inside group c, self-loops included.
    """
    partition = np.asarray(partition, dtype=np.int64)
    if partition.shape[0] != graph.node_count:
        raise ValueError(
            f"Partition length {partition.shape[0]} does not match node count {graph.node_count}"
        )
    if graph.node_count == 0:
        return 0.0

    def internal(part):
        coo = sparse.coo_matrix(part)
        same = partition[coo.row] == partition[coo.col]
        return float(coo.data[same].sum())

    n_groups = int(partition.max()) + 1

    def totals(values):
        return np.bincount(partition, weights=values, minlength=n_groups)

    s_po = totals(graph.out_weights('positive'))
    s_pi = totals(graph.in_weights('positive'))
    s_no = totals(graph.out_weights('negative'))
    s_ni = totals(graph.in_weights('negative'))

    quality = (internal(graph.positive) - internal(graph.negative)
               - gamma_pos * float(np.dot(s_po, s_pi))
               + gamma_neg * float(np.dot(s_no, s_ni)))
    return scale * quality
