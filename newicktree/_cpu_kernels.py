"""
_cpu_kernels.py
===============
CPU-accelerated leaf distance kernel using Numba.

This module contains ONLY numba-accelerated code and should not import other
project modules to avoid import-time complications. The module-level functions
are JIT-compiled by numba when available, or run as pure Python when numba is
not installed.

Exported Functions
------------------
_leaf_distance_matrix_njit : njit function
    Parallel all-pairs patristic distance between leaves.

Notes
-----
- Functions use prange for parallel execution when numba is available
- When numba is unavailable, functions run as pure Python (slower but functional)
- cache=True persists compiled binary to disk for faster subsequent runs
"""

import numpy as np

# ── Optional numba acceleration ──────────────────────────────────────────────
try:
    from numba import njit, prange
    _NUMBA_AVAILABLE = True
except ImportError:
    _NUMBA_AVAILABLE = False

    def njit(*args, **kwargs):
        """Identity decorator: stands in for numba.njit when numba is absent."""
        if args and callable(args[0]):   # @njit without arguments
            return args[0]
        return lambda fn: fn             # @njit(parallel=True, ...) with arguments

    prange = range  # serial fallback for prange


# ======================================================================== #
# CPU Kernels                                                               #
# ======================================================================== #


@njit(parallel=True, cache=True)
def _leaf_distance_matrix_njit(leaf_ids, parent, edge_length, depth):
    """
    All-pairs patristic distance between the nodes in *leaf_ids*.

    For each pair the two nodes are walked up to their lowest common
    ancestor; each leg is summed bottom-up on its own and the two sums are
    added, so results are bit-identical to summing ``distance_to_ancestor``
    for each leg in Python.

    Parameters
    ----------
    leaf_ids    : int32[:]    Arena IDs of the leaves, in output order.
    parent      : int32[:]    Parent ID per arena slot; -1 for the root.
    edge_length : float64[:]  Length of the edge to the parent.
    depth       : int32[:]    Edge count from the root.

    Returns
    -------
    float64[n, n]
        Symmetric matrix with zero diagonal.

    Notes
    -----
    Row i is owned by one prange iteration, which writes both (i, j) and
    (j, i) for j > i; every cell is written exactly once.
    """
    n = leaf_ids.shape[0]
    out = np.zeros((n, n), dtype=np.float64)
    for i in prange(n):
        for j in range(i + 1, n):
            u = leaf_ids[i]
            v = leaf_ids[j]
            du = 0.0
            dv = 0.0
            while depth[u] > depth[v]:
                du += edge_length[u]
                u = parent[u]
            while depth[v] > depth[u]:
                dv += edge_length[v]
                v = parent[v]
            while u != v:
                du += edge_length[u]
                dv += edge_length[v]
                u = parent[u]
                v = parent[v]
            d = du + dv
            out[i, j] = d
            out[j, i] = d
    return out
