from __future__ import annotations

import numpy as np
import numpy.typing as npt
from numba import njit, prange

from atria import config


@njit(cache=True, fastmath=config.FASTMATH, nogil=True)
def shortest_path_distances(
    weights: npt.NDArray[np.float64],
    potentials: npt.NDArray[np.float64],
    src_idx: int,
) -> npt.NDArray[np.float64]:
    """
    Shortest distances from a source node to all other nodes.

    Label-setting search (dijkstra) over the dense weight matrix: repeatedly settles the unvisited node with the
    smallest tentative distance (lowest index on ties) and relaxes its outgoing edges.

    Edge impedances are reweighted by the node potentials as `w + p[u] - p[v]`. Johnson potentials make every
    impedance non-negative, and all-zero potentials leave non-negative weights untouched. Distances are restored to
    the original weights before returning. Unreachable nodes are `inf`.
    """
    nodes_n = weights.shape[0]
    visited_nodes: npt.NDArray[np.bool_] = np.full(nodes_n, False, dtype=np.bool_)
    short_dist: npt.NDArray[np.float64] = np.full(nodes_n, np.inf, dtype=np.float64)
    short_dist[src_idx] = 0
    for _ in range(nodes_n):
        # find the unvisited node with the smallest tentative distance
        min_nd_idx = -1
        min_dist = np.inf
        for nd_idx in range(nodes_n):
            if not visited_nodes[nd_idx] and short_dist[nd_idx] < min_dist:
                min_dist = short_dist[nd_idx]
                min_nd_idx = nd_idx
        # remaining nodes are unreachable
        if min_nd_idx == -1:
            break
        visited_nodes[min_nd_idx] = True
        # relax the node's out edges
        for nb_nd_idx in range(nodes_n):
            if visited_nodes[nb_nd_idx]:
                continue
            wt = weights[min_nd_idx, nb_nd_idx]
            if np.isnan(wt):
                continue
            imp = wt + potentials[min_nd_idx] - potentials[nb_nd_idx]
            # clip rounding residue
            if imp < 0:
                imp = 0.0
            if min_dist + imp < short_dist[nb_nd_idx]:
                short_dist[nb_nd_idx] = min_dist + imp
    # undo the reweighting
    for nd_idx in range(nodes_n):
        if nd_idx != src_idx and np.isfinite(short_dist[nd_idx]):
            short_dist[nd_idx] = short_dist[nd_idx] - potentials[src_idx] + potentials[nd_idx]
    return short_dist


@njit(cache=True, fastmath=config.FASTMATH, nogil=True)
def johnson_potentials(weights: npt.NDArray[np.float64]) -> tuple[npt.NDArray[np.float64], bool]:
    """
    Node potentials for Johnson reweighting.

    Bellman-Ford from a virtual source joined to every node by a zero-weight edge. Returns the potentials and a flag
    indicating whether a negative cycle was found. Potentials satisfy `p[v] <= p[u] + w(u, v)` for every present edge,
    which continues to hold after any edge is removed.
    """
    nodes_n = weights.shape[0]
    potentials: npt.NDArray[np.float64] = np.full(nodes_n, 0.0, dtype=np.float64)
    # the virtual graph has nodes_n + 1 nodes, so stabilisation takes at most nodes_n passes
    for _ in range(nodes_n + 1):
        changed = False
        for start_nd_idx in range(nodes_n):
            for end_nd_idx in range(nodes_n):
                wt = weights[start_nd_idx, end_nd_idx]
                if np.isnan(wt):
                    continue
                if potentials[start_nd_idx] + wt < potentials[end_nd_idx]:
                    potentials[end_nd_idx] = potentials[start_nd_idx] + wt
                    changed = True
        if not changed:
            return potentials, False
    return potentials, True


@njit(cache=True, fastmath=config.FASTMATH, nogil=True)
def all_pairs_distances_serial(
    weights: npt.NDArray[np.float64],
    potentials: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """All pairs shortest distances, computed on the calling thread."""
    nodes_n = weights.shape[0]
    distances: npt.NDArray[np.float64] = np.full((nodes_n, nodes_n), np.inf, dtype=np.float64)
    for src_idx in range(nodes_n):
        distances[src_idx, :] = shortest_path_distances(weights, potentials, src_idx)
    return distances


@njit(cache=True, fastmath=config.FASTMATH, nogil=True, parallel=True)
def all_pairs_distances(
    weights: npt.NDArray[np.float64],
    potentials: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """
    All pairs shortest distances.

    Each source row is computed independently across worker threads and written to its own row of the snapshot.
    """
    nodes_n = weights.shape[0]
    distances: npt.NDArray[np.float64] = np.full((nodes_n, nodes_n), np.inf, dtype=np.float64)
    for src_idx in prange(nodes_n):  # pylint: disable=not-an-iterable
        distances[src_idx, :] = shortest_path_distances(weights, potentials, src_idx)
    return distances


@njit(cache=True, fastmath=config.FASTMATH, nogil=True)
def path_sum(distances: npt.NDArray[np.float64]) -> tuple[float, int]:
    """
    Sum of finite shortest distances over ordered pairs of distinct nodes, and the number of such pairs.

    Unreachable pairs contribute zero. Summation runs in row-major order.
    """
    nodes_n = distances.shape[0]
    total = 0.0
    pairs_n = 0
    for src_idx in range(nodes_n):
        for trg_idx in range(nodes_n):
            if src_idx == trg_idx:
                continue
            dist = distances[src_idx, trg_idx]
            if np.isfinite(dist):
                total += dist
                pairs_n += 1
    return total, pairs_n
