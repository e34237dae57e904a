from __future__ import annotations

import numpy as np
import numpy.typing as npt
from numba import njit, prange

from atria import config
from atria.algos import paths


@njit(cache=True, fastmath=config.FASTMATH, nogil=True, parallel=True)
def approximate_significance(
    weights: npt.NDArray[np.float64],
    distances: npt.NDArray[np.float64],
    edges_start_arr: npt.NDArray[np.int_],
    edges_end_arr: npt.NDArray[np.int_],
    path_atol: float,
) -> npt.NDArray[np.float64]:
    """
    Estimated change in total path cost from removing each edge, computed from one shared distance snapshot.

    Only pairs whose shortest path is routed through an edge are assumed to change. A pair `(s, t)` is routed through
    edge `(u, v)` when `d[s, u] + w + d[v, t]` matches `d[s, t]`. Its new distance is estimated by replacing the edge
    with the best detour from `u` to `v` via another out-neighbour of `u`, skipping neighbours whose own shortest path
    to `v` is routed back through the edge. Pairs without a detour become unreachable and lose their whole distance.
    """
    nodes_n = weights.shape[0]
    edges_n = edges_start_arr.shape[0]
    significance: npt.NDArray[np.float64] = np.full(edges_n, 0.0, dtype=np.float64)
    for edge_idx in prange(edges_n):  # pylint: disable=not-an-iterable
        start_nd_idx = edges_start_arr[edge_idx]
        end_nd_idx = edges_end_arr[edge_idx]
        wt = weights[start_nd_idx, end_nd_idx]
        # best detour from the start node to the end node avoiding this edge
        detour = np.inf
        for nb_nd_idx in range(nodes_n):
            if nb_nd_idx == end_nd_idx:
                continue
            nb_wt = weights[start_nd_idx, nb_nd_idx]
            if np.isnan(nb_wt):
                continue
            nb_end = distances[nb_nd_idx, end_nd_idx]
            if not np.isfinite(nb_end):
                continue
            # the neighbour must not reach the end node through this edge
            if np.abs(distances[nb_nd_idx, start_nd_idx] + wt - nb_end) <= path_atol * max(1.0, np.abs(nb_end)):
                continue
            nb_dist = nb_wt + nb_end
            if nb_dist < detour:
                detour = nb_dist
        delta = 0.0
        for src_idx in range(nodes_n):
            # simple paths through the edge can't revisit its end node
            if src_idx == end_nd_idx:
                continue
            to_start = distances[src_idx, start_nd_idx]
            if not np.isfinite(to_start):
                continue
            for trg_idx in range(nodes_n):
                if trg_idx == src_idx or trg_idx == start_nd_idx:
                    continue
                short_d = distances[src_idx, trg_idx]
                from_end = distances[end_nd_idx, trg_idx]
                if not np.isfinite(short_d) or not np.isfinite(from_end):
                    continue
                if np.abs(to_start + wt + from_end - short_d) > path_atol * max(1.0, np.abs(short_d)):
                    continue
                if np.isfinite(detour):
                    delta += to_start + detour + from_end - short_d
                else:
                    delta -= short_d
        significance[edge_idx] = delta
    return significance


@njit(cache=True, fastmath=config.FASTMATH, nogil=True, parallel=True)
def exact_significance(
    weights: npt.NDArray[np.float64],
    potentials: npt.NDArray[np.float64],
    edges_start_arr: npt.NDArray[np.int_],
    edges_end_arr: npt.NDArray[np.int_],
    base_total: float,
    progress_proxy=None,  # type: ignore
) -> npt.NDArray[np.float64]:
    """
    Exact change in total path cost from removing each edge.

    Every candidate gets a private copy of the weights with the edge cleared and a full all-pairs recomputation.
    Candidates run across worker threads; each recomputation runs on its own thread.
    """
    edges_n = edges_start_arr.shape[0]
    significance: npt.NDArray[np.float64] = np.full(edges_n, 0.0, dtype=np.float64)
    for edge_idx in prange(edges_n):  # pylint: disable=not-an-iterable
        if progress_proxy is not None:
            progress_proxy.update(1)
        ablated = weights.copy()
        ablated[edges_start_arr[edge_idx], edges_end_arr[edge_idx]] = np.nan
        distances = paths.all_pairs_distances_serial(ablated, potentials)
        total, _pairs_n = paths.path_sum(distances)
        significance[edge_idx] = total - base_total
    return significance
