from __future__ import annotations

import numpy as np
import numpy.typing as npt
from numba import njit

from atria import config


@njit(cache=True, fastmath=config.FASTMATH)
def check_weight_matrix(weights: npt.NDArray[np.float64]):
    """
    Checks the integrity of a weight matrix.

    Notes
    -----
    WEIGHT MATRIX:
    row - source node index
    column - target node index
    NaN - absent edge

    """
    if weights.shape[0] != weights.shape[1]:
        raise ValueError("The weight matrix must be square, with one row and one column per node.")
    nodes_n = weights.shape[0]
    for i in range(nodes_n):
        if not np.isnan(weights[i, i]):
            raise ValueError("Self-edges encountered on the diagonal of the weight matrix.")
        for j in range(nodes_n):
            if np.isinf(weights[i, j]):
                raise ValueError("Infinite edge weight encountered. Absent edges should be NaN.")


@njit(cache=True, fastmath=config.FASTMATH)
def find_negative_weight(weights: npt.NDArray[np.float64]) -> tuple[int, int]:
    """Returns the first negative edge in row-major order, else (-1, -1)."""
    nodes_n = weights.shape[0]
    for i in range(nodes_n):
        for j in range(nodes_n):
            wt = weights[i, j]
            if not np.isnan(wt) and wt < 0:
                return i, j
    return -1, -1


@njit(cache=True, fastmath=config.FASTMATH)
def check_distances(distances: npt.NDArray[np.float64], nodes_n: int):
    """Checks that a distance snapshot matches the network and has zero self-distances."""
    if distances.shape[0] != nodes_n or distances.shape[1] != nodes_n:
        raise ValueError("The distance snapshot does not match the number of nodes.")
    for i in range(nodes_n):
        if distances[i, i] != 0:
            raise ValueError("Encountered a non-zero self distance in the distance snapshot.")
        for j in range(nodes_n):
            if np.isnan(distances[i, j]):
                raise ValueError("Encountered a NaN distance. Unreachable nodes should be inf.")
