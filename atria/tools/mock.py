"""
A collection of functions for the generation of mock weight matrices.

This module is intended for project development and writing code tests, but may otherwise be useful for demonstration
and utility purposes.
"""
from __future__ import annotations

import logging
import string

import numpy as np

from atria.structures import WeightMatrix

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def mock_chain_matrix() -> WeightMatrix:
    """
    A four node chain with a long shortcut.

    Notes
    -----
    ```python
    #  0 --1--> 1 --1--> 2 --1--> 3
    #  |                          ^
    #  +------------5-------------+
    ```

    The shortcut is never on a shortest path, because the chain already reaches node 3 at a cost of 3.

    """
    weights = np.full((4, 4), np.nan, dtype=np.float64)
    weights[0, 1] = 1
    weights[1, 2] = 1
    weights[2, 3] = 1
    weights[0, 3] = 5
    return WeightMatrix(weights)


def mock_complete_matrix(nodes_n: int, weight: float = 1.0) -> WeightMatrix:
    """A complete directed network with equal weights on every edge."""
    weights = np.full((nodes_n, nodes_n), weight, dtype=np.float64)
    return WeightMatrix(weights)


def mock_random_matrix(nodes_n: int, density: float = 0.5, random_seed: int = 0) -> WeightMatrix:
    """
    A random directed network with positive weights.

    Parameters
    ----------
    nodes_n: int
        The number of nodes.
    density: float
        The probability of each off-diagonal edge being present.
    random_seed: int
        Seed for the random number generator.

    """
    rng = np.random.default_rng(random_seed)
    weights = rng.uniform(1, 10, size=(nodes_n, nodes_n))
    weights[rng.uniform(size=(nodes_n, nodes_n)) > density] = np.nan
    return WeightMatrix(weights)


def mock_signed_matrix(nodes_n: int, density: float = 0.5, random_seed: int = 0) -> WeightMatrix:
    """
    A random signed network without negative cycles.

    Forward edges (lower to higher index) carry weights in `[-1, 1]`. Backward edges carry weights in
    `[nodes_n, nodes_n + 1]`, so every cycle has a positive total weight.
    """
    rng = np.random.default_rng(random_seed)
    forward = rng.uniform(-1, 1, size=(nodes_n, nodes_n))
    backward = rng.uniform(nodes_n, nodes_n + 1, size=(nodes_n, nodes_n))
    weights = np.where(np.triu(np.full((nodes_n, nodes_n), True), k=1), forward, backward)
    weights[rng.uniform(size=(nodes_n, nodes_n)) > density] = np.nan
    return WeightMatrix(weights)


def mock_negative_cycle_matrix() -> WeightMatrix:
    """A three node cycle with a negative total weight."""
    weights = np.full((3, 3), np.nan, dtype=np.float64)
    weights[0, 1] = 1
    weights[1, 2] = -2
    weights[2, 0] = 0.5
    return WeightMatrix(weights)


def mock_labels(nodes_n: int) -> list[str]:
    """Node labels `A`, `B`, ... `Z`, `AA`, `AB` and so on."""
    labels: list[str] = []
    for node_idx in range(nodes_n):
        label = ""
        idx = node_idx
        while True:
            label = string.ascii_uppercase[idx % 26] + label
            idx = idx // 26 - 1
            if idx < 0:
                break
        labels.append(label)
    return labels
