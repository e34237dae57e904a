# pyright: basic
from __future__ import annotations

import numpy as np
import pytest

from atria.algos import checks


def test_check_weight_matrix(chain_matrix):
    checks.check_weight_matrix(chain_matrix.weights)
    # self-edges
    corrupt = chain_matrix.weights.copy()
    corrupt[1, 1] = 1.0
    with pytest.raises(ValueError):
        checks.check_weight_matrix(corrupt)
    # infinite weights
    corrupt = chain_matrix.weights.copy()
    corrupt[1, 3] = np.inf
    with pytest.raises(ValueError):
        checks.check_weight_matrix(corrupt)
    # non square
    with pytest.raises(ValueError):
        checks.check_weight_matrix(np.full((2, 3), np.nan))


def test_find_negative_weight(chain_matrix, dijkstra_counter_matrix):
    assert checks.find_negative_weight(chain_matrix.weights) == (-1, -1)
    # first in row-major order
    assert checks.find_negative_weight(dijkstra_counter_matrix.weights) == (0, 2)


def test_check_distances():
    distances = np.array([[0.0, 1.0], [np.inf, 0.0]])
    checks.check_distances(distances, 2)
    with pytest.raises(ValueError):
        checks.check_distances(distances, 3)
    corrupt = distances.copy()
    corrupt[1, 1] = 2.0
    with pytest.raises(ValueError):
        checks.check_distances(corrupt, 2)
    corrupt = distances.copy()
    corrupt[0, 1] = np.nan
    with pytest.raises(ValueError):
        checks.check_distances(corrupt, 2)
