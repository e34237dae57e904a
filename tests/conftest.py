# pyright: basic
from __future__ import annotations

import numpy as np
import pytest

from atria.structures import WeightMatrix
from atria.tools import mock


@pytest.fixture
def chain_matrix() -> WeightMatrix:
    """
    Prepare the four node chain with a long shortcut.

    Returns
    -------
    WeightMatrix
        Edges 0->1, 1->2, 2->3 of weight 1, and 0->3 of weight 5.

    """
    return mock.mock_chain_matrix()


@pytest.fixture
def signed_matrix() -> WeightMatrix:
    """Prepare a signed network without negative cycles."""
    return mock.mock_signed_matrix(10, density=0.4, random_seed=42)


@pytest.fixture
def random_matrix() -> WeightMatrix:
    """Prepare a positively weighted random network."""
    return mock.mock_random_matrix(12, density=0.3, random_seed=7)


@pytest.fixture
def dijkstra_counter_matrix() -> WeightMatrix:
    r"""
    A signed network on which label-setting search alone returns a wrong distance.

    Notes
    -----
    ```python
    # 0 -> 2 (-2)
    # 1 -> 0 (4), 1 -> 2 (3)
    # 2 -> 3 (2)
    # 3 -> 1 (-1)
    ```

    The shortest path from 3 to 2 is 3 -> 1 -> 0 -> 2 with a cost of 1.

    """
    nan = np.nan
    return WeightMatrix(
        [
            [nan, nan, -2.0, nan],
            [4.0, nan, 3.0, nan],
            [nan, nan, nan, 2.0],
            [nan, -1.0, nan, nan],
        ]
    )
