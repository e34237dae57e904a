"""
Shortest-path distances and path sums over a `WeightMatrix`.

The `ShortestPathEngine` wraps the `numba` kernels in `atria.algos.paths`. How negative weights are handled is an
explicit choice, made with `NegativeWeightPolicy`:

- `REJECT` requires non-negative weights and raises `NegativeWeightUnsupportedError` otherwise. A label-setting search
  is only correct for non-negative weights.
- `REWEIGHT` (the default) applies Johnson reweighting. Node potentials are computed once with Bellman-Ford, which
  detects negative cycles and raises `NegativeCycleDetectedError`. The label-setting search then runs on non-negative
  reweighted impedances.

Potentials are computed lazily on first use and reused for the lifetime of the engine. They remain valid while edges
are removed, but not if edges are added or reweighted, so the matrix must not be modified in any other way while an
engine is in use.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Union

import numpy as np
import numpy.typing as npt

from atria import config
from atria.algos import checks, paths
from atria.errors import InvalidEdgeError, NegativeCycleDetectedError, NegativeWeightUnsupportedError
from atria.structures import WeightMatrix

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class NegativeWeightPolicy(str, Enum):
    """How the shortest-path engine treats negative edge weights."""

    REJECT = "reject"
    REWEIGHT = "reweight"


class ShortestPathEngine:
    """Single-source and all-pairs shortest distances over the current state of a `WeightMatrix`."""

    weight_matrix: WeightMatrix
    policy: NegativeWeightPolicy
    _potentials: Optional[npt.NDArray[np.float64]]

    def __init__(
        self,
        weight_matrix: WeightMatrix,
        policy: Union[NegativeWeightPolicy, str] = NegativeWeightPolicy.REWEIGHT,
    ):
        self.weight_matrix = weight_matrix
        self.policy = NegativeWeightPolicy(policy)
        self._potentials = None

    @property
    def potentials(self) -> npt.NDArray[np.float64]:
        """Johnson node potentials, all zero when the network has no negative weights."""
        if self._potentials is None:
            self._potentials = self._prepare_potentials()
        return self._potentials

    def _prepare_potentials(self) -> npt.NDArray[np.float64]:
        weights = self.weight_matrix.weights
        checks.check_weight_matrix(weights)
        start_nd_idx, end_nd_idx = checks.find_negative_weight(weights)
        if start_nd_idx == -1:
            return np.full(self.weight_matrix.node_count, 0.0, dtype=np.float64)
        if self.policy == NegativeWeightPolicy.REJECT:
            raise NegativeWeightUnsupportedError(
                int(start_nd_idx), int(end_nd_idx), float(weights[start_nd_idx, end_nd_idx])
            )
        potentials, negative_cycle = paths.johnson_potentials(weights)
        if negative_cycle:
            raise NegativeCycleDetectedError()
        if config.DEBUG_MODE:
            logger.debug("Computed Johnson potentials for signed network.")
        return potentials

    def distances_from(self, source: int) -> npt.NDArray[np.float64]:
        """
        Shortest distances from `source` to every node.

        Parameters
        ----------
        source: int
            The source node index.

        Returns
        -------
        distances: ndarray[float]
            Distances indexed by target node. The source is zero and unreachable nodes are `inf`.

        """
        if not 0 <= source < self.weight_matrix.node_count:
            raise InvalidEdgeError(source, source, f"node index {source} is out of range")
        return paths.shortest_path_distances(self.weight_matrix.weights, self.potentials, source)

    def all_pairs(self) -> npt.NDArray[np.float64]:
        """
        The all-pairs distance snapshot, one row per source node.

        Rows are computed in parallel and gathered before returning.
        """
        return paths.all_pairs_distances(self.weight_matrix.weights, self.potentials)


def summarise(distances: npt.NDArray[np.float64]) -> tuple[float, int]:
    """
    Total structure cost and reachable pair count for a distance snapshot.

    The total cost sums every finite distance over ordered pairs of distinct nodes. Unreachable pairs contribute
    zero, which keeps totals comparable as edges are removed.
    """
    checks.check_distances(distances, distances.shape[0])
    total, pairs_n = paths.path_sum(distances)
    return float(total), int(pairs_n)


def total_cost(distances: npt.NDArray[np.float64]) -> float:
    """Sum of finite distances over ordered pairs of distinct nodes."""
    return summarise(distances)[0]


def reachable_pairs(distances: npt.NDArray[np.float64]) -> int:
    """Number of ordered pairs of distinct nodes with a finite distance."""
    return summarise(distances)[1]
