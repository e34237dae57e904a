"""
The `structures` module defines the working data structures used by `atria`.

The `WeightMatrix` is the single, index-addressed store for the network being analysed. Nodes are zero-based indices
and carry no identity beyond their index: labels belong to the I/O layer. Removing an edge is pure index mutation on
the backing array.
"""
from __future__ import annotations

from typing import Iterator, Optional

import numpy as np
import numpy.typing as npt

from atria.errors import DimensionMismatchError, InvalidEdgeError

Edge = tuple[int, int, float]


class EdgeView:
    """
    Lazy, restartable view of the edges present in a `WeightMatrix`.

    Every iteration reads the current state of the matrix and yields `(source, target, weight)` triples in row-major
    order, which is also lexicographic `(source, target)` order.
    """

    def __init__(self, weight_matrix: WeightMatrix):
        self._weight_matrix = weight_matrix

    def __iter__(self) -> Iterator[Edge]:
        weights = self._weight_matrix.weights
        starts, ends = np.nonzero(~np.isnan(weights))
        for start, end in zip(starts, ends):
            yield int(start), int(end), float(weights[start, end])

    def __len__(self) -> int:
        return self._weight_matrix.edge_count

    def arrays(self) -> tuple[npt.NDArray[np.int_], npt.NDArray[np.int_], npt.NDArray[np.float64]]:
        """Return the current edges as parallel `start`, `end` and `weight` arrays."""
        weights = self._weight_matrix.weights
        starts, ends = np.nonzero(~np.isnan(weights))
        return starts.astype(np.int_), ends.astype(np.int_), weights[starts, ends].astype(np.float64)


class WeightMatrix:
    """
    Square, directed and signed weight matrix.

    Absent relationships are stored as `NaN` and are reported as `None` by `weight`. A weight of zero is a real edge.
    The diagonal is always absent.
    """

    weights: npt.NDArray[np.float64]
    """The backing `N x N` array. Row index is the source node, column index is the target node."""

    def __init__(self, weights: npt.ArrayLike):
        """
        Create a `WeightMatrix` from a square array.

        Parameters
        ----------
        weights: ArrayLike
            A square array of edge weights. `NaN` and `+inf` denote absent edges. Diagonal entries are ignored.

        """
        arr = np.array(weights, dtype=np.float64)
        if arr.size == 0:
            arr = arr.reshape(0, 0)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
            raise DimensionMismatchError(f"Expected a square weight matrix but encountered shape {arr.shape}.")
        if np.any(np.isneginf(arr)):
            raise ValueError("Encountered a negative infinite weight. Absent edges should be NaN or +inf.")
        arr[np.isposinf(arr)] = np.nan
        np.fill_diagonal(arr, np.nan)
        self.weights = arr

    @property
    def node_count(self) -> int:
        """The number of nodes."""
        return self.weights.shape[0]

    @property
    def edge_count(self) -> int:
        """The number of edges currently present."""
        return int(np.count_nonzero(~np.isnan(self.weights)))

    def __len__(self) -> int:
        return self.node_count

    def _check_indices(self, source: int, target: int):
        for idx in (source, target):
            if not 0 <= idx < self.node_count:
                raise InvalidEdgeError(source, target, f"node index {idx} is out of range")

    def has_edge(self, source: int, target: int) -> bool:
        """Whether an edge from `source` to `target` is present."""
        if not (0 <= source < self.node_count and 0 <= target < self.node_count):
            return False
        return not np.isnan(self.weights[source, target])

    def weight(self, source: int, target: int) -> Optional[float]:
        """
        Return the signed weight of an edge, or `None` if the edge is absent.

        Parameters
        ----------
        source: int
            Source node index.
        target: int
            Target node index.

        Returns
        -------
        weight: float | None
            The edge weight, or `None` for an absent edge.

        """
        self._check_indices(source, target)
        wt = self.weights[source, target]
        if np.isnan(wt):
            return None
        return float(wt)

    def remove_edge(self, source: int, target: int) -> float:
        """
        Clear an edge and return its former weight.

        Raises `InvalidEdgeError` if the edge is a self-edge, is out of range, or is already absent.
        """
        if source == target:
            raise InvalidEdgeError(source, target, "self-edges are excluded")
        self._check_indices(source, target)
        wt = self.weights[source, target]
        if np.isnan(wt):
            raise InvalidEdgeError(source, target, "edge is absent")
        self.weights[source, target] = np.nan
        return float(wt)

    def edges(self) -> EdgeView:
        """Return a lazy, restartable view of the currently present edges."""
        return EdgeView(self)

    def copy(self) -> WeightMatrix:
        """Return an independent copy."""
        return WeightMatrix(self.weights.copy())

    def has_negative_weights(self) -> bool:
        """Whether any present edge carries a negative weight."""
        return bool(np.any(self.weights[~np.isnan(self.weights)] < 0))

    def validate(self):
        """Validate this `WeightMatrix` instance."""
        if self.weights.ndim != 2 or self.weights.shape[0] != self.weights.shape[1]:
            raise DimensionMismatchError("The weight matrix must be square.")
        if not np.all(np.isnan(np.diagonal(self.weights))):
            raise ValueError("Self-edges encountered on the diagonal of the weight matrix.")
        present = self.weights[~np.isnan(self.weights)]
        if not np.all(np.isfinite(present)):
            raise ValueError("Non finite edge weight encountered.")
