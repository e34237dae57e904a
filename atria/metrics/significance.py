r"""
Edge significance: the change in total structure cost caused by removing an edge.

$$
significance(e) = cost(G \setminus e) - cost(G)
$$

The magnitude measures structural importance. Negative values mark load-bearing edges whose removal disconnects
pairs, so their distances drop out of the total. Positive values mark edges whose removal forces longer detours.

Two evaluation modes are available through `SignificanceMode`:

| mode | cost per candidate | notes |
| ---- | ------------------ | ----- |
| `APPROXIMATE` | $O(N^2)$ | Uses one shared all-pairs snapshot. Only pairs routed through the edge are assumed to change, and their new distance is estimated from the best one-hop detour around the edge. |
| `EXACT` | $O(N^3)$ | Full recomputation with the edge removed. |

In approximate mode the removal scheduler re-evaluates tied candidates exactly, and always credits the exact change
for the edge it removes.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Union

import numpy as np
import numpy.typing as npt
from numba_progress import ProgressBar

from atria import config
from atria.algos import significance as sig_algos
from atria.errors import InvalidEdgeError
from atria.metrics.paths import ShortestPathEngine, summarise

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class SignificanceMode(str, Enum):
    """Whether candidate significances are estimated from a shared snapshot or recomputed exactly."""

    APPROXIMATE = "approximate"
    EXACT = "exact"


class SignificanceEvaluator:
    """Evaluates edge significance against the current state of the engine's `WeightMatrix`."""

    engine: ShortestPathEngine
    mode: SignificanceMode

    def __init__(
        self,
        engine: ShortestPathEngine,
        mode: Union[SignificanceMode, str] = SignificanceMode.APPROXIMATE,
    ):
        self.engine = engine
        self.mode = SignificanceMode(mode)

    def evaluate(
        self,
        distances: npt.NDArray[np.float64],
        edges_start_arr: npt.NDArray[np.int_],
        edges_end_arr: npt.NDArray[np.int_],
    ) -> npt.NDArray[np.float64]:
        """
        Significance for each candidate edge, computed from one shared snapshot.

        Parameters
        ----------
        distances: ndarray[float]
            The all-pairs distance snapshot for the current state of the matrix.
        edges_start_arr: ndarray[int]
            Candidate source node indices.
        edges_end_arr: ndarray[int]
            Candidate target node indices.

        Returns
        -------
        significance: ndarray[float]
            One value per candidate, in candidate order.

        """
        if self.mode == SignificanceMode.EXACT:
            return self.exact(distances, edges_start_arr, edges_end_arr, progress=True)
        return sig_algos.approximate_significance(
            self.engine.weight_matrix.weights,
            distances,
            edges_start_arr,
            edges_end_arr,
            config.PATH_ATOL,
        )

    def exact(
        self,
        distances: npt.NDArray[np.float64],
        edges_start_arr: npt.NDArray[np.int_],
        edges_end_arr: npt.NDArray[np.int_],
        progress: bool = False,
    ) -> npt.NDArray[np.float64]:
        """Exact significance for each candidate edge by full recomputation without it."""
        base_total, _pairs_n = summarise(distances)
        progress_proxy: Optional[ProgressBar] = None
        if progress and not config.QUIET_MODE:
            progress_proxy = ProgressBar(update_interval=0.25, notebook=False, total=len(edges_start_arr))
        try:
            return sig_algos.exact_significance(
                self.engine.weight_matrix.weights,
                self.engine.potentials,
                edges_start_arr,
                edges_end_arr,
                base_total,
                progress_proxy=progress_proxy,
            )
        finally:
            if progress_proxy is not None:
                progress_proxy.close()

    def significance(self, source: int, target: int, distances: Optional[npt.NDArray[np.float64]] = None) -> float:
        """
        Significance of a single present edge.

        A snapshot is computed if one is not provided.
        """
        if not self.engine.weight_matrix.has_edge(source, target):
            raise InvalidEdgeError(source, target, "edge is absent")
        if distances is None:
            distances = self.engine.all_pairs()
        values = self.evaluate(distances, np.array([source], dtype=np.int_), np.array([target], dtype=np.int_))
        return float(values[0])
