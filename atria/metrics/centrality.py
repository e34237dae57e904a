r"""
ATria (Ablatio Triadum) centrality for directed, weighted and signed networks.

The method repeatedly removes the least significant edge from the network and credits the resultant change in total
structure cost to both of the edge's endpoints:

1. compute the all-pairs shortest-path snapshot for the current network;
2. estimate the significance of every remaining edge from that snapshot;
3. remove the edge with the smallest absolute significance, breaking ties by the lowest `(source, target)`;
4. recompute the snapshot and credit $|cost_{after} - cost_{before}|$ to the source and the target;
5. repeat until no edges remain.

Total structure cost is the sum of finite shortest distances over all ordered node pairs. Nodes accumulating the
largest credits are the most central. Self-loops never contribute.

Use [`atria_centrality`](#atria-centrality) for a single call, or a `RemovalScheduler` directly to inspect state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Union

import numba
import numpy as np
import numpy.typing as npt
from tqdm import tqdm

from atria import config
from atria.errors import DimensionMismatchError, EmptyGraphError
from atria.metrics.paths import NegativeWeightPolicy, ShortestPathEngine, summarise
from atria.metrics.significance import SignificanceEvaluator, SignificanceMode
from atria.structures import WeightMatrix

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class CentralityAccumulator:
    """Per-node running sums of credited significance."""

    def __init__(self, nodes_n: int):
        self._scores: npt.NDArray[np.float64] = np.full(nodes_n, 0.0, dtype=np.float64)
        self._ranks: Optional[npt.NDArray[np.int_]] = None

    @property
    def count(self) -> int:
        """The number of nodes."""
        return len(self._scores)

    @property
    def finalized(self) -> bool:
        """Whether `finalize` has been called."""
        return self._ranks is not None

    @property
    def scores(self) -> npt.NDArray[np.float64]:
        """A copy of the current scores."""
        return self._scores.copy()

    @property
    def ranks(self) -> npt.NDArray[np.int_]:
        """Ranks per node, 1 being the largest magnitude. Only available once finalized."""
        if self._ranks is None:
            raise RuntimeError("Ranks are only available once the accumulator is finalized.")
        return self._ranks.copy()

    def credit(self, node: int, amount: float):
        """Add a non-negative amount to a node's score."""
        if self._ranks is not None:
            raise RuntimeError("Cannot credit a finalized accumulator.")
        if not 0 <= node < self.count:
            raise ValueError(f"Node index {node} is out of range.")
        if not np.isfinite(amount) or amount < 0:
            raise ValueError(f"Credits must be finite and non-negative, encountered {amount}.")
        self._scores[node] += amount

    def finalize(self) -> dict[int, tuple[float, int]]:
        """
        Score and rank per node.

        Rank 1 is the largest absolute score. Equal magnitudes are ordered by ascending node index. Repeated calls
        return the same result.
        """
        if self._ranks is None:
            # lexsort sorts by the last key first
            order = np.lexsort((np.arange(self.count), -np.abs(self._scores)))
            ranks = np.empty(self.count, dtype=np.int_)
            ranks[order] = np.arange(1, self.count + 1)
            self._ranks = ranks
        return {idx: (float(self._scores[idx]), int(self._ranks[idx])) for idx in range(self.count)}


class RemovalRecord(NamedTuple):
    """One iteration of the removal loop."""

    iteration: int
    source: int
    target: int
    weight: float
    estimated: float
    """Significance used for selection."""
    significance: float
    """Exact change in total cost caused by the removal."""


@dataclass(frozen=True)
class ATriaResult:
    """Scores, ranks and the removal history of a completed run."""

    scores: npt.NDArray[np.float64]
    ranks: npt.NDArray[np.int_]
    removals: tuple[RemovalRecord, ...]
    labels: Optional[tuple[str, ...]] = None

    @property
    def count(self) -> int:
        """The number of nodes."""
        return len(self.scores)

    def label(self, node_idx: int) -> str:
        """The external label for a node, or its index as a string."""
        if self.labels is None:
            return str(node_idx)
        return self.labels[node_idx]

    def as_dict(self) -> dict[int, tuple[float, int]]:
        """Mapping of node index to `(score, rank)`."""
        return {idx: (float(self.scores[idx]), int(self.ranks[idx])) for idx in range(self.count)}

    def ranked(self) -> list[tuple[int, str, float, int]]:
        """`(node_idx, label, score, rank)` tuples ordered by rank."""
        order = np.argsort(self.ranks, kind="stable")
        return [
            (int(idx), self.label(int(idx)), float(self.scores[idx]), int(self.ranks[idx])) for idx in order
        ]


class SchedulerState(str, Enum):
    """Lifecycle of a `RemovalScheduler`."""

    READY = "ready"
    ITERATING = "iterating"
    DONE = "done"
    FAILED = "failed"


class RemovalScheduler:
    """
    Drives the ATria removal loop over a single, exclusively owned `WeightMatrix`.

    The matrix is mutated in place: once a run completes it contains no edges.
    """

    weight_matrix: WeightMatrix
    labels: Optional[tuple[str, ...]]
    engine: ShortestPathEngine
    evaluator: SignificanceEvaluator
    workers: Optional[int]
    state: SchedulerState
    accumulator: Optional[CentralityAccumulator]
    removals: list[RemovalRecord]

    def __init__(
        self,
        weight_matrix: Union[WeightMatrix, npt.ArrayLike],
        labels: Optional[Sequence[str]] = None,
        mode: Union[SignificanceMode, str] = SignificanceMode.APPROXIMATE,
        policy: Union[NegativeWeightPolicy, str] = NegativeWeightPolicy.REWEIGHT,
        workers: Optional[int] = None,
    ):
        if not isinstance(weight_matrix, WeightMatrix):
            weight_matrix = WeightMatrix(weight_matrix)
        if labels is not None:
            labels = tuple(str(label) for label in labels)
            if len(labels) != weight_matrix.node_count:
                raise DimensionMismatchError(
                    f"Encountered {len(labels)} labels for a network of {weight_matrix.node_count} nodes."
                )
        self.weight_matrix = weight_matrix
        self.labels = labels
        self.engine = ShortestPathEngine(weight_matrix, policy=policy)
        self.evaluator = SignificanceEvaluator(self.engine, mode=mode)
        self.workers = workers
        self.state = SchedulerState.READY
        self.accumulator = None
        self.removals = []
        self._result: Optional[ATriaResult] = None

    def run(self) -> ATriaResult:
        """
        Run the removal loop to completion.

        Any error aborts the run without partial scores. Calling `run` again once done returns the same result.
        """
        if self.state == SchedulerState.DONE and self._result is not None:
            return self._result
        if self.state != SchedulerState.READY:
            raise RuntimeError(f"Unable to run a scheduler in the {self.state.value} state.")
        if self.weight_matrix.node_count == 0:
            self.state = SchedulerState.FAILED
            raise EmptyGraphError()
        prior_workers = config.set_workers(self.workers)
        try:
            self._iterate()
        except Exception:
            self.state = SchedulerState.FAILED
            self.accumulator = None
            self.removals = []
            raise
        finally:
            numba.set_num_threads(prior_workers)
        assert self.accumulator is not None  # nosec
        self._result = ATriaResult(
            scores=self.accumulator.scores,
            ranks=self.accumulator.ranks,
            removals=tuple(self.removals),
            labels=self.labels,
        )
        self.state = SchedulerState.DONE
        return self._result

    def _select(
        self,
        distances: npt.NDArray[np.float64],
        edges_start_arr: npt.NDArray[np.int_],
        edges_end_arr: npt.NDArray[np.int_],
        estimates: npt.NDArray[np.float64],
    ) -> int:
        """Index of the candidate with the smallest absolute significance."""
        magnitudes = np.abs(estimates)
        tied = np.flatnonzero(magnitudes <= magnitudes.min() + config.SIGNIFICANCE_ATOL)
        if len(tied) > 1 and self.evaluator.mode == SignificanceMode.APPROXIMATE:
            exact = np.abs(self.evaluator.exact(distances, edges_start_arr[tied], edges_end_arr[tied]))
            tied = tied[exact <= exact.min() + config.SIGNIFICANCE_ATOL]
        # candidates are in row-major order, so the first has the lowest (source, target)
        return int(tied[0])

    def _iterate(self):
        self.state = SchedulerState.ITERATING
        self.weight_matrix.validate()
        nodes_n = self.weight_matrix.node_count
        edges_n = self.weight_matrix.edge_count
        if not config.QUIET_MODE:
            logger.info(
                f"Computing ATria centrality for {nodes_n} nodes and {edges_n} edges "
                f"using {self.evaluator.mode.value} significance."
            )
        self.accumulator = CentralityAccumulator(nodes_n)
        distances = self.engine.all_pairs()
        current_total, _pairs_n = summarise(distances)
        with tqdm(total=edges_n, disable=config.QUIET_MODE) as pbar:
            for iteration in range(edges_n):
                edges_start_arr, edges_end_arr, _weights_arr = self.weight_matrix.edges().arrays()
                estimates = self.evaluator.evaluate(distances, edges_start_arr, edges_end_arr)
                edge_idx = self._select(distances, edges_start_arr, edges_end_arr, estimates)
                start_nd_idx = int(edges_start_arr[edge_idx])
                end_nd_idx = int(edges_end_arr[edge_idx])
                wt = self.weight_matrix.remove_edge(start_nd_idx, end_nd_idx)
                # the new snapshot serves both the exact credit and the next iteration
                distances = self.engine.all_pairs()
                next_total, pairs_n = summarise(distances)
                delta = next_total - current_total
                current_total = next_total
                self.accumulator.credit(start_nd_idx, abs(delta))
                self.accumulator.credit(end_nd_idx, abs(delta))
                self.removals.append(
                    RemovalRecord(iteration, start_nd_idx, end_nd_idx, wt, float(estimates[edge_idx]), delta)
                )
                if config.DEBUG_MODE:
                    logger.debug(
                        f"Iteration {iteration}: removed ({start_nd_idx}, {end_nd_idx}) weight {wt}, "
                        f"estimated {estimates[edge_idx]}, exact {delta}, {pairs_n} reachable pairs remain."
                    )
                pbar.update(1)
        if self.weight_matrix.edge_count != 0:
            raise RuntimeError("Edges remain after the removal loop completed.")
        self.accumulator.finalize()


def atria_centrality(
    weights: Union[WeightMatrix, npt.ArrayLike],
    labels: Optional[Sequence[str]] = None,
    mode: Union[SignificanceMode, str] = SignificanceMode.APPROXIMATE,
    policy: Union[NegativeWeightPolicy, str] = NegativeWeightPolicy.REWEIGHT,
    workers: Optional[int] = None,
) -> ATriaResult:
    r"""
    Compute ATria centrality for a directed, weighted and signed network.

    Parameters
    ----------
    weights: WeightMatrix | ArrayLike
        A square weight matrix with rows as sources and columns as targets. `NaN` denotes an absent edge. A
        `WeightMatrix` is consumed: it is left without edges. Array input is copied.
    labels: Sequence[str]
        Optional node labels, passed through to the result.
    mode: SignificanceMode | str
        `approximate` (default) estimates every candidate from one shared snapshot per iteration. `exact` recomputes
        all shortest paths for every candidate.
    policy: NegativeWeightPolicy | str
        `reweight` (default) supports negative weights via Johnson reweighting and fails on negative cycles. `reject`
        fails on any negative weight.
    workers: int
        Number of threads for the parallel kernels. Defaults to `ATRIA_NUM_THREADS` or the `numba` default. Results do
        not depend on the number of threads.

    Returns
    -------
    ATriaResult
        Per-node scores and ranks, the removal history, and the labels.

    Examples
    --------
    ```python
    import numpy as np
    from atria.metrics import centrality

    nan = np.nan
    weights = np.array([
        [nan, 1.0, nan, 5.0],
        [nan, nan, 1.0, nan],
        [nan, nan, nan, 1.0],
        [nan, nan, nan, nan],
    ])
    result = centrality.atria_centrality(weights)
    print(result.ranks)
    # prints: [2 1 3 4]
    ```

    """
    scheduler = RemovalScheduler(weights, labels=labels, mode=mode, policy=policy, workers=workers)
    return scheduler.run()
