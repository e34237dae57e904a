"""
Three-phase `input` / `run` / `output` lifecycle for host pipelines.

Each phase is an explicit call on an `ATria` instance. The instance only carries state between phases: the
computation itself is performed by the stateless `atria_centrality` entry point.

```python
from atria.plugin import ATria

plugin = ATria()
plugin.input("network.csv")
plugin.run()
plugin.output("network.noa")
```
"""
from __future__ import annotations

import logging
from typing import Optional, Union

from atria.metrics.centrality import ATriaResult, atria_centrality
from atria.metrics.paths import NegativeWeightPolicy
from atria.metrics.significance import SignificanceMode
from atria.structures import WeightMatrix
from atria.tools import io

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ATria:
    """Reads a CSV weight matrix, computes ATria centrality, and writes a NOA file."""

    weight_matrix: Optional[WeightMatrix]
    labels: Optional[list[str]]
    result: Optional[ATriaResult]

    def __init__(
        self,
        mode: Union[SignificanceMode, str] = SignificanceMode.APPROXIMATE,
        policy: Union[NegativeWeightPolicy, str] = NegativeWeightPolicy.REWEIGHT,
        workers: Optional[int] = None,
        zero_as_absent: bool = True,
    ):
        self.mode = SignificanceMode(mode)
        self.policy = NegativeWeightPolicy(policy)
        self.workers = workers
        self.zero_as_absent = zero_as_absent
        self.weight_matrix = None
        self.labels = None
        self.result = None

    def input(self, file_path: io.PathLike):
        """Load the weight matrix and labels."""
        self.weight_matrix, self.labels = io.read_weight_csv(file_path, zero_as_absent=self.zero_as_absent)
        self.result = None

    def run(self) -> ATriaResult:
        """Compute centrality. The loaded matrix is consumed."""
        if self.weight_matrix is None:
            raise RuntimeError("Please call input before run.")
        self.result = atria_centrality(
            self.weight_matrix,
            labels=self.labels,
            mode=self.mode,
            policy=self.policy,
            workers=self.workers,
        )
        self.weight_matrix = None
        return self.result

    def output(self, file_path: io.PathLike):
        """Write the result as a NOA file."""
        if self.result is None:
            raise RuntimeError("Please call run before output.")
        io.write_noa(file_path, self.result)
