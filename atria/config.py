from __future__ import annotations

import logging
import os
from typing import Optional

import numba
import numpy as np

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

np.seterr(invalid="ignore")


def check_quiet() -> bool:
    """Check whether to enable quiet mode."""
    if "ATRIA_QUIET_MODE" in os.environ:
        if os.environ["ATRIA_QUIET_MODE"].lower() in ["true", "1"]:
            return True
    return False


QUIET_MODE = check_quiet()


def check_debug() -> bool:
    """Check whether to enable debug mode."""
    if "ATRIA_DEBUG_MODE" in os.environ:
        if os.environ["ATRIA_DEBUG_MODE"].lower() in ["true", "1"]:
            return True
    return False


DEBUG_MODE: bool = check_debug()


def check_num_threads() -> Optional[int]:
    """Read the default worker thread count, if set."""
    if "ATRIA_NUM_THREADS" in os.environ:
        num_threads = int(os.environ["ATRIA_NUM_THREADS"])
        if num_threads < 1:
            raise ValueError("ATRIA_NUM_THREADS must be a positive integer.")
        return num_threads
    return None


NUM_THREADS: Optional[int] = check_num_threads()


def set_workers(workers: Optional[int] = None) -> int:
    """
    Set the number of threads used by the parallel kernels and return the prior setting.

    Falls back to `ATRIA_NUM_THREADS`, then to the `numba` default. Thread counts are clipped to the number of threads
    `numba` was launched with.
    """
    prior = numba.get_num_threads()
    if workers is None:
        workers = NUM_THREADS
    if workers is None:
        return prior
    if workers < 1:
        raise ValueError("Please provide a positive number of workers.")
    workers = min(workers, numba.config.NUMBA_NUM_THREADS)  # type: ignore
    numba.set_num_threads(workers)
    return prior


# for all_close equality checks
ATOL: float = 0.001
RTOL: float = 0.0001
# tolerance for deciding whether a shortest path is routed through an edge
PATH_ATOL: float = 1e-9
# significances closer than this to the minimum are treated as tied
SIGNIFICANCE_ATOL: float = 1e-9
# fastmath flags - excludes nnan and ninf because absent edges and unreachable nodes rely on NaN and inf sentinels
FASTMATH: set[str] = {"nsz", "arcp", "contract", "afn"}
