"""
Functions for reading weight matrices and writing centrality results.

The input format is a CSV file with nodes as both rows and columns: the header row holds the node labels, the first
column of each row holds the row's label, and entry `(i, j)` is the weight of the edge from node `i` to node `j`.

The output format is a Cytoscape NOde Attribute (NOA) file: a tab separated table with `Name`, `Centrality` and
`Rank` columns, which can be imported into Cytoscape so that centrality values become node attributes. Larger values
indicate higher centrality in both columns, so the most central node carries the largest `Rank`.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from atria import config
from atria.errors import DimensionMismatchError
from atria.metrics.centrality import ATriaResult
from atria.structures import WeightMatrix

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

NOA_COLUMNS = ("Name", "Centrality", "Rank")


def read_weight_csv(file_path: PathLike, zero_as_absent: bool = True) -> tuple[WeightMatrix, list[str]]:
    """
    Read a square weight matrix from a CSV file.

    Parameters
    ----------
    file_path: str | Path
        Path to the CSV file.
    zero_as_absent: bool
        Whether zero weights denote an absent relationship, as is conventional for correlation networks. Empty cells
        are always absent. By default True.

    Returns
    -------
    weight_matrix: WeightMatrix
        The weight matrix. Diagonal entries are ignored.
    labels: list[str]
        Node labels taken from the header row.

    """
    matrix_df = pd.read_csv(file_path, index_col=0)
    labels = [str(col) for col in matrix_df.columns]
    if matrix_df.shape[0] != matrix_df.shape[1]:
        raise DimensionMismatchError(
            f"Expected a square matrix but encountered {matrix_df.shape[0]} rows and {matrix_df.shape[1]} columns."
        )
    row_labels = [str(idx) for idx in matrix_df.index]
    if row_labels != labels:
        logger.warning("Row labels do not match column labels. Column labels will be used.")
    try:
        weights = matrix_df.to_numpy(dtype=np.float64)
    except ValueError as err:
        raise ValueError(f"Unable to parse weights in {file_path} as floats.") from err
    if zero_as_absent:
        weights[weights == 0] = np.nan
    weight_matrix = WeightMatrix(weights)
    if not config.QUIET_MODE:
        logger.info(f"Loaded {weight_matrix.node_count} nodes and {weight_matrix.edge_count} edges from {file_path}.")
    return weight_matrix, labels


def result_to_df(result: ATriaResult) -> pd.DataFrame:
    """
    Tabulate a result in rank order.

    Centrality is reported as a magnitude and ranks are reversed, so larger values always indicate greater centrality.
    The most central of `N` nodes has a `Rank` of `N`.
    """
    rows = [(label, abs(score), result.count + 1 - rank) for _node_idx, label, score, rank in result.ranked()]
    return pd.DataFrame(rows, columns=list(NOA_COLUMNS))


def write_noa(file_path: PathLike, result: ATriaResult):
    """
    Write centrality values and ranks to a Cytoscape NOA file.

    Parameters
    ----------
    file_path: str | Path
        Destination path.
    result: ATriaResult
        The result of a completed run.

    """
    result_to_df(result).to_csv(file_path, sep="\t", index=False)
    if not config.QUIET_MODE:
        logger.info(f"Wrote centrality for {result.count} nodes to {file_path}.")
