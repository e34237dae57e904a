"""
Conversion between `NetworkX` graphs and `WeightMatrix` structures.
"""
from __future__ import annotations

import logging
from typing import Any, Hashable, Optional, Sequence

import networkx as nx
import numpy as np

from atria.errors import DimensionMismatchError
from atria.structures import WeightMatrix

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# type hack until networkx supports type-hinting
DiGraph = Any


def weight_matrix_from_nx(nx_graph: DiGraph, weight: str = "weight") -> tuple[WeightMatrix, list[Hashable]]:
    """
    Build a `WeightMatrix` from a `NetworkX` graph.

    Parameters
    ----------
    nx_graph: DiGraph | Graph
        A `NetworkX` `DiGraph`. Undirected graphs are converted with an edge in each direction. Multigraphs are not
        supported.
    weight: str
        The edge attribute holding the weight. Edges without the attribute are given a weight of 1.

    Returns
    -------
    weight_matrix: WeightMatrix
        Rows and columns follow the graph's node order.
    node_keys: list
        The node keys, indexed by node index.

    """
    if nx_graph.is_multigraph():
        raise TypeError("This method requires a NetworkX Graph or DiGraph, not a multigraph.")
    node_keys = list(nx_graph.nodes())
    node_idx_map = {nd_key: nd_idx for nd_idx, nd_key in enumerate(node_keys)}
    weights = np.full((len(node_keys), len(node_keys)), np.nan, dtype=np.float64)
    for start_nd_key, end_nd_key, edge_data in nx_graph.edges(data=True):
        if start_nd_key == end_nd_key:
            logger.warning(f"Ignoring self-loop at node {start_nd_key}.")
            continue
        start_nd_idx = node_idx_map[start_nd_key]
        end_nd_idx = node_idx_map[end_nd_key]
        wt = float(edge_data.get(weight, 1.0))
        weights[start_nd_idx, end_nd_idx] = wt
        if not nx_graph.is_directed():
            weights[end_nd_idx, start_nd_idx] = wt
    return WeightMatrix(weights), node_keys


def nx_from_weight_matrix(
    weight_matrix: WeightMatrix, labels: Optional[Sequence[Hashable]] = None, weight: str = "weight"
) -> DiGraph:
    """
    Build a `NetworkX` `DiGraph` from a `WeightMatrix`.

    Nodes are keyed by label if provided, otherwise by index.
    """
    if labels is not None and len(labels) != weight_matrix.node_count:
        raise DimensionMismatchError(
            f"Encountered {len(labels)} labels for a network of {weight_matrix.node_count} nodes."
        )
    node_keys = list(labels) if labels is not None else list(range(weight_matrix.node_count))
    nx_digraph = nx.DiGraph()
    nx_digraph.add_nodes_from(node_keys)
    for start_nd_idx, end_nd_idx, wt in weight_matrix.edges():
        nx_digraph.add_edge(node_keys[start_nd_idx], node_keys[end_nd_idx], **{weight: wt})
    return nx_digraph
