# pyright: basic
from __future__ import annotations

import numpy as np
import pytest

from atria import config
from atria.errors import (
    DimensionMismatchError,
    EmptyGraphError,
    InvalidEdgeError,
    NegativeCycleDetectedError,
    NegativeWeightUnsupportedError,
)
from atria.metrics import centrality
from atria.metrics.centrality import CentralityAccumulator, RemovalScheduler, SchedulerState
from atria.metrics.significance import SignificanceMode
from atria.structures import WeightMatrix
from atria.tools import mock


def test_accumulator():
    accumulator = CentralityAccumulator(5)
    assert accumulator.count == 5
    assert not accumulator.finalized
    with pytest.raises(RuntimeError):
        accumulator.ranks
    accumulator.credit(3, 2.0)
    accumulator.credit(1, 2.0)
    accumulator.credit(4, 0.5)
    accumulator.credit(3, 1.0)
    assert np.array_equal(accumulator.scores, [0.0, 2.0, 0.0, 3.0, 0.5])
    with pytest.raises(ValueError):
        accumulator.credit(5, 1.0)
    with pytest.raises(ValueError):
        accumulator.credit(0, -1.0)
    with pytest.raises(ValueError):
        accumulator.credit(0, np.inf)
    finalized = accumulator.finalize()
    # ties broken by ascending index
    assert finalized == {
        0: (0.0, 4),
        1: (2.0, 2),
        2: (0.0, 5),
        3: (3.0, 1),
        4: (0.5, 3),
    }
    assert sorted(accumulator.ranks) == [1, 2, 3, 4, 5]
    # idempotent
    assert accumulator.finalize() == finalized
    with pytest.raises(RuntimeError):
        accumulator.credit(0, 1.0)


def test_chain_scenario(chain_matrix):
    scheduler = RemovalScheduler(chain_matrix)
    assert scheduler.state == SchedulerState.READY
    result = scheduler.run()
    assert scheduler.state == SchedulerState.DONE
    removed = [(record.source, record.target) for record in result.removals]
    # the shortcut carries no shortest paths and goes first
    # 0->1 and 2->3 then tie and the lower pair wins, as do 1->2 and 2->3 thereafter
    assert removed == [(0, 3), (0, 1), (1, 2), (2, 3)]
    assert [record.iteration for record in result.removals] == [0, 1, 2, 3]
    assert [record.weight for record in result.removals] == [5.0, 1.0, 1.0, 1.0]
    assert np.allclose([record.significance for record in result.removals], [0.0, -6.0, -3.0, -1.0])
    assert np.allclose([record.estimated for record in result.removals], [0.0, -6.0, -3.0, -1.0])
    # nodes 0 and 3 receive nothing for the shortcut, interior node 1 collects the most
    assert np.allclose(result.scores, [6.0, 9.0, 4.0, 1.0])
    assert np.array_equal(result.ranks, [2, 1, 3, 4])
    assert result.as_dict() == {0: (6.0, 2), 1: (9.0, 1), 2: (4.0, 3), 3: (1.0, 4)}
    assert [row[0] for row in result.ranked()] == [1, 0, 2, 3]
    assert result.label(1) == "1"
    # the matrix is consumed and a further removal fails
    assert chain_matrix.edge_count == 0
    with pytest.raises(InvalidEdgeError):
        chain_matrix.remove_edge(2, 3)
    # run is idempotent once done
    assert scheduler.run() is result


def test_iterations_match_edges(random_matrix, signed_matrix):
    for weight_matrix in [random_matrix, signed_matrix]:
        edges_n = weight_matrix.edge_count
        removed: list[tuple[int, int]] = []
        result = RemovalScheduler(weight_matrix).run()
        assert len(result.removals) == edges_n
        for record in result.removals:
            removed.append((record.source, record.target))
        # each edge is removed exactly once
        assert len(set(removed)) == edges_n
        assert weight_matrix.edge_count == 0
        # each removal is credited to both endpoints
        credited = np.full(weight_matrix.node_count, 0.0)
        for record in result.removals:
            credited[record.source] += abs(record.significance)
            credited[record.target] += abs(record.significance)
        assert np.allclose(credited, result.scores)
        assert sorted(result.ranks) == list(range(1, weight_matrix.node_count + 1))


def test_complete_graph():
    # two nodes remain symmetric throughout
    result = centrality.atria_centrality(mock.mock_complete_matrix(2))
    assert np.allclose(result.scores, [2.0, 2.0])
    assert np.array_equal(result.ranks, [1, 2])
    # with three nodes the first removal breaks the symmetry
    result = centrality.atria_centrality(mock.mock_complete_matrix(3))
    assert [(record.source, record.target) for record in result.removals] == [
        (0, 1),
        (1, 0),
        (0, 2),
        (2, 1),
        (1, 2),
        (2, 0),
    ]
    assert np.allclose(result.scores, [6.0, 6.0, 8.0])
    # nodes 0 and 1 tie and are ranked by index
    assert np.array_equal(result.ranks, [2, 3, 1])
    # weights scale the scores but not the ranks
    scaled = centrality.atria_centrality(mock.mock_complete_matrix(3, weight=2.5))
    assert np.allclose(scaled.scores, result.scores * 2.5)
    assert np.array_equal(scaled.ranks, result.ranks)


def test_no_edges():
    result = centrality.atria_centrality(np.full((3, 3), np.nan))
    assert result.removals == ()
    assert np.array_equal(result.scores, [0.0, 0.0, 0.0])
    assert np.array_equal(result.ranks, [1, 2, 3])


def test_empty_graph():
    with pytest.raises(EmptyGraphError):
        centrality.atria_centrality([])
    scheduler = RemovalScheduler(np.empty((0, 0)))
    with pytest.raises(EmptyGraphError):
        scheduler.run()
    assert scheduler.accumulator is None
    assert scheduler.state == SchedulerState.FAILED
    with pytest.raises(RuntimeError):
        scheduler.run()


def test_fatal_errors(dijkstra_counter_matrix):
    # negative cycles abort without partial scores
    negative_cycle = mock.mock_negative_cycle_matrix()
    scheduler = RemovalScheduler(negative_cycle)
    with pytest.raises(NegativeCycleDetectedError):
        scheduler.run()
    assert scheduler.state == SchedulerState.FAILED
    assert scheduler.accumulator is None
    assert scheduler.removals == []
    # no edge was removed
    assert negative_cycle.edge_count == 3
    # negative weights under the reject policy
    scheduler = RemovalScheduler(dijkstra_counter_matrix, policy="reject")
    with pytest.raises(NegativeWeightUnsupportedError):
        scheduler.run()
    assert scheduler.accumulator is None
    assert dijkstra_counter_matrix.edge_count == 5


def test_labels(chain_matrix):
    labels = mock.mock_labels(4)
    result = centrality.atria_centrality(chain_matrix, labels=labels)
    assert result.labels == ("A", "B", "C", "D")
    assert result.ranked()[0] == (1, "B", 9.0, 1)
    with pytest.raises(DimensionMismatchError):
        RemovalScheduler(mock.mock_chain_matrix(), labels=labels[:3])


def test_array_input_is_copied():
    weights = mock.mock_chain_matrix().weights.copy()
    result = centrality.atria_centrality(weights)
    assert np.array_equal(result.ranks, [2, 1, 3, 4])
    assert np.count_nonzero(~np.isnan(weights)) == 4


def test_exact_mode(chain_matrix, signed_matrix):
    approx = centrality.atria_centrality(mock.mock_chain_matrix())
    exact = centrality.atria_centrality(chain_matrix, mode=SignificanceMode.EXACT)
    assert exact.removals == approx.removals
    assert np.array_equal(exact.scores, approx.scores)
    # in exact mode the selection value is the credited value
    result = centrality.atria_centrality(signed_matrix, mode="exact")
    for record in result.removals:
        assert record.estimated == record.significance


def test_signed_network(signed_matrix):
    result = centrality.atria_centrality(signed_matrix)
    assert np.all(result.scores >= 0)
    assert np.all(np.isfinite(result.scores))
    assert sorted(result.ranks) == list(range(1, signed_matrix.node_count + 1))


def test_determinism():
    results = []
    for workers in [1, 2, 4, None]:
        weight_matrix = mock.mock_signed_matrix(12, density=0.35, random_seed=3)
        results.append(centrality.atria_centrality(weight_matrix, workers=workers))
    for result in results[1:]:
        assert result.scores.tobytes() == results[0].scores.tobytes()
        assert result.ranks.tobytes() == results[0].ranks.tobytes()
        assert result.removals == results[0].removals


def test_workers():
    with pytest.raises(ValueError):
        centrality.atria_centrality(mock.mock_chain_matrix(), workers=0)
    prior = config.set_workers(1)
    try:
        assert config.set_workers(None) == 1
    finally:
        config.set_workers(prior)


def test_bridge_not_removed_early():
    nan = np.nan
    # 0 -> 1 is a bridge to node 1 that node 2 can only reach by returning to 0
    weights = np.full((5, 5), nan)
    weights[0, 1] = 10
    weights[0, 2] = 0.01
    weights[2, 0] = 0.01
    weights[2, 3] = 50
    weights[3, 4] = 0.5
    approx = centrality.atria_centrality(weights)
    exact = centrality.atria_centrality(weights, mode=SignificanceMode.EXACT)
    for result in [approx, exact]:
        first = result.removals[0]
        assert (first.source, first.target) == (2, 0)
        assert first.significance == pytest.approx(-10.02)
    # the estimate for the first removal matches the credited change
    assert approx.removals[0].estimated == pytest.approx(approx.removals[0].significance)
