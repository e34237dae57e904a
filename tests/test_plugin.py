# pyright: basic
from __future__ import annotations

import pandas as pd
import pytest

from atria.plugin import ATria
from atria.errors import NegativeCycleDetectedError
from atria.metrics.significance import SignificanceMode


def test_plugin_lifecycle(tmp_path):
    csv_path = tmp_path / "chain.csv"
    csv_path.write_text(",A,B,C,D\nA,0,1,0,5\nB,0,0,1,0\nC,0,0,0,1\nD,0,0,0,0\n")
    noa_path = tmp_path / "chain.noa"
    plugin = ATria()
    with pytest.raises(RuntimeError):
        plugin.run()
    with pytest.raises(RuntimeError):
        plugin.output(noa_path)
    plugin.input(csv_path)
    assert plugin.labels == ["A", "B", "C", "D"]
    result = plugin.run()
    # the loaded matrix is consumed
    assert plugin.weight_matrix is None
    with pytest.raises(RuntimeError):
        plugin.run()
    assert result.ranked()[0][1] == "B"
    plugin.output(noa_path)
    noa_df = pd.read_csv(noa_path, sep="\t")
    assert list(noa_df["Name"]) == ["B", "A", "C", "D"]
    assert list(noa_df["Rank"]) == [4, 3, 2, 1]


def test_plugin_options(tmp_path):
    plugin = ATria(mode="exact", policy="reweight", workers=1, zero_as_absent=False)
    assert plugin.mode == SignificanceMode.EXACT
    csv_path = tmp_path / "cycle.csv"
    csv_path.write_text(",A,B,C\nA,,1,\nB,,,-2\nC,0.5,,\n")
    plugin.input(csv_path)
    with pytest.raises(NegativeCycleDetectedError):
        plugin.run()
    assert plugin.result is None
    with pytest.raises(ValueError):
        ATria(mode="fast")
