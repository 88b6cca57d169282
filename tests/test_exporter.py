import json

import h5py
import numpy as np
import pytest

from skill_layout.exporter import LayoutExporter
from skill_layout.layout import LayoutResult
from skill_layout.models import NodePosition, ShapeParams, SkillNode
from skill_layout.utils.validation import validate_hdf5_file


@pytest.fixture
def result():
    nodes = [SkillNode("a", 3), SkillNode("b", 9), SkillNode("c", 5)]
    positions = [
        NodePosition("a", 10.0, 20.0, 0.5, ["b", "c"], score=3),
        NodePosition("b", 30.0, 40.0, 0.9, ["a", "ghost"], score=9, size=8, color="#8B0000"),
        NodePosition("c", 50.0, 60.0, 0.7, ["a"]),
    ]
    return LayoutResult(shape="brain", seed=7, nodes=nodes, positions=positions,
                        params=ShapeParams(width=200, height=100))


def test_json_payload(result, tmp_path):
    path = LayoutExporter().to_json(result, tmp_path / "out" / "layout.json")

    data = json.loads(path.read_text())
    assert data["shape"] == "brain"
    assert data["seed"] == 7
    assert (data["width"], data["height"]) == (200, 100)
    assert data["nodes"][0] == {"id": "a", "x": 10.0, "y": 20.0, "brightness": 0.5,
                                "neighbors": ["b", "c"], "score": 3}
    assert data["nodes"][1]["color"] == "#8B0000"
    assert "score" not in data["nodes"][2]


def test_hdf5_batch_round_trip(result, tmp_path):
    exporter = LayoutExporter()
    unseeded = LayoutResult(shape="fist", seed=None, nodes=[], positions=[], params=result.params)

    path = exporter.to_hdf5([result, unseeded], tmp_path / "batch.hdf5")

    assert validate_hdf5_file(path)
    layouts = exporter.read_hdf5(path)
    assert [layout["shape"] for layout in layouts] == ["brain", "fist"]
    first, empty = layouts
    assert first["seed"] == 7
    assert first["ids"] == ["a", "b", "c"]
    np.testing.assert_allclose(first["xy"], [[10, 20], [30, 40], [50, 60]])
    # each undirected edge once; the dangling "ghost" reference is dropped
    assert first["edges"].tolist() == [[0, 1], [0, 2]]
    assert empty["seed"] == -1
    assert empty["xy"].shape == (0, 2)
    assert empty["edges"].shape == (0, 2)


def test_hdf5_missing_score_is_nan(result, tmp_path):
    path = LayoutExporter().to_hdf5([result], tmp_path / "batch.hdf5")

    with h5py.File(path, "r") as f:
        scores = np.array(f["layout_0000/score"])
        assert f.attrs["num_layouts"] == 1
    assert scores[:2].tolist() == [3.0, 9.0]
    assert np.isnan(scores[2])


def test_preview_png(result, tmp_path):
    path = LayoutExporter().render_preview(result, tmp_path / "previews" / "brain.png")

    assert path.exists()
    assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_preview_of_empty_layout(tmp_path):
    empty = LayoutResult(shape="brain", seed=None, nodes=[], positions=[],
                         params=ShapeParams(width=100, height=100))

    path = LayoutExporter().render_preview(empty, tmp_path / "empty.png")

    assert path.exists()
