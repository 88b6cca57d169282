import logging
import math
from dataclasses import replace

import numpy as np
import pytest

from skill_layout.graph import connect_to_hubs
from skill_layout.layout import available_shapes, get_shape, layout, register_shape, resolve_rng
from skill_layout.models import FIST_COLOR, ShapeParams, SkillNode
from skill_layout.shapes.brain import brain_regions, brain2_regions, top_down_regions
from skill_layout.shapes import fist

from helpers import is_single_cycle, make_nodes, neighbor_map

RANDOM_SHAPES = ["brain", "brain2", "brain3", "brain4", "top-down-brain", "fist", "brain-test2"]


def _xy(positions):
    return [(p.id, p.x, p.y) for p in positions]


def test_unknown_shape_returns_empty_with_warning(params, caplog):
    with caplog.at_level(logging.WARNING):
        assert layout("dodecahedron", make_nodes(5), params) == []

    assert "Unknown shape id" in caplog.text


@pytest.mark.parametrize("width, height", [(0, 600), (800, -1), (float("nan"), 600), ("wide", 600)])
def test_invalid_canvas_returns_empty(width, height):
    assert layout("brain", make_nodes(5), ShapeParams(width=width, height=height)) == []


def test_missing_canvas_returns_empty():
    assert layout("brain", make_nodes(5), {"nodeSpace": 2}) == []


def test_no_nodes_returns_empty(params):
    assert layout("brain", [], params) == []


def test_dict_inputs_are_accepted():
    positions = layout(
        "ring-topology-demo",
        [{"id": "a", "score": 3}, {"id": "b"}, {"id": "c", "score": 9}],
        {"width": 400, "height": 400},
    )

    assert [p.id for p in positions] == ["a", "b", "c"]


@pytest.mark.parametrize("width, height", [(60, 60), (200, 110), (80, 400)])
@pytest.mark.parametrize("shape_id", available_shapes())
def test_small_canvas_degrades_without_raising(shape_id, width, height):
    nodes = make_nodes(20)

    positions = layout(shape_id, nodes, ShapeParams(width=width, height=height, seed=1))

    assert len(positions) <= len(nodes)
    assert {p.id for p in positions} <= {n.id for n in nodes}


def test_brain3_without_room_inside_the_margins_is_empty(caplog):
    with caplog.at_level(logging.WARNING):
        positions = layout("brain3", make_nodes(20), ShapeParams(width=60, height=60, seed=1))

    assert positions == []
    assert "no room inside the margins" in caplog.text


def test_available_shapes_lists_every_family():
    shapes = available_shapes()

    assert shapes == sorted(shapes)
    for shape_id in ("brain", "brain-svg2", "top-down-brain2", "fist", "fist1", "chikara",
                     "infinity", "infinity-layers", "moebius", "ring-topology-demo"):
        assert shape_id in shapes


def test_duplicate_registration_is_rejected():
    with pytest.raises(ValueError):
        register_shape("brain")(lambda nodes, params, rng: [])

    # re-registering the same function is a no-op
    existing = get_shape("chikara")
    assert register_shape("chikara")(existing) is existing


def test_ring_demo_is_a_six_cycle():
    nodes = [SkillNode(id=name, score=5) for name in "ABCDEF"]

    positions = layout("ring-topology-demo", nodes, {"width": 600, "height": 400})

    adjacency = neighbor_map(positions)
    assert is_single_cycle(adjacency)
    assert sorted(adjacency["A"]) == ["B", "F"]


def test_star_demo_centers_on_first_node(params):
    positions = layout("star-topology-demo", make_nodes(5), params)

    adjacency = neighbor_map(positions)
    assert len(adjacency["n0"]) == 4
    assert all(adjacency[f"n{i}"] == ["n0"] for i in range(1, 5))


def test_demo_nodes_sit_on_a_circle(params):
    positions = layout("none-topology-demo", make_nodes(8), params)

    radii = {round(np.hypot(p.x - 400, p.y - 300), 6) for p in positions}
    assert radii == {240.0}
    assert positions[0].x == pytest.approx(400)
    assert positions[0].y == pytest.approx(60)


@pytest.mark.parametrize("shape_id", RANDOM_SHAPES)
def test_same_seed_same_layout(shape_id):
    params = ShapeParams(width=800, height=600, seed=11)

    first = layout(shape_id, make_nodes(40), params)
    second = layout(shape_id, make_nodes(40), params)

    assert _xy(first) == _xy(second)
    assert neighbor_map(first) == neighbor_map(second)


def test_explicit_rng_wins_over_params_seed():
    seeded = ShapeParams(width=800, height=600, seed=11)
    other = ShapeParams(width=800, height=600, seed=99)

    a = layout("brain2", make_nodes(30), seeded, rng=np.random.default_rng(5))
    b = layout("brain2", make_nodes(30), other, rng=np.random.default_rng(5))

    assert _xy(a) == _xy(b)


def test_resolve_rng():
    rng = np.random.default_rng(1)

    assert resolve_rng(rng, seed=3) is rng
    assert resolve_rng(None, 3).random() == np.random.default_rng(3).random()


def test_params_are_not_mutated(rng):
    params = ShapeParams(width=800, height=600, extra={"max_tries": 100}, topology="ring", clustering=0.4)
    before = replace(params, extra=dict(params.extra))

    layout("brain-svg2", make_nodes(20), params, rng=rng)

    assert params == before


def test_topology_override_replaces_shape_wiring(params, rng):
    positions = layout("brain", make_nodes(30), replace(params, topology="ring", relax=False), rng=rng)

    assert is_single_cycle(neighbor_map(positions))


def test_unknown_topology_override_keeps_shape_wiring(params, rng, caplog):
    with caplog.at_level(logging.WARNING):
        positions = layout("brain2", make_nodes(20), replace(params, topology="hypercube"), rng=rng)

    assert len(positions) == 20
    assert "Topology override skipped" in caplog.text
    assert all(p.neighbors for p in positions)


def test_clustering_post_pass_is_seeded(params):
    clustered = replace(params, clustering=0.6, cluster_seed="abc", seed=3)
    plain = replace(params, seed=3)

    a = layout("brain3", make_nodes(30), clustered)
    b = layout("brain3", make_nodes(30), clustered)
    c = layout("brain3", make_nodes(30), plain)

    assert _xy(a) == _xy(b)
    assert _xy(a) != _xy(c)
    assert neighbor_map(a) == neighbor_map(c)


@pytest.mark.parametrize(
    "shape_id, builder",
    [("brain", brain_regions), ("brain2", brain2_regions)],
)
@pytest.mark.parametrize("count", [1, 7, 60])
def test_composite_shapes_place_every_node_inside_its_part(shape_id, builder, count, params, rng):
    positions = layout(shape_id, make_nodes(count), replace(params, relax=False), rng=rng)

    composite = builder(params.width, params.height)
    assert len(positions) == count
    for pos in positions:
        assert composite.part(pos.region).region.contains(pos.x, pos.y)


def test_relaxed_top_down_brain_stays_in_its_lobes(params, rng):
    positions = layout("top-down-brain", make_nodes(40), params, rng=rng)

    regions = top_down_regions(params.width, params.height)
    assert {p.region for p in positions} == {"left", "right"}
    for pos in positions:
        assert regions[pos.region].contains(pos.x, pos.y)


@pytest.mark.parametrize("shape_id", available_shapes())
def test_every_shape_yields_consistent_ids(shape_id, params):
    nodes = make_nodes(24)

    positions = layout(shape_id, nodes, replace(params, seed=2, iterations=10))

    ids = [p.id for p in positions]
    known = {n.id for n in nodes}
    assert len(ids) == len(set(ids))
    assert set(ids) <= known
    for pos in positions:
        assert set(pos.neighbors) <= set(ids)
        assert pos.id not in pos.neighbors
        assert 0.0 <= pos.brightness <= 1.0


def test_infinity_ring(params):
    positions = layout("infinity", make_nodes(12), params)

    assert is_single_cycle(neighbor_map(positions))
    assert {p.region for p in positions} == {"curve"}


def test_infinity2_drops_unpaired_node(params):
    positions = layout("infinity2", make_nodes(7), params)

    assert len(positions) == 6
    adjacency = neighbor_map(positions)
    # ring of three plus the pair link
    assert all(len(v) == 3 for v in adjacency.values())


def test_infinity3_links_only_adjacent_layers(params):
    positions = layout("infinity3", make_nodes(12), params)

    adjacency = neighbor_map(positions)
    layer = {p.id: p.region for p in positions}
    degrees = {tag: {len(adjacency[i]) for i in layer if layer[i] == tag} for tag in ("layer0", "layer1", "layer2")}
    assert degrees == {"layer0": {3}, "layer1": {4}, "layer2": {3}}
    for node_id, neighbors in adjacency.items():
        for other in neighbors:
            assert {layer[node_id], layer[other]} != {"layer0", "layer2"}


def test_infinity_layers_offsets_layers(params):
    positions = layout("infinity-layers", make_nodes(9), replace(params, node_space=10))

    assert [p.region for p in positions] == ["layer0"] * 3 + ["layer1"] * 3 + ["layer2"] * 3
    # t = 0 sits on the x axis; each layer pushes the semi-axis out by node_space * 90
    xs = [positions[i].x for i in (0, 3, 6)]
    assert xs[1] - xs[0] == pytest.approx(900)
    assert xs[2] - xs[1] == pytest.approx(900)


def test_chikara_chains_each_stroke(params):
    positions = layout("chikara", make_nodes(20), params)

    assert len(positions) == 20
    strokes = {}
    for pos in positions:
        strokes.setdefault(pos.region, []).append(pos)
    assert set(strokes) == {"stroke0", "stroke1", "stroke2"}
    for members in strokes.values():
        ends = [p for p in members if len(p.neighbors) == 1]
        assert len(members) == 1 or len(ends) == 2


def test_fist_styles_outline_and_inside(params, rng):
    positions = layout("fist", make_nodes(60), params, rng=rng)

    outline = [p for p in positions if p.region == "outline"]
    inside = [p for p in positions if p.region == "inside"]
    assert len(outline) == 12
    assert all(p.color == FIST_COLOR for p in positions)
    assert {p.size for p in outline} == {8}
    assert {p.size for p in inside} == {5}
    inside_ids = {p.id for p in inside}
    assert all(any(n in inside_ids for n in p.neighbors) for p in outline)


def _record_hubs(monkeypatch):
    calls = []

    def recording(inside, hub_count, max_connections, rng, *args):
        hubs = connect_to_hubs(inside, hub_count, max_connections, rng, *args)
        calls.append((max_connections, [h.id for h in hubs]))
        return hubs

    monkeypatch.setattr(fist, "connect_to_hubs", recording)
    return calls


@pytest.mark.parametrize("cap", [1, 2])
def test_fist_caps_hub_links_per_inside_node(cap, params, rng, monkeypatch):
    calls = _record_hubs(monkeypatch)

    positions = layout("fist", make_nodes(120), replace(params, max_inside_connections=cap), rng=rng)

    [(max_connections, hub_ids)] = calls
    assert max_connections == cap
    by_id = {p.id: p for p in positions}
    inside = [p for p in positions if p.region == "inside"]
    inside_ids = {p.id for p in inside}
    hubs = [by_id[h] for h in hub_ids]
    linked = 0
    for pos in inside:
        if pos.id in hub_ids:
            continue
        hub_links = [n for n in pos.neighbors if n in inside_ids]
        in_reach = sorted(
            (math.hypot(pos.x - h.x, pos.y - h.y), h.id) for h in hubs
            if math.hypot(pos.x - h.x, pos.y - h.y) < 80
        )
        assert hub_links == [h for _, h in in_reach[:cap]]
        for hub_id in hub_links:
            assert pos.id in by_id[hub_id].neighbors
        linked += bool(hub_links)
    assert linked > 0


def test_fist_without_hub_links_keeps_inside_on_the_outline(params, rng):
    positions = layout("fist", make_nodes(120), replace(params, max_inside_connections=0), rng=rng)

    outline_ids = {p.id for p in positions if p.region == "outline"}
    inside = [p for p in positions if p.region == "inside"]
    assert inside
    for pos in inside:
        assert set(pos.neighbors) <= outline_ids


def test_top_down_brain2_nodes_are_unconnected(params, rng):
    positions = layout("top-down-brain2", make_nodes(30), params, rng=rng)

    assert len(positions) == 30
    assert all(p.neighbors == [] for p in positions)
    assert {p.size for p in positions} == {8}
