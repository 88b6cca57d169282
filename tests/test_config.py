import logging
from pathlib import Path

import pytest
import yaml

from skill_layout.layout import EngineConfig, LayoutEngine
from skill_layout.models import ShapeParams, SkillNode, build_layered_nodes, build_nodes, load_skill_pool
from skill_layout.relax import RelaxConfig
from skill_layout.utils.config import ConfigLoader, load_config, merge_config, parse_override
from skill_layout.utils.logging import setup_logging
from skill_layout.utils.paths import PathManager

CONFIG_DIR = Path(__file__).parent.parent / "config"


@pytest.fixture
def engine_config():
    return EngineConfig.from_dict(load_config(CONFIG_DIR, "layout"))


def test_config_loader(tmp_path):
    (tmp_path / "a.yaml").write_text(yaml.safe_dump({"canvas": {"width": 10}}))
    (tmp_path / "empty.yaml").write_text("")

    loader = ConfigLoader(tmp_path)

    assert loader.load("a") == {"canvas": {"width": 10}}
    assert loader.load_all() == {"a": {"canvas": {"width": 10}}, "empty": {}}
    with pytest.raises(FileNotFoundError):
        loader.load("missing")
    with pytest.raises(FileNotFoundError):
        ConfigLoader(tmp_path / "nope")


def test_parse_override_keeps_yaml_types():
    assert parse_override("relaxation.iterations=50") == {"relaxation": {"iterations": 50}}
    assert parse_override("layout.topology=null") == {"layout": {"topology": None}}
    assert parse_override("export.preview=false") == {"export": {"preview": False}}
    assert parse_override("layout.shape=fist") == {"layout": {"shape": "fist"}}


@pytest.mark.parametrize("expression", ["no-equals", "=5", " =x"])
def test_parse_override_rejects_malformed(expression):
    with pytest.raises(ValueError):
        parse_override(expression)


def test_merge_config_is_deep_and_pure():
    base = {"canvas": {"width": 800, "height": 600}, "seed": {"base": 42}}

    merged = merge_config(base, {"canvas": {"width": 1024}, "seed": None})

    assert merged == {"canvas": {"width": 1024, "height": 600}, "seed": None}
    assert base["canvas"]["width"] == 800


def test_load_config_applies_overrides_in_order():
    config = load_config(CONFIG_DIR, "layout", ["canvas.width=1024", "layout.shape=fist", "canvas.width=640"])

    assert config["canvas"] == {"width": 640, "height": 600}
    assert EngineConfig.from_dict(config).shape == "fist"


def test_bundled_config(engine_config):
    assert engine_config.shape == "brain"
    assert engine_config.node_count == 60
    assert engine_config.base_seed == 42

    params = engine_config.shape_params(seed=5)
    assert (params.width, params.height) == (800, 600)
    assert params.relax is None
    assert params.topology is None
    assert params.seed == 5
    assert params.clustering == 0.0
    assert RelaxConfig.from_dict(params.get("relaxation")).repulsion_damping == 0.002


def test_shape_params_accept_camel_case():
    params = ShapeParams.from_dict(
        {"width": 300, "height": 200, "nodeSpace": 2.5, "maxInsideConnections": 3,
         "clusterSeed": "abc", "max_tries": 50}
    )

    assert params.node_space == 2.5
    assert params.max_inside_connections == 3
    assert params.cluster_seed == "abc"
    assert params.get("max_tries") == 50
    assert params.get("unknown", "fallback") == "fallback"


def test_shape_params_nested_sections():
    params = ShapeParams.from_dict({
        "canvas": {"width": 640, "height": 480},
        "relaxation": {"enabled": True, "iterations": 12, "epsilon": 0.5},
        "clustering": {"strength": 0.3, "count": 4, "seed": "s"},
    })

    assert params.relax is True
    assert params.iterations == 12
    assert (params.clustering, params.cluster_count, params.cluster_seed) == (0.3, 4, "s")
    assert params.get("relaxation")["epsilon"] == 0.5


def test_shape_params_require_canvas():
    with pytest.raises(KeyError):
        ShapeParams.from_dict({"height": 100})


def test_engine_seeds(engine_config):
    engine = LayoutEngine(engine_config, pool=[SkillNode("s", 4)])

    assert engine.get_seed(3) == 45
    engine_config.auto_increment = False
    assert engine.get_seed(3) == 42
    engine_config.base_seed = None
    assert engine.get_seed(3) is None


def test_engine_generate_layered_shape(engine_config):
    engine = LayoutEngine(engine_config)

    result = engine.generate(shape="infinity-layers", node_count=4, sample_id=1)

    assert result.seed == 43
    assert len(result.nodes) == 12
    assert len(result.positions) == 12
    assert result.to_dict()["shape"] == "infinity-layers"


def test_engine_generate_sample_writes_outputs(engine_config, tmp_path):
    engine = LayoutEngine(engine_config)
    paths = PathManager(tmp_path, engine_config.paths)

    output = engine.generate_sample(2, paths, shape="chikara")

    assert output == tmp_path / "layouts" / "chikara_000002.json"
    assert output.exists()
    assert paths.get_preview_path(2, "chikara").exists()


def test_engine_generate_sample_failure_returns_none(engine_config, tmp_path, monkeypatch, caplog):
    engine = LayoutEngine(engine_config)
    paths = PathManager(tmp_path, engine_config.paths)

    def boom(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr("skill_layout.exporter.LayoutExporter.to_json", boom)

    with caplog.at_level(logging.ERROR):
        assert engine.generate_sample(0, paths, shape="brain3") is None
    assert "disk full" in caplog.text


def test_skill_pool_and_node_builders(rng):
    pool = load_skill_pool()
    assert len(pool) > 10

    nodes = build_nodes(len(pool) + 2, pool)
    assert len({n.id for n in nodes}) == len(nodes)
    assert nodes[len(pool)].score == pool[0].score
    assert build_nodes(0, pool) == []

    layered = build_layered_nodes(nodes[:3], 3, rng)
    assert [n.id for n in layered[:4]] == [f"{nodes[0].id}-layer0", f"{nodes[1].id}-layer0",
                                           f"{nodes[2].id}-layer0", f"{nodes[0].id}-layer1"]
    assert all(1 <= n.score <= 10 for n in layered)


def test_paths(tmp_path):
    paths = PathManager(tmp_path, {"layouts": "out"})

    assert paths.get_layout_path(7, "fist") == tmp_path / "out" / "fist_000007.json"
    assert paths.get_batch_path("run") == tmp_path / "batches" / "run.hdf5"
    assert paths.get_log_path("x") == tmp_path / "logs" / "x.log"
    assert (tmp_path / "previews").is_dir()


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"

    root = setup_logging(level="debug", log_file=log_file, format_style="simple")
    logging.getLogger("skill_layout.test").info("hello")
    for handler in root.handlers:
        handler.flush()

    assert "INFO: hello" in log_file.read_text()
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
