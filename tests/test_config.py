import pytest
import yaml

from poisson2d.config import (
    BoundaryConfig,
    MeshConfig,
    RunConfig,
    SolverConfig,
    StudyConfig,
    load_config_safely,
)
from poisson2d.core import BoundaryConditions, Edge


def test_defaults():
    config = RunConfig()
    config.validate()

    assert config.test_case == "CAS1"
    assert config.mesh.n_total == 33
    assert config.solver.tolerance == 1e-6
    assert config.solver.max_iterations == 1000
    assert config.solver.progress_interval == 100
    assert config.study.mesh_sizes == [9, 17, 33]
    assert config["mesh"] is config.mesh
    assert config.get("missing", 5) == 5
    assert "solver" in config


def test_load_config_safely_merges_nested():
    merged = load_config_safely(
        {"solver": {"method": "sor"}, "extra": 1},
        {"solver": {"method": "gauss_seidel", "tolerance": 1e-6}, "test_case": "CAS1"},
    )
    assert merged == {
        "solver": {"method": "sor", "tolerance": 1e-6},
        "test_case": "CAS1",
        "extra": 1,
    }
    assert load_config_safely(None, {"a": 1}) == {"a": 1}


def test_yaml_roundtrip(tmp_path):
    config = RunConfig.from_dict(
        {
            "test_case": "cas5",
            "mesh": {"n_total": 17},
            "solver": {"method": "sor", "omega": "optimal"},
            "study": {"mesh_sizes": [5, 9]},
        }
    )
    path = tmp_path / "run.yaml"
    config.save_to_yaml(path)

    loaded = RunConfig.from_yaml(path)
    assert loaded.to_dict() == config.to_dict()
    assert loaded.solver.resolve_omega(15) == pytest.approx(SolverConfig().update(
        {"omega": "optimal"}
    ).resolve_omega(15))
    assert loaded.get_test_case().name == "CAS5"

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    assert raw["mesh"]["n_total"] == 17


def test_partial_yaml_uses_defaults(tmp_path):
    path = tmp_path / "partial.yaml"
    path.write_text("solver:\n  method: red_black\n", encoding="utf-8")

    config = RunConfig.from_yaml(path)
    assert config.solver.method == "red_black"
    assert config.solver.tolerance == 1e-6
    assert config.mesh.n_total == 33


def test_empty_yaml(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert RunConfig.from_yaml(path).to_dict() == RunConfig().to_dict()


@pytest.mark.parametrize(
    "config_dict",
    [
        {"test_case": "CAS9"},
        {"mesh": {"n_total": 2}},
        {"solver": {"tolerance": 0}},
        {"solver": {"method": "jacobi"}},
        {"solver": {"omega": "fast"}},
        {"solver": {"unknown_key": 1}},
        {"study": {"mesh_sizes": [9]}},
        {"boundary": {"preset": "nope"}},
        {"logging": {"level": "verbose"}},
    ],
)
def test_invalid_values(config_dict):
    with pytest.raises(ValueError):
        RunConfig.from_dict(config_dict)


def test_boundary_config_build():
    assert BoundaryConfig().build() == BoundaryConditions.homogeneous()

    recommended = BoundaryConfig(preset="recommended")
    from poisson2d.catalog import get_test_case

    assert recommended.build(get_test_case("CAS6")) == BoundaryConditions.preset("harmonic")

    custom = BoundaryConfig.from_dict(
        {"edges": {"top": {"type": "constant", "value": 2.0}}}
    )
    bc = custom.build()
    assert bc.evaluate(Edge.TOP, 0.3) == 2.0
    assert bc.evaluate(Edge.BOTTOM, 0.3) == 0.0

    with pytest.raises(ValueError):
        BoundaryConfig.from_dict({"edges": {"middle": {"type": "constant"}}})
    with pytest.raises(ValueError):
        BoundaryConfig.from_dict({"edges": {"top": {"type": "expression", "expression": "t +"}}})


def test_sub_configs():
    assert MeshConfig.from_dict({"n_total": 9}).n_total == 9
    with pytest.raises(ValueError):
        MeshConfig.from_dict({"n_total": "9"})

    study = StudyConfig.from_dict({"tolerance": 1e-8})
    assert study.tolerance == 1e-8
    assert study.max_iterations == 50000

    with pytest.raises(KeyError):
        MeshConfig()["missing"]


def test_solver_config_yaml(tmp_path):
    config = SolverConfig(method="red_black", num_workers=3)
    path = tmp_path / "solver.yaml"
    config.save_to_yaml(path)
    assert SolverConfig.from_yaml(path) == config
