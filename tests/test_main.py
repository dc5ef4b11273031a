import yaml

from poisson2d.main import main, parse_args


def test_parse_args_defaults():
    args = parse_args([])
    assert args.command == "solve"
    assert args.config is None
    assert args.debug is False


def test_solve_command(capsys):
    assert main(["--test-case", "CAS5", "--n", "9", "--method", "red_black"]) == 0
    out = capsys.readouterr().out
    assert "Converged: True" in out
    assert "Residual" in out
    assert "L2 error" in out


def test_study_command_with_config(tmp_path, capsys):
    path = tmp_path / "run.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "test_case": "CAS1",
                "solver": {"method": "sor", "omega": "optimal"},
                "study": {"mesh_sizes": [5, 9, 17]},
                "logging": {"log_dir": str(tmp_path / "logs")},
            }
        ),
        encoding="utf-8",
    )
    assert main(["--config", str(path), "--command", "study"]) == 0
    out = capsys.readouterr().out
    assert "Observed order (L2)" in out
    assert "ERROR ANALYSIS REPORT" in out


def test_compare_command(capsys):
    assert main(["--command", "compare", "--test-case", "CAS3", "--n", "7"]) == 0
    out = capsys.readouterr().out
    assert "METHOD COMPARISON" in out


def test_invalid_configuration_fails(tmp_path):
    assert main(["--test-case", "CAS42"]) == 1
    assert main(["--n", "2"]) == 1
    assert main(["--config", str(tmp_path / "missing.yaml")]) == 1
