"""
Tests for command line parsing and error recording.
"""

from pathlib import Path

import pytest

from openkep.cli import build_parser, main, make_config, weight_modes


class TestParser:
    """Tests for the argument parser."""

    def test_defaults(self):
        args = build_parser().parse_args(["cycle"])
        assert args.formulations == ["cycle"]
        assert args.n == [10]
        assert args.k == [3]
        assert args.density == [0.2]
        assert args.real_weights is None
        assert args.runs == 1

    def test_lists(self):
        args = build_parser().parse_args(
            ["cycle", "edge", "-n", "10", "20", "-k", "3", "4", "-d", "0.1", "0.3", "-t", "4"]
        )
        assert args.formulations == ["cycle", "edge"]
        assert args.n == [10, 20]
        assert args.k == [3, 4]
        assert args.density == [0.1, 0.3]
        assert args.runs == 4

    def test_no_formulation(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_unknown_formulation(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["tsp"])

    @pytest.mark.parametrize("argv,expected", [
        (["cycle"], [False]),
        (["cycle", "-w"], [True]),
        (["cycle", "-w", "true"], [True]),
        (["cycle", "-w", "false", "true"], [False, True]),
    ])
    def test_weight_modes(self, argv, expected):
        args = build_parser().parse_args(argv)
        assert weight_modes(args.real_weights) == expected


class TestMakeConfig:
    """Tests for command line overrides."""

    def test_overrides(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        args = build_parser().parse_args([
            "mtz", "-s", "gurobi", "--time-limit", "60", "-o", "res.dat",
            "--errors", "err.dat", "-v",
        ])
        settings = make_config(args)
        assert settings.default_solver == "gurobi"
        assert settings.time_limit == 60.0
        assert settings.results_path == Path("res.dat")
        assert settings.errors_path == Path("err.dat")
        assert settings.verbose

    def test_invalid_time_limit(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit):
            main(["cycle", "--time-limit", "-5"])


class TestMain:
    """Tests for main() that need no solver."""

    def test_failure_is_recorded(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        exit_code = main(["cycle", "-n", "5", "-s", "nosuch"])
        assert exit_code == 1
        errors = (tmp_path / "error.dat").read_text()
        assert "cycle n 5 k 3 d 0.2" in errors
        assert "Unknown solver" in errors
        assert not (tmp_path / "output.dat").exists()

    def test_invalid_runs(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit):
            main(["cycle", "-t", "0"])
