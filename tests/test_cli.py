"""Tests for the command-line interface."""

import sys

import pytest

from realmgen import validation
from realmgen.cli import main, print_timings
from realmgen.validation import ValidationResult


class TestPrintTimings:
    """Tests for the timing table."""

    def test_sorted_slowest_first(self, capsys) -> None:
        """Phases are listed slowest first with proportional bars."""
        print_timings({"regions": 0.1, "heights": 0.3}, {"regions": 1, "heights": 3})
        lines = capsys.readouterr().out.splitlines()

        assert len(lines) == 2
        assert lines[0].startswith("heights")
        assert lines[1].startswith("regions")
        assert lines[0].count("█") == 18
        assert lines[1].count("█") == 6

    def test_average_per_step(self, capsys) -> None:
        """Average time per step is reported in milliseconds."""
        print_timings({"heights": 0.004}, {"heights": 4})
        out = capsys.readouterr().out
        assert "1.000ms/step" in out
        assert out.count("█") == 25

    def test_nothing_timed(self, capsys) -> None:
        """No timings prints nothing."""
        print_timings({}, {})
        assert capsys.readouterr().out == ""


class TestMain:
    """Tests for the CLI entry point."""

    def test_generates_map(self, monkeypatch, capsys) -> None:
        """A small run prints a summary."""
        monkeypatch.setattr(sys, "argv", ["realmgen", "--size", "16", "--seed", "3"])
        main()
        out = capsys.readouterr().out

        assert "Generating 16x16 map with seed 3" in out
        assert "Generation complete" in out
        assert "Territories:" in out

    def test_bisection_from_config_file(self, monkeypatch, capsys, tmp_path) -> None:
        """Settings load from TOML and flags override them."""
        config_file = tmp_path / "map.toml"
        config_file.write_text(
            'seed = 5\nsize = 64\ntiler = "bisection"\n\n'
            "[bisection]\ndesired_tile_size = 10\n"
        )
        monkeypatch.setattr(
            sys, "argv", ["realmgen", "-c", str(config_file), "--size", "12"]
        )
        main()
        out = capsys.readouterr().out

        assert "Generating 12x12 map with seed 5" in out
        assert "Generation complete" in out

    def test_failed_validation_exits_nonzero(self, monkeypatch, capsys) -> None:
        """A map that fails validation makes the CLI exit with status 1."""

        def failing_validation(session) -> ValidationResult:
            result = ValidationResult()
            result.add_error("partition mismatch")
            return result

        monkeypatch.setattr(validation, "validate_session", failing_validation)
        monkeypatch.setattr(sys, "argv", ["realmgen", "--size", "8"])

        with pytest.raises(SystemExit) as excinfo:
            main()
        assert excinfo.value.code == 1
