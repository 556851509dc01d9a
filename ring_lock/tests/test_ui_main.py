from __future__ import annotations

from pathlib import Path

import pytest

from ring_lock.demo import main as demo_main
from ring_lock.demo import parse_moves
from ring_lock.game import Command
from ring_lock.ui.main import (
    PUZZLE_ENV_VAR,
    UIDirectories,
    bootstrap_directories,
    main,
    resolve_directories,
)


def test_resolve_directories_returns_package_defaults():
    directories = resolve_directories()

    assert isinstance(directories, UIDirectories)
    assert directories.puzzle_root.exists()
    assert (directories.puzzle_root / "invinco_lock.json").exists()


def test_resolve_directories_honours_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    puzzle_dir = tmp_path / "puzzles"
    puzzle_dir.mkdir()

    monkeypatch.setenv(PUZZLE_ENV_VAR, str(puzzle_dir))

    assert resolve_directories().puzzle_root == puzzle_dir


def test_resolve_directories_errors_on_missing_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(PUZZLE_ENV_VAR, str(tmp_path / "missing_puzzles"))

    with pytest.raises(FileNotFoundError):
        resolve_directories()
    assert resolve_directories(check_exists=False).puzzle_root == tmp_path / "missing_puzzles"


def test_bootstrap_prints_message(capsys: pytest.CaptureFixture[str]):
    directories = bootstrap_directories()
    output = capsys.readouterr().out

    assert "Ring Lock UI bootstrap" in output
    assert str(directories.puzzle_root) in output


def test_cli_lists_puzzles(capsys: pytest.CaptureFixture[str]):
    exit_code = main(["--list-puzzles"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "Available puzzles" in output
    assert "invinco_lock" in output
    assert "tutorial" in output


def test_parse_moves():
    assert parse_moves("io lr") == [
        Command.JUMP_IN,
        Command.JUMP_OUT,
        Command.ROTATE_LEFT,
        Command.ROTATE_RIGHT,
    ]
    with pytest.raises(ValueError):
        parse_moves("X")


def test_demo_reports_receptors(capsys: pytest.CaptureFixture[str]):
    exit_code = demo_main([])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "Invinco Lock" in output
    assert "  2: lit" in output
    assert "  4: dark" in output
    assert "Solved: False" in output


def test_demo_plays_tutorial(capsys: pytest.CaptureFixture[str]):
    demo_main(["--puzzle", "tutorial", "--moves", "IR"])
    output = capsys.readouterr().out

    assert "Rotations: [1, 0]" in output
    assert "Solved: True" in output
