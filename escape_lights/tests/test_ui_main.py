from __future__ import annotations

import io
from pathlib import Path

import pytest

from escape_lights.game import Level, PuzzleSession
from escape_lights.ui.main import (
    INSTRUCTIONS,
    LEVEL_ENV_VAR,
    UIDirectories,
    main,
    resolve_directories,
    run_text_session,
)


def test_resolve_directories_returns_package_defaults(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)

    directories = resolve_directories()

    assert isinstance(directories, UIDirectories)
    assert directories.level_root.exists()
    assert (directories.level_root / "room_within_lights.json").exists()


def test_resolve_directories_honours_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    level_dir = tmp_path / "levels"
    level_dir.mkdir()
    monkeypatch.setenv(LEVEL_ENV_VAR, str(level_dir))

    directories = resolve_directories()

    assert directories.level_root == level_dir


def test_resolve_directories_errors_on_missing_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(LEVEL_ENV_VAR, str(tmp_path / "missing_levels"))

    with pytest.raises(FileNotFoundError):
        resolve_directories()

    assert resolve_directories(check_exists=False).level_root == tmp_path / "missing_levels"


def test_info_prints_bootstrap_message(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)

    exit_code = main(["--info"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "Escape Lights bootstrap" in output
    assert str(resolve_directories().level_root) in output


def test_cli_lists_levels(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)

    exit_code = main(["--list-levels"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "Available levels" in output
    assert "lamp_corridor" in output


def test_cli_prints_instructions(capsys: pytest.CaptureFixture[str]):
    assert main(["--instructions"]) == 0
    assert "HOW TO PLAY" in capsys.readouterr().out


def test_cli_reports_missing_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(LEVEL_ENV_VAR, str(tmp_path / "gone"))

    assert main(["--list-levels"]) == 2


def test_cli_reports_unknown_level(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)

    exit_code = main(["--level", "does_not_exist", "--text"])

    assert exit_code == 1
    assert "does_not_exist" in capsys.readouterr().err


@pytest.mark.parametrize("text", ["[1]", "{not json"])
def test_cli_reports_malformed_level_file(
    text: str, tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
):
    (tmp_path / "bad.json").write_text(text, encoding="utf-8")
    monkeypatch.setenv(LEVEL_ENV_VAR, str(tmp_path))
    monkeypatch.setattr("sys.stdin", io.StringIO("q\n"))

    exit_code = main(["--level", "bad", "--text"])

    assert exit_code == 1
    assert "Could not load level 'bad'" in capsys.readouterr().err


def test_cli_text_mode_plays_from_stdin(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)
    script = "2 2\n2,1\n1 2\n1 3\n1 4\n1 5\n1 6\n1 7\nq\n"
    monkeypatch.setattr("sys.stdin", io.StringIO(script))

    exit_code = main(["--level", "lamp_corridor", "--text"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "Lamp turned ON." in output
    assert "Switch toggled doors." in output
    assert "Room complete!" in output
    assert "(moves: 6)" in output


def test_text_session_handles_restart_help_and_garbage():
    session = PuzzleSession(Level(name="strip", rows=("*@.E",)))
    out = io.StringIO()

    run_text_session(session, ["1 2 3", "", "0 2", "h", "r", "0 0", "q", "0 2"], out)
    output = out.getvalue()

    assert "Unrecognised command" in output
    assert "Moved.  (moves: 1)" in output
    assert INSTRUCTIONS in output
    assert "Restarted." in output
    assert "Lamp turned OFF." in output
    # commands after 'q' are never applied
    assert session.move_count == 0
    assert session.player == (0, 1)


def test_text_board_hides_dark_cells():
    session = PuzzleSession(Level(name="dim", rows=("#@L.",)))
    out = io.StringIO()

    run_text_session(session, [], out)

    assert out.getvalue().splitlines()[0] == "#@~~"


def test_geometry_places_board_below_status_bar():
    from escape_lights.ui import layout

    geometry = layout.compute_geometry(14, 9)

    assert geometry.board == (12, 56, 14 * 38, 9 * 38)
    assert geometry.origin == (12, 56)
    assert geometry.window == (12 + 14 * 38 + 12, 56 + 9 * 38 + 12)
    assert geometry.status == (0, 0, geometry.window[0], layout.STATUS_BAR_HEIGHT)


def test_tile_colors_hide_everything_but_walls_in_the_dark():
    from escape_lights.game import Tile
    from escape_lights.ui import layout

    assert layout.tile_color(Tile.WALL, False) == layout.WALL_COLOR
    assert layout.tile_color(Tile.EXIT, False) == layout.DARK_COLOR
    assert layout.tile_color(Tile.EXIT, True) == layout.LIT_TILE_COLORS[Tile.EXIT]
    assert layout.tile_color(Tile.FLOOR, False, is_player=True) == layout.PLAYER_COLOR


def test_demo_plays_the_corridor_to_the_exit(capsys: pytest.CaptureFixture[str]):
    from escape_lights import demo

    demo.main()
    output = capsys.readouterr().out

    assert "=== Escape Lights Demo ===" in output
    assert "click (2, 1) -> doors_toggled: Switch toggled doors." in output
    assert "Moves: 6  Won: True" in output
