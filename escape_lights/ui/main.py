"""Launcher for the escape room: directory lookup, CLI and pygame window."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TextIO

from ..demo import format_board
from ..game import DEFAULT_LEVEL, Level, LevelLoader, MalformedLevelError, PuzzleSession
from . import layout
from .toolkit import EscapeGameUI, ensure_pygame

logger = logging.getLogger(__name__)

LEVEL_ENV_VAR = "ESCAPE_LIGHTS_LEVEL_ROOT"

INSTRUCTIONS = (
    "HOW TO PLAY\n"
    "- You can only move onto LIT tiles.\n"
    "- Click a neighboring tile to move.\n"
    "- Click a lamp (L) next to you to turn it ON/OFF.\n"
    "- Click a switch (S) next to you to toggle doors.\n"
    "- Reach the exit (E) to clear the room.\n"
    "\n"
    "Tile meanings:\n"
    "  # = wall (blocks movement + light)\n"
    "  L = lamp (off)      * = lamp (on)\n"
    "  S = switch          D = locked door    / = open door\n"
    "  E = exit\n"
)

TEXT_HELP = "Commands: '<row> <col>' to click a cell, 'r' to restart, 'h' for help, 'q' to quit."


@dataclass(frozen=True)
class UIDirectories:
    """Bundle with resolved directories required by the launcher."""

    level_root: Path


def _default_level_root() -> Path:
    return Path(__file__).resolve().parents[1] / "levels"


def _read_directory(env_var: str, fallback: Path) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value).expanduser()
    return fallback


def resolve_directories(check_exists: bool = True) -> UIDirectories:
    """Resolve the level directory using the environment.

    Parameters
    ----------
    check_exists:
        When *True*, raise :class:`FileNotFoundError` if the resolved directory
        does not exist.
    """

    level_root = _read_directory(LEVEL_ENV_VAR, _default_level_root())
    if check_exists and not level_root.is_dir():
        raise FileNotFoundError(
            f"Level directory not found: {level_root} (set {LEVEL_ENV_VAR} to override)"
        )
    return UIDirectories(level_root=level_root)


def load_level(directories: UIDirectories, name: Optional[str]) -> Level:
    if not name:
        return DEFAULT_LEVEL
    return LevelLoader(directories.level_root).load(name)


def run_text_session(
    session: PuzzleSession,
    commands: Iterable[str],
    out: TextIO,
) -> PuzzleSession:
    """Drive a session from text commands, printing the board after each one."""

    out.write(format_board(session.snapshot()) + "\n")
    out.write(session.status + "\n")
    for raw in commands:
        command = raw.strip().lower()
        if not command:
            continue
        if command in ("q", "quit", "exit"):
            break
        if command in ("h", "help", "?"):
            out.write(INSTRUCTIONS + TEXT_HELP + "\n")
            continue
        if command in ("r", "restart"):
            snapshot = session.reset_game()
            out.write(format_board(snapshot) + "\n" + snapshot.status + "\n")
            continue
        parts = command.replace(",", " ").split()
        try:
            row, col = (int(part) for part in parts)
        except ValueError:
            out.write(f"Unrecognised command: {raw.strip()!r}. {TEXT_HELP}\n")
            continue
        result = session.handle_action(row, col)
        if result.kind.changed_state:
            out.write(format_board(result.snapshot) + "\n")
        out.write(f"{result.status}  (moves: {result.snapshot.move_count})\n")
    return session


class EscapeGameApp:
    """Window wrapper: status bar on top, board below."""

    def __init__(self, session: PuzzleSession, cell_size: int = layout.TILE_SIZE):
        pygame = ensure_pygame()
        self.session = session
        self.geometry = layout.compute_geometry(session.cols, session.rows, cell_size)
        self.screen = pygame.display.set_mode(self.geometry.window)
        pygame.display.set_caption("Escape the Room Within Lights")
        self.ui = EscapeGameUI(session, cell_size=cell_size)
        self.status_font = pygame.font.Font(pygame.font.get_default_font(), 16)
        self.clock = pygame.time.Clock()

    def handle_event(self, event) -> bool:
        pygame = ensure_pygame()
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            self.ui.press_key(event.key)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            origin_x, origin_y = self.geometry.origin
            self.ui.click((event.pos[0] - origin_x, event.pos[1] - origin_y))
        return True

    def draw(self) -> None:
        pygame = ensure_pygame()
        self.screen.fill(layout.BACKGROUND_COLOR)
        snapshot = self.ui.snapshot
        color = layout.WON_TEXT_COLOR if snapshot.won else layout.TEXT_COLOR
        text = f"{snapshot.status}   Moves: {snapshot.move_count}"
        label = self.status_font.render(text, True, color)
        self.screen.blit(label, (layout.STATUS_BAR_PADDING, layout.STATUS_BAR_PADDING))
        self.screen.blit(self.ui.render(), self.geometry.origin)
        pygame.display.flip()

    def run(self) -> None:
        pygame = ensure_pygame()
        running = True
        while running:
            for event in pygame.event.get():
                if not self.handle_event(event):
                    running = False
                    break
            self.draw()
            self.clock.tick(30)
        pygame.quit()


def run(level: Level = DEFAULT_LEVEL) -> None:
    """Entry point helper that instantiates and runs the window."""

    app = EscapeGameApp(PuzzleSession(level))
    app.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Escape the Room Within Lights")
    parser.add_argument("--level", help="Name of a level file (without .json) to play.")
    parser.add_argument(
        "--list-levels",
        action="store_true",
        help="List the levels found in the level directory and exit.",
    )
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print the resolved level directory and exit.",
    )
    parser.add_argument(
        "--instructions",
        action="store_true",
        help="Print how to play and exit.",
    )
    parser.add_argument(
        "--text",
        action="store_true",
        help="Play in the terminal, reading commands from standard input.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    if args.instructions:
        print(INSTRUCTIONS)
        return 0

    try:
        directories = resolve_directories()
    except FileNotFoundError as exc:
        print(exc, file=sys.stderr)
        return 2

    if args.info:
        print(
            "Escape Lights bootstrap\n"
            f"  levels: {directories.level_root}\n"
            f"Set {LEVEL_ENV_VAR} to point to a custom level directory if needed."
        )
        return 0

    if args.list_levels:
        names: List[str] = LevelLoader(directories.level_root).available()
        print("Available levels:")
        for name in names:
            print(f"  {name}")
        return 0

    try:
        level = load_level(directories, args.level)
    except (FileNotFoundError, MalformedLevelError) as exc:
        logger.error("Could not load level %r: %s", args.level, exc)
        print(f"Could not load level {args.level!r}: {exc}", file=sys.stderr)
        return 1

    if args.text:
        run_text_session(PuzzleSession(level), sys.stdin, sys.stdout)
        return 0

    run(level)
    return 0


def cli() -> None:  # pragma: no cover - console script shim
    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    cli()
