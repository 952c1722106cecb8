"""Simple command line demo for the escape room logic."""

from pathlib import Path
from typing import List

from .game import PuzzleSession, Snapshot, Tile, LevelLoader

DARK_SYMBOL = "~"


def format_board(snapshot: Snapshot) -> str:
    """Render a snapshot as text, hiding unlit cells behind ``~``."""

    lines: List[str] = []
    rendered = snapshot.render()
    for row in range(snapshot.rows):
        chars = []
        for col in range(snapshot.cols):
            cell = snapshot.cell(row, col)
            if (row, col) == snapshot.player or cell.tile is Tile.WALL or cell.lit:
                chars.append(rendered[row][col])
            else:
                chars.append(DARK_SYMBOL)
        lines.append("".join(chars))
    return "\n".join(lines)


def main() -> None:
    package_root = Path(__file__).resolve().parent
    level_loader = LevelLoader(package_root / "levels")

    level = level_loader.load("lamp_corridor")
    session = PuzzleSession(level)

    print("=== Escape Lights Demo ===")
    print(f"Level: {level.name} ({level.metadata['dimensions']})")
    print(format_board(session.snapshot()))

    # Light the lamp, throw the switch, then walk east to the exit.
    script = [(2, 2), (2, 1), (1, 2), (1, 3), (1, 4), (1, 5), (1, 6), (1, 7)]
    for row, col in script:
        result = session.handle_action(row, col)
        print(f"click ({row}, {col}) -> {result.kind.value}: {result.status}")

    snapshot = session.snapshot()
    print(format_board(snapshot))
    print(f"Moves: {snapshot.move_count}  Won: {snapshot.won}")


if __name__ == "__main__":
    main()
