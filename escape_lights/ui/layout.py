"""Layout constants for the escape room UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from ..game import Tile

# Tile metrics
TILE_SIZE: int = 38
BOARD_OUTER_PADDING: int = 12

# Status bar metrics
STATUS_BAR_HEIGHT: int = 44
STATUS_BAR_PADDING: int = 10

# Colors expressed as RGB tuples
BACKGROUND_COLOR: Tuple[int, int, int] = (24, 24, 30)
GRID_LINE_COLOR: Tuple[int, int, int] = (64, 64, 64)
TEXT_COLOR: Tuple[int, int, int] = (232, 236, 244)
WON_TEXT_COLOR: Tuple[int, int, int] = (160, 230, 160)

WALL_COLOR: Tuple[int, int, int] = (75, 75, 90)
DARK_COLOR: Tuple[int, int, int] = (15, 15, 20)
PLAYER_COLOR: Tuple[int, int, int] = (255, 190, 80)

LIT_TILE_COLORS: Dict[Tile, Tuple[int, int, int]] = {
    Tile.FLOOR: (220, 220, 235),
    Tile.EXIT: (160, 230, 160),
    Tile.LAMP_OFF: (245, 215, 120),
    Tile.LAMP_ON: (255, 245, 170),
    Tile.SWITCH: (140, 200, 255),
    Tile.DOOR_LOCKED: (240, 150, 150),
    Tile.DOOR_OPEN: (210, 210, 210),
}


def tile_color(tile: Tile, lit: bool, *, is_player: bool = False) -> Tuple[int, int, int]:
    """Pick the fill color for a single cell.

    Walls are visible even in the dark, everything else is near black until lit.
    """

    if is_player:
        return PLAYER_COLOR
    if tile is Tile.WALL:
        return WALL_COLOR
    if not lit:
        return DARK_COLOR
    return LIT_TILE_COLORS[tile]


@dataclass(frozen=True)
class BoardGeometry:
    """Pixel rectangles for the major UI regions."""

    board: Tuple[int, int, int, int]
    status: Tuple[int, int, int, int]
    window: Tuple[int, int]
    cell_size: int

    @property
    def origin(self) -> Tuple[int, int]:
        return self.board[0], self.board[1]


def compute_geometry(cols: int, rows: int, cell_size: int = TILE_SIZE) -> BoardGeometry:
    """Compute the status bar and board rectangles for a room."""

    board_x = BOARD_OUTER_PADDING
    board_y = STATUS_BAR_HEIGHT + BOARD_OUTER_PADDING
    board_width = cols * cell_size
    board_height = rows * cell_size

    window_width = board_x + board_width + BOARD_OUTER_PADDING
    window_height = board_y + board_height + BOARD_OUTER_PADDING
    status_rect = (0, 0, window_width, STATUS_BAR_HEIGHT)

    return BoardGeometry(
        board=(board_x, board_y, board_width, board_height),
        status=status_rect,
        window=(window_width, window_height),
        cell_size=cell_size,
    )
