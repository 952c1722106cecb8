"""Minimal pygame based UI helpers for headless testing.

This module intentionally keeps the rendering deterministic so it can be
exercised in automated tests using the SDL ``dummy`` video driver. It only
ever reads :class:`~escape_lights.game.Snapshot` objects and talks back to the
session through ``handle_action`` and ``reset_game``.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, Optional, Tuple

from ..game import ActionResult, PuzzleSession, Snapshot, Tile
from . import layout

logger = logging.getLogger(__name__)

# Pygame is optional for the engine but required for the UI helpers.  The
# import is performed lazily in ``ensure_pygame`` so test environments can
# control the SDL configuration (e.g. select the ``dummy`` video driver).
_PYGAME = None

# (row, col) offsets for the arrow keys, resolved once pygame is loaded.
_ARROW_OFFSETS = {
    "K_UP": (-1, 0),
    "K_DOWN": (1, 0),
    "K_LEFT": (0, -1),
    "K_RIGHT": (0, 1),
}

_PLAIN_TILES = (Tile.WALL, Tile.FLOOR)


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
        _PYGAME.font.init()
    return _PYGAME


class EscapeGameUI:
    """Very small pygame driven front end for a :class:`PuzzleSession`."""

    def __init__(
        self,
        session: PuzzleSession,
        *,
        cell_size: int = layout.TILE_SIZE,
        surface=None,
        use_display: bool = False,
    ) -> None:
        pygame = ensure_pygame()
        self.session = session
        self.cell_size = cell_size
        width = session.cols * cell_size
        height = session.rows * cell_size
        self.surface = surface or pygame.Surface((width, height))
        self.screen = None
        if use_display:
            self.screen = pygame.display.set_mode((width, height))
        self.snapshot: Snapshot = session.snapshot()
        self.last_result: Optional[ActionResult] = None
        # Fonts are initialised with the default pygame font to keep rendering
        # deterministic across environments.
        self.font = pygame.font.Font(pygame.font.get_default_font(), 14)

    # ------------------------------------------------------------------
    # Input handling
    def process_events(self, events: Iterable[object]) -> None:
        pygame = ensure_pygame()
        for event in events:
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self.click(event.pos)
            elif event.type == pygame.KEYDOWN:
                self.press_key(event.key)

    def cell_from_pixel(self, pos: Tuple[int, int]) -> Optional[Tuple[int, int]]:
        x, y = pos
        if x < 0 or y < 0:
            return None
        row = y // self.cell_size
        col = x // self.cell_size
        if row >= self.session.rows or col >= self.session.cols:
            return None
        return int(row), int(col)

    def click(self, pos: Tuple[int, int]) -> None:
        cell = self.cell_from_pixel(pos)
        if cell is None:
            return
        self._apply(self.session.handle_action(*cell))

    def press_key(self, key: int) -> None:
        pygame = ensure_pygame()
        if key == pygame.K_r:
            self.snapshot = self.session.reset_game()
            self.last_result = None
            return
        for name, (d_row, d_col) in _ARROW_OFFSETS.items():
            if key == getattr(pygame, name):
                row, col = self.session.player
                self._apply(self.session.handle_action(row + d_row, col + d_col))
                return

    def _apply(self, result: ActionResult) -> None:
        logger.debug("UI action -> %s", result.kind.value)
        self.last_result = result
        self.snapshot = result.snapshot

    # ------------------------------------------------------------------
    # Rendering helpers
    def render(self):
        pygame = ensure_pygame()
        self.surface.fill(layout.BACKGROUND_COLOR)
        self._draw_cells()
        if self.screen:
            self.screen.blit(self.surface, (0, 0))
            pygame.display.flip()
        return self.surface

    def _draw_cells(self) -> None:
        pygame = ensure_pygame()
        snapshot = self.snapshot
        for row in range(snapshot.rows):
            for col in range(snapshot.cols):
                cell = snapshot.cell(row, col)
                color = layout.tile_color(
                    cell.tile, cell.lit, is_player=(row, col) == snapshot.player
                )
                rect = pygame.Rect(
                    col * self.cell_size,
                    row * self.cell_size,
                    self.cell_size,
                    self.cell_size,
                )
                self.surface.fill(color, rect)
                pygame.draw.rect(self.surface, layout.GRID_LINE_COLOR, rect, 1)
                if cell.lit and cell.tile not in _PLAIN_TILES:
                    self._draw_text((row, col), cell.tile.symbol)

    def _draw_text(self, position: Tuple[int, int], text: str) -> None:
        label = self.font.render(text, True, (0, 0, 0))
        rect = label.get_rect()
        rect.center = (
            position[1] * self.cell_size + self.cell_size // 2,
            position[0] * self.cell_size + self.cell_size // 2,
        )
        self.surface.blit(label, rect)


__all__ = ["EscapeGameUI", "ensure_pygame"]
