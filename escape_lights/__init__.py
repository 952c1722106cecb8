"""Escape Lights package."""

from .game import (
    DEFAULT_LEVEL,
    ActionOutcome,
    ActionResult,
    Level,
    LevelLoader,
    MalformedLevelError,
    PuzzleSession,
    Snapshot,
    Tile,
)
from .ui import EscapeGameUI

__all__ = [
    "DEFAULT_LEVEL",
    "ActionOutcome",
    "ActionResult",
    "EscapeGameUI",
    "Level",
    "LevelLoader",
    "MalformedLevelError",
    "PuzzleSession",
    "Snapshot",
    "Tile",
]
