"""Core puzzle logic for the lamp lit escape room."""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
LitMask = List[List[bool]]

PLAYER_SYMBOL = "@"

NEIGHBOUR_OFFSETS: Tuple[Position, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))

STATUS_WELCOME = "Click a lit neighbor tile to move. Click nearby L/S to interact. Reach E to win."
STATUS_RESTARTED = "Restarted."
STATUS_LAMP_ON = "Lamp turned ON."
STATUS_LAMP_OFF = "Lamp turned OFF."
STATUS_DOORS = "Switch toggled doors."
STATUS_BLOCKED = "That way is blocked."
STATUS_DARK = "That tile is dark. Turn on a lamp to light a path."
STATUS_MOVED = "Moved."
STATUS_WON = "Room complete! You reached the exit."


class MalformedLevelError(ValueError):
    """Raised when level text cannot be turned into a playable room."""


class Tile(Enum):
    """Closed set of tiles, valued by their level symbol."""

    WALL = "#"
    FLOOR = "."
    LAMP_OFF = "L"
    LAMP_ON = "*"
    SWITCH = "S"
    DOOR_LOCKED = "D"
    DOOR_OPEN = "/"
    EXIT = "E"

    @property
    def symbol(self) -> str:
        return self.value

    @staticmethod
    def from_symbol(symbol: str) -> "Tile":
        try:
            return Tile(symbol)
        except ValueError as exc:
            raise MalformedLevelError(f"Unknown tile symbol: {symbol!r}") from exc

    def toggled_lamp(self) -> "Tile":
        mapping = {Tile.LAMP_OFF: Tile.LAMP_ON, Tile.LAMP_ON: Tile.LAMP_OFF}
        return mapping[self]

    def toggled_door(self) -> "Tile":
        mapping = {Tile.DOOR_LOCKED: Tile.DOOR_OPEN, Tile.DOOR_OPEN: Tile.DOOR_LOCKED}
        return mapping[self]


# A locked door is as opaque and as solid as a wall.
_SOLID_TILES = frozenset({Tile.WALL, Tile.DOOR_LOCKED})
INTERACTIVE_TILES = frozenset({Tile.LAMP_OFF, Tile.LAMP_ON, Tile.SWITCH})


def blocks_movement(tile: Tile) -> bool:
    return tile in _SOLID_TILES


def blocks_light(tile: Tile) -> bool:
    return tile in _SOLID_TILES


@dataclass
class Grid:
    """Fixed size matrix of tiles addressed by ``(row, col)``."""

    cells: List[List[Tile]]

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    def inside(self, position: Position) -> bool:
        row, col = position
        return 0 <= row < self.rows and 0 <= col < self.cols

    def tile_at(self, position: Position) -> Tile:
        row, col = position
        return self.cells[row][col]

    def set_tile(self, position: Position, tile: Tile) -> None:
        row, col = position
        self.cells[row][col] = tile

    def positions(self) -> Iterable[Position]:
        for row in range(self.rows):
            for col in range(self.cols):
                yield row, col

    def find(self, tile: Tile) -> List[Position]:
        return [position for position in self.positions() if self.tile_at(position) is tile]

    def symbols(self) -> List[str]:
        return ["".join(tile.symbol for tile in row) for row in self.cells]


def parse_rows(rows: Sequence[str]) -> Tuple[Grid, Position]:
    """Build a grid from level rows and extract the player start.

    Raises :class:`MalformedLevelError` when the rows are empty or ragged,
    contain an unknown symbol, or do not hold exactly one player marker.
    """

    if not rows:
        raise MalformedLevelError("Level has no rows")
    width = len(rows[0])
    if width == 0:
        raise MalformedLevelError("Level rows are empty")

    cells: List[List[Tile]] = []
    player: Optional[Position] = None
    for row_index, line in enumerate(rows):
        if len(line) != width:
            raise MalformedLevelError(
                f"Row {row_index} has length {len(line)}, expected {width}"
            )
        row: List[Tile] = []
        for col_index, symbol in enumerate(line):
            if symbol == PLAYER_SYMBOL:
                if player is not None:
                    raise MalformedLevelError(
                        f"Second player marker at ({row_index}, {col_index}), "
                        f"first at {player}"
                    )
                player = (row_index, col_index)
                row.append(Tile.FLOOR)
                continue
            try:
                row.append(Tile.from_symbol(symbol))
            except MalformedLevelError as exc:
                raise MalformedLevelError(
                    f"{exc} at ({row_index}, {col_index})"
                ) from exc
        cells.append(row)

    if player is None:
        raise MalformedLevelError("Level has no player marker '@'")
    return Grid(cells), player


def render_rows(grid: Grid, player: Optional[Position] = None) -> List[str]:
    """Serialise a grid back into level symbols, overlaying the player."""

    lines = grid.symbols()
    if player is not None:
        row, col = player
        line = lines[row]
        lines[row] = line[:col] + PLAYER_SYMBOL + line[col + 1 :]
    return lines


def recompute_lighting(grid: Grid) -> LitMask:
    """Flood light outwards from every lit lamp.

    Returns a fresh mask where a cell is ``True`` iff a four-connected path of
    non-opaque cells joins it to some ``LAMP_ON`` cell. The lamp cells are
    always lit themselves.
    """

    lit: LitMask = [[False] * grid.cols for _ in range(grid.rows)]
    queue: deque = deque()
    for position in grid.find(Tile.LAMP_ON):
        row, col = position
        lit[row][col] = True
        queue.append(position)

    while queue:
        row, col = queue.popleft()
        for d_row, d_col in NEIGHBOUR_OFFSETS:
            neighbour = (row + d_row, col + d_col)
            if not grid.inside(neighbour):
                continue
            n_row, n_col = neighbour
            if lit[n_row][n_col]:
                continue
            if blocks_light(grid.tile_at(neighbour)):
                continue
            lit[n_row][n_col] = True
            queue.append(neighbour)
    return lit


def count_lit(lit: Sequence[Sequence[bool]]) -> int:
    return sum(sum(1 for value in row if value) for row in lit)


def toggle_all_doors(grid: Grid) -> int:
    """Flip every door in the room and return how many changed."""

    flipped = 0
    for position in grid.positions():
        tile = grid.tile_at(position)
        if tile in (Tile.DOOR_LOCKED, Tile.DOOR_OPEN):
            grid.set_tile(position, tile.toggled_door())
            flipped += 1
    logger.debug("Toggled %d doors", flipped)
    return flipped


def is_neighbour_or_self(target: Position, origin: Position) -> bool:
    return abs(target[0] - origin[0]) <= 1 and abs(target[1] - origin[1]) <= 1


def is_orthogonal_neighbour(target: Position, origin: Position) -> bool:
    return abs(target[0] - origin[0]) + abs(target[1] - origin[1]) == 1


class PlanKind(Enum):
    INTERACT = "interact"
    MOVE = "move"
    IGNORE = "ignore"
    OUT_OF_BOUNDS = "out_of_bounds"


@dataclass(frozen=True)
class ActionPlan:
    """How a targeted cell should be treated relative to the player."""

    kind: PlanKind
    target: Position
    tile: Optional[Tile] = None


def resolve_action(grid: Grid, player: Position, target: Position) -> ActionPlan:
    """Classify a click, checking interaction strictly before movement."""

    if not grid.inside(target):
        return ActionPlan(PlanKind.OUT_OF_BOUNDS, target)
    tile = grid.tile_at(target)
    if is_neighbour_or_self(target, player) and tile in INTERACTIVE_TILES:
        return ActionPlan(PlanKind.INTERACT, target, tile)
    if is_orthogonal_neighbour(target, player):
        return ActionPlan(PlanKind.MOVE, target, tile)
    return ActionPlan(PlanKind.IGNORE, target, tile)


class ActionOutcome(Enum):
    LAMP_ON = "lamp_on"
    LAMP_OFF = "lamp_off"
    DOORS_TOGGLED = "doors_toggled"
    MOVED = "moved"
    WON = "won"
    BLOCKED = "blocked"
    DARK = "dark"
    IGNORED = "ignored"
    OUT_OF_BOUNDS = "out_of_bounds"

    @property
    def changed_state(self) -> bool:
        return self in _STATE_CHANGING_OUTCOMES


_STATE_CHANGING_OUTCOMES = frozenset(
    {
        ActionOutcome.LAMP_ON,
        ActionOutcome.LAMP_OFF,
        ActionOutcome.DOORS_TOGGLED,
        ActionOutcome.MOVED,
        ActionOutcome.WON,
    }
)


@dataclass(frozen=True)
class CellView:
    tile: Tile
    lit: bool


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of the session state handed to renderers."""

    tiles: Tuple[Tuple[Tile, ...], ...]
    lit: Tuple[Tuple[bool, ...], ...]
    player: Position
    move_count: int
    won: bool
    status: str = ""

    @property
    def rows(self) -> int:
        return len(self.tiles)

    @property
    def cols(self) -> int:
        return len(self.tiles[0]) if self.tiles else 0

    def cell(self, row: int, col: int) -> CellView:
        return CellView(self.tiles[row][col], self.lit[row][col])

    def render(self) -> List[str]:
        return render_rows(Grid([list(row) for row in self.tiles]), self.player)

    def lit_count(self) -> int:
        return count_lit(self.lit)

    def as_payload(self) -> Dict[str, object]:
        return {
            "rows": self.render(),
            "lit": [[bool(value) for value in row] for row in self.lit],
            "player": list(self.player),
            "move_count": self.move_count,
            "won": self.won,
            "status": self.status,
        }


@dataclass(frozen=True)
class ActionResult:
    kind: ActionOutcome
    status: str
    snapshot: Snapshot


@dataclass(frozen=True)
class Level:
    """Named level definition in the row-of-symbols format."""

    name: str
    rows: Tuple[str, ...]
    description: str = ""

    @property
    def metadata(self) -> Dict[str, object]:
        height = len(self.rows)
        width = len(self.rows[0]) if self.rows else 0
        metadata: Dict[str, object] = {
            "name": self.name,
            "dimensions": f"{width}x{height}",
        }
        if self.description:
            metadata["description"] = self.description
        return metadata


DEFAULT_LEVEL = Level(
    name="room_within_lights",
    description="Escape the room within lights.",
    rows=(
        "@.*###########",
        "#.....D..L..##",
        "#.##..##..#.D#",
        "#...#.L....#.#",
        "#LSD.#...#.#.E",
        "#.......#.#..#",
        "#.##L..#L#D..#",
        "#D.#.#.....L.#",
        "##############",
    ),
)


class LevelLoader:
    """Load level files stored as JSON."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def available(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(path.stem for path in self.root.glob("*.json"))

    def load(self, name: str) -> Level:
        path = self.root / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise MalformedLevelError(f"Level {name!r} is not valid JSON: {exc}") from exc
        return self._parse_level(data, fallback_name=name)

    def _parse_level(self, data: object, fallback_name: str) -> Level:
        if not isinstance(data, dict):
            raise MalformedLevelError(
                f"Level {fallback_name!r} must be a JSON object, got {type(data).__name__}"
            )
        rows = data.get("rows")
        if not isinstance(rows, list) or not all(isinstance(row, str) for row in rows):
            raise MalformedLevelError(f"Level {fallback_name!r} needs a list of row strings")
        level = Level(
            name=str(data.get("name", fallback_name)),
            rows=tuple(rows),
            description=str(data.get("description", "")),
        )
        # Fail at load time rather than on first play.
        parse_rows(level.rows)
        return level


@dataclass
class _WorldState:
    grid: Grid
    lit: LitMask
    player: Position
    move_count: int = 0
    won: bool = False
    status: str = STATUS_WELCOME


class PuzzleSession:
    """Owns the room and applies player actions to it.

    All mutation goes through :meth:`handle_action`, :meth:`load_level` and
    :meth:`reset_game`; lighting is recomputed before any of them returns so a
    snapshot never shows a stale lit mask.
    """

    def __init__(self, level: Level = DEFAULT_LEVEL):
        self._level = level
        self._state = self._build_state(level)

    # ------------------------------------------------------------------
    # Loading
    @staticmethod
    def _build_state(level: Level) -> _WorldState:
        grid, player = parse_rows(level.rows)
        lit: LitMask = [[False] * grid.cols for _ in range(grid.rows)]
        state = _WorldState(grid=grid, lit=lit, player=player)
        state.lit = recompute_lighting(grid)
        logger.info(
            "Loaded level %s (%dx%d), player at %s",
            level.name,
            grid.cols,
            grid.rows,
            player,
        )
        return state

    def load_level(self, level: Level) -> Snapshot:
        """Replace the current room; the old one survives a parse failure."""

        state = self._build_state(level)
        self._level = level
        self._state = state
        return self.snapshot()

    def reset_game(self) -> Snapshot:
        self._state = self._build_state(self._level)
        self._state.status = STATUS_RESTARTED
        return self.snapshot()

    # ------------------------------------------------------------------
    # Read-only views
    @property
    def level(self) -> Level:
        return self._level

    @property
    def rows(self) -> int:
        return self._state.grid.rows

    @property
    def cols(self) -> int:
        return self._state.grid.cols

    @property
    def player(self) -> Position:
        return self._state.player

    @property
    def move_count(self) -> int:
        return self._state.move_count

    @property
    def won(self) -> bool:
        return self._state.won

    @property
    def status(self) -> str:
        return self._state.status

    def tile_at(self, position: Position) -> Tile:
        if not self._state.grid.inside(position):
            raise IndexError(f"Position {position} is outside the room")
        return self._state.grid.tile_at(position)

    def is_lit(self, position: Position) -> bool:
        """Outside the room counts as dark."""

        if not self._state.grid.inside(position):
            return False
        row, col = position
        return self._state.lit[row][col]

    def snapshot(self) -> Snapshot:
        state = self._state
        return Snapshot(
            tiles=tuple(tuple(row) for row in state.grid.cells),
            lit=tuple(tuple(row) for row in state.lit),
            player=state.player,
            move_count=state.move_count,
            won=state.won,
            status=state.status,
        )

    # ------------------------------------------------------------------
    # Actions
    def handle_action(self, row: int, col: int) -> ActionResult:
        """Apply a click on ``(row, col)`` and report what happened."""

        target = (int(row), int(col))
        plan = resolve_action(self._state.grid, self._state.player, target)
        if plan.kind is PlanKind.OUT_OF_BOUNDS:
            logger.debug("Ignoring out of bounds target %s", target)
            outcome = ActionOutcome.OUT_OF_BOUNDS
        elif plan.kind is PlanKind.INTERACT:
            outcome = self._interact(plan)
        elif plan.kind is PlanKind.MOVE:
            outcome = self._try_move(target)
        else:
            logger.debug("No-op click on %s (%s)", target, plan.tile)
            outcome = ActionOutcome.IGNORED
        return ActionResult(kind=outcome, status=self._state.status, snapshot=self.snapshot())

    def _interact(self, plan: ActionPlan) -> ActionOutcome:
        grid = self._state.grid
        if plan.tile is Tile.SWITCH:
            toggle_all_doors(grid)
            outcome, status = ActionOutcome.DOORS_TOGGLED, STATUS_DOORS
        else:
            toggled = plan.tile.toggled_lamp()
            grid.set_tile(plan.target, toggled)
            if toggled is Tile.LAMP_ON:
                outcome, status = ActionOutcome.LAMP_ON, STATUS_LAMP_ON
            else:
                outcome, status = ActionOutcome.LAMP_OFF, STATUS_LAMP_OFF
        self._relight()
        self._state.status = status
        return outcome

    def _relight(self) -> None:
        self._state.lit = recompute_lighting(self._state.grid)
        logger.debug("Relit room: %d lit cells", count_lit(self._state.lit))

    def _try_move(self, target: Position) -> ActionOutcome:
        """Step onto an orthogonal neighbour if it is passable and lit.

        Only :meth:`handle_action` calls this, after interaction has been
        ruled out for the target.
        """

        state = self._state
        if not is_orthogonal_neighbour(target, state.player) or not state.grid.inside(target):
            return ActionOutcome.IGNORED
        tile = state.grid.tile_at(target)
        if blocks_movement(tile):
            logger.debug("Blocked move to %s (%s)", target, tile.name)
            state.status = STATUS_BLOCKED
            return ActionOutcome.BLOCKED
        if not self.is_lit(target):
            logger.debug("Refused move to dark tile %s", target)
            state.status = STATUS_DARK
            return ActionOutcome.DARK

        state.player = target
        state.move_count += 1
        if tile is Tile.EXIT:
            if not state.won:
                logger.info("Exit reached at %s after %d moves", target, state.move_count)
            state.won = True
            state.status = STATUS_WON
            return ActionOutcome.WON
        state.status = STATUS_MOVED
        return ActionOutcome.MOVED


__all__ = [
    "ActionOutcome",
    "ActionPlan",
    "ActionResult",
    "CellView",
    "DEFAULT_LEVEL",
    "Grid",
    "Level",
    "LevelLoader",
    "LitMask",
    "MalformedLevelError",
    "PlanKind",
    "Position",
    "PuzzleSession",
    "Snapshot",
    "Tile",
    "blocks_light",
    "blocks_movement",
    "count_lit",
    "parse_rows",
    "recompute_lighting",
    "render_rows",
    "resolve_action",
    "toggle_all_doors",
]
