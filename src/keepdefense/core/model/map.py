from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
import random


TILE_SIZE = 32
COLS = 30
ROWS = 22
PATH_ROW = 11
KEEP_CELL: tuple[int, int] = (15, 11)

SLOT_EXCLUSION_RADIUS = 2
FREE_SLOT_RADIUS = 4
EXTRA_SLOT_THRESHOLD = 0.7


class Tile(Enum):
    GRASS = 0
    PATH = 1
    KEEP = 2
    WALL = 3


class SlotState(str, Enum):
    LOCKED = "locked"
    EMPTY = "empty"
    OCCUPIED = "occupied"


@dataclass(slots=True)
class Slot:
    slot_id: int
    col: int
    row: int
    state: SlotState = SlotState.LOCKED
    tower_id: int | None = None


@dataclass(slots=True)
class MapData:
    cols: int
    rows: int
    tile_size: int
    path_row: int
    keep_cell: tuple[int, int]
    tiles: list[list[Tile]] = field(default_factory=list)

    def tile(self, col: int, row: int) -> Tile:
        return self.tiles[row][col]

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.cols and 0 <= row < self.rows

    def world_size(self) -> tuple[int, int]:
        return self.cols * self.tile_size, self.rows * self.tile_size

    def cell_center(self, col: int, row: int) -> tuple[float, float]:
        half = self.tile_size / 2
        return col * self.tile_size + half, row * self.tile_size + half

    def keep_center(self) -> tuple[float, float]:
        return self.cell_center(*self.keep_cell)

    def path_y(self) -> float:
        return self.path_row * self.tile_size + self.tile_size / 2

    def cell_at(self, x: float, y: float) -> tuple[int, int] | None:
        col = math.floor(x / self.tile_size)
        row = math.floor(y / self.tile_size)
        if not self.in_bounds(col, row):
            return None
        return col, row


def generate_map(
    *,
    cols: int = COLS,
    rows: int = ROWS,
    tile_size: int = TILE_SIZE,
    path_row: int = PATH_ROW,
    keep_cell: tuple[int, int] = KEEP_CELL,
) -> MapData:
    """
    Grass everywhere, one path row across the whole width, then a 3x3 keep
    block centred on ``keep_cell`` (it overwrites the path cells it covers).
    """
    if not (0 <= path_row < rows):
        raise ValueError(f"path_row={path_row} outside grid of {rows} rows")
    keep_col, keep_row = keep_cell
    if not (1 <= keep_col < cols - 1 and 1 <= keep_row < rows - 1):
        raise ValueError(f"keep_cell={keep_cell!r} must leave room for a 3x3 block")

    tiles = [[Tile.GRASS for _ in range(cols)] for _ in range(rows)]
    for c in range(cols):
        tiles[path_row][c] = Tile.PATH
    for r in range(keep_row - 1, keep_row + 2):
        for c in range(keep_col - 1, keep_col + 2):
            tiles[r][c] = Tile.KEEP

    return MapData(
        cols=cols,
        rows=rows,
        tile_size=tile_size,
        path_row=path_row,
        keep_cell=(keep_col, keep_row),
        tiles=tiles,
    )


def generate_slots(map_data: MapData, rng: random.Random) -> list[Slot]:
    keep_col = map_data.keep_cell[0]
    above = map_data.path_row - 1
    below = map_data.path_row + 1

    cells: list[tuple[int, int]] = []
    for c in range(1, map_data.cols - 1):
        if abs(c - keep_col) < SLOT_EXCLUSION_RADIUS:
            continue
        cells.append((c, above))
        cells.append((c, below))
        # one draw per extra row, even when the row falls off the grid
        if rng.random() > EXTRA_SLOT_THRESHOLD and map_data.in_bounds(c, above - 1):
            cells.append((c, above - 1))
        if rng.random() > EXTRA_SLOT_THRESHOLD and map_data.in_bounds(c, below + 1):
            cells.append((c, below + 1))

    slots: list[Slot] = []
    for idx, (c, r) in enumerate(cells):
        state = SlotState.EMPTY if abs(c - keep_col) < FREE_SLOT_RADIUS else SlotState.LOCKED
        slots.append(Slot(slot_id=idx, col=c, row=r, state=state))
    return slots
