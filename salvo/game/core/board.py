"""Board state representation and copy-on-write cell helpers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from salvo.game.core.models import (
    BOARD_SIZE,
    CELL_COUNT,
    DEFAULT_FLEET,
    EMPTY,
    HIT,
    MISS,
    Cell,
    Empty,
    Hit,
    Miss,
    ShipOccupied,
    ShipType,
)

SHOT_NONE = 0
SHOT_MISS = 1
SHOT_HIT = 2

SHIP_CODES: dict[ShipType, int] = {ship: code for code, ship in enumerate(DEFAULT_FLEET, start=1)}
CODE_SHIPS: dict[int, ShipType] = {code: ship for ship, code in SHIP_CODES.items()}


@dataclass(frozen=True, slots=True, eq=False)
class Board:
    """Numpy-backed, read-only board of 100 row-major cells.

    `ships` holds a catalog code per cell (0 for water) and `shots` holds the
    shot mark. A hit keeps its ship code so ownership survives the hit.
    """

    ships: np.ndarray
    shots: np.ndarray

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(
            np.array_equal(self.ships, other.ships) and np.array_equal(self.shots, other.shots)
        )

    def cells(self) -> tuple[Cell, ...]:
        """Decode every cell into its variant."""
        return tuple(cell_at(self, index) for index in range(CELL_COUNT))

    def grid(self) -> np.ndarray:
        """Return the shot marks as a read-only 10x10 view."""
        return self.shots.reshape(BOARD_SIZE, BOARD_SIZE)

    def all_hit(self, positions: Iterable[int]) -> bool:
        """Return whether every listed cell is marked as hit."""
        indices = list(positions)
        if not indices:
            return False
        return bool(np.all(self.shots[indices] == SHOT_HIT))

    def ship_at(self, index: int) -> ShipType | None:
        """Return the ship under a cell, hit or not."""
        return CODE_SHIPS.get(int(self.ships[index]))


def empty_board() -> Board:
    """Create a board with every cell empty."""
    return _frozen(
        np.zeros(CELL_COUNT, dtype=np.int16),
        np.zeros(CELL_COUNT, dtype=np.int8),
    )


def cell_at(board: Board, index: int) -> Cell:
    """Return the cell variant stored at `index`."""
    shot = int(board.shots[index])
    if shot == SHOT_HIT:
        return HIT
    if shot == SHOT_MISS:
        return MISS
    code = int(board.ships[index])
    if code == 0:
        return EMPTY
    return ShipOccupied(CODE_SHIPS[code])


def with_cell(board: Board, index: int, cell: Cell) -> Board:
    """Return a new board with one cell replaced. The input is never mutated."""
    return with_cells(board, (index,), cell)


def with_cells(board: Board, indices: Iterable[int], cell: Cell) -> Board:
    """Return a new board with every listed cell set to `cell`."""
    ships = board.ships.copy()
    shots = board.shots.copy()
    for index in indices:
        if isinstance(cell, Empty):
            ships[index] = 0
            shots[index] = SHOT_NONE
        elif isinstance(cell, ShipOccupied):
            ships[index] = SHIP_CODES[cell.ship_id]
            shots[index] = SHOT_NONE
        elif isinstance(cell, Hit):
            shots[index] = SHOT_HIT
        elif isinstance(cell, Miss):
            shots[index] = SHOT_MISS
        else:
            raise TypeError(f"Unsupported cell value: {cell!r}")
    return _frozen(ships, shots)


def _frozen(ships: np.ndarray, shots: np.ndarray) -> Board:
    ships.flags.writeable = False
    shots.flags.writeable = False
    return Board(ships=ships, shots=shots)
