"""Ship placement validation against a single board."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from salvo.game.core.board import Board, cell_at, with_cells
from salvo.game.core.models import BOARD_SIZE, Empty, Orientation, ShipOccupied, ShipType


class RejectionReason(StrEnum):
    """Why a placement does not fit."""

    OUT_OF_BOUNDS_HORIZONTAL = "OUT_OF_BOUNDS_HORIZONTAL"
    OUT_OF_BOUNDS_VERTICAL = "OUT_OF_BOUNDS_VERTICAL"
    OVERLAP = "OVERLAP"


@dataclass(frozen=True, slots=True)
class PlacementAccepted:
    """Cells the ship would occupy, bow first."""

    positions: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class PlacementRejected:
    """Placement refused; `index` is set for overlaps."""

    reason: RejectionReason
    index: int | None = None

    @property
    def message(self) -> str:
        if self.reason is RejectionReason.OUT_OF_BOUNDS_HORIZONTAL:
            return "does not fit horizontally from this position"
        if self.reason is RejectionReason.OUT_OF_BOUNDS_VERTICAL:
            return "does not fit vertically from this position"
        return f"overlap at {self.index}"


PlacementResult = PlacementAccepted | PlacementRejected


def compute_placement(
    board: Board, start: int, length: int, orientation: Orientation
) -> PlacementResult:
    """Compute ship cells from a bow index, checking bounds before overlap."""
    row, col = divmod(start, BOARD_SIZE)
    if orientation is Orientation.HORIZONTAL:
        if col + length > BOARD_SIZE:
            return PlacementRejected(RejectionReason.OUT_OF_BOUNDS_HORIZONTAL)
        step = 1
    else:
        if row + length > BOARD_SIZE:
            return PlacementRejected(RejectionReason.OUT_OF_BOUNDS_VERTICAL)
        step = BOARD_SIZE

    positions = tuple(start + step * offset for offset in range(length))
    for position in positions:
        if not isinstance(cell_at(board, position), Empty):
            return PlacementRejected(RejectionReason.OVERLAP, index=position)
    return PlacementAccepted(positions)


def apply_placement(board: Board, ship: ShipType, positions: Sequence[int]) -> Board:
    """Write a ship onto a copy of the board."""
    return with_cells(board, positions, ShipOccupied(ship))
