"""Fleet status tracking and placement map validation/construction."""

from __future__ import annotations

import random
from collections.abc import Mapping

from salvo.game.core.board import Board, empty_board
from salvo.game.core.models import (
    CELL_COUNT,
    DEFAULT_FLEET,
    Orientation,
    PlacementMap,
    ShipType,
)
from salvo.game.core.placement import PlacementAccepted, apply_placement, compute_placement


def is_sunk(positions: tuple[int, ...], board: Board) -> bool:
    """A ship is sunk once every one of its cells is hit."""
    return board.all_hit(positions)


def sunk_set(placements: Mapping[ShipType, tuple[int, ...]], board: Board) -> dict[ShipType, bool]:
    """Derive the sunk flag of every placed ship."""
    return {ship: is_sunk(positions, board) for ship, positions in placements.items()}


def newly_sunk(
    placements: Mapping[ShipType, tuple[int, ...]],
    board: Board,
    previously_sunk: Mapping[ShipType, bool],
) -> tuple[ShipType, ...]:
    """Return ships sunk on `board` that were not already marked sunk, in catalog order."""
    current = sunk_set(placements, board)
    return tuple(
        ship
        for ship in DEFAULT_FLEET
        if current.get(ship, False) and not previously_sunk.get(ship, False)
    )


def all_ships_placed(placements: Mapping[ShipType, tuple[int, ...]]) -> bool:
    """Return whether every catalog ship has positions."""
    return all(placements.get(ship) for ship in DEFAULT_FLEET)


def fleet_exhausted(placements: Mapping[ShipType, tuple[int, ...]], board: Board) -> bool:
    """Return whether the whole catalog is placed and sunk."""
    if not all_ships_placed(placements):
        return False
    return all(is_sunk(placements[ship], board) for ship in DEFAULT_FLEET)


def validate_placement_map(placements: Mapping[ShipType, tuple[int, ...]]) -> tuple[bool, str]:
    """Validate a (possibly partial) placement map against classic rules."""
    board = empty_board()
    for ship, positions in placements.items():
        if ship not in DEFAULT_FLEET:
            return False, f"Unknown ship: {ship}."
        if len(positions) != ship.size:
            return False, f"Ship {ship.value} must occupy {ship.size} cells."
        if any(not 0 <= position < CELL_COUNT for position in positions):
            return False, f"Ship {ship.value} is out of bounds."
        step = positions[1] - positions[0]
        orientation = Orientation.VERTICAL if step == 10 else Orientation.HORIZONTAL
        result = compute_placement(board, positions[0], ship.size, orientation)
        if not isinstance(result, PlacementAccepted):
            return False, f"Invalid placement for {ship.value}: {result.message}."
        if result.positions != tuple(positions):
            return False, f"Ship {ship.value} is not contiguous."
        board = apply_placement(board, ship, result.positions)
    return True, ""


def random_placement_map(
    rng: random.Random,
    board: Board | None = None,
    existing: Mapping[ShipType, tuple[int, ...]] | None = None,
) -> tuple[PlacementMap, Board]:
    """Complete a placement map at random and return it with the resulting board.

    Ships already in `existing` keep their positions on `board`.
    """
    board = board if board is not None else empty_board()
    placements: PlacementMap = dict(existing or {})
    for ship in DEFAULT_FLEET:
        if ship in placements:
            continue
        for _ in range(10_000):
            orientation = rng.choice([Orientation.HORIZONTAL, Orientation.VERTICAL])
            start = rng.randrange(CELL_COUNT)
            result = compute_placement(board, start, ship.size, orientation)
            if isinstance(result, PlacementAccepted):
                board = apply_placement(board, ship, result.positions)
                placements[ship] = result.positions
                break
        else:
            raise RuntimeError("Failed to generate random fleet placement.")
    return placements, board
