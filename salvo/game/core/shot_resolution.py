"""Shot outcome evaluation (hit/miss/already attacked)."""

from __future__ import annotations

from dataclasses import dataclass

from salvo.game.core.board import Board, cell_at, with_cell
from salvo.game.core.models import HIT, MISS, Cell, Hit, Miss, ShipOccupied, ShotOutcome


@dataclass(frozen=True, slots=True)
class AlreadyAttacked:
    """The target cell was already hit or missed."""

    index: int


@dataclass(frozen=True, slots=True)
class ShotResolved:
    """A shot that changed the target board."""

    index: int
    outcome: ShotOutcome
    board: Board


ShotResolution = AlreadyAttacked | ShotResolved


def is_terminal(cell: Cell) -> bool:
    """Return whether a cell can no longer be attacked."""
    return isinstance(cell, (Hit, Miss))


def verdict_is_hit(verdict: str) -> bool:
    """Classify an authority result string such as `Hit!` or `Miss!`."""
    return "hit" in verdict.lower()


def resolve_attack(
    board: Board, index: int, authority_verdict: str | None = None
) -> ShotResolution:
    """Resolve a shot against a board.

    An authority verdict, when present, decides hit or miss; otherwise the
    local occupancy of the cell does.
    """
    current = cell_at(board, index)
    if is_terminal(current):
        return AlreadyAttacked(index)

    if authority_verdict is not None:
        hit = verdict_is_hit(authority_verdict)
    else:
        hit = isinstance(current, ShipOccupied)

    if hit:
        return ShotResolved(index, ShotOutcome.HIT, with_cell(board, index, HIT))
    return ShotResolved(index, ShotOutcome.MISS, with_cell(board, index, MISS))
