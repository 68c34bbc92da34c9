import numpy as np
import pytest

from salvo.game.core.board import Board, cell_at, empty_board, with_cell, with_cells
from salvo.game.core.models import EMPTY, HIT, MISS, ShipOccupied, ShipType


def test_empty_board_has_100_empty_cells() -> None:
    board = empty_board()
    cells = board.cells()
    assert len(cells) == 100
    assert all(cell == EMPTY for cell in cells)
    assert board.grid().shape == (10, 10)


def test_with_cell_returns_new_board_and_leaves_input_untouched() -> None:
    board = empty_board()
    updated = with_cell(board, 42, ShipOccupied(ShipType.CRUISER))

    assert cell_at(board, 42) == EMPTY
    assert cell_at(updated, 42) == ShipOccupied(ShipType.CRUISER)
    assert updated != board
    assert with_cell(board, 42, EMPTY) == board


def test_board_arrays_are_read_only() -> None:
    board = empty_board()
    with pytest.raises(ValueError):
        board.shots[0] = 1


def test_hit_keeps_ship_ownership() -> None:
    board = with_cells(empty_board(), (0, 1), ShipOccupied(ShipType.DESTROYER))
    board = with_cell(board, 0, HIT)
    assert cell_at(board, 0) == HIT
    assert board.ship_at(0) is ShipType.DESTROYER
    assert board.ship_at(5) is None
    assert not board.all_hit((0, 1))
    assert with_cell(board, 1, HIT).all_hit((0, 1))
    assert not board.all_hit(())


def test_miss_marks_water() -> None:
    board = with_cell(empty_board(), 7, MISS)
    assert cell_at(board, 7) == MISS
    assert int(np.count_nonzero(board.shots)) == 1


def test_with_cells_rejects_unknown_cell_values() -> None:
    with pytest.raises(TypeError):
        with_cells(empty_board(), (0,), "Hit")  # type: ignore[arg-type]


def test_board_equality_ignores_array_identity() -> None:
    assert empty_board() == empty_board()
    assert empty_board() != object()
    assert isinstance(empty_board(), Board)
