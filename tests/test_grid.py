import numpy as np

from falling_blocks_rl.game import GameGrid, Piece, TetrominoType


I = Piece.spawn(TetrominoType.I)
O = Piece.spawn(TetrominoType.O)


def test_collides_with_side_walls():
    grid = GameGrid()
    assert grid.collides(I, -1, 0)
    assert grid.collides(I, 7, 0)
    assert not grid.collides(I, 6, 0)
    assert not grid.collides(I, 0, 0)


def test_collides_with_floor():
    grid = GameGrid()
    assert not grid.collides(I, 0, 19)
    assert grid.collides(I, 0, 20)
    assert grid.collides(O, 0, 19)


def test_collides_with_locked_cells():
    grid = GameGrid()
    grid.grid[10, 4] = 3
    assert grid.collides(O, 3, 9)
    assert grid.collides(O, 4, 10)
    assert not grid.collides(O, 5, 9)


def test_cells_above_field_only_checked_horizontally():
    grid = GameGrid()
    grid.grid[0, :] = 1
    vertical = I.rotated_right()
    # rows -4..-1 are above the filled top row
    assert not grid.collides(vertical, 2, -4)
    assert grid.collides(vertical, 2, -3)
    assert grid.collides(vertical, -1, -4)
    assert grid.collides(vertical, 10, -4)


def test_lock_writes_piece_color():
    grid = GameGrid()
    grid.lock(O, 4, 18)
    assert grid.grid[18:20, 4:6].tolist() == [[2, 2], [2, 2]]
    assert int(np.count_nonzero(grid.grid)) == 4


def test_lock_drops_cells_above_the_field():
    grid = GameGrid()
    grid.lock(I.rotated_right(), 0, -2)
    assert grid.grid[:, 0].tolist()[:2] == [1, 1]
    assert grid.grid[-1, 0] == 0
    assert int(np.count_nonzero(grid.grid)) == 2


def test_clear_single_row_shifts_rows_above_down():
    grid = GameGrid()
    grid.grid[19, :] = 5
    grid.grid[18, 2] = 6
    grid.grid[17, 7] = 7
    assert grid.clear_completed_rows() == 1
    assert grid.grid[19, 2] == 6
    assert grid.grid[18, 7] == 7
    assert not grid.grid[:18].any()
    assert grid.grid.shape == (20, 10)


def test_clear_non_adjacent_rows_preserves_order():
    grid = GameGrid()
    grid.grid[19, :] = 1
    grid.grid[18, 0] = 2
    grid.grid[17, :] = 1
    grid.grid[16, 9] = 3
    assert grid.clear_completed_rows() == 2
    assert grid.grid[19].tolist() == [2] + [0] * 9
    assert grid.grid[18].tolist() == [0] * 9 + [3]
    assert not grid.grid[:18].any()


def test_clear_returns_zero_without_full_rows():
    grid = GameGrid()
    grid.grid[19, :9] = 1
    before = grid.clone_state()
    assert grid.clear_completed_rows() == 0
    assert np.array_equal(grid.grid, before)


def test_lock_then_clear_restores_empty_row():
    grid = GameGrid()
    grid.grid[19, :] = 1
    grid.grid[19, 3:7] = 0
    grid.grid[18, 0] = 4
    grid.lock(I, 3, 19)
    assert grid.is_row_full(19)
    assert grid.clear_completed_rows() == 1
    assert grid.grid[19].tolist() == [4] + [0] * 9
    assert not grid.grid[:19].any()


def test_board_statistics():
    grid = GameGrid()
    assert grid.get_max_height() == 0
    grid.grid[15, 1] = 1
    grid.grid[19, 1] = 1
    assert grid.get_max_height() == 5
    assert grid.count_holes() == 3
