import numpy as np
import pytest

from falling_blocks_rl.game import COLOR_NAMES, Piece, TetrominoType


def test_catalog_has_seven_distinct_colors():
    assert len(TetrominoType) == 7
    assert len(set(COLOR_NAMES.values())) == 7
    assert COLOR_NAMES[TetrominoType.I] == "cyan"


def test_rotate_right_is_clockwise():
    t = Piece.spawn(TetrominoType.T)
    assert t.rotated_right().shape.tolist() == [[True, False], [True, True], [True, False]]


def test_rotate_left_is_counter_clockwise():
    t = Piece.spawn(TetrominoType.T)
    assert t.rotated_left().shape.tolist() == [[False, True], [True, True], [False, True]]


def test_rotation_swaps_dimensions_and_keeps_kind():
    i = Piece.spawn(TetrominoType.I)
    r = i.rotated_right()
    assert (r.height, r.width) == (4, 1)
    assert r.kind is TetrominoType.I
    assert r.color == i.color


@pytest.mark.parametrize("kind", list(TetrominoType))
def test_four_rotations_return_to_spawn_shape(kind):
    piece = Piece.spawn(kind)
    left = piece
    right = piece
    for _ in range(4):
        left = left.rotated_left()
        right = right.rotated_right()
    assert left == piece
    assert right == piece
    assert piece.rotated_left().rotated_right() == piece


def test_cells_at_offsets_occupied_cells():
    assert Piece.spawn(TetrominoType.I).cells_at(3, 0) == [(3, 0), (4, 0), (5, 0), (6, 0)]
    assert Piece.spawn(TetrominoType.S).cells_at(0, 5) == [(1, 5), (2, 5), (0, 6), (1, 6)]


def test_piece_shape_is_read_only():
    piece = Piece.spawn(TetrominoType.O)
    with pytest.raises(ValueError):
        piece.shape[0, 0] = False


def test_equal_pieces_hash_alike():
    a = Piece.spawn(TetrominoType.Z)
    b = Piece(TetrominoType.Z, np.array([[1, 1, 0], [0, 1, 1]]))
    assert a == b
    assert hash(a) == hash(b)
    assert a != a.rotated_right()
