"""
Tape tests: lazy growth in both directions and wrapping cells.
"""

import pytest

from bfi.tape import Tape, TapeLimitExceeded


def test_initial_state():
    tape = Tape()
    assert tape.to_list() == [0]
    assert tape.cursor == 0
    assert len(tape) == 1


def test_move_right_materializes_cells():
    tape = Tape()
    tape.move_right(3)
    assert tape.to_list() == [0, 0, 0, 0]
    assert tape.cursor == 3
    tape.move_left(2)
    assert len(tape) == 4
    assert tape.cursor == 1


def test_move_left_from_origin_grows_leftward():
    tape = Tape()
    tape.move_left()
    tape.increase()
    assert tape.to_list() == [1, 0]
    assert tape.cursor == 0


def test_move_left_several_cells_lands_on_new_first_cell():
    tape = Tape()
    tape.increase(7)
    tape.move_left(3)
    assert tape.to_list() == [0, 0, 0, 7]
    assert tape.cursor == 0
    tape.move_right(3)
    assert tape.get() == 7


def test_wrapping_arithmetic():
    tape = Tape()
    tape.decrease()
    assert tape.get() == 255
    tape.increase(2)
    assert tape.get() == 1
    tape.increase(1000)
    assert tape.get() == (1 + 1000) % 256


def test_set_wraps():
    tape = Tape()
    tape.move_left()
    tape.set(300)
    assert tape.get() == 44
    tape.set(-1)
    assert tape.get() == 255


def test_from_bytes_and_reset():
    tape = Tape.from_bytes(b"\x01\x02\x03", cursor=2)
    assert tape.get() == 3
    tape.reset()
    assert tape.to_list() == [0]
    assert tape.cursor == 0

    with pytest.raises(ValueError):
        Tape.from_bytes(b"\x01", cursor=1)


def test_max_cells_blocks_growth_and_keeps_position():
    tape = Tape(max_cells=3)
    tape.move_right(2)
    with pytest.raises(TapeLimitExceeded):
        tape.move_right()
    assert tape.cursor == 2
    assert len(tape) == 3
    with pytest.raises(TapeLimitExceeded):
        tape.move_left(3)
    assert tape.cursor == 2


def test_call_limit_applies_without_changing_max_cells():
    tape = Tape()
    with pytest.raises(TapeLimitExceeded):
        tape.move_right(2, limit=2)
    assert tape.cursor == 0
    tape.move_right(1, limit=2)
    assert len(tape) == 2
    assert tape.max_cells is None
    with pytest.raises(TapeLimitExceeded):
        tape.move_left(2, limit=2)
