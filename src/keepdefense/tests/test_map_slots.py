import random
from types import SimpleNamespace

import pytest

from keepdefense.core.model.map import (
    FREE_SLOT_RADIUS,
    KEEP_CELL,
    PATH_ROW,
    SlotState,
    Tile,
    generate_map,
    generate_slots,
)


class _FixedRng:
    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


def test_path_row_and_keep_block():
    m = generate_map()
    keep_col, keep_row = KEEP_CELL
    for c in range(m.cols):
        if abs(c - keep_col) <= 1:
            assert m.tile(c, PATH_ROW) == Tile.KEEP
        else:
            assert m.tile(c, PATH_ROW) == Tile.PATH
    for r in range(keep_row - 1, keep_row + 2):
        for c in range(keep_col - 1, keep_col + 2):
            assert m.tile(c, r) == Tile.KEEP
    assert m.tile(0, 0) == Tile.GRASS


def test_geometry_helpers():
    m = generate_map()
    assert m.world_size() == (960, 704)
    assert m.keep_center() == (496.0, 368.0)
    assert m.path_y() == 368.0
    assert m.cell_at(33.0, 65.0) == (1, 2)
    assert m.cell_at(-1.0, 10.0) is None
    assert m.cell_at(960.0, 10.0) is None


def test_generate_map_rejects_bad_layout():
    with pytest.raises(ValueError):
        generate_map(path_row=22)
    with pytest.raises(ValueError):
        generate_map(keep_cell=(0, 11))


def test_base_slot_rows_skip_keep_columns():
    m = generate_map()
    slots = generate_slots(m, random.Random(7))
    cells = {(s.col, s.row) for s in slots}
    for c in range(1, m.cols - 1):
        if abs(c - KEEP_CELL[0]) < 2:
            assert not any(col == c for col, _ in cells)
        else:
            assert (c, PATH_ROW - 1) in cells
            assert (c, PATH_ROW + 1) in cells
    assert all(s.slot_id == idx for idx, s in enumerate(slots))


def test_only_slots_near_keep_start_empty():
    m = generate_map()
    slots = generate_slots(m, random.Random(3))
    for s in slots:
        expected = SlotState.EMPTY if abs(s.col - KEEP_CELL[0]) < FREE_SLOT_RADIUS else SlotState.LOCKED
        assert s.state == expected
        assert s.tower_id is None


@pytest.mark.parametrize(("value", "expected"), [(0.9, 100), (0.7, 50), (0.0, 50)])
def test_extra_rows_follow_draws(value: float, expected: int):
    slots = generate_slots(generate_map(), _FixedRng(value))
    assert len(slots) == expected


def test_draws_happen_even_off_grid():
    m = generate_map(path_row=1, keep_cell=(15, 1))
    rng = _FixedRng(0.9)
    slots = generate_slots(m, rng)
    assert rng.calls == 2 * 25
    assert all(m.in_bounds(s.col, s.row) for s in slots)


def test_same_seed_same_layout():
    m = generate_map()
    a = [(s.col, s.row, s.state) for s in generate_slots(m, random.Random(11))]
    b = [(s.col, s.row, s.state) for s in generate_slots(m, random.Random(11))]
    assert a == b


def test_slots_accept_duck_typed_map():
    fake = SimpleNamespace(cols=6, rows=5, path_row=2, keep_cell=(3, 2), in_bounds=lambda c, r: 0 <= r < 5)
    slots = generate_slots(fake, _FixedRng(0.0))
    assert {(s.col, s.row) for s in slots} == {(1, 1), (1, 3)}
