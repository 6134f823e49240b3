import random

import pytest

from keepdefense.core.model.map import SlotState, generate_slots
from keepdefense.core.model.state import GameState
from keepdefense.core.model.towers import TowerKind
from keepdefense.core.rules.placement import (
    CommandError,
    build_tower,
    check_build,
    check_upgrade,
    slot_at,
    tower_at,
    unlock_slot,
    upgrade_cost,
    upgrade_tower,
)


def _make_state(seed: int = 1, **kwargs) -> GameState:
    s = GameState(**kwargs)
    s.slots = generate_slots(s.map, random.Random(seed))
    return s


def _first_slot(state: GameState, wanted: SlotState) -> int:
    return next(slot.slot_id for slot in state.slots if slot.state == wanted)


def test_build_archer_on_empty_slot():
    s = _make_state(gold=300)
    slot_id = _first_slot(s, SlotState.EMPTY)
    assert build_tower(s, slot_id, TowerKind.ARCHER) is None
    assert s.gold == 250
    slot = s.slots[slot_id]
    assert slot.state == SlotState.OCCUPIED
    towers = list(s.towers)
    assert len(towers) == 1
    assert towers[0].level == 1
    assert towers[0].tower_id == slot.tower_id
    assert tower_at(s, slot.col, slot.row) is towers[0]


def test_build_accepts_kind_names():
    s = _make_state(gold=300)
    assert build_tower(s, _first_slot(s, SlotState.EMPTY), "Cannon") is None
    assert list(s.towers)[0].kind == TowerKind.CANNON


@pytest.mark.parametrize("wanted", [SlotState.LOCKED, SlotState.OCCUPIED])
def test_build_requires_empty_slot(wanted: SlotState):
    s = _make_state(gold=1000)
    if wanted == SlotState.OCCUPIED:
        build_tower(s, _first_slot(s, SlotState.EMPTY), TowerKind.ARCHER)
    gold = s.gold
    assert build_tower(s, _first_slot(s, wanted), TowerKind.ARCHER) == CommandError.INVALID_STATE
    assert s.gold == gold


def test_build_without_funds_changes_nothing():
    s = _make_state(gold=100)
    slot_id = _first_slot(s, SlotState.EMPTY)
    assert build_tower(s, slot_id, TowerKind.MAGE) == CommandError.INSUFFICIENT_FUNDS
    assert s.gold == 100
    assert s.slots[slot_id].state == SlotState.EMPTY
    assert len(s.towers) == 0


@pytest.mark.parametrize("slot_id", [-1, 10_000, True])
def test_unknown_slot_is_invalid(slot_id):
    s = _make_state()
    assert check_build(s, slot_id, TowerKind.ARCHER) == CommandError.INVALID_STATE
    assert unlock_slot(s, slot_id) == CommandError.INVALID_STATE


def test_unknown_kind_is_invalid():
    s = _make_state()
    assert build_tower(s, _first_slot(s, SlotState.EMPTY), "dragon") == CommandError.INVALID_STATE
    assert s.gold == 300


def test_unlock_then_unlock_again():
    s = _make_state(gold=300)
    slot_id = _first_slot(s, SlotState.LOCKED)
    assert unlock_slot(s, slot_id) is None
    assert s.slots[slot_id].state == SlotState.EMPTY
    assert s.gold == 250
    assert unlock_slot(s, slot_id) == CommandError.INVALID_STATE
    assert s.gold == 250


def test_unlock_without_funds():
    s = _make_state(gold=49)
    slot_id = _first_slot(s, SlotState.LOCKED)
    assert unlock_slot(s, slot_id) == CommandError.INSUFFICIENT_FUNDS
    assert s.slots[slot_id].state == SlotState.LOCKED


def test_upgrade_costs_scale_with_level():
    s = _make_state(gold=300)
    build_tower(s, _first_slot(s, SlotState.EMPTY), TowerKind.ARCHER)
    tower = list(s.towers)[0]
    assert upgrade_cost(tower) == 25
    assert upgrade_tower(s, tower.tower_id) is None
    assert s.gold == 225
    assert tower.level == 2
    assert tower.damage == pytest.approx(15.0)
    assert upgrade_cost(tower) == 50
    assert upgrade_tower(s, tower.tower_id) is None
    assert s.gold == 175
    assert tower.damage == pytest.approx(22.5)


def test_upgrade_unknown_tower_or_short_funds():
    s = _make_state(gold=50)
    assert upgrade_tower(s, 42) == CommandError.INVALID_STATE
    build_tower(s, _first_slot(s, SlotState.EMPTY), TowerKind.ARCHER)
    tower = list(s.towers)[0]
    assert s.gold == 0
    assert upgrade_tower(s, tower.tower_id) == CommandError.INSUFFICIENT_FUNDS
    assert tower.level == 1


@pytest.mark.parametrize("tower_id", [1.0, "1", True, [1], None])
def test_upgrade_rejects_non_int_tower_ids(tower_id):
    s = _make_state()
    build_tower(s, _first_slot(s, SlotState.EMPTY), TowerKind.ARCHER)
    assert check_upgrade(s, tower_id) == CommandError.INVALID_STATE
    assert upgrade_tower(s, tower_id) == CommandError.INVALID_STATE
    assert list(s.towers)[0].level == 1
    assert s.gold == 250


def test_commands_rejected_after_game_over():
    s = _make_state(gold=1000)
    build_tower(s, _first_slot(s, SlotState.EMPTY), TowerKind.ARCHER)
    tower = list(s.towers)[0]
    s.running = False
    assert build_tower(s, _first_slot(s, SlotState.EMPTY), TowerKind.ARCHER) == CommandError.INVALID_STATE
    assert unlock_slot(s, _first_slot(s, SlotState.LOCKED)) == CommandError.INVALID_STATE
    assert upgrade_tower(s, tower.tower_id) == CommandError.INVALID_STATE
    assert s.gold == 950


def test_slot_lookup_by_cell():
    s = _make_state()
    slot = s.slots[3]
    assert slot_at(s, slot.col, slot.row) is slot
    assert slot_at(s, 0, 0) is None
    assert tower_at(s, slot.col, slot.row) is None
