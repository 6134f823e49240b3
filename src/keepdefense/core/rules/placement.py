from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math

from ..model.entities import Tower
from ..model.map import Slot, SlotState
from ..model.towers import (
    UPGRADE_COST_FACTOR,
    UPGRADE_DAMAGE_FACTOR,
    TowerKind,
    get_tower_def,
    resolve_tower_kind,
)
from .economy import can_afford, try_spend


logger = logging.getLogger(__name__)


class CommandError(str, Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_STATE = "invalid_state"


@dataclass(frozen=True, slots=True)
class CommandResult:
    ok: bool
    error: CommandError | None
    gold: int
    lives: int
    wave: int


def command_result(state, error: CommandError | None) -> CommandResult:
    return CommandResult(
        ok=error is None,
        error=error,
        gold=int(state.gold),
        lives=int(state.lives),
        wave=int(state.wave),
    )


def get_slot(state, slot_id: int) -> Slot | None:
    if not isinstance(slot_id, int) or isinstance(slot_id, bool):
        return None
    if slot_id < 0 or slot_id >= len(state.slots):
        return None
    return state.slots[slot_id]


def slot_at(state, col: int, row: int) -> Slot | None:
    for slot in state.slots:
        if slot.col == col and slot.row == row:
            return slot
    return None


def tower_at(state, col: int, row: int) -> Tower | None:
    slot = slot_at(state, col, row)
    if slot is None or slot.tower_id is None:
        return None
    return state.towers.get(slot.tower_id)


def upgrade_cost(tower: Tower) -> int:
    return math.floor(get_tower_def(tower.kind).cost * UPGRADE_COST_FACTOR * tower.level)


def check_unlock(state, slot_id: int) -> CommandError | None:
    slot = get_slot(state, slot_id)
    if not state.running or slot is None or slot.state != SlotState.LOCKED:
        return CommandError.INVALID_STATE
    if not can_afford(state, state.config.slot_unlock_cost):
        return CommandError.INSUFFICIENT_FUNDS
    return None


def check_build(state, slot_id: int, kind: TowerKind | str) -> CommandError | None:
    slot = get_slot(state, slot_id)
    if not state.running or slot is None or slot.state != SlotState.EMPTY:
        return CommandError.INVALID_STATE
    try:
        tower_def = get_tower_def(kind)
    except KeyError:
        return CommandError.INVALID_STATE
    if not can_afford(state, tower_def.cost):
        return CommandError.INSUFFICIENT_FUNDS
    return None


def get_tower(state, tower_id: int) -> Tower | None:
    if not isinstance(tower_id, int) or isinstance(tower_id, bool):
        return None
    return state.towers.get(tower_id)


def check_upgrade(state, tower_id: int) -> CommandError | None:
    tower = get_tower(state, tower_id)
    if not state.running or tower is None:
        return CommandError.INVALID_STATE
    if not can_afford(state, upgrade_cost(tower)):
        return CommandError.INSUFFICIENT_FUNDS
    return None


def unlock_slot(state, slot_id: int) -> CommandError | None:
    error = check_unlock(state, slot_id)
    if error is not None:
        logger.debug("unlock slot=%s rejected: %s", slot_id, error.value)
        return error
    try_spend(state, state.config.slot_unlock_cost)
    state.slots[slot_id].state = SlotState.EMPTY
    return None


def build_tower(state, slot_id: int, kind: TowerKind | str) -> CommandError | None:
    error = check_build(state, slot_id, kind)
    if error is not None:
        logger.debug("build %s on slot=%s rejected: %s", kind, slot_id, error.value)
        return error
    tower_def = get_tower_def(resolve_tower_kind(kind))
    try_spend(state, tower_def.cost)
    slot = state.slots[slot_id]
    tower = Tower(
        slot_id=slot.slot_id,
        col=slot.col,
        row=slot.row,
        kind=tower_def.kind,
        level=1,
        damage=tower_def.damage,
        range=tower_def.range,
        fire_rate=tower_def.fire_rate,
    )
    state.towers.add(tower)
    slot.state = SlotState.OCCUPIED
    slot.tower_id = tower.tower_id
    return None


def upgrade_tower(state, tower_id: int) -> CommandError | None:
    error = check_upgrade(state, tower_id)
    if error is not None:
        logger.debug("upgrade tower=%s rejected: %s", tower_id, error.value)
        return error
    tower = get_tower(state, tower_id)
    try_spend(state, upgrade_cost(tower))
    tower.level += 1
    tower.damage *= UPGRADE_DAMAGE_FACTOR
    return None
