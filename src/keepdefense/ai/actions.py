from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging

from keepdefense.core.model.towers import list_tower_defs


logger = logging.getLogger(__name__)

MAX_SLOTS = 128


class ActionType(Enum):
    NOOP = "NOOP"
    UNLOCK = "UNLOCK"
    BUILD = "BUILD"
    UPGRADE = "UPGRADE"


@dataclass(frozen=True, slots=True)
class Noop:
    pass


@dataclass(frozen=True, slots=True)
class Unlock:
    slot: int


@dataclass(frozen=True, slots=True)
class Build:
    kind: int
    slot: int


@dataclass(frozen=True, slots=True)
class Upgrade:
    slot: int


Action = Noop | Unlock | Build | Upgrade


@dataclass(frozen=True, slots=True)
class ActionOffsets:
    noop: int
    unlock: int
    build: int
    upgrade: int


@dataclass(frozen=True, slots=True)
class ActionSpaceSpec:
    max_slots: int
    tower_kinds: tuple[str, ...]
    tower_costs: tuple[int, ...]
    offsets: ActionOffsets
    unlock_count: int
    build_count: int
    upgrade_count: int
    num_actions: int


def action_space_spec(*, max_slots: int = MAX_SLOTS) -> ActionSpaceSpec:
    if max_slots < 1:
        raise ValueError(f"max_slots must be >= 1, got {max_slots}")
    tower_defs = list_tower_defs()
    tower_kinds = tuple(t.kind.value for t in tower_defs)
    tower_costs = tuple(int(t.cost) for t in tower_defs)

    unlock_count = max_slots
    build_count = len(tower_kinds) * max_slots
    upgrade_count = max_slots
    offsets = ActionOffsets(
        noop=0,
        unlock=1,
        build=1 + unlock_count,
        upgrade=1 + unlock_count + build_count,
    )
    return ActionSpaceSpec(
        max_slots=max_slots,
        tower_kinds=tower_kinds,
        tower_costs=tower_costs,
        offsets=offsets,
        unlock_count=unlock_count,
        build_count=build_count,
        upgrade_count=upgrade_count,
        num_actions=offsets.upgrade + upgrade_count,
    )


def check_slot_capacity(state, spec: ActionSpaceSpec) -> None:
    count = len(getattr(state, "slots", []) or [])
    if count > spec.max_slots:
        logger.warning("map has %s slots, only the first %s are addressable", count, spec.max_slots)


def _check_slot(slot: int, spec: ActionSpaceSpec) -> None:
    if slot < 0 or slot >= spec.max_slots:
        raise ValueError(f"Invalid slot={slot}")


def flatten(action: Action, spec: ActionSpaceSpec) -> int:
    if isinstance(action, Noop):
        return spec.offsets.noop
    if isinstance(action, Unlock):
        _check_slot(action.slot, spec)
        return spec.offsets.unlock + action.slot
    if isinstance(action, Build):
        if action.kind < 0 or action.kind >= len(spec.tower_kinds):
            raise ValueError(f"Invalid kind={action.kind}")
        _check_slot(action.slot, spec)
        return spec.offsets.build + action.kind * spec.max_slots + action.slot
    if isinstance(action, Upgrade):
        _check_slot(action.slot, spec)
        return spec.offsets.upgrade + action.slot
    raise TypeError(f"Unsupported action {action!r}")


def unflatten(action_id: int, spec: ActionSpaceSpec) -> Action:
    if action_id == spec.offsets.noop:
        return Noop()

    unlock_end = spec.offsets.unlock + spec.unlock_count
    if spec.offsets.unlock <= action_id < unlock_end:
        return Unlock(slot=action_id - spec.offsets.unlock)

    build_end = spec.offsets.build + spec.build_count
    if spec.offsets.build <= action_id < build_end:
        idx = action_id - spec.offsets.build
        return Build(kind=idx // spec.max_slots, slot=idx % spec.max_slots)

    upgrade_end = spec.offsets.upgrade + spec.upgrade_count
    if spec.offsets.upgrade <= action_id < upgrade_end:
        return Upgrade(slot=action_id - spec.offsets.upgrade)

    raise ValueError(f"Invalid action_id={action_id}")


def action_to_dict(action: Action, spec: ActionSpaceSpec) -> dict:
    if isinstance(action, Noop):
        return {"type": ActionType.NOOP.value}
    if isinstance(action, Unlock):
        return {"type": ActionType.UNLOCK.value, "slot_id": action.slot}
    if isinstance(action, Build):
        return {
            "type": ActionType.BUILD.value,
            "slot_id": action.slot,
            "kind": spec.tower_kinds[action.kind],
        }
    if isinstance(action, Upgrade):
        return {"type": ActionType.UPGRADE.value, "slot_id": action.slot}
    raise TypeError(f"Unsupported action {action!r}")
