from __future__ import annotations

import logging
import random
from typing import Protocol

from keepdefense.ai.actions import Action, Build, Noop, Unlock, Upgrade, action_to_dict, flatten
from keepdefense.ai.env import KeepDefenseEnv
from keepdefense.core.model.map import SlotState
from keepdefense.core.model.towers import TowerKind, get_tower_def
from keepdefense.core.rules.placement import upgrade_cost


logger = logging.getLogger(__name__)

# towers are upgraded up to this level before more slots get unlocked
UPGRADE_LEVEL_CAP = 3


class Policy(Protocol):
    def reset(self, env: KeepDefenseEnv) -> None: ...

    def next_action(self, env: KeepDefenseEnv) -> Action | int: ...


def _keep_distance(state, slot) -> tuple[int, int, int]:
    keep_col, keep_row = state.map.keep_cell
    return (abs(slot.col - keep_col), abs(slot.row - keep_row), slot.slot_id)


def _addressable_slots(env: KeepDefenseEnv, wanted: SlotState) -> list:
    state = env.engine.state
    slots = [s for s in state.slots[: env.action_spec.max_slots] if s.state == wanted]
    slots.sort(key=lambda s: _keep_distance(state, s))
    return slots


def _allowed(env: KeepDefenseEnv, action: Action) -> bool:
    mask = env.action_masks()
    return bool(mask[flatten(action, env.action_spec)])


def _build_kind(env: KeepDefenseEnv) -> TowerKind:
    cannon_cost = get_tower_def(TowerKind.CANNON).cost
    if env.engine.state.gold >= 2 * cannon_cost:
        return TowerKind.CANNON
    return TowerKind.ARCHER


def _cheapest_upgrade(env: KeepDefenseEnv) -> Upgrade | None:
    state = env.engine.state
    best: tuple[int, int, int] | None = None
    for slot in state.slots[: env.action_spec.max_slots]:
        if slot.tower_id is None:
            continue
        tower = state.towers.get(slot.tower_id)
        if tower is None or tower.fire_rate <= 0 or tower.level >= UPGRADE_LEVEL_CAP:
            continue
        key = (upgrade_cost(tower), tower.level, slot.slot_id)
        if best is None or key < best:
            best = key
    if best is None:
        return None
    return Upgrade(slot=best[2])


def baseline_action(env: KeepDefenseEnv) -> Action:
    """
    Fill the empty slot nearest the keep, otherwise upgrade the cheapest
    tower below the level cap, otherwise unlock the locked slot nearest the
    keep. Waits (Noop) whenever the chosen step is not affordable yet.
    """
    if env.engine is None:
        raise RuntimeError("Environment not reset")
    if not env.engine.state.running:
        return Noop()

    empty = _addressable_slots(env, SlotState.EMPTY)
    if empty:
        kind_idx = env.action_spec.tower_kinds.index(_build_kind(env).value)
        action: Action = Build(kind=kind_idx, slot=empty[0].slot_id)
        return action if _allowed(env, action) else Noop()

    upgrade = _cheapest_upgrade(env)
    if upgrade is not None:
        return upgrade if _allowed(env, upgrade) else Noop()

    locked = _addressable_slots(env, SlotState.LOCKED)
    if locked:
        action = Unlock(slot=locked[0].slot_id)
        return action if _allowed(env, action) else Noop()
    return Noop()


def _random_action(env: KeepDefenseEnv, rng: random.Random) -> int:
    mask = env.action_masks()
    if hasattr(mask, "tolist"):
        mask = mask.tolist()
    valid = [idx for idx, ok in enumerate(mask) if ok]
    if not valid:
        return 0
    return rng.choice(valid)


class BaselinePolicy:
    def __init__(self, *, verbose: bool = False) -> None:
        self._verbose = verbose
        self._last: Action | None = None

    def reset(self, env: KeepDefenseEnv) -> None:
        self._last = None

    def next_action(self, env: KeepDefenseEnv) -> Action | int:
        action = baseline_action(env)
        if self._verbose and not isinstance(action, Noop) and action != self._last:
            logger.info("baseline: %s", action_to_dict(action, env.action_spec))
        self._last = action
        return action


class RandomPolicy:
    def __init__(self, *, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def reset(self, env: KeepDefenseEnv) -> None:
        return None

    def next_action(self, env: KeepDefenseEnv) -> Action | int:
        return _random_action(env, self._rng)


def make_policy(name: str, *, seed: int | None = None, verbose: bool = False) -> Policy:
    if name == "baseline":
        return BaselinePolicy(verbose=verbose)
    if name == "random":
        return RandomPolicy(seed=seed)
    raise ValueError(f"Unknown policy {name!r}")
