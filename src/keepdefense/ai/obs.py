from __future__ import annotations

from typing import Any
import math

from keepdefense.core.model.map import SlotState
from keepdefense.core.model.towers import list_tower_defs
from keepdefense.core.rules.tower_attack import cooldown_ticks

from .actions import ActionSpaceSpec


MAX_LEVEL = 10
MAX_WAVE = 50
GOLD_SCALE = 10_000.0
DAMAGE_SCALE = 1_000.0
SLOT_STATES = (SlotState.LOCKED, SlotState.EMPTY, SlotState.OCCUPIED)

SCALAR_KEYS = (
    "gold_norm",
    "lives_norm",
    "wave_norm",
    "time_in_wave_norm",
    "enemy_count_norm",
    "projectile_count_norm",
    "tower_count_norm",
    "nearest_enemy_dist_norm",
    "enemy_hp_norm",
)


def _log_norm(value: int | float, scale: float) -> float:
    if scale <= 0:
        return 0.0
    return min(1.0, math.log1p(max(0.0, float(value))) / math.log1p(scale))


def slot_features(spec: ActionSpaceSpec) -> list[str]:
    features = ["exists", "col_norm", "row_norm"]
    features.extend(f"state_{s.value}" for s in SLOT_STATES)
    features.extend(f"kind_{kind}" for kind in spec.tower_kinds)
    features.extend(["level_norm", "damage_norm", "range_norm", "cooldown_norm"])
    return features


def _max_range() -> float:
    return max([1.0, *(float(t.range) for t in list_tower_defs())])


def build_observation(state, spec: ActionSpaceSpec) -> dict[str, Any]:
    cfg = state.config
    map_data = state.map
    kind_to_idx = {kind: idx for idx, kind in enumerate(spec.tower_kinds)}
    features = slot_features(spec)
    max_range = _max_range()
    world_w, _ = map_data.world_size()
    keep_x, _ = map_data.keep_center()

    slots: list[list[float]] = []
    for slot in state.slots[: spec.max_slots]:
        state_onehot = [1.0 if slot.state == s else 0.0 for s in SLOT_STATES]
        kind_onehot = [0.0] * len(spec.tower_kinds)
        tower_values = [0.0, 0.0, 0.0, 0.0]
        tower = state.towers.get(slot.tower_id) if slot.tower_id is not None else None
        if tower is not None:
            kind_onehot[kind_to_idx[tower.kind.value]] = 1.0
            full_cooldown = cooldown_ticks(tower, cfg.tick_rate) if tower.fire_rate > 0 else 0.0
            tower_values = [
                min(1.0, float(tower.level) / MAX_LEVEL),
                _log_norm(tower.damage, DAMAGE_SCALE),
                min(1.0, float(tower.range) / max_range),
                min(1.0, tower.cooldown / full_cooldown) if full_cooldown > 0 else 0.0,
            ]
        slots.append(
            [
                1.0,
                float(slot.col) / max(1, map_data.cols - 1),
                float(slot.row) / max(1, map_data.rows - 1),
                *state_onehot,
                *kind_onehot,
                *tower_values,
            ]
        )

    enemies = list(state.enemies)
    nearest = min((abs(e.x - keep_x) for e in enemies), default=world_w / 2)
    total_hp = sum(max(0.0, e.hp) for e in enemies)
    time_in_wave = state.time - (state.wave - 1) * cfg.wave_duration

    obs: dict[str, Any] = {
        "gold": int(state.gold),
        "lives": int(state.lives),
        "wave": int(state.wave),
        "enemy_count": len(enemies),
        "tower_count": len(state.towers),
        "gold_norm": _log_norm(state.gold, GOLD_SCALE),
        "lives_norm": min(1.0, float(state.lives) / max(1, cfg.starting_lives)),
        "wave_norm": min(1.0, float(state.wave) / MAX_WAVE),
        "time_in_wave_norm": min(1.0, max(0.0, time_in_wave / cfg.wave_duration)),
        "enemy_count_norm": min(1.0, float(len(enemies)) / cfg.max_enemies),
        "projectile_count_norm": min(1.0, float(len(state.projectiles)) / cfg.max_projectiles),
        "tower_count_norm": min(1.0, float(len(state.towers)) / spec.max_slots),
        "nearest_enemy_dist_norm": min(1.0, nearest / max(1.0, world_w / 2)),
        "enemy_hp_norm": _log_norm(total_hp, 1_000_000.0),
        "slots": slots,
        "slot_features": features,
    }
    return obs


def flatten_observation(obs: dict[str, Any], *, max_slots: int, slot_size: int) -> list[float]:
    values: list[float] = [float(obs.get(key, 0.0) or 0.0) for key in SCALAR_KEYS]
    slots = obs.get("slots", []) or []
    empty_slot = [0.0] * slot_size
    for idx in range(max_slots):
        slot = slots[idx] if idx < len(slots) else empty_slot
        values.extend(float(value) for value in slot)
    return values


def observation_size(spec: ActionSpaceSpec) -> int:
    return len(SCALAR_KEYS) + spec.max_slots * len(slot_features(spec))
