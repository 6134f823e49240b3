from __future__ import annotations

import logging
import random

from ..model.enemies import (
    BASE_BOUNTY,
    BASE_HP,
    BASE_SPEED,
    FAST_BOUNTY_MULT,
    FAST_HP_MULT,
    FAST_SPEED_MULT,
    HP_GROWTH,
    OVERRIDE_CHANCE,
    SPEED_PER_WAVE,
    TYPE_GATES,
    TYPE_OVERRIDES,
    EnemyType,
    Side,
)
from ..model.entities import Enemy


logger = logging.getLogger(__name__)


def maybe_spawn(state) -> Enemy | None:
    """
    Soft-capped random arrivals: below the cap, spawn with a fixed chance per
    tick. The hard ``max_enemies`` limit is applied on top of ``wave * 5``.
    """
    if not state.running:
        return None
    live = len(state.enemies)
    if live >= state.wave * state.config.spawn_cap_per_wave:
        return None
    if live >= state.config.max_enemies:
        if "enemies" not in state.warned_caps:
            state.warned_caps.add("enemies")
            logger.warning("enemy cap reached (%s); spawning paused", state.config.max_enemies)
        return None
    if state.rng.random() < state.config.spawn_chance:
        return spawn_enemy(state)
    return None


def pick_enemy_type(wave: int, rng: random.Random) -> EnemyType:
    enemy_type = EnemyType.GOBLIN
    for min_wave, gated in TYPE_GATES:
        if wave >= min_wave:
            enemy_type = gated
    for min_wave, easier in TYPE_OVERRIDES:
        if wave >= min_wave and rng.random() < OVERRIDE_CHANCE:
            enemy_type = easier
    return enemy_type


def enemy_stats(wave: int, enemy_type: EnemyType) -> tuple[float, float, float]:
    speed = BASE_SPEED + wave * SPEED_PER_WAVE
    hp = BASE_HP * HP_GROWTH ** wave
    bounty = BASE_BOUNTY + wave
    if enemy_type == EnemyType.WOLF:
        speed *= FAST_SPEED_MULT
        hp *= FAST_HP_MULT
        bounty *= FAST_BOUNTY_MULT
    return speed, hp, bounty


def spawn_enemy(state, *, side: Side | None = None, enemy_type: EnemyType | None = None) -> Enemy:
    rng = state.rng
    if side is None:
        side = Side.LEFT if rng.random() < 0.5 else Side.RIGHT
    if enemy_type is None:
        enemy_type = pick_enemy_type(state.wave, rng)

    width, _ = state.map.world_size()
    speed, hp, bounty = enemy_stats(state.wave, enemy_type)
    enemy = Enemy(
        x=0.0 if side == Side.LEFT else float(width),
        y=state.map.path_y(),
        side=side,
        type_id=enemy_type,
        speed=speed,
        max_hp=hp,
        hp=hp,
        bounty=bounty,
    )
    state.enemies.add(enemy)
    logger.debug(
        "spawn enemy=%s type=%s side=%s hp=%.1f wave=%s",
        enemy.enemy_id,
        enemy_type.name,
        side.name,
        hp,
        state.wave,
    )
    return enemy
