from __future__ import annotations

import logging
import math

from ..model.entities import Enemy, Projectile, Tower
from ..model.towers import get_tower_def


logger = logging.getLogger(__name__)


def tower_center(tower: Tower, map_data) -> tuple[float, float]:
    return map_data.cell_center(tower.col, tower.row)


def select_target(tower: Tower, enemies, map_data) -> Enemy | None:
    """Nearest enemy strictly inside range; the first one wins a tie."""
    origin_x, origin_y = tower_center(tower, map_data)
    target = None
    best = math.inf
    for enemy in enemies:
        dist = math.hypot(enemy.x - origin_x, enemy.y - origin_y)
        if dist < tower.range and dist < best:
            best = dist
            target = enemy
    return target


def cooldown_ticks(tower: Tower, tick_rate: int) -> float:
    return tick_rate / tower.fire_rate


def fire(state, tower: Tower, target: Enemy) -> Projectile:
    origin_x, origin_y = tower_center(tower, state.map)
    projectile = Projectile(
        x=origin_x,
        y=origin_y,
        target_id=target.enemy_id,
        speed=state.config.projectile_speed,
        damage=tower.damage,
        color=get_tower_def(tower.kind).color,
    )
    state.projectiles.add(projectile)
    tower.cooldown = cooldown_ticks(tower, state.config.tick_rate)
    return projectile


def step_towers(state) -> int:
    """Tick cooldowns, acquire targets and fire. Returns the number of shots."""
    if not state.running:
        return 0

    shots = 0
    for tower in state.towers:
        if tower.cooldown > 0:
            tower.cooldown = max(0.0, tower.cooldown - 1)
        if tower.fire_rate <= 0:
            continue

        target = select_target(tower, state.enemies, state.map)
        if target is None or tower.cooldown > 0:
            continue

        if len(state.projectiles) >= state.config.max_projectiles:
            if "projectiles" not in state.warned_caps:
                state.warned_caps.add("projectiles")
                logger.warning("projectile cap reached (%s); towers hold fire", state.config.max_projectiles)
            continue

        fire(state, tower, target)
        shots += 1
    return shots
