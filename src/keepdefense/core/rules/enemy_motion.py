from __future__ import annotations

import math

from .economy import credit, lose_life


DEFAULT_ARRIVAL_THRESHOLD = 5.0


def move_enemy(enemy, map_data, *, arrival_threshold: float = DEFAULT_ARRIVAL_THRESHOLD) -> bool:
    """
    Straight line toward the keep centre, re-aimed every tick. Returns True
    once the enemy is within ``arrival_threshold`` of the keep; it does not
    move on that tick.
    """
    target_x, target_y = map_data.keep_center()
    dx = target_x - enemy.x
    dy = target_y - enemy.y
    dist = math.hypot(dx, dy)

    if dist < arrival_threshold:
        enemy.reached_end = True
        return True
    enemy.x += (dx / dist) * enemy.speed
    enemy.y += (dy / dist) * enemy.speed
    return False


def step_enemies(state) -> tuple[int, int]:
    """Returns (killed, arrived) for this tick."""
    if not state.running:
        return 0, 0

    killed = 0
    arrived = 0
    threshold = state.config.arrival_threshold
    for enemy in state.enemies:
        if enemy.hp <= 0:
            credit(state, enemy.bounty)
            state.enemies.discard(enemy.enemy_id)
            killed += 1
            state.kills += 1
            continue

        if move_enemy(enemy, state.map, arrival_threshold=threshold):
            state.enemies.discard(enemy.enemy_id)
            arrived += 1
            state.leaks += 1
            if lose_life(state):
                break
    return killed, arrived
