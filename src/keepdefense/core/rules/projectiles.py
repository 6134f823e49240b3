from __future__ import annotations

import logging
import math


logger = logging.getLogger(__name__)


def step_projectile(state, projectile) -> bool:
    """
    Advance one projectile. Returns True when it left play this tick, either
    by hitting its target or because the target is gone.
    """
    target = state.enemies.get(projectile.target_id)
    if target is None:
        logger.debug(
            "projectile=%s dropped, target=%s no longer exists",
            projectile.projectile_id,
            projectile.target_id,
        )
        state.projectiles.discard(projectile.projectile_id)
        return True

    dx = target.x - projectile.x
    dy = target.y - projectile.y
    dist = math.hypot(dx, dy)

    if dist < projectile.speed:
        target.hp -= projectile.damage
        state.projectiles.discard(projectile.projectile_id)
        return True

    projectile.x += (dx / dist) * projectile.speed
    projectile.y += (dy / dist) * projectile.speed
    return False


def step_projectiles(state) -> int:
    """Returns the number of projectiles resolved this tick."""
    if not state.running:
        return 0
    resolved = 0
    for projectile in state.projectiles:
        if step_projectile(state, projectile):
            resolved += 1
    return resolved
