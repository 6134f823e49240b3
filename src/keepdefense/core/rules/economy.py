from __future__ import annotations

import logging
import math


logger = logging.getLogger(__name__)


def can_afford(state, amount: float) -> bool:
    return state.gold >= amount


def try_spend(state, amount: float) -> bool:
    if amount < 0:
        raise ValueError("amount must be non-negative")
    if state.gold < amount:
        return False
    state.gold -= amount
    return True


def credit(state, amount: float) -> None:
    if amount < 0:
        raise ValueError("amount must be non-negative")
    state.gold += amount


def lose_life(state) -> bool:
    """Charge one life; returns True when this loss ends the game."""
    if not state.running:
        return False
    state.lives = max(0, state.lives - 1)
    if state.lives == 0:
        state.running = False
        logger.info("game over wave=%s time=%.1fs gold=%s", state.wave, state.time, int(state.gold))
        return True
    return False


def advance_wave(state) -> bool:
    # whole seconds elapsed must pass the end of the current wave
    if math.floor(state.time) > state.wave * state.config.wave_duration:
        state.wave += 1
        logger.info("wave %s started at %.1fs", state.wave, state.time)
        return True
    return False
