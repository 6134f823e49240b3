# src/keepdefense/core/engine.py
from __future__ import annotations

import logging
from typing import Any, Literal

from .config_loader import DEFAULT_CONFIG, GameConfig
from .model.map import generate_map, generate_slots
from .model.state import GameState
from .model.towers import TowerKind
from .rng import seed_state
from .rules.economy import advance_wave
from .rules.enemy_motion import step_enemies
from .rules.placement import (
    CommandError,
    CommandResult,
    build_tower,
    check_build,
    check_unlock,
    check_upgrade,
    command_result,
    unlock_slot,
    upgrade_tower,
)
from .rules.projectiles import step_projectiles
from .rules.tower_attack import step_towers
from .rules.wave_spawner import maybe_spawn
from .snapshot import Snapshot, build_snapshot


logger = logging.getLogger(__name__)

ActionType = Literal[
    "NEW_GAME",
    "UNLOCK_SLOT",
    "BUILD_TOWER",
    "UPGRADE_TOWER",
]

# Frames a single step() may catch up on after a long stall.
MAX_CATCHUP_TICKS = 240


class Engine:
    """
    Deterministic fixed-step simulation with no GUI dependency.

    ``step`` accumulates wall time and runs whole ticks of ``1 / tick_rate``
    seconds; commands and ``observe`` are only valid between ticks.
    """

    def __init__(self, config: GameConfig | None = None, *, seed: int | None = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.state = GameState()
        self._accum = 0.0
        self.new_game(seed=seed)

    @property
    def frame_dt(self) -> float:
        return 1.0 / self.config.tick_rate

    def new_game(self, seed: int | None = None) -> int:
        cfg = self.config
        state = GameState(
            gold=cfg.starting_gold,
            lives=cfg.starting_lives,
            wave=cfg.starting_wave,
            config=cfg,
            map=generate_map(),
        )
        seed_val = seed_state(state, seed)
        state.slots = generate_slots(state.map, state.rng)
        self.state = state
        self._accum = 0.0
        logger.info("new game seed=%s slots=%s", seed_val, len(state.slots))
        return seed_val

    def reset(self, seed: int | None = None) -> int:
        return self.new_game(seed=seed)

    def tick(self) -> str | None:
        state = self.state
        if not state.running:
            return None

        state.ticks += 1
        state.time += self.frame_dt

        maybe_spawn(state)
        advance_wave(state)
        step_enemies(state)
        if not state.running:
            state.compact()
            return "game over"
        step_towers(state)
        step_projectiles(state)
        state.compact()
        return None

    def step(self, dt_seconds: float) -> str | None:
        if not self.state.running:
            return None

        frame_dt = self.frame_dt
        self._accum = min(self._accum + max(0.0, dt_seconds), frame_dt * MAX_CATCHUP_TICKS)
        ticks = min(int(self._accum / frame_dt + 1e-9), MAX_CATCHUP_TICKS)
        self._accum = max(0.0, self._accum - ticks * frame_dt)
        for _ in range(ticks):
            outcome = self.tick()
            if outcome is not None:
                self._accum = 0.0
                return outcome
        return None

    def run_ticks(self, count: int) -> str | None:
        for _ in range(max(0, int(count))):
            outcome = self.tick()
            if outcome is not None:
                return outcome
            if not self.state.running:
                break
        return None

    def unlock_slot(self, slot_id: int) -> CommandResult:
        return command_result(self.state, unlock_slot(self.state, slot_id))

    def build_tower(self, slot_id: int, kind: TowerKind | str) -> CommandResult:
        return command_result(self.state, build_tower(self.state, slot_id, kind))

    def upgrade_tower(self, tower_id: int) -> CommandResult:
        return command_result(self.state, upgrade_tower(self.state, tower_id))

    def can_unlock(self, slot_id: int) -> CommandError | None:
        return check_unlock(self.state, slot_id)

    def can_build(self, slot_id: int, kind: TowerKind | str) -> CommandError | None:
        return check_build(self.state, slot_id, kind)

    def can_upgrade(self, tower_id: int) -> CommandError | None:
        return check_upgrade(self.state, tower_id)

    def act(self, action_type: ActionType, payload: dict[str, Any] | None = None) -> CommandResult:
        payload = payload or {}

        if action_type == "NEW_GAME":
            self.new_game(seed=payload.get("seed"))
            return command_result(self.state, None)

        if action_type == "UNLOCK_SLOT":
            slot_id = payload.get("slot_id")
            if slot_id is None:
                return command_result(self.state, CommandError.INVALID_STATE)
            return self.unlock_slot(slot_id)

        if action_type == "BUILD_TOWER":
            slot_id = payload.get("slot_id")
            kind = payload.get("kind")
            if slot_id is None or kind is None:
                return command_result(self.state, CommandError.INVALID_STATE)
            return self.build_tower(slot_id, kind)

        if action_type == "UPGRADE_TOWER":
            tower_id = payload.get("tower_id")
            if tower_id is None:
                return command_result(self.state, CommandError.INVALID_STATE)
            return self.upgrade_tower(tower_id)

        raise ValueError(f"Unknown action_type={action_type!r}")

    def observe(self) -> Snapshot:
        return build_snapshot(self.state)
