from __future__ import annotations

import logging
from typing import Any

import gymnasium as gym
import numpy as np

from keepdefense.core.config_loader import GameConfig
from keepdefense.core.engine import Engine

from .actions import (
    Action,
    Build,
    MAX_SLOTS,
    Noop,
    Unlock,
    Upgrade,
    action_space_spec,
    check_slot_capacity,
    flatten,
    unflatten,
)
from .masking import compute_action_mask, slot_tower_id
from .obs import build_observation, flatten_observation, observation_size, slot_features
from .rewards import RewardConfig, compute_reward, reward_state_from


logger = logging.getLogger(__name__)


class KeepDefenseEnv(gym.Env):
    """
    One agent decision per ``step``: the action is applied between ticks, then
    the engine runs ``ticks_per_step`` fixed ticks (one second at 60 Hz by
    default). The episode terminates when the keep runs out of lives and is
    truncated after ``max_steps`` decisions.
    """

    metadata = {"render_modes": []}

    def __init__(
        self,
        *,
        config: GameConfig | None = None,
        max_slots: int = MAX_SLOTS,
        ticks_per_step: int = 60,
        max_steps: int | None = 3600,
        strict_invalid_actions: bool = False,
        reward_config: RewardConfig | None = None,
    ) -> None:
        super().__init__()
        if ticks_per_step < 1:
            raise ValueError(f"ticks_per_step must be >= 1, got {ticks_per_step}")
        self.config = config
        self.ticks_per_step = int(ticks_per_step)
        self.max_steps = max_steps
        self.strict_invalid_actions = strict_invalid_actions
        self.reward_config = reward_config or RewardConfig()

        self.action_spec = action_space_spec(max_slots=max_slots)
        self._slot_size = len(slot_features(self.action_spec))
        self.action_space = gym.spaces.Discrete(self.action_spec.num_actions)
        self.observation_space = gym.spaces.Box(
            low=-np.inf,
            high=np.inf,
            shape=(observation_size(self.action_spec),),
            dtype=np.float32,
        )

        self.engine: Engine | None = None
        self.episode_seed: int | None = None
        self._step_count = 0
        self._last_action_mask: np.ndarray | None = None
        self._last_obs_dict: dict[str, Any] | None = None

    @property
    def last_obs(self) -> dict[str, Any] | None:
        return self._last_obs_dict

    def reset(self, *, seed: int | None = None, options: dict[str, Any] | None = None) -> tuple[np.ndarray, dict]:
        super().reset(seed=seed)
        engine_seed = int(self.np_random.integers(0, 2**31 - 1))
        if self.engine is None:
            self.engine = Engine(self.config, seed=engine_seed)
        else:
            self.engine.new_game(seed=engine_seed)
        self.episode_seed = engine_seed
        self._step_count = 0
        check_slot_capacity(self.engine.state, self.action_spec)

        obs = self._observe()
        self._last_action_mask = self._compute_action_mask()
        logger.debug("reset seed=%s engine_seed=%s", seed, engine_seed)
        return obs, {"engine_seed": engine_seed, "action_mask": self._last_action_mask}

    def _observe(self) -> np.ndarray:
        obs_dict = build_observation(self.engine.state, self.action_spec)
        self._last_obs_dict = obs_dict
        return np.asarray(
            flatten_observation(obs_dict, max_slots=self.action_spec.max_slots, slot_size=self._slot_size),
            dtype=np.float32,
        )

    def _compute_action_mask(self) -> np.ndarray:
        if self.engine is None:
            raise RuntimeError("Environment not reset")
        return np.asarray(compute_action_mask(self.engine.state, self.action_spec), dtype=bool)

    def action_masks(self) -> np.ndarray:
        if self._last_action_mask is None:
            self._last_action_mask = self._compute_action_mask()
        return self._last_action_mask

    def step(self, action: Action | int) -> tuple[np.ndarray, float, bool, bool, dict[str, Any]]:
        if self.engine is None or self._last_action_mask is None:
            raise RuntimeError("Environment not reset")
        self._step_count += 1

        invalid_action = False
        action_obj: Action
        action_id: int | None
        try:
            if isinstance(action, (Noop, Unlock, Build, Upgrade)):
                action_obj = action
                action_id = flatten(action, self.action_spec)
            else:
                action_id = int(action)
                action_obj = unflatten(action_id, self.action_spec)
        except (TypeError, ValueError) as exc:
            if self.strict_invalid_actions:
                raise ValueError(f"Invalid action {action!r}") from exc
            action_obj, action_id, invalid_action = Noop(), self.action_spec.offsets.noop, True

        if not bool(self._last_action_mask[action_id]):
            if self.strict_invalid_actions:
                raise ValueError(f"Action not valid in current state: {action_obj!r}")
            action_obj, action_id, invalid_action = Noop(), self.action_spec.offsets.noop, True

        prev_state = reward_state_from(self.engine.state)
        self._apply_action(action_obj)
        self.engine.run_ticks(self.ticks_per_step)
        new_state = reward_state_from(self.engine.state)

        terminated = not self.engine.state.running
        truncated = not terminated and self.max_steps is not None and self._step_count >= self.max_steps
        reward = compute_reward(
            prev_state,
            new_state,
            config=self.reward_config,
            invalid_action=invalid_action,
            episode_done=terminated,
        )

        obs = self._observe()
        self._last_action_mask = self._compute_action_mask()
        info: dict[str, Any] = {
            "invalid_action": invalid_action,
            "action_id": action_id,
            "action_mask": self._last_action_mask,
            "gold": new_state.gold,
            "lives": new_state.lives,
            "wave": new_state.wave,
        }
        if terminated:
            logger.info(
                "episode done steps=%s wave=%s kills=%s leaks=%s",
                self._step_count,
                new_state.wave,
                new_state.kills,
                new_state.leaks,
            )
        return obs, reward, terminated, truncated, info

    def _apply_action(self, action: Action) -> None:
        engine = self.engine
        if isinstance(action, Noop):
            return
        if isinstance(action, Unlock):
            engine.unlock_slot(action.slot)
            return
        if isinstance(action, Build):
            engine.build_tower(action.slot, self.action_spec.tower_kinds[action.kind])
            return
        if isinstance(action, Upgrade):
            tower_id = slot_tower_id(engine.state, action.slot)
            if tower_id is not None:
                engine.upgrade_tower(tower_id)
            return
        raise TypeError(f"Unsupported action {action!r}")

    def render(self):
        return None

    def close(self) -> None:
        self.engine = None
        self._last_action_mask = None
