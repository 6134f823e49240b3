from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RewardState:
    gold: int
    lives: int
    wave: int
    kills: int
    leaks: int


@dataclass(frozen=True, slots=True)
class RewardConfig:
    kill_reward: float = 1.0
    gold_weight: float = 0.0
    wave_bonus: float = 5.0
    life_loss_penalty: float = 10.0
    terminal_loss_penalty: float = 100.0
    invalid_action_penalty: float = 0.0


def reward_state_from(state) -> RewardState:
    return RewardState(
        gold=int(getattr(state, "gold", 0)),
        lives=int(getattr(state, "lives", 0)),
        wave=int(getattr(state, "wave", 0)),
        kills=int(getattr(state, "kills", 0)),
        leaks=int(getattr(state, "leaks", 0)),
    )


def compute_reward_breakdown(
    prev_state: RewardState,
    new_state: RewardState,
    *,
    config: RewardConfig,
    invalid_action: bool = False,
    episode_done: bool = False,
) -> dict[str, float]:
    kills = float(max(0, new_state.kills - prev_state.kills))
    gold_delta = float(new_state.gold - prev_state.gold)
    waves = float(max(0, new_state.wave - prev_state.wave))
    lives_lost = float(max(0, prev_state.lives - new_state.lives))

    kill_reward = kills * config.kill_reward
    gold_reward = gold_delta * config.gold_weight
    wave_bonus = waves * config.wave_bonus
    life_loss_penalty = lives_lost * config.life_loss_penalty
    invalid_action_penalty = float(config.invalid_action_penalty) if invalid_action else 0.0
    terminal_penalty = float(config.terminal_loss_penalty) if episode_done else 0.0

    total = kill_reward + gold_reward + wave_bonus + invalid_action_penalty
    total -= life_loss_penalty + terminal_penalty
    return {
        "total": float(total),
        "kills": kills,
        "gold_delta": gold_delta,
        "lives_lost": lives_lost,
        "kill_reward": kill_reward,
        "gold_reward": gold_reward,
        "wave_bonus": wave_bonus,
        "life_loss_penalty": life_loss_penalty,
        "invalid_action_penalty": invalid_action_penalty,
        "terminal_penalty": terminal_penalty,
    }


def compute_reward(
    prev_state: RewardState,
    new_state: RewardState,
    *,
    config: RewardConfig,
    invalid_action: bool = False,
    episode_done: bool = False,
) -> float:
    """Shaped per-step reward; the game has no win state, only a loss."""
    return compute_reward_breakdown(
        prev_state,
        new_state,
        config=config,
        invalid_action=invalid_action,
        episode_done=episode_done,
    )["total"]
