import pytest

from keepdefense.ai.actions import Build, Noop, Unlock, Upgrade
from keepdefense.ai.env import KeepDefenseEnv
from keepdefense.ai.policies.baseline import UPGRADE_LEVEL_CAP, BaselinePolicy, RandomPolicy, make_policy
from keepdefense.core.config_loader import GameConfig


def _env(**config) -> KeepDefenseEnv:
    return KeepDefenseEnv(config=GameConfig(**config), ticks_per_step=1, max_steps=None)


def test_first_build_is_next_to_the_keep():
    env = _env()
    env.reset(seed=0)
    policy = make_policy("baseline")
    policy.reset(env)

    first = policy.next_action(env)
    assert isinstance(first, Build)
    assert env.action_spec.tower_kinds[first.kind] == "cannon"
    slot = env.engine.state.slots[first.slot]
    assert (slot.col, slot.row) == (13, 10)

    env.step(first)
    second = policy.next_action(env)
    assert isinstance(second, Build)
    assert env.action_spec.tower_kinds[second.kind] == "archer"
    slot = env.engine.state.slots[second.slot]
    assert (slot.col, slot.row) == (13, 12)


def test_baseline_only_picks_allowed_actions():
    env = KeepDefenseEnv(ticks_per_step=60, max_steps=None)
    env.reset(seed=11)
    policy = BaselinePolicy()
    policy.reset(env)
    for _ in range(120):
        _, _, terminated, _, info = env.step(policy.next_action(env))
        assert not info["invalid_action"]
        if terminated:
            break
    assert len(env.engine.state.towers) >= 4


def test_fill_then_upgrade_then_unlock():
    env = _env(starting_gold=100_000, spawn_chance=0.0)
    env.reset(seed=6)
    policy = BaselinePolicy()
    kinds = []
    for _ in range(300):
        action = policy.next_action(env)
        kinds.append(type(action))
        env.step(action)
        if isinstance(action, Unlock):
            break

    first_upgrade = kinds.index(Upgrade)
    assert all(k is Build for k in kinds[:first_upgrade])
    assert kinds[-1] is Unlock
    assert Noop not in kinds
    levels = [t.level for t in env.engine.state.towers]
    assert levels and all(level == UPGRADE_LEVEL_CAP for level in levels)


def test_waits_when_broke():
    env = _env(starting_gold=10)
    env.reset(seed=0)
    assert isinstance(BaselinePolicy().next_action(env), Noop)


def test_random_policy_respects_mask():
    env = _env()
    env.reset(seed=9)
    policy = RandomPolicy(seed=9)
    for _ in range(30):
        action_id = policy.next_action(env)
        assert env.action_masks()[action_id]
        env.step(action_id)


def test_unknown_policy_name():
    with pytest.raises(ValueError):
        make_policy("genius")
