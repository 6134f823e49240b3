import logging

import pytest

from keepdefense.core.config_loader import GameConfig
from keepdefense.core.model.enemies import EnemyType, Side
from keepdefense.core.model.state import GameState
from keepdefense.core.rules.wave_spawner import enemy_stats, maybe_spawn, pick_enemy_type, spawn_enemy


class _FixedRng:
    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.mark.parametrize(
    ("wave", "expected"),
    [
        (1, EnemyType.GOBLIN),
        (3, EnemyType.GOBLIN),
        (4, EnemyType.ORC),
        (5, EnemyType.ORC),
        (6, EnemyType.WOLF),
        (7, EnemyType.WOLF),
        (8, EnemyType.SKELETON),
        (20, EnemyType.SKELETON),
    ],
)
def test_type_gates_without_overrides(wave: int, expected: EnemyType):
    assert pick_enemy_type(wave, _FixedRng(0.99)) == expected


@pytest.mark.parametrize(
    ("wave", "expected"),
    [
        (3, EnemyType.GOBLIN),
        (4, EnemyType.GOBLIN),
        (6, EnemyType.ORC),
        (8, EnemyType.WOLF),
    ],
)
def test_overrides_apply_in_order(wave: int, expected: EnemyType):
    assert pick_enemy_type(wave, _FixedRng(0.0)) == expected


def test_stats_scale_with_wave():
    speed, hp, bounty = enemy_stats(1, EnemyType.GOBLIN)
    assert speed == pytest.approx(1.1)
    assert hp == pytest.approx(26.0)
    assert bounty == pytest.approx(6.0)


def test_wolf_multipliers_apply_after_growth():
    speed, hp, bounty = enemy_stats(6, EnemyType.WOLF)
    assert speed == pytest.approx(1.6 * 1.8)
    assert hp == pytest.approx(20 * 1.3**6 * 0.7)
    assert bounty == pytest.approx(11 * 1.2)


def test_spawn_positions_by_side():
    s = GameState()
    left = spawn_enemy(s, side=Side.LEFT, enemy_type=EnemyType.GOBLIN)
    right = spawn_enemy(s, side=Side.RIGHT, enemy_type=EnemyType.ORC)
    assert (left.x, left.y) == (0.0, 368.0)
    assert (right.x, right.y) == (960.0, 368.0)
    assert left.hp == left.max_hp
    assert len(s.enemies) == 2
    assert left.enemy_id != right.enemy_id


def test_soft_cap_is_wave_times_five():
    s = GameState(wave=1, config=GameConfig(spawn_chance=1.0))
    spawned = [maybe_spawn(s) for _ in range(8)]
    assert sum(1 for e in spawned if e is not None) == 5
    assert len(s.enemies) == 5
    s.wave = 2
    assert maybe_spawn(s) is not None


def test_zero_chance_never_spawns():
    s = GameState(wave=10, config=GameConfig(spawn_chance=0.0))
    for _ in range(200):
        assert maybe_spawn(s) is None


def test_hard_cap_warns_once(caplog):
    s = GameState(wave=10, config=GameConfig(spawn_chance=1.0, max_enemies=2))
    with caplog.at_level(logging.WARNING):
        results = [maybe_spawn(s) for _ in range(5)]
    assert sum(1 for e in results if e is not None) == 2
    assert "enemies" in s.warned_caps
    assert sum("enemy cap" in r.getMessage() for r in caplog.records) == 1


def test_no_spawns_after_game_over():
    s = GameState(running=False, config=GameConfig(spawn_chance=1.0))
    assert maybe_spawn(s) is None
