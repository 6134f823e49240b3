import pytest

from keepdefense.core.config_loader import GameConfig
from keepdefense.core.model.state import GameState
from keepdefense.core.rules.economy import advance_wave, can_afford, credit, lose_life, try_spend


def test_spend_within_budget():
    s = GameState(gold=300)
    assert can_afford(s, 300)
    assert try_spend(s, 120)
    assert s.gold == 180


def test_failed_spend_leaves_gold_alone():
    s = GameState(gold=40)
    assert not can_afford(s, 50)
    assert not try_spend(s, 50)
    assert s.gold == 40


def test_negative_amounts_are_rejected():
    s = GameState(gold=10)
    with pytest.raises(ValueError):
        try_spend(s, -1)
    with pytest.raises(ValueError):
        credit(s, -1)
    assert s.gold == 10


def test_credit_adds_fractional_bounty():
    s = GameState(gold=0)
    credit(s, 13.2)
    assert s.gold == pytest.approx(13.2)


def test_lose_life_ends_game_at_zero():
    s = GameState(lives=2)
    assert lose_life(s) is False
    assert s.lives == 1 and s.running
    assert lose_life(s) is True
    assert s.lives == 0
    assert not s.running
    assert s.game_over


def test_lose_life_is_noop_after_game_over():
    s = GameState(lives=0, running=False)
    assert lose_life(s) is False
    assert s.lives == 0


@pytest.mark.parametrize(
    ("time", "wave", "expected_wave"),
    [
        (30.0, 1, 1),
        (30.99, 1, 1),
        (31.0, 1, 2),
        (61.0, 2, 3),
        (61.0, 3, 3),
    ],
)
def test_wave_advances_on_whole_seconds(time: float, wave: int, expected_wave: int):
    s = GameState(time=time, wave=wave)
    advance_wave(s)
    assert s.wave == expected_wave


def test_wave_duration_comes_from_config():
    s = GameState(time=11.0, config=GameConfig(wave_duration=10.0))
    assert advance_wave(s)
    assert s.wave == 2
