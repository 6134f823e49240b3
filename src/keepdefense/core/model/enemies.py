from __future__ import annotations

from enum import IntEnum


class EnemyType(IntEnum):
    GOBLIN = 0
    ORC = 1
    SKELETON = 2
    WOLF = 3


class Side(IntEnum):
    LEFT = 0
    RIGHT = 1


BASE_SPEED = 1.0
SPEED_PER_WAVE = 0.1
BASE_HP = 20.0
HP_GROWTH = 1.3
BASE_BOUNTY = 5.0

# Wave gates, checked in order; the last satisfied one wins.
TYPE_GATES: tuple[tuple[int, EnemyType], ...] = (
    (4, EnemyType.ORC),
    (6, EnemyType.WOLF),
    (8, EnemyType.SKELETON),
)
# Each gate may then revert to an easier type, again in order.
TYPE_OVERRIDES: tuple[tuple[int, EnemyType], ...] = (
    (4, EnemyType.GOBLIN),
    (6, EnemyType.ORC),
    (8, EnemyType.WOLF),
)
OVERRIDE_CHANCE = 0.3

FAST_SPEED_MULT = 1.8
FAST_HP_MULT = 0.7
FAST_BOUNTY_MULT = 1.2
