from __future__ import annotations
from dataclasses import dataclass

from .enemies import EnemyType, Side
from .towers import TowerKind


@dataclass(slots=True)
class Enemy:
    x: float
    y: float
    side: Side
    type_id: EnemyType

    speed: float
    max_hp: float
    hp: float
    bounty: float
    reached_end: bool = False
    enemy_id: int = -1


@dataclass(slots=True)
class Tower:
    slot_id: int
    col: int
    row: int
    kind: TowerKind
    level: int
    damage: float
    range: float
    fire_rate: float
    cooldown: float = 0.0
    tower_id: int = -1


@dataclass(slots=True)
class Projectile:
    x: float
    y: float
    target_id: int
    speed: float
    damage: float
    color: str
    projectile_id: int = -1
