from __future__ import annotations
from dataclasses import dataclass, field
import random

from ..config_loader import DEFAULT_CONFIG, GameConfig
from .entities import Enemy, Projectile, Tower
from .map import MapData, Slot, generate_map
from .registry import EntityStore


@dataclass(slots=True)
class GameState:
    gold: float = 300
    lives: int = 20
    wave: int = 1
    time: float = 0.0
    ticks: int = 0
    running: bool = True
    kills: int = 0
    leaks: int = 0

    config: GameConfig = DEFAULT_CONFIG

    map: MapData = field(default_factory=generate_map)
    slots: list[Slot] = field(default_factory=list)

    enemies: EntityStore[Enemy] = field(default_factory=lambda: EntityStore("enemy_id"))
    towers: EntityStore[Tower] = field(default_factory=lambda: EntityStore("tower_id"))
    projectiles: EntityStore[Projectile] = field(default_factory=lambda: EntityStore("projectile_id"))

    rng: random.Random = field(default_factory=random.Random)
    seed: int | None = None

    # cap warnings already emitted this game
    warned_caps: set[str] = field(default_factory=set)

    @property
    def game_over(self) -> bool:
        return not self.running

    def compact(self) -> None:
        self.enemies.compact()
        self.towers.compact()
        self.projectiles.compact()
