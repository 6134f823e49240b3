from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class EnemyView:
    enemy_id: int
    x: float
    y: float
    hp: float
    max_hp: float
    type_id: int
    side: int


@dataclass(frozen=True, slots=True)
class TowerView:
    tower_id: int
    slot_id: int
    col: int
    row: int
    kind: str
    level: int
    damage: float
    range: float
    cooldown: float


@dataclass(frozen=True, slots=True)
class ProjectileView:
    projectile_id: int
    x: float
    y: float
    color: str


@dataclass(frozen=True, slots=True)
class SlotView:
    slot_id: int
    col: int
    row: int
    state: str


@dataclass(frozen=True, slots=True)
class Snapshot:
    gold: int
    lives: int
    wave: int
    time: float
    running: bool
    enemies: tuple[EnemyView, ...]
    towers: tuple[TowerView, ...]
    projectiles: tuple[ProjectileView, ...]
    slots: tuple[SlotView, ...]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_snapshot(state) -> Snapshot:
    return Snapshot(
        gold=int(state.gold),
        lives=int(state.lives),
        wave=int(state.wave),
        time=float(state.time),
        running=bool(state.running),
        enemies=tuple(
            EnemyView(
                enemy_id=e.enemy_id,
                x=e.x,
                y=e.y,
                hp=e.hp,
                max_hp=e.max_hp,
                type_id=int(e.type_id),
                side=int(e.side),
            )
            for e in state.enemies
        ),
        towers=tuple(
            TowerView(
                tower_id=t.tower_id,
                slot_id=t.slot_id,
                col=t.col,
                row=t.row,
                kind=t.kind.value,
                level=t.level,
                damage=t.damage,
                range=t.range,
                cooldown=t.cooldown,
            )
            for t in state.towers
        ),
        projectiles=tuple(
            ProjectileView(projectile_id=p.projectile_id, x=p.x, y=p.y, color=p.color)
            for p in state.projectiles
        ),
        slots=tuple(
            SlotView(slot_id=s.slot_id, col=s.col, row=s.row, state=s.state.value)
            for s in state.slots
        ),
    )
