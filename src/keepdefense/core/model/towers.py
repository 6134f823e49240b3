from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


UPGRADE_COST_FACTOR = 0.5
UPGRADE_DAMAGE_FACTOR = 1.5


class TowerKind(str, Enum):
    ARCHER = "archer"
    CANNON = "cannon"
    MAGE = "mage"
    BARRACKS = "barracks"


@dataclass(frozen=True)
class TowerDef:
    kind: TowerKind
    name: str
    cost: int
    range: float
    damage: float
    fire_rate: float
    color: str


TOWER_DEFS: dict[TowerKind, TowerDef] = {
    TowerKind.ARCHER: TowerDef(
        kind=TowerKind.ARCHER,
        name="Archer",
        cost=50,
        range=100.0,
        damage=10.0,
        fire_rate=1.0,
        color="#d4af37",
    ),
    TowerKind.CANNON: TowerDef(
        kind=TowerKind.CANNON,
        name="Cannon",
        cost=120,
        range=150.0,
        damage=30.0,
        fire_rate=2.0,
        color="#333333",
    ),
    TowerKind.MAGE: TowerDef(
        kind=TowerKind.MAGE,
        name="Mage",
        cost=200,
        range=120.0,
        damage=2.0,
        fire_rate=0.1,
        color="#00ccff",
    ),
    # No range, damage or fire rate: buildable, never fires.
    TowerKind.BARRACKS: TowerDef(
        kind=TowerKind.BARRACKS,
        name="Knight",
        cost=80,
        range=0.0,
        damage=0.0,
        fire_rate=0.0,
        color="#b33939",
    ),
}


def resolve_tower_kind(kind: TowerKind | str) -> TowerKind:
    if isinstance(kind, TowerKind):
        return kind
    try:
        return TowerKind(str(kind).strip().lower())
    except ValueError as exc:
        raise KeyError(f"Unknown tower kind: {kind!r}") from exc


def get_tower_def(kind: TowerKind | str) -> TowerDef:
    return TOWER_DEFS[resolve_tower_kind(kind)]


def list_tower_defs() -> list[TowerDef]:
    return [TOWER_DEFS[kind] for kind in TowerKind]
