from __future__ import annotations

from dataclasses import asdict, dataclass
import json
from pathlib import Path
from typing import Any


_SUPPORTED_SCHEMA_VERSIONS = {1}
_SECTIONS: dict[str, tuple[str, ...]] = {
    "economy": ("starting_gold", "starting_lives", "slot_unlock_cost"),
    "waves": ("starting_wave", "wave_duration", "spawn_chance", "spawn_cap_per_wave"),
    "combat": ("tick_rate", "projectile_speed", "arrival_threshold"),
    "limits": ("max_enemies", "max_projectiles"),
}
_ALLOWED_KEYS: dict[str, Any] = {
    "schema_version": None,
    "seed": None,
    **{section: {key: None for key in keys} for section, keys in _SECTIONS.items()},
}
_INT_FIELDS = {
    "starting_lives",
    "starting_wave",
    "spawn_cap_per_wave",
    "slot_unlock_cost",
    "tick_rate",
    "max_enemies",
    "max_projectiles",
}


@dataclass(frozen=True, slots=True)
class GameConfig:
    starting_gold: float = 300
    starting_lives: int = 20
    starting_wave: int = 1
    wave_duration: float = 30.0
    spawn_chance: float = 0.02
    spawn_cap_per_wave: int = 5
    slot_unlock_cost: int = 50
    tick_rate: int = 60
    projectile_speed: float = 5.0
    arrival_threshold: float = 5.0
    max_enemies: int = 500
    max_projectiles: int = 2000

    def __post_init__(self) -> None:
        if self.starting_gold < 0:
            raise ValueError("economy.starting_gold must be >= 0")
        if self.starting_lives < 1:
            raise ValueError("economy.starting_lives must be >= 1")
        if self.slot_unlock_cost < 0:
            raise ValueError("economy.slot_unlock_cost must be >= 0")
        if self.starting_wave < 1:
            raise ValueError("waves.starting_wave must be >= 1")
        if self.wave_duration <= 0:
            raise ValueError("waves.wave_duration must be > 0")
        if not 0.0 <= self.spawn_chance <= 1.0:
            raise ValueError("waves.spawn_chance must be within [0, 1]")
        if self.spawn_cap_per_wave < 0:
            raise ValueError("waves.spawn_cap_per_wave must be >= 0")
        if self.tick_rate < 1:
            raise ValueError("combat.tick_rate must be >= 1")
        if self.projectile_speed <= 0:
            raise ValueError("combat.projectile_speed must be > 0")
        if self.arrival_threshold <= 0:
            raise ValueError("combat.arrival_threshold must be > 0")
        if self.max_enemies < 1 or self.max_projectiles < 1:
            raise ValueError("limits must be >= 1")

    def to_dict(self) -> dict[str, Any]:
        flat = asdict(self)
        out: dict[str, Any] = {"schema_version": 1}
        for section, keys in _SECTIONS.items():
            out[section] = {key: flat[key] for key in keys}
        return out


DEFAULT_CONFIG = GameConfig()


def load_json_config(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError(f"config root must be a JSON object: {p}")
    _validate_config(payload)
    return payload


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in out and isinstance(out[key], dict) and isinstance(value, dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def apply_overrides(cfg: dict[str, Any], overrides_list: list[str] | None) -> dict[str, Any]:
    if not overrides_list:
        return cfg

    out = cfg
    for item in overrides_list:
        if "=" not in item:
            raise ValueError(f"override must contain '=': {item}")
        path_str, value_str = item.split("=", 1)
        if not path_str:
            raise ValueError(f"override path empty: {item}")
        keys = path_str.split(".")
        if any(not key for key in keys):
            raise ValueError(f"override path has empty segment: {item}")
        value = _cast_scalar(value_str)

        cursor = out
        for key in keys[:-1]:
            if key not in cursor or not isinstance(cursor[key], dict):
                cursor[key] = {}
            cursor = cursor[key]
        cursor[keys[-1]] = value
    _validate_config(out)
    return out


def game_config_from_dict(cfg: dict[str, Any] | None) -> GameConfig:
    if not cfg:
        return DEFAULT_CONFIG
    _validate_config(cfg)
    values: dict[str, Any] = {}
    for section, keys in _SECTIONS.items():
        section_cfg = cfg.get(section) or {}
        for key in keys:
            if key not in section_cfg:
                continue
            raw = section_cfg[key]
            values[key] = int(raw) if key in _INT_FIELDS else float(raw)
    return GameConfig(**values)


def seed_from_config(cfg: dict[str, Any] | None) -> int | None:
    if not cfg:
        return None
    seed = cfg.get("seed")
    return None if seed is None else int(seed)


def build_config(path: str | Path | None = None, overrides: list[str] | None = None) -> dict[str, Any]:
    cfg: dict[str, Any] = {"schema_version": 1}
    if path is not None:
        cfg = deep_merge(cfg, load_json_config(path))
    return apply_overrides(cfg, overrides)


def _cast_scalar(value: str) -> Any:
    lowered = value.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("null", "none"):
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_config(cfg: dict[str, Any]) -> None:
    unknown = _find_unknown_keys(cfg, _ALLOWED_KEYS, path="")
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ValueError(f"unknown config keys: {unknown_str}")

    schema_version = cfg.get("schema_version", 1)
    if schema_version not in _SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"unsupported schema_version: {schema_version}")

    seed = cfg.get("seed")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise ValueError("seed must be an integer or null")

    for section in _SECTIONS:
        if section not in cfg:
            continue
        section_cfg = cfg[section]
        if not isinstance(section_cfg, dict):
            raise ValueError(f"config '{section}' must be a JSON object")
        for key, value in section_cfg.items():
            if not _is_number(value):
                raise ValueError(f"config '{section}.{key}' must be a number")
            if key in _INT_FIELDS and not float(value).is_integer():
                raise ValueError(f"config '{section}.{key}' must be an integer")


def _find_unknown_keys(value: Any, allowed: Any, *, path: str) -> list[str]:
    if not isinstance(value, dict) or not isinstance(allowed, dict):
        return []
    unknown: list[str] = []
    for key, sub_value in value.items():
        if key not in allowed:
            unknown.append(f"{path}{key}" if path else key)
            continue
        sub_allowed = allowed[key]
        if isinstance(sub_value, dict) and isinstance(sub_allowed, dict):
            child_path = f"{path}{key}."
            unknown.extend(_find_unknown_keys(sub_value, sub_allowed, path=child_path))
    return unknown
