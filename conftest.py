from __future__ import annotations

import sys
from pathlib import Path

import pytest


SRC_PATH = Path(__file__).resolve().parent / "src"
if SRC_PATH.is_dir():
    sys.path.insert(0, str(SRC_PATH))

from keepdefense.core.config_loader import GameConfig  # noqa: E402
from keepdefense.core.engine import Engine  # noqa: E402


@pytest.fixture
def quiet_engine() -> Engine:
    """Seeded engine with random arrivals switched off."""
    return Engine(GameConfig(spawn_chance=0.0), seed=1)
