from __future__ import annotations

import random


def normalize_seed(seed: int | None) -> int | None:
    if seed is None:
        return None
    seed_val = int(seed) & 0x7FFFFFFF
    return seed_val if seed_val != 0 else 1


def seed_state(state, seed: int | None) -> int:
    """Reseed ``state.rng``; an unseeded run draws a seed so it can be reported."""
    seed_val = normalize_seed(seed)
    if seed_val is None:
        seed_val = normalize_seed(random.SystemRandom().getrandbits(31))
    state.rng = random.Random(seed_val)
    setattr(state, "seed", seed_val)
    return seed_val
