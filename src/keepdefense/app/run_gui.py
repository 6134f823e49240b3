from __future__ import annotations

import argparse
import logging

from keepdefense.core.config_loader import build_config, game_config_from_dict, seed_from_config
from keepdefense.gui.pyglet_app import run


def main() -> int:
    ap = argparse.ArgumentParser(description="Play keep defense in a pyglet window.")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--config", type=str, default=None, help="Path to a JSON game config")
    ap.add_argument("--set", dest="overrides", action="append", default=[], help="Config override (repeatable)")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        cfg_dict = build_config(args.config, args.overrides)
        config = game_config_from_dict(cfg_dict)
    except (OSError, ValueError) as exc:
        ap.error(f"invalid config: {exc}")
    seed = args.seed if args.seed is not None else seed_from_config(cfg_dict)
    run(config, seed=seed)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
