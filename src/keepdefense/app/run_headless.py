from __future__ import annotations
import argparse
import logging
import math

from keepdefense.ai.env import KeepDefenseEnv
from keepdefense.ai.policies.baseline import make_policy
from keepdefense.core.config_loader import build_config, game_config_from_dict, seed_from_config
from keepdefense.core.engine import Engine


def _summary(state, seed: int | None) -> str:
    return (
        f"seed={seed} time={state.time:.2f} ticks={state.ticks} wave={state.wave} "
        f"gold={int(state.gold)} lives={state.lives} kills={state.kills} leaks={state.leaks} "
        f"towers={len(state.towers)} enemies={len(state.enemies)} game_over={state.game_over}"
    )


def _run_plain(engine: Engine, seconds: float, fps: int) -> None:
    frames = int(seconds * fps)
    for _ in range(frames):
        engine.step(1.0 / fps)
        if engine.state.game_over:
            break


def _run_policy(config, policy_name: str, seconds: float, seed: int | None, verbose: bool):
    env = KeepDefenseEnv(config=config, ticks_per_step=config.tick_rate, max_steps=None)
    env.reset(seed=seed)
    policy = make_policy(policy_name, seed=seed, verbose=verbose)
    policy.reset(env)
    for _ in range(max(0, math.ceil(seconds))):
        _, _, terminated, truncated, _ = env.step(policy.next_action(env))
        if terminated or truncated:
            break
    return env


def main() -> int:
    ap = argparse.ArgumentParser(description="Run a keep defense game without a window and print a summary.")
    ap.add_argument("--seconds", type=float, default=60.0, help="Simulated seconds to run")
    ap.add_argument("--fps", type=int, default=60, help="Frames per simulated second fed to Engine.step")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--policy", choices=("none", "baseline", "random"), default="none")
    ap.add_argument("--config", type=str, default=None, help="Path to a JSON game config")
    ap.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        help="Config override, e.g. --set economy.starting_gold=500 (repeatable)",
    )
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.fps < 1:
        ap.error("--fps must be >= 1")

    try:
        cfg_dict = build_config(args.config, args.overrides)
        config = game_config_from_dict(cfg_dict)
    except (OSError, ValueError) as exc:
        ap.error(f"invalid config: {exc}")
    seed = args.seed if args.seed is not None else seed_from_config(cfg_dict)

    if args.policy == "none":
        engine = Engine(config, seed=seed)
        _run_plain(engine, args.seconds, args.fps)
        print(_summary(engine.state, engine.state.seed))
    else:
        env = _run_policy(config, args.policy, args.seconds, seed, args.verbose)
        print(_summary(env.engine.state, env.episode_seed))
        env.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
