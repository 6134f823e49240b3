import argparse
import logging
import random

from gymnasium.utils.env_checker import check_env

from keepdefense.ai.env import KeepDefenseEnv


def _choose_action(mask, rng: random.Random) -> int:
    valid = [idx for idx, allowed in enumerate(mask) if bool(allowed)]
    if not valid:
        raise RuntimeError("No valid actions available")
    return rng.choice(valid)


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--seed", type=int, default=123)
    ap.add_argument("--steps", type=int, default=200)
    ap.add_argument("--ticks-per-step", type=int, default=60)
    ap.add_argument("--max-steps", type=int, default=600)
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    env = KeepDefenseEnv(ticks_per_step=args.ticks_per_step, max_steps=args.max_steps)
    check_env(env, skip_render_check=True)

    rng = random.Random(args.seed)
    env.reset(seed=args.seed)
    episodes = 1
    for step_idx in range(args.steps):
        action = _choose_action(env.action_masks(), rng)
        _, _, terminated, truncated, _ = env.step(action)
        if terminated or truncated:
            episodes += 1
            env.reset(seed=args.seed + step_idx + 1)
    state = env.engine.state
    print(f"ok steps={args.steps} episodes={episodes} wave={state.wave} gold={int(state.gold)} lives={state.lives}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
