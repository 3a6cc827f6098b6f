from __future__ import annotations

import argparse

import gymnasium as gym

# Ensure envs are registered
import falling_blocks_rl.env  # noqa: F401
from falling_blocks_rl.env.wrappers import ResampleInvalidActionWrapper


def run_random(steps: int = 2000, seed: int | None = None) -> float:
    env = ResampleInvalidActionWrapper(gym.make("FallingBlocks-10x20-v0"))
    obs, info = env.reset(seed=seed)
    env.action_space.seed(seed)
    total_reward = 0.0
    episodes = 0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            episodes += 1
            print(f"episode {episodes}: score={info['score']} level={info['level']} "
                  f"lines={info['lines_cleared_total']}")
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f}")
    return total_reward


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=2000)
    p.add_argument("--seed", type=int, default=None)
    args = p.parse_args()
    run_random(args.steps, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
