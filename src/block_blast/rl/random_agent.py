from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import numpy as np
import gymnasium as gym

import block_blast.env  # noqa: F401


def _print_progress(ep_idx: int, total: int, last_score: int, last_steps: int) -> None:
    width = 30
    filled = int(width * (ep_idx + 1) / max(1, total))
    bar = "=" * filled + "." * (width - filled)
    msg = f"\r[{bar}] {ep_idx + 1}/{total}  score={last_score}  steps={last_steps}"
    print(msg, end="", file=sys.stdout, flush=True)


def run_random(episodes: int = 10, seed: Optional[int] = 0, progress: bool = True) -> List[int]:
    """Play `episodes` games picking uniformly among valid placements; returns final scores."""
    env = gym.make("BlockBlast-8x8-v0")
    rng = np.random.default_rng(seed)
    scores: List[int] = []
    for ep in range(episodes):
        obs, info = env.reset(seed=None if seed is None else seed + ep)
        steps = 0
        done = False
        while not done:
            valid = np.argwhere(info["action_mask"])
            if valid.size == 0:
                break
            action = valid[rng.integers(len(valid))]
            obs, reward, terminated, truncated, info = env.step(action)
            steps += 1
            done = terminated or truncated
        scores.append(int(info["score"]))
        if progress:
            _print_progress(ep, episodes, scores[-1], steps)
        else:
            print(f"Episode {ep + 1}/{episodes} score={scores[-1]} steps={steps}")
    if progress:
        print()
    env.close()
    return scores


def main() -> None:  # pragma: no cover
    p = argparse.ArgumentParser()
    p.add_argument("--episodes", type=int, default=10)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--no-progress", action="store_true")
    args = p.parse_args()

    scores = run_random(args.episodes, args.seed, progress=not args.no_progress)
    print(f"Random agent mean score: {float(np.mean(scores)):.1f}  best: {max(scores)}")


if __name__ == "__main__":  # pragma: no cover
    main()
