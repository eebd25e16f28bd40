#!/usr/bin/env python3
"""
Solve an LPOMDP model file and roll out the lexicographic policy.

Usage:
    python -m scripts.rollout_lpomdp --model models/autonomy_handoff.yaml
"""

import argparse
import json
from pathlib import Path
from typing import Dict, List

import numpy as np

from lexpomdp.pomdp import (
    LPOMDPError,
    PolicyAlphaVectors,
    build_model,
    check_model,
    lexicographic_policy,
    load_model,
    policy_myopic,
    rollout,
)
from lexpomdp.pomdp.belief import uniform_belief
from lexpomdp.pomdp.config_schema import ModelConfig
from lexpomdp.utils.logging_utils import get_logger
from scripts.solve_lpomdp import solve_model

logger = get_logger(__name__)


def rollout_summary(
    cfg: ModelConfig,
    policies: List[PolicyAlphaVectors],
    horizon: int,
    episodes: int,
    rng: np.random.Generator,
) -> Dict[str, Dict[str, Dict[str, float]]]:
    """
    Discounted return per objective of the L-PBVI policy and a myopic baseline.

    Returns:
        summary[policy][objective] = {"mean": ..., "std": ...}
    """
    lpomdp, beliefs = build_model(cfg)
    start_belief = beliefs[0] if beliefs else uniform_belief(len(cfg.states))
    model = check_model(lpomdp)
    candidates = {
        "lpbvi": lexicographic_policy(policies),
        "myopic": lambda b: policy_myopic(model, b, objective=0),
    }

    summary = {}
    for name, policy_fn in candidates.items():
        logger.info(f"Rolling out {name} policy for {episodes} episodes")
        totals = np.array([
            rollout(lpomdp, policy_fn, start_belief, horizon=horizon, rng=rng)["discounted_reward"]
            for _ in range(episodes)
        ])
        summary[name] = {
            objective: {"mean": float(totals[:, i].mean()), "std": float(totals[:, i].std())}
            for i, objective in enumerate(cfg.objective_names)
        }
    return summary


def main():
    parser = argparse.ArgumentParser(description="Roll out an L-PBVI policy")
    parser.add_argument("--model", type=str, required=True,
                       help="Path to model YAML")
    parser.add_argument("--horizon", type=int, default=25,
                       help="Simulation horizon")
    parser.add_argument("--episodes", type=int, default=100,
                       help="Number of rollouts per policy")
    parser.add_argument("--seed", type=int, default=42,
                       help="Random seed")
    parser.add_argument("--out", type=str, default=None,
                       help="Optional JSON file for the summary")

    args = parser.parse_args()

    cfg = load_model(args.model)
    try:
        _, policies = solve_model(cfg, seed=args.seed)
    except LPOMDPError as exc:
        logger.error(f"Cannot solve {args.model}: {type(exc).__name__}: {exc}")
        return 1

    summary = rollout_summary(
        cfg, policies, args.horizon, args.episodes, np.random.default_rng(args.seed)
    )

    print("\n" + "="*60)
    print(f"Rollouts: {cfg.name} ({args.episodes} episodes, horizon {args.horizon})")
    print("="*60)
    for name, per_objective in summary.items():
        print(f"{name}:")
        for objective, stats in per_objective.items():
            print(f"  {objective}: {stats['mean']:.3f} ± {stats['std']:.3f}")
    print("="*60)

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
        print(f"Summary saved to: {out_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
