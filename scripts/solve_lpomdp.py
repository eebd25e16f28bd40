#!/usr/bin/env python3
"""
Solve an LPOMDP model file with L-PBVI and write the value functions.

Usage:
    python -m scripts.solve_lpomdp --model models/autonomy_handoff.yaml
"""

from __future__ import annotations

import argparse
import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import numpy as np

from lexpomdp.config import Config
from lexpomdp.pomdp import (
    LPBVI,
    LPOMDPError,
    PolicyAlphaVectors,
    build_model,
    load_model,
    summarize_policies,
)
from lexpomdp.pomdp.config_schema import ModelConfig
from lexpomdp.utils.logging_utils import get_logger

logger = get_logger(__name__)


def solve_model(
    cfg: ModelConfig,
    epsilon: Optional[float] = None,
    expansions: Optional[int] = None,
    expansion_rule: Optional[str] = None,
    seed: Optional[int] = None,
) -> tuple[LPBVI, List[PolicyAlphaVectors]]:
    """Solve a loaded model file; arguments override its solver section."""
    lpomdp, beliefs = build_model(cfg)

    solver = LPBVI(
        expansion_rule=expansion_rule if expansion_rule is not None else cfg.solver.expansion_rule,
        expansions=expansions if expansions is not None else cfg.solver.expansions,
        epsilon=epsilon if epsilon is not None else cfg.solver.epsilon,
        rng=np.random.default_rng(seed if seed is not None else cfg.solver.seed),
    )
    if beliefs:
        solver.set_initial_beliefs(beliefs)

    policies = solver.solve(lpomdp)
    return solver, policies


def write_outputs(
    cfg: ModelConfig,
    solver: LPBVI,
    policies: List[PolicyAlphaVectors],
    out_dir: Path,
) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)

    value_functions = {
        "model": cfg.name,
        "states": cfg.states,
        "epsilon": solver.epsilon,
        "updates": solver.updates,
        "objectives": [
            {"name": name, "priority": i, "alpha_vectors": policy.to_dict()}
            for i, (name, policy) in enumerate(zip(cfg.objective_names, policies))
        ],
    }
    with open(out_dir / "value_functions.json", "w", encoding="utf-8") as f:
        json.dump(value_functions, f, indent=2)

    df = summarize_policies(policies, solver.beliefs, cfg.states)
    df.to_csv(out_dir / "belief_values.csv", index=False)


def main() -> int:
    parser = argparse.ArgumentParser(description="Solve an LPOMDP model with L-PBVI.")
    parser.add_argument("--model", required=True, help="Path to model YAML.")
    parser.add_argument("--out-dir", dest="out_dir", type=str, default=None,
                        help="Output directory (if not provided, uses runs/<model>/<timestamp>/)")
    parser.add_argument("--epsilon", type=float, default=None, help="Target approximation error")
    parser.add_argument("--expansions", type=int, default=None, help="Maximum expansion rounds")
    parser.add_argument("--expansion-rule", dest="expansion_rule", type=str, default=None,
                        help="Belief expansion heuristic")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    args = parser.parse_args()

    cfg = load_model(args.model)
    try:
        solver, policies = solve_model(
            cfg,
            epsilon=args.epsilon,
            expansions=args.expansions,
            expansion_rule=args.expansion_rule,
            seed=args.seed,
        )
    except LPOMDPError as exc:
        logger.error(f"Cannot solve {args.model}: {type(exc).__name__}: {exc}")
        return 1

    if args.out_dir:
        out_dir = Path(args.out_dir)
    else:
        Config.ensure_directories()
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        out_dir = Config.RUNS_DIR / cfg.name / ts
    write_outputs(cfg, solver, policies, out_dir)

    print(f"Model: {cfg.name}")
    print(f"|S|={len(cfg.states)} |A|={len(cfg.actions)} |O|={len(cfg.observations)}")
    print(f"Sweeps per objective: {solver.updates}, belief points: {len(solver.beliefs)}")
    for name, policy in zip(cfg.objective_names, policies):
        print(f"{name}: {len(policy)} alpha vectors")
    print(f"Outputs: {out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
