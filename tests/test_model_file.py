from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import yaml
from pydantic import ValidationError

from lexpomdp.pomdp import (
    LPBVI,
    build_model,
    check_model,
    lexicographic_policy,
    load_model,
    rollout,
    summarize_policies,
    SASRewards,
)


MODEL_PATH = Path(__file__).parent.parent / "models" / "autonomy_handoff.yaml"


def test_load_model_file():
    cfg = load_model(str(MODEL_PATH))

    assert cfg.name == "autonomy_handoff"
    assert cfg.objective_names == ["safety", "travel_time"]
    assert cfg.solver.expansion_rule == "greedy_error_reduction"
    assert cfg.horizon is None

    lpomdp, beliefs = build_model(cfg)
    model = check_model(lpomdp)
    assert model.T.shape == (2, 4, 4)
    assert model.R.shape == (2, 2, 4)
    assert len(beliefs) == 3
    assert np.allclose(beliefs[0], [0.5, 0.5, 0.0, 0.0])


def test_missing_model_file():
    with pytest.raises(FileNotFoundError):
        load_model("models/does_not_exist.yaml")


def test_invalid_expansion_rule_rejected(tmp_path):
    data = yaml.safe_load(MODEL_PATH.read_text())
    data["solver"]["expansion_rule"] = "teleport"
    path = tmp_path / "bad.yaml"
    path.write_text(yaml.safe_dump(data))

    with pytest.raises(ValidationError):
        load_model(str(path))


def test_sas_reward_section_builds_sas_rewards(tmp_path):
    data = yaml.safe_load(MODEL_PATH.read_text())
    data["rewards"][1] = {
        "name": "travel_time",
        "type": "sas",
        "values": {a: np.full((4, 4), -1.0).tolist() for a in data["actions"]},
    }
    path = tmp_path / "sas.yaml"
    path.write_text(yaml.safe_dump(data))

    lpomdp, _ = build_model(load_model(str(path)))
    assert isinstance(lpomdp.R.get(1), SASRewards)


def test_solve_handoff_model():
    """Smoke test: solve the example model and check the safety policy."""
    cfg = load_model(str(MODEL_PATH))
    lpomdp, beliefs = build_model(cfg)

    solver = LPBVI(
        expansion_rule=cfg.solver.expansion_rule,
        expansions=cfg.solver.expansions,
        epsilon=cfg.solver.epsilon,
        rng=np.random.default_rng(cfg.solver.seed),
    )
    solver.set_initial_beliefs(beliefs)
    policies = solver.solve(lpomdp)

    # safety range 10 and travel time range 2 at epsilon 0.1, gamma 0.95
    assert solver.updates == 90
    assert len(policies) == 2
    assert len(solver.beliefs) >= len(beliefs)

    for policy in policies:
        assert len(policy) > 0
        for alpha in policy:
            assert np.all(np.isfinite(alpha.values))

    tired = np.array([0.0, 1.0, 0.0, 0.0])
    assert policies[0].get_action(tired) == "engage_autonomy"

    df = summarize_policies(policies, solver.beliefs, cfg.states)
    assert len(df) == len(solver.beliefs)
    for col in ["belief_id", "belief_tired_road", "value_0", "action_0", "value_1", "action_1"]:
        assert col in df.columns, f"Summary must have column: {col}"

    result = rollout(
        lpomdp,
        lexicographic_policy(policies),
        beliefs[0],
        horizon=15,
        rng=np.random.default_rng(0),
    )
    assert len(result["action_history"]) == 15
    assert len(result["belief_history"]) == 16
    assert all(len(r) == 2 for r in result["reward_history"])
    assert all(np.isfinite(result["discounted_reward"]))
    for b in result["belief_history"]:
        assert np.isclose(b.sum(), 1.0)
