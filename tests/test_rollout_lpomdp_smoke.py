from __future__ import annotations

import json
import math
from pathlib import Path

import numpy as np

from lexpomdp.pomdp import load_model
from scripts.rollout_lpomdp import main, rollout_summary
from scripts.solve_lpomdp import solve_model


MODEL_PATH = Path(__file__).parent.parent / "models" / "autonomy_handoff.yaml"


def test_rollout_summary_covers_both_policies():
    """Smoke test: roll out the solved example model against the myopic baseline."""
    cfg = load_model(str(MODEL_PATH))
    _, policies = solve_model(cfg, expansion_rule="none")

    summary = rollout_summary(cfg, policies, horizon=10, episodes=5, rng=np.random.default_rng(0))

    assert set(summary) == {"lpbvi", "myopic"}
    for name, per_objective in summary.items():
        assert list(per_objective) == ["safety", "travel_time"], name
        for stats in per_objective.values():
            assert math.isfinite(stats["mean"])
            assert stats["std"] >= 0.0
        assert per_objective["safety"]["mean"] <= 0.0, "Safety rewards are non-positive"


def test_rollout_summary_is_reproducible_for_a_seed():
    cfg = load_model(str(MODEL_PATH))
    _, policies = solve_model(cfg, expansion_rule="none")

    first = rollout_summary(cfg, policies, horizon=8, episodes=3, rng=np.random.default_rng(11))
    second = rollout_summary(cfg, policies, horizon=8, episodes=3, rng=np.random.default_rng(11))
    assert first == second


def test_rollout_script_writes_summary(tmp_path, monkeypatch):
    out_path = tmp_path / "rollouts" / "summary.json"
    monkeypatch.setattr(
        "sys.argv",
        ["rollout_lpomdp", "--model", str(MODEL_PATH), "--horizon", "5",
         "--episodes", "2", "--seed", "3", "--out", str(out_path)],
    )

    assert main() == 0
    assert out_path.exists(), "summary JSON must be written"
    data = json.loads(out_path.read_text())
    assert set(data) == {"lpbvi", "myopic"}
    assert set(data["lpbvi"]) == {"safety", "travel_time"}
