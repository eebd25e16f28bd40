from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from lexpomdp.pomdp import load_model, ConfigurationError, SlackError
from scripts.solve_lpomdp import solve_model, write_outputs


MODEL_PATH = Path(__file__).parent.parent / "models" / "autonomy_handoff.yaml"


def test_solve_script_writes_outputs(tmp_path):
    """Smoke test: solve the example model and verify written artifacts."""
    cfg = load_model(str(MODEL_PATH))
    solver, policies = solve_model(cfg, expansion_rule="none")

    write_outputs(cfg, solver, policies, tmp_path)

    vf_path = tmp_path / "value_functions.json"
    csv_path = tmp_path / "belief_values.csv"
    assert vf_path.exists(), "value_functions.json must be written"
    assert csv_path.exists(), "belief_values.csv must be written"

    data = json.loads(vf_path.read_text())
    assert data["model"] == "autonomy_handoff"
    assert [o["name"] for o in data["objectives"]] == ["safety", "travel_time"]
    for objective in data["objectives"]:
        # no expansion: one vector per seed belief
        assert len(objective["alpha_vectors"]) == 3
        for alpha in objective["alpha_vectors"]:
            assert alpha["action"] in cfg.actions
            assert len(alpha["values"]) == len(cfg.states)

    df = pd.read_csv(csv_path)
    assert len(df) == 3
    assert df["value_0"].notna().all()
    assert (df["value_0"] <= 0.0).all(), "Safety rewards are non-positive"


def test_solve_script_reports_bad_slack():
    cfg = load_model(str(MODEL_PATH))
    cfg.slack = [0.5]
    with pytest.raises(SlackError):
        solve_model(cfg, expansion_rule="none")


@pytest.mark.parametrize("overrides", [{"expansions": 0}, {"epsilon": 0.0}])
def test_explicit_zero_overrides_are_not_ignored(overrides):
    """A zero passed on the command line reaches the solver instead of the file value."""
    cfg = load_model(str(MODEL_PATH))
    with pytest.raises(ConfigurationError):
        solve_model(cfg, expansion_rule="none", **overrides)
