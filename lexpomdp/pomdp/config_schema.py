"""Schema validation for LPOMDP model files."""

from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple

import numpy as np
import yaml
from pydantic import BaseModel, Field, field_validator

from lexpomdp.config import Config
from lexpomdp.pomdp.belief import belief_from_mapping
from lexpomdp.pomdp.expansion import ExpansionRule
from lexpomdp.pomdp.schema import LPOMDP, FactoredRewards, Horizon, SARewards, SASRewards


class RewardConfig(BaseModel):
    """One objective's reward function."""
    name: str = Field(..., description="Objective name, e.g. safety")
    type: Literal["sa", "sas"] = Field(default="sa", description="State-action or state-action-state reward")
    values: Dict[str, list] = Field(..., description="Reward vector (sa) or matrix (sas) per action")


class SolverConfig(BaseModel):
    """L-PBVI solver settings."""
    epsilon: float = Field(default_factory=lambda: Config.LPBVI_EPSILON, gt=0, description="Target approximation error")
    expansions: int = Field(default_factory=lambda: Config.LPBVI_EXPANSIONS, ge=1, description="Maximum expansion rounds")
    expansion_rule: str = Field(default_factory=lambda: Config.LPBVI_EXPANSION_RULE, description="Belief expansion heuristic")
    seed: int = Field(default_factory=lambda: Config.DEFAULT_RANDOM_SEED, description="Random seed for expansion")

    @field_validator("expansion_rule")
    @classmethod
    def validate_expansion_rule(cls, v: str) -> str:
        """Expansion rule must name a known heuristic."""
        known = [rule.value for rule in ExpansionRule]
        if v.lower() not in known:
            raise ValueError(f"Unknown expansion_rule: {v}. Expected one of {known}.")
        return v.lower()


class ModelConfig(BaseModel):
    """Schema for LPOMDP model files."""

    name: str = Field(default="lpomdp", description="Model name")
    description: Optional[str] = Field(default=None, description="Model description")

    states: List[str] = Field(..., description="State labels")
    actions: List[str] = Field(..., description="Action labels")
    observations: List[str] = Field(..., description="Observation labels")
    transitions: Dict[str, List[List[float]]] = Field(..., description="T[a][s][s'] = P(s' | s, a)")
    observation_probs: Dict[str, List[List[float]]] = Field(..., description="Z[a][s'][o] = P(o | s', a)")
    rewards: List[RewardConfig] = Field(..., description="Objectives in priority order")

    discount: float = Field(default=0.95, description="Discount factor")
    horizon: Optional[int] = Field(default=None, description="Horizon length (null for infinite)")
    slack: List[float] = Field(default_factory=list, description="Slack per objective")
    initial_beliefs: List[Dict[str, float]] = Field(default_factory=list, description="Seed beliefs as {state: prob}")

    solver: SolverConfig = Field(default_factory=SolverConfig, description="Solver settings")

    @property
    def objective_names(self) -> List[str]:
        return [r.name for r in self.rewards]

    def to_lpomdp(self) -> LPOMDP:
        """Build the LPOMDP described by this file; shape checks happen at solve time."""
        rewards = []
        for r in self.rewards:
            values = {a: np.array(v, dtype=float) for a, v in r.values.items()}
            rewards.append(SARewards(values) if r.type == "sa" else SASRewards(values))

        return LPOMDP(
            S=list(self.states),
            A=list(self.actions),
            O=list(self.observations),
            T={a: np.array(m, dtype=float) for a, m in self.transitions.items()},
            Z={a: np.array(m, dtype=float) for a, m in self.observation_probs.items()},
            R=FactoredRewards(rewards),
            horizon=Horizon(discount=self.discount, horizon=self.horizon),
            slack=list(self.slack),
        )

    def initial_belief_vectors(self) -> List[np.ndarray]:
        return [belief_from_mapping(self.states, b) for b in self.initial_beliefs]


def load_model(path: str) -> ModelConfig:
    """Load and validate an LPOMDP model from a YAML file."""
    model_path = Path(path)
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")

    with open(model_path, "r") as f:
        data = yaml.safe_load(f)

    return ModelConfig(**data)


def build_model(cfg: ModelConfig) -> Tuple[LPOMDP, List[np.ndarray]]:
    """LPOMDP and seed beliefs for a loaded model file."""
    return cfg.to_lpomdp(), cfg.initial_belief_vectors()
