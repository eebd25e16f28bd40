"""
Lexicographic POMDP module: model schema, L-PBVI solver and rollouts.
"""

from lexpomdp.pomdp.schema import (
    LPOMDP,
    FiniteLPOMDP,
    Horizon,
    SARewards,
    SASRewards,
    FactoredRewards,
    check_model,
)
from lexpomdp.pomdp.exceptions import (
    LPOMDPError,
    ModelShapeError,
    ConfigurationError,
    StateError,
    ActionError,
    ObservationError,
    StateTransitionError,
    ObservationTransitionError,
    RewardError,
    HorizonError,
    SlackError,
    UnsupportedHorizonError,
    ExpansionRuleError,
)
from lexpomdp.pomdp.belief import BeliefPointSet, belief_update, belief_from_mapping
from lexpomdp.pomdp.policies import AlphaVector, PolicyAlphaVectors, lexicographic_policy, policy_myopic
from lexpomdp.pomdp.calibrate import compute_num_update_iterations
from lexpomdp.pomdp.expansion import ExpansionRule, BeliefExpansion, get_expansion_strategy
from lexpomdp.pomdp.lpbvi import LPBVI
from lexpomdp.pomdp.simulate import rollout, summarize_policies
from lexpomdp.pomdp.config_schema import ModelConfig, SolverConfig, load_model, build_model

__all__ = [
    "LPOMDP",
    "FiniteLPOMDP",
    "Horizon",
    "SARewards",
    "SASRewards",
    "FactoredRewards",
    "check_model",
    "LPOMDPError",
    "ModelShapeError",
    "ConfigurationError",
    "StateError",
    "ActionError",
    "ObservationError",
    "StateTransitionError",
    "ObservationTransitionError",
    "RewardError",
    "HorizonError",
    "SlackError",
    "UnsupportedHorizonError",
    "ExpansionRuleError",
    "BeliefPointSet",
    "belief_update",
    "belief_from_mapping",
    "AlphaVector",
    "PolicyAlphaVectors",
    "lexicographic_policy",
    "policy_myopic",
    "compute_num_update_iterations",
    "ExpansionRule",
    "BeliefExpansion",
    "get_expansion_strategy",
    "LPBVI",
    "rollout",
    "summarize_policies",
    "ModelConfig",
    "SolverConfig",
    "load_model",
    "build_model",
]
