"""
Belief point set expansion strategies for point-based value iteration.

Each strategy grows the belief point set between solver rounds. New points
are collected while scanning the current set and appended afterwards.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Union

import numpy as np

from lexpomdp.pomdp.belief import BeliefPointSet, bayes_update, observation_probabilities
from lexpomdp.pomdp.exceptions import ExpansionRuleError
from lexpomdp.pomdp.schema import FiniteLPOMDP
from lexpomdp.utils.logging_utils import get_logger

logger = get_logger(__name__)


class ExpansionRule(Enum):
    """Belief expansion heuristics."""
    NONE = "none"
    RANDOM_BELIEF_SELECTION = "random_belief_selection"
    STOCHASTIC_SIMULATION_RANDOM_ACTION = "stochastic_simulation_random_action"
    STOCHASTIC_SIMULATION_EXPLORATORY_ACTION = "stochastic_simulation_exploratory_action"
    GREEDY_ERROR_REDUCTION = "greedy_error_reduction"


class BeliefExpansion(ABC):
    """Interface for belief expansion heuristics."""

    rule: ExpansionRule

    @abstractmethod
    def expand(
        self,
        beliefs: BeliefPointSet,
        model: FiniteLPOMDP,
        rng: np.random.Generator,
    ) -> None:
        """Add new points to beliefs in place."""

    @staticmethod
    def _add_new(beliefs: BeliefPointSet, candidates: List[np.ndarray]) -> int:
        added = 0
        for b in candidates:
            if not beliefs.contains(b):
                beliefs.add(b)
                added += 1
        return added


def _simulate_successor(
    model: FiniteLPOMDP,
    belief: np.ndarray,
    a_idx: int,
    rng: np.random.Generator,
) -> Optional[np.ndarray]:
    """Sample s ~ b, s' ~ T, o ~ Z and return the updated belief."""
    s = rng.choice(model.n_states, p=belief)
    s_next = rng.choice(model.n_states, p=model.T[a_idx, s])
    o = rng.choice(model.n_observations, p=model.Z[a_idx, s_next])
    return bayes_update(model.T[a_idx], model.Z[a_idx], belief, o)


class NoExpansion(BeliefExpansion):
    """Leaves the belief set unchanged; the solver stops after one round."""

    rule = ExpansionRule.NONE

    def expand(self, beliefs, model, rng):
        return None


class RandomBeliefSelection(BeliefExpansion):
    """Adds one belief drawn uniformly from the simplex per existing point."""

    rule = ExpansionRule.RANDOM_BELIEF_SELECTION

    def expand(self, beliefs, model, rng):
        candidates = [rng.dirichlet(np.ones(model.n_states)) for _ in range(len(beliefs))]
        added = self._add_new(beliefs, candidates)
        logger.info(f"Random belief selection added {added} points ({len(beliefs)} total)")


class StochasticSimulationRandomAction(BeliefExpansion):
    """Simulates one step from each point with a uniformly random action."""

    rule = ExpansionRule.STOCHASTIC_SIMULATION_RANDOM_ACTION

    def expand(self, beliefs, model, rng):
        candidates = []
        for b in beliefs:
            a_idx = rng.integers(model.n_actions)
            successor = _simulate_successor(model, b, a_idx, rng)
            if successor is not None:
                candidates.append(successor)
        added = self._add_new(beliefs, candidates)
        logger.info(f"Stochastic simulation (random action) added {added} points ({len(beliefs)} total)")


class StochasticSimulationExploratoryAction(BeliefExpansion):
    """
    Simulates one step per action from each point and keeps the successor
    farthest (L1) from the current set.
    """

    rule = ExpansionRule.STOCHASTIC_SIMULATION_EXPLORATORY_ACTION

    def expand(self, beliefs, model, rng):
        candidates = []
        for b in beliefs:
            farthest, farthest_dist = None, 0.0
            for a_idx in range(model.n_actions):
                successor = _simulate_successor(model, b, a_idx, rng)
                if successor is None:
                    continue
                dist = beliefs.distance(successor)
                if dist > farthest_dist:
                    farthest, farthest_dist = successor, dist
            if farthest is not None:
                candidates.append(farthest)
        added = self._add_new(beliefs, candidates)
        logger.info(f"Stochastic simulation (exploratory action) added {added} points ({len(beliefs)} total)")


class GreedyErrorReduction(BeliefExpansion):
    """
    For each point, picks the action whose exact successors are on average
    farthest from the set (weighted by P(o | b, a)) and adds that action's
    worst successor. The distance stands in for the point-based error bound.
    """

    rule = ExpansionRule.GREEDY_ERROR_REDUCTION

    def expand(self, beliefs, model, rng):
        candidates = []
        for b in beliefs:
            worst_error, worst_successor = 0.0, None
            for a_idx in range(model.n_actions):
                T_a, Z_a = model.T[a_idx], model.Z[a_idx]
                p_obs = observation_probabilities(T_a, Z_a, b)
                expected_error, action_worst, action_worst_error = 0.0, None, 0.0
                for o in range(model.n_observations):
                    successor = bayes_update(T_a, Z_a, b, o)
                    if successor is None:
                        continue
                    weighted = p_obs[o] * beliefs.distance(successor)
                    expected_error += weighted
                    if weighted > action_worst_error:
                        action_worst, action_worst_error = successor, weighted
                if expected_error > worst_error:
                    worst_error, worst_successor = expected_error, action_worst
            if worst_successor is not None:
                candidates.append(worst_successor)
        added = self._add_new(beliefs, candidates)
        logger.info(f"Greedy error reduction added {added} points ({len(beliefs)} total)")


EXPANSION_STRATEGIES: Dict[ExpansionRule, BeliefExpansion] = {
    strategy.rule: strategy
    for strategy in (
        NoExpansion(),
        RandomBeliefSelection(),
        StochasticSimulationRandomAction(),
        StochasticSimulationExploratoryAction(),
        GreedyErrorReduction(),
    )
}


def parse_expansion_rule(rule: Union[ExpansionRule, str]) -> ExpansionRule:
    """Convert a rule name (e.g. "greedy_error_reduction") to ExpansionRule."""
    if isinstance(rule, ExpansionRule):
        return rule
    try:
        return ExpansionRule(str(rule).lower())
    except ValueError:
        raise ExpansionRuleError(f"Unknown belief expansion rule: {rule}") from None


def get_expansion_strategy(rule: Union[ExpansionRule, str]) -> BeliefExpansion:
    """Look up the strategy for rule, raising ExpansionRuleError if unknown."""
    parsed = parse_expansion_rule(rule)
    if parsed not in EXPANSION_STRATEGIES:
        raise ExpansionRuleError(f"No strategy registered for expansion rule {parsed.value}")
    return EXPANSION_STRATEGIES[parsed]
