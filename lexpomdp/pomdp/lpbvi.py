"""
Lexicographic point-based value iteration (L-PBVI).

Solves an infinite-horizon LPOMDP by running point-based value iteration
once per objective, in priority order, over a belief point set that grows
between rounds. The result is one value function per objective.
"""

from typing import Iterable, List, Optional, Sequence, Union
import numpy as np

from lexpomdp.config import Config
from lexpomdp.pomdp.backup import (
    GammaAStar,
    backup_belief_point,
    build_gamma_a_star_cache,
    project_gamma_all,
)
from lexpomdp.pomdp.belief import BeliefPointSet, uniform_belief
from lexpomdp.pomdp.calibrate import compute_num_update_iterations
from lexpomdp.pomdp.exceptions import ConfigurationError, ModelShapeError
from lexpomdp.pomdp.expansion import ExpansionRule, get_expansion_strategy
from lexpomdp.pomdp.policies import AlphaVector, PolicyAlphaVectors
from lexpomdp.pomdp.schema import LPOMDP, FiniteLPOMDP, check_model
from lexpomdp.utils.logging_utils import get_logger

logger = get_logger(__name__)


def zero_gamma(n_states: int, n_beliefs: int) -> List[AlphaVector]:
    """One zero alpha vector per belief point."""
    return [AlphaVector.zeros(n_states) for _ in range(n_beliefs)]


def bellman_sweep(
    model: FiniteLPOMDP,
    gamma_a_star: GammaAStar,
    previous: Sequence[AlphaVector],
    beliefs: Iterable[np.ndarray],
    actions: Sequence[str],
) -> List[AlphaVector]:
    """
    One synchronous backup of every belief point against previous.

    Args:
        model: Checked LPOMDP
        gamma_a_star: Cached Gamma_{a,*} for the objective being solved
        previous: Previous generation of alpha vectors (read only)
        beliefs: Belief points to back up
        actions: Actions available this round

    Returns:
        Next generation, one alpha vector per belief point
    """
    gamma = np.vstack([alpha.values for alpha in previous])
    projections = project_gamma_all(model, gamma, actions)
    return [
        backup_belief_point(model, gamma_a_star, projections, actions, belief)[0]
        for belief in beliefs
    ]


class LPBVI:
    """
    Lexicographic point-based value iteration solver.

    Attributes:
        expansion_rule: Belief expansion heuristic run after every round
        expansions: Maximum number of expansion rounds
        epsilon: Target approximation error used to calibrate sweeps
        updates: Sweeps per objective, set by compute_num_update_iterations
        policies: Value functions from the last solve, highest priority first
    """

    def __init__(
        self,
        expansion_rule: Union[ExpansionRule, str, None] = None,
        expansions: Optional[int] = None,
        epsilon: Optional[float] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.expansion_rule = expansion_rule if expansion_rule is not None else Config.LPBVI_EXPANSION_RULE
        self.expansions = expansions if expansions is not None else Config.LPBVI_EXPANSIONS
        if self.expansions < 1:
            raise ConfigurationError(f"Expansions must be at least 1, got {self.expansions}")

        self.epsilon = Config.LPBVI_EPSILON
        self.set_epsilon(epsilon if epsilon is not None else Config.LPBVI_EPSILON)

        if rng is None:
            rng = np.random.default_rng(Config.DEFAULT_RANDOM_SEED)
        self.rng = rng

        self.updates = 0
        self.initial_beliefs: List[np.ndarray] = []
        self.policies: List[PolicyAlphaVectors] = []
        self._beliefs: Optional[BeliefPointSet] = None

    def set_epsilon(self, epsilon: float) -> None:
        if epsilon <= 0.0:
            raise ConfigurationError(f"Epsilon must be positive, got {epsilon}")
        self.epsilon = float(epsilon)

    def set_initial_beliefs(self, beliefs: Iterable[np.ndarray]) -> None:
        """Seed beliefs for the next solve; copies are kept, not the originals."""
        self.initial_beliefs = [np.array(b, dtype=float) for b in beliefs]

    @property
    def beliefs(self) -> Optional[BeliefPointSet]:
        """Belief point set built by the last solve."""
        return self._beliefs

    def get_policy(self, i: int) -> PolicyAlphaVectors:
        """Value function of objective i (0 is the highest priority)."""
        return self.policies[i]

    def compute_num_update_iterations(self, lpomdp: LPOMDP, epsilon: Optional[float] = None) -> int:
        if epsilon is not None:
            self.set_epsilon(epsilon)
        self.updates = compute_num_update_iterations(
            lpomdp.R, lpomdp.horizon, self.epsilon, actions=lpomdp.A
        )
        return self.updates

    def solve(self, lpomdp: LPOMDP) -> List[PolicyAlphaVectors]:
        """
        Solve the LPOMDP.

        Args:
            lpomdp: Model with factored state-action rewards, slack and an
                infinite horizon

        Returns:
            One value function per objective, in priority order
        """
        if lpomdp is None:
            raise ModelShapeError("No model to solve")

        # Fails before anything is allocated
        model = check_model(lpomdp)
        self.compute_num_update_iterations(lpomdp)

        return self._solve_infinite_horizon(model)

    def _solve_infinite_horizon(self, model: FiniteLPOMDP) -> List[PolicyAlphaVectors]:
        seeds = self.initial_beliefs
        if not seeds:
            logger.info("No initial beliefs set, seeding with the uniform belief")
            seeds = [uniform_belief(model.n_states)]
        beliefs = BeliefPointSet(model.n_states, seeds)

        policies = [PolicyAlphaVectors() for _ in range(model.n_objectives)]
        self.policies = []
        self._beliefs = beliefs

        logger.info(
            f"Solving LPOMDP: |S|={model.n_states}, |A|={model.n_actions}, "
            f"|O|={model.n_observations}, k={model.n_objectives}, "
            f"{self.updates} sweeps per objective"
        )

        for e in range(self.expansions):
            # Every action is available to every objective; slack is not applied
            actions = list(model.actions)

            for i in range(model.n_objectives):
                gamma_a_star = build_gamma_a_star_cache(model, i, actions)

                gamma: List[List[AlphaVector]] = [[], []]
                current = 0
                gamma[1 - current] = zero_gamma(model.n_states, len(beliefs))

                for u in range(self.updates):
                    gamma[current] = bellman_sweep(
                        model, gamma_a_star, gamma[1 - current], beliefs, actions
                    )
                    current = 1 - current
                    gamma[current].clear()

                policies[i].set(gamma[1 - current])
                del gamma_a_star

                logger.info(
                    f"Round {e + 1}/{self.expansions}, objective {i}: "
                    f"{len(policies[i])} alpha vectors over {len(beliefs)} beliefs"
                )

            strategy = get_expansion_strategy(self.expansion_rule)
            strategy.expand(beliefs, model, self.rng)
            if strategy.rule == ExpansionRule.NONE:
                break

        self.policies = policies
        return policies
