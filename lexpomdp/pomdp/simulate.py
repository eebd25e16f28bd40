"""
LPOMDP simulation, rollouts, and value function summaries.
"""

from typing import Any, Callable, Dict, Iterable, Optional, Sequence
import numpy as np
import pandas as pd

from lexpomdp.pomdp.belief import belief_update
from lexpomdp.pomdp.policies import PolicyAlphaVectors
from lexpomdp.pomdp.schema import LPOMDP
from lexpomdp.utils.logging_utils import get_logger

logger = get_logger(__name__)


def rollout(
    pomdp: LPOMDP,
    policy: Callable[[np.ndarray], str],
    start_belief: np.ndarray,
    horizon: int = 25,
    true_state: Optional[str] = None,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, Any]:
    """
    Simulate an LPOMDP rollout.

    Args:
        pomdp: LPOMDP model (rewards may be SA or SAS per objective)
        policy: Policy function that maps belief to action
        start_belief: Initial belief vector
        horizon: Number of steps to simulate
        true_state: True hidden state (if None, sample from belief)
        rng: Random number generator

    Returns:
        Dict with keys:
            - total_reward: Per-objective cumulative reward (list)
            - discounted_reward: Per-objective discounted reward (list)
            - belief_history: List of belief vectors
            - action_history: List of actions taken
            - observation_history: List of observations
            - state_history: List of true states
            - reward_history: List of per-objective step reward vectors
    """
    if rng is None:
        rng = np.random.default_rng(42)

    n_objectives = pomdp.num_objectives
    discount = pomdp.horizon.discount if pomdp.horizon is not None else 1.0

    belief = np.array(start_belief, dtype=float)
    if true_state is None:
        true_state_idx = rng.choice(len(pomdp.S), p=belief)
        true_state = pomdp.S[true_state_idx]
    else:
        true_state_idx = pomdp.S.index(true_state)

    belief_history = [belief.copy()]
    action_history = []
    observation_history = []
    state_history = [true_state]
    reward_history = []
    total_reward = np.zeros(n_objectives)
    discounted_reward = np.zeros(n_objectives)

    current_state_idx = true_state_idx

    for step in range(horizon):
        action = policy(belief)
        action_history.append(action)

        T_a = np.asarray(pomdp.T[action])
        next_state_idx = rng.choice(len(pomdp.S), p=T_a[current_state_idx, :])
        state_history.append(pomdp.S[next_state_idx])

        Z_a = np.asarray(pomdp.Z[action])
        obs_idx = rng.choice(len(pomdp.O), p=Z_a[next_state_idx, :])
        observation = pomdp.O[obs_idx]
        observation_history.append(observation)

        rewards = np.array([
            Ri.get(current_state_idx, action, next_state_idx) for Ri in pomdp.R
        ])
        reward_history.append(rewards)
        total_reward += rewards
        discounted_reward += (discount ** step) * rewards

        belief = belief_update(pomdp, belief, action, observation)
        belief_history.append(belief.copy())

        current_state_idx = next_state_idx

    logger.debug(f"Rollout of {horizon} steps: total reward {total_reward.tolist()}")

    return {
        "total_reward": total_reward.tolist(),
        "discounted_reward": discounted_reward.tolist(),
        "belief_history": belief_history,
        "action_history": action_history,
        "observation_history": observation_history,
        "state_history": state_history,
        "reward_history": reward_history,
    }


def summarize_policies(
    policies: Sequence[PolicyAlphaVectors],
    beliefs: Iterable[np.ndarray],
    states: Sequence[str],
) -> pd.DataFrame:
    """
    Tabulate each objective's value and action at each belief point.

    Returns:
        DataFrame with one row per belief: belief_<state> columns, then
        value_<i> and action_<i> for each objective i
    """
    rows = []
    for idx, belief in enumerate(beliefs):
        row: Dict[str, Any] = {"belief_id": idx}
        for s, p in zip(states, belief):
            row[f"belief_{s}"] = float(p)
        for i, policy in enumerate(policies):
            best = policy.best(belief)
            row[f"value_{i}"] = best.compute_value(belief)
            row[f"action_{i}"] = best.action
        rows.append(row)
    return pd.DataFrame(rows)
