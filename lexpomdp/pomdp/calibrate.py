"""
Number of value iteration sweeps needed for a target error.
"""

import math
from typing import Optional, Sequence

from lexpomdp.pomdp.exceptions import ConfigurationError, HorizonError, RewardError
from lexpomdp.pomdp.schema import FactoredRewards, Horizon, SARewards
from lexpomdp.utils.logging_utils import get_logger

logger = get_logger(__name__)

MIN_REWARD_RANGE = 1e-6


def sweeps_for_objective(r_min: float, r_max: float, discount: float, epsilon: float) -> int:
    """
    Smallest N with discount^N * (r_max - r_min) <= epsilon.

    A reward range below MIN_REWARD_RANGE is replaced by MIN_REWARD_RANGE.
    """
    reward_range = max(r_max - r_min, MIN_REWARD_RANGE)
    n = math.ceil((math.log(epsilon) - math.log(reward_range)) / math.log(discount))
    return max(0, n)


def compute_num_update_iterations(
    rewards: FactoredRewards,
    horizon: Horizon,
    epsilon: float,
    actions: Optional[Sequence[str]] = None,
) -> int:
    """
    Sweep count that bounds every objective's approximation error by epsilon.

    Args:
        rewards: Factored state-action rewards
        horizon: Horizon holding the discount factor
        epsilon: Target approximation error
        actions: Declared actions; reward entries for other keys are ignored.
            All entries are used when omitted.

    Returns:
        Maximum over objectives of the per-objective sweep count
    """
    if horizon is None:
        raise HorizonError("Missing horizon")
    if not 0.0 < horizon.discount < 1.0:
        raise ConfigurationError(f"Discount factor must be in (0, 1), got {horizon.discount}")
    if epsilon <= 0.0:
        raise ConfigurationError(f"Epsilon must be positive, got {epsilon}")

    if not isinstance(rewards, FactoredRewards) or len(rewards) == 0:
        raise RewardError("Rewards must be FactoredRewards with at least one objective")
    for i, Ri in enumerate(rewards):
        if not isinstance(Ri, SARewards):
            raise RewardError(f"Objective {i} is {type(Ri).__name__}, expected SARewards")
        if actions is not None:
            missing = [a for a in actions if a not in Ri.R]
            if missing:
                raise RewardError(f"Objective {i} has no rewards for actions {missing}")

    updates = 0
    for i, Ri in enumerate(rewards):
        r_min, r_max = Ri.reward_range(actions)
        n = sweeps_for_objective(r_min, r_max, horizon.discount, epsilon)
        logger.debug(f"Objective {i}: reward range [{r_min}, {r_max}] needs {n} sweeps")
        updates = max(updates, n)

    return updates
