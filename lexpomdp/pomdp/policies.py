"""
Alpha vectors, value functions, and policy functions for LPOMDPs.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence
import numpy as np

from lexpomdp.pomdp.schema import FiniteLPOMDP
from lexpomdp.utils.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass
class AlphaVector:
    """
    Linear value function over states for one plan.

    Attributes:
        values: Expected return per state, shape (|S|,)
        action: Action label the plan starts with (None for the zero vector)
    """
    values: np.ndarray
    action: Optional[str] = None

    @classmethod
    def zeros(cls, n_states: int) -> "AlphaVector":
        return cls(np.zeros(n_states))

    def compute_value(self, belief: np.ndarray) -> float:
        """Expected value of this plan under belief: sum_s alpha(s) b(s)."""
        return float(np.dot(self.values, belief))

    def __add__(self, other: "AlphaVector") -> "AlphaVector":
        return AlphaVector(self.values + other.values, self.action or other.action)


class PolicyAlphaVectors:
    """
    Value function for one objective, represented as a set of alpha vectors.

    The value at a belief is the max over vectors; the policy's action is the
    action of the maximizing vector (first one on ties).
    """

    def __init__(self, alphas: Optional[Sequence[AlphaVector]] = None):
        self._alphas: List[AlphaVector] = list(alphas) if alphas is not None else []

    def set(self, alphas: List[AlphaVector]) -> None:
        """Take ownership of alphas, replacing any previous vectors."""
        self._alphas = alphas

    def best(self, belief: np.ndarray) -> AlphaVector:
        if not self._alphas:
            raise ValueError("Policy has no alpha vectors")
        values = self.as_array() @ belief
        return self._alphas[int(np.argmax(values))]

    def compute_value(self, belief: np.ndarray) -> float:
        return self.best(belief).compute_value(belief)

    def get_action(self, belief: np.ndarray) -> Optional[str]:
        return self.best(belief).action

    def as_array(self) -> np.ndarray:
        return np.vstack([alpha.values for alpha in self._alphas])

    def to_dict(self) -> List[dict]:
        return [
            {"action": alpha.action, "values": alpha.values.tolist()}
            for alpha in self._alphas
        ]

    def __len__(self) -> int:
        return len(self._alphas)

    def __iter__(self) -> Iterator[AlphaVector]:
        return iter(self._alphas)

    def __getitem__(self, i: int) -> AlphaVector:
        return self._alphas[i]


def lexicographic_policy(
    policies: Sequence[PolicyAlphaVectors],
) -> Callable[[np.ndarray], str]:
    """
    Policy function that consults the value functions in priority order.

    Lower-priority value functions are not used to break or restrict the
    choice, so the action is the highest-priority value function's action.

    Args:
        policies: One value function per objective, index 0 first

    Returns:
        Function mapping a belief vector to an action label
    """
    if len(policies) == 0:
        raise ValueError("At least one value function is required")

    def policy_fn(belief: np.ndarray) -> str:
        for policy in policies:
            if len(policy) > 0:
                action = policy.get_action(belief)
                if action is not None:
                    return action
        raise ValueError("No value function proposes an action for this belief")

    return policy_fn


def policy_myopic(
    model: FiniteLPOMDP,
    belief: np.ndarray,
    objective: int = 0,
) -> str:
    """
    Myopic policy: choose action maximizing expected immediate reward.

    E[R_i | b, a] = sum_s b[s] * R_i[a][s]

    Args:
        model: Checked LPOMDP
        belief: Current belief vector
        objective: Objective index whose reward is maximized

    Returns:
        Action label
    """
    expected_rewards = model.R[objective] @ belief
    return model.actions[int(np.argmax(expected_rewards))]
