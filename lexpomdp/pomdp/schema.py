"""
Lexicographic POMDP schema definitions.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union
import numpy as np

from lexpomdp.pomdp.exceptions import (
    ActionError,
    ConfigurationError,
    HorizonError,
    ObservationError,
    ObservationTransitionError,
    RewardError,
    SlackError,
    StateError,
    StateTransitionError,
    UnsupportedHorizonError,
)

STOCHASTIC_ATOL = 1e-6


@dataclass
class Horizon:
    """
    Planning horizon.

    Attributes:
        discount: Discount factor gamma
        horizon: Number of stages, or None for an infinite horizon
    """
    discount: float = 0.95
    horizon: Optional[int] = None

    def is_finite(self) -> bool:
        return self.horizon is not None


@dataclass
class SARewards:
    """
    State-action reward for one objective.

    Attributes:
        R: Reward vectors R[a][s] = r(s, a), one |S| vector per action
    """
    R: Dict[str, np.ndarray]

    def get(self, s: int, action: str, s_next: Optional[int] = None) -> float:
        return float(self.R[action][s])

    def reward_range(self, actions: Optional[Sequence[str]] = None) -> Tuple[float, float]:
        """(min, max) reward over the given actions, or over every entry of R."""
        vectors = list(self.R.values()) if actions is None else [self.R[a] for a in actions]
        return float(min(np.min(r) for r in vectors)), float(max(np.max(r) for r in vectors))

    @property
    def min(self) -> float:
        return self.reward_range()[0]

    @property
    def max(self) -> float:
        return self.reward_range()[1]


@dataclass
class SASRewards:
    """
    State-action-state reward for one objective.

    Attributes:
        R: Reward matrices R[a][s, s'] = reward for transition s -> s' under a
    """
    R: Dict[str, np.ndarray]

    def get(self, s: int, action: str, s_next: Optional[int] = None) -> float:
        if s_next is None:
            raise ValueError("SASRewards.get requires the successor state")
        return float(self.R[action][s, s_next])

    @property
    def min(self) -> float:
        return float(min(np.min(r) for r in self.R.values()))

    @property
    def max(self) -> float:
        return float(max(np.max(r) for r in self.R.values()))


Rewards = Union[SARewards, SASRewards]


@dataclass
class FactoredRewards:
    """Ordered per-objective rewards; index 0 has the highest priority."""
    rewards: List[Rewards] = field(default_factory=list)

    def get(self, i: int) -> Rewards:
        return self.rewards[i]

    def get_num_rewards(self) -> int:
        return len(self.rewards)

    def __len__(self) -> int:
        return len(self.rewards)

    def __iter__(self):
        return iter(self.rewards)


@dataclass
class LPOMDP:
    """
    Partially Observable Markov Decision Process with lexicographic rewards.

    Components may be left as None; the solver reports the missing piece
    when it checks the model (see check_model).

    Attributes:
        S: List of state labels
        A: List of action labels
        O: List of observation labels
        T: Transition probabilities T[a][s, s'] = P(s' | s, a)
        Z: Observation probabilities Z[a][s', o] = P(o | s', a)
        R: Factored rewards, one per objective in priority order
        horizon: Discount factor and horizon length
        slack: Per-objective slack, one non-negative value per objective
    """
    S: Optional[List[str]] = None
    A: Optional[List[str]] = None
    O: Optional[List[str]] = None
    T: Optional[Dict[str, np.ndarray]] = None
    Z: Optional[Dict[str, np.ndarray]] = None
    R: Optional[FactoredRewards] = None
    horizon: Optional[Horizon] = None
    slack: List[float] = field(default_factory=list)

    def set_slack(self, *deltas: float) -> None:
        """Set the slack for each objective, in priority order."""
        self.slack = [float(d) for d in deltas]

    def get_slack(self) -> List[float]:
        return self.slack

    @property
    def num_objectives(self) -> int:
        if not isinstance(self.R, FactoredRewards):
            return 0
        return self.R.get_num_rewards()


@dataclass(frozen=True)
class FiniteLPOMDP:
    """
    Checked, array-backed view of an LPOMDP used by the solver.

    Attributes:
        states, actions, observations: Label tuples in enumeration order
        T: Transition tensor, shape (|A|, |S|, |S|)
        Z: Observation tensor, shape (|A|, |S|, |O|)
        R: Reward tensor, shape (k, |A|, |S|) with R[i, a, s] = r_i(s, a)
        discount: Discount factor in (0, 1)
        slack: Per-objective slack
    """
    states: Tuple[str, ...]
    actions: Tuple[str, ...]
    observations: Tuple[str, ...]
    T: np.ndarray
    Z: np.ndarray
    R: np.ndarray
    discount: float
    slack: Tuple[float, ...]

    @property
    def n_states(self) -> int:
        return len(self.states)

    @property
    def n_actions(self) -> int:
        return len(self.actions)

    @property
    def n_observations(self) -> int:
        return len(self.observations)

    @property
    def n_objectives(self) -> int:
        return self.R.shape[0]


def _check_labels(labels, kind: str, error) -> Tuple[str, ...]:
    if labels is None:
        raise error(f"Missing {kind}")
    if isinstance(labels, (str, bytes)) or not isinstance(labels, Sequence):
        raise error(f"{kind.capitalize()} must be a finite sequence of labels, got {type(labels).__name__}")
    if len(labels) == 0:
        raise error(f"{kind.capitalize()} must not be empty")
    if len(set(labels)) != len(labels):
        raise error(f"{kind.capitalize()} contain duplicate labels")
    return tuple(labels)


def _check_stochastic(
    matrices, actions: Tuple[str, ...], shape: Tuple[int, int], name: str, error
) -> np.ndarray:
    if matrices is None:
        raise error(f"Missing {name} model")
    stacked = []
    for a in actions:
        if a not in matrices:
            raise error(f"Missing {name} matrix for action {a}")
        m = np.asarray(matrices[a], dtype=float)
        if m.shape != shape:
            raise error(f"{name}[{a}] has shape {m.shape}, expected {shape}")
        if np.any(m < 0):
            raise error(f"{name}[{a}] contains negative probabilities")
        if not np.allclose(m.sum(axis=1), 1.0, atol=STOCHASTIC_ATOL):
            raise error(f"{name}[{a}] rows do not sum to 1")
        stacked.append(m / m.sum(axis=1, keepdims=True))
    return np.stack(stacked)


def check_rewards(rewards, actions: Sequence[str], n_states: Optional[int] = None) -> np.ndarray:
    """
    Check that rewards are factored flat state-action rewards.

    Args:
        rewards: Reward model to check
        actions: Action labels, in enumeration order
        n_states: Expected reward vector length (skipped if None)

    Returns:
        Reward tensor of shape (k, |A|, |S|)
    """
    if not isinstance(rewards, FactoredRewards):
        raise RewardError(f"Rewards must be FactoredRewards, got {type(rewards).__name__}")
    if rewards.get_num_rewards() == 0:
        raise RewardError("FactoredRewards has no objectives")

    tensors = []
    for i, Ri in enumerate(rewards):
        if not isinstance(Ri, SARewards):
            raise RewardError(f"Objective {i} is {type(Ri).__name__}, expected SARewards")
        rows = []
        for a in actions:
            if a not in Ri.R:
                raise RewardError(f"Objective {i} has no reward vector for action {a}")
            r = np.asarray(Ri.R[a], dtype=float)
            if r.ndim != 1 or (n_states is not None and r.shape[0] != n_states):
                raise RewardError(f"R{i}[{a}] has shape {r.shape}, expected ({n_states},)")
            if not np.all(np.isfinite(r)):
                raise RewardError(f"R{i}[{a}] contains non-finite values")
            rows.append(r)
        tensors.append(np.stack(rows))
    return np.stack(tensors)


def check_slack(slack, num_objectives: int) -> Tuple[float, ...]:
    if slack is None or len(slack) != num_objectives:
        got = 0 if slack is None else len(slack)
        raise SlackError(f"Slack has {got} entries, expected one per objective ({num_objectives})")
    for i, d in enumerate(slack):
        if not d >= 0.0:
            raise SlackError(f"Slack for objective {i} must be a non-negative number, got {d}")
    return tuple(float(d) for d in slack)


def check_horizon(horizon) -> float:
    if not isinstance(horizon, Horizon):
        raise HorizonError("Missing horizon")
    if horizon.is_finite():
        raise UnsupportedHorizonError(
            f"Finite horizon ({horizon.horizon}) is not supported; only infinite horizons are solved"
        )
    if not 0.0 < horizon.discount < 1.0:
        raise ConfigurationError(f"Discount factor must be in (0, 1), got {horizon.discount}")
    return float(horizon.discount)


def check_model(lpomdp: LPOMDP) -> FiniteLPOMDP:
    """
    Check every model component once and build the solver's array view.

    Checks run in a fixed order (states, actions, observations, transitions,
    observation probabilities, rewards, slack, horizon) and raise the error
    matching the first problem found.

    Args:
        lpomdp: Model to check

    Returns:
        FiniteLPOMDP backed by stacked numpy arrays
    """
    S = _check_labels(lpomdp.S, "states", StateError)
    A = _check_labels(lpomdp.A, "actions", ActionError)
    O = _check_labels(lpomdp.O, "observations", ObservationError)

    n_states = len(S)
    T = _check_stochastic(lpomdp.T, A, (n_states, n_states), "T", StateTransitionError)
    Z = _check_stochastic(lpomdp.Z, A, (n_states, len(O)), "Z", ObservationTransitionError)

    R = check_rewards(lpomdp.R, A, n_states)
    slack = check_slack(lpomdp.slack, R.shape[0])
    discount = check_horizon(lpomdp.horizon)

    return FiniteLPOMDP(
        states=S,
        actions=A,
        observations=O,
        T=T,
        Z=Z,
        R=R,
        discount=discount,
        slack=slack,
    )
