"""
Belief states, the belief point set, and belief updates.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Sequence
import numpy as np

from lexpomdp.pomdp.schema import LPOMDP
from lexpomdp.utils.logging_utils import get_logger

logger = get_logger(__name__)

BELIEF_ATOL = 1e-6


def uniform_belief(n_states: int) -> np.ndarray:
    return np.ones(n_states) / n_states


def belief_from_mapping(states: Sequence[str], mapping: Dict[str, float]) -> np.ndarray:
    """
    Build a dense belief vector from a sparse {state: probability} mapping.

    Args:
        states: State labels, in enumeration order
        mapping: Probability per state; states not listed get zero

    Returns:
        Belief vector (|S|,)
    """
    index = {s: i for i, s in enumerate(states)}
    belief = np.zeros(len(states))
    for s, p in mapping.items():
        if s not in index:
            raise ValueError(f"State {s} not in POMDP states")
        belief[index[s]] = p
    return check_belief(belief, len(states))


def check_belief(belief, n_states: Optional[int] = None) -> np.ndarray:
    """Return a float copy of belief after checking it is a distribution."""
    b = np.array(belief, dtype=float)
    if b.ndim != 1:
        raise ValueError(f"Belief must be one-dimensional, got shape {b.shape}")
    if n_states is not None and b.shape[0] != n_states:
        raise ValueError(f"Belief has {b.shape[0]} entries, expected {n_states}")
    if np.any(b < 0) or not np.all(np.isfinite(b)):
        raise ValueError("Belief must contain finite, non-negative probabilities")
    if not np.isclose(b.sum(), 1.0, atol=BELIEF_ATOL):
        raise ValueError(f"Belief sums to {b.sum():.6f}, expected 1")
    return b / b.sum()


def bayes_update(
    T_a: np.ndarray,
    Z_a: np.ndarray,
    belief: np.ndarray,
    o_idx: int,
) -> Optional[np.ndarray]:
    """
    Bayes filter step b' ∝ Z[a][:,o] * (T[a].T @ b).

    Returns:
        Normalized successor belief, or None when the observation has
        (near) zero probability under belief and action
    """
    predicted_belief = T_a.T @ belief
    new_belief = Z_a[:, o_idx] * predicted_belief

    norm = new_belief.sum()
    if norm < 1e-10:
        return None

    new_belief = np.maximum(new_belief / norm, 0.0)
    return new_belief / new_belief.sum()


def observation_probabilities(T_a: np.ndarray, Z_a: np.ndarray, belief: np.ndarray) -> np.ndarray:
    """P(o | b, a) for every observation o."""
    return (T_a.T @ belief) @ Z_a


def belief_update(
    pomdp: LPOMDP,
    belief: np.ndarray,
    action: str,
    observation: str,
) -> np.ndarray:
    """
    Update belief state: b' ∝ Z[a][:,o] * (T[a].T @ b)

    Args:
        pomdp: LPOMDP model
        belief: Current belief vector (|S|,)
        action: Action taken
        observation: Observation received

    Returns:
        Updated belief vector (normalized)
    """
    if action not in pomdp.A:
        raise ValueError(f"Action {action} not in POMDP actions")

    if observation not in pomdp.O:
        logger.warning(f"Observation {observation} not in POMDP observations, using uniform")
        return uniform_belief(len(pomdp.S))

    o_idx = pomdp.O.index(observation)
    new_belief = bayes_update(
        np.asarray(pomdp.T[action]), np.asarray(pomdp.Z[action]), belief, o_idx
    )

    if new_belief is None:
        logger.warning("Belief update resulted in near-zero probability, using uniform")
        return uniform_belief(len(pomdp.S))

    return new_belief


class BeliefPointSet:
    """
    Growable set of belief points sampled from the belief simplex.

    Points are copied on insertion and never removed, so the set only grows
    over the lifetime of one solve.
    """

    def __init__(self, n_states: int, beliefs: Optional[Iterable[np.ndarray]] = None):
        self.n_states = n_states
        self._points: List[np.ndarray] = []
        if beliefs is not None:
            self.extend(beliefs)

    def add(self, belief: np.ndarray) -> None:
        self._points.append(check_belief(belief, self.n_states))

    def extend(self, beliefs: Iterable[np.ndarray]) -> None:
        for b in beliefs:
            self.add(b)

    def contains(self, belief: np.ndarray, atol: float = 1e-9) -> bool:
        return any(np.allclose(p, belief, atol=atol) for p in self._points)

    def distance(self, belief: np.ndarray) -> float:
        """L1 distance from belief to the nearest point in the set."""
        if not self._points:
            return float("inf")
        return float(np.min(np.abs(self.as_array() - belief).sum(axis=1)))

    def as_array(self) -> np.ndarray:
        """Belief points stacked into an (n, |S|) matrix."""
        if not self._points:
            return np.zeros((0, self.n_states))
        return np.vstack(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._points)

    def __getitem__(self, i: int) -> np.ndarray:
        return self._points[i]
