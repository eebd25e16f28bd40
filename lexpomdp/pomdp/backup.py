"""
Point-based Bellman backups for a single objective.

The backup of action a at belief b is

    alpha_a(s) = R_i(s, a) + gamma * sum_o g_{a,o}^*(s)
    g_{a,o}(s) = sum_s' T[a][s, s'] Z[a][s', o] alpha'(s')

where g_{a,o}^* is the projection of the previous generation's vector
alpha' that scores highest at b. The reward term does not depend on b and
is cached once per round as Gamma_{a,*}.
"""

from typing import Dict, List, Sequence, Tuple
import numpy as np

from lexpomdp.pomdp.policies import AlphaVector
from lexpomdp.pomdp.schema import FiniteLPOMDP

GammaAStar = Dict[str, List[AlphaVector]]
Projections = Dict[str, np.ndarray]


def create_gamma_a_star(model: FiniteLPOMDP, objective: int, a_idx: int) -> AlphaVector:
    """Belief-independent part of action a's backup: R_i(., a)."""
    return AlphaVector(model.R[objective, a_idx].copy(), model.actions[a_idx])


def build_gamma_a_star_cache(
    model: FiniteLPOMDP, objective: int, actions: Sequence[str]
) -> GammaAStar:
    """Gamma_{a,*} for every action, for one objective and one round."""
    index = {a: i for i, a in enumerate(model.actions)}
    return {a: [create_gamma_a_star(model, objective, index[a])] for a in actions}


def project_gamma(model: FiniteLPOMDP, a_idx: int, gamma: np.ndarray) -> np.ndarray:
    """
    Project every vector of the previous generation through (a, o).

    Args:
        model: Checked LPOMDP
        a_idx: Action index
        gamma: Previous generation, shape (K, |S|)

    Returns:
        Array of shape (|O|, K, |S|) holding g_{a,o}^k(s)
    """
    return np.einsum("ij,jo,kj->oki", model.T[a_idx], model.Z[a_idx], gamma)


def project_gamma_all(
    model: FiniteLPOMDP, gamma: np.ndarray, actions: Sequence[str]
) -> Projections:
    """Projections of the previous generation for every action, once per sweep."""
    index = {a: i for i, a in enumerate(model.actions)}
    return {a: project_gamma(model, index[a], gamma) for a in actions}


def bellman_update_belief_state(
    model: FiniteLPOMDP,
    gamma_a_star: List[AlphaVector],
    projections: np.ndarray,
    a_idx: int,
    belief: np.ndarray,
) -> AlphaVector:
    """
    Back up action a at belief b.

    Args:
        model: Checked LPOMDP
        gamma_a_star: Cached Gamma_{a,*} vectors for this action
        projections: project_gamma output for this action, shape (|O|, K, |S|)
        a_idx: Action index
        belief: Belief point (|S|,)

    Returns:
        The backed-up alpha vector for a at b
    """
    base = max(gamma_a_star, key=lambda alpha: alpha.compute_value(belief))

    # argmax keeps the first maximizer per observation
    best = np.argmax(projections @ belief, axis=1)
    cross_sum = projections[np.arange(projections.shape[0]), best].sum(axis=0)

    return base + AlphaVector(model.discount * cross_sum, model.actions[a_idx])


def backup_belief_point(
    model: FiniteLPOMDP,
    gamma_a_star: GammaAStar,
    projections: Projections,
    actions: Sequence[str],
    belief: np.ndarray,
) -> Tuple[AlphaVector, float]:
    """
    Best backed-up alpha vector over actions at one belief point.

    The first action reaching the maximum wins; later ties do not replace it.

    Returns:
        Tuple of (winning alpha vector, its value at belief)
    """
    index = {a: i for i, a in enumerate(model.actions)}

    max_alpha = None
    max_value = 0.0
    for action in actions:
        alpha = bellman_update_belief_state(
            model, gamma_a_star[action], projections[action], index[action], belief
        )
        value = alpha.compute_value(belief)
        if max_alpha is None or value > max_value:
            max_alpha = alpha
            max_value = value

    if max_alpha is None:
        raise ValueError("Cannot back up a belief point with no actions")

    return max_alpha, max_value
