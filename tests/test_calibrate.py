"""
Tests for the sweep count calibration.
"""

import math

import numpy as np
import pytest

from lexpomdp.pomdp import (
    FactoredRewards,
    Horizon,
    SARewards,
    SASRewards,
    compute_num_update_iterations,
    RewardError,
    HorizonError,
    ConfigurationError,
)
from lexpomdp.pomdp.calibrate import sweeps_for_objective


def unit_range_rewards() -> FactoredRewards:
    return FactoredRewards([SARewards({"A": np.array([1.0, 1.0]), "B": np.array([0.0, 0.0])})])


def test_known_sweep_count():
    """gamma=0.9, range 1, eps 0.01 needs ceil(ln 0.01 / ln 0.9) = 44 sweeps."""
    n = compute_num_update_iterations(unit_range_rewards(), Horizon(discount=0.9), 0.01)
    assert n == 44
    assert 0.9 ** n * 1.0 < 0.01


def test_max_over_objectives():
    rewards = FactoredRewards([
        SARewards({"A": np.array([1.0]), "B": np.array([0.0])}),
        SARewards({"A": np.array([10.0]), "B": np.array([0.0])}),
    ])
    n = compute_num_update_iterations(rewards, Horizon(discount=0.9), 0.01)
    assert n == math.ceil((math.log(0.01) - math.log(10.0)) / math.log(0.9))
    assert n == 66


def test_degenerate_reward_range():
    """A zero reward range is replaced by 1e-6 instead of failing."""
    rewards = FactoredRewards([SARewards({"A": np.zeros(3)})])
    assert compute_num_update_iterations(rewards, Horizon(discount=0.9), 0.01) == 0
    assert sweeps_for_objective(0.0, 0.0, 0.9, 1e-9) == math.ceil(
        (math.log(1e-9) - math.log(1e-6)) / math.log(0.9)
    )


@pytest.mark.parametrize("discount", [0.5, 0.9, 0.99])
def test_sweep_count_monotone_in_epsilon(discount):
    """Larger tolerance never needs more sweeps."""
    epsilons = [1e-6, 1e-4, 1e-3, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
    counts = [
        compute_num_update_iterations(unit_range_rewards(), Horizon(discount=discount), eps)
        for eps in epsilons
    ]
    assert counts == sorted(counts, reverse=True)
    assert all(c >= 0 for c in counts)


def test_rejects_non_sa_rewards():
    rewards = FactoredRewards([SASRewards({"A": np.zeros((2, 2))})])
    with pytest.raises(RewardError):
        compute_num_update_iterations(rewards, Horizon(discount=0.9), 0.01)

    with pytest.raises(RewardError):
        compute_num_update_iterations(SARewards({"A": np.zeros(2)}), Horizon(discount=0.9), 0.01)


def test_rejects_missing_horizon_and_bad_settings():
    with pytest.raises(HorizonError):
        compute_num_update_iterations(unit_range_rewards(), None, 0.01)
    with pytest.raises(ConfigurationError):
        compute_num_update_iterations(unit_range_rewards(), Horizon(discount=0.9), 0.0)
    with pytest.raises(ConfigurationError):
        compute_num_update_iterations(unit_range_rewards(), Horizon(discount=1.0), 0.01)


def test_undeclared_action_rewards_are_ignored():
    rewards = FactoredRewards([
        SARewards({"A": np.array([1.0, 1.0]), "B": np.array([0.0, 0.0]), "ghost": np.array([500.0, -500.0])})
    ])
    assert compute_num_update_iterations(rewards, Horizon(discount=0.9), 0.01, actions=["A", "B"]) == 44
    assert compute_num_update_iterations(rewards, Horizon(discount=0.9), 0.01) > 44


def test_declared_action_without_rewards_is_an_error():
    with pytest.raises(RewardError):
        compute_num_update_iterations(unit_range_rewards(), Horizon(discount=0.9), 0.01, actions=["A", "C"])
