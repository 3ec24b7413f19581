"""
Pytest fixtures and configuration for grid posterior tests.
"""

import pytest
import numpy as np
from dataclasses import dataclass

from gridpost import BetaPrior, BinomialModel, estimate_posterior

# Set random seed for reproducibility
RANDOM_SEED = 42


@dataclass
class BinomialExample:
    """Container for a beta-binomial example and its exact posterior."""
    successes: int  # Observed successes
    trials: int  # Trials per observation
    a: float  # Prior Beta a
    b: float  # Prior Beta b

    @property
    def a_n(self) -> float:
        return self.a + self.successes

    @property
    def b_n(self) -> float:
        return self.b + self.trials - self.successes

    @property
    def exact_mean(self) -> float:
        return self.a_n / (self.a_n + self.b_n)


@dataclass
class TestConfig:
    """Tolerances for grid and Monte Carlo tests."""
    n_draws: int = 10000  # Default posterior draws
    seed: int = RANDOM_SEED
    sum_atol: float = 1e-9  # Normalization tolerance
    grid_step: float = 0.01  # Default grid step
    moment_atol: float = 0.005  # Grid vs exact moments at the default step
    mc_atol: float = 0.01  # Draw-based vs table summaries


# Standard test configurations
@pytest.fixture
def config():
    """Standard test configuration."""
    return TestConfig()


@pytest.fixture
def seed():
    """Random seed for reproducibility."""
    return RANDOM_SEED


@pytest.fixture
def rng(seed):
    """Numpy random generator."""
    return np.random.default_rng(seed)


# Standard examples
@pytest.fixture
def coin_example():
    """5 successes in 10 trials with a Beta(2, 2) prior."""
    return BinomialExample(successes=5, trials=10, a=2.0, b=2.0)


@pytest.fixture
def skewed_example():
    """2 successes in 20 trials with a Beta(1, 1) prior."""
    return BinomialExample(successes=2, trials=20, a=1.0, b=1.0)


@pytest.fixture
def coin_posterior(coin_example, config):
    """Grid posterior of the coin example on [0, 1] with the default step."""
    return fit_binomial(coin_example, step=config.grid_step)


@pytest.fixture(params=[0.1, 0.05, 0.01])
def step_values(request):
    """Parametrized grid steps."""
    return request.param


@pytest.fixture(params=[0.5, 0.2, 0.05, 0.01])
def alpha_values(request):
    """Parametrized interval tail probabilities."""
    return request.param


# Helper functions for tests
def fit_binomial(example: BinomialExample, step: float = 0.01, **kwargs):
    """Grid posterior of a beta-binomial example on [0, 1]."""
    return estimate_posterior(
        [example.successes],
        [(0.0, 1.0, step)],
        BinomialModel(example.trials),
        [BetaPrior(example.a, example.b)],
        **kwargs,
    )


def normalized(values: np.ndarray) -> np.ndarray:
    """Rescale a non-negative array to sum to one."""
    values = np.asarray(values, dtype=np.float64)
    return values / values.sum()


def discrete_weights(n: int, rng: np.random.Generator) -> np.ndarray:
    """Random positive weights summing to one."""
    return normalized(rng.uniform(0.1, 1.0, n))


# Pytest configuration
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "tier1: Tier 1 grid, prior and likelihood tests")
    config.addinivalue_line("markers", "tier2: Tier 2 posterior normalization tests")
    config.addinivalue_line("markers", "tier3: Tier 3 marginal, sampling and summary tests")
    config.addinivalue_line("markers", "tier4: Tier 4 experiment layer tests")
    config.addinivalue_line("markers", "tier5: Tier 5 integration tests")
