"""
Pytest configuration and shared fixtures for mckernels tests.
"""

import jax

# 64-bit floats so energy and equivalence tolerances are meaningful
jax.config.update("jax_enable_x64", True)

import pytest

from mckernels import array, grad, live_arrays
from mckernels.kernels import GaussianEuclidean, HMCState, RWMState


def standard_normal_logdensity(q):
    """log N(q | 0, I) up to a constant."""
    return (q.ref * q).sum() * -0.5


@pytest.fixture
def leak_check():
    """
    Assert that a test leaves no live Array handles behind.

    Usage:
        def test_something(leak_check):
            ...  # every handle created here must be disposed
    """
    before = live_arrays()
    yield
    assert live_arrays() == before, f"Leaked {live_arrays() - before} array handle(s)"


@pytest.fixture
def make_hmc_state():
    """Factory for an HMC state at the given position under the standard normal."""
    grad_fn = grad(standard_normal_logdensity)

    def make(values):
        position = array(values)
        return HMCState(
            position=position,
            logdensity=standard_normal_logdensity(position.ref),
            logdensity_grad=grad_fn(position.ref),
        )
    return make


@pytest.fixture
def make_rwm_state():
    """Factory for an RWM state at the given position under the standard normal."""
    def make(values):
        position = array(values)
        return RWMState(position=position, logdensity=standard_normal_logdensity(position.ref))
    return make


@pytest.fixture
def unit_metric():
    """1-D metric with identity mass matrix; disposed after the test."""
    metric = GaussianEuclidean(array([1.0]))
    yield metric
    metric.dispose()
