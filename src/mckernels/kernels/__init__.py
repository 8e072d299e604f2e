"""
Kernels Subpackage - Transition kernels and their building blocks.

- types: Chain states, per-step diagnostics, validated configurations
- metric: Gaussian-Euclidean (diagonal) metric
- integrator: Velocity Verlet (leapfrog) integrator
- energy: NaN-safe energy difference for Metropolis acceptance
- hmc: Hamiltonian Monte Carlo step
- rwm: Random Walk Metropolis step
"""

from .types import (
    HMCState,
    HMCInfo,
    HMCConfig,
    IntegratorState,
    RWMState,
    RWMInfo,
    RWMConfig,
)
from .metric import GaussianEuclidean
from .integrator import VelocityVerlet
from .energy import safe_energy_diff
from .hmc import build_hmc_kernel
from .rwm import build_rwm_kernel

__all__ = [
    'HMCState',
    'HMCInfo',
    'HMCConfig',
    'IntegratorState',
    'RWMState',
    'RWMInfo',
    'RWMConfig',
    'GaussianEuclidean',
    'VelocityVerlet',
    'safe_energy_diff',
    'build_hmc_kernel',
    'build_rwm_kernel',
]
