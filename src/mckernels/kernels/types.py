"""
Kernel Data Structures.

Chain states, per-step diagnostics and validated configurations.

States and Info records are NamedTuples of Array handles, so they are JAX
pytrees and can pass through jit unchanged. A State is consumed in full by
the next step; every handle in an Info record belongs to the caller, who
disposes it after reading (dispose_tree(info) does all of them).
"""

from dataclasses import dataclass
from typing import NamedTuple

from ..runtime import Array


class HMCState(NamedTuple):
    """Position of an HMC chain with its cached log density and gradient."""
    position: Array
    logdensity: Array
    logdensity_grad: Array


class HMCInfo(NamedTuple):
    """Diagnostics of one HMC transition."""
    momentum: Array            # momentum drawn at the start of the trajectory
    acceptance_prob: Array     # min(1, exp(-delta_energy))
    is_accepted: Array
    is_divergent: Array        # delta_energy > divergence_threshold
    energy: Array              # Hamiltonian at the end of the trajectory
    num_integration_steps: int


class IntegratorState(NamedTuple):
    """Leapfrog working tuple. Never escapes a kernel call."""
    position: Array
    momentum: Array
    logdensity: Array
    logdensity_grad: Array


class RWMState(NamedTuple):
    """Position of a random walk chain with its cached log density."""
    position: Array
    logdensity: Array


class RWMInfo(NamedTuple):
    """Diagnostics of one RWM transition."""
    acceptance_prob: Array
    is_accepted: Array
    proposed_position: Array   # kept even when the proposal is rejected


@dataclass(frozen=True)
class HMCConfig:
    step_size: float
    num_integration_steps: int
    inverse_mass_matrix: Array
    divergence_threshold: float


@dataclass(frozen=True)
class RWMConfig:
    step_size: float
